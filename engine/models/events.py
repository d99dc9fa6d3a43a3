"""
Event definitions for Nine-Card Golf sessions.

Every transition a session applies is recorded as an immutable event,
enabling:
- Audit trails for all player actions
- Hand-by-hand match summaries
- Replaying a seeded match and comparing event streams

Events describe what changed; the GameState history remains the source
of truth for the state itself.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


class EventType(str, Enum):
    """All possible event types in a Nine-Card Golf match."""

    # Lifecycle events
    HAND_STARTED = "hand_started"
    SETUP_COMPLETED = "setup_completed"
    FINAL_ROUND_STARTED = "final_round_started"
    HAND_ENDED = "hand_ended"
    MATCH_ENDED = "match_ended"

    # Gameplay events
    CARD_FLIPPED = "card_flipped"
    CARD_DRAWN = "card_drawn"
    CARD_TAKEN = "card_taken"
    CARD_PLACED = "card_placed"
    CARD_DISCARDED = "card_discarded"
    DRAW_PILE_RESHUFFLED = "draw_pile_reshuffled"


# Payload fields keyed by seat id; JSON turns those keys into strings
SEAT_KEYED_FIELDS = ("dealt_cards", "scores", "totals")


def _restore_seat_keys(data: dict) -> dict:
    """Turn the seat-id keys of a JSON-decoded payload back into ints."""
    restored = dict(data)
    for name in SEAT_KEYED_FIELDS:
        value = restored.get(name)
        if isinstance(value, dict):
            restored[name] = {int(seat): item for seat, item in value.items()}
    return restored


@dataclass
class GameEvent:
    """
    A record of something that happened in a match.

    Attributes:
        event_type: The type of event (from EventType enum).
        game_id: Identifier of the session this event belongs to.
        sequence_num: Monotonically increasing sequence number within the session.
        timestamp: When the event occurred (UTC).
        player_id: Seat that triggered the event (if applicable).
        data: Event-specific payload data.
    """

    event_type: EventType
    game_id: str
    sequence_num: int
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    player_id: Optional[int] = None
    data: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Serialize event to dictionary for JSON storage."""
        return {
            "event_type": self.event_type.value,
            "game_id": self.game_id,
            "sequence_num": self.sequence_num,
            "timestamp": self.timestamp.isoformat(),
            "player_id": self.player_id,
            "data": self.data,
        }

    def to_json(self) -> str:
        """Serialize event to JSON string."""
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, d: dict) -> "GameEvent":
        """Deserialize event from dictionary."""
        timestamp = d["timestamp"]
        if isinstance(timestamp, str):
            timestamp = datetime.fromisoformat(timestamp)

        return cls(
            event_type=EventType(d["event_type"]),
            game_id=d["game_id"],
            sequence_num=d["sequence_num"],
            timestamp=timestamp,
            player_id=d.get("player_id"),
            data=_restore_seat_keys(d.get("data", {})),
        )

    @classmethod
    def from_json(cls, json_str: str) -> "GameEvent":
        """Deserialize event from JSON string."""
        return cls.from_dict(json.loads(json_str))


# =============================================================================
# Event Factory Functions
# =============================================================================


def hand_started(
    game_id: str,
    sequence_num: int,
    hand_num: int,
    dealt_cards: dict[int, list[str]],
    draw_pile_size: int,
) -> GameEvent:
    """
    Create a HandStarted event.

    Emitted when a hand is dealt, including the first hand of a match.

    Args:
        game_id: Session identifier.
        sequence_num: Event sequence number.
        hand_num: Hand number (1-indexed).
        dealt_cards: Player id -> the 9 dealt card ids, row-major.
        draw_pile_size: Cards left on the draw pile after dealing.
    """
    return GameEvent(
        event_type=EventType.HAND_STARTED,
        game_id=game_id,
        sequence_num=sequence_num,
        data={
            "hand_num": hand_num,
            "dealt_cards": dealt_cards,
            "draw_pile_size": draw_pile_size,
        },
    )


def card_event(
    event_type: EventType,
    game_id: str,
    sequence_num: int,
    player_id: int,
    card: Optional[dict] = None,
    **data,
) -> GameEvent:
    """
    Create a gameplay event about a single card.

    Args:
        event_type: One of the gameplay EventTypes.
        game_id: Session identifier.
        sequence_num: Event sequence number.
        player_id: Seat that acted.
        card: The card involved, as Card.to_dict().
        **data: Extra fields (row, col, replaced card, ...).
    """
    return GameEvent(
        event_type=event_type,
        game_id=game_id,
        sequence_num=sequence_num,
        player_id=player_id,
        data={"card": card, **data},
    )


def hand_ended(
    game_id: str,
    sequence_num: int,
    hand_num: int,
    scores: dict[int, int],
    winner_id: Optional[int],
    final_round_starter_id: Optional[int],
) -> GameEvent:
    """
    Create a HandEnded event.

    Emitted when the last final-round turn is played and the hand is scored.

    Args:
        game_id: Session identifier.
        sequence_num: Event sequence number.
        hand_num: Hand number (1-indexed).
        scores: Player id -> score for this hand.
        winner_id: Lowest scorer (first seat on ties).
        final_round_starter_id: Player who revealed their grid first.
    """
    return GameEvent(
        event_type=EventType.HAND_ENDED,
        game_id=game_id,
        sequence_num=sequence_num,
        player_id=winner_id,
        data={
            "hand_num": hand_num,
            "scores": scores,
            "winner_id": winner_id,
            "final_round_starter_id": final_round_starter_id,
        },
    )


def match_ended(
    game_id: str,
    sequence_num: int,
    totals: dict[int, int],
    winner_id: Optional[int],
) -> GameEvent:
    """
    Create a MatchEnded event.

    Args:
        game_id: Session identifier.
        sequence_num: Event sequence number.
        totals: Player id -> cumulative score over all hands.
        winner_id: Lowest cumulative total (first seat on ties).
    """
    return GameEvent(
        event_type=EventType.MATCH_ENDED,
        game_id=game_id,
        sequence_num=sequence_num,
        player_id=winner_id,
        data={"totals": totals, "winner_id": winner_id},
    )
