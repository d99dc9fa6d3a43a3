"""
Session owner for a Nine-Card Golf match.

GameSession plays the role of the caller that owns the state: it holds
the current GameState, applies one intent at a time, keeps the history
of immutable states for undo/redo, and records an event for everything
that happened.

Usage:
    session = GameSession(["Gage", "Ana", "Bo", "Cy"], total_hands=9, seed=42)
    session.dispatch({"type": "cell_click", "player_id": 0, "row": 0, "col": 0})
    print(session.state.phase, session.events[-1].event_type)
"""

import random
import uuid
from typing import Optional, Sequence, Union

from pydantic import BaseModel

from config import get_config
from dealing import create_initial_state
from game import CardSource, GamePhase, GameState, Player, grid_cells
from intents import dispatch, legal_intents, status_text
from logging_config import game_id_var, get_logger
from models.events import (
    EventType,
    GameEvent,
    card_event,
    hand_ended,
    hand_started,
    match_ended,
)
from scoring import find_lowest_scorer, match_totals


def _flipped_cell(before: Player, after: Player) -> Optional[tuple[int, int]]:
    """The cell that went from face-down to face-up, if any."""
    for (row, col, old), (_, _, new) in zip(grid_cells(before.grid), grid_cells(after.grid)):
        if old is not None and new is not None and not old.face_up and new.face_up:
            return row, col
    return None


def _replaced_cell(before: Player, after: Player) -> Optional[tuple[int, int]]:
    """The cell whose card changed, if any."""
    for (row, col, old), (_, _, new) in zip(grid_cells(before.grid), grid_cells(after.grid)):
        if old is not None and new is not None and old.card != new.card:
            return row, col
    return None


class GameSession:
    """
    One match, owned by a single caller.

    Dispatch is serialized: each intent is fully applied before the next
    one is accepted. Every shuffle in the match draws from one seeded
    random.Random, so a seed plus the intent sequence reproduces a match.

    Attributes:
        game_id: Unique identifier for logging and events.
        seed: Seed of the session's random source.
        total_hands: Number of hands in the match.
        rng: The session's random source.
    """

    def __init__(
        self,
        player_names: Optional[Sequence[str]] = None,
        total_hands: Optional[int] = None,
        seed: Optional[int] = None,
        game_id: Optional[str] = None,
    ) -> None:
        """
        Deal the first hand of a new match.

        Args:
            player_names: Up to 4 display names (configured names when omitted).
            total_hands: Match length (configured TOTAL_HANDS when omitted).
            seed: Shuffle seed (configured SHUFFLE_SEED, then random, when omitted).
            game_id: Session identifier (a new UUID when omitted).

        Raises:
            ValueError: If total_hands is less than 1.
        """
        if total_hands is None:
            total_hands = get_config().TOTAL_HANDS
        if total_hands < 1:
            raise ValueError(f"total_hands must be at least 1, got {total_hands}")

        if seed is None:
            seed = get_config().SHUFFLE_SEED
        if seed is None:
            seed = random.randint(0, 2**31 - 1)

        if player_names is None:
            player_names = get_config().match_defaults.player_names

        self.game_id: str = game_id or str(uuid.uuid4())
        self.seed: int = seed
        self.total_hands: int = total_hands
        self.rng = random.Random(seed)
        self.logger = get_logger(__name__).with_context(game_id=self.game_id)

        initial = create_initial_state(player_names, self.rng)
        self._history: list[GameState] = [initial]
        self._cursor = 0
        # Events produced by each history step; step 0 is the initial deal
        self._step_events: list[list[GameEvent]] = [[self._hand_started_event(initial, 1)]]
        # Running event count through each step, for sequence numbers
        self._events_through: list[int] = [1]

        self.logger.info(
            f"Match started: {self.total_hands} hand(s), seed={self.seed}",
            extra={"hand": initial.current_hand},
        )

    # -------------------------------------------------------------------------
    # State access
    # -------------------------------------------------------------------------

    @property
    def state(self) -> GameState:
        """The current state."""
        return self._history[self._cursor]

    @property
    def events(self) -> list[GameEvent]:
        """Events for every step up to the current one, in order."""
        return [event for step in self._step_events[: self._cursor + 1] for event in step]

    @property
    def is_match_over(self) -> bool:
        return self.state.phase == GamePhase.GAME_OVER and self.state.current_hand >= self.total_hands

    def totals(self) -> dict[int, int]:
        """Cumulative match score per player."""
        return match_totals(self.state.score_history)

    def snapshot(self) -> dict:
        """State snapshot for rendering, with status line and legal intents."""
        data = self.state.to_dict(total_hands=self.total_hands)
        data["status"] = status_text(self.state, self.total_hands)
        data["legal_intents"] = [intent.model_dump() for intent in self.legal_intents()]
        data["match_totals"] = self.totals()
        return data

    def legal_intents(self) -> list[BaseModel]:
        return legal_intents(self.state, self.total_hands)

    # -------------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------------

    def dispatch(self, message: Union[dict, BaseModel]) -> GameState:
        """
        Apply one intent to the current state.

        An illegal or malformed intent leaves the session untouched.
        A legal one discards any redo history.

        Args:
            message: Raw intent dict or parsed intent model.

        Returns:
            The (possibly unchanged) current state.
        """
        before = self.state
        token = game_id_var.set(self.game_id)
        try:
            after = dispatch(before, message, total_hands=self.total_hands, rng=self.rng)
        finally:
            game_id_var.reset(token)

        if after is before:
            self.logger.debug(
                f"Ignored intent {message!r}",
                extra={"hand": before.current_hand, "phase": before.phase.value},
            )
            return before

        del self._history[self._cursor + 1:]
        del self._step_events[self._cursor + 1:]
        del self._events_through[self._cursor + 1:]
        self._history.append(after)
        step = self._transition_events(before, after)
        self._step_events.append(step)
        self._events_through.append(self._events_through[-1] + len(step))
        self._cursor += 1

        return after

    def can_undo(self) -> bool:
        return self._cursor > 0

    def can_redo(self) -> bool:
        return self._cursor < len(self._history) - 1

    def undo(self) -> GameState:
        """
        Step back to the previous state.

        The random source is not rewound, so replaying a shuffle after an
        undo can deal differently.
        """
        if self.can_undo():
            self._cursor -= 1
            self.logger.debug("Undo", extra={"hand": self.state.current_hand})
        return self.state

    def redo(self) -> GameState:
        """Step forward to a previously undone state."""
        if self.can_redo():
            self._cursor += 1
            self.logger.debug("Redo", extra={"hand": self.state.current_hand})
        return self.state

    # -------------------------------------------------------------------------
    # Events (Internal)
    # -------------------------------------------------------------------------

    def _next_sequence_num(self, pending: list[GameEvent]) -> int:
        return self._events_through[self._cursor] + len(pending) + 1

    def _hand_started_event(self, state: GameState, sequence_num: int) -> GameEvent:
        dealt = {player.id: [card.id for card in player.cards()] for player in state.players}
        return hand_started(
            self.game_id,
            sequence_num,
            hand_num=state.current_hand,
            dealt_cards=dealt,
            draw_pile_size=len(state.draw_pile),
        )

    def _transition_events(self, before: GameState, after: GameState) -> list[GameEvent]:
        """
        Describe the change from one state to the next as events.

        Args:
            before: State the intent was applied to.
            after: Resulting state.

        Returns:
            Events in the order they happened.
        """
        pending: list[GameEvent] = []
        mover_id = before.current_player_id
        mover_before = before.get_player(mover_id)
        mover_after = after.get_player(mover_id)
        log = self.logger.with_context(hand=before.current_hand, player_id=mover_id)

        def add(event_type: EventType, card=None, **data) -> None:
            pending.append(card_event(
                event_type,
                self.game_id,
                self._next_sequence_num(pending),
                mover_id,
                card.to_dict() if card is not None else None,
                **data,
            ))

        if before.phase == GamePhase.GAME_OVER and after.phase == GamePhase.SETUP:
            pending.append(self._hand_started_event(after, self._next_sequence_num(pending)))
            log.info(f"Hand {after.current_hand} dealt")
            return pending

        if before.phase == GamePhase.SETUP:
            cell = _flipped_cell(mover_before, mover_after)
            if cell is not None:
                row, col = cell
                add(EventType.CARD_FLIPPED, mover_after.grid[row][col].card, row=row, col=col)
            if after.phase == GamePhase.PLAYING:
                top = after.discard_top()
                pending.append(GameEvent(
                    event_type=EventType.SETUP_COMPLETED,
                    game_id=self.game_id,
                    sequence_num=self._next_sequence_num(pending),
                    data={"discard_top": top.to_dict() if top else None},
                ))
                log.debug("Setup complete")
            return pending

        if before.active_card is None and after.active_card is not None:
            if after.active_card_source == CardSource.DRAW:
                if not before.draw_pile:
                    add(EventType.DRAW_PILE_RESHUFFLED, reshuffled=len(before.discard_pile))
                add(EventType.CARD_DRAWN, after.active_card, source=CardSource.DRAW.value)
            else:
                add(EventType.CARD_TAKEN, after.active_card, source=CardSource.DISCARD.value)
            return pending

        if before.active_card is not None and after.active_card is None:
            cell = _replaced_cell(mover_before, mover_after)
            if cell is not None:
                row, col = cell
                add(
                    EventType.CARD_PLACED,
                    before.active_card,
                    row=row,
                    col=col,
                    replaced=mover_before.grid[row][col].card.to_dict(),
                )
            else:
                add(EventType.CARD_DISCARDED, before.active_card)

        if before.final_round_starter_id is None and after.final_round_starter_id is not None:
            add(EventType.FINAL_ROUND_STARTED, turns_remaining=after.final_turns_remaining)
            log.info("Final round started")

        if before.phase != GamePhase.GAME_OVER and after.phase == GamePhase.GAME_OVER:
            scores = {pid: history[-1] for pid, history in after.score_history.items()}
            pending.append(hand_ended(
                self.game_id,
                self._next_sequence_num(pending),
                hand_num=after.current_hand,
                scores=scores,
                winner_id=after.winner_id,
                final_round_starter_id=after.final_round_starter_id,
            ))
            log.info(f"Hand {after.current_hand} over, winner seat {after.winner_id}")

            if after.current_hand >= self.total_hands:
                totals = match_totals(after.score_history)
                pending.append(match_ended(
                    self.game_id,
                    self._next_sequence_num(pending),
                    totals=totals,
                    winner_id=find_lowest_scorer(totals),
                ))
                log.info("Match complete")

        return pending
