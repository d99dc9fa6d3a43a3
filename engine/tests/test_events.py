"""
Tests for session event models.

Verifies:
- Serialization to and from dicts/JSON
- Factory payloads
"""

from datetime import datetime, timezone

from models.events import (
    EventType, GameEvent, card_event, hand_ended, hand_started, match_ended,
)


class TestGameEvent:

    def test_json_roundtrip(self):
        event = card_event(
            EventType.CARD_PLACED,
            "game-1",
            7,
            2,
            {"id": "card-hearts-5", "rank": "5", "suit": "hearts"},
            row=1,
            col=2,
        )
        restored = GameEvent.from_json(event.to_json())
        assert restored == event

    def test_seat_keys_survive_json(self):
        events = [
            hand_started("g", 1, hand_num=1, dealt_cards={0: ["a"], 3: ["b"]}, draw_pile_size=72),
            hand_ended("g", 2, 1, {0: 4, 1: -2, 2: 0, 3: 11}, 1, 0),
            match_ended("g", 3, {0: 4, 1: -2, 2: 0, 3: 11}, 1),
        ]
        for event in events:
            assert GameEvent.from_json(event.to_json()) == event

    def test_to_dict(self):
        when = datetime(2024, 5, 1, tzinfo=timezone.utc)
        event = GameEvent(EventType.SETUP_COMPLETED, "g", 3, timestamp=when)
        assert event.to_dict() == {
            "event_type": "setup_completed",
            "game_id": "g",
            "sequence_num": 3,
            "timestamp": "2024-05-01T00:00:00+00:00",
            "player_id": None,
            "data": {},
        }

    def test_from_dict_accepts_datetime(self):
        when = datetime(2024, 5, 1, tzinfo=timezone.utc)
        event = GameEvent.from_dict({
            "event_type": "card_drawn",
            "game_id": "g",
            "sequence_num": 1,
            "timestamp": when,
        })
        assert event.event_type == EventType.CARD_DRAWN
        assert event.timestamp == when
        assert event.data == {}


class TestFactories:

    def test_hand_started(self):
        event = hand_started("g", 1, hand_num=2, dealt_cards={0: ["a"]}, draw_pile_size=72)
        assert event.event_type == EventType.HAND_STARTED
        assert event.player_id is None
        assert event.data == {"hand_num": 2, "dealt_cards": {0: ["a"]}, "draw_pile_size": 72}

    def test_card_event(self):
        event = card_event(EventType.CARD_DISCARDED, "g", 4, 3)
        assert event.player_id == 3
        assert event.data == {"card": None}

    def test_hand_ended(self):
        event = hand_ended("g", 9, 1, {0: 4, 1: 2}, 1, 0)
        assert event.player_id == 1
        assert event.data["scores"] == {0: 4, 1: 2}
        assert event.data["final_round_starter_id"] == 0

    def test_match_ended(self):
        event = match_ended("g", 10, {0: 12, 1: 30}, 0)
        assert event.event_type == EventType.MATCH_ENDED
        assert event.data["totals"] == {0: 12, 1: 30}
        assert event.data["winner_id"] == 0
