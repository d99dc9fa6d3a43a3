"""Models package for Nine-Card Golf."""

from .events import EventType, GameEvent

__all__ = [
    "EventType",
    "GameEvent",
]
