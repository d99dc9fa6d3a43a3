"""Presentation intents for the Nine-Card Golf engine.

The presentation layer sends plain dict messages with a "type" key, one
per user gesture (clicking a grid cell, the draw pile, the discard pile,
or the next-hand button). Each message type maps to a handler in the
HANDLERS dict, which routes it to the matching reducer call.

Malformed or unknown messages are dropped the same way illegal moves
are: the state comes back unchanged.
"""

import logging
import random
from typing import Annotated, Callable, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from actions import choose_card, discard_drawn_card, flip_card, place_card, start_next_hand
from config import get_config
from constants import GRID_SIZE
from game import CardSource, GamePhase, GameState

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------

class CellClick(BaseModel):
    """A click on one cell of a player's grid."""

    model_config = ConfigDict(frozen=True)

    type: Literal["cell_click"] = "cell_click"
    player_id: int
    row: int
    col: int


class DrawPileClick(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["draw_pile_click"] = "draw_pile_click"


class DiscardPileClick(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["discard_pile_click"] = "discard_pile_click"


class NextHandClick(BaseModel):
    """Request to deal the next hand; total_hands defaults to the configured match length."""

    model_config = ConfigDict(frozen=True)

    type: Literal["next_hand_click"] = "next_hand_click"
    total_hands: Optional[int] = None


Intent = Annotated[
    Union[CellClick, DrawPileClick, DiscardPileClick, NextHandClick],
    Field(discriminator="type"),
]

_intent_adapter: TypeAdapter = TypeAdapter(Intent)


def parse_intent(data: object) -> Optional[BaseModel]:
    """
    Validate a raw intent message.

    Args:
        data: Message from the presentation layer, e.g.
            {"type": "cell_click", "player_id": 0, "row": 1, "col": 2}.

    Returns:
        The parsed intent, or None if the message is malformed.
    """
    try:
        return _intent_adapter.validate_python(data)
    except ValidationError as e:
        logger.debug(f"Dropping malformed intent {data!r}: {e.error_count()} error(s)")
        return None


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------

def handle_cell_click(state: GameState, intent: CellClick, *, rng=None, **kw) -> GameState:
    if state.phase == GamePhase.SETUP:
        return flip_card(state, intent.player_id, intent.row, intent.col)
    return place_card(state, intent.player_id, intent.row, intent.col)


def handle_draw_pile_click(state: GameState, intent: DrawPileClick, *, rng=None, **kw) -> GameState:
    return choose_card(state, state.current_player_id, CardSource.DRAW, rng)


def handle_discard_pile_click(state: GameState, intent: DiscardPileClick, *, rng=None, **kw) -> GameState:
    if state.phase != GamePhase.PLAYING:
        return state

    player_id = state.current_player_id

    if state.active_card is not None and state.active_card_source == CardSource.DRAW:
        return discard_drawn_card(state, player_id)

    if state.active_card is None:
        return choose_card(state, player_id, CardSource.DISCARD, rng)

    # Holding a card taken from the discard pile: it must be placed
    return state


def handle_next_hand_click(
    state: GameState,
    intent: NextHandClick,
    *,
    total_hands: Optional[int] = None,
    rng=None,
    **kw,
) -> GameState:
    # A match length from the caller is a cap the intent can only lower
    if intent.total_hands is None:
        hands = total_hands if total_hands is not None else get_config().TOTAL_HANDS
    elif total_hands is None:
        hands = intent.total_hands
    else:
        hands = min(intent.total_hands, total_hands)
    return start_next_hand(state, hands, rng)


HANDLERS: dict[str, Callable[..., GameState]] = {
    "cell_click": handle_cell_click,
    "draw_pile_click": handle_draw_pile_click,
    "discard_pile_click": handle_discard_pile_click,
    "next_hand_click": handle_next_hand_click,
}


def dispatch(
    state: GameState,
    message: Union[dict, BaseModel],
    *,
    total_hands: Optional[int] = None,
    rng: Optional[random.Random] = None,
) -> GameState:
    """
    Apply one presentation intent to a state.

    Args:
        state: Current state.
        message: Raw dict message or an already-parsed intent model.
        total_hands: Match length for next-hand requests; a next-hand
            intent cannot raise it. Configured TOTAL_HANDS when neither
            the caller nor the intent gives one.
        rng: Random source for any shuffle the intent triggers.

    Returns:
        The next state, or the input state if the intent is malformed
        or illegal right now.
    """
    intent = message if isinstance(message, BaseModel) else parse_intent(message)
    if intent is None:
        return state

    handler = HANDLERS.get(getattr(intent, "type", None))
    if handler is None:
        logger.debug(f"No handler for intent {intent!r}")
        return state

    return handler(state, intent, total_hands=total_hands, rng=rng)


# ---------------------------------------------------------------------------
# Queries for the presentation layer
# ---------------------------------------------------------------------------

def legal_intents(state: GameState, total_hands: Optional[int] = None) -> list[BaseModel]:
    """
    List every intent that would change the state right now.

    Used to highlight clickable cells and piles.

    Args:
        state: Current state.
        total_hands: Match length, for the next-hand button.

    Returns:
        Intent models in a stable order.
    """
    if total_hands is None:
        total_hands = get_config().TOTAL_HANDS

    player = state.current_player()
    intents: list[BaseModel] = []

    if state.phase == GamePhase.SETUP:
        if player is not None and player.initial_flips_remaining > 0:
            for row in range(GRID_SIZE):
                for col in range(GRID_SIZE):
                    slot = player.slot_at(row, col)
                    if slot is not None and not slot.face_up:
                        intents.append(CellClick(player_id=player.id, row=row, col=col))

    elif state.phase == GamePhase.PLAYING:
        if state.active_card is None:
            if state.draw_pile or state.discard_pile:
                intents.append(DrawPileClick())
            if state.discard_pile:
                intents.append(DiscardPileClick())
        elif player is not None:
            for row in range(GRID_SIZE):
                for col in range(GRID_SIZE):
                    if player.slot_at(row, col) is not None:
                        intents.append(CellClick(player_id=player.id, row=row, col=col))
            if state.active_card_source == CardSource.DRAW:
                intents.append(DiscardPileClick())

    elif state.phase == GamePhase.GAME_OVER:
        if state.current_hand < total_hands:
            intents.append(NextHandClick(total_hands=total_hands))

    return intents


def status_text(state: GameState, total_hands: Optional[int] = None) -> str:
    """
    One-line description of what happens next, for the status bar.

    Args:
        state: Current state.
        total_hands: Match length.

    Returns:
        Human-readable status message.
    """
    if total_hands is None:
        total_hands = get_config().TOTAL_HANDS

    current = state.current_player()
    name = current.name if current else "Unknown"

    if state.phase == GamePhase.SETUP:
        remaining = current.initial_flips_remaining if current else 0
        return f"{name}: flip {remaining} more card{'' if remaining == 1 else 's'}."

    if state.phase == GamePhase.GAME_OVER:
        winner = state.get_player(state.winner_id) if state.winner_id is not None else None
        winner_name = winner.name if winner else "Unknown"
        if state.current_hand >= total_hands:
            return (
                f"Hand {state.current_hand} over: all cards revealed and scored. "
                f"Match complete. Last hand winner: {winner_name}."
            )
        return (
            f"Hand {state.current_hand} over: all cards revealed and scored. "
            f"Lowest score: {winner_name}."
        )

    if state.active_card is None:
        if state.final_round_active:
            starter = state.get_player(state.final_round_starter_id)
            starter_name = starter.name if starter else "Unknown"
            return (
                f"{name}: final turn ({state.final_turns_remaining} remaining) "
                f"after {starter_name} revealed all 9 cards."
            )
        return f"{name}: choose top Draw or top Discard."

    if state.active_card_source == CardSource.DRAW:
        return f"{name}: place on any of your 9 cards, or click Discard to throw it away."

    return f"{name}: place the selected Discard card on any of your 9 cards."
