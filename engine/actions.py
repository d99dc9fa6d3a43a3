"""
Turn and phase reducer for Nine-Card Golf.

Every function here takes a GameState plus action parameters and returns
the next GameState. Inputs are never mutated. An illegal action (wrong
phase, wrong player, bad cell, nothing to place, empty pile) returns the
input state object unchanged rather than raising.

Phase flow:
    SETUP      players flip 3 of their own cards each, seat by seat
    PLAYING    choose_card, then place_card or discard_drawn_card
    GAME_OVER  hand scored; start_next_hand deals the next one
"""

import random
from dataclasses import replace
from typing import Optional

from constants import INITIAL_FLIPS
from dealing import deal_players
from game import (
    CardSource,
    GamePhase,
    GameState,
    GridSlot,
    Player,
    replace_cell,
    shuffle_deck,
)
from scoring import find_lowest_scorer, score_players


# -------------------------------------------------------------------------
# Helpers
# -------------------------------------------------------------------------

def _replace_player(state: GameState, index: int, player: Player) -> tuple[Player, ...]:
    return tuple(player if i == index else p for i, p in enumerate(state.players))


def _next_seat(state: GameState) -> tuple[int, int]:
    """Next player id and turn number after the current player moves."""
    next_id = (state.current_player_id + 1) % len(state.players)
    next_turn = state.turn + 1 if next_id == 0 else state.turn
    return next_id, next_turn


def _next_seat_owing_flips(players: tuple[Player, ...], current_id: int) -> int:
    """
    Find the next seat after current_id that still owes setup flips.

    The scan covers each seat at most once.
    """
    total = len(players)
    for offset in range(1, total + 1):
        candidate_id = (current_id + offset) % total
        for player in players:
            if player.id == candidate_id and player.initial_flips_remaining > 0:
                return candidate_id
    return current_id


def _finalize_hand(state: GameState) -> GameState:
    """
    Reveal every grid, score the hand and record it.

    Winner is the lowest scorer (first seat wins ties). Each player's
    score is appended to their score history.
    """
    players = tuple(player.revealed() for player in state.players)
    scores = score_players(players)

    history = dict(state.score_history)
    for player in players:
        history[player.id] = tuple(history.get(player.id, ())) + (scores[player.id],)

    return replace(
        state,
        players=players,
        phase=GamePhase.GAME_OVER,
        winner_id=find_lowest_scorer(scores),
        score_history=history,
    )


def _resolve_end_of_turn(state: GameState, mover_id: int) -> GameState:
    """
    Advance play after a placement or discard.

    Handles the last-licks countdown: once a player has a fully revealed
    grid, each other player gets exactly one more turn, then the hand is
    finalized.
    """
    next_id, next_turn = _next_seat(state)

    if state.final_round_active:
        remaining = state.final_turns_remaining - 1
        if remaining <= 0:
            # The seat/turn stamp lands on the finalized state as well.
            return replace(
                _finalize_hand(state),
                final_turns_remaining=0,
                current_player_id=next_id,
                turn=next_turn,
            )
        return replace(
            state,
            final_turns_remaining=remaining,
            current_player_id=next_id,
            turn=next_turn,
        )

    mover = state.get_player(mover_id)
    if mover is not None and mover.all_face_up():
        turns_for_others = len(state.players) - 1
        if turns_for_others <= 0:
            return replace(
                _finalize_hand(state),
                final_round_starter_id=mover_id,
                final_turns_remaining=0,
            )
        return replace(
            state,
            final_round_starter_id=mover_id,
            final_turns_remaining=turns_for_others,
            current_player_id=next_id,
            turn=next_turn,
        )

    return replace(state, current_player_id=next_id, turn=next_turn)


# -------------------------------------------------------------------------
# Setup
# -------------------------------------------------------------------------

def flip_card(state: GameState, player_id: int, row: int, col: int) -> GameState:
    """
    Reveal one of the current player's face-down cards during setup.

    A player makes all 3 of their flips in a row before play passes to
    the next seat still owing flips. When the last flip of the last seat
    is made, the top of the draw pile seeds the discard pile and play
    starts at seat 0.

    Args:
        state: Current state.
        player_id: Seat making the flip.
        row: Grid row (0-2).
        col: Grid column (0-2).

    Returns:
        The next state, or the input state if the flip is not allowed.
    """
    if state.phase != GamePhase.SETUP:
        return state

    if state.current_player_id != player_id:
        return state

    index = state.player_index(player_id)
    if index == -1:
        return state

    player = state.players[index]
    if player.initial_flips_remaining <= 0:
        return state

    slot = player.slot_at(row, col)
    if slot is None or slot.face_up:
        return state

    updated_player = replace(
        player,
        grid=replace_cell(player.grid, row, col, GridSlot(slot.card, face_up=True)),
        initial_flips_remaining=player.initial_flips_remaining - 1,
    )
    players = _replace_player(state, index, updated_player)
    new_state = replace(state, players=players)

    if updated_player.initial_flips_remaining > 0:
        return new_state

    if all(p.initial_flips_remaining == 0 for p in players):
        draw_pile = state.draw_pile
        discard_pile = state.discard_pile
        if draw_pile:
            discard_pile = (draw_pile[0],) + discard_pile
            draw_pile = draw_pile[1:]

        return replace(
            new_state,
            draw_pile=draw_pile,
            discard_pile=discard_pile,
            active_card=None,
            active_card_source=None,
            phase=GamePhase.PLAYING,
            current_player_id=0,
            turn=1,
        )

    return replace(
        new_state,
        current_player_id=_next_seat_owing_flips(players, state.current_player_id),
    )


# -------------------------------------------------------------------------
# Turn Actions
# -------------------------------------------------------------------------

def choose_card(
    state: GameState,
    player_id: int,
    source: CardSource,
    rng: Optional[random.Random] = None,
) -> GameState:
    """
    Take the top card of the draw pile or discard pile into hand.

    This is the first action of a turn. If the draw pile is empty when
    drawing, the discard pile is shuffled into a new draw pile first.

    Args:
        state: Current state.
        player_id: Seat taking the card.
        source: CardSource.DRAW or CardSource.DISCARD.
        rng: Random source for the discard reshuffle.

    Returns:
        The next state, or the input state if the choice is not allowed.
    """
    if state.phase != GamePhase.PLAYING:
        return state

    if state.current_player_id != player_id:
        return state

    # Must resolve the active card before choosing again
    if state.active_card is not None:
        return state

    if source == CardSource.DRAW:
        draw_pile = state.draw_pile
        discard_pile = state.discard_pile

        if not draw_pile:
            if not discard_pile:
                return state
            draw_pile = tuple(shuffle_deck(list(discard_pile), rng))
            discard_pile = ()

        return replace(
            state,
            draw_pile=draw_pile[1:],
            discard_pile=discard_pile,
            active_card=draw_pile[0],
            active_card_source=CardSource.DRAW,
        )

    if source == CardSource.DISCARD:
        if not state.discard_pile:
            return state

        return replace(
            state,
            discard_pile=state.discard_pile[1:],
            active_card=state.discard_pile[0],
            active_card_source=CardSource.DISCARD,
        )

    return state


def place_card(state: GameState, player_id: int, row: int, col: int) -> GameState:
    """
    Put the active card into the player's grid, face-up.

    The card it replaces goes on top of the discard pile, then the turn
    ends.

    Args:
        state: Current state.
        player_id: Seat placing the card.
        row: Grid row (0-2).
        col: Grid column (0-2).

    Returns:
        The next state, or the input state if the placement is not allowed.
    """
    if state.phase != GamePhase.PLAYING:
        return state

    if state.current_player_id != player_id:
        return state

    if state.active_card is None or state.active_card_source is None:
        return state

    index = state.player_index(player_id)
    if index == -1:
        return state

    player = state.players[index]
    target = player.slot_at(row, col)
    if target is None:
        return state

    updated_player = replace(
        player,
        grid=replace_cell(player.grid, row, col, GridSlot(state.active_card, face_up=True)),
    )
    placed = replace(
        state,
        players=_replace_player(state, index, updated_player),
        discard_pile=(target.card,) + state.discard_pile,
        active_card=None,
        active_card_source=None,
    )

    return _resolve_end_of_turn(placed, player_id)


def discard_drawn_card(state: GameState, player_id: int) -> GameState:
    """
    Throw away a card drawn from the draw pile.

    Cards taken from the discard pile must be placed; only a drawn card
    may be declined.

    Args:
        state: Current state.
        player_id: Seat discarding.

    Returns:
        The next state, or the input state if the discard is not allowed.
    """
    if state.phase != GamePhase.PLAYING:
        return state

    if state.current_player_id != player_id:
        return state

    if state.active_card is None or state.active_card_source != CardSource.DRAW:
        return state

    discarded = replace(
        state,
        discard_pile=(state.active_card,) + state.discard_pile,
        active_card=None,
        active_card_source=None,
    )

    return _resolve_end_of_turn(discarded, player_id)


# -------------------------------------------------------------------------
# Match Flow
# -------------------------------------------------------------------------

def start_next_hand(
    state: GameState,
    total_hands: int,
    rng: Optional[random.Random] = None,
) -> GameState:
    """
    Deal the next hand of the match.

    Every card in play is gathered, reshuffled and redealt. Score history
    carries over; everything else resets to the start of a hand.

    Args:
        state: A state in the GAME_OVER phase.
        total_hands: Number of hands in the match.
        rng: Random source for the shuffle.

    Returns:
        The SETUP state of the next hand, or the input state if the hand
        is not over or the match is complete.
    """
    if state.phase != GamePhase.GAME_OVER:
        return state

    if state.current_hand >= total_hands:
        return state

    deck = shuffle_deck(state.all_cards(), rng)
    players, remaining = deal_players(deck, [player.name for player in state.players])
    players = tuple(
        replace(player, id=old.id, initial_flips_remaining=INITIAL_FLIPS)
        for player, old in zip(players, state.players)
    )

    return replace(
        state,
        players=players,
        draw_pile=tuple(remaining),
        discard_pile=(),
        active_card=None,
        active_card_source=None,
        current_hand=state.current_hand + 1,
        final_round_starter_id=None,
        final_turns_remaining=0,
        current_player_id=0,
        turn=1,
        phase=GamePhase.SETUP,
        winner_id=None,
    )
