"""
Dealing and initial state construction for Nine-Card Golf.

The setup builder shuffles a full deck, deals a 3x3 face-down grid to
each of the four seats (row-major, from the front of the deck) and puts
the remaining 72 cards on the draw pile.
"""

import random
from typing import Optional, Sequence

from constants import GRID_SIZE, NUM_PLAYERS, default_player_name
from game import Card, GameState, GamePhase, Grid, GridSlot, Player, build_deck, shuffle_deck


class DeckExhaustedError(RuntimeError):
    """The deck ran out of cards before a grid was fully dealt."""


def deal_grid(deck: Sequence[Card]) -> tuple[Grid, list[Card]]:
    """
    Deal one 3x3 grid of face-down cards from the front of a deck.

    Args:
        deck: Cards to deal from; not modified.

    Returns:
        The dealt grid and the cards left over.

    Raises:
        DeckExhaustedError: If fewer than 9 cards are available.
    """
    needed = GRID_SIZE * GRID_SIZE
    if len(deck) < needed:
        raise DeckExhaustedError(
            f"Not enough cards in deck to deal a full grid ({len(deck)} < {needed})"
        )

    grid = tuple(
        tuple(GridSlot(deck[row * GRID_SIZE + col], face_up=False) for col in range(GRID_SIZE))
        for row in range(GRID_SIZE)
    )
    return grid, list(deck[needed:])


def deal_players(
    deck: Sequence[Card],
    names: Sequence[str],
) -> tuple[tuple[Player, ...], list[Card]]:
    """
    Deal a fresh grid to every seat in order.

    Args:
        deck: Shuffled cards to deal from.
        names: One display name per seat.

    Returns:
        The dealt players and the undealt remainder of the deck.
    """
    remaining = list(deck)
    players = []
    for seat, name in enumerate(names):
        grid, remaining = deal_grid(remaining)
        players.append(Player(id=seat, name=name, grid=grid))
    return tuple(players), remaining


def resolve_player_names(player_names: Optional[Sequence[str]] = None) -> list[str]:
    """Fill in "Player N" for every seat without a (non-empty) name."""
    names = list(player_names or [])
    return [
        names[seat] if seat < len(names) and names[seat] else default_player_name(seat)
        for seat in range(NUM_PLAYERS)
    ]


def create_initial_state(
    player_names: Optional[Sequence[str]] = None,
    rng: Optional[random.Random] = None,
) -> GameState:
    """
    Create the state for the first hand of a match.

    Builds and shuffles the deck, deals 9 face-down cards to each of the
    4 seats, and leaves the rest on the draw pile. The discard pile starts
    empty; it is seeded when setup completes.

    Args:
        player_names: Up to 4 display names, in seat order.
        rng: Random source for the shuffle.

    Returns:
        A GameState in the SETUP phase with seat 0 to flip first.

    Raises:
        DeckExhaustedError: If the deck cannot cover every grid.
    """
    deck = shuffle_deck(build_deck(), rng)
    players, remaining = deal_players(deck, resolve_player_names(player_names))

    return GameState(
        players=players,
        draw_pile=tuple(remaining),
        discard_pile=(),
        active_card=None,
        active_card_source=None,
        current_player_id=0,
        turn=1,
        phase=GamePhase.SETUP,
        final_round_starter_id=None,
        final_turns_remaining=0,
        winner_id=None,
        current_hand=1,
        score_history={},
    )
