"""
Card value and table constants for Nine-Card Golf.

This module is the single source of truth for all card point values
and for the fixed shape of the table (players, grid, deck).

Scoring:
    - Ace: 1 point
    - 2-10: Face value
    - Jack, Queen: 10 points
    - King: 0 points
    - Joker: -2 points (never cancelled by a matching line)

Deck math:
    8 suits x 13 ranks = 104
    + 4 Jokers         = 108 total
"""


# =============================================================================
# Card Values - Single Source of Truth
# =============================================================================

CARD_VALUES: dict[str, int] = {
    'A': 1,
    '2': 2,
    '3': 3,
    '4': 4,
    '5': 5,
    '6': 6,
    '7': 7,
    '8': 8,
    '9': 9,
    '10': 10,
    'J': 10,
    'Q': 10,
    'K': 0,
    'Joker': -2,
}


# =============================================================================
# Table Constants
# =============================================================================

NUM_PLAYERS = 4
GRID_SIZE = 3
CARDS_PER_PLAYER = GRID_SIZE * GRID_SIZE  # 9

SUIT_COUNT = 8
RANKS_PER_SUIT = 13
TOTAL_JOKERS = 4
TOTAL_CARDS = SUIT_COUNT * RANKS_PER_SUIT + TOTAL_JOKERS  # 108

INITIAL_FLIPS = 3


# The 8 lines eligible for three-of-a-kind cancelling, as (row, col) cells.
LINE_COORDS: tuple[tuple[tuple[int, int], ...], ...] = (
    # Rows
    ((0, 0), (0, 1), (0, 2)),
    ((1, 0), (1, 1), (1, 2)),
    ((2, 0), (2, 1), (2, 2)),
    # Columns
    ((0, 0), (1, 0), (2, 0)),
    ((0, 1), (1, 1), (2, 1)),
    ((0, 2), (1, 2), (2, 2)),
    # Diagonals
    ((0, 0), (1, 1), (2, 2)),
    ((0, 2), (1, 1), (2, 0)),
)


def default_player_name(seat: int) -> str:
    """Display name used when no name is given for a seat."""
    return f"Player {seat + 1}"
