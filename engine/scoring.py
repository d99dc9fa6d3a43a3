"""
Scoring for Nine-Card Golf.

A grid scores the sum of its card values, except that any row, column or
diagonal holding three cards of the same non-Joker rank scores 0 for all
three cells. Jokers are always worth -2 and never cancel, even three in
a line. A cell covered by two cancelled lines is cancelled once.

Tie-break policy for the hand winner: the lowest score wins, and among
equal scores the first player in seat order wins.
"""

from typing import Iterable, Mapping, Optional

from constants import LINE_COORDS
from game import Card, Grid, Player, Rank


def _is_cancelling_line(cards: list[Card]) -> bool:
    """Three cards of the same rank, none of them a Joker."""
    if len(cards) != 3:
        return False
    if any(card.rank == Rank.JOKER for card in cards):
        return False
    return cards[0].rank == cards[1].rank == cards[2].rank


def cancelled_cells(grid: Grid) -> set[tuple[int, int]]:
    """
    Find the cells that score 0 because of a matching line.

    Lines with an undealt cell are skipped.

    Args:
        grid: A 3x3 grid.

    Returns:
        Set of (row, col) cells inside at least one cancelling line.
    """
    zeroed: set[tuple[int, int]] = set()

    for line in LINE_COORDS:
        cards = []
        for row, col in line:
            slot = grid[row][col] if row < len(grid) and col < len(grid[row]) else None
            if slot is None:
                break
            cards.append(slot.card)
        else:
            if _is_cancelling_line(cards):
                zeroed.update(line)

    return zeroed


def score_grid(grid: Grid) -> int:
    """
    Calculate the score of a grid (lower is better).

    Face-up state is ignored; every dealt card counts.

    Args:
        grid: A 3x3 grid.

    Returns:
        Total points for the grid.
    """
    zeroed = cancelled_cells(grid)
    total = 0

    for row, grid_row in enumerate(grid):
        for col, slot in enumerate(grid_row):
            if slot is None or (row, col) in zeroed:
                continue
            total += slot.card.value()

    return total


def score_players(players: Iterable[Player]) -> dict[int, int]:
    """Score every player's grid, keyed by player id in seat order."""
    return {player.id: score_grid(player.grid) for player in players}


def find_lowest_scorer(scores_by_id: Mapping[int, int]) -> Optional[int]:
    """
    Find the player with the lowest score.

    Ties go to the first id encountered, which is seat order for
    mappings built by score_players().

    Args:
        scores_by_id: Player id -> score.

    Returns:
        The winning player id, or None if there are no scores.
    """
    best_id: Optional[int] = None
    best_score: Optional[int] = None

    for player_id, score in scores_by_id.items():
        if best_score is None or score < best_score:
            best_id = player_id
            best_score = score

    return best_id


def match_totals(score_history: Mapping[int, Iterable[int]]) -> dict[int, int]:
    """Cumulative match score per player (sum of all hand scores)."""
    return {player_id: sum(scores) for player_id, scores in score_history.items()}
