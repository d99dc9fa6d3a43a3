"""
Card, deck and state model for Nine-Card Golf.

This module defines the card domain (suits, ranks, jokers), the deck
builder and shuffler, and the immutable state objects threaded through
the reducer in actions.py.

Nine-Card Golf Rules Summary:
    - Four players, each with 9 cards in a 3x3 grid, all dealt face-down
    - Setup: every player reveals 3 of their own cards
    - On your turn: take the top of the draw pile or the discard pile,
      then place it in your grid (the old card is discarded) or, if it
      came from the draw pile, discard it
    - Three cards of the same rank in a row, column or diagonal score 0
    - When a player's grid is fully revealed, everyone else gets one
      more turn, then the hand is scored (lowest wins)

Grid Layout:
    (0,0) (0,1) (0,2)
    (1,0) (1,1) (1,2)
    (2,0) (2,1) (2,2)

All state objects are frozen dataclasses. Transitions never mutate a
state; they build a new one with dataclasses.replace().
"""

import random
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Iterator, Mapping, Optional
from constants import (
    CARD_VALUES,
    GRID_SIZE,
    INITIAL_FLIPS,
    TOTAL_JOKERS,
)


class Suit(Enum):
    """The eight suits of the oversized deck (two of each standard suit)."""

    HEARTS = "hearts"
    DIAMONDS = "diamonds"
    CLUBS = "clubs"
    SPADES = "spades"
    HEARTS2 = "hearts2"
    DIAMONDS2 = "diamonds2"
    CLUBS2 = "clubs2"
    SPADES2 = "spades2"

    @property
    def symbol(self) -> str:
        return SUIT_SYMBOLS[self]


SUIT_SYMBOLS: dict[Suit, str] = {
    Suit.HEARTS: "♥",
    Suit.DIAMONDS: "♦",
    Suit.CLUBS: "♣",
    Suit.SPADES: "♠",
    Suit.HEARTS2: "♥",
    Suit.DIAMONDS2: "♦",
    Suit.CLUBS2: "♣",
    Suit.SPADES2: "♠",
}


class Rank(Enum):
    """
    Card ranks with their display values.

    Scoring:
        - Ace: 1 point
        - 2-10: Face value
        - Jack/Queen: 10 points
        - King: 0 points
        - Joker: -2 points
    """

    ACE = "A"
    TWO = "2"
    THREE = "3"
    FOUR = "4"
    FIVE = "5"
    SIX = "6"
    SEVEN = "7"
    EIGHT = "8"
    NINE = "9"
    TEN = "10"
    JACK = "J"
    QUEEN = "Q"
    KING = "K"
    JOKER = "Joker"


# Map Rank enum to point values (derived from constants.py as single source of truth)
RANK_VALUES: dict[Rank, int] = {rank: CARD_VALUES[rank.value] for rank in Rank}

STANDARD_RANKS: list[Rank] = [rank for rank in Rank if rank != Rank.JOKER]


@dataclass(frozen=True)
class Card:
    """
    A playing card. Immutable once created.

    Attributes:
        id: Unique identifier within the deck ("card-hearts-A", "joker-0").
        rank: The card's rank (A, 2-10, J, Q, K, or Joker).
        suit: The card's suit; None only for Jokers.
    """

    id: str
    rank: Rank
    suit: Optional[Suit] = None

    def is_joker(self) -> bool:
        return self.rank == Rank.JOKER

    def value(self) -> int:
        """Get point value of this card on its own."""
        return RANK_VALUES[self.rank]

    def to_dict(self) -> dict:
        """Convert card to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "rank": self.rank.value,
            "suit": self.suit.value if self.suit else None,
        }

    def __str__(self) -> str:
        if self.suit is None:
            return self.rank.value
        return f"{self.rank.value}{self.suit.symbol}"


# =============================================================================
# Deck
# =============================================================================

def build_deck() -> list[Card]:
    """
    Build the full 108-card deck in a fixed order.

    Every suit gets one card of each standard rank (8 x 13 = 104), then
    the 4 suitless Jokers are appended. No randomness here.

    Returns:
        A new list of 108 distinct cards.
    """
    cards: list[Card] = []
    for suit in Suit:
        for rank in STANDARD_RANKS:
            cards.append(Card(f"card-{suit.value}-{rank.value}", rank, suit))

    for i in range(TOTAL_JOKERS):
        cards.append(Card(f"joker-{i}", Rank.JOKER))

    return cards


def shuffle_deck(cards: list[Card], rng: Optional[random.Random] = None) -> list[Card]:
    """
    Return a uniformly shuffled copy of the given cards.

    Fisher-Yates: walk from the last index down to 1, swapping each
    position with a uniformly chosen index in [0, i]. The input sequence
    is left untouched.

    Args:
        cards: Cards to shuffle.
        rng: Random source. Pass a seeded random.Random for reproducible
            games; a fresh unseeded one is used when omitted.

    Returns:
        A new list containing the same cards in shuffled order.
    """
    if rng is None:
        rng = random.Random()

    shuffled = list(cards)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


# =============================================================================
# Grid
# =============================================================================

@dataclass(frozen=True)
class GridSlot:
    """A dealt card in a player's grid, with its face-up state."""

    card: Card
    face_up: bool = False

    def to_dict(self, reveal: bool = False) -> dict:
        """
        Convert slot to dictionary for display.

        Hides card details if face-down, unless reveal is set.

        Args:
            reveal: If True, include the card even when face-down.

        Returns:
            Dict with card info, or just {face_up: False} if hidden.
        """
        if self.face_up or reveal:
            return {"face_up": self.face_up, **self.card.to_dict()}
        return {"face_up": False}


Grid = tuple[tuple[Optional[GridSlot], ...], ...]


def empty_grid() -> Grid:
    """A 3x3 grid with no cards dealt."""
    return tuple(tuple(None for _ in range(GRID_SIZE)) for _ in range(GRID_SIZE))


def in_bounds(row: int, col: int) -> bool:
    """Check that (row, col) names a cell of the 3x3 grid."""
    for index in (row, col):
        if isinstance(index, bool) or not isinstance(index, int):
            return False
        if not 0 <= index < GRID_SIZE:
            return False
    return True


def grid_cells(grid: Grid) -> Iterator[tuple[int, int, Optional[GridSlot]]]:
    """Iterate (row, col, slot) over a grid in row-major order."""
    for row, grid_row in enumerate(grid):
        for col, slot in enumerate(grid_row):
            yield row, col, slot


def replace_cell(grid: Grid, row: int, col: int, slot: Optional[GridSlot]) -> Grid:
    """Return a copy of the grid with one cell replaced."""
    return tuple(
        tuple(slot if (r, c) == (row, col) else cell for c, cell in enumerate(grid_row))
        for r, grid_row in enumerate(grid)
    )


# =============================================================================
# Players & State
# =============================================================================

@dataclass(frozen=True)
class Player:
    """
    A seat at the table.

    Attributes:
        id: Stable seat number 0-3; also the turn order.
        name: Display name.
        grid: The player's 3x3 grid of dealt cards.
        initial_flips_remaining: Setup reveals still owed (3 down to 0).
    """

    id: int
    name: str
    grid: Grid = field(default_factory=empty_grid)
    initial_flips_remaining: int = INITIAL_FLIPS

    def slot_at(self, row: int, col: int) -> Optional[GridSlot]:
        """Get the slot at (row, col), or None if out of range or empty."""
        if not in_bounds(row, col):
            return None
        return self.grid[row][col]

    def all_face_up(self) -> bool:
        """Check if every cell is dealt and revealed."""
        return all(slot is not None and slot.face_up for _, _, slot in grid_cells(self.grid))

    def face_down_count(self) -> int:
        return sum(1 for _, _, slot in grid_cells(self.grid) if slot is not None and not slot.face_up)

    def cards(self) -> list[Card]:
        """All dealt cards in row-major order."""
        return [slot.card for _, _, slot in grid_cells(self.grid) if slot is not None]

    def revealed(self) -> "Player":
        """Copy of this player with every dealt card face-up."""
        grid = tuple(
            tuple(GridSlot(slot.card, True) if slot is not None else None for slot in grid_row)
            for grid_row in self.grid
        )
        return Player(self.id, self.name, grid, self.initial_flips_remaining)

    def to_dict(self, reveal: bool = False) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "initial_flips_remaining": self.initial_flips_remaining,
            "all_face_up": self.all_face_up(),
            "grid": [
                [slot.to_dict(reveal) if slot is not None else None for slot in grid_row]
                for grid_row in self.grid
            ],
        }


class GamePhase(str, Enum):
    """
    Phases of a hand.

    Flow: SETUP -> PLAYING -> GAME_OVER
    GAME_OVER -> SETUP starts the next hand of the match.
    """

    SETUP = "SETUP"          # Players revealing their initial cards
    PLAYING = "PLAYING"      # Draw / place / discard turns
    GAME_OVER = "GAME_OVER"  # Hand scored, waiting for the next hand


class CardSource(str, Enum):
    """Where the active card was taken from."""

    DRAW = "Draw"
    DISCARD = "Discard"


@dataclass(frozen=True)
class GameState:
    """
    Complete state of a match at one instant.

    Replaced wholesale on every transition; never mutated in place.

    Attributes:
        players: Exactly 4 players in seat order.
        draw_pile: Face-down cards; index 0 is the top.
        discard_pile: Discarded cards; index 0 is the most recent.
        active_card: Card held by the current player, if any.
        active_card_source: Where active_card came from (set iff active_card is).
        current_player_id: Seat whose turn it is.
        turn: Full rounds played; increments when play wraps to seat 0.
        phase: SETUP, PLAYING or GAME_OVER.
        final_round_starter_id: Player who first revealed their whole grid.
        final_turns_remaining: Turns left before the hand ends.
        winner_id: Lowest scorer of the hand; set only at GAME_OVER.
        current_hand: Hand number within the match (1-indexed).
        score_history: Player id -> per-hand scores, in hand order. Read-only;
            any mapping passed in is copied.
    """

    players: tuple[Player, ...]
    draw_pile: tuple[Card, ...] = ()
    discard_pile: tuple[Card, ...] = ()
    active_card: Optional[Card] = None
    active_card_source: Optional[CardSource] = None
    current_player_id: int = 0
    turn: int = 1
    phase: GamePhase = GamePhase.SETUP
    final_round_starter_id: Optional[int] = None
    final_turns_remaining: int = 0
    winner_id: Optional[int] = None
    current_hand: int = 1
    score_history: Mapping[int, tuple[int, ...]] = field(
        default_factory=dict, hash=False
    )

    def __post_init__(self) -> None:
        history = {pid: tuple(scores) for pid, scores in self.score_history.items()}
        object.__setattr__(self, "score_history", MappingProxyType(history))

    def get_player(self, player_id: int) -> Optional[Player]:
        """Find a player by seat id."""
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def player_index(self, player_id: int) -> int:
        """Position of a player in the players tuple, or -1 if absent."""
        for i, player in enumerate(self.players):
            if player.id == player_id:
                return i
        return -1

    def current_player(self) -> Optional[Player]:
        """Get the player whose turn it currently is."""
        return self.get_player(self.current_player_id)

    def discard_top(self) -> Optional[Card]:
        """Get the top card of the discard pile (if any)."""
        if self.discard_pile:
            return self.discard_pile[0]
        return None

    @property
    def final_round_active(self) -> bool:
        return self.final_round_starter_id is not None and self.final_turns_remaining > 0

    def all_cards(self) -> list[Card]:
        """Every card in play: grids, draw pile, discard pile and active card."""
        cards: list[Card] = []
        for player in self.players:
            cards.extend(player.cards())
        cards.extend(self.draw_pile)
        cards.extend(self.discard_pile)
        if self.active_card is not None:
            cards.append(self.active_card)
        return cards

    def to_dict(self, total_hands: Optional[int] = None) -> dict:
        """
        Get a snapshot of the state for rendering.

        Face-down cards are hidden until the hand is over.

        Args:
            total_hands: Match length, included when known.

        Returns:
            Dict suitable for JSON serialization.
        """
        reveal = self.phase == GamePhase.GAME_OVER
        discard_top = self.discard_top()
        hand_scores = None
        if reveal:
            hand_scores = {
                pid: scores[-1] for pid, scores in self.score_history.items() if scores
            }

        return {
            "phase": self.phase.value,
            "players": [player.to_dict(reveal=reveal) for player in self.players],
            "current_player_id": self.current_player_id,
            "turn": self.turn,
            "draw_pile_size": len(self.draw_pile),
            "discard_pile_size": len(self.discard_pile),
            "discard_top": discard_top.to_dict() if discard_top else None,
            "active_card": self.active_card.to_dict() if self.active_card else None,
            "active_card_source": (
                self.active_card_source.value if self.active_card_source else None
            ),
            "final_round_starter_id": self.final_round_starter_id,
            "final_turns_remaining": self.final_turns_remaining,
            "winner_id": self.winner_id,
            "hand_scores": hand_scores,
            "current_hand": self.current_hand,
            "total_hands": total_hands,
            "score_history": {pid: list(scores) for pid, scores in self.score_history.items()},
        }
