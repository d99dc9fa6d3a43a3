"""
Test suite for the Nine-Card Golf card and state model.

Covers:
- Card values (A=1, 2-10=face, J/Q=10, K=0, Joker=-2)
- Deck construction (8 suits x 13 ranks + 4 Jokers)
- Fisher-Yates shuffle with an injectable random source
- Grid and state helpers used by the reducer

Run with: pytest test_game.py -v
"""

import random
from collections import Counter
from dataclasses import replace

import pytest
from game import (
    Card, GameState, GamePhase, GridSlot, Player, Rank, Suit, RANK_VALUES,
    build_deck, empty_grid, in_bounds, replace_cell, shuffle_deck,
)


def make_grid(ranks, face_up=True):
    """Build a 3x3 grid from 9 ranks (row-major), all hearts."""
    cells = [
        GridSlot(Card(f"t-{i}", rank, None if rank == Rank.JOKER else Suit.HEARTS), face_up)
        for i, rank in enumerate(ranks)
    ]
    return tuple(tuple(cells[r * 3:(r + 1) * 3]) for r in range(3))


# =============================================================================
# Card Value Tests
# =============================================================================

class TestCardValues:
    """Verify card values."""

    def test_ace_worth_1(self):
        assert RANK_VALUES[Rank.ACE] == 1

    def test_two_through_ten_face_value(self):
        assert RANK_VALUES[Rank.TWO] == 2
        assert RANK_VALUES[Rank.THREE] == 3
        assert RANK_VALUES[Rank.FOUR] == 4
        assert RANK_VALUES[Rank.FIVE] == 5
        assert RANK_VALUES[Rank.SIX] == 6
        assert RANK_VALUES[Rank.SEVEN] == 7
        assert RANK_VALUES[Rank.EIGHT] == 8
        assert RANK_VALUES[Rank.NINE] == 9
        assert RANK_VALUES[Rank.TEN] == 10

    def test_face_cards(self):
        assert RANK_VALUES[Rank.JACK] == 10
        assert RANK_VALUES[Rank.QUEEN] == 10
        assert RANK_VALUES[Rank.KING] == 0

    def test_joker_worth_negative_2(self):
        assert RANK_VALUES[Rank.JOKER] == -2

    def test_card_value_method(self):
        assert Card("x", Rank.KING, Suit.CLUBS2).value() == 0
        assert Card("j", Rank.JOKER).value() == -2

    def test_card_str(self):
        assert str(Card("x", Rank.ACE, Suit.HEARTS)) == "A♥"
        assert str(Card("y", Rank.TEN, Suit.SPADES2)) == "10♠"
        assert str(Card("j", Rank.JOKER)) == "Joker"


# =============================================================================
# Deck Tests
# =============================================================================

class TestDeck:
    """Verify deck construction."""

    def test_deck_has_108_cards(self):
        assert len(build_deck()) == 108

    def test_card_ids_unique(self):
        deck = build_deck()
        assert len({card.id for card in deck}) == 108

    def test_eight_suits_of_thirteen(self):
        counts = Counter(card.suit for card in build_deck() if card.suit is not None)
        assert len(counts) == 8
        assert all(count == 13 for count in counts.values())

    def test_four_suitless_jokers(self):
        jokers = [card for card in build_deck() if card.is_joker()]
        assert len(jokers) == 4
        assert all(card.suit is None for card in jokers)
        assert [card.id for card in jokers] == ["joker-0", "joker-1", "joker-2", "joker-3"]

    def test_every_rank_eight_times(self):
        counts = Counter(card.rank for card in build_deck() if not card.is_joker())
        assert len(counts) == 13
        assert all(count == 8 for count in counts.values())

    def test_construction_is_deterministic(self):
        assert build_deck() == build_deck()
        assert build_deck()[0] == Card("card-hearts-A", Rank.ACE, Suit.HEARTS)

    def test_suit_symbols_repeat(self):
        assert Suit.HEARTS.symbol == Suit.HEARTS2.symbol == "♥"
        assert Suit.SPADES2.symbol == "♠"


# =============================================================================
# Shuffle Tests
# =============================================================================

class AlwaysZero:
    """Random source that always picks the lowest index."""

    def randint(self, a, b):
        return a


class AlwaysTop:
    """Random source that always picks the highest index."""

    def randint(self, a, b):
        return b


class TestShuffle:
    """Verify the Fisher-Yates shuffle."""

    def test_shuffle_keeps_all_cards(self):
        deck = build_deck()
        shuffled = shuffle_deck(deck, random.Random(3))
        assert Counter(shuffled) == Counter(deck)

    def test_shuffle_leaves_input_untouched(self):
        deck = build_deck()
        original = list(deck)
        shuffle_deck(deck, random.Random(3))
        assert deck == original

    def test_same_seed_same_order(self):
        deck = build_deck()
        assert shuffle_deck(deck, random.Random(42)) == shuffle_deck(deck, random.Random(42))

    def test_different_seeds_differ(self):
        deck = build_deck()
        assert shuffle_deck(deck, random.Random(1)) != shuffle_deck(deck, random.Random(2))

    def test_swaps_walk_down_from_last_index(self):
        """Always choosing index 0: [a, b, c] -> [c, b, a] -> [b, c, a]."""
        assert shuffle_deck(["a", "b", "c"], AlwaysZero()) == ["b", "c", "a"]

    def test_choosing_own_index_is_identity(self):
        assert shuffle_deck(["a", "b", "c", "d"], AlwaysTop()) == ["a", "b", "c", "d"]

    def test_short_inputs(self):
        assert shuffle_deck([], random.Random(0)) == []
        assert shuffle_deck(["a"], random.Random(0)) == ["a"]

    def test_default_random_source(self):
        deck = build_deck()
        assert Counter(shuffle_deck(deck)) == Counter(deck)


# =============================================================================
# Grid & State Helper Tests
# =============================================================================

class TestGridHelpers:

    def test_empty_grid_is_3x3_of_none(self):
        grid = empty_grid()
        assert len(grid) == 3
        assert all(len(row) == 3 and all(cell is None for cell in row) for row in grid)

    @pytest.mark.parametrize("row,col", [(0, 0), (2, 2), (1, 2)])
    def test_in_bounds(self, row, col):
        assert in_bounds(row, col)

    @pytest.mark.parametrize("row,col", [(-1, 0), (0, -1), (3, 0), (0, 3), (True, 0), ("1", 0), (1.0, 1)])
    def test_out_of_bounds(self, row, col):
        assert not in_bounds(row, col)

    def test_replace_cell_copies(self):
        grid = make_grid([Rank.ACE] * 9, face_up=False)
        new_slot = GridSlot(Card("new", Rank.KING, Suit.CLUBS), True)
        updated = replace_cell(grid, 1, 2, new_slot)
        assert updated[1][2] is new_slot
        assert grid[1][2].card.id == "t-5"
        assert updated[0] == grid[0]


class TestPlayer:

    def test_all_face_up(self):
        player = Player(0, "A", make_grid([Rank.ACE] * 9, face_up=True))
        assert player.all_face_up()

    def test_not_all_face_up(self):
        grid = make_grid([Rank.ACE] * 9, face_up=True)
        grid = replace_cell(grid, 2, 2, GridSlot(grid[2][2].card, False))
        player = Player(0, "A", grid)
        assert not player.all_face_up()
        assert player.face_down_count() == 1

    def test_undealt_grid_is_not_face_up(self):
        assert not Player(0, "A").all_face_up()

    def test_slot_at_rejects_bad_cells(self):
        player = Player(0, "A", make_grid([Rank.ACE] * 9))
        assert player.slot_at(0, 0) is not None
        assert player.slot_at(-1, 0) is None
        assert player.slot_at(0, 3) is None

    def test_revealed_flips_everything(self):
        player = Player(2, "C", make_grid([Rank.FIVE] * 9, face_up=False), initial_flips_remaining=1)
        revealed = player.revealed()
        assert revealed.all_face_up()
        assert revealed.cards() == player.cards()
        assert revealed.initial_flips_remaining == 1
        assert not player.grid[0][0].face_up


class TestGameStateSnapshot:

    def make_state(self, phase=GamePhase.PLAYING):
        players = tuple(
            Player(i, f"P{i}", make_grid([Rank.SEVEN] * 9, face_up=False)) for i in range(4)
        )
        return GameState(
            players=players,
            draw_pile=(Card("d1", Rank.TWO, Suit.CLUBS),),
            discard_pile=(Card("x1", Rank.NINE, Suit.DIAMONDS),),
            phase=phase,
            score_history={0: (4,), 1: (7,), 2: (1,), 3: (9,)},
        )

    def test_face_down_cards_hidden(self):
        data = self.make_state().to_dict()
        assert data["players"][0]["grid"][0][0] == {"face_up": False}
        assert data["discard_top"]["rank"] == "9"
        assert data["draw_pile_size"] == 1
        assert data["hand_scores"] is None

    def test_game_over_reveals(self):
        data = self.make_state(GamePhase.GAME_OVER).to_dict(total_hands=9)
        assert data["players"][0]["grid"][0][0]["rank"] == "7"
        assert data["hand_scores"] == {0: 4, 1: 7, 2: 1, 3: 9}
        assert data["total_hands"] == 9
        assert data["phase"] == "GAME_OVER"

    def test_all_cards_counts_everything(self):
        state = self.make_state()
        assert len(state.all_cards()) == 36 + 1 + 1

    def test_discard_top_is_front(self):
        assert self.make_state().discard_top().id == "x1"
        assert GameState(players=()).discard_top() is None


class TestScoreHistoryImmutability:

    def test_history_is_read_only(self):
        state = GameState(players=(), score_history={0: (4,)})
        with pytest.raises(TypeError):
            state.score_history[0] = (999,)

    def test_passed_mapping_is_copied(self):
        history = {0: (4,), 1: (7,)}
        state = GameState(players=(), score_history=history)
        history[0] = (999,)
        assert state.score_history == {0: (4,), 1: (7,)}

    def test_replace_does_not_share_history(self):
        state = GameState(players=(), score_history={0: (4,)})
        later = replace(state, turn=2)
        assert later.score_history is not state.score_history
        assert later.score_history == state.score_history

    def test_state_is_hashable(self):
        state = TestGameStateSnapshot().make_state()
        assert hash(state) == hash(replace(state))
