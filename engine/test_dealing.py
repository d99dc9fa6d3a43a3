"""
Tests for dealing and initial state construction.

Run with: pytest test_dealing.py -v
"""

import random
from collections import Counter

import pytest
from dealing import (
    DeckExhaustedError, create_initial_state, deal_grid, deal_players, resolve_player_names,
)
from game import GamePhase, build_deck


class TestDealGrid:

    def test_deals_row_major_from_front(self):
        deck = build_deck()
        grid, remaining = deal_grid(deck)
        assert grid[0][0].card == deck[0]
        assert grid[0][2].card == deck[2]
        assert grid[1][0].card == deck[3]
        assert grid[2][2].card == deck[8]
        assert remaining == deck[9:]

    def test_all_face_down(self):
        grid, _ = deal_grid(build_deck())
        assert not any(slot.face_up for row in grid for slot in row)

    def test_deck_not_modified(self):
        deck = build_deck()
        deal_grid(deck)
        assert len(deck) == 108

    def test_exactly_nine_cards(self):
        deck = build_deck()[:9]
        grid, remaining = deal_grid(deck)
        assert remaining == []
        assert grid[2][2].card == deck[8]

    def test_short_deck_raises(self):
        with pytest.raises(DeckExhaustedError):
            deal_grid(build_deck()[:8])

    def test_deal_players_in_seat_order(self):
        deck = build_deck()
        players, remaining = deal_players(deck, ["A", "B"])
        assert [p.id for p in players] == [0, 1]
        assert [p.name for p in players] == ["A", "B"]
        assert players[1].grid[0][0].card == deck[9]
        assert len(remaining) == 108 - 18

    def test_deal_players_short_deck_raises(self):
        with pytest.raises(DeckExhaustedError):
            deal_players(build_deck()[:30], ["A", "B", "C", "D"])


class TestPlayerNames:

    def test_defaults(self):
        assert resolve_player_names() == ["Player 1", "Player 2", "Player 3", "Player 4"]

    def test_partial_names_padded(self):
        assert resolve_player_names(["Gage"]) == ["Gage", "Player 2", "Player 3", "Player 4"]

    def test_empty_names_replaced(self):
        assert resolve_player_names(["", "Ana", "", "Cy"]) == ["Player 1", "Ana", "Player 3", "Cy"]

    def test_extra_names_ignored(self):
        names = resolve_player_names(["a", "b", "c", "d", "e"])
        assert names == ["a", "b", "c", "d"]


class TestCreateInitialState:

    def setup_method(self):
        self.state = create_initial_state(["Gage"], random.Random(11))

    def test_four_seats(self):
        assert [p.id for p in self.state.players] == [0, 1, 2, 3]
        assert [p.name for p in self.state.players] == ["Gage", "Player 2", "Player 3", "Player 4"]

    def test_grids_face_down_with_three_flips(self):
        for player in self.state.players:
            assert player.face_down_count() == 9
            assert player.initial_flips_remaining == 3

    def test_piles(self):
        assert len(self.state.draw_pile) == 72
        assert self.state.discard_pile == ()
        assert self.state.active_card is None
        assert self.state.active_card_source is None

    def test_counters(self):
        assert self.state.phase == GamePhase.SETUP
        assert self.state.current_player_id == 0
        assert self.state.turn == 1
        assert self.state.current_hand == 1
        assert self.state.final_round_starter_id is None
        assert self.state.final_turns_remaining == 0
        assert self.state.winner_id is None
        assert self.state.score_history == {}

    def test_every_card_exactly_once(self):
        ids = Counter(card.id for card in self.state.all_cards())
        assert ids == Counter(card.id for card in build_deck())

    def test_same_seed_same_deal(self):
        again = create_initial_state(["Gage"], random.Random(11))
        assert again == self.state

    def test_different_seed_different_deal(self):
        other = create_initial_state(["Gage"], random.Random(12))
        assert other.draw_pile != self.state.draw_pile
