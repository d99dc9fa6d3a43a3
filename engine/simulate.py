"""
Nine-Card Golf Simulation Runner

Plays whole matches by picking uniformly among the legal intents at every
step, checking the engine's invariants after each transition. No players
think here: the point is to exercise every rule path with many seeds.

Usage:
    python simulate.py [num_matches] [total_hands] [seed]

Examples:
    python simulate.py 10          # 10 matches of the configured length
    python simulate.py 50 3 1234   # 50 three-hand matches starting at seed 1234
"""

import logging
import random
import sys
from collections import Counter
from dataclasses import dataclass, field
from typing import Optional

from config import get_config
from constants import NUM_PLAYERS, TOTAL_CARDS
from game import GamePhase, GameState, build_deck
from logging_config import setup_logging
from models.events import EventType
from session import GameSession

logger = logging.getLogger(__name__)

# Far more steps than any match needs; hitting it means play is stuck
MAX_STEPS_PER_HAND = 5000


class InvariantViolation(AssertionError):
    """A state broke one of the engine's invariants."""


FULL_DECK_IDS = Counter(card.id for card in build_deck())


def check_invariants(state: GameState) -> None:
    """
    Verify the invariants that must hold after every transition.

    Raises:
        InvariantViolation: On the first broken invariant.
    """
    ids = Counter(card.id for card in state.all_cards())
    if ids != FULL_DECK_IDS:
        raise InvariantViolation(
            f"Card conservation broken: {sum(ids.values())} cards, expected {TOTAL_CARDS}"
        )

    if (state.active_card is None) != (state.active_card_source is None):
        raise InvariantViolation("active_card and active_card_source out of sync")

    if [p.id for p in state.players] != list(range(NUM_PLAYERS)):
        raise InvariantViolation(f"Unexpected seats: {[p.id for p in state.players]}")

    if state.get_player(state.current_player_id) is None:
        raise InvariantViolation(f"No player in seat {state.current_player_id}")

    if state.phase != GamePhase.SETUP and any(p.initial_flips_remaining for p in state.players):
        raise InvariantViolation("Setup flips still owed outside SETUP")


@dataclass
class SimulationStats:
    """Track simulation statistics."""

    matches_played: int = 0
    hands_played: int = 0
    steps: int = 0
    reshuffles: int = 0
    match_wins: Counter = field(default_factory=Counter)
    hand_wins: Counter = field(default_factory=Counter)
    hand_scores: list[int] = field(default_factory=list)

    def record_match(self, session: GameSession, steps: int) -> None:
        state = session.state
        self.matches_played += 1
        self.hands_played += state.current_hand
        self.steps += steps

        for event in session.events:
            if event.event_type == EventType.DRAW_PILE_RESHUFFLED:
                self.reshuffles += 1
            elif event.event_type == EventType.HAND_ENDED:
                self.hand_wins[event.data["winner_id"]] += 1
                self.hand_scores.extend(event.data["scores"].values())
            elif event.event_type == EventType.MATCH_ENDED:
                self.match_wins[event.data["winner_id"]] += 1

    def report(self) -> str:
        lines = [
            "=" * 50,
            "SIMULATION RESULTS",
            "=" * 50,
            f"Matches played: {self.matches_played}",
            f"Hands played: {self.hands_played}",
            f"Total steps: {self.steps}",
            f"Avg steps/hand: {self.steps / max(1, self.hands_played):.1f}",
            f"Draw pile reshuffles: {self.reshuffles}",
            "",
            "HAND WINS BY SEAT:",
        ]
        for seat in range(NUM_PLAYERS):
            wins = self.hand_wins.get(seat, 0)
            pct = wins / max(1, self.hands_played) * 100
            lines.append(f"  Seat {seat}: {wins} ({pct:.1f}%)")

        lines.append("")
        lines.append("MATCH WINS BY SEAT:")
        for seat in range(NUM_PLAYERS):
            lines.append(f"  Seat {seat}: {self.match_wins.get(seat, 0)}")

        if self.hand_scores:
            avg = sum(self.hand_scores) / len(self.hand_scores)
            lines.append("")
            lines.append(
                f"Hand scores: avg {avg:.1f}, "
                f"min {min(self.hand_scores)}, max {max(self.hand_scores)}"
            )

        return "\n".join(lines)


def run_match(
    seed: int,
    total_hands: int = 1,
    player_names: Optional[list[str]] = None,
) -> tuple[GameSession, int]:
    """
    Play one match with random legal intents.

    Args:
        seed: Seed for both the deal and the move choices.
        total_hands: Hands in the match.
        player_names: Optional seat names.

    Returns:
        The finished session and the number of steps taken.

    Raises:
        InvariantViolation: If any state breaks an invariant, or play stalls.
    """
    session = GameSession(player_names, total_hands=total_hands, seed=seed)
    chooser = random.Random(seed)
    check_invariants(session.state)

    steps = 0
    max_steps = MAX_STEPS_PER_HAND * total_hands
    while not session.is_match_over:
        intents = session.legal_intents()
        if not intents:
            raise InvariantViolation(f"No legal intent in phase {session.state.phase.value}")

        before = session.state
        after = session.dispatch(chooser.choice(intents))
        if after is before:
            raise InvariantViolation(f"Legal intent had no effect in phase {before.phase.value}")

        check_invariants(after)
        steps += 1
        if steps > max_steps:
            raise InvariantViolation(f"Match did not finish within {max_steps} steps")

    return session, steps


def run_simulation(num_matches: int = 10, total_hands: int = 1, seed: int = 0) -> SimulationStats:
    """Run a batch of matches with consecutive seeds."""
    stats = SimulationStats()

    for i in range(num_matches):
        session, steps = run_match(seed + i, total_hands)
        stats.record_match(session, steps)
        logger.debug(f"Match {i + 1}/{num_matches} finished in {steps} steps")

    return stats


if __name__ == "__main__":
    config = get_config()
    setup_logging(config.LOG_LEVEL, config.ENVIRONMENT)

    num_matches = int(sys.argv[1]) if len(sys.argv) > 1 else 10
    total_hands = int(sys.argv[2]) if len(sys.argv) > 2 else config.TOTAL_HANDS
    seed = int(sys.argv[3]) if len(sys.argv) > 3 else (config.SHUFFLE_SEED or 0)

    print(f"Running {num_matches} match(es) of {total_hands} hand(s)...")
    print(run_simulation(num_matches, total_hands, seed).report())
