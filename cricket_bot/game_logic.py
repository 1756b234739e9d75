# game_logic.py
# Ball outcome generation, commentary, and payout rules

import logging
import math
import random
from decimal import Decimal
from typing import Optional

from .config import OUTCOME_PROBABILITIES, PREDICTION_TYPES
from .errors import InvalidStakeError, UnknownPredictionError
from .models import BallCall, Outcome, Runs, Wicket

logger = logging.getLogger(__name__)

SHOT_TYPES = ("drive", "cut", "pull", "hook", "sweep", "defensive")
BOWLER_TYPES = ("fast", "spin", "medium")
FIELDERS = ("slip", "point", "cover", "mid-wicket", "long-on")
DISMISSAL_TYPES = ("bowled", "caught", "lbw", "run out", "stumped")


def _build_buckets(probabilities):
    """Turn (result, probability) pairs into (upper bound, Outcome) buckets."""
    total = sum(probability for _, probability in probabilities)
    if total != Decimal('1'):
        raise ValueError(f"Outcome probabilities must sum to 1, got {total}")

    buckets = []
    upper = Decimal('0')
    for result, probability in probabilities:
        if probability <= 0:
            raise ValueError(f"Probability for {result!r} must be positive")
        upper += probability
        outcome = Wicket() if result == 'wicket' else Runs(int(result))
        buckets.append((float(upper), outcome))
    return buckets


class OutcomeGenerator:
    """
    Draws ball outcomes from a fixed categorical distribution.

    The random source is injected so tests can seed it or replace it.
    """

    def __init__(self, rng: Optional[random.Random] = None,
                 probabilities=OUTCOME_PROBABILITIES):
        self.rng = rng or random.Random()
        self.buckets = _build_buckets(probabilities)

    def draw(self) -> Outcome:
        """Draw one ball outcome."""
        roll = self.rng.random()
        for upper, outcome in self.buckets:
            if roll < upper:
                return outcome
        # Only reachable through float rounding of the last bound
        return self.buckets[-1][1]

    def draw_detailed(self) -> BallCall:
        """Draw one ball outcome together with its commentary."""
        return self.commentate(self.draw())

    def commentate(self, outcome: Outcome) -> BallCall:
        """Describe an outcome the way a commentator would."""
        shot = self.rng.choice(SHOT_TYPES)
        bowler = self.rng.choice(BOWLER_TYPES)

        if isinstance(outcome, Wicket):
            dismissal = self.rng.choice(DISMISSAL_TYPES)
            if dismissal == "caught":
                fielder = self.rng.choice(FIELDERS)
                description = f"Beautiful {bowler} delivery! Caught by {fielder} at {shot} position."
            else:
                description = f"OUT! {dismissal.upper()}! Great {bowler} bowling."
        elif outcome.value == 6:
            description = f"HUGE SIX! Massive {shot} over the boundary!"
        elif outcome.value == 4:
            description = f"FOUR! Elegant {shot} through the covers."
        elif outcome.value == 0:
            description = f"Dot ball. Good {bowler} delivery, defended well."
        else:
            fielder = self.rng.choice(FIELDERS)
            plural = "s" if outcome.value > 1 else ""
            description = f"{outcome.value} run{plural}. {shot.capitalize()} to {fielder}."

        return BallCall(outcome=outcome, description=description,
                        shot_type=shot, bowler_type=bowler)


# ==================== PAYOUTS ====================

def settles(category: str, outcome: Outcome) -> bool:
    """
    Check whether a prediction matches the drawn outcome.

    Args:
        category: Prediction type key (e.g. '6_runs', 'wicket', 'dot_ball')
        outcome: Drawn ball outcome

    Returns:
        True if the prediction wins, False otherwise (including unknown categories)
    """
    prediction = PREDICTION_TYPES.get(category)
    if prediction is None:
        return False

    if prediction['runs'] is None:
        return isinstance(outcome, Wicket)
    return isinstance(outcome, Runs) and outcome.value == prediction['runs']


def winnings(category: str, stake: int) -> int:
    """Gross payout for a winning stake, 0 for an unknown category."""
    prediction = PREDICTION_TYPES.get(category)
    if prediction is None:
        return 0
    return math.floor(stake * prediction['multiplier'])


def validate_stake(category: str, stake: int):
    """Raise if the stake is outside the limits of the prediction type."""
    prediction = PREDICTION_TYPES.get(category)
    if prediction is None:
        raise UnknownPredictionError(f"Unknown prediction type: {category}")

    if stake < prediction['min_bet'] or stake > prediction['max_bet']:
        raise InvalidStakeError(
            f"{prediction['label']} accepts stakes from {prediction['min_bet']} "
            f"to {prediction['max_bet']} coins"
        )
