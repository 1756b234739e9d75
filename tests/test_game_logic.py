"""
Test suite for ball outcome generation and payout rules
Tests game_logic.py
"""

import math
import random
from collections import Counter
from decimal import Decimal

import pytest

from cricket_bot.config import PREDICTION_TYPES
from cricket_bot.errors import InvalidStakeError, UnknownPredictionError
from cricket_bot.game_logic import OutcomeGenerator, settles, validate_stake, winnings
from cricket_bot.models import Runs, Wicket


class StubRandom(random.Random):
    """Random source whose random() returns a fixed value."""

    def __init__(self, value):
        super().__init__(0)
        self.value = value

    def random(self):
        return self.value


class TestOutcomeGenerator:
    """Tests for drawing ball outcomes."""

    @pytest.mark.parametrize("roll, expected", [
        (0.0, Wicket()),
        (0.0999, Wicket()),
        (0.10, Runs(6)),
        (0.2499, Runs(6)),
        (0.25, Runs(4)),
        (0.45, Runs(2)),
        (0.65, Runs(1)),
        (0.80, Runs(0)),
        (0.9999, Runs(0)),
    ])
    def test_roll_selects_bucket(self, roll, expected):
        """Test each bucket boundary maps to the right outcome."""
        generator = OutcomeGenerator(rng=StubRandom(roll))
        assert generator.draw() == expected

    def test_seeded_generator_is_reproducible(self):
        """Test two generators with the same seed bowl the same balls."""
        first = OutcomeGenerator(rng=random.Random(123))
        second = OutcomeGenerator(rng=random.Random(123))
        assert [first.draw() for _ in range(50)] == [second.draw() for _ in range(50)]

    def test_frequencies_follow_distribution(self, seeded_generator):
        """Test a large sample lands near the configured probabilities."""
        draws = 20000
        counts = Counter(seeded_generator.draw() for _ in range(draws))

        expected = {
            Wicket(): 0.10,
            Runs(6): 0.15,
            Runs(4): 0.20,
            Runs(2): 0.20,
            Runs(1): 0.15,
            Runs(0): 0.20,
        }
        assert set(counts) == set(expected)
        for outcome, probability in expected.items():
            assert abs(counts[outcome] / draws - probability) < 0.02

    def test_probabilities_must_sum_to_one(self):
        """Test a distribution that does not sum to 1 is rejected."""
        with pytest.raises(ValueError):
            OutcomeGenerator(probabilities=(('wicket', Decimal('0.5')), (0, Decimal('0.4'))))

    def test_draw_detailed_describes_outcome(self):
        """Test commentary accompanies the drawn outcome."""
        generator = OutcomeGenerator(rng=StubRandom(0.12))
        call = generator.draw_detailed()
        assert call.outcome == Runs(6)
        assert "SIX" in call.description
        assert call.shot_type
        assert call.bowler_type

    def test_commentary_for_wicket(self, seeded_generator):
        call = seeded_generator.commentate(Wicket())
        assert call.outcome == Wicket()
        assert call.description


class TestPayouts:
    """Tests for settling predictions and computing winnings."""

    @pytest.mark.parametrize("category, outcome, expected", [
        ('6_runs', Runs(6), True),
        ('6_runs', Runs(4), False),
        ('4_runs', Runs(4), True),
        ('2_runs', Runs(2), True),
        ('2_runs', Runs(1), False),
        ('dot_ball', Runs(0), True),
        ('dot_ball', Wicket(), False),
        ('wicket', Wicket(), True),
        ('wicket', Runs(0), False),
        ('no_such_category', Runs(6), False),
    ])
    def test_settles(self, category, outcome, expected):
        assert settles(category, outcome) is expected

    def test_winnings_is_floor_of_stake_times_multiplier(self):
        """Test winnings equal floor(stake * multiplier) for every category."""
        for category, prediction in PREDICTION_TYPES.items():
            for stake in (1, 7, 10, 15, 33, 99, 150):
                assert winnings(category, stake) == math.floor(stake * prediction['multiplier'])

    def test_winnings_examples(self):
        assert winnings('6_runs', 10) == 30
        assert winnings('2_runs', 15) == 22
        assert winnings('wicket', 20) == 100

    def test_winnings_unknown_category_is_zero(self):
        """Test an unknown category pays nothing and never raises."""
        assert winnings('no_such_category', 100) == 0


class TestValidateStake:
    """Tests for per-category stake limits."""

    def test_within_limits(self):
        validate_stake('6_runs', 10)
        validate_stake('6_runs', 300)
        validate_stake('wicket', 20)

    @pytest.mark.parametrize("category, stake", [
        ('6_runs', 5),
        ('6_runs', 301),
        ('wicket', 10),
        ('2_runs', 101),
    ])
    def test_outside_limits(self, category, stake):
        with pytest.raises(InvalidStakeError):
            validate_stake(category, stake)

    def test_unknown_category(self):
        with pytest.raises(UnknownPredictionError):
            validate_stake('no_such_category', 10)
