# models.py
# Ball outcomes, player sessions, and settlement results for the cricket bot

from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class Runs:
    """A ball where the batting side scored `value` runs (0 is a dot ball)."""
    value: int

    def describe(self) -> str:
        if self.value == 0:
            return "Dot ball"
        if self.value == 1:
            return "1 run"
        return f"{self.value} runs"


@dataclass(frozen=True)
class Wicket:
    """A ball that took a wicket."""

    def describe(self) -> str:
        return "Wicket"


Outcome = Union[Runs, Wicket]


@dataclass(frozen=True)
class BallCall:
    """A drawn outcome together with its commentary."""
    outcome: Outcome
    description: str
    shot_type: str
    bowler_type: str


@dataclass(frozen=True)
class MatchProgress:
    """Match counters after a ball has been bowled."""
    match_id: int
    over: int
    ball: int
    score: int
    wickets: int
    run_rate: float
    completed: bool = False

    @property
    def label(self) -> str:
        return f"{self.over}.{self.ball}"


class Session:
    """Represents a user's seat in a live match."""

    def __init__(self, user_id: int, match_id: int, stake: int):
        """
        Initialize a new match session.

        Args:
            user_id: Telegram user ID
            match_id: ID of the joined match
            stake: Coins wagered on each prediction
        """
        self.user_id = user_id
        self.match_id = match_id
        self.stake = stake
        self.prediction: Optional[str] = None
        self.last_prediction: Optional[str] = None

    def __repr__(self):
        return (f"Session(user_id={self.user_id}, match_id={self.match_id}, "
                f"stake={self.stake}, prediction={self.prediction!r})")


@dataclass(frozen=True)
class SettlementResult:
    """Everything the presentation layer needs to report a settled ball."""
    user_id: int
    match_id: int
    category: str
    stake: int
    call: BallCall
    is_winner: bool
    winnings: int
    balance: int
    progress: MatchProgress
    prediction_id: int

    @property
    def outcome(self) -> Outcome:
        return self.call.outcome
