# errors.py
# Typed errors raised by the game core and translated into replies by handlers


class CricketBotError(Exception):
    """Base class for every error the game core raises."""


class NotFoundError(CricketBotError):
    """A referenced user or match does not exist."""


class ValidationError(CricketBotError):
    """The user asked for something the rules do not allow."""


class NoPendingPredictionError(ValidationError):
    """Settlement requested without a selected prediction."""


class NotJoinedError(ValidationError):
    """The user has not joined a match."""


class InvalidStakeError(ValidationError):
    """Stake is not a positive integer or is outside the category limits."""


class UnknownPredictionError(ValidationError):
    """Prediction category is not in the prediction-type table."""


class MatchStatusError(ValidationError):
    """The match is not in a status that allows the requested change."""


class MatchNotLiveError(MatchStatusError):
    """The match exists but is not accepting predictions."""


class InsufficientFundsError(CricketBotError):
    """The user's balance does not cover the stake."""

    def __init__(self, balance: int, stake: int):
        super().__init__(f"Balance {balance} is lower than stake {stake}")
        self.balance = balance
        self.stake = stake


class StoreUnavailableError(CricketBotError):
    """The database could not be reached or a write failed."""


class ConcurrencyConflictError(CricketBotError):
    """A conditional update lost the race against another writer."""
