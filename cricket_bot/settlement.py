# settlement.py
# Resolves a user's pending prediction against the next ball of the live match

import logging
from typing import Optional

from .config import MAX_CONFLICT_RETRIES
from .database import Store
from .errors import (
    ConcurrencyConflictError,
    InsufficientFundsError,
    MatchNotLiveError,
    NoPendingPredictionError,
    StoreUnavailableError,
)
from .game_logic import OutcomeGenerator, settles, validate_stake, winnings
from .match_state import MatchStateAdvancer
from .models import BallCall, MatchProgress, SettlementResult
from .sessions import SessionRegistry

logger = logging.getLogger(__name__)


class SettlementOrchestrator:
    """
    Runs one settlement: debit, draw, pay out, advance the match, record.

    Balance changes are atomic deltas. If anything fails once the stake has
    been taken, the deltas applied so far are reversed before the error
    propagates, so coins never vanish.
    """

    def __init__(self, store: Store, sessions: SessionRegistry,
                 generator: Optional[OutcomeGenerator] = None,
                 advancer: Optional[MatchStateAdvancer] = None,
                 max_retries: int = MAX_CONFLICT_RETRIES):
        self.store = store
        self.sessions = sessions
        self.generator = generator if generator is not None else OutcomeGenerator()
        self.advancer = advancer if advancer is not None else MatchStateAdvancer(store)
        self.max_retries = max_retries

    def settle(self, user_id: int) -> SettlementResult:
        """
        Settle the user's pending prediction.

        Args:
            user_id: Telegram user ID

        Returns:
            SettlementResult describing the ball, the payout and the new balance

        Raises:
            NoPendingPredictionError: no session or no prediction selected
            InsufficientFundsError: balance lower than the stake
            NotFoundError: user or match missing
            MatchNotLiveError: the joined match is not live
            InvalidStakeError: stake outside the prediction type's limits
            StoreUnavailableError: the database failed; any debit was refunded
        """
        session = self.sessions.get(user_id)
        if session is None or session.prediction is None:
            raise NoPendingPredictionError("Pick a prediction before bowling")

        category, stake, match_id = session.prediction, session.stake, session.match_id

        user = self.store.get_user(user_id)
        if user.balance < stake:
            raise InsufficientFundsError(user.balance, stake)

        match = self.store.get_match(match_id)
        if match.status != 'live':
            raise MatchNotLiveError(f"Match '{match.name}' is {match.status}")

        validate_stake(category, stake)

        self.store.debit(user_id, stake)
        applied = {'balance': -stake, 'wins': 0, 'losses': 0}

        try:
            call = self.generator.draw_detailed()
            is_winner = settles(category, call.outcome)
            payout = winnings(category, stake) if is_winner else 0

            if is_winner:
                balance = self.store.apply_user_delta(user_id, balance=payout, wins=1)
                applied['balance'] += payout
                applied['wins'] = 1
            else:
                balance = self.store.apply_user_delta(user_id, losses=1)
                applied['losses'] = 1

            progress = self._advance(match_id, call)

            prediction_id = self.store.record_prediction(
                user_id=user_id,
                match_id=match_id,
                over_number=progress.over,
                ball_number=progress.ball,
                category=category,
                actual_result=call.description,
                stake=stake,
                winnings=payout,
                is_winner=is_winner,
            )
        except Exception:
            self._compensate(user_id, applied)
            raise

        self.sessions.clear_prediction(user_id)

        logger.info(
            f"Settled {category} x{stake} for user {user_id} on ball {progress.label} "
            f"of match {match_id}: {call.outcome.describe()}, "
            f"{'won ' + str(payout) if is_winner else 'lost'}"
        )

        return SettlementResult(
            user_id=user_id,
            match_id=match_id,
            category=category,
            stake=stake,
            call=call,
            is_winner=is_winner,
            winnings=payout,
            balance=balance,
            progress=progress,
            prediction_id=prediction_id,
        )

    def _advance(self, match_id: int, call: BallCall) -> MatchProgress:
        for attempt in range(1, self.max_retries + 2):
            try:
                return self.advancer.advance(match_id, call.outcome, call.description)
            except ConcurrencyConflictError as e:
                logger.warning(f"{e} (attempt {attempt} of {self.max_retries + 1})")
        raise StoreUnavailableError(f"Match {match_id} is too busy right now, try again")

    def _compensate(self, user_id: int, applied: dict):
        """Reverse the balance and counter deltas already applied to a user."""
        try:
            self.store.apply_user_delta(
                user_id,
                balance=-applied['balance'],
                wins=-applied['wins'],
                losses=-applied['losses'],
            )
        except Exception as e:
            logger.critical(
                f"Could not restore user {user_id} after failed settlement "
                f"(balance {-applied['balance']:+d}, wins {-applied['wins']:+d}, "
                f"losses {-applied['losses']:+d}): {e}"
            )
            return
        logger.warning(f"Settlement for user {user_id} failed, restored {-applied['balance']} coins")
