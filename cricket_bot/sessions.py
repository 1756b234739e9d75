# sessions.py
# In-memory registry of which match each user has joined and what they picked

import asyncio
import logging
from collections import defaultdict
from typing import Dict, List, Optional

from .config import DEFAULT_STAKE, PREDICTION_TYPES
from .errors import (
    InvalidStakeError,
    NoPendingPredictionError,
    NotJoinedError,
    UnknownPredictionError,
)
from .models import Session

logger = logging.getLogger(__name__)


class SessionRegistry:
    """
    Process-local map from user ID to their match session.

    Nothing here is persisted: a restart forgets every session and users
    simply join again.
    """

    def __init__(self, default_stake: int = DEFAULT_STAKE):
        self.default_stake = default_stake
        self._sessions: Dict[int, Session] = {}
        self._locks = defaultdict(asyncio.Lock)

    def join(self, user_id: int, match_id: int) -> Session:
        """
        Seat a user in a match.

        Rejoining the same match keeps the current stake and prediction;
        joining a different match starts over with the default stake.
        """
        session = self._sessions.get(user_id)
        if session is not None and session.match_id == match_id:
            return session

        session = Session(user_id, match_id, self.default_stake)
        self._sessions[user_id] = session
        logger.debug(f"User {user_id} joined match {match_id}")
        return session

    def get(self, user_id: int) -> Optional[Session]:
        return self._sessions.get(user_id)

    def _require(self, user_id: int) -> Session:
        session = self._sessions.get(user_id)
        if session is None:
            raise NotJoinedError("Join the live match first")
        return session

    def set_stake(self, user_id: int, amount: int) -> Session:
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise InvalidStakeError("Stake must be a positive whole number of coins")
        session = self._require(user_id)
        session.stake = amount
        return session

    def set_prediction(self, user_id: int, category: str) -> Session:
        """Select a prediction, raising the stake to the category minimum if needed."""
        session = self._require(user_id)
        prediction = PREDICTION_TYPES.get(category)
        if prediction is None:
            raise UnknownPredictionError(f"Unknown prediction type: {category}")
        session.prediction = category
        if session.stake < prediction['min_bet']:
            session.stake = prediction['min_bet']
        return session

    def repeat_prediction(self, user_id: int) -> Session:
        """Select the previously settled prediction again."""
        session = self._require(user_id)
        if session.prediction is None:
            if session.last_prediction is None:
                raise NoPendingPredictionError("No previous prediction to repeat")
            return self.set_prediction(user_id, session.last_prediction)
        return session

    def clear_prediction(self, user_id: int):
        session = self._sessions.get(user_id)
        if session is not None:
            if session.prediction is not None:
                session.last_prediction = session.prediction
            session.prediction = None

    def leave(self, user_id: int) -> Optional[Session]:
        session = self._sessions.pop(user_id, None)
        self._release_lock(user_id)
        return session

    def members(self, match_id: int) -> List[int]:
        """IDs of the users seated in a match."""
        return [uid for uid, s in self._sessions.items() if s.match_id == match_id]

    def end_match(self, match_id: int) -> int:
        """Forget every session seated in a match that is over."""
        user_ids = self.members(match_id)
        for user_id in user_ids:
            del self._sessions[user_id]
            self._release_lock(user_id)
        if user_ids:
            logger.info(f"Cleared {len(user_ids)} sessions of match {match_id}")
        return len(user_ids)

    def lock_for(self, user_id: int) -> asyncio.Lock:
        """Lock that serialises one user's actions."""
        return self._locks[user_id]

    def _release_lock(self, user_id: int):
        # A held lock still guards an action in flight and stays
        lock = self._locks.get(user_id)
        if lock is not None and not lock.locked():
            del self._locks[user_id]
