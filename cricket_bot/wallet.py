# wallet.py
# Admin coin adjustments with an audit trail

import logging

from .config import INITIAL_COINS
from .database import Store
from .errors import InvalidStakeError

logger = logging.getLogger(__name__)


def add_coins(store: Store, admin_id: int, user_id: int, amount: int) -> int:
    """
    Credit coins to a user on behalf of an admin.

    Args:
        store: Database store
        admin_id: Admin performing the action
        user_id: User receiving the coins
        amount: Positive number of coins

    Returns:
        User's new balance
    """
    if amount <= 0:
        raise InvalidStakeError("Amount must be a positive number")

    new_balance = store.apply_user_delta(user_id, balance=amount)
    store.record_admin_action(
        admin_id, 'add_coins', target_user_id=user_id, amount=amount,
        description=f"Admin added {amount} coins"
    )
    logger.info(f"Admin {admin_id} added {amount} coins to user {user_id}")
    return new_balance


def reset_coins(store: Store, admin_id: int, user_id: int) -> int:
    """Reset a user's balance to the starting amount."""
    new_balance = store.set_balance(user_id, INITIAL_COINS)
    store.record_admin_action(
        admin_id, 'reset_coins', target_user_id=user_id, amount=INITIAL_COINS,
        description=f"Admin reset coins to {INITIAL_COINS}"
    )
    logger.info(f"Admin {admin_id} reset coins of user {user_id} to {INITIAL_COINS}")
    return new_balance
