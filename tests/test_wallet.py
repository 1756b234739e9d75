"""
Test suite for admin coin adjustments and user reporting queries
Tests wallet.py and the user queries in database.py
"""

import pytest

from cricket_bot import wallet
from cricket_bot.config import INITIAL_COINS
from cricket_bot.errors import InsufficientFundsError, InvalidStakeError, NotFoundError

from conftest import ADMIN_ID, OTHER_PLAYER_ID, PLAYER_ID


class TestUsers:
    """Tests for user registration and balance statements."""

    def test_first_contact_registers_with_starting_coins(self, store):
        user, created = store.get_or_create_user(PLAYER_ID, "alice")
        assert created
        assert user.balance == INITIAL_COINS
        assert (user.wins, user.losses) == (0, 0)

    def test_second_contact_refreshes_name(self, store, player):
        user, created = store.get_or_create_user(PLAYER_ID, "alice_renamed")
        assert not created
        assert user.display_name == "alice_renamed"

    def test_get_unknown_user(self, store):
        with pytest.raises(NotFoundError):
            store.get_user(424242)

    def test_debit_requires_funds(self, store, player):
        store.set_balance(PLAYER_ID, 30)
        assert store.debit(PLAYER_ID, 30) == 0
        with pytest.raises(InsufficientFundsError):
            store.debit(PLAYER_ID, 1)
        assert store.get_user(PLAYER_ID).balance == 0

    def test_debit_unknown_user(self, store):
        with pytest.raises(NotFoundError):
            store.debit(424242, 10)

    def test_top_users_ordered_by_balance(self, store, player, other_player):
        store.set_balance(OTHER_PLAYER_ID, INITIAL_COINS + 500)
        top = store.top_users()
        assert [u.id for u in top] == [OTHER_PLAYER_ID, PLAYER_ID]


class TestAddCoins:
    """Tests for crediting coins."""

    def test_add_coins(self, store, player):
        new_balance = wallet.add_coins(store, ADMIN_ID, PLAYER_ID, 500)

        assert new_balance == INITIAL_COINS + 500
        assert store.get_user(PLAYER_ID).balance == INITIAL_COINS + 500

        actions = store.find_admin_actions('add_coins')
        assert len(actions) == 1
        assert actions[0].target_user_id == PLAYER_ID
        assert actions[0].amount == 500

    @pytest.mark.parametrize("amount", [0, -10])
    def test_non_positive_amount_rejected(self, store, player, amount):
        with pytest.raises(InvalidStakeError):
            wallet.add_coins(store, ADMIN_ID, PLAYER_ID, amount)
        assert store.find_admin_actions('add_coins') == []

    def test_unknown_user(self, store):
        with pytest.raises(NotFoundError):
            wallet.add_coins(store, ADMIN_ID, 424242, 100)


class TestResetCoins:
    """Tests for resetting balances."""

    def test_reset_coins(self, store, player):
        store.set_balance(PLAYER_ID, 3)
        assert wallet.reset_coins(store, ADMIN_ID, PLAYER_ID) == INITIAL_COINS
        assert store.get_user(PLAYER_ID).balance == INITIAL_COINS
        assert len(store.find_admin_actions('reset_coins')) == 1

    def test_unknown_user(self, store):
        with pytest.raises(NotFoundError):
            wallet.reset_coins(store, ADMIN_ID, 424242)
