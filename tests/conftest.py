"""
Pytest fixtures for the cricket bot test suite.
Provides an in-memory store, session registry, generators, and seeded data.
"""

import random

import pytest

from cricket_bot.database import Store
from cricket_bot.game_logic import OutcomeGenerator
from cricket_bot.models import Runs, Wicket
from cricket_bot.services import GameServices
from cricket_bot.sessions import SessionRegistry

PLAYER_ID = 1001
OTHER_PLAYER_ID = 1002
ADMIN_ID = 9001


class ForcedGenerator(OutcomeGenerator):
    """Generator that bowls a scripted sequence of outcomes, repeating the last one."""

    def __init__(self, *outcomes):
        super().__init__(rng=random.Random(7))
        self.outcomes = list(outcomes) or [Runs(0)]

    def draw(self):
        if len(self.outcomes) > 1:
            return self.outcomes.pop(0)
        return self.outcomes[0]


@pytest.fixture(scope="function")
def store():
    """Fresh in-memory SQLite store with all tables created."""
    store = Store("sqlite://")
    store.init_db()
    yield store
    store.engine.dispose()


@pytest.fixture(scope="function")
def sessions():
    return SessionRegistry()


@pytest.fixture(scope="function")
def seeded_generator():
    return OutcomeGenerator(rng=random.Random(42))


@pytest.fixture(scope="function")
def forced_generator():
    """Factory for a generator that bowls the given outcomes."""
    def _make(*outcomes):
        return ForcedGenerator(*outcomes)
    return _make


@pytest.fixture(scope="function")
def player(store):
    """Registered player holding the starting balance."""
    user, _ = store.get_or_create_user(PLAYER_ID, "alice")
    return user


@pytest.fixture(scope="function")
def other_player(store):
    user, _ = store.get_or_create_user(OTHER_PLAYER_ID, "bob")
    return user


@pytest.fixture(scope="function")
def live_match(store):
    match, _ = store.start_match("Test Match", 20)
    return match


@pytest.fixture(scope="function")
def make_services(store, sessions):
    """Factory for GameServices sharing the test store and registry."""
    def _make(*outcomes):
        generator = ForcedGenerator(*outcomes) if outcomes else OutcomeGenerator(rng=random.Random(42))
        return GameServices(store, sessions=sessions, generator=generator)
    return _make


@pytest.fixture(scope="function")
def six_services(make_services):
    return make_services(Runs(6))


@pytest.fixture(scope="function")
def wicket_services(make_services):
    return make_services(Wicket())
