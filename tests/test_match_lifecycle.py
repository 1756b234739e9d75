"""
Test suite for admin match lifecycle
Tests MatchService in match_state.py and the match queries in database.py
"""

import random

import pytest

from cricket_bot.errors import CricketBotError, MatchStatusError, NotFoundError
from cricket_bot.match_state import MatchService

from conftest import ADMIN_ID


@pytest.fixture
def service(store, sessions):
    return MatchService(store, sessions)


def live_ids(store):
    return [m.id for m in store.find_matches(status='live')]


class TestStartMatch:
    """Tests for starting matches."""

    def test_start_creates_fresh_live_match(self, service, store):
        match = service.start_match(ADMIN_ID, "Final", 5)

        assert match.status == 'live'
        assert match.total_overs == 5
        assert (match.current_over, match.current_ball) == (0, 0)
        assert (match.score, match.wickets) == (0, 0)
        assert match.started_at is not None
        assert live_ids(store) == [match.id]

    def test_start_completes_previous_live_match(self, service, store, sessions):
        """Test starting a match while one is live completes the old one first."""
        old = service.start_match(ADMIN_ID, "Old", 20)
        sessions.join(1, old.id)

        new = service.start_match(ADMIN_ID, "New", 20)

        old = store.get_match(old.id)
        assert old.status == 'completed'
        assert old.ended_at is not None
        assert live_ids(store) == [new.id]
        assert sessions.get(1) is None

    def test_start_rejects_non_positive_overs(self, service):
        with pytest.raises(ValueError):
            service.start_match(ADMIN_ID, "Bad", 0)

    def test_start_is_audited(self, service, store):
        match = service.start_match(ADMIN_ID, "Audited", 20)
        actions = store.find_admin_actions('start_match')
        assert len(actions) == 1
        assert actions[0].admin_id == ADMIN_ID
        assert actions[0].amount == match.id


class TestStopPauseResume:
    """Tests for stopping, pausing and resuming matches."""

    def test_stop_live_match(self, service, store):
        match = service.start_match(ADMIN_ID, "Stop Me", 20)
        stopped = service.stop_match(ADMIN_ID)

        assert stopped.id == match.id
        assert stopped.status == 'completed'
        assert stopped.ended_at is not None
        assert store.get_live_match() is None

    def test_stop_without_active_match(self, service):
        with pytest.raises(NotFoundError):
            service.stop_match(ADMIN_ID)

    def test_stop_paused_match(self, service):
        match = service.start_match(ADMIN_ID, "Paused", 20)
        service.pause_match(ADMIN_ID)
        assert service.stop_match(ADMIN_ID).id == match.id

    def test_pause_and_resume(self, service, store):
        match = service.start_match(ADMIN_ID, "Break", 20)

        paused = service.pause_match(ADMIN_ID)
        assert paused.status == 'paused'
        assert store.get_live_match() is None

        resumed = service.resume_match(ADMIN_ID)
        assert resumed.id == match.id
        assert resumed.status == 'live'

    def test_pause_without_live_match(self, service):
        with pytest.raises(NotFoundError):
            service.pause_match(ADMIN_ID)

    def test_resume_without_paused_match(self, service):
        with pytest.raises(NotFoundError):
            service.resume_match(ADMIN_ID)

    def test_resume_completes_other_live_match(self, service, store):
        first = service.start_match(ADMIN_ID, "First", 20)
        service.pause_match(ADMIN_ID)
        second = service.start_match(ADMIN_ID, "Second", 20)

        service.resume_match(ADMIN_ID, first.id)

        assert live_ids(store) == [first.id]
        assert store.get_match(second.id).status == 'completed'

    def test_resume_completed_match_rejected(self, service):
        match = service.start_match(ADMIN_ID, "Done", 20)
        service.stop_match(ADMIN_ID)
        with pytest.raises(MatchStatusError):
            service.resume_match(ADMIN_ID, match.id)

    def test_resume_unknown_match(self, service):
        with pytest.raises(NotFoundError):
            service.resume_match(ADMIN_ID, 999)


class TestSingleLiveMatch:
    """At most one match is ever live."""

    def test_random_lifecycle_sequence(self, service, store):
        rng = random.Random(2024)
        operations = [
            lambda: service.start_match(ADMIN_ID, "Match", 20),
            lambda: service.stop_match(ADMIN_ID),
            lambda: service.pause_match(ADMIN_ID),
            lambda: service.resume_match(ADMIN_ID),
        ]
        for _ in range(200):
            try:
                rng.choice(operations)()
            except CricketBotError:
                pass
            assert len(live_ids(store)) <= 1
