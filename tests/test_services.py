"""
Test suite for service wiring
Tests GameServices in services.py
"""

from cricket_bot.services import GameServices
from cricket_bot.sessions import SessionRegistry


class TestGameServices:
    """Tests for sharing one registry across the services."""

    def test_keeps_injected_empty_registry(self, store):
        """Test a registry with no sessions yet is still the one every service uses."""
        registry = SessionRegistry()

        services = GameServices(store, sessions=registry)

        assert services.sessions is registry
        assert services.settlement.sessions is registry
        assert services.matches.sessions is registry

    def test_creates_registry_when_none_given(self, store):
        services = GameServices(store)
        assert isinstance(services.sessions, SessionRegistry)
        assert services.settlement.sessions is services.sessions

    def test_join_through_shared_registry_reaches_settlement(self, store, sessions,
                                                             six_services, player, live_match):
        sessions.join(player.id, live_match.id)
        sessions.set_prediction(player.id, '6_runs')

        result = six_services.settlement.settle(player.id)

        assert result.is_winner
