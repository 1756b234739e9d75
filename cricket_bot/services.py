# services.py
# Wires the store, session registry and game services together

from typing import Optional

from .config import DATABASE_URL
from .database import Store
from .game_logic import OutcomeGenerator
from .match_state import MatchService, MatchStateAdvancer
from .sessions import SessionRegistry
from .settlement import SettlementOrchestrator


class GameServices:
    """Everything a handler needs, kept in the application's bot_data."""

    def __init__(self, store: Store, sessions: Optional[SessionRegistry] = None,
                 generator: Optional[OutcomeGenerator] = None):
        self.store = store
        self.sessions = sessions if sessions is not None else SessionRegistry()
        self.advancer = MatchStateAdvancer(store)
        self.matches = MatchService(store, self.sessions)
        self.settlement = SettlementOrchestrator(
            store, self.sessions, generator=generator, advancer=self.advancer
        )

    @classmethod
    def from_url(cls, url: str = DATABASE_URL) -> "GameServices":
        store = Store(url)
        store.init_db()
        return cls(store)
