"""
PlacementTracker: one user's board, wired together.

    session  → login/signup/logout, saves on every store change
    store    → the application list the board renders
    resolver → drag-end events to stage moves
"""
from typing import Optional

from .config import Config
from .persistence import MemoryBackend, PersistenceAdapter, SQLiteBackend
from .resolver import StageResolver
from .session import SessionManager
from .store import ApplicationStore


class PlacementTracker:
    """Composition root for the tracker components."""

    def __init__(self, adapter: Optional[PersistenceAdapter] = None):
        self.adapter = adapter or PersistenceAdapter(MemoryBackend())
        self.store = ApplicationStore()
        self.session = SessionManager(self.adapter, self.store)
        self.resolver = StageResolver(self.store)

    @classmethod
    def from_config(cls, cfg: Config) -> "PlacementTracker":
        """Build a tracker on the configured backend and restore any session."""
        if cfg.storage_backend == "memory":
            backend = MemoryBackend()
        else:
            backend = SQLiteBackend(cfg.db_path)
        tracker = cls(PersistenceAdapter(backend))
        tracker.session.restore()
        return tracker
