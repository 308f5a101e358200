"""
Persistence adapter: per-user durable records.

Three records, each a JSON document under a fixed key:

  placement-tracker-users           registry of UserRecord dicts
  placement-tracker-user            who is logged in ({name, email, college})
  placement-tracker-user-companies  {email: [application dicts]}

The adapter reads and writes whole documents through a small key/value
backend. SQLiteBackend is the durable one; MemoryBackend is used for
tests and throwaway sessions.
"""
import json
import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from .errors import AuthError, DuplicateUserError, StorageError
from .schema import Application, User, UserRecord

logger = logging.getLogger(__name__)

USERS_KEY = "placement-tracker-users"
CURRENT_USER_KEY = "placement-tracker-user"
APPLICATIONS_KEY = "placement-tracker-user-companies"


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Backends
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class MemoryBackend:
    """Dict-backed key/value store. Counts writes so tests can assert on them."""

    def __init__(self):
        self.data: Dict[str, str] = {}
        self.writes = 0

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value
        self.writes += 1

    def remove(self, key: str) -> None:
        self.data.pop(key, None)


def _connect(db_path: str) -> sqlite3.Connection:
    """Open a connection in WAL mode."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode = WAL")
    return conn


class SQLiteBackend:
    """SQLite-backed key/value store."""

    def __init__(self, db_path: str = None):
        if db_path is None:
            db_path = str(Path.home() / ".local" / "share" / "placement-tracker" / "tracker.db")
        self.db_path = db_path
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    def _init_schema(self):
        with _connect(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS tracker_state (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
            conn.commit()

    def get(self, key: str) -> Optional[str]:
        with _connect(self.db_path) as conn:
            row = conn.execute(
                "SELECT value FROM tracker_state WHERE key = ? LIMIT 1",
                (key,)
            ).fetchone()
        return row["value"] if row else None

    def set(self, key: str, value: str) -> None:
        now = datetime.now(timezone.utc).isoformat()
        with _connect(self.db_path) as conn:
            conn.execute("""
                INSERT INTO tracker_state (key, value, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET value=excluded.value, updated_at=excluded.updated_at
            """, (key, value, now))
            conn.commit()

    def remove(self, key: str) -> None:
        with _connect(self.db_path) as conn:
            conn.execute("DELETE FROM tracker_state WHERE key = ?", (key,))
            conn.commit()


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# PersistenceAdapter
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class PersistenceAdapter:
    """
    Maps users, the session marker and per-user application lists to
    backend records.

    Never holds application state of its own: lists are read on load and
    written whole on save.
    """

    def __init__(self, backend=None):
        self.backend = backend if backend is not None else MemoryBackend()

    def _read(self, key: str, default, strict: bool = False):
        """
        Decode one record. Malformed records read as `default`, unless
        `strict` (write paths), where they raise StorageError instead of
        being overwritten.
        """
        raw = self.backend.get(key)
        if raw is None:
            return default
        try:
            value = json.loads(raw)
        except (json.JSONDecodeError, TypeError) as e:
            problem = f"malformed record {key}: {e}"
        else:
            if isinstance(value, type(default)):
                return value
            problem = f"record {key}: expected {type(default).__name__}"
        if strict:
            logger.error(f"Refusing to overwrite {problem}")
            raise StorageError(f"Stored data is unreadable ({problem})")
        logger.warning(f"Ignoring {problem}")
        return default

    def _write(self, key: str, value: Any) -> None:
        self.backend.set(key, json.dumps(value, ensure_ascii=False))

    # ── User registry ─────────────────────────────────────────────────────

    def load_users(self) -> List[UserRecord]:
        """The full registry, in signup order (empty if nothing stored)."""
        return [UserRecord.from_dict(u) for u in self._read(USERS_KEY, []) if isinstance(u, dict)]

    def register_user(self, record: UserRecord) -> None:
        """
        Append a user to the registry. Raises DuplicateUserError, or
        StorageError when the stored registry cannot be read.
        """
        users = self._read(USERS_KEY, [], strict=True)
        if any(isinstance(u, dict) and u.get("email") == record.email for u in users):
            raise DuplicateUserError("User with this email already exists")
        users.append(record.to_dict())
        self._write(USERS_KEY, users)
        logger.info(f"User registered: {record.email}")

    def authenticate(self, email: str, password: str) -> User:
        """Exact email and password match. Raises AuthError."""
        # Plaintext comparison: passwords are stored as entered
        for record in self.load_users():
            if record.email == email and record.password == password:
                return record.public()
        raise AuthError("Invalid email or password")

    # ── Per-user applications ─────────────────────────────────────────────

    def _load_mapping(self) -> Dict[str, Any]:
        return self._read(APPLICATIONS_KEY, {})

    def load_applications(self, email: str) -> List[Application]:
        """That user's saved list, or an empty list."""
        saved = self._load_mapping().get(email) or []
        if not isinstance(saved, list):
            logger.warning(f"Ignoring malformed application list for {email}")
            return []
        return [Application.from_dict(a) for a in saved if isinstance(a, dict)]

    def save_applications(self, email: str, applications: List[Application]) -> None:
        """Overwrite one user's list; other users' entries are left as they are."""
        mapping = self._read(APPLICATIONS_KEY, {}, strict=True)
        mapping[email] = [a.to_dict() for a in applications]
        self._write(APPLICATIONS_KEY, mapping)
        logger.debug(f"Saved {len(applications)} applications for {email}")

    # ── Session marker ────────────────────────────────────────────────────

    def save_current_user(self, user: User) -> None:
        self._write(CURRENT_USER_KEY, user.to_dict())

    def load_current_user(self) -> Optional[User]:
        data = self._read(CURRENT_USER_KEY, {})
        if not data.get("email"):
            return None
        return User.from_dict(data)

    def clear_current_user(self) -> None:
        self.backend.remove(CURRENT_USER_KEY)
