"""
Session manager: who is logged in.

Two states, ANONYMOUS and AUTHENTICATED. Logging in loads the user's
applications into the store; logging out empties the store. While a user
is authenticated every store change is saved for that user.
"""
import logging
from enum import Enum
from typing import Optional

from .errors import ValidationError
from .persistence import PersistenceAdapter
from .schema import Application, User, UserRecord
from .store import ApplicationStore

logger = logging.getLogger(__name__)


class SessionState(Enum):
    ANONYMOUS = "anonymous"
    AUTHENTICATED = "authenticated"


class SessionManager:
    """Login/signup/logout transitions and save-on-change wiring."""

    def __init__(self, adapter: PersistenceAdapter, store: ApplicationStore):
        self.adapter = adapter
        self.store = store
        self.user: Optional[User] = None
        store.subscribe(self._on_store_change)

    @property
    def state(self) -> SessionState:
        return SessionState.AUTHENTICATED if self.user else SessionState.ANONYMOUS

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    def _on_store_change(self, event: str, application: Application) -> None:
        # Empty lists are saved too
        if self.user is None:
            return
        self.adapter.save_applications(self.user.email, self.store.all())

    def _enter(self, user: User, applications) -> User:
        self.adapter.save_current_user(user)
        self.user = user
        self.store.load(applications)
        return user

    def login(self, email: str, password: str) -> User:
        """
        Authenticate and load the user's applications.

        Raises ValidationError for a blank email/password and AuthError on
        mismatch; the session is left as it was in both cases.
        """
        if not email or not password:
            raise ValidationError("Please enter email and password")
        user = self.adapter.authenticate(email, password)
        self._enter(user, self.adapter.load_applications(user.email))
        logger.info(f"Logged in: {user.email} ({len(self.store)} applications)")
        return user

    def signup(
        self,
        name: str,
        email: str,
        password: str,
        college: str,
        branch: str = "",
    ) -> User:
        """Register a new user and log them in with an empty board."""
        required = {"name": name, "email": email, "password": password, "college": college}
        missing = [k for k, v in required.items() if not v or not str(v).strip()]
        if missing:
            raise ValidationError(f"Please fill in all fields: {', '.join(missing)}")

        record = UserRecord(
            name=name,
            email=email,
            password=password,
            college=college,
            branch=branch or "",
        )
        self.adapter.register_user(record)
        # Overwrite anything left under this email so the board really starts empty
        self.adapter.save_applications(record.email, [])
        user = self._enter(record.public(), [])
        logger.info(f"Signed up: {user.email}")
        return user

    def logout(self) -> None:
        """Forget the current user. Saved applications stay on disk."""
        if self.user is not None:
            logger.info(f"Logged out: {self.user.email}")
        self.adapter.clear_current_user()
        self.user = None
        self.store.clear()

    def restore(self) -> Optional[User]:
        """
        Resume a session from the stored marker without re-authenticating.

        Called on startup. Returns the restored user, or None.
        """
        user = self.adapter.load_current_user()
        if user is None:
            self.user = None
            self.store.clear()
            return None
        self.user = user
        self.store.load(self.adapter.load_applications(user.email))
        logger.info(f"Session restored: {user.email}")
        return user
