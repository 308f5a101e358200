"""
Application store: the current user's application list.

Owns the canonical, ordered list of applications for the session and
provides create/update/move/delete plus per-stage queries for the board.
Persistence is not done here; listeners registered with subscribe() are
told about every change and decide what to write.
"""
import dataclasses
import logging
import time
import uuid
from typing import Any, Callable, Dict, Iterable, List, Optional

from .errors import NotFoundError, ValidationError
from .schema import Application, Stage, EDITABLE_APPLICATION_FIELDS, missing_fields

logger = logging.getLogger(__name__)

# Event names passed to listeners
CREATED = "created"
UPDATED = "updated"
MOVED = "moved"
DELETED = "deleted"


def make_application_id() -> str:
    """Sortable unique id (ms-precision timestamp + random hex)."""
    ts = int(time.time() * 1000)
    rand = uuid.uuid4().hex[:8]
    return f"{ts}-{rand}"


class ApplicationStore:
    """In-memory list of applications with change notification."""

    def __init__(self, applications: Optional[Iterable[Application]] = None):
        self._applications: List[Application] = list(applications or [])
        self._listeners: List[Callable[[str, Application], None]] = []

    # ── Listeners ─────────────────────────────────────────────────────────

    def subscribe(self, callback: Callable[[str, Application], None]) -> None:
        """Register a callback(event, application) run after every change."""
        self._listeners.append(callback)

    def _emit(self, event: str, application: Application, previous: List[Application]) -> None:
        """Run listeners; if one raises, restore the list as it was before the change."""
        try:
            for callback in self._listeners:
                callback(event, application)
        except Exception:
            self._applications = previous
            logger.error(f"Rolled back {event} of {application.id}: listener failed")
            raise

    # ── Queries ───────────────────────────────────────────────────────────

    def __len__(self) -> int:
        return len(self._applications)

    def all(self) -> List[Application]:
        return list(self._applications)

    def get(self, app_id: str) -> Optional[Application]:
        for application in self._applications:
            if application.id == app_id:
                return application
        return None

    def _index(self, app_id: str) -> int:
        for i, application in enumerate(self._applications):
            if application.id == app_id:
                return i
        raise NotFoundError(f"Application {app_id} not found")

    def list_by_stage(self, status) -> List[Application]:
        """Applications in one stage, in list order."""
        stage = Stage.parse(status)
        return [a for a in self._applications if a.status == stage]

    def board(self) -> Dict[Stage, List[Application]]:
        """Every stage mapped to its applications, in column order."""
        return {stage: self.list_by_stage(stage) for stage in Stage}

    def stats(self) -> Dict[str, Any]:
        """Header figures: total, placed, pending and per-stage counts."""
        by_stage = {stage.value: 0 for stage in Stage}
        for application in self._applications:
            by_stage[application.status.value] += 1
        placed = by_stage[Stage.PLACED.value]
        return {
            "total": len(self._applications),
            "placed": placed,
            "pending": len(self._applications) - placed,
            "by_stage": by_stage,
        }

    # ── Mutations ─────────────────────────────────────────────────────────

    def create(self, fields: Dict[str, Any]) -> Application:
        """
        Add a new application at the end of the list.

        Raises ValidationError when company, role or package is blank and
        InvalidStageError for an unknown status.
        """
        missing = missing_fields(fields)
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")
        status = Stage.parse(fields["status"]) if fields.get("status") else Stage.APPLIED

        app_id = make_application_id()
        while self.get(app_id) is not None:
            app_id = make_application_id()

        application = Application(
            id=app_id,
            company=str(fields["company"]).strip(),
            role=str(fields["role"]).strip(),
            package=str(fields["package"]).strip(),
            description=fields.get("description") or "",
            status=status,
        )
        previous = list(self._applications)
        self._applications.append(application)
        logger.info(f"Application created: {app_id} ({application.company}, {status.value})")
        self._emit(CREATED, application, previous)
        return application

    def update(self, app_id: str, fields: Dict[str, Any]) -> Application:
        """
        Replace the provided fields of an existing application.

        The id is immutable and the record keeps its position in the list.
        """
        index = self._index(app_id)
        current = self._applications[index]

        if "id" in fields and str(fields["id"]) != app_id:
            raise ValidationError("Application id cannot be changed")

        changes = {k: v for k, v in fields.items() if k in EDITABLE_APPLICATION_FIELDS}
        merged = {**current.to_dict(), **changes}
        missing = missing_fields(merged)
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")
        if "status" in changes and not changes["status"]:
            # Blank status means "not provided", as in create()
            del changes["status"]
        if "status" in changes:
            changes["status"] = Stage.parse(changes["status"])
        if "description" in changes:
            changes["description"] = changes["description"] or ""
        for name in ("company", "role", "package"):
            if name in changes:
                changes[name] = str(changes[name]).strip()

        updated = dataclasses.replace(current, **changes)
        if updated == current:
            return current

        previous = list(self._applications)
        self._applications[index] = updated
        logger.info(f"Application updated: {app_id}")
        self._emit(UPDATED, updated, previous)
        return updated

    def move(self, app_id: str, new_status) -> Application:
        """
        Move an application to another stage.

        Moving to the stage it is already in changes nothing and notifies
        nobody.
        """
        index = self._index(app_id)
        stage = Stage.parse(new_status)
        current = self._applications[index]
        if current.status == stage:
            return current

        moved = dataclasses.replace(current, status=stage)
        previous = list(self._applications)
        self._applications[index] = moved
        logger.info(f"Application moved: {app_id} {current.status.value} → {stage.value}")
        self._emit(MOVED, moved, previous)
        return moved

    def delete(self, app_id: str) -> None:
        """Remove an application. Unknown ids raise NotFoundError."""
        index = self._index(app_id)
        previous = list(self._applications)
        removed = self._applications.pop(index)
        logger.info(f"Application deleted: {app_id}")
        self._emit(DELETED, removed, previous)

    # ── Wholesale replacement (no notification) ───────────────────────────

    def load(self, applications: Iterable[Application]) -> None:
        """Replace the whole list, e.g. after login."""
        self._applications = list(applications)

    def clear(self) -> None:
        self._applications = []
