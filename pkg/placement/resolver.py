"""
Stage resolver: turns drag-and-drop events into stage moves.

The board exposes both columns and cards as drop surfaces, and the drag
library reports whatever is under the pointer as a bare id. A column id is
a stage id; a card id is an application id. Anything else (headers,
overlays, other chrome) resolves to nothing.
"""
import logging
from dataclasses import dataclass
from typing import Optional, Union

from .schema import Application, Stage, stage_or_none
from .store import ApplicationStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ColumnTarget:
    """Dropped on a column (or its empty area)."""
    stage: Stage


@dataclass(frozen=True)
class CardTarget:
    """Dropped on top of another card; joins that card's column."""
    application_id: str
    stage: Stage


@dataclass(frozen=True)
class Unresolved:
    """Dropped on something that is neither a column nor a card."""
    over_id: Optional[str]


DropTarget = Union[ColumnTarget, CardTarget, Unresolved]


class StageResolver:
    """Resolves drag-end events against the store and applies the move."""

    def __init__(self, store: ApplicationStore):
        self.store = store
        self.active_id: Optional[str] = None

    def classify(self, over_id: Optional[str]) -> DropTarget:
        """Column ids are checked before card ids."""
        if over_id is None:
            return Unresolved(over_id)
        stage = stage_or_none(over_id)
        if stage is not None:
            return ColumnTarget(stage)
        card = self.store.get(over_id)
        if card is not None:
            return CardTarget(card.id, card.status)
        return Unresolved(over_id)

    def resolve(self, active_id: str, over_id: Optional[str]) -> Optional[Stage]:
        """
        Target stage for a drop, or None when the drop is not a move.

        None is returned when the dragged application is unknown, the drop
        target is unrecognized, or the target is the stage it is already in.
        """
        active = self.store.get(active_id)
        if active is None:
            logger.warning(f"Drag end for unknown application {active_id}")
            return None

        target = self.classify(over_id)
        if isinstance(target, (ColumnTarget, CardTarget)):
            stage = target.stage
        else:
            return None

        if stage == active.status:
            return None
        return stage

    # ── Drag lifecycle ────────────────────────────────────────────────────

    @property
    def active(self) -> Optional[Application]:
        """The application being dragged, if any."""
        if self.active_id is None:
            return None
        return self.store.get(self.active_id)

    def drag_start(self, active_id: str) -> Optional[Application]:
        self.active_id = active_id
        return self.active

    def drag_cancel(self) -> None:
        self.active_id = None

    def drag_end(self, active_id: str, over_id: Optional[str]) -> Optional[Application]:
        """Apply the drop. Returns the moved application, or None for no move."""
        try:
            stage = self.resolve(active_id, over_id)
            if stage is None:
                logger.debug(f"Drop of {active_id} on {over_id!r}: no move")
                return None
            return self.store.move(active_id, stage)
        finally:
            self.active_id = None
