"""Command history for undo/redo.

Provides:
- Recording committed commands with the document state they replaced
- Querying the operation log
- Undo/redo by swapping whole-document snapshots

Snapshots are immutable copies, so restoring one can never alias live state.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import uuid4

from timeline_engine.exceptions import NothingToRedoError, NothingToUndoError
from timeline_engine.schemas.composition import CompositionDocument

logger = logging.getLogger(__name__)


@dataclass
class OperationRecord:
    """One committed command."""

    command: str
    affected_ids: list[str] = field(default_factory=list)
    id: str = field(default_factory=lambda: str(uuid4()))
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    undone: bool = False

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "command": self.command,
            "affectedIds": self.affected_ids,
            "createdAt": self.created_at.isoformat(),
            "undone": self.undone,
        }


class CommandHistory:
    """Bounded undo/redo stacks of document snapshots."""

    def __init__(self, limit: int = 50):
        self.limit = max(1, limit)
        self._undo: list[tuple[OperationRecord, CompositionDocument]] = []
        self._redo: list[tuple[OperationRecord, CompositionDocument]] = []
        self._log: list[OperationRecord] = []

    @property
    def can_undo(self) -> bool:
        return bool(self._undo)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo)

    def record(
        self,
        command: str,
        before: CompositionDocument,
        affected_ids: list[str] | None = None,
    ) -> OperationRecord:
        """Remember the state a command replaced. Clears the redo stack."""
        record = OperationRecord(command=command, affected_ids=affected_ids or [])
        self._undo.append((record, before.model_copy(deep=True)))
        if len(self._undo) > self.limit:
            self._undo.pop(0)
        self._redo.clear()
        self._log.append(record)
        if len(self._log) > self.limit * 4:
            self._log = self._log[-self.limit * 4:]
        return record

    def undo(self, current: CompositionDocument) -> tuple[OperationRecord, CompositionDocument]:
        """Pop the last command; returns it and the document to restore."""
        if not self._undo:
            raise NothingToUndoError()
        record, snapshot = self._undo.pop()
        self._redo.append((record, current.model_copy(deep=True)))
        record.undone = True
        logger.info(f"Undo {record.command} ({record.id})")
        return record, snapshot

    def redo(self, current: CompositionDocument) -> tuple[OperationRecord, CompositionDocument]:
        if not self._redo:
            raise NothingToRedoError()
        record, snapshot = self._redo.pop()
        self._undo.append((record, current.model_copy(deep=True)))
        record.undone = False
        logger.info(f"Redo {record.command} ({record.id})")
        return record, snapshot

    def clear(self) -> None:
        self._undo.clear()
        self._redo.clear()

    def get_history(self, limit: int = 20) -> list[OperationRecord]:
        """Most recent operations first."""
        return list(reversed(self._log[-limit:]))
