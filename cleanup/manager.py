"""
CleanupManager: registry and orchestrator over cleanup operations.

Every call returns a result object. Unknown types and operation errors come
back as success=False with an ErrorKind; nothing raises out of this layer.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from config.settings import (
    CLEANUP_ORPHANED_META, CLEANUP_REVISIONS, CLEANUP_SESSIONS, CLEANUP_TRANSIENTS,
    CLEANUP_TRASH, CleanupConfig, ErrorKind,
)
from framework.events import EventBus, EventType
from utils.formatting import pluralize

from .base import CleanupOperation
from .orphaned_meta import OrphanedMetaCleaner
from .revisions import RevisionCleaner
from .sessions import SessionCleaner
from .transients import TransientCleaner
from .trash import TrashCleaner

logger = logging.getLogger("storehealth.cleanup")

INVALID_TYPE_MESSAGE = "Invalid cleanup type."


@dataclass
class PreviewResult:
    success: bool
    type: str
    count: int = 0
    message: str = ""
    error: Optional[ErrorKind] = None

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "type": self.type,
            "count": self.count,
            "message": self.message,
            "error": self.error.value if self.error else None,
        }


@dataclass
class ExecuteResult:
    success: bool
    type: str
    before: int = 0
    deleted: int = 0
    after: int = 0
    message: str = ""
    error: Optional[ErrorKind] = None

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "type": self.type,
            "before": self.before,
            "deleted": self.deleted,
            "after": self.after,
            "message": self.message,
            "error": self.error.value if self.error else None,
        }


class CleanupManager:
    """Maps cleanup type -> CleanupOperation. register() adds or replaces a type."""

    def __init__(self, operations: Optional[dict[str, CleanupOperation]] = None,
                 events: Optional[EventBus] = None):
        self._operations: dict[str, CleanupOperation] = {}
        self.events = events or EventBus()
        for cleanup_type, operation in (operations or {}).items():
            self.register(cleanup_type, operation)

    @classmethod
    def with_defaults(cls, client, config: Optional[CleanupConfig] = None,
                      events: Optional[EventBus] = None,
                      clock: Callable[[], float] = time.time,
                      keep_provider: Optional[Callable[[], int]] = None) -> "CleanupManager":
        """Manager with the five built-in categories."""
        config = config or CleanupConfig()
        common = {"batch_size": config.batch_size, "clock": clock}
        return cls({
            CLEANUP_TRANSIENTS: TransientCleaner(client, **common),
            CLEANUP_SESSIONS: SessionCleaner(client, **common),
            CLEANUP_ORPHANED_META: OrphanedMetaCleaner(client, **common),
            CLEANUP_REVISIONS: RevisionCleaner(client, keep=config.revisions_keep,
                                               keep_provider=keep_provider, **common),
            CLEANUP_TRASH: TrashCleaner(client, **common),
        }, events=events)

    def register(self, cleanup_type: str, operation: CleanupOperation) -> None:
        if not cleanup_type:
            raise ValueError("cleanup type must be a non-empty string")
        self._operations[cleanup_type] = operation
        logger.debug(f"Registered cleanup type: {cleanup_type} ({type(operation).__name__})")

    def get(self, cleanup_type: str) -> Optional[CleanupOperation]:
        return self._operations.get(cleanup_type)

    @property
    def types(self) -> list[str]:
        return list(self._operations)

    def get_available_types(self) -> dict[str, str]:
        return {t: op.name or t for t, op in self._operations.items()}

    def preview(self, cleanup_type: str) -> PreviewResult:
        operation = self._operations.get(cleanup_type)
        if operation is None:
            return PreviewResult(success=False, type=cleanup_type, message=INVALID_TYPE_MESSAGE,
                                 error=ErrorKind.INVALID_CATEGORY)
        try:
            count = int(operation.preview())
        except Exception as e:
            logger.error(f"Cleanup preview failed for {cleanup_type}: {e}")
            return PreviewResult(success=False, type=cleanup_type, message=str(e),
                                 error=ErrorKind.OPERATION_FAILURE)
        return PreviewResult(
            success=True,
            type=cleanup_type,
            count=count,
            message=f"{pluralize(count, operation.preview_unit)} found",
        )

    def execute(self, cleanup_type: str) -> ExecuteResult:
        """Run one cleanup, reporting eligible counts before and after."""
        operation = self._operations.get(cleanup_type)
        if operation is None:
            return ExecuteResult(success=False, type=cleanup_type, message=INVALID_TYPE_MESSAGE,
                                 error=ErrorKind.INVALID_CATEGORY)
        start = time.time()
        try:
            before = int(operation.preview())
            deleted = int(operation.execute())
            after = int(operation.preview())
        except Exception as e:
            logger.error(f"Cleanup failed for {cleanup_type}: {e}")
            return ExecuteResult(success=False, type=cleanup_type, message=str(e),
                                 error=ErrorKind.OPERATION_FAILURE)

        logger.info(
            f"Cleanup {cleanup_type}: before={before} deleted={deleted} after={after} "
            f"({time.time() - start:.2f}s)"
        )
        self.events.emit(EventType.CLEANUP_COMPLETED, "CleanupManager", {
            "type": cleanup_type,
            "deleted": deleted,
        })
        return ExecuteResult(
            success=True,
            type=cleanup_type,
            before=before,
            deleted=deleted,
            after=after,
            message=f"{pluralize(deleted, operation.execute_unit)} cleaned",
        )

    def get_all_counts(self) -> dict[str, int]:
        """preview() for every registered type; failures count as 0."""
        counts = {}
        for cleanup_type, operation in self._operations.items():
            try:
                counts[cleanup_type] = int(operation.preview())
            except Exception as e:
                logger.warning(f"Count failed for {cleanup_type}, reporting 0: {e}")
                counts[cleanup_type] = 0
        return counts
