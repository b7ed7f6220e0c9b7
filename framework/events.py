"""
Events and task results shared by the scanner, the cleanup engine and the callers.

EventBus is the explicit extension point: callers subscribe handlers before
invoking the core, and the core publishes scan and cleanup lifecycle events.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional

from config.settings import ErrorKind

logger = logging.getLogger("storehealth")


class TaskStatus(Enum):
    SUCCESS = "success"
    FAILED = "failed"


class EventType(Enum):
    SCAN_STARTED = "scan_started"
    SCAN_COMPLETED = "scan_completed"
    CLEANUP_COMPLETED = "cleanup_completed"


@dataclass
class TaskResult:
    """Result of one operation run through AppContext.run_operation."""
    task_id: str
    operation: str
    status: TaskStatus
    message: str
    data: dict = field(default_factory=dict)
    error_kind: Optional[ErrorKind] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    duration_seconds: float = 0.0

    @property
    def success(self) -> bool:
        return self.status == TaskStatus.SUCCESS

    def to_dict(self) -> dict:
        return {
            "task_id": self.task_id,
            "operation": self.operation,
            "status": self.status.value,
            "message": self.message,
            "data": self.data,
            "error_kind": self.error_kind.value if self.error_kind else None,
            "timestamp": self.timestamp.isoformat(),
            "duration_seconds": round(self.duration_seconds, 3),
        }

    def __str__(self):
        return f"[{self.status.value}] {self.operation}: {self.message}"


@dataclass
class Event:
    """Lifecycle event published by a core component."""
    event_type: EventType
    source: str
    data: dict = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class EventBus:
    """Synchronous publish/subscribe. Handler failures are logged, never raised."""

    def __init__(self):
        self._handlers: dict[EventType, list[Callable]] = {}
        self._event_log: list[Event] = []

    def subscribe(self, event_type: EventType, handler: Callable) -> None:
        """Subscribe a handler(event) to one event type."""
        if event_type not in self._handlers:
            self._handlers[event_type] = []
        self._handlers[event_type].append(handler)

    def dispatch(self, event: Event) -> None:
        """Dispatch an event to all subscribers."""
        self._event_log.append(event)
        logger.info(f"Event: {event.event_type.value} from {event.source}")
        for handler in self._handlers.get(event.event_type, []):
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Event handler error: {e}")

    def emit(self, event_type: EventType, source: str, data: Optional[dict] = None) -> None:
        self.dispatch(Event(event_type=event_type, source=source, data=data or {}))

    @property
    def events(self) -> list[Event]:
        return list(self._event_log)
