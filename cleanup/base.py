"""CleanupOperation: preview/execute contract shared by every cleanup category."""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from typing import Callable


class CleanupOperation(ABC):
    """
    One bloat category.

    preview() counts eligible items with no side effects; execute() removes
    them and returns how many units it deleted. After a successful execute,
    preview() returns 0 unless new bloat appeared in between.
    """

    name: str = ""
    description: str = ""
    preview_unit: str = "item"
    execute_unit: str = "item"

    def __init__(self, client, batch_size: int = 500, clock: Callable[[], float] = time.time):
        self.client = client
        self.batch_size = batch_size
        self.clock = clock

    @property
    def tables(self):
        return self.client.tables

    def now(self) -> int:
        return int(self.clock())

    @abstractmethod
    def preview(self) -> int:
        """Count of items eligible for cleanup."""

    @abstractmethod
    def execute(self) -> int:
        """Delete eligible items; returns the number of units removed."""
