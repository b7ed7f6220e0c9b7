"""
AppContext: the one application context built at process start.

Owns the store client, scan store, scanner and cleanup manager, and runs
caller-facing operations so that failures come back as TaskResults.
"""

from __future__ import annotations

import logging
import time
import uuid
from typing import Callable, Iterable, Optional

from cleanup import CleanupManager
from config.settings import ErrorKind, Settings, sanitize_runtime_settings
from framework.events import EventBus, TaskResult, TaskStatus
from scanner import HealthScanner, MetricsCollector, ScanResult, ScoreCalculator
from utils.scan_store import ScanStore
from utils.store_client import StoreClient

logger = logging.getLogger("storehealth")


class AppContext:
    """
    Wires the core components together. Extension points (event handlers,
    metric and recommendation filters, extra cleanup types) are attached
    before the first operation runs.
    """

    def __init__(self, settings: Settings, client: StoreClient, store: Optional[ScanStore] = None,
                 events: Optional[EventBus] = None, clock: Callable[[], float] = time.time,
                 metric_filters: Iterable = (), recommendation_filters: Iterable = ()):
        self.settings = settings
        self.client = client
        self.events = events or EventBus()
        self.store = store or ScanStore(client)
        self.collector = MetricsCollector(client, order_storage=settings.store.order_storage, clock=clock)
        self.calculator = ScoreCalculator(settings.scoring, recommendation_filters=recommendation_filters)
        self.scanner = HealthScanner(
            self.collector, self.calculator, self.store,
            events=self.events, metric_filters=metric_filters,
        )
        self.cleanup = CleanupManager.with_defaults(
            client, settings.cleanup, events=self.events, clock=clock, keep_provider=self.revisions_keep,
        )
        self._results: list[TaskResult] = []
        logger.info(f"AppContext initialized ({settings.store.dialect.value}, prefix={settings.store.table_prefix})")

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> "AppContext":
        return cls(settings, StoreClient.connect(settings), **kwargs)

    def run_operation(self, name: str, handler: Callable, **kwargs) -> TaskResult:
        """Run handler(**kwargs) and wrap its outcome; exceptions become FAILED results."""
        task_id = str(uuid.uuid4())[:8]
        start = time.time()
        logger.info(f"Executing: {name}")
        try:
            data = handler(**kwargs)
            duration = time.time() - start
            result = TaskResult(
                task_id=task_id,
                operation=name,
                status=TaskStatus.SUCCESS,
                message=f"Completed in {duration:.2f}s",
                data=data if isinstance(data, dict) else {"result": data},
                duration_seconds=duration,
            )
        except Exception as e:
            duration = time.time() - start
            result = TaskResult(
                task_id=task_id,
                operation=name,
                status=TaskStatus.FAILED,
                message=f"Failed: {e}",
                error_kind=ErrorKind.OPERATION_FAILURE,
                duration_seconds=duration,
            )
        self._results.append(result)
        logger.info(str(result))
        return result

    # --- Caller-facing operations ---

    def initialize(self) -> TaskResult:
        return self.run_operation("initialize", self.store.create_tables)

    def run_scan(self) -> TaskResult:
        """Full scan. data holds the ScanResult as a dict on success."""
        return self.run_operation("run_scan", lambda: self.scanner.run_scan().to_dict())

    def get_last_scan(self) -> Optional[ScanResult]:
        return self.scanner.get_last_scan()

    def get_top_autoloaded(self, n: Optional[int] = None) -> list[dict]:
        if n is None:
            n = self.settings.top_autoload_limit
        return self.scanner.get_top_autoloaded_options(n)

    def get_high_variation(self, threshold: Optional[int] = None, n: int = 10) -> list[dict]:
        if threshold is None:
            threshold = self.settings.high_variation_threshold
        return self.scanner.get_high_variation_products(threshold, n)

    def get_display_metrics(self) -> dict:
        return self.scanner.get_display_metrics()

    # --- Runtime settings ---

    def revisions_keep(self) -> int:
        """Stored cleanup_revisions_keep if set, else the configured value."""
        return self._stored_settings().get("cleanup_revisions_keep", self.settings.cleanup.revisions_keep)

    def get_runtime_settings(self) -> dict:
        return {"cleanup_revisions_keep": self.revisions_keep()}

    def update_runtime_settings(self, changes: dict) -> dict:
        """
        Merge changes over the stored record, sanitize, and save.
        Raises ValueError for a value that cannot be coerced.
        """
        record = sanitize_runtime_settings({**self._stored_settings(), **changes})
        self.store.save_settings_record(record)
        logger.info(f"Runtime settings saved: {record}")
        return self.get_runtime_settings()

    def _stored_settings(self) -> dict:
        try:
            return sanitize_runtime_settings(self.store.load_settings_record())
        except ValueError as e:
            logger.warning(f"Ignoring invalid stored settings: {e}")
            return {}

    def get_results_summary(self) -> dict:
        total = len(self._results)
        success = sum(1 for r in self._results if r.success)
        return {
            "total_tasks": total,
            "successful": success,
            "failed": total - success,
            "success_rate": f"{(success / total * 100):.1f}%" if total > 0 else "N/A",
        }

    def close(self):
        self.client.close()
