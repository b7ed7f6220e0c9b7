"""
HealthScanner: runs collection and scoring, persists the result, and serves
the last scan to callers.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Iterable, Optional

from framework.events import EventBus, EventType
from utils.formatting import format_bytes, format_number, human_time_diff

from .calculator import ScoreCalculator
from .collector import MetricsCollector
from .models import MetricSet, ScanResult

logger = logging.getLogger("storehealth.scanner")

MetricFilter = Callable[[MetricSet], MetricSet]


class HealthScanner:
    """
    Coordinates MetricsCollector and ScoreCalculator.

    metric_filters run in order on each fresh MetricSet before scoring;
    each receives a MetricSet and returns one (use MetricSet.with_values).
    """

    def __init__(self, collector: MetricsCollector, calculator: ScoreCalculator, store,
                 events: Optional[EventBus] = None,
                 metric_filters: Iterable[MetricFilter] = ()):
        self.collector = collector
        self.calculator = calculator
        self.store = store
        self.events = events or EventBus()
        self.metric_filters = list(metric_filters)

    def run_scan(self) -> ScanResult:
        """Collect, score, persist and return a new ScanResult."""
        self.events.emit(EventType.SCAN_STARTED, "HealthScanner")

        metrics = self.collector.collect_all()
        for metric_filter in self.metric_filters:
            metrics = MetricSet(metric_filter(metrics))

        score = self.calculator.calculate(metrics)
        recommendations = self.calculator.generate_recommendations(metrics, score.breakdown)

        result = ScanResult(
            scanned_at=datetime.now(timezone.utc),
            health_score=score.score,
            score_label=score.label,
            score_color=score.color,
            metrics=metrics,
            breakdown=score.breakdown,
            recommendations=recommendations,
        )

        self.store.save_last_scan(result)
        self.store.write_snapshot(metrics, "scan")

        logger.info(
            f"Health scan complete: score={result.health_score} ({result.score_label}), "
            f"{len(recommendations)} recommendations"
        )
        self.events.emit(EventType.SCAN_COMPLETED, "HealthScanner", {
            "health_score": result.health_score,
            "metrics": metrics.to_dict(),
        })
        return result

    def get_last_scan(self) -> Optional[ScanResult]:
        return self.store.load_last_scan()

    def has_scan_data(self) -> bool:
        return self.get_last_scan() is not None

    def time_since_scan(self, now: Optional[datetime] = None) -> Optional[str]:
        scan = self.get_last_scan()
        if scan is None:
            return None
        return human_time_diff(scan.scanned_at, now)

    def clear_scan_data(self) -> bool:
        return self.store.clear_last_scan()

    def get_display_metrics(self) -> dict[str, dict]:
        """Labelled metric cards for dashboards. Placeholders when no scan exists."""
        scan = self.get_last_scan()
        if scan is None or not scan.metrics:
            return {
                "autoload_size": {"label": "Autoload Size", "value": "--"},
                "transients": {"label": "Transients", "value": "--"},
                "sessions": {"label": "WC Sessions", "value": "--"},
                "orphaned_meta": {"label": "Orphaned Meta", "value": "--"},
            }

        m = scan.metrics
        return {
            "autoload_size": {
                "label": "Autoload Size",
                "value": format_bytes(m.get("autoload_size", 0)),
                "raw": m.get("autoload_size", 0),
            },
            "transients": {
                "label": "Transients",
                "value": format_number(m.get("transient_count", 0)),
                "sub": f"{m.get('expired_transients', 0)} expired",
            },
            "sessions": {
                "label": "WC Sessions",
                "value": format_number(m.get("wc_sessions", 0)),
                "sub": f"{m.get('expired_wc_sessions', 0)} expired",
            },
            "orphaned_meta": {
                "label": "Orphaned Meta",
                "value": format_number(m.get("orphaned_postmeta", 0)),
                "raw": m.get("orphaned_postmeta", 0),
            },
            "revisions": {
                "label": "Revisions",
                "value": format_number(m.get("total_revisions", 0)),
                "raw": m.get("total_revisions", 0),
            },
            "products": {
                "label": "Products",
                "value": format_number(m.get("total_products", 0)),
                "sub": f"{m.get('total_variations', 0)} variations",
            },
            "orders": {
                "label": "Orders",
                "value": format_number(m.get("total_orders", 0)),
            },
            "postmeta_rows": {
                "label": "Postmeta Rows",
                "value": format_number(m.get("postmeta_rows", 0)),
            },
        }

    def get_top_autoloaded_options(self, limit: int = 10) -> list[dict]:
        return [
            {"name": row["name"], "size": format_bytes(row["size"]), "raw": row["size"]}
            for row in self.collector.get_top_n_by_size(limit)
        ]

    def get_high_variation_products(self, threshold: int = 50, limit: int = 10) -> list[dict]:
        return self.collector.get_high_variation_groups(threshold, limit)
