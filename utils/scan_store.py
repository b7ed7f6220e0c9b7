"""
ScanStore: persistence for scan results and the metric snapshot time series.

Handles:
- The single "last scan" record (JSON in the options table, never autoloaded)
- The runtime settings record, stored the same way
- Append-only metric snapshots, one row per tracked metric per scan
- Snapshot table DDL for PostgreSQL and sqlite
- mock_mode: keeps everything in memory and logs writes (dry runs, demos)
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Optional

from config.settings import LAST_SCAN_OPTION, SETTINGS_OPTION, SNAPSHOT_METRICS, Dialect
from scanner.models import ScanResult
from sql import queries

logger = logging.getLogger("storehealth.scan_store")


class ScanStore:
    """
    Mock-capable store for scan output.
    Overwrite semantics for the last scan; insert-only for snapshots.
    """

    def __init__(self, client=None, mock_mode: bool = False):
        self.client = client
        self.mock_mode = mock_mode or client is None
        self._write_log: list[dict] = []
        self._mock_last_scan: Optional[str] = None
        self._mock_snapshots: list[dict] = []
        self._mock_settings: dict = {}

    def create_tables(self) -> dict:
        """Create the snapshot table and its index if missing."""
        table = self.client.tables.snapshots if self.client else "storehealth_metrics_snapshots"
        if self.mock_mode:
            logger.info(f"[MOCK DDL] Creating table: {table}")
            return {"tables": [table], "status": "created (mock)"}

        ddl = (queries.CREATE_SNAPSHOTS_SQLITE if self.client.dialect == Dialect.SQLITE
               else queries.CREATE_SNAPSHOTS_POSTGRES)
        self.client.execute_statement(ddl)
        self.client.execute_statement(queries.CREATE_SNAPSHOTS_INDEX)
        logger.info(f"Created table: {table}")
        return {"tables": [table], "status": "created"}

    # --- Last scan (single record, overwrite) ---

    def save_last_scan(self, result: ScanResult) -> None:
        payload = json.dumps(result.to_dict(), separators=(",", ":"))
        self._log_write(LAST_SCAN_OPTION, 1, "overwrite")

        if self.mock_mode:
            self._mock_last_scan = payload
            return

        self.client.execute_statement(queries.UPSERT_OPTION, (LAST_SCAN_OPTION, payload, "no"))

    def load_last_scan(self) -> Optional[ScanResult]:
        """The stored scan, or None if absent or unreadable."""
        if self.mock_mode:
            raw = self._mock_last_scan
        else:
            raw = self.client.fetch_scalar(queries.OPTION_VALUE, (LAST_SCAN_OPTION,), default=None)
        if not raw:
            return None
        try:
            return ScanResult.from_dict(json.loads(raw))
        except (ValueError, KeyError, TypeError) as e:
            logger.warning(f"Stored scan result is unreadable, ignoring: {e}")
            return None

    def clear_last_scan(self) -> bool:
        """Delete the stored scan. Returns True if a record was removed."""
        if self.mock_mode:
            existed = self._mock_last_scan is not None
            self._mock_last_scan = None
            return existed
        return self.client.execute_statement(queries.DELETE_OPTION, (LAST_SCAN_OPTION,)) > 0

    # --- Runtime settings record ---

    def load_settings_record(self) -> dict:
        """Stored runtime settings, or {} if absent or unreadable."""
        if self.mock_mode:
            return dict(self._mock_settings)
        raw = self.client.fetch_scalar(queries.OPTION_VALUE, (SETTINGS_OPTION,), default=None)
        if not raw:
            return {}
        try:
            record = json.loads(raw)
        except ValueError as e:
            logger.warning(f"Stored settings are unreadable, ignoring: {e}")
            return {}
        return record if isinstance(record, dict) else {}

    def save_settings_record(self, record: dict) -> None:
        self._log_write(SETTINGS_OPTION, 1, "overwrite")
        if self.mock_mode:
            self._mock_settings = dict(record)
            return
        payload = json.dumps(record, separators=(",", ":"))
        self.client.execute_statement(queries.UPSERT_OPTION, (SETTINGS_OPTION, payload, "no"))

    # --- Snapshot time series (append-only) ---

    def write_snapshot(self, metrics, snapshot_type: str = "scan") -> dict:
        """Append one row per tracked metric present in metrics."""
        now = datetime.now(timezone.utc)
        records = [
            {
                "metric_key": key,
                "metric_value": int(metrics[key]),
                "snapshot_type": snapshot_type,
                "created_at": now.isoformat(),
            }
            for key in SNAPSHOT_METRICS
            if key in metrics and metrics[key] is not None
        ]
        table = self.client.tables.snapshots if self.client else "storehealth_metrics_snapshots"
        self._log_write(table, len(records), "append")

        if self.mock_mode:
            self._mock_snapshots.extend(records)
            logger.info(f"[MOCK WRITE] {len(records)} records -> {table} (append)")
            return {"table": table, "records_written": len(records), "status": "success (mock)"}

        if not self.client.table_exists(table):
            logger.warning(f"Snapshot table {table} missing, run 'init' first; skipping snapshot")
            return {"table": table, "records_written": 0, "status": "skipped"}

        created_at = now.isoformat() if self.client.dialect == Dialect.SQLITE else now
        for record in records:
            self.client.execute_statement(
                queries.INSERT_SNAPSHOT,
                (record["metric_key"], record["metric_value"], record["snapshot_type"], created_at),
            )
        return {"table": table, "records_written": len(records), "status": "success"}

    def get_metric_history(self, metric_key: str, limit: int = 30) -> list[dict]:
        """Most recent snapshot values for one metric, newest first."""
        if self.mock_mode:
            rows = [r for r in self._mock_snapshots if r["metric_key"] == metric_key]
            return list(reversed(rows))[:limit]
        rows = self.client.execute_query(queries.METRIC_HISTORY, (metric_key, int(limit)))
        return [
            {
                "metric_key": row["metric_key"],
                "metric_value": int(row["metric_value"]),
                "snapshot_type": row["snapshot_type"],
                "created_at": str(row["created_at"]),
            }
            for row in rows
        ]

    def _log_write(self, target: str, records: int, mode: str) -> None:
        self._write_log.append({
            "table": target,
            "records": records,
            "mode": mode,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        })

    def get_write_log(self) -> list[dict]:
        return list(self._write_log)
