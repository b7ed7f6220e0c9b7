"""Expired customer sessions in the optional sessions table."""

from __future__ import annotations

import logging

from sql import queries

from .base import CleanupOperation

logger = logging.getLogger("storehealth.cleanup")


class SessionCleaner(CleanupOperation):
    name = "WooCommerce Sessions"
    description = "Clear expired customer sessions."
    preview_unit = "session"
    execute_unit = "session"

    def _available(self) -> bool:
        return self.client.table_exists(self.tables.sessions)

    def preview(self) -> int:
        if not self._available():
            return 0
        return self.client.fetch_count(queries.EXPIRED_SESSION_COUNT, (self.now(),))

    def execute(self) -> int:
        if not self._available():
            logger.info(f"Sessions table {self.tables.sessions} not present, nothing to clean")
            return 0
        deleted = self.client.execute_statement(queries.DELETE_EXPIRED_SESSIONS, (self.now(),))
        logger.info(f"Deleted {deleted} expired sessions")
        return deleted
