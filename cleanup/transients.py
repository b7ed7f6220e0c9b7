"""Expired transients: timeout markers past their expiry plus their paired values."""

from __future__ import annotations

import logging

from sql import queries

from .base import CleanupOperation

logger = logging.getLogger("storehealth.cleanup")

TIMEOUT_LIKE = queries.like_prefix(queries.TRANSIENT_TIMEOUT_PREFIX)


class TransientCleaner(CleanupOperation):
    """
    preview() counts expired transients (one per timeout marker).
    execute() deletes the marker and its value and counts rows, so one
    transient usually contributes 2.
    """

    name = "Expired Transients"
    description = "Remove expired transient data from the database."
    preview_unit = "transient"
    execute_unit = "row"

    def preview(self) -> int:
        return self.client.fetch_count(
            queries.EXPIRED_TRANSIENT_COUNT,
            (TIMEOUT_LIKE, TIMEOUT_LIKE, self.now()),
        )

    def execute(self) -> int:
        now = self.now()
        deleted = 0
        last_name = ""

        while True:
            timeout_keys = self.client.fetch_column(
                queries.EXPIRED_TRANSIENT_TIMEOUTS_BATCH,
                (TIMEOUT_LIKE, TIMEOUT_LIKE, now, last_name, self.batch_size),
            )
            if not timeout_keys:
                break

            value_keys = [
                key.replace(queries.TRANSIENT_TIMEOUT_PREFIX, queries.TRANSIENT_PREFIX, 1)
                for key in timeout_keys
            ]
            deleted += self.client.delete_in(queries.DELETE_OPTIONS_BY_NAME, timeout_keys + value_keys)
            last_name = timeout_keys[-1]

            if len(timeout_keys) < self.batch_size:
                break

        logger.info(f"Deleted {deleted} expired transient rows")
        return deleted
