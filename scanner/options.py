"""Options-table metrics: autoload footprint and transients."""

from __future__ import annotations

from sql import queries


class OptionsMetricsMixin:
    """Mixin for metrics read from the options table."""

    def get_autoload_size(self) -> int:
        """Total bytes of option values loaded on every request."""
        return self.client.fetch_count(queries.AUTOLOAD_SIZE)

    def get_autoload_count(self) -> int:
        return self.client.fetch_count(queries.AUTOLOAD_COUNT)

    def get_total_options(self) -> int:
        return self.client.fetch_count(queries.TOTAL_OPTIONS)

    def get_transient_count(self) -> int:
        """Transient values, excluding their timeout markers."""
        value_like = queries.like_prefix(queries.TRANSIENT_PREFIX)
        timeout_like = queries.like_prefix(queries.TRANSIENT_TIMEOUT_PREFIX)
        return self.client.fetch_count(queries.TRANSIENT_COUNT, (value_like, timeout_like))

    def get_expired_transient_count(self) -> int:
        timeout_like = queries.like_prefix(queries.TRANSIENT_TIMEOUT_PREFIX)
        return self.client.fetch_count(
            queries.EXPIRED_TRANSIENT_COUNT,
            (timeout_like, timeout_like, int(self.clock())),
        )

    def get_top_n_by_size(self, n: int = 10) -> list[dict]:
        """
        Largest autoloaded options, descending by value length.
        Ties are ordered by option name so repeated calls are stable.
        """
        if n <= 0:
            return []
        rows = self.client.execute_query(queries.TOP_AUTOLOADED_OPTIONS, (int(n),))
        return [{"name": row["name"], "size": int(row["size"] or 0)} for row in rows]
