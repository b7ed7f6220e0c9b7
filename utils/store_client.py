"""
StoreClient: thin DB-API wrapper over the store's relational database.

Handles:
- PostgreSQL connections via psycopg (statement timeout set per session)
- sqlite3 connections for local runs and tests (paramstyle rewritten to '?')
- Table-name templating from TableNames
- Optional-table checks so collectors can treat missing tables as empty
"""

from __future__ import annotations

import logging
from contextlib import closing
from typing import Any, Optional

from config.settings import Dialect, Settings, TableNames
from sql import queries

logger = logging.getLogger("storehealth.client")


class StoreClient:
    """
    Query primitives consumed by the collectors, cleaners and ScanStore.

    Every statement commits on its own; this client never opens a
    multi-statement transaction.
    """

    def __init__(self, connection: Any, dialect: Dialect = Dialect.POSTGRES,
                 tables: Optional[TableNames] = None):
        self.connection = connection
        self.dialect = Dialect(dialect)
        self.tables = tables or TableNames()
        self._template_names = self.tables.as_dict()
        self._template_names["integer_value"] = (
            queries.INTEGER_VALUE_SQLITE if self.dialect == Dialect.SQLITE else queries.INTEGER_VALUE_POSTGRES
        )

    @classmethod
    def connect(cls, settings: Settings) -> "StoreClient":
        """Open a connection described by settings.store."""
        store = settings.store
        if store.dialect == Dialect.SQLITE:
            import sqlite3
            conn = sqlite3.connect(store.dsn or ":memory:", check_same_thread=False)
        else:
            import psycopg
            conn = psycopg.connect(
                store.dsn,
                autocommit=True,
                options=f"-c statement_timeout={store.statement_timeout_ms}",
            )
        logger.info(f"Connected to {store.dialect.value} store (prefix={store.table_prefix})")
        return cls(conn, dialect=store.dialect, tables=store.tables)

    # --- Statement preparation ---

    def render(self, template: str, placeholders: int = 0) -> str:
        """Fill table placeholders and adapt the paramstyle to the dialect."""
        names = dict(self._template_names)
        if placeholders:
            names["placeholders"] = ", ".join(["%s"] * placeholders)
        sql = template.format(**names)
        if self.dialect == Dialect.SQLITE:
            sql = sql.replace("%s", "?")
        return sql

    # --- Query primitives ---

    def execute_query(self, template: str, params: tuple = (), placeholders: int = 0) -> list[dict]:
        """Run a SELECT and return rows as dicts keyed by column alias."""
        sql = self.render(template, placeholders)
        try:
            with closing(self.connection.cursor()) as cur:
                cur.execute(sql, params)
                columns = [desc[0] for desc in cur.description] if cur.description else []
                rows = cur.fetchall()
        except Exception:
            self.rollback()
            raise
        return [dict(zip(columns, row)) for row in rows]

    def fetch_scalar(self, template: str, params: tuple = (), default: Any = 0) -> Any:
        """First column of the first row, or default when empty/NULL."""
        rows = self.execute_query(template, params)
        if not rows:
            return default
        value = next(iter(rows[0].values()))
        return default if value is None else value

    def fetch_count(self, template: str, params: tuple = ()) -> int:
        return int(self.fetch_scalar(template, params, default=0))

    def fetch_column(self, template: str, params: tuple = (), placeholders: int = 0) -> list:
        rows = self.execute_query(template, params, placeholders)
        return [next(iter(row.values())) for row in rows]

    def execute_statement(self, template: str, params: tuple = (), placeholders: int = 0) -> int:
        """Execute a DDL/DML statement and commit. Returns affected row count."""
        sql = self.render(template, placeholders)
        try:
            with closing(self.connection.cursor()) as cur:
                cur.execute(sql, params)
                rowcount = cur.rowcount
            self.connection.commit()
        except Exception:
            self.rollback()
            raise
        return max(rowcount, 0)

    def rollback(self):
        """Discard a failed statement's transaction so the connection stays usable."""
        try:
            self.connection.rollback()
        except Exception as e:
            logger.warning(f"Rollback failed: {e}")

    def delete_in(self, template: str, values: list) -> int:
        """Run a DELETE ... IN ({placeholders}) for the given values."""
        if not values:
            return 0
        return self.execute_statement(template, tuple(values), placeholders=len(values))

    # --- Catalog ---

    def table_exists(self, table: str) -> bool:
        """Whether a physical table exists right now. Checked on every call."""
        check = queries.TABLE_EXISTS_SQLITE if self.dialect == Dialect.SQLITE else queries.TABLE_EXISTS_POSTGRES
        present = bool(self.fetch_scalar(check, (table,), default=False))
        if not present:
            logger.debug(f"Optional table {table} not present")
        return present

    def ping(self) -> bool:
        try:
            return self.fetch_scalar(queries.PING) == 1
        except Exception as e:
            logger.warning(f"Store ping failed: {e}")
            return False

    def close(self):
        try:
            self.connection.close()
        except Exception as e:
            logger.warning(f"Error closing store connection: {e}")
