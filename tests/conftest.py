"""
Pytest fixtures for StoreHealth tests.

Builds an in-memory sqlite database with the store's table shapes and a
StoreClient bound to it, plus helpers for seeding rows.
"""

import sqlite3
import sys
from datetime import datetime, timedelta
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from config.settings import Dialect, Settings, StoreConfig, TableNames  # noqa: E402
from utils.store_client import StoreClient  # noqa: E402

NOW = 1_700_000_000

SCHEMA = """
CREATE TABLE wp_options (
    option_id INTEGER PRIMARY KEY AUTOINCREMENT,
    option_name VARCHAR(191) NOT NULL UNIQUE,
    option_value TEXT NOT NULL,
    autoload VARCHAR(20) NOT NULL DEFAULT 'yes'
);
CREATE TABLE wp_posts (
    ID INTEGER PRIMARY KEY AUTOINCREMENT,
    post_title TEXT NOT NULL DEFAULT '',
    post_type VARCHAR(20) NOT NULL DEFAULT 'post',
    post_status VARCHAR(20) NOT NULL DEFAULT 'publish',
    post_parent INTEGER NOT NULL DEFAULT 0,
    post_date TEXT NOT NULL DEFAULT '2024-01-01 00:00:00'
);
CREATE TABLE wp_postmeta (
    meta_id INTEGER PRIMARY KEY AUTOINCREMENT,
    post_id INTEGER NOT NULL DEFAULT 0,
    meta_key VARCHAR(255),
    meta_value TEXT
);
CREATE TABLE wp_woocommerce_sessions (
    session_id INTEGER PRIMARY KEY AUTOINCREMENT,
    session_key CHAR(32) NOT NULL UNIQUE,
    session_value TEXT NOT NULL DEFAULT '',
    session_expiry BIGINT NOT NULL
);
CREATE TABLE wp_term_relationships (
    object_id INTEGER NOT NULL,
    term_taxonomy_id INTEGER NOT NULL,
    PRIMARY KEY (object_id, term_taxonomy_id)
);
CREATE TABLE wp_comments (
    comment_ID INTEGER PRIMARY KEY AUTOINCREMENT,
    comment_post_ID INTEGER NOT NULL DEFAULT 0,
    comment_content TEXT NOT NULL DEFAULT ''
);
CREATE TABLE wp_commentmeta (
    meta_id INTEGER PRIMARY KEY AUTOINCREMENT,
    comment_id INTEGER NOT NULL DEFAULT 0,
    meta_key VARCHAR(255),
    meta_value TEXT
);
"""


class StoreSeeder:
    """Insert helpers over a raw sqlite connection."""

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn
        self._session_seq = 0

    def _insert(self, sql: str, params: tuple) -> int:
        cur = self.conn.execute(sql, params)
        self.conn.commit()
        return cur.lastrowid

    def count(self, table: str, where: str = "1=1", params: tuple = ()) -> int:
        return self.conn.execute(f"SELECT COUNT(*) FROM {table} WHERE {where}", params).fetchone()[0]

    def option(self, name: str, value: str, autoload: str = "yes") -> int:
        return self._insert(
            "INSERT INTO wp_options (option_name, option_value, autoload) VALUES (?, ?, ?)",
            (name, value, autoload),
        )

    def transient(self, name: str, expires_at: int, value: str = "cached") -> None:
        self.option(f"_transient_timeout_{name}", str(expires_at), autoload="no")
        self.option(f"_transient_{name}", value, autoload="no")

    def post(self, title: str = "", post_type: str = "post", status: str = "publish",
             parent: int = 0, date: str = "2024-01-01 00:00:00") -> int:
        return self._insert(
            "INSERT INTO wp_posts (post_title, post_type, post_status, post_parent, post_date) "
            "VALUES (?, ?, ?, ?, ?)",
            (title, post_type, status, parent, date),
        )

    def revisions(self, parent: int, count: int) -> list[int]:
        """count revisions of parent, one day apart, oldest first."""
        base = datetime(2024, 1, 1)
        return [
            self.post(f"rev {i}", post_type="revision", status="inherit", parent=parent,
                      date=(base + timedelta(days=i)).strftime("%Y-%m-%d %H:%M:%S"))
            for i in range(count)
        ]

    def meta(self, post_id: int, key: str = "_key", value: str = "v") -> int:
        return self._insert(
            "INSERT INTO wp_postmeta (post_id, meta_key, meta_value) VALUES (?, ?, ?)",
            (post_id, key, value),
        )

    def session(self, expiry: int) -> int:
        self._session_seq += 1
        return self._insert(
            "INSERT INTO wp_woocommerce_sessions (session_key, session_value, session_expiry) VALUES (?, ?, ?)",
            (f"key{self._session_seq}", "a:0:{}", expiry),
        )

    def term(self, object_id: int, term_taxonomy_id: int = 1) -> None:
        self._insert(
            "INSERT INTO wp_term_relationships (object_id, term_taxonomy_id) VALUES (?, ?)",
            (object_id, term_taxonomy_id),
        )

    def comment(self, post_id: int, with_meta: bool = True) -> int:
        comment_id = self._insert(
            "INSERT INTO wp_comments (comment_post_ID, comment_content) VALUES (?, ?)",
            (post_id, "nice"),
        )
        if with_meta:
            self._insert(
                "INSERT INTO wp_commentmeta (comment_id, meta_key, meta_value) VALUES (?, ?, ?)",
                (comment_id, "rating", "5"),
            )
        return comment_id

    def drop(self, table: str) -> None:
        self.conn.execute(f"DROP TABLE {table}")
        self.conn.commit()


@pytest.fixture
def conn():
    connection = sqlite3.connect(":memory:", check_same_thread=False)
    connection.executescript(SCHEMA)
    connection.commit()
    yield connection
    connection.close()


@pytest.fixture
def seed(conn) -> StoreSeeder:
    return StoreSeeder(conn)


@pytest.fixture
def client(conn) -> StoreClient:
    return StoreClient(conn, dialect=Dialect.SQLITE, tables=TableNames("wp_"))


@pytest.fixture
def now() -> int:
    return NOW


@pytest.fixture
def clock(now):
    return lambda: now


@pytest.fixture
def settings() -> Settings:
    return Settings(store=StoreConfig(dialect=Dialect.SQLITE))
