"""
StoreHealth Configuration
Centralized settings for the scanner, the score calculator, and the cleanup engine.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class HealthStatus(Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    WARNING = "warning"
    CRITICAL = "critical"


class RecommendationType(Enum):
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


class ErrorKind(Enum):
    INVALID_CATEGORY = "invalid_category"
    STORAGE_UNAVAILABLE = "storage_unavailable"
    OPERATION_FAILURE = "operation_failure"


class OrderStorage(Enum):
    AUTO = "auto"    # Follow the store's own HPOS option
    POSTS = "posts"  # Legacy shop_order rows in the posts table
    HPOS = "hpos"    # High-performance order storage table


class Dialect(Enum):
    POSTGRES = "postgres"
    SQLITE = "sqlite"


# Scoring categories, in declaration order (drives breakdown and recommendation order)
CATEGORY_AUTOLOAD = "autoload"
CATEGORY_ORPHANED_META = "orphaned_meta"
CATEGORY_EXPIRED_TRANSIENTS = "expired_transients"
CATEGORY_SESSIONS = "wc_sessions"
CATEGORY_META_PER_PRODUCT = "meta_per_product"
CATEGORY_REVISIONS = "revisions"

SCORE_CATEGORIES = (
    CATEGORY_AUTOLOAD,
    CATEGORY_ORPHANED_META,
    CATEGORY_EXPIRED_TRANSIENTS,
    CATEGORY_SESSIONS,
    CATEGORY_META_PER_PRODUCT,
    CATEGORY_REVISIONS,
)

DEFAULT_WEIGHTS = {
    CATEGORY_AUTOLOAD: 0.25,
    CATEGORY_ORPHANED_META: 0.20,
    CATEGORY_EXPIRED_TRANSIENTS: 0.15,
    CATEGORY_SESSIONS: 0.15,
    CATEGORY_META_PER_PRODUCT: 0.15,
    CATEGORY_REVISIONS: 0.10,
}

# Cleanup categories
CLEANUP_TRANSIENTS = "transients"
CLEANUP_SESSIONS = "sessions"
CLEANUP_ORPHANED_META = "orphaned_meta"
CLEANUP_REVISIONS = "revisions"
CLEANUP_TRASH = "trash"

CLEANUP_TYPES = (
    CLEANUP_TRANSIENTS,
    CLEANUP_SESSIONS,
    CLEANUP_ORPHANED_META,
    CLEANUP_REVISIONS,
    CLEANUP_TRASH,
)

# Sentinel for "remove every revision, including those without a parent"
REVISIONS_DELETE_ALL = -1

# Range accepted for the runtime-editable revisions keep setting
REVISIONS_KEEP_MAX = 50

# Aggregate score bands (closed intervals covering 0..100)
SCORE_RANGES = [
    {"min": 80, "max": 100, "label": "Excellent", "color": "green"},
    {"min": 60, "max": 79, "label": "Good", "color": "yellow"},
    {"min": 40, "max": 59, "label": "Needs Attention", "color": "orange"},
    {"min": 0, "max": 39, "label": "Critical", "color": "red"},
]

# Metrics appended to the snapshot time series on every scan
SNAPSHOT_METRICS = (
    "autoload_size",
    "transient_count",
    "expired_transients",
    "wc_sessions",
    "orphaned_postmeta",
    "total_revisions",
    "postmeta_rows",
)

LAST_SCAN_OPTION = "storehealth_last_health_scan"
SETTINGS_OPTION = "storehealth_settings"
HPOS_ENABLED_OPTION = "woocommerce_custom_orders_table_enabled"

# Values of the options.autoload column that mean "loaded on every request"
AUTOLOAD_VALUES = ("yes", "on", "auto-on", "auto")


@dataclass
class TableNames:
    """Physical table names, derived from the store's table prefix."""
    prefix: str = "wp_"

    @property
    def options(self) -> str:
        return f"{self.prefix}options"

    @property
    def posts(self) -> str:
        return f"{self.prefix}posts"

    @property
    def postmeta(self) -> str:
        return f"{self.prefix}postmeta"

    @property
    def sessions(self) -> str:
        return f"{self.prefix}woocommerce_sessions"

    @property
    def orders(self) -> str:
        return f"{self.prefix}wc_orders"

    @property
    def term_relationships(self) -> str:
        return f"{self.prefix}term_relationships"

    @property
    def comments(self) -> str:
        return f"{self.prefix}comments"

    @property
    def commentmeta(self) -> str:
        return f"{self.prefix}commentmeta"

    @property
    def snapshots(self) -> str:
        return f"{self.prefix}storehealth_metrics_snapshots"

    def as_dict(self) -> dict:
        return {
            "options": self.options,
            "posts": self.posts,
            "postmeta": self.postmeta,
            "sessions": self.sessions,
            "orders": self.orders,
            "term_relationships": self.term_relationships,
            "comments": self.comments,
            "commentmeta": self.commentmeta,
            "snapshots": self.snapshots,
        }


@dataclass
class ScoreThreshold:
    """
    Step thresholds for one scoring category.

    value <= excellent -> 100, <= good -> 70, <= fair (if set) -> 50, else 30.
    """
    excellent: float
    good: float
    fair: Optional[float] = None

    def __post_init__(self):
        if self.excellent < 0:
            raise ValueError(f"excellent threshold must be >= 0, got {self.excellent}")
        if self.good < self.excellent:
            raise ValueError(f"good threshold ({self.good}) must be >= excellent ({self.excellent})")
        if self.fair is not None and self.fair < self.good:
            raise ValueError(f"fair threshold ({self.fair}) must be >= good ({self.good})")


def default_thresholds() -> dict[str, ScoreThreshold]:
    return {
        CATEGORY_AUTOLOAD: ScoreThreshold(excellent=500_000, good=1_000_000, fair=2_000_000),
        CATEGORY_ORPHANED_META: ScoreThreshold(excellent=0.01, good=0.05),  # share of all postmeta
        CATEGORY_EXPIRED_TRANSIENTS: ScoreThreshold(excellent=50, good=200),
        CATEGORY_SESSIONS: ScoreThreshold(excellent=100, good=500),
        CATEGORY_META_PER_PRODUCT: ScoreThreshold(excellent=50, good=100),
        CATEGORY_REVISIONS: ScoreThreshold(excellent=5, good=20),  # average per post
    }


def default_severe_cutovers() -> dict[str, Optional[float]]:
    """Raw values above which a recommendation is critical. None = never critical."""
    return {
        CATEGORY_AUTOLOAD: 1_000_000,
        CATEGORY_ORPHANED_META: 1000,
        CATEGORY_EXPIRED_TRANSIENTS: None,
        CATEGORY_SESSIONS: None,
        CATEGORY_META_PER_PRODUCT: None,
        CATEGORY_REVISIONS: None,
    }


@dataclass
class ScoringConfig:
    """Weights, thresholds and severity cutovers for the health score."""
    weights: dict = field(default_factory=dict)
    thresholds: dict = field(default_factory=dict)
    severe_cutovers: dict = field(default_factory=dict)

    def __post_init__(self):
        self.weights = {**DEFAULT_WEIGHTS, **(self.weights or {})}
        self.thresholds = {**default_thresholds(), **(self.thresholds or {})}
        self.severe_cutovers = {**default_severe_cutovers(), **(self.severe_cutovers or {})}

        for name, weight in self.weights.items():
            if name not in SCORE_CATEGORIES:
                raise ValueError(f"Unknown scoring category in weights: {name}")
            if weight < 0:
                raise ValueError(f"Weight for {name} must be >= 0, got {weight}")
        for name in self.thresholds:
            if name not in SCORE_CATEGORIES:
                raise ValueError(f"Unknown scoring category in thresholds: {name}")


@dataclass
class CleanupConfig:
    """Cleanup engine options."""
    revisions_keep: int = 5
    batch_size: int = 500

    def __post_init__(self):
        if self.revisions_keep < 0:
            self.revisions_keep = REVISIONS_DELETE_ALL
        if not 1 <= self.batch_size <= 10_000:
            raise ValueError(f"batch_size must be within 1..10000, got {self.batch_size}")

    @property
    def delete_all_revisions(self) -> bool:
        return self.revisions_keep == REVISIONS_DELETE_ALL


def sanitize_runtime_settings(values: dict) -> dict:
    """
    Keep only recognized runtime settings, coerced and clamped.
    cleanup_revisions_keep is clamped to 0..REVISIONS_KEEP_MAX.
    Raises ValueError for a value that is not an integer.
    """
    sanitized = {}
    raw = values.get("cleanup_revisions_keep")
    if raw is not None:
        try:
            keep = int(raw)
        except (TypeError, ValueError):
            raise ValueError(f"cleanup_revisions_keep must be an integer, got {raw!r}") from None
        sanitized["cleanup_revisions_keep"] = max(0, min(REVISIONS_KEEP_MAX, keep))
    return sanitized


@dataclass
class StoreConfig:
    """Connection and schema options for the store being inspected."""
    dsn: str = ""
    dialect: Dialect = Dialect.POSTGRES
    table_prefix: str = "wp_"
    statement_timeout_ms: int = 300_000
    order_storage: OrderStorage = OrderStorage.AUTO

    def __post_init__(self):
        if isinstance(self.dialect, str):
            self.dialect = Dialect(self.dialect)
        if isinstance(self.order_storage, str):
            self.order_storage = OrderStorage(self.order_storage)
        if not self.table_prefix.replace("_", "").isalnum():
            raise ValueError(f"table_prefix must be alphanumeric/underscore, got {self.table_prefix!r}")
        if self.statement_timeout_ms < 0:
            raise ValueError("statement_timeout_ms must be >= 0")

    @property
    def tables(self) -> TableNames:
        return TableNames(prefix=self.table_prefix)


@dataclass
class Settings:
    """Top-level settings for one StoreHealth process."""
    store: StoreConfig = field(default_factory=StoreConfig)
    scoring: ScoringConfig = field(default_factory=ScoringConfig)
    cleanup: CleanupConfig = field(default_factory=CleanupConfig)
    high_variation_threshold: int = 50
    top_autoload_limit: int = 10

    def __post_init__(self):
        if self.high_variation_threshold < 1:
            raise ValueError("high_variation_threshold must be >= 1")
        if not 1 <= self.top_autoload_limit <= 50:
            raise ValueError("top_autoload_limit must be within 1..50")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def load_settings() -> Settings:
    """Build Settings from STOREHEALTH_* environment variables."""
    store = StoreConfig(
        dsn=os.getenv("STOREHEALTH_DSN", ""),
        dialect=os.getenv("STOREHEALTH_DIALECT", Dialect.POSTGRES.value),
        table_prefix=os.getenv("STOREHEALTH_TABLE_PREFIX", "wp_"),
        statement_timeout_ms=_env_int("STOREHEALTH_STATEMENT_TIMEOUT_MS", 300_000),
        order_storage=os.getenv("STOREHEALTH_ORDER_STORAGE", OrderStorage.AUTO.value),
    )
    cleanup = CleanupConfig(
        revisions_keep=_env_int("STOREHEALTH_REVISIONS_KEEP", 5),
        batch_size=_env_int("STOREHEALTH_BATCH_SIZE", 500),
    )
    return Settings(
        store=store,
        cleanup=cleanup,
        high_variation_threshold=_env_int("STOREHEALTH_HIGH_VARIATION_THRESHOLD", 50),
        top_autoload_limit=_env_int("STOREHEALTH_TOP_AUTOLOAD_LIMIT", 10),
    )
