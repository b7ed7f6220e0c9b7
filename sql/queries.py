"""
Centralized SQL for the StoreHealth scanner and cleanup engine.
Single source of truth: collectors and cleaners import named constants from here.

Templates carry {table} placeholders (filled from TableNames by StoreClient)
and %s parameters. Values are always passed as parameters, never interpolated.
"""

# =============================================================================
# Options table: autoload and transients (MetricsCollector, TransientCleaner)
# =============================================================================

_AUTOLOADED = "autoload IN ('yes', 'on', 'auto-on', 'auto')"

AUTOLOAD_SIZE = f"""
    SELECT COALESCE(SUM(LENGTH(option_value)), 0) AS autoload_size
    FROM {{options}}
    WHERE {_AUTOLOADED}
"""

AUTOLOAD_COUNT = f"""
    SELECT COUNT(*) AS autoload_count
    FROM {{options}}
    WHERE {_AUTOLOADED}
"""

TOTAL_OPTIONS = """
    SELECT COUNT(*) AS total_options FROM {options}
"""

TOP_AUTOLOADED_OPTIONS = f"""
    SELECT option_name AS name, LENGTH(option_value) AS size
    FROM {{options}}
    WHERE {_AUTOLOADED}
    ORDER BY size DESC, option_name ASC
    LIMIT %s
"""

OPTION_VALUE = """
    SELECT option_value FROM {options} WHERE option_name = %s
"""

DELETE_OPTION = """
    DELETE FROM {options} WHERE option_name = %s
"""

# Single-statement overwrite: the previous value stays until the new one lands.
UPSERT_OPTION = """
    INSERT INTO {options} (option_name, option_value, autoload)
    VALUES (%s, %s, %s)
    ON CONFLICT (option_name) DO UPDATE
    SET option_value = excluded.option_value, autoload = excluded.autoload
"""

# LIKE patterns are passed as parameters, built with like_prefix() so the
# underscores in the prefixes match literally. The CASE guard only casts
# timeout values made of digits ({integer_value} is filled per dialect).
TRANSIENT_PREFIX = "_transient_"
TRANSIENT_TIMEOUT_PREFIX = "_transient_timeout_"

LIKE_ESCAPE = "!"

# Per-dialect test that option_value is a non-empty run of digits.
INTEGER_VALUE_POSTGRES = "option_value ~ '^[0-9]+$'"
INTEGER_VALUE_SQLITE = "option_value <> '' AND option_value NOT GLOB '*[^0-9]*'"


def like_prefix(prefix: str) -> str:
    """LIKE pattern matching names that start with prefix, wildcards escaped."""
    for char in (LIKE_ESCAPE, "_", "%"):
        prefix = prefix.replace(char, LIKE_ESCAPE + char)
    return prefix + "%"


TRANSIENT_COUNT = """
    SELECT COUNT(*) AS transient_count
    FROM {options}
    WHERE option_name LIKE %s ESCAPE '!'
      AND option_name NOT LIKE %s ESCAPE '!'
"""

EXPIRED_TRANSIENT_COUNT = """
    SELECT COUNT(*) AS expired_transients
    FROM {options}
    WHERE option_name LIKE %s ESCAPE '!'
      AND CASE WHEN option_name LIKE %s ESCAPE '!' AND {integer_value}
               THEN CAST(option_value AS BIGINT) END < %s
"""

EXPIRED_TRANSIENT_TIMEOUTS_BATCH = """
    SELECT option_name
    FROM {options}
    WHERE option_name LIKE %s ESCAPE '!'
      AND CASE WHEN option_name LIKE %s ESCAPE '!' AND {integer_value}
               THEN CAST(option_value AS BIGINT) END < %s
      AND option_name > %s
    ORDER BY option_name
    LIMIT %s
"""

DELETE_OPTIONS_BY_NAME = """
    DELETE FROM {options} WHERE option_name IN ({placeholders})
"""

# =============================================================================
# Posts and postmeta (MetricsCollector, Revision/Trash/OrphanedMeta cleaners)
# =============================================================================

TOTAL_POSTS = """
    SELECT COUNT(*) AS total_posts
    FROM {posts}
    WHERE post_type NOT IN ('revision', 'auto-draft', 'nav_menu_item')
      AND post_status <> 'trash'
"""

REVISION_COUNT = """
    SELECT COUNT(*) AS total_revisions
    FROM {posts}
    WHERE post_type = 'revision'
"""

TRASHED_POSTS_COUNT = """
    SELECT COUNT(*) AS trashed_posts
    FROM {posts}
    WHERE post_status = 'trash'
"""

POSTMETA_COUNT = """
    SELECT COUNT(*) AS postmeta_rows FROM {postmeta}
"""

ORPHANED_POSTMETA_COUNT = """
    SELECT COUNT(*) AS orphaned_postmeta
    FROM {postmeta} pm
    LEFT JOIN {posts} p ON pm.post_id = p.ID
    WHERE p.ID IS NULL
"""

ORPHANED_POSTMETA_BATCH = """
    SELECT pm.meta_id
    FROM {postmeta} pm
    LEFT JOIN {posts} p ON pm.post_id = p.ID
    WHERE p.ID IS NULL
    LIMIT %s
"""

DELETE_POSTMETA_BY_ID = """
    DELETE FROM {postmeta} WHERE meta_id IN ({placeholders})
"""

DELETE_POSTMETA_BY_POST = """
    DELETE FROM {postmeta} WHERE post_id IN ({placeholders})
"""

# =============================================================================
# Commerce: products, variations, orders, sessions
# =============================================================================

PRODUCT_COUNT = """
    SELECT COUNT(*) AS total_products
    FROM {posts}
    WHERE post_type = 'product'
      AND post_status IN ('publish', 'draft', 'private')
"""

VARIATION_COUNT = """
    SELECT COUNT(*) AS total_variations
    FROM {posts}
    WHERE post_type = 'product_variation'
"""

PRODUCT_META_COUNT = """
    SELECT COUNT(*) AS product_meta
    FROM {postmeta} pm
    INNER JOIN {posts} p ON pm.post_id = p.ID
    WHERE p.post_type = 'product'
"""

HIGH_VARIATION_PRODUCTS = """
    SELECT p.ID AS product_id, p.post_title AS title, COUNT(v.ID) AS variation_count
    FROM {posts} p
    INNER JOIN {posts} v ON v.post_parent = p.ID
    WHERE p.post_type = 'product'
      AND v.post_type = 'product_variation'
    GROUP BY p.ID, p.post_title
    HAVING COUNT(v.ID) >= %s
    ORDER BY variation_count DESC, p.ID ASC
    LIMIT %s
"""

ORDER_COUNT_POSTS = """
    SELECT COUNT(*) AS total_orders
    FROM {posts}
    WHERE post_type = 'shop_order'
"""

ORDER_COUNT_HPOS = """
    SELECT COUNT(*) AS total_orders FROM {orders}
"""

SESSION_COUNT = """
    SELECT COUNT(*) AS wc_sessions FROM {sessions}
"""

EXPIRED_SESSION_COUNT = """
    SELECT COUNT(*) AS expired_wc_sessions
    FROM {sessions}
    WHERE session_expiry < %s
"""

DELETE_EXPIRED_SESSIONS = """
    DELETE FROM {sessions} WHERE session_expiry < %s
"""

# =============================================================================
# Revisions (RevisionCleaner)
# =============================================================================

REVISIONS_PER_PARENT = """
    SELECT post_parent AS parent_id, COUNT(*) AS revision_count
    FROM {posts}
    WHERE post_type = 'revision'
      AND post_parent > 0
    GROUP BY post_parent
"""

REVISION_IDS_FOR_PARENT = """
    SELECT ID AS revision_id
    FROM {posts}
    WHERE post_type = 'revision'
      AND post_parent = %s
    ORDER BY post_date DESC, ID DESC
"""

ALL_REVISION_IDS_BATCH = """
    SELECT ID AS revision_id
    FROM {posts}
    WHERE post_type = 'revision'
    ORDER BY ID
    LIMIT %s
"""

DELETE_POSTS_BY_ID = """
    DELETE FROM {posts} WHERE ID IN ({placeholders})
"""

# =============================================================================
# Trash (TrashCleaner): keyset pagination + full logical delete
# =============================================================================

TRASHED_POST_IDS_BATCH = """
    SELECT ID AS post_id, post_parent AS parent_id
    FROM {posts}
    WHERE post_status = 'trash'
      AND ID > %s
    ORDER BY ID
    LIMIT %s
"""

CHILD_REVISION_IDS = """
    SELECT ID AS revision_id
    FROM {posts}
    WHERE post_type = 'revision'
      AND post_parent = %s
"""

REPARENT_CHILDREN = """
    UPDATE {posts}
    SET post_parent = %s
    WHERE post_parent = %s
      AND post_type <> 'revision'
"""

DELETE_TERM_RELATIONSHIPS = """
    DELETE FROM {term_relationships} WHERE object_id = %s
"""

COMMENT_IDS_FOR_POST = """
    SELECT comment_ID AS comment_id FROM {comments} WHERE comment_post_ID = %s
"""

DELETE_COMMENTMETA = """
    DELETE FROM {commentmeta} WHERE comment_id IN ({placeholders})
"""

DELETE_COMMENTS_FOR_POST = """
    DELETE FROM {comments} WHERE comment_post_ID = %s
"""

DELETE_POST = """
    DELETE FROM {posts} WHERE ID = %s
"""

# =============================================================================
# Catalog lookups
# =============================================================================

TABLE_EXISTS_POSTGRES = """
    SELECT to_regclass(%s) IS NOT NULL AS present
"""

TABLE_EXISTS_SQLITE = """
    SELECT COUNT(*) AS present
    FROM sqlite_master
    WHERE type = 'table' AND name = %s
"""

PING = "SELECT 1 AS ok"

# =============================================================================
# Metric snapshot time series (ScanStore)
# =============================================================================

CREATE_SNAPSHOTS_POSTGRES = """
    CREATE TABLE IF NOT EXISTS {snapshots} (
        id BIGSERIAL PRIMARY KEY,
        metric_key VARCHAR(100) NOT NULL,
        metric_value BIGINT NOT NULL DEFAULT 0,
        snapshot_type VARCHAR(20) NOT NULL DEFAULT 'manual',
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    )
"""

CREATE_SNAPSHOTS_SQLITE = """
    CREATE TABLE IF NOT EXISTS {snapshots} (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        metric_key VARCHAR(100) NOT NULL,
        metric_value BIGINT NOT NULL DEFAULT 0,
        snapshot_type VARCHAR(20) NOT NULL DEFAULT 'manual',
        created_at TEXT NOT NULL
    )
"""

CREATE_SNAPSHOTS_INDEX = """
    CREATE INDEX IF NOT EXISTS idx_storehealth_metric_key_created
    ON {snapshots} (metric_key, created_at)
"""

INSERT_SNAPSHOT = """
    INSERT INTO {snapshots} (metric_key, metric_value, snapshot_type, created_at)
    VALUES (%s, %s, %s, %s)
"""

METRIC_HISTORY = """
    SELECT metric_key, metric_value, snapshot_type, created_at
    FROM {snapshots}
    WHERE metric_key = %s
    ORDER BY id DESC
    LIMIT %s
"""
