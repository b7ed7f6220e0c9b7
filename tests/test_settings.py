"""Tests for typed configuration and environment loading."""

import pytest

from config.settings import (
    CATEGORY_AUTOLOAD, CATEGORY_REVISIONS, DEFAULT_WEIGHTS, REVISIONS_DELETE_ALL, SCORE_RANGES,
    CleanupConfig, Dialect, OrderStorage, ScoreThreshold, ScoringConfig, Settings, StoreConfig,
    TableNames, load_settings, sanitize_runtime_settings,
)


class TestScoringConfig:
    def test_defaults(self):
        config = ScoringConfig()
        assert config.weights == DEFAULT_WEIGHTS
        assert config.thresholds[CATEGORY_AUTOLOAD].fair == 2_000_000
        assert config.severe_cutovers[CATEGORY_AUTOLOAD] == 1_000_000

    def test_partial_weight_override_merges_onto_defaults(self):
        config = ScoringConfig(weights={CATEGORY_REVISIONS: 0.5})
        assert config.weights[CATEGORY_REVISIONS] == 0.5
        assert config.weights[CATEGORY_AUTOLOAD] == 0.25

    def test_unknown_category_rejected(self):
        with pytest.raises(ValueError):
            ScoringConfig(weights={"bogus": 0.1})

    def test_negative_weight_rejected(self):
        with pytest.raises(ValueError):
            ScoringConfig(weights={CATEGORY_AUTOLOAD: -1})

    def test_threshold_must_not_decrease(self):
        with pytest.raises(ValueError):
            ScoreThreshold(excellent=10, good=5)
        with pytest.raises(ValueError):
            ScoreThreshold(excellent=1, good=5, fair=2)


class TestCleanupConfig:
    def test_negative_keep_normalized_to_delete_all(self):
        config = CleanupConfig(revisions_keep=-7)
        assert config.revisions_keep == REVISIONS_DELETE_ALL
        assert config.delete_all_revisions

    def test_zero_keep_is_not_delete_all(self):
        assert not CleanupConfig(revisions_keep=0).delete_all_revisions

    @pytest.mark.parametrize("batch_size", [0, 10_001])
    def test_batch_size_range(self, batch_size):
        with pytest.raises(ValueError):
            CleanupConfig(batch_size=batch_size)


class TestStoreConfig:
    def test_string_enums_coerced(self):
        config = StoreConfig(dialect="sqlite", order_storage="hpos")
        assert config.dialect == Dialect.SQLITE
        assert config.order_storage == OrderStorage.HPOS

    def test_bad_prefix_rejected(self):
        with pytest.raises(ValueError):
            StoreConfig(table_prefix="wp; DROP")

    def test_table_names_follow_prefix(self):
        tables = StoreConfig(table_prefix="shop_").tables
        assert tables.posts == "shop_posts"
        assert tables.sessions == "shop_woocommerce_sessions"
        assert tables.orders == "shop_wc_orders"
        assert TableNames().snapshots == "wp_storehealth_metrics_snapshots"


class TestSettings:
    def test_top_autoload_limit_range(self):
        with pytest.raises(ValueError):
            Settings(top_autoload_limit=51)

    def test_load_from_environment(self, monkeypatch):
        monkeypatch.setenv("STOREHEALTH_DIALECT", "sqlite")
        monkeypatch.setenv("STOREHEALTH_TABLE_PREFIX", "shop_")
        monkeypatch.setenv("STOREHEALTH_REVISIONS_KEEP", "3")
        monkeypatch.setenv("STOREHEALTH_BATCH_SIZE", "100")
        settings = load_settings()
        assert settings.store.dialect == Dialect.SQLITE
        assert settings.store.table_prefix == "shop_"
        assert settings.cleanup.revisions_keep == 3
        assert settings.cleanup.batch_size == 100

    def test_non_integer_environment_value(self, monkeypatch):
        monkeypatch.setenv("STOREHEALTH_BATCH_SIZE", "lots")
        with pytest.raises(ValueError, match="STOREHEALTH_BATCH_SIZE"):
            load_settings()


class TestRuntimeSettings:
    @pytest.mark.parametrize("raw,expected", [(60, 50), (-3, 0), (0, 0), ("12", 12), (50, 50)])
    def test_keep_clamped(self, raw, expected):
        assert sanitize_runtime_settings({"cleanup_revisions_keep": raw}) == {"cleanup_revisions_keep": expected}

    def test_unknown_keys_dropped(self):
        assert sanitize_runtime_settings({"theme": "dark"}) == {}

    def test_non_integer_rejected(self):
        with pytest.raises(ValueError):
            sanitize_runtime_settings({"cleanup_revisions_keep": "abc"})


def test_score_ranges_partition_0_to_100():
    covered = sorted(n for band in SCORE_RANGES for n in range(band["min"], band["max"] + 1))
    assert covered == list(range(101))
