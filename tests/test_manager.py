"""Tests for CleanupManager dispatch, result envelopes and events."""

import pytest

from config.settings import CLEANUP_TRANSIENTS, CLEANUP_TYPES, CleanupConfig, ErrorKind
from cleanup import CleanupManager, CleanupOperation
from framework.events import EventBus, EventType


class FixedOperation(CleanupOperation):
    name = "Fixed"
    preview_unit = "widget"
    execute_unit = "widget"

    def __init__(self, pending: int = 3):
        super().__init__(client=None)
        self.pending = pending

    def preview(self) -> int:
        return self.pending

    def execute(self) -> int:
        deleted, self.pending = self.pending, 0
        return deleted


class BrokenOperation(FixedOperation):
    def preview(self) -> int:
        raise RuntimeError("permission denied for table wp_options")


@pytest.fixture
def manager(client, clock):
    return CleanupManager.with_defaults(client, CleanupConfig(), clock=clock)


class TestDefaults:
    def test_builtin_types(self, manager):
        assert manager.types == list(CLEANUP_TYPES)
        assert manager.get_available_types()[CLEANUP_TRANSIENTS] == "Expired Transients"

    def test_counts_on_empty_store(self, manager):
        assert manager.get_all_counts() == {t: 0 for t in CLEANUP_TYPES}

    def test_counts_without_sessions_table(self, manager, seed):
        seed.drop("wp_woocommerce_sessions")
        seed.meta(4040)
        counts = manager.get_all_counts()
        assert set(counts) == set(CLEANUP_TYPES)
        assert counts["sessions"] == 0
        assert counts["orphaned_meta"] == 1

    def test_revisions_keep_from_provider(self, client, clock, seed):
        seed.revisions(seed.post("A"), 4)
        manager = CleanupManager.with_defaults(client, CleanupConfig(revisions_keep=5), clock=clock,
                                               keep_provider=lambda: 1)
        assert manager.preview("revisions").count == 3


class TestPreview:
    def test_invalid_type(self, manager):
        result = manager.preview("everything")
        assert not result.success
        assert result.error == ErrorKind.INVALID_CATEGORY
        assert result.message == "Invalid cleanup type."
        assert result.to_dict()["error"] == "invalid_category"

    def test_message_pluralized(self, manager, seed, now):
        seed.transient("one", now - 1)
        result = manager.preview(CLEANUP_TRANSIENTS)
        assert result.success
        assert result.count == 1
        assert result.message == "1 transient found"

    def test_failure_becomes_result(self):
        result = CleanupManager({"broken": BrokenOperation()}).preview("broken")
        assert not result.success
        assert result.error == ErrorKind.OPERATION_FAILURE
        assert "permission denied" in result.message


class TestExecute:
    def test_before_deleted_after(self, manager, seed, now):
        seed.transient("a", now - 1)
        seed.transient("b", now - 1)
        result = manager.execute(CLEANUP_TRANSIENTS)
        assert result.success
        assert (result.before, result.deleted, result.after) == (2, 4, 0)
        assert result.message == "4 rows cleaned"

    def test_invalid_type(self, manager):
        result = manager.execute("")
        assert not result.success
        assert result.error == ErrorKind.INVALID_CATEGORY

    def test_failure_envelope(self):
        result = CleanupManager({"broken": BrokenOperation()}).execute("broken")
        assert not result.success
        assert result.error == ErrorKind.OPERATION_FAILURE
        assert result.deleted == 0

    def test_emits_completion_event(self):
        events = EventBus()
        seen = []
        events.subscribe(EventType.CLEANUP_COMPLETED, seen.append)
        CleanupManager({"fixed": FixedOperation(2)}, events=events).execute("fixed")
        assert len(seen) == 1
        assert seen[0].data == {"type": "fixed", "deleted": 2}

    def test_no_event_on_failure(self):
        events = EventBus()
        CleanupManager({"broken": BrokenOperation()}, events=events).execute("broken")
        assert events.events == []


class TestRegistry:
    def test_register_adds_type(self, manager):
        manager.register("widgets", FixedOperation(5))
        assert "widgets" in manager.types
        assert manager.preview("widgets").message == "5 widgets found"
        assert manager.execute("widgets").message == "5 widgets cleaned"

    def test_register_replaces_type(self, manager):
        replacement = FixedOperation(1)
        manager.register(CLEANUP_TRANSIENTS, replacement)
        assert manager.get(CLEANUP_TRANSIENTS) is replacement
        assert manager.types.count(CLEANUP_TRANSIENTS) == 1

    def test_register_requires_type(self, manager):
        with pytest.raises(ValueError):
            manager.register("", FixedOperation())

    def test_failing_count_reports_zero(self, manager):
        manager.register("broken", BrokenOperation())
        manager.register("fixed", FixedOperation(7))
        counts = manager.get_all_counts()
        assert counts["broken"] == 0
        assert counts["fixed"] == 7
