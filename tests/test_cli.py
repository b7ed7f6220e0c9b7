"""Tests for the command-line entry point."""

import pytest

import main
from framework.context import AppContext


@pytest.fixture
def context(settings, client, clock, monkeypatch):
    ctx = AppContext(settings, client, clock=clock)
    monkeypatch.setattr(ctx, "close", lambda: None)
    monkeypatch.setattr(AppContext, "from_settings", classmethod(lambda cls, s: ctx))
    monkeypatch.setenv("STOREHEALTH_DIALECT", "sqlite")
    return ctx


class TestCommands:
    def test_init_then_scan(self, context, capsys):
        assert main.main(["init"]) == 0
        assert main.main(["scan"]) == 0
        out = capsys.readouterr().out
        assert "STORE HEALTH: 100/100 (Excellent)" in out
        assert "Recommendations: 0" in out

    def test_last_without_scan(self, context, capsys):
        assert main.main(["last"]) == 1
        assert "No scan data" in capsys.readouterr().out

    def test_last_with_unreadable_store(self, context, seed, capsys):
        seed.drop("wp_options")
        assert main.main(["last"]) == 1
        assert "Could not read last scan: Failed:" in capsys.readouterr().out

    def test_settings_show_and_update(self, context, capsys):
        assert main.main(["settings"]) == 0
        assert main.main(["settings", "--keep", "70"]) == 0
        out = capsys.readouterr().out
        assert "cleanup_revisions_keep: 5" in out
        assert "Settings saved." in out
        assert "cleanup_revisions_keep: 50" in out

    def test_preview_and_clean(self, context, seed, now, capsys):
        seed.transient("old", now - 5)
        assert main.main(["preview", "transients"]) == 0
        assert main.main(["clean", "transients"]) == 0
        out = capsys.readouterr().out
        assert "transients: 1 transient found" in out
        assert "transients: 2 rows cleaned (before=1, after=0)" in out

    def test_unknown_cleanup_type(self, context, capsys):
        assert main.main(["clean", "everything"]) == 1
        assert "Invalid cleanup type." in capsys.readouterr().out

    def test_counts(self, context, seed, capsys):
        seed.post("binned", status="trash")
        assert main.main(["counts"]) == 0
        assert "Trashed Posts" in capsys.readouterr().out


def test_bad_configuration_exits_2(monkeypatch):
    monkeypatch.setenv("STOREHEALTH_BATCH_SIZE", "0")
    assert main.main(["counts"]) == 2


def test_command_required():
    with pytest.raises(SystemExit):
        main.build_parser().parse_args([])
