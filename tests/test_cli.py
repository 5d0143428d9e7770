"""Tests for the rostercap command line."""

import sys

import pytest

from rostercap.__main__ import main
from rostercap.config import set_config
from rostercap.core.models import Period
from rostercap.storage import LeagueRepo


@pytest.fixture(autouse=True)
def fresh_config(monkeypatch, tmp_path):
    """Each run builds its config from a throwaway environment."""
    # --db writes the variable too; setenv restores it on teardown
    monkeypatch.setenv("ROSTERCAP_DB_PATH", str(tmp_path / "default.db"))
    set_config(None)
    yield
    set_config(None)


def run_cli(monkeypatch, *args):
    monkeypatch.setattr(sys, "argv", ["rostercap", *args])
    main()


class TestCommands:
    """init-db, import-players and set-period."""

    def test_init_db(self, monkeypatch, tmp_path, capsys):
        db = str(tmp_path / "cli.db")
        run_cli(monkeypatch, "--db", db, "init-db")

        assert "Initialized" in capsys.readouterr().out
        with LeagueRepo(db) as repo:
            assert repo.get_current_period() == Period.preseason()

    def test_import_players(self, monkeypatch, tmp_path):
        db = str(tmp_path / "cli.db")
        csv_path = tmp_path / "players.csv"
        csv_path.write_text("player_id,name,position,current_price\nx1,Slot Man,WR,6.0\n")

        run_cli(monkeypatch, "--db", db, "import-players", str(csv_path))

        with LeagueRepo(db) as repo:
            assert repo.get_player("x1").current_price == 6.0

    def test_set_period(self, monkeypatch, tmp_path, capsys):
        db = str(tmp_path / "cli.db")
        run_cli(monkeypatch, "--db", db, "init-db")
        run_cli(monkeypatch, "--db", db, "set-period", "Week 4")

        assert "Preseason -> 4" in capsys.readouterr().out
        with LeagueRepo(db) as repo:
            assert repo.get_current_period() == Period.for_week(4)

    def test_bad_period_exits(self, monkeypatch, tmp_path):
        db = str(tmp_path / "cli.db")
        run_cli(monkeypatch, "--db", db, "init-db")
        with pytest.raises(SystemExit):
            run_cli(monkeypatch, "--db", db, "set-period", "someday")
