"""Shared pytest fixtures for rostercap tests."""

import pytest

from rostercap.core.enums import Position
from rostercap.core.models import Player, RosterConstraints
from rostercap.core.transfers import TransferExecutor
from rostercap.storage import LeagueRepo

SEASON = 2024


def make_player(player_id: str, position: str, price: float, name: str = "") -> Player:
    return Player(
        id=player_id,
        position=Position.parse(position),
        current_price=price,
        name=name or player_id.upper(),
    )


# =============================================================================
# Catalog Fixtures
# =============================================================================


# 15 players, 94.5 total: QB 2, RB 3, WR 4, TE 2, K 2, DEF 2
STARTING_ROSTER = [
    ("qb1", "QB", 10.0),
    ("qb2", "QB", 5.0),
    ("rb1", "RB", 9.0),
    ("rb2", "RB", 7.0),
    ("rb3", "RB", 6.0),
    ("wr1", "WR", 9.0),
    ("wr2", "WR", 7.5),
    ("wr3", "WR", 6.5),
    ("wr4", "WR", 5.0),
    ("te1", "TE", 6.0),
    ("te2", "TE", 4.5),
    ("k1", "K", 5.0),
    ("k2", "K", 4.5),
    ("def1", "DEF", 5.0),
    ("def2", "DEF", 4.5),
]

FREE_AGENTS = [
    ("qb3", "QB", 12.0),
    ("rb4", "RB", 8.0),
    ("rb5", "RB", 4.5),
    ("wr5", "WR", 12.0),
    ("wr6", "WR", 4.5),
    ("te3", "TE", 4.5),
    ("k3", "K", 4.5),
    ("def3", "DEF", 4.5),
]


@pytest.fixture
def starting_roster_ids() -> list[str]:
    """IDs of the 15-player roster used by the `rostered_team` fixture."""
    return [pid for pid, _, _ in STARTING_ROSTER]


@pytest.fixture
def catalog() -> list[Player]:
    """Every player in the test catalog."""
    return [make_player(*row) for row in STARTING_ROSTER + FREE_AGENTS]


@pytest.fixture
def constraints() -> RosterConstraints:
    return RosterConstraints.defaults_for(SEASON)


# =============================================================================
# Storage Fixtures
# =============================================================================


@pytest.fixture
def db_path(tmp_path) -> str:
    return str(tmp_path / "league.db")


@pytest.fixture
def repo(db_path, catalog):
    """Initialized league database with the test catalog loaded."""
    repo = LeagueRepo(db_path)
    repo.init_db(default_season=SEASON)
    repo.upsert_players(catalog)
    yield repo
    repo.close()


@pytest.fixture
def team(repo):
    """A new team with an empty roster and a full budget."""
    return repo.create_team("Gridiron Gang", "sam@example.com", SEASON)


@pytest.fixture
def rostered_team(repo, team, starting_roster_ids):
    """A team that bought the starting roster for week 1 during Preseason."""
    TransferExecutor(repo).execute(team.id, 1, SEASON, [], starting_roster_ids)
    return repo.get_team(team.id)


@pytest.fixture
def snapshot(repo):
    """Capture roster, ledger and transfer log for no-mutation checks."""

    def _snapshot(team_id: str, weeks=(1, 2, 5)):
        return {
            "team": repo.get_team(team_id),
            "rosters": {w: repo.get_roster_snapshot(team_id, w, SEASON) for w in weeks},
            "transfers": repo.transfer_history(SEASON, team_id=team_id, limit=500),
        }

    return _snapshot
