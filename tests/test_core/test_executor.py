"""Tests for the transfer executor."""

import contextlib
import threading

import pytest

from rostercap.core.enums import RosterSlot
from rostercap.core.models import Period
from rostercap.core.transactions import TransferType
from rostercap.core.transfers import (
    ConcurrentTransferConflict,
    InvalidTransfer,
    PlayerNotFound,
    PlayerNotOnRoster,
    PositionConstraintViolated,
    RosterFull,
    TeamNotFound,
    TransferExecutor,
    Unaffordable,
    calculate_transfer_impact,
    team_transfer_lock,
)
from rostercap.core.transfers import executor as executor_module
from rostercap.core.transfers.locks import _TEAM_LOCKS
from rostercap.storage import LeagueRepo

SEASON = 2024


@pytest.fixture
def executor(repo):
    return TransferExecutor(repo, lock_timeout_s=1.0)


def _roster_ids(repo, team_id, week):
    return {e.player_id for e in repo.get_roster_snapshot(team_id, week, SEASON)}


class TestCommit:
    """Successful transfers."""

    def test_budget_identity(self, repo, executor, rostered_team):
        """remaining = cap - (prior spend - sold + bought)."""
        result = executor.execute(rostered_team.id, 1, SEASON, ["rb3"], ["rb4"])

        assert result.ledger.current_spent == 94.5 - 6.0 + 8.0
        assert result.ledger.remaining_budget == 100.0 - result.ledger.current_spent
        assert repo.get_team(rostered_team.id) == result.ledger

    def test_roster_and_records(self, repo, executor, rostered_team):
        result = executor.execute(rostered_team.id, 1, SEASON, ["rb3"], ["rb4"])

        roster = _roster_ids(repo, rostered_team.id, 1)
        assert "rb3" not in roster
        assert "rb4" in roster
        assert [(r.player_id, r.transfer_type, r.price) for r in result.records] == [
            ("rb3", TransferType.SELL, 6.0),
            ("rb4", TransferType.BUY, 8.0),
        ]
        assert all(r.transfer_id is not None for r in result.records)

    def test_bought_player_starts_on_bench(self, repo, executor, rostered_team):
        executor.execute(rostered_team.id, 1, SEASON, ["rb3"], ["rb4"])
        entry = next(
            e for e in repo.get_roster_snapshot(rostered_team.id, 1, SEASON) if e.player_id == "rb4"
        )
        assert entry.position_slot == RosterSlot.BENCH

    def test_building_from_empty(self, repo, executor, team, starting_roster_ids):
        result = executor.execute(team.id, 1, SEASON, [], starting_roster_ids)

        assert len(repo.get_roster_snapshot(team.id, 1, SEASON)) == 15
        assert result.ledger.current_spent == 94.5
        assert result.ledger.remaining_budget == 5.5

    def test_preview_and_execute_agree(self, repo, executor, rostered_team):
        preview = calculate_transfer_impact(repo, rostered_team.id, 1, SEASON, ["wr2"], ["qb3"])
        result = executor.execute(rostered_team.id, 1, SEASON, ["wr2"], ["qb3"])

        assert preview.is_affordable and preview.position_valid
        assert result.impact.is_affordable == preview.is_affordable
        assert result.impact.position_valid == preview.position_valid
        assert result.ledger.remaining_budget == preview.remaining_budget

    def test_already_rostered_buy_is_charged(self, repo, executor, rostered_team):
        """Buying a rostered player leaves the roster alone but is still recorded."""
        result = executor.execute(rostered_team.id, 1, SEASON, [], ["k2"])

        assert len(repo.get_roster_snapshot(rostered_team.id, 1, SEASON)) == 15
        assert result.ledger.current_spent == 99.0
        assert result.records[0].transfer_type == TransferType.BUY


class TestTransferEconomics:
    """Free transfers and point cost on commit."""

    def test_preseason_five_transfers_free(self, repo, executor, rostered_team):
        result = executor.execute(
            rostered_team.id,
            1,
            SEASON,
            ["rb3", "wr4", "te2", "k2", "def2"],
            ["rb5", "wr6", "te3", "k3", "def3"],
        )

        assert result.transfers_count == 5
        assert result.point_cost == 0
        assert result.ledger.free_transfers_remaining == rostered_team.free_transfers_remaining

    def test_week_five_three_swaps(self, repo, executor, rostered_team):
        repo.set_current_period(Period.for_week(5))
        repo.copy_roster_forward(rostered_team.id, 1, 5, SEASON)

        result = executor.execute(
            rostered_team.id, 5, SEASON, ["rb3", "wr4", "te2"], ["rb5", "wr6", "te3"]
        )

        assert result.transfers_count == 3
        assert result.point_cost == 12
        assert result.ledger.free_transfers_remaining == 0

    def test_free_transfers_floor_at_zero(self, repo, executor, rostered_team):
        repo.set_current_period(Period.for_week(5))
        repo.copy_roster_forward(rostered_team.id, 1, 5, SEASON)

        executor.execute(rostered_team.id, 5, SEASON, ["rb3"], ["rb5"])
        result = executor.execute(rostered_team.id, 5, SEASON, ["wr4"], ["wr6"])

        assert result.point_cost == 6
        assert result.ledger.free_transfers_remaining == 0


class TestWeekSeeding:
    """Lazy creation of a week's roster from the prior week."""

    def test_execute_seeds_new_week(self, repo, executor, rostered_team):
        result = executor.execute(rostered_team.id, 2, SEASON, ["rb3"], ["rb5"])

        assert result.seeded_roster == 15
        week_two = _roster_ids(repo, rostered_team.id, 2)
        assert "rb5" in week_two and "rb3" not in week_two
        # Prior week untouched
        assert "rb3" in _roster_ids(repo, rostered_team.id, 1)

    def test_seeding_preserves_slots(self, repo, executor, rostered_team):
        repo.remove_roster_entry(rostered_team.id, "qb1", 1, SEASON)
        repo.add_roster_entry(rostered_team.id, "qb1", 1, SEASON, position_slot=RosterSlot.QB)

        executor.ensure_week_roster_exists(rostered_team.id, 2, SEASON)
        slots = {e.player_id: e.position_slot for e in repo.get_roster_snapshot(rostered_team.id, 2, SEASON)}
        assert slots["qb1"] == RosterSlot.QB

    def test_ensure_is_idempotent(self, repo, executor, rostered_team):
        assert executor.ensure_week_roster_exists(rostered_team.id, 2, SEASON) == 15
        assert executor.ensure_week_roster_exists(rostered_team.id, 2, SEASON) == 0
        assert len(repo.get_roster_snapshot(rostered_team.id, 2, SEASON)) == 15

    def test_week_one_starts_empty(self, executor, team):
        assert executor.ensure_week_roster_exists(team.id, 1, SEASON) == 0


class TestRejection:
    """Rejected transfers leave no observable mutation."""

    def test_unaffordable(self, executor, rostered_team, snapshot):
        before = snapshot(rostered_team.id)
        with pytest.raises(Unaffordable) as exc_info:
            executor.execute(rostered_team.id, 1, SEASON, ["k2"], ["qb3"])

        assert exc_info.value.details["remaining_budget"] == -2.0
        assert snapshot(rostered_team.id) == before

    def test_player_not_on_roster(self, executor, rostered_team, snapshot):
        before = snapshot(rostered_team.id)
        with pytest.raises(PlayerNotOnRoster) as exc_info:
            executor.execute(rostered_team.id, 1, SEASON, ["rb4"], ["rb5"])

        assert exc_info.value.player_id == "rb4"
        assert snapshot(rostered_team.id) == before

    def test_player_not_on_roster_does_not_seed(self, executor, rostered_team, snapshot):
        before = snapshot(rostered_team.id)
        with pytest.raises(PlayerNotOnRoster):
            executor.execute(rostered_team.id, 2, SEASON, ["rb4"], ["rb5"])
        assert snapshot(rostered_team.id) == before

    def test_position_constraint(self, executor, rostered_team, snapshot):
        before = snapshot(rostered_team.id)
        with pytest.raises(PositionConstraintViolated) as exc_info:
            executor.execute(rostered_team.id, 1, SEASON, ["qb1", "qb2"], ["rb5", "wr6"])

        assert exc_info.value.missing_positions == ["QB"]
        assert snapshot(rostered_team.id) == before

    def test_roster_full(self, executor, rostered_team, snapshot):
        before = snapshot(rostered_team.id)
        with pytest.raises(RosterFull):
            executor.execute(rostered_team.id, 1, SEASON, [], ["rb5"])
        assert snapshot(rostered_team.id) == before

    def test_invalid_request(self, executor, rostered_team):
        with pytest.raises(InvalidTransfer):
            executor.execute(rostered_team.id, 1, SEASON, ["rb3"], ["rb3"])

    def test_unknown_player(self, executor, rostered_team):
        with pytest.raises(PlayerNotFound):
            executor.execute(rostered_team.id, 1, SEASON, [], ["nobody"])

    def test_other_season_rejected(self, repo, executor, rostered_team, snapshot):
        """A team cannot move rosters of a season it does not play in."""
        before = snapshot(rostered_team.id)
        with pytest.raises(InvalidTransfer) as exc_info:
            executor.execute(rostered_team.id, 1, SEASON + 1, [], ["rb5"])

        assert exc_info.value.details["team_season"] == SEASON
        assert snapshot(rostered_team.id) == before
        assert repo.get_roster_snapshot(rostered_team.id, 1, SEASON + 1) == []

    def test_ledger_conflict_rolls_back(self, repo, executor, rostered_team, snapshot, monkeypatch):
        """A compare-and-set miss undoes the roster and audit writes too."""
        before = snapshot(rostered_team.id)
        monkeypatch.setattr(repo, "update_ledger", lambda *args, **kwargs: False)

        with pytest.raises(ConcurrentTransferConflict):
            executor.execute(rostered_team.id, 1, SEASON, ["rb3"], ["rb4"])
        assert snapshot(rostered_team.id) == before


class TestLocking:
    """Per-team serialization."""

    def test_lock_timeout(self, repo, rostered_team):
        held = threading.Event()
        release = threading.Event()

        def hold_lock():
            with team_transfer_lock(rostered_team.id):
                held.set()
                release.wait(timeout=5)

        holder = threading.Thread(target=hold_lock)
        holder.start()
        try:
            assert held.wait(timeout=5)
            with pytest.raises(TimeoutError):
                TransferExecutor(repo, lock_timeout_s=0.05).execute(
                    rostered_team.id, 1, SEASON, ["rb3"], ["rb4"]
                )
        finally:
            release.set()
            holder.join()

    def test_lock_is_reentrant(self, repo, rostered_team):
        with team_transfer_lock(rostered_team.id, timeout_s=0.05):
            result = TransferExecutor(repo, lock_timeout_s=0.05).execute(
                rostered_team.id, 1, SEASON, ["rb3"], ["rb4"]
            )
        assert result.ledger.current_spent == 96.5

    def test_lock_keyed_by_stored_team_id(self, repo, rostered_team):
        """Another spelling of the same id waits on the same lock."""
        held = threading.Event()
        release = threading.Event()

        def hold_lock():
            with team_transfer_lock(rostered_team.id):
                held.set()
                release.wait(timeout=5)

        holder = threading.Thread(target=hold_lock)
        holder.start()
        try:
            assert held.wait(timeout=5)
            with pytest.raises(TimeoutError):
                TransferExecutor(repo, lock_timeout_s=0.05).execute(
                    "0" + rostered_team.id, 1, SEASON, ["rb3"], ["rb4"]
                )
        finally:
            release.set()
            holder.join()

    def test_unknown_team_takes_no_lock(self, executor):
        before = set(_TEAM_LOCKS)
        with pytest.raises(TeamNotFound):
            executor.execute("9999", 1, SEASON, [], ["rb5"])
        assert set(_TEAM_LOCKS) == before


class TestConcurrentConnections:
    """Two connections racing for the last roster slot."""

    @pytest.mark.parametrize("process_lock", [True, False], ids=["team-lock", "db-lock-only"])
    def test_last_slot_goes_to_one_buyer(
        self, repo, db_path, rostered_team, monkeypatch, process_lock
    ):
        TransferExecutor(repo).execute(rostered_team.id, 1, SEASON, ["k2"], [])
        prior_spend = repo.get_team(rostered_team.id).current_spent
        assert len(repo.get_roster_snapshot(rostered_team.id, 1, SEASON)) == 14

        if not process_lock:
            # Leave BEGIN IMMEDIATE as the only thing serializing the writers
            monkeypatch.setattr(
                executor_module,
                "team_transfer_lock",
                lambda team_id, timeout_s=None: contextlib.nullcontext(),
            )

        barrier = threading.Barrier(2)
        outcomes = {}

        def buy(player_id):
            with LeagueRepo(db_path) as own_repo:
                executor = TransferExecutor(own_repo, lock_timeout_s=5.0)
                barrier.wait(timeout=5)
                try:
                    outcomes[player_id] = executor.execute(rostered_team.id, 1, SEASON, [], [player_id])
                except (RosterFull, Unaffordable) as exc:
                    outcomes[player_id] = exc

        threads = [threading.Thread(target=buy, args=(pid,)) for pid in ("k3", "rb5")]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=10)

        assert set(outcomes) == {"k3", "rb5"}
        committed = [pid for pid, o in outcomes.items() if not isinstance(o, Exception)]
        rejected = [pid for pid, o in outcomes.items() if isinstance(o, Exception)]
        assert len(committed) == 1 and len(rejected) == 1

        ledger = repo.get_team(rostered_team.id)
        assert ledger.current_spent == prior_spend + 4.5
        roster = _roster_ids(repo, rostered_team.id, 1)
        assert len(roster) == 15
        assert committed[0] in roster and rejected[0] not in roster
        bought = [
            r.player_id
            for r in repo.transfer_history(SEASON, team_id=rostered_team.id, limit=500)
            if r.transfer_type == TransferType.BUY and r.player_id in ("k3", "rb5")
        ]
        assert bought == committed
