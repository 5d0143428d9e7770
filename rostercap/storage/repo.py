"""
SQLite-backed league store.

LeagueRepo implements the TransferStore protocol the transfer engine
consumes, plus the admin and catalog operations around it (teams,
settings, player import, transfer history).

Transactions are explicit: the connection runs in autocommit mode and
every write goes through transaction(), whose outermost level is
BEGIN IMMEDIATE so concurrent writers serialize on the database lock.
"""

from __future__ import annotations

import contextlib
import json
import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Iterator, Optional, Sequence

import pandas as pd

from rostercap.core.enums import Position, RosterSlot
from rostercap.core.models import Period, Player, RosterConstraints, RosterEntry, Team, round_money
from rostercap.core.transactions import TransferRecord, TransferType
from rostercap.core.transfers.errors import TeamAlreadyExists
from rostercap.storage.schema import CURRENT_SEASON_KEY, CURRENT_WEEK_KEY, apply_schema

logger = logging.getLogger(__name__)

# Ledger compare-and-set tolerance (amounts are stored to the cent)
_MONEY_EPSILON = 0.005

PLAYER_CSV_REQUIRED = ("player_id", "position", "current_price")


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _parse_ts(value: Any) -> Optional[datetime]:
    if not value:
        return None
    return datetime.fromisoformat(str(value))


def _require_columns(cols: Sequence[str], required: Sequence[str]) -> None:
    missing = [c for c in required if c not in cols]
    if missing:
        raise ValueError(f"Missing required columns: {missing}. Found: {list(cols)}")


class LeagueRepo:
    """
    One SQLite connection to the league database.

    Usage:
        with LeagueRepo(path) as repo:
            repo.init_db()
            team = repo.create_team("Gridiron Gang", "sam@example.com", 2024)
    """

    def __init__(self, db_path: str | Path, *, busy_timeout_s: float = 5.0):
        self.db_path = str(db_path)
        self._conn = sqlite3.connect(self.db_path, timeout=busy_timeout_s, isolation_level=None)
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA foreign_keys = ON;")
        self._conn.execute("PRAGMA journal_mode = WAL;")
        self._savepoint_seq = 0

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> LeagueRepo:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @contextlib.contextmanager
    def transaction(self) -> Iterator[sqlite3.Cursor]:
        """
        Atomic transaction helper.

        Supports nesting via SAVEPOINT:
        - outermost: BEGIN IMMEDIATE ... COMMIT/ROLLBACK
        - nested: SAVEPOINT ... RELEASE (or ROLLBACK TO + RELEASE on error)
        """
        cur = self._conn.cursor()
        nested = self._conn.in_transaction
        sp_name = None
        try:
            if nested:
                self._savepoint_seq += 1
                sp_name = f"sp_{self._savepoint_seq}"
                cur.execute(f"SAVEPOINT {sp_name};")
            else:
                cur.execute("BEGIN IMMEDIATE;")

            yield cur

            if sp_name:
                cur.execute(f"RELEASE SAVEPOINT {sp_name};")
            else:
                cur.execute("COMMIT;")
        except BaseException:
            if sp_name:
                # Roll back to the savepoint only; the outer transaction decides the rest
                try:
                    cur.execute(f"ROLLBACK TO SAVEPOINT {sp_name};")
                finally:
                    cur.execute(f"RELEASE SAVEPOINT {sp_name};")
            elif self._conn.in_transaction:
                cur.execute("ROLLBACK;")
            raise
        finally:
            cur.close()

    # ------------------------
    # Schema
    # ------------------------

    def init_db(self, *, default_season: int = 2024) -> None:
        """Create tables and default settings. Safe to run on an existing database."""
        cur = self._conn.cursor()
        try:
            apply_schema(cur, now=_utc_now_iso(), default_season=default_season)
        finally:
            cur.close()

    # ------------------------
    # Settings
    # ------------------------

    def get_setting(self, key: str, default: Optional[str] = None) -> Optional[str]:
        row = self._conn.execute(
            "SELECT setting_value FROM app_settings WHERE setting_key = ?;", (key,)
        ).fetchone()
        return row["setting_value"] if row else default

    def set_setting(self, key: str, value: str, description: Optional[str] = None) -> None:
        with self.transaction() as cur:
            cur.execute(
                """
                INSERT INTO app_settings(setting_key, setting_value, description, updated_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(setting_key) DO UPDATE SET
                    setting_value=excluded.setting_value,
                    description=COALESCE(excluded.description, app_settings.description),
                    updated_at=excluded.updated_at;
                """,
                (key, str(value), description, _utc_now_iso()),
            )

    def get_current_season(self, default: int = 2024) -> int:
        value = self.get_setting(CURRENT_SEASON_KEY)
        try:
            return int(value) if value is not None else default
        except ValueError:
            return default

    def get_current_period(self) -> Period:
        return Period.parse(self.get_setting(CURRENT_WEEK_KEY))

    def set_current_period(self, period: Period | str | int, season: Optional[int] = None) -> dict:
        """
        Change the current period.

        Advancing from week n to n + 1 copies forward the roster of every team
        that has none for the new week yet, and resets free transfers to the weekly
        allotment. Entering Week 1 from Preseason/Setup copies nothing.
        """
        new_period = Period.parse(period)
        season = int(season) if season is not None else self.get_current_season()

        with self.transaction():
            old_period = self.get_current_period()
            self.set_setting(CURRENT_WEEK_KEY, new_period.to_setting())

            rosters_copied = 0
            teams_replenished = 0
            if new_period.is_week:
                if old_period.is_week and new_period.week == old_period.week + 1:
                    rosters_copied = self.copy_all_rosters_forward(
                        old_period.week, new_period.week, season
                    )
                if not old_period.is_week or new_period.week > old_period.week:
                    teams_replenished = self.replenish_free_transfers(season)

        logger.info(
            "Period changed %s -> %s (season %s): %s roster entries copied, %s teams replenished",
            old_period, new_period, season, rosters_copied, teams_replenished,
        )
        return {
            "previous": old_period.to_setting(),
            "current": new_period.to_setting(),
            "season": season,
            "rosters_copied": rosters_copied,
            "teams_replenished": teams_replenished,
        }

    # ------------------------
    # Player catalog
    # ------------------------

    def _player_from_row(self, row: sqlite3.Row) -> Player:
        return Player(
            id=str(row["player_id"]),
            position=Position.parse(row["position"]),
            current_price=float(row["current_price"]),
            name=row["name"] or "",
            nfl_team=row["nfl_team"],
        )

    def get_player(self, player_id: str) -> Optional[Player]:
        row = self._conn.execute(
            "SELECT * FROM players WHERE player_id = ?;", (str(player_id),)
        ).fetchone()
        return self._player_from_row(row) if row else None

    def get_players(self, player_ids: Iterable[str]) -> dict[str, Player]:
        ids = sorted({str(pid) for pid in player_ids})
        if not ids:
            return {}
        placeholders = ",".join("?" for _ in ids)
        rows = self._conn.execute(
            f"SELECT * FROM players WHERE player_id IN ({placeholders});", ids
        ).fetchall()
        return {str(r["player_id"]): self._player_from_row(r) for r in rows}

    def get_player_price(self, player_id: str) -> Optional[float]:
        row = self._conn.execute(
            "SELECT current_price FROM players WHERE player_id = ?;", (str(player_id),)
        ).fetchone()
        return float(row["current_price"]) if row else None

    def list_players(
        self,
        position: Optional[Position] = None,
        max_price: Optional[float] = None,
    ) -> list[Player]:
        sql = "SELECT * FROM players WHERE 1=1"
        params: list[Any] = []
        if position is not None:
            sql += " AND position = ?"
            params.append(Position.parse(position).value)
        if max_price is not None:
            sql += " AND current_price <= ?"
            params.append(float(max_price))
        sql += " ORDER BY current_price DESC, player_id;"
        return [self._player_from_row(r) for r in self._conn.execute(sql, params).fetchall()]

    def upsert_players(self, players: Iterable[Player]) -> int:
        now = _utc_now_iso()
        rows = [
            (p.id, p.name, p.position.value, p.nfl_team, float(p.current_price), now)
            for p in players
        ]
        with self.transaction() as cur:
            cur.executemany(
                """
                INSERT INTO players(player_id, name, position, nfl_team, current_price, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(player_id) DO UPDATE SET
                    name=excluded.name,
                    position=excluded.position,
                    nfl_team=excluded.nfl_team,
                    current_price=excluded.current_price,
                    updated_at=excluded.updated_at;
                """,
                rows,
            )
        return len(rows)

    def import_players_csv(self, csv_path: str | Path, *, floor_price: Optional[float] = None) -> int:
        """
        Load the player catalog from a CSV file (upsert by player_id).

        Required columns: player_id, position, current_price. Optional: name,
        nfl_team. Column names are matched case-insensitively.
        """
        df = pd.read_csv(csv_path, dtype={"player_id": str})
        df.columns = [str(c).strip().lower() for c in df.columns]
        _require_columns(list(df.columns), PLAYER_CSV_REQUIRED)

        df["player_id"] = df["player_id"].astype(str).str.strip()
        if df["player_id"].duplicated().any():
            dupes = sorted(df.loc[df["player_id"].duplicated(), "player_id"].unique())
            raise ValueError(f"Duplicate player_id in CSV: {dupes}")

        df["current_price"] = pd.to_numeric(df["current_price"], errors="raise").astype(float)
        if floor_price is not None:
            below = df.loc[df["current_price"] < floor_price, "player_id"].tolist()
            if below:
                raise ValueError(f"Players priced below floor {floor_price}: {below}")

        for optional in ("name", "nfl_team"):
            if optional not in df.columns:
                df[optional] = None
        df["name"] = df["name"].fillna("").astype(str)
        df["nfl_team"] = df["nfl_team"].astype(object).where(df["nfl_team"].notna(), None)

        players = [
            Player(
                id=row.player_id,
                position=Position.parse(row.position),
                current_price=round_money(row.current_price),
                name=row.name,
                nfl_team=row.nfl_team,
            )
            for row in df.itertuples(index=False)
        ]
        count = self.upsert_players(players)
        logger.info("Imported %s players from %s", count, csv_path)
        return count

    # ------------------------
    # Season rules
    # ------------------------

    def get_roster_constraints(self, season: int) -> RosterConstraints:
        row = self._conn.execute(
            "SELECT rules_json FROM roster_constraints WHERE season = ?;", (int(season),)
        ).fetchone()
        if not row:
            return RosterConstraints.defaults_for(int(season))
        data = json.loads(row["rules_json"])
        data["season"] = int(season)
        return RosterConstraints.from_dict(data)

    def set_roster_constraints(self, constraints: RosterConstraints) -> None:
        errors = constraints.validate()
        if errors:
            raise ValueError(f"Invalid roster constraints: {errors}")
        with self.transaction() as cur:
            cur.execute(
                """
                INSERT INTO roster_constraints(season, rules_json, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(season) DO UPDATE SET
                    rules_json=excluded.rules_json,
                    updated_at=excluded.updated_at;
                """,
                (int(constraints.season), json.dumps(constraints.to_dict()), _utc_now_iso()),
            )

    # ------------------------
    # Teams and ledger
    # ------------------------

    def _team_from_row(self, row: sqlite3.Row) -> Team:
        return Team(
            id=str(row["team_id"]),
            season=int(row["season"]),
            current_spent=round_money(row["current_spent"]),
            remaining_budget=round_money(row["remaining_budget"]),
            free_transfers_remaining=int(row["free_transfers_remaining"]),
            name=row["team_name"],
            owner=row["owner"],
            created_at=_parse_ts(row["created_at"]),
        )

    def create_team(self, name: str, owner: str, season: int) -> Team:
        """Create a team with a full budget. One team per owner per season."""
        constraints = self.get_roster_constraints(season)
        with self.transaction() as cur:
            existing = cur.execute(
                "SELECT team_id FROM teams WHERE owner = ? AND season = ?;", (owner, int(season))
            ).fetchone()
            if existing:
                raise TeamAlreadyExists(
                    "You already have a team for this season. "
                    "Each user can only create one team per season.",
                    {"owner": owner, "season": int(season), "team_id": str(existing["team_id"])},
                )
            cur.execute(
                """
                INSERT INTO teams(team_name, owner, season, current_spent, remaining_budget,
                                  free_transfers_remaining, created_at)
                VALUES (?, ?, ?, 0, ?, ?, ?);
                """,
                (
                    name,
                    owner,
                    int(season),
                    constraints.salary_cap,
                    constraints.free_transfers_per_week,
                    _utc_now_iso(),
                ),
            )
            team_id = str(cur.lastrowid)
        logger.info("Created team %s (%s) for %s, season %s", team_id, name, owner, season)
        return self.get_team(team_id)

    def get_team(self, team_id: str) -> Optional[Team]:
        row = self._conn.execute("SELECT * FROM teams WHERE team_id = ?;", (team_id,)).fetchone()
        return self._team_from_row(row) if row else None

    def list_teams(self, season: int) -> list[Team]:
        rows = self._conn.execute(
            "SELECT * FROM teams WHERE season = ? ORDER BY team_id;", (int(season),)
        ).fetchall()
        return [self._team_from_row(r) for r in rows]

    def update_ledger(
        self,
        team_id: str,
        spend: float,
        remaining_budget: float,
        free_transfers_remaining: int,
        expected_spend: Optional[float] = None,
    ) -> bool:
        """
        Write a team's ledger.

        With expected_spend, only writes if the stored spend still equals it
        (compare-and-set). Returns True if a row was updated.
        """
        sql = """
            UPDATE teams
            SET current_spent = ?, remaining_budget = ?, free_transfers_remaining = ?
            WHERE team_id = ?
        """
        params: list[Any] = [
            round_money(spend),
            round_money(remaining_budget),
            int(free_transfers_remaining),
            team_id,
        ]
        if expected_spend is not None:
            sql += " AND ABS(current_spent - ?) < ?"
            params.extend([float(expected_spend), _MONEY_EPSILON])
        with self.transaction() as cur:
            cur.execute(sql + ";", params)
            return cur.rowcount == 1

    def replenish_free_transfers(self, season: int) -> int:
        allotment = self.get_roster_constraints(season).free_transfers_per_week
        with self.transaction() as cur:
            cur.execute(
                "UPDATE teams SET free_transfers_remaining = ? WHERE season = ?;",
                (allotment, int(season)),
            )
            return cur.rowcount

    # ------------------------
    # Rosters
    # ------------------------

    def get_roster_snapshot(self, team_id: str, week: int, season: int) -> list[RosterEntry]:
        rows = self._conn.execute(
            """
            SELECT r.team_id, r.player_id, r.week, r.season, r.position_slot,
                   p.position, p.current_price
            FROM rosters r
            JOIN players p ON p.player_id = r.player_id
            WHERE r.team_id = ? AND r.week = ? AND r.season = ?
            ORDER BY p.position, r.player_id;
            """,
            (team_id, int(week), int(season)),
        ).fetchall()
        return [
            RosterEntry(
                team_id=str(r["team_id"]),
                player_id=str(r["player_id"]),
                week=int(r["week"]),
                season=int(r["season"]),
                position_slot=RosterSlot(r["position_slot"]),
                position=Position.parse(r["position"]),
                current_price=float(r["current_price"]),
            )
            for r in rows
        ]

    def get_roster_players(self, team_id: str, week: int, season: int) -> list[Player]:
        ids = [e.player_id for e in self.get_roster_snapshot(team_id, week, season)]
        catalog = self.get_players(ids)
        return [catalog[pid] for pid in ids if pid in catalog]

    def copy_roster_forward(self, team_id: str, from_week: int, to_week: int, season: int) -> int:
        """Copy one team's roster (slots preserved). Entries already present are kept."""
        with self.transaction() as cur:
            cur.execute(
                """
                INSERT OR IGNORE INTO rosters(team_id, player_id, week, season, position_slot)
                SELECT team_id, player_id, ?, season, position_slot
                FROM rosters
                WHERE team_id = ? AND week = ? AND season = ?;
                """,
                (int(to_week), team_id, int(from_week), int(season)),
            )
            return cur.rowcount

    def copy_all_rosters_forward(self, from_week: int, to_week: int, season: int) -> int:
        """Seed to_week for every team that has no roster there yet."""
        with self.transaction() as cur:
            cur.execute(
                """
                INSERT OR IGNORE INTO rosters(team_id, player_id, week, season, position_slot)
                SELECT src.team_id, src.player_id, ?, src.season, src.position_slot
                FROM rosters src
                WHERE src.week = ? AND src.season = ?
                  AND NOT EXISTS (
                      SELECT 1 FROM rosters dst
                      WHERE dst.team_id = src.team_id AND dst.week = ? AND dst.season = src.season
                  );
                """,
                (int(to_week), int(from_week), int(season), int(to_week)),
            )
            return cur.rowcount

    def add_roster_entry(
        self,
        team_id: str,
        player_id: str,
        week: int,
        season: int,
        position_slot: RosterSlot = RosterSlot.BENCH,
    ) -> bool:
        """Insert a roster entry. Returns False (no-op) if the player is already there."""
        with self.transaction() as cur:
            cur.execute(
                """
                INSERT INTO rosters(team_id, player_id, week, season, position_slot)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(team_id, player_id, week, season) DO NOTHING;
                """,
                (team_id, str(player_id), int(week), int(season), position_slot.value),
            )
            return cur.rowcount == 1

    def remove_roster_entry(self, team_id: str, player_id: str, week: int, season: int) -> bool:
        with self.transaction() as cur:
            cur.execute(
                """
                DELETE FROM rosters
                WHERE team_id = ? AND player_id = ? AND week = ? AND season = ?;
                """,
                (team_id, str(player_id), int(week), int(season)),
            )
            return cur.rowcount == 1

    # ------------------------
    # Transfer log
    # ------------------------

    def record_transfer(
        self,
        team_id: str,
        player_id: str,
        transfer_type: TransferType,
        price: float,
        week: int,
        season: int,
    ) -> TransferRecord:
        record = TransferRecord(
            team_id=str(team_id),
            player_id=str(player_id),
            transfer_type=TransferType(transfer_type),
            price=round_money(price),
            week=int(week),
            season=int(season),
        )
        with self.transaction() as cur:
            cur.execute(
                """
                INSERT INTO transfers(team_id, player_id, transfer_type, price, week, season,
                                      transferred_at)
                VALUES (?, ?, ?, ?, ?, ?, ?);
                """,
                (
                    team_id,
                    record.player_id,
                    record.transfer_type.value,
                    record.price,
                    record.week,
                    record.season,
                    record.transferred_at.isoformat(),
                ),
            )
            transfer_id = cur.lastrowid
        return TransferRecord(
            team_id=record.team_id,
            player_id=record.player_id,
            transfer_type=record.transfer_type,
            price=record.price,
            week=record.week,
            season=record.season,
            transferred_at=record.transferred_at,
            transfer_id=transfer_id,
        )

    def transfer_history(
        self,
        season: int,
        team_id: Optional[str] = None,
        week: Optional[int] = None,
        limit: int = 50,
    ) -> list[TransferRecord]:
        """Transfers for a season, newest first."""
        sql = """
            SELECT t.*, p.name AS player_name, p.position AS player_position
            FROM transfers t
            LEFT JOIN players p ON p.player_id = t.player_id
            WHERE t.season = ?
        """
        params: list[Any] = [int(season)]
        if team_id is not None:
            sql += " AND t.team_id = ?"
            params.append(team_id)
        if week is not None:
            sql += " AND t.week = ?"
            params.append(int(week))
        sql += " ORDER BY t.transferred_at DESC, t.transfer_id DESC LIMIT ?;"
        params.append(max(0, int(limit)))

        return [
            TransferRecord(
                transfer_id=int(r["transfer_id"]),
                team_id=str(r["team_id"]),
                player_id=str(r["player_id"]),
                transfer_type=TransferType(r["transfer_type"]),
                price=float(r["price"]),
                week=int(r["week"]),
                season=int(r["season"]),
                transferred_at=_parse_ts(r["transferred_at"]),
                player_name=r["player_name"],
                player_position=r["player_position"],
            )
            for r in self._conn.execute(sql, params).fetchall()
        ]
