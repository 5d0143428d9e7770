"""SQLite schema for the roster transfer store.

DDL only. Must not import LeagueRepo (to avoid circular imports).
"""

import sqlite3

SCHEMA_VERSION = "1"

# Settings owned by the league admin
CURRENT_WEEK_KEY = "current_week"
CURRENT_SEASON_KEY = "current_season"


def ddl(*, now: str, schema_version: str = SCHEMA_VERSION, default_season: int = 2024) -> str:
    """Return DDL SQL for every table (as a single executescript string)."""
    return f"""
        BEGIN IMMEDIATE;

        CREATE TABLE IF NOT EXISTS meta (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL
        );

        INSERT INTO meta(key, value) VALUES ('schema_version', '{schema_version}')
        ON CONFLICT(key) DO UPDATE SET value=excluded.value;
        INSERT OR IGNORE INTO meta(key, value) VALUES ('created_at', '{now}');

        CREATE TABLE IF NOT EXISTS app_settings (
            setting_key TEXT PRIMARY KEY,
            setting_value TEXT NOT NULL,
            description TEXT,
            updated_at TEXT NOT NULL
        );

        INSERT OR IGNORE INTO app_settings(setting_key, setting_value, description, updated_at)
        VALUES ('{CURRENT_WEEK_KEY}', 'Preseason', 'Setup, Preseason or week number', '{now}');
        INSERT OR IGNORE INTO app_settings(setting_key, setting_value, description, updated_at)
        VALUES ('{CURRENT_SEASON_KEY}', '{int(default_season)}', 'Active season year', '{now}');

        CREATE TABLE IF NOT EXISTS players (
            player_id TEXT PRIMARY KEY,
            name TEXT NOT NULL DEFAULT '',
            position TEXT NOT NULL CHECK (position IN ('QB', 'RB', 'WR', 'TE', 'K', 'DEF')),
            nfl_team TEXT,
            current_price REAL NOT NULL CHECK (current_price > 0),
            updated_at TEXT NOT NULL
        );

        CREATE INDEX IF NOT EXISTS idx_players_position ON players(position);

        CREATE TABLE IF NOT EXISTS teams (
            team_id INTEGER PRIMARY KEY AUTOINCREMENT,
            team_name TEXT NOT NULL,
            owner TEXT NOT NULL,
            season INTEGER NOT NULL,
            current_spent REAL NOT NULL DEFAULT 0,
            remaining_budget REAL NOT NULL DEFAULT 100.0,
            free_transfers_remaining INTEGER NOT NULL DEFAULT 1,
            created_at TEXT NOT NULL,
            UNIQUE(owner, season)
        );

        CREATE TABLE IF NOT EXISTS rosters (
            team_id INTEGER NOT NULL,
            player_id TEXT NOT NULL,
            week INTEGER NOT NULL,
            season INTEGER NOT NULL,
            position_slot TEXT NOT NULL DEFAULT 'BENCH',
            PRIMARY KEY (team_id, player_id, week, season),
            FOREIGN KEY(team_id) REFERENCES teams(team_id) ON DELETE CASCADE,
            FOREIGN KEY(player_id) REFERENCES players(player_id)
        );

        CREATE INDEX IF NOT EXISTS idx_rosters_week ON rosters(season, week);

        CREATE TABLE IF NOT EXISTS transfers (
            transfer_id INTEGER PRIMARY KEY AUTOINCREMENT,
            team_id INTEGER NOT NULL,
            player_id TEXT NOT NULL,
            transfer_type TEXT NOT NULL CHECK (transfer_type IN ('buy', 'sell')),
            price REAL NOT NULL,
            week INTEGER NOT NULL,
            season INTEGER NOT NULL,
            transferred_at TEXT NOT NULL,
            FOREIGN KEY(team_id) REFERENCES teams(team_id) ON DELETE CASCADE,
            FOREIGN KEY(player_id) REFERENCES players(player_id)
        );

        CREATE INDEX IF NOT EXISTS idx_transfers_team ON transfers(team_id, season, week);

        CREATE TABLE IF NOT EXISTS roster_constraints (
            season INTEGER PRIMARY KEY,
            rules_json TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );

        COMMIT;
    """


def apply_schema(cur: sqlite3.Cursor, *, now: str, default_season: int = 2024) -> None:
    """Create tables and seed default settings in one transaction. Idempotent.

    Runs its own BEGIN/COMMIT, so call it outside any open transaction.
    """
    cur.executescript(ddl(now=now, default_season=default_season))
