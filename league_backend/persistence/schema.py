"""
SQLite schema for league entities.
Migration-friendly: each table created with IF NOT EXISTS.
"""
from __future__ import annotations


def leagues_schema() -> str:
    return """
    CREATE TABLE IF NOT EXISTS leagues (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        state TEXT,
        level INTEGER NOT NULL DEFAULT 1,
        created_at TEXT NOT NULL
    );
    """


def teams_schema() -> str:
    """Kits are stored as JSON: {"image": ..., "color": ...}."""
    return """
    CREATE TABLE IF NOT EXISTS teams (
        id TEXT PRIMARY KEY,
        league_id TEXT NOT NULL,
        name TEXT NOT NULL,
        logo TEXT NOT NULL DEFAULT '',
        home_kit TEXT NOT NULL,
        away_kit TEXT NOT NULL,
        coach TEXT,
        created_at TEXT NOT NULL,
        FOREIGN KEY (league_id) REFERENCES leagues(id)
    );
    CREATE INDEX IF NOT EXISTS ix_teams_league ON teams(league_id);
    """


def seasons_schema() -> str:
    """Seasons of a league. is_primary: at most one per league. current_gameday is 1-based."""
    return """
    CREATE TABLE IF NOT EXISTS seasons (
        id TEXT PRIMARY KEY,
        league_id TEXT NOT NULL,
        name TEXT NOT NULL,
        is_primary INTEGER NOT NULL DEFAULT 0,
        current_gameday INTEGER NOT NULL DEFAULT 1,
        created_at TEXT NOT NULL,
        FOREIGN KEY (league_id) REFERENCES leagues(id)
    );
    CREATE INDEX IF NOT EXISTS ix_seasons_league ON seasons(league_id);
    """


def matches_schema() -> str:
    """Fixtures. Blankets are JSON snapshots, independent of the teams table."""
    return """
    CREATE TABLE IF NOT EXISTS matches (
        id TEXT PRIMARY KEY,
        season_id TEXT NOT NULL,
        gameday INTEGER NOT NULL,
        seq INTEGER NOT NULL DEFAULT 0,
        home_team_id TEXT NOT NULL,
        away_team_id TEXT NOT NULL,
        home_blanket TEXT NOT NULL,
        away_blanket TEXT NOT NULL,
        home_score INTEGER NOT NULL DEFAULT 0,
        away_score INTEGER NOT NULL DEFAULT 0,
        status TEXT NOT NULL DEFAULT 'pending',
        date TEXT,
        stadium_id TEXT,
        referee_id TEXT,
        location TEXT,
        created_at TEXT NOT NULL,
        FOREIGN KEY (season_id) REFERENCES seasons(id),
        FOREIGN KEY (home_team_id) REFERENCES teams(id),
        FOREIGN KEY (away_team_id) REFERENCES teams(id),
        CHECK (home_team_id <> away_team_id)
    );
    CREATE INDEX IF NOT EXISTS ix_matches_season ON matches(season_id);
    CREATE INDEX IF NOT EXISTS ix_matches_season_gameday ON matches(season_id, gameday);
    """


def all_schema_sql() -> str:
    """Combine all schema DDL for a single execution. Order: leagues, teams, seasons, matches."""
    return "\n".join([
        leagues_schema(),
        teams_schema(),
        seasons_schema(),
        matches_schema(),
    ])
