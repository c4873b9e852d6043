"""
Repository interfaces for league data.
No business logic: only read/write operations.
"""
from __future__ import annotations

import json
import logging
import sqlite3
import uuid
from datetime import datetime, timezone
from typing import Iterable

from league_backend.models import Blanket, Kit, League, Match, MatchDraft, Score, Season, Team

logger = logging.getLogger(__name__)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _parse_datetime(s: str | None) -> datetime:
    if s is None:
        raise ValueError("expected datetime string")
    return datetime.fromisoformat(s.replace("Z", "+00:00"))


# ---------- LeagueRepository ----------


class LeagueRepository:
    """CRUD for leagues. No business logic."""

    def create(
        self,
        conn: sqlite3.Connection,
        name: str,
        state: str | None = None,
        level: int = 1,
        id: str | None = None,
    ) -> League:
        lid = id or str(uuid.uuid4())
        now = _now_iso()
        conn.execute(
            "INSERT INTO leagues (id, name, state, level, created_at) VALUES (?, ?, ?, ?, ?)",
            (lid, name, state, level, now),
        )
        conn.commit()
        return League(id=lid, name=name, state=state, level=level, created_at=_parse_datetime(now))

    def get(self, conn: sqlite3.Connection, league_id: str) -> League | None:
        row = conn.execute(
            "SELECT id, name, state, level, created_at FROM leagues WHERE id = ?",
            (league_id,),
        ).fetchone()
        if row is None:
            return None
        return League(
            id=row["id"],
            name=row["name"],
            state=row["state"],
            level=row["level"],
            created_at=_parse_datetime(row["created_at"]),
        )

    def list_all(self, conn: sqlite3.Connection) -> list[League]:
        rows = conn.execute(
            "SELECT id, name, state, level, created_at FROM leagues ORDER BY level, name"
        ).fetchall()
        return [
            League(
                id=r["id"], name=r["name"], state=r["state"], level=r["level"],
                created_at=_parse_datetime(r["created_at"]),
            )
            for r in rows
        ]


# ---------- TeamRepository ----------


def _row_to_team(r: sqlite3.Row) -> Team:
    return Team(
        id=r["id"],
        league_id=r["league_id"],
        name=r["name"],
        logo=r["logo"],
        home_kit=Kit.from_dict(json.loads(r["home_kit"])),
        away_kit=Kit.from_dict(json.loads(r["away_kit"])),
        coach=r["coach"],
        created_at=_parse_datetime(r["created_at"]),
    )


_TEAM_COLS = "id, league_id, name, logo, home_kit, away_kit, coach, created_at"


class TeamRepository:
    """CRUD for teams. Also the roster source for fixture generation."""

    def create(
        self,
        conn: sqlite3.Connection,
        league_id: str,
        name: str,
        home_kit: Kit,
        away_kit: Kit,
        logo: str = "",
        coach: str | None = None,
        id: str | None = None,
    ) -> Team:
        tid = id or str(uuid.uuid4())
        now = _now_iso()
        conn.execute(
            f"INSERT INTO teams ({_TEAM_COLS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
            (
                tid, league_id, name, logo,
                json.dumps(home_kit.to_dict()), json.dumps(away_kit.to_dict()),
                coach, now,
            ),
        )
        conn.commit()
        return Team(
            id=tid, league_id=league_id, name=name, logo=logo,
            home_kit=home_kit, away_kit=away_kit, coach=coach,
            created_at=_parse_datetime(now),
        )

    def get(self, conn: sqlite3.Connection, team_id: str) -> Team | None:
        row = conn.execute(f"SELECT {_TEAM_COLS} FROM teams WHERE id = ?", (team_id,)).fetchone()
        if row is None:
            return None
        return _row_to_team(row)

    def list_by_league(self, conn: sqlite3.Connection, league_id: str) -> list[Team]:
        """All teams of a league in registration order. Stable: fixture assignment depends on it."""
        rows = conn.execute(
            f"SELECT {_TEAM_COLS} FROM teams WHERE league_id = ? ORDER BY created_at, rowid",
            (league_id,),
        ).fetchall()
        return [_row_to_team(r) for r in rows]

    def count_by_league(self, conn: sqlite3.Connection, league_id: str) -> int:
        row = conn.execute("SELECT COUNT(*) FROM teams WHERE league_id = ?", (league_id,)).fetchone()
        return row[0]

    def update(
        self,
        conn: sqlite3.Connection,
        team_id: str,
        name: str | None = None,
        logo: str | None = None,
        coach: str | None = None,
    ) -> None:
        """Update presentation fields. Existing match blankets are unaffected."""
        sets: list[str] = []
        args: list[object] = []
        if name is not None:
            sets.append("name = ?")
            args.append(name)
        if logo is not None:
            sets.append("logo = ?")
            args.append(logo)
        if coach is not None:
            sets.append("coach = ?")
            args.append(coach)
        if not sets:
            return
        args.append(team_id)
        conn.execute(f"UPDATE teams SET {', '.join(sets)} WHERE id = ?", tuple(args))
        conn.commit()


# ---------- SeasonRepository ----------


def _row_to_season(r: sqlite3.Row) -> Season:
    return Season(
        id=r["id"],
        league_id=r["league_id"],
        name=r["name"],
        primary=bool(r["is_primary"]),
        current_gameday=r["current_gameday"],
        created_at=_parse_datetime(r["created_at"]),
    )


_SEASON_COLS = "id, league_id, name, is_primary, current_gameday, created_at"


class SeasonRepository:
    """CRUD for seasons. No business logic."""

    def create(
        self,
        conn: sqlite3.Connection,
        league_id: str,
        name: str,
        primary: bool = False,
        id: str | None = None,
        commit: bool = True,
    ) -> Season:
        sid = id or str(uuid.uuid4())
        now = _now_iso()
        conn.execute(
            f"INSERT INTO seasons ({_SEASON_COLS}) VALUES (?, ?, ?, ?, ?, ?)",
            (sid, league_id, name, int(primary), 1, now),
        )
        if commit:
            conn.commit()
        return Season(
            id=sid, league_id=league_id, name=name, primary=primary,
            current_gameday=1, created_at=_parse_datetime(now),
        )

    def get(self, conn: sqlite3.Connection, season_id: str) -> Season | None:
        row = conn.execute(
            f"SELECT {_SEASON_COLS} FROM seasons WHERE id = ?", (season_id,)
        ).fetchone()
        if row is None:
            return None
        return _row_to_season(row)

    def list_by_league(self, conn: sqlite3.Connection, league_id: str) -> list[Season]:
        rows = conn.execute(
            f"SELECT {_SEASON_COLS} FROM seasons WHERE league_id = ? ORDER BY name",
            (league_id,),
        ).fetchall()
        return [_row_to_season(r) for r in rows]

    def get_primary_for_league(self, conn: sqlite3.Connection, league_id: str) -> Season | None:
        row = conn.execute(
            f"SELECT {_SEASON_COLS} FROM seasons WHERE league_id = ? AND is_primary = 1 LIMIT 1",
            (league_id,),
        ).fetchone()
        if row is None:
            return None
        return _row_to_season(row)

    def update_current_gameday(self, conn: sqlite3.Connection, season_id: str, gameday: int) -> None:
        conn.execute("UPDATE seasons SET current_gameday = ? WHERE id = ?", (gameday, season_id))
        conn.commit()

    def set_primary(
        self, conn: sqlite3.Connection, league_id: str, season_id: str, commit: bool = True
    ) -> None:
        """Mark season_id primary and clear the flag on the league's other seasons."""
        conn.execute(
            "UPDATE seasons SET is_primary = CASE WHEN id = ? THEN 1 ELSE 0 END WHERE league_id = ?",
            (season_id, league_id),
        )
        if commit:
            conn.commit()


# ---------- MatchRepository ----------


_MATCH_COLS = (
    "id, season_id, gameday, seq, home_team_id, away_team_id, home_blanket, away_blanket, "
    "home_score, away_score, status, date, stadium_id, referee_id, location, created_at"
)


def _row_to_match(r: sqlite3.Row) -> Match:
    return Match(
        id=r["id"],
        season_id=r["season_id"],
        gameday=r["gameday"],
        home_team_id=r["home_team_id"],
        away_team_id=r["away_team_id"],
        home_blanket=Blanket.from_dict(json.loads(r["home_blanket"])),
        away_blanket=Blanket.from_dict(json.loads(r["away_blanket"])),
        score=Score(home=r["home_score"], away=r["away_score"]),
        status=r["status"],
        date=_parse_datetime(r["date"]) if r["date"] else None,
        stadium_id=r["stadium_id"],
        referee_id=r["referee_id"],
        location=r["location"],
        created_at=_parse_datetime(r["created_at"]),
    )


class MatchRepository:
    """CRUD for matches (fixtures). Bulk sink for generated drafts."""

    def _next_seq(self, conn: sqlite3.Connection, season_id: str) -> int:
        row = conn.execute(
            "SELECT COALESCE(MAX(seq), -1) + 1 FROM matches WHERE season_id = ?", (season_id,)
        ).fetchone()
        return row[0]

    def create_many(
        self, conn: sqlite3.Connection, season_id: str, drafts: Iterable[MatchDraft]
    ) -> list[str]:
        """
        Insert all drafts for season_id in one commit; generation order is kept.
        On failure nothing from this batch (or earlier uncommitted work) is kept.
        """
        now = _now_iso()
        start = self._next_seq(conn, season_id)
        ids: list[str] = []
        rows = []
        for offset, d in enumerate(drafts):
            mid = str(uuid.uuid4())
            ids.append(mid)
            rows.append((
                mid, season_id, d.gameday, start + offset, d.home_team_id, d.away_team_id,
                json.dumps(d.home_blanket.to_dict()), json.dumps(d.away_blanket.to_dict()),
                d.score.home, d.score.away, d.status, None, None, None, None, now,
            ))
        try:
            conn.executemany(
                f"INSERT INTO matches ({_MATCH_COLS}) VALUES ({', '.join('?' * 16)})",
                rows,
            )
            conn.commit()
        except sqlite3.Error:
            conn.rollback()
            logger.exception("Bulk insert of %d matches for season %s failed", len(rows), season_id)
            raise
        return ids

    def create(
        self,
        conn: sqlite3.Connection,
        season_id: str,
        draft: MatchDraft,
        date: datetime | None = None,
        stadium_id: str | None = None,
        location: str | None = None,
        id: str | None = None,
    ) -> Match:
        mid = id or str(uuid.uuid4())
        now = _now_iso()
        conn.execute(
            f"INSERT INTO matches ({_MATCH_COLS}) VALUES ({', '.join('?' * 16)})",
            (
                mid, season_id, draft.gameday, self._next_seq(conn, season_id),
                draft.home_team_id, draft.away_team_id,
                json.dumps(draft.home_blanket.to_dict()), json.dumps(draft.away_blanket.to_dict()),
                draft.score.home, draft.score.away, draft.status,
                date.isoformat() if date else None, stadium_id, None, location, now,
            ),
        )
        conn.commit()
        return Match(
            id=mid, season_id=season_id, gameday=draft.gameday,
            home_team_id=draft.home_team_id, away_team_id=draft.away_team_id,
            home_blanket=draft.home_blanket, away_blanket=draft.away_blanket,
            score=draft.score, status=draft.status, date=date,
            stadium_id=stadium_id, location=location, created_at=_parse_datetime(now),
        )

    def get(self, conn: sqlite3.Connection, match_id: str) -> Match | None:
        row = conn.execute(f"SELECT {_MATCH_COLS} FROM matches WHERE id = ?", (match_id,)).fetchone()
        if row is None:
            return None
        return _row_to_match(row)

    def list_by_season(self, conn: sqlite3.Connection, season_id: str) -> list[Match]:
        rows = conn.execute(
            f"SELECT {_MATCH_COLS} FROM matches WHERE season_id = ? ORDER BY gameday, seq",
            (season_id,),
        ).fetchall()
        return [_row_to_match(r) for r in rows]

    def list_by_season_and_gameday(
        self, conn: sqlite3.Connection, season_id: str, gameday: int
    ) -> list[Match]:
        rows = conn.execute(
            f"SELECT {_MATCH_COLS} FROM matches WHERE season_id = ? AND gameday = ? ORDER BY seq",
            (season_id, gameday),
        ).fetchall()
        return [_row_to_match(r) for r in rows]

    def max_gameday(self, conn: sqlite3.Connection, season_id: str) -> int:
        """Highest scheduled gameday in the season, 0 when it has no matches."""
        row = conn.execute(
            "SELECT COALESCE(MAX(gameday), 0) FROM matches WHERE season_id = ?", (season_id,)
        ).fetchone()
        return row[0]
