"""
League administration service: season creation, fixture extension, manual fixtures,
gameday progression, primary season.
Fetch roster → generate fixtures → bulk insert. Generation happens before any write,
so a rejected schedule leaves no season behind.
"""
from __future__ import annotations

import logging
import sqlite3
from collections import defaultdict
from datetime import datetime

from league_backend.models import Kit, Match, MatchDraft, MatchStatus, Season
from league_backend.persistence.repositories import (
    LeagueRepository,
    MatchRepository,
    SeasonRepository,
    TeamRepository,
)
from league_backend.services.scheduling import build_blanket, extend_fixtures, generate_fixtures

logger = logging.getLogger(__name__)

DEFAULT_LOCATION = "Nicht Zugeordnet"

# ---------- Exceptions ----------


class NotFoundError(LookupError):
    """League, season or team does not exist."""


class SeasonOwnershipError(ValueError):
    """Season (or team) does not belong to the given league."""


class InvalidMatchError(ValueError):
    """A manually added fixture is not valid (e.g. a team playing itself)."""


class GamedaySequenceError(ValueError):
    """Gamedays advance one at a time and never past the last scheduled one."""


# ---------- LeagueService ----------


class LeagueService:
    """
    Domain logic for seasons and fixtures.
    Persistence is delegated to repositories; fixture generation to scheduling.
    """

    def __init__(self) -> None:
        self._league_repo = LeagueRepository()
        self._team_repo = TeamRepository()
        self._season_repo = SeasonRepository()
        self._match_repo = MatchRepository()

    # ---------- Lookups ----------

    def _require_league(self, conn: sqlite3.Connection, league_id: str) -> None:
        if self._league_repo.get(conn, league_id) is None:
            raise NotFoundError(f"League not found: {league_id}")

    def _require_season(self, conn: sqlite3.Connection, season_id: str) -> Season:
        season = self._season_repo.get(conn, season_id)
        if season is None:
            raise NotFoundError(f"Season not found: {season_id}")
        return season

    def _require_league_season(
        self, conn: sqlite3.Connection, league_id: str, season_id: str
    ) -> Season:
        self._require_league(conn, league_id)
        season = self._require_season(conn, season_id)
        if season.league_id != league_id:
            raise SeasonOwnershipError(f"Season {season_id} does not belong to league {league_id}")
        return season

    # ---------- Scheduling ----------

    def create_season(
        self,
        conn: sqlite3.Connection,
        league_id: str,
        name: str,
        number_of_rounds: int,
        alternate_home_away: bool,
        primary: bool = False,
    ) -> tuple[Season, int]:
        """
        Create a season and schedule the league's current teams over number_of_rounds rotations.
        Returns (season, number of matches created).
        """
        trimmed = name.strip()
        if not trimmed:
            raise ValueError("Season name is required")
        self._require_league(conn, league_id)
        teams = self._team_repo.list_by_league(conn, league_id)
        drafts = generate_fixtures(teams, number_of_rounds, alternate_home_away)

        season = self._season_repo.create(conn, league_id, trimmed, primary=primary, commit=False)
        if primary:
            self._season_repo.set_primary(conn, league_id, season.id, commit=False)
        # Commits the season together with its matches, or rolls both back
        self._match_repo.create_many(conn, season.id, drafts)
        logger.info(
            "Created season %r for league %s: %d teams, %d round(s), %d matches",
            trimmed, league_id, len(teams), number_of_rounds, len(drafts),
        )
        return season, len(drafts)

    def add_matches_to_season(
        self,
        conn: sqlite3.Connection,
        league_id: str,
        season_id: str,
        number_of_rounds: int,
        alternate_home_away: bool,
    ) -> int:
        """
        Append number_of_rounds rotations after the season's last gameday, using the current roster.
        Existing matches are untouched. Returns number of matches created.
        """
        season = self._require_league_season(conn, league_id, season_id)
        teams = self._team_repo.list_by_league(conn, league_id)
        last_gameday = self._match_repo.max_gameday(conn, season.id)
        drafts = extend_fixtures(teams, last_gameday, number_of_rounds, alternate_home_away)
        self._match_repo.create_many(conn, season.id, drafts)
        logger.info(
            "Appended %d matches to season %s from gameday %d",
            len(drafts), season.id, last_gameday + 1,
        )
        return len(drafts)

    def add_single_match(
        self,
        conn: sqlite3.Connection,
        league_id: str,
        season_id: str,
        home_team_id: str,
        away_team_id: str,
        gameday: int | None = None,
        date: datetime | None = None,
        stadium_id: str | None = None,
        location: str | None = None,
        home_kit: Kit | None = None,
        away_kit: Kit | None = None,
        status: str = MatchStatus.PENDING.value,
    ) -> Match:
        """
        Add one hand-made fixture. Gameday defaults to the one after the season's last;
        kits default to the home team's home kit and the away team's away kit.
        """
        season = self._require_league_season(conn, league_id, season_id)
        if home_team_id == away_team_id:
            raise InvalidMatchError("Home and away team cannot be the same")
        home = self._team_repo.get(conn, home_team_id)
        if home is None:
            raise NotFoundError(f"Home team not found: {home_team_id}")
        away = self._team_repo.get(conn, away_team_id)
        if away is None:
            raise NotFoundError(f"Away team not found: {away_team_id}")
        if home.league_id != league_id or away.league_id != league_id:
            raise SeasonOwnershipError("Both teams must belong to this league")
        if gameday is None:
            gameday = self._match_repo.max_gameday(conn, season.id) + 1
        elif gameday < 1:
            raise InvalidMatchError(f"gameday must be >= 1 (got {gameday})")
        if status not in {s.value for s in MatchStatus}:
            raise InvalidMatchError(f"Unknown match status: {status}")

        draft = MatchDraft(
            gameday=gameday,
            home_team_id=home.id,
            away_team_id=away.id,
            home_blanket=build_blanket(home, home_kit or home.home_kit),
            away_blanket=build_blanket(away, away_kit or away.away_kit),
            status=status,
        )
        return self._match_repo.create(
            conn, season.id, draft,
            date=date, stadium_id=stadium_id, location=location or DEFAULT_LOCATION,
        )

    # ---------- Progression ----------

    def advance_gameday(self, conn: sqlite3.Connection, season_id: str) -> int:
        """Move the season's current gameday forward by one. Returns the new gameday."""
        season = self._require_season(conn, season_id)
        last = self._match_repo.max_gameday(conn, season_id)
        next_gameday = season.current_gameday + 1
        if next_gameday > last:
            raise GamedaySequenceError(
                f"Cannot advance to gameday {next_gameday}: season ends at gameday {last}"
            )
        self._season_repo.update_current_gameday(conn, season_id, next_gameday)
        return next_gameday

    def set_primary_season(self, conn: sqlite3.Connection, season_id: str) -> Season:
        """Make season_id its league's primary season; any other primary season is cleared."""
        season = self._require_season(conn, season_id)
        self._season_repo.set_primary(conn, season.league_id, season.id)
        return self._require_season(conn, season_id)

    # ---------- Reads ----------

    def matches_by_gameday(self, conn: sqlite3.Connection, season_id: str) -> dict[int, list[Match]]:
        """Season fixtures grouped by gameday, gamedays ascending."""
        self._require_season(conn, season_id)
        grouped: dict[int, list[Match]] = defaultdict(list)
        for m in self._match_repo.list_by_season(conn, season_id):
            grouped[m.gameday].append(m)
        return dict(sorted(grouped.items()))
