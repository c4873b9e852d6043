"""
REST API for the league backend.
Thin wrappers around domain logic and persistence.
"""
from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager, contextmanager
from datetime import datetime
from typing import Any, AsyncGenerator, Generator

from fastapi import FastAPI, HTTPException, Query
from pydantic import BaseModel, Field

from league_backend.models import Kit, MatchStatus
from league_backend.persistence import (
    get_connection,
    init_db,
    LeagueRepository,
    TeamRepository,
    SeasonRepository,
    MatchRepository,
)
from league_backend.persistence.db import get_db_path
from league_backend.services.league_service import (
    GamedaySequenceError,
    LeagueService,
    NotFoundError,
)
from league_backend.services.scheduling import SchedulingError

logging.basicConfig(
    level=os.environ.get("LEAGUE_LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@contextmanager
def db_conn() -> Generator:
    """Yield a DB connection, ensure close on exit."""
    conn = get_connection()
    try:
        yield conn
    finally:
        conn.close()


# ---------- Lifespan ----------
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    init_db(db_path=get_db_path())
    yield


# ---------- FastAPI app ----------
app = FastAPI(
    title="League Backend API",
    description="Leagues, teams, seasons and fixture generation for an amateur football federation",
    version="0.1.0",
    lifespan=lifespan,
)


# ---------- Request/Response models ----------


class KitModel(BaseModel):
    image: str = ""
    color: str = Field(..., min_length=1)

    def to_kit(self) -> Kit:
        return Kit(image=self.image, color=self.color)


class CreateLeagueRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    state: str | None = Field(None, description="Federal state the league belongs to")
    level: int = Field(1, ge=1, description="Tier; 1 is the top division")


class CreateTeamRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    logo: str = ""
    coach: str | None = None
    home_kit: KitModel
    away_kit: KitModel


class CreateSeasonRequest(BaseModel):
    season_name: str = Field(..., min_length=1, max_length=100)
    number_of_rounds: int = Field(..., description="Full rotations through the team set")
    alternate_home_away: bool = Field(False, description="Swap home/away on every second rotation")
    primary: bool = False


class AddMatchesRequest(BaseModel):
    number_of_rounds: int
    alternate_home_away: bool = False


class AddSingleMatchRequest(BaseModel):
    season_id: str
    home_team_id: str
    away_team_id: str
    gameday: int | None = Field(None, description="Defaults to the gameday after the season's last")
    date: datetime | None = None
    stadium_id: str | None = None
    location: str | None = None
    home_kit: KitModel | None = None
    away_kit: KitModel | None = None
    status: MatchStatus = MatchStatus.PENDING


# ---------- Leagues & teams ----------


@app.post("/leagues")
def create_league(req: CreateLeagueRequest) -> dict[str, Any]:
    with db_conn() as conn:
        league = LeagueRepository().create(conn, req.name, state=req.state, level=req.level)
        return league.to_dict()


@app.get("/leagues")
def list_leagues() -> dict[str, Any]:
    with db_conn() as conn:
        return {"leagues": [l.to_dict() for l in LeagueRepository().list_all(conn)]}


@app.get("/leagues/{league_id}")
def get_league(league_id: str) -> dict[str, Any]:
    """League with its seasons."""
    with db_conn() as conn:
        league = LeagueRepository().get(conn, league_id)
        if league is None:
            raise HTTPException(status_code=404, detail="League not found")
        seasons = SeasonRepository().list_by_league(conn, league_id)
        return {"league": league.to_dict(), "seasons": [s.to_dict() for s in seasons]}


@app.post("/leagues/{league_id}/teams")
def create_team(league_id: str, req: CreateTeamRequest) -> dict[str, Any]:
    with db_conn() as conn:
        if LeagueRepository().get(conn, league_id) is None:
            raise HTTPException(status_code=404, detail="League not found")
        team = TeamRepository().create(
            conn, league_id, req.name,
            home_kit=req.home_kit.to_kit(), away_kit=req.away_kit.to_kit(),
            logo=req.logo, coach=req.coach,
        )
        return team.to_dict()


@app.get("/leagues/{league_id}/teams")
def list_teams(league_id: str) -> dict[str, Any]:
    with db_conn() as conn:
        if LeagueRepository().get(conn, league_id) is None:
            raise HTTPException(status_code=404, detail="League not found")
        return {"teams": [t.to_dict() for t in TeamRepository().list_by_league(conn, league_id)]}


@app.get("/leagues/{league_id}/teams/count")
def count_teams(league_id: str) -> dict[str, Any]:
    with db_conn() as conn:
        if LeagueRepository().get(conn, league_id) is None:
            raise HTTPException(status_code=404, detail="League not found")
        return {"league_id": league_id, "count": TeamRepository().count_by_league(conn, league_id)}


# ---------- Seasons & fixtures ----------


@app.post("/leagues/{league_id}/seasons")
def create_season(league_id: str, req: CreateSeasonRequest) -> dict[str, Any]:
    """Create a season and generate its full fixture list from the league's current teams."""
    with db_conn() as conn:
        svc = LeagueService()
        try:
            season, created = svc.create_season(
                conn, league_id, req.season_name,
                req.number_of_rounds, req.alternate_home_away, primary=req.primary,
            )
        except NotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e))
        except SchedulingError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        out = season.to_dict()
        out["matches_created"] = created
        return out


@app.post("/leagues/{league_id}/seasons/{season_id}/matches")
def add_matches_to_season(league_id: str, season_id: str, req: AddMatchesRequest) -> dict[str, Any]:
    """Append more rotations to a season, continuing after its last gameday."""
    with db_conn() as conn:
        svc = LeagueService()
        try:
            created = svc.add_matches_to_season(
                conn, league_id, season_id, req.number_of_rounds, req.alternate_home_away
            )
        except NotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e))
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return {"season_id": season_id, "matches_created": created}


@app.post("/leagues/{league_id}/matches")
def add_single_match(league_id: str, req: AddSingleMatchRequest) -> dict[str, Any]:
    with db_conn() as conn:
        svc = LeagueService()
        try:
            match = svc.add_single_match(
                conn, league_id, req.season_id, req.home_team_id, req.away_team_id,
                gameday=req.gameday, date=req.date, stadium_id=req.stadium_id,
                location=req.location,
                home_kit=req.home_kit.to_kit() if req.home_kit else None,
                away_kit=req.away_kit.to_kit() if req.away_kit else None,
                status=req.status.value,
            )
        except NotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e))
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return match.to_dict()


@app.get("/seasons/{season_id}/matches")
def get_season_matches(
    season_id: str,
    gameday: int | None = Query(None, ge=1, description="Only this gameday"),
) -> dict[str, Any]:
    """Season fixtures grouped by gameday."""
    with db_conn() as conn:
        svc = LeagueService()
        try:
            grouped = svc.matches_by_gameday(conn, season_id)
        except NotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e))
        if gameday is not None:
            grouped = {gameday: MatchRepository().list_by_season_and_gameday(conn, season_id, gameday)}
        return {
            "season_id": season_id,
            "gamedays": [
                {"gameday": day, "matches": [m.to_dict() for m in matches]}
                for day, matches in grouped.items()
            ],
        }


@app.post("/seasons/{season_id}/advance-gameday")
def advance_gameday(season_id: str) -> dict[str, Any]:
    with db_conn() as conn:
        svc = LeagueService()
        try:
            current = svc.advance_gameday(conn, season_id)
        except NotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e))
        except GamedaySequenceError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return {"season_id": season_id, "current_gameday": current}


@app.post("/seasons/{season_id}/primary")
def set_primary_season(season_id: str) -> dict[str, Any]:
    with db_conn() as conn:
        svc = LeagueService()
        try:
            season = svc.set_primary_season(conn, season_id)
        except NotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e))
        return season.to_dict()
