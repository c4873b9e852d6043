"""
Data models for the league backend.
Domain objects only; no persistence or API logic.

Leagues own teams and seasons; seasons own matches grouped by gameday.
Matches carry a per-side "blanket": a snapshot of the team's presentation
data taken when the fixture was created.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


# ---------- Match lifecycle ----------
class MatchStatus(str, Enum):
    """Match lifecycle: pending → first → halftime → second → completed."""
    PENDING = "pending"
    FIRST = "first"          # First half running
    HALFTIME = "halftime"
    SECOND = "second"        # Second half running
    COMPLETED = "completed"


# ---------- Kit ----------
@dataclass(frozen=True)
class Kit:
    """A dress descriptor: image reference and dominant color."""
    image: str
    color: str

    def to_dict(self) -> dict[str, Any]:
        return {"image": self.image, "color": self.color}

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Kit:
        return cls(image=d.get("image", ""), color=d.get("color", ""))


# ---------- League ----------
@dataclass
class League:
    """
    Competition container. Owns teams and seasons.
    state is the federal state the league belongs to; level is its tier (1 = top).
    """
    id: str
    name: str
    state: str | None
    level: int
    created_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "state": self.state,
            "level": self.level,
            "created_at": self.created_at.isoformat(),
        }


# ---------- Team ----------
@dataclass
class Team:
    """A club registered to a league. Read-only input to fixture generation."""
    id: str
    league_id: str
    name: str
    logo: str
    home_kit: Kit
    away_kit: Kit
    created_at: datetime
    coach: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "league_id": self.league_id,
            "name": self.name,
            "logo": self.logo,
            "home_kit": self.home_kit.to_dict(),
            "away_kit": self.away_kit.to_dict(),
            "coach": self.coach,
            "created_at": self.created_at.isoformat(),
        }


# ---------- Season ----------
@dataclass
class Season:
    """
    One season within a league. Owns matches.
    primary marks the season currently shown for the league; at most one per league.
    current_gameday is 1-based and only moves forward.
    """
    id: str
    league_id: str
    name: str
    primary: bool
    current_gameday: int
    created_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "league_id": self.league_id,
            "name": self.name,
            "primary": self.primary,
            "current_gameday": self.current_gameday,
            "created_at": self.created_at.isoformat(),
        }


# ---------- Score ----------
@dataclass(frozen=True)
class Score:
    home: int = 0
    away: int = 0

    @property
    def display_text(self) -> str:
        return f"{self.home}:{self.away}"

    def to_dict(self) -> dict[str, Any]:
        return {"home": self.home, "away": self.away}


# ---------- Blanket ----------
@dataclass(frozen=True)
class Blanket:
    """
    Per-match snapshot of one side: name, kit worn in this match, logo, coach, lineup.
    Copied at fixture creation; later team edits never reach it.
    """
    name: str
    kit: Kit
    logo: str
    coach: str | None = None
    players: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "kit": self.kit.to_dict(),
            "logo": self.logo,
            "coach": self.coach,
            "players": list(self.players),
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Blanket:
        return cls(
            name=d["name"],
            kit=Kit.from_dict(d.get("kit") or {}),
            logo=d.get("logo", ""),
            coach=d.get("coach"),
            players=tuple(d.get("players") or ()),
        )


# ---------- MatchDraft ----------
@dataclass(frozen=True)
class MatchDraft:
    """An unsaved fixture. Whoever persists it assigns the id and links the season."""
    gameday: int
    home_team_id: str
    away_team_id: str
    home_blanket: Blanket
    away_blanket: Blanket
    score: Score = field(default_factory=Score)
    status: str = MatchStatus.PENDING.value

    def to_dict(self) -> dict[str, Any]:
        return {
            "gameday": self.gameday,
            "home_team_id": self.home_team_id,
            "away_team_id": self.away_team_id,
            "home_blanket": self.home_blanket.to_dict(),
            "away_blanket": self.away_blanket.to_dict(),
            "score": self.score.to_dict(),
            "status": self.status,
        }


# ---------- Match ----------
@dataclass
class Match:
    """
    A fixture within a season. Created pending with a 0:0 score.
    date, stadium and referee are assigned later by hand.
    """
    id: str
    season_id: str
    gameday: int
    home_team_id: str
    away_team_id: str
    home_blanket: Blanket
    away_blanket: Blanket
    created_at: datetime
    score: Score = field(default_factory=Score)
    status: str = MatchStatus.PENDING.value
    date: datetime | None = None
    stadium_id: str | None = None
    referee_id: str | None = None
    location: str | None = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "season_id": self.season_id,
            "gameday": self.gameday,
            "home_team_id": self.home_team_id,
            "away_team_id": self.away_team_id,
            "home_blanket": self.home_blanket.to_dict(),
            "away_blanket": self.away_blanket.to_dict(),
            "score": self.score.to_dict(),
            "status": self.status,
            "created_at": self.created_at.isoformat(),
        }
        if self.date is not None:
            d["date"] = self.date.isoformat()
        if self.stadium_id is not None:
            d["stadium_id"] = self.stadium_id
        if self.referee_id is not None:
            d["referee_id"] = self.referee_id
        if self.location is not None:
            d["location"] = self.location
        return d
