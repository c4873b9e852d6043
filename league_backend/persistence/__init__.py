"""
Persistence layer for league data.
No business logic, no scheduling: only read/write interfaces.
"""
from .db import get_connection, init_db
from .repositories import (
    LeagueRepository,
    TeamRepository,
    SeasonRepository,
    MatchRepository,
)

__all__ = [
    "get_connection",
    "init_db",
    "LeagueRepository",
    "TeamRepository",
    "SeasonRepository",
    "MatchRepository",
]
