"""
Service layer: domain logic and fixture generation.
No persistence in scheduling; league_service orchestrates persistence.
"""
from .scheduling import (
    generate_fixtures,
    extend_fixtures,
    SchedulingError,
    InsufficientTeamsError,
    InvalidRoundsError,
)
from .league_service import (
    LeagueService,
    NotFoundError,
    SeasonOwnershipError,
    InvalidMatchError,
    GamedaySequenceError,
)

__all__ = [
    "generate_fixtures",
    "extend_fixtures",
    "SchedulingError",
    "InsufficientTeamsError",
    "InvalidRoundsError",
    "LeagueService",
    "NotFoundError",
    "SeasonOwnershipError",
    "InvalidMatchError",
    "GamedaySequenceError",
]
