"""
Deterministic round-robin fixture generation for league seasons.

Circle method: slot N-1 stays fixed while the other N-1 slots rotate. Rotation is
computed in closed form from the round index (no array is mutated), so the same
team order and parameters always give the same fixtures.

BYE handling: when the number of teams is odd, a BYE placeholder fills the spare
slot. Whoever is paired with BYE sits the gameday out; that pairing is never
emitted.

Gamedays run strictly upward across rotations: rotation c, round r lands on
first_gameday + c * (N - 1) + r. With alternation on, every odd rotation swaps
home and away, so each pair meets once each way per two rotations.
"""
from __future__ import annotations

import logging
from typing import Sequence

from league_backend.models import Blanket, Kit, MatchDraft, Team

logger = logging.getLogger(__name__)


# ---------- Exceptions ----------


class SchedulingError(ValueError):
    """Invalid input to fixture generation."""


class InsufficientTeamsError(SchedulingError):
    """Fewer than two teams; nothing to schedule."""


class InvalidRoundsError(SchedulingError):
    """number_of_rounds must be at least 1."""


# ---------- Bye slot ----------


class _Bye:
    """Placeholder occupying the spare slot of an odd-sized field."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "BYE"


# Sentinel for the spare slot when the number of teams is odd
BYE = _Bye()


# ---------- Pairings ----------


def _validate(team_count: int, number_of_rounds: int) -> None:
    if team_count < 2:
        raise InsufficientTeamsError(
            f"Need at least 2 teams to schedule a season (got {team_count})"
        )
    if number_of_rounds < 1:
        raise InvalidRoundsError(f"number_of_rounds must be >= 1 (got {number_of_rounds})")


def round_robin_pairings(
    team_count: int,
    number_of_rounds: int,
    alternate_home_away: bool,
    first_gameday: int = 1,
) -> list[tuple[int, int, int]]:
    """
    Generate (gameday, home_index, away_index) over team indices 0..team_count-1.
    Pairings with the BYE slot are left out. Ordered by gameday, then slot.
    """
    _validate(team_count, number_of_rounds)
    slots: list[int | _Bye] = list(range(team_count))
    if team_count % 2 == 1:
        slots.append(BYE)
    n = len(slots)  # even
    rounds_per_rotation = n - 1
    result: list[tuple[int, int, int]] = []
    for rotation in range(number_of_rounds):
        swap = alternate_home_away and rotation % 2 == 1
        for rnd in range(rounds_per_rotation):
            gameday = first_gameday + rotation * rounds_per_rotation + rnd
            for m in range(n // 2):
                home = (rnd + m) % rounds_per_rotation
                # Slot 0 always meets the fixed last slot
                away = n - 1 if m == 0 else (n - 1 - m + rnd) % rounds_per_rotation
                if swap:
                    home, away = away, home
                home_slot, away_slot = slots[home], slots[away]
                if home_slot is BYE or away_slot is BYE:
                    continue
                result.append((gameday, home_slot, away_slot))
    return result


# ---------- Fixtures ----------


def build_blanket(team: Team, kit: Kit) -> Blanket:
    """Snapshot a team's presentation data with the kit worn in this match. Lineup starts empty."""
    return Blanket(name=team.name, kit=kit, logo=team.logo, coach=team.coach, players=())


def _drafts(
    teams: Sequence[Team],
    number_of_rounds: int,
    alternate_home_away: bool,
    first_gameday: int,
) -> list[MatchDraft]:
    pairings = round_robin_pairings(
        len(teams), number_of_rounds, alternate_home_away, first_gameday=first_gameday
    )
    drafts = []
    for gameday, h, a in pairings:
        home, away = teams[h], teams[a]
        drafts.append(
            MatchDraft(
                gameday=gameday,
                home_team_id=home.id,
                away_team_id=away.id,
                home_blanket=build_blanket(home, home.home_kit),
                away_blanket=build_blanket(away, away.away_kit),
            )
        )
    logger.debug(
        "Generated %d fixtures for %d teams, %d round(s), gamedays from %d",
        len(drafts), len(teams), number_of_rounds, first_gameday,
    )
    return drafts


def generate_fixtures(
    teams: Sequence[Team],
    number_of_rounds: int,
    alternate_home_away: bool,
) -> list[MatchDraft]:
    """
    Full fixture list for a new season, gamedays starting at 1.
    Returns number_of_rounds * n * (n - 1) / 2 drafts for n teams.
    Raises InsufficientTeamsError / InvalidRoundsError before doing any work.
    """
    return _drafts(teams, number_of_rounds, alternate_home_away, first_gameday=1)


def extend_fixtures(
    teams: Sequence[Team],
    max_existing_gameday: int,
    number_of_rounds: int,
    alternate_home_away: bool,
) -> list[MatchDraft]:
    """
    More rotations for an already scheduled season, continuing at max_existing_gameday + 1.
    Uses whatever roster is passed in; existing matches are not looked at.
    """
    if max_existing_gameday < 0:
        raise SchedulingError(f"max_existing_gameday must be >= 0 (got {max_existing_gameday})")
    return _drafts(
        teams, number_of_rounds, alternate_home_away, first_gameday=max_existing_gameday + 1
    )
