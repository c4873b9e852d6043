"""
Tests for the league service: season creation, fixture extension, manual fixtures,
gameday progression, primary season.
"""
from __future__ import annotations

import sqlite3
from collections import Counter

import pytest

from league_backend.models import Kit, MatchDraft
from league_backend.persistence.db import get_connection, init_db, set_db_path
from league_backend.persistence.repositories import (
    LeagueRepository,
    MatchRepository,
    SeasonRepository,
    TeamRepository,
)
from league_backend.services import league_service as league_service_module
from league_backend.services.league_service import (
    GamedaySequenceError,
    InvalidMatchError,
    LeagueService,
    NotFoundError,
    SeasonOwnershipError,
)
from league_backend.services.scheduling import (
    InsufficientTeamsError,
    InvalidRoundsError,
    build_blanket,
)


@pytest.fixture
def db_conn(tmp_path):
    """Temporary DB with the full schema."""
    db_path = tmp_path / "league_test.db"
    set_db_path(db_path)
    init_db(db_path=db_path)
    conn = get_connection()
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture
def league_service():
    return LeagueService()


def add_teams(conn, league_id: str, *names: str):
    repo = TeamRepository()
    return [
        repo.create(
            conn, league_id, name,
            home_kit=Kit(image=f"{name}-home.png", color="blue"),
            away_kit=Kit(image=f"{name}-away.png", color="yellow"),
            logo=f"{name}.png", coach=f"Trainer {name}",
        )
        for name in names
    ]


@pytest.fixture
def league(db_conn):
    return LeagueRepository().create(db_conn, "Wiener Stadtliga", state="Wien", level=1)


@pytest.fixture
def league_with_teams(db_conn, league):
    teams = add_teams(db_conn, league.id, "Rapid", "Austria", "Vienna", "Sportclub")
    return league, teams


# ---------- create_season ----------


def test_create_season_schedules_all_matches(db_conn, league_service, league_with_teams):
    league, _ = league_with_teams
    season, created = league_service.create_season(db_conn, league.id, "2024/2025", 1, False)
    assert created == 6
    matches = MatchRepository().list_by_season(db_conn, season.id)
    assert len(matches) == 6
    assert Counter(m.gameday for m in matches) == {1: 2, 2: 2, 3: 2}
    assert all(m.status == "pending" and m.score.display_text == "0:0" for m in matches)
    assert all(m.date is None and m.stadium_id is None and m.referee_id is None for m in matches)
    assert season.current_gameday == 1


def test_create_season_double_round_alternating(db_conn, league_service, league_with_teams):
    league, _ = league_with_teams
    season, created = league_service.create_season(db_conn, league.id, "2024/2025", 2, True)
    assert created == 12
    matches = MatchRepository().list_by_season(db_conn, season.id)
    orientations = Counter((m.home_team_id, m.away_team_id) for m in matches)
    # Each ordered pairing appears exactly once: every pair met once each way
    assert set(orientations.values()) == {1}
    assert len(orientations) == 12


def test_create_season_odd_league(db_conn, league_service, league):
    add_teams(db_conn, league.id, "A", "B", "C", "D", "E")
    season, created = league_service.create_season(db_conn, league.id, "2024/2025", 1, False)
    assert created == 10
    assert MatchRepository().max_gameday(db_conn, season.id) == 5


def test_create_season_insufficient_teams_writes_nothing(db_conn, league_service, league):
    add_teams(db_conn, league.id, "Lonely FC")
    with pytest.raises(InsufficientTeamsError):
        league_service.create_season(db_conn, league.id, "2024/2025", 1, False)
    assert SeasonRepository().list_by_league(db_conn, league.id) == []


def test_create_season_invalid_rounds(db_conn, league_service, league_with_teams):
    league, _ = league_with_teams
    with pytest.raises(InvalidRoundsError):
        league_service.create_season(db_conn, league.id, "2024/2025", 0, False)
    assert SeasonRepository().list_by_league(db_conn, league.id) == []


def test_create_season_requires_name(db_conn, league_service, league_with_teams):
    league, _ = league_with_teams
    with pytest.raises(ValueError):
        league_service.create_season(db_conn, league.id, "   ", 1, False)


def test_create_season_unknown_league(db_conn, league_service):
    with pytest.raises(NotFoundError):
        league_service.create_season(db_conn, "nope", "2024/2025", 1, False)


def test_create_season_rolls_back_when_insert_fails(db_conn, league_service, league_with_teams, monkeypatch):
    league, teams = league_with_teams
    good = MatchDraft(
        gameday=1, home_team_id=teams[0].id, away_team_id=teams[1].id,
        home_blanket=build_blanket(teams[0], teams[0].home_kit),
        away_blanket=build_blanket(teams[1], teams[1].away_kit),
    )
    bad = MatchDraft(
        gameday=1, home_team_id=teams[2].id, away_team_id=teams[2].id,
        home_blanket=good.home_blanket, away_blanket=good.away_blanket,
    )
    monkeypatch.setattr(league_service_module, "generate_fixtures", lambda *a, **k: [good, bad])
    with pytest.raises(sqlite3.IntegrityError):
        league_service.create_season(db_conn, league.id, "2024/2025", 1, False)
    assert SeasonRepository().list_by_league(db_conn, league.id) == []
    count = db_conn.execute("SELECT COUNT(*) FROM matches").fetchone()[0]
    assert count == 0


def test_blankets_are_snapshots(db_conn, league_service, league_with_teams):
    league, teams = league_with_teams
    season, _ = league_service.create_season(db_conn, league.id, "2024/2025", 1, False)
    TeamRepository().update(db_conn, teams[0].id, name="Renamed", coach="New Coach")
    matches = MatchRepository().list_by_season(db_conn, season.id)
    blankets = [
        m.home_blanket if m.home_team_id == teams[0].id else m.away_blanket
        for m in matches
        if teams[0].id in (m.home_team_id, m.away_team_id)
    ]
    assert len(blankets) == 3
    assert all(b.name == "Rapid" and b.coach == "Trainer Rapid" for b in blankets)


def test_primary_season_is_unique_per_league(db_conn, league_service, league_with_teams):
    league, _ = league_with_teams
    first, _ = league_service.create_season(db_conn, league.id, "2023/2024", 1, False, primary=True)
    second, _ = league_service.create_season(db_conn, league.id, "2024/2025", 1, False, primary=True)
    repo = SeasonRepository()
    assert repo.get(db_conn, first.id).primary is False
    assert repo.get(db_conn, second.id).primary is True
    league_service.set_primary_season(db_conn, first.id)
    assert repo.get_primary_for_league(db_conn, league.id).id == first.id
    assert repo.get(db_conn, second.id).primary is False


# ---------- add_matches_to_season ----------


def test_add_matches_continues_after_last_gameday(db_conn, league_service, league_with_teams):
    league, _ = league_with_teams
    season, _ = league_service.create_season(db_conn, league.id, "2024/2025", 1, False)
    created = league_service.add_matches_to_season(db_conn, league.id, season.id, 1, True)
    assert created == 6
    matches = MatchRepository().list_by_season(db_conn, season.id)
    assert len(matches) == 12
    assert sorted({m.gameday for m in matches}) == [1, 2, 3, 4, 5, 6]


def test_add_matches_uses_current_roster(db_conn, league_service, league_with_teams):
    league, teams = league_with_teams
    season, _ = league_service.create_season(db_conn, league.id, "2024/2025", 1, False)
    (newcomer,) = add_teams(db_conn, league.id, "Newcomer")
    created = league_service.add_matches_to_season(db_conn, league.id, season.id, 1, False)
    assert created == 10
    later = [m for m in MatchRepository().list_by_season(db_conn, season.id) if m.gameday > 3]
    assert {m.gameday for m in later} == {4, 5, 6, 7, 8}
    assert sum(newcomer.id in (m.home_team_id, m.away_team_id) for m in later) == 4


def test_add_matches_to_foreign_season(db_conn, league_service, league_with_teams):
    league, _ = league_with_teams
    other = LeagueRepository().create(db_conn, "Landesliga", state="Wien", level=2)
    add_teams(db_conn, other.id, "X", "Y")
    season, _ = league_service.create_season(db_conn, other.id, "2024/2025", 1, False)
    with pytest.raises(SeasonOwnershipError):
        league_service.add_matches_to_season(db_conn, league.id, season.id, 1, False)


def test_add_matches_unknown_season(db_conn, league_service, league_with_teams):
    league, _ = league_with_teams
    with pytest.raises(NotFoundError):
        league_service.add_matches_to_season(db_conn, league.id, "missing", 1, False)


# ---------- add_single_match ----------


def test_add_single_match_defaults(db_conn, league_service, league_with_teams):
    league, teams = league_with_teams
    season, _ = league_service.create_season(db_conn, league.id, "2024/2025", 1, False)
    match = league_service.add_single_match(db_conn, league.id, season.id, teams[1].id, teams[0].id)
    assert match.gameday == 4
    assert match.location == "Nicht Zugeordnet"
    assert match.home_blanket.kit == teams[1].home_kit
    assert match.away_blanket.kit == teams[0].away_kit
    stored = MatchRepository().get(db_conn, match.id)
    assert stored is not None and stored.gameday == 4


def test_add_single_match_custom_kit_and_gameday(db_conn, league_service, league_with_teams):
    league, teams = league_with_teams
    season, _ = league_service.create_season(db_conn, league.id, "2024/2025", 1, False)
    kit = Kit(image="third.png", color="green")
    match = league_service.add_single_match(
        db_conn, league.id, season.id, teams[0].id, teams[1].id,
        gameday=2, away_kit=kit, location="Hohe Warte",
    )
    assert match.gameday == 2
    assert match.away_blanket.kit == kit
    assert match.location == "Hohe Warte"


def test_add_single_match_rejects_self_play(db_conn, league_service, league_with_teams):
    league, teams = league_with_teams
    season, _ = league_service.create_season(db_conn, league.id, "2024/2025", 1, False)
    with pytest.raises(InvalidMatchError):
        league_service.add_single_match(db_conn, league.id, season.id, teams[0].id, teams[0].id)


def test_add_single_match_rejects_foreign_team(db_conn, league_service, league_with_teams):
    league, teams = league_with_teams
    season, _ = league_service.create_season(db_conn, league.id, "2024/2025", 1, False)
    other = LeagueRepository().create(db_conn, "Landesliga")
    (stranger,) = add_teams(db_conn, other.id, "Stranger")
    with pytest.raises(SeasonOwnershipError):
        league_service.add_single_match(db_conn, league.id, season.id, teams[0].id, stranger.id)


def test_add_single_match_unknown_team(db_conn, league_service, league_with_teams):
    league, teams = league_with_teams
    season, _ = league_service.create_season(db_conn, league.id, "2024/2025", 1, False)
    with pytest.raises(NotFoundError):
        league_service.add_single_match(db_conn, league.id, season.id, teams[0].id, "ghost")


# ---------- advance_gameday ----------


def test_advance_gameday_until_last(db_conn, league_service, league_with_teams):
    league, _ = league_with_teams
    season, _ = league_service.create_season(db_conn, league.id, "2024/2025", 1, False)
    assert league_service.advance_gameday(db_conn, season.id) == 2
    assert league_service.advance_gameday(db_conn, season.id) == 3
    with pytest.raises(GamedaySequenceError):
        league_service.advance_gameday(db_conn, season.id)
    assert SeasonRepository().get(db_conn, season.id).current_gameday == 3


def test_matches_by_gameday_groups_ascending(db_conn, league_service, league_with_teams):
    league, _ = league_with_teams
    season, _ = league_service.create_season(db_conn, league.id, "2024/2025", 2, True)
    grouped = league_service.matches_by_gameday(db_conn, season.id)
    assert list(grouped) == [1, 2, 3, 4, 5, 6]
    assert all(len(ms) == 2 for ms in grouped.values())
