from __future__ import annotations

from datetime import UTC, datetime

import pytest

from evw_newsletter.context.models import EnhancedContext, LeagueData
from evw_newsletter.context.standings import build_standings, roster_team_names
from evw_newsletter.drivers.sleeper.players import PlayerDirectory
from evw_newsletter.exec.gates import scan_unresolved_player_ids
from evw_newsletter.generation import DigestGenerator, GenerationRequest, GenerationResult, create_generator
from evw_newsletter.generation.digest import forecast_picks, grade_predictions
from evw_newsletter.sched.targets import EpisodeType, RunTarget
from evw_newsletter.store.carried import CarriedState
from tests.conftest import sample_league, sample_matchups, sample_players, sample_rosters, sample_users

NOW = datetime(2026, 10, 21, 14, 0, tzinfo=UTC)


def _request(target: RunTarget, carried: CarriedState | None = None) -> GenerationRequest:
    data = LeagueData(
        league=sample_league(),
        users=sample_users(),
        rosters=sample_rosters(),
        matchups=sample_matchups(),
        next_matchups=sample_matchups(),
        transactions=[],
    )
    standings = tuple(build_standings(data.league, data.users, data.rosters, target.week))
    context = EnhancedContext(
        context_text="standings text",
        standings=standings,
        sections={"standings": "1. Beta Boss 3-1", "injuries": ""},
    )
    return GenerationRequest(
        league_name="East v. West",
        league_id="L2026",
        target=target,
        data=data,
        carried=carried or CarriedState(),
        context=context,
        directory=PlayerDirectory(players=sample_players()),
    )


def test_weekly_digest_includes_forecast_and_next_week_picks() -> None:
    target = RunTarget(2026, 5, EpisodeType.REGULAR, 5, "force")

    result = DigestGenerator(now=NOW).generate(_request(target))

    types = [section["type"] for section in result.newsletter["sections"]]
    assert types == ["Intro", "Standings", "Forecast"]
    assert result.newsletter["meta"]["date"] == "2026-10-21"
    assert result.pending_picks["week"] == 6
    assert len(result.pending_picks["picks"]) == 2
    assert result.compose_failed is False
    assert "East v. West - 2026 Week 5" in result.html
    assert scan_unresolved_player_ids(result.html) == []


def test_offseason_digest_has_no_picks() -> None:
    target = RunTarget(2026, 0, EpisodeType.POST_DRAFT, 902, "force")

    result = DigestGenerator(now=NOW).generate(_request(target))

    assert result.pending_picks is None
    assert "Post Draft" in result.html


def test_forecast_picks_follow_record_and_points() -> None:
    rows = build_standings(sample_league(), sample_users(), sample_rosters(), 5)
    names = roster_team_names(sample_users(), sample_rosters())

    picks = forecast_picks(sample_matchups(), rows, names)

    assert picks[0] == {
        "matchup_id": 1,
        "team1": "Team Alpha",
        "team2": "Beta Boss",
        "bot1_pick": "Beta Boss",
        "bot2_pick": "Beta Boss",
    }
    assert picks[1]["bot1_pick"] == "gamma"


def test_grade_predictions_accumulates_records() -> None:
    names = roster_team_names(sample_users(), sample_rosters())
    predictions = [
        {"matchupId": 1, "entertainerPick": "Team Alpha", "analystPick": "Beta Boss"},
        {"matchupId": 2, "entertainerPick": "gamma", "analystPick": "Roster 4"},
    ]

    records = grade_predictions(
        {"entertainer": {"wins": 2, "losses": 2}}, predictions, sample_matchups(), names
    )

    assert records["entertainer"] == {"wins": 3, "losses": 3}
    assert records["analyst"] == {"wins": 1, "losses": 1}


def test_memory_advances_each_issue() -> None:
    target = RunTarget(2026, 5, EpisodeType.REGULAR, 5, "force")

    result = DigestGenerator(now=NOW).generate(
        _request(target, CarriedState(memory_entertainer={"issues": 4, "catchphrase": "boom"}))
    )

    assert result.memory_entertainer == {"issues": 5, "catchphrase": "boom", "last_week": 5}
    assert result.memory_analyst == {"issues": 1, "last_week": 5}


def test_result_from_camel_case_mapping() -> None:
    result = GenerationResult.from_mapping(
        {
            "newsletter": {"sections": []},
            "html": "<p/>",
            "composeFailed": True,
            "fallbackSections": ["recap"],
            "pendingPicks": {"week": 3},
        }
    )

    assert result.compose_failed is True
    assert result.fallback_sections == ["recap"]
    assert result.pending_picks == {"week": 3}
    assert result.degraded is True


def test_create_generator_defaults_and_validates_reference() -> None:
    assert isinstance(create_generator(None), DigestGenerator)
    assert isinstance(create_generator("evw_newsletter.generation.digest:DigestGenerator"), DigestGenerator)
    with pytest.raises(ValueError):
        create_generator("no_colon_here")
    with pytest.raises(ValueError):
        create_generator("evw_newsletter.generation.digest:Missing")
