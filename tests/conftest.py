from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import pytest

from evw_newsletter.config.newsletter import NewsletterConfig, parse_newsletter_config
from evw_newsletter.config.settings import RunnerSettings
from evw_newsletter.generation.base import GenerationRequest, GenerationResult

DRAFT = datetime.fromisoformat("2026-07-18T13:00:00-04:00")
SEASON_START = datetime.fromisoformat("2026-09-10T20:20:00-04:00")


class FakeSleeper:
    """In-memory league data service that records every call."""

    def __init__(
        self,
        *,
        state: dict[str, Any] | None = None,
        league: dict[str, Any] | None = None,
        users: list[dict[str, Any]] | None = None,
        rosters: list[dict[str, Any]] | None = None,
        matchups: dict[int, list[dict[str, Any]]] | None = None,
        transactions: list[dict[str, Any]] | None = None,
        players: dict[str, dict[str, Any]] | None = None,
        failing: set[str] | None = None,
    ) -> None:
        self._state = state or {"season": "2026", "week": 5, "season_type": "regular"}
        self._league = league if league is not None else sample_league()
        self._users = users if users is not None else sample_users()
        self._rosters = rosters if rosters is not None else sample_rosters()
        self._matchups = matchups if matchups is not None else {5: sample_matchups(), 6: sample_matchups()}
        self._transactions = transactions or []
        self._players = players if players is not None else sample_players()
        self._failing = failing or set()
        self.calls: list[str] = []

    def _record(self, name: str) -> None:
        self.calls.append(name)
        if name in self._failing:
            from evw_newsletter.utils.http import UpstreamError

            raise UpstreamError(f"{name} unavailable")

    def state(self) -> dict[str, Any]:
        self._record("state")
        return dict(self._state)

    def league(self, league_id: str) -> dict[str, Any]:
        self._record("league")
        return dict(self._league)

    def users(self, league_id: str) -> list[dict[str, Any]]:
        self._record("users")
        return list(self._users)

    def rosters(self, league_id: str) -> list[dict[str, Any]]:
        self._record("rosters")
        return list(self._rosters)

    def matchups(self, league_id: str, week: int) -> list[dict[str, Any]]:
        self._record(f"matchups:{week}")
        return list(self._matchups.get(week, []))

    def transactions(self, league_id: str, week: int) -> list[dict[str, Any]]:
        self._record("transactions")
        return list(self._transactions)

    def players(self) -> dict[str, dict[str, Any]]:
        self._record("players")
        return dict(self._players)

    def trending(self, kind: str, *, lookback_hours: int = 24, limit: int = 25) -> list[dict[str, Any]]:
        self._record(f"trending:{kind}")
        return []


class FakeStore:
    """In-memory artifact store without lease support."""

    def __init__(self) -> None:
        self.newsletters: dict[tuple[int, int], dict[str, Any]] = {}
        self.memory: dict[tuple[str, int], Any] = {}
        self.records: dict[int, Any] = {}
        self.picks: dict[tuple[int, int], Any] = {}
        self.calls: list[str] = []

    @property
    def writes(self) -> list[str]:
        return [call for call in self.calls if call.startswith("save")]

    def exists(self, season: int, storage_week: int) -> bool:
        self.calls.append("exists")
        return (season, storage_week) in self.newsletters

    def load(self, season: int, storage_week: int) -> dict[str, Any] | None:
        self.calls.append("load")
        return self.newsletters.get((season, storage_week))

    def load_previous(self, season: int, week: int) -> dict[str, Any] | None:
        self.calls.append("load_previous")
        return self.newsletters.get((season, week - 1))

    def save(self, season: int, storage_week: int, league_name: str, newsletter: dict[str, Any], html: str) -> None:
        self.calls.append("save")
        self.newsletters[(season, storage_week)] = {
            "league_name": league_name,
            "newsletter": newsletter,
            "html": html,
        }

    def load_memory(self, persona: str, season: int) -> Any:
        self.calls.append("load_memory")
        return self.memory.get((persona, season))

    def save_memory(self, persona: str, season: int, memory: Any) -> None:
        self.calls.append("save_memory")
        self.memory[(persona, season)] = memory

    def load_records(self, season: int) -> Any:
        self.calls.append("load_records")
        return self.records.get(season)

    def save_records(self, season: int, records: Any) -> None:
        self.calls.append("save_records")
        self.records[season] = records

    def load_pending_picks(self, season: int, week: int) -> Any:
        self.calls.append("load_pending_picks")
        return self.picks.get((season, week))

    def save_pending_picks(self, season: int, picks: Any) -> None:
        self.calls.append("save_pending_picks")
        if picks:
            self.picks[(season, int(picks["week"]))] = picks


class StaticGenerator:
    def __init__(self, **overrides: Any) -> None:
        self._overrides = overrides
        self.requests: list[GenerationRequest] = []
        self.last_result: GenerationResult | None = None

    def generate(self, request: GenerationRequest) -> GenerationResult:
        self.requests.append(request)
        fields: dict[str, Any] = {
            "newsletter": {"meta": {"week": request.target.week}, "sections": []},
            "html": "<h1>Week in review</h1><p>Patrick Mahomes (QB) carried Team Alpha.</p>",
            "memory_entertainer": {"mood": "smug"},
            "memory_analyst": {"mood": "measured"},
            "records": {"entertainer": {"wins": 1, "losses": 0}},
            "pending_picks": {"week": request.target.week + 1, "picks": []},
        }
        fields.update(self._overrides)
        self.last_result = GenerationResult(**fields)
        return self.last_result


def sample_league() -> dict[str, Any]:
    return {
        "league_id": "L2026",
        "name": "East v. West",
        "settings": {"playoff_teams": 2, "playoff_week_start": 15},
    }


def sample_users() -> list[dict[str, Any]]:
    return [
        {"user_id": "u1", "display_name": "alpha_owner", "metadata": {"team_name": "Team Alpha"}},
        {"user_id": "u2", "display_name": "Beta Boss", "metadata": {}},
        {"user_id": "u3", "username": "gamma"},
    ]


def sample_rosters() -> list[dict[str, Any]]:
    return [
        {
            "roster_id": 1,
            "owner_id": "u1",
            "players": ["4046", "6794"],
            "settings": {"wins": 3, "losses": 1, "fpts": 480, "fpts_decimal": 50},
        },
        {
            "roster_id": 2,
            "owner_id": "u2",
            "players": ["6794", "4881"],
            "settings": {"wins": 3, "losses": 1, "fpts": 512, "fpts_decimal": 10},
        },
        {
            "roster_id": 3,
            "owner_id": "u3",
            "players": [],
            "settings": {"wins": 1, "losses": 3, "fpts": 400},
        },
        {
            "roster_id": 4,
            "owner_id": None,
            "players": [],
            "settings": {"wins": 1, "losses": 3, "fpts": 390},
        },
    ]


def sample_matchups() -> list[dict[str, Any]]:
    return [
        {"roster_id": 1, "matchup_id": 1, "points": 120.5},
        {"roster_id": 2, "matchup_id": 1, "points": 99.0},
        {"roster_id": 3, "matchup_id": 2, "points": 88.0},
        {"roster_id": 4, "matchup_id": 2, "points": 101.2},
    ]


def sample_players() -> dict[str, dict[str, Any]]:
    return {
        "4046": {"first_name": "Patrick", "last_name": "Mahomes", "team": "KC", "position": "QB"},
        "6794": {
            "first_name": "Justin",
            "last_name": "Jefferson",
            "team": "MIN",
            "position": "WR",
            "injury_status": "Questionable",
        },
        "4881": {
            "full_name": "Lamar Jackson",
            "team": "BAL",
            "position": "QB",
            "injury_status": "Out",
        },
        "9999": {"injury_status": "IR"},
    }


@pytest.fixture
def newsletter_config() -> NewsletterConfig:
    return parse_newsletter_config(
        {
            "league_name": "East v. West",
            "league_ids": {2025: "L2025", 2026: "L2026"},
            "important_dates": {
                "next_draft": DRAFT.isoformat(),
                "week1_start": SEASON_START.isoformat(),
            },
            "rules": [{"title": "Scoring", "text": "<p>Half <b>PPR</b> scoring.</p>"}],
        }
    )


@pytest.fixture
def runner_settings(tmp_path: Path) -> RunnerSettings:
    return RunnerSettings(
        draft_date=DRAFT,
        season_start=SEASON_START,
        strict_publish=True,
        max_concurrency=1,
        use_lease=True,
        lease_ttl_seconds=3600,
        artifacts_dir=tmp_path / "artifacts",
        data_dir=tmp_path / "data",
        generator=None,
        sleeper_base_url="https://sleeper.test/v1",
    )


@pytest.fixture
def fixed_now() -> datetime:
    # Monday, outside every window.
    return datetime(2026, 10, 19, 15, 0, tzinfo=UTC)
