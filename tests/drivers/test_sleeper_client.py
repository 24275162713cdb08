from __future__ import annotations

import pytest
import requests
import requests_mock

from evw_newsletter.drivers.sleeper.client import SleeperClient
from evw_newsletter.utils.http import UpstreamError

BASE = "https://sleeper.test/v1"


def _client(sleeps: list[float], **kwargs: object) -> SleeperClient:
    return SleeperClient(
        base_url=BASE,
        session=requests.Session(),
        sleeper=sleeps.append,
        **kwargs,  # type: ignore[arg-type]
    )


def test_state_and_league_endpoints() -> None:
    sleeps: list[float] = []
    with requests_mock.Mocker() as mocker:
        mocker.get(f"{BASE}/state/nfl", json={"season": "2026", "week": 5, "season_type": "regular"})
        mocker.get(f"{BASE}/league/L1/matchups/5", json=[{"roster_id": 1, "matchup_id": 1}])
        mocker.get(f"{BASE}/league/L1/transactions/5", text="null")

        client = _client(sleeps)

        assert client.state()["week"] == 5
        assert client.matchups("L1", 5) == [{"roster_id": 1, "matchup_id": 1}]
        assert client.transactions("L1", 5) == []
    assert sleeps == []


def test_retries_retryable_status_with_exponential_backoff() -> None:
    sleeps: list[float] = []
    with requests_mock.Mocker() as mocker:
        mocker.get(
            f"{BASE}/league/L1/users",
            [
                {"status_code": 503},
                {"status_code": 429},
                {"json": [{"user_id": "u1"}], "status_code": 200},
            ],
        )

        users = _client(sleeps, retry_backoff=0.5).users("L1")

        assert users == [{"user_id": "u1"}]
        assert mocker.call_count == 3
    assert sleeps == [0.5, 1.0]


def test_non_retryable_status_fails_immediately() -> None:
    sleeps: list[float] = []
    with requests_mock.Mocker() as mocker:
        mocker.get(f"{BASE}/league/missing", status_code=404, text="not found")

        with pytest.raises(UpstreamError, match="404"):
            _client(sleeps).league("missing")
        assert mocker.call_count == 1
    assert sleeps == []


def test_connection_errors_exhaust_retries() -> None:
    sleeps: list[float] = []
    with requests_mock.Mocker() as mocker:
        mocker.get(f"{BASE}/players/nfl", exc=requests.exceptions.ConnectTimeout)

        with pytest.raises(UpstreamError):
            _client(sleeps, max_retries=3).players()
        assert mocker.call_count == 3
    assert len(sleeps) == 2


def test_trending_passes_lookback_and_limit() -> None:
    with requests_mock.Mocker() as mocker:
        mocker.get(f"{BASE}/players/nfl/trending/add", json=[{"player_id": "4046", "count": 12}])

        result = _client([]).trending("add", lookback_hours=24, limit=25)

        assert result == [{"player_id": "4046", "count": 12}]
        assert mocker.last_request.qs == {"lookback_hours": ["24"], "limit": ["25"]}


def test_trending_rejects_unknown_kind() -> None:
    with pytest.raises(ValueError):
        _client([]).trending("hold")
