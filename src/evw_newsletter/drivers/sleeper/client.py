"""Read-only Sleeper API client with bounded timeouts, retries, and structured logging."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping
from typing import Any

import requests
from requests.exceptions import RequestException

from evw_newsletter.utils.http import UpstreamError

LOGGER = logging.getLogger(__name__)

_DEFAULT_BASE_URL = "https://api.sleeper.app/v1"
_DEFAULT_TIMEOUT = 15.0
_DEFAULT_RETRIES = 3
_RETRYABLE_STATUS = {408, 429, 500, 502, 503, 504}
_USER_AGENT = "evw-newsletter/0.3 (+https://api.sleeper.app) Python-requests"


class Sleep:
    """Wrapper so tests can bypass actual sleeping."""

    def __call__(self, seconds: float) -> None:  # pragma: no cover - simple delegation
        time.sleep(seconds)


class SleeperClient:
    """League data service: league, users, rosters, matchups, transactions, players."""

    def __init__(
        self,
        *,
        base_url: str = _DEFAULT_BASE_URL,
        session: requests.Session | None = None,
        timeout: float = _DEFAULT_TIMEOUT,
        max_retries: int = _DEFAULT_RETRIES,
        retry_backoff: float = 0.5,
        sleeper: Callable[[float], None] | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._session = session or requests.Session()
        self._timeout = timeout
        self._max_retries = max(1, max_retries)
        self._retry_backoff = max(0.0, retry_backoff)
        self._sleep = sleeper or Sleep()

    # Public API ---------------------------------------------------------------------------------

    def state(self) -> dict[str, Any]:
        return self._get_json("/state/nfl")

    def league(self, league_id: str) -> dict[str, Any]:
        return self._get_json(f"/league/{league_id}")

    def users(self, league_id: str) -> list[dict[str, Any]]:
        return self._get_json(f"/league/{league_id}/users") or []

    def rosters(self, league_id: str) -> list[dict[str, Any]]:
        return self._get_json(f"/league/{league_id}/rosters") or []

    def matchups(self, league_id: str, week: int) -> list[dict[str, Any]]:
        return self._get_json(f"/league/{league_id}/matchups/{int(week)}") or []

    def transactions(self, league_id: str, week: int) -> list[dict[str, Any]]:
        return self._get_json(f"/league/{league_id}/transactions/{int(week)}") or []

    def players(self) -> dict[str, dict[str, Any]]:
        return self._get_json("/players/nfl") or {}

    def trending(self, kind: str, *, lookback_hours: int = 24, limit: int = 25) -> list[dict[str, Any]]:
        if kind not in {"add", "drop"}:
            raise ValueError(f"trending kind must be 'add' or 'drop', got {kind!r}")
        params = {"lookback_hours": lookback_hours, "limit": limit}
        return self._get_json(f"/players/nfl/trending/{kind}", params=params) or []

    # Internal helpers --------------------------------------------------------------------------

    def _get_json(self, path: str, *, params: Mapping[str, Any] | None = None) -> Any:
        url = f"{self._base_url}{path}"
        last_error: Exception | None = None

        for attempt in range(1, self._max_retries + 1):
            try:
                response = self._session.get(
                    url,
                    params=params,
                    headers={"User-Agent": _USER_AGENT},
                    timeout=self._timeout,
                )
            except RequestException as exc:
                last_error = exc
                self._log_failure(path, attempt, exc=exc)
                if attempt >= self._max_retries:
                    break
                self._backoff(attempt)
                continue

            if 200 <= response.status_code < 300:
                LOGGER.debug(
                    "Sleeper request succeeded",
                    extra={"sleeper": {"path": path, "status": response.status_code, "attempt": attempt}},
                )
                try:
                    return response.json()
                except ValueError as exc:
                    raise UpstreamError(f"Sleeper returned invalid JSON for {path}") from exc

            self._log_failure(path, attempt, status=response.status_code)
            if response.status_code in _RETRYABLE_STATUS and attempt < self._max_retries:
                last_error = UpstreamError(f"Sleeper returned retryable status {response.status_code} for {path}")
                self._backoff(attempt)
                continue
            raise UpstreamError(f"Sleeper returned {response.status_code} for {path}: {response.text[:256]}")

        raise UpstreamError(f"Failed to fetch {path} from Sleeper") from last_error

    def _backoff(self, attempt: int) -> None:
        delay = self._retry_backoff * (2 ** (attempt - 1))
        self._sleep(delay)

    def _log_failure(
        self,
        path: str,
        attempt: int,
        *,
        status: int | None = None,
        exc: Exception | None = None,
    ) -> None:
        payload: dict[str, Any] = {"path": path, "attempt": attempt, "status": status}
        if exc is not None:
            payload["error"] = str(exc)
        LOGGER.warning("Sleeper request attempt failed", extra={"sleeper": payload})


__all__ = ["SleeperClient"]
