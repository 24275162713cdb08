"""ESPN public NFL feeds used as external signals (injuries, headlines)."""

from __future__ import annotations

import logging
from typing import Any

import requests
from requests.exceptions import RequestException

from evw_newsletter.utils.http import UpstreamError

LOGGER = logging.getLogger(__name__)

ESPN_BASE_URL = "https://site.api.espn.com/apis/site/v2/sports/football/nfl"


class EspnClient:
    def __init__(
        self,
        *,
        base_url: str = ESPN_BASE_URL,
        session: requests.Session | None = None,
        timeout: float = 15.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._session = session or requests.Session()
        self._timeout = timeout

    def injuries(self) -> list[dict[str, Any]]:
        payload = self._get_json("/injuries")
        reports: list[dict[str, Any]] = []
        for team_block in payload.get("injuries") or []:
            team_abbrev = ((team_block.get("team") or {}).get("abbreviation")) or "UNK"
            for injury in team_block.get("injuries") or []:
                athlete = injury.get("athlete") or {}
                reports.append(
                    {
                        "player_name": athlete.get("displayName") or "Unknown Player",
                        "nfl_team": team_abbrev,
                        "position": ((athlete.get("position") or {}).get("abbreviation")) or "UNK",
                        "status": injury.get("status") or "Unknown",
                        "injury": ((injury.get("type") or {}).get("description"))
                        or ((injury.get("details") or {}).get("type"))
                        or "Unknown injury",
                    }
                )
        return reports

    def news(self, *, limit: int = 25) -> list[dict[str, Any]]:
        payload = self._get_json("/news", params={"limit": limit})
        items: list[dict[str, Any]] = []
        for article in payload.get("articles") or []:
            headline = article.get("headline") or article.get("title") or ""
            if not headline:
                continue
            items.append(
                {
                    "headline": headline,
                    "category": categorize_headline(headline),
                    "published": article.get("published"),
                }
            )
        return items

    def _get_json(self, path: str, *, params: dict[str, Any] | None = None) -> dict[str, Any]:
        url = f"{self._base_url}{path}"
        try:
            response = self._session.get(url, params=params, timeout=self._timeout)
        except RequestException as exc:
            raise UpstreamError(f"ESPN request failed for {path}: {exc}") from exc
        if not response.ok:
            raise UpstreamError(f"ESPN returned {response.status_code} for {path}")
        try:
            payload = response.json()
        except ValueError as exc:
            raise UpstreamError(f"ESPN returned invalid JSON for {path}") from exc
        return payload if isinstance(payload, dict) else {}


def categorize_headline(headline: str) -> str:
    lower = headline.lower()
    if any(token in lower for token in ("injur", "questionable", "doubtful", " out ")):
        return "injury"
    if any(token in lower for token in ("trade", "sign", "release", "waive")):
        return "transaction"
    if any(token in lower for token in ("project", "expect", "predict", "rank")):
        return "projection"
    return "news"


__all__ = ["ESPN_BASE_URL", "EspnClient", "categorize_headline"]
