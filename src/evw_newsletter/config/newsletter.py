"""Load league and runner configuration for the newsletter pipeline."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType

import yaml

from evw_newsletter.paths import CONFIG_ROOT

DEFAULT_CONFIG_PATH = CONFIG_ROOT / "newsletter.yaml"
DEFAULT_LEAGUE_NAME = "East v. West"


@dataclass(frozen=True)
class RuleSection:
    title: str
    text: str


@dataclass(frozen=True)
class ImportantDates:
    """Reference instants that anchor the offseason episode windows."""

    next_draft: datetime
    week1_start: datetime


@dataclass(frozen=True)
class HttpSettings:
    timeout_seconds: float = 15.0
    max_retries: int = 3
    retry_backoff_seconds: float = 0.5


@dataclass(frozen=True)
class CacheSettings:
    players_ttl: timedelta = timedelta(hours=12)
    injuries_ttl: timedelta = timedelta(hours=1)


@dataclass(frozen=True)
class NewsletterConfig:
    """Aggregated league configuration consumed by the runner."""

    league_name: str
    league_ids: Mapping[int, str]
    important_dates: ImportantDates
    rules: tuple[RuleSection, ...]
    http: HttpSettings
    cache: CacheSettings

    def league_id_for(self, season: int) -> str | None:
        return self.league_ids.get(int(season))


def load_newsletter_config(path: Path | None = None) -> NewsletterConfig:
    """Read the newsletter configuration from disk."""

    resolved = (path or DEFAULT_CONFIG_PATH).resolve()
    return _load_newsletter_config_cached(str(resolved))


@lru_cache(maxsize=4)
def _load_newsletter_config_cached(resolved_path: str) -> NewsletterConfig:
    config_path = Path(resolved_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Newsletter configuration not found at {resolved_path}")
    try:
        payload = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:  # pragma: no cover - defensive
        raise ValueError("Failed to parse newsletter configuration") from exc
    if not isinstance(payload, dict):
        raise ValueError("Newsletter configuration must be a mapping")
    return parse_newsletter_config(payload)


def parse_newsletter_config(payload: Mapping[str, object]) -> NewsletterConfig:
    league_name = str(payload.get("league_name") or DEFAULT_LEAGUE_NAME).strip()
    return NewsletterConfig(
        league_name=league_name or DEFAULT_LEAGUE_NAME,
        league_ids=_parse_league_ids(payload.get("league_ids")),
        important_dates=_parse_dates(payload.get("important_dates")),
        rules=_parse_rules(payload.get("rules")),
        http=_parse_http(payload.get("http")),
        cache=_parse_cache(payload.get("cache")),
    )


def parse_instant(value: object, *, label: str) -> datetime:
    """Parse an ISO-8601 instant; naive values are read as UTC."""

    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value or "").strip()
        if not text:
            raise ValueError(f"{label} cannot be empty")
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError as exc:
            raise ValueError(f"{label} must be ISO-8601, got {text!r}") from exc
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


def _parse_league_ids(raw: object) -> Mapping[int, str]:
    if raw is None:
        return MappingProxyType({})
    if not isinstance(raw, dict):
        raise ValueError("league_ids must map season to league id")
    parsed: dict[int, str] = {}
    for season, league_id in raw.items():
        try:
            season_key = int(season)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"league_ids key {season!r} is not a season year") from exc
        text = str(league_id or "").strip()
        if text:
            parsed[season_key] = text
    return MappingProxyType(parsed)


def _parse_dates(raw: object) -> ImportantDates:
    if not isinstance(raw, dict):
        raise ValueError("important_dates requires next_draft and week1_start")
    return ImportantDates(
        next_draft=parse_instant(raw.get("next_draft"), label="important_dates.next_draft"),
        week1_start=parse_instant(raw.get("week1_start"), label="important_dates.week1_start"),
    )


def _parse_rules(raw: object) -> tuple[RuleSection, ...]:
    if raw is None:
        return ()
    if not isinstance(raw, list):
        raise ValueError("rules must be a list of {title, text} entries")
    sections: list[RuleSection] = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        title = str(item.get("title", "")).strip()
        text = str(item.get("text", "")).strip()
        if title or text:
            sections.append(RuleSection(title=title, text=text))
    return tuple(sections)


def _parse_http(raw: object) -> HttpSettings:
    if not raw:
        return HttpSettings()
    if not isinstance(raw, dict):
        raise ValueError("http must be a mapping")
    defaults = HttpSettings()
    timeout = _positive_float(raw.get("timeout_seconds"), defaults.timeout_seconds, "http.timeout_seconds")
    backoff = _positive_float(
        raw.get("retry_backoff_seconds"), defaults.retry_backoff_seconds, "http.retry_backoff_seconds"
    )
    retries_raw = raw.get("max_retries", defaults.max_retries)
    try:
        retries = int(retries_raw)
    except (TypeError, ValueError) as exc:
        raise ValueError("http.max_retries must be an integer") from exc
    return HttpSettings(timeout_seconds=timeout, max_retries=max(1, retries), retry_backoff_seconds=backoff)


def _parse_cache(raw: object) -> CacheSettings:
    if not raw:
        return CacheSettings()
    if not isinstance(raw, dict):
        raise ValueError("cache must be a mapping")
    defaults = CacheSettings()
    players_hours = _positive_float(
        raw.get("players_ttl_hours"), defaults.players_ttl.total_seconds() / 3600, "cache.players_ttl_hours"
    )
    injuries_hours = _positive_float(
        raw.get("injuries_ttl_hours"), defaults.injuries_ttl.total_seconds() / 3600, "cache.injuries_ttl_hours"
    )
    return CacheSettings(
        players_ttl=timedelta(hours=players_hours),
        injuries_ttl=timedelta(hours=injuries_hours),
    )


def _positive_float(value: object, default: float, label: str) -> float:
    if value is None:
        return default
    try:
        numeric = float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{label} must be numeric") from exc
    if numeric < 0:
        raise ValueError(f"{label} must be non-negative")
    return numeric


__all__ = [
    "CacheSettings",
    "HttpSettings",
    "ImportantDates",
    "NewsletterConfig",
    "RuleSection",
    "load_newsletter_config",
    "parse_instant",
    "parse_newsletter_config",
]
