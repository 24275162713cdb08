"""Environment-sourced runner settings layered over the YAML configuration."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from evw_newsletter.config.newsletter import NewsletterConfig, parse_instant
from evw_newsletter.paths import ARTIFACTS_ROOT, DATA_ROOT
from evw_newsletter.utils.env import env_flag, env_int, env_text

LOGGER = logging.getLogger(__name__)

DEFAULT_SLEEPER_BASE_URL = "https://api.sleeper.app/v1"


@dataclass(frozen=True)
class RunnerSettings:
    draft_date: datetime
    season_start: datetime
    strict_publish: bool
    max_concurrency: int
    use_lease: bool
    lease_ttl_seconds: int
    artifacts_dir: Path
    data_dir: Path
    generator: str | None
    sleeper_base_url: str

    @property
    def cache_dir(self) -> Path:
        return self.data_dir / "cache"

    @property
    def store_dir(self) -> Path:
        return self.data_dir / "store"


def load_runner_settings(
    config: NewsletterConfig,
    environ: Mapping[str, str] | None = None,
) -> RunnerSettings:
    source = os.environ if environ is None else environ

    draft_text = env_text("EVW_DRAFT_DATE_ISO", source)
    season_text = env_text("EVW_SEASON_START_ISO", source)
    draft_date = (
        parse_instant(draft_text, label="EVW_DRAFT_DATE_ISO")
        if draft_text
        else config.important_dates.next_draft
    )
    season_start = (
        parse_instant(season_text, label="EVW_SEASON_START_ISO")
        if season_text
        else config.important_dates.week1_start
    )

    # Only the literal "true" keeps strict publishing on once the variable is set.
    strict_raw = source.get("NEWSLETTER_STRICT_PUBLISH")
    strict_publish = True if strict_raw is None else strict_raw.strip().lower() == "true"

    max_concurrency = env_int("NEWSLETTER_MAX_CONCURRENCY", default=1, environ=source)
    if max_concurrency < 1:
        raise ValueError("NEWSLETTER_MAX_CONCURRENCY must be >= 1")
    lease_ttl_seconds = env_int("NEWSLETTER_LEASE_TTL_SECONDS", default=3600, environ=source)
    if lease_ttl_seconds < 1:
        raise ValueError("NEWSLETTER_LEASE_TTL_SECONDS must be >= 1")

    data_dir = Path(env_text("NEWSLETTER_DATA_DIR", source) or DATA_ROOT)
    artifacts_dir = Path(env_text("NEWSLETTER_ARTIFACTS_DIR", source) or ARTIFACTS_ROOT)

    return RunnerSettings(
        draft_date=draft_date,
        season_start=season_start,
        strict_publish=strict_publish,
        max_concurrency=max_concurrency,
        use_lease=env_flag("NEWSLETTER_USE_LEASE", default=True, environ=source),
        lease_ttl_seconds=lease_ttl_seconds,
        artifacts_dir=artifacts_dir,
        data_dir=data_dir,
        generator=env_text("NEWSLETTER_GENERATOR", source),
        sleeper_base_url=(env_text("SLEEPER_API_BASE", source) or DEFAULT_SLEEPER_BASE_URL).rstrip("/"),
    )


__all__ = ["DEFAULT_SLEEPER_BASE_URL", "RunnerSettings", "load_runner_settings"]
