"""Resolve which newsletter episode (if any) a scheduled run should produce."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any

from evw_newsletter.sched.clock import days_between_et, weekday_et


class EpisodeType(str, Enum):
    REGULAR = "regular"
    PRESEASON = "preseason"
    PRE_DRAFT = "pre_draft"
    POST_DRAFT = "post_draft"
    OFFSEASON = "offseason"

    @property
    def weekly(self) -> bool:
        return self is EpisodeType.REGULAR

    @classmethod
    def parse(cls, value: str | EpisodeType) -> EpisodeType:
        if isinstance(value, EpisodeType):
            return value
        normalized = str(value).strip().lower().replace("-", "_")
        try:
            return cls(normalized)
        except ValueError as exc:
            supported = ", ".join(member.value for member in cls)
            raise ValueError(f"Unknown episode type '{value}'. Supported: {supported}") from exc


# Offseason issues are keyed outside the 1-18 week range so they stay stable across years.
STORAGE_WEEK_SENTINELS: Mapping[EpisodeType, int] = MappingProxyType(
    {
        EpisodeType.PRESEASON: 900,
        EpisodeType.PRE_DRAFT: 901,
        EpisodeType.POST_DRAFT: 902,
    }
)
DEFAULT_STORAGE_SENTINEL = 900
WINDOW_OFFSET_DAYS = 7
WEEKLY_RUN_WEEKDAY = 2  # Wednesday


@dataclass(frozen=True)
class RunTarget:
    """Resolved unit of work for a single invocation."""

    season: int
    week: int
    episode_type: EpisodeType
    storage_week: int
    reason: str

    def as_dict(self) -> dict[str, Any]:
        return {
            "season": self.season,
            "week": self.week,
            "episodeType": self.episode_type.value,
            "storageWeek": self.storage_week,
            "reason": self.reason,
        }


@dataclass(frozen=True)
class LeagueState:
    """Season-wide state reported by the league data service."""

    season: int
    week: int
    season_type: str

    @property
    def regular_season_active(self) -> bool:
        return self.season_type == "regular"

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> LeagueState:
        try:
            season = int(str(payload.get("season", "")).strip())
        except ValueError as exc:
            raise ValueError(f"League state is missing a season: {payload!r}") from exc
        return cls(
            season=season,
            week=_coerce_int(payload.get("week"), default=0),
            season_type=str(payload.get("season_type") or "").strip().lower(),
        )


def storage_week_for(episode_type: EpisodeType, week: int) -> int:
    if episode_type.weekly:
        return week
    return STORAGE_WEEK_SENTINELS.get(episode_type, DEFAULT_STORAGE_SENTINEL)


def resolve_run_target(
    now: datetime,
    *,
    state: LeagueState,
    draft_date: datetime,
    season_start: datetime,
    force: bool = False,
    season: int | None = None,
    week: int | None = None,
    episode_type: EpisodeType | str | None = None,
) -> RunTarget | None:
    """Return the target for *now*, or ``None`` when no window is open.

    Checks run in a fixed order and the first match wins: forced run,
    pre-draft, post-draft, preseason, in-season Wednesday.
    """

    resolved_season = season if season is not None else state.season

    if force:
        requested = EpisodeType.parse(episode_type) if episode_type else None
        if requested is not None and not requested.weekly:
            return RunTarget(
                season=resolved_season,
                week=week if week is not None else 0,
                episode_type=requested,
                storage_week=storage_week_for(requested, 0),
                reason="force",
            )
        target_week = week if week is not None else state.week
        return RunTarget(
            season=resolved_season,
            week=target_week,
            episode_type=EpisodeType.REGULAR,
            storage_week=target_week,
            reason="force",
        )

    if days_between_et(draft_date, now) == WINDOW_OFFSET_DAYS:
        return _offseason_target(resolved_season, EpisodeType.PRE_DRAFT, "pre_draft window")

    if days_between_et(now, draft_date) == WINDOW_OFFSET_DAYS:
        return _offseason_target(resolved_season, EpisodeType.POST_DRAFT, "post_draft window")

    if days_between_et(season_start, now) == WINDOW_OFFSET_DAYS:
        return _offseason_target(resolved_season, EpisodeType.PRESEASON, "preseason window")

    if state.regular_season_active and weekday_et(now) == WEEKLY_RUN_WEEKDAY:
        target_week = week if week is not None else state.week
        return RunTarget(
            season=resolved_season,
            week=target_week,
            episode_type=EpisodeType.REGULAR,
            storage_week=target_week,
            reason="in-season Wednesday",
        )

    return None


def preview_target(
    state: LeagueState,
    *,
    season: int | None = None,
    week: int | None = None,
    episode_type: EpisodeType | str | None = None,
) -> RunTarget:
    """Build a target straight from overrides; previews ignore the windows."""

    resolved_season = season if season is not None else state.season
    kind = EpisodeType.parse(episode_type) if episode_type else EpisodeType.REGULAR
    if kind.weekly:
        target_week = week if week is not None else (state.week or 1)
    else:
        target_week = week if week is not None else 0
    return RunTarget(
        season=resolved_season,
        week=target_week,
        episode_type=kind,
        storage_week=storage_week_for(kind, target_week),
        reason="preview override",
    )


def _offseason_target(season: int, episode_type: EpisodeType, reason: str) -> RunTarget:
    return RunTarget(
        season=season,
        week=0,
        episode_type=episode_type,
        storage_week=storage_week_for(episode_type, 0),
        reason=reason,
    )


def _coerce_int(value: object, *, default: int) -> int:
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default


__all__ = [
    "DEFAULT_STORAGE_SENTINEL",
    "EpisodeType",
    "LeagueState",
    "RunTarget",
    "STORAGE_WEEK_SENTINELS",
    "preview_target",
    "resolve_run_target",
    "storage_week_for",
]
