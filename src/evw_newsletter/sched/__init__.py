"""Civil-time helpers and run-target resolution."""

from .clock import ET, days_between_et, start_of_day_et, to_et, weekday_et
from .targets import (
    STORAGE_WEEK_SENTINELS,
    EpisodeType,
    LeagueState,
    RunTarget,
    preview_target,
    resolve_run_target,
    storage_week_for,
)

__all__ = [
    "ET",
    "days_between_et",
    "start_of_day_et",
    "to_et",
    "weekday_et",
    "STORAGE_WEEK_SENTINELS",
    "EpisodeType",
    "LeagueState",
    "RunTarget",
    "preview_target",
    "resolve_run_target",
    "storage_week_for",
]
