"""US/Eastern civil-time helpers used by every gating decision."""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

LOGGER = logging.getLogger(__name__)

ET_ZONE_NAME = "America/New_York"
ONE_DAY = timedelta(days=1)


def _load_zone() -> tzinfo | None:
    try:
        return ZoneInfo(ET_ZONE_NAME)
    except ZoneInfoNotFoundError:
        LOGGER.warning("Time zone database missing %s; treating instants as ET wall clock", ET_ZONE_NAME)
        return None


ET = _load_zone()


def to_et(moment: datetime) -> datetime:
    """Return *moment* as observed on an ET wall clock.

    Naive inputs are read as UTC. Without a zone database the instant's own
    wall clock is used unchanged (as a naive value).
    """

    if ET is None:
        return moment.replace(tzinfo=None)
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC).astimezone(ET)
    return moment.astimezone(ET)


def start_of_day_et(moment: datetime) -> datetime:
    local = to_et(moment)
    midnight = datetime(local.year, local.month, local.day)
    if ET is None:
        return midnight
    return midnight.replace(tzinfo=ET)


def days_between_et(a: datetime, b: datetime) -> int:
    """Whole ET civil days from *b* to *a* (positive when *a* is later)."""

    delta = start_of_day_et(a) - start_of_day_et(b)
    return round(delta / ONE_DAY)


def weekday_et(moment: datetime) -> int:
    """Monday=0 ... Sunday=6 in ET."""

    return to_et(moment).weekday()


__all__ = ["ET", "ET_ZONE_NAME", "days_between_et", "start_of_day_et", "to_et", "weekday_et"]
