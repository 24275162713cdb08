"""HTTP utilities with on-disk JSON caching."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

from evw_newsletter.utils.files import atomic_write_json, atomic_write_text

LOGGER = logging.getLogger(__name__)
META_SUFFIX = ".meta.json"


class UpstreamError(RuntimeError):
    """Raised when an upstream data service request fails."""


def load_cached_json(
    cache_path: Path,
    loader: Callable[[], Any],
    *,
    ttl: timedelta,
    now: datetime | None = None,
    force_refresh: bool = False,
) -> Any:
    """Return the cached payload when younger than *ttl*, else call *loader*.

    A failed refresh falls back to a stale cache entry when one exists.
    """

    cache_path.parent.mkdir(parents=True, exist_ok=True)
    meta_path = cache_path.with_suffix(cache_path.suffix + META_SUFFIX)
    reference = now or datetime.now(tz=UTC)
    cached = _read_json(cache_path)
    meta = _read_json(meta_path) or {}

    if cached is not None and not force_refresh:
        fetched_at = _parse_timestamp(meta.get("fetched_at"))
        # A stamp later than the reference came from a run with a shifted clock.
        if fetched_at is not None and timedelta(0) <= reference - fetched_at < ttl:
            return cached

    try:
        payload = loader()
    except UpstreamError:
        if cached is None:
            raise
        LOGGER.warning(
            "Refresh failed; serving stale cache",
            extra={"newsletter": {"cache": cache_path.name}},
        )
        return cached

    atomic_write_text(cache_path, json.dumps(payload))
    atomic_write_json(meta_path, {"fetched_at": reference.isoformat(), "ttl_seconds": ttl.total_seconds()})
    return payload


def _read_json(path: Path) -> Any:
    if not path.exists():
        return None
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError:
        return None


def _parse_timestamp(value: object) -> datetime | None:
    if not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)
