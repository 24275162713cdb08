"""Preview and publish commit paths."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from evw_newsletter.generation.base import GenerationResult
from evw_newsletter.sched.clock import to_et
from evw_newsletter.sched.targets import RunTarget
from evw_newsletter.store.base import ArtifactStore
from evw_newsletter.store.carried import ANALYST, ENTERTAINER
from evw_newsletter.utils.files import atomic_write_json, atomic_write_text

LOGGER = logging.getLogger(__name__)

PREVIEW_HTML_NAME = "newsletter-preview.html"
PREVIEW_META_NAME = "newsletter-preview.json"


def write_preview(
    result: GenerationResult,
    target: RunTarget,
    *,
    artifacts_dir: Path,
    warnings: list[str] | None = None,
    now: datetime | None = None,
) -> tuple[Path, Path]:
    """Write the preview HTML and its metadata sidecar. Nothing else is touched."""

    reference = now or datetime.now(tz=UTC)
    artifacts_dir.mkdir(parents=True, exist_ok=True)
    html_path = artifacts_dir / PREVIEW_HTML_NAME
    meta_path = artifacts_dir / PREVIEW_META_NAME

    meta: dict[str, Any] = {
        **target.as_dict(),
        "timestamp": reference.astimezone(UTC).isoformat(),
        "timestampEt": to_et(reference).isoformat(),
    }
    if warnings:
        meta["warnings"] = list(warnings)
    if result.degraded:
        meta["degraded"] = {
            "composeFailed": result.compose_failed,
            "fallbackUsed": result.fallback_used,
            "fallbackSections": list(result.fallback_sections),
        }
        LOGGER.warning(
            "Preview content is degraded",
            extra={"newsletter": {**target.as_dict(), **meta["degraded"]}},
        )

    atomic_write_text(html_path, result.html)
    atomic_write_json(meta_path, meta)
    LOGGER.info(
        "Preview written",
        extra={"newsletter": {**target.as_dict(), "html": str(html_path), "meta": str(meta_path)}},
    )
    return html_path, meta_path


def publish_result(
    store: ArtifactStore,
    result: GenerationResult,
    target: RunTarget,
    *,
    league_name: str,
) -> None:
    """Persist carried state, then the newsletter.

    State goes first so a run that fails part-way leaves no artifact behind and
    the next run regenerates everything.
    """

    with ThreadPoolExecutor(max_workers=4) as pool:
        futures = [
            pool.submit(store.save_memory, ENTERTAINER, target.season, result.memory_entertainer),
            pool.submit(store.save_memory, ANALYST, target.season, result.memory_analyst),
            pool.submit(store.save_records, target.season, result.records),
            pool.submit(store.save_pending_picks, target.season, result.pending_picks),
        ]
        for future in futures:
            future.result()

    store.save(target.season, target.storage_week, league_name, result.newsletter, result.html)
    LOGGER.info("Newsletter published", extra={"newsletter": {**target.as_dict(), "league": league_name}})


__all__ = ["PREVIEW_HTML_NAME", "PREVIEW_META_NAME", "publish_result", "write_preview"]
