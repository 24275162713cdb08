"""Filesystem-backed artifact store (JSON documents, atomic writes, lock-file leases)."""

from __future__ import annotations

import json
import logging
import os
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from evw_newsletter.paths import STORE_ROOT
from evw_newsletter.utils.files import atomic_write_json

LOGGER = logging.getLogger(__name__)

WEEKLY_STORAGE_LIMIT = 900


class LocalArtifactStore:
    """Layout under ``root``::

        <season>/newsletters/<storage_week>.json
        <season>/memory/<persona>.json
        <season>/records.json
        <season>/picks/<week>.json
        <season>/leases/<storage_week>.lock
    """

    def __init__(self, root: Path | None = None) -> None:
        self._root = Path(root or STORE_ROOT)

    @property
    def root(self) -> Path:
        return self._root

    # Newsletters -------------------------------------------------------------------------------

    def exists(self, season: int, storage_week: int) -> bool:
        return self._newsletter_path(season, storage_week).exists()

    def load(self, season: int, storage_week: int) -> dict[str, Any] | None:
        payload = _read_json(self._newsletter_path(season, storage_week))
        return payload if isinstance(payload, dict) else None

    def load_previous(self, season: int, week: int) -> dict[str, Any] | None:
        if week <= 1 or week > WEEKLY_STORAGE_LIMIT:
            return None
        return self.load(season, week - 1)

    def save(
        self,
        season: int,
        storage_week: int,
        league_name: str,
        newsletter: dict[str, Any],
        html: str,
    ) -> None:
        record = {
            "season": season,
            "week": storage_week,
            "league_name": league_name,
            "saved_at": datetime.now(tz=UTC).isoformat(),
            "newsletter": newsletter,
            "html": html,
        }
        path = self._newsletter_path(season, storage_week)
        atomic_write_json(path, record, sort_keys=True)
        LOGGER.info(
            "Newsletter stored",
            extra={"newsletter": {"season": season, "storage_week": storage_week, "path": str(path)}},
        )

    # Carried-forward state --------------------------------------------------------------------

    def load_memory(self, persona: str, season: int) -> Any:
        return _read_json(self._season_dir(season) / "memory" / f"{persona}.json")

    def save_memory(self, persona: str, season: int, memory: Any) -> None:
        if memory is None:
            return
        atomic_write_json(self._season_dir(season) / "memory" / f"{persona}.json", memory, sort_keys=True)

    def load_records(self, season: int) -> Any:
        return _read_json(self._season_dir(season) / "records.json")

    def save_records(self, season: int, records: Any) -> None:
        if records is None:
            return
        atomic_write_json(self._season_dir(season) / "records.json", records, sort_keys=True)

    def load_pending_picks(self, season: int, week: int) -> Any:
        return _read_json(self._season_dir(season) / "picks" / f"{int(week)}.json")

    def save_pending_picks(self, season: int, picks: Any) -> None:
        if not picks:
            return
        if not isinstance(picks, dict) or "week" not in picks:
            raise ValueError("pending picks must be a mapping with a 'week' key")
        atomic_write_json(self._season_dir(season) / "picks" / f"{int(picks['week'])}.json", picks, sort_keys=True)

    # Leases ------------------------------------------------------------------------------------

    def acquire_lease(self, season: int, storage_week: int, *, ttl_seconds: float) -> bool:
        path = self._lease_path(season, storage_week)
        path.parent.mkdir(parents=True, exist_ok=True)
        for _ in range(2):
            try:
                fd = os.open(path, os.O_CREAT | os.O_EXCL | os.O_WRONLY)
            except FileExistsError:
                if not self._break_stale_lease(path, ttl_seconds):
                    return False
                continue
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump({"pid": os.getpid(), "acquired_at": datetime.now(tz=UTC).isoformat()}, handle)
            return True
        return False

    def release_lease(self, season: int, storage_week: int) -> None:
        self._lease_path(season, storage_week).unlink(missing_ok=True)

    def _break_stale_lease(self, path: Path, ttl_seconds: float) -> bool:
        try:
            age = datetime.now(tz=UTC).timestamp() - path.stat().st_mtime
        except FileNotFoundError:
            return True
        if age <= ttl_seconds:
            return False
        LOGGER.warning("Breaking stale lease %s (age %.0fs)", path, age)
        path.unlink(missing_ok=True)
        return True

    # Paths -------------------------------------------------------------------------------------

    def _season_dir(self, season: int) -> Path:
        return self._root / str(int(season))

    def _newsletter_path(self, season: int, storage_week: int) -> Path:
        return self._season_dir(season) / "newsletters" / f"{int(storage_week)}.json"

    def _lease_path(self, season: int, storage_week: int) -> Path:
        return self._season_dir(season) / "leases" / f"{int(storage_week)}.lock"


def _read_json(path: Path) -> Any:
    if not path.exists():
        return None
    return json.loads(path.read_text(encoding="utf-8"))


__all__ = ["LocalArtifactStore"]
