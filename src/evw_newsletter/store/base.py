"""Shared interface for newsletter artifact stores."""

from __future__ import annotations

from typing import Any, Protocol


class ArtifactStore(Protocol):
    """Persistence surface used by the guard, the carried-state loader and the committer.

    Newsletters are keyed by ``(season, storage_week)``. Carried-forward state
    (persona memories, forecast records, pending picks) is overwritten in place.
    """

    def exists(self, season: int, storage_week: int) -> bool:
        """Return True when a newsletter is already stored for the key."""

    def load(self, season: int, storage_week: int) -> dict[str, Any] | None:
        """Return the stored newsletter record, if any."""

    def load_previous(self, season: int, week: int) -> dict[str, Any] | None:
        """Return the most recent weekly newsletter stored before *week*."""

    def save(
        self,
        season: int,
        storage_week: int,
        league_name: str,
        newsletter: dict[str, Any],
        html: str,
    ) -> None:
        """Persist a newsletter artifact."""

    def load_memory(self, persona: str, season: int) -> Any:
        """Return persona memory for the season, or None."""

    def save_memory(self, persona: str, season: int, memory: Any) -> None:
        """Overwrite persona memory for the season."""

    def load_records(self, season: int) -> Any:
        """Return forecast records for the season, or None."""

    def save_records(self, season: int, records: Any) -> None:
        """Overwrite forecast records for the season."""

    def load_pending_picks(self, season: int, week: int) -> Any:
        """Return picks made for *week*, or None."""

    def save_pending_picks(self, season: int, picks: Any) -> None:
        """Store picks under the week they forecast."""


class LeasingStore(Protocol):
    """Optional extension: single-flight leases keyed like artifacts."""

    def acquire_lease(self, season: int, storage_week: int, *, ttl_seconds: float) -> bool:
        """Return True when the caller now holds the lease."""

    def release_lease(self, season: int, storage_week: int) -> None:
        """Drop a held lease."""


__all__ = ["ArtifactStore", "LeasingStore"]
