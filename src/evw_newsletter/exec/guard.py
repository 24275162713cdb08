"""At-most-once guard around newsletter persistence."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from evw_newsletter.sched.targets import RunTarget
from evw_newsletter.store.base import ArtifactStore

LOGGER = logging.getLogger(__name__)

DEFAULT_LEASE_TTL_SECONDS = 3600.0


class IdempotencyGuard:
    """Checks for an existing artifact and optionally holds a single-flight lease.

    The existence check alone leaves a window between check and commit. The
    lease closes it for stores that implement ``acquire_lease``/``release_lease``;
    other stores get the check only.
    """

    def __init__(
        self,
        store: ArtifactStore,
        *,
        use_lease: bool = True,
        lease_ttl_seconds: float = DEFAULT_LEASE_TTL_SECONDS,
    ) -> None:
        self._store = store
        self._use_lease = use_lease
        self._lease_ttl = lease_ttl_seconds

    def already_published(self, target: RunTarget) -> bool:
        exists = self._store.exists(target.season, target.storage_week)
        if exists:
            LOGGER.info(
                "Newsletter already exists; skipping",
                extra={"newsletter": target.as_dict()},
            )
        return exists

    @property
    def leasing(self) -> bool:
        return self._use_lease and callable(getattr(self._store, "acquire_lease", None))

    @contextmanager
    def lease(self, target: RunTarget) -> Iterator[bool]:
        """Yield True while this process holds the lease, False when another run does."""

        if not self.leasing:
            yield True
            return
        acquired = self._store.acquire_lease(  # type: ignore[attr-defined]
            target.season, target.storage_week, ttl_seconds=self._lease_ttl
        )
        if not acquired:
            LOGGER.info("Lease held by another run; skipping", extra={"newsletter": target.as_dict()})
            yield False
            return
        try:
            yield True
        finally:
            self._store.release_lease(target.season, target.storage_week)  # type: ignore[attr-defined]


__all__ = ["DEFAULT_LEASE_TTL_SECONDS", "IdempotencyGuard"]
