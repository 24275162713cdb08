"""Cached player directory and injury feed."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

from evw_newsletter.drivers.sleeper.client import SleeperClient
from evw_newsletter.utils.http import UpstreamError, load_cached_json

LOGGER = logging.getLogger(__name__)

PLAYERS_CACHE_NAME = "sleeper_players.json"
INJURIES_CACHE_NAME = "sleeper_injuries.json"


@dataclass(frozen=True)
class PlayerDirectory:
    """Player id -> player record, used to turn ids into display names."""

    players: Mapping[str, Mapping[str, Any]] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.players)

    def get(self, player_id: str) -> Mapping[str, Any] | None:
        return self.players.get(str(player_id))

    def name_for(self, player_id: str) -> str | None:
        player = self.get(player_id)
        if not player:
            return None
        first = str(player.get("first_name") or "").strip()
        last = str(player.get("last_name") or "").strip()
        if first or last:
            return f"{first} {last}".strip()
        full = str(player.get("full_name") or "").strip()
        return full or None

    def team_for(self, player_id: str) -> str:
        player = self.get(player_id) or {}
        return str(player.get("team") or "FA")

    def position_for(self, player_id: str) -> str:
        player = self.get(player_id) or {}
        return str(player.get("position") or "UNK")


def injuries_from_players(players: Mapping[str, Mapping[str, Any]]) -> list[dict[str, Any]]:
    """Project the player directory onto an injury feed (status-bearing entries only)."""

    feed: list[dict[str, Any]] = []
    for player_id, player in players.items():
        status = player.get("injury_status")
        if not status:
            continue
        feed.append(
            {
                "player_id": str(player_id),
                "status": str(status),
                "injury": player.get("injury_body_part") or player.get("injury_notes"),
            }
        )
    return feed


def load_player_directory(
    client: SleeperClient,
    *,
    cache_dir: Path,
    ttl: timedelta,
    now: datetime | None = None,
) -> PlayerDirectory:
    payload = load_cached_json(cache_dir / PLAYERS_CACHE_NAME, client.players, ttl=ttl, now=now)
    return PlayerDirectory(players=payload if isinstance(payload, dict) else {})


def load_injury_feed(
    directory: PlayerDirectory,
    *,
    cache_dir: Path,
    ttl: timedelta,
    now: datetime | None = None,
) -> list[dict[str, Any]]:
    """Derive the injury feed from an already loaded directory, cached on its own TTL."""

    payload = load_cached_json(
        cache_dir / INJURIES_CACHE_NAME,
        lambda: injuries_from_players(directory.players),
        ttl=ttl,
        now=now,
    )
    return payload if isinstance(payload, list) else []


def load_player_reference(
    client: SleeperClient,
    *,
    cache_dir: Path,
    players_ttl: timedelta,
    injuries_ttl: timedelta,
    now: datetime | None = None,
) -> tuple[PlayerDirectory, list[dict[str, Any]]]:
    """Load the directory once, then the injury feed from it; injuries are best-effort."""

    directory = load_player_directory(client, cache_dir=cache_dir, ttl=players_ttl, now=now)
    try:
        injuries = load_injury_feed(directory, cache_dir=cache_dir, ttl=injuries_ttl, now=now)
    except UpstreamError as exc:
        LOGGER.warning("Injury feed unavailable; continuing without it: %s", exc)
        injuries = []
    LOGGER.info("Player cache loaded: %d players, %d injury entries", len(directory), len(injuries))
    return directory, injuries


__all__ = [
    "PlayerDirectory",
    "injuries_from_players",
    "load_injury_feed",
    "load_player_directory",
    "load_player_reference",
]
