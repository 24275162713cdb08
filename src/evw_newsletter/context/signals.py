"""External signals: trending waiver activity and ESPN injuries/headlines.

Every source is best-effort. A failed source contributes nothing and is logged.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, TypeVar

from evw_newsletter.drivers.espn import EspnClient
from evw_newsletter.drivers.sleeper.client import SleeperClient
from evw_newsletter.drivers.sleeper.players import PlayerDirectory
from evw_newsletter.utils.http import UpstreamError

LOGGER = logging.getLogger(__name__)

TRENDING_LOOKBACK_HOURS = 24
TRENDING_LIMIT = 25
RENDERED_TRENDING = 10
RENDERED_INJURIES = 15
RENDERED_HEADLINES = 10

T = TypeVar("T")


@dataclass(frozen=True)
class TrendingPlayer:
    player_id: str
    name: str
    position: str
    team: str
    adds: int = 0
    drops: int = 0

    @property
    def net(self) -> int:
        return self.adds - self.drops


@dataclass(frozen=True)
class SignalBundle:
    trending: tuple[TrendingPlayer, ...] = ()
    injuries: tuple[dict[str, Any], ...] = ()
    headlines: tuple[dict[str, Any], ...] = ()
    failed_sources: tuple[str, ...] = field(default_factory=tuple)

    @property
    def empty(self) -> bool:
        return not (self.trending or self.injuries or self.headlines)


def merge_trending(
    adds: list[dict[str, Any]],
    drops: list[dict[str, Any]],
    directory: PlayerDirectory,
) -> list[TrendingPlayer]:
    """Combine add/drop counts per player and order by net adds; unknown ids are skipped."""

    counts: dict[str, list[int]] = {}
    for item in adds:
        pid = str(item.get("player_id") or "")
        if pid:
            counts.setdefault(pid, [0, 0])[0] += int(item.get("count") or 0)
    for item in drops:
        pid = str(item.get("player_id") or "")
        if pid:
            counts.setdefault(pid, [0, 0])[1] += int(item.get("count") or 0)

    players: list[TrendingPlayer] = []
    for pid, (added, dropped) in counts.items():
        name = directory.name_for(pid)
        if name is None:
            continue
        players.append(
            TrendingPlayer(
                player_id=pid,
                name=name,
                position=directory.position_for(pid),
                team=directory.team_for(pid),
                adds=added,
                drops=dropped,
            )
        )
    players.sort(key=lambda player: (-player.net, player.name))
    return players


def fetch_external_signals(
    sleeper: SleeperClient,
    espn: EspnClient | None,
    directory: PlayerDirectory,
) -> SignalBundle:
    failed: list[str] = []
    with ThreadPoolExecutor(max_workers=4) as pool:
        adds_future = pool.submit(
            _best_effort, "trending_add", failed,
            lambda: sleeper.trending("add", lookback_hours=TRENDING_LOOKBACK_HOURS, limit=TRENDING_LIMIT),
        )
        drops_future = pool.submit(
            _best_effort, "trending_drop", failed,
            lambda: sleeper.trending("drop", lookback_hours=TRENDING_LOOKBACK_HOURS, limit=TRENDING_LIMIT),
        )
        injuries_future = pool.submit(
            _best_effort, "espn_injuries", failed, espn.injuries if espn else list
        )
        news_future = pool.submit(
            _best_effort, "espn_news", failed, espn.news if espn else list
        )
        adds = adds_future.result()
        drops = drops_future.result()
        injuries = injuries_future.result()
        headlines = news_future.result()

    bundle = SignalBundle(
        trending=tuple(merge_trending(adds, drops, directory)),
        injuries=tuple(injuries),
        headlines=tuple(headlines),
        failed_sources=tuple(sorted(failed)),
    )
    LOGGER.info(
        "External signals gathered",
        extra={
            "newsletter": {
                "trending": len(bundle.trending),
                "injuries": len(bundle.injuries),
                "headlines": len(bundle.headlines),
                "failed": list(bundle.failed_sources),
            }
        },
    )
    return bundle


def render_signals(bundle: SignalBundle) -> str:
    if bundle.empty:
        return ""
    blocks: list[str] = []
    if bundle.trending:
        lines = ["=== TRENDING PLAYERS (last 24h) ==="]
        for player in bundle.trending[:RENDERED_TRENDING]:
            lines.append(
                f"- {player.name} ({player.position}, {player.team}): "
                f"+{player.adds} adds / -{player.drops} drops"
            )
        blocks.append("\n".join(lines))
    if bundle.injuries:
        lines = ["=== NFL INJURY WIRE ==="]
        for item in bundle.injuries[:RENDERED_INJURIES]:
            lines.append(
                f"- {item.get('player_name')} ({item.get('position')}, {item.get('nfl_team')}): "
                f"{item.get('status')} - {item.get('injury')}"
            )
        blocks.append("\n".join(lines))
    if bundle.headlines:
        lines = ["=== NFL HEADLINES ==="]
        for item in bundle.headlines[:RENDERED_HEADLINES]:
            lines.append(f"- [{item.get('category')}] {item.get('headline')}")
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)


def _best_effort(source: str, failed: list[str], fetch: Callable[[], list[T]]) -> list[T]:
    try:
        return list(fetch())
    except UpstreamError as exc:
        LOGGER.warning("External source %s unavailable: %s", source, exc)
        failed.append(source)
        return []


__all__ = [
    "SignalBundle",
    "TrendingPlayer",
    "fetch_external_signals",
    "merge_trending",
    "render_signals",
]
