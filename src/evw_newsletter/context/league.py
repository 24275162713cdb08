"""Concurrent fetch of the league payloads a newsletter run needs."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from evw_newsletter.context.models import LeagueData
from evw_newsletter.drivers.sleeper.client import SleeperClient
from evw_newsletter.utils.http import UpstreamError

LOGGER = logging.getLogger(__name__)


def fetch_league_data(client: SleeperClient, league_id: str, week: int) -> LeagueData:
    """Fan out the six league requests and join them.

    Any failure aborts the run except next week's matchups, which may not exist yet.
    """

    with ThreadPoolExecutor(max_workers=6) as pool:
        league_future = pool.submit(client.league, league_id)
        users_future = pool.submit(client.users, league_id)
        rosters_future = pool.submit(client.rosters, league_id)
        matchups_future = pool.submit(client.matchups, league_id, week)
        next_future = pool.submit(_next_week_matchups, client, league_id, week + 1)
        transactions_future = pool.submit(client.transactions, league_id, week)

        data = LeagueData(
            league=league_future.result() or {},
            users=users_future.result(),
            rosters=rosters_future.result(),
            matchups=matchups_future.result(),
            next_matchups=next_future.result(),
            transactions=transactions_future.result(),
        )
    LOGGER.info(
        "League data fetched: %d users, %d rosters, %d matchups, %d transactions",
        len(data.users),
        len(data.rosters),
        len(data.matchups),
        len(data.transactions),
    )
    return data


def _next_week_matchups(client: SleeperClient, league_id: str, week: int) -> list[dict[str, Any]]:
    try:
        return client.matchups(league_id, week)
    except UpstreamError as exc:
        LOGGER.warning("Next-week matchups unavailable for week %d: %s", week, exc)
        return []


__all__ = ["fetch_league_data"]
