"""State carried from one issue to the next."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any

from evw_newsletter.store.base import ArtifactStore

LOGGER = logging.getLogger(__name__)

ENTERTAINER = "entertainer"
ANALYST = "analyst"


@dataclass(frozen=True)
class CarriedState:
    memory_entertainer: Any = None
    memory_analyst: Any = None
    records: Any = None
    pending_picks: Any = None
    previous_predictions: list[dict[str, Any]] = field(default_factory=list)


def extract_predictions(record: Mapping[str, Any] | None) -> list[dict[str, Any]]:
    """Pull matchup picks out of a stored newsletter's Forecast section."""

    if not record:
        return []
    newsletter = record.get("newsletter") or {}
    for section in newsletter.get("sections") or []:
        if section.get("type") != "Forecast":
            continue
        picks = (section.get("data") or {}).get("picks") or []
        return [
            {
                "matchupId": pick.get("matchup_id"),
                "team1": pick.get("team1"),
                "team2": pick.get("team2"),
                "entertainerPick": pick.get("bot1_pick"),
                "analystPick": pick.get("bot2_pick"),
            }
            for pick in picks
        ]
    return []


def load_carried_state(store: ArtifactStore, season: int, week: int) -> CarriedState:
    with ThreadPoolExecutor(max_workers=5) as pool:
        entertainer = pool.submit(store.load_memory, ENTERTAINER, season)
        analyst = pool.submit(store.load_memory, ANALYST, season)
        records = pool.submit(store.load_records, season)
        picks = pool.submit(store.load_pending_picks, season, week)
        previous = pool.submit(store.load_previous, season, week)
        state = CarriedState(
            memory_entertainer=entertainer.result(),
            memory_analyst=analyst.result(),
            records=records.result(),
            pending_picks=picks.result(),
            previous_predictions=extract_predictions(previous.result()),
        )
    LOGGER.info(
        "Carried state loaded",
        extra={
            "newsletter": {
                "season": season,
                "week": week,
                "has_memory": state.memory_entertainer is not None or state.memory_analyst is not None,
                "has_records": state.records is not None,
                "has_pending_picks": state.pending_picks is not None,
                "previous_predictions": len(state.previous_predictions),
            }
        },
    )
    return state


__all__ = ["ANALYST", "ENTERTAINER", "CarriedState", "extract_predictions", "load_carried_state"]
