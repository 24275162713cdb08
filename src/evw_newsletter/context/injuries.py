"""Injury report for rostered (and free-agent) players."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from evw_newsletter.context.models import InjuryEntry
from evw_newsletter.context.standings import roster_team_names
from evw_newsletter.drivers.sleeper.players import PlayerDirectory

MAX_INJURY_ENTRIES = 30
HEALTHY_STATUSES = frozenset({"Healthy", "Active"})
FREE_AGENT = "FA"


def player_owner_map(
    users: Iterable[Mapping[str, Any]],
    rosters: Sequence[Mapping[str, Any]],
) -> dict[str, str]:
    """player_id -> fantasy team name; the first roster to list a player keeps it."""

    names = roster_team_names(users, rosters)
    owners: dict[str, str] = {}
    for roster in rosters:
        roster_id = int(roster.get("roster_id", 0))
        team = names.get(roster_id, f"Roster {roster_id}")
        for player_id in roster.get("players") or []:
            owners.setdefault(str(player_id), team)
    return owners


def build_injury_report(
    injuries: Iterable[Mapping[str, Any]],
    directory: PlayerDirectory,
    users: Iterable[Mapping[str, Any]],
    rosters: Sequence[Mapping[str, Any]],
    *,
    limit: int = MAX_INJURY_ENTRIES,
) -> list[InjuryEntry]:
    flagged = [
        item
        for item in injuries
        if item.get("status") and str(item.get("status")) not in HEALTHY_STATUSES
    ][:limit]
    owners = player_owner_map(users, rosters)

    report: list[InjuryEntry] = []
    for item in flagged:
        player_id = str(item.get("player_id") or "")
        name = directory.name_for(player_id)
        if not name:
            continue
        report.append(
            InjuryEntry(
                player_id=player_id,
                player_name=name,
                nfl_team=directory.team_for(player_id),
                status=str(item["status"]),
                fantasy_team=owners.get(player_id, FREE_AGENT),
            )
        )
    return report


def render_injury_report(entries: Sequence[InjuryEntry]) -> str:
    if not entries:
        return ""
    lines = ["=== INJURY REPORT ==="]
    for entry in entries:
        lines.append(f"- {entry.player_name} ({entry.nfl_team}) - {entry.status} [{entry.fantasy_team}]")
    return "\n".join(lines)


__all__ = [
    "FREE_AGENT",
    "HEALTHY_STATUSES",
    "MAX_INJURY_ENTRIES",
    "build_injury_report",
    "player_owner_map",
    "render_injury_report",
]
