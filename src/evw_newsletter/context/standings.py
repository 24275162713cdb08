"""Team naming, current standings, and transaction summaries."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from evw_newsletter.context.models import StandingRow
from evw_newsletter.drivers.sleeper.players import PlayerDirectory

DEFAULT_PLAYOFF_TEAMS = 8
DEFAULT_PLAYOFF_START_WEEK = 15
MAX_TRANSACTIONS_COLLECTED = 20
MAX_TRANSACTIONS_RENDERED = 10


def user_display_names(users: Iterable[Mapping[str, Any]]) -> dict[str, str]:
    names: dict[str, str] = {}
    for user in users:
        user_id = str(user.get("user_id") or "")
        metadata = user.get("metadata") or {}
        display = (
            (metadata.get("team_name") if isinstance(metadata, Mapping) else None)
            or user.get("display_name")
            or user.get("username")
            or f"User {user_id}"
        )
        names[user_id] = str(display)
    return names


def roster_team_names(
    users: Iterable[Mapping[str, Any]],
    rosters: Iterable[Mapping[str, Any]],
) -> dict[int, str]:
    """roster_id -> team name, falling back to ``Roster <id>``."""

    by_user = user_display_names(users)
    names: dict[int, str] = {}
    for roster in rosters:
        roster_id = int(roster.get("roster_id", 0))
        names[roster_id] = by_user.get(str(roster.get("owner_id") or ""), f"Roster {roster_id}")
    return names


def playoff_settings(league: Mapping[str, Any]) -> tuple[int, int]:
    settings = league.get("settings") or {}
    playoff_teams = _positive_int(settings.get("playoff_teams"), DEFAULT_PLAYOFF_TEAMS)
    playoff_start = _positive_int(settings.get("playoff_week_start"), DEFAULT_PLAYOFF_START_WEEK)
    return playoff_teams, playoff_start


def build_standings(
    league: Mapping[str, Any],
    users: Sequence[Mapping[str, Any]],
    rosters: Sequence[Mapping[str, Any]],
    week: int,
) -> list[StandingRow]:
    """Order teams by wins, then points for, and label playoff position."""

    names = roster_team_names(users, rosters)
    playoff_teams, playoff_start = playoff_settings(league)
    records = [_record(roster) for roster in rosters]
    records.sort(key=lambda item: (-item["wins"], -item["points_for"]))
    weeks_remaining = max(0, playoff_start - 1 - week)

    rows: list[StandingRow] = []
    for index, record in enumerate(records):
        position = index + 1
        if week >= playoff_start:
            label = "in" if position <= playoff_teams else "eliminated"
        else:
            if position <= playoff_teams - 2:
                label = "in"
            elif position <= playoff_teams + 2:
                label = "bubble"
            else:
                label = "out"
            max_wins = record["wins"] + weeks_remaining
            teams_ahead = sum(1 for other in records if other["wins"] > max_wins)
            if teams_ahead >= playoff_teams:
                label = "eliminated"
        roster_id = record["roster_id"]
        rows.append(
            StandingRow(
                roster_id=roster_id,
                team_name=names.get(roster_id, f"Roster {roster_id}"),
                wins=record["wins"],
                losses=record["losses"],
                ties=record["ties"],
                points_for=record["points_for"],
                points_against=record["points_against"],
                position=position,
                playoff_position=label,
            )
        )
    return rows


def render_standings(rows: Sequence[StandingRow], *, week: int, league: Mapping[str, Any]) -> str:
    playoff_teams, playoff_start = playoff_settings(league)
    lines = [f"=== CURRENT SEASON STANDINGS (Week {week}) ===", ""]
    for row in rows:
        marker = "IN" if row.position <= playoff_teams else "--"
        note = {"bubble": " [BUBBLE]", "eliminated": " [ELIMINATED]"}.get(row.playoff_position, "")
        record = f"{row.wins}-{row.losses}" + (f"-{row.ties}" if row.ties else "")
        lines.append(f"{row.position}. [{marker}] {row.team_name}: {record} ({row.points_for:.1f} PF){note}")
    lines.append("")
    lines.append(f"Playoff spots: Top {playoff_teams} teams")
    lines.append(f"Playoffs start: Week {playoff_start}")
    bubble = [row.team_name for row in rows if row.playoff_position == "bubble"]
    eliminated = [row.team_name for row in rows if row.playoff_position == "eliminated"]
    if bubble:
        lines.append("")
        lines.append("PLAYOFF BUBBLE: " + ", ".join(bubble))
    if eliminated:
        lines.append("ELIMINATED: " + ", ".join(eliminated))
    return "\n".join(lines)


def render_transactions(
    transactions: Sequence[Mapping[str, Any]],
    *,
    team_names: Mapping[int, str],
    directory: PlayerDirectory,
) -> str:
    """Summarise waiver and free-agent moves; trades are covered elsewhere."""

    moves = [txn for txn in transactions if txn.get("type") in {"waiver", "free_agent"}]
    moves = moves[:MAX_TRANSACTIONS_COLLECTED]
    if not moves:
        return ""
    lines = ["=== RECENT TRANSACTIONS ==="]
    for txn in moves[:MAX_TRANSACTIONS_RENDERED]:
        roster_ids = txn.get("roster_ids") or []
        team = team_names.get(int(roster_ids[0]), "Unknown") if roster_ids else "Unknown"
        adds = ", ".join(_player_label(pid, directory) for pid in (txn.get("adds") or {}))
        drops = ", ".join(_player_label(pid, directory) for pid in (txn.get("drops") or {}))
        bid = (txn.get("settings") or {}).get("waiver_bid")
        faab = f" (${bid} FAAB)" if isinstance(bid, (int, float)) and bid else ""
        if adds and drops:
            lines.append(f"- {team}: Added {adds}, Dropped {drops}{faab}")
        elif adds:
            lines.append(f"- {team}: Added {adds}{faab}")
        elif drops:
            lines.append(f"- {team}: Dropped {drops}")
    return "\n".join(lines)


def _player_label(player_id: str, directory: PlayerDirectory) -> str:
    name = directory.name_for(player_id)
    if name is None:
        return "an unlisted player"
    return f"{name} ({directory.position_for(player_id)}, {directory.team_for(player_id)})"


def _record(roster: Mapping[str, Any]) -> dict[str, Any]:
    settings = roster.get("settings") or {}
    return {
        "roster_id": int(roster.get("roster_id", 0)),
        "wins": _int(settings.get("wins")),
        "losses": _int(settings.get("losses")),
        "ties": _int(settings.get("ties")),
        "points_for": _points(settings, "fpts"),
        "points_against": _points(settings, "fpts_against"),
    }


def _points(settings: Mapping[str, Any], key: str) -> float:
    whole = _int(settings.get(key))
    decimal = _int(settings.get(f"{key}_decimal"))
    return whole + decimal / 100.0


def _int(value: object) -> int:
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0


def _positive_int(value: object, default: int) -> int:
    numeric = _int(value)
    return numeric if numeric > 0 else default


__all__ = [
    "build_standings",
    "playoff_settings",
    "render_standings",
    "render_transactions",
    "roster_team_names",
    "user_display_names",
]
