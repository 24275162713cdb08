"""Value types produced while assembling newsletter context."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class LeagueData:
    """Raw league payloads fetched for one target week."""

    league: dict[str, Any]
    users: list[dict[str, Any]]
    rosters: list[dict[str, Any]]
    matchups: list[dict[str, Any]]
    next_matchups: list[dict[str, Any]]
    transactions: list[dict[str, Any]]

    @property
    def league_name(self) -> str | None:
        name = str(self.league.get("name") or "").strip()
        return name or None


@dataclass(frozen=True)
class InjuryEntry:
    player_id: str
    player_name: str
    nfl_team: str
    status: str
    fantasy_team: str

    def as_dict(self) -> dict[str, str]:
        return {
            "playerId": self.player_id,
            "playerName": self.player_name,
            "team": self.nfl_team,
            "status": self.status,
            "fantasyTeam": self.fantasy_team,
        }


@dataclass(frozen=True)
class StandingRow:
    roster_id: int
    team_name: str
    wins: int
    losses: int
    ties: int
    points_for: float
    points_against: float
    position: int
    playoff_position: str


@dataclass(frozen=True)
class EnhancedContext:
    """Context handed to the content generator alongside the raw league data."""

    context_text: str
    injuries: tuple[InjuryEntry, ...] = ()
    standings: tuple[StandingRow, ...] = ()
    sections: dict[str, str] = field(default_factory=dict)


__all__ = ["EnhancedContext", "InjuryEntry", "LeagueData", "StandingRow"]
