"""Build the enhanced context handed to the content generator."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from evw_newsletter.config.newsletter import RuleSection
from evw_newsletter.context.injuries import build_injury_report, render_injury_report
from evw_newsletter.context.models import EnhancedContext, LeagueData
from evw_newsletter.context.signals import fetch_external_signals, render_signals
from evw_newsletter.context.standings import (
    build_standings,
    render_standings,
    render_transactions,
    roster_team_names,
)
from evw_newsletter.context.summary import render_league_summary, render_rules
from evw_newsletter.drivers.espn import EspnClient
from evw_newsletter.drivers.sleeper.client import SleeperClient
from evw_newsletter.drivers.sleeper.players import PlayerDirectory
from evw_newsletter.sched.targets import RunTarget

LOGGER = logging.getLogger(__name__)


class ContextAssembler:
    """Turns fetched league data into generator context.

    Offseason episodes get rules and the league summary only. Weekly episodes
    add standings, transactions, external signals and the injury report.
    """

    def __init__(
        self,
        *,
        league_name: str,
        rules: Sequence[RuleSection],
        sleeper: SleeperClient,
        espn: EspnClient | None = None,
    ) -> None:
        self._league_name = league_name
        self._rules = tuple(rules)
        self._sleeper = sleeper
        self._espn = espn

    def assemble(
        self,
        target: RunTarget,
        data: LeagueData,
        directory: PlayerDirectory,
        injuries: Sequence[Mapping[str, Any]],
    ) -> EnhancedContext:
        sections: dict[str, str] = {
            "rules": render_rules(self._rules),
            "league": render_league_summary(data, season=target.season, league_name=self._league_name),
        }

        if not target.episode_type.weekly:
            context = EnhancedContext(context_text=_join(sections), sections=sections)
            LOGGER.info(
                "Assembled offseason context",
                extra={"newsletter": {**target.as_dict(), "chars": len(context.context_text)}},
            )
            return context

        standings = build_standings(data.league, data.users, data.rosters, target.week)
        sections["standings"] = render_standings(standings, week=target.week, league=data.league)
        sections["transactions"] = render_transactions(
            data.transactions,
            team_names=roster_team_names(data.users, data.rosters),
            directory=directory,
        )
        sections["signals"] = render_signals(fetch_external_signals(self._sleeper, self._espn, directory))
        report = build_injury_report(injuries, directory, data.users, data.rosters)
        sections["injuries"] = render_injury_report(report)

        context = EnhancedContext(
            context_text=_join(sections),
            injuries=tuple(report),
            standings=tuple(standings),
            sections=sections,
        )
        LOGGER.info(
            "Assembled weekly context",
            extra={
                "newsletter": {
                    **target.as_dict(),
                    "chars": len(context.context_text),
                    "injuries": len(report),
                    "teams": len(standings),
                }
            },
        )
        return context


def _join(sections: Mapping[str, str]) -> str:
    return "\n\n".join(text for text in sections.values() if text)


__all__ = ["ContextAssembler"]
