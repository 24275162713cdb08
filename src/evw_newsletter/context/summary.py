"""Plain-text league summary and rulebook excerpts."""

from __future__ import annotations

import html
import re
from collections.abc import Iterable

from evw_newsletter.config.newsletter import RuleSection
from evw_newsletter.context.models import LeagueData
from evw_newsletter.context.standings import roster_team_names

RULE_SECTION_CHARS = 500

_TAG_RE = re.compile(r"<[^>]+>")
_SPACE_RE = re.compile(r"\s+")


def strip_html(text: str) -> str:
    return _SPACE_RE.sub(" ", html.unescape(_TAG_RE.sub(" ", text))).strip()


def render_rules(rules: Iterable[RuleSection], *, max_chars: int = RULE_SECTION_CHARS) -> str:
    sections = list(rules)
    if not sections:
        return ""
    lines = ["=== LEAGUE RULES (from Rulebook) ==="]
    for rule in sections:
        lines.append("")
        lines.append(f"{rule.title}:")
        lines.append(strip_html(rule.text)[:max_chars])
    return "\n".join(lines)


def render_league_summary(data: LeagueData, *, season: int, league_name: str) -> str:
    names = roster_team_names(data.users, data.rosters)
    lines = [f"=== LEAGUE: {data.league_name or league_name} ({season}) ===", f"Teams: {len(data.rosters)}"]
    for roster in data.rosters:
        roster_id = int(roster.get("roster_id", 0))
        settings = roster.get("settings") or {}
        wins = settings.get("wins", 0)
        losses = settings.get("losses", 0)
        lines.append(f"- {names.get(roster_id, f'Roster {roster_id}')} ({wins}-{losses})")
    return "\n".join(lines)


__all__ = ["RULE_SECTION_CHARS", "render_league_summary", "render_rules", "strip_html"]
