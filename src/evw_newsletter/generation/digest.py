"""Built-in generator: a plain HTML digest of the assembled context."""

from __future__ import annotations

import html
import logging
from collections import defaultdict
from collections.abc import Mapping, Sequence
from datetime import UTC, datetime
from typing import Any

from evw_newsletter.context.models import StandingRow
from evw_newsletter.context.standings import roster_team_names
from evw_newsletter.generation.base import GenerationRequest, GenerationResult
from evw_newsletter.store.carried import ANALYST, ENTERTAINER

LOGGER = logging.getLogger(__name__)

SECTION_TITLES = {
    "rules": "League Rules",
    "league": "League",
    "standings": "Standings",
    "transactions": "Transactions",
    "signals": "Around the NFL",
    "injuries": "Injury Report",
}


class DigestGenerator:
    """Deterministic stand-in for the persona composer.

    Picks for next week are made from the current standings: the entertainer
    backs the team with more wins, the analyst the team with more points.
    """

    def __init__(self, *, now: datetime | None = None) -> None:
        self._now = now

    def generate(self, request: GenerationRequest) -> GenerationResult:
        target = request.target
        moment = self._now or datetime.now(tz=UTC)
        sections: list[dict[str, Any]] = [
            {"type": "Intro", "data": {"episodeType": target.episode_type.value, "week": target.week}}
        ]
        for key, text in request.context.sections.items():
            if text:
                sections.append({"type": SECTION_TITLES.get(key, key.title()), "data": {"text": text}})

        picks: list[dict[str, Any]] = []
        if target.episode_type.weekly:
            team_names = roster_team_names(request.data.users, request.data.rosters)
            picks = forecast_picks(request.data.next_matchups, request.context.standings, team_names)
            if picks:
                sections.append({"type": "Forecast", "data": {"week": target.week + 1, "picks": picks}})

        newsletter = {
            "meta": {
                "leagueName": request.league_name,
                "week": target.week,
                "season": target.season,
                "date": moment.date().isoformat(),
                "episodeType": target.episode_type.value,
            },
            "sections": sections,
        }
        result = GenerationResult(
            newsletter=newsletter,
            html=render_html(newsletter),
            memory_entertainer=_advance_memory(request.carried.memory_entertainer, target.week),
            memory_analyst=_advance_memory(request.carried.memory_analyst, target.week),
            records=grade_predictions(
                request.carried.records,
                request.carried.previous_predictions,
                request.data.matchups,
                roster_team_names(request.data.users, request.data.rosters),
            ),
            pending_picks={"week": target.week + 1, "picks": picks} if picks else None,
        )
        LOGGER.info("Digest generated with %d sections", len(sections))
        return result


def forecast_picks(
    matchups: Sequence[Mapping[str, Any]],
    standings: Sequence[StandingRow],
    team_names: Mapping[int, str],
) -> list[dict[str, Any]]:
    rows = {row.roster_id: row for row in standings}
    picks: list[dict[str, Any]] = []
    for matchup_id, roster_ids in sorted(_pairs(matchups).items()):
        if len(roster_ids) != 2:
            continue
        first, second = roster_ids
        first_row, second_row = rows.get(first), rows.get(second)
        if first_row is None or second_row is None:
            continue
        by_wins = first if (first_row.wins, first_row.points_for) >= (second_row.wins, second_row.points_for) else second
        by_points = first if first_row.points_for >= second_row.points_for else second
        picks.append(
            {
                "matchup_id": matchup_id,
                "team1": team_names.get(first, first_row.team_name),
                "team2": team_names.get(second, second_row.team_name),
                "bot1_pick": team_names.get(by_wins, rows[by_wins].team_name),
                "bot2_pick": team_names.get(by_points, rows[by_points].team_name),
            }
        )
    return picks


def grade_predictions(
    records: Any,
    predictions: Sequence[Mapping[str, Any]],
    matchups: Sequence[Mapping[str, Any]],
    team_names: Mapping[int, str],
) -> dict[str, Any]:
    """Score last issue's picks against this week's results and fold them into the records."""

    graded: dict[str, Any] = {
        ENTERTAINER: {"wins": 0, "losses": 0},
        ANALYST: {"wins": 0, "losses": 0},
    }
    if isinstance(records, Mapping):
        for persona in (ENTERTAINER, ANALYST):
            existing = records.get(persona) or {}
            graded[persona] = {
                "wins": int(existing.get("wins", 0)),
                "losses": int(existing.get("losses", 0)),
            }

    winners = _winners(matchups, team_names)
    for prediction in predictions:
        winner = winners.get(str(prediction.get("matchupId")))
        if winner is None:
            continue
        for persona, key in ((ENTERTAINER, "entertainerPick"), (ANALYST, "analystPick")):
            outcome = "wins" if prediction.get(key) == winner else "losses"
            graded[persona][outcome] += 1
    return graded


def render_html(newsletter: Mapping[str, Any]) -> str:
    meta = newsletter.get("meta") or {}
    title = f"{meta.get('leagueName', '')} - {meta.get('season', '')}"
    if meta.get("episodeType") == "regular":
        title += f" Week {meta.get('week')}"
    else:
        title += f" {str(meta.get('episodeType', '')).replace('_', ' ').title()}"
    parts = ["<article>", f"<h1>{html.escape(title)}</h1>"]
    for section in newsletter.get("sections") or []:
        data = section.get("data") or {}
        parts.append(f"<section><h2>{html.escape(str(section.get('type')))}</h2>")
        if "text" in data:
            parts.append(f"<pre>{html.escape(str(data['text']))}</pre>")
        for pick in data.get("picks") or []:
            parts.append(
                "<p>"
                + html.escape(f"{pick['team1']} vs {pick['team2']}: {pick['bot1_pick']} / {pick['bot2_pick']}")
                + "</p>"
            )
        parts.append("</section>")
    parts.append("</article>")
    return "\n".join(parts)


def _pairs(matchups: Sequence[Mapping[str, Any]]) -> dict[int, list[int]]:
    grouped: dict[int, list[int]] = defaultdict(list)
    for entry in matchups:
        matchup_id = entry.get("matchup_id")
        if matchup_id is None:
            continue
        grouped[int(matchup_id)].append(int(entry.get("roster_id", 0)))
    return grouped


def _winners(matchups: Sequence[Mapping[str, Any]], team_names: Mapping[int, str]) -> dict[str, str]:
    grouped: dict[int, list[Mapping[str, Any]]] = defaultdict(list)
    for entry in matchups:
        if entry.get("matchup_id") is not None:
            grouped[int(entry["matchup_id"])].append(entry)
    winners: dict[str, str] = {}
    for matchup_id, entries in grouped.items():
        if len(entries) != 2:
            continue
        first, second = entries
        first_points = float(first.get("points") or 0.0)
        second_points = float(second.get("points") or 0.0)
        if first_points == second_points:
            continue
        winner = first if first_points > second_points else second
        roster_id = int(winner.get("roster_id", 0))
        winners[str(matchup_id)] = team_names.get(roster_id, f"Roster {roster_id}")
    return winners


def _advance_memory(memory: Any, week: int) -> dict[str, Any]:
    previous = memory if isinstance(memory, Mapping) else {}
    return {**previous, "issues": int(previous.get("issues", 0)) + 1, "last_week": week}


__all__ = ["DigestGenerator", "forecast_picks", "grade_predictions", "render_html"]
