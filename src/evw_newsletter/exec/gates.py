"""Quality gates applied between generation and commit."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from evw_newsletter.context.summary import strip_html
from evw_newsletter.generation.base import GenerationResult

LOGGER = logging.getLogger(__name__)

PLAYER_ID_SECTION = "player_id_resolution"
MAX_WARNINGS = 20

_POSITIONS = r"(?:QB|RB|WR|TE|K|DEF|DST|FLEX|DL|LB|DB)"
_PLACEHOLDER_RE = re.compile(r"\bPlayer\s+(\d{2,})\b")
_ID_FIELD_RE = re.compile(r"\bplayer[_ ]?id\b", re.IGNORECASE)
_BARE_ID_RE = re.compile(rf"(?<![\d.$-])\b(\d{{3,6}})\s*\(\s*{_POSITIONS}\b")


@dataclass(frozen=True)
class GateVerdict:
    publish: bool
    reasons: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def scan_unresolved_player_ids(html: str) -> list[str]:
    """Return warnings for player ids that leaked into rendered text."""

    text = strip_html(html)
    warnings: list[str] = []

    def add(message: str) -> None:
        if message not in warnings and len(warnings) < MAX_WARNINGS:
            warnings.append(message)

    for match in _PLACEHOLDER_RE.finditer(text):
        add(f"Unresolved player placeholder: 'Player {match.group(1)}'")
    for match in _BARE_ID_RE.finditer(text):
        add(f"Bare player id rendered: '{match.group(1)}'")
    if _ID_FIELD_RE.search(text):
        add("Raw player_id field leaked into output")
    return warnings


def apply_quality_gate(result: GenerationResult, *, preview: bool, strict: bool) -> GateVerdict:
    """Scan *result* and decide whether it may be committed.

    Publish runs fold scan findings into ``result`` before deciding. Previews
    report them but always proceed.
    """

    warnings = scan_unresolved_player_ids(result.html)
    if warnings:
        LOGGER.warning(
            "Unresolved player ids detected",
            extra={"newsletter": {"count": len(warnings), "preview": preview, "warnings": warnings}},
        )
    if preview:
        return GateVerdict(publish=True, warnings=warnings)

    if warnings:
        result.fallback_used = True
        if PLAYER_ID_SECTION not in result.fallback_sections:
            result.fallback_sections.append(PLAYER_ID_SECTION)

    reasons = strict_publish_reasons(result) if strict else []
    return GateVerdict(publish=not reasons, reasons=reasons, warnings=warnings)


def strict_publish_reasons(result: GenerationResult) -> list[str]:
    reasons: list[str] = []
    if result.compose_failed:
        reasons.append("compose_failed")
    if result.fallback_used:
        reasons.append("fallback_used")
    if result.fallback_sections:
        reasons.append("fallback_sections:" + ",".join(result.fallback_sections))
    return reasons


__all__ = [
    "GateVerdict",
    "MAX_WARNINGS",
    "PLAYER_ID_SECTION",
    "apply_quality_gate",
    "scan_unresolved_player_ids",
    "strict_publish_reasons",
]
