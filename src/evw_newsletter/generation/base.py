"""Generation gateway interface."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

from evw_newsletter.context.models import EnhancedContext, LeagueData
from evw_newsletter.drivers.sleeper.players import PlayerDirectory
from evw_newsletter.sched.targets import RunTarget
from evw_newsletter.store.carried import CarriedState


@dataclass(frozen=True)
class GenerationRequest:
    league_name: str
    league_id: str
    target: RunTarget
    data: LeagueData
    carried: CarriedState
    context: EnhancedContext
    directory: PlayerDirectory


@dataclass
class GenerationResult:
    """Generator output.

    Mutable on purpose: the quality gate flips ``fallback_used`` and extends
    ``fallback_sections`` in place before the commit step reads them.
    """

    newsletter: dict[str, Any]
    html: str
    compose_failed: bool = False
    fallback_used: bool = False
    fallback_sections: list[str] = field(default_factory=list)
    memory_entertainer: Any = None
    memory_analyst: Any = None
    records: Any = None
    pending_picks: Any = None

    @property
    def degraded(self) -> bool:
        return self.compose_failed or self.fallback_used or bool(self.fallback_sections)

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> GenerationResult:
        """Accept the camelCase shape emitted by external composers."""

        def pick(snake: str, camel: str, default: Any = None) -> Any:
            if snake in payload:
                return payload[snake]
            return payload.get(camel, default)

        return cls(
            newsletter=dict(payload.get("newsletter") or {}),
            html=str(payload.get("html") or ""),
            compose_failed=bool(pick("compose_failed", "composeFailed", False)),
            fallback_used=bool(pick("fallback_used", "fallbackUsed", False)),
            fallback_sections=list(pick("fallback_sections", "fallbackSections", []) or []),
            memory_entertainer=pick("memory_entertainer", "memoryEntertainer"),
            memory_analyst=pick("memory_analyst", "memoryAnalyst"),
            records=payload.get("records"),
            pending_picks=pick("pending_picks", "pendingPicks"),
        )


class ContentGenerator(Protocol):
    def generate(self, request: GenerationRequest) -> GenerationResult:
        """Produce the newsletter for *request*; failures propagate."""


__all__ = ["ContentGenerator", "GenerationRequest", "GenerationResult"]
