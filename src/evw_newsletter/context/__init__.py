"""League context assembly for newsletter generation."""

from .assembler import ContextAssembler
from .injuries import build_injury_report
from .league import fetch_league_data
from .models import EnhancedContext, InjuryEntry, LeagueData, StandingRow
from .standings import build_standings

__all__ = [
    "ContextAssembler",
    "EnhancedContext",
    "InjuryEntry",
    "LeagueData",
    "StandingRow",
    "build_injury_report",
    "build_standings",
    "fetch_league_data",
]
