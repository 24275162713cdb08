"""Sleeper league data service."""

from .client import SleeperClient
from .players import PlayerDirectory, load_player_reference

__all__ = ["PlayerDirectory", "SleeperClient", "load_player_reference"]
