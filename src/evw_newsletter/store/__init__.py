"""Artifact persistence and carried-forward state."""

from .base import ArtifactStore, LeasingStore
from .carried import CarriedState, extract_predictions, load_carried_state
from .local import LocalArtifactStore

__all__ = [
    "ArtifactStore",
    "CarriedState",
    "LeasingStore",
    "LocalArtifactStore",
    "extract_predictions",
    "load_carried_state",
]
