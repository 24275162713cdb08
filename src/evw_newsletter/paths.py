"""Shared filesystem locations."""

from __future__ import annotations

from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[2]
CONFIG_ROOT = PROJECT_ROOT / "configs"
DATA_ROOT = PROJECT_ROOT / "data"
STORE_ROOT = DATA_ROOT / "store"
ARTIFACTS_ROOT = PROJECT_ROOT / "artifacts"
