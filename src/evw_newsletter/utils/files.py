"""Atomic file writes shared by the cache, the store and preview artifacts."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any


def atomic_write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    tmp_path.write_text(text, encoding="utf-8")
    tmp_path.replace(path)


def atomic_write_json(path: Path, payload: Any, *, sort_keys: bool = False) -> None:
    atomic_write_text(path, json.dumps(payload, indent=2, sort_keys=sort_keys))


__all__ = ["atomic_write_json", "atomic_write_text"]
