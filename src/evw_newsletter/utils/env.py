"""Environment loading utilities."""

from __future__ import annotations

import os
from collections.abc import Mapping
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off", ""}


@lru_cache(maxsize=1)
def load_env() -> None:
    """Load environment variables from .env files once."""
    for candidate in (Path(".env.local"), Path(".env")):
        if candidate.exists():
            load_dotenv(candidate, override=False)


def parse_flag(value: str | None, *, default: bool) -> bool:
    """Interpret a textual boolean; unrecognised text counts as enabled."""

    if value is None:
        return default
    lowered = value.strip().lower()
    if lowered in _TRUTHY:
        return True
    if lowered in _FALSY:
        return False
    return True


def env_flag(name: str, *, default: bool, environ: Mapping[str, str] | None = None) -> bool:
    source = os.environ if environ is None else environ
    return parse_flag(source.get(name), default=default)


def env_int(name: str, *, default: int, environ: Mapping[str, str] | None = None) -> int:
    source = os.environ if environ is None else environ
    raw = source.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


def env_text(name: str, environ: Mapping[str, str] | None = None) -> str | None:
    source = os.environ if environ is None else environ
    raw = source.get(name)
    if raw is None:
        return None
    stripped = raw.strip()
    return stripped or None
