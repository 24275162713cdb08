"""Content generation gateway."""

from __future__ import annotations

import importlib
import logging

from .base import ContentGenerator, GenerationRequest, GenerationResult
from .digest import DigestGenerator

LOGGER = logging.getLogger(__name__)


def create_generator(reference: str | None = None) -> ContentGenerator:
    """Instantiate the generator named by ``module:factory``, or the built-in digest."""

    if not reference:
        return DigestGenerator()
    module_name, _, attribute = reference.partition(":")
    if not module_name or not attribute:
        raise ValueError(f"Generator reference must look like 'module:factory', got {reference!r}")
    module = importlib.import_module(module_name)
    try:
        factory = getattr(module, attribute)
    except AttributeError as exc:
        raise ValueError(f"Module {module_name!r} has no attribute {attribute!r}") from exc
    generator = factory()
    if not callable(getattr(generator, "generate", None)):
        raise ValueError(f"{reference!r} did not produce an object with a generate() method")
    LOGGER.info("Using generator %s", reference)
    return generator


__all__ = [
    "ContentGenerator",
    "DigestGenerator",
    "GenerationRequest",
    "GenerationResult",
    "create_generator",
]
