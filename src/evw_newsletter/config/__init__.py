"""Configuration loaders for the newsletter runner."""

from .newsletter import (
    CacheSettings,
    HttpSettings,
    ImportantDates,
    NewsletterConfig,
    RuleSection,
    load_newsletter_config,
)
from .settings import RunnerSettings, load_runner_settings

__all__ = [
    "CacheSettings",
    "HttpSettings",
    "ImportantDates",
    "NewsletterConfig",
    "RuleSection",
    "load_newsletter_config",
    "RunnerSettings",
    "load_runner_settings",
]
