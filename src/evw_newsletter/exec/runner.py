"""Newsletter process driver: resolve, guard, assemble, generate, gate, commit."""

from __future__ import annotations

import argparse
import logging
import os
from collections.abc import Callable, Sequence
from contextlib import nullcontext
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

import requests

from evw_newsletter.config import (
    NewsletterConfig,
    RunnerSettings,
    load_newsletter_config,
    load_runner_settings,
)
from evw_newsletter.context.assembler import ContextAssembler
from evw_newsletter.context.league import fetch_league_data
from evw_newsletter.drivers.espn import EspnClient
from evw_newsletter.drivers.sleeper.client import SleeperClient
from evw_newsletter.drivers.sleeper.players import load_player_reference
from evw_newsletter.exec.committer import publish_result, write_preview
from evw_newsletter.exec.gates import apply_quality_gate
from evw_newsletter.exec.guard import IdempotencyGuard
from evw_newsletter.generation import ContentGenerator, GenerationRequest, create_generator
from evw_newsletter.sched.targets import (
    EpisodeType,
    LeagueState,
    RunTarget,
    preview_target,
    resolve_run_target,
)
from evw_newsletter.store.base import ArtifactStore
from evw_newsletter.store.carried import load_carried_state
from evw_newsletter.store.local import LocalArtifactStore
from evw_newsletter.utils.env import load_env, parse_flag

LOGGER = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_NO_LEAGUE = 2
EXIT_GATE_REFUSED = 3


class UsageError(ValueError):
    """Raised instead of letting argparse exit with its own status code."""


class _Parser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # type: ignore[override]
        raise UsageError(message)


@dataclass(frozen=True)
class RunOptions:
    season: int | None = None
    week: int | None = None
    episode_type: EpisodeType | None = None
    force: bool = False
    preview: bool = False
    now: datetime | None = None
    config_path: Path | None = None
    log_level: str = "INFO"


def build_parser() -> argparse.ArgumentParser:
    parser = _Parser(prog="evw-newsletter", description="Generate and publish the league newsletter.")
    parser.add_argument("--season", help="Season override (defaults to the league state season)")
    parser.add_argument("--week", help="Week override (defaults to the league state week)")
    parser.add_argument(
        "--episodeType",
        "--episode_type",
        "--episode-type",
        dest="episode_type",
        help="regular, preseason, pre_draft, post_draft or offseason",
    )
    parser.add_argument("--force", nargs="?", const="true", default=None, help="Skip the schedule windows")
    parser.add_argument("--preview", nargs="?", const="true", default=None, help="Write artifacts only")
    parser.add_argument("--now", help="Override the reference instant (ISO-8601)")
    parser.add_argument("--config", type=Path, help="Newsletter YAML configuration path")
    parser.add_argument("--log-level", default="INFO", help="Logging level (default INFO)")
    return parser


def parse_options(argv: Sequence[str] | None = None) -> RunOptions:
    args = build_parser().parse_args(list(argv) if argv is not None else None)
    return RunOptions(
        season=_lenient_int(args.season),
        week=_lenient_int(args.week),
        episode_type=EpisodeType.parse(args.episode_type) if args.episode_type else None,
        force=parse_flag(args.force, default=False),
        preview=parse_flag(args.preview, default=False),
        now=_parse_now(args.now),
        config_path=args.config,
        log_level=str(args.log_level).upper(),
    )


class NewsletterRunner:
    """One invocation. Collaborators are injected so tests can substitute fakes."""

    def __init__(
        self,
        config: NewsletterConfig,
        settings: RunnerSettings,
        *,
        sleeper: SleeperClient,
        store: ArtifactStore,
        generator: ContentGenerator,
        assembler: ContextAssembler | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._config = config
        self._settings = settings
        self._sleeper = sleeper
        self._store = store
        self._generator = generator
        self._assembler = assembler or ContextAssembler(
            league_name=config.league_name,
            rules=config.rules,
            sleeper=sleeper,
        )
        self._clock = clock or (lambda: datetime.now(tz=UTC))
        self._guard = IdempotencyGuard(
            store, use_lease=settings.use_lease, lease_ttl_seconds=settings.lease_ttl_seconds
        )

    def run(self, options: RunOptions) -> int:
        now = options.now or self._clock()
        state = LeagueState.from_payload(self._sleeper.state())
        target = self._resolve(options, state, now)
        if target is None:
            LOGGER.info(
                "No newsletter window open; nothing to do",
                extra={"newsletter": {"now": now.isoformat(), "season_type": state.season_type}},
            )
            return EXIT_OK
        LOGGER.info(
            "Run target resolved",
            extra={"newsletter": {**target.as_dict(), "preview": options.preview}},
        )

        if options.preview:
            return self._produce(target, preview=True, now=now)

        if self._guard.already_published(target):
            return EXIT_OK
        lease = self._guard.lease(target) if self._guard.leasing else nullcontext(True)
        with lease as held:
            if not held:
                return EXIT_OK
            if self._guard.leasing and self._guard.already_published(target):
                return EXIT_OK
            return self._produce(target, preview=False, now=now)

    def _resolve(self, options: RunOptions, state: LeagueState, now: datetime) -> RunTarget | None:
        if options.preview:
            return preview_target(
                state,
                season=options.season,
                week=options.week,
                episode_type=options.episode_type,
            )
        return resolve_run_target(
            now,
            state=state,
            draft_date=self._settings.draft_date,
            season_start=self._settings.season_start,
            force=options.force,
            season=options.season,
            week=options.week,
            episode_type=options.episode_type,
        )

    def _produce(self, target: RunTarget, *, preview: bool, now: datetime) -> int:
        league_id = self._config.league_id_for(target.season)
        if not league_id:
            LOGGER.error("No league id configured for season %d", target.season)
            return EXIT_NO_LEAGUE

        data = fetch_league_data(self._sleeper, league_id, target.week)
        carried = load_carried_state(self._store, target.season, target.week)
        # Cache freshness follows the wall clock, never the --now override.
        directory, injuries = load_player_reference(
            self._sleeper,
            cache_dir=self._settings.cache_dir,
            players_ttl=self._config.cache.players_ttl,
            injuries_ttl=self._config.cache.injuries_ttl,
            now=self._clock(),
        )
        context = self._assembler.assemble(target, data, directory, injuries)
        league_name = data.league_name or self._config.league_name

        result = self._generator.generate(
            GenerationRequest(
                league_name=league_name,
                league_id=league_id,
                target=target,
                data=data,
                carried=carried,
                context=context,
                directory=directory,
            )
        )

        verdict = apply_quality_gate(result, preview=preview, strict=self._settings.strict_publish)
        if not verdict.publish:
            LOGGER.error(
                "Strict publish refused degraded newsletter",
                extra={"newsletter": {**target.as_dict(), "reasons": verdict.reasons}},
            )
            return EXIT_GATE_REFUSED

        if preview:
            write_preview(
                result,
                target,
                artifacts_dir=self._settings.artifacts_dir,
                warnings=verdict.warnings,
                now=now,
            )
            return EXIT_OK

        if result.degraded:
            LOGGER.warning(
                "Publishing degraded newsletter (strict publish disabled)",
                extra={"newsletter": {**target.as_dict(), "fallback_sections": result.fallback_sections}},
            )
        publish_result(self._store, result, target, league_name=league_name)
        return EXIT_OK


def build_runner(config: NewsletterConfig, settings: RunnerSettings) -> NewsletterRunner:
    session = requests.Session()
    sleeper = SleeperClient(
        base_url=settings.sleeper_base_url,
        session=session,
        timeout=config.http.timeout_seconds,
        max_retries=config.http.max_retries,
        retry_backoff=config.http.retry_backoff_seconds,
    )
    assembler = ContextAssembler(
        league_name=config.league_name,
        rules=config.rules,
        sleeper=sleeper,
        espn=EspnClient(session=session, timeout=config.http.timeout_seconds),
    )
    return NewsletterRunner(
        config,
        settings,
        sleeper=sleeper,
        store=LocalArtifactStore(settings.store_dir),
        generator=create_generator(settings.generator),
        assembler=assembler,
    )


def main(argv: Sequence[str] | None = None) -> int:
    try:
        options = parse_options(argv)
    except ValueError as exc:
        logging.basicConfig(level=logging.INFO)
        LOGGER.error("Invalid arguments: %s", exc)
        return EXIT_FAILURE

    logging.basicConfig(
        level=getattr(logging, options.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    load_env()
    try:
        config_path = options.config_path or _env_config_path()
        config = load_newsletter_config(config_path)
        settings = load_runner_settings(config)
        if settings.max_concurrency > 1:
            LOGGER.warning(
                "NEWSLETTER_MAX_CONCURRENCY=%d; runs assume a single in-flight invocation per target",
                settings.max_concurrency,
            )
        return build_runner(config, settings).run(options)
    except Exception:
        LOGGER.exception("Newsletter run failed")
        return EXIT_FAILURE


def _env_config_path() -> Path | None:
    value = os.environ.get("NEWSLETTER_CONFIG", "").strip()
    return Path(value) if value else None


def _lenient_int(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def _parse_now(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as exc:
        raise UsageError(f"--now must be ISO-8601, got {value!r}") from exc
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


__all__ = [
    "EXIT_FAILURE",
    "EXIT_GATE_REFUSED",
    "EXIT_NO_LEAGUE",
    "EXIT_OK",
    "NewsletterRunner",
    "RunOptions",
    "build_parser",
    "build_runner",
    "main",
    "parse_options",
]


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
