"""CLI entrypoint: log in once, then fetch every configured report on a schedule."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from importlib.metadata import PackageNotFoundError, version
from typing import List, Optional

from config import Settings
from core import RoundResult
from orchestrator import RoundOrchestrator, Scheduler
from storage import ArtifactWriter
from utils import setup_logger
from utils.exceptions import ConfigurationError, SessionError
from veracross import establish_session


logger = logging.getLogger("axiom_query")

EXIT_FATAL = 1
EXIT_INTERRUPTED = 130


def get_version() -> str:
    try:
        return version("axiom-query")
    except PackageNotFoundError:
        return "unreleased"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="axiom-query",
        description="Periodically run Veracross Axiom queries and save their JSON results",
    )
    parser.add_argument("--version", action="store_true", help="display the version")
    parser.add_argument("--config", default="", help="configuration file to load")
    return parser


def _log_round(result: RoundResult) -> None:
    for outcome in result.failed:
        logger.warning(f"Round {result.round_index}: {outcome.report.label} -> {outcome.state.value}")


async def run(settings: Settings, *, max_rounds: Optional[int] = None) -> None:
    """Establish the session and drive rounds with it."""
    session = await establish_session(settings.veracross, timeout=settings.general.request_timeout)
    async with session:
        writer = ArtifactWriter(settings.reports_path, suffix=settings.general.artifact_suffix)
        orchestrator = RoundOrchestrator(
            settings.reports,
            session,
            writer,
            task_timeout=settings.general.request_timeout,
            max_concurrency=settings.general.max_concurrency,
        )
        scheduler = Scheduler(
            orchestrator,
            settings.interval_seconds,
            on_round_complete=_log_round,
        )
        await scheduler.run(max_rounds=max_rounds)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.version:
        print(f"axiom-query - version {get_version()}")
        return 0

    setup_logger()

    if not str(args.config).strip():
        logger.error("no configuration file given (use --config)")
        return EXIT_FATAL

    try:
        settings = Settings.load_from_file(args.config)
    except ConfigurationError as exc:
        logger.error(f"Configuration error: {exc}")
        return EXIT_FATAL

    setup_logger(level=settings.logging.level, log_file=settings.logging.file)
    logger.info(
        f"axiom-query {get_version()}: {len(settings.reports)} reports every "
        f"{settings.interval:g} min into {settings.reports_path}"
    )

    try:
        asyncio.run(run(settings))
    except SessionError as exc:
        logger.error(f"Login failed: {exc}")
        return EXIT_FATAL
    except KeyboardInterrupt:
        logger.info("Interrupted, exiting")
        return EXIT_INTERRUPTED
    return 0


if __name__ == "__main__":
    sys.exit(main())
