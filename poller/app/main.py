import argparse
import asyncio
import sys
from typing import Any, Sequence

from loguru import logger

from poller.app.application.worker_pool import run_worker_pool
from poller.app.composition import create_poller_dependencies
from poller.app.config.settings import Settings
from poller.app.core import SERVICE_NAME
from poller.app.domain.models import WorkerReport
from shared.core.logging import configure_logging


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="order-poller",
        description="Poll the order API with a pool of workers that finalize and approve orders.",
    )
    parser.add_argument("--url", dest="api_base_url", help="Order API base URL")
    parser.add_argument("--accounts", dest="accounts", help="Comma-separated username:password pairs")
    parser.add_argument("--workers", dest="worker_count", type=int, help="Number of poll workers")
    parser.add_argument(
        "--max-cycles",
        dest="max_cycles_per_worker",
        type=int,
        help="Poll cycles each worker runs before stopping",
    )
    parser.add_argument("--backoff-base", dest="initial_backoff_seconds", type=float, help="Base idle backoff (s)")
    parser.add_argument("--backoff-cap", dest="max_backoff_seconds", type=float, help="Idle backoff cap (s)")
    parser.add_argument("--timeout", dest="request_timeout_seconds", type=float, help="Per-call timeout (s)")
    return parser


def load_settings(argv: Sequence[str] | None = None) -> Settings:
    args = build_parser().parse_args(argv)
    overrides = {key: value for key, value in vars(args).items() if value is not None}
    return Settings(**overrides)


async def run_poller(settings: Settings) -> list[WorkerReport]:
    deps = create_poller_dependencies(settings)
    deps.connect()
    try:
        return await run_worker_pool(deps.build_workers())
    finally:
        await deps.close()


def main(argv: Sequence[str] | None = None) -> int:
    settings = load_settings(argv)
    configure_logging(settings.log_level, json=settings.log_json)
    _log(
        "poller_starting",
        base_url=settings.api_base_url,
        workers=settings.worker_count,
        max_cycles=settings.max_cycles_per_worker,
    )
    try:
        reports = asyncio.run(run_poller(settings))
    except KeyboardInterrupt:
        _log("poller_interrupted")
        return 130
    except Exception as e:
        logger.exception("poller failed: {}", e)
        raise
    if reports and all(r.fatal_error is not None for r in reports):
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
