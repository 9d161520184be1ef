import argparse
import asyncio
import signal
import sys
from typing import Any, Sequence

from loguru import logger

from dispatcher.app.composition import create_dispatcher_dependencies
from dispatcher.app.config.settings import Settings
from dispatcher.app.core import SERVICE_NAME
from dispatcher.app.domain.stats import StatsSnapshot
from shared.core.logging import configure_logging


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="order-dispatcher",
        description="Send synthetic order webhooks at a fixed rate with a bounded sender pool.",
    )
    parser.add_argument("--url", dest="webhook_url", help="Webhook endpoint URL")
    parser.add_argument("--total", dest="total_jobs", type=int, help="Total number of orders to send")
    parser.add_argument("--rate", dest="rate_per_minute", type=float, help="Number of requests per minute")
    parser.add_argument(
        "--duration",
        dest="duration_minutes",
        type=float,
        help="Duration in minutes (0 = send all at configured rate)",
    )
    parser.add_argument("--concurrency", dest="concurrency", type=int, help="Number of concurrent workers")
    parser.add_argument("--timeout", dest="request_timeout_seconds", type=float, help="Per-call timeout (s)")
    parser.add_argument(
        "--report-interval",
        dest="report_interval_seconds",
        type=float,
        help="Seconds between stats lines",
    )
    return parser


def load_settings(argv: Sequence[str] | None = None) -> Settings:
    args = build_parser().parse_args(argv)
    overrides = {key: value for key, value in vars(args).items() if value is not None}
    return Settings(**overrides)


async def run_dispatcher(settings: Settings) -> StatsSnapshot:
    deps = create_dispatcher_dependencies(settings)
    deps.connect()
    dispatcher = deps.dispatcher

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, dispatcher.cancel)
        except NotImplementedError:
            pass

    try:
        return await dispatcher.run()
    finally:
        await deps.close()


def main(argv: Sequence[str] | None = None) -> int:
    settings = load_settings(argv)
    configure_logging(settings.log_level, json=settings.log_json)
    _log(
        "dispatcher_starting",
        url=settings.webhook_url,
        total_jobs=settings.total_jobs,
        rate_per_minute=settings.rate_per_minute,
        concurrency=settings.concurrency,
    )
    try:
        asyncio.run(run_dispatcher(settings))
    except KeyboardInterrupt:
        _log("dispatcher_interrupted")
        return 130
    except Exception as e:
        logger.exception("dispatcher failed: {}", e)
        raise
    return 0


if __name__ == "__main__":
    sys.exit(main())
