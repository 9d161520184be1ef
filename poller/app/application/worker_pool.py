"""Run a set of poll workers concurrently and collect their reports."""
from __future__ import annotations

import asyncio
from typing import Any, Sequence

from loguru import logger

from poller.app.application.poll_worker import PollWorker
from poller.app.core import SERVICE_NAME
from poller.app.domain.models import WorkerReport


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


async def _run_guarded(worker: PollWorker) -> WorkerReport:
    # A worker that dies takes nobody else with it.
    try:
        return await worker.run()
    except Exception as exc:
        logger.exception("worker-{}: stopped by unexpected error: {}", worker.index, exc)
        return WorkerReport(worker_index=worker.index, fatal_error=str(exc))


async def run_worker_pool(workers: Sequence[PollWorker]) -> list[WorkerReport]:
    _log("pool_started", workers=len(workers))
    reports = await asyncio.gather(*(_run_guarded(w) for w in workers))

    for report in reports:
        _log(
            "worker_report",
            worker=report.worker_index,
            username=report.username,
            cycles=report.cycles,
            succeeded=report.succeeded,
            idle=report.idle,
            errors=report.errors,
            fatal_error=report.fatal_error,
        )
    _log(
        "pool_finished",
        workers=len(reports),
        failed_workers=sum(1 for r in reports if r.fatal_error is not None),
        succeeded=sum(r.succeeded for r in reports),
        idle=sum(r.idle for r in reports),
        errors=sum(r.errors for r in reports),
    )
    return list(reports)
