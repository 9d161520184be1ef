"""
Rate-limited dispatcher: ticking generator -> bounded queue -> sender pool -> Stats.

Flow:
  generator emits job ids 1..total_jobs, one per tick of 60s / rate_per_minute,
  onto a queue of capacity 2 * concurrency. A full queue blocks the generator,
  which is the backpressure that keeps the rate a ceiling rather than a target.
  When ids run out (or the stop event fires) the generator enqueues one
  end-of-stream marker per sender; each sender drains jobs ahead of its marker
  and exits. Awaiting the senders is the only barrier before the final summary.

A reporter logs a Stats snapshot every report interval while the run is live.
"""
from __future__ import annotations

import asyncio
from typing import Any, Callable

from loguru import logger

from dispatcher.app.core import SERVICE_NAME
from dispatcher.app.domain.order_factory import OrderFactory
from dispatcher.app.domain.stats import Stats, StatsSnapshot
from dispatcher.app.domain.webhook_sender import WebhookSender
from shared.core.ticker import Ticker

END_OF_STREAM = object()


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


def _snapshot_fields(snap: StatsSnapshot) -> dict[str, Any]:
    return {
        "total": snap.total,
        "success": snap.success,
        "failed": snap.failed,
        "rps": round(snap.rps, 2),
        "avg_latency_ms": round(snap.avg_latency_ms, 1),
    }


class Dispatcher:
    def __init__(
        self,
        sender: WebhookSender,
        factory: OrderFactory,
        *,
        total_jobs: int,
        rate_per_minute: float,
        concurrency: int,
        report_interval_seconds: float = 10.0,
        duration_seconds: float | None = None,
        stats: Stats | None = None,
        stop_event: asyncio.Event | None = None,
        queue_factory: Callable[[int], asyncio.Queue] = asyncio.Queue,
    ) -> None:
        if total_jobs < 0:
            raise ValueError("total_jobs must be >= 0")
        if rate_per_minute <= 0:
            raise ValueError("rate_per_minute must be > 0")
        if concurrency < 1:
            raise ValueError("concurrency must be >= 1")
        if report_interval_seconds <= 0:
            raise ValueError("report_interval_seconds must be > 0")
        self._sender = sender
        self._factory = factory
        self._total_jobs = total_jobs
        self._rate_per_minute = float(rate_per_minute)
        self._concurrency = concurrency
        self._report_interval = report_interval_seconds
        self._duration_seconds = duration_seconds
        self._stats = stats or Stats()
        self._stop = stop_event or asyncio.Event()
        self._queue_factory = queue_factory
        self._emitted = 0

    @property
    def stats(self) -> Stats:
        return self._stats

    @property
    def queue_capacity(self) -> int:
        return 2 * self._concurrency

    @property
    def tick_interval(self) -> float:
        return 60.0 / self._rate_per_minute

    @property
    def emitted(self) -> int:
        return self._emitted

    def cancel(self) -> None:
        """Stop generating new jobs; queued and in-flight jobs still complete."""
        if not self._stop.is_set():
            _log("dispatch_cancel_requested", emitted=self._emitted)
            self._stop.set()

    async def run(self) -> StatsSnapshot:
        _log(
            "dispatch_started",
            url=self._sender.url,
            total_jobs=self._total_jobs,
            rate_per_minute=self._rate_per_minute,
            concurrency=self._concurrency,
        )
        queue = self._queue_factory(self.queue_capacity)
        self._stats.restart_clock()

        deadline: asyncio.TimerHandle | None = None
        if self._duration_seconds:
            deadline = asyncio.get_running_loop().call_later(self._duration_seconds, self.cancel)

        generator = asyncio.create_task(self._generate(queue), name="generator")
        senders = [
            asyncio.create_task(self._sender_loop(worker_id, queue), name=f"sender-{worker_id}")
            for worker_id in range(self._concurrency)
        ]
        reporter = asyncio.create_task(self._report_loop(), name="stats-reporter")
        tasks = [generator, *senders, reporter]
        try:
            await asyncio.gather(generator, *senders)
        finally:
            if deadline is not None:
                deadline.cancel()
            # No task started here may outlive run().
            for task in tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

        snap = self._stats.snapshot()
        self._log_summary(snap)
        return snap

    async def _generate(self, queue: asyncio.Queue) -> None:
        ticker = Ticker(self.tick_interval)
        for job_id in range(1, self._total_jobs + 1):
            if not await ticker.tick(self._stop):
                _log("generation_cancelled", emitted=self._emitted)
                break
            await queue.put(job_id)
            self._emitted += 1
        # Only reached on completion or cooperative cancel; senders are still draining.
        for _ in range(self._concurrency):
            await queue.put(END_OF_STREAM)
        _log("generation_finished", emitted=self._emitted)

    async def _sender_loop(self, worker_id: int, queue: asyncio.Queue) -> None:
        while True:
            job = await queue.get()
            try:
                if job is END_OF_STREAM:
                    return
                await self._send_one(worker_id, job)
            finally:
                queue.task_done()

    async def _send_one(self, worker_id: int, job_id: int) -> None:
        try:
            payload = self._factory.build(job_id)
            result = await self._sender.send(payload)
        except Exception as exc:
            logger.exception("worker {}: unexpected error sending order {}: {}", worker_id, job_id, exc)
            self._stats.record(success=False, latency_ms=0.0)
            return

        self._stats.record(success=result.is_success, latency_ms=result.elapsed_seconds * 1000.0)
        if not result.is_success:
            logger.warning("worker {}: error sending order {}: {}", worker_id, job_id, result.describe())

    async def _report_loop(self) -> None:
        while True:
            await asyncio.sleep(self._report_interval)
            _log("stats", **_snapshot_fields(self._stats.snapshot()))

    def _log_summary(self, snap: StatsSnapshot) -> None:
        _log(
            "final_results",
            total_time_seconds=round(snap.elapsed_seconds, 2),
            success_rate=round(snap.success_rate, 2),
            **_snapshot_fields(snap),
        )
