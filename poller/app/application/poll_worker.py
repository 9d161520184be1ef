from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable

from loguru import logger

from poller.app.constants import CycleOutcome, ErrorBackoffPolicy
from poller.app.core import SERVICE_NAME
from poller.app.domain.models import Account, Session, WorkerReport
from poller.app.domain.order_api import LoginError, OrderApiClient, OrderApiError
from poller.app.ports.reference_resolver import ReferenceResolver
from shared.core.backoff import Backoff

SleepFn = Callable[[float], Awaitable[Any]]


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


class PollWorker:
    """
    One poll worker: log in once, then run `max_cycles` fetch/process/approve cycles.

    Lifecycle: INIT -> (login) -> POLLING <-> PROCESSING -> ... -> DONE.
    A failed login ends the worker immediately with `fatal_error` set on its
    report. Every cycle, successful, idle or failed, counts toward `max_cycles`.
    Any exception raised inside a cycle is caught at the cycle boundary and
    turned into an ERROR outcome, so one bad unit never stops the worker.

    Backoff: IDLE grows the sleep, SUCCESS resets it to base, ERROR follows
    `error_policy` (hold by default).
    """

    def __init__(
        self,
        index: int,
        api: OrderApiClient,
        resolver: ReferenceResolver,
        *,
        account: Account,
        max_cycles: int,
        backoff: Backoff,
        error_policy: ErrorBackoffPolicy = ErrorBackoffPolicy.HOLD,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        if max_cycles < 1:
            raise ValueError("max_cycles must be >= 1")
        self._index = index
        self._api = api
        self._resolver = resolver
        self._account = account
        self._max_cycles = max_cycles
        self._backoff = backoff
        self._error_policy = error_policy
        self._sleep = sleep

    @property
    def index(self) -> int:
        return self._index

    @property
    def backoff(self) -> Backoff:
        return self._backoff

    async def run(self) -> WorkerReport:
        report = WorkerReport(worker_index=self._index, username=self._account.username)
        _log("worker_started", worker=self._index, username=self._account.username)

        try:
            session = await self._api.login(self._account.username, self._account.password)
        except LoginError as exc:
            logger.error("worker-{}: {}", self._index, exc)
            report.fatal_error = str(exc)
            _log("worker_login_failed", worker=self._index)
            return report

        while report.cycles < self._max_cycles:
            outcome = await self.run_cycle(session)
            report.record(outcome)
            delay = self._next_delay(outcome)
            _log(
                "cycle_finished",
                worker=self._index,
                outcome=outcome.value,
                cycle=report.cycles,
                sleep_seconds=delay,
            )
            await self._sleep(delay)

        _log(
            "worker_finished",
            worker=self._index,
            succeeded=report.succeeded,
            idle=report.idle,
            errors=report.errors,
        )
        return report

    async def run_cycle(self, session: Session) -> CycleOutcome:
        """Run one cycle behind the fault boundary; never raises (except cancellation)."""
        try:
            return await self._process_next(session)
        except OrderApiError as exc:
            logger.warning("worker-{}: {}", self._index, exc)
            return CycleOutcome.ERROR
        except Exception as exc:
            logger.exception("worker-{}: cycle failed unexpectedly: {}", self._index, exc)
            return CycleOutcome.ERROR

    async def _process_next(self, session: Session) -> CycleOutcome:
        unit = await self._api.next_work(session)
        if unit is None:
            _log("no_work", worker=self._index)
            return CycleOutcome.IDLE

        _log("work_received", worker=self._index, parent_id=unit.parent_id, items=len(unit.items))

        # Sequential, in server order; the first failure abandons the rest of the unit.
        for item in unit.items:
            reference = self._resolver.resolve(item.customer_img_url)
            if reference is None:
                logger.warning(
                    "worker-{}: no finalized reference for {} (item {})",
                    self._index,
                    item.customer_img_url,
                    item.fulfillment_id,
                )
                return CycleOutcome.ERROR
            _log("finalizing_item", worker=self._index, item_id=item.fulfillment_id)
            await self._api.finalize_item(session, item, reference)

        await self._api.approve(session, unit)
        _log("work_approved", worker=self._index, parent_id=unit.parent_id)
        return CycleOutcome.SUCCESS

    def _next_delay(self, outcome: CycleOutcome) -> float:
        if outcome is CycleOutcome.SUCCESS:
            return self._backoff.success()
        if outcome is CycleOutcome.IDLE:
            return self._backoff.idle()
        if self._error_policy is ErrorBackoffPolicy.GROW:
            return self._backoff.idle()
        if self._error_policy is ErrorBackoffPolicy.RESET:
            return self._backoff.success()
        return self._backoff.hold()
