"""Poller end-to-end against an in-process order API (FastAPI over httpx.ASGITransport)."""
from __future__ import annotations

import asyncio

import httpx
import pytest

from poller.app.application.worker_pool import run_worker_pool
from poller.app.composition import PollerDependencies
from poller.app.config.settings import Settings
from tests.conftest import OrderApiState, build_order_api_app


def _backlog(units: int, items_per_unit: int = 2) -> list[list[dict]]:
    return [
        [
            {
                "order_id": 100 + n,
                "fulfillment_id": f"f{n}-{k}",
                "customer_img_url": f"https://samples.example.com/samples/tmp-img-ABC-{k}-22x5.png",
                "processed": False,
            }
            for k in range(1, items_per_unit + 1)
        ]
        for n in range(units)
    ]


def _settings(**overrides) -> Settings:
    values = {
        "api_base_url": "http://orders.test",
        "accounts": "admin:admin,designer1:designer",
        "worker_count": 3,
        "max_cycles_per_worker": 3,
        "initial_backoff_seconds": 0.001,
        "max_backoff_seconds": 0.004,
    }
    values.update(overrides)
    return Settings(**values)


async def _run(state: OrderApiState, settings: Settings):
    deps = PollerDependencies(settings=settings, transport=httpx.ASGITransport(app=build_order_api_app(state)))
    deps.connect()
    try:
        return await run_worker_pool(deps.build_workers())
    finally:
        await deps.close()


@pytest.mark.integration
def test_pool_drains_backlog_and_approves_every_order():
    state = OrderApiState(_backlog(4))

    reports = asyncio.run(_run(state, _settings()))

    assert len(reports) == 3
    assert all(r.fatal_error is None for r in reports)
    assert sum(r.cycles for r in reports) == 9
    assert sum(r.succeeded for r in reports) == 4
    assert sorted(state.approved) == ["100", "101", "102", "103"]
    assert len(state.finalized) == 8
    assert all(ref.endswith(".pdf") and "tmp-out-ABC-" in ref for _, _, ref in state.finalized)
    assert state.unauthorized == 0


@pytest.mark.integration
def test_failed_item_leaves_its_order_unapproved():
    state = OrderApiState(_backlog(3), failing_items={"f1-2"})

    reports = asyncio.run(_run(state, _settings()))

    assert sum(r.errors for r in reports) == 1
    assert sorted(state.approved) == ["100", "102"]
    assert ("101", "f1-1", "https://samples.example.com/samples/tmp-out-ABC-1-22x5.pdf") in state.finalized


@pytest.mark.integration
def test_worker_with_bad_credentials_stops_alone():
    state = OrderApiState(_backlog(2))

    reports = asyncio.run(_run(state, _settings(accounts="admin:admin,ghost:nope", worker_count=2)))

    assert reports[0].fatal_error is None
    assert reports[1].fatal_error is not None
    assert reports[1].cycles == 0
    assert reports[0].cycles == 3
    assert sorted(state.approved) == ["100", "101"]


@pytest.mark.integration
def test_accounts_are_assigned_round_robin():
    state = OrderApiState([])

    reports = asyncio.run(_run(state, _settings(worker_count=4, max_cycles_per_worker=1)))

    assert [r.username for r in reports] == ["admin", "designer1", "admin", "designer1"]
    assert all(r.idle == 1 for r in reports)
