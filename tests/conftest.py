from __future__ import annotations

from typing import Any, Iterable

import pytest
from fastapi import FastAPI, Request, Response

from poller.app.domain.models import Session, WorkUnit
from poller.app.domain.order_api import LoginError, OrderApiError
from poller.app.schemas.orders import WorkItem
from shared.ports.http_client import HttpCallResult, RequestTimeout


def make_item(order_id: int, fulfillment_id: str, n: int = 1) -> WorkItem:
    return WorkItem(
        order_id=order_id,
        fulfillment_id=fulfillment_id,
        customer_img_url=f"https://samples.example.com/samples/tmp-img-ABC-{n}-22x5.png",
    )


def make_unit(order_id: int, *fulfillment_ids: str) -> WorkUnit:
    return WorkUnit(
        parent_id=order_id,
        items=tuple(make_item(order_id, fid, n) for n, fid in enumerate(fulfillment_ids, start=1)),
    )


class RecordingSleep:
    """Stands in for asyncio.sleep; records requested delays without waiting."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class FakeOrderApi:
    """Implements the OrderApiClient surface used by PollWorker.

    `next_results` is consumed one entry per fetch: a WorkUnit, None (idle) or
    an exception instance to raise. Once exhausted every fetch is idle.
    """

    def __init__(
        self,
        next_results: Iterable[WorkUnit | None | Exception] = (),
        *,
        login_error: Exception | None = None,
        fail_finalize: set[str] | None = None,
        fail_approve: bool = False,
    ) -> None:
        self._next_results = list(next_results)
        self._login_error = login_error
        self._fail_finalize = fail_finalize or set()
        self._fail_approve = fail_approve
        self.logins: list[str] = []
        self.fetches = 0
        self.finalized: list[tuple[str, str]] = []
        self.approved: list[Any] = []

    async def login(self, username: str, password: str) -> Session:
        self.logins.append(username)
        if self._login_error is not None:
            raise self._login_error
        return Session(username=username, access_token=f"token-{username}")

    async def next_work(self, session: Session) -> WorkUnit | None:
        self.fetches += 1
        if not self._next_results:
            return None
        result = self._next_results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result

    async def finalize_item(self, session: Session, item: WorkItem, reference: str) -> None:
        if str(item.fulfillment_id) in self._fail_finalize:
            raise OrderApiError(f"failed to finalize item {item.fulfillment_id}: server returned status: 500")
        self.finalized.append((str(item.fulfillment_id), reference))

    async def approve(self, session: Session, unit: WorkUnit) -> None:
        if self._fail_approve:
            raise OrderApiError(f"failed to approve {unit.parent_id}: server returned status: 500")
        self.approved.append(unit.parent_id)


class FakeHttpClient:
    """Implements AbstractHttpClient; answers from a (method, path) table and records calls."""

    def __init__(self, routes: dict[tuple[str, str], HttpCallResult | list[HttpCallResult]]) -> None:
        self._routes = routes
        self.calls: list[dict[str, Any]] = []
        self.closed = False

    async def call(
        self,
        method: str,
        url: str,
        *,
        timeout: RequestTimeout,
        headers: dict[str, str] | None = None,
        json: Any = None,
    ) -> HttpCallResult:
        self.calls.append({"method": method, "url": url, "headers": headers, "json": json})
        for (route_method, suffix), result in self._routes.items():
            if route_method == method and url.endswith(suffix):
                if isinstance(result, list):
                    return result.pop(0) if len(result) > 1 else result[0]
                return result
        return HttpCallResult(status_code=404, body=b'{"message": "not found"}')

    async def close(self) -> None:
        self.closed = True


def json_result(status_code: int, body: str) -> HttpCallResult:
    return HttpCallResult(status_code=status_code, body=body.encode())


class OrderApiState:
    """Backing state for the fake order API app."""

    def __init__(self, backlog: list[list[dict[str, Any]]], *, failing_items: set[str] | None = None) -> None:
        self.backlog = list(backlog)
        self.failing_items = failing_items or set()
        self.users = {"admin": "admin", "designer1": "designer"}
        self.finalized: list[tuple[str, str, str]] = []
        self.approved: list[str] = []
        self.unauthorized = 0


def build_order_api_app(state: OrderApiState) -> FastAPI:
    """Order API stand-in speaking the enveloped wire format."""
    app = FastAPI()

    def _authorized(request: Request) -> bool:
        ok = request.headers.get("Authorization", "").startswith("Bearer token-")
        if not ok:
            state.unauthorized += 1
        return ok

    @app.post("/auth/login")
    async def login(request: Request) -> Response:
        body = await request.json()
        if state.users.get(body.get("username")) != body.get("password"):
            return Response(status_code=401, content='{"message": "invalid credentials"}')
        return Response(
            status_code=200,
            media_type="application/json",
            content=(
                '{"data": {"access_token": "token-%s", "user_name": "%s"}, '
                '"timestamp": "2024-01-01T00:00:00Z"}' % (body["username"], body["username"])
            ),
        )

    @app.get("/work/next")
    async def next_work(request: Request):
        if not _authorized(request):
            return Response(status_code=401)
        if not state.backlog:
            return {"message": "no orders", "timestamp": "2024-01-01T00:00:00Z"}
        return {"data": state.backlog.pop(0), "timestamp": "2024-01-01T00:00:00Z"}

    @app.post("/work/{parent_id}/items/{item_id}")
    async def finalize(parent_id: str, item_id: str, request: Request):
        if not _authorized(request):
            return Response(status_code=401)
        if item_id in state.failing_items:
            return Response(status_code=500, content="boom")
        body = await request.json()
        state.finalized.append((parent_id, item_id, body["final_img_url"]))
        return {"message": "ok"}

    @app.post("/work/{parent_id}/approve")
    async def approve(parent_id: str, request: Request):
        if not _authorized(request):
            return Response(status_code=401)
        state.approved.append(parent_id)
        return {"message": "approved"}

    return app


class WebhookState:
    def __init__(self, *, fail_every: int = 0) -> None:
        self.fail_every = fail_every
        self.received: list[dict[str, Any]] = []
        self.headers: list[dict[str, str]] = []


def build_webhook_app(state: WebhookState) -> FastAPI:
    """Webhook receiver stand-in; answers 500 for every `fail_every`-th order number."""
    app = FastAPI()

    @app.post("/webhooks/test/orders/create")
    async def receive(request: Request) -> Response:
        body = await request.json()
        state.received.append(body)
        state.headers.append(dict(request.headers))
        if state.fail_every and body["order_number"] % state.fail_every == 0:
            return Response(status_code=500, content="rejected")
        return Response(status_code=200, content='{"status": "accepted"}')

    return app


@pytest.fixture()
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture()
def login_error() -> LoginError:
    return LoginError("login failed for admin: server returned status: 401")
