"""Order API client: the four remote operations a poll worker needs.

Uses the HTTP port (AbstractHttpClient); the client is built in the composition
root. Responses may come wrapped in a `{"data", "message", "timestamp"}`
envelope or bare; both are accepted. Transport failures, non-2xx statuses and
undecodable bodies surface as OrderApiError (LoginError for the login call).
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from loguru import logger
from pydantic import ValidationError

from poller.app.domain.models import Session, WorkUnit
from poller.app.schemas.orders import WORK_ITEM_LIST, FinalizeItemRequest, LoginRequest, WorkItem
from shared.ports.http_client import AbstractHttpClient, HttpCallResult, RequestTimeout

_ENVELOPE_KEYS = frozenset({"data", "message", "timestamp"})


class OrderApiError(Exception):
    """Base error for order API failures."""


class LoginError(OrderApiError):
    """Raised when a session cannot be established. Fatal for the calling worker."""


@dataclass(frozen=True)
class ApiPaths:
    login: str = "/auth/login"
    next_work: str = "/work/next"
    finalize_item: str = "/work/{parent_id}/items/{item_id}"
    approve: str = "/work/{parent_id}/approve"


def unwrap_envelope(payload: Any) -> Any:
    if isinstance(payload, dict) and _ENVELOPE_KEYS.intersection(payload):
        return payload.get("data")
    return payload


class OrderApiClient:
    def __init__(
        self,
        client: AbstractHttpClient,
        base_url: str,
        *,
        timeout: RequestTimeout,
        paths: ApiPaths | None = None,
    ) -> None:
        self._client = client
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._paths = paths or ApiPaths()

    def _url(self, path: str) -> str:
        return f"{self._base_url}{path}"

    async def login(self, username: str, password: str) -> Session:
        body = LoginRequest(username=username, password=password).model_dump()
        result = await self._client.call(
            "POST",
            self._url(self._paths.login),
            json=body,
            headers={"Content-Type": "application/json"},
            timeout=self._timeout,
        )
        if not result.is_success:
            raise LoginError(f"login failed for {username}: {result.describe()}")
        try:
            data = unwrap_envelope(result.json())
        except ValueError as exc:
            raise LoginError(f"failed to decode login response for {username}: {exc}") from exc

        token = data.get("access_token") if isinstance(data, dict) else None
        if not token:
            raise LoginError(f"login response for {username} carried no access_token")
        return Session(username=username, access_token=str(token))

    async def next_work(self, session: Session) -> WorkUnit | None:
        """Fetch the next unit of work, or None when the server has nothing queued."""
        result = await self._client.call(
            "GET",
            self._url(self._paths.next_work),
            headers=session.authorization,
            timeout=self._timeout,
        )
        self._raise_for_result(result, "failed to get next work")
        try:
            data = unwrap_envelope(result.json())
            items = WORK_ITEM_LIST.validate_python(data or [])
        except (ValueError, ValidationError) as exc:
            raise OrderApiError(f"failed to decode next work response: {exc}") from exc

        if not items:
            return None
        logger.debug("next work payload: {}", items)
        return WorkUnit(parent_id=items[0].order_id, items=tuple(items))

    async def finalize_item(self, session: Session, item: WorkItem, reference: str) -> None:
        path = self._paths.finalize_item.format(parent_id=item.order_id, item_id=item.fulfillment_id)
        result = await self._client.call(
            "POST",
            self._url(path),
            headers=session.authorization,
            json=FinalizeItemRequest(final_img_url=reference).model_dump(),
            timeout=self._timeout,
        )
        self._raise_for_result(result, f"failed to finalize item {item.fulfillment_id}")

    async def approve(self, session: Session, unit: WorkUnit) -> None:
        path = self._paths.approve.format(parent_id=unit.parent_id)
        result = await self._client.call(
            "POST",
            self._url(path),
            headers=session.authorization,
            timeout=self._timeout,
        )
        self._raise_for_result(result, f"failed to approve {unit.parent_id}")

    @staticmethod
    def _raise_for_result(result: HttpCallResult, what: str) -> None:
        if not result.is_success:
            raise OrderApiError(f"{what}: {result.describe()}")
