"""Concrete HTTP client implementation using httpx (injected where AbstractHttpClient is needed)."""
from __future__ import annotations

import asyncio
import time
from typing import Any, Mapping

import httpx

from shared.ports.http_client import (
    AbstractHttpClient,
    HttpCallResult,
    HttpClientError,
    HttpClientTimeoutError,
    RequestTimeout,
)


class HttpxHttpClient(AbstractHttpClient):
    """AbstractHttpClient implementation using httpx.AsyncClient.

    Responses are opened in streaming mode and read to EOF before being closed,
    on success and error statuses alike, so the pooled connection goes back to
    the pool clean. The whole exchange (connect, send, body read) runs under
    the call's total deadline.
    """

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def call(
        self,
        method: str,
        url: str,
        *,
        timeout: RequestTimeout,
        headers: Mapping[str, str] | None = None,
        json: Any = None,
    ) -> HttpCallResult:
        httpx_timeout = httpx.Timeout(
            timeout.total_seconds,
            connect=timeout.connect_seconds or timeout.total_seconds,
        )
        started = time.perf_counter()
        try:
            status_code, body = await asyncio.wait_for(
                self._exchange(method, url, headers=headers, json=json, timeout=httpx_timeout),
                timeout=timeout.total_seconds,
            )
        except (httpx.TimeoutException, asyncio.TimeoutError):
            return HttpCallResult(
                status_code=None,
                error=HttpClientTimeoutError(f"timeout while calling {method} {url}"),
                elapsed_seconds=time.perf_counter() - started,
            )
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            return HttpCallResult(
                status_code=None,
                error=HttpClientError(f"{method} {url} failed: {exc}"),
                elapsed_seconds=time.perf_counter() - started,
            )
        return HttpCallResult(
            status_code=status_code,
            body=body,
            elapsed_seconds=time.perf_counter() - started,
        )

    async def _exchange(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None,
        json: Any,
        timeout: httpx.Timeout,
    ) -> tuple[int, bytes]:
        request = self._client.build_request(
            method,
            url,
            headers=dict(headers) if headers else None,
            json=json,
            timeout=timeout,
        )
        response = await self._client.send(request, stream=True)
        try:
            body = await response.aread()
        finally:
            await response.aclose()
        return response.status_code, body

    async def close(self) -> None:
        await self._client.aclose()
