"""HTTP client factory: builds AbstractHttpClient with pool limits (no provider logic in composition)."""
from __future__ import annotations

import httpx

from shared.infrastructure.http.httpx_client import HttpxHttpClient
from shared.ports.http_client import AbstractHttpClient


def create_http_client(
    *,
    max_connections: int = 100,
    max_keepalive_connections: int = 100,
    keepalive_expiry_seconds: float = 90.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AbstractHttpClient:
    """Build a pooled HTTP client. Timeouts are applied per-call by the adapter."""
    limits = httpx.Limits(
        max_connections=max_connections,
        max_keepalive_connections=max_keepalive_connections,
        keepalive_expiry=keepalive_expiry_seconds,
    )
    async_client = httpx.AsyncClient(limits=limits, transport=transport)
    return HttpxHttpClient(async_client)
