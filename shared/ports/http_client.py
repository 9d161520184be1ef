"""HTTP client port: one call primitive shared by the poller and the dispatcher.

Application code depends on this port; infrastructure (httpx) implements it.
`call` never raises for transport problems. It always hands back a definite
`HttpCallResult` whose body has been read to the end, with the failure (if any)
in `error`. Interpreting status classes is the caller's job.
"""
from __future__ import annotations

import json as jsonlib
from dataclasses import dataclass
from typing import Any, Mapping, Protocol, runtime_checkable


class HttpClientError(Exception):
    """Base for transport-level failures (connect, read, protocol, ...)."""


class HttpClientTimeoutError(HttpClientError):
    """Raised (or carried in a result) when a call exceeds its timeout."""


@dataclass(frozen=True)
class RequestTimeout:
    """Overall deadline for a call, plus an optional tighter connect timeout."""

    total_seconds: float
    connect_seconds: float | None = None


@dataclass(frozen=True)
class HttpCallResult:
    status_code: int | None
    body: bytes = b""
    error: HttpClientError | None = None
    elapsed_seconds: float = 0.0

    @property
    def is_success(self) -> bool:
        return self.error is None and self.status_code is not None and 200 <= self.status_code < 300

    @property
    def timed_out(self) -> bool:
        return isinstance(self.error, HttpClientTimeoutError)

    def json(self) -> Any:
        """Decode the body as JSON; raises ValueError on malformed input."""
        return jsonlib.loads(self.body)

    def describe(self) -> str:
        if self.error is not None:
            return str(self.error)
        return f"server returned status: {self.status_code}"


@runtime_checkable
class AbstractHttpClient(Protocol):
    """Port: perform one HTTP call. Implementations live in infrastructure."""

    async def call(
        self,
        method: str,
        url: str,
        *,
        timeout: RequestTimeout,
        headers: Mapping[str, str] | None = None,
        json: Any = None,
    ) -> HttpCallResult:
        """Send the request and drain the response; transport errors go in the result."""
        ...

    async def close(self) -> None:
        """Release resources (e.g. connection pool). No-op allowed if nothing to close."""
        ...
