"""Poller composition root: build and lifecycle-manage concrete dependencies.

Composition may: import concrete classes, call factories, store interface types,
manage high-level lifecycle.
"""
from __future__ import annotations

from typing import Any

import httpx
from loguru import logger

from poller.app.application.poll_worker import PollWorker
from poller.app.config.settings import Settings
from poller.app.core import SERVICE_NAME
from poller.app.domain.order_api import ApiPaths, OrderApiClient
from poller.app.infrastructure.references.factory import create_reference_resolver
from poller.app.ports.reference_resolver import ReferenceResolver
from shared.core.backoff import Backoff
from shared.infrastructure.http.factory import create_http_client
from shared.ports.http_client import AbstractHttpClient, RequestTimeout


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


class PollerDependencies:
    """Holds wired poller dependencies and their lifecycle."""

    def __init__(
        self,
        *,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._transport = transport
        self._http_client: AbstractHttpClient | None = None
        self._api: OrderApiClient | None = None
        self._resolver: ReferenceResolver | None = None

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def api(self) -> OrderApiClient:
        if self._api is None:
            raise RuntimeError("order api client is not initialized")
        return self._api

    @property
    def resolver(self) -> ReferenceResolver:
        if self._resolver is None:
            raise RuntimeError("reference resolver is not initialized")
        return self._resolver

    def connect(self) -> None:
        settings = self._settings
        self._resolver = create_reference_resolver(settings)
        self._http_client = create_http_client(
            max_connections=settings.max_connections,
            max_keepalive_connections=settings.max_connections,
            transport=self._transport,
        )
        self._api = OrderApiClient(
            self._http_client,
            settings.api_base_url,
            timeout=RequestTimeout(
                total_seconds=settings.request_timeout_seconds,
                connect_seconds=settings.connect_timeout_seconds,
            ),
            paths=ApiPaths(
                login=settings.login_path,
                next_work=settings.next_work_path,
                finalize_item=settings.finalize_item_path,
                approve=settings.approve_path,
            ),
        )
        _log("dependencies_ready", base_url=settings.api_base_url, backend=settings.reference_backend)

    def build_workers(self) -> list[PollWorker]:
        settings = self._settings
        accounts = settings.account_list
        return [
            PollWorker(
                index,
                self.api,
                self.resolver,
                account=accounts[index % len(accounts)],
                max_cycles=settings.max_cycles_per_worker,
                backoff=Backoff(
                    settings.initial_backoff_seconds,
                    settings.max_backoff_seconds,
                    settings.backoff_multiplier,
                ),
                error_policy=settings.error_backoff_policy,
            )
            for index in range(settings.worker_count)
        ]

    async def close(self) -> None:
        if self._http_client is not None:
            try:
                await self._http_client.close()
            except Exception as exc:
                logger.warning("http client close failed: {}", exc)
            self._http_client = None
        self._api = None
        self._resolver = None


def create_poller_dependencies(settings: Settings | None = None) -> PollerDependencies:
    return PollerDependencies(settings=settings or Settings())
