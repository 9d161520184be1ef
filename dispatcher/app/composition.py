"""Dispatcher composition root: build and lifecycle-manage concrete dependencies."""
from __future__ import annotations

import random
from typing import Any

import httpx
from loguru import logger

from dispatcher.app.application.dispatcher import Dispatcher
from dispatcher.app.config.settings import Settings
from dispatcher.app.core import SERVICE_NAME
from dispatcher.app.domain.catalog import build_default_catalog
from dispatcher.app.domain.order_factory import OrderFactory
from dispatcher.app.domain.webhook_sender import WebhookSender, webhook_headers
from shared.infrastructure.http.factory import create_http_client
from shared.ports.http_client import AbstractHttpClient, RequestTimeout


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


class DispatcherDependencies:
    """Holds wired dispatcher dependencies and their lifecycle."""

    def __init__(
        self,
        *,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._transport = transport
        self._http_client: AbstractHttpClient | None = None
        self._dispatcher: Dispatcher | None = None

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def dispatcher(self) -> Dispatcher:
        if self._dispatcher is None:
            raise RuntimeError("dispatcher is not initialized")
        return self._dispatcher

    def connect(self) -> None:
        settings = self._settings
        self._http_client = create_http_client(
            max_connections=settings.max_connections,
            max_keepalive_connections=settings.max_keepalive_connections,
            keepalive_expiry_seconds=settings.keepalive_expiry_seconds,
            transport=self._transport,
        )
        sender = WebhookSender(
            self._http_client,
            settings.webhook_url,
            timeout=RequestTimeout(total_seconds=settings.request_timeout_seconds),
            headers=webhook_headers(
                topic=settings.webhook_topic,
                signature=settings.webhook_signature,
                shop_domain=settings.shop_domain,
            ),
        )
        factory = OrderFactory(
            build_default_catalog(settings.catalog_asset_base_url),
            rng=random.Random(settings.random_seed),
        )
        self._dispatcher = Dispatcher(
            sender,
            factory,
            total_jobs=settings.total_jobs,
            rate_per_minute=settings.rate_per_minute,
            concurrency=settings.concurrency,
            report_interval_seconds=settings.report_interval_seconds,
            duration_seconds=settings.duration_seconds,
        )
        _log("dependencies_ready", url=settings.webhook_url)

    async def close(self) -> None:
        if self._http_client is not None:
            try:
                await self._http_client.close()
            except Exception as exc:
                logger.warning("http client close failed: {}", exc)
            self._http_client = None
        self._dispatcher = None


def create_dispatcher_dependencies(settings: Settings | None = None) -> DispatcherDependencies:
    return DispatcherDependencies(settings=settings or Settings())
