"""Webhook sender: posts one order payload through the HTTP port."""
from __future__ import annotations

from typing import Any, Mapping

from shared.ports.http_client import AbstractHttpClient, HttpCallResult, RequestTimeout


def webhook_headers(*, topic: str, signature: str, shop_domain: str) -> dict[str, str]:
    return {
        "Content-Type": "application/json",
        "X-Shopify-Topic": topic,
        "X-Shopify-Hmac-SHA256": signature,
        "X-Shopify-Shop-Domain": shop_domain,
    }


class WebhookSender:
    def __init__(
        self,
        client: AbstractHttpClient,
        url: str,
        *,
        timeout: RequestTimeout,
        headers: Mapping[str, str],
    ) -> None:
        self._client = client
        self._url = url
        self._timeout = timeout
        self._headers = dict(headers)

    @property
    def url(self) -> str:
        return self._url

    async def send(self, payload: Mapping[str, Any]) -> HttpCallResult:
        return await self._client.call(
            "POST",
            self._url,
            headers=self._headers,
            json=payload,
            timeout=self._timeout,
        )
