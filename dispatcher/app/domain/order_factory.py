"""Synthetic order payloads for the webhook load test."""
from __future__ import annotations

import random
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

from dispatcher.app.domain.catalog import City, OrderCatalog

# Offsets keep generated ids in the same numeric range as real shop ids.
ORDER_ID_OFFSET = 6574664908969
LINE_ITEM_ID_OFFSET = 15573094760617
CUSTOMER_ID_OFFSET = 8909317734569
SHIPPING_LINE_ID_OFFSET = 5468266823849

MAX_LINE_ITEMS = 5
MAX_QUANTITY = 10
CREATED_AT_WINDOW = timedelta(days=60)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class OrderFactory:
    """Builds one `orders/create` webhook body per job id.

    Output is fully determined by the injected `rng` and `clock`, which makes
    payloads reproducible in tests.
    """

    def __init__(
        self,
        catalog: OrderCatalog,
        *,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] = _now,
    ) -> None:
        self._catalog = catalog
        self._rng = rng or random.Random()
        self._clock = clock

    def build(self, job_id: int) -> dict[str, Any]:
        rng = self._rng
        catalog = self._catalog

        first_name = rng.choice(catalog.first_names)
        last_name = rng.choice(catalog.last_names)
        city = rng.choice(catalog.cities)
        email = f"{first_name}.{last_name}{job_id}@example.com"

        price = f"{10.0 + rng.random() * 90.0:.2f}"
        total_price = f"{float(price) + float(catalog.shipping_price):.2f}"
        created_at = self._clock() - timedelta(seconds=rng.randrange(int(CREATED_AT_WINDOW.total_seconds())))

        line_items = [self._line_item(job_id, i, price) for i in range(rng.randint(1, MAX_LINE_ITEMS))]
        order_id = ORDER_ID_OFFSET + job_id

        return {
            "id": order_id,
            "admin_graphql_api_id": f"gid://shopify/Order/{order_id}",
            "contact_email": email,
            "created_at": created_at.isoformat(timespec="seconds"),
            "currency": catalog.currency,
            "current_total_price": total_price,
            "current_total_price_set": self._price_set(total_price),
            "name": f"#{rng.random():f}-{first_name}",
            "order_number": job_id,
            "billing_address": self._address(first_name, last_name, city, with_coordinates=True),
            "customer": {
                "id": CUSTOMER_ID_OFFSET + job_id,
                "email": email,
                "first_name": first_name,
                "last_name": last_name,
                "default_address": self._address(first_name, last_name, city, with_coordinates=False),
            },
            "shipping_address": self._address(first_name, last_name, city, with_coordinates=True),
            "total_line_items_price": price,
            "total_line_items_price_set": self._price_set(price),
            "subtotal_price": price,
            "subtotal_price_set": self._price_set(price),
            "total_weight": 0,
            "line_items": line_items,
            "shipping_lines": [
                {
                    "id": SHIPPING_LINE_ID_OFFSET + job_id,
                    "code": catalog.shipping_code,
                    "price": catalog.shipping_price,
                    "price_set": self._price_set(catalog.shipping_price),
                    "discounted_price": catalog.shipping_price,
                    "discounted_price_set": self._price_set(catalog.shipping_price),
                    "source": "shopify",
                    "title": catalog.shipping_code,
                }
            ],
            "financial_status": "paid",
            "fulfillment_status": None,
        }

    def _line_item(self, job_id: int, position: int, price: str) -> dict[str, Any]:
        catalog = self._catalog
        pick = self._rng.randrange(len(catalog.variants))
        variant = catalog.variants[pick]
        item_id = LINE_ITEM_ID_OFFSET + job_id + position
        return {
            "id": item_id,
            "admin_graphql_api_id": f"gid://shopify/LineItem/{item_id}",
            "current_quantity": 1,
            "fulfillable_quantity": 1,
            "product_id": catalog.product_id,
            "title": catalog.product_title,
            "name": f"DTF Gangsheet {variant}",
            "variant_title": variant,
            "price": price,
            "quantity": self._rng.randint(1, MAX_QUANTITY),
            "vendor": catalog.vendor,
            "price_set": self._price_set(price),
            "grams": 0,
            "sku": None,
            "properties": [
                {"name": "_Print Ready File", "value": catalog.print_ready_files[pick]},
                {"name": "Additional Note", "value": f"Test Order {job_id}"},
                {"name": "Background Removal", "value": "No"},
            ],
        }

    def _address(self, first_name: str, last_name: str, city: City, *, with_coordinates: bool) -> dict[str, Any]:
        address: dict[str, Any] = {
            "first_name": first_name,
            "last_name": last_name,
            "name": f"{first_name} {last_name}",
            "address1": city.street,
            "address2": None,
            "phone": None,
            "city": city.city,
            "zip": city.zip_code,
            "province": city.state_name,
            "province_code": city.state,
            "country": "United States",
            "country_code": "US",
        }
        if with_coordinates:
            address["latitude"] = city.latitude + (self._rng.random() - 0.5) * 0.1
            address["longitude"] = city.longitude + (self._rng.random() - 0.5) * 0.1
        return address

    def _price_set(self, amount: str) -> dict[str, Any]:
        money = {"amount": amount, "currency_code": self._catalog.currency}
        return {"shop_money": dict(money), "presentment_money": dict(money)}
