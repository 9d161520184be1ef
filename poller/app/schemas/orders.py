"""Wire schemas for the order API."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, TypeAdapter


class LoginRequest(BaseModel):
    username: str
    password: str


class WorkItem(BaseModel):
    """One order product as returned by the work-source endpoint."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    order_id: int | str
    fulfillment_id: str | int
    customer_img_url: str
    id: int | None = None
    sku: str | None = None
    quantity: int | None = None
    final_img_url: str | None = None
    processed: bool = False


class FinalizeItemRequest(BaseModel):
    final_img_url: str


WORK_ITEM_LIST = TypeAdapter(list[WorkItem])
