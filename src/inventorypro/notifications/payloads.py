"""Typed notification payloads.

Each notification type carries only the fields it needs. The union is
discriminated on ``type`` so stored JSON round-trips to the right variant.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter


class SubscriptionPayload(BaseModel):
    type: Literal["subscription"] = "subscription"
    kind: Literal["expired", "expiring", "reminder", "renewed"]
    expiration_date: datetime
    tier: Literal["seven_day", "three_day", "one_day"] | None = None


class InventoryPayload(BaseModel):
    type: Literal["inventory"] = "inventory"
    item_name: str
    current_quantity: int
    item_id: int | None = None


class PaymentPayload(BaseModel):
    type: Literal["payment"] = "payment"
    amount: Decimal


class SystemPayload(BaseModel):
    type: Literal["system"] = "system"


NotificationPayload = Annotated[
    Union[SubscriptionPayload, InventoryPayload, PaymentPayload, SystemPayload],
    Field(discriminator="type"),
]

_adapter: TypeAdapter[NotificationPayload] = TypeAdapter(NotificationPayload)


def parse_payload(data: dict) -> NotificationPayload:
    """Validate stored JSON back into its payload variant."""
    return _adapter.validate_python(data)


def dump_payload(payload: NotificationPayload) -> dict:
    """Serialize a payload for the JSON column."""
    return payload.model_dump(mode="json", exclude_none=True)
