"""Order DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the API layer (DRF Serializers)
and the Service layer.  DTOs are immutable (``frozen=True``).

- ``PlaceOrderItemDTO``: a single cart line.
- ``PlaceOrderDTO``: cart submission (account + lines).
- ``PlacedOrderDTO``: created order id + hosted-payment URL.
- ``CancellationDTO``: canceled order id + refunded amount.
"""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator

# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class PlaceOrderItemDTO(BaseModel):
    """A product and how many units of it the client wants.

    ``unit_price`` is resolved by the Service Layer from the product catalog.
    """

    model_config = ConfigDict(frozen=True)

    product_id: UUID
    quantity: int

    @field_validator("quantity")
    @classmethod
    def quantity_must_be_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Quantity must be at least 1.")
        return v


class PlaceOrderDTO(BaseModel):
    """Cart submission.

    An empty ``items`` tuple is accepted here and rejected by the service
    with a domain error, so every caller gets the same message.
    """

    model_config = ConfigDict(frozen=True)

    account_id: UUID
    items: tuple[PlaceOrderItemDTO, ...] = ()


# ---------------------------------------------------------------------------
# Output DTOs
# ---------------------------------------------------------------------------


class PlacedOrderDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    order_id: UUID
    total_amount: Decimal
    payment_url: str


class CancellationDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    order_id: UUID
    refund_amount: Decimal
