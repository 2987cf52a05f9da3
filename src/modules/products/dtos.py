"""Product DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
DTOs are immutable (``frozen=True``).

- ``CreateProductDTO``: input for product creation.
- ``UpdateProductDTO``: input for partial product updates.
"""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator


# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class CreateProductDTO(BaseModel):
    """Immutable DTO for product creation requests.

    Validates:
    - ``name`` is a non-empty string.
    - ``price`` is a Decimal greater than zero.
    - ``quantity`` is non-negative.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    price: Decimal
    quantity: int = 0
    description: str = ""
    image_url: str = ""
    category_id: UUID | None = None
    brand_id: UUID | None = None
    skin_ids: tuple[UUID, ...] = ()

    @field_validator("name")
    @classmethod
    def name_must_not_be_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Name must not be empty.")
        return v.strip()

    @field_validator("price")
    @classmethod
    def price_must_be_positive(cls, v: Decimal) -> Decimal:
        if v <= 0:
            raise ValueError("Price must be greater than zero.")
        return v

    @field_validator("quantity")
    @classmethod
    def quantity_must_be_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("Quantity cannot be negative.")
        return v


class UpdateProductDTO(BaseModel):
    """Immutable DTO for product update requests.

    All fields are optional; only supplied fields will be updated.
    """

    model_config = ConfigDict(frozen=True)

    name: str | None = None
    price: Decimal | None = None
    quantity: int | None = None
    description: str | None = None
    image_url: str | None = None
    category_id: UUID | None = None
    brand_id: UUID | None = None

    @field_validator("price")
    @classmethod
    def price_must_be_positive(cls, v: Decimal | None) -> Decimal | None:
        if v is not None and v <= 0:
            raise ValueError("Price must be greater than zero.")
        return v

    @field_validator("quantity")
    @classmethod
    def quantity_must_be_non_negative(cls, v: int | None) -> int | None:
        if v is not None and v < 0:
            raise ValueError("Quantity cannot be negative.")
        return v
