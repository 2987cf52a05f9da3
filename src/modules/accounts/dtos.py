"""Account DTOs for the Service Layer (Pydantic v2, immutable)."""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator


class AddBalanceDTO(BaseModel):
    """Manual credit to an account balance.

    The client sends ``account`` and ``amount``; the amount must be
    strictly positive.
    """

    model_config = ConfigDict(frozen=True)

    account_id: UUID
    amount: Decimal

    @field_validator("amount")
    @classmethod
    def amount_must_be_positive(cls, v: Decimal) -> Decimal:
        if v <= 0:
            raise ValueError("Amount must be greater than zero.")
        return v
