"""Account model.

An account is both the storefront identity and the Django auth user, so
SimpleJWT tokens resolve directly to the row that carries the role used
by the request guards and the balance credited by refunds.

- ``email`` is unique: refund notifications are addressed to it.
- ``balance`` is a plain running total; there is no ledger.
- ``role`` drives route access (customer / admin / shipper).
"""

from __future__ import annotations

from decimal import Decimal

from django.contrib.auth.models import AbstractUser
from django.db import models

from modules.core.models import BaseModel


class AccountRole(models.TextChoices):
    CUSTOMER = "customer", "Customer"
    ADMIN = "admin", "Admin"
    SHIPPER = "shipper", "Shipper"


class Account(BaseModel, AbstractUser):
    email = models.EmailField(max_length=254, unique=True)
    balance = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal("0.00"),
    )
    role = models.CharField(
        max_length=20,
        choices=AccountRole.choices,
        default=AccountRole.CUSTOMER,
    )

    class Meta:
        db_table = "accounts"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["role"], name="accounts_role_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.username} ({self.role})"
