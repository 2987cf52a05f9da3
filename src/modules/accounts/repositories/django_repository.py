"""Django ORM implementation of the Account repository.

Missing or malformed IDs come back as ``None`` / ``False``; the service
layer decides how to turn that into a domain error.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, List, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import F

from modules.accounts.models import Account, AccountRole
from modules.accounts.repositories.interfaces import IAccountRepository

logger = structlog.get_logger(__name__)


class AccountDjangoRepository(IAccountRepository):
    """Concrete Account repository backed by Django ORM."""

    def get_by_id(self, id: str) -> Optional[Account]:
        try:
            return Account.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Account]:
        queryset = Account.objects.all()
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    @transaction.atomic
    def save(self, entity: Account) -> Account:
        is_new = entity._state.adding
        entity.save()
        logger.info("account.saved", account_id=str(entity.id), is_new=is_new)
        return entity

    def get_first_admin(self) -> Optional[Account]:
        return (
            Account.objects.filter(role=AccountRole.ADMIN)
            .order_by("created_at", "id")
            .first()
        )

    def credit_balance(self, id: str, amount: Decimal) -> bool:
        """Increment the balance with an ``F()`` expression (no read-modify-write)."""
        try:
            updated = Account.objects.filter(id=id).update(
                balance=F("balance") + amount
            )
        except (ValueError, ValidationError):
            return False
        if updated:
            logger.info("account.balance_credited", account_id=str(id), amount=str(amount))
        return bool(updated)
