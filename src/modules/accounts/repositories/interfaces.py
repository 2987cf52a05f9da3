"""Account repository interface.

Extends ``IRepository[Account]`` with the look-ups and the atomic balance
credit used by the order workflow.
"""

from __future__ import annotations

from abc import abstractmethod
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.accounts.models import Account


class IAccountRepository(IRepository["Account"]):
    """Repository contract for the Account aggregate."""

    @abstractmethod
    def get_first_admin(self) -> Optional[Account]:
        """Return the oldest account with the admin role, if any."""

    @abstractmethod
    def credit_balance(self, id: str, amount: Decimal) -> bool:
        """Add *amount* to the balance in a single UPDATE.

        Returns ``False`` when no account matched.
        """
