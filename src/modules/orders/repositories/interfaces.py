"""Order repository interface.

Extends ``IRepository[Order]`` with methods required by the Order
aggregate: atomic creation with items, row locking, status history
tracking and the two list views used by the API.

The Service Layer depends exclusively on this contract (DIP).
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Optional
from uuid import UUID

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.orders.models import Order, OrderStatusHistory


class IOrderRepository(IRepository["Order"]):
    """Repository contract for the Order aggregate root.

    The Order aggregate includes OrderItem children and
    OrderStatusHistory records.  Mutations must be atomic.
    """

    @abstractmethod
    def create(self, data: Dict[str, Any]) -> Order:
        """Create an order with its items atomically.

        ``data`` must include ``account_id`` and ``items`` (list of dicts
        with ``product_id``, ``quantity``, ``unit_price``).
        """

    @abstractmethod
    def get_for_update(self, id: str) -> Optional[Order]:
        """Retrieve an order with a row-level lock (SELECT FOR UPDATE)."""

    @abstractmethod
    def add_history(
        self,
        order_id: UUID,
        status: str,
        notes: str = "",
        old_status: Optional[str] = None,
    ) -> OrderStatusHistory:
        """Record a status change in the order's audit trail."""

    @abstractmethod
    def list_for_account(self, account_id: str) -> List[Order]:
        """Orders placed by *account_id*, newest first."""

    @abstractmethod
    def list_for_shipping(self) -> List[Order]:
        """Paid, Shipping and Delivered orders in that order, newest first."""
