"""Product repository interface.

Extends ``IRepository[Product]`` with the stock mutations used by the
order workflow.  Both stock methods are single conditional/relative
UPDATE statements so concurrent callers never read-modify-write.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional

from django.db import models

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.products.models import Brand, Category, Product, Skin


class IProductRepository(IRepository["Product"]):
    """Repository contract for the Product aggregate."""

    @abstractmethod
    def list(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> "models.QuerySet[Product]":
        """List products with optional filters."""

    @abstractmethod
    def get_many(self, ids: Iterable[str]) -> Dict[str, Product]:
        """Return the existing products among *ids*, keyed by ``str(id)``."""

    @abstractmethod
    def decrement_stock(self, id: str, quantity: int) -> bool:
        """Subtract *quantity* only if at least that much is in stock.

        Returns ``False`` when the product is missing or short on stock;
        nothing is written in that case.
        """

    @abstractmethod
    def restore_stock(self, id: str, quantity: int) -> bool:
        """Add *quantity* back to stock."""

    @abstractmethod
    def get_category(self, id: str) -> Optional[Category]:
        """Retrieve a category or ``None``."""

    @abstractmethod
    def get_brand(self, id: str) -> Optional[Brand]:
        """Retrieve a brand or ``None``."""

    @abstractmethod
    def get_skins(self, ids: Iterable[str]) -> List[Skin]:
        """Retrieve the skins among *ids* that exist."""
