"""Django ORM implementation of the Product repository.

Satisfies ``IProductRepository`` using Django's QuerySet API.
Error handling follows the Null Object pattern: methods return ``None``
(or ``False``) instead of raising HTTP-level exceptions; the Service
Layer decides how to translate a missing entity into an API response.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import models, transaction
from django.db.models import F

from modules.products.models import Brand, Category, Product, Skin
from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


def _base_queryset() -> "models.QuerySet[Product]":
    return Product.objects.select_related("category", "brand").prefetch_related(
        "skins"
    )


class ProductDjangoRepository(IProductRepository):
    """Concrete Product repository backed by Django ORM."""

    def get_by_id(self, id: str) -> Optional[Product]:
        """Retrieve a product by primary key.

        Returns ``None`` for non-existent or invalid IDs.
        """
        try:
            return _base_queryset().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> "models.QuerySet[Product]":
        """List products with optional Django ORM look-ups.

        Examples of valid filters::

            {"name__icontains": "serum"}
            {"price__lte": "100.00"}
        """
        queryset = _base_queryset()
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    def get_many(self, ids: Iterable[str]) -> Dict[str, Product]:
        try:
            products = Product.objects.filter(id__in=list(ids))
            return {str(product.id): product for product in products}
        except (ValueError, ValidationError):
            return {}

    @transaction.atomic
    def save(self, entity: Product) -> Product:
        """Persist (create or update) a product."""
        entity.save()
        logger.info("product.saved", product_id=str(entity.id), name=entity.name)
        return entity

    def decrement_stock(self, id: str, quantity: int) -> bool:
        updated = Product.objects.filter(id=id, quantity__gte=quantity).update(
            quantity=F("quantity") - quantity
        )
        if not updated:
            logger.warning(
                "product.stock_decrement_rejected",
                product_id=str(id),
                requested=quantity,
            )
        return bool(updated)

    def restore_stock(self, id: str, quantity: int) -> bool:
        updated = Product.objects.filter(id=id).update(
            quantity=F("quantity") + quantity
        )
        return bool(updated)

    def get_category(self, id: str) -> Optional[Category]:
        try:
            return Category.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_brand(self, id: str) -> Optional[Brand]:
        try:
            return Brand.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_skins(self, ids: Iterable[str]) -> List[Skin]:
        try:
            return list(Skin.objects.filter(id__in=list(ids)))
        except (ValueError, ValidationError):
            return []
