"""Product service layer (Use Cases).

Orchestrates business logic for the Product aggregate, delegating
persistence to the injected ``IProductRepository``.

Business rules enforced here:
- Price must be greater than zero (validated by DTO).
- Stock cannot be negative (validated by DTO).
- Category, brand and skin references must exist.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional

import structlog
from django.db import models, transaction

from modules.products.exceptions import InvalidProductData, ProductNotFound
from modules.products.models import Product

if TYPE_CHECKING:
    from modules.products.dtos import CreateProductDTO, UpdateProductDTO
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class ProductService:
    """Application service for Product use-cases.

    Receives an ``IProductRepository`` via constructor injection (DIP).
    """

    def __init__(self, repository: IProductRepository) -> None:
        self._repo = repository

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_product(self, dto: CreateProductDTO) -> Product:
        """Create a new product.

        Raises:
            InvalidProductData: if a referenced category/brand/skin is missing.
        """
        product = Product(
            name=dto.name,
            price=dto.price,
            quantity=dto.quantity,
            description=dto.description,
            image_url=dto.image_url,
            category=self._resolve_category(dto.category_id),
            brand=self._resolve_brand(dto.brand_id),
        )
        product = self._repo.save(product)

        if dto.skin_ids:
            skins = self._repo.get_skins(str(i) for i in dto.skin_ids)
            if len(skins) != len(set(dto.skin_ids)):
                raise InvalidProductData("Skin not found.")
            product.skins.set(skins)

        logger.info("product.created", product_id=str(product.id))
        return product

    @transaction.atomic
    def update_product(self, id: str, dto: UpdateProductDTO) -> Product:
        """Update an existing product with the supplied fields.

        Raises:
            ProductNotFound: if the product does not exist.
        """
        product = self._repo.get_by_id(id)
        if not product:
            raise ProductNotFound("Product not found.")

        for field in ("name", "price", "quantity", "description", "image_url"):
            value = getattr(dto, field)
            if value is not None:
                setattr(product, field, value)
        if dto.category_id is not None:
            product.category = self._resolve_category(dto.category_id)
        if dto.brand_id is not None:
            product.brand = self._resolve_brand(dto.brand_id)

        product = self._repo.save(product)
        logger.info("product.updated", product_id=str(id))
        return product

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_products(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> "models.QuerySet[Product]":
        """Return products, optionally filtered."""
        return self._repo.list(filters)

    def get_product(self, id: str) -> Product:
        """Retrieve a single product by ID.

        Raises:
            ProductNotFound: if the product does not exist.
        """
        product = self._repo.get_by_id(id)
        if not product:
            raise ProductNotFound("Product not found.")
        return product

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _resolve_category(self, category_id):
        if category_id is None:
            return None
        category = self._repo.get_category(str(category_id))
        if not category:
            raise InvalidProductData("Category not found.")
        return category

    def _resolve_brand(self, brand_id):
        if brand_id is None:
            return None
        brand = self._repo.get_brand(str(brand_id))
        if not brand:
            raise InvalidProductData("Brand not found.")
        return brand
