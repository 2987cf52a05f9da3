"""Catalogue models.

``Product`` is the only model the order workflow touches: its ``price``
is snapshotted into order lines and its ``quantity`` is decremented when
an order is paid and restored when a paid order is canceled.

``Category``, ``Brand``, ``Skin`` and ``Feedback`` describe the catalogue
for browsing and are not read by the order workflow.
"""

from __future__ import annotations

from decimal import Decimal

import structlog
from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from modules.core.models import BaseModel

logger = structlog.get_logger(__name__)


class Category(BaseModel):
    name = models.CharField(max_length=120, unique=True)
    description = models.TextField(blank=True, default="")

    class Meta:
        db_table = "categories"
        ordering = ["name"]
        verbose_name_plural = "categories"

    def __str__(self) -> str:
        return self.name


class Brand(BaseModel):
    name = models.CharField(max_length=120, unique=True)
    description = models.TextField(blank=True, default="")

    class Meta:
        db_table = "brands"
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class Skin(BaseModel):
    """Skin type a product is suited for (e.g. oily, dry, sensitive)."""

    name = models.CharField(max_length=60, unique=True)

    class Meta:
        db_table = "skins"
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class Product(BaseModel):
    """Sellable item with a price and a stock counter.

    ``quantity`` never goes negative: the database rejects it
    (``PositiveIntegerField`` + check constraint) and the stock
    repository only decrements with a ``quantity >= n`` condition.
    """

    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    quantity = models.PositiveIntegerField(default=0)
    image_url = models.URLField(max_length=500, blank=True, default="")
    category = models.ForeignKey(
        Category,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="products",
    )
    brand = models.ForeignKey(
        Brand,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="products",
    )
    skins = models.ManyToManyField(Skin, blank=True, related_name="products")

    class Meta:
        db_table = "products"
        ordering = ["name"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(price__gt=0),
                name="products_price_positive",
            ),
            models.CheckConstraint(
                condition=models.Q(quantity__gte=0),
                name="products_quantity_non_negative",
            ),
        ]

    def clean(self) -> None:
        super().clean()
        if self.price is not None and self.price <= 0:
            raise ValidationError({"price": "Price must be greater than zero."})

    def save(self, *args, **kwargs) -> None:
        is_new = self._state.adding
        super().save(*args, **kwargs)
        if is_new:
            logger.info(
                "product_created",
                product_id=str(self.id),
                name=self.name,
                quantity=self.quantity,
            )

    def __str__(self) -> str:
        return self.name


class Feedback(BaseModel):
    """Customer review of a product."""

    account = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="feedbacks",
    )
    product = models.ForeignKey(
        Product,
        on_delete=models.CASCADE,
        related_name="feedbacks",
    )
    rating = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(5)],
    )
    comment = models.TextField(blank=True, default="")

    class Meta:
        db_table = "feedbacks"
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(rating__gte=1) & models.Q(rating__lte=5),
                name="feedbacks_rating_range",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.product} ({self.rating}/5)"
