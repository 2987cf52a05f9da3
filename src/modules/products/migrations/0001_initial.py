from decimal import Decimal

import django.core.validators
import django.db.models.deletion
import uuid6
from django.conf import settings
from django.db import migrations, models


def _base_fields():
    return [
        (
            "id",
            models.UUIDField(
                default=uuid6.uuid7,
                editable=False,
                primary_key=True,
                serialize=False,
            ),
        ),
        ("created_at", models.DateTimeField(auto_now_add=True)),
        ("updated_at", models.DateTimeField(auto_now=True)),
    ]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Category",
            fields=_base_fields()
            + [
                ("name", models.CharField(max_length=120, unique=True)),
                ("description", models.TextField(blank=True, default="")),
            ],
            options={
                "db_table": "categories",
                "ordering": ["name"],
                "verbose_name_plural": "categories",
            },
        ),
        migrations.CreateModel(
            name="Brand",
            fields=_base_fields()
            + [
                ("name", models.CharField(max_length=120, unique=True)),
                ("description", models.TextField(blank=True, default="")),
            ],
            options={"db_table": "brands", "ordering": ["name"]},
        ),
        migrations.CreateModel(
            name="Skin",
            fields=_base_fields()
            + [
                ("name", models.CharField(max_length=60, unique=True)),
            ],
            options={"db_table": "skins", "ordering": ["name"]},
        ),
        migrations.CreateModel(
            name="Product",
            fields=_base_fields()
            + [
                ("name", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True, default="")),
                (
                    "price",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=12,
                        validators=[
                            django.core.validators.MinValueValidator(Decimal("0.01"))
                        ],
                    ),
                ),
                ("quantity", models.PositiveIntegerField(default=0)),
                (
                    "image_url",
                    models.URLField(blank=True, default="", max_length=500),
                ),
                (
                    "category",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="products",
                        to="products.category",
                    ),
                ),
                (
                    "brand",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="products",
                        to="products.brand",
                    ),
                ),
                (
                    "skins",
                    models.ManyToManyField(
                        blank=True, related_name="products", to="products.skin"
                    ),
                ),
            ],
            options={
                "db_table": "products",
                "ordering": ["name"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(price__gt=0),
                        name="products_price_positive",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(quantity__gte=0),
                        name="products_quantity_non_negative",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Feedback",
            fields=_base_fields()
            + [
                (
                    "rating",
                    models.PositiveSmallIntegerField(
                        validators=[
                            django.core.validators.MinValueValidator(1),
                            django.core.validators.MaxValueValidator(5),
                        ]
                    ),
                ),
                ("comment", models.TextField(blank=True, default="")),
                (
                    "account",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="feedbacks",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="feedbacks",
                        to="products.product",
                    ),
                ),
            ],
            options={
                "db_table": "feedbacks",
                "ordering": ["-created_at"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(rating__gte=1) & models.Q(rating__lte=5),
                        name="feedbacks_rating_range",
                    ),
                ],
            },
        ),
    ]
