from __future__ import annotations

import random
from datetime import timedelta
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.utils import timezone

from modules.accounts.models import Account, AccountRole
from modules.orders.constants import OrderStatus
from modules.orders.models import Order, OrderItem, OrderStatusHistory
from modules.products.models import Brand, Category, Product, Skin

# Status path each seeded order has walked through
STATUS_PATHS = {
    OrderStatus.PENDING: [OrderStatus.PENDING],
    OrderStatus.PAID: [OrderStatus.PENDING, OrderStatus.PAID],
    OrderStatus.SHIPPING: [OrderStatus.PENDING, OrderStatus.PAID, OrderStatus.SHIPPING],
    OrderStatus.DELIVERED: [
        OrderStatus.PENDING,
        OrderStatus.PAID,
        OrderStatus.SHIPPING,
        OrderStatus.DELIVERED,
    ],
    OrderStatus.CANCELED: [OrderStatus.PENDING, OrderStatus.PAID, OrderStatus.CANCELED],
}


class Command(BaseCommand):
    help = "Seed database with realistic development data."

    def handle(self, *args, **options):
        random.seed(42)
        self.stdout.write("Seeding development data...")

        customers = self._seed_accounts()
        products = self._seed_products()
        orders_created = self._seed_orders(customers, products)

        self.stdout.write(
            self.style.SUCCESS(
                "Seed completed: "
                f"customers={len(customers)}, "
                f"products={len(products)}, "
                f"orders={orders_created}"
            )
        )

    def _seed_accounts(self) -> list[Account]:
        self.stdout.write("Creating accounts...")
        if not Account.objects.filter(username="admin").exists():
            Account.objects.create_superuser(
                "admin",
                email="admin@example.com",
                password="admin123",
                role=AccountRole.ADMIN,
            )
        if not Account.objects.filter(username="shipper").exists():
            Account.objects.create_user(
                "shipper",
                email="shipper@example.com",
                password="shipper123",
                role=AccountRole.SHIPPER,
            )

        customers: list[Account] = []
        for username in ("lan", "minh", "thao", "huy", "ngoc"):
            account = Account.objects.filter(username=username).first()
            if account is None:
                account = Account.objects.create_user(
                    username,
                    email=f"{username}@example.com",
                    password=f"{username}123",
                    role=AccountRole.CUSTOMER,
                    balance=Decimal(random.randint(0, 50) * 10000),
                )
            customers.append(account)
        self.stdout.write(self.style.SUCCESS("Creating accounts... Done!"))
        return customers

    def _seed_products(self) -> list[Product]:
        self.stdout.write("Creating products...")
        skins = [
            Skin.objects.get_or_create(name=name)[0]
            for name in ("Oily", "Dry", "Combination", "Sensitive", "Normal")
        ]
        catalog = [
            ("Gentle Foaming Cleanser", "Cleansers", "CeraVe", Decimal("320000")),
            ("Hydrating Cleanser", "Cleansers", "CeraVe", Decimal("350000")),
            ("Niacinamide 10% Serum", "Serums", "The Ordinary", Decimal("290000")),
            ("Hyaluronic Acid 2% + B5", "Serums", "The Ordinary", Decimal("260000")),
            ("Effaclar Duo+", "Treatments", "La Roche-Posay", Decimal("455000")),
            ("Cicaplast Baume B5", "Moisturizers", "La Roche-Posay", Decimal("380000")),
            ("Water Bank Cream", "Moisturizers", "Laneige", Decimal("720000")),
            ("Lip Sleeping Mask", "Treatments", "Laneige", Decimal("410000")),
            ("Anthelios UVMune 400", "Sunscreens", "La Roche-Posay", Decimal("520000")),
            ("Mineral UV Filters SPF 30", "Sunscreens", "The Ordinary", Decimal("240000")),
        ]
        products: list[Product] = []
        for name, category_name, brand_name, price in catalog:
            category, _ = Category.objects.get_or_create(name=category_name)
            brand, _ = Brand.objects.get_or_create(name=brand_name)
            product, created = Product.objects.get_or_create(
                name=name,
                defaults={
                    "description": f"{brand_name} {category_name.lower()}",
                    "price": price,
                    "quantity": random.randint(10, 200),
                    "category": category,
                    "brand": brand,
                },
            )
            if created:
                product.skins.set(random.sample(skins, k=random.randint(1, 3)))
            products.append(product)
        self.stdout.write(self.style.SUCCESS("Creating products... Done!"))
        return products

    def _seed_orders(self, customers: list[Account], products: list[Product]) -> int:
        self.stdout.write("Creating orders...")
        if Order.objects.exists():
            self.stdout.write(self.style.WARNING("Skipping orders (already seeded)."))
            return 0
        if not customers or not products:
            self.stdout.write(self.style.WARNING("Skipping orders (no customers/products)."))
            return 0

        statuses = list(STATUS_PATHS)
        weights = [0.2, 0.25, 0.2, 0.25, 0.1]

        for _ in range(30):
            final_status = random.choices(statuses, weights=weights, k=1)[0]
            order = Order.objects.create(
                account=random.choice(customers), status=final_status
            )
            created_at = timezone.now() - timedelta(days=random.randint(0, 30))
            Order.objects.filter(id=order.id).update(created_at=created_at)

            total = Decimal("0.00")
            for product in random.sample(products, k=random.randint(1, 4)):
                item = OrderItem.objects.create(
                    order=order,
                    product=product,
                    quantity=random.randint(1, 3),
                    unit_price=product.price,
                )
                total += item.subtotal
            Order.objects.filter(id=order.id).update(total_amount=total)

            previous = None
            for status in STATUS_PATHS[final_status]:
                OrderStatusHistory.objects.create(
                    order=order, old_status=previous, new_status=status, notes="Seed"
                )
                previous = status

        self.stdout.write(self.style.SUCCESS("Creating orders... Done!"))
        return 30
