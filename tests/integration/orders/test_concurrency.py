"""Order workflow under concurrent callers.

- 10 payment callbacks for 10 Pending orders race for a product with
  **stock = 5**: exactly 5 orders become Paid and stock ends at 0.
- 10 cancellations of the same Paid order: one refund, one stock restore.

Uses ``TransactionTestCase`` so each thread sees committed rows and row
locks behave as they do in production.  SQLite has no
``SELECT ... FOR UPDATE`` and serializes writers on the whole file, so
these run on a locking backend only (``DATABASE_URL`` pointing at
PostgreSQL or MySQL).
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from decimal import Decimal

import django
from django.test import TransactionTestCase, skipUnlessDBFeature

from modules.accounts.models import Account, AccountRole
from modules.accounts.repositories.django_repository import AccountDjangoRepository
from modules.orders.constants import OrderStatus
from modules.orders.exceptions import InsufficientStock, InvalidOrderStatus
from modules.orders.models import Order, OrderItem
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderService
from modules.products.models import Product
from modules.products.repositories.django_repository import ProductDjangoRepository

logger = logging.getLogger(__name__)

INITIAL_STOCK = 5
NUM_WORKERS = 10
PAID_CALLBACK = {"vnp_ResponseCode": "00"}


def _service() -> OrderService:
    return OrderService(
        order_repository=OrderDjangoRepository(),
        account_repository=AccountDjangoRepository(),
        product_repository=ProductDjangoRepository(),
    )


def _run_concurrently(worker, args) -> list[str]:
    results = []
    with ThreadPoolExecutor(max_workers=NUM_WORKERS) as pool:
        futures = {pool.submit(worker, arg): arg for arg in args}
        for future in as_completed(futures):
            results.append(future.result())
    return results


@skipUnlessDBFeature("has_select_for_update")
class TestWorkflowConcurrency(TransactionTestCase):
    """Stock and balances stay consistent when requests race."""

    def setUp(self):
        self.customer = Account.objects.create_user(
            "race-customer",
            email="race-customer@example.com",
            password="testpass123",
            role=AccountRole.CUSTOMER,
        )
        self.admin = Account.objects.create_user(
            "race-admin",
            email="race-admin@example.com",
            password="testpass123",
            role=AccountRole.ADMIN,
        )
        self.product = Product.objects.create(
            name="Sunscreen", price=Decimal("20.00"), quantity=INITIAL_STOCK
        )

    def _order(self, status: str) -> Order:
        order = Order.objects.create(
            account=self.customer, status=status, total_amount=Decimal("20.00")
        )
        OrderItem.objects.create(
            order=order, product=self.product, quantity=1, unit_price=Decimal("20.00")
        )
        return order

    # Each worker opens its own connection, as separate requests would.

    def _confirm_in_thread(self, order_id: str) -> str:
        django.db.connections.close_all()
        try:
            _service().confirm_payment(order_id, PAID_CALLBACK)
            return "paid"
        except InsufficientStock:
            logger.warning("Order %s: InsufficientStock (expected)", order_id)
            return "insufficient"
        finally:
            django.db.connection.close()

    def _cancel_in_thread(self, order_id: str) -> str:
        django.db.connections.close_all()
        try:
            _service().cancel_order(order_id)
            return "canceled"
        except InvalidOrderStatus:
            return "rejected"
        finally:
            django.db.connection.close()

    def test_concurrent_payments_never_oversell(self):
        order_ids = [str(self._order(OrderStatus.PENDING).id) for _ in range(NUM_WORKERS)]

        results = _run_concurrently(self._confirm_in_thread, order_ids)

        self.assertEqual(results.count("paid"), INITIAL_STOCK)
        self.assertEqual(results.count("insufficient"), NUM_WORKERS - INITIAL_STOCK)

        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity, 0)
        self.assertEqual(
            Order.objects.filter(status=OrderStatus.PAID).count(), INITIAL_STOCK
        )
        # Orders that lost the race keep their Pending status
        self.assertEqual(
            Order.objects.filter(status=OrderStatus.PENDING).count(),
            NUM_WORKERS - INITIAL_STOCK,
        )

    def test_concurrent_cancellations_refund_once(self):
        order = self._order(OrderStatus.PAID)

        results = _run_concurrently(
            self._cancel_in_thread, [str(order.id)] * NUM_WORKERS
        )

        self.assertEqual(results.count("canceled"), 1)
        self.assertEqual(results.count("rejected"), NUM_WORKERS - 1)

        self.customer.refresh_from_db()
        self.admin.refresh_from_db()
        self.product.refresh_from_db()
        self.assertEqual(self.customer.balance, Decimal("10.00"))
        self.assertEqual(self.admin.balance, Decimal("10.00"))
        self.assertEqual(self.product.quantity, INITIAL_STOCK + 1)
        self.assertEqual(order.status_history.count(), 1)
