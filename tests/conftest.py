from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from modules.accounts.models import Account, AccountRole
from modules.orders.constants import OrderStatus
from modules.orders.models import Order, OrderItem
from modules.products.models import Product


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------


@pytest.fixture()
def customer():
    return Account.objects.create_user(
        "customer",
        email="customer@example.com",
        password="testpass123",
        role=AccountRole.CUSTOMER,
    )


@pytest.fixture()
def admin_account():
    return Account.objects.create_user(
        "admin",
        email="admin@example.com",
        password="testpass123",
        role=AccountRole.ADMIN,
    )


@pytest.fixture()
def shipper():
    return Account.objects.create_user(
        "shipper",
        email="shipper@example.com",
        password="testpass123",
        role=AccountRole.SHIPPER,
    )


def _client_for(account):
    client = APIClient()
    client.force_authenticate(user=account)
    return client


@pytest.fixture()
def customer_client(customer):
    return _client_for(customer)


@pytest.fixture()
def admin_client(admin_account):
    return _client_for(admin_account)


@pytest.fixture()
def shipper_client(shipper):
    return _client_for(shipper)


# ---------------------------------------------------------------------------
# Catalogue and orders
# ---------------------------------------------------------------------------


@pytest.fixture()
def make_product():
    def _make(name="Serum", price="10.00", quantity=10, **extra):
        return Product.objects.create(
            name=name, price=Decimal(price), quantity=quantity, **extra
        )

    return _make


@pytest.fixture()
def make_order():
    """Create an order directly in *status* with ``(product, qty)`` lines."""

    def _make(account, lines, status=OrderStatus.PENDING):
        order = Order.objects.create(account=account, status=status)
        total = Decimal("0.00")
        for product, quantity in lines:
            item = OrderItem.objects.create(
                order=order,
                product=product,
                quantity=quantity,
                unit_price=product.price,
            )
            total += item.subtotal
        order.total_amount = total
        order.save(update_fields=["total_amount"])
        return order

    return _make
