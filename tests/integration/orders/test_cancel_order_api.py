"""POST /api/order/cancel-order/{order_id}"""

from decimal import Decimal
from uuid import uuid4

import pytest
from django.core import mail

from modules.core.models import OutboxEvent
from modules.orders.constants import OrderStatus

pytestmark = pytest.mark.integration

CANCEL_MESSAGE = (
    "Order has been canceled and 50% refund issued. "
    "Product quantities have been updated in the inventory."
)


def _url(order):
    return f"/api/order/cancel-order/{order.id}"


@pytest.fixture()
def toner(make_product):
    return make_product(name="Toner", price="10.00", quantity=3)


@pytest.fixture()
def paid_order(customer, toner, make_order):
    return make_order(customer, [(toner, 2)], OrderStatus.PAID)


class TestCancelOrder:
    def test_refunds_and_restores_stock(
        self, customer_client, customer, admin_account, toner, paid_order
    ):
        response = customer_client.post(_url(paid_order))

        assert response.status_code == 200
        assert response.json() == {"message": CANCEL_MESSAGE, "refundAmount": "10.00"}

        paid_order.refresh_from_db()
        customer.refresh_from_db()
        admin_account.refresh_from_db()
        toner.refresh_from_db()
        assert paid_order.status == OrderStatus.CANCELED
        assert customer.balance == Decimal("10.00")
        assert admin_account.balance == Decimal("10.00")
        assert toner.quantity == 5

    def test_admin_credit_disabled(
        self, customer_client, customer, admin_account, paid_order, settings
    ):
        settings.REFUND_CREDIT_ADMIN_ACCOUNT = False

        customer_client.post(_url(paid_order))

        admin_account.refresh_from_db()
        customer.refresh_from_db()
        assert admin_account.balance == Decimal("0.00")
        assert customer.balance == Decimal("10.00")

    def test_sends_refund_email_after_commit(
        self, customer_client, paid_order, django_capture_on_commit_callbacks
    ):
        with django_capture_on_commit_callbacks(execute=True):
            customer_client.post(_url(paid_order))

        assert len(mail.outbox) == 1
        message = mail.outbox[0]
        assert message.to == ["customer@example.com"]
        assert str(paid_order.id) in message.body
        assert "Toner" in message.body

        event = OutboxEvent.objects.get(
            aggregate_id=str(paid_order.id), event_type="OrderCanceled"
        )
        assert event.payload["refund_amount"] == "10.00"
        assert event.status == "PUBLISHED"

    def test_email_failure_does_not_undo_cancellation(
        self,
        customer_client,
        paid_order,
        monkeypatch,
        django_capture_on_commit_callbacks,
    ):
        def boom(self, fail_silently=False):
            raise ConnectionRefusedError("smtp down")

        monkeypatch.setattr("django.core.mail.EmailMultiAlternatives.send", boom)

        with django_capture_on_commit_callbacks(execute=True):
            response = customer_client.post(_url(paid_order))

        assert response.status_code == 200
        paid_order.refresh_from_db()
        assert paid_order.status == OrderStatus.CANCELED

    def test_second_cancel_is_rejected(self, customer_client, customer, paid_order):
        customer_client.post(_url(paid_order))
        response = customer_client.post(_url(paid_order))

        assert response.status_code == 400
        assert response.json() == {"message": "Only paid orders can be canceled."}
        customer.refresh_from_db()
        assert customer.balance == Decimal("10.00")

    @pytest.mark.parametrize(
        "status", [OrderStatus.PENDING, OrderStatus.SHIPPING, OrderStatus.DELIVERED]
    )
    def test_only_paid_orders(
        self, customer_client, customer, toner, make_order, status
    ):
        order = make_order(customer, [(toner, 1)], status)

        response = customer_client.post(_url(order))

        assert response.status_code == 400
        customer.refresh_from_db()
        toner.refresh_from_db()
        assert customer.balance == Decimal("0.00")
        assert toner.quantity == 3
        assert mail.outbox == []

    def test_unknown_order(self, customer_client):
        response = customer_client.post(f"/api/order/cancel-order/{uuid4()}")
        assert response.status_code == 404
        assert response.json() == {"message": "Order not found."}

    def test_odd_cent_total_rounds_half_up(
        self, customer_client, customer, make_product, make_order
    ):
        order = make_order(
            customer, [(make_product(price="0.03", quantity=5), 1)], OrderStatus.PAID
        )

        response = customer_client.post(_url(order))

        assert response.json()["refundAmount"] == "0.02"
