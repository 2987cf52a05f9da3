"""GET /api/order/confirm-payment/{order_id} (gateway return URL)"""

from urllib.parse import parse_qs, urlsplit

import pytest

from modules.orders.constants import OrderStatus
from modules.payments import VNPayGateway
from modules.payments.vnpay import _sign

pytestmark = pytest.mark.integration


def _redirect(response):
    location = urlsplit(response["Location"])
    return location, {k: v[0] for k, v in parse_qs(location.query).items()}


def _callback(client, order, code="00", **extra):
    params = {"vnp_ResponseCode": code, "vnp_TxnRef": str(order.id), **extra}
    return client.get(f"/api/order/confirm-payment/{order.id}", params)


class TestConfirmPayment:
    def test_success_marks_paid_and_takes_stock(
        self, api_client, customer, make_product, make_order
    ):
        toner = make_product(quantity=5)
        order = make_order(customer, [(toner, 2)])

        response = _callback(api_client, order)

        assert response.status_code == 302
        location, params = _redirect(response)
        assert location.scheme == "exp"
        assert params == {"status": "success", "orderId": str(order.id)}

        order.refresh_from_db()
        toner.refresh_from_db()
        assert order.status == OrderStatus.PAID
        assert toner.quantity == 3
        history = order.status_history.last()
        assert (history.old_status, history.new_status) == (
            OrderStatus.PENDING,
            OrderStatus.PAID,
        )

    def test_redirect_percent_encodes_spaces(self, api_client, customer, make_product, make_order):
        order = make_order(customer, [(make_product(), 1)])

        response = _callback(api_client, order, code="24")

        assert "message=Payment%20unsuccessful" in response["Location"]

    def test_declined_leaves_order_pending(
        self, api_client, customer, make_product, make_order
    ):
        toner = make_product(quantity=5)
        order = make_order(customer, [(toner, 1)])

        _, params = _redirect(_callback(api_client, order, code="24"))

        assert params == {"status": "error", "message": "Payment unsuccessful"}
        order.refresh_from_db()
        toner.refresh_from_db()
        assert order.status == OrderStatus.PENDING
        assert toner.quantity == 5

    def test_duplicate_callback_is_rejected(
        self, api_client, customer, make_product, make_order
    ):
        toner = make_product(quantity=5)
        order = make_order(customer, [(toner, 2)])

        _callback(api_client, order)
        _, params = _redirect(_callback(api_client, order))

        assert params == {"status": "error", "message": "Order already processed"}
        toner.refresh_from_db()
        assert toner.quantity == 3
        assert order.status_history.filter(new_status=OrderStatus.PAID).count() == 1

    def test_unknown_order(self, api_client):
        response = api_client.get(
            "/api/order/confirm-payment/0190b6f2-0000-7000-8000-000000000000",
            {"vnp_ResponseCode": "00"},
        )
        _, params = _redirect(response)
        assert params == {"status": "error", "message": "Order not found"}

    def test_stock_shortfall_rolls_back_everything(
        self, api_client, customer, make_product, make_order
    ):
        plenty = make_product(name="A plenty", quantity=10)
        scarce = make_product(name="B scarce", quantity=5)
        order = make_order(customer, [(plenty, 2), (scarce, 3)])
        # stock dropped after the order was placed
        type(scarce).objects.filter(pk=scarce.pk).update(quantity=1)

        _, params = _redirect(_callback(api_client, order))

        assert params == {"status": "error", "message": "Insufficient stock"}
        order.refresh_from_db()
        plenty.refresh_from_db()
        scarce.refresh_from_db()
        assert order.status == OrderStatus.PENDING
        assert plenty.quantity == 10
        assert scarce.quantity == 1

    def test_signature_enforced_when_enabled(
        self, api_client, customer, make_product, make_order, settings
    ):
        settings.VNPAY = {**settings.VNPAY, "VERIFY_CALLBACK_SIGNATURE": True}
        order = make_order(customer, [(make_product(), 1)])

        _, params = _redirect(_callback(api_client, order, vnp_SecureHash="forged"))

        assert params == {"status": "error", "message": "Invalid payment signature"}
        order.refresh_from_db()
        assert order.status == OrderStatus.PENDING

    def test_valid_signature_accepted_when_enabled(
        self, api_client, customer, make_product, make_order, settings
    ):
        settings.VNPAY = {**settings.VNPAY, "VERIFY_CALLBACK_SIGNATURE": True}
        order = make_order(customer, [(make_product(), 1)])
        url = VNPayGateway().build_payment_url(
            str(order.id), order.total_amount, "127.0.0.1", "https://r"
        )
        signed = {k: v[0] for k, v in parse_qs(urlsplit(url).query).items()}
        signed.pop("vnp_SecureHash")
        signed["vnp_ResponseCode"] = "00"
        signed["vnp_SecureHash"] = _sign(settings.VNPAY["HASH_SECRET"], signed)

        response = api_client.get(f"/api/order/confirm-payment/{order.id}", signed)

        _, params = _redirect(response)
        assert params["status"] == "success"

    def test_unexpected_error_still_redirects(
        self, api_client, customer, make_product, make_order, monkeypatch
    ):
        order = make_order(customer, [(make_product(), 1)])

        def explode(self, id, quantity):
            raise RuntimeError("database went away")

        monkeypatch.setattr(
            "modules.products.repositories.django_repository."
            "ProductDjangoRepository.decrement_stock",
            explode,
        )

        response = _callback(api_client, order)

        assert response.status_code == 302
        _, params = _redirect(response)
        assert params["status"] == "error"
