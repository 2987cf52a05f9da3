"""Shipping and delivery confirmation endpoints."""

import os
from uuid import uuid4

import pytest
from django.conf import settings
from django.core.files.uploadedfile import SimpleUploadedFile

from modules.orders.constants import OrderStatus

pytestmark = pytest.mark.integration

PNG_BYTES = (
    b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01"
    b"\x08\x06\x00\x00\x00\x1f\x15\xc4\x89\x00\x00\x00\rIDATx\x9cc\xf8\x0f"
    b"\x00\x00\x01\x01\x00\x05\x18\xd8N\x00\x00\x00\x00IEND\xaeB`\x82"
)


def _photo(name="proof.png", content_type="image/png"):
    return SimpleUploadedFile(name, PNG_BYTES, content_type=content_type)


@pytest.fixture()
def paid_order(customer, make_product, make_order):
    return make_order(customer, [(make_product(), 1)], OrderStatus.PAID)


class TestUpdateShipping:
    def test_paid_becomes_shipping(self, shipper_client, paid_order):
        response = shipper_client.patch(f"/api/order/update-shipping/{paid_order.id}")

        assert response.status_code == 200
        assert response.json() == {
            "message": "Order status updated to Shipping.",
            "orderId": str(paid_order.id),
        }
        paid_order.refresh_from_db()
        assert paid_order.status == OrderStatus.SHIPPING

    @pytest.mark.parametrize(
        "status", [OrderStatus.PENDING, OrderStatus.SHIPPING, OrderStatus.CANCELED]
    )
    def test_other_states_rejected(
        self, shipper_client, customer, make_product, make_order, status
    ):
        order = make_order(customer, [(make_product(), 1)], status)

        response = shipper_client.patch(f"/api/order/update-shipping/{order.id}")

        assert response.status_code == 400
        assert response.json() == {
            "message": "Only paid orders can be marked as shipping."
        }
        order.refresh_from_db()
        assert order.status == status

    def test_unknown_order(self, shipper_client):
        response = shipper_client.patch(f"/api/order/update-shipping/{uuid4()}")
        assert response.status_code == 404
        assert response.json() == {"message": "Order not found."}


class TestConfirmDelivery:
    def _url(self, order_id):
        return f"/api/order/confirm-delivery/{order_id}"

    def test_shipping_becomes_delivered_with_photo(
        self, shipper_client, customer, make_product, make_order
    ):
        order = make_order(customer, [(make_product(), 1)], OrderStatus.SHIPPING)

        response = shipper_client.post(
            self._url(order.id), {"deliveryImage": _photo()}, format="multipart"
        )

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Order delivery confirmed."
        assert body["orderId"] == str(order.id)
        prefix = f"https://shop.example.com/uploads/deliveryConfirmation/delivery-{order.id}-"
        assert body["imagePath"].startswith(prefix)
        assert body["imagePath"].endswith(".png")

        order.refresh_from_db()
        assert order.status == OrderStatus.DELIVERED
        assert order.image_confirm_delivered == body["imagePath"]

        stored = body["imagePath"].split("/uploads/", 1)[1]
        assert os.path.exists(os.path.join(settings.MEDIA_ROOT, stored))

    def test_photo_required(self, shipper_client, customer, make_product, make_order):
        order = make_order(customer, [(make_product(), 1)], OrderStatus.SHIPPING)

        response = shipper_client.post(self._url(order.id), {}, format="multipart")

        assert response.status_code == 400
        assert response.json() == {
            "message": "Delivery confirmation image is required."
        }
        order.refresh_from_db()
        assert order.status == OrderStatus.SHIPPING

    def test_photo_required_for_json_body(
        self, shipper_client, customer, make_product, make_order
    ):
        order = make_order(customer, [(make_product(), 1)], OrderStatus.SHIPPING)

        response = shipper_client.post(self._url(order.id), {}, format="json")

        assert response.status_code == 400
        assert response.json() == {
            "message": "Delivery confirmation image is required."
        }
        order.refresh_from_db()
        assert order.status == OrderStatus.SHIPPING

    def test_photo_checked_before_the_order(self, shipper_client):
        response = shipper_client.post(self._url(uuid4()), {}, format="multipart")
        assert response.status_code == 400

    def test_rejects_non_images(self, shipper_client, customer, make_product, make_order):
        order = make_order(customer, [(make_product(), 1)], OrderStatus.SHIPPING)
        pdf = SimpleUploadedFile("proof.pdf", b"%PDF-1.4", content_type="application/pdf")

        response = shipper_client.post(
            self._url(order.id), {"deliveryImage": pdf}, format="multipart"
        )

        assert response.status_code == 400
        assert response.json() == {
            "message": "Invalid file type. Only JPEG, PNG, and GIF are allowed."
        }

    def test_paid_order_cannot_be_delivered(self, shipper_client, paid_order):
        response = shipper_client.post(
            self._url(paid_order.id), {"deliveryImage": _photo()}, format="multipart"
        )

        assert response.status_code == 400
        assert response.json() == {
            "message": "Only shipping orders can be confirmed as delivered."
        }
        paid_order.refresh_from_db()
        assert paid_order.image_confirm_delivered is None

    def test_full_lifecycle_history(self, shipper_client, paid_order):
        shipper_client.patch(f"/api/order/update-shipping/{paid_order.id}")
        shipper_client.post(
            self._url(paid_order.id), {"deliveryImage": _photo()}, format="multipart"
        )

        transitions = list(
            paid_order.status_history.values_list("old_status", "new_status")
        )
        assert transitions == [
            (OrderStatus.PAID, OrderStatus.SHIPPING),
            (OrderStatus.SHIPPING, OrderStatus.DELIVERED),
        ]


class TestUploadsRoute:
    def test_not_served_by_django_outside_debug(self, api_client):
        # pytest-django runs with DEBUG off, as production does
        os.makedirs(os.path.join(settings.MEDIA_ROOT, "deliveryConfirmation"), exist_ok=True)
        with open(
            os.path.join(settings.MEDIA_ROOT, "deliveryConfirmation", "kept.png"), "wb"
        ) as fh:
            fh.write(PNG_BYTES)

        response = api_client.get("/uploads/deliveryConfirmation/kept.png")

        assert response.status_code == 404
