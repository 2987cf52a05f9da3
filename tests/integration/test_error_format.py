"""Every API error answers with a JSON body carrying ``message``."""

from uuid import uuid4

import pytest

pytestmark = pytest.mark.integration


class TestErrorFormat:
    def test_not_found(self, customer_client):
        response = customer_client.get(f"/api/order/{uuid4()}")
        assert response.status_code == 404
        assert response.json() == {"message": "Order not found."}

    def test_malformed_id_is_not_found(self, customer_client):
        response = customer_client.get("/api/product/not-a-uuid")
        assert response.status_code == 404
        assert response.json()["message"] == "Product not found."

    def test_serializer_errors_keep_fields(self, customer_client, customer):
        response = customer_client.post(
            "/api/order/add-to-cart",
            {"account": str(customer.id), "items": []},
            format="json",
        )
        assert response.status_code == 400
        body = response.json()
        assert body["message"] == "An order must contain at least one product."
        assert "items" in body["errors"]

    def test_unauthenticated(self, api_client):
        response = api_client.get("/api/product")
        assert response.status_code == 401
        assert set(response.json()) == {"message"}

    def test_method_not_allowed(self, customer_client):
        response = customer_client.get("/api/order/add-to-cart")
        assert response.status_code == 405
        assert "message" in response.json()
