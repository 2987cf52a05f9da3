"""Integration tests for SimpleJWT authentication and role guards.

Validates:
  - /health is public.
  - Protected endpoints return 401 without a valid token.
  - Tokens issued by /api/auth/token are accepted.
  - Role-restricted endpoints return 403 for other roles.
"""

import pytest

pytestmark = pytest.mark.integration

PROTECTED = "/api/order/shipper-orders"


class TestPublicEndpoints:
    def test_health_is_public(self, client):
        response = client.get("/health")
        assert response.status_code == 200

    def test_payment_callback_is_public(self, api_client):
        response = api_client.get("/api/order/confirm-payment/unknown")
        assert response.status_code == 302


class TestProtectedEndpoints:
    def test_no_token_returns_401(self, api_client):
        response = api_client.get(PROTECTED)
        assert response.status_code == 401
        assert "message" in response.json()

    def test_invalid_token_returns_401(self, api_client):
        api_client.credentials(HTTP_AUTHORIZATION="Bearer invalid.token.here")
        response = api_client.get(PROTECTED)
        assert response.status_code == 401

    def test_malformed_auth_header_returns_401(self, api_client):
        api_client.credentials(HTTP_AUTHORIZATION="Token some-token")
        response = api_client.get(PROTECTED)
        assert response.status_code == 401

    def test_401_includes_www_authenticate_header(self, api_client):
        response = api_client.get(PROTECTED)
        assert "Bearer" in response.get("WWW-Authenticate", "")


class TestTokenFlow:
    def test_obtain_and_use_token(self, api_client, shipper):
        response = api_client.post(
            "/api/auth/token",
            {"username": "shipper", "password": "testpass123"},
            format="json",
        )
        assert response.status_code == 200
        access = response.json()["access"]

        api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {access}")
        assert api_client.get(PROTECTED).status_code == 200

    def test_wrong_password(self, api_client, shipper):
        response = api_client.post(
            "/api/auth/token",
            {"username": "shipper", "password": "wrong"},
            format="json",
        )
        assert response.status_code == 401


class TestRoles:
    def test_customer_cannot_list_shipper_orders(self, customer_client):
        response = customer_client.get(PROTECTED)
        assert response.status_code == 403
        assert "admin, shipper" in response.json()["message"]

    def test_shipper_cannot_list_account_orders(self, shipper_client, customer):
        response = shipper_client.get(f"/api/order/account/{customer.id}")
        assert response.status_code == 403
