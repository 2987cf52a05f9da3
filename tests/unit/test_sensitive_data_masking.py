import pytest

pytestmark = pytest.mark.unit


class TestSensitiveDataMasking:
    def test_password_masked(self):
        from config.settings import mask_sensitive_data

        event_dict = {"event": "test", "data": "password='s3cret123'"}
        result = mask_sensitive_data(None, None, event_dict)
        assert "s3cret123" not in result["data"]
        assert "***MASKED***" in result["data"]

    def test_token_masked(self):
        from config.settings import mask_sensitive_data

        event_dict = {"event": "test", "header": "token=abc123xyz"}
        result = mask_sensitive_data(None, None, event_dict)
        assert "abc123xyz" not in result["header"]
        assert "***MASKED***" in result["header"]

    def test_authorization_header_masked(self):
        from config.settings import mask_sensitive_data

        event_dict = {"event": "test", "header": "Authorization: eyJhbGciOi.payload"}
        result = mask_sensitive_data(None, None, event_dict)
        assert "eyJhbGciOi" not in result["header"]

    def test_gateway_secure_hash_masked(self):
        from config.settings import mask_sensitive_data

        query = "vnp_Amount=100000&vnp_SecureHash=deadbeefcafe&vnp_TxnRef=1"
        result = mask_sensitive_data(None, None, {"event": "test", "query": query})
        assert "deadbeefcafe" not in result["query"]
        assert "vnp_Amount=100000" in result["query"]
        assert "vnp_TxnRef=1" in result["query"]

    def test_non_sensitive_data_unchanged(self):
        from config.settings import mask_sensitive_data

        event_dict = {"event": "order.placed", "order_id": "0190a1b2-0000"}
        result = mask_sensitive_data(None, None, event_dict)
        assert result["order_id"] == "0190a1b2-0000"
        assert result["event"] == "order.placed"

    def test_non_string_values_untouched(self):
        from config.settings import mask_sensitive_data

        result = mask_sensitive_data(None, None, {"event": "test", "count": 3})
        assert result["count"] == 3
