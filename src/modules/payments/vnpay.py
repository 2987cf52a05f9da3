"""VNPay hosted-payment adapter.

Builds the signed redirect URL for the VNPay payment page and verifies
the query string VNPay appends when it sends the buyer back.

Signing: parameters are sorted by key, form-urlencoded and signed with
HMAC-SHA512 using the merchant hash secret.  ``vnp_Amount`` is expressed
in the smallest currency unit (amount * 100).
"""

from __future__ import annotations

import hashlib
import hmac
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urlencode
from zoneinfo import ZoneInfo

import structlog
from django.conf import settings
from django.utils import timezone

from modules.payments.exceptions import PaymentGatewayError

logger = structlog.get_logger(__name__)

SUCCESS_CODE = "00"
DATE_FORMAT = "%Y%m%d%H%M%S"
# VNPay timestamps are interpreted as Vietnam local time
GATEWAY_TZ = ZoneInfo("Asia/Ho_Chi_Minh")
SIGNATURE_FIELDS = ("vnp_SecureHash", "vnp_SecureHashType")


def _sign(secret: str, params: Mapping[str, Any]) -> str:
    query = urlencode(sorted((k, str(v)) for k, v in params.items()))
    return hmac.new(
        secret.encode("utf-8"), query.encode("utf-8"), hashlib.sha512
    ).hexdigest()


def format_gateway_date(value: datetime) -> str:
    if timezone.is_naive(value):
        value = timezone.make_aware(value)
    return value.astimezone(GATEWAY_TZ).strftime(DATE_FORMAT)


class VNPayGateway:
    """Stateless adapter around the VNPay ``pay`` command.

    Configuration comes from ``settings.VNPAY`` unless *options* is given.
    """

    def __init__(self, options: Optional[Dict[str, Any]] = None) -> None:
        self._options = dict(options if options is not None else settings.VNPAY)

    @property
    def payment_url(self) -> str:
        return self._options["HOST"].rstrip("/") + self._options["PAYMENT_PATH"]

    def build_payment_url(
        self,
        order_id: str,
        amount: Decimal,
        ip_addr: str,
        return_url: str,
        created_at: Optional[datetime] = None,
    ) -> str:
        """Return the hosted-payment URL for an order.

        The link expires ``VNPAY["EXPIRE_AFTER"]`` after *created_at*.

        Raises:
            PaymentGatewayError: if the merchant code or secret is missing.
        """
        tmn_code = self._options.get("TMN_CODE")
        secret = self._options.get("HASH_SECRET")
        if not tmn_code or not secret:
            raise PaymentGatewayError("VNPay merchant credentials are not configured.")

        created_at = created_at or timezone.now()
        expire_at = created_at + self._options.get("EXPIRE_AFTER", timedelta(days=1))

        params = {
            "vnp_Version": self._options["VERSION"],
            "vnp_Command": "pay",
            "vnp_TmnCode": tmn_code,
            "vnp_Locale": self._options["LOCALE"],
            "vnp_CurrCode": self._options["CURRENCY"],
            "vnp_TxnRef": str(order_id),
            "vnp_OrderInfo": f"Thanh toan don hang {order_id}",
            "vnp_OrderType": self._options["ORDER_TYPE"],
            "vnp_Amount": int(Decimal(amount) * 100),
            "vnp_ReturnUrl": return_url,
            "vnp_IpAddr": ip_addr or "127.0.0.1",
            "vnp_CreateDate": format_gateway_date(created_at),
            "vnp_ExpireDate": format_gateway_date(expire_at),
        }
        params["vnp_SecureHash"] = _sign(secret, params)

        logger.info(
            "vnpay.payment_url_built",
            order_id=str(order_id),
            amount=params["vnp_Amount"],
        )
        return f"{self.payment_url}?{urlencode(params)}"

    def verify_callback(self, params: Mapping[str, Any]) -> bool:
        """Check ``vnp_SecureHash`` against the other ``vnp_*`` parameters."""
        received = params.get("vnp_SecureHash")
        secret = self._options.get("HASH_SECRET")
        if not received or not secret:
            return False

        signed = {
            k: v
            for k, v in params.items()
            if k.startswith("vnp_") and k not in SIGNATURE_FIELDS
        }
        expected = _sign(secret, signed)
        valid = hmac.compare_digest(expected, str(received).lower())
        if not valid:
            logger.warning("vnpay.invalid_signature", txn_ref=params.get("vnp_TxnRef"))
        return valid

    @staticmethod
    def is_success(response_code: Optional[str]) -> bool:
        return response_code == SUCCESS_CODE
