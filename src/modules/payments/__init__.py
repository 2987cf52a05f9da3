"""Hosted payment gateway adapters."""

from modules.payments.vnpay import VNPayGateway

__all__ = ["VNPayGateway"]
