"""Refund email rendering and dispatch.

``dispatch_refund_email`` is called after the cancellation has committed.
It only schedules the Celery task; delivery happens in the worker.
Neither scheduling nor sending failures reach the API caller.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, Iterable, List

import structlog
from django.template.loader import render_to_string
from django.utils.html import strip_tags

logger = structlog.get_logger(__name__)

REFUND_SUBJECT = "Order refund confirmation"
REFUND_TEMPLATE = "notifications/refund_email.html"
UNKNOWN_PRODUCT = "Unknown Product"


def refund_line_items(items: Iterable[Any]) -> List[Dict[str, Any]]:
    """Flatten order items into the rows shown in the email."""
    rows = []
    for item in items:
        product = getattr(item, "product", None)
        rows.append(
            {
                "product_name": product.name if product else UNKNOWN_PRODUCT,
                "quantity": item.quantity,
                "price": item.unit_price,
                "total": item.subtotal,
            }
        )
    return rows


def render_refund_email(
    order_id: str, refund_amount: Decimal, items: List[Dict[str, Any]]
) -> tuple[str, str]:
    """Return ``(html, text)`` bodies for the refund email."""
    html = render_to_string(
        REFUND_TEMPLATE,
        {"order_id": order_id, "refund_amount": refund_amount, "items": items},
    )
    return html, strip_tags(html)


def dispatch_refund_email(order_id: str, refund_amount: Decimal) -> bool:
    """Queue the refund email; returns ``False`` if scheduling failed."""
    from modules.notifications.tasks import send_refund_email

    log = logger.bind(order_id=str(order_id))
    try:
        send_refund_email.delay(str(order_id), str(refund_amount))
    except Exception as exc:
        log.error("notification.refund_email_not_scheduled", error=str(exc))
        return False
    log.info("notification.refund_email_scheduled")
    return True
