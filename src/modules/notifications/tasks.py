"""Asynchronous notification tasks."""

from __future__ import annotations

from decimal import Decimal

import structlog
from celery import shared_task
from django.conf import settings
from django.core.mail import EmailMultiAlternatives

from modules.notifications.services import (
    REFUND_SUBJECT,
    refund_line_items,
    render_refund_email,
)

logger = structlog.get_logger(__name__)


@shared_task(name="notifications.send_refund_email")
def send_refund_email(order_id: str, refund_amount: str) -> bool:
    """Render and send the refund confirmation for a canceled order.

    Returns ``True`` when the message was handed to the email backend.
    """
    from modules.orders.models import Order

    log = logger.bind(order_id=order_id)
    order = (
        Order.objects.select_related("account")
        .prefetch_related("items__product")
        .filter(id=order_id)
        .first()
    )
    if order is None:
        log.warning("notification.refund_email_order_missing")
        return False
    if not order.account.email:
        log.warning("notification.refund_email_no_recipient")
        return False

    html, text = render_refund_email(
        order_id, Decimal(refund_amount), refund_line_items(order.items.all())
    )
    message = EmailMultiAlternatives(
        subject=REFUND_SUBJECT,
        body=text,
        from_email=settings.DEFAULT_FROM_EMAIL,
        to=[order.account.email],
    )
    message.attach_alternative(html, "text/html")

    try:
        message.send()
    except Exception as exc:
        log.error("notification.refund_email_failed", error=str(exc))
        return False

    log.info("notification.refund_email_sent", recipient=order.account.email)
    return True
