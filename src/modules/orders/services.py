"""Order service layer (Use Cases).

Orchestrates the order workflow::

    Pending -> Paid -> Shipping -> Delivered
    Paid    -> Canceled

All write operations are atomic; the service defines the unit-of-work
boundary.  Every transition takes the order row lock first, re-checks
the status under the lock and records a history entry plus a domain
event in the same transaction.

Side effects:
- Payment confirmation decrements stock with conditional UPDATEs; any
  shortfall rolls the whole confirmation back.
- Cancellation refunds ``REFUND_RATE`` of the total to the account (and,
  when ``REFUND_CREDIT_ADMIN_ACCOUNT`` is on, to the first admin) and
  restores stock.  The refund email is sent by the ``OrderCanceled``
  handler after commit.
"""

from __future__ import annotations

import os
import time
from collections import defaultdict
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional
from uuid import UUID

import structlog
from django.conf import settings
from django.core.files.storage import Storage, default_storage
from django.db import transaction
from django.urls import reverse

from modules.accounts.exceptions import AccountNotFound
from modules.orders.constants import DELIVERY_IMAGE_DIR, OrderStatus
from modules.orders.dtos import CancellationDTO, PlacedOrderDTO
from modules.orders.events import (
    OrderCanceled,
    OrderDelivered,
    OrderPaid,
    OrderPlaced,
    OrderShipped,
)
from modules.orders.exceptions import (
    EmptyOrder,
    InsufficientStock,
    InvalidDeliveryImage,
    InvalidOrderStatus,
    InvalidPaymentSignature,
    MissingDeliveryImage,
    OrderAlreadyProcessed,
    OrderNotFound,
    PaymentDeclined,
)
from modules.payments.vnpay import VNPayGateway
from modules.products.exceptions import ProductNotFound

if TYPE_CHECKING:
    from django.core.files.uploadedfile import UploadedFile

    from modules.accounts.repositories.interfaces import IAccountRepository
    from modules.orders.dtos import PlaceOrderDTO
    from modules.orders.models import Order
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.products.repositories.interfaces import IProductRepository
    from shared.domain.events import DomainEvent

logger = structlog.get_logger(__name__)

CENT = Decimal("0.01")


class OrderService:
    """Application service for Order use-cases.

    Receives repositories via constructor injection (DIP).  The payment
    gateway and media storage default to the configured ones.
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        account_repository: IAccountRepository,
        product_repository: IProductRepository,
        payment_gateway: Optional[VNPayGateway] = None,
        storage: Optional[Storage] = None,
    ) -> None:
        self._order_repo = order_repository
        self._account_repo = account_repository
        self._product_repo = product_repository
        self._gateway = payment_gateway or VNPayGateway()
        self._storage = storage or default_storage

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def place_order(
        self, dto: PlaceOrderDTO, client_ip: str = "127.0.0.1"
    ) -> PlacedOrderDTO:
        """Create a Pending order and the hosted-payment URL for it.

        Stock is checked but not reserved; it is taken when the payment
        is confirmed.

        Raises:
            EmptyOrder: no items were submitted.
            AccountNotFound: the account does not exist.
            ProductNotFound: a product does not exist.
            InsufficientStock: a product has fewer units than requested.
        """
        log = logger.bind(account_id=str(dto.account_id))

        if not dto.items:
            raise EmptyOrder("An order must contain at least one product.")

        account = self._account_repo.get_by_id(str(dto.account_id))
        if not account:
            raise AccountNotFound("Account not found.")

        products = self._product_repo.get_many(str(i.product_id) for i in dto.items)
        requested: Dict[str, int] = defaultdict(int)
        lines: List[Dict[str, Any]] = []

        for item in dto.items:
            product = products.get(str(item.product_id))
            if not product:
                raise ProductNotFound(f"Product with ID {item.product_id} not found.")

            requested[str(product.id)] += item.quantity
            if product.quantity < requested[str(product.id)]:
                log.warning(
                    "order.insufficient_stock",
                    product_id=str(product.id),
                    available=product.quantity,
                    requested=requested[str(product.id)],
                )
                raise InsufficientStock(
                    f"Not enough stock for {product.name}. "
                    f"Available: {product.quantity}, "
                    f"Requested: {requested[str(product.id)]}"
                )

            lines.append(
                {
                    "product_id": product.id,
                    "quantity": item.quantity,
                    "unit_price": product.price,
                }
            )

        order = self._order_repo.create({"account_id": account.id, "items": lines})
        order.add_domain_event(
            OrderPlaced(
                aggregate_id=order.id,
                account_id=str(account.id),
                total_amount=order.total_amount,
            )
        )
        self._order_repo.save(order)
        self._order_repo.add_history(
            order_id=order.id, status=OrderStatus.PENDING, notes="Order created"
        )

        payment_url = self._gateway.build_payment_url(
            order_id=str(order.id),
            amount=order.total_amount,
            ip_addr=client_ip,
            return_url=self._payment_return_url(order.id),
            created_at=order.created_at,
        )

        log.info(
            "order.placed",
            order_id=str(order.id),
            total_amount=str(order.total_amount),
        )
        return PlacedOrderDTO(
            order_id=order.id,
            total_amount=order.total_amount,
            payment_url=payment_url,
        )

    @transaction.atomic
    def confirm_payment(self, order_id: str, callback: Mapping[str, Any]) -> Order:
        """Mark a Pending order Paid and take its stock.

        *callback* is the query string the gateway sent back.  A second
        callback for the same order is rejected by the status check under
        the row lock and changes nothing.

        Raises:
            InvalidPaymentSignature: signature checking is on and fails.
            PaymentDeclined: the response code is not a success.
            OrderNotFound: the order does not exist.
            OrderAlreadyProcessed: the order is no longer Pending.
            InsufficientStock: a product ran out since the order was placed.
        """
        log = logger.bind(
            order_id=str(order_id), response_code=callback.get("vnp_ResponseCode")
        )

        if settings.VNPAY.get("VERIFY_CALLBACK_SIGNATURE") and not (
            self._gateway.verify_callback(callback)
        ):
            raise InvalidPaymentSignature("Invalid payment signature")

        if not self._gateway.is_success(callback.get("vnp_ResponseCode")):
            log.info("order.payment_declined")
            raise PaymentDeclined("Payment unsuccessful")

        order = self._order_repo.get_for_update(str(order_id))
        if not order:
            raise OrderNotFound("Order not found")

        if order.status != OrderStatus.PENDING:
            log.info("order.payment_duplicate", status=order.status)
            raise OrderAlreadyProcessed("Order already processed")

        # Product rows are updated in PK order to avoid deadlocks
        for item in sorted(order.items.all(), key=lambda i: str(i.product_id)):
            if not self._product_repo.decrement_stock(
                str(item.product_id), item.quantity
            ):
                log.warning("order.payment_stock_shortfall", product_id=str(item.product_id))
                raise InsufficientStock("Insufficient stock")

        self._transition(
            order,
            OrderStatus.PAID,
            OrderPaid(aggregate_id=order.id),
            notes="Payment confirmed",
        )
        log.info("order.paid")
        return order

    @transaction.atomic
    def mark_shipping(self, order_id: str) -> Order:
        """Move a Paid order to Shipping.

        Raises:
            OrderNotFound: order does not exist.
            InvalidOrderStatus: order is not Paid.
        """
        order = self._order_repo.get_for_update(str(order_id))
        if not order:
            raise OrderNotFound("Order not found.")

        if order.status != OrderStatus.PAID:
            logger.warning(
                "order.shipping_not_allowed", order_id=str(order_id), status=order.status
            )
            raise InvalidOrderStatus("Only paid orders can be marked as shipping.")

        self._transition(
            order,
            OrderStatus.SHIPPING,
            OrderShipped(aggregate_id=order.id),
            notes="Handed to shipper",
        )
        logger.info("order.shipping", order_id=str(order_id))
        return order

    @transaction.atomic
    def confirm_delivery(
        self, order_id: str, image: Optional[UploadedFile]
    ) -> Order:
        """Store the delivery photo and move a Shipping order to Delivered.

        The photo is required whatever the order status is.

        Raises:
            MissingDeliveryImage: no file was uploaded.
            InvalidDeliveryImage: the file is not JPEG, PNG or GIF.
            OrderNotFound: order does not exist.
            InvalidOrderStatus: order is not Shipping.
        """
        if image is None:
            raise MissingDeliveryImage("Delivery confirmation image is required.")
        if image.content_type not in settings.DELIVERY_IMAGE_CONTENT_TYPES:
            raise InvalidDeliveryImage(
                "Invalid file type. Only JPEG, PNG, and GIF are allowed."
            )

        order = self._order_repo.get_for_update(str(order_id))
        if not order:
            raise OrderNotFound("Order not found.")

        if order.status != OrderStatus.SHIPPING:
            logger.warning(
                "order.delivery_not_allowed", order_id=str(order_id), status=order.status
            )
            raise InvalidOrderStatus(
                "Only shipping orders can be confirmed as delivered."
            )

        stored_name = self._store_delivery_image(order.id, image)
        order.image_confirm_delivered = self._media_url(stored_name)
        try:
            self._transition(
                order,
                OrderStatus.DELIVERED,
                OrderDelivered(
                    aggregate_id=order.id, image_url=order.image_confirm_delivered
                ),
                notes="Delivery confirmed",
            )
        except Exception:
            # The transaction unwinds, so no order will reference the photo
            self._storage.delete(stored_name)
            logger.warning("order.delivery_image_discarded", name=stored_name)
            raise
        logger.info(
            "order.delivered",
            order_id=str(order_id),
            image_url=order.image_confirm_delivered,
        )
        return order

    @transaction.atomic
    def cancel_order(self, order_id: str) -> CancellationDTO:
        """Cancel a Paid order, refund part of it and put the stock back.

        Acquires the order row lock **first** so concurrent cancellations
        cannot refund twice.

        Raises:
            OrderNotFound: order does not exist.
            InvalidOrderStatus: order is not Paid (nothing is changed).
        """
        order = self._order_repo.get_for_update(str(order_id))
        if not order:
            raise OrderNotFound("Order not found.")

        log = logger.bind(order_id=str(order_id), current_status=order.status)

        if order.status != OrderStatus.PAID:
            log.warning("order.cancel_not_allowed")
            raise InvalidOrderStatus("Only paid orders can be canceled.")

        refund_amount = self.refund_for(order.total_amount)

        self._account_repo.credit_balance(str(order.account_id), refund_amount)
        if settings.REFUND_CREDIT_ADMIN_ACCOUNT:
            admin = self._account_repo.get_first_admin()
            if admin:
                self._account_repo.credit_balance(str(admin.id), refund_amount)
                log.info("order.refund_admin_credited", admin_id=str(admin.id))

        for item in sorted(order.items.all(), key=lambda i: str(i.product_id)):
            self._product_repo.restore_stock(str(item.product_id), item.quantity)
            log.info(
                "order.stock_restored",
                product_id=str(item.product_id),
                quantity=item.quantity,
            )

        self._transition(
            order,
            OrderStatus.CANCELED,
            OrderCanceled(
                aggregate_id=order.id,
                account_id=str(order.account_id),
                refund_amount=refund_amount,
            ),
            notes=f"Canceled with refund {refund_amount}",
        )

        log.info("order.canceled", refund_amount=str(refund_amount))
        return CancellationDTO(order_id=order.id, refund_amount=refund_amount)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_order(self, order_id: str) -> Order:
        """Retrieve a single order by ID.

        Raises:
            OrderNotFound: if the order does not exist.
        """
        order = self._order_repo.get_by_id(str(order_id))
        if not order:
            raise OrderNotFound("Order not found.")
        return order

    def list_for_account(self, account_id: str) -> List[Order]:
        return self._order_repo.list_for_account(str(account_id))

    def list_for_shipping(self) -> List[Order]:
        return self._order_repo.list_for_shipping()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def refund_for(total_amount: Decimal) -> Decimal:
        rate = Decimal(str(settings.REFUND_RATE))
        return (Decimal(total_amount) * rate).quantize(CENT, rounding=ROUND_HALF_UP)

    def _transition(
        self, order: Order, new_status: str, event: DomainEvent, notes: str = ""
    ) -> None:
        if not order.can_transition_to(new_status):
            raise InvalidOrderStatus(
                f"Cannot transition from {order.status} to {new_status}."
            )
        old_status = order.status
        order.status = new_status
        order.add_domain_event(event)
        self._order_repo.save(order)
        self._order_repo.add_history(
            order_id=order.id,
            status=new_status,
            notes=notes,
            old_status=old_status,
        )

    def _payment_return_url(self, order_id: UUID) -> str:
        path = reverse("order-confirm-payment", kwargs={"order_id": str(order_id)})
        return settings.PUBLIC_BASE_URL.rstrip("/") + path

    def _store_delivery_image(self, order_id: UUID, image: UploadedFile) -> str:
        ext = os.path.splitext(image.name or "")[1].lower()
        timestamp = int(time.time() * 1000)
        return self._storage.save(
            f"{DELIVERY_IMAGE_DIR}/delivery-{order_id}-{timestamp}{ext}", image
        )

    @staticmethod
    def _media_url(name: str) -> str:
        return (
            settings.PUBLIC_BASE_URL.rstrip("/")
            + settings.MEDIA_URL
            + name.replace(os.sep, "/")
        )
