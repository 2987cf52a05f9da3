"""Order API views.

Exposes the ``OrderService`` via HTTP using a DRF ViewSet.
Domain exceptions are caught and translated into ``{"message": ...}``
responses.  The payment callback is the exception: it always answers
with a redirect to the mobile client's deep link.
"""

from __future__ import annotations

from decimal import Decimal
from urllib.parse import quote, urlencode, urlsplit

import structlog
from django.conf import settings
from django.http import HttpResponseRedirect
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle
from rest_framework.viewsets import GenericViewSet

from modules.accounts.dtos import AddBalanceDTO
from modules.accounts.exceptions import AccountNotFound
from modules.accounts.repositories.django_repository import AccountDjangoRepository
from modules.accounts.serializers import AddBalanceSerializer
from modules.accounts.services import AccountService
from modules.core.exceptions import DomainError, error_response
from modules.core.guards import require_authenticated
from modules.core.permissions import guarded, role_required
from modules.orders.dtos import PlaceOrderDTO, PlaceOrderItemDTO
from modules.orders.exceptions import (
    EmptyOrder,
    InsufficientStock,
    InvalidDeliveryImage,
    InvalidOrderStatus,
    MissingDeliveryImage,
    OrderNotFound,
)
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.serializers import (
    OrderDetailSerializer,
    OrderSerializer,
    PlaceOrderSerializer,
)
from modules.orders.services import OrderService
from modules.products.exceptions import ProductNotFound
from modules.products.repositories.django_repository import ProductDjangoRepository

logger = structlog.get_logger(__name__)

ORDER_ID_PATTERN = r"(?P<order_id>[^/.]+)"


class DeepLinkRedirect(HttpResponseRedirect):
    """Redirect that also accepts the scheme of the configured app deep link."""

    def __init__(self, redirect_to: str, *args, **kwargs) -> None:
        app_scheme = urlsplit(settings.PAYMENT_RETURN_DEEP_LINK).scheme
        self.allowed_schemes = [*HttpResponseRedirect.allowed_schemes, app_scheme]
        super().__init__(redirect_to, *args, **kwargs)


def payment_redirect(**params: str) -> DeepLinkRedirect:
    """``<deep link>?status=...&...`` with ``%20`` for spaces."""
    query = urlencode(params, quote_via=quote)
    return DeepLinkRedirect(f"{settings.PAYMENT_RETURN_DEEP_LINK}?{query}")


class OrderViewSet(GenericViewSet):
    """ViewSet for the order workflow.

    Uses ``OrderService`` with injected repositories (DIP).
    Does **not** extend ``ModelViewSet``: all ORM access goes through
    the service/repository layer.
    """

    serializer_class = OrderSerializer
    permission_classes = [guarded(require_authenticated)]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = OrderService(
            order_repository=OrderDjangoRepository(),
            account_repository=AccountDjangoRepository(),
            product_repository=ProductDjangoRepository(),
        )
        self._accounts = AccountService(repository=AccountDjangoRepository())

    def get_throttles(self) -> list[BaseThrottle]:
        """Scope throttling per action."""
        throttle_scope: str | None
        if self.action == "add_to_cart":
            throttle_scope = "order_creation"
        elif self.action == "confirm_payment":
            throttle_scope = "payment_callback"
        else:
            throttle_scope = None
        self.throttle_scope = throttle_scope
        return super().get_throttles()

    # ------------------------------------------------------------------
    # Create (Pending)
    # ------------------------------------------------------------------

    @action(detail=False, methods=["post"], url_path="add-to-cart")
    def add_to_cart(self, request: Request) -> Response:
        """POST /api/order/add-to-cart"""
        serializer = PlaceOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        data = serializer.validated_data
        dto = PlaceOrderDTO(
            account_id=data["account"],
            items=tuple(
                PlaceOrderItemDTO(product_id=item["product"], quantity=item["quantity"])
                for item in data["items"]
            ),
        )

        try:
            placed = self._service.place_order(
                dto, client_ip=request.META.get("REMOTE_ADDR") or "127.0.0.1"
            )
        except (AccountNotFound, ProductNotFound, EmptyOrder, InsufficientStock) as exc:
            return error_response(exc)

        return Response(
            {
                "orderId": str(placed.order_id),
                "totalAmount": str(placed.total_amount),
                "paymentRedirectUrl": placed.payment_url,
            },
            status=status.HTTP_201_CREATED,
        )

    # ------------------------------------------------------------------
    # Gateway callback (Pending -> Paid)
    # ------------------------------------------------------------------

    @action(
        detail=False,
        methods=["get"],
        url_path=f"confirm-payment/{ORDER_ID_PATTERN}",
        permission_classes=[AllowAny],
        authentication_classes=[],
    )
    def confirm_payment(self, request: Request, order_id: str) -> HttpResponseRedirect:
        """GET /api/order/confirm-payment/{order_id}?vnp_ResponseCode=..."""
        try:
            order = self._service.confirm_payment(order_id, request.query_params.dict())
        except DomainError as exc:
            return payment_redirect(status="error", message=str(exc))
        except Exception as exc:
            logger.exception("order.payment_callback_failed", order_id=order_id)
            return payment_redirect(status="error", message=str(exc))
        return payment_redirect(status="success", orderId=str(order.id))

    # ------------------------------------------------------------------
    # Fulfilment
    # ------------------------------------------------------------------

    @action(
        detail=False,
        methods=["patch"],
        url_path=f"update-shipping/{ORDER_ID_PATTERN}",
    )
    def update_shipping(self, request: Request, order_id: str) -> Response:
        """PATCH /api/order/update-shipping/{order_id}"""
        try:
            order = self._service.mark_shipping(order_id)
        except (OrderNotFound, InvalidOrderStatus) as exc:
            return error_response(exc)
        return Response(
            {"message": "Order status updated to Shipping.", "orderId": str(order.id)}
        )

    @action(
        detail=False,
        methods=["post"],
        url_path=f"confirm-delivery/{ORDER_ID_PATTERN}",
        parser_classes=[MultiPartParser, FormParser, JSONParser],
    )
    def confirm_delivery(self, request: Request, order_id: str) -> Response:
        """POST /api/order/confirm-delivery/{order_id} (multipart ``deliveryImage``)"""
        try:
            order = self._service.confirm_delivery(
                order_id, request.FILES.get("deliveryImage")
            )
        except (
            OrderNotFound,
            InvalidOrderStatus,
            MissingDeliveryImage,
            InvalidDeliveryImage,
        ) as exc:
            return error_response(exc)
        return Response(
            {
                "message": "Order delivery confirmed.",
                "orderId": str(order.id),
                "imagePath": order.image_confirm_delivered,
            }
        )

    @action(
        detail=False,
        methods=["post"],
        url_path=f"cancel-order/{ORDER_ID_PATTERN}",
    )
    def cancel_order(self, request: Request, order_id: str) -> Response:
        """POST /api/order/cancel-order/{order_id}"""
        try:
            result = self._service.cancel_order(order_id)
        except (OrderNotFound, InvalidOrderStatus) as exc:
            return error_response(exc)
        percent = f"{Decimal(str(settings.REFUND_RATE)) * 100:.0f}"
        return Response(
            {
                "message": (
                    f"Order has been canceled and {percent}% refund issued. "
                    "Product quantities have been updated in the inventory."
                ),
                "refundAmount": str(result.refund_amount),
            }
        )

    # ------------------------------------------------------------------
    # Balance
    # ------------------------------------------------------------------

    @action(
        detail=False,
        methods=["patch"],
        url_path="add-balance",
        parser_classes=[JSONParser, FormParser],
        permission_classes=[AllowAny],
    )
    def add_balance(self, request: Request) -> Response:
        """PATCH /api/order/add-balance"""
        serializer = AddBalanceSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(
                {"message": "Invalid request.", "errors": serializer.errors},
                status=status.HTTP_400_BAD_REQUEST,
            )

        dto = AddBalanceDTO(
            account_id=serializer.validated_data["account"],
            amount=serializer.validated_data["amount"],
        )
        try:
            self._accounts.add_balance(dto)
        except AccountNotFound as exc:
            return error_response(exc)
        return Response({"message": "Balance added successfully."})

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @action(
        detail=False,
        methods=["get"],
        url_path=r"account/(?P<account_id>[^/.]+)",
        permission_classes=[role_required("customer")],
    )
    def account_orders(self, request: Request, account_id: str) -> Response:
        """GET /api/order/account/{account_id}"""
        orders = self._service.list_for_account(account_id)
        return Response(OrderSerializer(orders, many=True).data)

    @action(
        detail=False,
        methods=["get"],
        url_path="shipper-orders",
        permission_classes=[role_required("admin", "shipper")],
    )
    def shipper_orders(self, request: Request) -> Response:
        """GET /api/order/shipper-orders"""
        orders = self._service.list_for_shipping()
        return Response(OrderSerializer(orders, many=True).data)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/order/{pk}"""
        try:
            order = self._service.get_order(pk or "")
        except OrderNotFound as exc:
            return error_response(exc)
        return Response(OrderDetailSerializer(order).data)
