"""Product API views.

Exposes the ``ProductService`` via HTTP using DRF ViewSets.
Domain exceptions are caught and translated into ``{"message": ...}``
responses. The view never swallows generic exceptions.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.mixins import ListModelMixin
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.core.exceptions import error_response
from modules.core.guards import require_authenticated
from modules.core.permissions import guarded, role_required
from modules.products.dtos import CreateProductDTO, UpdateProductDTO
from modules.products.exceptions import InvalidProductData, ProductNotFound
from modules.products.filters import ProductFilter
from modules.products.repositories.django_repository import ProductDjangoRepository
from modules.products.serializers import (
    ProductDetailSerializer,
    ProductSerializer,
    ProductWriteSerializer,
)
from modules.products.services import ProductService


class ProductViewSet(ListModelMixin, GenericViewSet):
    """Catalogue browsing for any signed-in account, writes for admins.

    Uses ``ProductService`` with ``ProductDjangoRepository`` (DIP).
    Does **not** extend ``ModelViewSet``: all ORM access goes through
    the service/repository layer.
    """

    filterset_class = ProductFilter
    search_fields = ["name", "description"]
    ordering_fields = ["name", "price", "quantity", "created_at"]
    ordering = ["name"]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    serializer_class = ProductSerializer

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = ProductService(repository=ProductDjangoRepository())

    def get_permissions(self):
        if self.action in ("create", "partial_update"):
            return [role_required("admin")()]
        return [guarded(require_authenticated)()]

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    def get_queryset(self):
        return self._service.list_products()

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/product/{pk}"""
        try:
            product = self._service.get_product(pk or "")
        except ProductNotFound as exc:
            return error_response(exc)
        return Response(ProductDetailSerializer(product).data)

    # ------------------------------------------------------------------
    # Create / Update
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/product"""
        serializer = ProductWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            dto = CreateProductDTO(
                name=data["name"],
                price=data["price"],
                quantity=data.get("quantity", 0),
                description=data.get("description", ""),
                image_url=data.get("image_url", ""),
                category_id=data.get("category"),
                brand_id=data.get("brand"),
                skin_ids=tuple(data.get("skins", ())),
            )
        except (PydanticValidationError, ValueError) as exc:
            return Response(
                {"message": str(exc)},
                status=status.HTTP_400_BAD_REQUEST,
            )

        try:
            product = self._service.create_product(dto)
        except InvalidProductData as exc:
            return error_response(exc)

        return Response(
            ProductSerializer(product).data, status=status.HTTP_201_CREATED
        )

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/product/{pk}"""
        serializer = ProductWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            dto = UpdateProductDTO(
                name=data.get("name"),
                price=data.get("price"),
                quantity=data.get("quantity"),
                description=data.get("description"),
                image_url=data.get("image_url"),
                category_id=data.get("category"),
                brand_id=data.get("brand"),
            )
        except (PydanticValidationError, ValueError) as exc:
            return Response(
                {"message": str(exc)},
                status=status.HTTP_400_BAD_REQUEST,
            )

        try:
            product = self._service.update_product(pk or "", dto)
        except (ProductNotFound, InvalidProductData) as exc:
            return error_response(exc)

        return Response(ProductSerializer(product).data)
