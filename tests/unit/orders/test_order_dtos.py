"""Unit tests for order DTOs."""

from uuid import uuid4

import pytest
from pydantic import ValidationError

from modules.orders.dtos import PlaceOrderDTO, PlaceOrderItemDTO

pytestmark = pytest.mark.unit


def test_item_quantity_must_be_positive():
    with pytest.raises(ValidationError, match="Quantity must be at least 1"):
        PlaceOrderItemDTO(product_id=uuid4(), quantity=0)


def test_place_order_accepts_empty_items():
    dto = PlaceOrderDTO(account_id=uuid4())
    assert dto.items == ()


def test_dto_is_frozen():
    dto = PlaceOrderItemDTO(product_id=uuid4(), quantity=2)
    with pytest.raises(ValidationError):
        dto.quantity = 3


def test_ids_are_parsed_from_strings():
    product_id = uuid4()
    dto = PlaceOrderItemDTO(product_id=str(product_id), quantity="2")
    assert dto.product_id == product_id
    assert dto.quantity == 2
