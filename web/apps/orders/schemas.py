"""Pydantic schemas for orders.

This module exposes the request validation schema for creating orders and
the read schema used to render orders. Field names are camelCase on the
wire and snake_case in Python.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from .domain import MAX_QUANTITY, Order


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CartItemIn(CamelModel):
    """Input schema for a single cart item.

    Attributes:
        product_id: Catalog product identifier.
        quantity: Units requested, between 1 and ``MAX_QUANTITY``.
    """

    product_id: int = Field(ge=1, le=MAX_QUANTITY)
    quantity: int = Field(ge=1, le=MAX_QUANTITY)


class CreateOrderDTO(CamelModel):
    """Schema for creating an order.

    Attributes:
        customer_email: Customer email, format-checked.
        items: List of `CartItemIn`. The field is required; an empty list
            passes schema validation and is rejected by the domain service
            as an empty cart.
    """

    customer_email: EmailStr
    items: list[CartItemIn]


class OrderLineOut(CamelModel):
    id: Optional[int] = None
    product_id: int
    product_name: str
    quantity: int
    price_at_purchase: Decimal


class OrderReadDTO(CamelModel):
    """Read schema for an order and its lines."""

    id: int
    customer_email: str
    status: str
    total_amount: Decimal
    created_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    stripe_session_id: Optional[str] = None
    stripe_payment_intent_id: Optional[str] = None
    items: list[OrderLineOut]

    @classmethod
    def from_domain(cls, order: Order) -> "OrderReadDTO":
        return cls(
            id=order.id,
            customer_email=order.customer_email,
            status=order.status.value,
            total_amount=order.total_amount,
            created_at=order.created_at,
            completed_at=order.completed_at,
            stripe_session_id=order.stripe_session_id,
            stripe_payment_intent_id=order.stripe_payment_intent_id,
            items=[
                OrderLineOut(
                    id=line.id,
                    product_id=line.product_id,
                    product_name=line.product_name,
                    quantity=line.quantity,
                    price_at_purchase=line.price_at_purchase,
                )
                for line in order.lines
            ],
        )
