"""Repository layer for products and orders.

This module contains the Django ORM implementations of the catalog and
order store ports. It keeps a thin interface so the domain layer is not
coupled to Django ORM details: rows are mapped to domain dataclasses on
the way out and back on the way in.
"""

from typing import Optional

from django.db import transaction

from .domain import Order, OrderLine, OrderStatus, Product
from .models import OrderLineModel, OrderModel, ProductModel


def _order_from_model(obj: OrderModel) -> Order:
    """Map an ``OrderModel`` (with its lines) to a domain ``Order``."""
    return Order(
        id=obj.id,
        customer_email=obj.customer_email,
        lines=[
            OrderLine(
                id=line.id,
                product_id=line.product_id,
                product_name=line.product_name,
                quantity=line.quantity,
                price_at_purchase=line.price_at_purchase,
            )
            for line in obj.lines.all()
        ],
        total_amount=obj.total_amount,
        status=OrderStatus(obj.status),
        created_at=obj.created_at,
        completed_at=obj.completed_at,
        stripe_session_id=obj.stripe_session_id,
        stripe_payment_intent_id=obj.stripe_payment_intent_id,
    )


class DjangoProductCatalog:
    """Read-only product lookups backed by ``ProductModel``."""

    def get(self, product_id: int) -> Optional[Product]:
        obj = ProductModel.objects.filter(pk=product_id).first()
        if obj is None:
            return None
        return Product(
            id=obj.id,
            name=obj.name,
            price=obj.price,
            is_on_sale=obj.is_on_sale,
            sale_price=obj.sale_price,
        )


class DjangoOrderStore:
    """Repository that persists Order domain objects using Django ORM."""

    def _query(self):
        return OrderModel.objects.prefetch_related("lines")

    def get(self, order_id: int) -> Optional[Order]:
        obj = self._query().filter(pk=order_id).first()
        return _order_from_model(obj) if obj else None

    def get_by_session(self, session_id: str) -> Optional[Order]:
        obj = self._query().filter(stripe_session_id=session_id).first()
        return _order_from_model(obj) if obj else None

    def add(self, order: Order) -> Order:
        """Persist a new order and its lines in one transaction.

        Args:
            order: Domain ``Order`` without an id.

        Returns:
            Order: The stored order reloaded from the database, with order
            and line identifiers filled in.
        """
        with transaction.atomic():
            obj = OrderModel.objects.create(
                customer_email=order.customer_email,
                status=order.status.value,
                total_amount=order.total_amount,
                created_at=order.created_at,
                completed_at=order.completed_at,
                stripe_session_id=order.stripe_session_id,
                stripe_payment_intent_id=order.stripe_payment_intent_id,
            )
            for line in order.lines:
                OrderLineModel.objects.create(
                    order=obj,
                    product_id=line.product_id,
                    product_name=line.product_name,
                    quantity=line.quantity,
                    price_at_purchase=line.price_at_purchase,
                )
            # read back inside the transaction so a mapping failure rolls the insert back
            return self.get(obj.id)

    def transition(self, order: Order, from_status: OrderStatus) -> bool:
        """Write the order's status fields if the stored status is unchanged.

        The update is a single ``UPDATE ... WHERE id = %s AND status = %s``
        so two requests reconciling the same order cannot both apply.

        Returns:
            bool: True when the row was updated.
        """
        updated = OrderModel.objects.filter(pk=order.id, status=from_status.value).update(
            status=order.status.value,
            completed_at=order.completed_at,
            stripe_payment_intent_id=order.stripe_payment_intent_id,
        )
        return updated == 1
