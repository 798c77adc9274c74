"""Service provider helpers for wiring OrderService with ports.

This module exposes a small factory function `get_order_service` that
returns a configured `OrderService` instance. The catalog and order store
are always the Django repositories; the payment session port is the HTTP
client when `settings.USE_HTTP_ADAPTERS` is truthy and the in-process stub
otherwise (tests and local development).
"""

from django.conf import settings
from django.utils import timezone

from .adapters import PaymentSessionStub
from .domain import OrderService
from .http_adapters import HttpCheckoutSessionClient
from .repository import DjangoOrderStore, DjangoProductCatalog


def get_order_service() -> OrderService:
    """Return a configured OrderService instance.

    Returns:
        OrderService: A service instance with appropriate ports.
    """
    if getattr(settings, "USE_HTTP_ADAPTERS", True):
        payments = HttpCheckoutSessionClient()
    else:
        payments = PaymentSessionStub()

    return OrderService(
        catalog=DjangoProductCatalog(),
        store=DjangoOrderStore(),
        payments=payments,
        clock=timezone.now,
        complete_on_create=getattr(settings, "ORDERS_COMPLETE_ON_CREATE", True),
    )
