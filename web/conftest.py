from decimal import Decimal

import pytest
from django.core.cache import cache


@pytest.fixture(autouse=True)
def use_stubs_for_tests(settings):
    settings.USE_HTTP_ADAPTERS = False
    settings.ORDERS_COMPLETE_ON_CREATE = True


@pytest.fixture(autouse=True)
def reset_throttles():
    # throttle history lives in the default cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def products(db):
    """Seed a list-price product and an on-sale product."""
    from apps.orders.models import ProductModel

    mug = ProductModel.objects.create(name="Mug", price=Decimal("12.50"))
    shirt = ProductModel.objects.create(
        name="Shirt", price=Decimal("25.00"), is_on_sale=True, sale_price=Decimal("19.99")
    )
    return {"mug": mug, "shirt": shirt}
