"""Domain models, ports and service for orders.

This module contains simple dataclasses used as DTOs for orders and
products, protocol definitions (ports) for the external dependencies
(product catalog, order store and payment session provider), and the
domain service that creates orders and reconciles their status against
the payment provider's checkout session.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Callable, List, Optional, Protocol

logger = logging.getLogger("orders")


# ---- Enums ----
class OrderStatus(str, Enum):
    """Enumeration of the possible order statuses.

    PENDING orders wait for payment confirmation; COMPLETED and FAILED are
    the outcomes written by reconciliation."""

    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class SessionOutcome(str, Enum):
    """Result kinds of a payment session lookup."""

    FOUND = "FOUND"
    INVALID = "INVALID"
    UNAVAILABLE = "UNAVAILABLE"


PAID = "paid"
UNPAID = "unpaid"

# Bounds of the persisted columns: 32-bit quantities, Decimal(12, 2) amounts
MAX_QUANTITY = 2_147_483_647
MAX_AMOUNT = Decimal("9999999999.99")


# ---- Errors ----
class OrderError(ValueError):
    """Domain error carrying a short error code.

    ``str(error)`` is the code (e.g. ``"EMPTY_CART"``) so callers can map it
    to a transport status. Extra keyword arguments are kept in ``context``
    and describe the offending input (for example ``product_id``).
    """

    def __init__(self, code: str, **context):
        super().__init__(code)
        self.code = code
        self.context = context


# ---- Entities / DTOs ----
@dataclass(frozen=True)
class Product:
    """Catalog product as seen by the order flow.

    Attributes:
        id: Catalog identifier.
        name: Display name, snapshotted into order lines.
        price: List price.
        is_on_sale: Whether ``sale_price`` applies instead of ``price``.
        sale_price: Discounted price, required when ``is_on_sale``.
    """

    id: int
    name: str
    price: Decimal
    is_on_sale: bool = False
    sale_price: Optional[Decimal] = None

    @property
    def unit_price(self) -> Decimal:
        """Effective unit price: the sale price when on sale, else list price."""
        if self.is_on_sale:
            if self.sale_price is None:
                raise ValueError("SALE_PRICE_MISSING")
            return self.sale_price
        return self.price


@dataclass(frozen=True)
class CartItem:
    product_id: int
    quantity: int


@dataclass(frozen=True)
class OrderLine:
    """A single line of an order.

    Name and unit price are copies taken at purchase time; later catalog
    changes do not affect them.
    """

    product_id: int
    product_name: str
    quantity: int
    price_at_purchase: Decimal
    id: Optional[int] = None

    @property
    def line_total(self) -> Decimal:
        return self.price_at_purchase * self.quantity


@dataclass
class Order:
    """Container for order data.

    Attributes:
        id: Persistent identifier, or None if not yet saved.
        customer_email: Email address the order belongs to.
        lines: Ordered list of OrderLine.
        total_amount: Sum of line totals at creation time.
        status: Current OrderStatus.
        created_at: Creation instant.
        completed_at: Instant the order became COMPLETED, if it did.
        stripe_session_id: External checkout session identifier.
        stripe_payment_intent_id: Payment intent recorded on completion.
    """

    id: Optional[int]
    customer_email: str
    lines: List[OrderLine] = field(default_factory=list)
    total_amount: Decimal = Decimal("0")
    status: OrderStatus = OrderStatus.PENDING
    created_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    stripe_session_id: Optional[str] = None
    stripe_payment_intent_id: Optional[str] = None


@dataclass(frozen=True)
class CheckoutSession:
    """Payment provider view of a checkout attempt."""

    id: str
    payment_status: str
    payment_intent_id: Optional[str] = None


@dataclass(frozen=True)
class SessionLookup:
    """Typed outcome of fetching a checkout session.

    ``session`` is set only when ``outcome`` is FOUND. ``detail`` explains
    INVALID and UNAVAILABLE outcomes.
    """

    outcome: SessionOutcome
    session: Optional[CheckoutSession] = None
    detail: str = ""

    @classmethod
    def found(cls, session: CheckoutSession) -> "SessionLookup":
        return cls(SessionOutcome.FOUND, session=session)

    @classmethod
    def invalid(cls, detail: str) -> "SessionLookup":
        return cls(SessionOutcome.INVALID, detail=detail)

    @classmethod
    def unavailable(cls, detail: str) -> "SessionLookup":
        return cls(SessionOutcome.UNAVAILABLE, detail=detail)


# ---- Ports (DIP) ----
class ProductCatalogPort(Protocol):
    """Port describing read access to catalog products."""

    def get(self, product_id: int) -> Optional[Product]:
        """Return the product with ``product_id`` or None when unknown."""
        raise NotImplementedError()


class OrderStorePort(Protocol):
    """Port describing order persistence used by the domain.

    ``add`` must store the order and all of its lines atomically.
    ``transition`` must only write when the stored status still equals
    ``from_status`` and report whether it did.
    """

    def get(self, order_id: int) -> Optional[Order]:
        raise NotImplementedError()

    def get_by_session(self, session_id: str) -> Optional[Order]:
        raise NotImplementedError()

    def add(self, order: Order) -> Order:
        raise NotImplementedError()

    def transition(self, order: Order, from_status: OrderStatus) -> bool:
        raise NotImplementedError()


class PaymentSessionPort(Protocol):
    """Port describing the payment provider's checkout session lookup."""

    def retrieve(self, session_id: str) -> SessionLookup:
        """Fetch a checkout session.

        Args:
            session_id: External session identifier.

        Returns:
            SessionLookup: FOUND with the session, INVALID when the provider
            does not recognize the id, UNAVAILABLE when the provider could
            not be asked. Implementations do not raise for these cases.
        """
        raise NotImplementedError()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---- Domain service ----
class OrderService:
    """Domain service responsible for creating and reconciling orders.

    The service depends only on the ports passed in; it does not know about
    the ORM or HTTP. Errors are raised as ``OrderError`` with one of the
    codes below:

        INVALID_EMAIL, EMPTY_CART, INVALID_QUANTITY, PRODUCT_NOT_FOUND,
        TOTAL_OUT_OF_RANGE,
        ORDER_NOT_FOUND, INVALID_SESSION, UPSTREAM_UNAVAILABLE
    """

    def __init__(
        self,
        catalog: ProductCatalogPort,
        store: OrderStorePort,
        payments: PaymentSessionPort,
        clock: Callable[[], datetime] = _utcnow,
        complete_on_create: bool = True,
    ):
        """Initialize the service with required dependencies.

        Args:
            catalog: ProductCatalogPort used to resolve cart items.
            store: OrderStorePort used to persist and load orders.
            payments: PaymentSessionPort used to read session status.
            clock: Callable returning the current aware datetime.
            complete_on_create: When True new orders are stored COMPLETED
                right away. This is a placeholder until checkout sessions
                drive completion; with False orders stay PENDING until
                reconciled.
        """
        self.catalog = catalog
        self.store = store
        self.payments = payments
        self.clock = clock
        self.complete_on_create = complete_on_create

    def create_order(self, customer_email: str, items: List[CartItem]) -> Order:
        """Create and persist an order for the given cart.

        Every product is resolved before anything is written, so an unknown
        product aborts the whole operation.

        Args:
            customer_email: Email of the customer placing the order.
            items: Cart items (product id and quantity).

        Returns:
            The stored Order, with identifiers assigned by the store.

        Raises:
            OrderError: INVALID_EMAIL, EMPTY_CART, INVALID_QUANTITY,
                PRODUCT_NOT_FOUND (with ``product_id`` in the context) or
                TOTAL_OUT_OF_RANGE when the total exceeds ``MAX_AMOUNT``.
        """
        if not customer_email:
            raise OrderError("INVALID_EMAIL")
        if not items:
            raise OrderError("EMPTY_CART")
        for item in items:
            if not 1 <= item.quantity <= MAX_QUANTITY:
                raise OrderError("INVALID_QUANTITY", product_id=item.product_id)

        lines: List[OrderLine] = []
        total = Decimal("0")
        for item in items:
            product = self.catalog.get(item.product_id)
            if product is None:
                raise OrderError("PRODUCT_NOT_FOUND", product_id=item.product_id)
            line = OrderLine(
                product_id=product.id,
                product_name=product.name,
                quantity=item.quantity,
                price_at_purchase=product.unit_price,
            )
            lines.append(line)
            total += line.line_total

        if total > MAX_AMOUNT:
            raise OrderError("TOTAL_OUT_OF_RANGE", max_total=str(MAX_AMOUNT))

        now = self.clock()
        order = Order(
            id=None,
            customer_email=customer_email,
            lines=lines,
            total_amount=total,
            status=OrderStatus.PENDING,
            created_at=now,
        )
        if self.complete_on_create:
            order.status = OrderStatus.COMPLETED
            order.completed_at = now

        stored = self.store.add(order)
        logger.info(
            "order created",
            extra={"order_id": stored.id, "status": stored.status.value, "total_amount": str(stored.total_amount)},
        )
        return stored

    def get_order(self, order_id: int) -> Order:
        order = self.store.get(order_id)
        if order is None:
            raise OrderError("ORDER_NOT_FOUND", order_id=order_id)
        return order

    def get_order_by_session(self, session_id: str) -> Order:
        """Load the order for a checkout session and sync its status.

        The provider is asked first; an unknown session is reported as
        INVALID_SESSION without touching the store.

        Raises:
            OrderError: INVALID_SESSION, UPSTREAM_UNAVAILABLE or
                ORDER_NOT_FOUND.
        """
        lookup = self.payments.retrieve(session_id)
        if lookup.outcome is SessionOutcome.INVALID:
            raise OrderError("INVALID_SESSION", reason=lookup.detail)
        if lookup.outcome is SessionOutcome.UNAVAILABLE:
            raise OrderError("UPSTREAM_UNAVAILABLE", reason=lookup.detail)

        order = self.store.get_by_session(session_id)
        if order is None:
            raise OrderError("ORDER_NOT_FOUND", session_id=session_id)

        previous = order.status
        if not self.reconcile(order, lookup.session):
            return order

        if self.store.transition(order, from_status=previous):
            logger.info(
                "order status reconciled",
                extra={"order_id": order.id, "from": previous.value, "to": order.status.value},
            )
            return order

        # Another request moved the order first; its write wins.
        logger.warning("order changed during reconciliation", extra={"order_id": order.id})
        current = self.store.get(order.id)
        if current is None:
            raise OrderError("ORDER_NOT_FOUND", order_id=order.id)
        return current

    def reconcile(self, order: Order, session: CheckoutSession) -> bool:
        """Apply the session's payment status to ``order`` in memory.

        Rules:
            - paid and not COMPLETED: COMPLETED, completion time set and
              payment intent recorded.
            - unpaid and PENDING: FAILED.
            - anything else: unchanged.

        Returns:
            bool: True when the order was changed.
        """
        if session.payment_status == PAID and order.status != OrderStatus.COMPLETED:
            order.status = OrderStatus.COMPLETED
            order.completed_at = self.clock()
            order.stripe_payment_intent_id = session.payment_intent_id
            return True
        if session.payment_status == UNPAID and order.status == OrderStatus.PENDING:
            order.status = OrderStatus.FAILED
            return True
        return False
