"""HTTP views for the orders app.

This module contains DRF API views used by the orders service. Views are
kept intentionally small: they validate requests (via Pydantic), map to
domain DTOs, delegate to the domain service, and return an HTTP response.

The views obtain a configured ``OrderService`` from
``providers.get_order_service()``, which wires the Django repositories and
either the HTTP checkout session client (``HttpCheckoutSessionClient``) or
the in-process ``PaymentSessionStub`` depending on runtime settings. This
allows tests and local development to swap implementations without
changing view logic.

Domain errors are ``OrderError`` instances whose code is mapped to an HTTP
status by ``STATUS_BY_CODE``; the response body is ``{"detail": CODE}``
plus any context the error carries, in camelCase.
"""
from django.urls import reverse
from pydantic import ValidationError
from pydantic.alias_generators import to_camel
from rest_framework import status
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle
from rest_framework.views import APIView

from . import providers
from .domain import CartItem, OrderError
from .schemas import CreateOrderDTO, OrderReadDTO

STATUS_BY_CODE = {
    "INVALID_EMAIL": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "INVALID_QUANTITY": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "TOTAL_OUT_OF_RANGE": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "EMPTY_CART": status.HTTP_400_BAD_REQUEST,
    "PRODUCT_NOT_FOUND": status.HTTP_400_BAD_REQUEST,
    "INVALID_SESSION": status.HTTP_400_BAD_REQUEST,
    "ORDER_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "UPSTREAM_UNAVAILABLE": status.HTTP_503_SERVICE_UNAVAILABLE,
}


def _error_response(err: OrderError) -> Response:
    body = {"detail": err.code}
    body.update({to_camel(k): v for k, v in err.context.items()})
    return Response(body, status=STATUS_BY_CODE.get(err.code, status.HTTP_400_BAD_REQUEST))


def _order_body(order) -> dict:
    return OrderReadDTO.from_domain(order).model_dump(mode="json", by_alias=True)


class OrdersCollectionView(APIView):
    """Create an order from a cart.

    The payload is validated with a Pydantic DTO, the domain service
    resolves products, computes the total and persists the order, and the
    created resource is returned with a ``Location`` header pointing at the
    detail endpoint.
    """
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "orders_create"

    def post(self, request):
        """Create a new order.

        Args:
            request (Request): DRF request with a JSON body
                ``{customerEmail, items: [{productId, quantity}]}``.

        Returns:
            Response: One of the following responses.
            - 201 with the order body when the order is created.
            - 422 with {detail: "VALIDATION_ERROR", errors} for schema
              errors (missing/malformed email, missing items, quantity or
              product id outside 1..2147483647).
            - 400 with {detail: "EMPTY_CART"} for an empty item list.
            - 400 with {detail: "PRODUCT_NOT_FOUND", productId} when a
              product does not exist.
            - 422 with {detail: "TOTAL_OUT_OF_RANGE", maxTotal} when the
              order total does not fit the stored amount.
        """
        # 1) Pydantic validation
        try:
            dto = CreateOrderDTO.model_validate(request.data)
        except ValidationError as e:
            return Response(
                {
                    "detail": "VALIDATION_ERROR",
                    "errors": e.errors(include_url=False, include_context=False, include_input=False),
                },
                status=status.HTTP_422_UNPROCESSABLE_ENTITY,
            )

        # 2) Domain
        items = [CartItem(product_id=i.product_id, quantity=i.quantity) for i in dto.items]
        service = providers.get_order_service()
        try:
            order = service.create_order(dto.customer_email, items)
        except OrderError as e:
            return _error_response(e)

        # 3) Response
        location = reverse("orders:orders-detail", kwargs={"oid": order.id})
        return Response(_order_body(order), status=status.HTTP_201_CREATED, headers={"Location": location})


class RetrieveOrderView(APIView):
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "orders_detail"

    def get(self, request, oid: int):
        try:
            order = providers.get_order_service().get_order(oid)
        except OrderError as e:
            return _error_response(e)
        return Response(_order_body(order), status=200)


class RetrieveOrderBySessionView(APIView):
    """Return the order for a checkout session after syncing its status.

    Responses:
        - 200 with the (possibly updated) order body.
        - 400 with {detail: "INVALID_SESSION"} when the provider does not
          know the session.
        - 404 with {detail: "ORDER_NOT_FOUND"} when no order references it.
        - 503 with {detail: "UPSTREAM_UNAVAILABLE"} when the provider
          cannot be reached.
    """
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "orders_session"

    def get(self, request, session_id: str):
        try:
            order = providers.get_order_service().get_order_by_session(session_id)
        except OrderError as e:
            return _error_response(e)
        return Response(_order_body(order), status=200)
