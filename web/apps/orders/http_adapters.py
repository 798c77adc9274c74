"""HTTP adapter client for the payment provider's checkout sessions.

This module implements the concrete ``PaymentSessionPort`` using ``httpx``
against the Stripe Checkout Sessions REST endpoint. It adds:

- Request correlation: propagates ``X-Request-ID`` from a ContextVar set by
    the gateway middleware.
- Outcome mapping: provider answers are turned into a ``SessionLookup``
    (FOUND / INVALID / UNAVAILABLE) instead of exceptions, so callers can
    tell an unknown session apart from a provider outage.

Calls are made once; there is no retry policy.
"""

import logging
from typing import Optional
from urllib.parse import quote

import httpx
from django.conf import settings

from gateway.middleware import REQUEST_ID_CTX

from .domain import CheckoutSession, PaymentSessionPort, SessionLookup

logger = logging.getLogger("orders.payments")

# Provider statuses meaning "this session id is not usable"
INVALID_STATUSES = (400, 404)


# ---------------- Helpers ---------------- #

def _request_headers(extra: Optional[dict] = None) -> dict:
    """Build base headers including X-Request-ID and any extras.

    Args:
        extra: Optional dict of additional headers to include.

    Returns:
        dict: Final headers dictionary for the outgoing request.
    """
    headers: dict[str, str] = {}
    rid = REQUEST_ID_CTX.get()
    if rid and rid != "-":
        headers["X-Request-ID"] = rid
    if extra:
        headers.update(extra)
    return headers


def _error_message(resp: httpx.Response) -> str:
    """Extract ``error.message`` from a provider error body, if any."""
    try:
        data = resp.json()
    except ValueError:
        return f"HTTP {resp.status_code}"
    err = data.get("error") if isinstance(data, dict) else None
    if isinstance(err, dict) and err.get("message"):
        return str(err["message"])
    return f"HTTP {resp.status_code}"


def _intent_id(value) -> Optional[str]:
    # payment_intent is an id string, or an object when expanded
    if isinstance(value, dict):
        return value.get("id")
    return value or None


# ---------------- Checkout Session Adapter ---------------- #

class HttpCheckoutSessionClient(PaymentSessionPort):
    """HTTP client for checkout session lookups."""

    def __init__(
        self,
        base_url: str | None = None,
        secret_key: str | None = None,
        timeout: float | None = None,
        api_version: str | None = None,
    ):
        self.base_url = (base_url or settings.STRIPE_API_BASE).rstrip("/")
        self.secret_key = secret_key if secret_key is not None else settings.STRIPE_SECRET_KEY
        self.timeout = timeout or settings.HTTP_TIMEOUT_SECS
        self.api_version = api_version or getattr(settings, "STRIPE_API_VERSION", "")

    def retrieve(self, session_id: str) -> SessionLookup:
        """Fetch a checkout session by id.

        Business mappings:
        - 200 → FOUND with ``payment_status`` and ``payment_intent``
        - 400/404 → INVALID with the provider's error message
        - transport errors, other 4xx, 5xx, bad JSON or non-object body → UNAVAILABLE

        Args:
            session_id: Checkout session identifier (``cs_...``).

        Returns:
            SessionLookup: Outcome of the lookup.
        """
        if not session_id or not session_id.strip():
            return SessionLookup.invalid("Empty session id")

        extras = {}
        if self.api_version:
            extras["Stripe-Version"] = self.api_version
        headers = _request_headers(extras)
        url = f"{self.base_url}/checkout/sessions/{quote(session_id, safe='')}"

        try:
            with httpx.Client(timeout=self.timeout, auth=(self.secret_key, "")) as client:
                resp = client.get(url, headers=headers or None)
        except httpx.RequestError as e:
            logger.warning("checkout session lookup failed", extra={"session_id": session_id, "error": str(e)})
            return SessionLookup.unavailable(f"Payment provider unreachable: {e}")

        if resp.status_code == 200:
            try:
                data = resp.json()
            except ValueError:
                logger.warning("checkout session body not JSON", extra={"session_id": session_id})
                return SessionLookup.unavailable("Payment provider returned an unreadable response")
            if not isinstance(data, dict):
                logger.warning("checkout session body not an object", extra={"session_id": session_id})
                return SessionLookup.unavailable("Payment provider returned an unexpected response")
            return SessionLookup.found(
                CheckoutSession(
                    id=data.get("id") or session_id,
                    payment_status=data.get("payment_status") or "",
                    payment_intent_id=_intent_id(data.get("payment_intent")),
                )
            )

        message = _error_message(resp)
        if resp.status_code in INVALID_STATUSES:
            return SessionLookup.invalid(message)

        logger.warning(
            "checkout session lookup rejected",
            extra={"session_id": session_id, "status_code": resp.status_code, "error": message},
        )
        return SessionLookup.unavailable(message)
