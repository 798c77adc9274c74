"""In-process stub adapter for the payment session port.

The stub implements ``PaymentSessionPort`` without any network calls. It
is intended for unit tests and local development where deterministic
behavior is useful and the payment provider is not reachable.
"""

import re
from typing import Dict, Optional

from .domain import CheckoutSession, PaymentSessionPort, SessionLookup, PAID

STUB_SESSION_RE = re.compile(r"^cs_test_(paid|unpaid|no_payment_required)_([A-Za-z0-9]+)$")


class PaymentSessionStub(PaymentSessionPort):
    """Stub implementation of ``PaymentSessionPort``.

    Ids shaped like ``cs_test_<payment_status>_<suffix>`` resolve to a
    session with that payment status; paid sessions get the payment intent
    ``pi_<suffix>``. Sessions passed to the constructor take precedence.
    Every other id is reported as INVALID.
    """

    def __init__(self, sessions: Optional[Dict[str, CheckoutSession]] = None):
        self.sessions = dict(sessions or {})

    def retrieve(self, session_id: str) -> SessionLookup:
        """Resolve ``session_id`` deterministically.

        Returns:
            SessionLookup: FOUND for registered or well-formed test ids,
            INVALID otherwise. Never UNAVAILABLE.
        """
        if session_id in self.sessions:
            return SessionLookup.found(self.sessions[session_id])
        m = STUB_SESSION_RE.match(session_id or "")
        if not m:
            return SessionLookup.invalid(f"No such checkout.session: '{session_id}'")
        payment_status, suffix = m.groups()
        intent = f"pi_{suffix}" if payment_status == PAID else None
        return SessionLookup.found(
            CheckoutSession(id=session_id, payment_status=payment_status, payment_intent_id=intent)
        )
