# =============================================================================
# tests/fake_stripe.py - Stripe Test Doubles
# =============================================================================
# - FakeStripe records stripe.checkout.Session.create calls and answers
#   them with a session, or raises an injected stripe error
# - signature_header() signs a payload the way Stripe signs webhooks
#   (HMAC-SHA256 over "<timestamp>.<payload>")
# =============================================================================

import hashlib
import hmac
import time
from typing import Any


class FakeStripe:
    """
    Stand-in for stripe.checkout.Session.create.

    Example:
        stripe_api.error = stripe.CardError("Card declined", None, "card_declined")
        stripe_api.sessions[0]["metadata"]["type"]
    """

    def __init__(self):
        self.sessions: list[dict[str, Any]] = []
        self.api_keys: list[str] = []
        self.error: Exception | None = None

    def create(self, api_key: str | None = None, **params: Any) -> dict[str, Any]:
        if self.error:
            raise self.error
        self.api_keys.append(api_key)
        self.sessions.append(params)
        session_id = f"cs_test_{len(self.sessions)}"
        return {"id": session_id, "url": f"https://checkout.stripe.com/c/pay/{session_id}"}

    @property
    def last(self) -> dict[str, Any]:
        return self.sessions[-1]


def signature_header(payload: bytes, secret: str, timestamp: int | None = None, extra: str = "") -> str:
    """Build a Stripe-Signature header value for payload."""
    timestamp = int(time.time()) if timestamp is None else timestamp
    signed = f"{timestamp}.".encode() + payload
    digest = hmac.new(secret.encode(), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},{extra}v1={digest}"
