# =============================================================================
# lib/stripe_gateway.py - Hosted Checkout Gateway
# =============================================================================
# Thin wrapper over the stripe SDK for the two provider calls the backend
# needs:
# - create a hosted checkout session
# - verify and parse a signed webhook payload
#
# SDK errors are turned into our own exceptions so routes only ever see
# PaymentProviderError (502) and WebhookSignatureError (400).
#
# Usage:
#   from lib.stripe_gateway import StripeGateway
#   session = StripeGateway.create_checkout_session(...)
#   event = StripeGateway.construct_event(body, signature_header)
# =============================================================================

from __future__ import annotations

import logging
from typing import Any

import stripe

from app.config import settings
from app.exceptions import PaymentProviderError, WebhookSignatureError

logger = logging.getLogger(__name__)

# Webhooks older than this are rejected as replays
SIGNATURE_TOLERANCE_SECONDS = 300

PRODUCT_NAME = "EU Hot Sauce Awards Entry"
JUDGE_PRODUCT_NAME = "Community Judge Fee"


class StripeGateway:
    """
    Payment provider calls.

    All methods are static; the secret key and webhook secret come from
    settings and are passed per call, never set on the stripe module.
    """

    @staticmethod
    def create_checkout_session(
        *,
        email: str,
        amount_cents: int,
        product_name: str,
        metadata: dict[str, str],
        success_url: str,
        cancel_url: str,
        description: str | None = None,
        client_reference_id: str | None = None,
        currency: str = "eur",
    ) -> dict[str, Any]:
        """
        Create a one-line-item hosted checkout session.

        Returns:
            Dict with the session "id" and hosted "url"

        Raises:
            PaymentProviderError: If the key is missing or the provider
                rejects the request
        """
        if not settings.STRIPE_SECRET_KEY:
            raise PaymentProviderError("STRIPE_SECRET_KEY is not configured")

        product_data: dict[str, Any] = {"name": product_name}
        if description:
            product_data["description"] = description

        params: dict[str, Any] = {
            "mode": "payment",
            "customer_email": email,
            "success_url": success_url,
            "cancel_url": cancel_url,
            "metadata": metadata,
            "line_items": [
                {
                    "quantity": 1,
                    "price_data": {
                        "currency": currency,
                        "unit_amount": amount_cents,
                        "product_data": product_data,
                    },
                }
            ],
        }
        if client_reference_id:
            params["client_reference_id"] = client_reference_id

        try:
            session = stripe.checkout.Session.create(api_key=settings.STRIPE_SECRET_KEY, **params)
        except stripe.StripeError as e:
            message = e.user_message or str(e)
            logger.error(f"Checkout session rejected: {message}")
            raise PaymentProviderError(message)

        logger.info(f"Created checkout session {session['id']} for {email}")
        return {"id": session["id"], "url": session["url"]}

    @staticmethod
    def construct_event(
        payload: bytes,
        signature_header: str | None,
        secret: str | None = None,
    ) -> stripe.Event:
        """
        Verify a webhook signature and parse the event.

        Args:
            payload: Raw request body, exactly as received
            signature_header: Value of the Stripe-Signature header
            secret: Endpoint signing secret (defaults to settings)

        Returns:
            The verified event (dict-like)

        Raises:
            WebhookSignatureError: On a missing, malformed, stale or
                mismatched signature, or a body that isn't JSON
        """
        secret = secret if secret is not None else settings.STRIPE_WEBHOOK_SECRET
        if not secret:
            raise WebhookSignatureError("Webhook secret is not configured")
        if not signature_header:
            raise WebhookSignatureError("Missing signature header")

        try:
            return stripe.Webhook.construct_event(
                payload,
                signature_header,
                secret,
                tolerance=SIGNATURE_TOLERANCE_SECONDS,
            )
        except stripe.SignatureVerificationError as e:
            logger.warning(f"Rejected webhook: {e}")
            raise WebhookSignatureError(str(e))
        except ValueError as e:
            raise WebhookSignatureError(f"Invalid payload: {e}")
