# =============================================================================
# app/routers/payments.py - Checkout and Payment Webhook Endpoints
# =============================================================================
# Checkout endpoints are called by the public pages right after intake, so
# they identify the payer by ID + email rather than by login.
# =============================================================================

import logging

from fastapi import APIRouter, Header, Query, Request

from core.models.payment import (
    CheckoutResponse,
    JudgeCheckoutRequest,
    PaymentQuote,
    SupplierCheckoutRequest,
)
from core.pricing import build_quote
from core.services.payment_service import PaymentService
from lib.stripe_gateway import StripeGateway

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/pricing/quote", response_model=PaymentQuote)
async def preview_quote(
    entries: int = Query(..., ge=1, le=1000, description="Number of sauce entries"),
):
    """
    Preview the price of a number of entries, discount included.

    Nothing is stored.
    """
    return build_quote(entries)


@router.post("/checkout/judge", response_model=CheckoutResponse)
async def judge_checkout(request: JudgeCheckoutRequest):
    """
    Start checkout for the community judge fee.

    Returns the hosted checkout URL, or already_paid if the fee is settled.
    """
    return PaymentService.create_judge_checkout(request.judge_id, request.email)


@router.post("/checkout/supplier", response_model=CheckoutResponse)
async def supplier_checkout(request: SupplierCheckoutRequest):
    """
    Start checkout for a supplier's payment quote.

    Returns the hosted checkout URL, or already_paid if the quote is settled.
    """
    return PaymentService.create_supplier_checkout(request.payment_id, request.email)


@router.post("/webhooks/stripe")
async def payment_webhook(
    request: Request,
    stripe_signature: str | None = Header(default=None, alias="Stripe-Signature"),
):
    """
    Receive payment provider events.

    The signature is verified against the raw body before anything is
    applied. Invalid signatures get a 400.
    """
    payload = await request.body()
    event = StripeGateway.construct_event(payload, stripe_signature)
    return PaymentService.handle_webhook_event(event)
