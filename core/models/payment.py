# =============================================================================
# core/models/payment.py - Payment Schemas
# =============================================================================
# These models define the API contract for payment operations:
# - PaymentQuote: computed price breakdown for a batch of entries
# - PaymentRecordStatus: lifecycle of a persisted supplier payment
# - Checkout request/response bodies for both checkout variants
# =============================================================================

from enum import Enum

from pydantic import BaseModel, Field


class PaymentRecordStatus(str, Enum):
    """
    Status of a supplier_payments row.

    - pending: Awaiting checkout
    - succeeded: Confirmed by the payment webhook
    - superseded: Replaced by a newer quote for the same supplier

    Flow: pending -> succeeded, or pending -> superseded
    """
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    SUPERSEDED = "superseded"


class PaymentQuote(BaseModel):
    """
    Price breakdown for a batch of sauce entries, all amounts in cents.

    Example:
        {
            "entry_count": 3,
            "discount_rate": 0.05,
            "discount_percent": 5,
            "subtotal_cents": 15000,
            "discount_cents": 750,
            "amount_due_cents": 14250
        }
    """

    entry_count: int = Field(..., ge=1)
    discount_rate: float = Field(..., ge=0.0, lt=1.0)
    discount_percent: int = Field(..., ge=0, le=100)
    subtotal_cents: int = Field(..., ge=0)
    discount_cents: int = Field(..., ge=0)
    amount_due_cents: int = Field(..., ge=0)
    currency: str = "eur"


class JudgeCheckoutRequest(BaseModel):
    """Body for POST /checkout/judge."""
    judge_id: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)


class SupplierCheckoutRequest(BaseModel):
    """Body for POST /checkout/supplier."""
    payment_id: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)


class CheckoutResponse(BaseModel):
    """Redirect target for an externally hosted payment page."""
    session_id: str | None = None
    url: str | None = None
    already_paid: bool = False
