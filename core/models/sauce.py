# =============================================================================
# core/models/sauce.py - Sauce, Supplier and Judge Enums and Schemas
# =============================================================================
# - SauceStatus: physical lifecycle of a sauce (registered -> judged)
# - PaymentStatus: whether the sauce's entry fee is paid
# - JudgeType: judge classes; "admin" doubles as the dashboard role
# - SauceSummary: what intake and the supplier dashboard return per sauce
# =============================================================================

from enum import Enum

from pydantic import BaseModel, Field


class SauceStatus(str, Enum):
    """
    Lifecycle of a sauce.

    - registered: Entered, bottles not yet received
    - arrived: Bottles received at the judging location
    - boxed: All bottles scanned into judge boxes
    - judged: Derived when a boxed sauce has scores, never stored

    Flow: registered -> arrived -> boxed -> (judged)
    """
    REGISTERED = "registered"
    ARRIVED = "arrived"
    BOXED = "boxed"
    JUDGED = "judged"


class PaymentStatus(str, Enum):
    """Entry fee status on a sauce row."""
    PENDING_PAYMENT = "pending_payment"
    PAID = "paid"


class JudgeType(str, Enum):
    """Judge classes. Only pro, community and supplier scores are weighted."""
    PRO = "pro"
    COMMUNITY = "community"
    SUPPLIER = "supplier"
    ADMIN = "admin"


class SauceSummary(BaseModel):
    """A sauce as returned to suppliers."""
    id: str
    name: str
    sauce_code: str | None = None
    image_path: str | None = None
    category: str | None = None
    status: SauceStatus | None = None
    payment_status: PaymentStatus | None = None


class SauceStatusUpdate(BaseModel):
    """Body for the admin status update."""
    status: SauceStatus = Field(..., description="New stored status")
