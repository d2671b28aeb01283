# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - sauce.py: Sauce/payment/judge enums and sauce summaries
# - payment.py: Payment quotes and checkout bodies
# - intake.py: Supplier and judge application payloads
# - packing.py: Bottle scans, boxes, stickers and labels
# - scoring.py: Judge score submissions
#
# These models define the "contract" between API and clients.
# =============================================================================

from .sauce import (
    JudgeType,
    PaymentStatus,
    SauceStatus,
    SauceStatusUpdate,
    SauceSummary,
)

from .payment import (
    CheckoutResponse,
    JudgeCheckoutRequest,
    PaymentQuote,
    PaymentRecordStatus,
    SupplierCheckoutRequest,
)

from .intake import (
    JudgeIntakeRequest,
    JudgeIntakeResponse,
    SauceEntry,
    SupplierIntakeRequest,
    SupplierIntakeResponse,
)

from .packing import (
    BottleScanRequest,
    BoxAssignmentRequest,
    ConflictCheck,
    JudgeBoxAssignment,
    JudgeLabelData,
    SaucePackingStatus,
    ScanResult,
    StickerData,
    StickerSheetSummary,
)

from .scoring import (
    SauceScores,
    ScoreSubmission,
)

__all__ = [
    # Sauce
    "JudgeType",
    "PaymentStatus",
    "SauceStatus",
    "SauceStatusUpdate",
    "SauceSummary",
    # Payment
    "CheckoutResponse",
    "JudgeCheckoutRequest",
    "PaymentQuote",
    "PaymentRecordStatus",
    "SupplierCheckoutRequest",
    # Intake
    "JudgeIntakeRequest",
    "JudgeIntakeResponse",
    "SauceEntry",
    "SupplierIntakeRequest",
    "SupplierIntakeResponse",
    # Packing
    "BottleScanRequest",
    "BoxAssignmentRequest",
    "ConflictCheck",
    "JudgeBoxAssignment",
    "JudgeLabelData",
    "SaucePackingStatus",
    "ScanResult",
    "StickerData",
    "StickerSheetSummary",
    # Scoring
    "SauceScores",
    "ScoreSubmission",
]
