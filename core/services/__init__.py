# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .access_service import AccessService
from .storage_service import StorageService
from .email_service import Audience, EmailService, EmailType
from .sauce_service import SauceService
from .payment_service import PaymentService
from .judge_service import JudgeService, map_experience_to_type
from .supplier_intake_service import IntakeStep, SupplierIntakeService
from .packing_service import PackingService
from .scoring_service import ScoringService

__all__ = [
    "AccessService",
    "StorageService",
    "Audience",
    "EmailService",
    "EmailType",
    "SauceService",
    "PaymentService",
    "JudgeService",
    "map_experience_to_type",
    "IntakeStep",
    "SupplierIntakeService",
    "PackingService",
    "ScoringService",
]
