# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains framework-agnostic business logic:
# - competition.py: Per-year rules (prices, discounts, weights, thresholds)
# - pricing.py, sauce_codes.py, packing.py, scoring.py: Pure rule modules
# - labels.py: Printable sticker and judge label sheets
# - models/: Pydantic schemas for data validation
# - services/: Database-backed operations
#
# Code in this package should NOT import from FastAPI or Celery.
# This keeps the logic testable and reusable.
# =============================================================================
