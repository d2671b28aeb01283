# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# FastAPI routers organized by audience:
# - health.py: Health check endpoints
# - intake.py: Public supplier and judge application forms
# - payments.py: Pricing preview, checkout sessions, Stripe webhook
# - supplier.py: Supplier dashboard (own sauces, payment batches)
# - judging.py: Judge score submission
# - admin.py: Packing, printables, results, admins, bulk email
# - tasks.py: Background email job status
#
# Each router is mounted in main.py under /api/v1.
# =============================================================================

from . import health
from . import intake
from . import payments
from . import supplier
from . import judging
from . import admin
from . import tasks

__all__ = [
    "health",
    "intake",
    "payments",
    "supplier",
    "judging",
    "admin",
    "tasks",
]
