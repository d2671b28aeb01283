# =============================================================================
# app/routers/intake.py - Public Application Endpoints
# =============================================================================
# Supplier entry form and judge application form. No authentication: the
# forms are public, and supplier intake provisions the login account.
# =============================================================================

import logging

from fastapi import APIRouter

from core.models.intake import (
    JudgeIntakeRequest,
    JudgeIntakeResponse,
    SupplierIntakeRequest,
    SupplierIntakeResponse,
)
from core.services.judge_service import JudgeService
from core.services.supplier_intake_service import SupplierIntakeService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/intake/supplier",
    response_model=SupplierIntakeResponse,
    response_model_exclude_none=True,
)
async def submit_supplier_entry(request: SupplierIntakeRequest):
    """
    Submit a supplier's sauce entries.

    Creates (or updates) the supplier, registers them as a supplier judge,
    allocates a code per sauce and returns the payment quote to check out.

    Errors from a failed step are prefixed with the step name, e.g.
    "sauce_records: ...".
    """
    return SupplierIntakeService.submit(request)


@router.post("/intake/judge", response_model=JudgeIntakeResponse)
async def submit_judge_application(request: JudgeIntakeRequest):
    """
    Apply to judge.

    Pro applicants are activated by an admin; community judges become active
    once their judging fee is paid.
    """
    judge_id = JudgeService.submit_application(request)
    return JudgeIntakeResponse(judge_id=judge_id)
