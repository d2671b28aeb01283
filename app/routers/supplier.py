# =============================================================================
# app/routers/supplier.py - Supplier Dashboard Endpoints
# =============================================================================
# Suppliers manage their own sauces. The caller is identified by the email
# in their token; every endpoint requires authentication.
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Path

from app.dependencies import CurrentUser
from core.models.intake import SauceEntry
from core.models.sauce import SauceSummary
from core.services.payment_service import PaymentService
from core.services.sauce_service import SauceService

router = APIRouter()


@router.get("/supplier/sauces", response_model=list[SauceSummary])
async def list_my_sauces(user: CurrentUser):
    """List the caller's sauces with status and payment status."""
    return SauceService.list_sauces(user.email)


@router.post("/supplier/sauces", response_model=SauceSummary)
async def add_sauce(entry: SauceEntry, user: CurrentUser):
    """
    Add a sauce to the caller's entries.

    The sauce starts unpaid; create a payment batch to pay for it.
    """
    return SauceService.add_sauce(user.email, entry)


@router.delete("/supplier/sauces/{sauce_id}")
async def delete_sauce(
    sauce_id: Annotated[str, Path(description="Sauce UUID")],
    user: CurrentUser,
):
    """Delete one of the caller's unpaid sauces."""
    SauceService.delete_sauce(user.email, sauce_id)
    return {"success": True}


@router.post("/supplier/payment-batch")
async def create_payment_batch(user: CurrentUser):
    """
    Quote every unpaid sauce the caller has.

    Any earlier pending quote is superseded by this one.
    """
    return PaymentService.create_payment_batch(user.email)
