# =============================================================================
# app/routers/admin.py - Admin Dashboard Endpoints
# =============================================================================
# Everything here requires an admin judge (checked per request against the
# judges table). A rejected caller gets 403 and nothing is changed.
#
# Endpoints cover:
# - Sauce status and payment overrides
# - Box packing (bottle scans, manual boxing, box assignment, progress)
# - Printables (bottle stickers, judge labels)
# - Results export
# - Admin management and bulk email
# =============================================================================

import logging
from typing import Annotated

from fastapi import APIRouter, Path, Query
from fastapi.responses import PlainTextResponse, Response
from pydantic import BaseModel, Field

from app.dependencies import AdminJudge
from app.routers.tasks import TaskSubmitResponse
from core.models.packing import (
    BottleScanRequest,
    BoxAssignmentRequest,
    ConflictCheck,
    JudgeLabelData,
    SaucePackingStatus,
    ScanResult,
    StickerSheetSummary,
)
from core.models.sauce import SauceStatusUpdate
from core.services.email_service import Audience
from core.services.judge_service import JudgeService
from core.services.packing_service import PackingService
from core.services.payment_service import PaymentService
from core.services.sauce_service import SauceService
from core.services.scoring_service import ScoringService
from workers.tasks import send_email_campaign, send_payment_reminders

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin")

SauceId = Annotated[str, Path(description="Sauce UUID")]


# =============================================================================
# Request Models
# =============================================================================

class AddAdminRequest(BaseModel):
    """Email of the person to make an admin."""
    email: str = Field(..., min_length=3, examples=["organiser@heatawards.eu"])


class EmailCampaignRequest(BaseModel):
    """A message to send to everyone in an audience."""
    audience: Audience
    subject: str = Field(..., min_length=1, max_length=200)
    body: str = Field(..., min_length=1)


# =============================================================================
# Sauces
# =============================================================================

@router.patch("/sauces/{sauce_id}/status")
async def update_sauce_status(sauce_id: SauceId, update: SauceStatusUpdate, admin: AdminJudge):
    """
    Set a sauce's status.

    Admins may move a sauce backwards to fix mistakes. A sauce can't be
    marked arrived before it is paid, and "judged" can't be set by hand.
    """
    sauce = SauceService.update_sauce_status(sauce_id, update.status)
    return {"success": True, "sauce_id": sauce_id, "status": sauce["status"]}


@router.post("/sauces/{sauce_id}/bypass-payment")
async def bypass_payment(sauce_id: SauceId, admin: AdminJudge):
    """Mark a sauce paid without checkout."""
    PaymentService.bypass_payment(sauce_id)
    logger.info(f"Admin {admin['email']} bypassed payment for sauce {sauce_id}")
    return {"success": True, "message": "Sauce marked as paid."}


@router.post("/sauces/{sauce_id}/boxed")
async def mark_as_boxed(sauce_id: SauceId, admin: AdminJudge):
    """Box a sauce without waiting for all bottle scans."""
    return {"success": True, "message": PackingService.manually_mark_as_boxed(sauce_id)}


# =============================================================================
# Box Packing
# =============================================================================

@router.post("/boxes")
async def assign_sauces_to_box(request: BoxAssignmentRequest, admin: AdminJudge):
    """Put sauces into a labelled box and mark them boxed."""
    assigned = PackingService.assign_sauces_to_box(request.box_label, request.sauce_ids)
    return {"success": True, "assigned": assigned}


@router.post("/scans", response_model=ScanResult)
async def record_bottle_scan(request: BottleScanRequest, admin: AdminJudge):
    """
    Record one bottle scanned into a judge's box.

    The seventh bottle of a sauce boxes it automatically.
    """
    return PackingService.record_bottle_scan(
        request.judge_id,
        request.sauce_id,
        scanned_by=admin["email"],
        bottle_number=request.bottle_number,
    )


@router.get("/packing-status", response_model=list[SaucePackingStatus])
async def packing_status(admin: AdminJudge):
    """Scan progress of every arrived sauce."""
    return PackingService.get_packing_status()


@router.get("/judges/{judge_id}/box")
async def judge_box(
    judge_id: Annotated[str, Path(description="Judge UUID")],
    admin: AdminJudge,
):
    """List the sauces in a judge's box."""
    return PackingService.get_judge_box_assignments(judge_id)


@router.get("/conflicts", response_model=ConflictCheck)
async def check_conflict(
    admin: AdminJudge,
    judge_id: str = Query(..., min_length=1),
    sauce_id: str = Query(..., min_length=1),
):
    """Check whether a judge supplied a sauce."""
    return PackingService.check_conflict_of_interest(judge_id, sauce_id)


# =============================================================================
# Printables
# =============================================================================

@router.get("/stickers", response_model=StickerSheetSummary)
async def sticker_data(admin: AdminJudge):
    """Sticker print run for every arrived or boxed sauce."""
    return PackingService.generate_sticker_data()


@router.get("/stickers.pdf")
async def sticker_pdf(admin: AdminJudge):
    """Bottle stickers as a printable PDF."""
    return Response(
        content=PackingService.sticker_pdf(),
        media_type="application/pdf",
        headers={"Content-Disposition": 'attachment; filename="sauce-stickers.pdf"'},
    )


@router.get("/judge-labels", response_model=list[JudgeLabelData])
async def judge_labels(admin: AdminJudge):
    """Box labels for every eligible judge."""
    return JudgeService.generate_judge_labels()


@router.get("/judge-labels.pdf")
async def judge_labels_pdf(admin: AdminJudge):
    """Judge box labels as a printable PDF."""
    return Response(
        content=JudgeService.judge_label_pdf(),
        media_type="application/pdf",
        headers={"Content-Disposition": 'attachment; filename="judge-labels.pdf"'},
    )


# =============================================================================
# Results
# =============================================================================

@router.get("/results.csv", response_class=PlainTextResponse)
async def export_results(admin: AdminJudge):
    """Final weighted results as CSV, best sauce first."""
    return PlainTextResponse(
        ScoringService.export_results(),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="results.csv"'},
    )


# =============================================================================
# Admins and Email
# =============================================================================

@router.post("/admins")
async def add_admin(request: AddAdminRequest, admin: AdminJudge):
    """Make someone an admin, creating their judge row if needed."""
    message = JudgeService.add_admin(request.email)
    logger.info(f"Admin {admin['email']} added admin {request.email}")
    return {"success": True, "message": message}


@router.post("/payment-reminders")
async def payment_reminders(
    admin: AdminJudge,
    background: bool = Query(default=False, description="Queue instead of sending now"),
):
    """
    Remind every supplier with a pending payment.

    Sends inline and returns the summary, or queues a job when
    background=true.
    """
    if background:
        task = send_payment_reminders.delay()
        return TaskSubmitResponse(task_id=task.id, status="PENDING", message="Payment reminders queued")
    return PaymentService.send_payment_reminders()


@router.post("/email-campaigns", response_model=TaskSubmitResponse)
async def email_campaign(request: EmailCampaignRequest, admin: AdminJudge):
    """Queue an email to an audience. Poll /tasks/{task_id} for progress."""
    task = send_email_campaign.delay(request.audience.value, request.subject, request.body)
    logger.info(f"Admin {admin['email']} queued campaign to {request.audience.value} [{task.id}]")
    return TaskSubmitResponse(task_id=task.id, status="PENDING", message="Campaign queued")
