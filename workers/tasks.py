# =============================================================================
# workers/tasks.py - Celery Task Definitions
# =============================================================================
# Defines background tasks for bulk email.
#
# Tasks:
# - send_payment_reminders: Remind every supplier with a pending quote
# - send_email_campaign: Send one message to a whole audience
# =============================================================================

import logging
from typing import Any

from celery import shared_task, current_task

from core.services.email_service import EmailService
from core.services.payment_service import PaymentService

logger = logging.getLogger(__name__)


# =============================================================================
# Task State Updates
# =============================================================================

def update_progress(current: int, total: int, message: str = "Sending...") -> None:
    """
    Update task progress for polling.

    Args:
        current: Emails handled so far
        total: Total emails
        message: Status message
    """
    if current_task and current_task.request.id:
        current_task.update_state(
            state="PROGRESS",
            meta={
                "current": current,
                "total": total,
                "percent": int((current / total) * 100) if total else 100,
                "message": message,
            }
        )


# =============================================================================
# Email Tasks
# =============================================================================

@shared_task(bind=True, name="workers.tasks.send_payment_reminders")
def send_payment_reminders(self) -> dict[str, Any]:
    """
    Email every supplier whose quote is still pending.

    Returns:
        Summary with reminders_sent, total_pending, details and errors
    """
    logger.info("Sending payment reminders")
    result = PaymentService.send_payment_reminders()
    logger.info(f"Payment reminders: {result['reminders_sent']}/{result['total_pending']} sent")
    return result


@shared_task(bind=True, name="workers.tasks.send_email_campaign")
def send_email_campaign(
    self,
    audience: str,
    subject: str,
    body: str,
) -> dict[str, Any]:
    """
    Send a campaign email to an audience.

    Args:
        audience: One of suppliers, unpaid_suppliers, judges, pro_judges,
            community_judges
        subject: Email subject
        body: Email body

    Returns:
        Summary with total, sent and per-recipient errors
    """
    logger.info(f"Sending '{subject}' campaign to {audience}")

    return EmailService.send_campaign(
        audience,
        subject,
        body,
        on_progress=lambda done, total: update_progress(done, total, f"Sent {done}/{total}"),
    )
