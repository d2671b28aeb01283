# =============================================================================
# core/services/email_service.py - Transactional and Campaign Email
# =============================================================================
# Emails are rendered and delivered by the website's email API. This service
# posts {type, data} to it, authenticated with the service key.
#
# Non-critical emails (confirmations) go through send_quietly(), which logs
# failures instead of raising.
# =============================================================================

import logging
from enum import Enum
from typing import Any, Callable

import httpx

from lib.supabase_client import SupabaseClient
from core.models.sauce import JudgeType, PaymentStatus
from app.config import settings
from app.exceptions import EmailDeliveryError, InvalidSubmissionError

logger = logging.getLogger(__name__)


class EmailType(str, Enum):
    """Templates understood by the email API."""
    SUPPLIER_CONFIRMATION = "supplier_confirmation"
    JUDGE_CONFIRMATION = "judge_confirmation"
    PAYMENT_REMINDER = "payment_reminder"
    CAMPAIGN = "campaign"


class Audience(str, Enum):
    """Recipient groups for email campaigns."""
    SUPPLIERS = "suppliers"
    UNPAID_SUPPLIERS = "unpaid_suppliers"
    JUDGES = "judges"
    PRO_JUDGES = "pro_judges"
    COMMUNITY_JUDGES = "community_judges"


class EmailService:
    """Service for sending email through the email API."""

    @staticmethod
    def send(email_type: EmailType | str, data: dict[str, Any]) -> None:
        """
        Send one email.

        Args:
            email_type: Template name
            data: Template data; must include the recipient "email"

        Raises:
            EmailDeliveryError: If the API is unreachable or refuses the email
        """
        email_type = EmailType(email_type)
        url = f"{settings.EMAIL_API_URL.rstrip('/')}/api/send-email"

        try:
            response = httpx.post(
                url,
                json={"type": email_type.value, "data": data},
                headers={"Authorization": f"Bearer {settings.SUPABASE_SERVICE_KEY}"},
                timeout=30,
            )
        except httpx.HTTPError as e:
            raise EmailDeliveryError(str(e))

        if response.status_code >= 400:
            raise EmailDeliveryError(response.text)

        logger.info(f"Sent {email_type.value} email to {data.get('email')}")

    @staticmethod
    def send_quietly(email_type: EmailType | str, data: dict[str, Any]) -> bool:
        """
        Send an email whose failure must not fail the caller.

        Returns:
            True if the email was accepted
        """
        try:
            EmailService.send(email_type, data)
            return True
        except EmailDeliveryError as e:
            logger.warning(f"Failed to send {email_type} email to {data.get('email')}: {e.message}")
            return False

    # -------------------------------------------------------------------------
    # Campaigns
    # -------------------------------------------------------------------------

    @staticmethod
    def campaign_recipients(audience: Audience | str) -> list[dict[str, str]]:
        """
        Resolve a campaign audience to recipients.

        Judge audiences only include active judges. Unpaid suppliers are
        suppliers with at least one sauce awaiting payment.

        Returns:
            List of {"email", "name"} dicts, unique by email

        Raises:
            InvalidSubmissionError: If the audience is unknown
        """
        try:
            audience = Audience(audience)
        except ValueError:
            raise InvalidSubmissionError(f"Unknown audience: {audience}", field="audience")

        client = SupabaseClient.get_client()

        if audience in (Audience.SUPPLIERS, Audience.UNPAID_SUPPLIERS):
            suppliers = client.table("suppliers").select("id, email, brand_name").execute().data or []

            if audience == Audience.UNPAID_SUPPLIERS:
                unpaid = (
                    client.table("sauces")
                    .select("supplier_id")
                    .eq("payment_status", PaymentStatus.PENDING_PAYMENT.value)
                    .execute()
                ).data or []
                unpaid_ids = {str(row["supplier_id"]) for row in unpaid}
                suppliers = [s for s in suppliers if str(s["id"]) in unpaid_ids]

            rows = [(s["email"], s.get("brand_name") or "") for s in suppliers]
        else:
            query = client.table("judges").select("email, name, type").eq("active", True)
            if audience == Audience.PRO_JUDGES:
                query = query.eq("type", JudgeType.PRO.value)
            elif audience == Audience.COMMUNITY_JUDGES:
                query = query.eq("type", JudgeType.COMMUNITY.value)
            else:
                query = query.neq("type", JudgeType.ADMIN.value)
            judges = query.execute().data or []
            rows = [(j["email"], j.get("name") or "") for j in judges]

        recipients: dict[str, dict[str, str]] = {}
        for email, name in rows:
            if email and email not in recipients:
                recipients[email] = {"email": email, "name": name}

        return list(recipients.values())

    @staticmethod
    def send_campaign(
        audience: Audience | str,
        subject: str,
        body: str,
        on_progress: Callable[[int, int], None] | None = None,
    ) -> dict[str, Any]:
        """
        Send a campaign email to every recipient in an audience.

        Individual failures are collected, not raised. on_progress, if
        given, is called with (done, total) after each recipient.

        Returns:
            {"audience", "total", "sent", "errors": [{"email", "error"}]}
        """
        recipients = EmailService.campaign_recipients(audience)
        sent = 0
        errors = []

        for done, recipient in enumerate(recipients, start=1):
            try:
                EmailService.send(
                    EmailType.CAMPAIGN,
                    {**recipient, "subject": subject, "body": body},
                )
                sent += 1
            except EmailDeliveryError as e:
                errors.append({"email": recipient["email"], "error": e.message})
            if on_progress:
                on_progress(done, len(recipients))

        logger.info(f"Campaign to {Audience(audience).value}: {sent}/{len(recipients)} sent")
        return {
            "audience": Audience(audience).value,
            "total": len(recipients),
            "sent": sent,
            "errors": errors,
        }
