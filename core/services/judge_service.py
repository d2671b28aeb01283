# =============================================================================
# core/services/judge_service.py - Judge Business Logic
# =============================================================================
# Handles judge applications, admin promotion and judge box labels.
# =============================================================================

import logging
from typing import Any

from lib.supabase_client import SupabaseClient, SupabaseClientError
from core.labels import render_judge_label_pdf
from core.models.intake import JudgeIntakeRequest
from core.models.packing import JudgeLabelData
from core.models.payment import PaymentRecordStatus
from core.models.sauce import JudgeType
from core.services.email_service import EmailService, EmailType
from core.validation import email_error, normalize_email
from app.config import settings
from app.exceptions import InvalidSubmissionError

logger = logging.getLogger(__name__)

PRO_EXPERIENCE_LEVELS = frozenset({
    "Professional Chili Person",
    "Experienced Food / Chili Person",
})

LABEL_JUDGE_TYPES = (JudgeType.ADMIN.value, JudgeType.PRO.value, JudgeType.COMMUNITY.value)


def map_experience_to_type(experience: str | None) -> JudgeType:
    """
    Classify a judge applicant by declared experience.

    Professionals and experienced food people judge as pro; everyone else,
    including unknown answers, judges as community.
    """
    if experience in PRO_EXPERIENCE_LEVELS:
        return JudgeType.PRO
    return JudgeType.COMMUNITY


def display_name(judge: dict[str, Any]) -> str:
    """Judge name, falling back to the email's local part."""
    if judge.get("name"):
        return judge["name"]
    if judge.get("email"):
        return judge["email"].split("@")[0]
    return f"Judge {str(judge.get('id', ''))[:8]}"


class JudgeService:
    """Service for judge operations."""

    @staticmethod
    def submit_application(request: JudgeIntakeRequest) -> str:
        """
        Record a judge application.

        Applicants are stored inactive until approved (pro) or paid
        (community). Re-applying with the same email updates the row; an
        existing admin keeps admin rights.

        Args:
            request: Application form

        Returns:
            The judge's ID

        Raises:
            InvalidSubmissionError: If the name or email is invalid
        """
        if not request.name.strip():
            raise InvalidSubmissionError("Name is required", field="name")

        error = email_error(request.email)
        if error:
            raise InvalidSubmissionError(error, field="email")
        email = normalize_email(request.email)

        judge_type = map_experience_to_type(request.experience)
        existing = SupabaseClient.fetch_judge_by_email(email)
        if existing and existing.get("type") == JudgeType.ADMIN.value:
            judge_type = JudgeType.ADMIN

        data = {
            "email": email,
            "name": request.name.strip(),
            "address": request.address,
            "city": request.city,
            "postal_code": request.zip,
            "country": request.country,
            "experience_level": request.experience,
            "type": judge_type.value,
            "industry_affiliation": request.industry_affiliation,
            "affiliation_details": request.affiliation_details or None,
            "active": False,
        }

        client = SupabaseClient.get_client()
        response = client.table("judges").upsert(data, on_conflict="email").execute()
        if not response.data:
            raise SupabaseClientError("Judge upsert returned no data", code="UPSERT_FAILED")

        judge_id = str(response.data[0]["id"])
        logger.info(f"Judge application from {email} recorded as {judge_type.value} ({judge_id})")

        EmailService.send_quietly(EmailType.JUDGE_CONFIRMATION, {
            "email": email,
            "name": data["name"],
            "judgeType": judge_type.value,
        })
        return judge_id

    @staticmethod
    def add_admin(email: str) -> str:
        """
        Promote a judge to admin, or create an admin judge.

        Returns:
            Outcome message

        Raises:
            InvalidSubmissionError: If the email is invalid or already an admin
        """
        error = email_error(email)
        if error:
            raise InvalidSubmissionError("Please provide a valid email address.", field="email")
        email = normalize_email(email)

        client = SupabaseClient.get_client()
        existing = SupabaseClient.fetch_judge_by_email(email)

        if existing:
            if existing.get("type") == JudgeType.ADMIN.value:
                raise InvalidSubmissionError("This user is already an admin.", field="email")
            client.table("judges").update({"type": JudgeType.ADMIN.value}).eq("email", email).execute()
            logger.info(f"Promoted {email} to admin")
            return "User updated to admin."

        client.table("judges").insert({
            "email": email,
            "type": JudgeType.ADMIN.value,
            "active": True,
        }).execute()
        logger.info(f"Created admin {email}")
        return "Admin user created successfully."

    @staticmethod
    def qr_code_url(judge_id: str) -> str:
        return f"{settings.QR_CODE_API_URL}?data={judge_id}&size=200x200"

    @staticmethod
    def is_label_eligible(judge: dict[str, Any]) -> bool:
        """
        Whether a judge gets a box label.

        Admins always do. Pro judges need to be active; community judges
        need to be active and to have paid the judge fee.
        """
        judge_type = judge.get("type")
        if judge_type == JudgeType.ADMIN.value:
            return True
        if not judge.get("active"):
            return False
        if judge_type == JudgeType.COMMUNITY.value:
            return judge.get("stripe_payment_status") == PaymentRecordStatus.SUCCEEDED.value
        return judge_type == JudgeType.PRO.value

    @staticmethod
    def generate_judge_labels() -> list[JudgeLabelData]:
        """
        Build box labels for every eligible judge.

        Each judge's QR URL (encoding the judge ID) is stored on the judge
        row as a side effect.

        Raises:
            InvalidSubmissionError: If no judge is eligible
        """
        client = SupabaseClient.get_client()
        response = (
            client.table("judges")
            .select("*")
            .in_("type", list(LABEL_JUDGE_TYPES))
            .execute()
        )
        judges = [j for j in response.data or [] if JudgeService.is_label_eligible(j)]

        if not judges:
            raise InvalidSubmissionError("No active judges found.")

        labels = []
        for judge in judges:
            qr_url = JudgeService.qr_code_url(judge["id"])
            client.table("judges").update({"qr_code_url": qr_url}).eq("id", judge["id"]).execute()

            city_parts = [judge.get("city"), judge.get("postal_code"), judge.get("country")]
            labels.append(JudgeLabelData(
                judge_id=str(judge["id"]),
                name=display_name(judge),
                email=judge.get("email") or "",
                type=judge.get("type") or "",
                address_line1=judge.get("address") or "",
                address_line2=", ".join(part for part in city_parts if part),
                qr_code_url=qr_url,
            ))

        logger.info(f"Generated {len(labels)} judge labels")
        return labels

    @staticmethod
    def judge_label_pdf() -> bytes:
        """Judge labels rendered as a printable PDF."""
        return render_judge_label_pdf(JudgeService.generate_judge_labels())
