# =============================================================================
# core/services/supplier_intake_service.py - Supplier Entry Intake
# =============================================================================
# Turns one supplier form submission into accounts, sauces and a payment
# quote. Steps run strictly in order:
#
#   honeypot -> validate -> auth_user -> supplier_upsert -> judge_upsert
#   -> judge_participation -> supplier_participation -> sauce_records
#   -> qr_codes -> payment_quote -> link_payment -> images
#
# There is no transaction. A failing step raises IntakeStepError tagged with
# the step label; whatever earlier steps wrote stays written. Re-submitting
# is safe: upserts are keyed by email and unpaid sauces are reused.
# =============================================================================

import logging
from contextlib import contextmanager
from enum import Enum
from typing import Any, Iterator

from lib.supabase_client import SupabaseClient, SupabaseClientError
from core.competition import get_rules
from core.models.intake import SupplierIntakeRequest, SupplierIntakeResponse
from core.models.payment import PaymentRecordStatus
from core.models.sauce import JudgeType, SauceSummary
from core.services.email_service import EmailService, EmailType
from core.services.payment_service import PaymentService
from core.services.sauce_service import SauceService
from core.validation import email_error, normalize_email
from app.exceptions import HeatAwardsException, IntakeStepError, InvalidSubmissionError

logger = logging.getLogger(__name__)


class IntakeStep(str, Enum):
    """Labels used to tag intake failures."""
    HONEYPOT = "honeypot"
    VALIDATE = "validate"
    AUTH_USER = "auth_user"
    SUPPLIER_UPSERT = "supplier_upsert"
    JUDGE_UPSERT = "judge_upsert"
    JUDGE_PARTICIPATION = "judge_participation"
    SUPPLIER_PARTICIPATION = "supplier_participation"
    SAUCE_RECORDS = "sauce_records"
    QR_CODES = "qr_codes"
    PAYMENT_QUOTE = "payment_quote"
    LINK_PAYMENT = "link_payment"
    IMAGES = "images"


@contextmanager
def intake_step(step: IntakeStep) -> Iterator[None]:
    """Re-raise any failure inside the block as an IntakeStepError for step."""
    try:
        yield
    except IntakeStepError:
        raise
    except HeatAwardsException as e:
        logger.error(f"Supplier intake failed at {step.value}: {e.message}")
        raise IntakeStepError(step.value, e.message)
    except Exception as e:
        logger.error(f"Supplier intake failed at {step.value}: {e}")
        raise IntakeStepError(step.value, str(e))


class SupplierIntakeService:
    """
    Orchestrates a supplier submission.

    Example:
        response = SupplierIntakeService.submit(request)
        response.payment["amount_due_cents"]
    """

    @staticmethod
    def validate(request: SupplierIntakeRequest) -> str:
        """
        Check a submission before anything is written.

        Returns:
            The normalized email

        Raises:
            InvalidSubmissionError: On a missing field or bad email
            UnknownCategoryError: On an unknown sauce category
        """
        if not request.brand.strip():
            raise InvalidSubmissionError("Brand name is required", field="brand")
        if not request.address.strip():
            raise InvalidSubmissionError("Address is required", field="address")

        error = email_error(request.email)
        if error:
            raise InvalidSubmissionError(error, field="email")

        if not request.sauces:
            raise InvalidSubmissionError("At least one sauce is required", field="sauces")

        for index, entry in enumerate(request.sauces):
            SauceService.validate_entry(entry, index)

        return normalize_email(request.email)

    @staticmethod
    def _find_auth_user(email: str) -> Any | None:
        client = SupabaseClient.get_client()
        for user in client.auth.admin.list_users():
            if (getattr(user, "email", None) or "").lower() == email:
                return user
        return None

    @staticmethod
    def ensure_auth_user(email: str) -> str:
        """
        Find or create the login identity for an email.

        If creation fails (typically because a concurrent request created
        the user), the lookup is retried once.

        Returns:
            Auth user ID
        """
        user = SupplierIntakeService._find_auth_user(email)
        if user:
            return str(user.id)

        client = SupabaseClient.get_client()
        try:
            response = client.auth.admin.create_user({"email": email, "email_confirm": True})
            logger.info(f"Created auth user for {email}")
            return str(response.user.id)
        except Exception as e:
            logger.warning(f"Auth user creation failed for {email}, retrying lookup: {e}")
            user = SupplierIntakeService._find_auth_user(email)
            if user:
                return str(user.id)
            raise

    @staticmethod
    def upsert_supplier(request: SupplierIntakeRequest, email: str) -> dict[str, Any]:
        client = SupabaseClient.get_client()
        response = client.table("suppliers").upsert({
            "email": email,
            "brand_name": request.brand.strip(),
            "contact_name": (request.contact_name or "").strip() or None,
            "address": request.address.strip(),
        }, on_conflict="email").execute()

        if not response.data:
            raise SupabaseClientError("Supplier upsert returned no data", code="UPSERT_FAILED")
        return response.data[0]

    @staticmethod
    def upsert_supplier_judge(request: SupplierIntakeRequest, email: str) -> None:
        """
        Register the supplier as an active supplier judge.

        Supplier judges don't pay a judging fee. An existing admin keeps the
        admin type.
        """
        existing = SupabaseClient.fetch_judge_by_email(email)
        judge_type = JudgeType.SUPPLIER
        if existing and existing.get("type") == JudgeType.ADMIN.value:
            judge_type = JudgeType.ADMIN

        client = SupabaseClient.get_client()
        client.table("judges").upsert({
            "email": email,
            "name": (request.contact_name or "").strip() or request.brand.strip(),
            "type": judge_type.value,
            "active": True,
            "stripe_payment_status": PaymentRecordStatus.SUCCEEDED.value,
        }, on_conflict="email").execute()

    @staticmethod
    def record_participation(email: str, supplier_id: str, year: int) -> int:
        """
        Upsert the supplier's participation for the year.

        sauce_count is every sauce the supplier has entered, paid or not,
        not just the latest submission.

        Returns:
            The stored sauce count
        """
        sauce_count = SupabaseClient.count_rows("sauces", supplier_id=supplier_id)
        client = SupabaseClient.get_client()
        client.table("supplier_participations").upsert({
            "email": email,
            "year": year,
            "sauce_count": sauce_count,
        }, on_conflict="email,year").execute()
        return sauce_count

    @staticmethod
    def submit(request: SupplierIntakeRequest) -> SupplierIntakeResponse:
        """
        Run the full intake sequence.

        Args:
            request: Supplier form submission

        Returns:
            SupplierIntakeResponse. For honeypot submissions only
            success=True, and nothing is written.

        Raises:
            InvalidSubmissionError / UnknownCategoryError: On invalid input
            IntakeStepError: If a persistence step fails
        """
        # Bots fill in the hidden field; pretend it worked
        if request.website:
            logger.warning("Supplier intake honeypot triggered, discarding submission")
            return SupplierIntakeResponse(success=True)

        email = SupplierIntakeService.validate(request)
        rules = get_rules()
        client = SupabaseClient.get_client()

        with intake_step(IntakeStep.AUTH_USER):
            SupplierIntakeService.ensure_auth_user(email)

        with intake_step(IntakeStep.SUPPLIER_UPSERT):
            supplier = SupplierIntakeService.upsert_supplier(request, email)
        supplier_id = str(supplier["id"])

        with intake_step(IntakeStep.JUDGE_UPSERT):
            SupplierIntakeService.upsert_supplier_judge(request, email)

        with intake_step(IntakeStep.JUDGE_PARTICIPATION):
            client.table("judge_participations").upsert({
                "email": email,
                "year": rules.year,
                "judge_type": JudgeType.SUPPLIER.value,
                "accepted": True,
            }, on_conflict="email,year").execute()

        with intake_step(IntakeStep.SUPPLIER_PARTICIPATION):
            SupplierIntakeService.record_participation(email, supplier_id, rules.year)

        sauces: list[tuple[dict[str, Any], bool]] = []
        with intake_step(IntakeStep.SAUCE_RECORDS):
            allocator = SauceService.new_allocator()
            for entry in request.sauces:
                sauces.append(SauceService.create_or_reuse_sauce(supplier_id, entry, allocator))
            SupplierIntakeService.record_participation(email, supplier_id, rules.year)

        with intake_step(IntakeStep.QR_CODES):
            for sauce, created in sauces:
                if created:
                    sauce["qr_code_url"] = SauceService.set_qr_code(sauce["id"])

        with intake_step(IntakeStep.PAYMENT_QUOTE):
            unpaid_ids = PaymentService.unpaid_sauce_ids(supplier_id)
            payment = PaymentService.persist_quote(supplier_id, unpaid_ids, rules)

        with intake_step(IntakeStep.LINK_PAYMENT):
            PaymentService.link_sauces(payment["id"], unpaid_ids)

        with intake_step(IntakeStep.IMAGES):
            for sauce, _ in sauces:
                SauceService.relocate_image(sauce)

        logger.info(
            f"Supplier intake complete for {email}: {len(sauces)} sauces, "
            f"payment {payment['id']}"
        )

        EmailService.send_quietly(EmailType.SUPPLIER_CONFIRMATION, {
            "email": email,
            "brandName": supplier.get("brand_name"),
            "entryCount": payment["entry_count"],
            "amount": f"{payment['amount_due_cents'] / 100:.2f}",
            "paymentId": payment["id"],
        })

        return SupplierIntakeResponse(
            success=True,
            supplier_id=supplier_id,
            sauces=[
                SauceSummary(
                    id=str(sauce["id"]),
                    name=sauce["name"],
                    sauce_code=sauce.get("sauce_code"),
                    image_path=sauce.get("image_path"),
                )
                for sauce, _ in sauces
            ],
            payment=PaymentService.quote_payload(payment),
        )
