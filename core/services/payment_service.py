# =============================================================================
# core/services/payment_service.py - Payments Business Logic
# =============================================================================
# Handles entry-fee quotes, hosted checkout, payment webhooks and payment
# reminders.
#
# Payment state only ever becomes "succeeded" through the webhook (or an
# admin bypass). Intake and checkout never mark anything paid.
# =============================================================================

import logging
from datetime import datetime, timezone
from typing import Any

from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.stripe_gateway import JUDGE_PRODUCT_NAME, PRODUCT_NAME, StripeGateway
from core.competition import CompetitionRules, get_rules
from core.models.payment import CheckoutResponse, PaymentRecordStatus
from core.models.sauce import PaymentStatus
from core.pricing import build_quote
from core.services.access_service import AccessService
from core.services.email_service import EmailService, EmailType
from app.config import settings
from app.exceptions import (
    EmailDeliveryError,
    InvalidSubmissionError,
    JudgeNotFoundError,
    PaymentNotFoundError,
    SauceNotFoundError,
)

logger = logging.getLogger(__name__)

CHECKOUT_COMPLETED = "checkout.session.completed"


class PaymentService:
    """
    Service for payment operations.

    Provides a clean interface between API routes, the payment provider and
    the database.
    """

    # -------------------------------------------------------------------------
    # Quotes
    # -------------------------------------------------------------------------

    @staticmethod
    def persist_quote(
        supplier_id: str,
        sauce_ids: list[str],
        rules: CompetitionRules | None = None,
    ) -> dict[str, Any]:
        """
        Price a batch of sauces and store the quote.

        The supplier's earlier pending quotes are marked superseded so only
        one open quote exists per supplier.

        Args:
            supplier_id: Supplier UUID
            sauce_ids: Unpaid sauces covered by the quote (at least one)
            rules: Competition rules (defaults to the current year)

        Returns:
            The stored supplier_payments row

        Raises:
            ValueError: If sauce_ids is empty
        """
        rules = rules or get_rules()
        quote = build_quote(len(sauce_ids), rules)
        client = SupabaseClient.get_client()

        (
            client.table("supplier_payments")
            .update({"stripe_payment_status": PaymentRecordStatus.SUPERSEDED.value})
            .eq("supplier_id", supplier_id)
            .eq("stripe_payment_status", PaymentRecordStatus.PENDING.value)
            .execute()
        )

        data = {
            "supplier_id": supplier_id,
            "year": rules.year,
            "entry_count": quote.entry_count,
            "discount_percent": quote.discount_percent,
            "subtotal_cents": quote.subtotal_cents,
            "discount_cents": quote.discount_cents,
            "amount_due_cents": quote.amount_due_cents,
            "sauce_ids": list(sauce_ids),
            "stripe_payment_status": PaymentRecordStatus.PENDING.value,
        }

        response = client.table("supplier_payments").insert(data).execute()
        if not response.data:
            raise SupabaseClientError("Payment insert returned no data", code="INSERT_FAILED")

        payment = response.data[0]
        logger.info(
            f"Created payment quote {payment['id']} for supplier {supplier_id}: "
            f"{quote.entry_count} entries, {quote.amount_due_cents} cents"
        )
        return payment

    @staticmethod
    def link_sauces(payment_id: str, sauce_ids: list[str]) -> None:
        """Point each sauce at the quote that covers it."""
        if not sauce_ids:
            return
        client = SupabaseClient.get_client()
        client.table("sauces").update({"payment_id": payment_id}).in_("id", list(sauce_ids)).execute()

    @staticmethod
    def create_quote(
        supplier_id: str,
        sauce_ids: list[str],
        rules: CompetitionRules | None = None,
    ) -> dict[str, Any]:
        """Store a quote for the sauces and link them to it."""
        payment = PaymentService.persist_quote(supplier_id, sauce_ids, rules)
        PaymentService.link_sauces(payment["id"], sauce_ids)
        return payment

    @staticmethod
    def quote_payload(payment: dict[str, Any]) -> dict[str, Any]:
        """Shape a stored quote for API responses."""
        return {
            "payment_id": str(payment["id"]),
            "entry_count": payment["entry_count"],
            "discount_percent": payment["discount_percent"],
            "subtotal_cents": payment["subtotal_cents"],
            "discount_cents": payment["discount_cents"],
            "amount_due_cents": payment["amount_due_cents"],
            "status": payment.get("stripe_payment_status"),
        }

    @staticmethod
    def unpaid_sauce_ids(supplier_id: str) -> list[str]:
        """IDs of every sauce the supplier still has to pay for."""
        client = SupabaseClient.get_client()
        response = (
            client.table("sauces")
            .select("id")
            .eq("supplier_id", supplier_id)
            .eq("payment_status", PaymentStatus.PENDING_PAYMENT.value)
            .execute()
        )
        return [str(row["id"]) for row in response.data or []]

    @staticmethod
    def create_payment_batch(supplier_email: str) -> dict[str, Any]:
        """
        Quote every unpaid sauce the caller has.

        Raises:
            NotAuthorizedError: If the caller has no supplier profile
            InvalidSubmissionError: If nothing is awaiting payment
        """
        supplier = AccessService.require_supplier(supplier_email)
        sauce_ids = PaymentService.unpaid_sauce_ids(str(supplier["id"]))

        if not sauce_ids:
            raise InvalidSubmissionError("No unpaid sauces to pay for.")

        payment = PaymentService.create_quote(str(supplier["id"]), sauce_ids)
        return PaymentService.quote_payload(payment)

    @staticmethod
    def reconcile_open_quotes(supplier_id: str, paid_sauce_ids: list[str]) -> dict[str, Any] | None:
        """
        Re-price the supplier's open quote after an older quote got paid.

        A pending quote that also covers any of the just-paid sauces would
        charge for them twice. It is replaced by a quote for the sauces
        still unpaid, or just superseded when nothing is left to pay.

        Args:
            supplier_id: Supplier UUID
            paid_sauce_ids: Sauces the completed payment covered

        Returns:
            The replacement quote, or None if no new quote was needed
        """
        client = SupabaseClient.get_client()
        response = (
            client.table("supplier_payments")
            .select("*")
            .eq("supplier_id", supplier_id)
            .eq("stripe_payment_status", PaymentRecordStatus.PENDING.value)
            .execute()
        )

        paid = set(paid_sauce_ids)
        overlapping = [
            quote for quote in response.data or []
            if paid & {str(sauce_id) for sauce_id in quote.get("sauce_ids") or []}
        ]
        if not overlapping:
            return None

        remaining = PaymentService.unpaid_sauce_ids(supplier_id)
        if remaining:
            replacement = PaymentService.create_quote(supplier_id, remaining)
            logger.info(
                f"Replaced open quote for supplier {supplier_id} with {replacement['id']} "
                f"covering {len(remaining)} unpaid sauces"
            )
            return replacement

        (
            client.table("supplier_payments")
            .update({"stripe_payment_status": PaymentRecordStatus.SUPERSEDED.value})
            .in_("id", [quote["id"] for quote in overlapping])
            .execute()
        )
        logger.info(f"Superseded {len(overlapping)} open quotes for supplier {supplier_id}: nothing left to pay")
        return None

    # -------------------------------------------------------------------------
    # Checkout
    # -------------------------------------------------------------------------

    @staticmethod
    def create_judge_checkout(judge_id: str, email: str) -> CheckoutResponse:
        """
        Start checkout for the community judge fee.

        Raises:
            JudgeNotFoundError: If the judge doesn't exist
            PaymentProviderError: If the provider call fails
        """
        judge = SupabaseClient.fetch_judge(judge_id)
        if not judge:
            raise JudgeNotFoundError(judge_id)

        if judge.get("stripe_payment_status") == PaymentRecordStatus.SUCCEEDED.value:
            return CheckoutResponse(already_paid=True)

        rules = get_rules()
        session = StripeGateway.create_checkout_session(
            email=email,
            amount_cents=rules.judge_fee_cents,
            product_name=JUDGE_PRODUCT_NAME,
            metadata={"type": "judge", "judge_id": str(judge["id"])},
            client_reference_id=str(judge["id"]),
            success_url=settings.JUDGE_PAYMENT_SUCCESS_URL,
            cancel_url=settings.JUDGE_PAYMENT_CANCEL_URL,
            currency=rules.currency,
        )
        return CheckoutResponse(session_id=session.get("id"), url=session.get("url"))

    @staticmethod
    def create_supplier_checkout(payment_id: str, email: str) -> CheckoutResponse:
        """
        Start checkout for a stored quote.

        Raises:
            PaymentNotFoundError: If the quote doesn't exist
            InvalidSubmissionError: If the quote has been superseded
            PaymentProviderError: If the provider call fails
        """
        payment = SupabaseClient.fetch_payment(payment_id)
        if not payment:
            raise PaymentNotFoundError(payment_id)

        status = payment.get("stripe_payment_status")
        if status == PaymentRecordStatus.SUCCEEDED.value:
            return CheckoutResponse(already_paid=True)
        if status == PaymentRecordStatus.SUPERSEDED.value:
            raise InvalidSubmissionError(
                "This payment has been replaced by a newer one. Refresh your dashboard and try again."
            )

        supplier = SupabaseClient.fetch_supplier(payment["supplier_id"])
        if not supplier:
            raise InvalidSubmissionError("Supplier not found")

        entry_count = payment["entry_count"]
        entry_label = "entries" if entry_count > 1 else "entry"
        description = f"{entry_count} sauce {entry_label} ({payment['discount_percent']}% discount)"

        session = StripeGateway.create_checkout_session(
            email=email,
            amount_cents=payment["amount_due_cents"],
            product_name=PRODUCT_NAME,
            description=description,
            metadata={
                "type": "supplier",
                "payment_id": str(payment["id"]),
                "supplier_email": supplier["email"],
            },
            success_url=settings.SUPPLIER_PAYMENT_SUCCESS_URL,
            cancel_url=settings.SUPPLIER_PAYMENT_CANCEL_URL,
            currency=get_rules().currency,
        )

        client = SupabaseClient.get_client()
        (
            client.table("supplier_payments")
            .update({"stripe_session_id": session.get("id")})
            .eq("id", payment["id"])
            .execute()
        )
        return CheckoutResponse(session_id=session.get("id"), url=session.get("url"))

    # -------------------------------------------------------------------------
    # Webhook
    # -------------------------------------------------------------------------

    @staticmethod
    def handle_webhook_event(event: dict[str, Any]) -> dict[str, Any]:
        """
        Apply a verified payment event.

        Only completed checkouts change state. A judge payment activates the
        judge; a supplier payment marks the quote succeeded and every sauce it
        covers paid, then re-prices any newer open quote that overlaps it.
        Events without a known metadata type, or for an unknown quote, are
        acknowledged with a warning so the provider stops retrying.

        Raises:
            InvalidSubmissionError: If a completed checkout lacks its identifier
        """
        if event.get("type") != CHECKOUT_COMPLETED:
            return {"received": True}

        session = (event.get("data") or {}).get("object") or {}
        metadata = session.get("metadata") or {}
        payment_type = metadata.get("type")
        client = SupabaseClient.get_client()

        logger.info(f"Processing {CHECKOUT_COMPLETED} for session {session.get('id')} ({payment_type})")

        if payment_type == "judge":
            judge_id = metadata.get("judge_id") or session.get("client_reference_id")
            if not judge_id:
                raise InvalidSubmissionError("Missing judge identifier in checkout session")

            (
                client.table("judges")
                .update({"stripe_payment_status": PaymentRecordStatus.SUCCEEDED.value, "active": True})
                .eq("id", judge_id)
                .execute()
            )
            logger.info(f"Judge {judge_id} payment succeeded")

        elif payment_type == "supplier":
            payment_id = metadata.get("payment_id")
            if not payment_id:
                raise InvalidSubmissionError("Missing supplier payment identifier in checkout session")

            payment = SupabaseClient.fetch_payment(payment_id)
            if not payment:
                logger.warning(f"Completed checkout for unknown supplier payment {payment_id}")
                return {"received": True, "warning": f"Unknown supplier payment {payment_id}"}

            (
                client.table("supplier_payments")
                .update({"stripe_payment_status": PaymentRecordStatus.SUCCEEDED.value})
                .eq("id", payment["id"])
                .execute()
            )

            # The quote's own sauce list; a newer quote may have taken over
            # the sauces' payment_id in the meantime
            sauce_ids = [str(sauce_id) for sauce_id in payment.get("sauce_ids") or []]
            sauces = client.table("sauces").update(
                {"payment_status": PaymentStatus.PAID.value, "payment_id": payment["id"]}
            )
            if sauce_ids:
                sauces.in_("id", sauce_ids).execute()
            else:
                sauces.eq("payment_id", payment["id"]).execute()

            logger.info(f"Supplier payment {payment_id} succeeded ({len(sauce_ids)} sauces)")
            PaymentService.reconcile_open_quotes(str(payment["supplier_id"]), sauce_ids)

        else:
            logger.warning(
                f"Payment received without a valid metadata.type: session {session.get('id')}"
            )
            return {"received": True, "warning": "Payment received but no valid metadata.type found"}

        return {"received": True}

    # -------------------------------------------------------------------------
    # Admin
    # -------------------------------------------------------------------------

    @staticmethod
    def bypass_payment(sauce_id: str) -> dict[str, Any]:
        """
        Mark a sauce paid without a checkout (invoiced or comped entries).

        Raises:
            SauceNotFoundError: If the sauce doesn't exist
        """
        sauce = SupabaseClient.fetch_sauce(sauce_id)
        if not sauce:
            raise SauceNotFoundError(sauce_id)

        client = SupabaseClient.get_client()
        client.table("sauces").update({"payment_status": PaymentStatus.PAID.value}).eq("id", sauce_id).execute()
        logger.info(f"Payment bypassed for sauce {sauce_id}")
        return {**sauce, "payment_status": PaymentStatus.PAID.value}

    @staticmethod
    def magic_link(email: str) -> str:
        """
        Generate a one-click login link, falling back to the login page.
        """
        client = SupabaseClient.get_client()
        try:
            response = client.auth.admin.generate_link({
                "type": "magiclink",
                "email": email,
                "options": {"redirect_to": settings.auth_callback_url},
            })
            return response.properties.action_link
        except Exception as e:
            logger.error(f"Failed to generate magic link for {email}: {e}")
            return settings.login_url

    @staticmethod
    def _days_since(created_at: str | None, now: datetime) -> int:
        if not created_at:
            return 0
        created = datetime.fromisoformat(created_at.replace("Z", "+00:00"))
        if created.tzinfo is None:
            created = created.replace(tzinfo=timezone.utc)
        return max((now - created).days, 0)

    @staticmethod
    def send_payment_reminders(now: datetime | None = None) -> dict[str, Any]:
        """
        Email every supplier with a pending quote.

        Each reminder carries the amount, days pending and a magic link.
        Failures for one payment don't stop the others.

        Returns:
            {"success", "reminders_sent", "total_pending", "details", "errors"}
        """
        now = now or datetime.now(timezone.utc)
        client = SupabaseClient.get_client()

        response = (
            client.table("supplier_payments")
            .select("*")
            .eq("stripe_payment_status", PaymentRecordStatus.PENDING.value)
            .order("created_at")
            .execute()
        )
        payments = response.data or []

        if not payments:
            return {
                "success": True,
                "message": "No pending payments found",
                "reminders_sent": 0,
                "total_pending": 0,
                "details": [],
                "errors": [],
            }

        suppliers = SupabaseClient.fetch_by_ids(
            "suppliers", [p["supplier_id"] for p in payments], "id, email, brand_name"
        )

        sent = []
        errors = []
        for payment in payments:
            supplier = suppliers.get(str(payment["supplier_id"]))
            if not supplier:
                errors.append({"payment_id": payment["id"], "error": "No supplier found"})
                continue

            days = PaymentService._days_since(payment.get("created_at"), now)
            try:
                EmailService.send(EmailType.PAYMENT_REMINDER, {
                    "email": supplier["email"],
                    "brandName": supplier.get("brand_name"),
                    "entryCount": payment["entry_count"],
                    "amount": f"{payment['amount_due_cents'] / 100:.2f}",
                    "daysSinceRegistration": days,
                    "paymentId": payment["id"],
                    "magicLink": PaymentService.magic_link(supplier["email"]),
                })
            except EmailDeliveryError as e:
                errors.append({"payment_id": payment["id"], "email": supplier["email"], "error": e.message})
                continue

            sent.append({
                "payment_id": payment["id"],
                "email": supplier["email"],
                "brand": supplier.get("brand_name"),
                "days_pending": days,
            })

        logger.info(f"Sent {len(sent)}/{len(payments)} payment reminders")
        return {
            "success": True,
            "reminders_sent": len(sent),
            "total_pending": len(payments),
            "details": sent,
            "errors": errors,
        }
