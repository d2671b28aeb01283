# =============================================================================
# core/services/sauce_service.py - Sauce Business Logic
# =============================================================================
# Handles sauce records: creation with code allocation, dedup of retried
# submissions, supplier self-service (add / list / delete) and admin status
# changes.
# =============================================================================

import logging
from typing import Any

from lib.supabase_client import SupabaseClient, SupabaseClientError, is_unique_violation
from core.models.intake import SauceEntry
from core.models.sauce import PaymentStatus, SauceStatus, SauceSummary
from core.packing import check_transition, derive_status
from core.sauce_codes import CATEGORY_LETTERS, SauceCodeAllocator
from core.services.access_service import AccessService
from core.services.storage_service import StorageService
from core.validation import normalize_url
from app.config import settings
from app.exceptions import (
    InvalidStatusTransitionError,
    InvalidSubmissionError,
    SauceAlreadyPaidError,
    SauceNotFoundError,
    UnknownCategoryError,
)

logger = logging.getLogger(__name__)

# Attempts at inserting a sauce before giving up on code collisions
MAX_CODE_ATTEMPTS = 3

_REQUIRED_SAUCE_FIELDS = ("name", "ingredients", "allergens", "category")


class SauceService:
    """
    Service for sauce operations.

    Provides a clean interface between API routes and database.
    """

    @staticmethod
    def validate_entry(entry: SauceEntry, index: int = 0) -> None:
        """
        Check one sauce entry before anything is written.

        Raises:
            InvalidSubmissionError: If a required field is blank
            UnknownCategoryError: If the category isn't a competition category
        """
        for field in _REQUIRED_SAUCE_FIELDS:
            if not getattr(entry, field).strip():
                raise InvalidSubmissionError(
                    f"Sauce {index + 1}: {field} is required",
                    field=f"sauces[{index}].{field}",
                )

        if entry.category not in CATEGORY_LETTERS:
            raise UnknownCategoryError(entry.category)

    @staticmethod
    def fetch_codes_for_letter(letter: str) -> list[str]:
        """
        Get every existing sauce code starting with a letter.

        The highest number is computed by the caller from all codes, so
        "H1000" correctly outranks "H999".
        """
        client = SupabaseClient.get_client()

        response = (
            client.table("sauces")
            .select("sauce_code")
            .like("sauce_code", f"{letter}%")
            .execute()
        )
        return [row["sauce_code"] for row in response.data or [] if row.get("sauce_code")]

    @staticmethod
    def new_allocator() -> SauceCodeAllocator:
        return SauceCodeAllocator(SauceService.fetch_codes_for_letter)

    @staticmethod
    def qr_code_url(sauce_id: str) -> str:
        """External QR image URL encoding the sauce ID."""
        return f"{settings.QR_CODE_API_URL}?data={sauce_id}&size=200x200"

    @staticmethod
    def find_reusable_sauce(
        supplier_id: str,
        name: str,
        category: str,
    ) -> dict[str, Any] | None:
        """
        Find an unpaid sauce with the same name and category.

        A retried submission updates this row instead of creating a
        duplicate, so the supplier is not charged twice.
        """
        client = SupabaseClient.get_client()

        response = (
            client.table("sauces")
            .select("*")
            .eq("supplier_id", supplier_id)
            .eq("name", name)
            .eq("category", category)
            .eq("payment_status", PaymentStatus.PENDING_PAYMENT.value)
            .limit(1)
            .execute()
        )
        rows = response.data or []
        return rows[0] if rows else None

    @staticmethod
    def _entry_fields(entry: SauceEntry) -> dict[str, Any]:
        return {
            "name": entry.name.strip(),
            "ingredients": entry.ingredients.strip(),
            "allergens": entry.allergens.strip(),
            "category": entry.category,
            "webshop_link": normalize_url(entry.webshop_link),
        }

    @staticmethod
    def create_or_reuse_sauce(
        supplier_id: str,
        entry: SauceEntry,
        allocator: SauceCodeAllocator,
    ) -> tuple[dict[str, Any], bool]:
        """
        Create a sauce, or refresh the supplier's matching unpaid sauce.

        New sauces get the next code for their category. If another request
        took that code first, the counter is reseeded from storage and the
        insert retried.

        Args:
            supplier_id: Owning supplier UUID
            entry: Validated sauce entry
            allocator: Allocator shared across the submission

        Returns:
            Tuple of (sauce row, created)

        Raises:
            SupabaseClientError: If the insert keeps colliding
        """
        client = SupabaseClient.get_client()
        fields = SauceService._entry_fields(entry)

        existing = SauceService.find_reusable_sauce(supplier_id, fields["name"], entry.category)
        if existing:
            if entry.image_path:
                fields["image_path"] = entry.image_path
            response = (
                client.table("sauces")
                .update(fields)
                .eq("id", existing["id"])
                .execute()
            )
            row = (response.data or [{**existing, **fields}])[0]
            logger.info(f"Reused sauce {row['id']} ({row.get('sauce_code')}) for supplier {supplier_id}")
            return row, False

        for attempt in range(1, MAX_CODE_ATTEMPTS + 1):
            data = {
                **fields,
                "supplier_id": supplier_id,
                "sauce_code": allocator.allocate(entry.category),
                "status": SauceStatus.REGISTERED.value,
                "payment_status": PaymentStatus.PENDING_PAYMENT.value,
                "image_path": entry.image_path,
            }

            try:
                response = client.table("sauces").insert(data).execute()
            except Exception as e:
                if is_unique_violation(e) and attempt < MAX_CODE_ATTEMPTS:
                    logger.warning(f"Sauce code {data['sauce_code']} taken, retrying (attempt {attempt})")
                    allocator.reseed(entry.category)
                    continue
                raise

            if not response.data:
                raise SupabaseClientError("Sauce insert returned no data", code="INSERT_FAILED")

            row = response.data[0]
            logger.info(f"Created sauce {row['id']} with code {row['sauce_code']}")
            return row, True

        raise SupabaseClientError(
            message=f"Could not allocate a sauce code for {entry.category}",
            code="CODE_ALLOCATION_FAILED",
        )

    @staticmethod
    def set_qr_code(sauce_id: str) -> str:
        """Store the sauce's QR image URL and return it."""
        client = SupabaseClient.get_client()
        url = SauceService.qr_code_url(sauce_id)
        client.table("sauces").update({"qr_code_url": url}).eq("id", sauce_id).execute()
        return url

    @staticmethod
    def relocate_image(sauce: dict[str, Any]) -> str | None:
        """
        Move a sauce's pending image into place and store the new path.

        Raises:
            StorageMoveError: If the move fails
        """
        path = sauce.get("image_path")
        if not StorageService.is_pending_path(path):
            return path

        new_path = StorageService.move_sauce_image(sauce["supplier_id"], sauce["id"], path)
        client = SupabaseClient.get_client()
        client.table("sauces").update({"image_path": new_path}).eq("id", sauce["id"]).execute()
        sauce["image_path"] = new_path
        return new_path

    @staticmethod
    def to_summary(sauce: dict[str, Any], score_count: int = 0) -> SauceSummary:
        status = sauce.get("status")
        return SauceSummary(
            id=str(sauce["id"]),
            name=sauce.get("name") or "",
            sauce_code=sauce.get("sauce_code"),
            image_path=sauce.get("image_path"),
            category=sauce.get("category"),
            status=derive_status(status, score_count) if status else None,
            payment_status=sauce.get("payment_status"),
        )

    # -------------------------------------------------------------------------
    # Supplier self-service
    # -------------------------------------------------------------------------

    @staticmethod
    def list_sauces(supplier_email: str) -> list[SauceSummary]:
        """
        List the caller's sauces with their effective status.

        Raises:
            NotAuthorizedError: If the caller has no supplier profile
        """
        supplier = AccessService.require_supplier(supplier_email)
        client = SupabaseClient.get_client()

        response = (
            client.table("sauces")
            .select("*")
            .eq("supplier_id", supplier["id"])
            .order("created_at")
            .execute()
        )

        summaries = []
        for sauce in response.data or []:
            score_count = 0
            if sauce.get("status") == SauceStatus.BOXED.value:
                score_count = SupabaseClient.count_rows("judging_scores", sauce_id=sauce["id"])
            summaries.append(SauceService.to_summary(sauce, score_count))
        return summaries

    @staticmethod
    def add_sauce(supplier_email: str, entry: SauceEntry) -> SauceSummary:
        """
        Add one sauce from the supplier dashboard.

        The new sauce is unpaid; the supplier pays for it through a payment
        batch.

        Raises:
            NotAuthorizedError: If the caller has no supplier profile
            InvalidSubmissionError / UnknownCategoryError: On a bad entry
        """
        supplier = AccessService.require_supplier(supplier_email)
        SauceService.validate_entry(entry)

        sauce, created = SauceService.create_or_reuse_sauce(
            str(supplier["id"]), entry, SauceService.new_allocator()
        )
        if created:
            sauce["qr_code_url"] = SauceService.set_qr_code(sauce["id"])
        SauceService.relocate_image(sauce)

        return SauceService.to_summary(sauce)

    @staticmethod
    def delete_sauce(supplier_email: str, sauce_id: str) -> None:
        """
        Delete one of the caller's unpaid sauces.

        Raises:
            SauceNotFoundError: If the sauce doesn't exist or isn't the caller's
            SauceAlreadyPaidError: If the sauce has been paid for
        """
        supplier = AccessService.require_supplier(supplier_email)
        sauce = SupabaseClient.fetch_sauce(sauce_id)

        # Don't reveal other suppliers' sauces
        if not sauce or str(sauce.get("supplier_id")) != str(supplier["id"]):
            raise SauceNotFoundError(sauce_id)

        if sauce.get("payment_status") == PaymentStatus.PAID.value:
            raise SauceAlreadyPaidError(sauce_id)

        client = SupabaseClient.get_client()
        client.table("sauces").delete().eq("id", sauce_id).execute()
        logger.info(f"Supplier {supplier['id']} deleted sauce {sauce_id}")

    # -------------------------------------------------------------------------
    # Admin
    # -------------------------------------------------------------------------

    @staticmethod
    def update_sauce_status(sauce_id: str, status: SauceStatus | str) -> dict[str, Any]:
        """
        Set a sauce's stored status.

        Raises:
            SauceNotFoundError: If the sauce doesn't exist
            InvalidStatusTransitionError: If the change isn't allowed
        """
        sauce = SupabaseClient.fetch_sauce(sauce_id)
        if not sauce:
            raise SauceNotFoundError(sauce_id)

        target = SauceStatus(status)
        error = check_transition(sauce["status"], target, sauce.get("payment_status"))
        if error:
            raise InvalidStatusTransitionError(error, current=sauce["status"], target=target.value)

        client = SupabaseClient.get_client()
        client.table("sauces").update({"status": target.value}).eq("id", sauce_id).execute()
        logger.info(f"Sauce {sauce_id} status: {sauce['status']} -> {target.value}")

        return {**sauce, "status": target.value}
