# =============================================================================
# core/services/packing_service.py - Box Packing Business Logic
# =============================================================================
# Handles the packing-day flow:
# 1. Admin scans a judge's QR code, then bottle stickers
# 2. Each scan is recorded and the sauce is assigned to that judge's box
# 3. The seventh scan of a sauce moves it to "boxed"
#
# Also provides packing progress, manual boxing, conflict-of-interest checks
# and sticker data.
# =============================================================================

import logging
import math
from typing import Any

from lib.supabase_client import SupabaseClient, is_unique_violation
from core.competition import get_rules
from core.labels import render_sticker_pdf
from core.models.packing import (
    ConflictCheck,
    JudgeBoxAssignment,
    SaucePackingStatus,
    ScanResult,
    StickerData,
    StickerSheetSummary,
)
from core.models.sauce import JudgeType, SauceStatus
from core.packing import check_transition, scan_rejection, status_after_scan
from core.services.judge_service import display_name
from app.exceptions import (
    BoxAssignmentError,
    ConflictOfInterestError,
    DuplicateScanError,
    InvalidStatusTransitionError,
    InvalidSubmissionError,
    JudgeNotFoundError,
    SauceNotFoundError,
)

logger = logging.getLogger(__name__)

UNKNOWN_BRAND = "Unknown brand"


class PackingService:
    """
    Service for box packing operations.

    All methods assume the caller has already been checked as an admin.
    """

    @staticmethod
    def _suppliers_for(sauces: list[dict[str, Any]]) -> dict[str, dict[str, Any]]:
        return SupabaseClient.fetch_by_ids(
            "suppliers", [s.get("supplier_id") for s in sauces], "id, email, brand_name"
        )

    @staticmethod
    def _brand(sauce: dict[str, Any], suppliers: dict[str, dict[str, Any]]) -> str:
        supplier = suppliers.get(str(sauce.get("supplier_id")))
        return (supplier or {}).get("brand_name") or UNKNOWN_BRAND

    @staticmethod
    def check_conflict_of_interest(judge_id: str, sauce_id: str) -> ConflictCheck:
        """
        Check whether a supplier judge would receive their own sauce.

        Raises:
            JudgeNotFoundError: If the judge doesn't exist
            SauceNotFoundError: If the sauce doesn't exist
        """
        judge = SupabaseClient.fetch_judge(judge_id)
        if not judge:
            raise JudgeNotFoundError(judge_id)

        sauce = SupabaseClient.fetch_sauce(sauce_id)
        if not sauce:
            raise SauceNotFoundError(sauce_id)

        supplier = SupabaseClient.fetch_supplier(sauce["supplier_id"]) if sauce.get("supplier_id") else None
        supplier_email = ((supplier or {}).get("email") or "").lower()
        judge_email = (judge.get("email") or "").lower()

        if judge.get("type") == JudgeType.SUPPLIER.value and judge_email and judge_email == supplier_email:
            return ConflictCheck(
                conflict=True,
                message=(
                    f"CONFLICT OF INTEREST: Judge {judge.get('name') or judge['email']} "
                    f"is the supplier of {sauce.get('sauce_code')} - {sauce.get('name')}"
                ),
                judge_email=judge["email"],
                sauce_code=sauce.get("sauce_code"),
            )

        return ConflictCheck(conflict=False, message="No conflict of interest detected")

    @staticmethod
    def record_bottle_scan(
        judge_id: str,
        sauce_id: str,
        scanned_by: str,
        bottle_number: int | None = None,
    ) -> ScanResult:
        """
        Record one bottle going into a judge's box.

        Args:
            judge_id: Judge whose box is being packed
            sauce_id: Scanned sauce
            scanned_by: Email of the admin scanning
            bottle_number: Sticker ordinal, if the sticker carries one

        Returns:
            ScanResult with the new scan count and box progress

        Raises:
            InvalidSubmissionError: If no judge was scanned or the judge is inactive
            JudgeNotFoundError / SauceNotFoundError: If either doesn't exist
            InvalidStatusTransitionError: If the sauce isn't "arrived"
            ConflictOfInterestError: If the judge supplied this sauce
            BoxAssignmentError: If the sauce is in another judge's box
            DuplicateScanError: If this bottle was already scanned
        """
        if not judge_id:
            raise InvalidSubmissionError("Scan a judge QR code before scanning sauces.", field="judge_id")

        rules = get_rules()
        judge = SupabaseClient.fetch_judge(judge_id)
        if not judge:
            raise JudgeNotFoundError(judge_id)
        if judge.get("active") is False:
            raise InvalidSubmissionError("This judge is not active.", field="judge_id")

        sauce = SupabaseClient.fetch_sauce(sauce_id)
        if not sauce:
            raise SauceNotFoundError(sauce_id)

        rejection = scan_rejection(sauce["status"], sauce.get("sauce_code"))
        if rejection:
            raise InvalidStatusTransitionError(rejection, current=sauce["status"])

        conflict = PackingService.check_conflict_of_interest(judge_id, sauce_id)
        if conflict.conflict:
            raise ConflictOfInterestError(conflict.message, conflict.judge_email, conflict.sauce_code)

        client = SupabaseClient.get_client()

        existing = (
            client.table("box_assignments")
            .select("id, judge_id")
            .eq("sauce_id", sauce_id)
            .execute()
        ).data or []
        if any(a.get("judge_id") and str(a["judge_id"]) != str(judge_id) for a in existing):
            raise BoxAssignmentError(sauce_id)

        if bottle_number is not None and SupabaseClient.count_rows(
            "bottle_scans", sauce_id=sauce_id, bottle_number=bottle_number
        ):
            raise DuplicateScanError(sauce_id, bottle_number)

        scan = {"sauce_id": sauce_id, "scanned_by": scanned_by}
        if bottle_number is not None:
            scan["bottle_number"] = bottle_number
        try:
            client.table("bottle_scans").insert(scan).execute()
        except Exception as e:
            if bottle_number is not None and is_unique_violation(e):
                raise DuplicateScanError(sauce_id, bottle_number)
            raise

        scan_count = SupabaseClient.count_rows("bottle_scans", sauce_id=sauce_id)

        judge_name = display_name(judge)
        box_label = f"Judge {judge_name}"
        if existing:
            (
                client.table("box_assignments")
                .update({"judge_id": judge_id, "box_label": box_label})
                .eq("id", existing[0]["id"])
                .execute()
            )
        else:
            client.table("box_assignments").insert({
                "sauce_id": sauce_id,
                "judge_id": judge_id,
                "box_label": box_label,
            }).execute()

        assigned_count = SupabaseClient.count_rows("box_assignments", judge_id=judge_id)

        supplier = SupabaseClient.fetch_supplier(sauce["supplier_id"]) if sauce.get("supplier_id") else None
        assignment = JudgeBoxAssignment(
            sauce_id=str(sauce["id"]),
            sauce_code=sauce.get("sauce_code") or "N/A",
            sauce_name=sauce.get("name") or "",
            brand_name=(supplier or {}).get("brand_name") or UNKNOWN_BRAND,
        )
        box_message = (
            f"Box progress for {judge_name}: {assigned_count}/{rules.sauces_per_box} sauces assigned"
        )
        label = f"{assignment.sauce_code} - {assignment.sauce_name}"

        auto_boxed = status_after_scan(scan_count, rules) == SauceStatus.BOXED
        if auto_boxed:
            client.table("sauces").update({"status": SauceStatus.BOXED.value}).eq("id", sauce_id).execute()
            message = f"{label}: All {rules.bottles_per_sauce} bottles scanned! Status updated to BOXED."
            logger.info(f"Sauce {sauce_id} auto-boxed after {scan_count} scans")
        else:
            message = f"{label}: {scan_count}/{rules.bottles_per_sauce} bottles scanned"

        logger.info(f"Scan {scan_count} of sauce {sauce_id} into box of judge {judge_id} by {scanned_by}")
        return ScanResult(
            scan_count=scan_count,
            auto_boxed=auto_boxed,
            message=message,
            assignment=assignment,
            assigned_count=assigned_count,
            box_message=box_message,
            judge_name=judge_name,
        )

    @staticmethod
    def manually_mark_as_boxed(sauce_id: str) -> str:
        """
        Box an arrived sauce without waiting for all bottle scans.

        Raises:
            SauceNotFoundError: If the sauce doesn't exist
            InvalidStatusTransitionError: If the sauce hasn't arrived
        """
        sauce = SupabaseClient.fetch_sauce(sauce_id)
        if not sauce:
            raise SauceNotFoundError(sauce_id)

        error = check_transition(sauce["status"], SauceStatus.BOXED, sauce.get("payment_status"))
        if error:
            raise InvalidStatusTransitionError(error, current=sauce["status"], target=SauceStatus.BOXED.value)

        client = SupabaseClient.get_client()
        client.table("sauces").update({"status": SauceStatus.BOXED.value}).eq("id", sauce_id).execute()
        logger.info(f"Sauce {sauce_id} manually marked as boxed")
        return "Sauce manually marked as boxed."

    @staticmethod
    def assign_sauces_to_box(box_label: str, sauce_ids: list[str]) -> int:
        """
        Put arrived sauces into a labelled box and mark them boxed.

        Every sauce is checked before anything is written.

        Returns:
            Number of sauces assigned

        Raises:
            InvalidSubmissionError: If the label or sauce list is empty
            SauceNotFoundError: If a sauce doesn't exist
            InvalidStatusTransitionError: If a sauce hasn't arrived
        """
        sauce_ids = [s for s in dict.fromkeys(sauce_ids) if s]
        if not box_label.strip() or not sauce_ids:
            raise InvalidSubmissionError("Box label and at least one sauce are required.")

        sauces = SupabaseClient.fetch_by_ids("sauces", sauce_ids)
        for sauce_id in sauce_ids:
            sauce = sauces.get(sauce_id)
            if not sauce:
                raise SauceNotFoundError(sauce_id)
            error = check_transition(sauce["status"], SauceStatus.BOXED, sauce.get("payment_status"))
            if error:
                raise InvalidStatusTransitionError(
                    f"{sauce.get('sauce_code') or sauce_id}: {error}",
                    current=sauce["status"],
                    target=SauceStatus.BOXED.value,
                )

        client = SupabaseClient.get_client()
        client.table("box_assignments").upsert(
            [{"sauce_id": sauce_id, "box_label": box_label.strip()} for sauce_id in sauce_ids],
            on_conflict="sauce_id",
        ).execute()
        client.table("sauces").update({"status": SauceStatus.BOXED.value}).in_("id", sauce_ids).execute()

        logger.info(f"Assigned {len(sauce_ids)} sauces to box '{box_label}'")
        return len(sauce_ids)

    @staticmethod
    def get_packing_status() -> list[SaucePackingStatus]:
        """Scan progress of every arrived sauce."""
        client = SupabaseClient.get_client()
        sauces = (
            client.table("sauces")
            .select("*")
            .eq("status", SauceStatus.ARRIVED.value)
            .execute()
        ).data or []

        if not sauces:
            return []

        scans = (
            client.table("bottle_scans")
            .select("sauce_id")
            .in_("sauce_id", [s["id"] for s in sauces])
            .execute()
        ).data or []
        scan_counts: dict[str, int] = {}
        for scan in scans:
            key = str(scan["sauce_id"])
            scan_counts[key] = scan_counts.get(key, 0) + 1

        suppliers = PackingService._suppliers_for(sauces)
        return [
            SaucePackingStatus(
                sauce_id=str(sauce["id"]),
                sauce_code=sauce.get("sauce_code") or "N/A",
                sauce_name=sauce.get("name") or "",
                brand_name=PackingService._brand(sauce, suppliers),
                status=sauce["status"],
                scan_count=scan_counts.get(str(sauce["id"]), 0),
            )
            for sauce in sauces
        ]

    @staticmethod
    def get_judge_box_assignments(judge_id: str) -> dict[str, Any]:
        """
        List the sauces in a judge's box.

        Returns:
            {"judge_name": str, "assignments": [JudgeBoxAssignment]}

        Raises:
            JudgeNotFoundError: If the judge doesn't exist
        """
        judge = SupabaseClient.fetch_judge(judge_id)
        if not judge:
            raise JudgeNotFoundError(judge_id)

        client = SupabaseClient.get_client()
        rows = (
            client.table("box_assignments")
            .select("sauce_id")
            .eq("judge_id", judge_id)
            .execute()
        ).data or []

        sauces = SupabaseClient.fetch_by_ids("sauces", [r["sauce_id"] for r in rows])
        suppliers = PackingService._suppliers_for(list(sauces.values()))

        assignments = []
        for row in rows:
            sauce = sauces.get(str(row["sauce_id"]), {})
            assignments.append(JudgeBoxAssignment(
                sauce_id=str(row["sauce_id"]),
                sauce_code=sauce.get("sauce_code") or "N/A",
                sauce_name=sauce.get("name") or "Unknown sauce",
                brand_name=PackingService._brand(sauce, suppliers),
            ))

        return {"judge_name": display_name(judge), "assignments": assignments}

    @staticmethod
    def generate_sticker_data() -> StickerSheetSummary:
        """
        Sticker print run for every arrived or boxed sauce.

        Raises:
            InvalidSubmissionError: If no sauce is ready for judging
        """
        rules = get_rules()
        client = SupabaseClient.get_client()

        total_judges = SupabaseClient.count_rows("judges", active=True)
        sauces = (
            client.table("sauces")
            .select("*")
            .in_("status", [SauceStatus.ARRIVED.value, SauceStatus.BOXED.value])
            .execute()
        ).data or []

        if not sauces:
            raise InvalidSubmissionError(
                'No sauces ready for judging. Update sauce status to "arrived" or "boxed" first.'
            )

        suppliers = PackingService._suppliers_for(sauces)
        sticker_data = [
            StickerData(
                sauce_id=str(sauce["id"]),
                sauce_code=sauce.get("sauce_code") or "N/A",
                sauce_name=sauce.get("name") or "",
                brand_name=(suppliers.get(str(sauce.get("supplier_id"))) or {}).get("brand_name") or "Unknown",
                stickers_needed=rules.bottles_per_sauce,
            )
            for sauce in sauces
        ]

        return StickerSheetSummary(
            sticker_data=sticker_data,
            total_judges=total_judges,
            boxes_needed=math.ceil(total_judges / rules.judges_per_box),
            stickers_per_sauce=rules.bottles_per_sauce,
        )

    @staticmethod
    def sticker_pdf() -> bytes:
        """Bottle stickers rendered as a printable PDF."""
        return render_sticker_pdf(PackingService.generate_sticker_data().sticker_data)
