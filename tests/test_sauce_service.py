# =============================================================================
# tests/test_sauce_service.py - Sauce Service Tests
# =============================================================================
# Tests for SauceService: supplier self-service and admin status changes.
# =============================================================================

import pytest

from app.exceptions import (
    InvalidStatusTransitionError,
    NotAuthorizedError,
    SauceAlreadyPaidError,
    SauceNotFoundError,
    UnknownCategoryError,
)
from core.models.intake import SauceEntry
from core.services.sauce_service import SauceService

SUPPLIER_EMAIL = "hello@fierysauce.co"


def entry(**overrides) -> SauceEntry:
    data = {
        "name": "Smoky BBQ",
        "ingredients": "Chipotle, molasses",
        "allergens": "Mustard",
        "category": "BBQ Chili Sauce",
    }
    data.update(overrides)
    return SauceEntry.model_validate(data)


class TestListSauces:
    def test_lists_own_sauces_with_derived_status(self, db, make_sauce):
        boxed = make_sauce(status="boxed", payment_status="paid")
        make_sauce()
        db.seed("sauces", supplier_id="someone-else", name="Not mine", sauce_code="M009", status="registered")
        db.seed("judging_scores", sauce_id=boxed["id"], judge_id="j1", category_id="taste", score=8)

        sauces = SauceService.list_sauces(SUPPLIER_EMAIL)

        assert [s.sauce_code for s in sauces] == ["H001", "H002"]
        assert sauces[0].status == "judged"
        assert sauces[1].status == "registered"

    def test_boxed_without_scores_stays_boxed(self, db, make_sauce):
        make_sauce(status="boxed", payment_status="paid")
        assert SauceService.list_sauces(SUPPLIER_EMAIL)[0].status == "boxed"

    def test_requires_supplier_profile(self, db):
        with pytest.raises(NotAuthorizedError, match="No supplier profile"):
            SauceService.list_sauces("stranger@example.com")


class TestAddSauce:
    def test_adds_unpaid_sauce_with_code(self, db, supplier):
        summary = SauceService.add_sauce(SUPPLIER_EMAIL, entry())

        assert summary.sauce_code == "B001"
        assert summary.payment_status == "pending_payment"
        stored = db.get("sauces", summary.id)
        assert stored["supplier_id"] == supplier["id"]
        assert stored["qr_code_url"].endswith(f"?data={summary.id}&size=200x200")

    def test_moves_pending_image(self, db, supplier):
        summary = SauceService.add_sauce(SUPPLIER_EMAIL, entry(imagePath="pending/x.PNG"))

        assert summary.image_path == f"{supplier['id']}/{summary.id}.png"

    def test_rejects_unknown_category(self, db, supplier):
        with pytest.raises(UnknownCategoryError):
            SauceService.add_sauce(SUPPLIER_EMAIL, entry(category="Mayonnaise"))
        assert db.rows("sauces") == []

    def test_code_collision_is_retried(self, db, supplier, monkeypatch):
        """Another request took B001 after the allocator read the codes."""
        fetches = []

        def fetch_codes(letter):
            fetches.append(letter)
            if len(fetches) == 1:
                db.seed("sauces", name="Raced", category="BBQ Chili Sauce", sauce_code="B001")
                return []
            return ["B001"]

        monkeypatch.setattr(SauceService, "fetch_codes_for_letter", staticmethod(fetch_codes))

        summary = SauceService.add_sauce(SUPPLIER_EMAIL, entry())

        assert summary.sauce_code == "B002"
        assert len(fetches) == 2


class TestDeleteSauce:
    def test_deletes_unpaid_sauce(self, db, make_sauce):
        sauce = make_sauce()

        SauceService.delete_sauce(SUPPLIER_EMAIL, sauce["id"])

        assert db.get("sauces", sauce["id"]) is None

    def test_paid_sauce_cannot_be_deleted(self, db, make_sauce):
        sauce = make_sauce(payment_status="paid")

        with pytest.raises(SauceAlreadyPaidError):
            SauceService.delete_sauce(SUPPLIER_EMAIL, sauce["id"])
        assert db.get("sauces", sauce["id"]) is not None

    def test_other_suppliers_sauce_is_not_found(self, db, supplier):
        other = db.seed("sauces", supplier_id="someone-else", name="Theirs", payment_status="pending_payment")

        with pytest.raises(SauceNotFoundError):
            SauceService.delete_sauce(SUPPLIER_EMAIL, other["id"])
        assert db.get("sauces", other["id"]) is not None


class TestUpdateSauceStatus:
    def test_paid_sauce_can_arrive(self, db, make_sauce):
        sauce = make_sauce(payment_status="paid")

        updated = SauceService.update_sauce_status(sauce["id"], "arrived")

        assert updated["status"] == "arrived"
        assert db.get("sauces", sauce["id"])["status"] == "arrived"

    def test_unpaid_sauce_cannot_arrive(self, db, make_sauce):
        sauce = make_sauce()

        with pytest.raises(InvalidStatusTransitionError, match="until its entry fee is paid"):
            SauceService.update_sauce_status(sauce["id"], "arrived")
        assert db.get("sauces", sauce["id"])["status"] == "registered"

    def test_judged_cannot_be_stored(self, db, make_sauce):
        sauce = make_sauce(status="boxed", payment_status="paid")

        with pytest.raises(InvalidStatusTransitionError, match="derived from judging scores"):
            SauceService.update_sauce_status(sauce["id"], "judged")

    def test_registered_sauce_cannot_be_boxed(self, db, make_sauce):
        sauce = make_sauce()

        with pytest.raises(InvalidStatusTransitionError, match="before it can be boxed"):
            SauceService.update_sauce_status(sauce["id"], "boxed")
        assert db.get("sauces", sauce["id"])["status"] == "registered"

    def test_arrived_sauce_can_be_boxed(self, db, make_sauce):
        sauce = make_sauce(status="arrived", payment_status="paid")

        assert SauceService.update_sauce_status(sauce["id"], "boxed")["status"] == "boxed"

    def test_admin_can_move_backwards(self, db, make_sauce):
        sauce = make_sauce(status="boxed", payment_status="paid")

        SauceService.update_sauce_status(sauce["id"], "arrived")

        assert db.get("sauces", sauce["id"])["status"] == "arrived"

    def test_unknown_sauce(self, db):
        with pytest.raises(SauceNotFoundError):
            SauceService.update_sauce_status("missing", "boxed")
