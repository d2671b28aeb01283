# =============================================================================
# tests/test_supplier_intake.py - Supplier Intake Orchestration Tests
# =============================================================================
# Runs SupplierIntakeService.submit() against the in-memory database:
# - Full provisioning: auth user, supplier, judge, participations, sauces,
#   QR codes, payment quote, image moves
# - Honeypot submissions write nothing
# - Validation happens before any write
# - Step failures are tagged with the step label and not rolled back
# - Re-submissions reuse unpaid sauces and supersede the old quote
# =============================================================================

from types import SimpleNamespace

import pytest

from app.config import settings
from app.exceptions import (
    IntakeStepError,
    InvalidSubmissionError,
    UnknownCategoryError,
)
from core.models.intake import SupplierIntakeRequest
from core.services.supplier_intake_service import SupplierIntakeService

SUPPLIER_EMAIL = "hello@fierysauce.co"


def intake_request(**overrides) -> SupplierIntakeRequest:
    data = {
        "brand": "Fiery Sauce Co",
        "contactName": "Maria Lopez",
        "address": "Calle Mayor 1, Madrid",
        "email": "Hello@FierySauce.co",
        "sauces": [
            {
                "name": "Ghost Fire",
                "ingredients": "Ghost pepper, vinegar, salt",
                "allergens": "None",
                "category": "Hot Chili Sauce",
                "webshopLink": "shop.fierysauce.co/ghost-fire",
                "imagePath": "pending/3f2a.webp",
            },
            {
                "name": "Green Mild",
                "ingredients": "Jalapeno, lime",
                "allergens": "None",
                "category": "Mild Chili Sauce",
            },
        ],
    }
    data.update(overrides)
    return SupplierIntakeRequest.model_validate(data)


# =============================================================================
# Happy Path
# =============================================================================

class TestSuccessfulIntake:
    """A valid submission provisions everything in order."""

    def test_provisions_supplier_and_judge(self, db):
        response = SupplierIntakeService.submit(intake_request())

        assert response.success is True
        supplier = db.rows("suppliers")[0]
        assert response.supplier_id == supplier["id"]
        assert supplier["email"] == SUPPLIER_EMAIL
        assert supplier["brand_name"] == "Fiery Sauce Co"

        judge = db.rows("judges", email=SUPPLIER_EMAIL)[0]
        assert judge["type"] == "supplier"
        assert judge["active"] is True
        assert judge["stripe_payment_status"] == "succeeded"
        assert judge["name"] == "Maria Lopez"

        assert [u.email for u in db.auth.admin.users] == [SUPPLIER_EMAIL]

    def test_records_participation(self, db):
        SupplierIntakeService.submit(intake_request())

        judge_participation = db.rows("judge_participations")[0]
        assert judge_participation["year"] == 2026
        assert judge_participation["judge_type"] == "supplier"
        assert judge_participation["accepted"] is True

        assert db.rows("supplier_participations")[0]["sauce_count"] == 2

    def test_allocates_codes_and_qr_urls(self, db):
        response = SupplierIntakeService.submit(intake_request())

        assert [s.sauce_code for s in response.sauces] == ["H001", "M001"]
        for summary in response.sauces:
            sauce = db.get("sauces", summary.id)
            assert sauce["status"] == "registered"
            assert sauce["payment_status"] == "pending_payment"
            assert sauce["qr_code_url"] == f"{settings.QR_CODE_API_URL}?data={summary.id}&size=200x200"

    def test_normalizes_webshop_link(self, db):
        response = SupplierIntakeService.submit(intake_request())
        sauce = db.get("sauces", response.sauces[0].id)
        assert sauce["webshop_link"] == "https://shop.fierysauce.co/ghost-fire"

    def test_continues_codes_from_other_suppliers(self, db):
        db.seed("sauces", name="Other", category="Hot Chili Sauce", sauce_code="H007", payment_status="paid")

        response = SupplierIntakeService.submit(intake_request())

        assert response.sauces[0].sauce_code == "H008"

    def test_builds_and_links_quote(self, db):
        response = SupplierIntakeService.submit(intake_request())

        payment = db.rows("supplier_payments")[0]
        assert payment["entry_count"] == 2
        assert payment["subtotal_cents"] == 10000
        assert payment["discount_cents"] == 300
        assert payment["amount_due_cents"] == 9700
        assert payment["stripe_payment_status"] == "pending"
        assert response.payment["payment_id"] == payment["id"]
        assert response.payment["amount_due_cents"] == 9700

        for summary in response.sauces:
            assert db.get("sauces", summary.id)["payment_id"] == payment["id"]

    def test_moves_pending_image(self, db):
        response = SupplierIntakeService.submit(intake_request())

        ghost_fire = response.sauces[0]
        expected = f"{response.supplier_id}/{ghost_fire.id}.webp"
        assert db.storage.moves == [(settings.SAUCE_IMAGE_BUCKET, "pending/3f2a.webp", expected)]
        assert ghost_fire.image_path == expected
        assert db.get("sauces", ghost_fire.id)["image_path"] == expected
        assert response.sauces[1].image_path is None

    def test_sends_confirmation(self, db, http):
        SupplierIntakeService.submit(intake_request())

        assert http.emails[0]["type"] == "supplier_confirmation"
        assert http.emails[0]["data"]["email"] == SUPPLIER_EMAIL
        assert http.emails[0]["data"]["amount"] == "97.00"

    def test_confirmation_failure_is_not_fatal(self, db, http):
        http.responses["/api/send-email"] = (500, {"error": "mail server down"})

        response = SupplierIntakeService.submit(intake_request())

        assert response.success is True

    def test_admin_keeps_admin_type(self, db):
        db.seed("judges", email=SUPPLIER_EMAIL, type="admin", active=True)

        SupplierIntakeService.submit(intake_request())

        assert db.rows("judges", email=SUPPLIER_EMAIL)[0]["type"] == "admin"

    def test_existing_auth_user_is_reused(self, db):
        db.auth.admin.users.append(SimpleNamespace(id="user-1", email=SUPPLIER_EMAIL))

        SupplierIntakeService.submit(intake_request())

        assert len(db.auth.admin.users) == 1

    def test_auth_user_race_retries_lookup(self, db):
        """A concurrent request created the user between lookup and create."""
        admin_api = db.auth.admin

        def create_user_racing(attributes):
            admin_api.users.append(SimpleNamespace(id="user-2", email=attributes["email"]))
            raise RuntimeError("User already registered")

        admin_api.create_user = create_user_racing

        response = SupplierIntakeService.submit(intake_request())

        assert response.success is True


# =============================================================================
# Re-submission
# =============================================================================

class TestResubmission:
    """Retrying a submission must not duplicate sauces or charges."""

    def test_reuses_unpaid_sauces(self, db):
        first = SupplierIntakeService.submit(intake_request())
        second = SupplierIntakeService.submit(intake_request())

        assert len(db.rows("sauces")) == 2
        assert [s.id for s in second.sauces] == [s.id for s in first.sauces]
        assert [s.sauce_code for s in second.sauces] == ["H001", "M001"]

    def test_supersedes_previous_quote(self, db):
        first = SupplierIntakeService.submit(intake_request())
        second = SupplierIntakeService.submit(intake_request())

        old = db.get("supplier_payments", first.payment["payment_id"])
        new = db.get("supplier_payments", second.payment["payment_id"])
        assert old["stripe_payment_status"] == "superseded"
        assert new["stripe_payment_status"] == "pending"
        assert new["entry_count"] == 2
        for sauce in db.rows("sauces"):
            assert sauce["payment_id"] == new["id"]

    def test_quote_covers_all_unpaid_sauces(self, db):
        SupplierIntakeService.submit(intake_request())
        supplier_id = db.rows("suppliers")[0]["id"]
        db.seed("sauces", supplier_id=supplier_id, name="Paid", category="Sweet",
                sauce_code="S001", payment_status="paid")

        response = SupplierIntakeService.submit(intake_request(sauces=[{
            "name": "Smoky BBQ",
            "ingredients": "Chipotle, molasses",
            "allergens": "Mustard",
            "category": "BBQ Chili Sauce",
        }]))

        assert response.payment["entry_count"] == 3
        assert response.payment["discount_percent"] == 5

    def test_participation_counts_every_entry(self, db):
        SupplierIntakeService.submit(intake_request())
        for sauce in db.rows("sauces"):
            sauce["payment_status"] = "paid"

        SupplierIntakeService.submit(intake_request(sauces=[{
            "name": "Smoky BBQ",
            "ingredients": "Chipotle, molasses",
            "allergens": "Mustard",
            "category": "BBQ Chili Sauce",
        }]))

        participations = db.rows("supplier_participations")
        assert len(participations) == 1
        assert participations[0]["sauce_count"] == 3

    def test_resubmitting_the_same_sauces_keeps_the_count(self, db):
        SupplierIntakeService.submit(intake_request())
        SupplierIntakeService.submit(intake_request())

        assert db.rows("supplier_participations")[0]["sauce_count"] == 2

    def test_paid_sauce_is_not_reused(self, db):
        first = SupplierIntakeService.submit(intake_request())
        for sauce in db.rows("sauces"):
            sauce["payment_status"] = "paid"

        second = SupplierIntakeService.submit(intake_request())

        assert len(db.rows("sauces")) == 4
        assert [s.sauce_code for s in second.sauces] == ["H002", "M002"]
        assert second.sauces[0].id != first.sauces[0].id


# =============================================================================
# Rejections and Failures
# =============================================================================

class TestHoneypot:
    def test_honeypot_writes_nothing(self, db, http):
        response = SupplierIntakeService.submit(intake_request(website="http://spam.example"))

        assert response.success is True
        assert response.supplier_id is None
        assert response.sauces is None
        assert response.model_dump(exclude_none=True) == {"success": True}
        assert db.writes() == []
        assert db.auth.admin.users == []
        assert http.calls == []


class TestValidation:
    """Invalid submissions are rejected before any write."""

    def test_requires_a_sauce(self, db):
        with pytest.raises(InvalidSubmissionError, match="At least one sauce is required"):
            SupplierIntakeService.submit(intake_request(sauces=[]))
        assert db.writes() == []

    def test_rejects_bad_email(self, db):
        with pytest.raises(InvalidSubmissionError, match="Email must include a domain"):
            SupplierIntakeService.submit(intake_request(email="maria@gmail"))
        assert db.auth.admin.users == []

    def test_rejects_unknown_category(self, db):
        request = intake_request()
        request.sauces[1].category = "Ketchup Deluxe"

        with pytest.raises(UnknownCategoryError):
            SupplierIntakeService.submit(request)
        assert db.writes() == []

    def test_names_missing_sauce_field(self, db):
        request = intake_request()
        request.sauces[1].ingredients = "  "

        with pytest.raises(InvalidSubmissionError, match="Sauce 2: ingredients is required"):
            SupplierIntakeService.submit(request)

    def test_requires_brand(self, db):
        with pytest.raises(InvalidSubmissionError, match="Brand name is required"):
            SupplierIntakeService.submit(intake_request(brand=" "))


class TestStepFailures:
    """A failing step is reported with its label; earlier writes stay."""

    def test_failure_is_tagged_with_step(self, db):
        db.fail("supplier_participations", "upsert", RuntimeError("connection reset"))

        with pytest.raises(IntakeStepError) as exc_info:
            SupplierIntakeService.submit(intake_request())

        assert exc_info.value.step == "supplier_participation"
        assert exc_info.value.message == "supplier_participation: connection reset"
        assert exc_info.value.status_code == 400

    def test_earlier_steps_not_rolled_back(self, db):
        db.fail("sauces", "insert", RuntimeError("disk full"))

        with pytest.raises(IntakeStepError, match="sauce_records: disk full"):
            SupplierIntakeService.submit(intake_request())

        assert len(db.rows("suppliers")) == 1
        assert len(db.rows("judges")) == 1
        assert len(db.rows("judge_participations")) == 1
        assert db.rows("supplier_payments") == []

    def test_auth_failure(self, db):
        db.auth.admin.create_user_error = RuntimeError("auth service unavailable")

        with pytest.raises(IntakeStepError, match="auth_user: auth service unavailable"):
            SupplierIntakeService.submit(intake_request())
        assert db.rows("suppliers") == []

    def test_image_move_failure(self, db):
        db.storage.move_error = RuntimeError("object not found")

        with pytest.raises(IntakeStepError) as exc_info:
            SupplierIntakeService.submit(intake_request())

        assert exc_info.value.step == "images"
        assert "object not found" in exc_info.value.message
        assert len(db.rows("sauces")) == 2
        assert len(db.rows("supplier_payments")) == 1
