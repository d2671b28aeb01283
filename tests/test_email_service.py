# =============================================================================
# tests/test_email_service.py - Email Service Tests
# =============================================================================

import httpx
import pytest

from app.config import settings
from app.exceptions import EmailDeliveryError, InvalidSubmissionError
from core.services.email_service import Audience, EmailService, EmailType


class TestSend:
    def test_posts_to_email_api(self, http):
        EmailService.send(EmailType.JUDGE_CONFIRMATION, {"email": "chef@example.com", "name": "Anna"})

        call = http.calls_to("/api/send-email")[0]
        assert call.url == f"{settings.EMAIL_API_URL.rstrip('/')}/api/send-email"
        assert call.json == {
            "type": "judge_confirmation",
            "data": {"email": "chef@example.com", "name": "Anna"},
        }
        assert call.headers["Authorization"] == f"Bearer {settings.SUPABASE_SERVICE_KEY}"

    def test_rejected_email(self, http):
        http.responses["/api/send-email"] = (400, {"error": "Invalid recipient"})

        with pytest.raises(EmailDeliveryError, match="Invalid recipient"):
            EmailService.send("campaign", {"email": "x@example.com"})

    def test_unreachable_api(self, http):
        http.errors["/api/send-email"] = httpx.ConnectError("connection refused")

        with pytest.raises(EmailDeliveryError, match="connection refused"):
            EmailService.send("campaign", {"email": "x@example.com"})

    def test_send_quietly_reports_failure(self, http):
        http.responses["/api/send-email"] = (500, {"error": "down"})

        assert EmailService.send_quietly("supplier_confirmation", {"email": "x@example.com"}) is False


class TestCampaignRecipients:
    @pytest.fixture(autouse=True)
    def people(self, db, admin, pro_judge, supplier, make_sauce):
        db.seed("judges", email="fan@example.com", name="Fan", type="community", active=True)
        db.seed("judges", email="late@example.com", name="Late", type="community", active=False)
        paid_supplier = db.seed("suppliers", email="info@smokyjoe.com", brand_name="Smoky Joe")
        db.seed("sauces", supplier_id=paid_supplier["id"], name="Smoke", payment_status="paid")
        make_sauce()
        make_sauce()

    def emails(self, audience):
        return sorted(r["email"] for r in EmailService.campaign_recipients(audience))

    def test_suppliers(self):
        assert self.emails(Audience.SUPPLIERS) == ["hello@fierysauce.co", "info@smokyjoe.com"]

    def test_unpaid_suppliers_deduplicated(self):
        assert self.emails("unpaid_suppliers") == ["hello@fierysauce.co"]

    def test_judges_exclude_admins_and_inactive(self):
        assert self.emails("judges") == ["chef@example.com", "fan@example.com"]

    def test_pro_and_community_judges(self):
        assert self.emails("pro_judges") == ["chef@example.com"]
        assert self.emails("community_judges") == ["fan@example.com"]

    def test_unknown_audience(self):
        with pytest.raises(InvalidSubmissionError, match="Unknown audience"):
            EmailService.campaign_recipients("everyone")


class TestSendCampaign:
    def test_sends_to_each_recipient(self, db, http, pro_judge):
        db.seed("judges", email="fan@example.com", name="Fan", type="community", active=True)
        progress = []

        result = EmailService.send_campaign(
            "judges", "Judging day", "See you Saturday",
            on_progress=lambda done, total: progress.append((done, total)),
        )

        assert result == {"audience": "judges", "total": 2, "sent": 2, "errors": []}
        assert progress == [(1, 2), (2, 2)]
        assert {e["data"]["subject"] for e in http.emails} == {"Judging day"}
        assert http.emails[0]["type"] == "campaign"

    def test_failures_are_collected(self, db, http, pro_judge):
        http.responses["/api/send-email"] = (503, {"error": "busy"})

        result = EmailService.send_campaign("pro_judges", "Hi", "Body")

        assert result["sent"] == 0
        assert result["errors"][0]["email"] == "chef@example.com"
