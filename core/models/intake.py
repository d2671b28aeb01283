# =============================================================================
# core/models/intake.py - Intake Request Schemas
# =============================================================================
# Supplier and judge application payloads, as posted by the public forms.
#
# Both models are lenient: missing or blank fields are reported by the
# services as 400 errors with a specific message, and the supplier honeypot
# check has to run before any validation. Required-field and email checks
# live in SupplierIntakeService and JudgeService.
# =============================================================================

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .sauce import SauceSummary


class SauceEntry(BaseModel):
    """
    One sauce in a supplier submission.

    Example:
        {
            "name": "Ghost Fire",
            "ingredients": "Ghost pepper, vinegar, salt",
            "allergens": "None",
            "category": "Hot Chili Sauce",
            "webshopLink": "shop.example.com/ghost-fire",
            "imagePath": "pending/4f0c.webp"
        }
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str = ""
    ingredients: str = ""
    allergens: str = ""
    category: str = ""
    webshop_link: str | None = Field(default=None, alias="webshopLink")
    image_path: str | None = Field(default=None, alias="imagePath")


class SupplierIntakeRequest(BaseModel):
    """Body for POST /intake/supplier."""

    model_config = ConfigDict(populate_by_name=True)

    brand: str = ""
    contact_name: str | None = Field(default=None, alias="contactName")
    address: str = ""
    email: str = ""
    sauces: list[SauceEntry] = Field(default_factory=list)

    # Honeypot: hidden from humans, bots fill it in
    website: str | None = None


class SupplierIntakeResponse(BaseModel):
    """Successful supplier intake."""
    success: bool = True
    supplier_id: str | None = None
    sauces: list[SauceSummary] | None = None
    payment: dict[str, Any] | None = None


class JudgeIntakeRequest(BaseModel):
    """Body for POST /intake/judge."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = ""
    email: str = ""
    address: str = ""
    zip: str = ""
    city: str = ""
    country: str = ""
    experience: str = ""
    industry_affiliation: bool = Field(default=False, alias="industryAffiliation")
    affiliation_details: str | None = Field(default=None, alias="affiliationDetails")


class JudgeIntakeResponse(BaseModel):
    """Successful judge application."""
    success: bool = True
    judge_id: str
