# =============================================================================
# core/competition.py - Per-Year Competition Rules
# =============================================================================
# Every business constant that can change between seasons lives here:
# - Entry price and tiered discount bands
# - Judge class weights for the final score
# - Bottles per sauce (scan threshold) and box capacity
# - Community judge fee
#
# Rules are keyed by competition year and loaded once per process.
#
# Usage:
#   from core.competition import get_rules
#   rules = get_rules()          # settings.COMPETITION_YEAR
#   rules = get_rules(2025)      # a specific season
# =============================================================================

import logging
from datetime import date
from functools import lru_cache

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.config import settings

logger = logging.getLogger(__name__)


class DiscountBand(BaseModel):
    """An inclusive range of entry counts sharing one discount rate."""

    model_config = ConfigDict(frozen=True)

    min_entries: int = Field(..., ge=1)
    max_entries: int = Field(..., ge=1)
    rate: float = Field(..., ge=0.0, lt=1.0)

    def contains(self, entry_count: int) -> bool:
        return self.min_entries <= entry_count <= self.max_entries


class CompetitionRules(BaseModel):
    """
    Business rules for one competition year.

    The discount bands must be ascending, non-overlapping and start at one
    entry. Counts above the last band use the last band's rate.
    """

    model_config = ConfigDict(frozen=True)

    year: int
    currency: str = "eur"
    entry_price_cents: int = Field(default=5000, gt=0)
    discount_bands: tuple[DiscountBand, ...]
    judge_weights: dict[str, float] = Field(
        default_factory=lambda: {"pro": 0.8, "community": 1.5, "supplier": 0.8}
    )
    bottles_per_sauce: int = Field(default=7, ge=1)
    sauces_per_box: int = Field(default=12, ge=1)
    judges_per_box: int = Field(default=12, ge=1)
    judge_fee_cents: int = Field(default=1500, gt=0)

    @model_validator(mode="after")
    def _check_bands(self) -> "CompetitionRules":
        if not self.discount_bands:
            raise ValueError("At least one discount band is required")
        if self.discount_bands[0].min_entries != 1:
            raise ValueError("Discount bands must start at one entry")

        previous = None
        for band in self.discount_bands:
            if band.max_entries < band.min_entries:
                raise ValueError(f"Band {band.min_entries}-{band.max_entries} is inverted")
            if previous is not None:
                if band.min_entries != previous.max_entries + 1:
                    raise ValueError("Discount bands must be contiguous and ascending")
                if band.rate < previous.rate:
                    raise ValueError("Discount rates must not decrease")
            previous = band
        return self


_STANDARD_BANDS = (
    DiscountBand(min_entries=1, max_entries=1, rate=0.0),
    DiscountBand(min_entries=2, max_entries=2, rate=0.03),
    DiscountBand(min_entries=3, max_entries=3, rate=0.05),
    DiscountBand(min_entries=4, max_entries=4, rate=0.07),
    DiscountBand(min_entries=5, max_entries=5, rate=0.09),
    DiscountBand(min_entries=6, max_entries=6, rate=0.12),
    DiscountBand(min_entries=7, max_entries=10, rate=0.13),
    DiscountBand(min_entries=11, max_entries=20, rate=0.14),
    DiscountBand(min_entries=21, max_entries=100, rate=0.16),
)

RULES_BY_YEAR: dict[int, CompetitionRules] = {
    2025: CompetitionRules(year=2025, discount_bands=_STANDARD_BANDS),
    2026: CompetitionRules(year=2026, discount_bands=_STANDARD_BANDS),
}


@lru_cache
def get_rules(year: int | None = None) -> CompetitionRules:
    """
    Get the rules for a competition year.

    Args:
        year: Competition year (defaults to settings.COMPETITION_YEAR)

    Returns:
        CompetitionRules for that year. Unknown years fall back to the most
        recent known season.
    """
    year = year or settings.COMPETITION_YEAR

    if year in RULES_BY_YEAR:
        return RULES_BY_YEAR[year]

    latest = max(RULES_BY_YEAR)
    logger.warning(f"No competition rules for {year}, using {latest} rules")
    return RULES_BY_YEAR[latest].model_copy(update={"year": year})


def validate_competition_year(today: date | None = None) -> bool:
    """
    Warn when COMPETITION_YEAR looks stale.

    The configured year should be the current calendar year, or one either
    side of it while a season is being prepared or wrapped up.

    Returns:
        True if the year looks current
    """
    current = (today or date.today()).year
    year = settings.COMPETITION_YEAR

    if year < current - 1 or year > current + 1:
        logger.warning(
            f"COMPETITION_YEAR ({year}) may be outdated. Current year is {current}. "
            "Update COMPETITION_YEAR for the new season."
        )
        return False
    return True
