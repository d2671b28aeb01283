# =============================================================================
# tests/test_competition.py - Competition Rules Tests
# =============================================================================

import logging
from datetime import date

import pytest
from pydantic import ValidationError

from core.competition import (
    RULES_BY_YEAR,
    CompetitionRules,
    DiscountBand,
    get_rules,
    validate_competition_year,
)


class TestGetRules:
    """Tests for get_rules()."""

    def test_defaults_to_configured_year(self):
        assert get_rules().year == 2026
        assert get_rules() is get_rules(2026)

    def test_standard_constants(self):
        rules = get_rules()

        assert rules.entry_price_cents == 5000
        assert rules.bottles_per_sauce == 7
        assert rules.sauces_per_box == 12
        assert rules.judge_fee_cents == 1500
        assert rules.judge_weights == {"pro": 0.8, "community": 1.5, "supplier": 0.8}
        assert len(rules.discount_bands) == 9

    def test_unknown_year_falls_back_to_latest(self, caplog):
        """A year with no rules reuses the latest season and warns."""
        with caplog.at_level(logging.WARNING):
            rules = get_rules(2031)

        assert rules.year == 2031
        assert rules.discount_bands == RULES_BY_YEAR[max(RULES_BY_YEAR)].discount_bands

    def test_rules_are_frozen(self):
        with pytest.raises(ValidationError):
            get_rules().entry_price_cents = 1


class TestBandValidation:
    """Discount bands must be well-formed."""

    def test_bands_must_start_at_one(self):
        with pytest.raises(ValidationError, match="start at one entry"):
            CompetitionRules(
                year=2026,
                discount_bands=(DiscountBand(min_entries=2, max_entries=5, rate=0.1),),
            )

    def test_bands_must_be_contiguous(self):
        with pytest.raises(ValidationError, match="contiguous"):
            CompetitionRules(
                year=2026,
                discount_bands=(
                    DiscountBand(min_entries=1, max_entries=1, rate=0.0),
                    DiscountBand(min_entries=3, max_entries=5, rate=0.1),
                ),
            )

    def test_rates_must_not_decrease(self):
        with pytest.raises(ValidationError, match="must not decrease"):
            CompetitionRules(
                year=2026,
                discount_bands=(
                    DiscountBand(min_entries=1, max_entries=1, rate=0.1),
                    DiscountBand(min_entries=2, max_entries=5, rate=0.05),
                ),
            )


class TestValidateCompetitionYear:
    """Tests for the startup year check."""

    def test_current_year_is_fine(self):
        assert validate_competition_year(date(2026, 6, 1)) is True

    def test_adjacent_years_are_fine(self):
        assert validate_competition_year(date(2025, 12, 1)) is True
        assert validate_competition_year(date(2027, 1, 15)) is True

    def test_stale_year_warns(self, caplog):
        with caplog.at_level(logging.WARNING):
            assert validate_competition_year(date(2029, 1, 1)) is False
        assert "may be outdated" in caplog.text
