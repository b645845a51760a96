"""
Tests for planning assumptions and their defaults.
"""

import pytest
from pydantic import ValidationError

from wealthplan.models.assumptions import (
    DEFAULT_ASSUMPTIONS,
    Assumptions,
    assumptions_with_defaults,
    life_expectancy_for_age,
    state_tax_rate_for,
)


class TestAssumptions:
    """Test the Assumptions model."""

    def test_defaults(self):
        assert DEFAULT_ASSUMPTIONS.current_age == 50
        assert DEFAULT_ASSUMPTIONS.retirement_age == 65
        assert DEFAULT_ASSUMPTIONS.life_expectancy == 90
        assert DEFAULT_ASSUMPTIONS.annual_other_income == 24_000
        assert DEFAULT_ASSUMPTIONS.ordinary_income_rate == pytest.approx(0.353)

    def test_post_retirement_rate_defaults_to_growth_rate(self):
        assert Assumptions(growth_rate=0.05).effective_post_retirement_growth_rate == 0.05
        assumptions = Assumptions(growth_rate=0.05, post_retirement_growth_rate=0.03)
        assert assumptions.effective_post_retirement_growth_rate == 0.03

    def test_year_counts(self):
        assumptions = Assumptions(current_age=40, retirement_age=60, life_expectancy=95)
        assert assumptions.years_to_retirement == 20
        assert assumptions.years_in_retirement == 35
        assert assumptions.is_degenerate is False

    @pytest.mark.parametrize(
        "field,value",
        [
            ("growth_rate", -0.01),
            ("inflation_rate", 1.5),
            ("federal_tax_rate", 0.7),
            ("current_age", 121),
            ("annual_spending_needs", -1),
            ("growth_rate", float("inf")),
        ],
    )
    def test_out_of_range_values_rejected(self, field, value):
        with pytest.raises(ValidationError):
            Assumptions(**{field: value})

    def test_frozen(self):
        with pytest.raises(ValidationError):
            DEFAULT_ASSUMPTIONS.growth_rate = 0.1


class TestDefaultLookups:
    """Test state tax and life expectancy lookups."""

    def test_state_tax_rate(self):
        assert state_tax_rate_for("TX") == 0.0
        assert state_tax_rate_for("ny") == 0.109
        assert state_tax_rate_for("ZZ") == 0.05

    @pytest.mark.parametrize(
        "age,expected",
        [
            (10, 79),
            (20, 79),
            (52, 81),
            (65, 85),
            (95, 99),
            (99, 100),
            (110, 111),
            (119, 120),
            (120, 120),
        ],
    )
    def test_life_expectancy_for_age(self, age, expected):
        assert life_expectancy_for_age(age) == expected

    def test_assumptions_with_defaults_fills_lookups(self):
        assumptions = assumptions_with_defaults({"state_code": "WA", "current_age": 70})
        assert assumptions.state_tax_rate == 0.0
        assert assumptions.life_expectancy == 86

    def test_oldest_age_gets_a_valid_life_expectancy(self):
        assumptions = assumptions_with_defaults({"current_age": 120})
        assert assumptions.life_expectancy == 120
        assert assumptions.is_degenerate

    def test_explicit_values_win(self):
        assumptions = assumptions_with_defaults(
            {"state_code": "WA", "state_tax_rate": 0.02, "current_age": 70, "life_expectancy": 100}
        )
        assert assumptions.state_tax_rate == 0.02
        assert assumptions.life_expectancy == 100

    def test_empty_input_gives_defaults(self):
        assert assumptions_with_defaults(None) == DEFAULT_ASSUMPTIONS

    def test_invalid_age_reported_by_validation(self):
        with pytest.raises(ValidationError):
            assumptions_with_defaults({"current_age": "old"})
