"""
Planning assumptions for retirement projections.

This module defines the Assumptions record consumed by every calculator, along
with the market benchmark constants, state tax table and life expectancy
lookup used to default it.
"""

from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

ORDINARY_TAX_RATE_BOUND = 0.6
MAX_AGE = 120


class Assumptions(BaseModel):
    """Planning inputs for a retirement projection.

    Ages are not cross-validated against each other: the projection engine
    degrades to a single-point result for impossible age combinations so the
    caller can always render a number.
    """

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    current_age: int = Field(default=50, ge=0, le=MAX_AGE, description="Current age")
    retirement_age: int = Field(
        default=65, ge=0, le=MAX_AGE, description="Age at which withdrawals begin"
    )
    life_expectancy: int = Field(
        default=90, ge=0, le=MAX_AGE, description="Final age of the projection"
    )
    annual_spending_needs: float = Field(
        default=100000, ge=0, description="After-tax annual spending (today's dollars)"
    )
    social_security_monthly: float = Field(
        default=2000, ge=0, description="Monthly Social Security benefit (today's dollars)"
    )
    other_income_monthly: float = Field(
        default=0, ge=0, description="Other monthly retirement income (today's dollars)"
    )
    inflation_rate: float = Field(
        default=0.03, ge=0, le=1, description="Annual inflation rate (decimal)"
    )
    growth_rate: float = Field(
        default=0.06, ge=0, le=1, description="Pre-retirement nominal growth rate"
    )
    post_retirement_growth_rate: Optional[float] = Field(
        default=None,
        ge=0,
        le=1,
        description="Post-retirement growth rate (defaults to growth_rate)",
    )
    federal_tax_rate: float = Field(
        default=0.22, ge=0, le=ORDINARY_TAX_RATE_BOUND, description="Federal income tax rate"
    )
    state_code: str = Field(default="CA", description="State code for state tax lookup")
    state_tax_rate: float = Field(
        default=0.133, ge=0, le=ORDINARY_TAX_RATE_BOUND, description="State income tax rate"
    )
    local_tax_rate: float = Field(
        default=0.0, ge=0, le=ORDINARY_TAX_RATE_BOUND, description="Local income tax rate"
    )
    capital_gains_tax_rate: float = Field(
        default=0.15,
        ge=0,
        le=ORDINARY_TAX_RATE_BOUND,
        description="Long-term capital gains tax rate",
    )
    short_term_capital_gains_tax_rate: Optional[float] = Field(
        default=None,
        ge=0,
        le=1,
        description="Short-term capital gains rate (defaults to ordinary income rate)",
    )
    qsbs_exclusion_limit: float = Field(
        default=10_000_000, ge=0, description="Section 1202 gain exclusion limit"
    )
    pre_retirement_spending_rate: float = Field(
        default=0.7,
        ge=0,
        le=1,
        description="Fraction of retirement spending reported before retirement",
    )
    annual_savings_contribution: float = Field(
        default=0, ge=0, description="Savings added each pre-retirement year"
    )

    @property
    def ordinary_income_rate(self) -> float:
        """Combined federal, state and local income tax rate."""
        return self.federal_tax_rate + self.state_tax_rate + self.local_tax_rate

    @property
    def annual_other_income(self) -> float:
        """Annual Social Security plus other income in today's dollars."""
        return (self.social_security_monthly + self.other_income_monthly) * 12

    @property
    def effective_post_retirement_growth_rate(self) -> float:
        if self.post_retirement_growth_rate is None:
            return self.growth_rate
        return self.post_retirement_growth_rate

    @property
    def years_to_retirement(self) -> int:
        return max(0, self.retirement_age - self.current_age)

    @property
    def years_in_retirement(self) -> int:
        return max(0, self.life_expectancy - self.retirement_age)

    @property
    def is_degenerate(self) -> bool:
        """True when the age ranges cannot produce a retirement projection."""
        return (
            self.retirement_age <= self.current_age
            or self.life_expectancy < self.retirement_age
        )


DEFAULT_ASSUMPTIONS = Assumptions()

# Market benchmarks (as of January 2026)
MARKET_BENCHMARKS: Dict[str, object] = {
    "inflation_rate": {"current": 0.028, "historical": 0.03, "range": {"min": 0.02, "max": 0.05}},
    "stock_returns": {"historical": 0.10, "conservative": 0.06, "aggressive": 0.12},
    "bond_returns": {"historical": 0.05, "current": 0.045},
    "safe_withdrawal_rate": 0.04,
    "social_security_cola": 0.025,
}

SAFE_WITHDRAWAL_RATE = 0.04

GROWTH_PRESETS: List[Dict[str, object]] = [
    {"label": "Conservative (4%)", "value": 0.04, "description": "Bonds, CDs, money market"},
    {"label": "Moderate (6%)", "value": 0.06, "description": "Balanced portfolio"},
    {"label": "Growth (8%)", "value": 0.08, "description": "Stock-heavy portfolio"},
]

# 2026 state income tax rates (top marginal)
US_STATE_TAX_RATES: List[Dict[str, object]] = [
    {"code": "AL", "name": "Alabama", "rate": 0.05},
    {"code": "AK", "name": "Alaska", "rate": 0.0},
    {"code": "AZ", "name": "Arizona", "rate": 0.025},
    {"code": "AR", "name": "Arkansas", "rate": 0.039},
    {"code": "CA", "name": "California", "rate": 0.133},
    {"code": "CO", "name": "Colorado", "rate": 0.044},
    {"code": "CT", "name": "Connecticut", "rate": 0.0699},
    {"code": "DE", "name": "Delaware", "rate": 0.066},
    {"code": "FL", "name": "Florida", "rate": 0.0},
    {"code": "GA", "name": "Georgia", "rate": 0.0519},
    {"code": "HI", "name": "Hawaii", "rate": 0.11},
    {"code": "ID", "name": "Idaho", "rate": 0.058},
    {"code": "IL", "name": "Illinois", "rate": 0.0495},
    {"code": "IN", "name": "Indiana", "rate": 0.0305},
    {"code": "IA", "name": "Iowa", "rate": 0.0385},
    {"code": "KS", "name": "Kansas", "rate": 0.057},
    {"code": "KY", "name": "Kentucky", "rate": 0.04},
    {"code": "LA", "name": "Louisiana", "rate": 0.0425},
    {"code": "ME", "name": "Maine", "rate": 0.0715},
    {"code": "MD", "name": "Maryland", "rate": 0.0575},
    {"code": "MA", "name": "Massachusetts", "rate": 0.09},
    {"code": "MI", "name": "Michigan", "rate": 0.0425},
    {"code": "MN", "name": "Minnesota", "rate": 0.0985},
    {"code": "MS", "name": "Mississippi", "rate": 0.05},
    {"code": "MO", "name": "Missouri", "rate": 0.0495},
    {"code": "MT", "name": "Montana", "rate": 0.059},
    {"code": "NE", "name": "Nebraska", "rate": 0.0584},
    {"code": "NV", "name": "Nevada", "rate": 0.0},
    {"code": "NH", "name": "New Hampshire", "rate": 0.0},
    {"code": "NJ", "name": "New Jersey", "rate": 0.1075},
    {"code": "NM", "name": "New Mexico", "rate": 0.059},
    {"code": "NY", "name": "New York", "rate": 0.109},
    {"code": "NC", "name": "North Carolina", "rate": 0.045},
    {"code": "ND", "name": "North Dakota", "rate": 0.0225},
    {"code": "OH", "name": "Ohio", "rate": 0.035},
    {"code": "OK", "name": "Oklahoma", "rate": 0.0475},
    {"code": "OR", "name": "Oregon", "rate": 0.099},
    {"code": "PA", "name": "Pennsylvania", "rate": 0.0307},
    {"code": "RI", "name": "Rhode Island", "rate": 0.0599},
    {"code": "SC", "name": "South Carolina", "rate": 0.064},
    {"code": "SD", "name": "South Dakota", "rate": 0.0},
    {"code": "TN", "name": "Tennessee", "rate": 0.0},
    {"code": "TX", "name": "Texas", "rate": 0.0},
    {"code": "UT", "name": "Utah", "rate": 0.0465},
    {"code": "VT", "name": "Vermont", "rate": 0.0875},
    {"code": "VA", "name": "Virginia", "rate": 0.0575},
    {"code": "WA", "name": "Washington", "rate": 0.0},
    {"code": "WV", "name": "West Virginia", "rate": 0.055},
    {"code": "WI", "name": "Wisconsin", "rate": 0.0765},
    {"code": "WY", "name": "Wyoming", "rate": 0.0},
    {"code": "DC", "name": "Washington D.C.", "rate": 0.1075},
    {"code": "OTHER", "name": "Outside USA / Manual Entry", "rate": 0.05},
]

_STATE_RATES_BY_CODE = {entry["code"]: entry["rate"] for entry in US_STATE_TAX_RATES}


def state_tax_rate_for(state_code: str) -> float:
    """Look up the top marginal state income tax rate for a state code.

    Unknown codes fall back to the manual-entry rate.
    """
    code = str(state_code or "").strip().upper()
    return float(_STATE_RATES_BY_CODE.get(code, _STATE_RATES_BY_CODE["OTHER"]))


# Planning life expectancy keyed by current age (period life table, both
# sexes, remaining years rounded up).
LIFE_EXPECTANCY_TABLE: Dict[int, int] = {
    20: 79,
    30: 80,
    40: 80,
    45: 81,
    50: 81,
    55: 82,
    60: 83,
    65: 85,
    70: 86,
    75: 88,
    80: 90,
    85: 92,
    90: 95,
    95: 99,
    100: 103,
}


def life_expectancy_for_age(current_age: int) -> int:
    """Default life expectancy for someone of the given current age.

    Uses the closest table age at or below ``current_age``. The result is
    at least one year past the current age, capped at ``MAX_AGE``.
    """
    eligible = [age for age in LIFE_EXPECTANCY_TABLE if age <= current_age]
    key = max(eligible) if eligible else min(LIFE_EXPECTANCY_TABLE)
    return min(max(LIFE_EXPECTANCY_TABLE[key], current_age + 1), MAX_AGE)


def fill_assumption_defaults(data: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    """Fill lookup-based defaults into raw assumption input.

    A missing state tax rate is looked up from ``state_code`` and a missing
    life expectancy from ``current_age``. Values are not validated here.
    """
    values: Dict[str, Any] = dict(data or {})
    if "state_code" in values and "state_tax_rate" not in values:
        values["state_tax_rate"] = state_tax_rate_for(values["state_code"])
    if "current_age" in values and "life_expectancy" not in values:
        try:
            values["life_expectancy"] = life_expectancy_for_age(int(values["current_age"]))
        except (TypeError, ValueError):
            pass  # left for model validation to report
    return values


def assumptions_with_defaults(data: Optional[Mapping[str, Any]] = None) -> Assumptions:
    """Build Assumptions from partial input, taking model defaults for the rest.

    Raises:
        pydantic.ValidationError: If a supplied value is out of range
    """
    return Assumptions.model_validate(fill_assumption_defaults(data))
