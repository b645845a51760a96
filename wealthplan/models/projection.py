"""
Deterministic retirement projection engine.

This module simulates a portfolio year by year from the current age to life
expectancy. The starting balance is the after-tax value of the asset list;
before retirement the balance compounds at the pre-retirement growth rate,
and from retirement onward it grows at the post-retirement rate and funds
inflation-adjusted spending net of other income.

The balance is never floored at zero, so the size of a shortfall stays
visible at life expectancy. All values are plain floats and nothing is
rounded inside the simulation.
"""

import logging
from typing import Iterable, List, Tuple

from pydantic import BaseModel, Field

from .assets import Asset
from .assumptions import SAFE_WITHDRAWAL_RATE, Assumptions
from .tax_treatment import calculate_total_after_tax_value

logger = logging.getLogger(__name__)

# Extra retirement years simulated when measuring how long the money lasts
YEARS_MONEY_LASTS_HORIZON = 50
MIN_REAL_RETURN = 0.001


class YearlyProjection(BaseModel):
    """Portfolio state for one age in the projection.

    ``balance`` is the balance entering that age. The flows describe the year
    that starts at that age; the row at life expectancy closes the horizon and
    carries no flows.
    """

    year: int = Field(..., description="Years from the current age")
    age: int = Field(..., description="Age at the start of the year")
    balance: float = Field(..., description="Portfolio balance entering the year")
    growth: float = Field(default=0.0, description="Investment growth during the year")
    contribution: float = Field(default=0.0, description="Savings added during the year")
    withdrawal: float = Field(default=0.0, description="Net withdrawal during the year")
    spending: float = Field(default=0.0, description="Nominal spending for the year")
    other_income: float = Field(default=0.0, description="Nominal other income for the year")
    end_balance: float = Field(..., description="Balance after the year's flows")
    is_retired: bool = Field(..., description="Whether the year is in retirement")


class ProjectionResult(BaseModel):
    """Year-by-year trajectory plus headline numbers."""

    portfolio_by_year: List[YearlyProjection] = Field(default_factory=list)
    total_after_tax_today: float
    years_to_retirement: int
    years_in_retirement: int
    value_at_retirement: float
    spending_at_retirement: float
    annual_other_income: float
    annual_withdrawal_needed: float
    surplus_or_shortfall: float
    years_money_lasts: int
    required_nest_egg: float
    nest_egg_gap: float
    additional_needed_today: float
    safe_withdrawal_amount: float
    sustainable_spending_level: float

    @property
    def is_on_track(self) -> bool:
        """True when the portfolio is non-negative at life expectancy."""
        return self.surplus_or_shortfall >= 0

    @property
    def balance_series(self) -> List[Tuple[int, int, float]]:
        """(age, year index, balance) for every projected age."""
        return [(row.age, row.year, row.balance) for row in self.portfolio_by_year]

    def summary(self) -> dict:
        """Headline numbers without the yearly series."""
        data = self.model_dump(exclude={"portfolio_by_year"})
        data["is_on_track"] = self.is_on_track
        return data


def inflation_factor(rate: float, years: int) -> float:
    """Compound growth factor over a number of years."""
    return (1 + rate) ** max(0, years)


def project_value_at_retirement(starting_balance: float, assumptions: Assumptions) -> float:
    """Grow the starting balance through the accumulation years."""
    balance = starting_balance
    for _ in range(assumptions.years_to_retirement):
        growth = balance * assumptions.growth_rate
        balance = balance + growth + assumptions.annual_savings_contribution
    return balance


def _single_point(starting_balance: float, assumptions: Assumptions) -> List[YearlyProjection]:
    return [
        YearlyProjection(
            year=0,
            age=assumptions.current_age,
            balance=starting_balance,
            end_balance=starting_balance,
            is_retired=assumptions.current_age >= assumptions.retirement_age,
        )
    ]


def generate_yearly_projections(
    total_after_tax_today: float, assumptions: Assumptions
) -> List[YearlyProjection]:
    """Simulate the portfolio for every age from current age to life expectancy.

    Args:
        total_after_tax_today: Starting balance
        assumptions: Planning assumptions

    Returns:
        One row per age, inclusive of both ends. Impossible age combinations
        yield a single row at the current age.
    """
    if assumptions.is_degenerate:
        logger.debug(
            "Degenerate ages current=%s retirement=%s life_expectancy=%s",
            assumptions.current_age,
            assumptions.retirement_age,
            assumptions.life_expectancy,
        )
        return _single_point(total_after_tax_today, assumptions)

    pre_growth = assumptions.growth_rate
    post_growth = assumptions.effective_post_retirement_growth_rate
    spending_today = assumptions.annual_spending_needs
    other_income_today = assumptions.annual_other_income

    projections: List[YearlyProjection] = []
    balance = total_after_tax_today

    for year in range(assumptions.life_expectancy - assumptions.current_age + 1):
        age = assumptions.current_age + year
        is_retired = age >= assumptions.retirement_age

        if age == assumptions.life_expectancy:
            projections.append(
                YearlyProjection(
                    year=year,
                    age=age,
                    balance=balance,
                    end_balance=balance,
                    is_retired=is_retired,
                )
            )
            break

        factor = inflation_factor(assumptions.inflation_rate, year)
        if is_retired:
            growth = balance * post_growth
            contribution = 0.0
            spending = spending_today * factor
            other_income = other_income_today * factor
            withdrawal = max(0.0, spending - other_income)
        else:
            growth = balance * pre_growth
            contribution = assumptions.annual_savings_contribution
            spending = spending_today * assumptions.pre_retirement_spending_rate * factor
            other_income = 0.0
            withdrawal = 0.0

        end_balance = balance + growth + contribution - withdrawal
        projections.append(
            YearlyProjection(
                year=year,
                age=age,
                balance=balance,
                growth=growth,
                contribution=contribution,
                withdrawal=withdrawal,
                spending=spending,
                other_income=other_income,
                end_balance=end_balance,
                is_retired=is_retired,
            )
        )
        balance = end_balance

    return projections


def count_years_money_lasts(
    value_at_retirement: float,
    spending_at_retirement: float,
    other_income_at_retirement: float,
    assumptions: Assumptions,
) -> int:
    """Retirement years funded before the portfolio is depleted.

    The year in which the balance runs out is counted. The count is capped at
    the retirement horizon plus fifty years.
    """
    limit = assumptions.years_in_retirement + YEARS_MONEY_LASTS_HORIZON
    growth = assumptions.effective_post_retirement_growth_rate
    balance = value_at_retirement
    spending = spending_at_retirement
    other_income = other_income_at_retirement
    years = 0

    while balance > 0 and years < limit:
        withdrawal = max(0.0, spending - other_income)
        balance = balance * (1 + growth) - withdrawal
        spending *= 1 + assumptions.inflation_rate
        other_income *= 1 + assumptions.inflation_rate
        years += 1

    return years


def calculate_required_nest_egg(annual_withdrawal: float, assumptions: Assumptions) -> float:
    """Present value at retirement of inflation-growing withdrawals."""
    growth = assumptions.effective_post_retirement_growth_rate
    inflation = assumptions.inflation_rate
    years = assumptions.years_in_retirement
    real_return = (1 + growth) / (1 + inflation) - 1

    if real_return > MIN_REAL_RETURN:
        pv_factor = (1 - ((1 + inflation) / (1 + growth)) ** years) / (growth - inflation)
        return annual_withdrawal * pv_factor
    return annual_withdrawal * years


def calculate_retirement_projections(
    assets: Iterable[Asset], assumptions: Assumptions
) -> ProjectionResult:
    """Run the full projection for an asset list.

    Args:
        assets: Materialized asset list (not modified)
        assumptions: Planning assumptions

    Returns:
        ProjectionResult with the yearly series and summary scalars
    """
    total_after_tax_today = calculate_total_after_tax_value(assets, assumptions)
    portfolio_by_year = generate_yearly_projections(total_after_tax_today, assumptions)

    years_to_retirement = assumptions.years_to_retirement
    retirement_factor = inflation_factor(assumptions.inflation_rate, years_to_retirement)
    spending_at_retirement = assumptions.annual_spending_needs * retirement_factor
    other_income_at_retirement = assumptions.annual_other_income * retirement_factor
    annual_withdrawal_needed = max(0.0, spending_at_retirement - other_income_at_retirement)

    value_at_retirement = project_value_at_retirement(total_after_tax_today, assumptions)
    required_nest_egg = calculate_required_nest_egg(annual_withdrawal_needed, assumptions)
    nest_egg_gap = value_at_retirement - required_nest_egg

    discount = inflation_factor(assumptions.growth_rate, years_to_retirement)
    if nest_egg_gap < 0 and discount > 0:
        additional_needed_today = abs(nest_egg_gap) / discount
    elif nest_egg_gap < 0:
        additional_needed_today = abs(nest_egg_gap)
    else:
        additional_needed_today = 0.0

    safe_withdrawal_amount = value_at_retirement * SAFE_WITHDRAWAL_RATE

    return ProjectionResult(
        portfolio_by_year=portfolio_by_year,
        total_after_tax_today=total_after_tax_today,
        years_to_retirement=years_to_retirement,
        years_in_retirement=assumptions.years_in_retirement,
        value_at_retirement=value_at_retirement,
        spending_at_retirement=spending_at_retirement,
        annual_other_income=assumptions.annual_other_income,
        annual_withdrawal_needed=annual_withdrawal_needed,
        surplus_or_shortfall=portfolio_by_year[-1].balance,
        years_money_lasts=count_years_money_lasts(
            value_at_retirement,
            spending_at_retirement,
            other_income_at_retirement,
            assumptions,
        ),
        required_nest_egg=required_nest_egg,
        nest_egg_gap=nest_egg_gap,
        additional_needed_today=additional_needed_today,
        safe_withdrawal_amount=safe_withdrawal_amount,
        sustainable_spending_level=safe_withdrawal_amount + other_income_at_retirement,
    )
