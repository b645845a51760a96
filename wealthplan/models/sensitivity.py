"""
Sensitivity and scenario analysis for retirement projections.

Each cell of a sensitivity grid is an independent projection run with a
single assumption moved away from its base value. Cells share no state, so
the zero-delta cell always reproduces the base projection exactly.
"""

from typing import Dict, Iterable, List, Optional, Tuple

from pydantic import BaseModel, Field

from .assets import Asset
from .assumptions import MAX_AGE, Assumptions
from .projection import ProjectionResult, calculate_retirement_projections

# field -> how a delta is applied
PERTURBATION_MODES: Dict[str, str] = {
    "growth_rate": "absolute",
    "post_retirement_growth_rate": "absolute",
    "inflation_rate": "absolute",
    "retirement_age": "years",
    "annual_spending_needs": "relative",
}


class SensitivityConfig(BaseModel):
    """Deltas applied to each perturbed assumption."""

    growth_rate_deltas: List[float] = Field(
        default=[-0.02, -0.01, 0.0, 0.01, 0.02],
        description="Absolute changes to the growth rate",
    )
    retirement_age_deltas: List[int] = Field(
        default=[-5, -2, -1, 0, 1, 2, 5],
        description="Changes to the retirement age in years",
    )
    spending_deltas: List[float] = Field(
        default=[-0.10, -0.05, 0.0, 0.05, 0.10],
        description="Relative changes to annual spending",
    )
    inflation_rate_deltas: List[float] = Field(
        default_factory=list, description="Absolute changes to the inflation rate"
    )

    def perturbations(self) -> List[Tuple[str, float]]:
        """All (field, delta) pairs in grid order."""
        pairs: List[Tuple[str, float]] = []
        pairs.extend(("growth_rate", d) for d in self.growth_rate_deltas)
        pairs.extend(("retirement_age", d) for d in self.retirement_age_deltas)
        pairs.extend(("annual_spending_needs", d) for d in self.spending_deltas)
        pairs.extend(("inflation_rate", d) for d in self.inflation_rate_deltas)
        return pairs


class SensitivityCell(BaseModel):
    """Outcome of one perturbed projection."""

    assumption: str
    delta: float
    value: float = Field(..., description="Perturbed value of the assumption")
    surplus_or_shortfall: float
    is_on_track: bool
    years_money_lasts: int


class SensitivityResult(BaseModel):
    """Base case plus every perturbed cell."""

    base_surplus_or_shortfall: float
    base_is_on_track: bool
    cells: List[SensitivityCell] = Field(default_factory=list)

    def grid(self) -> Dict[str, List[SensitivityCell]]:
        """Cells grouped by perturbed assumption."""
        grouped: Dict[str, List[SensitivityCell]] = {}
        for cell in self.cells:
            grouped.setdefault(cell.assumption, []).append(cell)
        return grouped


class SensitivityTableRow(BaseModel):
    """One growth rate / spending level combination."""

    growth: float
    spending: float
    years_lasts: int
    success_rate: float = Field(..., description="Percent of retirement years funded")


def _clamp(value: float, lower: float, upper: float) -> float:
    return min(max(value, lower), upper)


def perturb_assumptions(assumptions: Assumptions, field: str, delta: float) -> Assumptions:
    """Return a copy of ``assumptions`` with one field moved by ``delta``.

    Rates move by an absolute amount and stay within [0, 1], spending moves by
    a fraction of its base value and never goes negative, and the retirement
    age moves by whole years within the supported age range.

    Raises:
        ValueError: If ``field`` cannot be perturbed
    """
    mode = PERTURBATION_MODES.get(field)
    if mode is None:
        raise ValueError(f"Unsupported sensitivity field: {field}")

    if mode == "relative":
        value = max(0.0, getattr(assumptions, field) * (1 + delta))
    elif mode == "years":
        value = int(_clamp(getattr(assumptions, field) + round(delta), 0, MAX_AGE))
    else:
        if field == "post_retirement_growth_rate":
            base = assumptions.effective_post_retirement_growth_rate
        else:
            base = getattr(assumptions, field)
        value = _clamp(base + delta, 0.0, 1.0)

    return assumptions.model_copy(update={field: value})


def _perturbed_value(assumptions: Assumptions, field: str) -> float:
    if field == "post_retirement_growth_rate":
        return assumptions.effective_post_retirement_growth_rate
    return float(getattr(assumptions, field))


def run_sensitivity_analysis(
    assets: Iterable[Asset],
    assumptions: Assumptions,
    config: Optional[SensitivityConfig] = None,
) -> SensitivityResult:
    """Re-run the projection once per perturbation.

    Args:
        assets: Asset list shared by every run (not modified)
        assumptions: Base assumptions
        config: Deltas to apply (defaults to SensitivityConfig())

    Returns:
        SensitivityResult with the base outcome and one cell per delta
    """
    config = config or SensitivityConfig()
    assets = tuple(assets)

    base: ProjectionResult = calculate_retirement_projections(assets, assumptions)
    cells: List[SensitivityCell] = []

    for field, delta in config.perturbations():
        perturbed = perturb_assumptions(assumptions, field, delta)
        result = calculate_retirement_projections(assets, perturbed)
        cells.append(
            SensitivityCell(
                assumption=field,
                delta=delta,
                value=_perturbed_value(perturbed, field),
                surplus_or_shortfall=result.surplus_or_shortfall,
                is_on_track=result.is_on_track,
                years_money_lasts=result.years_money_lasts,
            )
        )

    return SensitivityResult(
        base_surplus_or_shortfall=base.surplus_or_shortfall,
        base_is_on_track=base.is_on_track,
        cells=cells,
    )


def generate_sensitivity_table(
    assets: Iterable[Asset],
    assumptions: Assumptions,
    growth_rates: Iterable[float],
    spending_levels: Iterable[float],
) -> List[SensitivityTableRow]:
    """Growth rate versus spending table.

    Each growth rate applies to the whole horizon, before and after
    retirement. Growth rates are clamped into [0, 1] and spending levels to
    at least 0. ``success_rate`` is the percent of retirement years the
    money lasts, capped at 100.
    """
    assets = tuple(assets)
    spending_levels = list(spending_levels)
    years_in_retirement = assumptions.years_in_retirement
    rows: List[SensitivityTableRow] = []

    for growth in growth_rates:
        growth = _clamp(growth, 0.0, 1.0)
        for spending in spending_levels:
            spending = max(0.0, spending)
            modified = assumptions.model_copy(
                update={
                    "growth_rate": growth,
                    "post_retirement_growth_rate": growth,
                    "annual_spending_needs": spending,
                }
            )
            years_lasts = calculate_retirement_projections(assets, modified).years_money_lasts

            if years_lasts >= years_in_retirement:
                success_rate = 100.0
            else:
                success_rate = years_lasts / years_in_retirement * 100

            rows.append(
                SensitivityTableRow(
                    growth=growth,
                    spending=spending,
                    years_lasts=years_lasts,
                    success_rate=success_rate,
                )
            )

    return rows
