"""
Monte Carlo simulation for retirement planning.

This module estimates the probability that a portfolio funds retirement by
sampling annual returns and inflation from normal distributions. All paths
are simulated together with numpy arrays of shape (iterations,).
"""

import logging
from typing import Iterable, List, Optional

import numpy as np
from numpy.typing import NDArray
from pydantic import BaseModel, Field

from .assets import Asset
from .assumptions import Assumptions
from .tax_treatment import calculate_total_after_tax_value

logger = logging.getLogger(__name__)

RETURN_BOUNDS = (-0.4, 0.5)
INFLATION_BOUNDS = (0.0, 0.15)
HISTOGRAM_BINS = 25


class MonteCarloConfig(BaseModel):
    """Configuration for a Monte Carlo run."""

    return_std_dev: float = Field(
        default=0.15, ge=0, le=1, description="Standard deviation of annual returns"
    )
    inflation_std_dev: float = Field(
        default=0.01, ge=0, le=1, description="Standard deviation of annual inflation"
    )
    iterations: int = Field(
        default=1000, ge=1, le=100000, description="Number of simulated paths"
    )
    seed: Optional[int] = Field(
        default=None, ge=0, description="Random seed for reproducibility"
    )


class HistogramBin(BaseModel):
    """One bin of the ending balance histogram."""

    min: float
    max: float
    count: int
    percentage: float


class YearlySuccessRate(BaseModel):
    """Share of paths still funded after a number of retirement years."""

    year: int
    success_rate: float


class MonteCarloResult(BaseModel):
    """Summary statistics of a Monte Carlo run."""

    model_config = {"arbitrary_types_allowed": True}

    success_rate: float = Field(..., description="Percent of paths that never ran out")
    median_ending_balance: float
    percentile_10_ending_balance: float
    percentile_90_ending_balance: float
    median_years_lasted: float
    avg_ending_balance: float
    histogram: List[HistogramBin] = Field(default_factory=list)
    yearly_success_rates: List[YearlySuccessRate] = Field(default_factory=list)

    # Per-path detail (iterations,)
    ending_balances: NDArray[np.float64] = Field(..., exclude=True)
    years_lasted: NDArray[np.int64] = Field(..., exclude=True)
    ran_out_of_money: NDArray[np.bool_] = Field(..., exclude=True)


def generate_histogram(
    values: NDArray[np.float64], bin_count: int = HISTOGRAM_BINS
) -> List[HistogramBin]:
    """Histogram of values with extreme outliers trimmed.

    Values outside [p5 * 0.5, p95 * 1.5] are dropped before binning. Returns
    an empty list when there is nothing to bin or all values are equal.
    """
    if values.size == 0:
        return []

    p5, p95 = np.percentile(values, [5, 95])
    filtered = values[(values >= p5 * 0.5) & (values <= p95 * 1.5)]
    if filtered.size == 0:
        return []

    low, high = float(filtered.min()), float(filtered.max())
    if high == low:
        return []

    counts, edges = np.histogram(filtered, bins=bin_count, range=(low, high))
    return [
        HistogramBin(
            min=float(edges[i]),
            max=float(edges[i + 1]),
            count=int(counts[i]),
            percentage=float(counts[i]) / filtered.size * 100,
        )
        for i in range(bin_count)
    ]


class RetirementMonteCarlo:
    """Simulates many randomized retirement paths for one asset snapshot."""

    def __init__(self, config: Optional[MonteCarloConfig] = None):
        """Initialize the simulator.

        Args:
            config: Monte Carlo configuration
        """
        self.config = config or MonteCarloConfig()
        self.rng = np.random.default_rng(self.config.seed)

    def _sample(self, mean: float, std_dev: float, bounds) -> NDArray[np.float64]:
        draws = self.rng.normal(mean, std_dev, self.config.iterations)
        return np.clip(draws, bounds[0], bounds[1])

    def simulate(self, starting_balance: float, assumptions: Assumptions) -> MonteCarloResult:
        """
        Simulate accumulation and retirement for every path.

        Spending and other income start in today's dollars and inflate with
        each path's sampled inflation. In retirement, growth is applied before
        the withdrawal; a path fails the first year its balance reaches zero.

        Args:
            starting_balance: After-tax portfolio value today
            assumptions: Planning assumptions

        Returns:
            MonteCarloResult with summary statistics
        """
        n = self.config.iterations
        years_to_retirement = assumptions.years_to_retirement
        years_in_retirement = assumptions.years_in_retirement
        return_sd = self.config.return_std_dev
        inflation_sd = self.config.inflation_std_dev

        balances = np.full(n, float(starting_balance))
        spending = np.full(n, float(assumptions.annual_spending_needs))
        other_income = np.full(n, float(assumptions.annual_other_income))

        # Accumulation phase
        for _ in range(years_to_retirement):
            returns = self._sample(assumptions.growth_rate, return_sd, RETURN_BOUNDS)
            inflation = self._sample(assumptions.inflation_rate, inflation_sd, INFLATION_BOUNDS)
            balances = balances * (1 + returns) + assumptions.annual_savings_contribution
            spending *= 1 + inflation
            other_income *= 1 + inflation

        # Retirement phase
        funded = np.ones(n, dtype=bool)
        years_lasted = np.full(n, years_to_retirement + years_in_retirement, dtype=np.int64)
        post_growth = assumptions.effective_post_retirement_growth_rate

        for year in range(years_in_retirement):
            returns = self._sample(post_growth, return_sd, RETURN_BOUNDS)
            inflation = self._sample(assumptions.inflation_rate, inflation_sd, INFLATION_BOUNDS)

            withdrawal = np.maximum(0.0, spending - other_income)
            balances = np.where(funded, balances * (1 + returns) - withdrawal, balances)
            spending *= 1 + inflation
            other_income *= 1 + inflation

            depleted = funded & (balances <= 0)
            years_lasted[depleted] = years_to_retirement + year + 1
            balances[depleted] = 0.0
            funded &= ~depleted

        return self._summarize(balances, years_lasted, ~funded, years_to_retirement, years_in_retirement)

    def _summarize(
        self,
        ending_balances: NDArray[np.float64],
        years_lasted: NDArray[np.int64],
        ran_out_of_money: NDArray[np.bool_],
        years_to_retirement: int,
        years_in_retirement: int,
    ) -> MonteCarloResult:
        n = self.config.iterations
        retirement_years_lasted = years_lasted - years_to_retirement
        yearly_success_rates = [
            YearlySuccessRate(
                year=year,
                success_rate=float(np.sum(retirement_years_lasted >= year)) / n * 100,
            )
            for year in range(years_in_retirement + 1)
        ]

        p10, p50, p90 = np.percentile(ending_balances, [10, 50, 90])

        return MonteCarloResult(
            success_rate=float(np.mean(~ran_out_of_money)) * 100,
            median_ending_balance=float(p50),
            percentile_10_ending_balance=float(p10),
            percentile_90_ending_balance=float(p90),
            median_years_lasted=float(np.percentile(years_lasted, 50)),
            avg_ending_balance=float(np.mean(ending_balances)),
            histogram=generate_histogram(ending_balances[ending_balances > 0]),
            yearly_success_rates=yearly_success_rates,
            ending_balances=ending_balances,
            years_lasted=years_lasted,
            ran_out_of_money=ran_out_of_money,
        )


def run_monte_carlo(
    assets: Iterable[Asset],
    assumptions: Assumptions,
    config: Optional[MonteCarloConfig] = None,
) -> MonteCarloResult:
    """Run a Monte Carlo simulation starting from the after-tax asset total."""
    starting_balance = calculate_total_after_tax_value(assets, assumptions)
    simulator = RetirementMonteCarlo(config)
    logger.debug(
        "Running %s Monte Carlo paths from %.2f",
        simulator.config.iterations,
        starting_balance,
    )
    return simulator.simulate(starting_balance, assumptions)
