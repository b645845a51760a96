"""Data models and calculators for retirement planning."""

from .assumptions import (
    DEFAULT_ASSUMPTIONS,
    GROWTH_PRESETS,
    MARKET_BENCHMARKS,
    SAFE_WITHDRAWAL_RATE,
    US_STATE_TAX_RATES,
    Assumptions,
    assumptions_with_defaults,
    life_expectancy_for_age,
    state_tax_rate_for,
)
from .tax_treatment import (
    TAX_TREATMENTS,
    TaxTreatment,
    calculate_after_tax_value,
    calculate_total_after_tax_value,
    classify_tax_treatment,
)
from .assets import (
    Asset,
    AssetCategory,
    BusinessHolding,
    PersonalAssetEntry,
    PersonalFinancialStatement,
    PersonalLiabilityEntry,
    assets_from_statement,
    build_asset_list,
)
from .projection import (
    ProjectionResult,
    YearlyProjection,
    calculate_retirement_projections,
    generate_yearly_projections,
)
from .sensitivity import (
    SensitivityConfig,
    SensitivityResult,
    generate_sensitivity_table,
    run_sensitivity_analysis,
)
from .monte_carlo import (
    MonteCarloConfig,
    MonteCarloResult,
    RetirementMonteCarlo,
    run_monte_carlo,
)
from .plan_state import PlanState

__all__ = [
    "Assumptions",
    "DEFAULT_ASSUMPTIONS",
    "GROWTH_PRESETS",
    "MARKET_BENCHMARKS",
    "SAFE_WITHDRAWAL_RATE",
    "US_STATE_TAX_RATES",
    "assumptions_with_defaults",
    "life_expectancy_for_age",
    "state_tax_rate_for",
    "TaxTreatment",
    "TAX_TREATMENTS",
    "classify_tax_treatment",
    "calculate_after_tax_value",
    "calculate_total_after_tax_value",
    "Asset",
    "AssetCategory",
    "BusinessHolding",
    "PersonalAssetEntry",
    "PersonalLiabilityEntry",
    "PersonalFinancialStatement",
    "assets_from_statement",
    "build_asset_list",
    "YearlyProjection",
    "ProjectionResult",
    "generate_yearly_projections",
    "calculate_retirement_projections",
    "SensitivityConfig",
    "SensitivityResult",
    "run_sensitivity_analysis",
    "generate_sensitivity_table",
    "MonteCarloConfig",
    "MonteCarloResult",
    "RetirementMonteCarlo",
    "run_monte_carlo",
    "PlanState",
]
