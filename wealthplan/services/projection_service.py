"""
Projection service for running retirement calculations from request payloads.

This service turns JSON payloads into validated asset snapshots and
assumptions, runs the calculators and shapes JSON-ready results. It also
reads and writes saved plan state through the plan store.
"""

import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from wealthplan.models.assets import (
    Asset,
    PersonalFinancialStatement,
    assets_from_statement,
    build_asset_list,
)
from wealthplan.models.assumptions import (
    DEFAULT_ASSUMPTIONS,
    GROWTH_PRESETS,
    MARKET_BENCHMARKS,
    US_STATE_TAX_RATES,
    Assumptions,
    fill_assumption_defaults,
)
from wealthplan.models.formatting import format_currency, format_percent
from wealthplan.models.monte_carlo import MonteCarloConfig, run_monte_carlo
from wealthplan.models.plan_state import PlanState
from wealthplan.models.projection import ProjectionResult, calculate_retirement_projections
from wealthplan.models.sensitivity import (
    SensitivityConfig,
    generate_sensitivity_table,
    run_sensitivity_analysis,
)
from wealthplan.models.tax_treatment import (
    TAX_TREATMENTS,
    asset_after_tax_value,
    describe_tax_treatment,
)
from wealthplan.storage.base import PlanStore

logger = logging.getLogger(__name__)

DEFAULT_SPENDING_MULTIPLIERS = [0.8, 0.9, 1.0, 1.1, 1.2]


class ProjectionRequest(BaseModel):
    """Asset snapshot and assumptions for one calculation.

    Either ``assets`` (already materialized) or ``statement`` supplies the
    base assets; exclusions, overrides and manual assets are then layered on.
    """

    assets: Optional[List[Asset]] = None
    statement: Optional[PersonalFinancialStatement] = None
    excluded_ids: List[str] = Field(default_factory=list)
    overrides: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
    manual_assets: List[Asset] = Field(default_factory=list)
    assumptions: Assumptions = Field(default_factory=Assumptions)

    @field_validator("assumptions", mode="before")
    @classmethod
    def default_assumptions(cls, v: Any) -> Any:
        """Fill state tax and life expectancy defaults for partial input."""
        if v is None or isinstance(v, dict):
            return fill_assumption_defaults(v)
        return v

    def resolve_assets(self) -> List[Asset]:
        """Final asset list after exclusions, overrides and manual assets."""
        if self.assets is not None:
            base_assets = list(self.assets)
        elif self.statement is not None:
            base_assets = assets_from_statement(self.statement)
        else:
            base_assets = []
        return build_asset_list(
            base_assets, self.excluded_ids, self.overrides, self.manual_assets
        )


class ProjectionService:
    """Service for running retirement projections and managing saved plans."""

    def __init__(self, plan_store: Optional[PlanStore] = None) -> None:
        """Initialize the projection service.

        Args:
            plan_store: Store for saved plan state (required for plan operations)
        """
        self.plan_store = plan_store
        self.logger = logging.getLogger(__name__)

    def run_projection(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Run the deterministic projection.

        Args:
            payload: Request body (see ProjectionRequest)

        Returns:
            Dictionary with the assets used, summary, yearly series and
            formatted headline numbers

        Raises:
            pydantic.ValidationError: If the payload is malformed
        """
        request = ProjectionRequest.model_validate(payload)
        assets = request.resolve_assets()
        result = calculate_retirement_projections(assets, request.assumptions)

        self.logger.info(
            f"Projection for {len(assets)} assets: "
            f"surplus_or_shortfall={result.surplus_or_shortfall:.2f} "
            f"on_track={result.is_on_track}"
        )

        return {
            "assets": [self._asset_row(asset, request.assumptions) for asset in assets],
            "assumptions": request.assumptions.model_dump(),
            "summary": result.summary(),
            "portfolio_by_year": [row.model_dump() for row in result.portfolio_by_year],
            "display": self._display(result),
        }

    def run_sensitivity(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Run the sensitivity grid.

        The optional ``sensitivity`` key of the payload overrides the deltas.
        """
        request = ProjectionRequest.model_validate(
            {k: v for k, v in payload.items() if k != "sensitivity"}
        )
        config = SensitivityConfig.model_validate(payload.get("sensitivity") or {})
        assets = request.resolve_assets()
        result = run_sensitivity_analysis(assets, request.assumptions, config)

        self.logger.info(f"Sensitivity grid with {len(result.cells)} cells")

        return {
            "base": {
                "surplus_or_shortfall": result.base_surplus_or_shortfall,
                "is_on_track": result.base_is_on_track,
            },
            "cells": [cell.model_dump() for cell in result.cells],
        }

    def run_sensitivity_table(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Run the growth rate versus spending table.

        ``growth_rates`` defaults to the growth presets and
        ``spending_levels`` to 80%-120% of the base spending.
        """
        table_keys = {"growth_rates", "spending_levels"}
        request = ProjectionRequest.model_validate(
            {k: v for k, v in payload.items() if k not in table_keys}
        )
        assumptions = request.assumptions

        growth_rates = payload.get("growth_rates") or [
            preset["value"] for preset in GROWTH_PRESETS
        ]
        spending_levels = payload.get("spending_levels") or [
            assumptions.annual_spending_needs * m for m in DEFAULT_SPENDING_MULTIPLIERS
        ]

        rows = generate_sensitivity_table(
            request.resolve_assets(),
            assumptions,
            [float(g) for g in growth_rates],
            [float(s) for s in spending_levels],
        )
        self.logger.info(f"Sensitivity table with {len(rows)} rows")
        return {"rows": [row.model_dump() for row in rows]}

    def run_monte_carlo(
        self,
        payload: Dict[str, Any],
        default_iterations: int = 1000,
        max_iterations: int = 10000,
    ) -> Dict[str, Any]:
        """Run a Monte Carlo simulation.

        The optional ``monte_carlo`` key configures the run; iterations above
        ``max_iterations`` are capped.
        """
        request = ProjectionRequest.model_validate(
            {k: v for k, v in payload.items() if k != "monte_carlo"}
        )
        options = dict(payload.get("monte_carlo") or {})
        options.setdefault("iterations", default_iterations)
        config = MonteCarloConfig.model_validate(options)

        if config.iterations > max_iterations:
            self.logger.warning(
                f"Capping Monte Carlo iterations from {config.iterations} to {max_iterations}"
            )
            config = config.model_copy(update={"iterations": max_iterations})

        result = run_monte_carlo(request.resolve_assets(), request.assumptions, config)
        self.logger.info(
            f"Monte Carlo with {config.iterations} paths: success_rate={result.success_rate:.1f}%"
        )

        data = result.model_dump()
        data["iterations"] = config.iterations
        data["display"] = {"success_rate": format_percent(result.success_rate / 100)}
        return data

    def get_defaults(self) -> Dict[str, Any]:
        """Defaults and reference tables for building assumptions."""
        return {
            "assumptions": DEFAULT_ASSUMPTIONS.model_dump(),
            "market_benchmarks": MARKET_BENCHMARKS,
            "growth_presets": GROWTH_PRESETS,
            "tax_treatments": [describe_tax_treatment(t) for t in TAX_TREATMENTS],
            "state_tax_rates": US_STATE_TAX_RATES,
        }

    def save_plan(self, plan_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Validate and persist plan state."""
        state = PlanState.model_validate(payload)
        data = state.model_dump(mode="json")
        self._require_store().save(self._plan_key(plan_id), data)
        self.logger.info(f"Saved plan {plan_id}")
        return data

    def load_plan(self, plan_id: str) -> Dict[str, Any]:
        """Load persisted plan state.

        Raises:
            PlanNotFoundError: If the plan does not exist
        """
        data = self._require_store().load(self._plan_key(plan_id))
        return PlanState.model_validate(data).model_dump(mode="json")

    def delete_plan(self, plan_id: str) -> bool:
        deleted = self._require_store().delete(self._plan_key(plan_id))
        if deleted:
            self.logger.info(f"Deleted plan {plan_id}")
        return deleted

    def _require_store(self) -> PlanStore:
        if self.plan_store is None:
            raise RuntimeError("ProjectionService was created without a plan store")
        return self.plan_store

    @staticmethod
    def _plan_key(plan_id: str) -> str:
        return f"plans/{plan_id}"

    @staticmethod
    def _asset_row(asset: Asset, assumptions: Assumptions) -> Dict[str, Any]:
        row = asset.model_dump(mode="json")
        row["display_name"] = asset.display_name
        row["after_tax_value"] = asset_after_tax_value(asset, assumptions)
        return row

    @staticmethod
    def _display(result: ProjectionResult) -> Dict[str, str]:
        return {
            "total_after_tax_today": format_currency(result.total_after_tax_today),
            "value_at_retirement": format_currency(result.value_at_retirement),
            "spending_at_retirement": format_currency(result.spending_at_retirement),
            "surplus_or_shortfall": format_currency(result.surplus_or_shortfall),
            "required_nest_egg": format_currency(result.required_nest_egg),
            "sustainable_spending_level": format_currency(result.sustainable_spending_level),
        }
