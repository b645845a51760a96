"""Persisted planning state layered over a personal financial statement."""

from typing import Any, Dict, List, Literal

from pydantic import BaseModel, Field, field_validator

from .assets import Asset, build_asset_list
from .assumptions import Assumptions, fill_assumption_defaults


class PlanState(BaseModel):
    """Scenario choices a user keeps between sessions."""

    assumptions: Assumptions = Field(default_factory=Assumptions)
    excluded_ids: List[str] = Field(
        default_factory=list, description="Base asset ids left out of the plan"
    )
    overrides: Dict[str, Dict[str, Any]] = Field(
        default_factory=dict, description="Partial asset patches keyed by asset id"
    )
    manual_assets: List[Asset] = Field(
        default_factory=list, description="Modeling assets added by hand"
    )
    mode: Literal["easy", "pro"] = Field(default="easy", description="Calculator mode")

    @field_validator("assumptions", mode="before")
    @classmethod
    def default_assumptions(cls, v: Any) -> Any:
        if v is None or isinstance(v, dict):
            return fill_assumption_defaults(v)
        return v

    def apply(self, base_assets: List[Asset]) -> List[Asset]:
        """Build the final asset list from the base assets."""
        return build_asset_list(
            base_assets, self.excluded_ids, self.overrides, self.manual_assets
        )
