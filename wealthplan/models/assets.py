"""
Asset records and asset snapshot assembly.

Assets are derived from a personal financial statement (business valuations
plus manually entered personal assets and liabilities) and may then be
excluded, overridden or supplemented with modeling assets before they are
handed to the projection engine.
"""

from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .tax_treatment import TaxTreatment, classify_tax_treatment

LIABILITIES_OFFSET_ID = "liabilities-offset"
REAL_ESTATE_COST_BASIS_RATIO = 0.5


class AssetCategory(str, Enum):
    """Categories used on the personal financial statement."""

    BUSINESS_INTEREST = "Business Interest"
    REAL_ESTATE = "Real Estate"
    VEHICLES = "Vehicles"
    RETIREMENT_ACCOUNTS = "Retirement Accounts"
    INVESTMENT_ACCOUNTS = "Investment Accounts"
    CASH_AND_SAVINGS = "Cash & Savings"
    OTHER_ASSETS = "Other Assets"
    LIABILITIES = "Liabilities"
    MODELING_ADJUSTMENT = "Modeling Adjustment"


class Asset(BaseModel):
    """One holding contributing to net worth."""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    id: str = Field(..., min_length=1, description="Identifier stable across recalculation")
    name: str = Field(default="", description="Display label")
    category: str = Field(
        default=AssetCategory.OTHER_ASSETS.value, description="Statement category"
    )
    current_value: float = Field(..., description="Signed monetary amount")
    tax_treatment: TaxTreatment = Field(
        default=TaxTreatment.ALREADY_TAXED, description="Tax treatment"
    )
    cost_basis: Optional[float] = Field(
        default=None, ge=0, description="Cost basis for capital-gains holdings"
    )
    holding_period_months: Optional[int] = Field(
        default=None, ge=0, description="Months held (over 12 is long-term)"
    )
    is_qsbs: bool = Field(default=False, description="Qualified Small Business Stock")
    qsbs_exclusion_used: float = Field(
        default=0, ge=0, description="QSBS exclusion already used"
    )

    @field_validator("tax_treatment", mode="before")
    @classmethod
    def coerce_tax_treatment(cls, v: Any) -> TaxTreatment:
        """Unknown treatments fall back to already taxed."""
        return TaxTreatment.coerce(v)

    @field_validator("category", mode="before")
    @classmethod
    def coerce_category(cls, v: Any) -> str:
        if isinstance(v, AssetCategory):
            return v.value
        return v

    @property
    def display_name(self) -> str:
        return self.name or self.category


class BusinessHolding(BaseModel):
    """An ownership stake in a valued company."""

    id: str = Field(..., min_length=1)
    name: str = Field(default="")
    market_value: float = Field(default=0, ge=0, description="Current company valuation")
    ownership_percent: float = Field(
        default=100, ge=0, le=100, description="Percent of the company owned"
    )


class PersonalAssetEntry(BaseModel):
    """A manually entered personal asset."""

    id: str = Field(..., min_length=1)
    category: str = Field(default=AssetCategory.OTHER_ASSETS.value)
    description: str = Field(default="")
    value: float = Field(default=0)


class PersonalLiabilityEntry(BaseModel):
    """A manually entered personal liability."""

    id: Optional[str] = None
    description: str = Field(default="")
    amount: float = Field(default=0)


class PersonalFinancialStatement(BaseModel):
    """Source data for building an asset snapshot."""

    businesses: List[BusinessHolding] = Field(default_factory=list)
    personal_assets: List[PersonalAssetEntry] = Field(default_factory=list)
    personal_liabilities: List[PersonalLiabilityEntry] = Field(default_factory=list)


def default_cost_basis(category: str, value: float) -> float:
    """Estimated cost basis when none was entered.

    Real estate is assumed to carry half its value as unrealized gain; every
    other holding is treated as all gain.
    """
    if category == AssetCategory.REAL_ESTATE.value:
        return value * REAL_ESTATE_COST_BASIS_RATIO
    return 0.0


def assets_from_statement(statement: PersonalFinancialStatement) -> List[Asset]:
    """Build the base asset list from a personal financial statement.

    Args:
        statement: Business holdings, personal assets and liabilities

    Returns:
        Business assets, then personal assets, then a single liabilities
        offset when there are outstanding liabilities
    """
    assets: List[Asset] = []

    for business in statement.businesses:
        assets.append(
            Asset(
                id=f"business-{business.id}",
                name=business.name,
                category=AssetCategory.BUSINESS_INTEREST.value,
                current_value=business.market_value * (business.ownership_percent / 100),
                tax_treatment=TaxTreatment.CAPITAL_GAINS,
                cost_basis=0.0,
            )
        )

    for entry in statement.personal_assets:
        name = entry.description or entry.category
        assets.append(
            Asset(
                id=entry.id,
                name=name,
                category=entry.category,
                current_value=entry.value,
                tax_treatment=classify_tax_treatment(name, entry.category),
                cost_basis=max(0.0, default_cost_basis(entry.category, entry.value)),
            )
        )

    total_liabilities = sum(liability.amount for liability in statement.personal_liabilities)
    if total_liabilities > 0:
        assets.append(
            Asset(
                id=LIABILITIES_OFFSET_ID,
                name="Less: Outstanding Liabilities",
                category=AssetCategory.LIABILITIES.value,
                current_value=-total_liabilities,
                tax_treatment=TaxTreatment.ALREADY_TAXED,
            )
        )

    return assets


def apply_override(asset: Asset, patch: Mapping[str, Any]) -> Asset:
    """Return a re-validated copy of ``asset`` with ``patch`` applied.

    The asset id cannot be changed by an override.
    """
    data = asset.model_dump()
    data.update({key: value for key, value in patch.items() if key != "id"})
    return Asset.model_validate(data)


def build_asset_list(
    base_assets: Iterable[Asset],
    excluded_ids: Optional[Iterable[str]] = None,
    overrides: Optional[Mapping[str, Mapping[str, Any]]] = None,
    manual_assets: Optional[Iterable[Asset]] = None,
) -> List[Asset]:
    """Layer scenario modeling on top of the base asset list.

    Exclusions are applied first, then per-id overrides to the remaining base
    assets, then manually added assets are appended. The inputs are left
    untouched.

    Args:
        base_assets: Assets derived from the financial statement
        excluded_ids: Ids of base assets to leave out
        overrides: Partial field patches keyed by asset id
        manual_assets: Modeling assets appended at the end

    Returns:
        The final ordered asset list
    """
    excluded = set(excluded_ids or ())
    overrides = overrides or {}

    assets = [asset for asset in base_assets if asset.id not in excluded]
    assets = [
        apply_override(asset, overrides[asset.id]) if asset.id in overrides else asset
        for asset in assets
    ]
    assets.extend(manual_assets or ())
    return assets
