"""
Tax treatment classification and after-tax valuation.

An asset's tax treatment decides how much of its nominal value survives once
the tax owed on liquidation or withdrawal is paid. This module classifies
assets into one of four treatments and converts nominal values into their
after-tax equivalents under the current rate assumptions.
"""

import re
from enum import Enum
from typing import TYPE_CHECKING, Dict, Iterable, Optional

from .assumptions import Assumptions

if TYPE_CHECKING:
    from .assets import Asset


class TaxTreatment(str, Enum):
    """How an asset's value is taxed when it is used in retirement."""

    TAX_FREE = "tax_free"
    TAX_DEFERRED = "tax_deferred"
    CAPITAL_GAINS = "capital_gains"
    ALREADY_TAXED = "already_taxed"

    @classmethod
    def coerce(cls, value: object) -> "TaxTreatment":
        """Convert a raw value to a treatment, defaulting to ALREADY_TAXED."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.ALREADY_TAXED


TAX_TREATMENTS: Dict[TaxTreatment, Dict[str, str]] = {
    TaxTreatment.TAX_FREE: {
        "label": "Tax-Free",
        "description": "Roth 401k, Roth IRA, HSA (qualified)",
    },
    TaxTreatment.TAX_DEFERRED: {
        "label": "Tax-Deferred",
        "description": "Traditional 401k, Traditional IRA, 403b",
    },
    TaxTreatment.CAPITAL_GAINS: {
        "label": "Capital Gains",
        "description": "Business sale, stocks, real estate",
    },
    TaxTreatment.ALREADY_TAXED: {
        "label": "Already Taxed",
        "description": "Cash, savings, taxable accounts (basis)",
    },
}

RETIREMENT_ACCOUNTS = "Retirement Accounts"
INVESTMENT_ACCOUNTS = "Investment Accounts"
REAL_ESTATE = "Real Estate"

# Roth and HSA accounts are withdrawn tax-free whatever category they sit in.
_TAX_FREE_NAME_PATTERN = re.compile(r"roth|hsa|health\s*savings", re.IGNORECASE)

LONG_TERM_HOLDING_MONTHS = 12
QSBS_HOLDING_MONTHS = 60


def classify_tax_treatment(account_name: Optional[str], category: Optional[str]) -> TaxTreatment:
    """Decide the tax treatment of an account from its name and category.

    The name check runs first so a Roth IRA filed under "Retirement Accounts"
    is not taxed as ordinary income.

    Args:
        account_name: Display name of the account (may be empty)
        category: Asset category

    Returns:
        The matching TaxTreatment
    """
    if account_name and _TAX_FREE_NAME_PATTERN.search(account_name):
        return TaxTreatment.TAX_FREE
    if category == RETIREMENT_ACCOUNTS:
        return TaxTreatment.TAX_DEFERRED
    if category in (INVESTMENT_ACCOUNTS, REAL_ESTATE):
        return TaxTreatment.CAPITAL_GAINS
    return TaxTreatment.ALREADY_TAXED


def describe_tax_treatment(treatment: object) -> Dict[str, str]:
    """Return the label and description shown for a treatment."""
    coerced = TaxTreatment.coerce(treatment)
    return {"value": coerced.value, **TAX_TREATMENTS[coerced]}


def _capital_gains_tax(
    gain: float,
    assumptions: Assumptions,
    holding_period_months: Optional[int],
    is_qsbs: bool,
    qsbs_exclusion_used: float,
) -> float:
    """Tax owed on a positive capital gain."""
    # Missing holding period means a long-term holding
    months = LONG_TERM_HOLDING_MONTHS + 1 if holding_period_months is None else holding_period_months

    if is_qsbs and months >= QSBS_HOLDING_MONTHS:
        remaining_exclusion = max(0.0, assumptions.qsbs_exclusion_limit - qsbs_exclusion_used)
        taxable_gain = gain - min(gain, remaining_exclusion)
        if taxable_gain <= 0:
            return 0.0
        return taxable_gain * assumptions.capital_gains_tax_rate

    if months > LONG_TERM_HOLDING_MONTHS:
        rate = assumptions.capital_gains_tax_rate
    elif assumptions.short_term_capital_gains_tax_rate is not None:
        rate = assumptions.short_term_capital_gains_tax_rate
    else:
        rate = assumptions.ordinary_income_rate
    return gain * rate


def calculate_after_tax_value(
    current_value: float,
    tax_treatment: object,
    assumptions: Assumptions,
    cost_basis: Optional[float] = 0.0,
    holding_period_months: Optional[int] = None,
    is_qsbs: bool = False,
    qsbs_exclusion_used: float = 0.0,
) -> float:
    """Compute the after-tax-today value of a single holding.

    Args:
        current_value: Nominal value (negative for liability offsets)
        tax_treatment: TaxTreatment or its string value; unknown values are
            treated as already taxed
        assumptions: Rate assumptions
        cost_basis: Cost basis for capital-gains holdings (missing means 0)
        holding_period_months: Months held; missing means long-term
        is_qsbs: Whether the gain qualifies for the Section 1202 exclusion
        qsbs_exclusion_used: Exclusion already consumed elsewhere

    Returns:
        The after-tax value. Never exceeds ``current_value`` for holdings
        with a non-negative value.
    """
    # Liability offsets are never taxed
    if current_value < 0:
        return current_value

    treatment = TaxTreatment.coerce(tax_treatment)

    if treatment == TaxTreatment.TAX_DEFERRED:
        return current_value * (1 - assumptions.ordinary_income_rate)

    if treatment == TaxTreatment.CAPITAL_GAINS:
        gain = current_value - (cost_basis or 0.0)
        if gain <= 0:
            return current_value
        tax = _capital_gains_tax(
            gain, assumptions, holding_period_months, is_qsbs, qsbs_exclusion_used
        )
        return current_value - tax

    return current_value


def asset_after_tax_value(asset: "Asset", assumptions: Assumptions) -> float:
    """After-tax value of an Asset record."""
    return calculate_after_tax_value(
        asset.current_value,
        asset.tax_treatment,
        assumptions,
        cost_basis=asset.cost_basis,
        holding_period_months=asset.holding_period_months,
        is_qsbs=asset.is_qsbs,
        qsbs_exclusion_used=asset.qsbs_exclusion_used,
    )


def calculate_total_after_tax_value(
    assets: Iterable["Asset"], assumptions: Assumptions
) -> float:
    """Sum of after-tax values over an asset list."""
    return sum((asset_after_tax_value(asset, assumptions) for asset in assets), 0.0)
