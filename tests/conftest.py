"""
Pytest configuration and shared fixtures for the wealth plan tests.
"""

import os
from unittest.mock import patch

import pytest

from wealthplan import create_app
from wealthplan.config import reset_global_settings
from wealthplan.models.assets import Asset
from wealthplan.models.assumptions import Assumptions
from wealthplan.models.tax_treatment import TaxTreatment

TEST_ENV = {
    "SECRET_KEY": "test-secret-key-123",
    "APP_ENV": "testing",
    "STORAGE_TYPE": "memory",
}


@pytest.fixture
def app():
    """Create an app backed by an in-memory plan store."""
    reset_global_settings()
    with patch.dict(os.environ, TEST_ENV, clear=True):
        app = create_app()
        app.config["TESTING"] = True
        yield app
    reset_global_settings()


@pytest.fixture
def client(app):
    """Create a test client."""
    return app.test_client()


@pytest.fixture
def flat_assumptions():
    """Assumptions with no growth, inflation or other income."""
    return Assumptions(
        current_age=60,
        retirement_age=65,
        life_expectancy=90,
        annual_spending_needs=100000,
        social_security_monthly=0,
        other_income_monthly=0,
        inflation_rate=0.0,
        growth_rate=0.0,
        federal_tax_rate=0.30,
        state_tax_rate=0.0,
        local_tax_rate=0.0,
    )


@pytest.fixture
def sample_assets():
    """A small mixed-treatment asset list."""
    return [
        Asset(
            id="401k",
            name="Traditional 401k",
            category="Retirement Accounts",
            current_value=1000000,
            tax_treatment=TaxTreatment.TAX_DEFERRED,
        ),
        Asset(
            id="roth",
            name="Roth IRA",
            category="Retirement Accounts",
            current_value=250000,
            tax_treatment=TaxTreatment.TAX_FREE,
        ),
        Asset(
            id="brokerage",
            name="Brokerage",
            category="Investment Accounts",
            current_value=500000,
            tax_treatment=TaxTreatment.CAPITAL_GAINS,
            cost_basis=0,
        ),
        Asset(
            id="cash",
            name="Checking",
            category="Cash & Savings",
            current_value=50000,
            tax_treatment=TaxTreatment.ALREADY_TAXED,
        ),
    ]
