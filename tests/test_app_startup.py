"""Tests for Flask application startup with configuration."""

import logging
import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from wealthplan import create_app
from wealthplan.config import Settings, reset_global_settings
from wealthplan.storage import InMemoryPlanStore, LocalPlanStore


class TestAppStartup:
    """Test cases for Flask application startup."""

    def setup_method(self):
        reset_global_settings()

    def teardown_method(self):
        reset_global_settings()

    def test_app_creation_with_valid_config(self):
        """Test that app creates successfully with valid configuration."""
        with patch.dict(
            os.environ,
            {"SECRET_KEY": "valid-secret-key-123", "STORAGE_TYPE": "memory"},
            clear=True,
        ):
            app = create_app()

            assert app is not None
            assert app.config["SECRET_KEY"] == "valid-secret-key-123"
            assert app.config["STORAGE_TYPE"] == "memory"
            assert isinstance(app.extensions["plan_store"], InMemoryPlanStore)

    def test_app_creation_fails_without_secret_key(self):
        """Test that settings fail validation when SECRET_KEY is missing."""
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ValidationError) as exc_info:
                Settings(_env_file=None)

            assert "SECRET_KEY" in str(exc_info.value)

    def test_app_creation_fails_with_placeholder_secret_key(self):
        """Test that app creation fails with placeholder SECRET_KEY."""
        with patch.dict(
            os.environ,
            {"SECRET_KEY": "your-secret-key-here-change-in-production"},
            clear=True,
        ):
            with pytest.raises(Exception) as exc_info:
                create_app()

            assert "SECRET_KEY must be set to a secure value" in str(exc_info.value)

    def test_app_uses_local_store_by_default(self, tmp_path):
        """Test that the local plan store is created under STORAGE_BASE_PATH."""
        base_path = tmp_path / "plans"
        with patch.dict(
            os.environ,
            {"SECRET_KEY": "valid-secret-key-123", "STORAGE_BASE_PATH": str(base_path)},
            clear=True,
        ):
            app = create_app()

            store = app.extensions["plan_store"]
            assert isinstance(store, LocalPlanStore)
            assert base_path.exists()

    def test_explicit_settings_and_store(self):
        """Test that explicit settings and store override the globals."""
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(
                SECRET_KEY="explicit-secret", APP_ENV="production", LOG_LEVEL="ERROR"
            )
            store = InMemoryPlanStore()
            app = create_app(settings=settings, plan_store=store)

            assert app.config["SECRET_KEY"] == "explicit-secret"
            assert app.config["DEBUG"] is False
            assert app.extensions["plan_store"] is store
            assert logging.getLogger("wealthplan").level == logging.ERROR

    def test_app_debug_mode_based_on_environment(self):
        """Test that debug mode is set based on APP_ENV."""
        for app_env, expected in [
            ("development", True),
            ("production", False),
            ("testing", False),
        ]:
            reset_global_settings()
            with patch.dict(
                os.environ,
                {
                    "SECRET_KEY": "valid-secret-key-123",
                    "APP_ENV": app_env,
                    "STORAGE_TYPE": "memory",
                },
                clear=True,
            ):
                app = create_app()
                assert app.config["DEBUG"] is expected

    def test_blueprints_registered(self, app):
        """Test that health and retirement blueprints are registered."""
        assert "health" in app.blueprints
        assert "retirement" in app.blueprints
