"""Wealth Plan Flask Application Factory."""

import logging
from typing import Optional

from flask import Flask

from wealthplan.config import Settings, get_global_settings
from wealthplan.storage import PlanStore, create_plan_store


def create_app(
    settings: Optional[Settings] = None, plan_store: Optional[PlanStore] = None
) -> Flask:
    """Create and configure the Flask application.

    Args:
        settings: Settings to use instead of the global settings
        plan_store: Plan store to use instead of the configured one

    Returns:
        Flask: Configured Flask application instance
    """
    app = Flask(__name__)

    # Configuration from Pydantic Settings
    settings = settings or get_global_settings()
    app.config["SECRET_KEY"] = settings.secret_key
    app.config["ENV"] = settings.flask_env
    app.config["DEBUG"] = settings.app_env == "development"
    app.config["STORAGE_TYPE"] = settings.storage_type
    app.config["MONTE_CARLO_ITERATIONS"] = settings.monte_carlo_iterations
    app.config["MONTE_CARLO_MAX_ITERATIONS"] = settings.monte_carlo_max_iterations

    logging.getLogger("wealthplan").setLevel(settings.log_level)
    app.logger.setLevel(settings.log_level)

    app.extensions["plan_store"] = plan_store or create_plan_store(settings)

    # Register blueprints
    from wealthplan.blueprints.health import health_bp
    from wealthplan.blueprints.retirement import retirement_bp

    app.register_blueprint(health_bp)
    app.register_blueprint(retirement_bp)

    return app
