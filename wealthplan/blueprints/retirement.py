"""
Retirement blueprint for projection, sensitivity and Monte Carlo endpoints.

This module provides API endpoints for running retirement calculations on a
posted asset snapshot, and for saving and loading plan state.
"""

import json
from typing import Any

from flask import Blueprint, current_app, jsonify, request
from pydantic import ValidationError

from wealthplan.services.projection_service import ProjectionService
from wealthplan.storage import PlanNotFoundError

retirement_bp = Blueprint("retirement", __name__, url_prefix="/api/retirement")


def _service() -> ProjectionService:
    return ProjectionService(plan_store=current_app.extensions["plan_store"])


def _validation_error(e: ValidationError) -> Any:
    details = json.loads(e.json(include_url=False))
    return jsonify({"error": "Invalid request", "details": details}), 400


@retirement_bp.route("/defaults", methods=["GET"])
def get_defaults() -> Any:
    """Get default assumptions and reference tables.

    Returns:
        JSON response with default assumptions, benchmarks and tax tables
    """
    return jsonify(_service().get_defaults()), 200


@retirement_bp.route("/projection", methods=["POST"])
def run_projection() -> Any:
    """Run a deterministic retirement projection.

    Returns:
        JSON response with after-tax asset values, summary and yearly series
    """
    try:
        data = request.get_json(silent=True) or {}
        return jsonify(_service().run_projection(data)), 200

    except ValidationError as e:
        return _validation_error(e)
    except Exception as e:
        current_app.logger.error(f"Error running projection: {str(e)}")
        return jsonify({"error": "Internal server error"}), 500


@retirement_bp.route("/sensitivity", methods=["POST"])
def run_sensitivity() -> Any:
    """Run a one-at-a-time sensitivity analysis.

    Returns:
        JSON response with the base outcome and one cell per perturbation
    """
    try:
        data = request.get_json(silent=True) or {}
        return jsonify(_service().run_sensitivity(data)), 200

    except ValidationError as e:
        return _validation_error(e)
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    except Exception as e:
        current_app.logger.error(f"Error running sensitivity analysis: {str(e)}")
        return jsonify({"error": "Internal server error"}), 500


@retirement_bp.route("/sensitivity/table", methods=["POST"])
def run_sensitivity_table() -> Any:
    """Run the growth rate versus spending level table."""
    try:
        data = request.get_json(silent=True) or {}
        return jsonify(_service().run_sensitivity_table(data)), 200

    except ValidationError as e:
        return _validation_error(e)
    except (TypeError, ValueError) as e:
        return jsonify({"error": str(e)}), 400
    except Exception as e:
        current_app.logger.error(f"Error running sensitivity table: {str(e)}")
        return jsonify({"error": "Internal server error"}), 500


@retirement_bp.route("/monte-carlo", methods=["POST"])
def run_monte_carlo() -> Any:
    """Run a Monte Carlo simulation.

    Returns:
        JSON response with success rate, percentiles and histogram
    """
    try:
        data = request.get_json(silent=True) or {}
        result = _service().run_monte_carlo(
            data,
            default_iterations=current_app.config["MONTE_CARLO_ITERATIONS"],
            max_iterations=current_app.config["MONTE_CARLO_MAX_ITERATIONS"],
        )
        return jsonify(result), 200

    except ValidationError as e:
        return _validation_error(e)
    except Exception as e:
        current_app.logger.error(f"Error running Monte Carlo simulation: {str(e)}")
        return jsonify({"error": "Internal server error"}), 500


@retirement_bp.route("/plans/<plan_id>", methods=["GET"])
def get_plan(plan_id: str) -> Any:
    """Get saved plan state.

    Args:
        plan_id: Identifier of the saved plan

    Returns:
        JSON response with the plan state
    """
    try:
        return jsonify({"plan_id": plan_id, "plan": _service().load_plan(plan_id)}), 200

    except PlanNotFoundError:
        return jsonify({"error": "Plan not found"}), 404
    except Exception as e:
        current_app.logger.error(f"Error loading plan {plan_id}: {str(e)}")
        return jsonify({"error": "Internal server error"}), 500


@retirement_bp.route("/plans/<plan_id>", methods=["PUT"])
def save_plan(plan_id: str) -> Any:
    """Save plan state, replacing any previous version."""
    try:
        data = request.get_json(silent=True) or {}
        plan = _service().save_plan(plan_id, data)
        return jsonify({"plan_id": plan_id, "plan": plan}), 200

    except ValidationError as e:
        return _validation_error(e)
    except Exception as e:
        current_app.logger.error(f"Error saving plan {plan_id}: {str(e)}")
        return jsonify({"error": "Internal server error"}), 500


@retirement_bp.route("/plans/<plan_id>", methods=["DELETE"])
def delete_plan(plan_id: str) -> Any:
    """Delete saved plan state."""
    try:
        if not _service().delete_plan(plan_id):
            return jsonify({"error": "Plan not found"}), 404
        return jsonify({"plan_id": plan_id, "deleted": True}), 200

    except Exception as e:
        current_app.logger.error(f"Error deleting plan {plan_id}: {str(e)}")
        return jsonify({"error": "Internal server error"}), 500
