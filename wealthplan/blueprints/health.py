"""Health check blueprint."""

from flask import Blueprint, Response, current_app, jsonify

health_bp = Blueprint("health", __name__)


@health_bp.route("/healthz")
def health_check() -> Response:
    """Health check endpoint.

    Returns:
        JSON response with status and the configured plan store backend
    """
    return jsonify({"status": "ok", "storage": current_app.config.get("STORAGE_TYPE")})
