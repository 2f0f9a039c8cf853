# greet_service/routes/status_routes.py
import http
from datetime import datetime, timezone

from flask import Blueprint, current_app, jsonify
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from greet_service import __version__
from greet_service.extensions import get_metrics_registry
from greet_service.systems.health import STATE_DOWN, STATE_UP, run_health_checks

status_bp = Blueprint('status_bp', __name__)


@status_bp.route('/health', methods=['GET'])
def health():
    """Runs the health checks; 503 if any of them is DOWN."""
    checks = run_health_checks(current_app.config)
    healthy = all(check["state"] == STATE_UP for check in checks)
    uptime_seconds = (datetime.now(timezone.utc) - current_app.startup_time).total_seconds()

    status_code = http.HTTPStatus.OK if healthy else http.HTTPStatus.SERVICE_UNAVAILABLE
    return jsonify({
        "status": STATE_UP if healthy else STATE_DOWN,
        "checks": checks,
        "version": __version__,
        "uptime_seconds": uptime_seconds,
        "timestamp": datetime.now(timezone.utc).isoformat()
    }), status_code


@status_bp.route('/ready', methods=['GET'])
def ready():
    return "Ready!", http.HTTPStatus.OK, {"Content-Type": "text/plain; charset=utf-8"}


@status_bp.route('/metrics', methods=['GET'])
def metrics():
    """Prometheus-compatible metrics."""
    return generate_latest(get_metrics_registry()), http.HTTPStatus.OK, {"Content-Type": CONTENT_TYPE_LATEST}
