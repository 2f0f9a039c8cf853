# greet_service/routes/greet_routes.py
"""
A simple service to greet you. Examples:

Get default greeting message:
    curl -X GET http://localhost:8080/greet

Get greeting message for Joe:
    curl -X GET http://localhost:8080/greet/Joe

Change greeting:
    curl -X PUT http://localhost:8080/greet/greeting/Hola

Change greeting using JSON post:
    curl -X POST -d '{"greeting" : "Howdy"}' http://localhost:8080/greet/greeting

Change greeting using JSON post to an artificially slow handler:
    curl -X POST -d '{"greeting" : "Hi"}' http://localhost:8080/greet/slowgreeting

The message is returned as a JSON object.
"""
import http
import logging
from typing import Optional

from flask import Blueprint, jsonify, request
from opentelemetry.trace import Status, StatusCode
from pydantic import BaseModel, StrictStr, ValidationError, conint

from greet_service.services.greeting_service import (
    DEFAULT_SLOW_DELAY_SECONDS,
    MAX_SLOW_DELAY_SECONDS,
    MissingGreetingField,
    display_thread,
    get_greet_service,
)
from greet_service.systems.tracing import get_request_tracing
from greet_service.utils.auth import require_google_token

logger = logging.getLogger(__name__)

# --- Blueprint Setup ---
greet_bp = Blueprint("greet", __name__, url_prefix="/greet")

# --- Pydantic Schemas ---
class GreetingUpdateSchema(BaseModel):
    greeting: Optional[StrictStr] = None

class SlowGreetingUpdateSchema(GreetingUpdateSchema):
    delay: Optional[conint(strict=True, ge=0, le=MAX_SLOW_DELAY_SECONDS)] = DEFAULT_SLOW_DELAY_SECONDS


def _json_object() -> dict:
    # Parse regardless of Content-Type; curl -d sends form encoding by default.
    payload = request.get_json(force=True)
    return payload if isinstance(payload, dict) else {}


# --- Filters ---

@greet_bp.before_app_request
def counter_filter():
    """Counts every request under /greet, matched or not, then lets it continue."""
    prefix = greet_bp.url_prefix
    if request.path == prefix or request.path.startswith(prefix + "/"):
        display_thread("counter_filter")
        get_greet_service().count_request()


# --- Error Handlers ---

@greet_bp.errorhandler(MissingGreetingField)
def handle_missing_greeting(error):
    logger.warning(f"Rejected greeting update on {request.path}: {error.message}")
    return error.message, http.HTTPStatus.BAD_REQUEST, {"Content-Type": "text/plain; charset=utf-8"}


@greet_bp.errorhandler(ValidationError)
def handle_validation_error(error):
    logger.warning(f"Validation failed: {error.errors(include_url=False)}")
    return jsonify(error="Invalid input", details=error.errors(include_url=False)), http.HTTPStatus.UNPROCESSABLE_ENTITY


# --- Routes ---

@greet_bp.route("", methods=["GET"])
def get_default_message():
    """Return a worldly greeting message."""
    display_thread("get_default_message")
    return jsonify(get_greet_service().default_message()), http.HTTPStatus.OK


@greet_bp.route("/greeting", methods=["GET"])
def get_greeting():
    """Return the greeting in use."""
    display_thread("get_greeting")
    return jsonify(get_greet_service().current_greeting()), http.HTTPStatus.OK


@greet_bp.route("/<name>", methods=["GET"])
def get_message(name):
    """Return a greeting message using the name that was provided."""
    display_thread("get_message")
    return jsonify(get_greet_service().message_for(name)), http.HTTPStatus.OK


@greet_bp.route("/greeting/<greeting>", methods=["PUT"])
@require_google_token
def update_greeting(greeting):
    """Set the greeting to use in future messages."""
    display_thread("update_greeting")
    return jsonify(get_greet_service().update_greeting(greeting)), http.HTTPStatus.OK


@greet_bp.route("/greeting", methods=["POST"])
def update_greeting_json():
    """Set the greeting from the JSON payload."""
    display_thread("update_greeting_json")
    payload = GreetingUpdateSchema(**_json_object())
    return jsonify(get_greet_service().update_greeting(payload.greeting)), http.HTTPStatus.OK


@greet_bp.route("/slowgreeting", methods=["POST"])
def update_greeting_json_slowly():
    """
    Slowly set the greeting from the JSON payload.

    The update waits on its own timer thread and commits after ``delay``
    seconds (default 2, at most an hour). A span covering the whole operation is opened as a
    child of the request span and ended once, whatever the outcome.
    """
    display_thread("update_greeting_json_slowly")
    span = get_request_tracing().start_child_span("updateGreetingFromJsonSlowlyHandler")
    try:
        payload = SlowGreetingUpdateSchema(**_json_object())
        delay = payload.delay if payload.delay is not None else DEFAULT_SLOW_DELAY_SECONDS
        span.set_attribute("greeting.delay_seconds", delay)
        result = get_greet_service().update_greeting_slowly(payload.greeting, delay)
        return jsonify(result), http.HTTPStatus.OK
    except Exception as e:
        span.record_exception(e)
        span.set_status(Status(StatusCode.ERROR))
        raise
    finally:
        span.end()
