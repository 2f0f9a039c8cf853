import os


def _optional_int(name):
    value = os.environ.get(name)
    return int(value) if value else None


class Config:
    """
    Unified configuration class for the greet service.
    Reads settings from environment variables, with sensible defaults.
    """

    # --- General ---
    HOST = os.environ.get("HOST", "0.0.0.0")
    PORT = int(os.environ.get("PORT", 8080))
    FLASK_ENV = os.environ.get("FLASK_ENV", "development").lower()
    DEBUG = FLASK_ENV != "production"

    # --- Logging ---
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
    LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

    # --- Greeting ---
    GREETING = os.environ.get("APP_GREETING", "Ciao")

    # --- Tracing ---
    # Tracing is only enabled when both host and port are set.
    TRACING_HOST = os.environ.get("TRACING_HOST")
    TRACING_PORT = _optional_int("TRACING_PORT")
    TRACING_SERVICE_NAME = os.environ.get("TRACING_SERVICE_NAME", "greet-service")
    # "zipkin" (JSON v2 at /api/v2/spans) or "otlp" (OTLP/HTTP at /v1/traces)
    TRACING_PROTOCOL = os.environ.get("TRACING_PROTOCOL", "zipkin").lower()

    # --- Security ---
    GOOGLE_CLIENT_ID = os.environ.get("GOOGLE_CLIENT_ID")

    # --- Health checks ---
    HEALTH_DISK_PATH = os.environ.get("HEALTH_DISK_PATH", "/")
    HEALTH_DISK_THRESHOLD_PERCENT = float(os.environ.get("HEALTH_DISK_THRESHOLD_PERCENT", 99.999))
    HEALTH_MEMORY_THRESHOLD_PERCENT = float(os.environ.get("HEALTH_MEMORY_THRESHOLD_PERCENT", 98.0))
