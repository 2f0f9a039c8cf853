import logging
from datetime import datetime, timezone

from flask import Flask

from greet_service.config import Config
from greet_service.extensions import create_metrics_registry
from greet_service.routes import register_routes
from greet_service.services.greeting_service import GreetService
from greet_service.systems.tracing import RequestTracing
from greet_service.utils.auth import create_token_verifier

logger = logging.getLogger(__name__)


def create_app(test_config=None, tracer_provider=None, token_verifier=None):
    """
    Creates and configures the Flask application.

    Args:
        test_config: Mapping of configuration keys overriding Config
        tracer_provider: OpenTelemetry TracerProvider to use instead of one built from config
        token_verifier: Callable validating Bearer tokens instead of the Google verifier

    Returns:
        Flask application instance
    """
    # Static content lives in WEB/ and is served from the site root.
    app = Flask(__name__, static_folder="WEB", static_url_path="")
    app.config.from_object(Config)
    if test_config:
        app.config.from_mapping(test_config)

    logging.basicConfig(level=app.config["LOG_LEVEL"], format=app.config["LOG_FORMAT"])

    app.startup_time = datetime.now(timezone.utc)

    registry = create_metrics_registry()
    app.extensions["metrics_registry"] = registry

    RequestTracing().init_app(app, tracer_provider=tracer_provider)

    verifier = token_verifier or create_token_verifier(app.config)
    app.extensions["token_verifier"] = verifier
    if verifier is None:
        logger.warning("⚠️ GOOGLE_CLIENT_ID not set. Greeting updates are not authenticated.")
    else:
        logger.info("✅ Token authentication enabled for greeting updates.")

    GreetService().init_app(app, registry)
    logger.info("✅ Core extensions initialized.")

    register_routes(app)
    logger.info("✅ Blueprints registered successfully.")

    @app.route("/")
    def index():
        return app.send_static_file("index.html")

    logger.info("🚀 Flask app created successfully!")
    return app
