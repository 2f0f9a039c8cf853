# greet_service/routes/__init__.py
"""
This module imports all blueprint instances from the route modules
and provides a function to register them on the Flask app.
"""
import logging
from flask import Flask

from .greet_routes import greet_bp
from .status_routes import status_bp

logger = logging.getLogger(__name__)

def register_routes(app: Flask):
    """Register all blueprints with the Flask app."""
    app.register_blueprint(status_bp)
    app.register_blueprint(greet_bp)

    logger.info("✅ All application blueprints registered.")
