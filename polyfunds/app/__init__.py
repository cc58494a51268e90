"""Application factory and app-wide configuration."""

from typing import Optional

import structlog
from flask import Flask
from flask_cors import CORS

from polyfunds.app.api.routes import api_bp
from polyfunds.config import Settings, get_settings
from polyfunds.core.platform import Platform
from polyfunds.log import configure_logging

logger = structlog.get_logger()


def create_app(settings: Optional[Settings] = None, platform: Optional[Platform] = None) -> Flask:
    """Build the Flask app instance around one ledger platform."""
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = Flask(__name__)

    CORS(
        app,
        resources={r"/api/*": {"origins": settings.cors_origins}},
        supports_credentials=True,
    )

    app.extensions["polyfunds.platform"] = platform or Platform.from_settings(settings)
    app.register_blueprint(api_bp, url_prefix="/api")
    logger.info("API ready", admin=app.extensions["polyfunds.platform"].admin)
    return app
