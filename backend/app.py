"""
Flask application factory.

Creates and configures the Flask app with:
  - SQLAlchemy database connection and account bootstrap
  - CORS for frontend communication (open CORS on the private relay)
  - Route registration
  - Health check endpoint
  - CLI commands for user import/export
  - Structured logging with [OK]/[ERR] markers (no Unicode)
"""
import logging
import sys

from flask import Flask, jsonify
from flask_cors import CORS

from commands import users_cli
from config import Config
from models import db
from routes import register_routes
from services.account_service import bootstrap_accounts


def create_app(config_class=Config):
    """
    Create and configure the Flask application.

    Args:
        config_class: Configuration class to use (default: Config).
                      Pass TestConfig for testing with SQLite in-memory.

    Returns:
        Configured Flask app instance.
    """
    app = Flask(__name__)
    app.config.from_object(config_class)

    # Set up logging - [OK]/[ERR] markers, no Unicode symbols
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(
        "[%(asctime)s] [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    ))
    app.logger.handlers = [handler]
    app.logger.setLevel(logging.INFO)

    # Initialize extensions
    db.init_app(app)
    CORS(app, resources={
        # Relay answers any origin, like the serverless proxy it replaces
        r"/api/relay": {
            "origins": "*",
            "methods": ["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            "allow_headers": ["Content-Type", "X-Shopify-Access-Token"],
        },
        r"/api/*": {"origins": [app.config["FRONTEND_URL"]]},
    })

    register_routes(app)
    app.cli.add_command(users_cli)

    # Health check endpoint - confirms API is running
    @app.route("/api/health")
    def health():
        """Return service health status."""
        app.logger.info("[OK] Health check passed")
        return jsonify({"status": "ok", "service": "storesync-api"})

    # Tables + admin/demo accounts (safe to re-run, no-ops once present)
    with app.app_context():
        db.create_all()
        bootstrap_accounts()

    app.logger.info("[OK] StoreSync API initialized")
    return app
