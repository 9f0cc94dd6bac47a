"""
Route registration for the Flask app.

Registers all route blueprints:
  - auth routes (username/password login, me, logout)
  - admin routes (client provisioning)
  - settings routes (platform config, connection test, subscription)
  - platform routes (product listing)
  - sync routes (stock sync runner)
  - log routes (activity log)
  - relay route (private relay for the transport chain)
"""
from routes.auth import auth_bp
from routes.admin import admin_bp
from routes.settings import settings_bp
from routes.platform import platform_bp
from routes.sync import sync_bp
from routes.logs import logs_bp
from routes.relay import relay_bp


def register_routes(app):
    """
    Register all route blueprints with the Flask app.

    Args:
        app: Flask application instance.
    """
    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(admin_bp, url_prefix="/api/admin")
    app.register_blueprint(settings_bp, url_prefix="/api/settings")
    app.register_blueprint(platform_bp, url_prefix="/api/platform")
    app.register_blueprint(sync_bp, url_prefix="/api/sync")
    app.register_blueprint(logs_bp, url_prefix="/api/logs")
    app.register_blueprint(relay_bp, url_prefix="/api/relay")
