"""
Settings routes - platform credentials, connection test, subscription.

GET  /api/settings                     - current config and connection status
PUT  /api/settings                     - save config (status kept unless given)
POST /api/settings/test                - test connection, store CONNECTED/FAILED
POST /api/settings/subscription/cancel - cancel the client's subscription
"""
import logging

from flask import Blueprint, request, jsonify, g

from decorators.client_required import client_required
from decorators.login_required import login_required
from models.user import PlatformConfig, ConnectionStatus
from services.account_service import (
    update_user_config,
    cancel_subscription,
    AccountError,
)
from services.log_service import add_log
from services.platform_service import test_connection

logger = logging.getLogger(__name__)

settings_bp = Blueprint("settings", __name__)

# Failure-message substrings -> WARN tip added to the log after a failed test
TROUBLESHOOTING_TIPS = [
    (
        ("Access denied", "401"),
        "Tip: Check if your access token has the correct permissions (read_products, read_inventory)",
    ),
    (
        ("Store not found", "404"),
        "Tip: Verify your store domain is correct (e.g., your-store.myshopify.com)",
    ),
]


def _settings_payload(user):
    return {
        "config": user.config.to_dict(),
        "connection_status": user.connection_status.value,
    }


@settings_bp.route("", methods=["GET"])
@login_required
def get_settings():
    """Return the current user's platform config."""
    return jsonify(_settings_payload(g.current_user))


@settings_bp.route("", methods=["PUT"])
@login_required
def save_settings():
    """
    Save platform config.

    Body: { "config": {...}, "connection_status": "UNTESTED"|... (optional) }
    """
    body = request.get_json(silent=True) or {}
    config = PlatformConfig.from_dict(body.get("config") or body)
    status = body.get("connection_status") or g.current_user.connection_status.value

    try:
        ConnectionStatus(status)
    except ValueError:
        return jsonify({"error": f"Unknown connection status: {status}"}), 400

    user = update_user_config(g.session, config, status)
    add_log(user.id, "SUCCESS", "Configuration saved successfully.")
    return jsonify(_settings_payload(user))


@settings_bp.route("/test", methods=["POST"])
@login_required
def run_connection_test():
    """
    Test the given config (or the saved one) against Shopify.

    On success the config is saved as CONNECTED, otherwise as FAILED.
    """
    body = request.get_json(silent=True) or {}
    if body.get("config") is not None:
        config = PlatformConfig.from_dict(body["config"])
    else:
        config = g.current_user.config
    user_id = g.current_user.id

    if not config.store_domain or not config.access_token:
        message = "Store Domain and Access Token are required to test."
        add_log(user_id, "ERROR", message)
        return jsonify({"success": False, "error": message}), 400

    add_log(user_id, "INFO", "Testing Shopify connection...")
    result = test_connection(config)

    if result["success"]:
        update_user_config(g.session, config, ConnectionStatus.CONNECTED)
        add_log(user_id, "SUCCESS", "Connection to Shopify successful! Your credentials are valid.")
        details = result.get("details") or {}
        shop = details.get("shop") or {}
        if shop.get("name"):
            add_log(user_id, "INFO", f"Connected to shop: {shop['name']}")
        if details.get("productsCount") is not None:
            add_log(user_id, "INFO", f"Products accessible: {details['productsCount']} found")
    else:
        update_user_config(g.session, config, ConnectionStatus.FAILED)
        error = result.get("error") or "Unknown error"
        add_log(user_id, "ERROR", f"Shopify connection failed: {error}")
        for needles, tip in TROUBLESHOOTING_TIPS:
            if any(needle in error for needle in needles):
                add_log(user_id, "WARN", tip)

    result["connection_status"] = g.current_user.connection_status.value
    return jsonify(result)


@settings_bp.route("/subscription/cancel", methods=["POST"])
@client_required
def cancel():
    """Cancel the subscription. Access lasts until the renewal date."""
    try:
        user = cancel_subscription(g.session)
    except AccountError as exc:
        return jsonify({"error": str(exc)}), exc.status_code
    add_log(user.id, "WARN", "Your subscription has been canceled.")
    return jsonify(user.to_dict())
