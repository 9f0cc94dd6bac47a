"""
Admin routes - client provisioning.

GET  /api/admin/clients - list all client accounts
POST /api/admin/clients - create a client account

All endpoints require @admin_required.
"""
import logging

from flask import Blueprint, request, jsonify

from decorators.admin_required import admin_required
from services.account_service import add_client, get_clients, DuplicateUsername

logger = logging.getLogger(__name__)

admin_bp = Blueprint("admin", __name__)


@admin_bp.route("/clients", methods=["GET"])
@admin_required
def list_clients():
    """List all client accounts in creation order."""
    return jsonify([c.to_dict() for c in get_clients()])


@admin_bp.route("/clients", methods=["POST"])
@admin_required
def create_client():
    """
    Create a client account.

    Body: { "username": "...", "password": "..." }
    """
    body = request.get_json(silent=True) or {}
    username = body.get("username") or ""
    password = body.get("password") or ""
    if not isinstance(username, str) or not isinstance(password, str):
        return jsonify({"success": False, "message": "Username and password must be strings"}), 400

    try:
        client = add_client(username, password)
    except DuplicateUsername as exc:
        return jsonify({"success": False, "message": str(exc)}), 409
    except ValueError as exc:
        return jsonify({"success": False, "message": str(exc)}), 400

    return jsonify({
        "success": True,
        "message": "Client created successfully.",
        "client": client.to_dict(),
    }), 201
