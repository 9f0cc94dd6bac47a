"""
Auth routes - login, me, logout.

POST /api/auth/login  - exchange username/password for JWT
GET  /api/auth/me     - return current user info and the dashboard view for its role
POST /api/auth/logout - placeholder (frontend clears localStorage)
"""
import logging

from flask import Blueprint, request, jsonify, g

from decorators.login_required import login_required
from models.user import Role
from services.account_service import Session, login as login_session, get_clients
from services.auth_service import generate_jwt

logger = logging.getLogger(__name__)

auth_bp = Blueprint("auth", __name__)


def _admin_view(user):
    return {"view": "admin", "client_count": len(get_clients())}


def _client_view(user):
    return {
        "view": "dashboard",
        "connection_status": user.connection_status.value,
        "subscription_status": (
            user.subscription_status.value if user.subscription_status else None
        ),
    }


def _require_every_role(views):
    missing = sorted(role.value for role in set(Role) - set(views))
    if missing:
        raise RuntimeError(f"No dashboard view for role(s): {', '.join(missing)}")
    return views


# One entry per Role; a role without a view is a startup error
VIEWS_BY_ROLE = _require_every_role({
    Role.ADMIN: _admin_view,
    Role.CLIENT: _client_view,
})


def view_for(user):
    """Dashboard payload for the user's role."""
    return VIEWS_BY_ROLE[user.role](user)


@auth_bp.route("/login", methods=["POST"])
def login():
    """Exchange a username/password pair for a JWT session token."""
    body = request.get_json(silent=True) or {}
    username = body.get("username") or ""
    password = body.get("password") or ""

    if not isinstance(username, str) or not isinstance(password, str):
        return jsonify({"error": "Username and password must be strings"}), 400
    if not username or not password:
        return jsonify({"error": "Username and password are required"}), 400

    session = Session()
    if not login_session(session, username, password):
        return jsonify({"error": "Invalid username or password"}), 401

    token = generate_jwt(session.user)
    return jsonify({
        "token": token,
        "user": session.user.to_dict(),
        "dashboard": view_for(session.user),
    })


@auth_bp.route("/me", methods=["GET"])
@login_required
def me():
    """Return the currently authenticated user."""
    user_dict = g.current_user.to_dict()
    user_dict["dashboard"] = view_for(g.current_user)
    return jsonify(user_dict)


@auth_bp.route("/logout", methods=["POST"])
def logout():
    """Logout placeholder - frontend clears localStorage."""
    return jsonify({"message": "logged out"})
