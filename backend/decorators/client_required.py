"""
Decorator: @client_required - enforces the CLIENT role.

Store tools (products, sync, subscription) only make sense for clients.
Returns 403 for admins.
"""
from functools import wraps

from flask import g, jsonify

from decorators.login_required import login_required
from models.user import Role


def client_required(f):
    @wraps(f)
    @login_required
    def decorated(*args, **kwargs):
        if g.current_user.role != Role.CLIENT:
            return jsonify({"error": "Client account required"}), 403
        return f(*args, **kwargs)

    return decorated
