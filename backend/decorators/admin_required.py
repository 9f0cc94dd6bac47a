"""
Decorator: @admin_required - enforces the ADMIN role.

Wraps @login_required, then checks g.current_user.role.
Returns 403 if user is not an admin.
"""
from functools import wraps

from flask import g, jsonify

from decorators.login_required import login_required
from models.user import Role


def admin_required(f):
    @wraps(f)
    @login_required
    def decorated(*args, **kwargs):
        if g.current_user.role != Role.ADMIN:
            return jsonify({"error": "Admin access required"}), 403
        return f(*args, **kwargs)

    return decorated
