"""
Log routes - the current user's activity log.

GET    /api/logs - list entries, oldest first
DELETE /api/logs - clear the log
"""
from flask import Blueprint, jsonify, g

from decorators.login_required import login_required
from services.log_service import list_logs, clear_logs

logs_bp = Blueprint("logs", __name__)


@logs_bp.route("", methods=["GET"])
@login_required
def get_logs():
    """Return the user's log entries."""
    return jsonify([e.to_dict() for e in list_logs(g.current_user.id)])


@logs_bp.route("", methods=["DELETE"])
@login_required
def delete_logs():
    """Clear the user's log."""
    removed = clear_logs(g.current_user.id)
    return jsonify({"cleared": removed})
