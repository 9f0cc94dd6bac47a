"""
Sync routes - start sync runs.

Runs execute in a background thread so the request returns at once.
POST returns 202; the frontend polls GET /api/logs for progress.
Nothing stops two runs from overlapping; their log lines interleave.
"""
import logging
import threading

from flask import Blueprint, request, jsonify, g, current_app

from decorators.client_required import client_required
from services.log_service import add_log
from services.sync_service import (
    run_stock_sync,
    require_config,
    ConfigMissing,
    STOCK_SYNC_FIELDS,
)

logger = logging.getLogger(__name__)

sync_bp = Blueprint("sync", __name__)


def _run_stock_sync_background(app, user_id, levels):
    """Run the stock sync in a background thread with its own app context."""
    with app.app_context():
        try:
            run_stock_sync(user_id, levels=levels)
        except Exception as exc:
            logger.error("[ERR] Stock sync crashed for user %s: %s", user_id, exc)
            add_log(user_id, "ERROR", f"Stock sync failed: {exc}")


@sync_bp.route("/stock", methods=["POST"])
@client_required
def start_stock_sync():
    """
    Start a stock sync (async).

    Body (optional): { "levels": { "<product_id>": <quantity>, ... } }
    Returns immediately: { status: "running" }
    """
    body = request.get_json(silent=True) or {}
    levels = body.get("levels") or {}
    if not isinstance(levels, dict):
        return jsonify({"error": "levels must be an object"}), 400

    user = g.current_user
    try:
        require_config(user.config, STOCK_SYNC_FIELDS)
    except ConfigMissing as exc:
        add_log(user.id, "ERROR", str(exc))
        return jsonify({"error": str(exc), "missing": exc.missing}), 400

    app = current_app._get_current_object()
    thread = threading.Thread(
        target=_run_stock_sync_background,
        args=(app, user.id, levels),
    )
    thread.start()

    logger.info("[OK] Stock sync started for %s", user.username)
    return jsonify({"status": "running"}), 202
