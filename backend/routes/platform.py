"""
Platform routes - read-only views of the client's store.

GET /api/platform/products - list products (query: limit, default 50)
"""
import logging

from flask import Blueprint, request, jsonify, g

from decorators.client_required import client_required
from services.platform_service import fetch_products, describe_failure
from services.platform_transport import AllTransportsFailed
from services.sync_service import require_config, ConfigMissing

logger = logging.getLogger(__name__)

platform_bp = Blueprint("platform", __name__)


@platform_bp.route("/products", methods=["GET"])
@client_required
def list_products():
    """Fetch products through the transport chain."""
    config = g.current_user.config
    try:
        require_config(config, ("store_domain", "access_token"))
    except ConfigMissing as exc:
        return jsonify({"error": str(exc), "missing": exc.missing}), 400

    try:
        limit = min(max(int(request.args.get("limit") or "50"), 1), 250)
    except ValueError:
        return jsonify({"error": "limit must be an integer"}), 400

    try:
        products = fetch_products(config, limit=limit)
    except AllTransportsFailed as exc:
        logger.error("[ERR] Product fetch failed for %s: %s", g.current_user.username, exc)
        return jsonify({
            "error": describe_failure(exc),
            "attempts": [
                {"transport": name, "error": str(err), "status": err.status_code}
                for name, err in exc.attempts
            ],
        }), 502

    return jsonify({"products": products, "count": len(products)})
