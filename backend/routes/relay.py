"""
Relay route - the private relay used as the last transport in the chain.

POST /api/relay
  Body:    { endpoint, method, body, storeDomain, accessToken }
  Returns: { success, data, status, statusText } with the upstream status code

Open to any origin (CORS set up in app.py), including the OPTIONS preflight.
"""
import json
import logging

import requests
from flask import Blueprint, request, jsonify, current_app

from models.user import normalize_store_domain
from services.platform_transport import ACCESS_TOKEN_HEADER

logger = logging.getLogger(__name__)

relay_bp = Blueprint("relay", __name__)

RELAY_METHODS = ("GET", "POST", "PUT", "DELETE")


@relay_bp.route("", methods=["POST"])
def relay():
    """Forward one call to the Shopify Admin API and wrap the answer."""
    envelope = request.get_json(silent=True) or {}
    endpoint = envelope.get("endpoint") or ""
    method = (envelope.get("method") or "GET").upper()
    body = envelope.get("body")
    store_domain = normalize_store_domain(envelope.get("storeDomain"))
    access_token = envelope.get("accessToken") or ""

    if not endpoint or not store_domain or not access_token:
        return jsonify({"error": "Missing required parameters"}), 400
    if method not in RELAY_METHODS:
        return jsonify({"error": f"Unsupported method: {method}"}), 400

    version = current_app.config.get("PLATFORM_API_VERSION") or "2024-04"
    url = f"https://{store_domain}/admin/api/{version}{endpoint}"
    headers = {
        ACCESS_TOKEN_HEADER: access_token,
        "Content-Type": "application/json",
    }

    # The browser client sent bodies already serialized
    if isinstance(body, str) and body:
        try:
            body = json.loads(body)
        except ValueError:
            return jsonify({"error": "body is not valid JSON"}), 400

    logger.info("[--] Relaying %s request to: %s", method, url)
    try:
        resp = requests.request(
            method,
            url,
            headers=headers,
            json=body if body and method != "GET" else None,
            timeout=current_app.config.get("PLATFORM_TIMEOUT_SECONDS"),
        )
    except requests.RequestException as exc:
        logger.error("[ERR] Relay error for %s: %s", url, exc)
        return jsonify({"error": "Internal server error", "message": str(exc)}), 500

    try:
        data = resp.json()
    except ValueError:
        data = resp.text

    return jsonify({
        "success": resp.ok,
        "data": data,
        "status": resp.status_code,
        "statusText": resp.reason or "",
    }), resp.status_code
