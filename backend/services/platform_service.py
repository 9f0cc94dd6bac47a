"""
Platform service - Shopify operations on top of the transport chain.

  - platform_request(): one call through the chain, returns response data
  - get_shop(), fetch_products(), update_inventory()
  - test_connection(): shop fetch + 1-item product listing, mapped to
    user-facing error hints

Responses that came through a relay are not always shaped like the
platform's own answer, so every reader tolerates both the wrapped
({"products": [...]}) and the bare form.
"""
import logging

from flask import current_app

from services.platform_transport import (
    PlatformRequest,
    AllTransportsFailed,
    build_transports,
    run_chain,
)

logger = logging.getLogger(__name__)

# Substring → hint. Checked in order against the failure message.
STATUS_HINTS = [
    ("401", "Access denied - check if your access token is valid and has the correct permissions"),
    ("403", "Forbidden - your access token may not have sufficient permissions"),
    ("404", "Store not found - check if the store domain is correct"),
]
GENERIC_FAILURE = "All connection methods failed. Please check your credentials and try again later."


def _mask(token):
    return f"{token[:6]}..." if token else "(none)"


def platform_request(endpoint, method="GET", body=None, config=None):
    """
    Run one Shopify call through the transport chain.

    Args:
        endpoint: Path below /admin/api/{version}, e.g. "/shop.json".
        method: HTTP method.
        body: JSON-serializable body, ignored for GET.
        config: PlatformConfig with the client's credentials.

    Returns:
        The response data (parsed JSON, or text when the body is not JSON).

    Raises:
        AllTransportsFailed: if every transport failed.
    """
    request = PlatformRequest(
        endpoint=endpoint,
        config=config,
        method=method,
        body=body,
        api_version=current_app.config.get("PLATFORM_API_VERSION") or "2024-04",
        timeout=current_app.config.get("PLATFORM_TIMEOUT_SECONDS"),
    )
    transports = build_transports(
        current_app.config.get("PUBLIC_RELAYS") or [],
        current_app.config.get("RELAY_URL") or "",
    )
    logger.info(
        "[--] %s %s on %s (token=%s)",
        method, endpoint, config.store_domain or "(no domain)", _mask(config.access_token),
    )
    return run_chain(transports, request).data


def get_shop(config):
    """Fetch the shop profile."""
    data = platform_request("/shop.json", config=config)
    if isinstance(data, dict) and isinstance(data.get("shop"), dict):
        return data["shop"]
    if isinstance(data, dict):
        return data
    raise ValueError("Invalid shop data format received from Shopify")


def fetch_products(config, limit=50):
    """
    List products. Accepts {"products": [...]} or a bare array.

    Returns:
        list of product dicts; [] for any other shape.
    """
    data = platform_request(f"/products.json?limit={limit}", config=config)
    if isinstance(data, dict) and isinstance(data.get("products"), list):
        return data["products"]
    if isinstance(data, list):
        return data
    logger.warning("[--] Unexpected products payload: %s", type(data).__name__)
    return []


def update_inventory(config, inventory_item_id, location_id, quantity):
    """
    Set the available quantity of one inventory item at one location.

    Returns:
        True when the response carries an inventory_level.
    """
    data = platform_request(
        "/inventory_levels/set.json",
        method="POST",
        body={
            "location_id": location_id,
            "inventory_item_id": inventory_item_id,
            "available": quantity,
        },
        config=config,
    )
    return isinstance(data, dict) and bool(data.get("inventory_level"))


def describe_failure(exc):
    """Map a failure to a user-facing hint by status-code substring."""
    message = str(exc)
    for needle, hint in STATUS_HINTS:
        if needle in message:
            return hint
    if isinstance(exc, AllTransportsFailed):
        return GENERIC_FAILURE
    return message or "Unknown error occurred during connection test"


def test_connection(config):
    """
    Check credentials with a shop fetch and a 1-item product listing.

    Returns:
        dict {success, error, details}. details has the shop profile and
        productsCount on success.
    """
    try:
        shop = get_shop(config)
    except (AllTransportsFailed, ValueError) as exc:
        logger.error("[ERR] Connection test failed for %s: %s", config.store_domain, exc)
        return {"success": False, "error": describe_failure(exc), "details": None}

    try:
        products = fetch_products(config, limit=1)
    except AllTransportsFailed as exc:
        logger.error("[ERR] Products check failed for %s: %s", config.store_domain, exc)
        return {
            "success": False,
            "error": f"Products API test failed: {describe_failure(exc)}",
            "details": {"shop": shop},
        }

    logger.info("[OK] Connection test passed for %s", config.store_domain)
    return {
        "success": True,
        "error": None,
        "details": {"shop": shop, "productsCount": len(products)},
    }

