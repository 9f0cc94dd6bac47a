"""
Sync service - user-triggered batch updates against the client's store.

Stock sync flow:
  1. Check the config has a domain, token and location (else ConfigMissing)
  2. Clear the user's log
  3. Fetch products through the transport chain
  4. For each product, set the first variant's inventory level
  5. Log progress; one failed item never stops the run

Every step is written to the user's log. Failures are logged, never
raised to the caller, and never retried.
"""
import logging
import random

from models import db
from models.user import User
from services.log_service import add_log, clear_logs
from services.platform_service import fetch_products, update_inventory
from services.platform_transport import AllTransportsFailed

logger = logging.getLogger(__name__)

STOCK_SYNC_FIELDS = ("store_domain", "access_token", "location_id")
MIN_STOCK_LEVEL = 5
MAX_STOCK_LEVEL = 200

_FIELD_LABELS = {
    "store_domain": "store domain",
    "access_token": "access token",
    "location_id": "location ID",
    "sheet_id": "sheet ID",
}


class ConfigMissing(Exception):
    """Raised when a run needs credential fields the user has not set."""

    def __init__(self, missing):
        labels = ", ".join(_FIELD_LABELS.get(f, f) for f in missing)
        super().__init__(
            f"Shopify configuration is missing ({labels}). Please set it in Settings."
        )
        self.missing = list(missing)


def require_config(config, fields):
    """
    Raise ConfigMissing if any of the named config fields is empty.
    """
    missing = [f for f in fields if not getattr(config, f)]
    if missing:
        raise ConfigMissing(missing)


def random_stock_level():
    return random.randint(MIN_STOCK_LEVEL, MAX_STOCK_LEVEL)


def _first_inventory_item(product):
    variants = product.get("variants") or []
    if not variants:
        return None
    return variants[0].get("inventory_item_id")


def run_stock_sync(user_id, levels=None):
    """
    Push stock levels for every product in the user's store.

    Args:
        user_id: ID of the client running the sync.
        levels: optional {product_id: quantity}. Products without an entry
                get a random level between 5 and 200.

    Returns:
        dict with total, updated, failed and skipped counts; None when the
        run was aborted before any product was processed.
    """
    user = db.session.get(User, user_id)
    config = user.config
    levels = {str(k): v for k, v in (levels or {}).items()}

    try:
        require_config(config, STOCK_SYNC_FIELDS)
    except ConfigMissing as exc:
        add_log(user.id, "ERROR", str(exc))
        logger.info("[--] Stock sync aborted for %s: %s", user.username, exc)
        return None

    clear_logs(user.id)
    add_log(user.id, "INFO", "Starting stock sync...")
    add_log(user.id, "INFO", "Fetching products from your Shopify store...")

    try:
        products = fetch_products(config)
    except AllTransportsFailed as exc:
        add_log(user.id, "ERROR", f"Stock sync failed: {exc}")
        logger.error("[ERR] Stock sync failed for %s: %s", user.username, exc)
        return None

    if not products:
        add_log(user.id, "WARN", "No products found in your Shopify store.")
        return {"total": 0, "updated": 0, "failed": 0, "skipped": 0}

    add_log(user.id, "SUCCESS", f"Found {len(products)} products in your store.")

    counts = {"total": len(products), "updated": 0, "failed": 0, "skipped": 0}
    for product in products:
        title = product.get("title") or str(product.get("id"))
        item_id = _first_inventory_item(product)
        if not item_id:
            counts["skipped"] += 1
            add_log(user.id, "WARN", f'Skipping "{title}": no inventory item.')
            continue

        quantity = levels.get(str(product.get("id")))
        if quantity is None:
            quantity = random_stock_level()
        add_log(user.id, "INFO", f'Updating stock for "{title}" to {quantity} units.')

        try:
            confirmed = update_inventory(config, item_id, config.location_id, quantity)
        except AllTransportsFailed as exc:
            counts["failed"] += 1
            add_log(user.id, "ERROR", f'Failed to update inventory for "{title}": {exc}')
            continue

        counts["updated"] += 1
        if confirmed:
            add_log(user.id, "SUCCESS", f'Successfully updated "{title}" inventory.')
        else:
            add_log(user.id, "WARN", f'Shopify did not confirm the new level for "{title}".')

    add_log(user.id, "SUCCESS", f"Stock sync complete for {len(products)} products.")
    logger.info(
        "[OK] Stock sync for %s: %d updated, %d failed, %d skipped",
        user.username, counts["updated"], counts["failed"], counts["skipped"],
    )
    return counts
