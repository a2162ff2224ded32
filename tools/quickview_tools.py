"""
Quickview Tools - Product quickview settings stored in Shopify metafields

The admin panel edits the full configuration (which product fields to
show, styling, triggers). The storefront widget only needs the button
settings. Both are read from the same JSON metafield; anything not stored
falls back to the defaults below.
"""

import copy
import json
from typing import Optional
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from config import (
    QUICKVIEW_METAFIELD_NAMESPACE,
    QUICKVIEW_SHOP_KEY,
    QUICKVIEW_COLLECTION_KEY,
)
from tools.shopify_tools import (
    get_shop_id,
    set_metafields,
    fetch_metafield,
    fetch_collection,
)


# =============================================================================
# DEFAULTS
# =============================================================================

DEFAULT_QUICKVIEW_CONFIG = {
    "enabled": True,
    "buttonText": "Quick View",
    "position": "below",
    "show": {
        "price": True,
        "button": True,
        "description": True,
        "variant": True,
        "image": True,
        "title": True,
        "availability": True,
    },
    "styling": {
        "theme": "light",
        "animation": "fade",
        "overlay": True,
        "closeOnOverlayClick": True,
        "buttonColor": "#007bff",
        "buttonHoverColor": "#0056b3",
        "modalWidth": "500px",
        "modalMaxHeight": "80vh",
        "borderRadius": "8px",
        "shadow": "0 10px 25px rgba(0, 0, 0, 0.2)",
        "closeButtonColor": "#333",
        "closeButtonHoverBg": "rgba(0, 0, 0, 0.1)",
        "titleColor": "#333",
        "priceColor": "#10b981",
        "descriptionColor": "#6b7280",
        "addToCartButtonColor": "#dc3545",
        "addToCartButtonHoverColor": "#c82333",
        "viewProductButtonColor": "#10b981",
        "viewProductButtonHoverColor": "#059669",
    },
    "triggers": {
        "hover": False,
        "click": True,
        "button": True,
    },
    "content": {
        "maxDescriptionLength": 150,
        "showAddToCart": True,
        "showViewProduct": True,
        "showAvailability": True,
        "showPrice": True,
        "showImage": True,
        "showTitle": True,
        "showDescription": True,
    },
}

# Button settings read by the storefront widget
DEFAULT_WIDGET_CONFIG = {
    "enabled": True,
    "buttonText": "Quick View",
    "position": "below",
    "buttonStyle": "primary",
    "buttonSize": "medium",
    "showIcon": True,
    "icon": "👁️",
    "customColor": "",
    "textColor": "",
    "showQuickviewIcon": False,
    "quickviewIcon": "⚡",
}

VALID_POSITIONS = ("above", "below")
VALID_THEMES = ("light", "dark")


# =============================================================================
# CONFIG HELPERS
# =============================================================================

def merge_config(stored: Optional[dict], defaults: dict) -> dict:
    """
    Merge a stored config over defaults.

    Nested dicts are merged key by key; stored values win. Keys only in
    the stored config are kept. Neither input is modified.
    """
    merged = copy.deepcopy(defaults)
    if not isinstance(stored, dict):
        return merged

    for key, value in stored.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(value, merged[key])
        else:
            merged[key] = copy.deepcopy(value)

    return merged


def validate_quickview_config(config) -> list:
    """
    Check a config before saving.

    Returns:
        List of error messages (empty if the config is valid)
    """
    if not isinstance(config, dict):
        return ["Config must be an object"]

    errors = []

    if "enabled" in config and not isinstance(config["enabled"], bool):
        errors.append("'enabled' must be true or false")

    if "position" in config and config["position"] not in VALID_POSITIONS:
        errors.append(f"'position' must be one of: {', '.join(VALID_POSITIONS)}")

    if "buttonText" in config and not isinstance(config["buttonText"], str):
        errors.append("'buttonText' must be a string")

    for group in ("show", "styling", "triggers", "content"):
        if group in config and not isinstance(config[group], dict):
            errors.append(f"'{group}' must be an object")

    styling = config.get("styling")
    if isinstance(styling, dict) and "theme" in styling and styling["theme"] not in VALID_THEMES:
        errors.append(f"'styling.theme' must be one of: {', '.join(VALID_THEMES)}")

    content = config.get("content")
    if isinstance(content, dict) and "maxDescriptionLength" in content:
        length = content["maxDescriptionLength"]
        if isinstance(length, bool) or not isinstance(length, int) or length < 0:
            errors.append("'content.maxDescriptionLength' must be a non-negative integer")

    return errors


def _decode_metafield(metafield: Optional[dict]) -> Optional[dict]:
    """JSON value of a metafield, or None if missing/unparseable."""
    if not metafield or not metafield.get("value"):
        return None
    try:
        value = json.loads(metafield["value"])
    except json.JSONDecodeError as e:
        print(f"Warning: Error parsing quickview config: {e}")
        return None
    return value if isinstance(value, dict) else None


# =============================================================================
# LOAD / SAVE
# =============================================================================

async def _load_stored_config(collection_id: Optional[str]) -> dict:
    """
    Find the stored config: the collection's first (if given), then the shop's.

    Returns:
        dict with keys: success, config (None if nothing stored), source, error
    """
    if collection_id:
        collection = await fetch_collection(collection_id)
        if collection:
            result = await fetch_metafield(collection["id"], QUICKVIEW_METAFIELD_NAMESPACE, QUICKVIEW_COLLECTION_KEY)
            if not result["success"]:
                return {"success": False, "error": result["error"]}
            config = _decode_metafield(result["metafield"])
            if config is not None:
                return {"success": True, "config": config, "source": "collection"}

    shop = await get_shop_id()
    if not shop["success"]:
        return {"success": False, "error": shop["error"]}

    result = await fetch_metafield(shop["shop_id"], QUICKVIEW_METAFIELD_NAMESPACE, QUICKVIEW_SHOP_KEY)
    if not result["success"]:
        return {"success": False, "error": result["error"]}

    config = _decode_metafield(result["metafield"])
    if config is not None:
        return {"success": True, "config": config, "source": "metafields"}

    return {"success": True, "config": None, "source": "default"}


async def load_quickview_config(collection_id: Optional[str] = None) -> dict:
    """
    Load the quickview config for the admin panel.

    Never fails hard: when nothing is stored, or Shopify can't be reached,
    the defaults are returned.

    Returns:
        dict with keys: success, config, source ('collection', 'metafields',
        'default' or 'fallback'), message
    """
    stored = await _load_stored_config(collection_id)

    if not stored["success"]:
        print(f"Warning: Error loading quickview config: {stored['error']}")
        return {
            "success": True,
            "config": copy.deepcopy(DEFAULT_QUICKVIEW_CONFIG),
            "source": "fallback",
            "message": "Using default configuration due to error",
        }

    if stored["config"] is None:
        return {
            "success": True,
            "config": copy.deepcopy(DEFAULT_QUICKVIEW_CONFIG),
            "source": "default",
            "message": "Using default configuration",
        }

    return {
        "success": True,
        "config": merge_config(stored["config"], DEFAULT_QUICKVIEW_CONFIG),
        "source": stored["source"],
        "message": "Configuration loaded",
    }


async def public_widget_config(collection_id: Optional[str] = None) -> dict:
    """
    Config for the storefront widget: the button settings only.

    Returns:
        dict with keys: success, config, source
    """
    stored = await _load_stored_config(collection_id)

    if not stored["success"]:
        print(f"Warning: Error loading quickview config: {stored['error']}")
        return {"success": False, "config": copy.deepcopy(DEFAULT_WIDGET_CONFIG), "source": "fallback"}

    merged = merge_config(stored["config"], DEFAULT_WIDGET_CONFIG)
    widget = {key: merged[key] for key in DEFAULT_WIDGET_CONFIG}
    return {"success": True, "config": widget, "source": stored["source"]}


async def save_quickview_config(config: dict, collection_id: Optional[str] = None) -> dict:
    """
    Save the quickview config.

    Saved on the collection when collection_id names an existing
    collection, otherwise on the shop.

    Returns:
        dict with keys: success, message, config, metafield_key, owner_id, error
    """
    errors = validate_quickview_config(config)
    if errors:
        return {"success": False, "error": "Invalid configuration: " + "; ".join(errors)}

    shop = await get_shop_id()
    if not shop["success"]:
        return {"success": False, "error": shop["error"]}

    owner_id = shop["shop_id"]
    metafield_key = QUICKVIEW_SHOP_KEY
    message = "Configuration saved to shop metafields"

    if collection_id:
        collection = await fetch_collection(collection_id)
        if collection:
            owner_id = collection["id"]
            metafield_key = QUICKVIEW_COLLECTION_KEY
            message = f"Configuration saved to collection: {collection.get('title', owner_id)}"
        else:
            print("Collection not found, falling back to shop metafields")

    result = await set_metafields([{
        "ownerId": owner_id,
        "namespace": QUICKVIEW_METAFIELD_NAMESPACE,
        "key": metafield_key,
        "type": "json",
        "value": json.dumps(config, ensure_ascii=False),
    }])

    if not result["success"]:
        return {"success": False, "error": result["error"]}

    return {
        "success": True,
        "message": message,
        "config": config,
        "metafield_key": metafield_key,
        "owner_id": owner_id,
    }
