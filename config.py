"""
Configuration for the Shopify Blog Builder

Environment variables and settings for the builder and quickview tools.
See .env.example for all available options.
"""
import os
from dotenv import load_dotenv

load_dotenv()

# ===========================================
# Shopify Configuration
# ===========================================
# Shopify store name (the part before .myshopify.com)
SHOPIFY_STORE = os.getenv("SHOPIFY_STORE", "")

# Shopify OAuth credentials (from Dev Dashboard)
# These are used to obtain access tokens via client credentials grant
SHOPIFY_CLIENT_ID = os.getenv("SHOPIFY_CLIENT_ID", "")
SHOPIFY_CLIENT_SECRET = os.getenv("SHOPIFY_CLIENT_SECRET", "")

# Shopify Admin API version
SHOPIFY_API_VERSION = os.getenv("SHOPIFY_API_VERSION", "2025-01")

# Timeout for Shopify API calls in seconds
REQUEST_TIMEOUT = int(os.getenv("REQUEST_TIMEOUT", "30"))

# ===========================================
# Blog Configuration
# ===========================================
# Blog handle new articles are created in
DEFAULT_BLOG_HANDLE = os.getenv("DEFAULT_BLOG_HANDLE", "news")

# Author display name when none is given
DEFAULT_AUTHOR = os.getenv("DEFAULT_AUTHOR", "Admin")

# Where the editable sections JSON is stored on each article.
# The rendered HTML goes into the article body; this metafield is the
# source of truth when the post is opened again in the builder.
SECTIONS_METAFIELD_NAMESPACE = os.getenv("SECTIONS_METAFIELD_NAMESPACE", "blog")
SECTIONS_METAFIELD_KEY = os.getenv("SECTIONS_METAFIELD_KEY", "sections")

# ===========================================
# Quickview Configuration
# ===========================================
QUICKVIEW_METAFIELD_NAMESPACE = os.getenv("QUICKVIEW_METAFIELD_NAMESPACE", "quickview")
QUICKVIEW_SHOP_KEY = os.getenv("QUICKVIEW_SHOP_KEY", "product_config")
QUICKVIEW_COLLECTION_KEY = os.getenv("QUICKVIEW_COLLECTION_KEY", "collection_config")

# ===========================================
# Media Library Configuration
# ===========================================
# Number of files fetched from the Files API
MEDIA_PAGE_SIZE = int(os.getenv("MEDIA_PAGE_SIZE", "50"))

# Number of products scanned for images when the Files API is empty
MEDIA_PRODUCT_FALLBACK_COUNT = int(os.getenv("MEDIA_PRODUCT_FALLBACK_COUNT", "20"))

# ===========================================
# Builder Defaults (for reference)
# ===========================================
SUPPORTED_LAYOUTS = [
    "single-column",
    "two-column",
    "three-column",
]

SUPPORTED_COLUMN_TYPES = [
    "text",
    "image",
]

# Expected column count per layout (not enforced after creation)
LAYOUT_COLUMN_COUNTS = {
    "single-column": 1,
    "two-column": 2,
    "three-column": 3,
}

PLACEHOLDER_CAPTION = "Caption"

DEFAULT_TEXT_STYLE = {"font-size": "16px", "color": "#333"}
DEFAULT_IMAGE_STYLE = {"width": "100%", "height": "auto"}


# ===========================================
# Validation
# ===========================================
def validate_config():
    """Validate required configuration is present"""
    missing = []

    if not SHOPIFY_STORE:
        missing.append("SHOPIFY_STORE")
    if not SHOPIFY_CLIENT_ID:
        missing.append("SHOPIFY_CLIENT_ID")
    if not SHOPIFY_CLIENT_SECRET:
        missing.append("SHOPIFY_CLIENT_SECRET")

    if missing:
        raise ValueError(
            f"Missing required environment variables: {', '.join(missing)}\n"
            "Please copy .env.example to .env and fill in your values."
        )

    return True
