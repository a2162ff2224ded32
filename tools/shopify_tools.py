"""
Shopify Tools - Admin API access for the blog builder and quickview panel

This module provides:
1. OAuth token management and GraphQL/REST helpers
2. Blog lookup and article create/update/delete/fetch
3. Metafield read/write (sections side-channel, quickview config)
4. Media library and collection listing
"""

import base64
import json
import mimetypes
import time
from typing import Optional, Any
from datetime import datetime, timedelta, timezone
import aiohttp
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from config import (
    SHOPIFY_STORE,
    SHOPIFY_CLIENT_ID,
    SHOPIFY_CLIENT_SECRET,
    SHOPIFY_API_VERSION,
    REQUEST_TIMEOUT,
    SECTIONS_METAFIELD_NAMESPACE,
    SECTIONS_METAFIELD_KEY,
    MEDIA_PAGE_SIZE,
    MEDIA_PRODUCT_FALLBACK_COUNT,
)
from tools.document_tools import dump_document


# =============================================================================
# OAUTH TOKEN MANAGEMENT
# =============================================================================

class ShopifyTokenManager:
    """
    Manages OAuth access tokens for Shopify API.

    Tokens are obtained via client credentials grant and cached until expiry.
    Tokens are automatically refreshed when they expire (24 hour lifetime).
    """

    def __init__(self):
        self._access_token: Optional[str] = None
        self._expires_at: Optional[datetime] = None

    def is_token_valid(self) -> bool:
        """Check if current token is valid and not expired."""
        if not self._access_token or not self._expires_at:
            return False
        # Refresh 5 minutes before expiry
        return datetime.now(timezone.utc) < (self._expires_at - timedelta(minutes=5))

    async def get_access_token(self) -> Optional[str]:
        """
        Get a valid access token, refreshing if necessary.

        Returns:
            Access token string, or None if unable to obtain token
        """
        if self.is_token_valid():
            return self._access_token

        return await self._fetch_new_token()

    async def _fetch_new_token(self) -> Optional[str]:
        """
        Fetch a new access token using client credentials grant.

        Returns:
            Access token string, or None if request failed
        """
        if not SHOPIFY_STORE or not SHOPIFY_CLIENT_ID or not SHOPIFY_CLIENT_SECRET:
            print("Error: Shopify credentials not configured")
            return None

        token_url = f"https://{SHOPIFY_STORE}.myshopify.com/admin/oauth/access_token"

        try:
            async with aiohttp.ClientSession() as session:
                async with session.post(
                    token_url,
                    data={
                        "grant_type": "client_credentials",
                        "client_id": SHOPIFY_CLIENT_ID,
                        "client_secret": SHOPIFY_CLIENT_SECRET,
                    },
                    headers={"Content-Type": "application/x-www-form-urlencoded"},
                    timeout=aiohttp.ClientTimeout(total=REQUEST_TIMEOUT)
                ) as resp:
                    if resp.status != 200:
                        error_text = await resp.text()
                        print(f"Error fetching Shopify token: {resp.status} - {error_text}")
                        return None

                    result = await resp.json()

                    self._access_token = result.get("access_token")
                    expires_in = result.get("expires_in", 86400)  # Default 24 hours
                    self._expires_at = datetime.now(timezone.utc) + timedelta(seconds=expires_in)

                    return self._access_token

        except aiohttp.ClientError as e:
            print(f"Network error fetching Shopify token: {e}")
            return None
        except Exception as e:
            print(f"Unexpected error fetching Shopify token: {e}")
            return None


# Global token manager instance
_token_manager = ShopifyTokenManager()


# =============================================================================
# ID HELPERS
# =============================================================================

def to_gid(resource: str, resource_id: Any) -> str:
    """Convert a numeric ID to a GID (gid://shopify/{resource}/{id}). GIDs pass through."""
    value = str(resource_id)
    if value.startswith("gid://"):
        return value
    return f"gid://shopify/{resource}/{value}"


def to_article_gid(article_id: Any) -> str:
    return to_gid("Article", article_id)


def from_gid(gid: Any) -> str:
    """Numeric part of a GID (last path segment). Plain IDs pass through."""
    return str(gid).rstrip("/").split("/")[-1]


def format_user_errors(user_errors: list) -> str:
    """Join GraphQL userErrors into one message."""
    return "; ".join([e.get("message", str(e)) for e in user_errors])


# =============================================================================
# SHOPIFY API HELPERS
# =============================================================================

def get_shopify_graphql_url() -> str:
    """Get the Shopify GraphQL Admin API URL."""
    return f"https://{SHOPIFY_STORE}.myshopify.com/admin/api/{SHOPIFY_API_VERSION}/graphql.json"


def get_shopify_rest_url(path: str) -> str:
    """Get a Shopify REST Admin API URL for a path like 'blogs.json'."""
    return f"https://{SHOPIFY_STORE}.myshopify.com/admin/api/{SHOPIFY_API_VERSION}/{path.lstrip('/')}"


async def get_shopify_headers() -> Optional[dict]:
    """
    Get headers for Shopify API calls with a valid access token.

    Returns:
        Headers dict with access token, or None if token unavailable
    """
    access_token = await _token_manager.get_access_token()
    if not access_token:
        return None

    return {
        "Content-Type": "application/json",
        "X-Shopify-Access-Token": access_token,
    }


async def execute_shopify_graphql(query: str, variables: dict = None) -> dict:
    """
    Execute a GraphQL query against Shopify Admin API.

    Args:
        query: GraphQL query string
        variables: Query variables dict

    Returns:
        Response data or error dict
    """
    if not SHOPIFY_STORE or not SHOPIFY_CLIENT_ID or not SHOPIFY_CLIENT_SECRET:
        return {"error": "Shopify credentials not configured"}

    headers = await get_shopify_headers()
    if not headers:
        return {"error": "Failed to obtain Shopify access token"}

    payload = {"query": query}
    if variables:
        payload["variables"] = variables

    try:
        async with aiohttp.ClientSession() as session:
            async with session.post(
                get_shopify_graphql_url(),
                headers=headers,
                json=payload,
                timeout=aiohttp.ClientTimeout(total=REQUEST_TIMEOUT)
            ) as resp:
                if resp.status != 200:
                    error_text = await resp.text()
                    return {"error": f"API Error: {resp.status} - {error_text}"}

                result = await resp.json()

                # Check for top-level errors
                if "errors" in result:
                    error_messages = [e.get("message", str(e)) for e in result["errors"]]
                    return {"error": "; ".join(error_messages)}

                return result.get("data") or {}

    except aiohttp.ClientError as e:
        return {"error": f"Network error: {str(e)}"}
    except Exception as e:
        return {"error": f"Unexpected error: {str(e)}"}


async def execute_shopify_rest(method: str, path: str, params: dict = None) -> dict:
    """
    Call the Shopify REST Admin API.

    Args:
        method: HTTP method ('GET', 'DELETE', ...)
        path: Resource path such as 'blogs.json'
        params: Query string parameters

    Returns:
        Decoded JSON body (empty dict for empty bodies) or error dict
    """
    if not SHOPIFY_STORE or not SHOPIFY_CLIENT_ID or not SHOPIFY_CLIENT_SECRET:
        return {"error": "Shopify credentials not configured"}

    headers = await get_shopify_headers()
    if not headers:
        return {"error": "Failed to obtain Shopify access token"}

    try:
        async with aiohttp.ClientSession() as session:
            async with session.request(
                method,
                get_shopify_rest_url(path),
                headers=headers,
                params=params,
                timeout=aiohttp.ClientTimeout(total=REQUEST_TIMEOUT)
            ) as resp:
                if resp.status >= 400:
                    error_text = await resp.text()
                    return {"error": f"REST API failed: {resp.status} - {error_text}"}

                text = await resp.text()
                if not text.strip():
                    return {}
                return json.loads(text)

    except aiohttp.ClientError as e:
        return {"error": f"Network error: {str(e)}"}
    except Exception as e:
        return {"error": f"Unexpected error: {str(e)}"}


# =============================================================================
# BLOG LOOKUP
# =============================================================================

# In-memory cache of handle -> blog gid for the current process
_blog_cache: dict[str, str] = {}


async def fetch_all_shopify_blogs() -> dict:
    """
    Fetch all blogs from Shopify.

    Each blog dict has: id (gid), title, handle
    Uses cursor-based pagination.

    Returns:
        dict with keys: success, blogs, error. Fails only if the first
        page can't be fetched; a later page error keeps the blogs so far.
    """
    all_blogs = []
    cursor = None
    page_size = 100

    while True:
        after_clause = f', after: "{cursor}"' if cursor else ""

        query = f"""
        query FetchBlogs {{
            blogs(first: {page_size}{after_clause}) {{
                pageInfo {{
                    hasNextPage
                    endCursor
                }}
                nodes {{
                    id
                    title
                    handle
                }}
            }}
        }}
        """

        result = await execute_shopify_graphql(query)

        if "error" in result:
            if not all_blogs:
                print(f"Error fetching blogs: {result['error']}")
                return {"success": False, "blogs": [], "error": result["error"]}
            break

        blogs_data = result.get("blogs", {})
        nodes = blogs_data.get("nodes", [])

        if not nodes:
            break

        all_blogs.extend(nodes)

        page_info = blogs_data.get("pageInfo", {})
        if not page_info.get("hasNextPage"):
            break

        cursor = page_info.get("endCursor")
        if not cursor:
            break

    return {"success": True, "blogs": all_blogs}


async def find_blog_by_handle(handle: str) -> dict:
    """
    Find an existing Shopify blog by handle.

    Args:
        handle: Blog handle to search for

    Returns:
        dict with keys: success, blog_id (GID), error. A failed lookup
        keeps the API error; a missing blog reports "Blog '<handle>' not found".
    """
    if handle in _blog_cache:
        return {"success": True, "blog_id": _blog_cache[handle]}

    # blogByHandle doesn't exist in the Admin API, filter the blogs query instead
    query = """
    query FindBlogByHandle($query: String!) {
        blogs(first: 1, query: $query) {
            nodes {
                id
                handle
                title
            }
        }
    }
    """
    result = await execute_shopify_graphql(query, {"query": f"handle:{handle}"})

    if "error" in result:
        return {"success": False, "error": result["error"]}

    blogs = (result.get("blogs") or {}).get("nodes", [])
    if blogs:
        gid = blogs[0].get("id")
        _blog_cache[handle] = gid
        return {"success": True, "blog_id": gid}

    return {"success": False, "error": f"Blog '{handle}' not found"}


def clear_sync_cache():
    """Clear the in-memory blog cache."""
    global _blog_cache
    _blog_cache = {}


# =============================================================================
# ARTICLES
# =============================================================================

ARTICLE_FIELDS = """
    id
    title
    handle
    body
    summary
    tags
    createdAt
    updatedAt
    publishedAt
    isPublished
    author {
        name
    }
    blog {
        id
        handle
        title
    }
"""


def build_sections_metafield(sections: list) -> dict:
    """Metafield input holding the builder document as JSON."""
    return {
        "namespace": SECTIONS_METAFIELD_NAMESPACE,
        "key": SECTIONS_METAFIELD_KEY,
        "value": dump_document(sections),
        "type": "json",
    }


async def create_article(blog_gid: str, article_input: dict) -> dict:
    """
    Create a Shopify article.

    Args:
        blog_gid: Blog the article belongs to
        article_input: ArticleCreateInput fields (title, body, author, tags, ...)

    Returns:
        dict with keys: success, article, error
    """
    query = """
    mutation CreateArticle($article: ArticleCreateInput!) {
        articleCreate(article: $article) {
            article { id title handle }
            userErrors { code field message }
        }
    }
    """
    result = await execute_shopify_graphql(query, {"article": {**article_input, "blogId": blog_gid}})

    if "error" in result:
        return {"success": False, "error": result["error"]}

    create_result = result.get("articleCreate") or {}
    user_errors = create_result.get("userErrors", [])
    if user_errors:
        return {"success": False, "error": format_user_errors(user_errors)}

    article = create_result.get("article")
    if not article:
        return {"success": False, "error": "Article was not created"}

    return {"success": True, "article": article}


async def update_article(article_id: Any, article_input: dict) -> dict:
    """
    Update a Shopify article.

    Args:
        article_id: Numeric article ID or GID
        article_input: ArticleUpdateInput fields

    Returns:
        dict with keys: success, article, error
    """
    query = """
    mutation UpdateArticle($id: ID!, $article: ArticleUpdateInput!) {
        articleUpdate(id: $id, article: $article) {
            article { id title handle }
            userErrors { code field message }
        }
    }
    """
    result = await execute_shopify_graphql(query, {
        "id": to_article_gid(article_id),
        "article": article_input,
    })

    if "error" in result:
        return {"success": False, "error": result["error"]}

    update_result = result.get("articleUpdate") or {}
    user_errors = update_result.get("userErrors", [])
    if user_errors:
        return {"success": False, "error": format_user_errors(user_errors)}

    article = update_result.get("article")
    if not article:
        return {"success": False, "error": "Article was not updated"}

    return {"success": True, "article": article}


async def fetch_article(article_id: Any) -> dict:
    """
    Fetch one article with its stored sections metafield.

    Returns:
        dict with keys: success, article (metafield under 'sectionsMetafield'), error
    """
    query = f"""
    query FetchArticle($id: ID!, $namespace: String!, $key: String!) {{
        article(id: $id) {{
            {ARTICLE_FIELDS}
            sectionsMetafield: metafield(namespace: $namespace, key: $key) {{
                id
                value
                type
            }}
        }}
    }}
    """
    result = await execute_shopify_graphql(query, {
        "id": to_article_gid(article_id),
        "namespace": SECTIONS_METAFIELD_NAMESPACE,
        "key": SECTIONS_METAFIELD_KEY,
    })

    if "error" in result:
        return {"success": False, "error": result["error"]}

    article = result.get("article")
    if not article:
        return {"success": False, "error": f"Article {from_gid(article_id)} not found"}

    return {"success": True, "article": article}


async def fetch_all_shopify_articles() -> dict:
    """
    Fetch all articles from all blogs in Shopify.

    Uses cursor-based pagination for each blog. A blog whose articles
    can't be fetched is skipped with a warning.

    Returns:
        dict with keys: success, articles, error (set when the blogs
        themselves can't be listed)
    """
    blogs_result = await fetch_all_shopify_blogs()
    if not blogs_result["success"]:
        return {"success": False, "articles": [], "error": blogs_result["error"]}

    all_articles = []

    for blog in blogs_result["blogs"]:
        blog_gid = blog.get("id")
        cursor = None
        page_size = 50

        while True:
            after_clause = f', after: "{cursor}"' if cursor else ""

            query = f"""
            query FetchArticles($blogId: ID!) {{
                blog(id: $blogId) {{
                    articles(first: {page_size}{after_clause}) {{
                        pageInfo {{
                            hasNextPage
                            endCursor
                        }}
                        nodes {{
                            {ARTICLE_FIELDS}
                        }}
                    }}
                }}
            }}
            """

            result = await execute_shopify_graphql(query, {"blogId": blog_gid})

            if "error" in result:
                print(f"Warning: Failed to fetch articles for blog {blog.get('handle', blog_gid)}: {result['error']}")
                break

            blog_data = result.get("blog") or {}
            articles_data = blog_data.get("articles", {})
            nodes = articles_data.get("nodes", [])

            if not nodes:
                break

            all_articles.extend(nodes)

            page_info = articles_data.get("pageInfo", {})
            if not page_info.get("hasNextPage"):
                break

            cursor = page_info.get("endCursor")
            if not cursor:
                break

    return {"success": True, "articles": all_articles}


# REST Admin API page size cap
REST_PAGE_LIMIT = 250


async def _fetch_blog_articles_rest(blog_id: Any) -> dict:
    """
    Fetch every article in one blog via REST, paging with since_id.

    Returns:
        dict with keys: success, articles, error
    """
    all_articles = []
    since_id = None

    while True:
        params = {"limit": REST_PAGE_LIMIT}
        if since_id is not None:
            params["since_id"] = since_id

        result = await execute_shopify_rest("GET", f"blogs/{blog_id}/articles.json", params)
        if "error" in result:
            return {"success": False, "articles": all_articles, "error": result["error"]}

        page = result.get("articles", [])
        all_articles.extend(page)

        if len(page) < REST_PAGE_LIMIT:
            break
        since_id = page[-1].get("id")

    return {"success": True, "articles": all_articles}


async def fetch_all_articles_rest() -> dict:
    """
    Fetch all articles through the REST Admin API.

    Fallback for when the GraphQL listing returns nothing. Each article
    dict gets a 'blog' entry with the owning blog's id, handle and title.

    Returns:
        dict with keys: success, articles, error
    """
    blogs_result = await execute_shopify_rest("GET", "blogs.json")
    if "error" in blogs_result:
        print(f"Error fetching blogs via REST: {blogs_result['error']}")
        return {"success": False, "articles": [], "error": blogs_result["error"]}

    all_articles = []
    for blog in blogs_result.get("blogs", []):
        articles_result = await _fetch_blog_articles_rest(blog["id"])
        if not articles_result["success"]:
            print(f"Warning: Failed to fetch articles for blog {blog.get('handle', blog['id'])}: {articles_result['error']}")

        for article in articles_result["articles"]:
            article["blog"] = {
                "id": blog.get("id"),
                "handle": blog.get("handle"),
                "title": blog.get("title"),
            }
            all_articles.append(article)

    return {"success": True, "articles": all_articles}


async def _delete_article_rest(article_id: str) -> dict:
    """Find the article in any blog via REST and delete it there."""
    blogs_result = await execute_shopify_rest("GET", "blogs.json")
    if "error" in blogs_result:
        return {"success": False, "error": blogs_result["error"]}

    for blog in blogs_result.get("blogs", []):
        articles_result = await _fetch_blog_articles_rest(blog["id"])
        if not articles_result["success"]:
            print(f"Warning: Error checking blog {blog['id']}: {articles_result['error']}")

        if any(str(a.get("id")) == article_id for a in articles_result["articles"]):
            delete_result = await execute_shopify_rest("DELETE", f"blogs/{blog['id']}/articles/{article_id}.json")
            if "error" in delete_result:
                return {"success": False, "error": delete_result["error"]}
            return {"success": True, "deleted_id": article_id}

    return {"success": False, "error": "Article not found in any blog"}


async def delete_article(article_id: Any) -> dict:
    """
    Delete an article. Tries GraphQL first, then searches all blogs via REST.

    Returns:
        dict with keys: success, deleted_id, error
    """
    query = """
    mutation DeleteArticle($id: ID!) {
        articleDelete(id: $id) {
            deletedArticleId
            userErrors { code field message }
        }
    }
    """
    result = await execute_shopify_graphql(query, {"id": to_article_gid(article_id)})

    if "error" not in result:
        delete_result = result.get("articleDelete") or {}
        user_errors = delete_result.get("userErrors", [])
        if not user_errors:
            return {"success": True, "deleted_id": from_gid(article_id)}
        graphql_error = format_user_errors(user_errors)
    else:
        graphql_error = result["error"]

    print(f"GraphQL delete failed ({graphql_error}), trying REST API...")
    rest_result = await _delete_article_rest(from_gid(article_id))
    if not rest_result["success"]:
        return {
            "success": False,
            "error": f"Both GraphQL and REST API failed: {rest_result['error']}",
        }
    return rest_result


# =============================================================================
# METAFIELDS
# =============================================================================

async def get_shop_id() -> dict:
    """
    Get the shop's GID (owner of shop-level metafields).

    Returns:
        dict with keys: success, shop_id, error
    """
    result = await execute_shopify_graphql("query GetShop { shop { id } }")

    if "error" in result:
        return {"success": False, "error": result["error"]}

    shop_id = (result.get("shop") or {}).get("id")
    if not shop_id:
        return {"success": False, "error": "Shop ID not returned"}

    return {"success": True, "shop_id": shop_id}


async def set_metafields(metafields: list) -> dict:
    """
    Write metafields with metafieldsSet.

    Args:
        metafields: List of MetafieldsSetInput dicts (ownerId, namespace, key, type, value)

    Returns:
        dict with keys: success, metafields, error
    """
    query = """
    mutation SetMetafields($metafields: [MetafieldsSetInput!]!) {
        metafieldsSet(metafields: $metafields) {
            metafields { id key namespace value type }
            userErrors { code field message }
        }
    }
    """
    result = await execute_shopify_graphql(query, {"metafields": metafields})

    if "error" in result:
        return {"success": False, "error": result["error"]}

    set_result = result.get("metafieldsSet") or {}
    user_errors = set_result.get("userErrors", [])
    if user_errors:
        return {"success": False, "error": format_user_errors(user_errors)}

    return {"success": True, "metafields": set_result.get("metafields", [])}


async def fetch_metafield(owner_id: str, namespace: str, key: str) -> dict:
    """
    Read one metafield from any owner (shop, collection, article, ...).

    Returns:
        dict with keys: success, metafield (None if not set), error
    """
    query = """
    query FetchMetafield($ownerId: ID!, $namespace: String!, $key: String!) {
        node(id: $ownerId) {
            ... on HasMetafields {
                metafield(namespace: $namespace, key: $key) {
                    id
                    key
                    namespace
                    value
                    type
                }
            }
        }
    }
    """
    result = await execute_shopify_graphql(query, {
        "ownerId": owner_id,
        "namespace": namespace,
        "key": key,
    })

    if "error" in result:
        return {"success": False, "error": result["error"]}

    node = result.get("node") or {}
    return {"success": True, "metafield": node.get("metafield")}


# =============================================================================
# MEDIA LIBRARY
# =============================================================================

async def _list_file_images() -> list:
    query = """
    query ListFiles($first: Int!) {
        files(first: $first) {
            nodes {
                id
                fileStatus
                alt
                ... on MediaImage {
                    image {
                        id
                        url
                        width
                        height
                        altText
                    }
                }
            }
        }
    }
    """
    result = await execute_shopify_graphql(query, {"first": MEDIA_PAGE_SIZE})

    if "error" in result:
        print(f"Warning: Files API failed: {result['error']}")
        return []

    media = []
    for node in (result.get("files") or {}).get("nodes", []):
        image = node.get("image") or {}
        if not image.get("url"):
            continue
        media.append({
            "id": node.get("id"),
            "type": "IMAGE",
            "status": node.get("fileStatus"),
            "alt": node.get("alt"),
            "url": image.get("url"),
            "width": image.get("width"),
            "height": image.get("height"),
            "altText": image.get("altText"),
        })
    return media


async def _list_product_images() -> list:
    query = """
    query ListProductImages($first: Int!) {
        products(first: $first) {
            nodes {
                id
                title
                images(first: 5) {
                    nodes {
                        id
                        url
                        width
                        height
                        altText
                    }
                }
            }
        }
    }
    """
    result = await execute_shopify_graphql(query, {"first": MEDIA_PRODUCT_FALLBACK_COUNT})

    if "error" in result:
        print(f"Warning: Products image lookup failed: {result['error']}")
        return []

    media = []
    for product in (result.get("products") or {}).get("nodes", []):
        for image in (product.get("images") or {}).get("nodes", []):
            media.append({
                "id": image.get("id"),
                "type": "IMAGE",
                "status": "ACTIVE",
                "alt": image.get("altText") or product.get("title"),
                "url": image.get("url"),
                "width": image.get("width"),
                "height": image.get("height"),
                "altText": image.get("altText") or product.get("title"),
                "productTitle": product.get("title"),
            })
    return media


async def list_media() -> dict:
    """
    List images for the image-column picker.

    Uses the Files API first (includes freshly uploaded images) and
    falls back to product images when it returns nothing.

    Returns:
        dict with keys: success, media, source, error
    """
    media = await _list_file_images()
    if media:
        return {"success": True, "media": media, "source": "files"}

    media = await _list_product_images()
    if media:
        return {"success": True, "media": media, "source": "products"}

    return {"success": False, "media": [], "error": "Could not fetch media list"}


def encode_upload_as_data_url(file_path: str, alt_text: str = "") -> dict:
    """
    Turn a local image file into a data URL the builder can use as an image src.

    The image is embedded in the article body rather than uploaded to
    Shopify Files.

    Returns:
        dict with keys: success, file (id, alt, url), error
    """
    if not os.path.isfile(file_path):
        return {"success": False, "error": f"File not found: {file_path}"}

    mime_type, _ = mimetypes.guess_type(file_path)
    if not mime_type or not mime_type.startswith("image/"):
        return {"success": False, "error": f"Not an image file: {file_path}"}

    with open(file_path, "rb") as f:
        encoded = base64.b64encode(f.read()).decode("ascii")

    return {
        "success": True,
        "file": {
            "id": f"temp-{int(time.time() * 1000)}",
            "alt": alt_text,
            "url": f"data:{mime_type};base64,{encoded}",
        },
    }


# =============================================================================
# COLLECTIONS
# =============================================================================

async def list_collections(first: int = 50) -> dict:
    """
    List collections for the quickview panel's collection picker.

    Returns:
        dict with keys: success, collections (id, title, handle), error
    """
    query = """
    query ListCollections($first: Int!) {
        collections(first: $first) {
            nodes {
                id
                title
                handle
            }
        }
    }
    """
    result = await execute_shopify_graphql(query, {"first": first})

    if "error" in result:
        return {"success": False, "collections": [], "error": result["error"]}

    return {"success": True, "collections": (result.get("collections") or {}).get("nodes", [])}


async def fetch_collection(collection_id: Any) -> Optional[dict]:
    """
    Look up a collection by ID or GID.

    Returns:
        Collection dict (id, title, handle), or None if missing or on error
    """
    query = """
    query FetchCollection($id: ID!) {
        collection(id: $id) {
            id
            title
            handle
        }
    }
    """
    result = await execute_shopify_graphql(query, {"id": to_gid("Collection", collection_id)})

    if "error" in result:
        print(f"Warning: Collection lookup failed: {result['error']}")
        return None

    return result.get("collection")
