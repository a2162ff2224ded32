"""
Blog Sync - Save and load builder posts as Shopify articles

This module provides functions for:
1. Validating and rendering a builder document for saving
2. Creating/updating the article plus its sections metafield
3. Loading an article back into an editable document
4. Listing, deleting and displaying posts
"""

from datetime import datetime, timezone
from typing import Any, Optional
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from config import DEFAULT_AUTHOR, DEFAULT_BLOG_HANDLE
from tools.document_tools import load_document, new_document
from tools.parse_tools import parse_html_to_sections
from tools.render_tools import NoValidContentError, render_valid_sections, validate_sections
from tools.shopify_tools import (
    build_sections_metafield,
    create_article,
    update_article,
    delete_article,
    fetch_article,
    fetch_all_shopify_articles,
    fetch_all_articles_rest,
    find_blog_by_handle,
    from_gid,
    list_media,
)


# =============================================================================
# TAGS
# =============================================================================

def normalize_tags(tags: Any) -> list:
    """
    Normalize tags to a clean list.

    Accepts a comma-separated string ("a, b ,c") or a list. Entries are
    trimmed and empty entries dropped.
    """
    if isinstance(tags, (list, tuple)):
        return [str(tag).strip() for tag in tags if str(tag).strip()]

    if isinstance(tags, str) and tags.strip():
        return [tag.strip() for tag in tags.split(',') if tag.strip()]

    return []


def tags_to_text(tags: Any) -> str:
    """Tags as the comma-separated string shown in the editor."""
    if isinstance(tags, (list, tuple)):
        return ', '.join(str(tag) for tag in tags)
    if isinstance(tags, str):
        return tags
    return ''


# =============================================================================
# SAVE
# =============================================================================

def prepare_blog_payload(sections: list, blog_data: dict) -> dict:
    """
    Validate and render a post before anything is sent to Shopify.

    Args:
        sections: Builder document
        blog_data: Dict with title, author, tags (string or list), excerpt

    Returns:
        dict with keys: success, sections (validated), blogData
        (title, author, tags, excerpt, content), error, error_type
    """
    title = (blog_data.get('title') or '').strip()
    if not title:
        return {
            "success": False,
            "error": "Please enter a title",
            "error_type": "missing_required_field",
        }

    # The saved sections are exactly the ones that were rendered
    valid_sections = validate_sections(sections)
    try:
        content = render_valid_sections(valid_sections)
    except NoValidContentError as e:
        return {
            "success": False,
            "error": str(e),
            "error_type": "no_valid_content",
        }

    return {
        "success": True,
        "sections": valid_sections,
        "blogData": {
            "title": title,
            "author": (blog_data.get('author') or '').strip() or DEFAULT_AUTHOR,
            "tags": normalize_tags(blog_data.get('tags')),
            "excerpt": (blog_data.get('excerpt') or '').strip(),
            "content": content,
        },
    }


def build_article_input(payload: dict, publish: Optional[bool] = None) -> dict:
    """Article input for create/update from a prepared payload."""
    blog_data = payload["blogData"]

    article_input = {
        "title": blog_data["title"],
        "body": blog_data["content"],
        "summary": blog_data["excerpt"],
        "author": {"name": blog_data["author"]},
        "tags": blog_data["tags"],
        "metafields": [build_sections_metafield(payload["sections"])],
    }

    if publish is not None:
        article_input["isPublished"] = publish

    return article_input


async def save_blog_post(
    sections: list,
    blog_data: dict,
    article_id: Optional[str] = None,
    blog_handle: Optional[str] = None,
    publish: Optional[bool] = None,
) -> dict:
    """
    Save a builder post to Shopify.

    The rendered HTML becomes the article body and the validated document
    is stored in the article's sections metafield. Nothing is sent if the
    title is missing or no section is valid. The document passed in is
    never modified.

    Args:
        sections: Builder document
        blog_data: Dict with title, author, tags, excerpt
        article_id: Existing article ID/GID to update; creates a new article if None
        blog_handle: Blog to create new articles in (default DEFAULT_BLOG_HANDLE)
        publish: Set visibility explicitly; left unchanged if None

    Returns:
        dict with keys: success, article_id, handle, error, error_type
    """
    payload = prepare_blog_payload(sections, blog_data)
    if not payload["success"]:
        return payload

    article_input = build_article_input(payload, publish)

    if article_id:
        result = await update_article(article_id, article_input)
    else:
        handle = blog_handle or DEFAULT_BLOG_HANDLE
        blog = await find_blog_by_handle(handle)
        if not blog["success"]:
            return {
                "success": False,
                "error": blog["error"],
                "error_type": "adapter_failure",
            }
        result = await create_article(blog["blog_id"], article_input)

    if not result["success"]:
        return {
            "success": False,
            "error": result["error"],
            "error_type": "adapter_failure",
        }

    article = result["article"]
    return {
        "success": True,
        "article_id": from_gid(article.get("id")),
        "handle": article.get("handle"),
        "sections": payload["sections"],
    }


# =============================================================================
# LOAD
# =============================================================================

def _author_name(author: Any) -> str:
    if isinstance(author, dict):
        return author.get('name') or DEFAULT_AUTHOR
    return author or DEFAULT_AUTHOR


def normalize_article(article: dict) -> dict:
    """
    Flatten a GraphQL or REST article into the post shape used by the builder.
    """
    blog = article.get('blog') or {}

    return {
        "id": from_gid(article.get('id', '')),
        "title": article.get('title', ''),
        "handle": article.get('handle', ''),
        "author": _author_name(article.get('author')),
        "tags": normalize_tags(article.get('tags')),
        "excerpt": article.get('summary') or article.get('summary_html') or '',
        "content": article.get('body') or article.get('body_html') or '',
        "createdAt": article.get('createdAt') or article.get('created_at'),
        "updatedAt": article.get('updatedAt') or article.get('updated_at'),
        "publishedAt": article.get('publishedAt') or article.get('published_at'),
        "blog": blog.get('handle') or blog.get('title') or '',
    }


def sections_from_article(article: dict) -> tuple:
    """
    Build the editable document for an article.

    Prefers the stored sections metafield, falls back to parsing the
    article HTML, and finally to a fresh default document.

    Returns:
        (sections, source) where source is 'metafield', 'html' or 'default'
    """
    metafield = article.get('sectionsMetafield') or {}
    sections = load_document(metafield.get('value'))
    if sections:
        return sections, "metafield"

    sections = parse_html_to_sections(article.get('body') or article.get('body_html') or '')
    if sections:
        return sections, "html"

    return new_document(), "default"


async def load_blog_post(article_id: str) -> dict:
    """
    Load an article for editing.

    Returns:
        dict with keys: success, post, sections, source, error
    """
    result = await fetch_article(article_id)
    if not result["success"]:
        return {"success": False, "error": result["error"]}

    article = result["article"]
    sections, source = sections_from_article(article)

    return {
        "success": True,
        "post": normalize_article(article),
        "sections": sections,
        "source": source,
    }


# =============================================================================
# LIST / DELETE
# =============================================================================

def _sort_key(post: dict) -> datetime:
    value = post.get('createdAt')
    if not value:
        return datetime.min.replace(tzinfo=timezone.utc)
    try:
        return datetime.fromisoformat(str(value).replace('Z', '+00:00'))
    except ValueError:
        return datetime.min.replace(tzinfo=timezone.utc)


async def list_blog_posts() -> dict:
    """
    List all articles, newest first.

    Falls back to the REST API when the GraphQL listing fails or returns
    nothing. Fails only when neither API could list the blogs.

    Returns:
        dict with keys: success, posts, total, source, error
    """
    source = "graphql"
    result = await fetch_all_shopify_articles()

    if not result["articles"]:
        rest_result = await fetch_all_articles_rest()
        if rest_result["success"]:
            source = "rest_api"
            result = rest_result
        elif not result["success"]:
            return {
                "success": False,
                "posts": [],
                "total": 0,
                "error": f"GraphQL: {result['error']}; REST: {rest_result['error']}",
            }

    posts = [normalize_article(article) for article in result["articles"]]
    posts.sort(key=_sort_key, reverse=True)

    return {
        "success": True,
        "posts": posts,
        "total": len(posts),
        "source": source,
    }


async def delete_blog_post(article_id: str) -> dict:
    """
    Delete an article.

    Returns:
        dict with keys: success, deleted_id, error
    """
    if not article_id:
        return {"success": False, "error": "Article ID is required"}

    return await delete_article(article_id)


# =============================================================================
# DISPLAY FUNCTIONS
# =============================================================================

def _format_datetime(dt_str: Optional[str]) -> str:
    """Format datetime string for display."""
    if not dt_str:
        return "—"
    try:
        dt = datetime.fromisoformat(dt_str.replace('Z', '+00:00'))
        return dt.strftime("%Y-%m-%d %H:%M")
    except ValueError:
        return dt_str[:16] if len(dt_str) >= 16 else dt_str


async def show_blog_posts() -> None:
    """Print table of articles."""
    result = await list_blog_posts()

    if not result["success"]:
        print(f"Error: {result.get('error', 'Unknown error')}")
        return

    posts = result["posts"]

    if not posts:
        print("No posts found.")
        return

    print()
    print(f"{'ID':<16} {'TITLE':<42} {'BLOG':<14} {'AUTHOR':<16} {'CREATED':<18} {'PUBLISHED':<18}")
    print("-" * 128)

    for post in posts:
        title = (post.get('title') or '')[:40]
        blog = (post.get('blog') or '')[:12]
        author = (post.get('author') or '')[:14]
        created = _format_datetime(post.get('createdAt'))
        published = _format_datetime(post.get('publishedAt'))
        print(f"{post['id']:<16} {title:<42} {blog:<14} {author:<16} {created:<18} {published:<18}")

    print()
    published_count = sum(1 for p in posts if p.get('publishedAt'))
    print(f"Total: {result['total']} | Published: {published_count} | Hidden: {result['total'] - published_count} (via {result['source']})")


async def show_media() -> None:
    """Print the images available to image columns."""
    result = await list_media()

    if not result["success"]:
        print(f"Error: {result.get('error', 'Unknown error')}")
        return

    print()
    print(f"{'ALT':<40} {'SIZE':<12} URL")
    print("-" * 100)

    for media in result["media"]:
        alt = (media.get('altText') or media.get('alt') or '')[:38]
        size = f"{media.get('width') or '?'}x{media.get('height') or '?'}"
        print(f"{alt:<40} {size:<12} {media.get('url')}")

    print()
    print(f"Total: {len(result['media'])} (from {result['source']})")
