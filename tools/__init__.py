"""
Blog Builder Tools

Functions for building section-based blog posts, rendering them to
article HTML and storing them (plus the quickview settings) in Shopify.
"""

from .reorder_tools import (
    array_move,
    move,
)

from .document_tools import (
    new_document,
    new_section,
    add_section,
    remove_section,
    move_section,
    add_column,
    remove_column,
    move_column,
    change_column_type,
    set_column_content,
    set_column_image,
    set_column_alt,
    media_to_image,
    dump_document,
    load_document,
)

from .render_tools import (
    NoValidContentError,
    validate_sections,
    render_sections_to_html,
)

from .parse_tools import (
    parse_html_to_sections,
)

from .blog_sync import (
    normalize_tags,
    prepare_blog_payload,
    save_blog_post,
    load_blog_post,
    list_blog_posts,
    delete_blog_post,
)

from .quickview_tools import (
    DEFAULT_QUICKVIEW_CONFIG,
    DEFAULT_WIDGET_CONFIG,
    load_quickview_config,
    save_quickview_config,
    public_widget_config,
)

__all__ = [
    # Reordering
    "array_move",
    "move",
    # Document
    "new_document",
    "new_section",
    "add_section",
    "remove_section",
    "move_section",
    "add_column",
    "remove_column",
    "move_column",
    "change_column_type",
    "set_column_content",
    "set_column_image",
    "set_column_alt",
    "media_to_image",
    "dump_document",
    "load_document",
    # Rendering
    "NoValidContentError",
    "validate_sections",
    "render_sections_to_html",
    "parse_html_to_sections",
    # Shopify articles
    "normalize_tags",
    "prepare_blog_payload",
    "save_blog_post",
    "load_blog_post",
    "list_blog_posts",
    "delete_blog_post",
    # Quickview
    "DEFAULT_QUICKVIEW_CONFIG",
    "DEFAULT_WIDGET_CONFIG",
    "load_quickview_config",
    "save_quickview_config",
    "public_widget_config",
]
