"""
Document Tools - The blog builder's section/column document

A document is a list of sections, each holding an ordered list of columns.
Everything is plain JSON-compatible dicts so the same structure is stored
in the article's sections metafield and loaded back into the builder.

Section:
    {"id": "section-...", "type": "two-column", "columns": [...]}

Column (text):
    {"id": "col-...", "type": "text", "content": "...", "style": {...}}

Column (image):
    {"id": "col-...", "type": "image", "src": "...", "alt": "...", "style": {...}}

All edit functions return a new document and leave the one passed in
untouched. IDs that don't exist are ignored and an equal document is
returned.
"""

import json
import uuid
from typing import Any, Callable, Optional
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from config import (
    SUPPORTED_LAYOUTS,
    SUPPORTED_COLUMN_TYPES,
    LAYOUT_COLUMN_COUNTS,
    PLACEHOLDER_CAPTION,
    DEFAULT_TEXT_STYLE,
    DEFAULT_IMAGE_STYLE,
)
from tools.reorder_tools import move


# =============================================================================
# ID GENERATION
# =============================================================================

def generate_id(prefix: str) -> str:
    """Generate a unique section/column ID, e.g. 'section-3f9a0c12b7de'."""
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


# =============================================================================
# CONSTRUCTORS
# =============================================================================

def new_text_column(content: str = 'New Text...') -> dict:
    """Create a text column with the default text style."""
    return {
        "id": generate_id("col"),
        "type": "text",
        "content": content,
        "style": dict(DEFAULT_TEXT_STYLE),
    }


def new_image_column(src: str = '', alt: str = PLACEHOLDER_CAPTION) -> dict:
    """Create an image column. An empty src means no image picked yet."""
    return {
        "id": generate_id("col"),
        "type": "image",
        "src": src,
        "alt": alt,
        "style": dict(DEFAULT_IMAGE_STYLE),
    }


def new_section(layout: str) -> dict:
    """
    Create a section pre-filled with placeholder text columns.

    The number of columns follows the layout: 1, 2 or 3.

    Raises:
        ValueError: If layout is not a supported layout
    """
    if layout not in SUPPORTED_LAYOUTS:
        raise ValueError(
            f"Unknown layout '{layout}'. Expected one of: {', '.join(SUPPORTED_LAYOUTS)}"
        )

    count = LAYOUT_COLUMN_COUNTS[layout]
    if count == 1:
        columns = [new_text_column('New Text...')]
    else:
        columns = [new_text_column(f'Text {i + 1}...') for i in range(count)]

    return {
        "id": generate_id("section"),
        "type": layout,
        "columns": columns,
    }


def new_document() -> list:
    """Starting document for a new post: one two-column section, text + image."""
    return [
        {
            "id": generate_id("section"),
            "type": "two-column",
            "columns": [
                new_text_column('Content...'),
                new_image_column(),
            ],
        }
    ]


# =============================================================================
# LOOKUP
# =============================================================================

def find_section(sections: list, section_id: str) -> Optional[dict]:
    """Return the section with this ID, or None."""
    for section in sections:
        if section.get('id') == section_id:
            return section
    return None


def find_column(sections: list, section_id: str, column_id: str) -> Optional[dict]:
    """Return the column with this ID inside the given section, or None."""
    section = find_section(sections, section_id)
    if section is None:
        return None
    for column in section.get('columns') or []:
        if column.get('id') == column_id:
            return column
    return None


def _update_section(sections: list, section_id: str, update: Callable[[dict], dict]) -> list:
    """Copy the document, replacing the matching section with update(section)."""
    return [
        update(section) if section.get('id') == section_id else section
        for section in sections
    ]


def _update_column(
    sections: list,
    section_id: str,
    column_id: str,
    update: Callable[[dict], dict],
) -> list:
    """Copy the document, replacing the matching column with update(column)."""
    def update_section(section: dict) -> dict:
        return {
            **section,
            "columns": [
                update(column) if column.get('id') == column_id else column
                for column in section.get('columns') or []
            ],
        }

    return _update_section(sections, section_id, update_section)


# =============================================================================
# SECTION OPERATIONS
# =============================================================================

def add_section(sections: list, layout: str) -> list:
    """Append a new section with placeholder columns for the layout."""
    return [*sections, new_section(layout)]


def remove_section(sections: list, section_id: str) -> list:
    """Delete the section with this ID."""
    return [section for section in sections if section.get('id') != section_id]


def move_section(sections: list, active_id: str, over_id: str) -> list:
    """Drag-and-drop reorder of sections."""
    return move(sections, active_id, over_id)


# =============================================================================
# COLUMN OPERATIONS
# =============================================================================

def add_column(sections: list, section_id: str) -> list:
    """Append a placeholder text column to the section."""
    return _update_section(
        sections,
        section_id,
        lambda section: {**section, "columns": [*(section.get('columns') or []), new_text_column()]},
    )


def remove_column(sections: list, section_id: str, column_id: str) -> list:
    """
    Delete a column from a section.

    A section may end up with no columns; such sections are dropped
    when the post is rendered for saving.
    """
    return _update_section(
        sections,
        section_id,
        lambda section: {
            **section,
            "columns": [c for c in section.get('columns') or [] if c.get('id') != column_id],
        },
    )


def move_column(sections: list, section_id: str, active_id: str, over_id: str) -> list:
    """Drag-and-drop reorder of columns inside one section."""
    return _update_section(
        sections,
        section_id,
        lambda section: {**section, "columns": move(section.get('columns') or [], active_id, over_id)},
    )


def change_column_type(sections: list, section_id: str, column_id: str, new_type: str) -> list:
    """
    Convert a column between text and image.

    The conversion drops the old type's data: switching to image clears the
    text content, switching to text clears the image src and alt. Text
    content already on the column is kept when switching back to text.

    Raises:
        ValueError: If new_type is not 'text' or 'image'
    """
    if new_type not in SUPPORTED_COLUMN_TYPES:
        raise ValueError(
            f"Unknown column type '{new_type}'. Expected one of: {', '.join(SUPPORTED_COLUMN_TYPES)}"
        )

    def convert(column: dict) -> dict:
        if column.get('type') == new_type:
            return column

        if new_type == 'image':
            return {
                "id": column['id'],
                "type": "image",
                "src": '',
                "alt": PLACEHOLDER_CAPTION,
                "style": dict(DEFAULT_IMAGE_STYLE),
            }

        return {
            "id": column['id'],
            "type": "text",
            "content": column.get('content') or '',
            "style": dict(DEFAULT_TEXT_STYLE),
        }

    return _update_column(sections, section_id, column_id, convert)


def _when_type(column_type: str, update: Callable[[dict], dict]) -> Callable[[dict], dict]:
    """Apply update only to columns of this type; other columns are returned as-is."""
    return lambda column: update(column) if column.get('type') == column_type else column


def set_column_content(sections: list, section_id: str, column_id: str, content: str) -> list:
    """Set the text/HTML content of a text column. Image columns are left unchanged."""
    return _update_column(
        sections, section_id, column_id,
        _when_type('text', lambda column: {**column, "content": content}),
    )


def set_column_image(
    sections: list,
    section_id: str,
    column_id: str,
    src: str,
    alt: Optional[str] = None,
) -> list:
    """
    Set (or clear, with src='') the image of an image column.

    Alt defaults to the placeholder caption. Text columns are left unchanged;
    switch them with set_column_type first.
    """
    return _update_column(
        sections, section_id, column_id,
        _when_type('image', lambda column: {**column, "src": src, "alt": alt or PLACEHOLDER_CAPTION}),
    )


def set_column_alt(sections: list, section_id: str, column_id: str, alt: str) -> list:
    """Set the caption/alt text of an image column."""
    return _update_column(
        sections, section_id, column_id,
        _when_type('image', lambda column: {**column, "alt": alt}),
    )


def media_to_image(asset: dict) -> dict:
    """
    Turn a media library asset into the src/alt pair for set_column_image.

    Assets come from list_media() and carry 'url' plus 'altText' and/or 'alt'.
    """
    return {
        "src": asset.get('url') or '',
        "alt": asset.get('altText') or asset.get('alt') or PLACEHOLDER_CAPTION,
    }


# =============================================================================
# JSON (SECTIONS SIDE-CHANNEL)
# =============================================================================

def dump_document(sections: list) -> str:
    """Serialize a document to the JSON stored in the sections metafield."""
    return json.dumps(sections, ensure_ascii=False)


def load_document(data: Any) -> list:
    """
    Load a document from metafield JSON.

    Accepts JSON text or already-decoded data. Values wrapped as
    {"sections": [...]} are unwrapped.

    Returns:
        List of sections, or empty list if the data isn't a document
    """
    if isinstance(data, (str, bytes)):
        if not data:
            return []
        try:
            data = json.loads(data)
        except json.JSONDecodeError as e:
            print(f"Warning: Stored sections are not valid JSON: {e}")
            return []

    if isinstance(data, dict):
        data = data.get('sections')

    if not isinstance(data, list):
        return []

    return [section for section in data if isinstance(section, dict)]
