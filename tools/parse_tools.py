"""
Parse Tools - Recover an editable document from article HTML

Used only when an article has no stored sections metafield (for example a
post written before the builder existed, or one whose metafield was lost).
The result is an approximation: ids, style maps and whether an image
placeholder was originally a broken image are not recoverable.
"""

from bs4 import BeautifulSoup
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from config import PLACEHOLDER_CAPTION, DEFAULT_TEXT_STYLE, DEFAULT_IMAGE_STYLE
from tools.document_tools import generate_id


def _class_string(element) -> str:
    """Class attribute as one space-separated string."""
    classes = element.get('class') or []
    if isinstance(classes, str):
        return classes
    return ' '.join(classes)


def _layout_from_classes(class_string: str) -> str:
    if 'two-column' in class_string:
        return 'two-column'
    if 'three-column' in class_string:
        return 'three-column'
    return 'single-column'


def _parse_column(column_el) -> dict:
    """Rebuild one column from its rendered element."""
    if 'image' in _class_string(column_el):
        img = column_el.find('img')
        return {
            "id": generate_id("col"),
            "type": "image",
            "src": (img.get('src') or '') if img else '',
            "alt": (img.get('alt') or PLACEHOLDER_CAPTION) if img else PLACEHOLDER_CAPTION,
            "style": dict(DEFAULT_IMAGE_STYLE),
        }

    return {
        "id": generate_id("col"),
        "type": "text",
        # Markup inside the column is flattened to its text
        "content": column_el.get_text(),
        "style": dict(DEFAULT_TEXT_STYLE),
    }


def parse_html_to_sections(html_content: str) -> list:
    """
    Parse builder-rendered HTML back into a list of sections.

    Every <div> whose class contains "section" becomes a section; its
    layout comes from the "two-column"/"three-column" class. Every
    descendant with class "column" becomes a column, an image column if
    its class contains "image", otherwise a text column.

    Args:
        html_content: Article body HTML

    Returns:
        List of section dicts with fresh ids, or empty list if nothing was found
    """
    if not html_content or not isinstance(html_content, str):
        return []

    try:
        soup = BeautifulSoup(html_content, "html.parser")
    except Exception as e:
        print(f"Warning: Failed to parse article HTML: {e}")
        return []

    sections = []

    for section_el in soup.select('div[class*="section"]'):
        sections.append({
            "id": generate_id("section"),
            "type": _layout_from_classes(_class_string(section_el)),
            "columns": [_parse_column(column_el) for column_el in section_el.select('.column')],
        })

    return sections
