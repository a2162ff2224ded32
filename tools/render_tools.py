"""
Render Tools - Section/column document to Shopify article HTML

This module provides:
1. Validation pass that drops sections/columns the renderer can't use
2. Per-section CSS (scoped by positional ID) and markup
3. The global stylesheet and blog-post wrapper

The output is a self-contained HTML fragment for the article body: one
global <style> block, then one <style> block per section followed by the
section's markup.
"""

import html
from typing import Optional


class NoValidContentError(ValueError):
    """Raised when no section survives validation, so there is nothing to save."""


# =============================================================================
# HTML ESCAPE UTILITIES
# =============================================================================

def escape_attr(value) -> str:
    """Escape a value for use inside a double-quoted HTML attribute."""
    return html.escape(str(value), quote=True)


def style_to_css(style: Optional[dict]) -> str:
    """Flatten a style map into an inline style attribute ('key: value; key: value')."""
    if not style or not isinstance(style, dict):
        return ''
    return '; '.join(f'{key}: {value}' for key, value in style.items())


def is_valid_image_url(src: Optional[str]) -> bool:
    """Absolute http(s) URLs, data URLs and root-relative paths are rendered as images."""
    if not src or not isinstance(src, str):
        return False
    return src.startswith('http') or src.startswith('data:') or src.startswith('/')


# =============================================================================
# VALIDATION
# =============================================================================

def validate_sections(sections: list) -> list:
    """
    Filter a document down to the sections and columns that can be rendered.

    - Sections without an id or type, or without a columns list, are dropped.
    - Columns without an id or type are dropped.
    - Image columns without a src are kept; they render as a placeholder.
    - Sections left with no columns are dropped.

    The document passed in is not modified.

    Returns:
        New list of valid sections (may be empty)
    """
    if not sections or not isinstance(sections, list):
        return []

    valid_sections = []

    for index, section in enumerate(sections):
        if not isinstance(section, dict) or not section.get('id') or not section.get('type'):
            print(f"Warning: Section {index} missing required fields, skipping")
            continue

        columns = section.get('columns')
        if not isinstance(columns, list):
            print(f"Warning: Section {index} missing or invalid columns, skipping")
            continue

        valid_columns = []
        for col_index, column in enumerate(columns):
            if not isinstance(column, dict) or not column.get('id') or not column.get('type'):
                print(f"Warning: Column {col_index} in section {index} missing required fields, skipping")
                continue

            if column.get('type') == 'image' and not column.get('src'):
                # Kept: renders as a visible placeholder
                print(f"Warning: Image column {col_index} in section {index} has no src")

            valid_columns.append(column)

        if not valid_columns:
            print(f"Warning: Section {index} has no valid columns, skipping")
            continue

        valid_sections.append({**section, "columns": valid_columns})

    return valid_sections


# =============================================================================
# COLUMN RENDERER
# =============================================================================

def render_column(column: dict) -> str:
    """Render a single column to HTML."""
    column_type = column.get('type', '')
    column_id = escape_attr(column.get('id', ''))

    if column_type == 'text':
        # Content is user-authored HTML, pass through
        return f'<div class="column text" data-column-id="{column_id}">{column.get("content") or ""}</div>'

    if column_type == 'image':
        src = column.get('src') or ''
        alt = column.get('alt') or 'Image'

        if is_valid_image_url(src):
            return f'''<div class="column image" data-column-id="{column_id}">
  <img src="{escape_attr(src)}" alt="{escape_attr(alt)}" style="{escape_attr(style_to_css(column.get('style')))}" />
</div>'''

        return f'''<div class="column image error" data-column-id="{column_id}">
  <div class="image-placeholder" style="padding: 20px; text-align: center; background: #f8f9fa; border: 2px dashed #dee2e6; border-radius: 8px; color: #6c757d;">
    <p>&#9888;&#65039; Image not available</p>
    <small>{html.escape(alt)}</small>
  </div>
</div>'''

    return ''


# =============================================================================
# SECTION CSS
# =============================================================================

def _multi_column_css(
    scope: str,
    column_width: str,
    gap: str,
    text_padding: str,
    placeholder_height: str,
) -> str:
    """Flex row CSS shared by the two- and three-column layouts."""
    return f'''<style>
  {scope} {{
    display: flex;
    flex-wrap: nowrap;
    gap: {gap};
    margin-bottom: 30px;
    width: 100%;
  }}
  {scope} .column {{
    flex: 1 1 0;
    min-width: 0;
    box-sizing: border-box;
    width: {column_width};
  }}
  {scope} .column.text {{
    padding: {text_padding};
    background: #f8f9fa;
    border-radius: 8px;
    border: 1px solid #e9ecef;
    word-wrap: break-word;
    overflow-wrap: break-word;
  }}
  {scope} .column.image {{
    display: flex;
    align-items: center;
    justify-content: center;
  }}
  {scope} .column.image img {{
    width: 100%;
    height: auto;
    border-radius: 8px;
    box-shadow: 0 2px 8px rgba(0,0,0,0.1);
    object-fit: cover;
  }}
  {scope} .column.image.error .image-placeholder {{
    min-height: {placeholder_height};
    display: flex;
    flex-direction: column;
    align-items: center;
    justify-content: center;
  }}
  @media (max-width: 768px) {{
    {scope} {{
      flex-direction: column;
      gap: 15px;
    }}
    {scope} .column {{
      flex: none;
      width: 100%;
    }}
  }}
</style>'''


def _single_column_css(scope: str) -> str:
    """Stacked block CSS for the single-column layout."""
    return f'''<style>
  {scope} {{
    margin-bottom: 30px;
    width: 100%;
  }}
  {scope} .column {{
    width: 100%;
    box-sizing: border-box;
  }}
  {scope} .column.text {{
    padding: 20px;
    background: #f8f9fa;
    border-radius: 8px;
    border: 1px solid #e9ecef;
    word-wrap: break-word;
    overflow-wrap: break-word;
  }}
  {scope} .column.image {{
    display: flex;
    align-items: center;
    justify-content: center;
  }}
  {scope} .column.image img {{
    width: 100%;
    height: auto;
    border-radius: 8px;
    box-shadow: 0 2px 8px rgba(0,0,0,0.1);
  }}
  {scope} .column.image.error .image-placeholder {{
    min-height: 150px;
    display: flex;
    flex-direction: column;
    align-items: center;
    justify-content: center;
  }}
</style>'''


def render_section_css(layout: str, section_dom_id: str) -> str:
    """CSS block for one section, scoped by its positional DOM id."""
    if layout == 'two-column':
        return _multi_column_css(
            f'#{section_dom_id}.section.two-column',
            column_width='calc(50% - 10px)',
            gap='20px',
            text_padding='20px',
            placeholder_height='120px',
        )
    elif layout == 'three-column':
        return _multi_column_css(
            f'#{section_dom_id}.section.three-column',
            column_width='calc(33.333% - 10px)',
            gap='15px',
            text_padding='15px',
            placeholder_height='100px',
        )
    else:
        return _single_column_css(f'#{section_dom_id}.section.single-column')


# =============================================================================
# SECTION + DOCUMENT RENDERERS
# =============================================================================

def render_section(section: dict, index: int) -> str:
    """
    Render one section: its scoped <style> block followed by its markup.

    Args:
        section: Validated section dict
        index: 1-based position of the section in the post

    The DOM id is positional ('section-{index}'); the section's own id is
    kept in the data-section-id attribute.
    """
    layout = section.get('type', 'single-column')
    if layout not in ('two-column', 'three-column'):
        layout = 'single-column'

    section_dom_id = f'section-{index}'
    columns_html = ''.join(render_column(column) for column in section.get('columns', []))

    return (
        f'{render_section_css(layout, section_dom_id)}'
        f'<div id="{section_dom_id}" class="section {layout}" '
        f'data-section-id="{escape_attr(section.get("id", ""))}">{columns_html}</div>'
    )


GLOBAL_CSS = '''<style>
  /* Global styles for blog post */
  .blog-post {
    max-width: 1200px;
    margin: 0 auto;
    padding: 20px;
    font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
    line-height: 1.6;
    color: #333;
  }

  /* Consistent column styling */
  .column {
    box-sizing: border-box;
    margin: 0;
  }

  .column.text {
    font-size: 16px;
    line-height: 1.6;
  }

  .column.text p {
    margin: 0 0 16px 0;
  }

  .column.text p:last-child {
    margin-bottom: 0;
  }
</style>'''


def render_sections_to_html(sections: list) -> str:
    """
    Convert a builder document to the article body HTML.

    Args:
        sections: List of section dicts (validated here; input is not modified)

    Returns:
        HTML string suitable for the Shopify article body

    Raises:
        NoValidContentError: If no section survives validation
    """
    return render_valid_sections(validate_sections(sections))


def render_valid_sections(valid_sections: list) -> str:
    """
    Render sections that already went through validate_sections().

    Raises:
        NoValidContentError: If the list is empty
    """
    if not valid_sections:
        raise NoValidContentError("No valid sections to save")

    sections_html = ''.join(
        render_section(section, index)
        for index, section in enumerate(valid_sections, start=1)
    )

    return f'{GLOBAL_CSS}<div class="blog-post">{sections_html}</div>'
