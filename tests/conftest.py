import pytest

from tools import shopify_tools


def _text(column_id: str, content: str) -> dict:
    return {"id": column_id, "type": "text", "content": content, "style": {"font-size": "16px", "color": "#333"}}


def _image(column_id: str, src: str, alt: str = "Caption") -> dict:
    return {"id": column_id, "type": "image", "src": src, "alt": alt, "style": {"width": "100%", "height": "auto"}}


@pytest.fixture
def two_column_doc() -> list:
    """One two-column section: text + image with a valid src."""
    return [
        {
            "id": "section-a",
            "type": "two-column",
            "columns": [
                _text("col-1", "Hi"),
                _image("col-2", "https://cdn.shopify.com/files/photo.jpg", "A photo"),
            ],
        }
    ]


@pytest.fixture
def mixed_doc() -> list:
    """Three sections of every layout, with an image column that has no src."""
    return [
        {
            "id": "section-a",
            "type": "single-column",
            "columns": [_text("col-1", "<p>Intro</p>")],
        },
        {
            "id": "section-b",
            "type": "two-column",
            "columns": [_text("col-2", "Left"), _image("col-3", "")],
        },
        {
            "id": "section-c",
            "type": "three-column",
            "columns": [_text("col-4", "One"), _text("col-5", "Two"), _text("col-6", "Three")],
        },
    ]


@pytest.fixture(autouse=True)
def clear_blog_cache():
    """Blog handle lookups are cached per process."""
    shopify_tools.clear_sync_cache()
    yield
    shopify_tools.clear_sync_cache()
