"""Tests for the Shopify Admin API helpers (network calls mocked)."""
import asyncio
import base64
import json
from unittest.mock import AsyncMock, patch

from tools import shopify_tools
from tools.shopify_tools import (
    build_sections_metafield,
    delete_article,
    encode_upload_as_data_url,
    fetch_all_articles_rest,
    fetch_all_shopify_articles,
    fetch_all_shopify_blogs,
    fetch_article,
    fetch_metafield,
    find_blog_by_handle,
    format_user_errors,
    from_gid,
    get_shop_id,
    list_media,
    to_article_gid,
    to_gid,
)


def _graphql(*responses):
    """Patch execute_shopify_graphql to return the given responses in order."""
    return patch("tools.shopify_tools.execute_shopify_graphql", AsyncMock(side_effect=list(responses)))


# ---------------------------------------------------------------------------
# ID helpers
# ---------------------------------------------------------------------------

class TestGid:
    def test_to_gid(self):
        assert to_gid("Collection", 7) == "gid://shopify/Collection/7"

    def test_gid_passes_through(self):
        assert to_gid("Article", "gid://shopify/Article/1") == "gid://shopify/Article/1"

    def test_to_article_gid(self):
        assert to_article_gid("123") == "gid://shopify/Article/123"

    def test_from_gid(self):
        assert from_gid("gid://shopify/Article/123") == "123"
        assert from_gid(123) == "123"

    def test_format_user_errors(self):
        errors = [{"message": "Title can't be blank"}, {"message": "Handle taken"}]
        assert format_user_errors(errors) == "Title can't be blank; Handle taken"


# ---------------------------------------------------------------------------
# Metafields
# ---------------------------------------------------------------------------

def test_build_sections_metafield(two_column_doc):
    metafield = build_sections_metafield(two_column_doc)
    assert metafield["namespace"] == "blog"
    assert metafield["key"] == "sections"
    assert metafield["type"] == "json"
    assert json.loads(metafield["value"]) == two_column_doc


class TestMetafieldQueries:
    def test_get_shop_id(self):
        with _graphql({"shop": {"id": "gid://shopify/Shop/1"}}):
            assert asyncio.run(get_shop_id()) == {"success": True, "shop_id": "gid://shopify/Shop/1"}

    def test_get_shop_id_error(self):
        with _graphql({"error": "Network error: boom"}):
            result = asyncio.run(get_shop_id())
        assert result == {"success": False, "error": "Network error: boom"}

    def test_fetch_metafield_missing(self):
        with _graphql({"node": {"metafield": None}}):
            result = asyncio.run(fetch_metafield("gid://shopify/Shop/1", "quickview", "product_config"))
        assert result == {"success": True, "metafield": None}


# ---------------------------------------------------------------------------
# Articles
# ---------------------------------------------------------------------------

class TestFetchArticle:
    def test_found(self):
        article = {"id": "gid://shopify/Article/5", "title": "T"}
        with _graphql({"article": article}) as graphql:
            result = asyncio.run(fetch_article("5"))
        assert result == {"success": True, "article": article}
        variables = graphql.await_args.args[1]
        assert variables["id"] == "gid://shopify/Article/5"
        assert variables["namespace"] == "blog"
        assert variables["key"] == "sections"

    def test_not_found(self):
        with _graphql({"article": None}):
            result = asyncio.run(fetch_article("5"))
        assert result == {"success": False, "error": "Article 5 not found"}


class TestFindBlogByHandle:
    def test_found_and_cached(self):
        found = {"success": True, "blog_id": "gid://shopify/Blog/1"}
        with _graphql({"blogs": {"nodes": [{"id": "gid://shopify/Blog/1", "handle": "news"}]}}) as graphql:
            assert asyncio.run(find_blog_by_handle("news")) == found
            assert asyncio.run(find_blog_by_handle("news")) == found
        assert graphql.await_count == 1

    def test_missing(self):
        with _graphql({"blogs": {"nodes": []}}):
            result = asyncio.run(find_blog_by_handle("nope"))
        assert result == {"success": False, "error": "Blog 'nope' not found"}

    def test_api_error_kept(self):
        with _graphql({"error": "Network error: Cannot connect to host"}):
            result = asyncio.run(find_blog_by_handle("news"))
        assert result == {"success": False, "error": "Network error: Cannot connect to host"}

    def test_api_error_not_cached(self):
        with _graphql({"error": "Network error: timeout"}, {"blogs": {"nodes": [{"id": "gid://shopify/Blog/1"}]}}):
            assert asyncio.run(find_blog_by_handle("news"))["success"] is False
            assert asyncio.run(find_blog_by_handle("news"))["blog_id"] == "gid://shopify/Blog/1"


class TestDeleteArticle:
    def test_graphql_success(self):
        with _graphql({"articleDelete": {"deletedArticleId": "gid://shopify/Article/5", "userErrors": []}}):
            result = asyncio.run(delete_article("5"))
        assert result == {"success": True, "deleted_id": "5"}

    def test_rest_fallback(self):
        rest = AsyncMock(side_effect=[
            {"blogs": [{"id": 1, "handle": "news"}]},
            {"articles": [{"id": 5}]},
            {},
        ])
        with _graphql({"error": "Access denied"}), \
             patch("tools.shopify_tools.execute_shopify_rest", rest):
            result = asyncio.run(delete_article("5"))
        assert result == {"success": True, "deleted_id": "5"}
        assert rest.await_args_list[1].args == ("GET", "blogs/1/articles.json", {"limit": 250})
        assert rest.await_args.args == ("DELETE", "blogs/1/articles/5.json")

    def test_rest_finds_article_past_first_page(self):
        first_page = [{"id": i} for i in range(1000, 1250)]
        rest = AsyncMock(side_effect=[
            {"blogs": [{"id": 1, "handle": "news"}]},
            {"articles": first_page},
            {"articles": [{"id": 5000}]},
            {},
        ])
        with _graphql({"error": "Access denied"}), \
             patch("tools.shopify_tools.execute_shopify_rest", rest):
            result = asyncio.run(delete_article("5000"))
        assert result == {"success": True, "deleted_id": "5000"}
        assert rest.await_args_list[2].args == ("GET", "blogs/1/articles.json", {"limit": 250, "since_id": 1249})
        assert rest.await_args.args == ("DELETE", "blogs/1/articles/5000.json")

    def test_both_fail(self):
        rest = AsyncMock(side_effect=[
            {"blogs": [{"id": 1, "handle": "news"}]},
            {"articles": [{"id": 6}]},
        ])
        with _graphql({"error": "Access denied"}), \
             patch("tools.shopify_tools.execute_shopify_rest", rest):
            result = asyncio.run(delete_article("5"))
        assert result["success"] is False
        assert result["error"] == "Both GraphQL and REST API failed: Article not found in any blog"


class TestListingResults:
    def test_blogs_error(self):
        with _graphql({"error": "Access denied"}):
            result = asyncio.run(fetch_all_shopify_blogs())
        assert result == {"success": False, "blogs": [], "error": "Access denied"}

    def test_articles_error_from_blogs(self):
        with _graphql({"error": "Access denied"}):
            result = asyncio.run(fetch_all_shopify_articles())
        assert result == {"success": False, "articles": [], "error": "Access denied"}

    def test_rest_blogs_error(self):
        with patch("tools.shopify_tools.execute_shopify_rest", AsyncMock(return_value={"error": "REST API failed: 401 - denied"})):
            result = asyncio.run(fetch_all_articles_rest())
        assert result["success"] is False
        assert result["error"] == "REST API failed: 401 - denied"

    def test_rest_articles_paged(self):
        first_page = [{"id": i} for i in range(1, 251)]
        rest = AsyncMock(side_effect=[
            {"blogs": [{"id": 7, "handle": "news", "title": "News"}]},
            {"articles": first_page},
            {"articles": [{"id": 251}]},
        ])
        with patch("tools.shopify_tools.execute_shopify_rest", rest):
            result = asyncio.run(fetch_all_articles_rest())
        assert result["success"] is True
        assert len(result["articles"]) == 251
        assert result["articles"][-1]["blog"] == {"id": 7, "handle": "news", "title": "News"}
        assert rest.await_count == 3


# ---------------------------------------------------------------------------
# Media
# ---------------------------------------------------------------------------

class TestListMedia:
    def test_files_first(self):
        files = {"files": {"nodes": [
            {"id": "gid://shopify/MediaImage/1", "fileStatus": "READY", "alt": "A",
             "image": {"url": "https://cdn.shopify.com/a.jpg", "width": 10, "height": 20, "altText": "A"}},
            {"id": "gid://shopify/GenericFile/2", "fileStatus": "READY", "alt": ""},
        ]}}
        with _graphql(files):
            result = asyncio.run(list_media())
        assert result["success"] is True
        assert result["source"] == "files"
        assert [m["url"] for m in result["media"]] == ["https://cdn.shopify.com/a.jpg"]

    def test_product_fallback(self):
        products = {"products": {"nodes": [
            {"id": "p1", "title": "Mug", "images": {"nodes": [
                {"id": "i1", "url": "https://cdn.shopify.com/mug.jpg", "width": 1, "height": 1, "altText": None},
            ]}},
        ]}}
        with _graphql({"files": {"nodes": []}}, products):
            result = asyncio.run(list_media())
        assert result["source"] == "products"
        assert result["media"][0]["altText"] == "Mug"

    def test_nothing_found(self):
        with _graphql({"error": "denied"}, {"error": "denied"}):
            result = asyncio.run(list_media())
        assert result == {"success": False, "media": [], "error": "Could not fetch media list"}


class TestEncodeUpload:
    def test_image_becomes_data_url(self, tmp_path):
        image = tmp_path / "photo.png"
        image.write_bytes(b"\x89PNG fake")
        result = encode_upload_as_data_url(str(image), "Shop front")
        assert result["success"] is True
        assert result["file"]["alt"] == "Shop front"
        assert result["file"]["id"].startswith("temp-")
        url = result["file"]["url"]
        assert url.startswith("data:image/png;base64,")
        assert base64.b64decode(url.split(",", 1)[1]) == b"\x89PNG fake"

    def test_missing_file(self, tmp_path):
        result = encode_upload_as_data_url(str(tmp_path / "nope.png"))
        assert result["success"] is False

    def test_not_an_image(self, tmp_path):
        notes = tmp_path / "notes.txt"
        notes.write_text("hello")
        result = encode_upload_as_data_url(str(notes))
        assert result["success"] is False
        assert "Not an image" in result["error"]


def test_graphql_without_credentials(monkeypatch):
    monkeypatch.setattr(shopify_tools, "SHOPIFY_STORE", "")
    result = asyncio.run(shopify_tools.execute_shopify_graphql("{ shop { id } }"))
    assert result == {"error": "Shopify credentials not configured"}
