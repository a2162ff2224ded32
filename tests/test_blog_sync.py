"""Tests for saving/loading builder posts as Shopify articles."""
import asyncio
import copy
import json
from unittest.mock import AsyncMock, patch

import pytest

from tools.blog_sync import (
    build_article_input,
    delete_blog_post,
    list_blog_posts,
    load_blog_post,
    normalize_article,
    normalize_tags,
    prepare_blog_payload,
    save_blog_post,
    sections_from_article,
    show_blog_posts,
    tags_to_text,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _blog_data(**overrides) -> dict:
    data = {"title": "Spring sale", "author": "Jo", "tags": "sale, spring", "excerpt": "Deals"}
    data.update(overrides)
    return data


def _graphql_article(**overrides) -> dict:
    article = {
        "id": "gid://shopify/Article/111",
        "title": "Spring sale",
        "handle": "spring-sale",
        "body": "<p>plain body</p>",
        "summary": "Deals",
        "tags": ["sale", "spring"],
        "createdAt": "2024-03-01T10:00:00Z",
        "updatedAt": "2024-03-02T10:00:00Z",
        "publishedAt": None,
        "author": {"name": "Jo"},
        "blog": {"id": "gid://shopify/Blog/1", "handle": "news", "title": "News"},
    }
    article.update(overrides)
    return article


# ---------------------------------------------------------------------------
# Tags
# ---------------------------------------------------------------------------

class TestNormalizeTags:
    def test_comma_string(self):
        assert normalize_tags("a, b ,c") == ["a", "b", "c"]

    def test_list(self):
        assert normalize_tags(["a", " b "]) == ["a", "b"]

    def test_drops_empty_entries(self):
        assert normalize_tags("a,, ,b,") == ["a", "b"]
        assert normalize_tags(["", "  ", "x"]) == ["x"]

    def test_blank_string(self):
        assert normalize_tags("   ") == []

    def test_other_types(self):
        assert normalize_tags(None) == []
        assert normalize_tags(42) == []

    def test_tags_to_text(self):
        assert tags_to_text(["a", "b"]) == "a, b"
        assert tags_to_text("a, b") == "a, b"
        assert tags_to_text(None) == ""


# ---------------------------------------------------------------------------
# prepare_blog_payload
# ---------------------------------------------------------------------------

class TestPrepareBlogPayload:
    def test_success(self, two_column_doc):
        result = prepare_blog_payload(two_column_doc, _blog_data())
        assert result["success"] is True
        blog_data = result["blogData"]
        assert blog_data["title"] == "Spring sale"
        assert blog_data["author"] == "Jo"
        assert blog_data["tags"] == ["sale", "spring"]
        assert blog_data["excerpt"] == "Deals"
        assert '<div class="blog-post">' in blog_data["content"]
        assert result["sections"] == two_column_doc

    def test_missing_title(self, two_column_doc):
        result = prepare_blog_payload(two_column_doc, _blog_data(title="   "))
        assert result["success"] is False
        assert result["error_type"] == "missing_required_field"

    def test_title_checked_before_content(self):
        result = prepare_blog_payload([], _blog_data(title=""))
        assert result["error_type"] == "missing_required_field"

    def test_no_valid_content(self):
        result = prepare_blog_payload([{"id": "s", "type": "two-column", "columns": []}], _blog_data())
        assert result["success"] is False
        assert result["error_type"] == "no_valid_content"
        assert result["error"] == "No valid sections to save"

    def test_default_author(self, two_column_doc):
        result = prepare_blog_payload(two_column_doc, _blog_data(author=""))
        assert result["blogData"]["author"] == "Admin"

    def test_title_trimmed(self, two_column_doc):
        result = prepare_blog_payload(two_column_doc, _blog_data(title="  Hello  "))
        assert result["blogData"]["title"] == "Hello"

    def test_saved_sections_are_validated(self, mixed_doc):
        del mixed_doc[1]["type"]
        result = prepare_blog_payload(mixed_doc, _blog_data())
        assert [s["id"] for s in result["sections"]] == ["section-a", "section-c"]


class TestBuildArticleInput:
    def test_fields(self, two_column_doc):
        payload = prepare_blog_payload(two_column_doc, _blog_data())
        article_input = build_article_input(payload)
        assert article_input["title"] == "Spring sale"
        assert article_input["body"] == payload["blogData"]["content"]
        assert article_input["summary"] == "Deals"
        assert article_input["author"] == {"name": "Jo"}
        assert article_input["tags"] == ["sale", "spring"]
        assert "isPublished" not in article_input

    def test_sections_metafield(self, two_column_doc):
        payload = prepare_blog_payload(two_column_doc, _blog_data())
        metafield = build_article_input(payload)["metafields"][0]
        assert metafield["namespace"] == "blog"
        assert metafield["key"] == "sections"
        assert metafield["type"] == "json"
        assert json.loads(metafield["value"]) == two_column_doc

    def test_publish_flag(self, two_column_doc):
        payload = prepare_blog_payload(two_column_doc, _blog_data())
        assert build_article_input(payload, publish=False)["isPublished"] is False


# ---------------------------------------------------------------------------
# save_blog_post
# ---------------------------------------------------------------------------

class TestSaveBlogPost:
    def test_create(self, two_column_doc):
        create = AsyncMock(return_value={"success": True, "article": {"id": "gid://shopify/Article/222", "handle": "spring-sale"}})
        with patch("tools.blog_sync.find_blog_by_handle", AsyncMock(return_value={"success": True, "blog_id": "gid://shopify/Blog/1"})) as find, \
             patch("tools.blog_sync.create_article", create):
            result = asyncio.run(save_blog_post(two_column_doc, _blog_data()))

        assert result["success"] is True
        assert result["article_id"] == "222"
        assert result["handle"] == "spring-sale"
        find.assert_awaited_once_with("news")
        blog_gid, article_input = create.await_args.args
        assert blog_gid == "gid://shopify/Blog/1"
        assert article_input["title"] == "Spring sale"

    def test_create_in_named_blog(self, two_column_doc):
        create = AsyncMock(return_value={"success": True, "article": {"id": "gid://shopify/Article/1", "handle": "h"}})
        with patch("tools.blog_sync.find_blog_by_handle", AsyncMock(return_value={"success": True, "blog_id": "gid://shopify/Blog/9"})) as find, \
             patch("tools.blog_sync.create_article", create):
            asyncio.run(save_blog_post(two_column_doc, _blog_data(), blog_handle="recipes"))
        find.assert_awaited_once_with("recipes")

    def test_update(self, two_column_doc):
        update = AsyncMock(return_value={"success": True, "article": {"id": "gid://shopify/Article/111", "handle": "spring-sale"}})
        with patch("tools.blog_sync.update_article", update), \
             patch("tools.blog_sync.create_article", AsyncMock()) as create:
            result = asyncio.run(save_blog_post(two_column_doc, _blog_data(), article_id="111"))

        assert result["success"] is True
        assert result["article_id"] == "111"
        assert update.await_args.args[0] == "111"
        create.assert_not_awaited()

    def test_blog_not_found(self, two_column_doc):
        with patch("tools.blog_sync.find_blog_by_handle", AsyncMock(return_value={"success": False, "error": "Blog 'news' not found"})):
            result = asyncio.run(save_blog_post(two_column_doc, _blog_data()))
        assert result["success"] is False
        assert result["error"] == "Blog 'news' not found"
        assert result["error_type"] == "adapter_failure"

    def test_blog_lookup_network_error_surfaced(self, two_column_doc):
        graphql = AsyncMock(return_value={"error": "Network error: Cannot connect to host"})
        with patch("tools.shopify_tools.execute_shopify_graphql", graphql), \
             patch("tools.blog_sync.create_article", AsyncMock()) as create:
            result = asyncio.run(save_blog_post(two_column_doc, _blog_data()))
        assert result["success"] is False
        assert "Network error" in result["error"]
        assert "not found" not in result["error"]
        assert result["error_type"] == "adapter_failure"
        create.assert_not_awaited()

    def test_adapter_error_surfaced(self, two_column_doc):
        create = AsyncMock(return_value={"success": False, "error": "Title can't be blank"})
        with patch("tools.blog_sync.find_blog_by_handle", AsyncMock(return_value={"success": True, "blog_id": "gid://shopify/Blog/1"})), \
             patch("tools.blog_sync.create_article", create):
            result = asyncio.run(save_blog_post(two_column_doc, _blog_data()))
        assert result["success"] is False
        assert result["error"] == "Title can't be blank"
        assert result["error_type"] == "adapter_failure"

    def test_nothing_sent_without_title(self, two_column_doc):
        with patch("tools.blog_sync.find_blog_by_handle", AsyncMock()) as find, \
             patch("tools.blog_sync.create_article", AsyncMock()) as create:
            result = asyncio.run(save_blog_post(two_column_doc, _blog_data(title="")))
        assert result["error_type"] == "missing_required_field"
        find.assert_not_awaited()
        create.assert_not_awaited()

    def test_nothing_sent_without_content(self):
        with patch("tools.blog_sync.find_blog_by_handle", AsyncMock()) as find, \
             patch("tools.blog_sync.create_article", AsyncMock()) as create:
            result = asyncio.run(save_blog_post([], _blog_data()))
        assert result["error_type"] == "no_valid_content"
        find.assert_not_awaited()
        create.assert_not_awaited()

    def test_input_not_modified(self, mixed_doc):
        snapshot = copy.deepcopy(mixed_doc)
        create = AsyncMock(return_value={"success": True, "article": {"id": "gid://shopify/Article/1", "handle": "h"}})
        with patch("tools.blog_sync.find_blog_by_handle", AsyncMock(return_value={"success": True, "blog_id": "gid://shopify/Blog/1"})), \
             patch("tools.blog_sync.create_article", create):
            asyncio.run(save_blog_post(mixed_doc, _blog_data()))
        assert mixed_doc == snapshot


# ---------------------------------------------------------------------------
# Load
# ---------------------------------------------------------------------------

class TestNormalizeArticle:
    def test_graphql_shape(self):
        post = normalize_article(_graphql_article())
        assert post["id"] == "111"
        assert post["author"] == "Jo"
        assert post["tags"] == ["sale", "spring"]
        assert post["excerpt"] == "Deals"
        assert post["content"] == "<p>plain body</p>"
        assert post["blog"] == "news"

    def test_rest_shape(self):
        post = normalize_article({
            "id": 111,
            "title": "T",
            "handle": "t",
            "body_html": "<p>x</p>",
            "summary_html": "S",
            "tags": "a, b",
            "author": "Sam",
            "created_at": "2024-01-01T00:00:00Z",
            "published_at": "2024-01-02T00:00:00Z",
            "blog": {"handle": "news"},
        })
        assert post["id"] == "111"
        assert post["author"] == "Sam"
        assert post["tags"] == ["a", "b"]
        assert post["excerpt"] == "S"
        assert post["content"] == "<p>x</p>"
        assert post["createdAt"] == "2024-01-01T00:00:00Z"
        assert post["publishedAt"] == "2024-01-02T00:00:00Z"

    def test_missing_author(self):
        assert normalize_article(_graphql_article(author=None))["author"] == "Admin"


class TestSectionsFromArticle:
    def test_metafield_preferred(self, two_column_doc):
        article = _graphql_article(sectionsMetafield={"value": json.dumps(two_column_doc)})
        sections, source = sections_from_article(article)
        assert source == "metafield"
        assert sections == two_column_doc

    def test_html_fallback(self):
        article = _graphql_article(body='<div class="section two-column"><div class="column">A</div><div class="column">B</div></div>')
        sections, source = sections_from_article(article)
        assert source == "html"
        assert [c["content"] for c in sections[0]["columns"]] == ["A", "B"]

    def test_bad_metafield_falls_back_to_html(self):
        article = _graphql_article(
            sectionsMetafield={"value": "not json"},
            body='<div class="section"><div class="column">A</div></div>',
        )
        assert sections_from_article(article)[1] == "html"

    def test_default_document(self):
        sections, source = sections_from_article(_graphql_article())
        assert source == "default"
        assert len(sections) == 1
        assert sections[0]["type"] == "two-column"


class TestLoadBlogPost:
    def test_success(self, two_column_doc):
        article = _graphql_article(sectionsMetafield={"value": json.dumps(two_column_doc)})
        with patch("tools.blog_sync.fetch_article", AsyncMock(return_value={"success": True, "article": article})):
            result = asyncio.run(load_blog_post("111"))
        assert result["success"] is True
        assert result["post"]["title"] == "Spring sale"
        assert result["sections"] == two_column_doc
        assert result["source"] == "metafield"

    def test_not_found(self):
        with patch("tools.blog_sync.fetch_article", AsyncMock(return_value={"success": False, "error": "Article 9 not found"})):
            result = asyncio.run(load_blog_post("9"))
        assert result == {"success": False, "error": "Article 9 not found"}


# ---------------------------------------------------------------------------
# List / delete
# ---------------------------------------------------------------------------

class TestListBlogPosts:
    def test_sorted_newest_first(self):
        articles = [
            _graphql_article(id="gid://shopify/Article/1", createdAt="2024-01-01T00:00:00Z"),
            _graphql_article(id="gid://shopify/Article/2", createdAt="2024-06-01T00:00:00Z"),
            _graphql_article(id="gid://shopify/Article/3", createdAt=None),
        ]
        with patch("tools.blog_sync.fetch_all_shopify_articles", AsyncMock(return_value={"success": True, "articles": articles})):
            result = asyncio.run(list_blog_posts())
        assert [p["id"] for p in result["posts"]] == ["2", "1", "3"]
        assert result["total"] == 3
        assert result["source"] == "graphql"

    def test_rest_fallback(self):
        rest_articles = [{"id": 5, "title": "R", "created_at": "2024-01-01T00:00:00Z", "blog": {"handle": "news"}}]
        with patch("tools.blog_sync.fetch_all_shopify_articles", AsyncMock(return_value={"success": True, "articles": []})), \
             patch("tools.blog_sync.fetch_all_articles_rest", AsyncMock(return_value={"success": True, "articles": rest_articles})):
            result = asyncio.run(list_blog_posts())
        assert result["source"] == "rest_api"
        assert result["posts"][0]["id"] == "5"

    def test_rest_fallback_after_graphql_error(self):
        rest_articles = [{"id": 5, "title": "R", "blog": {"handle": "news"}}]
        with patch("tools.blog_sync.fetch_all_shopify_articles", AsyncMock(return_value={"success": False, "articles": [], "error": "Access denied"})), \
             patch("tools.blog_sync.fetch_all_articles_rest", AsyncMock(return_value={"success": True, "articles": rest_articles})):
            result = asyncio.run(list_blog_posts())
        assert result["success"] is True
        assert result["source"] == "rest_api"
        assert result["total"] == 1

    def test_both_apis_fail(self):
        graphql = AsyncMock(return_value={"error": "Network error: Cannot connect to host"})
        rest = AsyncMock(return_value={"error": "Network error: Cannot connect to host"})
        with patch("tools.shopify_tools.execute_shopify_graphql", graphql), \
             patch("tools.shopify_tools.execute_shopify_rest", rest):
            result = asyncio.run(list_blog_posts())
        assert result["success"] is False
        assert result["posts"] == []
        assert result["total"] == 0
        assert "GraphQL: Network error" in result["error"]
        assert "REST: Network error" in result["error"]

    def test_empty_store_is_not_an_error(self):
        with patch("tools.blog_sync.fetch_all_shopify_articles", AsyncMock(return_value={"success": True, "articles": []})), \
             patch("tools.blog_sync.fetch_all_articles_rest", AsyncMock(return_value={"success": False, "articles": [], "error": "denied"})):
            result = asyncio.run(list_blog_posts())
        assert result["success"] is True
        assert result["posts"] == []


class TestShowBlogPosts:
    def test_prints_error(self, capsys):
        failed = {"success": False, "posts": [], "total": 0, "error": "GraphQL: denied; REST: denied"}
        with patch("tools.blog_sync.list_blog_posts", AsyncMock(return_value=failed)):
            asyncio.run(show_blog_posts())
        out = capsys.readouterr().out
        assert "Error: GraphQL: denied; REST: denied" in out
        assert "No posts found." not in out

    def test_no_posts(self, capsys):
        empty = {"success": True, "posts": [], "total": 0, "source": "graphql"}
        with patch("tools.blog_sync.list_blog_posts", AsyncMock(return_value=empty)):
            asyncio.run(show_blog_posts())
        assert "No posts found." in capsys.readouterr().out


class TestDeleteBlogPost:
    def test_requires_id(self):
        assert asyncio.run(delete_blog_post(""))["success"] is False

    def test_delegates(self):
        delete = AsyncMock(return_value={"success": True, "deleted_id": "111"})
        with patch("tools.blog_sync.delete_article", delete):
            result = asyncio.run(delete_blog_post("111"))
        assert result["deleted_id"] == "111"
        delete.assert_awaited_once_with("111")
