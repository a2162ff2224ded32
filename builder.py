#!/usr/bin/env python3
"""
Shopify Blog Builder

Builds blog posts out of sections (single-, two- or three-column rows of
text and image columns), renders them to article HTML and saves them as
Shopify articles. Also manages the product quickview settings.

Documents are plain JSON files holding the list of sections, so a post
can be edited offline and saved when ready.

Usage:
    python builder.py --new post.json                           # Start a document
    python builder.py --doc post.json --add-section two-column  # Append a section
    python builder.py --doc post.json --move-section ID OVER    # Drag a section onto another
    python builder.py --render post.json --output post.html     # Preview the HTML
    python builder.py --parse article.html                      # Recover sections from HTML
    python builder.py --save post.json --title "Hello"          # Create an article
    python builder.py --load 123456 --output post.json          # Open an article
    python builder.py --list                                    # List articles
    python builder.py --quickview-show                          # Show quickview settings

Examples:
    python builder.py --doc post.json --set-text SECTION COLUMN "<p>Intro</p>"
    python builder.py --doc post.json --embed-image SECTION COLUMN photo.jpg --alt "Our shop"
    python builder.py --save post.json --title "Spring sale" --tags "sale, spring" --blog news
    python builder.py --save post.json --title "Spring sale" --article-id 123456
    python builder.py --quickview-save quickview.json --collection 987654
"""

import asyncio
import argparse
import json
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from config import validate_config, SUPPORTED_LAYOUTS, SUPPORTED_COLUMN_TYPES
from tools.document_tools import (
    new_document,
    add_section,
    remove_section,
    move_section,
    add_column,
    remove_column,
    move_column,
    change_column_type,
    set_column_content,
    set_column_image,
    find_column,
    load_document,
)
from tools.render_tools import NoValidContentError, render_sections_to_html
from tools.parse_tools import parse_html_to_sections
from tools.shopify_tools import encode_upload_as_data_url


# =============================================================================
# DOCUMENT FILES
# =============================================================================

def read_document(path: str) -> list:
    """Read a document file. Exits if the file is missing."""
    doc_path = Path(path)
    if not doc_path.exists():
        print(f"Error: File not found: {path}")
        sys.exit(1)

    with open(doc_path, "r", encoding="utf-8") as f:
        return load_document(f.read())


def write_document(path: str, sections: list) -> None:
    with open(path, "w", encoding="utf-8") as f:
        f.write(json.dumps(sections, indent=2, ensure_ascii=False))
        f.write("\n")


def write_output(text: str, output: str = None) -> None:
    """Write to a file, or stdout when no file is given."""
    if output:
        with open(output, "w", encoding="utf-8") as f:
            f.write(text)
        print(f"✓ Wrote {output}")
    else:
        print(text)


def print_outline(sections: list) -> None:
    """Print the section/column ids of a document."""
    for index, section in enumerate(sections, start=1):
        print(f"{index}. {section.get('type')}  {section.get('id')}")
        for column in section.get("columns", []):
            if column.get("type") == "image":
                summary = column.get("src") or "(no image)"
            else:
                summary = (column.get("content") or "").replace("\n", " ")
            print(f"     {column.get('type'):<6} {column.get('id')}  {summary[:50]}")


def edit_document(args) -> list:
    """Apply the single edit requested on the command line to --doc."""
    sections = read_document(args.doc)

    if args.add_section:
        return add_section(sections, args.add_section)

    if args.remove_section:
        return remove_section(sections, args.remove_section)

    if args.move_section:
        return move_section(sections, *args.move_section)

    if args.add_column:
        return add_column(sections, args.add_column)

    if args.remove_column:
        return remove_column(sections, *args.remove_column)

    if args.move_column:
        return move_column(sections, *args.move_column)

    if args.column_type:
        return change_column_type(sections, *args.column_type)

    if args.set_text:
        return set_column_content(sections, *args.set_text)

    if args.set_image:
        section_id, column_id, src = args.set_image
        return set_column_image(sections, section_id, column_id, src, args.alt)

    if args.embed_image:
        section_id, column_id, image_path = args.embed_image
        if not find_column(sections, section_id, column_id):
            print(f"Warning: Column {column_id} not found in section {section_id}")
            return sections
        upload = encode_upload_as_data_url(image_path, args.alt or "")
        if not upload["success"]:
            print(f"Error: {upload['error']}")
            sys.exit(1)
        return set_column_image(sections, section_id, column_id, upload["file"]["url"], args.alt)

    return sections


# =============================================================================
# SHOPIFY COMMANDS
# =============================================================================

async def save_post(args) -> bool:
    from tools.blog_sync import save_blog_post

    sections = read_document(args.save)
    blog_data = {
        "title": args.title or "",
        "author": args.author or "",
        "tags": args.tags or "",
        "excerpt": args.excerpt or "",
    }

    publish = None
    if args.publish:
        publish = True
    elif args.hide:
        publish = False

    result = await save_blog_post(
        sections,
        blog_data,
        article_id=args.article_id,
        blog_handle=args.blog,
        publish=publish,
    )

    if not result["success"]:
        print(f"Error: {result['error']}")
        return False

    action = "Updated" if args.article_id else "Created"
    print(f"✓ {action} article {result['article_id']} ({result.get('handle')})")
    if args.verbose:
        print(f"  Sections saved: {len(result['sections'])}")
    return True


async def load_post(args) -> bool:
    from tools.blog_sync import load_blog_post, tags_to_text

    result = await load_blog_post(args.load)
    if not result["success"]:
        print(f"Error: {result['error']}")
        return False

    post = result["post"]
    if args.output:
        write_document(args.output, result["sections"])
        print(f"✓ Loaded '{post['title']}' into {args.output} (sections from {result['source']})")
    else:
        print(f"Title:   {post['title']}")
        print(f"Author:  {post['author']}")
        print(f"Tags:    {tags_to_text(post['tags'])}")
        print(f"Excerpt: {post['excerpt']}")
        print(f"Source:  {result['source']}")
        print()
        print_outline(result["sections"])
    return True


async def delete_post(article_id: str) -> bool:
    from tools.blog_sync import delete_blog_post

    result = await delete_blog_post(article_id)
    if not result["success"]:
        print(f"Error: {result['error']}")
        return False

    print(f"✓ Deleted article {article_id}")
    return True


async def show_collections() -> bool:
    from tools.shopify_tools import list_collections

    result = await list_collections()
    if not result["success"]:
        print(f"Error: {result['error']}")
        return False

    print()
    print(f"{'ID':<16} {'HANDLE':<30} TITLE")
    print("-" * 80)
    for collection in result["collections"]:
        collection_id = collection["id"].split("/")[-1]
        print(f"{collection_id:<16} {collection.get('handle', ''):<30} {collection.get('title', '')}")
    print()
    print(f"Total: {len(result['collections'])}")
    return True


async def show_quickview(collection_id: str = None, widget: bool = False) -> bool:
    from tools.quickview_tools import load_quickview_config, public_widget_config

    if widget:
        result = await public_widget_config(collection_id)
    else:
        result = await load_quickview_config(collection_id)

    print(f"Source: {result['source']}")
    print(json.dumps(result["config"], indent=2, ensure_ascii=False))
    return result["success"]


async def save_quickview(path: str, collection_id: str = None) -> bool:
    from tools.quickview_tools import save_quickview_config

    config_path = Path(path)
    if not config_path.exists():
        print(f"Error: File not found: {path}")
        return False

    with open(config_path, "r", encoding="utf-8") as f:
        try:
            config = json.load(f)
        except json.JSONDecodeError as e:
            print(f"Error: {path} is not valid JSON: {e}")
            return False

    result = await save_quickview_config(config, collection_id)
    if not result["success"]:
        print(f"Error: {result['error']}")
        return False

    print(f"✓ {result['message']} ({result['metafield_key']})")
    return True


# =============================================================================
# MAIN
# =============================================================================

def main():
    """Main entry point"""
    parser = argparse.ArgumentParser(
        description="Build section-based blog posts and save them to Shopify",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Modes:
  NEW:        python builder.py --new post.json
  EDIT:       python builder.py --doc post.json --add-section three-column
  RENDER:     python builder.py --render post.json [--output post.html]
  PARSE:      python builder.py --parse article.html [--output post.json]
  SAVE:       python builder.py --save post.json --title "Title" [--article-id ID]
  LOAD:       python builder.py --load ID [--output post.json]
  LIST:       python builder.py --list
  QUICKVIEW:  python builder.py --quickview-show | --quickview-save config.json

Examples:
  # Show the ids in a document
  python builder.py --doc post.json

  # Drag the first column of a section onto the third
  python builder.py --doc post.json --move-column SECTION COL_A COL_C

  # Turn a text column into an image column
  python builder.py --doc post.json --column-type SECTION COLUMN image

  # Use an image from the store's media library
  python builder.py --media
  python builder.py --doc post.json --set-image SECTION COLUMN https://cdn.shopify.com/... --alt "Caption"
        """
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Print detailed progress"
    )

    # Offline document editing
    doc_group = parser.add_argument_group('Documents')
    doc_group.add_argument(
        "--new",
        type=str,
        metavar="FILE",
        help="Write a new document (one two-column section) to FILE"
    )
    doc_group.add_argument(
        "--doc",
        type=str,
        metavar="FILE",
        help="Document to edit (prints its outline when no edit is given)"
    )
    doc_group.add_argument(
        "--add-section",
        type=str,
        metavar="LAYOUT",
        choices=SUPPORTED_LAYOUTS,
        help=f"Append a section ({', '.join(SUPPORTED_LAYOUTS)})"
    )
    doc_group.add_argument(
        "--remove-section",
        type=str,
        metavar="SECTION_ID",
        help="Remove a section"
    )
    doc_group.add_argument(
        "--move-section",
        nargs=2,
        metavar=("ACTIVE_ID", "OVER_ID"),
        help="Move a section to the position of another"
    )
    doc_group.add_argument(
        "--add-column",
        type=str,
        metavar="SECTION_ID",
        help="Append a text column to a section"
    )
    doc_group.add_argument(
        "--remove-column",
        nargs=2,
        metavar=("SECTION_ID", "COLUMN_ID"),
        help="Remove a column from a section"
    )
    doc_group.add_argument(
        "--move-column",
        nargs=3,
        metavar=("SECTION_ID", "ACTIVE_ID", "OVER_ID"),
        help="Move a column to the position of another in the same section"
    )
    doc_group.add_argument(
        "--column-type",
        nargs=3,
        metavar=("SECTION_ID", "COLUMN_ID", "TYPE"),
        help=f"Change a column's type ({', '.join(SUPPORTED_COLUMN_TYPES)}); clears its content"
    )
    doc_group.add_argument(
        "--set-text",
        nargs=3,
        metavar=("SECTION_ID", "COLUMN_ID", "CONTENT"),
        help="Set the content of a text column"
    )
    doc_group.add_argument(
        "--set-image",
        nargs=3,
        metavar=("SECTION_ID", "COLUMN_ID", "URL"),
        help="Set the image of an image column (use --alt for the caption)"
    )
    doc_group.add_argument(
        "--embed-image",
        nargs=3,
        metavar=("SECTION_ID", "COLUMN_ID", "IMAGE_FILE"),
        help="Embed a local image file as a data URL"
    )
    doc_group.add_argument(
        "--alt",
        type=str,
        help="Caption for --set-image / --embed-image"
    )
    doc_group.add_argument(
        "--render",
        type=str,
        metavar="FILE",
        help="Render a document to article HTML"
    )
    doc_group.add_argument(
        "--parse",
        type=str,
        metavar="HTML_FILE",
        help="Recover a document from article HTML"
    )
    doc_group.add_argument(
        "--output", "-o",
        type=str,
        metavar="FILE",
        help="Output file for --render, --parse and --load"
    )

    # Shopify articles
    shopify_group = parser.add_argument_group('Shopify')
    shopify_group.add_argument(
        "--save",
        type=str,
        metavar="FILE",
        help="Save a document as a Shopify article (requires --title)"
    )
    shopify_group.add_argument("--title", type=str, help="Article title")
    shopify_group.add_argument("--author", type=str, help="Article author")
    shopify_group.add_argument("--tags", type=str, help='Comma-separated tags, e.g. "news, sale"')
    shopify_group.add_argument("--excerpt", type=str, help="Article summary")
    shopify_group.add_argument(
        "--article-id",
        type=str,
        metavar="ID",
        help="Update this article instead of creating a new one"
    )
    shopify_group.add_argument(
        "--blog",
        type=str,
        metavar="HANDLE",
        help="Blog to create the article in (default: DEFAULT_BLOG_HANDLE)"
    )
    shopify_group.add_argument("--publish", action="store_true", help="Make the article visible")
    shopify_group.add_argument("--hide", action="store_true", help="Hide the article")
    shopify_group.add_argument(
        "--load",
        type=str,
        metavar="ID",
        help="Load an article for editing"
    )
    shopify_group.add_argument(
        "--list",
        action="store_true",
        help="List all articles"
    )
    shopify_group.add_argument(
        "--delete",
        type=str,
        metavar="ID",
        help="Delete an article"
    )
    shopify_group.add_argument(
        "--media",
        action="store_true",
        help="List images available for image columns"
    )

    # Quickview
    quickview_group = parser.add_argument_group('Quickview')
    quickview_group.add_argument(
        "--collections",
        action="store_true",
        help="List collections"
    )
    quickview_group.add_argument(
        "--quickview-show",
        action="store_true",
        help="Show the quickview configuration"
    )
    quickview_group.add_argument(
        "--quickview-widget",
        action="store_true",
        help="Show the storefront widget configuration"
    )
    quickview_group.add_argument(
        "--quickview-save",
        type=str,
        metavar="FILE",
        help="Save a quickview configuration from a JSON file"
    )
    quickview_group.add_argument(
        "--collection",
        type=str,
        metavar="ID",
        help="Collection for --quickview-show / --quickview-save"
    )

    args = parser.parse_args()

    edits = [
        args.add_section, args.remove_section, args.move_section, args.add_column,
        args.remove_column, args.move_column, args.column_type, args.set_text,
        args.set_image, args.embed_image,
    ]

    # Offline commands
    if args.new:
        write_document(args.new, new_document())
        print(f"✓ Wrote {args.new}")
        return

    if any(edits):
        if not args.doc:
            print("Error: --doc FILE is required for document edits")
            sys.exit(1)
        try:
            sections = edit_document(args)
        except ValueError as e:
            print(f"Error: {e}")
            sys.exit(1)
        write_document(args.doc, sections)
        if args.verbose:
            print_outline(sections)
        print(f"✓ Updated {args.doc}")
        return

    if args.doc:
        print_outline(read_document(args.doc))
        return

    if args.render:
        try:
            html_content = render_sections_to_html(read_document(args.render))
        except NoValidContentError as e:
            print(f"Error: {e}")
            sys.exit(1)
        write_output(html_content, args.output)
        return

    if args.parse:
        html_path = Path(args.parse)
        if not html_path.exists():
            print(f"Error: File not found: {args.parse}")
            sys.exit(1)
        sections = parse_html_to_sections(html_path.read_text(encoding="utf-8"))
        if not sections:
            print("Error: No sections found in HTML")
            sys.exit(1)
        if args.output:
            write_document(args.output, sections)
            print(f"✓ Wrote {args.output}")
        else:
            print(json.dumps(sections, indent=2, ensure_ascii=False))
        return

    # Everything below talks to Shopify
    shopify_commands = [
        args.save, args.load, args.list, args.delete, args.media, args.collections,
        args.quickview_show, args.quickview_widget, args.quickview_save,
    ]
    if not any(shopify_commands):
        parser.print_help()
        return

    try:
        validate_config()
    except ValueError as e:
        print(f"Configuration Error: {e}")
        sys.exit(1)

    if args.save:
        success = asyncio.run(save_post(args))
        sys.exit(0 if success else 1)

    elif args.load:
        success = asyncio.run(load_post(args))
        sys.exit(0 if success else 1)

    elif args.list:
        from tools.blog_sync import show_blog_posts
        asyncio.run(show_blog_posts())

    elif args.delete:
        success = asyncio.run(delete_post(args.delete))
        sys.exit(0 if success else 1)

    elif args.media:
        from tools.blog_sync import show_media
        asyncio.run(show_media())

    elif args.collections:
        success = asyncio.run(show_collections())
        sys.exit(0 if success else 1)

    elif args.quickview_show or args.quickview_widget:
        success = asyncio.run(show_quickview(args.collection, widget=args.quickview_widget))
        sys.exit(0 if success else 1)

    elif args.quickview_save:
        success = asyncio.run(save_quickview(args.quickview_save, args.collection))
        sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
