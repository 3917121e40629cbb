# ABOUTME: Notion API integration package.
# ABOUTME: Exports the client and the page/database fetching functions.

from .client import NotionClient, translate_error
from .pages import fetch_document, parse_blocks
from .databases import list_database_pages

__all__ = [
    "NotionClient",
    "translate_error",
    "fetch_document",
    "parse_blocks",
    "list_database_pages",
]
