# ABOUTME: Shared fixtures for notion2md-server tests.
# ABOUTME: Provides raw Notion payload builders and an in-memory Notion client.

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from notion2md_server.errors import NotFoundError
from notion2md_server.models import Document, Heading, Paragraph, RichTextSpan, Text, Timestamp


def rich(text: str, href: str | None = None, **annotations) -> dict:
    """Build a Notion rich_text segment."""
    return {
        "type": "text",
        "plain_text": text,
        "href": href,
        "annotations": {
            "bold": False,
            "italic": False,
            "strikethrough": False,
            "underline": False,
            "code": False,
            "color": "default",
            **annotations,
        },
    }


def raw_block(block_id: str, block_type: str, text: str = "", children: list | None = None, **data) -> dict:
    """Build a Notion block dict, optionally with children already attached."""
    block = {
        "object": "block",
        "id": block_id,
        "type": block_type,
        "has_children": bool(children),
        block_type: {"rich_text": [rich(text)] if text else [], **data},
    }
    if children is not None:
        block["_children"] = children
    return block


class FakeNotionClient:
    """In-memory stand-in for NotionClient.

    Blocks built with ``raw_block(..., children=[...])`` are served through
    ``get_blocks`` the way the real API pages them out.
    """

    def __init__(self, pages: dict | None = None, blocks: dict | None = None, databases: dict | None = None):
        self.pages = pages or {}
        self.databases = databases or {}
        self.blocks: dict[str, list[dict]] = {}
        self.calls: list[tuple[str, str]] = []
        for parent_id, children in (blocks or {}).items():
            self._register(parent_id, children)

    def _register(self, parent_id: str, children: list[dict]) -> None:
        self.blocks[parent_id] = children
        for child in children:
            nested = child.pop("_children", None)
            if nested:
                self._register(child["id"], nested)

    def get_page(self, page_id: str) -> dict:
        self.calls.append(("get_page", page_id))
        if page_id not in self.pages:
            raise NotFoundError(f"Could not find page with ID: {page_id}")
        return self.pages[page_id]

    def get_blocks(self, block_id: str) -> list[dict]:
        self.calls.append(("get_blocks", block_id))
        return [dict(block) for block in self.blocks.get(block_id, [])]

    def query_database(self, database_id: str) -> list[dict]:
        self.calls.append(("query_database", database_id))
        if database_id not in self.databases:
            raise NotFoundError(f"Could not find database with ID: {database_id}")
        return self.databases[database_id]


@pytest.fixture
def midnight() -> datetime:
    return datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def sample_page() -> dict:
    return {
        "object": "page",
        "id": "page-1",
        "properties": {
            "Title": {"id": "title", "type": "title", "title": [rich("Sample Page")]},
            "Created": {"id": "c", "type": "date", "date": {"start": "2024-01-01", "end": None}},
        },
    }


@pytest.fixture
def sample_blocks() -> list[dict]:
    return [
        raw_block("b1", "heading_1", "Sample Page"),
        raw_block("b2", "paragraph", "This is a sample page content in markdown format."),
    ]


@pytest.fixture
def fake_client(sample_page, sample_blocks) -> FakeNotionClient:
    return FakeNotionClient(
        pages={"page-1": sample_page},
        blocks={"page-1": sample_blocks},
        databases={"db-1": [{"id": f"row-{i}"} for i in range(5)]},
    )


@pytest.fixture
def sample_document(midnight) -> Document:
    return Document(
        id="page-1",
        properties={"Title": Text("Sample Page"), "Created": Timestamp(midnight)},
        blocks=[
            Heading(1, [RichTextSpan("Sample Page")]),
            Paragraph([RichTextSpan("This is a sample page content in markdown format.")]),
        ],
    )
