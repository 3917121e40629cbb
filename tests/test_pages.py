# ABOUTME: Tests for fetching Notion block trees and parsing them into the model.
# ABOUTME: Uses the in-memory fake client from conftest.

from __future__ import annotations

from conftest import FakeNotionClient, raw_block, rich
from notion2md_server.markdown import document_to_markdown
from notion2md_server.models import (
    BulletListItem,
    CodeBlock,
    Divider,
    Heading,
    NumberedListItem,
    Paragraph,
    Quote,
    RichTextSpan,
    Table,
    Text,
    ToDo,
    Unsupported,
)
from notion2md_server.notion.pages import (
    fetch_blocks_recursive,
    fetch_document,
    parse_block,
    parse_blocks,
    parse_rich_text,
)


class TestParseRichText:
    def test_annotations_and_link(self):
        spans = parse_rich_text([rich("x", href="https://a.b", bold=True, code=True, underline=True)])
        assert spans == [RichTextSpan("x", frozenset({"bold", "code"}), "https://a.b")]

    def test_empty(self):
        assert parse_rich_text([]) == []


class TestParseBlock:
    def test_paragraph(self):
        assert parse_block(raw_block("1", "paragraph", "hi")) == Paragraph([RichTextSpan("hi")])

    def test_headings(self):
        for level in (1, 2, 3):
            node = parse_block(raw_block("1", f"heading_{level}", "H"))
            assert isinstance(node, Heading) and node.level == level

    def test_list_items(self):
        assert isinstance(parse_block(raw_block("1", "bulleted_list_item", "a")), BulletListItem)
        assert isinstance(parse_block(raw_block("1", "numbered_list_item", "a")), NumberedListItem)

    def test_to_do(self):
        node = parse_block(raw_block("1", "to_do", "task", checked=True))
        assert isinstance(node, ToDo) and node.checked

    def test_callout_becomes_quote_with_icon(self):
        node = parse_block(raw_block("1", "callout", "note", icon={"type": "emoji", "emoji": "💡"}))
        assert isinstance(node, Quote)
        assert node.spans[0] == RichTextSpan("💡 ")

    def test_toggle_becomes_paragraph(self):
        assert isinstance(parse_block(raw_block("1", "toggle", "more")), Paragraph)

    def test_code(self):
        node = parse_block(raw_block("1", "code", "x = 1", language="python"))
        assert node == CodeBlock("x = 1", "python")

    def test_code_plain_text_language_dropped(self):
        node = parse_block(raw_block("1", "code", "x", language="plain text"))
        assert node.language == ""

    def test_divider(self):
        assert parse_block({"id": "1", "type": "divider", "divider": {}}) == Divider()

    def test_unknown_type(self):
        assert parse_block({"id": "1", "type": "embed", "embed": {"url": "u"}}) == Unsupported("embed")


class TestParseBlocks:
    def test_children_nested(self):
        raw = [
            {
                **raw_block("1", "bulleted_list_item", "outer"),
                "children": [raw_block("2", "bulleted_list_item", "inner")],
            },
            raw_block("3", "paragraph", "after"),
        ]
        nodes = parse_blocks(raw)
        assert len(nodes) == 2
        assert nodes[0].children == [BulletListItem([RichTextSpan("inner")])]
        assert nodes[1] == Paragraph([RichTextSpan("after")])

    def test_table_rows_folded(self):
        table = {
            "id": "t",
            "type": "table",
            "table": {"table_width": 2},
            "children": [
                {"id": "r1", "type": "table_row", "table_row": {"cells": [[rich("a")], [rich("b")]]}},
                {"id": "r2", "type": "table_row", "table_row": {"cells": [[rich("c")], []]}},
            ],
        }
        (node,) = parse_blocks([table])
        assert isinstance(node, Table)
        assert node.rows == [[[RichTextSpan("a")], [RichTextSpan("b")]], [[RichTextSpan("c")], []]]


class TestFetch:
    def test_fetch_blocks_recursive_attaches_children(self):
        client = FakeNotionClient(blocks={
            "page": [
                raw_block("a", "bulleted_list_item", "a", children=[
                    raw_block("b", "bulleted_list_item", "b", children=[
                        raw_block("c", "bulleted_list_item", "c"),
                    ]),
                ]),
                raw_block("d", "paragraph", "d"),
            ],
        })
        blocks = fetch_blocks_recursive(client, "page")
        assert [b["id"] for b in blocks] == ["a", "d"]
        assert blocks[0]["children"][0]["children"][0]["id"] == "c"
        assert ("get_blocks", "d") not in client.calls

    def test_fetch_document(self, fake_client):
        document = fetch_document(fake_client, "page-1")
        assert document.id == "page-1"
        assert document.properties["Title"] == Text("Sample Page")
        assert document_to_markdown(document) == (
            "# Sample Page\n\nThis is a sample page content in markdown format.\n"
        )

    def test_numbered_list_from_notion(self):
        client = FakeNotionClient(
            pages={"p": {"id": "p", "properties": {}}},
            blocks={"p": [
                raw_block("1", "numbered_list_item", "one"),
                raw_block("2", "numbered_list_item", "two"),
                raw_block("3", "paragraph", "break"),
                raw_block("4", "numbered_list_item", "again"),
            ]},
        )
        markdown = document_to_markdown(fetch_document(client, "p"))
        assert markdown == "1. one\n2. two\n\nbreak\n\n1. again\n"
