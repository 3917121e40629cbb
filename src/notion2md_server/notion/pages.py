# ABOUTME: Page and block fetching logic for Notion pages.
# ABOUTME: Retrieves the full block tree and parses it into the typed document model.

import logging

from ..models import (
    ANNOTATIONS,
    BlockNode,
    BulletListItem,
    CodeBlock,
    Divider,
    Document,
    Heading,
    NumberedListItem,
    Paragraph,
    Quote,
    RichTextSpan,
    Table,
    ToDo,
    Unsupported,
)
from ..properties import properties_from_page
from .client import NotionClient

logger = logging.getLogger(__name__)

# Block types that can have children
BLOCKS_WITH_CHILDREN = {
    "paragraph",
    "heading_1",
    "heading_2",
    "heading_3",
    "bulleted_list_item",
    "numbered_list_item",
    "toggle",
    "to_do",
    "quote",
    "callout",
    "table",
}

HEADING_LEVELS = {"heading_1": 1, "heading_2": 2, "heading_3": 3}


def fetch_blocks_recursive(client: NotionClient, block_id: str) -> list[dict]:
    """Fetch all blocks under a parent, including nested children.

    Children are attached to each block under a ``children`` key. Uses a
    work list rather than recursion, so deep trees are fine.

    Args:
        client: The Notion API client.
        block_id: The ID of the parent block or page.

    Returns:
        Top-level blocks with their children populated in-place.
    """
    blocks = client.get_blocks(block_id)
    pending = list(blocks)

    while pending:
        block = pending.pop()
        block_type = block.get("type")
        if block.get("has_children") and block_type in BLOCKS_WITH_CHILDREN:
            children = client.get_blocks(block["id"])
            block["children"] = children
            pending.extend(children)

    return blocks


def parse_rich_text(rich_text: list[dict]) -> list[RichTextSpan]:
    """Parse a Notion rich_text array into spans."""
    spans = []
    for segment in rich_text or []:
        annotations = segment.get("annotations") or {}
        spans.append(
            RichTextSpan(
                text=segment.get("plain_text", ""),
                annotations=frozenset(name for name in ANNOTATIONS if annotations.get(name)),
                link=segment.get("href"),
            )
        )
    return spans


def _callout_spans(data: dict) -> list[RichTextSpan]:
    spans = parse_rich_text(data.get("rich_text", []))
    icon = data.get("icon") or {}
    if icon.get("type") == "emoji" and icon.get("emoji"):
        spans.insert(0, RichTextSpan(f"{icon['emoji']} "))
    return spans


def _table_rows(block: dict) -> list[list[list[RichTextSpan]]]:
    rows = []
    for row in block.get("children", []):
        if row.get("type") != "table_row":
            continue
        cells = row.get("table_row", {}).get("cells", [])
        rows.append([parse_rich_text(cell) for cell in cells])
    return rows


def parse_block(block: dict) -> BlockNode:
    """Parse one raw Notion block, without its children."""
    block_type = block.get("type", "")
    data = block.get(block_type) or {}
    spans = parse_rich_text(data.get("rich_text", []))

    if block_type in ("paragraph", "toggle"):
        return Paragraph(spans)
    if block_type in HEADING_LEVELS:
        return Heading(HEADING_LEVELS[block_type], spans)
    if block_type == "bulleted_list_item":
        return BulletListItem(spans)
    if block_type == "numbered_list_item":
        return NumberedListItem(spans)
    if block_type == "to_do":
        return ToDo(bool(data.get("checked", False)), spans)
    if block_type == "quote":
        return Quote(spans)
    if block_type == "callout":
        return Quote(_callout_spans(data))
    if block_type == "code":
        language = data.get("language") or ""
        if language == "plain text":
            language = ""
        return CodeBlock("".join(s.text for s in spans), language)
    if block_type == "table":
        return Table(_table_rows(block))
    if block_type == "divider":
        return Divider()

    logger.debug(f"Unsupported block type: {block_type}")
    return Unsupported(block_type)


def parse_blocks(blocks: list[dict]) -> list[BlockNode]:
    """Parse a raw block tree into typed block nodes.

    Table rows are folded into their table; other children become child nodes.
    """
    nodes: list[BlockNode] = []
    pending = [(block, nodes) for block in reversed(blocks)]

    while pending:
        raw, siblings = pending.pop()
        node = parse_block(raw)
        siblings.append(node)
        if isinstance(node, Table):
            continue
        children = raw.get("children") or []
        if children and hasattr(node, "children"):
            pending.extend((child, node.children) for child in reversed(children))

    return nodes


def fetch_document(client: NotionClient, page_id: str) -> Document:
    """Fetch a page with its properties and full block tree.

    Args:
        client: The Notion API client.
        page_id: The ID of the page to fetch.

    Returns:
        Document with typed properties and blocks.
    """
    logger.debug(f"Fetching page {page_id}")

    page = client.get_page(page_id)
    properties = properties_from_page(page)
    raw_blocks = fetch_blocks_recursive(client, page_id)

    return Document(
        id=page.get("id", page_id),
        properties=properties,
        blocks=parse_blocks(raw_blocks),
    )
