# ABOUTME: Typed document model for Notion pages, blocks and properties.
# ABOUTME: Closed unions of dataclasses consumed by the Markdown converters.

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Union

BOLD = "bold"
ITALIC = "italic"
STRIKETHROUGH = "strikethrough"
CODE = "code"

ANNOTATIONS = (BOLD, ITALIC, STRIKETHROUGH, CODE)


@dataclass(frozen=True)
class RichTextSpan:
    """A run of text with uniform formatting and an optional link."""

    text: str
    annotations: frozenset[str] = frozenset()
    link: str | None = None


# Property values


@dataclass(frozen=True)
class Text:
    value: str


@dataclass(frozen=True)
class Number:
    value: float


@dataclass(frozen=True)
class Boolean:
    value: bool


@dataclass(frozen=True)
class StringList:
    values: tuple[str, ...]


@dataclass(frozen=True)
class Timestamp:
    """A point in time, always timezone-aware UTC."""

    value: datetime


PropertyValue = Union[Text, Number, Boolean, StringList, Timestamp]
PropertyMap = dict[str, PropertyValue]


# Blocks


@dataclass
class Paragraph:
    spans: list[RichTextSpan] = field(default_factory=list)
    children: list[BlockNode] = field(default_factory=list)


@dataclass
class Heading:
    level: int
    spans: list[RichTextSpan] = field(default_factory=list)
    children: list[BlockNode] = field(default_factory=list)


@dataclass
class BulletListItem:
    spans: list[RichTextSpan] = field(default_factory=list)
    children: list[BlockNode] = field(default_factory=list)


@dataclass
class NumberedListItem:
    spans: list[RichTextSpan] = field(default_factory=list)
    children: list[BlockNode] = field(default_factory=list)


@dataclass
class ToDo:
    checked: bool = False
    spans: list[RichTextSpan] = field(default_factory=list)
    children: list[BlockNode] = field(default_factory=list)


@dataclass
class Quote:
    spans: list[RichTextSpan] = field(default_factory=list)
    children: list[BlockNode] = field(default_factory=list)


@dataclass
class CodeBlock:
    text: str
    language: str = ""


@dataclass
class Table:
    rows: list[list[list[RichTextSpan]]] = field(default_factory=list)


@dataclass
class Divider:
    pass


@dataclass
class Unsupported:
    """A Notion block type outside the rendered vocabulary."""

    block_type: str


BlockNode = Union[
    Paragraph,
    Heading,
    BulletListItem,
    NumberedListItem,
    ToDo,
    Quote,
    CodeBlock,
    Table,
    Divider,
    Unsupported,
]

# Blocks that carry rich text and nested children
CONTAINER_BLOCKS = (Paragraph, Heading, BulletListItem, NumberedListItem, ToDo, Quote)


@dataclass
class Document:
    """A fetched page: its properties and top-level blocks."""

    id: str
    properties: PropertyMap = field(default_factory=dict)
    blocks: list[BlockNode] = field(default_factory=list)


@dataclass
class PageListing:
    """A pagination window over the pages of a database."""

    total: int
    offset: int
    limit: int
    page_ids: list[str] = field(default_factory=list)
