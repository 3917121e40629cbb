# ABOUTME: Markdown conversion package.
# ABOUTME: Exports block, rich text and frontmatter rendering for Notion documents.

from .converter import (
    Fragment,
    assemble,
    blocks_to_markdown,
    document_to_markdown,
    render_block,
    render_fragments,
)
from .frontmatter import apply_frontmatter, compose_frontmatter
from .richtext import render_rich_text

__all__ = [
    "Fragment",
    "assemble",
    "blocks_to_markdown",
    "document_to_markdown",
    "render_block",
    "render_fragments",
    "apply_frontmatter",
    "compose_frontmatter",
    "render_rich_text",
]
