# ABOUTME: Converts the typed Notion block tree to Markdown.
# ABOUTME: Renders blocks with nesting rules and assembles top-level fragments.

from dataclasses import dataclass

from ..models import (
    CONTAINER_BLOCKS,
    BlockNode,
    BulletListItem,
    CodeBlock,
    Divider,
    Document,
    Heading,
    NumberedListItem,
    Paragraph,
    Quote,
    Table,
    ToDo,
    Unsupported,
)
from .richtext import longest_backtick_run, render_rich_text

BULLET = "bullet"
NUMBERED = "numbered"
TODO = "todo"

INDENT = "  "
QUOTE_PREFIX = "> "


@dataclass
class Fragment:
    """Rendered Markdown for one block, tagged with its list kind (if any)."""

    kind: str | None
    text: str


def list_kind(block: BlockNode) -> str | None:
    if isinstance(block, BulletListItem):
        return BULLET
    if isinstance(block, NumberedListItem):
        return NUMBERED
    if isinstance(block, ToDo):
        return TODO
    return None


def number_runs(blocks: list[BlockNode]) -> list[int]:
    """Compute list ordinals for siblings, restarting at 1 for each numbered run."""
    ordinals = []
    position = 0
    for block in blocks:
        if isinstance(block, NumberedListItem):
            position += 1
        else:
            position = 0
        ordinals.append(max(position, 1))
    return ordinals


def join_fragments(fragments: list[Fragment]) -> str:
    """Join sibling fragments, keeping runs of same-kind list items tight."""
    parts: list[str] = []
    previous_kind = None
    for fragment in fragments:
        if not fragment.text:
            previous_kind = None
            continue
        if parts:
            tight = fragment.kind is not None and fragment.kind == previous_kind
            parts.append("\n" if tight else "\n\n")
        parts.append(fragment.text)
        previous_kind = fragment.kind
    return "".join(parts)


def prefix_lines(text: str, prefix: str) -> str:
    """Prefix every line, leaving no trailing whitespace on blank lines."""
    return "\n".join(f"{prefix}{line}" if line else prefix.rstrip() for line in text.split("\n"))


def _list_item(marker: str, text: str) -> str:
    first, *rest = text.split("\n")
    lines = [f"{marker}{first}"]
    lines.extend(f"{INDENT}{line}" if line else "" for line in rest)
    return "\n".join(lines)


def _table_cell(cell) -> str:
    return render_rich_text(cell).replace("|", "\\|").replace("\n", " ")


def _render_table(table: Table) -> str:
    rows = [[_table_cell(cell) for cell in row] for row in table.rows]
    width = max((len(row) for row in rows), default=0)
    if width == 0:
        return ""

    lines = []
    for i, row in enumerate(rows):
        padded = row + [""] * (width - len(row))
        lines.append("| " + " | ".join(padded) + " |")
        if i == 0:
            lines.append("| " + " | ".join(["---"] * width) + " |")
    return "\n".join(lines)


def _render_code(block: CodeBlock) -> str:
    fence = "`" * max(3, longest_backtick_run(block.text) + 1)
    return f"{fence}{block.language}\n{block.text}\n{fence}"


def _own_text(block: BlockNode, ordinal: int) -> str:
    """Render a block's own content, without its children."""
    if isinstance(block, Paragraph):
        return render_rich_text(block.spans)

    if isinstance(block, Heading):
        level = min(max(block.level, 1), 6)
        text = render_rich_text(block.spans).replace("\n", " ")
        return f"{'#' * level} {text}"

    if isinstance(block, BulletListItem):
        return _list_item("- ", render_rich_text(block.spans))

    if isinstance(block, NumberedListItem):
        return _list_item(f"{ordinal}. ", render_rich_text(block.spans))

    if isinstance(block, ToDo):
        checkbox = "[x]" if block.checked else "[ ]"
        return _list_item(f"- {checkbox} ", render_rich_text(block.spans))

    if isinstance(block, Quote):
        return prefix_lines(render_rich_text(block.spans), QUOTE_PREFIX)

    if isinstance(block, CodeBlock):
        return _render_code(block)

    if isinstance(block, Table):
        return _render_table(block)

    if isinstance(block, Divider):
        return "---"

    if isinstance(block, Unsupported):
        return f"<!-- Unsupported block type: {block.block_type} -->"

    raise TypeError(f"Not a block node: {type(block).__name__}")


def _children(block: BlockNode) -> list[BlockNode]:
    if isinstance(block, CONTAINER_BLOCKS):
        return block.children
    return []


def _attach_children(block: BlockNode, own: str, children: list[Fragment]) -> str:
    """Place rendered children beneath a block's own content."""
    body = join_fragments(children)
    if not body:
        return own

    prefix = QUOTE_PREFIX if isinstance(block, Quote) else INDENT
    nested = prefix_lines(body, prefix)
    if not own:
        return nested

    first_kind = next(fragment.kind for fragment in children if fragment.text)
    if list_kind(block) is not None and first_kind is not None:
        separator = "\n"
    else:
        separator = f"\n{prefix.rstrip()}\n"
    return f"{own}{separator}{nested}"


def _render_subtree(block: BlockNode, ordinal: int) -> Fragment:
    # Post-order walk on an explicit stack; each frame collects its children's
    # fragments before the block itself is rendered.
    result: list[Fragment] = []
    stack = [(block, ordinal, result, None)]

    while stack:
        node, node_ordinal, sink, collected = stack.pop()
        children = _children(node)

        if children and collected is None:
            collected = []
            stack.append((node, node_ordinal, sink, collected))
            pairs = list(zip(children, number_runs(children)))
            for child, child_ordinal in reversed(pairs):
                stack.append((child, child_ordinal, collected, None))
            continue

        text = _own_text(node, node_ordinal)
        if collected:
            text = _attach_children(node, text, collected)
        sink.append(Fragment(list_kind(node), text))

    return result[0]


def render_block(block: BlockNode, depth: int = 0, ordinal: int = 1) -> str:
    """Render one block and all of its descendants.

    Args:
        block: The block to render.
        depth: Nesting level; each level indents the output by two spaces.
        ordinal: Position of a numbered list item within its run.

    Returns:
        Markdown fragment without a trailing newline.
    """
    text = _render_subtree(block, ordinal).text
    if depth > 0 and text:
        text = prefix_lines(text, INDENT * depth)
    return text


def render_fragments(blocks: list[BlockNode]) -> list[Fragment]:
    """Render top-level sibling blocks, numbering each numbered run from 1."""
    return [
        Fragment(list_kind(block), render_block(block, 0, ordinal))
        for block, ordinal in zip(blocks, number_runs(blocks))
    ]


def assemble(fragments: list[Fragment]) -> str:
    """Join top-level fragments into a document body.

    Trailing whitespace is trimmed from every line and the result ends with
    exactly one newline. A document without content is the empty string.
    """
    body = join_fragments(fragments)
    body = "\n".join(line.rstrip() for line in body.split("\n")).rstrip()
    return f"{body}\n" if body else ""


def blocks_to_markdown(blocks: list[BlockNode]) -> str:
    """Convert a list of top-level blocks to a Markdown document body."""
    return assemble(render_fragments(blocks))


def document_to_markdown(document: Document) -> str:
    """Convert a document's blocks to Markdown (no frontmatter)."""
    return blocks_to_markdown(document.blocks)
