# ABOUTME: Renders Notion rich text spans as inline Markdown.
# ABOUTME: Handles escaping, code fences and a fixed annotation wrapping order.

import re

from ..models import BOLD, CODE, ITALIC, STRIKETHROUGH, RichTextSpan

_SPECIAL_CHARS = re.compile(r"([\\`*_\[\]])")
_BACKTICK_RUN = re.compile(r"`+")


def escape_markdown(text: str) -> str:
    """Backslash-escape characters that Markdown would treat as syntax."""
    return _SPECIAL_CHARS.sub(r"\\\1", text)


def plain_text(spans: list[RichTextSpan]) -> str:
    """Concatenate span text without any formatting."""
    return "".join(span.text for span in spans)


def longest_backtick_run(text: str) -> int:
    return max((len(run) for run in _BACKTICK_RUN.findall(text)), default=0)


def _code_span(text: str) -> str:
    if not text:
        return ""
    fence = "`" * (longest_backtick_run(text) + 1)
    if text.startswith("`") or text.endswith("`"):
        text = f" {text} "
    return f"{fence}{text}{fence}"


def _wrap(text: str, marker: str) -> str:
    # Emphasis markers must hug non-whitespace, so keep padding outside
    core = text.strip()
    if not core:
        return text
    leading = text[: len(text) - len(text.lstrip())]
    trailing = text[len(text.rstrip()):]
    return f"{leading}{marker}{core}{marker}{trailing}"


def merge_spans(spans: list[RichTextSpan]) -> list[RichTextSpan]:
    """Merge adjacent unlinked spans that share the same annotations."""
    merged: list[RichTextSpan] = []
    for span in spans:
        if merged:
            last = merged[-1]
            if not last.link and not span.link and last.annotations == span.annotations:
                merged[-1] = RichTextSpan(last.text + span.text, last.annotations)
                continue
        merged.append(span)
    return merged


def render_span(span: RichTextSpan) -> str:
    """Render a single span.

    Wrapping order, innermost first: code, bold/italic, strikethrough, link.
    """
    annotations = span.annotations

    if CODE in annotations:
        text = _code_span(span.text)
    else:
        text = escape_markdown(span.text)

    if BOLD in annotations and ITALIC in annotations:
        text = _wrap(text, "***")
    elif BOLD in annotations:
        text = _wrap(text, "**")
    elif ITALIC in annotations:
        text = _wrap(text, "*")

    if STRIKETHROUGH in annotations:
        text = _wrap(text, "~~")

    if span.link:
        text = f"[{text}]({span.link})"

    return text


def render_rich_text(spans: list[RichTextSpan]) -> str:
    """Render a sequence of rich text spans as inline Markdown."""
    return "".join(render_span(span) for span in merge_spans(spans))
