# ABOUTME: Composes a YAML frontmatter header from page properties.
# ABOUTME: Keys keep the page's property order; lists use block sequences.

from ..errors import UnsupportedPropertyError
from ..models import PropertyMap
from ..properties import PROPERTY_TYPES, dump_frontmatter_yaml


def compose_frontmatter(properties: PropertyMap) -> str:
    """Serialize properties as a frontmatter header.

    Args:
        properties: Ordered property map.

    Returns:
        Header including delimiters and a trailing blank line, or an empty
        string when there are no properties.
    """
    if not properties:
        return ""

    for name, value in properties.items():
        if not isinstance(value, PROPERTY_TYPES):
            raise UnsupportedPropertyError(f"Property '{name}': unsupported value {type(value).__name__}")

    body = dump_frontmatter_yaml(dict(properties))
    return f"---\n{body}---\n\n"


def apply_frontmatter(properties: PropertyMap, markdown: str) -> str:
    """Prepend the frontmatter header for ``properties`` to a Markdown body."""
    return compose_frontmatter(properties) + markdown
