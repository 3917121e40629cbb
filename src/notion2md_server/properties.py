# ABOUTME: Coerces Notion page properties into typed values, JSON and frontmatter.
# ABOUTME: Fails closed on property types it does not recognise.

import math
from datetime import datetime, time, timezone
from typing import Any

import yaml

from .errors import UnsupportedPropertyError
from .models import Boolean, Number, PropertyMap, PropertyValue, StringList, Text, Timestamp

PROPERTY_TYPES = (Text, Number, Boolean, StringList, Timestamp)


def format_timestamp(value: datetime) -> str:
    """Format as ISO-8601 UTC with second precision (YYYY-MM-DDTHH:MM:SSZ)."""
    return _as_utc(value).strftime("%Y-%m-%dT%H:%M:%SZ")


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _unsupported(value: Any) -> UnsupportedPropertyError:
    return UnsupportedPropertyError(f"Unsupported property value: {type(value).__name__}")


class FrontmatterDumper(yaml.SafeDumper):
    """SafeDumper that knows the property variants.

    Block sequences are indented under their key, and repeated values are
    written out in full instead of as anchors.
    """

    def increase_indent(self, flow=False, indentless=False):
        return super().increase_indent(flow, False)

    def ignore_aliases(self, data):
        return True


def _represent_number(dumper: FrontmatterDumper, value: Number) -> yaml.Node:
    number = float(value.value)
    if math.isfinite(number) and number.is_integer() and abs(number) < 1e16:
        return dumper.represent_int(int(number))
    return dumper.represent_float(number)


def _represent_timestamp(dumper: FrontmatterDumper, value: Timestamp) -> yaml.Node:
    utc = _as_utc(value.value)
    if utc.time() == time(0, 0):
        return dumper.represent_date(utc.date())
    return dumper.represent_scalar("tag:yaml.org,2002:timestamp", format_timestamp(utc))


FrontmatterDumper.add_representer(Text, lambda dumper, value: dumper.represent_str(value.value))
FrontmatterDumper.add_representer(Boolean, lambda dumper, value: dumper.represent_bool(bool(value.value)))
FrontmatterDumper.add_representer(StringList, lambda dumper, value: dumper.represent_list(list(value.values)))
FrontmatterDumper.add_representer(Number, _represent_number)
FrontmatterDumper.add_representer(Timestamp, _represent_timestamp)


def dump_frontmatter_yaml(data: Any) -> str:
    """Serialize property values with PyYAML, keeping mapping order."""
    return yaml.dump(
        data,
        Dumper=FrontmatterDumper,
        default_flow_style=False,
        allow_unicode=True,
        sort_keys=False,
        width=float("inf"),
    )


def to_json(value: PropertyValue) -> Any:
    """Coerce a property value into a JSON-compatible value."""
    if isinstance(value, Text):
        return value.value
    if isinstance(value, Boolean):
        return bool(value.value)
    if isinstance(value, Number):
        return float(value.value)
    if isinstance(value, StringList):
        return list(value.values)
    if isinstance(value, Timestamp):
        return format_timestamp(value.value)
    raise _unsupported(value)


def to_frontmatter_scalar(value: PropertyValue) -> str:
    """Coerce a property value into its frontmatter representation.

    Text is quoted whenever a YAML reader would otherwise resolve it to
    another type. Integral numbers drop their fraction, midnight timestamps
    become plain dates and string lists become block sequences.
    """
    if not isinstance(value, PROPERTY_TYPES):
        raise _unsupported(value)
    rendered = dump_frontmatter_yaml(value)
    # Plain scalars at document root end with an explicit document end marker
    if rendered.endswith("\n...\n"):
        rendered = rendered[: -len("...\n")]
    return rendered.rstrip("\n")


def properties_to_json(properties: PropertyMap) -> dict[str, Any]:
    """Coerce a whole property map, preserving key order."""
    return {name: to_json(value) for name, value in properties.items()}


# Notion property translation


def _plain_text(rich_text: list[dict]) -> str:
    return "".join(segment.get("plain_text", "") for segment in rich_text or [])


def _text_or_none(text: str | None) -> Text | None:
    if text is None:
        return None
    stripped = text.strip()
    return Text(stripped) if stripped else None


def _list_or_none(items: list) -> StringList | None:
    values = tuple(item for item in items if item)
    return StringList(values) if values else None


def parse_notion_datetime(raw: str) -> datetime:
    """Parse a Notion date or datetime string into an aware UTC datetime.

    Date-only values become midnight UTC.
    """
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    return _as_utc(datetime.fromisoformat(raw))


def _timestamp_or_none(raw: str | None) -> Timestamp | None:
    if not raw:
        return None
    return Timestamp(parse_notion_datetime(raw))


def _date_value(date: dict | None) -> Timestamp | None:
    if not date:
        return None
    return _timestamp_or_none(date.get("start"))


def _number_or_none(number) -> Number | None:
    if number is None:
        return None
    return Number(float(number))


def _formula_value(formula: dict) -> PropertyValue | None:
    formula_type = formula.get("type")
    if formula_type == "string":
        return _text_or_none(formula.get("string"))
    if formula_type == "number":
        return _number_or_none(formula.get("number"))
    if formula_type == "boolean":
        value = formula.get("boolean")
        return None if value is None else Boolean(bool(value))
    if formula_type == "date":
        return _date_value(formula.get("date"))
    raise UnsupportedPropertyError(f"Unsupported formula result type: {formula_type}")


def _rollup_value(rollup: dict) -> PropertyValue | None:
    rollup_type = rollup.get("type")
    if rollup_type == "number":
        return _number_or_none(rollup.get("number"))
    if rollup_type == "date":
        return _date_value(rollup.get("date"))
    if rollup_type == "array":
        items = []
        for item in rollup.get("array", []):
            value = property_from_notion(item)
            if value is None:
                continue
            if isinstance(value, StringList):
                items.extend(value.values)
            elif isinstance(value, Text):
                items.append(value.value)
            else:
                items.append(to_frontmatter_scalar(value))
        return _list_or_none(items)
    raise UnsupportedPropertyError(f"Unsupported rollup result type: {rollup_type}")


def _unique_id_value(unique_id: dict | None) -> Text | None:
    if not unique_id or unique_id.get("number") is None:
        return None
    prefix = unique_id.get("prefix")
    number = unique_id["number"]
    return Text(f"{prefix}-{number}" if prefix else str(number))


def property_from_notion(prop: dict) -> PropertyValue | None:
    """Translate a raw Notion property into a typed value.

    Returns:
        The typed value, or None when the property is empty.

    Raises:
        UnsupportedPropertyError: If the property type is not recognised.
    """
    prop_type = prop.get("type")

    if prop_type in ("title", "rich_text"):
        return _text_or_none(_plain_text(prop.get(prop_type, [])))
    if prop_type in ("select", "status"):
        option = prop.get(prop_type)
        return _text_or_none(option.get("name")) if option else None
    if prop_type == "multi_select":
        return _list_or_none([option.get("name") for option in prop.get("multi_select", [])])
    if prop_type == "number":
        return _number_or_none(prop.get("number"))
    if prop_type == "checkbox":
        return Boolean(bool(prop.get("checkbox")))
    if prop_type in ("url", "email", "phone_number"):
        return _text_or_none(prop.get(prop_type))
    if prop_type == "date":
        return _date_value(prop.get("date"))
    if prop_type in ("created_time", "last_edited_time"):
        return _timestamp_or_none(prop.get(prop_type))
    if prop_type == "people":
        return _list_or_none([person.get("name") for person in prop.get("people", [])])
    if prop_type in ("created_by", "last_edited_by"):
        user = prop.get(prop_type) or {}
        return _text_or_none(user.get("name"))
    if prop_type == "files":
        return _list_or_none([f.get("name") for f in prop.get("files", [])])
    if prop_type == "relation":
        return _list_or_none([r.get("id") for r in prop.get("relation", [])])
    if prop_type == "unique_id":
        return _unique_id_value(prop.get("unique_id"))
    if prop_type == "formula":
        return _formula_value(prop.get("formula") or {})
    if prop_type == "rollup":
        return _rollup_value(prop.get("rollup") or {})

    raise UnsupportedPropertyError(f"Unsupported property type: {prop_type}")


def properties_from_page(page: dict) -> PropertyMap:
    """Build the ordered property map of a Notion page, skipping empty values."""
    properties: PropertyMap = {}
    for name, prop in (page.get("properties") or {}).items():
        if not prop:
            continue
        try:
            value = property_from_notion(prop)
        except UnsupportedPropertyError as e:
            raise UnsupportedPropertyError(f"Property '{name}': {e}") from e
        if value is not None:
            properties[name] = value
    return properties
