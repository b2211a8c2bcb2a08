"""
YAML serialization for Kubernetes manifests.

Renders the subset of YAML that manifests need (nested mappings, sequences
and scalars) without going through a general-purpose YAML emitter, so the
output is stable and predictable for golden-file comparisons.
"""

import re
from collections.abc import Mapping, Sequence
from typing import Any, Iterable

_INDENT_STEP = 2

_RESERVED_WORDS = frozenset({"true", "false", "null", "yes", "no"})
_SPECIAL_CHARS = (":", "#", "\n", '"', "'")
_SPECIAL_PREFIXES = ("{", "[", "*", "&")
_DIGITS_ONLY = re.compile(r"^\d+$")


class _Absent:
    """Marker for a mapping key that has not been set."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False


# Mapping entries holding ABSENT are dropped; entries holding None render as null
ABSENT = _Absent()


def quote_string(value: str) -> str:
    """
    Quote a string if leaving it bare would change how YAML reads it.

    Args:
        value: The string to render

    Returns:
        The string as-is, or wrapped in double quotes with backslashes and
        double quotes escaped
    """
    if (
        value == ""
        or any(char in value for char in _SPECIAL_CHARS)
        or value.startswith(_SPECIAL_PREFIXES)
        or value in _RESERVED_WORDS
        or _DIGITS_ONLY.match(value)
    ):
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    return value


def format_number(value: float) -> str:
    """Render a number as decimal text. Integral floats drop the trailing '.0'."""
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else repr(value)
    return str(value)


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def _present_items(mapping: Mapping) -> list:
    return [(key, item) for key, item in mapping.items() if item is not ABSENT]


def _is_block(value: Any) -> bool:
    """Return True if the value renders over one or more indented lines."""
    if isinstance(value, Mapping):
        return bool(_present_items(value))
    if _is_sequence(value):
        return len(value) > 0
    return False


def _render_scalar(value: Any) -> str:
    if value is None or value is ABSENT:
        return "null"
    # bool is checked first, it is a subclass of int
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return format_number(value)
    if isinstance(value, str):
        return quote_string(value)
    return str(value)


def _render_sequence(items: Sequence, indent: int) -> str:
    if not items:
        return "[]"

    pad = " " * indent
    lines = []
    for item in items:
        if _is_block(item):
            first, *rest = to_yaml(item).split("\n")
            lines.append(f"{pad}- {first}")
            lines.extend(f"{pad}{' ' * _INDENT_STEP}{line}" for line in rest)
        else:
            lines.append(f"{pad}- {to_yaml(item)}")
    return "\n".join(lines)


def _render_mapping(mapping: Mapping, indent: int) -> str:
    entries = _present_items(mapping)
    if not entries:
        return "{}"

    pad = " " * indent
    lines = []
    for key, item in entries:
        if _is_block(item):
            lines.append(f"{pad}{key}:")
            lines.append(to_yaml(item, indent + _INDENT_STEP))
        else:
            lines.append(f"{pad}{key}: {to_yaml(item)}")
    return "\n".join(lines)


def to_yaml(value: Any, indent: int = 0) -> str:
    """
    Serialize a value to YAML text.

    Mappings keep their insertion order. Keys whose value is ABSENT are
    omitted, keys whose value is None render as ``null``. Empty containers
    render inline as ``{}`` / ``[]``.

    Args:
        value: Mapping, sequence or scalar to serialize
        indent: Number of leading spaces for block lines at this level

    Returns:
        YAML text without a trailing newline
    """
    if isinstance(value, Mapping):
        return _render_mapping(value, indent)
    if _is_sequence(value):
        return _render_sequence(value, indent)
    return _render_scalar(value)


def to_multi_doc_yaml(values: Iterable[Any]) -> str:
    """
    Serialize several resources into one multi-document YAML string.

    Every document is preceded by a ``---`` separator line.
    """
    return "\n".join(f"---\n{to_yaml(value)}" for value in values)
