"""HTML serialization utilities for template nodes."""

from __future__ import annotations

from typing import Any

from .constants import VOID_ELEMENTS


def escape_html(value: Any) -> str:
    """Escape like PHP ``htmlspecialchars($v, ENT_QUOTES, 'UTF-8')``."""
    if value is None:
        return ""
    return (
        str(value)
        .replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&#039;")
    )


def serialize_attrs(
    attrs: dict[str, str | bool] | None,
    tag_name: str = "",
    *,
    skip: tuple[str, ...] = (),
) -> str:
    """Render attributes as `` name`` or `` name="value"``.

    An attribute named like its own tag (case-insensitive) is never emitted,
    nor are the reserved names in `skip`.
    """
    if not attrs:
        return ""
    lower_tag = tag_name.lower()
    parts: list[str] = []
    for key, value in attrs.items():
        if key.lower() == lower_tag or key in skip:
            continue
        if value is True:
            parts.extend([" ", key])
        else:
            parts.extend([" ", key, '="', escape_html(value), '"'])
    return "".join(parts)


def serialize_start_tag(name: str, attrs: dict[str, str | bool] | None = None, *, skip: tuple[str, ...] = ()) -> str:
    return f"<{name}{serialize_attrs(attrs, name, skip=skip)}>"


def serialize_end_tag(name: str) -> str:
    return f"</{name}>"


def is_void(name: str) -> bool:
    return name.lower() in VOID_ELEMENTS


def to_test_format(node: Any, indent: int = 0) -> str:
    """Dump a tree in an html5lib-like ``| `` prefixed format.

    Used by tests and by the CLI ``--tree`` option to compare tree shapes.
    """
    if node.name == "#document":
        return "\n".join(_node_to_test_format(child, 0) for child in node.children)
    return _node_to_test_format(node, indent)


def _node_to_test_format(node: Any, indent: int) -> str:
    padding = " " * indent
    if node.name == "#text":
        return f'| {padding}"{node.data}"'
    if node.name == "#comment":
        return f"| {padding}<!-- {node.data} -->"
    if node.name == "#raw":
        return f"| {padding}{node.data}"

    sections = [f"| {padding}<{node.name}>"]
    for attr_name in sorted(node.attrs):
        value = node.attrs[attr_name]
        shown = "" if value is True else value
        sections.append(f'| {padding}  {attr_name}="{shown}"')
    sections.extend(_node_to_test_format(child, indent + 2) for child in node.children)
    return "\n".join(sections)
