"""Compile ``{$var|filter:option|directive}`` expressions into PHP expressions.

The filter table is a closed set of emission rules:

- CallFilter: ``f(value)`` or ``f(value, option)``
- ReorderFilter: ``f(option, value)``, for functions taking the format or separator first
- ShortenFilter: ``number_format(value/1000, option).'K'``
- LinkFilter: terminal, builds an ``<a>`` tag and ends the chain

Escape directives (``escape``, ``noescape``, ...) are not transformations;
they select the HTML-escaping call wrapped around the final expression.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Union

from .errors import FilterError

HTML_ESCAPE_FUNCTION = "htmlspecialchars"
HTML_ESCAPE_ARGS = "ENT_QUOTES | ENT_SUBSTITUTE, 'UTF-8'"

_VARIABLE_PATTERN = re.compile(r"""^[$a-zA-Z_][\w\[\]\->$()'"., ]*$""")


@dataclass(frozen=True, slots=True)
class CallFilter:
    function: str
    default_arg: str | None = None
    needs_escape: bool = True


@dataclass(frozen=True, slots=True)
class ReorderFilter:
    function: str
    default_arg: str | None = None
    needs_escape: bool = False


@dataclass(frozen=True, slots=True)
class ShortenFilter:
    divisor: int = 1000
    suffix: str = "K"
    default_arg: str | None = "2"
    needs_escape: bool = False


@dataclass(frozen=True, slots=True)
class LinkFilter:
    pass


FilterRule = Union[CallFilter, ReorderFilter, ShortenFilter, LinkFilter]


FILTERS: MappingProxyType[str, FilterRule] = MappingProxyType(
    {
        "escapejs": CallFilter(
            "json_encode",
            default_arg="JSON_HEX_TAG | JSON_HEX_APOS | JSON_HEX_QUOT | JSON_HEX_AMP",
            needs_escape=False,
        ),
        "json": CallFilter("json_encode", needs_escape=False),
        "strip": CallFilter("strip_tags"),
        "trim": CallFilter("trim"),
        "urlencode": CallFilter("rawurlencode", needs_escape=False),
        "lower": CallFilter("strtolower"),
        "upper": CallFilter("strtoupper"),
        "nl2br": CallFilter("nl2br", needs_escape=False),
        "join": ReorderFilter("implode", default_arg="', '", needs_escape=True),
        "date": ReorderFilter("date", default_arg="'Y-m-d H:i:s'"),
        "number_format": CallFilter("number_format", needs_escape=False),
        "number_shorten": ShortenFilter(),
        "link": LinkFilter(),
    }
)

ESCAPE_DIRECTIVES: MappingProxyType[str, str | None] = MappingProxyType(
    {
        "auto": HTML_ESCAPE_FUNCTION,
        "autoescape": HTML_ESCAPE_FUNCTION,
        "escape": HTML_ESCAPE_FUNCTION,
        "autolang": HTML_ESCAPE_FUNCTION,
        "noescape": None,
    }
)


def escape_call(handler: str, code: str) -> str:
    """Wrap `code` in the escaping call selected by a directive."""
    if handler == HTML_ESCAPE_FUNCTION:
        return f"{handler}({code}, {HTML_ESCAPE_ARGS})"
    return f"{handler}({code})"


def _emit(rule: FilterRule, code: str, option: str | None) -> str:
    if isinstance(rule, CallFilter):
        if option is None:
            return f"{rule.function}({code})"
        return f"{rule.function}({code}, {option})"
    if isinstance(rule, ReorderFilter):
        if option is None:
            return f"{rule.function}({code})"
        return f"{rule.function}({option}, {code})"
    if isinstance(rule, ShortenFilter):
        precision = option if option is not None else "0"
        return f"number_format({code}/{rule.divisor}, {precision}).'{rule.suffix}'"
    msg = f"Unsupported filter rule: {rule!r}"
    raise TypeError(msg)


def _emit_link(code: str, label: str | None, handler: str | None) -> str:
    href = escape_call(handler, code) if handler else code
    if label:
        text = escape_call(handler, f"(string){label}") if handler else label
    else:
        text = href
    return f"'<a href=\"' . ({href}) . '\">' . ({text}) . '</a>'"


def split_filter(segment: str) -> tuple[str, str | None]:
    """Split ``name:option`` into its parts; a missing or empty option is None."""
    name, sep, option = segment.partition(":")
    name = name.strip()
    option = option.strip() if sep else ""
    return name, option or None


def compile_variable(var: str) -> str:
    var = var.strip()
    if not var or not _VARIABLE_PATTERN.match(var):
        raise FilterError(f"Invalid variable expression: {var}", fragment=var)
    return var if var.startswith("$") else f"${var}"


def compile_expression(expr: str) -> str:
    """Compile a pipe-chained interpolation expression into a PHP expression.

    `expr` is the text between ``{$`` and ``}``, so ``name|upper`` compiles
    to ``htmlspecialchars(strtoupper($name), ENT_QUOTES | ENT_SUBSTITUTE, 'UTF-8')``.
    """
    var, *segments = expr.split("|")
    code = compile_variable(var)

    handler: str | None = HTML_ESCAPE_FUNCTION
    needs_escape = True

    for segment in segments:
        segment = segment.strip()
        if segment in ESCAPE_DIRECTIVES:
            handler = ESCAPE_DIRECTIVES[segment]
            needs_escape = handler is not None
            continue

        name, option = split_filter(segment)
        rule = FILTERS.get(name)
        if rule is None:
            raise FilterError(f"Unknown filter: {name}", fragment=expr)

        if isinstance(rule, LinkFilter):
            # link always wins: the rest of the chain is ignored
            return _emit_link(code, option, handler)

        if option is None:
            option = rule.default_arg
        code = _emit(rule, code, option)
        needs_escape = rule.needs_escape

    if needs_escape and handler:
        code = escape_call(handler, code)
    return code
