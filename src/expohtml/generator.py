"""PHP code generation from a template tree.

A CodeGenerator renders one document: children first, then the element
itself, dispatching on reserved tags (``load``, ``unload``, ``block``) and
directive attributes (``loop`` before ``cond``). Asset declarations are
collected on the generator's own AssetCollector and injected after the
whole document has been rendered, so a generator must not be shared
between compile invocations.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from .assets import AssetCollector, parse_index, target_extension
from .constants import (
    COND_ATTR,
    DEFAULT_MEDIA,
    DEFAULT_SLOT,
    FRAGMENT_TAG,
    HOST_BLOCK_CLOSE,
    HOST_BLOCK_OPEN,
    HOST_PRINT_OPEN,
    LOAD_TAG,
    LOOP_ATTR,
    RAW_BLOCK_CLOSE,
    RAW_BLOCK_OPEN,
    SCRIPT_SLOTS,
    UNLOAD_TAG,
)
from .errors import StructureError
from .filters import compile_expression
from .options import CompileOptions
from .serialize import escape_html, is_void, serialize_end_tag, serialize_start_tag
from .validator import validate

if TYPE_CHECKING:
    from .node import DocumentNode, ElementNode, Node

logger = logging.getLogger(__name__)

_TEXT_MARKER_PATTERN = re.compile(r"\{@\s*(?P<code>.*?)\s*\}|\{\$(?P<expr>[^}]+)\}", re.DOTALL)
_LINE_COMMENT_PATTERN = re.compile(r"//.*", re.DOTALL)
_NATIVE_LOOP_PATTERN = re.compile(r"\sas\s")

_ENDFOREACH = f"{HOST_BLOCK_OPEN} endforeach; {HOST_BLOCK_CLOSE}"
_ENDFOR = f"{HOST_BLOCK_OPEN} endfor; {HOST_BLOCK_CLOSE}"
_ENDIF = f"{HOST_BLOCK_OPEN} endif; {HOST_BLOCK_CLOSE}"


def compile_loop(expr: str) -> tuple[str, str]:
    """Normalize a ``loop`` expression to a PHP loop start and end marker.

    Accepted forms:

    - ``items as $v`` / ``items as $k=>$v``  (native foreach)
    - ``items=>$v`` / ``items=>$k,$v``      (arrow style)
    - ``$i=0;$i<10;$i++``                   (C style for)
    """
    expr = expr.strip()
    if not expr:
        raise StructureError("Empty loop expression", fragment=expr)

    if _NATIVE_LOOP_PATTERN.search(expr):
        return f"{HOST_BLOCK_OPEN} foreach({expr}): {HOST_BLOCK_CLOSE}", _ENDFOREACH

    if "=>" in expr:
        collection, _, variables = (part.strip() for part in expr.partition("=>"))
        if not collection or not variables:
            raise StructureError(f"Incomplete loop expression: {expr}", fragment=expr)
        if "," in variables:
            key, _, value = (part.strip() for part in variables.partition(","))
            head = f"foreach({collection} as {key} => {value})"
        else:
            head = f"foreach({collection} as {variables})"
        return f"{HOST_BLOCK_OPEN} {head}: {HOST_BLOCK_CLOSE}", _ENDFOREACH

    return f"{HOST_BLOCK_OPEN} for({expr}): {HOST_BLOCK_CLOSE}", _ENDFOR


def _if_open(condition: str) -> str:
    return f"{HOST_BLOCK_OPEN} if({condition}): {HOST_BLOCK_CLOSE}"


def _code_block(code: str) -> str:
    return f"{HOST_BLOCK_OPEN}\n{code}\n{HOST_BLOCK_CLOSE}"


class CodeGenerator:
    __slots__ = ("assets", "opts")

    def __init__(self, opts: CompileOptions | None = None) -> None:
        self.opts = opts or CompileOptions()
        self.assets = AssetCollector()

    def generate(self, document: DocumentNode) -> str:
        """Render a whole document and run the deferred asset injection."""
        output = "".join(self.render(child) for child in document.children)
        if self.opts.inject_assets:
            output = self.assets.inject(output)
        return output

    def render(self, node: Node) -> str:
        name = node.name
        if name == "#text":
            return self._render_text(node.data)
        if name == "#raw":
            return self._render_raw_code(node.data)
        if name == "#comment":
            return self._render_comment(node.data)
        if name == "#document":
            return "".join(self.render(child) for child in node.children)
        return self._render_element(node)

    # ----------------
    # Leaves
    # ----------------

    def _render_text(self, text: str) -> str:
        return _TEXT_MARKER_PATTERN.sub(self._replace_marker, text)

    def _replace_marker(self, match: re.Match[str]) -> str:
        expr = match.group("expr")
        if expr is None:
            return self._host_code(match.group("code"))
        compiled = compile_expression(expr.strip())
        validate(compiled)
        return f"{HOST_PRINT_OPEN} {compiled} {HOST_BLOCK_CLOSE}"

    def _render_raw_code(self, data: str) -> str:
        code = data[len(RAW_BLOCK_OPEN):] if data.startswith(RAW_BLOCK_OPEN) else data
        if code.endswith(RAW_BLOCK_CLOSE):
            code = code[: -len(RAW_BLOCK_CLOSE)]
        return self._host_code(code)

    @staticmethod
    def _host_code(code: str) -> str:
        code = code.strip()
        if not code:
            return ""
        validate(code)
        return _code_block(code)

    @staticmethod
    def _render_comment(data: str) -> str:
        content = _LINE_COMMENT_PATTERN.sub("", data)
        return f"<!--{content}-->" if content else ""

    # ----------------
    # Elements
    # ----------------

    def _render_element(self, node: ElementNode) -> str:
        inner = "".join(self.render(child) for child in node.children)

        tag = node.tag_name
        if tag == LOAD_TAG:
            self._collect_load(node)
            return ""
        if tag == UNLOAD_TAG:
            return self._render_unload(node)
        if tag == FRAGMENT_TAG:
            return self._render_fragment(node, inner)

        if node.has_attr(LOOP_ATTR):
            loop_open, loop_close = compile_loop(self._directive(node, LOOP_ATTR))
            element = self._wrap_element(node, inner, skip=(LOOP_ATTR, COND_ATTR))
            if node.has_attr(COND_ATTR):
                element = f"{_if_open(self._directive(node, COND_ATTR))}{element}{_ENDIF}"
            return f"{loop_open}\n{element}\n{loop_close}"

        if node.has_attr(COND_ATTR):
            condition = self._directive(node, COND_ATTR)
            element = self._wrap_element(node, inner, skip=(COND_ATTR,))
            return f"\n{_if_open(condition)}{element}{_ENDIF}\n"

        return self._wrap_element(node, inner)

    @staticmethod
    def _wrap_element(node: ElementNode, inner: str, *, skip: tuple[str, ...] = ()) -> str:
        start = serialize_start_tag(node.name, node.attrs, skip=skip)
        if is_void(node.name):
            return start
        return f"{start}{inner}{serialize_end_tag(node.name)}"

    def _render_fragment(self, node: ElementNode, inner: str) -> str:
        if node.has_attr(LOOP_ATTR):
            loop_open, loop_close = compile_loop(self._directive(node, LOOP_ATTR))
            body = inner
            if node.has_attr(COND_ATTR):
                body = f"{_if_open(self._directive(node, COND_ATTR))}\n{inner}\n{_ENDIF}"
            return f"\n{loop_open}\n{body}\n{loop_close}\n"
        if node.has_attr(COND_ATTR):
            condition = self._directive(node, COND_ATTR)
            return f"\n{_if_open(condition)}\n{inner}\n{_ENDIF}\n"
        return inner

    @staticmethod
    def _directive(node: ElementNode, attr: str) -> str:
        value = node.attrs.get(attr)
        if value is True or value is None or not value.strip():
            raise StructureError(f"'{attr}' attribute on <{node.name}> needs an expression", fragment=attr)
        expr = value.strip()
        validate(expr)
        return expr

    # ----------------
    # Assets
    # ----------------

    @staticmethod
    def _target(node: ElementNode) -> str:
        target = node.attrs.get("target")
        if target is None or target is True or not target.strip():
            raise StructureError(f"Missing 'target' attribute in <{node.name}> tag")
        return target.strip()

    def _collect_load(self, node: ElementNode) -> None:
        attrs = node.attrs
        target = self._target(node)
        extension = target_extension(target)
        index = parse_index(attrs.get("index"))

        if extension == "css":
            media = attrs.get("media", DEFAULT_MEDIA)
            if media is True or not media.strip():
                media = DEFAULT_MEDIA
            self.assets.add("css", target, order_index=index, media=media.strip())
        elif extension == "js":
            slot = attrs.get("type", DEFAULT_SLOT)
            slot = DEFAULT_SLOT if slot is True else slot.strip().lower()
            if slot not in SCRIPT_SLOTS:
                raise StructureError(
                    f"Unsupported script slot in <load>: {slot}. Use 'head' or 'body'.",
                    fragment=target,
                )
            self.assets.add("js", target, order_index=index, slot=slot)
        else:
            raise StructureError(
                f"Unsupported file type in <load>: {extension}. Only .css and .js are supported.",
                fragment=target,
            )
        logger.debug("collected %s asset %s (index %d)", extension, target, index)

    def _render_unload(self, node: ElementNode) -> str:
        target = self._target(node)
        extension = target_extension(target)
        if extension not in ("css", "js"):
            raise StructureError(f"Unsupported file type in <unload>: {extension}", fragment=target)
        return f"<!-- Unload: {escape_html(target)} -->"
