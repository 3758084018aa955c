import logging

from .constants import LOAD_TAG, UNLOAD_TAG, VOID_ELEMENTS
from .node import CommentNode, DocumentNode, ElementNode, RawCodeNode, TextNode
from .tokens import ParseError, TokenKind

logger = logging.getLogger(__name__)

_LEAF_FACTORIES = {
    TokenKind.TEXT: TextNode,
    TokenKind.COMMENT: CommentNode,
    TokenKind.RAW_CODE: RawCodeNode,
}

# Asset declarations never take children, with or without a trailing slash
_LEAF_TAGS = VOID_ELEMENTS | {LOAD_TAG, UNLOAD_TAG}


class TreeBuilder:
    """Build a DocumentNode from a token list using an open-element stack.

    Recovery is deliberately lenient: a closing tag pops the stack down to
    the nearest open element with the same name (case-insensitive) and is
    ignored when nothing matches, so ``<a><b></a></b>`` closes both elements
    at ``</a>`` and drops ``</b>``. Elements still open at end of input are
    closed implicitly. ``<load>`` and ``<unload>`` never take children and
    their closing tags are dropped. None of this ever raises.
    """

    __slots__ = ("collect_errors", "document", "errors", "open_elements")

    def __init__(self, collect_errors=False):
        self.collect_errors = bool(collect_errors)
        self.errors = []
        self.document = DocumentNode()
        self.open_elements = [self.document]

    @property
    def current_node(self):
        return self.open_elements[-1]

    def build(self, tokens):
        for token in tokens:
            self.process_token(token)
        return self.finish()

    def process_token(self, token):
        kind = token.kind
        factory = _LEAF_FACTORIES.get(kind)
        if factory is not None:
            self.current_node.append_child(factory(token.raw))
            return

        tag = token.parsed
        if not tag.name:
            # Doctypes, processing instructions and stray '<' pass through as text
            self.current_node.append_child(TextNode(token.raw))
            return

        name = tag.name.lower()
        if kind == TokenKind.TAG_CLOSE:
            if name not in (LOAD_TAG, UNLOAD_TAG):
                self._close_element(tag.name, token.position)
            return

        element = ElementNode(tag.name, tag.attrs)
        self.current_node.append_child(element)
        if tag.is_self_closing or name in _LEAF_TAGS:
            return
        self.open_elements.append(element)

    def finish(self):
        for element in self.open_elements[1:]:
            self._error("unclosed-element", None, f"<{element.name}> closed implicitly at end of input")
        del self.open_elements[1:]
        logger.debug("built tree with %d top-level nodes", len(self.document.children))
        return self.document

    def _close_element(self, name, position):
        target = name.lower()
        for index in range(len(self.open_elements) - 1, 0, -1):
            if self.open_elements[index].name.lower() == target:
                for skipped in self.open_elements[index + 1:]:
                    self._error("unclosed-element", position, f"<{skipped.name}> closed implicitly by </{name}>")
                del self.open_elements[index:]
                return
        self._error("unexpected-end-tag", position, f"</{name}> has no matching open element")

    def _error(self, code, position, message):
        if self.collect_errors:
            self.errors.append(ParseError(code, position, message))


def build_tree(tokens, *, collect_errors=False):
    """Build a DocumentNode from tokens."""
    return TreeBuilder(collect_errors=collect_errors).build(tokens)
