import logging
import re

from .constants import COMMENT_CLOSE, COMMENT_OPEN, RAW_BLOCK_CLOSE, RAW_BLOCK_OPEN, RAWTEXT_ELEMENTS
from .errors import LexError
from .tokens import ParseError, TagInfo, Token, TokenKind

logger = logging.getLogger(__name__)

_CLOSING_TAG_PATTERN = re.compile(r"<\s*/")
_SELF_CLOSING_PATTERN = re.compile(r"/\s*>$")
_OPEN_TAG_NAME_PATTERN = re.compile(r"<\s*([a-zA-Z0-9:_-]+)")
_CLOSE_TAG_NAME_PATTERN = re.compile(r"<\s*/\s*([a-zA-Z0-9:_-]+)")
_TAG_TAIL_PATTERN = re.compile(r"/?\s*>$")
_ATTRIBUTE_PATTERN = re.compile(
    r"""([a-zA-Z0-9:_-]+)"""
    r"""(?:\s*=\s*(?:"((?:[^"\\]|\\.)*)"|'((?:[^'\\]|\\.)*)'|([^\s"'=<>`]+)))?""",
    re.DOTALL,
)
_RAWTEXT_END_PATTERNS = {
    name: re.compile(r"\{@|</" + re.escape(name) + r"(?=[\s/>]|\Z)", re.IGNORECASE) for name in RAWTEXT_ELEMENTS
}


def parse_tag(raw):
    """Parse a buffered tag (``<...>``, possibly unterminated) into a TagInfo."""
    is_closing = _CLOSING_TAG_PATTERN.match(raw) is not None
    is_self_closing = _SELF_CLOSING_PATTERN.search(raw) is not None

    pattern = _CLOSE_TAG_NAME_PATTERN if is_closing else _OPEN_TAG_NAME_PATTERN
    match = pattern.match(raw)
    if match:
        name = match.group(1)
        rest = raw[match.end():]
    else:
        name = ""
        rest = raw.lstrip("<")

    attrs = {}
    if not is_closing:
        rest = _TAG_TAIL_PATTERN.sub("", rest)
        for attr in _ATTRIBUTE_PATTERN.finditer(rest):
            double, single, bare = attr.group(2), attr.group(3), attr.group(4)
            if double is not None:
                value = double
            elif single is not None:
                value = single
            elif bare is not None:
                value = bare
            else:
                value = True
            # Later duplicates overwrite, first position is kept
            attrs[attr.group(1)] = value

    return TagInfo(name, attrs, is_closing=is_closing, is_self_closing=is_self_closing)


class Tokenizer:
    """Single-pass scanner turning template source into a flat token list.

    The scan never backtracks: each state consumes input left to right and
    hands over to the next state, so running time is linear in the input.
    """

    DATA = 0
    TAG = 1
    TAG_QUOTED = 2
    RAW_BLOCK = 3
    RAWTEXT = 4

    __slots__ = (
        "depth",
        "errors",
        "length",
        "pos",
        "quote_char",
        "rawtext_tag",
        "return_state",
        "source",
        "start",
        "state",
        "strict",
        "text_start",
        "tokens",
    )

    def __init__(self, source, *, strict=False, errors=None):
        self.source = source or ""
        self.length = len(self.source)
        self.strict = bool(strict)
        self.errors = errors
        self.pos = 0
        self.state = self.DATA
        self.return_state = self.DATA
        self.start = 0
        self.text_start = None
        self.quote_char = ""
        self.depth = 0
        self.rawtext_tag = None
        self.tokens = []

    def run(self):
        handlers = {
            self.DATA: self._state_data,
            self.TAG: self._state_tag,
            self.TAG_QUOTED: self._state_tag_quoted,
            self.RAW_BLOCK: self._state_raw_block,
            self.RAWTEXT: self._state_rawtext,
        }
        while self.pos < self.length:
            handlers[self.state]()
        self._finish()
        logger.debug("tokenized %d chars into %d tokens", self.length, len(self.tokens))
        return self.tokens

    # ----------------
    # States
    # ----------------

    def _state_data(self):
        source = self.source
        while self.pos < self.length:
            pos = self.pos
            ch = source[pos]
            if ch == "{" and source.startswith(RAW_BLOCK_OPEN, pos):
                self._begin_raw_block(self.DATA)
                return
            if ch == "<":
                self._flush_text()
                if source.startswith(COMMENT_OPEN, pos):
                    self._consume_comment()
                    return
                self.start = pos
                self.pos = pos + 1
                self.state = self.TAG
                return
            if self.text_start is None:
                self.text_start = pos
            self.pos = pos + 1

    def _state_tag(self):
        source = self.source
        while self.pos < self.length:
            pos = self.pos
            ch = source[pos]
            self.pos = pos + 1
            if ch in "\"'" and source[pos - 1] != "\\":
                self.quote_char = ch
                self.state = self.TAG_QUOTED
                return
            if ch == ">":
                self._emit_tag(source[self.start:self.pos])
                return

    def _state_tag_quoted(self):
        source = self.source
        quote = self.quote_char
        while self.pos < self.length:
            pos = self.pos
            self.pos = pos + 1
            if source[pos] == quote and source[pos - 1] != "\\":
                self.quote_char = ""
                self.state = self.TAG
                return

    def _state_raw_block(self):
        source = self.source
        while self.pos < self.length:
            pos = self.pos
            if source.startswith(RAW_BLOCK_OPEN, pos):
                self.depth += 1
                self.pos = pos + len(RAW_BLOCK_OPEN)
                continue
            self.pos = pos + 1
            if source[pos] == RAW_BLOCK_CLOSE:
                self.depth -= 1
                if self.depth == 0:
                    self.tokens.append(Token(TokenKind.RAW_CODE, source[self.start:self.pos], position=self.start))
                    self.state = self.return_state
                    return

    def _state_rawtext(self):
        pattern = _RAWTEXT_END_PATTERNS[self.rawtext_tag]
        match = pattern.search(self.source, self.pos)
        if self.text_start is None:
            self.text_start = self.pos
        if match is None:
            self.pos = self.length
            return
        self.pos = match.start()
        if match.group(0) == RAW_BLOCK_OPEN:
            self._begin_raw_block(self.RAWTEXT)
            return
        self._flush_text()
        self.rawtext_tag = None
        self.state = self.DATA

    # ----------------
    # Helpers
    # ----------------

    def _begin_raw_block(self, return_state):
        self._flush_text()
        self.start = self.pos
        self.pos += len(RAW_BLOCK_OPEN)
        self.depth = 1
        self.return_state = return_state
        self.state = self.RAW_BLOCK

    def _consume_comment(self):
        begin = self.pos
        body_start = begin + len(COMMENT_OPEN)
        end = self.source.find(COMMENT_CLOSE, body_start)
        if end == -1:
            self._report("eof-in-comment", begin, "comment is not closed before end of input")
            self.tokens.append(Token(TokenKind.COMMENT, self.source[body_start:], position=begin))
            self.pos = self.length
            return
        self.tokens.append(Token(TokenKind.COMMENT, self.source[body_start:end], position=begin))
        self.pos = end + len(COMMENT_CLOSE)

    def _emit_tag(self, raw):
        parsed = parse_tag(raw)
        kind = TokenKind.TAG_CLOSE if parsed.is_closing else TokenKind.TAG_OPEN
        self.tokens.append(Token(kind, raw, parsed, position=self.start))
        self.state = self.DATA
        name = parsed.name.lower()
        if kind == TokenKind.TAG_OPEN and not parsed.is_self_closing and name in RAWTEXT_ELEMENTS:
            self.rawtext_tag = name
            self.state = self.RAWTEXT

    def _flush_text(self):
        if self.text_start is not None:
            if self.pos > self.text_start:
                self.tokens.append(Token(TokenKind.TEXT, self.source[self.text_start:self.pos], position=self.text_start))
            self.text_start = None

    def _finish(self):
        state = self.state
        if state in (self.TAG, self.TAG_QUOTED):
            self._report("eof-in-tag", self.start, "tag is not closed before end of input")
            self._emit_tag(self.source[self.start:])
            self.state = self.DATA
        elif state == self.RAW_BLOCK:
            self._report("eof-in-raw-block", self.start, "raw-code block is not closed before end of input")
            self.tokens.append(Token(TokenKind.RAW_CODE, self.source[self.start:], position=self.start))
        self._flush_text()

    def _report(self, code, position, message):
        if self.strict:
            raise LexError(message, fragment=self.source[position:position + 40])
        if self.errors is not None:
            self.errors.append(ParseError(code, position, message))


def tokenize(source, *, strict=False, errors=None):
    """Tokenize template source into a list of Tokens."""
    return Tokenizer(source, strict=strict, errors=errors).run()
