import enum


class TokenKind(enum.IntEnum):
    TEXT = 0
    TAG_OPEN = 1
    TAG_CLOSE = 2
    COMMENT = 3
    RAW_CODE = 4


class TagInfo:
    __slots__ = ("attrs", "is_closing", "is_self_closing", "name")

    def __init__(self, name, attrs=None, is_closing=False, is_self_closing=False):
        self.name = name
        self.attrs = attrs if attrs is not None else {}
        self.is_closing = bool(is_closing)
        self.is_self_closing = bool(is_self_closing)

    def __repr__(self):
        if self.attrs:
            parts = []
            for name, value in self.attrs.items():
                parts.append(name if value is True else f"{name}={value!r}")
            attrs = " " + " ".join(parts)
        else:
            attrs = ""
        kind_str = "end" if self.is_closing else "start"
        closing = " /" if self.is_self_closing else ""
        return f"<{kind_str}:{self.name}{attrs}{closing}>"


class Token:
    __slots__ = ("kind", "parsed", "position", "raw")

    def __init__(self, kind, raw, parsed=None, position=0):
        self.kind = kind
        self.raw = raw
        self.parsed = parsed
        self.position = position

    @property
    def is_tag(self):
        return self.kind in (TokenKind.TAG_OPEN, TokenKind.TAG_CLOSE)

    def __repr__(self):
        if self.parsed is not None:
            return f"Token({self.kind.name}, {self.parsed!r})"
        return f"Token({self.kind.name}, {self.raw!r})"

    def __eq__(self, other):
        if not isinstance(other, Token):
            return NotImplemented
        return self.kind == other.kind and self.raw == other.raw

    __hash__ = None  # Unhashable since we define __eq__


class ParseError:
    """A non-fatal diagnostic recorded while tokenizing or building the tree."""

    __slots__ = ("code", "message", "position")

    def __init__(self, code, position=None, message=None):
        self.code = code
        self.position = position
        self.message = message or code

    def __repr__(self):
        if self.position is not None:
            return f"ParseError({self.code!r}, position={self.position})"
        return f"ParseError({self.code!r})"

    def __str__(self):
        prefix = f"({self.position}): " if self.position is not None else ""
        if self.message != self.code:
            return f"{prefix}{self.code} - {self.message}"
        return f"{prefix}{self.code}"

    def __eq__(self, other):
        if not isinstance(other, ParseError):
            return NotImplemented
        return self.code == other.code and self.position == other.position

    __hash__ = None
