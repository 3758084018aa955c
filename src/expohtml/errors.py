"""Exceptions raised by the template compiler.

Every error is fatal to the compile invocation that raised it: nothing is
emitted and nothing is retried. Non-fatal diagnostics are collected as
:class:`expohtml.tokens.ParseError` records instead.
"""

from __future__ import annotations


class TemplateError(Exception):
    """Base class for all compile failures."""

    code = "template-error"

    def __init__(self, message: str, *, fragment: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.fragment = fragment

    def __repr__(self) -> str:
        if self.fragment is not None:
            return f"{type(self).__name__}({self.message!r}, fragment={self.fragment!r})"
        return f"{type(self).__name__}({self.message!r})"


class LexError(TemplateError):
    """Malformed or unterminated tag, comment or raw-code block (strict mode only)."""

    code = "lex-error"


class StructureError(TemplateError):
    """Invalid use of a reserved element or directive."""

    code = "structure-error"


class SecurityError(TemplateError):
    """Embedded code matched the validator blacklist."""

    code = "security-error"


class FilterError(TemplateError):
    """Unknown filter or invalid variable reference in an interpolation."""

    code = "filter-error"
