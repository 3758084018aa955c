"""Blacklist validation for author-supplied PHP fragments.

This is a surface-syntax check, not semantic analysis: it rejects direct
calls of dangerous functions, superglobal access and backtick shell
execution. Comments and string contents are stripped first, so a
blacklisted name that only appears as data (``"exec(1)" == $x``) passes.
Dynamically constructed calls are out of its reach.
"""

from __future__ import annotations

import logging
import re

from .errors import SecurityError

logger = logging.getLogger(__name__)

DANGEROUS_FUNCTIONS: tuple[str, ...] = (
    # Process execution
    "eval",
    "exec",
    "system",
    "shell_exec",
    "passthru",
    "proc_open",
    "popen",
    "pcntl_exec",
    "assert",
    "create_function",
    # Filesystem access
    "file_get_contents",
    "file_put_contents",
    "fopen",
    "fwrite",
    "unlink",
    "rmdir",
    "mkdir",
    "chmod",
    "chown",
    # Dynamic inclusion
    "include",
    "require",
    "include_once",
    "require_once",
)

SUPERGLOBALS: tuple[str, ...] = (
    "$_GET",
    "$_POST",
    "$_REQUEST",
    "$_COOKIE",
    "$_SERVER",
    "$_ENV",
    "$_FILES",
    "$_SESSION",
    "$GLOBALS",
)

_STRIP_PATTERN = re.compile(
    r"""(?P<double>"(?:[^"\\]|\\.)*")"""
    r"""|(?P<single>'(?:[^'\\]|\\.)*')"""
    r"""|(?P<block>/\*.*?\*/)"""
    r"""|(?P<line>//[^\n]*)""",
    re.DOTALL,
)

_FUNCTION_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = tuple(
    (name, re.compile(r"\b" + re.escape(name) + r"\s*\(", re.IGNORECASE)) for name in DANGEROUS_FUNCTIONS
)

# include/require are language constructs and also work without parentheses
_INCLUDE_STATEMENT_PATTERN = re.compile(r"(?<![\w$>:])(include|require)(_once)?\s*['\"$]", re.IGNORECASE)


def strip_comments_and_strings(code: str, *, keep_double_quoted: bool = False) -> str:
    """Remove comments and empty out string literals, left to right in one pass.

    With `keep_double_quoted`, double-quoted literals are left intact, since
    PHP interpolates variables inside them.
    """

    def replace(match: re.Match[str]) -> str:
        if match.group("double") is not None:
            return match.group("double") if keep_double_quoted else '""'
        if match.group("single") is not None:
            return "''"
        return ""

    return _STRIP_PATTERN.sub(replace, code)


def validate(code: str) -> None:
    """Raise SecurityError if `code` contains a blacklisted construct."""
    clean = strip_comments_and_strings(code)
    interpolating = strip_comments_and_strings(code, keep_double_quoted=True)

    for name, pattern in _FUNCTION_PATTERNS:
        if pattern.search(clean):
            logger.debug("rejected fragment calling %s(): %r", name, code)
            raise SecurityError(f"Dangerous function '{name}' is not allowed in template", fragment=code)

    match = _INCLUDE_STATEMENT_PATTERN.search(clean)
    if match:
        name = match.group(1) + (match.group(2) or "")
        raise SecurityError(f"Dangerous function '{name.lower()}' is not allowed in template", fragment=code)

    for variable in SUPERGLOBALS:
        if variable in interpolating:
            raise SecurityError(f"Direct access to superglobal '{variable}' is not allowed in template", fragment=code)

    if "`" in clean:
        raise SecurityError("Shell execution using backticks is not allowed in template", fragment=code)


def is_safe(code: str) -> bool:
    try:
        validate(code)
    except SecurityError:
        return False
    return True
