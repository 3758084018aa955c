"""Deferred CSS/JS declarations collected from ``<load>`` elements.

Declarations are gathered during the tree walk and written out once, after
the whole document is rendered, just before ``</head>`` (stylesheets and
head scripts) and ``</body>`` (body scripts). A collector belongs to a single
compile invocation.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from .constants import ASSET_KINDS, DEFAULT_MEDIA, DEFAULT_SLOT, LAST_INDEX
from .serialize import escape_html

logger = logging.getLogger(__name__)

_HEAD_END_PATTERN = re.compile(r"</head(?=[\s/>])[^>]*>", re.IGNORECASE)
_BODY_END_PATTERN = re.compile(r"</body(?=[\s/>])[^>]*>", re.IGNORECASE)
_LEADING_INT_PATTERN = re.compile(r"\s*([+-]?\d+)")


@dataclass(frozen=True, slots=True)
class AssetDeclaration:
    kind: str
    target: str
    order_index: int = LAST_INDEX
    media: str = DEFAULT_MEDIA
    slot: str = DEFAULT_SLOT
    sequence: int = 0

    def to_html(self) -> str:
        target = escape_html(self.target)
        if self.kind == "css":
            return f'<link rel="stylesheet" href="{target}" media="{escape_html(self.media)}">'
        return f'<script src="{target}"></script>'


def target_extension(target: str) -> str:
    """Lower-cased file extension of an asset path, ignoring query and fragment."""
    path = re.split(r"[?#]", target, maxsplit=1)[0]
    basename = path.rsplit("/", 1)[-1]
    if "." not in basename:
        return ""
    return basename.rsplit(".", 1)[-1].lower()


def parse_index(value: str | bool | None) -> int:
    """Read an ``index`` attribute the way PHP's intval() reads a string."""
    if value is None:
        return LAST_INDEX
    if value is True:
        return 1
    match = _LEADING_INT_PATTERN.match(value)
    return int(match.group(1)) if match else 0


class AssetCollector:
    __slots__ = ("_declarations",)

    def __init__(self) -> None:
        self._declarations: list[AssetDeclaration] = []

    def __len__(self) -> int:
        return len(self._declarations)

    def add(
        self,
        kind: str,
        target: str,
        *,
        order_index: int = LAST_INDEX,
        media: str = DEFAULT_MEDIA,
        slot: str = DEFAULT_SLOT,
    ) -> AssetDeclaration:
        if kind not in ASSET_KINDS:
            msg = f"Unknown asset kind: {kind!r}"
            raise ValueError(msg)
        declaration = AssetDeclaration(
            kind=kind,
            target=target,
            order_index=order_index,
            media=media,
            slot=slot,
            sequence=len(self._declarations),
        )
        self._declarations.append(declaration)
        return declaration

    def stylesheets(self) -> list[AssetDeclaration]:
        return self._ordered(d for d in self._declarations if d.kind == "css")

    def scripts(self, slot: str) -> list[AssetDeclaration]:
        return self._ordered(d for d in self._declarations if d.kind == "js" and d.slot == slot)

    @staticmethod
    def _ordered(declarations):
        return sorted(declarations, key=lambda d: (d.order_index, d.sequence))

    def inject(self, text: str) -> str:
        """Insert collected tags before the first ``</head>`` and ``</body>``."""
        if not self._declarations:
            return text

        head = [d.to_html() for d in self.stylesheets() + self.scripts("head")]
        body = [d.to_html() for d in self.scripts("body")]

        text, head_done = _insert_before(_HEAD_END_PATTERN, text, head)
        text, body_done = _insert_before(_BODY_END_PATTERN, text, body)

        dropped = (0 if head_done else len(head)) + (0 if body_done else len(body))
        if dropped:
            logger.warning("dropped %d asset declaration(s): no closing head/body marker in output", dropped)
        logger.debug("injected %d asset tag(s)", len(head) + len(body) - dropped)
        return text


def _insert_before(pattern: re.Pattern[str], text: str, lines: list[str]) -> tuple[str, bool]:
    if not lines:
        return text, True
    match = pattern.search(text)
    if match is None:
        return text, False
    index = match.start()
    return text[:index] + "\n".join(lines) + "\n" + text[index:], True
