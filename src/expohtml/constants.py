"""Shared constants for the template compiler."""

# HTML5 void elements (no closing tag, never any children)
VOID_ELEMENTS = frozenset({
    "area", "base", "br", "col", "embed", "hr", "img", "input",
    "link", "meta", "param", "source", "track", "wbr",
})

# Elements whose content is scanned as raw text (no tags, no comments)
RAWTEXT_ELEMENTS = frozenset({"script", "style"})

# Reserved template elements
LOAD_TAG = "load"
UNLOAD_TAG = "unload"
FRAGMENT_TAG = "block"

# Reserved directive attributes
COND_ATTR = "cond"
LOOP_ATTR = "loop"

# Raw-code block and comment delimiters
RAW_BLOCK_OPEN = "{@"
RAW_BLOCK_CLOSE = "}"
COMMENT_OPEN = "<!--"
COMMENT_CLOSE = "-->"

# Host (PHP) delimiters
HOST_BLOCK_OPEN = "<?php"
HOST_BLOCK_CLOSE = "?>"
HOST_PRINT_OPEN = "<?="

# Asset declarations without an explicit index sort after everything else
LAST_INDEX = 999999

ASSET_KINDS = ("css", "js")
SCRIPT_SLOTS = ("head", "body")
DEFAULT_MEDIA = "all"
DEFAULT_SLOT = "head"
