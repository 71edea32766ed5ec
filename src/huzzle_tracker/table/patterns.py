"""Compiled regex patterns for markdown table cells."""

import re

# ─── Image Patterns ───────────────────────────────────────────────────────────

# Inline image "![alt](url)" or "![alt](<url with spaces>)"; one match per image
IMAGE_LINK_RE = re.compile(r"!\[[^\]]*\]\((?:<(?P<angled>[^>]*)>|(?P<bare>[^)\s]*))\)")

# Destinations containing these characters must be wrapped in <...>
NEEDS_ANGLE_BRACKETS_RE = re.compile(r"[\s()<>]")


# ─── Cell Escaping ────────────────────────────────────────────────────────────

# Punctuation that markdown-it would otherwise treat as markup inside a cell.
# "|" is the important one: an unescaped pipe splits the cell.
CELL_SPECIAL_RE = re.compile(r"([\\`*_\[\]<>|&])")
