"""Hex color helpers shared by label validation."""

from __future__ import annotations

import re

# `#RGB` or `#RRGGBB`, either case.
HEX_COLOR_PATTERN = r"^#([0-9A-Fa-f]{3}){1,2}$"

_HEX_COLOR_RE = re.compile(HEX_COLOR_PATTERN)


def is_valid_hex_color(value: str | None) -> bool:
    """Check if value is a valid #RGB or #RRGGBB hex color."""
    if not value:
        return False
    return bool(_HEX_COLOR_RE.match(value))
