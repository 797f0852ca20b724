# Copyright (c) 2026 Wallpalette
# SPDX-License-Identifier: MIT

"""
Ghostty terminal config serializer.

Renders the palette as a marked block of ``palette = N=#RRGGBB`` lines and
merges it into existing config text, replacing a previous block in place.
"""

from __future__ import annotations

from wallpalette.schema import Palette

BEGIN_MARKER = "# BEGIN WallpaperPalette"
END_MARKER = "# END WallpaperPalette"

# Ghostty exposes 16 ANSI palette slots
MAX_SLOTS = 16


def render_ghostty_block(palette: Palette) -> str:
    """The marked palette block, newline-terminated."""
    lines = [BEGIN_MARKER]
    for i, color in enumerate(palette.colors[:MAX_SLOTS]):
        lines.append(f"palette = {i}={color.hex}")
    lines.append(END_MARKER)
    return "\n".join(lines) + "\n"


def merge_ghostty_config(existing: str, palette: Palette) -> str:
    """
    Insert or replace the palette block in Ghostty config text.

    An existing block (begin marker through end marker, plus the line
    breaks that follow it) is replaced where it stands. Otherwise the block
    is appended after the existing content.
    """
    block = render_ghostty_block(palette)

    start = existing.find(BEGIN_MARKER)
    end = existing.find(END_MARKER, start) if start != -1 else -1
    if start != -1 and end != -1:
        stop = end + len(END_MARKER)
        while stop < len(existing) and existing[stop] in "\r\n":
            stop += 1
        return existing[:start] + block + existing[stop:]

    content = existing.strip("\r\n")
    if not content:
        return block
    return content + "\n" + block
