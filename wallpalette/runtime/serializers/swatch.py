# Copyright (c) 2026 Wallpalette
# SPDX-License-Identifier: MIT

"""
Swatch image renderer.

A grid of solid swatches, one column per base color and two rows: normal
colors on top, bright variants below. Cells without a color are black.
"""

from __future__ import annotations

from PIL import Image, ImageDraw

from wallpalette.schema import Palette

SWATCH_WIDTH = 120
SWATCH_HEIGHT = 30
PADDING = 2
ROWS = 2


def render_swatch(
    palette: Palette,
    *,
    swatch_width: int = SWATCH_WIDTH,
    swatch_height: int = SWATCH_HEIGHT,
    padding: int = PADDING,
) -> Image.Image:
    """
    Render the palette as an RGBA image.

    Padding between swatches is transparent.

    Returns:
        Image of size (cols × (w + p) + p, 2 × (h + p) + p), cols = base_count
    """
    cols = palette.base_count
    width = cols * (swatch_width + padding) + padding
    height = ROWS * (swatch_height + padding) + padding

    image = Image.new("RGBA", (width, height), (0, 0, 0, 0))
    draw = ImageDraw.Draw(image)

    for row in range(ROWS):
        for col in range(cols):
            idx = row * cols + col
            fill = palette[idx].rgb8 if idx < len(palette) else (0, 0, 0)
            x = padding + col * (swatch_width + padding)
            y = padding + row * (swatch_height + padding)
            draw.rectangle(
                [x, y, x + swatch_width - 1, y + swatch_height - 1],
                fill=fill + (255,),
            )

    return image
