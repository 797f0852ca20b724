# Copyright (c) 2026 Wallpalette
# SPDX-License-Identifier: MIT

"""
Palette selection.

Turns refined centroids into an ordered terminal palette: base colors by
descending population (with a total tie-break order), padded from raw
buckets when clustering produced too few, followed by one bright variant
per base color.
"""

from __future__ import annotations

from typing import Mapping, Sequence

import numpy as np

from wallpalette.core.clustering import Centroid
from wallpalette.core.colorspace import lab_to_srgb, srgb8_to_lab
from wallpalette.core.sampling import ColorBucket
from wallpalette.schema import Palette, RGBColor


def order_centroids(centroids: Sequence[Centroid]) -> list[Centroid]:
    """
    Sort centroids for selection.

    Population descending; ties by L* ascending, then a*, then b*.
    """
    return sorted(
        centroids,
        key=lambda c: (-c.population, c.lab[0], c.lab[1], c.lab[2]),
    )


def select_base_colors(
    centroids: Sequence[Centroid],
    buckets: Mapping[int, ColorBucket],
    base_count: int,
) -> list[RGBColor]:
    """
    Pick up to ``base_count`` base colors.

    The top centroids come first. If there are fewer centroids than
    ``base_count``, raw bucket means are appended in descending population
    order, skipping any whose hex equals an already chosen color.
    """
    base = [RGBColor.from_rgb8(*c.rgb8) for c in order_centroids(centroids)[:base_count]]
    if len(base) >= base_count:
        return base

    chosen = {color.hex for color in base}
    by_count = sorted(buckets.values(), key=lambda bucket: bucket.count, reverse=True)
    for bucket in by_count:
        if bucket.count == 0:
            continue
        fallback = RGBColor.from_rgb8(*bucket.mean_rgb8)
        if fallback.hex in chosen:
            continue
        base.append(fallback)
        chosen.add(fallback.hex)
        if len(base) >= base_count:
            break

    return base


def bright_variant(color: RGBColor, brightness_delta: float) -> RGBColor:
    """
    Lighten a color by ``brightness_delta`` L* units (capped at L* = 100).

    The color is rounded to 8 bits first, taken to Lab, lifted, and brought
    back through the inverse chain with channels clamped to [0, 1].
    """
    lab = srgb8_to_lab(color.rgb8)
    lab[0] = min(100.0, lab[0] + brightness_delta)
    r, g, b = np.clip(lab_to_srgb(lab), 0.0, 1.0)
    return RGBColor(float(r), float(g), float(b))


def build_palette(
    centroids: Sequence[Centroid],
    buckets: Mapping[int, ColorBucket],
    base_count: int,
    brightness_delta: float,
) -> Palette:
    """
    Assemble the final palette: base colors, then their bright variants.

    Returns an empty palette when there is nothing to choose from.
    """
    base = select_base_colors(centroids, buckets, base_count)
    bright = [bright_variant(color, brightness_delta) for color in base]
    colors = (base + bright)[:2 * base_count]
    return Palette(colors=tuple(colors), base_count=base_count)
