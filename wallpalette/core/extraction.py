# Copyright (c) 2026 Wallpalette
# SPDX-License-Identifier: MIT

"""
Main palette extraction API.

This is the primary entry point for Wallpalette's extraction core.
"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np
from numpy.typing import NDArray

from wallpalette.schema import Palette, PaletteConfig
from wallpalette.core.sampling import (
    ImageInput,
    buckets_to_points,
    load_rgba,
    resize_to_fit,
    sample_buckets,
)
from wallpalette.core.median_cut import seed_centroids
from wallpalette.core.clustering import refine_centroids
from wallpalette.core.selection import build_palette

logger = logging.getLogger(__name__)


def extract(
    image: ImageInput,
    config: Optional[PaletteConfig] = None,
) -> Palette:
    """
    Derive a terminal palette from an image.

    Pipeline: decode → downscale → stride-sample into buckets → median-cut
    seeds → CIEDE2000 refinement → ordered selection + bright variants.

    Args:
        image: One of:
            - Path to image file (str or Path)
            - Encoded image bytes
            - PIL Image
            - NumPy array of shape (H, W, 3) or (H, W, 4) with uint8 sRGB
        config: Extraction parameters (defaults if None)

    Returns:
        Palette of at most 2 × base_count colors. Undecodable or zero-area
        input yields an empty palette, which callers treat as "no update".

    Raises:
        TypeError: If ``image`` is of an unsupported type.
        ValueError: If an array input has the wrong shape or dtype.

    Example:
        >>> from wallpalette import extract
        >>> palette = extract("wallpaper.jpg")
        >>> len(palette), len(palette.normal)
        (16, 8)
    """
    config = config or PaletteConfig()

    pixels = load_rgba(image)
    if pixels is None:
        return Palette(base_count=config.base_count)

    return extract_rgba(pixels, config)


def extract_rgba(
    pixels: NDArray[np.uint8],
    config: Optional[PaletteConfig] = None,
) -> Palette:
    """
    Run the extraction pipeline on an already decoded (H, W, 4) RGBA array.

    Use this when the caller has decoded the image itself (see
    ``load_rgba``); the array is not premultiplied again.
    """
    config = config or PaletteConfig()
    empty = Palette(base_count=config.base_count)

    pixels = resize_to_fit(pixels, config.max_dimension)

    buckets = sample_buckets(
        pixels,
        bucket_bits=config.bucket_bits,
        max_sample_pixels=config.max_sample_pixels,
    )
    if not buckets:
        logger.debug("No pixels sampled; returning empty palette")
        return empty

    points = buckets_to_points(buckets)
    seeds = seed_centroids(points, config.base_count)
    centroids = refine_centroids(points, seeds)

    palette = build_palette(
        centroids,
        buckets,
        base_count=config.base_count,
        brightness_delta=config.brightness_delta,
    )
    logger.debug("Extracted palette: %s", palette)
    return palette
