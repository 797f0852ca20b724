# Copyright (c) 2026 Wallpalette
# SPDX-License-Identifier: MIT

"""
Wallpalette -- terminal palettes from wallpapers.

Derives a 16-color terminal palette (8 base colors + 8 bright variants)
from an image, deterministically and cheaply enough to run on every
wallpaper change.

Quick start::

    from wallpalette import extract, signature

    palette = extract("wallpaper.jpg")
    palette.hex_codes()     # ["#1D2B3A", ...] normal then bright
    signature(["wallpaper.jpg"])   # compare across runs to skip work
"""

from __future__ import annotations

import logging

__version__ = "1.0.0"

from wallpalette.core import (
    Signature,
    SignatureSource,
    build_signature,
    extract,
    extract_rgba,
    image_hash,
    signature,
)
from wallpalette.schema import (
    Palette,
    PaletteConfig,
    RGBColor,
    SchedulerConfig,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Core API
    "extract",
    "extract_rgba",
    "signature",
    "build_signature",
    "image_hash",
    # Types
    "Palette",
    "RGBColor",
    "PaletteConfig",
    "SchedulerConfig",
    "Signature",
    "SignatureSource",
    # Version
    "__version__",
]
