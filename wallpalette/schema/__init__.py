# Copyright (c) 2026 Wallpalette
# SPDX-License-Identifier: MIT

"""
Schema definitions for palettes and configuration.

All types in this module are immutable (frozen dataclasses).
"""

from wallpalette.schema.palette import (
    Palette,
    PaletteConfig,
    RGBColor,
    SchedulerConfig,
)

__all__ = [
    "RGBColor",
    "Palette",
    "PaletteConfig",
    "SchedulerConfig",
]
