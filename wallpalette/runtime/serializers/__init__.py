# Copyright (c) 2026 Wallpalette
# SPDX-License-Identifier: MIT

"""Serializers for palette artifacts."""

from wallpalette.runtime.serializers.base import SerializerFormat
from wallpalette.runtime.serializers.ghostty import (
    merge_ghostty_config,
    render_ghostty_block,
)
from wallpalette.runtime.serializers.record import to_json, to_record
from wallpalette.runtime.serializers.swatch import render_swatch

__all__ = [
    "SerializerFormat",
    "to_record",
    "to_json",
    "render_swatch",
    "render_ghostty_block",
    "merge_ghostty_config",
]
