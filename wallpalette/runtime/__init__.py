# Copyright (c) 2026 Wallpalette
# SPDX-License-Identifier: MIT

"""
Runtime around the extraction core.

1. Processor -- change-gated, serialized pipeline runs
2. Scheduler -- debounced triggers and polling
3. Serializers -- JSON record, swatch image, terminal config block

Artifacts are produced in memory; where they are written is up to the
caller.
"""

from wallpalette.runtime.processor import (
    PaletteProcessor,
    ProcessOutcome,
    ProcessResult,
)
from wallpalette.runtime.scheduler import Debouncer, PaletteAgent
from wallpalette.runtime.serializers import (
    SerializerFormat,
    merge_ghostty_config,
    render_ghostty_block,
    render_swatch,
    to_json,
    to_record,
)

__all__ = [
    "PaletteProcessor",
    "ProcessOutcome",
    "ProcessResult",
    "Debouncer",
    "PaletteAgent",
    "to_record",
    "to_json",
    "render_swatch",
    "render_ghostty_block",
    "merge_ghostty_config",
    "SerializerFormat",
]
