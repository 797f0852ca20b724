# Copyright (c) 2026 Wallpalette
# SPDX-License-Identifier: MIT

"""
Palette record serializer.

Produces the JSON record consumed by terminal-theme tooling::

    {
      "timestamp": "2026-01-01T12:00:00Z",
      "wallpapers": ["/path/to/wallpaper.jpg"],
      "normal":  [{"hex": "#1D2B3A"}, ...],
      "bright":  [{"hex": "#4A5A6B"}, ...],
      "palette": [... normal + bright ...]
    }

Writing the record to disk is left to the caller.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Optional, Union

from wallpalette.runtime.serializers.base import SerializerFormat
from wallpalette.schema import Palette


def _timestamp(when: Optional[datetime]) -> str:
    when = when or datetime.now(timezone.utc)
    if when.tzinfo is not None:
        when = when.astimezone(timezone.utc)
    return when.strftime("%Y-%m-%dT%H:%M:%SZ")


def to_record(
    palette: Palette,
    wallpapers: Iterable[Union[str, Path]] = (),
    *,
    timestamp: Optional[datetime] = None,
) -> dict[str, Any]:
    """
    Build the palette record.

    Args:
        palette: Extracted palette
        wallpapers: Source wallpaper paths, in the order they were processed
        timestamp: Record time (now, UTC, if None); naive datetimes are
            taken as UTC

    Returns:
        JSON-ready dict
    """
    normal = [{"hex": color.hex} for color in palette.normal]
    bright = [{"hex": color.hex} for color in palette.bright]
    return {
        "timestamp": _timestamp(timestamp),
        "wallpapers": [str(path) for path in wallpapers],
        "normal": normal,
        "bright": bright,
        "palette": normal + bright,
    }


def to_json(
    palette: Palette,
    wallpapers: Iterable[Union[str, Path]] = (),
    *,
    format: SerializerFormat = SerializerFormat.JSON_PRETTY,
    timestamp: Optional[datetime] = None,
) -> str:
    """Serialize the palette record as a JSON string."""
    record = to_record(palette, wallpapers, timestamp=timestamp)
    if format == SerializerFormat.JSON_PRETTY:
        return json.dumps(record, indent=2)
    return json.dumps(record, separators=(",", ":"))
