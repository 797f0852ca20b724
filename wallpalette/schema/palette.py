# Copyright (c) 2026 Wallpalette
# SPDX-License-Identifier: MIT

"""
Palette schema and configuration.

Design principles:
- Immutable: All types are frozen dataclasses
- Deterministic: Same image + same config → same palette
- Positional: index < base_count is a "normal" color, the rest are "bright"

A terminal palette is 2 × base_count colors: base_count colors derived from
the image, followed by their lightened counterparts in the same order.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterator, Mapping


# =============================================================================
# Colors
# =============================================================================


@dataclass(frozen=True, slots=True)
class RGBColor:
    """
    A single opaque sRGB color.

    Attributes:
        r, g, b: Channels in [0, 1]. Values are kept unrounded; quantization
            to 8 bits happens only when formatting (hex, rgb8).
    """
    r: float
    g: float
    b: float

    def __post_init__(self) -> None:
        for name in ("r", "g", "b"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"Channel {name} must be 0-1, got {value}")

    @classmethod
    def from_rgb8(cls, r: float, g: float, b: float) -> RGBColor:
        """Build from channels on the 0-255 scale (fractional allowed)."""
        return cls(
            r=min(max(r / 255.0, 0.0), 1.0),
            g=min(max(g / 255.0, 0.0), 1.0),
            b=min(max(b / 255.0, 0.0), 1.0),
        )

    @classmethod
    def from_hex(cls, hex_color: str) -> RGBColor:
        from wallpalette.core.colorspace import hex_to_rgb8
        r, g, b = hex_to_rgb8(hex_color)
        return cls.from_rgb8(r, g, b)

    @property
    def rgb8(self) -> tuple[int, int, int]:
        """Channels rounded half-up to 0-255 integers."""
        from wallpalette.core.colorspace import unit_to_rgb8
        return unit_to_rgb8(self.r), unit_to_rgb8(self.g), unit_to_rgb8(self.b)

    @property
    def hex(self) -> str:
        """Hex string like "#3941C8"."""
        from wallpalette.core.colorspace import rgb8_to_hex
        return rgb8_to_hex(*self.rgb8)

    @property
    def lab(self) -> tuple[float, float, float]:
        """CIE L*a*b* of the 8-bit rounded color."""
        from wallpalette.core.colorspace import srgb8_to_lab
        L, a, b = srgb8_to_lab(self.rgb8)
        return float(L), float(a), float(b)

    def __str__(self) -> str:
        return self.hex


@dataclass(frozen=True, slots=True)
class Palette:
    """
    An ordered terminal palette.

    The first ``base_count`` entries (at most) are base colors, the rest are
    bright variants in the same relative order. An empty palette means
    "nothing available" and is falsy; callers skip the update.

    Attributes:
        colors: Ordered colors, at most 2 × base_count
        base_count: Number of base colors requested by the configuration
    """
    colors: tuple[RGBColor, ...] = ()
    base_count: int = 8

    def __post_init__(self) -> None:
        if self.base_count <= 0:
            raise ValueError(f"base_count must be > 0, got {self.base_count}")
        if len(self.colors) > 2 * self.base_count:
            raise ValueError(
                f"Palette holds at most {2 * self.base_count} colors, "
                f"got {len(self.colors)}"
            )

    @property
    def normal(self) -> tuple[RGBColor, ...]:
        """Base colors (indices < base_count)."""
        return self.colors[:self.base_count]

    @property
    def bright(self) -> tuple[RGBColor, ...]:
        """Bright variants (indices >= base_count)."""
        return self.colors[self.base_count:]

    @property
    def is_empty(self) -> bool:
        return not self.colors

    def hex_codes(self) -> list[str]:
        """All colors as "#RRGGBB" strings, in palette order."""
        return [c.hex for c in self.colors]

    def __len__(self) -> int:
        return len(self.colors)

    def __iter__(self) -> Iterator[RGBColor]:
        return iter(self.colors)

    def __getitem__(self, index: int) -> RGBColor:
        return self.colors[index]

    def __str__(self) -> str:
        return " ".join(self.hex_codes())


# =============================================================================
# Configuration
# =============================================================================


def _setting(
    settings: Mapping[str, Any],
    key: str,
    cast: type,
    default: Any,
    valid: Callable[[Any], bool],
) -> Any:
    """Read one persisted setting, falling back to default when unusable."""
    raw = settings.get(key)
    if raw is None:
        return default
    try:
        value = cast(raw)
    except (TypeError, ValueError):
        return default
    return value if valid(value) else default


@dataclass(frozen=True)
class PaletteConfig:
    """
    Extraction parameters.

    Attributes:
        max_dimension: Longest image side after downscaling (> 0)
        max_sample_pixels: Target number of sampled pixels (> 0)
        bucket_bits: Bits kept per channel when bucketing, 2-6
        base_count: Number of base colors (> 0); the palette doubles it
        brightness_delta: L* added to each base color for its bright
            variant, 0-100
    """

    max_dimension: int = 500
    max_sample_pixels: int = 60000
    bucket_bits: int = 4
    base_count: int = 8
    brightness_delta: float = 22.0

    def __post_init__(self) -> None:
        if self.max_dimension <= 0:
            raise ValueError(f"max_dimension must be > 0, got {self.max_dimension}")
        if self.max_sample_pixels <= 0:
            raise ValueError(
                f"max_sample_pixels must be > 0, got {self.max_sample_pixels}"
            )
        if not 2 <= self.bucket_bits <= 6:
            raise ValueError(f"bucket_bits must be 2-6, got {self.bucket_bits}")
        if self.base_count <= 0:
            raise ValueError(f"base_count must be > 0, got {self.base_count}")
        if not 0.0 <= self.brightness_delta <= 100.0:
            raise ValueError(
                f"brightness_delta must be 0-100, got {self.brightness_delta}"
            )

    @property
    def palette_size(self) -> int:
        return 2 * self.base_count

    @classmethod
    def from_settings(cls, settings: Mapping[str, Any]) -> PaletteConfig:
        """
        Build a config from persisted user settings.

        Recognized keys: ``wp_maxSamplePixels``, ``wp_maxDimension``,
        ``wp_bucketBits``, ``wp_brightnessDelta``. Missing, malformed or
        out-of-range values fall back to the defaults; this never raises.
        """
        defaults = cls()
        return cls(
            max_dimension=_setting(
                settings, "wp_maxDimension", int,
                defaults.max_dimension, lambda v: v > 0,
            ),
            max_sample_pixels=_setting(
                settings, "wp_maxSamplePixels", int,
                defaults.max_sample_pixels, lambda v: v > 0,
            ),
            bucket_bits=_setting(
                settings, "wp_bucketBits", int,
                defaults.bucket_bits, lambda v: 2 <= v <= 6,
            ),
            brightness_delta=_setting(
                settings, "wp_brightnessDelta", float,
                defaults.brightness_delta, lambda v: 0.0 < v <= 100.0,
            ),
        )


@dataclass(frozen=True)
class SchedulerConfig:
    """
    Timing for the background agent.

    Attributes:
        debounce_interval: Seconds a trigger waits before a run starts;
            triggers inside the window restart it
        poll_interval: Seconds between polling triggers; <= 0 disables polling
    """

    debounce_interval: float = 0.6
    poll_interval: float = 5.0

    def __post_init__(self) -> None:
        if self.debounce_interval < 0:
            raise ValueError(
                f"debounce_interval must be >= 0, got {self.debounce_interval}"
            )

    @property
    def polling_enabled(self) -> bool:
        return self.poll_interval > 0

    @classmethod
    def from_settings(cls, settings: Mapping[str, Any]) -> SchedulerConfig:
        """Read ``wp_pollInterval``; falls back to the default when unusable."""
        defaults = cls()
        return cls(
            poll_interval=_setting(
                settings, "wp_pollInterval", float,
                defaults.poll_interval, lambda v: v > 0,
            ),
        )
