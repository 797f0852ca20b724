# Copyright (c) 2026 Wallpalette
# SPDX-License-Identifier: MIT

"""
Color space conversions and perceptual distance.

Conversion chain: sRGB → Linear RGB → CIE XYZ (D65) → CIE L*a*b*

The inverse chain (Lab → XYZ → Linear RGB → sRGB) is used to synthesize
bright variants, so every step has an exact counterpart here.

References:
- sRGB: IEC 61966-2-1
- CIEDE2000: Sharma, Wu & Dalal, "The CIEDE2000 Color-Difference Formula:
  Implementation Notes, Supplementary Test Data, and Mathematical
  Observations" (2005)

All conversions are pure NumPy and accept arrays of shape (..., 3).
"""

from __future__ import annotations

from typing import Sequence

import numpy as np
from numpy.typing import ArrayLike, NDArray


# =============================================================================
# sRGB ↔ Linear RGB
# =============================================================================


def srgb_to_linear(srgb: ArrayLike) -> NDArray[np.float64]:
    """
    Convert sRGB values [0,1] to linear RGB.

    sRGB uses a piecewise gamma curve:
    - For values <= 0.04045: value / 12.92
    - For values > 0.04045: ((value + 0.055) / 1.055) ^ 2.4
    """
    srgb = np.asarray(srgb, dtype=np.float64)
    return np.where(
        srgb <= 0.04045,
        srgb / 12.92,
        np.power((np.maximum(srgb, 0.0) + 0.055) / 1.055, 2.4),
    )


def linear_to_srgb(linear: ArrayLike) -> NDArray[np.float64]:
    """
    Convert linear RGB to sRGB values, clamped to [0,1].

    Inverse of srgb_to_linear.
    """
    linear = np.asarray(linear, dtype=np.float64)
    # Negative values would make the power term NaN
    linear_safe = np.maximum(linear, 0.0)
    srgb = np.where(
        linear_safe <= 0.0031308,
        linear_safe * 12.92,
        1.055 * np.power(linear_safe, 1.0 / 2.4) - 0.055,
    )
    return np.clip(srgb, 0.0, 1.0)


# =============================================================================
# Linear RGB ↔ CIE XYZ (D65)
# =============================================================================

_RGB_TO_XYZ = np.array([
    [0.4124564, 0.3575761, 0.1804375],
    [0.2126729, 0.7151522, 0.0721750],
    [0.0193339, 0.1191920, 0.9503041],
], dtype=np.float64)

_XYZ_TO_RGB = np.array([
    [3.2404542, -1.5371385, -0.4985314],
    [-0.9692660, 1.8760108, 0.0415560],
    [0.0556434, -0.2040259, 1.0572252],
], dtype=np.float64)

# D65 reference white
WHITE_D65 = np.array([0.95047, 1.0, 1.08883], dtype=np.float64)

_DELTA = 6.0 / 29.0


def linear_rgb_to_xyz(rgb: ArrayLike) -> NDArray[np.float64]:
    """Convert linear RGB (..., 3) to CIE XYZ (..., 3)."""
    rgb = np.asarray(rgb, dtype=np.float64)
    return np.einsum('...j,ij->...i', rgb, _RGB_TO_XYZ)


def xyz_to_linear_rgb(xyz: ArrayLike) -> NDArray[np.float64]:
    """Convert CIE XYZ (..., 3) to linear RGB (..., 3). Not clamped."""
    xyz = np.asarray(xyz, dtype=np.float64)
    return np.einsum('...j,ij->...i', xyz, _XYZ_TO_RGB)


# =============================================================================
# CIE XYZ ↔ CIE L*a*b*
# =============================================================================


def _lab_f(t: NDArray[np.float64]) -> NDArray[np.float64]:
    return np.where(
        t > _DELTA ** 3,
        np.cbrt(t),
        t / (3.0 * _DELTA * _DELTA) + 4.0 / 29.0,
    )


def _lab_f_inv(t: NDArray[np.float64]) -> NDArray[np.float64]:
    return np.where(
        t > _DELTA,
        t * t * t,
        3.0 * _DELTA * _DELTA * (t - 4.0 / 29.0),
    )


def xyz_to_lab(xyz: ArrayLike) -> NDArray[np.float64]:
    """
    Convert CIE XYZ to CIE L*a*b* relative to the D65 white point.

    Returns:
        Array of shape (..., 3) with (L*, a*, b*); L* in [0, 100] for
        in-gamut input.
    """
    xyz = np.asarray(xyz, dtype=np.float64)
    f = _lab_f(xyz / WHITE_D65)
    fx, fy, fz = f[..., 0], f[..., 1], f[..., 2]

    L = 116.0 * fy - 16.0
    a = 500.0 * (fx - fy)
    b = 200.0 * (fy - fz)
    return np.stack([L, a, b], axis=-1)


def lab_to_xyz(lab: ArrayLike) -> NDArray[np.float64]:
    """Convert CIE L*a*b* to CIE XYZ. Exact inverse of xyz_to_lab."""
    lab = np.asarray(lab, dtype=np.float64)
    L, a, b = lab[..., 0], lab[..., 1], lab[..., 2]

    fy = (L + 16.0) / 116.0
    fx = a / 500.0 + fy
    fz = fy - b / 200.0
    f = np.stack([fx, fy, fz], axis=-1)
    return _lab_f_inv(f) * WHITE_D65


# =============================================================================
# Convenience: full chains
# =============================================================================


def srgb8_to_lab(rgb8: ArrayLike) -> NDArray[np.float64]:
    """
    Convert sRGB on the 0-255 scale to CIE L*a*b*.

    Input may be fractional (bucket means are averages, not pixels).

    Full chain: sRGB → Linear RGB → XYZ → Lab
    """
    srgb = np.asarray(rgb8, dtype=np.float64) / 255.0
    return xyz_to_lab(linear_rgb_to_xyz(srgb_to_linear(srgb)))


def lab_to_srgb(lab: ArrayLike) -> NDArray[np.float64]:
    """
    Convert CIE L*a*b* to sRGB [0,1].

    Full chain: Lab → XYZ → Linear RGB → sRGB

    Out-of-gamut results are clipped per channel to [0, 1].
    """
    linear = xyz_to_linear_rgb(lab_to_xyz(lab))
    return linear_to_srgb(linear)


def unit_to_rgb8(value: float) -> int:
    """Quantize a [0,1] channel to 0-255, rounding halves up."""
    return int(np.floor(min(max(value, 0.0), 1.0) * 255.0 + 0.5))


def rgb8_to_hex(r: int, g: int, b: int) -> str:
    """Format 8-bit channels as "#RRGGBB"."""
    return f"#{r:02X}{g:02X}{b:02X}"


def hex_to_rgb8(hex_color: str) -> tuple[int, int, int]:
    """
    Parse "#RRGGBB" (leading # optional) into 8-bit channels.

    Raises:
        ValueError: If the string is not six hex digits.
    """
    digits = hex_color.strip().lstrip("#")
    if len(digits) != 6:
        raise ValueError(f"Expected #RRGGBB, got {hex_color!r}")
    return (
        int(digits[0:2], 16),
        int(digits[2:4], 16),
        int(digits[4:6], 16),
    )


# =============================================================================
# CIEDE2000 (Perceptual Color Difference)
# =============================================================================

_POW25_7 = 25.0 ** 7


def ciede2000_batch(
    lab1: ArrayLike,
    lab2: ArrayLike,
) -> NDArray[np.float64]:
    """
    Vectorized CIEDE2000 distance between Lab colors.

    Inputs broadcast against each other, so a (N, 1, 3) array against a
    (1, K, 3) array yields the full (N, K) distance matrix.

    kL = kC = kH = 1. The hue-difference sine is evaluated on |Δh'| with the
    sign applied afterwards, which keeps d(a, b) bit-identical to d(b, a).

    Returns:
        Array of ΔE00 values with the broadcast shape minus the last axis.
    """
    lab1 = np.asarray(lab1, dtype=np.float64)
    lab2 = np.asarray(lab2, dtype=np.float64)
    L1, a1, b1 = lab1[..., 0], lab1[..., 1], lab1[..., 2]
    L2, a2, b2 = lab2[..., 0], lab2[..., 1], lab2[..., 2]

    C1 = np.sqrt(a1 * a1 + b1 * b1)
    C2 = np.sqrt(a2 * a2 + b2 * b2)
    C_bar_7 = ((C1 + C2) / 2.0) ** 7
    G = 0.5 * (1.0 - np.sqrt(C_bar_7 / (C_bar_7 + _POW25_7)))

    a1p = (1.0 + G) * a1
    a2p = (1.0 + G) * a2
    C1p = np.sqrt(a1p * a1p + b1 * b1)
    C2p = np.sqrt(a2p * a2p + b2 * b2)

    h1p = _hue_degrees(a1p, b1)
    h2p = _hue_degrees(a2p, b2)

    achromatic = (C1p * C2p) == 0.0

    dLp = L2 - L1
    dCp = C2p - C1p

    dhp = h2p - h1p
    dhp = np.where(dhp > 180.0, dhp - 360.0, dhp)
    dhp = np.where(dhp < -180.0, dhp + 360.0, dhp)
    dhp = np.where(achromatic, 0.0, dhp)
    dHp = (
        2.0 * np.sqrt(C1p * C2p)
        * np.sin(np.radians(np.abs(dhp)) / 2.0)
        * np.sign(dhp)
    )

    L_bar = (L1 + L2) / 2.0
    C_bar_p = (C1p + C2p) / 2.0

    h_sum = h1p + h2p
    h_bar_p = np.where(
        np.abs(h1p - h2p) > 180.0,
        np.where(h_sum < 360.0, (h_sum + 360.0) / 2.0, (h_sum - 360.0) / 2.0),
        h_sum / 2.0,
    )
    h_bar_p = np.where(achromatic, h_sum, h_bar_p)

    T = (
        1.0
        - 0.17 * np.cos(np.radians(h_bar_p - 30.0))
        + 0.24 * np.cos(np.radians(2.0 * h_bar_p))
        + 0.32 * np.cos(np.radians(3.0 * h_bar_p + 6.0))
        - 0.20 * np.cos(np.radians(4.0 * h_bar_p - 63.0))
    )

    delta_theta = 30.0 * np.exp(-(((h_bar_p - 275.0) / 25.0) ** 2))
    C_bar_p_7 = C_bar_p ** 7
    R_C = 2.0 * np.sqrt(C_bar_p_7 / (C_bar_p_7 + _POW25_7))
    R_T = -np.sin(np.radians(2.0 * delta_theta)) * R_C

    L_50_sq = (L_bar - 50.0) ** 2
    S_L = 1.0 + (0.015 * L_50_sq) / np.sqrt(20.0 + L_50_sq)
    S_C = 1.0 + 0.045 * C_bar_p
    S_H = 1.0 + 0.015 * C_bar_p * T

    dL_s = dLp / S_L
    dC_s = dCp / S_C
    dH_s = dHp / S_H

    radicand = dL_s * dL_s + dC_s * dC_s + dH_s * dH_s + R_T * dC_s * dH_s
    return np.sqrt(np.maximum(radicand, 0.0))


def ciede2000(
    lab1: Sequence[float],
    lab2: Sequence[float],
) -> float:
    """
    CIEDE2000 color difference (ΔE00) between two Lab colors.

    Args:
        lab1: (L*, a*, b*) of the first color
        lab2: (L*, a*, b*) of the second color

    Returns:
        ΔE00 (0 = identical; ~2.3 is a just-noticeable difference)
    """
    return float(ciede2000_batch(lab1, lab2))


def _hue_degrees(
    a: NDArray[np.float64],
    b: NDArray[np.float64],
) -> NDArray[np.float64]:
    """Hue angle in degrees [0, 360); 0 when both components are zero."""
    hue = np.degrees(np.arctan2(b, a)) % 360.0
    # Tiny negative angles wrap to exactly 360.0
    hue = np.where(hue >= 360.0, 0.0, hue)
    return np.where((a == 0.0) & (b == 0.0), 0.0, hue)
