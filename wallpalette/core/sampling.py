# Copyright (c) 2026 Wallpalette
# SPDX-License-Identifier: MIT

"""
Image decoding, downscaling and bucket sampling.

Pixels are sampled with a fixed row-major stride (every row, every
``step``-th column) and binned by their reduced-precision color. Each
bucket also records which cells of a fixed 6×6 spatial grid it touched.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

import numpy as np
from numpy.typing import NDArray
from PIL import Image, ImageCms, UnidentifiedImageError

from wallpalette.core.colorspace import srgb8_to_lab

logger = logging.getLogger(__name__)

ImageInput = Union[str, Path, bytes, bytearray, memoryview, Image.Image, NDArray[np.uint8]]

# Spatial grid used to tag buckets with coverage
GRID_SIZE = 6


@dataclass(frozen=True, slots=True)
class ColorBucket:
    """
    Aggregate of sampled pixels sharing one quantized color.

    Attributes:
        key: Quantized (r, g, b) packed into 3 × bucket_bits bits
        count: Number of sampled pixels
        r_sum, g_sum, b_sum: Per-channel sums of the original 8-bit values
        cells: Spatial grid cells (row * 6 + col) the pixels fell into
    """
    key: int
    count: int
    r_sum: int
    g_sum: int
    b_sum: int
    cells: frozenset[int]

    @property
    def mean_rgb8(self) -> tuple[float, float, float]:
        return (
            self.r_sum / self.count,
            self.g_sum / self.count,
            self.b_sum / self.count,
        )


@dataclass(frozen=True, slots=True)
class ColorPoint:
    """
    Read-only view of a bucket used by clustering.

    ``lab`` is always the Lab transform of (r8, g8, b8).
    """
    r8: float
    g8: float
    b8: float
    population: int
    cells: frozenset[int]
    lab: tuple[float, float, float]

    @property
    def rgb8(self) -> tuple[float, float, float]:
        return self.r8, self.g8, self.b8


# =============================================================================
# Decoding
# =============================================================================


def load_rgba(image: ImageInput) -> Optional[NDArray[np.uint8]]:
    """
    Decode an image into an (H, W, 4) uint8 RGBA array.

    Color channels are premultiplied by alpha, as a bitmap context would
    rasterize them. Embedded ICC profiles are converted to sRGB.

    Args:
        image: One of:
            - Path to an image file (str or Path)
            - Encoded image bytes
            - PIL Image
            - NumPy array of shape (H, W, 3) or (H, W, 4), dtype uint8,
              assumed to be sRGB

    Returns:
        RGBA array, or None when the input cannot be decoded.

    Raises:
        TypeError: If ``image`` is none of the accepted types.
        ValueError: If an array has the wrong shape or dtype.
    """
    if isinstance(image, np.ndarray):
        return _array_to_rgba(image)

    if isinstance(image, (str, Path)):
        source = image
    elif isinstance(image, (bytes, bytearray, memoryview)):
        source = io.BytesIO(bytes(image))
    elif isinstance(image, Image.Image):
        source = None
    else:
        raise TypeError(
            f"Expected file path, bytes, PIL image or numpy array, got {type(image)}"
        )

    try:
        img = image if source is None else Image.open(source)
        img.load()
        img = _to_srgb(img)
        rgba = np.array(img.convert("RGBA"), dtype=np.uint8)
    except (
        UnidentifiedImageError,
        Image.DecompressionBombError,
        OSError,
        ValueError,
    ) as exc:
        logger.warning("Cannot decode image %s: %s", _describe(image), exc)
        return None

    return _premultiply(rgba)


def _to_srgb(img: Image.Image) -> Image.Image:
    """Apply the embedded ICC profile, if any, converting pixels to sRGB."""
    icc = img.info.get("icc_profile")
    if not icc:
        return img

    try:
        embedded_profile = ImageCms.ImageCmsProfile(io.BytesIO(icc))
        srgb_profile = ImageCms.createProfile("sRGB")
        if img.mode not in ("RGB", "RGBA"):
            img = img.convert("RGBA" if "A" in img.getbands() else "RGB")
        return ImageCms.profileToProfile(img, embedded_profile, srgb_profile)
    except (ImageCms.PyCMSError, OSError) as exc:
        # Unusable profile: the raw pixel values are still meaningful
        logger.debug("Ignoring ICC profile: %s", exc)
        return img


def _array_to_rgba(pixels: NDArray[np.uint8]) -> NDArray[np.uint8]:
    if pixels.ndim != 3 or pixels.shape[2] not in (3, 4):
        raise ValueError(
            f"Expected (H, W, 3) or (H, W, 4) array, got shape {pixels.shape}"
        )
    if pixels.dtype != np.uint8:
        raise ValueError(f"Expected uint8 array, got {pixels.dtype}")

    if pixels.shape[2] == 3:
        alpha = np.full(pixels.shape[:2] + (1,), 255, dtype=np.uint8)
        return np.concatenate([pixels, alpha], axis=2)
    return _premultiply(pixels)


def _premultiply(rgba: NDArray[np.uint8]) -> NDArray[np.uint8]:
    alpha = rgba[..., 3:4].astype(np.uint32)
    if rgba.size == 0 or np.all(alpha == 255):
        return np.ascontiguousarray(rgba)
    rgb = (rgba[..., :3].astype(np.uint32) * alpha + 127) // 255
    return np.concatenate([rgb.astype(np.uint8), rgba[..., 3:4]], axis=2)


def _describe(image: ImageInput) -> str:
    if isinstance(image, (str, Path)):
        return str(image)
    return f"<{type(image).__name__}>"


# =============================================================================
# Resizing
# =============================================================================


def fit_size(width: int, height: int, max_dimension: int) -> tuple[int, int]:
    """
    Target size with the longest side at most ``max_dimension``.

    Aspect ratio is preserved, images are never upscaled and no side drops
    below one pixel.
    """
    longest = max(width, height)
    scale = min(1.0, max_dimension / longest) if longest > 0 else 1.0
    return (
        max(1, int(np.floor(width * scale + 0.5))),
        max(1, int(np.floor(height * scale + 0.5))),
    )


def resize_to_fit(
    pixels: NDArray[np.uint8],
    max_dimension: int,
    resample: Image.Resampling = Image.Resampling.LANCZOS,
    *,
    always: bool = False,
) -> NDArray[np.uint8]:
    """
    Downscale an RGBA array so its longest side is <= max_dimension.

    A no-op for images already small enough, unless ``always`` is set, in
    which case the image is redrawn at its target size even when unchanged.
    Zero-area arrays are returned as-is.
    """
    height, width = pixels.shape[:2]
    if width == 0 or height == 0:
        return pixels

    new_width, new_height = fit_size(width, height, max_dimension)
    if (new_width, new_height) == (width, height) and not always:
        return pixels

    # Channels are already premultiplied; "RGBa" keeps Pillow from doing it again
    img = Image.frombytes("RGBa", (width, height), np.ascontiguousarray(pixels).tobytes())
    img = img.resize((new_width, new_height), resample)
    return np.array(img, dtype=np.uint8)


# =============================================================================
# Sampling
# =============================================================================


def sample_buckets(
    pixels: NDArray[np.uint8],
    bucket_bits: int = 4,
    max_sample_pixels: int = 60000,
) -> dict[int, ColorBucket]:
    """
    Stride-sample pixels into quantized color buckets.

    Every row is scanned; within a row every ``step``-th column is taken,
    where ``step = max(1, total_pixels // max_sample_pixels)``. Each channel
    keeps its top ``bucket_bits`` bits and the three reduced channels are
    concatenated into the bucket key.

    Args:
        pixels: (H, W, 3+) uint8 array; only the first three channels are read
        bucket_bits: Bits kept per channel (2-6)
        max_sample_pixels: Target sample count

    Returns:
        Mapping of bucket key to ColorBucket, in ascending key order.
        Empty for zero-area input.
    """
    height, width = pixels.shape[:2]
    total_pixels = height * width
    if total_pixels == 0:
        return {}

    step = max(1, total_pixels // max_sample_pixels)
    shift = 8 - bucket_bits

    sampled = pixels[:, ::step, :3].astype(np.int64)
    r = sampled[..., 0].ravel()
    g = sampled[..., 1].ravel()
    b = sampled[..., 2].ravel()
    keys = (
        ((r >> shift) << (2 * bucket_bits))
        | ((g >> shift) << bucket_bits)
        | (b >> shift)
    )

    cell_width = max(1, width // GRID_SIZE)
    cell_height = max(1, height // GRID_SIZE)
    cols = np.minimum(GRID_SIZE - 1, np.arange(0, width, step) // cell_width)
    rows = np.minimum(GRID_SIZE - 1, np.arange(height) // cell_height)
    cells = (rows[:, np.newaxis] * GRID_SIZE + cols[np.newaxis, :]).ravel()

    unique_keys, inverse, counts = np.unique(
        keys, return_inverse=True, return_counts=True
    )
    inverse = inverse.ravel()
    n_buckets = len(unique_keys)
    r_sums = np.bincount(inverse, weights=r, minlength=n_buckets)
    g_sums = np.bincount(inverse, weights=g, minlength=n_buckets)
    b_sums = np.bincount(inverse, weights=b, minlength=n_buckets)

    # Distinct (bucket, cell) pairs, sorted by bucket then cell
    n_cells = GRID_SIZE * GRID_SIZE
    pairs = np.unique(inverse * n_cells + cells)
    pair_buckets = pairs // n_cells
    pair_cells = pairs % n_cells
    boundaries = np.searchsorted(pair_buckets, np.arange(n_buckets + 1))

    buckets: dict[int, ColorBucket] = {}
    for i, key in enumerate(unique_keys.tolist()):
        start, end = boundaries[i], boundaries[i + 1]
        buckets[key] = ColorBucket(
            key=key,
            count=int(counts[i]),
            r_sum=int(round(r_sums[i])),
            g_sum=int(round(g_sums[i])),
            b_sum=int(round(b_sums[i])),
            cells=frozenset(pair_cells[start:end].tolist()),
        )

    logger.debug(
        "Sampled %d pixels (step %d) into %d buckets",
        len(keys), step, len(buckets),
    )
    return buckets


def buckets_to_points(buckets: dict[int, ColorBucket]) -> list[ColorPoint]:
    """
    Convert buckets into ColorPoints (mean color + Lab), preserving order.

    Buckets with a zero count are skipped.
    """
    live = [bucket for bucket in buckets.values() if bucket.count > 0]
    if not live:
        return []

    means = np.array([bucket.mean_rgb8 for bucket in live], dtype=np.float64)
    labs = srgb8_to_lab(means)

    return [
        ColorPoint(
            r8=float(mean[0]),
            g8=float(mean[1]),
            b8=float(mean[2]),
            population=bucket.count,
            cells=bucket.cells,
            lab=(float(lab[0]), float(lab[1]), float(lab[2])),
        )
        for bucket, mean, lab in zip(live, means, labs)
    ]
