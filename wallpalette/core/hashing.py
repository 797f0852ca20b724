# Copyright (c) 2026 Wallpalette
# SPDX-License-Identifier: MIT

"""
Change detection.

A cheap perceptual fingerprint decides whether the palette needs to be
recomputed at all. Each source image is rasterized at most 64 px on its
longest side and hashed with FNV-1a (64-bit) together with its
dimensions. Per-source strings are joined into a composite signature;
two runs with equal signatures produce the same palette.

Per-source format::

    <path>|<mtime_epoch_seconds>|px:<hash_hex>
    <path>|px:<hash_hex>                        (mtime unavailable)

An image that cannot be rasterized has no hash and renders as ``px:nil``.
"""

from __future__ import annotations

import logging
import os
import struct
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Sequence, Union

from PIL import Image

from wallpalette.core.sampling import ImageInput, load_rgba, resize_to_fit

logger = logging.getLogger(__name__)

FNV64_OFFSET_BASIS = 0xCBF29CE484222325
FNV64_PRIME = 0x100000001B3
_MASK64 = 0xFFFFFFFFFFFFFFFF

# Longest side of the hashed thumbnail
SIGNATURE_DIMENSION = 64


def fnv1a64(data: bytes) -> int:
    """FNV-1a 64-bit hash of a byte string."""
    h = FNV64_OFFSET_BASIS
    for byte in data:
        h ^= byte
        h = (h * FNV64_PRIME) & _MASK64
    return h


def image_hash(
    image: Optional[ImageInput],
    max_dimension: int = SIGNATURE_DIMENSION,
) -> Optional[int]:
    """
    Perceptual hash of an image's downscaled RGBA raster.

    ``combined = fnv1a64(le32(width) + le32(height))``, then
    ``combined = (combined ^ fnv1a64(pixels)) * FNV_PRIME`` (mod 2**64).

    Returns:
        64-bit hash, or None for absent, undecodable or zero-area images.
    """
    if image is None or max_dimension <= 0:
        return None

    pixels = load_rgba(image)
    if pixels is None:
        return None

    height, width = pixels.shape[:2]
    if width == 0 or height == 0:
        return None

    thumb = resize_to_fit(
        pixels, max_dimension, Image.Resampling.BILINEAR, always=True
    )
    thumb_height, thumb_width = thumb.shape[:2]

    combined = fnv1a64(struct.pack("<II", thumb_width, thumb_height))
    combined ^= fnv1a64(thumb.tobytes())
    return (combined * FNV64_PRIME) & _MASK64


@dataclass(frozen=True)
class SignatureSource:
    """
    One image contributing to a signature.

    Attributes:
        path: Identifier written into the signature (usually the file path)
        image: Encoded bytes, PIL image or array; when None the image is
            decoded from ``path``
        mtime: Modification time (epoch seconds), if known
    """
    path: str
    image: Optional[ImageInput] = None
    mtime: Optional[float] = None

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> SignatureSource:
        """Describe a file on disk, reading its modification time if possible."""
        try:
            mtime: Optional[float] = os.stat(path).st_mtime
        except OSError:
            mtime = None
        return cls(path=str(path), mtime=mtime)

    def resolve_image(self) -> ImageInput:
        return self.path if self.image is None else self.image


@dataclass(frozen=True)
class SourceSignature:
    """Signature fields for one source."""
    path: str
    mtime: Optional[int]
    pixel_hash: Optional[int]

    @property
    def text(self) -> str:
        px = "nil" if self.pixel_hash is None else format(self.pixel_hash, "x")
        if self.mtime is None:
            return f"{self.path}|px:{px}"
        return f"{self.path}|{self.mtime}|px:{px}"


@dataclass(frozen=True)
class Signature:
    """
    Composite signature over all sources, in input order.

    Equality of ``text`` is the only change predicate. A signature with a
    missing hash is incomplete; callers should treat it as changed.
    """
    parts: tuple[SourceSignature, ...] = ()

    @property
    def text(self) -> str:
        return ";".join(part.text for part in self.parts)

    @property
    def is_complete(self) -> bool:
        return all(part.pixel_hash is not None for part in self.parts)

    def __str__(self) -> str:
        return self.text


SourceLike = Union[SignatureSource, Sequence]


def as_source(source: SourceLike) -> SignatureSource:
    """Normalize a SignatureSource, bare path or (path, image[, mtime]) tuple."""
    if isinstance(source, SignatureSource):
        return source
    if isinstance(source, (str, Path)):
        return SignatureSource.from_path(source)
    return SignatureSource(*source)


def build_signature(
    sources: Iterable[SourceLike],
    max_dimension: int = SIGNATURE_DIMENSION,
) -> Signature:
    """
    Compute per-source signatures.

    Args:
        sources: SignatureSource objects, bare paths, or
            ``(path, image[, mtime])`` tuples
        max_dimension: Longest side of the hashed thumbnail

    Returns:
        Signature with one part per source, in input order
    """
    parts = []
    for source in map(as_source, sources):
        pixel_hash = image_hash(source.resolve_image(), max_dimension)
        if pixel_hash is None:
            logger.debug("No pixel hash for %s", source.path)
        mtime = None if source.mtime is None else int(source.mtime)
        parts.append(SourceSignature(source.path, mtime, pixel_hash))
    return Signature(tuple(parts))


def signature(
    sources: Iterable[SourceLike],
    max_dimension: int = SIGNATURE_DIMENSION,
) -> str:
    """Composite signature string; compare with the previous run's value."""
    return build_signature(sources, max_dimension).text
