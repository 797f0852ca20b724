# Copyright (c) 2026 Wallpalette
# SPDX-License-Identifier: MIT

"""
Extraction core for Wallpalette.

Deterministic palette extraction and change detection. Pure computation
over in-memory pixels; no state survives between calls.
"""

from wallpalette.core.extraction import extract, extract_rgba
from wallpalette.core.hashing import (
    Signature,
    SignatureSource,
    build_signature,
    image_hash,
    signature,
)

__all__ = [
    "extract",
    "extract_rgba",
    "signature",
    "build_signature",
    "image_hash",
    "Signature",
    "SignatureSource",
]
