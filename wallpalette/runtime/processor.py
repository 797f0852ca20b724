# Copyright (c) 2026 Wallpalette
# SPDX-License-Identifier: MIT

"""
Change-gated palette processing.

One run: compute the composite signature of the current wallpapers; if it
matches the previous run, stop. Otherwise decode the primary wallpaper
(the first source that decodes), extract a palette, cache it together
with the signature and hand it to the caller's update hook.

Runs are serialized by a lock, so at most one executes at a time and no
caller ever observes a half-finished run.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, Optional, Sequence

from wallpalette.core.extraction import extract_rgba
from wallpalette.core.hashing import (
    SIGNATURE_DIMENSION,
    Signature,
    SignatureSource,
    SourceLike,
    as_source,
    build_signature,
)
from wallpalette.core.sampling import load_rgba
from wallpalette.schema import Palette, PaletteConfig

logger = logging.getLogger(__name__)

UpdateHook = Callable[[Palette, Sequence[SignatureSource]], None]


class ProcessOutcome(Enum):
    """How a processing run ended."""

    UPDATED = "updated"          # New palette published
    UNCHANGED = "unchanged"      # Signature matched the previous run
    EMPTY = "empty"              # Image decoded but produced no colors
    NO_IMAGE = "no_image"        # No source could be decoded
    NO_SOURCES = "no_sources"    # Nothing to process


@dataclass(frozen=True)
class ProcessResult:
    """Result of one run. ``palette`` is the palette current after the run."""
    outcome: ProcessOutcome
    palette: Optional[Palette] = None
    signature: Optional[Signature] = None

    @property
    def updated(self) -> bool:
        return self.outcome is ProcessOutcome.UPDATED


class PaletteProcessor:
    """
    Holds the previous signature and palette across runs.

    Args:
        config: Extraction parameters (defaults if None)
        on_update: Called with (palette, sources) after a new palette is
            produced, inside the run lock. Failures are logged and do not
            affect the cached state.
        signature_dimension: Longest side of the change-detection thumbnail
    """

    def __init__(
        self,
        config: Optional[PaletteConfig] = None,
        on_update: Optional[UpdateHook] = None,
        signature_dimension: int = SIGNATURE_DIMENSION,
    ) -> None:
        self._config = config or PaletteConfig()
        self._on_update = on_update
        self._signature_dimension = signature_dimension
        self._lock = threading.Lock()
        # (signature, palette), replaced as a whole when a run finishes
        self._state: tuple[Optional[str], Optional[Palette]] = (None, None)

    @property
    def config(self) -> PaletteConfig:
        with self._lock:
            return self._config

    @config.setter
    def config(self, config: PaletteConfig) -> None:
        # A new config must produce a new palette even for the same images
        with self._lock:
            if config != self._config:
                self._config = config
                self._state = (None, self._state[1])

    @property
    def previous_signature(self) -> Optional[str]:
        """Signature of the last finished run; never blocks on a running one."""
        return self._state[0]

    @property
    def cached_palette(self) -> Optional[Palette]:
        """Palette of the last finished run; never blocks on a running one."""
        return self._state[1]

    def reset(self) -> None:
        """Forget the cached signature and palette."""
        with self._lock:
            self._state = (None, None)

    def process(self, sources: Iterable[SourceLike]) -> ProcessResult:
        """
        Run the pipeline for the given wallpapers, if they changed.

        Readers of ``cached_palette`` and ``previous_signature`` see the
        previous run's values until this run has finished.

        Args:
            sources: SignatureSource objects, paths, or
                ``(path, image[, mtime])`` tuples, primary wallpaper first

        Returns:
            ProcessResult describing what happened
        """
        sources = [as_source(source) for source in sources]
        with self._lock:
            previous, cached = self._state
            if not sources:
                return ProcessResult(ProcessOutcome.NO_SOURCES, cached)

            sig = build_signature(sources, self._signature_dimension)
            if sig.is_complete and sig.text == previous:
                logger.debug("Signature unchanged; skipping extraction")
                return ProcessResult(ProcessOutcome.UNCHANGED, cached, sig)

            # Incomplete signatures are never cached, so they always rerun
            current = sig.text if sig.is_complete else None

            pixels = None
            primary = None
            for source in sources:
                pixels = load_rgba(source.resolve_image())
                if pixels is not None:
                    primary = source
                    break
            if pixels is None:
                logger.warning("None of %d wallpapers could be decoded", len(sources))
                self._state = (current, cached)
                return ProcessResult(ProcessOutcome.NO_IMAGE, cached, sig)

            palette = extract_rgba(pixels, self._config)
            if palette.is_empty:
                logger.debug("No colors extracted from %s", primary.path)
                self._state = (current, cached)
                return ProcessResult(ProcessOutcome.EMPTY, cached, sig)

            self._state = (current, palette)
            logger.info("Wallpaper palette updated: %s", palette)
            self._publish(palette, sources)
            return ProcessResult(ProcessOutcome.UPDATED, palette, sig)

    def _publish(self, palette: Palette, sources: Sequence[SignatureSource]) -> None:
        if self._on_update is None:
            return
        try:
            self._on_update(palette, sources)
        except Exception:
            logger.exception("Palette update hook failed")
