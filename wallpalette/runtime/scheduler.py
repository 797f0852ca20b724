# Copyright (c) 2026 Wallpalette
# SPDX-License-Identifier: MIT

"""
Background scheduling.

Triggers (startup, polling, wallpaper-change notifications, settings
changes) are coalesced through a debounce window so a burst becomes a
single run. A new trigger restarts the window; it never interrupts a run
that has already started. The processor's lock guarantees at most one
run at a time.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional, Sequence

from wallpalette.core.hashing import SourceLike
from wallpalette.runtime.processor import PaletteProcessor, ProcessResult
from wallpalette.schema import PaletteConfig, SchedulerConfig

logger = logging.getLogger(__name__)

SourceProvider = Callable[[], Sequence[SourceLike]]


class Debouncer:
    """
    Run ``callback(reason)`` once, ``interval`` seconds after the last trigger.

    Each trigger cancels the pending call and starts a fresh timer. Timer
    threads are daemons.
    """

    def __init__(self, interval: float, callback: Callable[[str], None]) -> None:
        self.interval = interval
        self._callback = callback
        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._generation = 0

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._timer is not None

    def trigger(self, reason: str = "manual") -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._generation += 1
            timer = threading.Timer(
                self.interval, self._fire, args=(self._generation, reason)
            )
            timer.daemon = True
            self._timer = timer
            timer.start()
        logger.debug("Scheduled run (%s) in %.2fs", reason, self.interval)

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = None
            self._generation += 1

    def _fire(self, generation: int, reason: str) -> None:
        with self._lock:
            # A timer that was superseded after it started waiting
            if generation != self._generation:
                return
            self._timer = None
        self._callback(reason)


class PaletteAgent:
    """
    Keeps a palette in sync with the current wallpapers.

    Args:
        source_provider: Returns the current wallpapers (primary first).
            Wallpaper discovery is platform-specific and supplied by the
            caller.
        processor: Change-gated pipeline; owns the cached palette
        config: Debounce and polling intervals (defaults if None)
    """

    def __init__(
        self,
        source_provider: SourceProvider,
        processor: Optional[PaletteProcessor] = None,
        config: Optional[SchedulerConfig] = None,
    ) -> None:
        self.config = config or SchedulerConfig()
        self.processor = processor or PaletteProcessor()
        self._source_provider = source_provider
        self._debouncer = Debouncer(self.config.debounce_interval, self.run_now)
        self._poll_lock = threading.Lock()
        self._poll_timer: Optional[threading.Timer] = None
        self._poll_generation = 0
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        if self._running:
            return
        self._running = True
        self.schedule("startup")
        self._configure_polling()

    def stop(self) -> None:
        self._running = False
        self._debouncer.cancel()
        self._cancel_polling()

    def schedule(self, reason: str) -> None:
        """Request a run after the debounce window. Ignored while stopped."""
        if not self._running:
            logger.debug("Agent stopped; ignoring trigger (%s)", reason)
            return
        self._debouncer.trigger(reason)

    def notify_wallpaper_changed(self) -> None:
        self.schedule("notification")

    def settings_changed(
        self,
        palette_config: Optional[PaletteConfig] = None,
        scheduler_config: Optional[SchedulerConfig] = None,
    ) -> None:
        """Apply new settings; while running, also rerun and restart polling."""
        if palette_config is not None:
            self.processor.config = palette_config
        if scheduler_config is not None:
            self.config = scheduler_config
            self._debouncer.interval = scheduler_config.debounce_interval
        if self._running:
            self.schedule("settings-change")
            self._configure_polling()

    def run_now(self, reason: str = "manual") -> Optional[ProcessResult]:
        """
        Run synchronously, bypassing the debounce window.

        Returns:
            The processor result, or None when no wallpapers were found or
            the source provider failed.
        """
        try:
            sources = list(self._source_provider())
        except Exception:
            logger.exception("Wallpaper discovery failed (%s)", reason)
            return None

        if not sources:
            logger.debug("No wallpapers found (%s)", reason)
            return None

        result = self.processor.process(sources)
        logger.debug("Run (%s) finished: %s", reason, result.outcome.value)
        return result

    # -------------------------------------------------------------------------
    # Polling
    # -------------------------------------------------------------------------

    def _configure_polling(self) -> None:
        generation = self._cancel_polling()
        if not self.config.polling_enabled:
            return
        self._arm_poll_timer(generation)

    def _arm_poll_timer(self, generation: int) -> None:
        with self._poll_lock:
            if generation != self._poll_generation:
                return
            timer = threading.Timer(
                self.config.poll_interval, self._on_poll, args=(generation,)
            )
            timer.daemon = True
            self._poll_timer = timer
            timer.start()

    def _cancel_polling(self) -> int:
        with self._poll_lock:
            if self._poll_timer is not None:
                self._poll_timer.cancel()
                self._poll_timer = None
            self._poll_generation += 1
            return self._poll_generation

    def _on_poll(self, generation: int) -> None:
        with self._poll_lock:
            if not self._running or generation != self._poll_generation:
                return
        self.schedule("polling")
        self._arm_poll_timer(generation)
