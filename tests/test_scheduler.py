# Copyright (c) 2026 Wallpalette
# SPDX-License-Identifier: MIT

"""Tests for debouncing and the background agent."""

import logging
import threading
import time

import numpy as np

from wallpalette.runtime import (
    Debouncer,
    PaletteAgent,
    PaletteProcessor,
    ProcessOutcome,
)
from wallpalette.schema import PaletteConfig, SchedulerConfig


def _solid_image(r, g, b, size=20):
    return np.full((size, size, 3), [r, g, b], dtype=np.uint8)


class _CountingProvider:
    """Source provider that records how often it was asked."""

    def __init__(self, sources):
        self.sources = sources
        self.calls = 0
        self._lock = threading.Lock()

    def __call__(self):
        with self._lock:
            self.calls += 1
        return self.sources


class TestDebouncer:

    def test_burst_coalesces_to_one_call(self):
        calls = []
        fired = threading.Event()

        def callback(reason):
            calls.append(reason)
            fired.set()

        debouncer = Debouncer(0.1, callback)
        for reason in ("a", "b", "c", "d"):
            debouncer.trigger(reason)
        assert debouncer.pending

        assert fired.wait(2.0)
        time.sleep(0.2)
        assert calls == ["d"]
        assert not debouncer.pending

    def test_separate_triggers_run_separately(self):
        calls = []
        debouncer = Debouncer(0.01, calls.append)
        debouncer.trigger("one")
        time.sleep(0.2)
        debouncer.trigger("two")
        time.sleep(0.2)
        assert calls == ["one", "two"]

    def test_cancel(self):
        calls = []
        debouncer = Debouncer(0.05, calls.append)
        debouncer.trigger()
        debouncer.cancel()
        time.sleep(0.2)
        assert calls == []
        assert not debouncer.pending


class TestRunNow:

    def test_runs_processor(self):
        provider = _CountingProvider([("/w.png", _solid_image(1, 2, 3))])
        agent = PaletteAgent(provider)
        result = agent.run_now()
        assert result.outcome is ProcessOutcome.UPDATED
        assert agent.run_now().outcome is ProcessOutcome.UNCHANGED
        assert provider.calls == 2

    def test_no_wallpapers(self):
        agent = PaletteAgent(lambda: [])
        assert agent.run_now() is None

    def test_provider_failure_is_logged(self, caplog):
        def provider():
            raise OSError("display server unavailable")

        agent = PaletteAgent(provider)
        with caplog.at_level(logging.ERROR, logger="wallpalette"):
            assert agent.run_now("polling") is None
        assert "Wallpaper discovery failed (polling)" in caplog.text


class TestAgent:

    def test_start_runs_once_after_debounce(self):
        updated = threading.Event()
        processor = PaletteProcessor(on_update=lambda p, s: updated.set())
        provider = _CountingProvider([("/w.png", _solid_image(5, 6, 7))])
        agent = PaletteAgent(
            provider,
            processor,
            SchedulerConfig(debounce_interval=0.01, poll_interval=0),
        )
        agent.start()
        try:
            assert agent.running
            assert updated.wait(2.0)
            assert processor.cached_palette[0].hex == "#050607"
        finally:
            agent.stop()
        assert not agent.running

    def test_notifications_are_coalesced(self):
        provider = _CountingProvider([("/w.png", _solid_image(5, 6, 7))])
        agent = PaletteAgent(
            provider, config=SchedulerConfig(debounce_interval=0.1, poll_interval=0)
        )
        agent.start()
        try:
            for _ in range(5):
                agent.notify_wallpaper_changed()
            time.sleep(0.5)
        finally:
            agent.stop()
        assert provider.calls == 1

    def test_polling_triggers_runs_until_stopped(self):
        provider = _CountingProvider([("/w.png", _solid_image(5, 6, 7))])
        agent = PaletteAgent(
            provider,
            config=SchedulerConfig(debounce_interval=0.0, poll_interval=0.05),
        )
        agent.start()
        time.sleep(0.5)
        agent.stop()
        calls_at_stop = provider.calls
        assert calls_at_stop >= 3

        time.sleep(0.3)
        assert provider.calls <= calls_at_stop + 1

    def test_stop_cancels_pending_run(self):
        provider = _CountingProvider([("/w.png", _solid_image(5, 6, 7))])
        agent = PaletteAgent(
            provider, config=SchedulerConfig(debounce_interval=0.1, poll_interval=0)
        )
        agent.start()
        agent.stop()
        time.sleep(0.3)
        assert provider.calls == 0

    def test_stopped_agent_ignores_triggers(self):
        provider = _CountingProvider([("/w.png", _solid_image(5, 6, 7))])
        agent = PaletteAgent(
            provider, config=SchedulerConfig(debounce_interval=0.01, poll_interval=0.05)
        )
        agent.start()
        agent.stop()
        agent.notify_wallpaper_changed()
        agent.schedule("manual")
        agent.settings_changed(palette_config=PaletteConfig(brightness_delta=30.0))
        time.sleep(0.3)

        assert provider.calls == 0
        assert not agent.running
        # Settings still apply for the next start
        assert agent.processor.config.brightness_delta == 30.0

    def test_settings_changed_applies_and_reruns(self):
        updates = []
        first_run = threading.Event()

        def on_update(palette, sources):
            updates.append(palette)
            first_run.set()

        processor = PaletteProcessor(on_update=on_update)
        provider = _CountingProvider([("/w.png", _solid_image(5, 6, 7))])
        agent = PaletteAgent(
            provider,
            processor,
            SchedulerConfig(debounce_interval=0.01, poll_interval=0),
        )
        agent.start()
        try:
            assert first_run.wait(2.0)
            agent.settings_changed(
                palette_config=PaletteConfig(brightness_delta=40.0),
                scheduler_config=SchedulerConfig(debounce_interval=0.02, poll_interval=0),
            )
            time.sleep(0.4)
        finally:
            agent.stop()

        assert processor.config.brightness_delta == 40.0
        assert agent.config.debounce_interval == 0.02
        assert len(updates) == 2
        assert updates[0][1] != updates[1][1]
