"""
Shared fixtures for the TermLens test suite
"""

import pytest

from termlens.core.config import DetectionConfig, SchedulerConfig, TermLensConfig
from termlens.core.editor import EditorSession
from termlens.core.glossary import TermCatalog


class _TimerHandle:
    def __init__(self, due, callback):
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class ManualTimers:
    """Deterministic stand-in for an event loop's call_later"""

    def __init__(self):
        self.now = 0.0
        self.handles = []
        self.fired_at = []

    def clock(self):
        return self.now

    def call_later(self, delay, callback):
        handle = _TimerHandle(self.now + delay, callback)
        self.handles.append(handle)
        return handle

    def advance_to(self, target):
        while True:
            due = [h for h in self.handles if not h.cancelled and h.due <= target + 1e-9]
            if not due:
                break
            handle = min(due, key=lambda h: h.due)
            self.handles.remove(handle)
            self.now = handle.due
            self.fired_at.append(round(handle.due, 6))
            handle.callback()
        self.now = target

    def advance(self, seconds):
        self.advance_to(self.now + seconds)

    @property
    def active(self):
        return [h for h in self.handles if not h.cancelled]


@pytest.fixture
def timers():
    return ManualTimers()


@pytest.fixture
def catalog():
    return TermCatalog()


@pytest.fixture
def ml_catalog():
    return TermCatalog(
        custom_glossary={
            "machine": "A device that performs work.",
            "learning": "Acquiring knowledge.",
            "machine learning": "Computers learning from data.",
        },
        include_defaults=False,
    )


@pytest.fixture
def config(monkeypatch):
    for name in ("TERMLENS_DEBOUNCE_MS", "TERMLENS_TOP_K", "TERMLENS_GLOSSARY",
                 "TERMLENS_DARK_MODE", "TERMLENS_DEBUG"):
        monkeypatch.delenv(name, raising=False)
    return TermLensConfig(detection=DetectionConfig(), scheduler=SchedulerConfig(debounce_ms=300))


@pytest.fixture
def session(catalog, config, timers):
    return EditorSession(catalog=catalog, config=config, call_later=timers.call_later, clock=timers.clock)
