"""Shared fixtures: deterministic scheduler, fixed transforms, marker builders."""

import heapq
import itertools

import pytest

from marker_display.core.geometry import Transform
from marker_display.core.marker import Marker, make_marker
from marker_display.core.marker_cache import MarkerCache
from marker_display.listener import MarkersListener
from marker_display.tf.buffer import FrameNotFoundError


class ManualScheduler:
    """Scheduler double: tasks fire only when the test advances the clock."""

    def __init__(self):
        self.now = 0.0
        self._queue = []
        self._seq = itertools.count()

    def after(self, delay, task):
        heapq.heappush(self._queue, (self.now + max(0.0, delay), next(self._seq), task))

    def advance(self, seconds):
        self.now += seconds
        while self._queue and self._queue[0][0] <= self.now:
            _, _, task = heapq.heappop(self._queue)
            task()

    @property
    def pending(self):
        return len(self._queue)


class StaticResolver:
    """Answers lookups from a fixed (source, target) -> Transform table."""

    def __init__(self, transforms=None, errors=None):
        self.transforms = dict(transforms or {})
        self.errors = dict(errors or {})  # source frame -> exception to raise
        self.calls = []

    def lookup_transform(self, source_frame, target_frame, stamp):
        self.calls.append((source_frame, target_frame, stamp))
        if source_frame in self.errors:
            raise self.errors[source_frame]
        if source_frame == target_frame:
            return Transform.identity()
        try:
            return self.transforms[(source_frame, target_frame)]
        except KeyError:
            raise FrameNotFoundError(f"Frame '{source_frame}' does not exist")


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def resolver():
    return StaticResolver({
        ("base_link", "map"): Transform(translation=[1.0, 2.0, 0.0]),
    })


@pytest.fixture
def cache():
    return MarkerCache()


@pytest.fixture
def listener(resolver, cache, scheduler):
    return MarkersListener(resolver, "map", cache=cache, scheduler=scheduler)


@pytest.fixture
def build_marker():
    """Typed Marker from make_marker() keyword arguments."""
    def _build(ns="test", id=0, type="LINE_STRIP", **kwargs):
        return Marker.from_dict(make_marker(ns, id, type, **kwargs))
    return _build
