"""
In-process transform tree.

Frames form a tree: each child frame has exactly one parent and a stamped
history of parent <- child transforms. Static edges hold a single transform
valid at every time.

Terminology:
- "transform from A to B": maps coordinates expressed in A into B
- stamp 0.0: "latest available" (the newest time every edge on the path has)
"""

import bisect
import logging
import threading
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, List, Optional, Protocol, Tuple

from marker_display.core.geometry import Transform

logger = logging.getLogger(__name__)

DEFAULT_CACHE_TIME = 10.0  # seconds of history kept per dynamic edge
DEFAULT_TOLERANCE = 0.1  # seconds a lookup may fall outside the stored window


class TransformLookupError(Exception):
    """A transform could not be resolved."""


class FrameNotFoundError(TransformLookupError):
    """One of the frames has never been published."""


class ConnectivityError(TransformLookupError):
    """The frames are not in the same tree."""


class ExtrapolationError(TransformLookupError):
    """The requested time lies outside the stored history."""


class TransformResolver(Protocol):
    """What the marker listener needs from a transform service."""

    def lookup_transform(self, source_frame: str, target_frame: str,
                         stamp: float) -> Transform:
        """
        Raises:
            TransformLookupError: If the transform is unavailable
        """
        ...


@dataclass
class _Edge:
    """Parent <- child link with its stamped history (oldest first)."""
    parent: str
    static: bool = False
    stamps: Deque[float] = field(default_factory=deque)
    transforms: Deque[Transform] = field(default_factory=deque)

    def latest_stamp(self) -> Optional[float]:
        if self.static:
            return None
        return self.stamps[-1]

    def at(self, stamp: float, tolerance: float, child: str) -> Transform:
        """Transform at stamp; 0.0 means newest."""
        if self.static or stamp == 0.0:
            return self.transforms[-1]

        oldest, newest = self.stamps[0], self.stamps[-1]
        if stamp <= oldest:
            if oldest - stamp > tolerance:
                raise ExtrapolationError(
                    f"Lookup of '{child}' at {stamp:.3f} is {oldest - stamp:.3f}s "
                    f"before the oldest data ({oldest:.3f})")
            return self.transforms[0]
        if stamp >= newest:
            if stamp - newest > tolerance:
                raise ExtrapolationError(
                    f"Lookup of '{child}' at {stamp:.3f} is {stamp - newest:.3f}s "
                    f"after the newest data ({newest:.3f})")
            return self.transforms[-1]

        stamps = list(self.stamps)
        i = bisect.bisect_left(stamps, stamp)
        t0, t1 = stamps[i - 1], stamps[i]
        ratio = (stamp - t0) / (t1 - t0)
        return self.transforms[i - 1].interpolate(self.transforms[i], ratio)


class TransformBuffer:
    """
    Thread-safe transform tree with short per-edge history.

    Mirrors the usual tf buffer contract: producers call set_transform(),
    consumers call lookup_transform().
    """

    def __init__(self, cache_time: float = DEFAULT_CACHE_TIME,
                 tolerance: float = DEFAULT_TOLERANCE):
        """
        Args:
            cache_time: Seconds of history kept behind the newest sample of an edge
            tolerance: Seconds a lookup may fall outside an edge's history and
                       still use the nearest sample
        """
        self.cache_time = cache_time
        self.tolerance = tolerance
        self._lock = threading.Lock()
        self._edges: Dict[str, _Edge] = {}

    def set_transform(self, parent: str, child: str, transform: Transform,
                      stamp: float = 0.0, static: bool = False) -> None:
        """
        Record the transform from child to parent.

        Re-parenting a frame or switching it between static and dynamic
        discards its history.

        Raises:
            ValueError: On empty frame names or a self-parented frame
        """
        if not parent or not child:
            raise ValueError("Frame names must be non-empty")
        if parent == child:
            raise ValueError(f"Frame '{child}' cannot be its own parent")

        with self._lock:
            edge = self._edges.get(child)
            if edge is None or edge.parent != parent or edge.static != static:
                if edge is not None:
                    logger.info(f"Frame '{child}' re-parented to '{parent}' "
                                f"({'static' if static else 'dynamic'})")
                edge = self._edges[child] = _Edge(parent=parent, static=static)

            if static:
                edge.stamps.clear()
                edge.transforms.clear()
                edge.stamps.append(0.0)
                edge.transforms.append(transform)
                return

            if edge.stamps and stamp < edge.stamps[-1]:
                # Out of order sample: insert in place to keep history sorted
                stamps = list(edge.stamps)
                i = bisect.bisect_right(stamps, stamp)
                edge.stamps.insert(i, stamp)
                edge.transforms.insert(i, transform)
            else:
                edge.stamps.append(stamp)
                edge.transforms.append(transform)

            horizon = edge.stamps[-1] - self.cache_time
            while len(edge.stamps) > 1 and edge.stamps[0] < horizon:
                edge.stamps.popleft()
                edge.transforms.popleft()

    def frames(self) -> Dict[str, Optional[str]]:
        """Every known frame -> its parent (None for roots)."""
        with self._lock:
            result: Dict[str, Optional[str]] = {}
            for child, edge in self._edges.items():
                result[child] = edge.parent
                result.setdefault(edge.parent, None)
            return result

    def _chain(self, frame: str) -> List[str]:
        """Frame followed by its ancestors up to the root (must hold lock)."""
        chain = [frame]
        seen = {frame}
        while frame in self._edges:
            frame = self._edges[frame].parent
            if frame in seen:
                raise ConnectivityError(f"Cycle in transform tree at '{frame}'")
            seen.add(frame)
            chain.append(frame)
        return chain

    def _known(self, frame: str) -> bool:
        if frame in self._edges:
            return True
        return any(edge.parent == frame for edge in self._edges.values())

    def _latest_common_stamp(self, edges: List[Tuple[str, _Edge]]) -> float:
        latest = [edge.latest_stamp() for _, edge in edges]
        latest = [s for s in latest if s is not None]
        return min(latest) if latest else 0.0

    def _to_ancestor(self, path: List[str], stamp: float) -> Transform:
        """Compose child -> ... -> ancestor along path (must hold lock)."""
        result = Transform.identity()
        for child in path[:-1]:
            edge = self._edges[child]
            result = edge.at(stamp, self.tolerance, child) * result
        return result

    def lookup_transform(self, source_frame: str, target_frame: str,
                         stamp: float = 0.0) -> Transform:
        """
        Resolve the transform mapping source_frame coordinates into target_frame.

        Args:
            source_frame: Frame the data is expressed in
            target_frame: Frame the data is wanted in
            stamp: Time in seconds; 0.0 = latest common time

        Returns:
            Transform from source_frame to target_frame

        Raises:
            FrameNotFoundError: Unknown frame
            ConnectivityError: Frames are in disconnected trees
            ExtrapolationError: stamp outside stored history (beyond tolerance)
        """
        if source_frame == target_frame:
            return Transform.identity()

        with self._lock:
            for frame in (source_frame, target_frame):
                if not self._known(frame):
                    raise FrameNotFoundError(f"Frame '{frame}' does not exist")

            source_chain = self._chain(source_frame)
            target_chain = self._chain(target_frame)
            common = next((f for f in source_chain if f in target_chain), None)
            if common is None:
                raise ConnectivityError(
                    f"'{source_frame}' and '{target_frame}' are not connected "
                    f"(roots '{source_chain[-1]}' and '{target_chain[-1]}')")

            source_path = source_chain[:source_chain.index(common) + 1]
            target_path = target_chain[:target_chain.index(common) + 1]

            if stamp == 0.0:
                edges = [(f, self._edges[f]) for f in source_path[:-1] + target_path[:-1]]
                stamp = self._latest_common_stamp(edges)

            source_to_common = self._to_ancestor(source_path, stamp)
            target_to_common = self._to_ancestor(target_path, stamp)

        return target_to_common.inverse() * source_to_common

    def can_transform(self, source_frame: str, target_frame: str,
                      stamp: float = 0.0) -> bool:
        try:
            self.lookup_transform(source_frame, target_frame, stamp)
            return True
        except TransformLookupError:
            return False
