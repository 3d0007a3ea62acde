"""
Keyed store of the markers currently visible.

MarkerCache
└── namespace: Dict[str, ...]
    └── id: Dict[int, RenderedMarker]

Shared between every subscription thread, the lifetime scheduler and the
render loop. One lock guards the whole mapping; RenderedMarker values are
immutable, so readers copy references under the lock and flatten outside it.
"""

import logging
import threading
from typing import Dict, Iterable, List, Optional, Tuple

from marker_display.core.segment import MarkerKey, RenderedMarker, Segment

logger = logging.getLogger(__name__)


class MarkerCache:
    """Mapping (namespace, id) -> RenderedMarker with at most one entry per key."""

    def __init__(self):
        self._lock = threading.Lock()
        self._markers: Dict[str, Dict[int, RenderedMarker]] = {}
        self._generation: int = 0  # Monotonic counter, one value per upsert

    def _next_generation(self) -> int:
        """Return the next generation number.

        Must be called while self._lock is held.
        """
        self._generation += 1
        return self._generation

    def upsert(self, namespace: str, marker_id: int,
               segments: Iterable[Segment]) -> RenderedMarker:
        """
        Insert or replace the entry for (namespace, marker_id).

        Returns:
            The stored RenderedMarker (carrying its new generation)
        """
        segments = tuple(segments)
        with self._lock:
            rendered = RenderedMarker(
                key=MarkerKey(namespace, marker_id),
                segments=segments,
                generation=self._next_generation(),
            )
            entries = self._markers.get(namespace)
            if entries is None:
                entries = self._markers[namespace] = {}
                logger.debug(f"{marker_id} on new namespace {namespace}")
            entries[marker_id] = rendered
        return rendered

    def _remove(self, namespace: str, marker_id: int) -> bool:
        """Must be called while self._lock is held."""
        entries = self._markers.get(namespace)
        if entries is None or marker_id not in entries:
            return False
        del entries[marker_id]
        if not entries:
            del self._markers[namespace]
        return True

    def delete(self, namespace: str, marker_id: int) -> bool:
        """
        Remove an entry.

        Returns:
            True if removed, False if the key was not present
        """
        with self._lock:
            return self._remove(namespace, marker_id)

    def delete_if_generation(self, namespace: str, marker_id: int,
                             generation: int) -> bool:
        """
        Remove an entry only if it is still the version identified by generation.

        Returns:
            True if removed, False if absent or replaced since
        """
        with self._lock:
            entries = self._markers.get(namespace)
            current = entries.get(marker_id) if entries else None
            if current is None or current.generation != generation:
                return False
            return self._remove(namespace, marker_id)

    def clear(self) -> None:
        """Remove all entries across all namespaces."""
        with self._lock:
            self._markers.clear()

    def snapshot(self) -> List[Segment]:
        """All segments of every entry, ordered by (namespace, id)."""
        markers: List[RenderedMarker] = []
        with self._lock:
            for namespace in sorted(self._markers):
                entries = self._markers[namespace]
                markers.extend(entries[marker_id] for marker_id in sorted(entries))
        return [segment for marker in markers for segment in marker.segments]

    def get(self, namespace: str, marker_id: int) -> Optional[RenderedMarker]:
        with self._lock:
            entries = self._markers.get(namespace)
            return entries.get(marker_id) if entries else None

    def keys(self) -> List[MarkerKey]:
        with self._lock:
            return [MarkerKey(ns, marker_id)
                    for ns in sorted(self._markers)
                    for marker_id in sorted(self._markers[ns])]

    def namespaces(self) -> Dict[str, List[int]]:
        """Namespace -> sorted ids currently present."""
        with self._lock:
            return {ns: sorted(entries) for ns, entries in sorted(self._markers.items())}

    def __len__(self) -> int:
        with self._lock:
            return sum(len(entries) for entries in self._markers.values())

    def __contains__(self, key: Tuple[str, int]) -> bool:
        namespace, marker_id = key
        return self.get(namespace, marker_id) is not None
