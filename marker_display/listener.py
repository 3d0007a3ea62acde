"""
Reception, projection and lifecycle of visualization markers.

MarkersListener binds marker topics (single markers and marker batches) to
a shared MarkerCache: every message is resolved into the static frame,
projected to 2D segments and applied as ADD / DELETE / DELETEALL. Markers
with a lifetime get a deferred deletion registered with the scheduler.
"""

import logging
from typing import Any, List, Optional

from marker_display.config import ListenerConfig
from marker_display.core.marker import Marker, MarkerAction, MarkerArray
from marker_display.core.marker_cache import MarkerCache
from marker_display.core.projector import project_marker
from marker_display.core.scheduler import LifetimeScheduler, Scheduler
from marker_display.core.segment import Segment
from marker_display.tf.buffer import TransformLookupError, TransformResolver
from marker_display.transport.bus import Subscription, TopicBus

logger = logging.getLogger(__name__)

# Expiry deletes the key only if it still holds the version it was scheduled for
EXPIRY_GENERATION = "generation"
# Expiry deletes the key unconditionally (a refreshed marker can vanish early)
EXPIRY_KEY = "key"
EXPIRY_POLICIES = (EXPIRY_GENERATION, EXPIRY_KEY)


class MarkersListener:
    """
    Applies marker messages to a shared cache.

    The cache and scheduler are explicit handles so that several listeners
    (or tests) can share them.
    """

    def __init__(self, tf_resolver: TransformResolver, static_frame: str,
                 cache: Optional[MarkerCache] = None,
                 scheduler: Optional[Scheduler] = None,
                 expiry_policy: str = EXPIRY_GENERATION):
        """
        Args:
            tf_resolver: Source of frame -> static frame transforms
            static_frame: Frame every marker is projected into
            cache: Shared marker cache (new one if None)
            scheduler: Delayed task runner for lifetimes (new LifetimeScheduler if None)
            expiry_policy: EXPIRY_GENERATION or EXPIRY_KEY
        """
        if expiry_policy not in EXPIRY_POLICIES:
            raise ValueError(f"Unknown expiry policy '{expiry_policy}', "
                             f"expected one of {EXPIRY_POLICIES}")
        self.tf_resolver = tf_resolver
        self.static_frame = static_frame
        self.cache = cache if cache is not None else MarkerCache()
        self.scheduler = scheduler if scheduler is not None else LifetimeScheduler()
        self.expiry_policy = expiry_policy
        self._subscriptions: List[Subscription] = []

    @property
    def subscriptions(self) -> List[Subscription]:
        return list(self._subscriptions)

    def get_lines(self) -> List[Segment]:
        """All segments currently active, to render."""
        return self.cache.snapshot()

    # --- Message handling ---

    def handle_marker(self, marker: Marker) -> bool:
        """
        Apply one marker message.

        Returns:
            True if the cache was mutated (or a mutation attempted), False if
            the message was dropped or ignored
        """
        try:
            transform = self.tf_resolver.lookup_transform(
                marker.header.frame_id, self.static_frame, marker.header.stamp)
        except TransformLookupError as e:
            logger.debug(f"Dropping {marker.ns}/{marker.id}: {e}")
            return False

        if marker.action == MarkerAction.ADD:
            segments = project_marker(marker, transform)
            rendered = self.cache.upsert(marker.ns, marker.id, segments)
            logger.debug(f"Adding {marker.id} to namespace {marker.ns} "
                         f"({len(segments)} segments)")
            if marker.lifetime > 0.0:
                self._schedule_expiry(marker.ns, marker.id, rendered.generation,
                                      marker.lifetime)
        elif marker.action == MarkerAction.DELETE:
            self.cache.delete(marker.ns, marker.id)
            logger.debug(f"DELETE {marker.ns}/{marker.id}")
        elif marker.action == MarkerAction.DELETEALL:
            self.cache.clear()
            logger.debug("DELETEALL")
        else:
            logger.debug(f"Ignoring {marker.ns}/{marker.id} with action {marker.action}")
            return False
        return True

    def handle_marker_array(self, array: MarkerArray) -> int:
        """
        Apply every marker of a batch independently.

        Returns:
            Number of markers applied
        """
        applied = 0
        for marker in array.markers:
            try:
                if self.handle_marker(marker):
                    applied += 1
            except Exception:
                logger.exception(f"Failed to apply marker {marker.ns}/{marker.id}, "
                                 f"continuing with batch")
        return applied

    def _schedule_expiry(self, namespace: str, marker_id: int, generation: int,
                         lifetime: float) -> None:
        cache = self.cache

        if self.expiry_policy == EXPIRY_GENERATION:
            def expire():
                if cache.delete_if_generation(namespace, marker_id, generation):
                    logger.debug(f"Expired {namespace}/{marker_id}")
        else:
            def expire():
                if cache.delete(namespace, marker_id):
                    logger.debug(f"Expired {namespace}/{marker_id}")

        self.scheduler.after(lifetime, expire)

    # --- Payload decoding (transport side) ---

    def on_marker_payload(self, payload: Any) -> None:
        """Subscription handler for single-marker topics."""
        try:
            marker = payload if isinstance(payload, Marker) else Marker.from_dict(payload)
        except ValueError as e:
            logger.warning(f"Dropping malformed marker: {e}")
            return
        self.handle_marker(marker)

    def on_marker_array_payload(self, payload: Any) -> None:
        """Subscription handler for marker batch topics."""
        if isinstance(payload, MarkerArray):
            self.handle_marker_array(payload)
            return
        try:
            array = MarkerArray.from_dict(payload)
        except ValueError as e:
            logger.warning(f"Dropping malformed marker array: {e}")
            return
        self.handle_marker_array(array)

    # --- Subscriptions ---

    def add_marker_listener(self, bus: TopicBus, config: ListenerConfig) -> Subscription:
        """
        Adds a subscriber for a marker topic.

        Args:
            bus: Transport to subscribe on
            config: Configuration containing the topic name
        """
        sub = bus.subscribe(config.topic, self.on_marker_payload, config.queue_size)
        self._subscriptions.append(sub)
        return sub

    def add_marker_array_listener(self, bus: TopicBus, config: ListenerConfig) -> Subscription:
        """
        Adds a subscriber for a marker array topic.

        Args:
            bus: Transport to subscribe on
            config: Configuration containing the topic name
        """
        sub = bus.subscribe(config.topic, self.on_marker_array_payload, config.queue_size)
        self._subscriptions.append(sub)
        return sub
