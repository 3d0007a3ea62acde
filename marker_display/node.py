"""
Headless wiring of the marker pipeline.

MarkerNode (one per server instance)
├── TopicBus            (subscriptions, one thread each)
├── TransformBuffer     (static transforms from config + published ones)
├── MarkerCache         (shared by every listener and the renderer)
├── LifetimeScheduler   (marker expiry)
└── MarkersListener     (one subscription per configured topic)
"""

import logging
from typing import Optional

from marker_display.config import ServerConfig
from marker_display.core.geometry import Transform
from marker_display.core.marker_cache import MarkerCache
from marker_display.core.scheduler import LifetimeScheduler, Scheduler
from marker_display.listener import MarkersListener
from marker_display.tf.buffer import TransformBuffer
from marker_display.transport.bus import TopicBus

logger = logging.getLogger(__name__)


class MarkerNode:
    """Owns the shared marker state and the subscriptions feeding it."""

    def __init__(self, config: Optional[ServerConfig] = None,
                 scheduler: Optional[Scheduler] = None):
        """
        Args:
            config: Server configuration (defaults if None)
            scheduler: Lifetime scheduler override (tests)
        """
        self.config = config or ServerConfig()

        self.bus = TopicBus()
        self.tf_buffer = TransformBuffer(cache_time=self.config.tf_cache_time,
                                         tolerance=self.config.tf_tolerance)
        self.cache = MarkerCache()
        self.scheduler = scheduler if scheduler is not None else LifetimeScheduler()
        self.listener = MarkersListener(
            self.tf_buffer,
            self.config.static_frame,
            cache=self.cache,
            scheduler=self.scheduler,
            expiry_policy=self.config.expiry_policy,
        )

        for tf_config in self.config.static_transforms:
            self.tf_buffer.set_transform(
                tf_config.parent, tf_config.child,
                Transform(tf_config.translation, tf_config.rotation),
                static=True,
            )
            logger.info(f"Static transform {tf_config.parent} <- {tf_config.child}")

        for listener_config in self.config.marker_listeners:
            self.listener.add_marker_listener(self.bus, listener_config)
        for listener_config in self.config.marker_array_listeners:
            self.listener.add_marker_array_listener(self.bus, listener_config)

    @property
    def static_frame(self) -> str:
        return self.listener.static_frame

    def shutdown(self) -> None:
        """Stop subscriptions and the lifetime scheduler."""
        self.bus.shutdown()
        shutdown = getattr(self.scheduler, "shutdown", None)
        if shutdown is not None:
            shutdown()
        logger.info("Marker node stopped")
