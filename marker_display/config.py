"""
Configuration for the marker display server.

Loaded from YAML; every section is optional and falls back to defaults:

    server:
      socket_host: 0.0.0.0
      socket_port: 9999
    display:
      update_rate: 30
      width: 1024
      height: 768
      pixels_per_meter: 50
      background_color: [0, 0, 0]
      line_width: 1
    static_frame: map
    tf:
      cache_time: 10.0
      tolerance: 0.1
    listeners:
      markers:
        - topic: /visualization_marker
      marker_arrays:
        - topic: /visualization_marker_array
    transforms:
      - parent: map
        child: odom
        translation: [0.0, 0.0, 0.0]
        rotation: [0.0, 0.0, 0.0, 1.0]
    expiry_policy: generation
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple, Union

import yaml

from marker_display.utils.color import parse_color

logger = logging.getLogger(__name__)

# Default configuration
DEFAULT_SOCKET_HOST = "0.0.0.0"
DEFAULT_SOCKET_PORT = 9999
DEFAULT_UPDATE_RATE = 30  # Hz
DEFAULT_STATIC_FRAME = "map"
DEFAULT_BACKGROUND_COLOR = (0, 0, 0)  # Black
DEFAULT_MARKER_TOPIC = "/visualization_marker"
DEFAULT_MARKER_ARRAY_TOPIC = "/visualization_marker_array"


@dataclass
class ListenerConfig:
    """Subscription settings for one marker topic."""
    topic: str
    queue_size: int = 2

    def to_dict(self) -> dict:
        return {"topic": self.topic, "queue_size": self.queue_size}

    @classmethod
    def from_dict(cls, data: Union[dict, str]) -> "ListenerConfig":
        """Accepts {"topic": ...} or a bare topic string."""
        if isinstance(data, str):
            data = {"topic": data}
        if not isinstance(data, dict) or not data.get("topic"):
            raise ValueError(f"Listener config needs a 'topic': {data!r}")
        return cls(
            topic=str(data["topic"]),
            queue_size=int(data.get("queue_size", 2)),
        )


@dataclass
class StaticTransformConfig:
    """A fixed parent <- child transform preloaded into the transform buffer."""
    parent: str
    child: str
    translation: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    rotation: Tuple[float, float, float, float] = (0.0, 0.0, 0.0, 1.0)

    def to_dict(self) -> dict:
        return {
            "parent": self.parent,
            "child": self.child,
            "translation": list(self.translation),
            "rotation": list(self.rotation),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "StaticTransformConfig":
        if not isinstance(data, dict) or not data.get("parent") or not data.get("child"):
            raise ValueError(f"Static transform needs 'parent' and 'child': {data!r}")
        translation = tuple(float(v) for v in data.get("translation", (0.0, 0.0, 0.0)))
        rotation = tuple(float(v) for v in data.get("rotation", (0.0, 0.0, 0.0, 1.0)))
        if len(translation) != 3:
            raise ValueError(f"translation must have 3 values, got {len(translation)}")
        if len(rotation) != 4:
            raise ValueError(f"rotation must be a [x, y, z, w] quaternion, got {len(rotation)} values")
        return cls(
            parent=str(data["parent"]),
            child=str(data["child"]),
            translation=translation,
            rotation=rotation,
        )


@dataclass
class DisplayConfig:
    """Viewer window settings."""
    update_rate: int = DEFAULT_UPDATE_RATE
    width: int = 1024
    height: int = 768
    pixels_per_meter: float = 50.0
    background_color: Tuple[int, int, int] = DEFAULT_BACKGROUND_COLOR
    line_width: int = 1

    def to_dict(self) -> dict:
        return {
            "update_rate": self.update_rate,
            "width": self.width,
            "height": self.height,
            "pixels_per_meter": self.pixels_per_meter,
            "background_color": list(self.background_color),
            "line_width": self.line_width,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "DisplayConfig":
        return cls(
            update_rate=int(data.get("update_rate", DEFAULT_UPDATE_RATE)),
            width=int(data.get("width", 1024)),
            height=int(data.get("height", 768)),
            pixels_per_meter=float(data.get("pixels_per_meter", 50.0)),
            background_color=parse_color(data.get("background_color",
                                                  list(DEFAULT_BACKGROUND_COLOR))),
            line_width=int(data.get("line_width", 1)),
        )


@dataclass
class ServerConfig:
    """Complete server configuration."""
    socket_host: str = DEFAULT_SOCKET_HOST
    socket_port: int = DEFAULT_SOCKET_PORT
    static_frame: str = DEFAULT_STATIC_FRAME
    display: DisplayConfig = field(default_factory=DisplayConfig)
    tf_cache_time: float = 10.0
    tf_tolerance: float = 0.1
    marker_listeners: List[ListenerConfig] = field(
        default_factory=lambda: [ListenerConfig(DEFAULT_MARKER_TOPIC)])
    marker_array_listeners: List[ListenerConfig] = field(
        default_factory=lambda: [ListenerConfig(DEFAULT_MARKER_ARRAY_TOPIC)])
    static_transforms: List[StaticTransformConfig] = field(default_factory=list)
    expiry_policy: str = "generation"

    def to_dict(self) -> dict:
        return {
            "server": {"socket_host": self.socket_host, "socket_port": self.socket_port},
            "display": self.display.to_dict(),
            "static_frame": self.static_frame,
            "tf": {"cache_time": self.tf_cache_time, "tolerance": self.tf_tolerance},
            "listeners": {
                "markers": [c.to_dict() for c in self.marker_listeners],
                "marker_arrays": [c.to_dict() for c in self.marker_array_listeners],
            },
            "transforms": [t.to_dict() for t in self.static_transforms],
            "expiry_policy": self.expiry_policy,
        }

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "ServerConfig":
        """
        Build from a parsed YAML document.

        Raises:
            ValueError: If a section has the wrong shape
        """
        data = data or {}
        if not isinstance(data, dict):
            raise ValueError("Config root must be a mapping")

        server = data.get("server") or {}
        listeners = data.get("listeners")
        if listeners is None:
            listeners = {"markers": [DEFAULT_MARKER_TOPIC],
                         "marker_arrays": [DEFAULT_MARKER_ARRAY_TOPIC]}
        tf = data.get("tf") or {}
        for name, section in (("server", server), ("listeners", listeners), ("tf", tf)):
            if not isinstance(section, dict):
                raise ValueError(f"Config section '{name}' must be a mapping")

        return cls(
            socket_host=server.get("socket_host", DEFAULT_SOCKET_HOST),
            socket_port=int(server.get("socket_port", DEFAULT_SOCKET_PORT)),
            static_frame=str(data.get("static_frame", DEFAULT_STATIC_FRAME)),
            display=DisplayConfig.from_dict(data.get("display") or {}),
            tf_cache_time=float(tf.get("cache_time", 10.0)),
            tf_tolerance=float(tf.get("tolerance", 0.1)),
            marker_listeners=[ListenerConfig.from_dict(c)
                              for c in listeners.get("markers") or []],
            marker_array_listeners=[ListenerConfig.from_dict(c)
                                    for c in listeners.get("marker_arrays") or []],
            static_transforms=[StaticTransformConfig.from_dict(t)
                               for t in data.get("transforms") or []],
            expiry_policy=str(data.get("expiry_policy", "generation")),
        )


def load_config(path: Optional[Union[str, Path]] = None) -> ServerConfig:
    """
    Load configuration from a YAML file.

    Args:
        path: Config file; None or a missing file gives the defaults

    Returns:
        Parsed configuration

    Raises:
        ValueError: If the file cannot be parsed or has an invalid shape
    """
    if path is None:
        logger.info("No config file specified, using defaults")
        return ServerConfig()

    config_file = Path(path)
    if not config_file.exists():
        logger.warning(f"Config file not found: {config_file}, using defaults")
        return ServerConfig()

    try:
        with open(config_file, 'r') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {config_file}: {e}")

    config = ServerConfig.from_dict(data)
    logger.info(f"Config loaded: socket={config.socket_host}:{config.socket_port}, "
                f"static_frame={config.static_frame}, "
                f"{len(config.marker_listeners)} marker + "
                f"{len(config.marker_array_listeners)} marker array listeners")
    return config
