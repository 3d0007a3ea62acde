"""YAML configuration loading."""

import pytest

from marker_display.config import (
    DEFAULT_MARKER_ARRAY_TOPIC,
    DEFAULT_MARKER_TOPIC,
    ServerConfig,
    load_config,
)

FULL_CONFIG = """
server:
  socket_host: 127.0.0.1
  socket_port: 8888
display:
  update_rate: 60
  width: 800
  height: 600
  pixels_per_meter: 100
  background_color: "#102030"
  line_width: 2
static_frame: world
tf:
  cache_time: 5.0
  tolerance: 0.2
listeners:
  markers:
    - topic: /markers
      queue_size: 5
    - /debug_markers
  marker_arrays:
    - topic: /marker_arrays
transforms:
  - parent: world
    child: odom
    translation: [1.0, 2.0, 0.0]
    rotation: [0.0, 0.0, 0.0, 1.0]
expiry_policy: key
"""


def test_no_path_gives_defaults():
    config = load_config(None)

    assert config.socket_port == 9999
    assert config.static_frame == "map"
    assert [c.topic for c in config.marker_listeners] == [DEFAULT_MARKER_TOPIC]
    assert [c.topic for c in config.marker_array_listeners] == [DEFAULT_MARKER_ARRAY_TOPIC]
    assert config.expiry_policy == "generation"


def test_missing_file_gives_defaults(tmp_path):
    config = load_config(tmp_path / "absent.yaml")
    assert config.socket_port == 9999


def test_full_config(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(FULL_CONFIG)

    config = load_config(path)

    assert config.socket_host == "127.0.0.1"
    assert config.socket_port == 8888
    assert config.display.update_rate == 60
    assert config.display.background_color == (0x10, 0x20, 0x30)
    assert config.display.line_width == 2
    assert config.static_frame == "world"
    assert config.tf_cache_time == 5.0
    assert config.tf_tolerance == 0.2
    assert [(c.topic, c.queue_size) for c in config.marker_listeners] == [
        ("/markers", 5), ("/debug_markers", 2)]
    assert [c.topic for c in config.marker_array_listeners] == ["/marker_arrays"]
    transform, = config.static_transforms
    assert (transform.parent, transform.child) == ("world", "odom")
    assert transform.translation == (1.0, 2.0, 0.0)
    assert config.expiry_policy == "key"


def test_empty_file_gives_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("")
    assert load_config(path).static_frame == "map"


def test_explicit_empty_listeners(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("listeners: {}\n")

    config = load_config(path)

    assert config.marker_listeners == []
    assert config.marker_array_listeners == []


def test_invalid_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("server: [unclosed\n")
    with pytest.raises(ValueError):
        load_config(path)


@pytest.mark.parametrize("data", [
    {"transforms": [{"parent": "map", "child": "odom", "rotation": [0, 0, 1]}]},
    {"transforms": [{"parent": "map"}]},
    {"listeners": {"markers": [{"queue_size": 3}]}},
    {"server": "localhost"},
    {"display": {"background_color": "blue"}},
])
def test_invalid_sections(data):
    with pytest.raises(ValueError):
        ServerConfig.from_dict(data)


def test_dict_round_trip(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(FULL_CONFIG)
    config = load_config(path)

    assert ServerConfig.from_dict(config.to_dict()) == config
