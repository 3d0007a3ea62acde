#!/usr/bin/env python3
"""
Marker client for the marker display server.

Sends JSON-lines requests over TCP and reads one reply line per request.
Every call returns the server's reply dict, or None when the server could not
be reached.
"""

import json
import logging
import socket
import time
from typing import Any, Dict, List, Optional

from marker_display.config import DEFAULT_MARKER_ARRAY_TOPIC, DEFAULT_MARKER_TOPIC
from marker_display.core.marker import MarkerAction, make_marker

logger = logging.getLogger(__name__)

Reply = Optional[Dict[str, Any]]

RECONNECT_BACKOFF = 0.5  # seconds, multiplied by the attempt number


class MarkerClient:
    """
    Socket client for the marker display server.

    Usage:
        with MarkerClient("192.168.0.100") as client:
            client.set_transform("map", "base_link", translation=[1.0, 0.0, 0.0])
            client.publish_marker(make_marker("demo", 0, "CUBE", frame_id="base_link"))
    """

    def __init__(self, host: str = "localhost", port: int = 9999, timeout: float = 5.0,
                 auto_reconnect: bool = False, max_reconnect_attempts: int = 3):
        """
        Args:
            host: Server address
            port: Server command port
            timeout: Per-operation socket timeout, seconds
            auto_reconnect: Reopen a dropped connection before giving up on a call
            max_reconnect_attempts: Connection attempts per reconnect
        """
        self.host = host
        self.port = port
        self.timeout = timeout
        self.auto_reconnect = auto_reconnect
        self.max_reconnect_attempts = max_reconnect_attempts
        self._sock: Optional[socket.socket] = None
        self._reader = None

    @property
    def is_connected(self) -> bool:
        return self._sock is not None

    def connect(self) -> bool:
        """Open a fresh connection, dropping any current one."""
        self._drop()
        try:
            self._sock = socket.create_connection((self.host, self.port), timeout=self.timeout)
        except OSError as e:
            logger.error(f"Cannot reach marker display at {self.host}:{self.port}: {e}")
            return False
        self._reader = self._sock.makefile("r", encoding="utf-8", newline="\n")
        logger.info(f"Connected to marker display at {self.host}:{self.port}")
        return True

    def disconnect(self) -> None:
        if self.is_connected:
            logger.info("Disconnected from marker display")
        self._drop()

    def _drop(self) -> None:
        for stream in (self._reader, self._sock):
            if stream is not None:
                try:
                    stream.close()
                except OSError:
                    pass
        self._reader = None
        self._sock = None

    def _reconnect(self) -> bool:
        if not self.auto_reconnect:
            return False
        for attempt in range(1, self.max_reconnect_attempts + 1):
            logger.info(f"Reconnecting ({attempt}/{self.max_reconnect_attempts})")
            if self.connect():
                return True
            time.sleep(RECONNECT_BACKOFF * attempt)
        logger.error(f"Gave up reconnecting after {self.max_reconnect_attempts} attempts")
        return False

    def _roundtrip(self, request: Dict[str, Any]) -> Dict[str, Any]:
        self._sock.sendall(json.dumps(request).encode("utf-8") + b"\n")
        line = self._reader.readline()
        if not line:
            raise ConnectionError("Server closed connection")
        return json.loads(line)

    def _call(self, action: str, **params) -> Reply:
        """
        Send one command and wait for its reply.

        A failed exchange closes the connection; with auto_reconnect the
        command is sent once more on a new one.
        """
        request = {"action": action, **params}
        for retry in (False, True):
            if not self.is_connected and not self._reconnect():
                if not retry:
                    logger.warning("Not connected to marker display")
                return None
            try:
                return self._roundtrip(request)
            except (OSError, ValueError) as e:
                logger.error(f"'{action}' failed: {e}")
                self._drop()
        return None

    # --- Marker topics ---

    def publish_marker(self, marker: Dict[str, Any], topic: str = DEFAULT_MARKER_TOPIC) -> Reply:
        """
        Publish one marker.

        Args:
            marker: Marker dictionary (see make_marker)
            topic: Marker topic the server subscribes to
        """
        return self._call("publish", topic=topic, msg=marker)

    def publish_markers(self, markers: List[Dict[str, Any]],
                        topic: str = DEFAULT_MARKER_ARRAY_TOPIC) -> Reply:
        """Publish a batch of markers as one marker array message."""
        return self._call("publish", topic=topic, msg={"markers": list(markers)})

    def delete_marker(self, ns: str, id: int, frame_id: str = "map",
                      topic: str = DEFAULT_MARKER_TOPIC) -> Reply:
        """Delete one marker by (namespace, id)."""
        return self.publish_marker(
            make_marker(ns, id, frame_id=frame_id, action=MarkerAction.DELETE), topic)

    def delete_all(self, frame_id: str = "map", topic: str = DEFAULT_MARKER_TOPIC) -> Reply:
        return self.publish_marker(
            make_marker("", 0, frame_id=frame_id, action=MarkerAction.DELETEALL), topic)

    def list_topics(self) -> Reply:
        return self._call("list_topics")

    # --- Transforms ---

    def set_transform(self, parent: str, child: str,
                      translation: Optional[List[float]] = None,
                      rotation: Optional[List[float]] = None,
                      stamp: float = 0.0, static: bool = False) -> Reply:
        """
        Publish the pose of frame `child` in frame `parent`.

        Args:
            parent: Parent frame
            child: Child frame
            translation: [x, y, z] (default origin)
            rotation: [x, y, z, w] quaternion (default identity)
            stamp: Time in seconds
            static: Valid at every time
        """
        params = {"parent": parent, "child": child, "stamp": stamp, "static": static}
        if translation is not None:
            params["translation"] = list(translation)
        if rotation is not None:
            params["rotation"] = list(rotation)
        return self._call("set_transform", **params)

    def list_frames(self) -> Reply:
        return self._call("list_frames")

    # --- Queries ---

    def get_lines(self) -> Reply:
        """Segments currently drawn by the display."""
        return self._call("get_lines")

    def list_markers(self) -> Reply:
        return self._call("list_markers")

    def clear_markers(self) -> Reply:
        return self._call("clear_markers")

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()
        return False
