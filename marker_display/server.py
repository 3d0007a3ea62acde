#!/usr/bin/env python3
"""
Marker Display Server - live 2D view of visualization markers.

This server provides:
1. Marker topics fed over a JSON/TCP command interface
2. A transform tree projecting every marker into one static frame
3. A lifetime-aware marker cache
4. A pygame viewer (or headless operation)
"""

import argparse
import os
import signal
import sys
import threading
from typing import Any, Dict, Optional

import pygame

from marker_display.commands import get_registry
from marker_display.config import ServerConfig, load_config
from marker_display.node import MarkerNode
from marker_display.rendering.primitives import draw_segments
from marker_display.rendering.renderer import PygameRenderer, Renderer
from marker_display.rendering.viewport import Viewport
from marker_display.transport.socket_server import JsonLineServer
from marker_display.utils.logging import get_logger, setup_logging

ZOOM_STEP = 1.25
PAN_STEP = 50  # pixels
HEADLESS_POLL = 0.5  # seconds

# Key -> (zoom factor, pan dx, pan dy)
_VIEW_KEYS = {
    pygame.K_PLUS: (ZOOM_STEP, 0, 0),
    pygame.K_EQUALS: (ZOOM_STEP, 0, 0),
    pygame.K_KP_PLUS: (ZOOM_STEP, 0, 0),
    pygame.K_MINUS: (1.0 / ZOOM_STEP, 0, 0),
    pygame.K_KP_MINUS: (1.0 / ZOOM_STEP, 0, 0),
    pygame.K_LEFT: (1.0, -PAN_STEP, 0),
    pygame.K_RIGHT: (1.0, PAN_STEP, 0),
    pygame.K_UP: (1.0, 0, -PAN_STEP),
    pygame.K_DOWN: (1.0, 0, PAN_STEP),
}


class MarkerDisplayServer:
    """
    Display server for visualization markers.

    Architecture:
        Server (single instance)
        ├── MarkerNode (bus, transforms, cache, scheduler, listeners)
        ├── JsonLineServer (commands from producers)
        └── Render loop (samples the cache every frame)
    """

    def __init__(self, config: Optional[ServerConfig] = None,
                 verbose: bool = False, headless: bool = False):
        """
        Args:
            config: Server configuration (defaults if None)
            verbose: Log every command at debug level
            headless: Run without a display window
        """
        self.config = config or ServerConfig()
        self.verbose = verbose
        self.headless = headless
        self.logger = get_logger(__name__)

        self.node = MarkerNode(self.config)
        self.commands = JsonLineServer(self.config.socket_host, self.config.socket_port,
                                       self.process_command)
        self.renderer: Optional[Renderer] = None
        self.viewport = Viewport(
            width=self.config.display.width,
            height=self.config.display.height,
            pixels_per_meter=self.config.display.pixels_per_meter,
        )
        # Set once the server should stop
        self._stopping = threading.Event()

    @property
    def running(self) -> bool:
        return not self._stopping.is_set()

    def stop(self) -> None:
        self._stopping.set()

    def install_signal_handlers(self) -> None:
        signal.signal(signal.SIGTERM, self._on_signal)
        signal.signal(signal.SIGINT, self._on_signal)

    def _on_signal(self, signum, frame):
        """First signal stops the loop, a second one exits immediately."""
        name = signal.Signals(signum).name
        if not self.running:
            self.logger.info(f"Force exit: Received {name} during shutdown")
            os._exit(1)
        self.logger.info(f"Shutdown initiated: Received {name}")
        self.stop()

    def init_display(self) -> bool:
        """
        Open the viewer window (no-op when headless).

        Returns:
            True if the server can run
        """
        if self.headless:
            self.logger.info("Running headless, no display")
            return True

        renderer = PygameRenderer(self.config.display.width, self.config.display.height)
        try:
            renderer.init()
        except pygame.error as e:
            self.logger.error(f"Failed to initialize display: {e}")
            return False

        self.renderer = renderer
        self.viewport.resize(*renderer.get_size())
        return True

    def process_command(self, cmd: Any) -> Dict[str, Any]:
        """
        Dispatch one decoded command line.

        Bad commands and failing handlers produce error responses; nothing a
        client sends stops the server.
        """
        if not isinstance(cmd, dict):
            return {"status": "error", "message": "Command must be a JSON object"}

        params = dict(cmd)
        action = params.pop("action", None) or params.pop("cmd", None)
        params.pop("cmd", None)
        if not action:
            return {"status": "error", "message": "Missing 'action' field"}

        try:
            result = get_registry().execute(action, self.node, **params)
        except Exception as e:
            self.logger.exception(f"Command '{action}' failed")
            return {"status": "error", "message": str(e)}

        if self.verbose:
            self.logger.debug(f"Command: {action}, Result: {result.get('status')}")
        return result

    def render_frame(self) -> None:
        """Draw the current marker snapshot."""
        self.renderer.clear(self.config.display.background_color)
        draw_segments(self.renderer, self.viewport, self.node.listener.get_lines(),
                      self.config.display.line_width)
        self.renderer.flip()

    def _handle_event(self, event) -> None:
        if event.type == pygame.QUIT:
            self.stop()
        elif event.type == pygame.VIDEORESIZE:
            self.renderer.handle_resize(event.w, event.h)
            self.viewport.resize(event.w, event.h)
        elif event.type == pygame.KEYDOWN:
            if event.key == pygame.K_ESCAPE:
                self.stop()
            elif event.key in _VIEW_KEYS:
                zoom, dx, dy = _VIEW_KEYS[event.key]
                self.viewport.zoom(zoom)
                self.viewport.pan(dx, dy)

    def run(self) -> None:
        """Serve until stopped, then shut everything down."""
        try:
            if self.renderer:
                self.logger.info("Starting render loop...")
                while self.running:
                    for event in self.renderer.get_events():
                        self._handle_event(event)
                    self.render_frame()
                    self.renderer.tick(self.config.display.update_rate)
            else:
                self.logger.info("Serving headless...")
                while not self._stopping.wait(HEADLESS_POLL):
                    pass
        except KeyboardInterrupt:
            self.logger.info("Keyboard interrupt received")
        finally:
            self.shutdown()

    def shutdown(self) -> None:
        self.logger.info("Shutting down...")
        self.stop()
        self.commands.stop()
        if self.renderer:
            self.renderer.quit()
            self.renderer = None
        self.node.shutdown()
        self.logger.info("Shutdown complete")


def main():
    """Entry point for the display server."""
    parser = argparse.ArgumentParser(
        description="Marker Display Server - live 2D view of visualization markers"
    )
    parser.add_argument("-c", "--config", help="Path to server configuration YAML")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")
    parser.add_argument("--port", "-p", type=int,
                        help="Socket port (default: from config, 9999)")
    parser.add_argument("--host", help="Socket host (default: from config, 0.0.0.0)")
    parser.add_argument("--static-frame", "-f",
                        help="Frame every marker is projected into (default: from config, map)")
    parser.add_argument("--headless", action="store_true", help="Run without a display window")
    parser.add_argument("--log-file", help="Log file path (default: /var/log or /tmp)")
    args = parser.parse_args()

    setup_logging(verbose=args.verbose, log_file=args.log_file)
    logger = get_logger(__name__)

    try:
        config = load_config(args.config)
    except ValueError as e:
        logger.error(f"Failed to load config: {e}")
        sys.exit(1)

    # Command line wins over the config file
    if args.port:
        config.socket_port = args.port
    if args.host:
        config.socket_host = args.host
    if args.static_frame:
        config.static_frame = args.static_frame

    server = MarkerDisplayServer(config, verbose=args.verbose, headless=args.headless)
    server.install_signal_handlers()

    if not server.init_display():
        server.node.shutdown()
        sys.exit(1)

    try:
        server.commands.start()
    except OSError as e:
        logger.error(f"Cannot listen on {config.socket_host}:{config.socket_port}: {e}")
        server.shutdown()
        sys.exit(1)

    server.run()


if __name__ == "__main__":
    main()
