"""
Newline-delimited JSON command server over TCP.

One request per line, one response line per request, on the same
connection. An accept thread hands each connection to a bounded worker pool.
"""

import json
import logging
import socket
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, Optional, Tuple

logger = logging.getLogger(__name__)

Dispatch = Callable[[Any], Dict[str, Any]]

ACCEPT_POLL = 1.0  # seconds between checks of the stop flag
CLIENT_POLL = 5.0
RECV_SIZE = 65536


class JsonLineServer:
    """Serves `dispatch(request) -> response` to any number of TCP clients."""

    def __init__(self, host: str, port: int, dispatch: Dispatch, max_clients: int = 10):
        """
        Args:
            host: Interface to bind
            port: TCP port (0 picks a free one)
            dispatch: Called with each decoded request, from a worker thread
            max_clients: Connections served concurrently
        """
        self.host = host
        self.port = port
        self._dispatch = dispatch
        self._max_clients = max_clients
        self._stop = threading.Event()
        self._sock: Optional[socket.socket] = None
        self._thread: Optional[threading.Thread] = None
        self._pool: Optional[ThreadPoolExecutor] = None

    @property
    def address(self) -> Tuple[str, int]:
        """Bound (host, port); only valid after start()."""
        return self._sock.getsockname()[:2]

    def start(self) -> None:
        """
        Bind and start accepting.

        Raises:
            OSError: If the address cannot be bound
        """
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            sock.bind((self.host, self.port))
            sock.listen(5)
        except OSError:
            sock.close()
            raise
        sock.settimeout(ACCEPT_POLL)

        self._sock = sock
        self._stop.clear()
        self._pool = ThreadPoolExecutor(max_workers=self._max_clients,
                                        thread_name_prefix="client")
        self._thread = threading.Thread(target=self._accept_loop, name="accept", daemon=True)
        self._thread.start()
        logger.info(f"Command server listening on {self.address[0]}:{self.address[1]}")

    def stop(self) -> None:
        """Stop accepting; open connections end at their next poll."""
        self._stop.set()
        if self._sock is not None:
            try:
                self._sock.close()
            except OSError:
                pass
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout=ACCEPT_POLL * 2)
        if self._pool is not None:
            self._pool.shutdown(wait=False)
        logger.info("Command server stopped")

    def _accept_loop(self) -> None:
        while not self._stop.is_set():
            try:
                conn, addr = self._sock.accept()
            except socket.timeout:
                continue
            except OSError as e:
                if not self._stop.is_set():
                    logger.error(f"Accept failed: {e}")
                break
            logger.info(f"Client connected from {addr}")
            self._pool.submit(self._serve, conn, addr)

    def _serve(self, conn: socket.socket, addr) -> None:
        """Read lines until the peer closes, answering each one."""
        pending = b""
        conn.settimeout(CLIENT_POLL)
        with conn:
            while not self._stop.is_set():
                try:
                    chunk = conn.recv(RECV_SIZE)
                except socket.timeout:
                    continue
                except OSError as e:
                    logger.error(f"Connection from {addr} failed: {e}")
                    break
                if not chunk:
                    break

                pending += chunk
                *lines, pending = pending.split(b"\n")
                try:
                    for line in lines:
                        if line.strip():
                            conn.sendall(self._respond(line))
                except OSError as e:
                    logger.error(f"Reply to {addr} failed: {e}")
                    break
        logger.info(f"Client disconnected from {addr}")

    def _respond(self, line: bytes) -> bytes:
        try:
            request = json.loads(line.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            response = {"status": "error", "message": f"Invalid JSON: {e}"}
        else:
            response = self._dispatch(request)
        return (json.dumps(response) + "\n").encode("utf-8")
