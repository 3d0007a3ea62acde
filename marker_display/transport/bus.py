"""
In-process publish/subscribe transport.

Each Subscription owns a bounded queue and a worker thread, so handlers for
different topics run concurrently and never block publishers. When a queue
is full the oldest pending message is dropped (latest data wins).
"""

import logging
import queue
import threading
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

Handler = Callable[[Any], None]

DEFAULT_QUEUE_SIZE = 2

# Sentinel that tells a worker to exit
_STOP = object()


class Subscription:
    """One handler bound to one topic, running on its own thread."""

    def __init__(self, topic: str, handler: Handler,
                 queue_size: int = DEFAULT_QUEUE_SIZE):
        """
        Args:
            topic: Topic name
            handler: Called once per delivered payload, on this subscription's thread
            queue_size: Pending payloads kept before the oldest is dropped
        """
        if queue_size < 1:
            raise ValueError(f"queue_size must be >= 1, got {queue_size}")
        self.topic = topic
        self._handler = handler
        self._queue: "queue.Queue[Any]" = queue.Queue(maxsize=queue_size)
        self._put_lock = threading.Lock()
        self._closed = False
        self.dropped = 0
        self._thread = threading.Thread(target=self._run, daemon=True,
                                        name=f"sub:{topic}")
        self._thread.start()

    @property
    def closed(self) -> bool:
        return self._closed

    def deliver(self, payload: Any) -> bool:
        """
        Queue a payload for the handler.

        Returns:
            False if the subscription is closed
        """
        if self._closed:
            return False
        with self._put_lock:
            while True:
                try:
                    self._queue.put_nowait(payload)
                    return True
                except queue.Full:
                    try:
                        self._queue.get_nowait()
                        self._queue.task_done()
                        self.dropped += 1
                        logger.debug(f"Queue full on '{self.topic}', dropped oldest message")
                    except queue.Empty:
                        pass

    def wait_idle(self) -> None:
        """Block until every queued payload has been handled."""
        self._queue.join()

    def close(self, timeout: float = 1.0) -> None:
        """Stop the worker after the payloads already queued."""
        if self._closed:
            return
        self._closed = True
        with self._put_lock:
            while True:
                try:
                    self._queue.put_nowait(_STOP)
                    break
                except queue.Full:
                    try:
                        self._queue.get_nowait()
                        self._queue.task_done()
                    except queue.Empty:
                        pass
        if self._thread is not threading.current_thread():
            self._thread.join(timeout=timeout)

    def _run(self) -> None:
        """Worker thread: hand each payload to the handler."""
        while True:
            payload = self._queue.get()
            try:
                if payload is _STOP:
                    return
                self._handler(payload)
            except Exception:
                logger.exception(f"Handler for '{self.topic}' failed")
            finally:
                self._queue.task_done()


class TopicBus:
    """Topic name -> subscriptions registry."""

    def __init__(self):
        self._lock = threading.Lock()
        self._subscriptions: Dict[str, List[Subscription]] = {}

    def subscribe(self, topic: str, handler: Handler,
                  queue_size: int = DEFAULT_QUEUE_SIZE) -> Subscription:
        """Register handler for topic and start its worker."""
        if not topic:
            raise ValueError("Topic name must be non-empty")
        subscription = Subscription(topic, handler, queue_size)
        with self._lock:
            self._subscriptions.setdefault(topic, []).append(subscription)
        logger.info(f"Subscribed to '{topic}'")
        return subscription

    def publish(self, topic: str, payload: Any) -> int:
        """
        Deliver payload to every subscription of topic.

        Returns:
            Number of subscriptions that accepted the payload
        """
        with self._lock:
            subscriptions = list(self._subscriptions.get(topic, ()))
        return sum(1 for s in subscriptions if s.deliver(payload))

    def topics(self) -> Dict[str, int]:
        """Topic -> number of subscriptions."""
        with self._lock:
            return {topic: len(subs) for topic, subs in self._subscriptions.items()}

    def get_subscriptions(self, topic: Optional[str] = None) -> List[Subscription]:
        with self._lock:
            if topic is not None:
                return list(self._subscriptions.get(topic, ()))
            return [s for subs in self._subscriptions.values() for s in subs]

    def wait_idle(self) -> None:
        """Block until every subscription has drained its queue."""
        for subscription in self.get_subscriptions():
            subscription.wait_idle()

    def shutdown(self) -> None:
        """Close every subscription."""
        with self._lock:
            subscriptions = [s for subs in self._subscriptions.values() for s in subs]
            self._subscriptions.clear()
        for subscription in subscriptions:
            subscription.close()
