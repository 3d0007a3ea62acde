"""Publish/subscribe transport and the JSON-lines command socket."""

from marker_display.transport.bus import TopicBus, Subscription
from marker_display.transport.socket_server import JsonLineServer

__all__ = [
    "TopicBus",
    "Subscription",
    "JsonLineServer",
]
