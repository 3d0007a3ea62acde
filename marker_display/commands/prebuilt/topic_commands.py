"""
Topic commands: remote producers publish marker messages through these.
"""

from marker_display.commands.base import register_command


@register_command
def publish(node, topic: str, msg) -> dict:
    """
    Publish a message on a topic.

    The payload is handed to every subscription of the topic as-is; decoding
    happens on the subscription's own thread, so a malformed marker never
    fails this command.

    Args:
        node: MarkerNode instance
        topic: Topic name
        msg: Marker dict (marker topics) or {"markers": [...]} (marker array topics)

    Returns:
        Response with the number of subscriptions that received the message
    """
    if not topic:
        raise ValueError("Topic name must be non-empty")
    delivered = node.bus.publish(topic, msg)
    return {"status": "success", "topic": topic, "subscribers": delivered}


@register_command
def list_topics(node) -> dict:
    """List subscribed topics and their subscription counts."""
    return {"status": "success", "topics": node.bus.topics()}
