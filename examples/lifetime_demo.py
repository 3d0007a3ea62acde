#!/usr/bin/env python3
"""
Markers with a lifetime disappear on their own.

A trail of short-lived cubes follows a moving point; a marker that keeps
being refreshed before its lifetime runs out stays visible.

Prerequisites:
- Display server running: marker-display
"""

import math
import time

from marker_display import MarkerClient, make_marker


def main():
    with MarkerClient("localhost") as client:
        if not client.is_connected:
            print("Failed to connect to marker display")
            return

        for i in range(100):
            angle = i * 0.15
            client.publish_marker(make_marker(
                "trail", i, "CUBE",
                position=(3 * math.cos(angle), 3 * math.sin(angle), 0),
                scale=(0.2, 0.2, 0.2), color=(0.2, 0.8, 1.0),
                lifetime=1.5,
            ))
            # Refreshed every iteration, so it never expires while the loop runs
            client.publish_marker(make_marker(
                "heartbeat", 0, "LINE_STRIP",
                points=[(0, 0, 0), (3 * math.cos(angle), 3 * math.sin(angle), 0)],
                color=(1, 1, 1), lifetime=0.5,
            ))
            time.sleep(0.1)

        print("Stopped publishing; everything fades out within 1.5 seconds")


if __name__ == "__main__":
    main()
