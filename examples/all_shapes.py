#!/usr/bin/env python3
"""
Publish one marker of every drawable shape side by side.

ARROW (pose and two-point forms), CUBE (flat and tilted), CUBE_LIST,
LINE_STRIP and LINE_LIST. Unsupported shapes are accepted but not drawn.

Prerequisites:
- Display server running: marker-display
"""

import math

from marker_display import MarkerClient, make_marker
from marker_display.core.geometry import quaternion_from_euler


def _quat(roll=0.0, pitch=0.0, yaw=0.0):
    q = quaternion_from_euler(roll, pitch, yaw)
    return (q.x, q.y, q.z, q.w)


def main():
    with MarkerClient("localhost") as client:
        if not client.is_connected:
            print("Failed to connect to marker display")
            return

        markers = [
            make_marker("shapes", 0, "ARROW", position=(-6, 2, 0), orientation=_quat(yaw=0.5),
                        scale=(1.5, 0.4, 0.1), color=(1, 0, 0)),
            make_marker("shapes", 1, "ARROW", points=[(-6, -2, 0), (-4, -1, 0)],
                        scale=(0.2, 0.4, 0.0), color=(1, 0.5, 0)),
            make_marker("shapes", 2, "CUBE", position=(-2, 2, 0), orientation=_quat(yaw=0.4),
                        scale=(1.2, 0.8, 0.5), color=(0, 1, 0)),
            make_marker("shapes", 3, "CUBE", position=(-2, -2, 0),
                        orientation=_quat(roll=0.4, pitch=0.3),
                        scale=(1.0, 1.0, 1.0), color=(0, 0.8, 0.4)),
            make_marker("shapes", 4, "CUBE_LIST", position=(1, 0, 0), scale=(0.4, 0.4, 0.4),
                        points=[(0, y * 0.6, 0) for y in range(-3, 4)], color=(0, 0.5, 1)),
            make_marker("shapes", 5, "LINE_STRIP", position=(3, 0, 0), color=(1, 1, 0),
                        points=[(x * 0.25, math.sin(x * 0.5), 0) for x in range(13)]),
            make_marker("shapes", 6, "LINE_LIST", position=(3, -3, 0), color=(1, 0, 1),
                        points=[p for x in range(6)
                                for p in ((x * 0.5, 0, 0), (x * 0.5, 1, 0))]),
            make_marker("shapes", 7, "SPHERE", position=(0, 4, 0)),
        ]
        response = client.publish_markers(markers)
        print(f"Published {len(markers)} markers: {response}")


if __name__ == "__main__":
    main()
