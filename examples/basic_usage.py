#!/usr/bin/env python3
"""
Basic usage example for the marker display client.

This example demonstrates:
1. Connecting to the display server
2. Publishing a transform for a moving robot frame
3. Publishing markers in the robot frame and the static frame
4. Deleting markers

Prerequisites:
- Display server running: marker-display
"""

import math
import time

from marker_display import MarkerClient, make_marker


def main():
    server_host = "localhost"

    print(f"Connecting to marker display at {server_host}...")

    with MarkerClient(server_host, port=9999) as client:
        if not client.is_connected:
            print("Failed to connect to marker display")
            return

        print("Connected!")

        # A fixed square outline in the static frame
        client.publish_marker(make_marker(
            "walls", 0, "LINE_STRIP", frame_id="map",
            points=[(-4, -4, 0), (4, -4, 0), (4, 4, 0), (-4, 4, 0), (-4, -4, 0)],
            color=(0.6, 0.6, 0.6),
        ))

        # The robot drives in a circle; its footprint and heading arrow are
        # published in base_link and follow the transform.
        print("Driving robot around a circle for 10 seconds...")
        start = time.time()
        while time.time() - start < 10.0:
            t = time.time() - start
            yaw = t * 0.6
            client.set_transform(
                "map", "base_link",
                translation=[2.5 * math.cos(yaw), 2.5 * math.sin(yaw), 0.0],
                rotation=[0.0, 0.0, math.sin((yaw + math.pi / 2) / 2),
                          math.cos((yaw + math.pi / 2) / 2)],
            )
            client.publish_markers([
                make_marker("robot", 0, "CUBE", frame_id="base_link",
                            scale=(0.6, 0.4, 0.3), color=(0.0, 0.6, 1.0)),
                make_marker("robot", 1, "ARROW", frame_id="base_link",
                            scale=(0.8, 0.3, 0.1), color=(1.0, 0.0, 0.0)),
            ])
            time.sleep(0.05)

        response = client.get_lines()
        if response:
            print(f"Display currently draws {response['count']} segments")

        print("Deleting the heading arrow...")
        client.delete_marker("robot", 1)
        time.sleep(1.0)

        print("Clearing everything...")
        client.delete_all()

    print("Done!")


if __name__ == "__main__":
    main()
