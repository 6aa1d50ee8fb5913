"""Waypoint sequencing service: nearest-neighbor ordering over Google Routes costs."""
