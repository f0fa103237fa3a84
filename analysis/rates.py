"""Rate calculations for the Analysis Engine."""

from __future__ import annotations


def speed_kmh(distance_meters: float, seconds: float) -> float:
    """Convert a distance covered in a time into km/h.

    Args:
        distance_meters: Distance covered in meters.
        seconds: Elapsed time in seconds.

    Returns:
        Speed in km/h, or 0.0 when `seconds` is 0.
    """

    if seconds == 0:
        return 0.0
    return (distance_meters / 1000.0) / (seconds / 3600.0)
