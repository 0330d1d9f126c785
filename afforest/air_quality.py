"""
Air quality index lookup.

Maps an AQI reading to a severity level and the planting priority zone
used to pick the zone score of every tree.
"""

from typing import Tuple

from .data_models import PriorityZone

# (inclusive upper bound, level, zone); readings above the last bound are hazardous
AQI_BANDS = [
    (50, "Good", PriorityZone.ZONE_IV),
    (100, "Moderate", PriorityZone.ZONE_IV),
    (150, "Unhealthy for sensitive groups", PriorityZone.ZONE_III),
    (200, "Unhealthy", PriorityZone.ZONE_III),
    (300, "Very Unhealthy", PriorityZone.ZONE_II),
]
HAZARDOUS = ("Hazardous", PriorityZone.ZONE_I)


def get_aqi_range(aqi: int) -> Tuple[str, PriorityZone]:
    """
    Classify an AQI reading.

    Args:
        aqi: Air quality index reading

    Returns:
        Tuple of (severity level, priority zone)
    """
    for upper, level, zone in AQI_BANDS:
        if aqi <= upper:
            return level, zone
    return HAZARDOUS
