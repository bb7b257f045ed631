from math import radians, sin, cos, sqrt, atan2

from smartroute.schemas.place import Coordinates

EARTH_RADIUS_M = 6371000.0
FALLBACK_WALKING_SPEED_M_PER_MIN = 50.0


def haversine_distance_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in meters."""
    dlat = radians(lat2 - lat1)
    dlon = radians(lon2 - lon1)
    a = (
        sin(dlat / 2) ** 2
        + cos(radians(lat1)) * cos(radians(lat2)) * sin(dlon / 2) ** 2
    )
    return EARTH_RADIUS_M * 2 * atan2(sqrt(a), sqrt(1 - a))


def estimate_distance(a: Coordinates, b: Coordinates) -> float:
    """Straight-line distance in meters between two points."""
    return haversine_distance_m(a.lat, a.lng, b.lat, b.lng)


def estimate_duration_seconds(distance_m: float) -> float:
    """Travel time for an estimated segment, at walking pace."""
    return distance_m / FALLBACK_WALKING_SPEED_M_PER_MIN * 60.0
