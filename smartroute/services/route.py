from __future__ import annotations

from typing import List, Optional, Protocol, Sequence

from smartroute.core.config import Settings, settings as default_settings
from smartroute.schemas.place import Coordinates, Place
from smartroute.schemas.route import Route, RouteSegment
from smartroute.services.distance import estimate_distance, estimate_duration_seconds
from smartroute.services.kakao import Directions, priority_for_mode
from smartroute.services.results import ProviderResult
from smartroute.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_TRANSPORT_MODE = "TRANSIT"

# Hours spent at each stop
DWELL_HOURS = {
    "힐링": 3.0,
    "관광": 2.0,
    "액티비티": 2.5,
}
DEFAULT_DWELL_HOURS = 2.0

LABEL_HALF_DAY = "반나절 코스"
LABEL_FULL_DAY = "1일 코스"
LABEL_OVERNIGHT = "1박 2일 코스"


class DirectionsProvider(Protocol):
    def get_directions(
        self, origin: Coordinates, destination: Coordinates, priority: str = "RECOMMEND"
    ) -> ProviderResult[Directions]: ...


def format_distance(meters: float) -> str:
    """1500 → "1.5km", 500 → "500m"."""
    if meters >= 1000:
        return f"{meters / 1000:.1f}km"
    return f"{round(meters)}m"


def format_duration(seconds: float) -> str:
    """5400 → "1시간 30분", 7200 → "2시간", 2700 → "45분"."""
    minutes = round(seconds / 60)
    if minutes >= 60:
        hours, mins = divmod(minutes, 60)
        return f"{hours}시간 {mins}분" if mins > 0 else f"{hours}시간"
    return f"{minutes}분"


def recommended_duration_label(
    total_duration_s: float,
    place_count: int,
    travel_style: Optional[str] = None,
    config: Optional[Settings] = None,
) -> str:
    """
    Coarse itinerary length: stop time per style plus travel time.

    Thresholds come from ROUTE_HALF_DAY_HOURS / ROUTE_FULL_DAY_HOURS.
    """
    cfg = config or default_settings
    dwell = DWELL_HOURS.get(travel_style or "", DEFAULT_DWELL_HOURS)
    total_hours = place_count * dwell + total_duration_s / 3600.0

    if total_hours < cfg.ROUTE_HALF_DAY_HOURS:
        return LABEL_HALF_DAY
    if total_hours < cfg.ROUTE_FULL_DAY_HOURS:
        return LABEL_FULL_DAY
    return LABEL_OVERNIGHT


class RouteAggregator:
    """
    Sequences an ordered place list into a Route.

    Each consecutive pair costs one directions call, issued in order. A
    failed call is replaced by the Haversine estimate at walking pace and
    the segment is flagged ``isEstimated``.
    """

    def __init__(self, directions: DirectionsProvider, config: Optional[Settings] = None):
        self.directions = directions
        self.config = config or default_settings

    def build_segment(self, origin: Place, destination: Place, transport_mode: str) -> RouteSegment:
        result = self.directions.get_directions(
            origin.coordinates, destination.coordinates, priority_for_mode(transport_mode)
        )

        if result.ok:
            distance = result.value.distance_m
            duration = result.value.duration_s
            fare = result.value.fare
            estimated = result.value.is_fallback
        else:
            logger.warning(
                "Directions failed %s → %s (%s), using Haversine fallback",
                origin.name, destination.name, result.kind,
            )
            distance = estimate_distance(origin.coordinates, destination.coordinates)
            duration = estimate_duration_seconds(distance)
            fare = None
            estimated = True

        distance_m = int(round(distance))
        duration_s = int(round(duration))
        return RouteSegment(
            fromPlaceId=origin.id,
            toPlaceId=destination.id,
            fromName=origin.name,
            toName=destination.name,
            distanceMeters=distance_m,
            durationSeconds=duration_s,
            fare=fare,
            transportMode=transport_mode,
            isEstimated=estimated,
            distanceText=format_distance(distance_m),
            durationText=format_duration(duration_s),
        )

    def build_route(
        self,
        places: Sequence[Place],
        transport_mode: str = DEFAULT_TRANSPORT_MODE,
        travel_style: Optional[str] = None,
    ) -> Optional[Route]:
        """Route through ``places`` in the given order, or None for < 2 places."""
        if len(places) < 2:
            logger.info("Not enough places to build a route (%d)", len(places))
            return None

        transport_mode = (transport_mode or DEFAULT_TRANSPORT_MODE).upper()
        segments: List[RouteSegment] = [
            self.build_segment(places[i], places[i + 1], transport_mode)
            for i in range(len(places) - 1)
        ]

        total_distance = sum(s.distanceMeters for s in segments)
        total_duration = sum(s.durationSeconds for s in segments)
        estimated = any(s.isEstimated for s in segments)

        logger.info(
            "Route built: %d places, %d segments, %dm, %ds%s",
            len(places), len(segments), total_distance, total_duration,
            " (estimated)" if estimated else "",
        )

        return Route(
            places=list(places),
            segments=segments,
            transportMode=transport_mode,
            totalDistanceMeters=total_distance,
            totalDurationSeconds=total_duration,
            totalDistanceText=format_distance(total_distance),
            totalDurationText=format_duration(total_duration),
            recommendedDurationLabel=recommended_duration_label(
                total_duration, len(places), travel_style, self.config
            ),
            isEstimated=estimated,
        )
