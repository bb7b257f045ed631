from pydantic import BaseModel
from typing import List, Optional

from smartroute.schemas.place import Place


class RouteSegment(BaseModel):
    fromPlaceId: str
    toPlaceId: str
    fromName: str
    toName: str
    distanceMeters: int
    durationSeconds: int
    fare: Optional[int] = None
    transportMode: str
    isEstimated: bool = False
    distanceText: str
    durationText: str


class Route(BaseModel):
    places: List[Place]
    segments: List[RouteSegment]
    transportMode: str
    totalDistanceMeters: int
    totalDurationSeconds: int
    totalDistanceText: str
    totalDurationText: str
    recommendedDurationLabel: str
    isEstimated: bool = False
