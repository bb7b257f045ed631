from pydantic import BaseModel, Field
from typing import List, Optional

from smartroute.schemas.weather import WeatherSnapshot


class Coordinates(BaseModel):
    lat: float
    lng: float


class Place(BaseModel):
    id: str
    name: str
    category: str
    address: str = ""
    description: str = ""
    keywords: List[str] = []
    rating: float = Field(0.0, ge=0.0, le=5.0)
    reviewCount: int = Field(0, ge=0)
    lat: float
    lng: float
    # Session state, recomputed by the classifier / scorer
    isIndoor: bool = False
    weatherScore: int = 0
    locked: bool = False
    isPlaceholder: bool = False
    phone: Optional[str] = None
    placeUrl: Optional[str] = None
    imageUrl: Optional[str] = None

    @property
    def coordinates(self) -> Coordinates:
        return Coordinates(lat=self.lat, lng=self.lng)


class CandidateSet(BaseModel):
    travelStyle: str
    location: str
    weather: WeatherSnapshot
    offset: int = 0
    places: List[Place] = []

    @property
    def locked_ids(self) -> List[str]:
        return [p.id for p in self.places if p.locked]


class Notice(BaseModel):
    kind: str  # "timeout" | "all_locked" | "fallback"
    message: str


class SelectionResult(BaseModel):
    candidates: CandidateSet
    notices: List[Notice] = []
    isEstimated: bool = False

    def has_notice(self, kind: str) -> bool:
        return any(n.kind == kind for n in self.notices)
