import requests
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from smartroute.core.config import Settings, settings as default_settings
from smartroute.schemas.place import Coordinates, Place
from smartroute.services.images import fallback_image
from smartroute.services.results import ErrorKind, ProviderResult
from smartroute.utils.logger import get_logger

logger = get_logger(__name__)

PRIORITIES = ("RECOMMEND", "TIME", "DISTANCE")

MODE_PRIORITY = {
    "DRIVE": "TIME",
    "WALK": "DISTANCE",
    "BIKE": "DISTANCE",
    "TRANSIT": "RECOMMEND",
}


def priority_for_mode(transport_mode: Optional[str]) -> str:
    return MODE_PRIORITY.get((transport_mode or "").upper(), "RECOMMEND")


@dataclass(frozen=True, slots=True)
class Directions:
    distance_m: float
    duration_s: float
    fare: Optional[int] = None
    is_fallback: bool = False


@dataclass(frozen=True, slots=True)
class GeocodeResult:
    lat: float
    lng: float
    address: str
    road_address: str


@dataclass(frozen=True, slots=True)
class RegionInfo:
    region: str
    city: str
    full_address: str


# Administrative suffixes dropped from region_1depth_name, in this order
REGION_SUFFIXES = ("특별시", "광역시", "특별자치도", "특별자치시", "도")


def clean_region_name(name: str) -> str:
    """"서울특별시" → "서울", "제주특별자치도" → "제주", "경기도" → "경기"."""
    for suffix in REGION_SUFFIXES:
        name = name.replace(suffix, "", 1)
    return name


def search_category(doc: Dict[str, Any], query: str) -> str:
    """Last segment of Kakao's "여행 > 관광,명소 > 테마파크" style category."""
    name = doc.get("category_name") or ""
    return name.split(">")[-1].strip() or query


def document_to_place(doc: Dict[str, Any], category: str, location: str) -> Place:
    """Kakao Local keyword document → Place (classification happens later)."""
    place_id = f"kakao_{doc['id']}"
    return Place(
        id=place_id,
        name=doc["place_name"],
        category=category,
        description=doc.get("category_name") or category,
        address=doc.get("address_name") or doc.get("road_address_name") or location,
        keywords=[],
        lat=float(doc["y"]),
        lng=float(doc["x"]),
        phone=doc.get("phone") or None,
        placeUrl=doc.get("place_url") or None,
        imageUrl=fallback_image(category, place_id),
    )


class KakaoClient:
    """
    Kakao Local (search, geocoding) and Kakao Mobility (directions) client.

    Every public call makes a single attempt and reports the outcome as a
    ProviderResult; nothing here raises on upstream failure.
    """

    def __init__(self, api_key: Optional[str] = None, config: Optional[Settings] = None):
        cfg = config or default_settings
        self.api_key = cfg.KAKAO_REST_API_KEY if api_key is None else api_key
        self.local_url = cfg.KAKAO_LOCAL_URL.rstrip("/")
        self.mobility_url = cfg.KAKAO_MOBILITY_URL.rstrip("/")
        self.timeout = cfg.KAKAO_TIMEOUT
        self.search_timeout = cfg.PLACE_SEARCH_TIMEOUT
        self.search_size = cfg.PLACE_SEARCH_SIZE

    # internal

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"KakaoAK {self.api_key}"}

    def _get(self, url: str, params: Dict[str, Any], timeout: float) -> ProviderResult[Dict[str, Any]]:
        """GET returning the decoded JSON body or a tagged failure."""
        if not self.configured:
            return ProviderResult.failure(ErrorKind.NOT_CONFIGURED, "KAKAO_REST_API_KEY is not set")

        try:
            resp = requests.get(url, params=params, headers=self._headers(), timeout=timeout)
            resp.raise_for_status()
        except requests.exceptions.Timeout:
            logger.warning("Kakao request timeout after %ss: %s", timeout, url)
            return ProviderResult.failure(ErrorKind.TIMEOUT, f"timeout after {timeout}s")
        except requests.exceptions.HTTPError as e:
            logger.warning("Kakao HTTP error: %s", e)
            return ProviderResult.failure(ErrorKind.UNAVAILABLE, str(e))
        except requests.exceptions.RequestException as e:
            logger.warning("Kakao connection error: %s", e)
            return ProviderResult.failure(ErrorKind.UNAVAILABLE, str(e))

        try:
            return ProviderResult.success(resp.json())
        except ValueError as e:
            logger.warning("Kakao response is not JSON: %s", e)
            return ProviderResult.failure(ErrorKind.MALFORMED, str(e))

    # place search

    def search_places(
        self, location: str, category: str, offset: int = 0, timeout: Optional[float] = None
    ) -> ProviderResult[List[Place]]:
        """
        Keyword search for ``"{location} {category}"``.

        ``offset`` selects the result page, so successive refreshes see
        different candidates. ``timeout`` overrides PLACE_SEARCH_TIMEOUT for
        callers working against a shared deadline. An empty list is a
        successful result.
        """
        result = self._get(
            f"{self.local_url}/search/keyword.json",
            params={
                "query": f"{location} {category}",
                "size": self.search_size,
                "page": max(0, offset) + 1,
            },
            timeout=self.search_timeout if timeout is None else timeout,
        )
        if not result.ok:
            return result

        try:
            docs = result.value.get("documents") or []
            places = [document_to_place(d, category, location) for d in docs]
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning("Malformed Kakao search payload for %s %s: %s", location, category, e)
            return ProviderResult.failure(ErrorKind.MALFORMED, str(e))

        logger.info("Kakao search '%s %s' page %d: %d places", location, category, offset + 1, len(places))
        return ProviderResult.success(places)

    def search(self, query: str, location: str = "") -> ProviderResult[List[Place]]:
        """Free keyword search, first page only. Category comes from Kakao's own label."""
        keyword = f"{location} {query}".strip()
        result = self._get(
            f"{self.local_url}/search/keyword.json",
            params={"query": keyword, "size": self.search_size},
            timeout=self.timeout,
        )
        if not result.ok:
            return result

        try:
            docs = result.value.get("documents") or []
            places = [document_to_place(d, search_category(d, query), location or query) for d in docs]
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning("Malformed Kakao search payload for '%s': %s", keyword, e)
            return ProviderResult.failure(ErrorKind.MALFORMED, str(e))

        logger.info("Kakao search '%s': %d places", keyword, len(places))
        return ProviderResult.success(places)

    # directions

    def get_directions(
        self,
        origin: Coordinates,
        destination: Coordinates,
        priority: str = "RECOMMEND",
    ) -> ProviderResult[Directions]:
        """Distance (m), duration (s) and fare between two points."""
        if priority not in PRIORITIES:
            priority = "RECOMMEND"

        result = self._get(
            f"{self.mobility_url}/directions",
            params={
                "origin": f"{origin.lng},{origin.lat}",
                "destination": f"{destination.lng},{destination.lat}",
                "priority": priority,
                "car_fuel": "GASOLINE",
                "car_hipass": "false",
                "alternatives": "false",
                "road_details": "false",
            },
            timeout=self.timeout,
        )
        if not result.ok:
            return result

        try:
            routes = result.value.get("routes") or []
            if not routes:
                return ProviderResult.failure(ErrorKind.MALFORMED, "response has no routes")

            route = routes[0]
            if route.get("result_code", 0) != 0:
                return ProviderResult.failure(
                    ErrorKind.NO_ROUTE, route.get("result_msg", "no route found")
                )

            summary = route["summary"]
            fare = summary.get("fare")
            if isinstance(fare, dict):
                fare = fare.get("taxi")
            directions = Directions(
                distance_m=float(summary["distance"]),
                duration_s=float(summary["duration"]),
                fare=int(fare) if fare is not None else None,
                is_fallback=False,
            )
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning("Malformed Kakao directions payload: %s", e)
            return ProviderResult.failure(ErrorKind.MALFORMED, str(e))

        logger.debug(
            "Kakao directions: %.0fm, %.0fs", directions.distance_m, directions.duration_s
        )
        return ProviderResult.success(directions)

    # geocoding

    def address_to_coordinates(self, address: str) -> ProviderResult[GeocodeResult]:
        result = self._get(
            f"{self.local_url}/search/address.json",
            params={"query": address},
            timeout=self.timeout,
        )
        if not result.ok:
            return result

        try:
            docs = result.value.get("documents") or []
            if not docs:
                return ProviderResult.failure(ErrorKind.NOT_FOUND, f"no match for {address}")

            doc = docs[0]
            road = doc.get("road_address") or {}
            geocode = GeocodeResult(
                lat=float(doc["y"]),
                lng=float(doc["x"]),
                address=doc.get("address_name", address),
                road_address=road.get("address_name") or doc.get("address_name", address),
            )
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning("Malformed Kakao address payload: %s", e)
            return ProviderResult.failure(ErrorKind.MALFORMED, str(e))

        logger.info("Geocoded %s → (%.6f, %.6f)", address, geocode.lat, geocode.lng)
        return ProviderResult.success(geocode)

    def coordinates_to_region(self, point: Coordinates) -> ProviderResult[RegionInfo]:
        """Reverse geocoding to the short region name the selector understands."""
        result = self._get(
            f"{self.local_url}/geo/coord2address.json",
            params={"x": point.lng, "y": point.lat},
            timeout=self.timeout,
        )
        if not result.ok:
            return result

        try:
            docs = result.value.get("documents") or []
            if not docs:
                return ProviderResult.failure(ErrorKind.NOT_FOUND, f"no address at ({point.lat}, {point.lng})")

            address = docs[0]["address"]
            region = RegionInfo(
                region=clean_region_name(address.get("region_1depth_name") or ""),
                city=address.get("region_2depth_name") or "",
                full_address=address.get("address_name") or "",
            )
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning("Malformed Kakao coord2address payload: %s", e)
            return ProviderResult.failure(ErrorKind.MALFORMED, str(e))

        logger.info("Reverse geocoded (%.6f, %.6f) → %s %s", point.lat, point.lng, region.region, region.city)
        return ProviderResult.success(region)
