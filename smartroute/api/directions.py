from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import ValidationError
from smartroute.api.deps import get_aggregator, get_kakao_client, get_map_provider
from smartroute.api.places import parse_places
from smartroute.schemas.place import Coordinates
from smartroute.services.distance import estimate_distance, estimate_duration_seconds
from smartroute.services.kakao import KakaoClient
from smartroute.services.map_provider import MapProvider
from smartroute.services.results import ErrorKind
from smartroute.services.route import DEFAULT_TRANSPORT_MODE, RouteAggregator
from smartroute.utils.logger import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/api", tags=["directions"])

FALLBACK_REGION = "서울"
REGION_ERRORS = {
    ErrorKind.NOT_CONFIGURED: "API key not configured",
    ErrorKind.NOT_FOUND: "Address not found",
}


def parse_point(raw: Any, field: str) -> Coordinates:
    try:
        return Coordinates.model_validate(raw)
    except ValidationError:
        raise HTTPException(status_code=400, detail=f"{field} must be {{lat, lng}}")


@router.post("/calculate-route")
def calculate_route(payload: dict, aggregator: RouteAggregator = Depends(get_aggregator)):
    """
    Route through the given places in order.

    Body:
        places: ordered list, at least 2
        transportMode: "TRANSIT" (default) | "WALK" | "DRIVE" | "BIKE"
        travelStyle: optional, tunes the recommended duration label
    """
    places = parse_places(payload.get("places") or [])
    if len(places) < 2:
        raise HTTPException(status_code=400, detail="At least 2 places required")

    try:
        route = aggregator.build_route(
            places,
            payload.get("transportMode") or DEFAULT_TRANSPORT_MODE,
            payload.get("travelStyle"),
        )
    except Exception as e:
        logger.exception("Error calculating route")
        raise HTTPException(status_code=500, detail=str(e))

    return {"status": "success", **route.model_dump()}


@router.post("/directions")
def get_directions(payload: dict, client: KakaoClient = Depends(get_kakao_client)):
    """
    Single origin → destination lookup.

    Upstream failures are answered with the straight-line estimate and
    ``isFallback: true`` rather than an error status.
    """
    origin = parse_point(payload.get("origin"), "origin")
    destination = parse_point(payload.get("destination"), "destination")
    priority = payload.get("priority") or "RECOMMEND"

    result = client.get_directions(origin, destination, priority)
    if result.ok:
        d = result.value
        data = {
            "distance": round(d.distance_m),
            "duration": round(d.duration_s),
            "fare": d.fare,
            "isFallback": d.is_fallback,
        }
    else:
        distance = estimate_distance(origin, destination)
        logger.info("Directions fallback (%s): %.0fm", result.kind, distance)
        data = {
            "distance": round(distance),
            "duration": round(estimate_duration_seconds(distance)),
            "fare": None,
            "isFallback": True,
            "error": result.kind.value,
        }

    return {"success": True, "data": data}


@router.post("/address-to-coord")
def address_to_coord(payload: dict, client: KakaoClient = Depends(get_kakao_client)):
    address = (payload.get("address") or "").strip()
    if not address:
        raise HTTPException(status_code=400, detail="address is required")

    result = client.address_to_coordinates(address)
    if not result.ok:
        if result.kind == ErrorKind.NOT_CONFIGURED:
            raise HTTPException(status_code=400, detail="API key not configured")
        if result.kind == ErrorKind.NOT_FOUND:
            raise HTTPException(status_code=404, detail="Address not found")
        raise HTTPException(status_code=502, detail="Failed to convert address")

    g = result.value
    return {
        "success": True,
        "data": {
            "lat": g.lat,
            "lng": g.lng,
            "address": g.address,
            "roadAddress": g.road_address,
        },
    }


@router.post("/coords-to-address")
def coords_to_address(payload: dict, client: KakaoClient = Depends(get_kakao_client)):
    """
    Reverse geocoding for "use my location".

    Failures still answer 200 with Seoul and an ``error`` field.
    """
    try:
        point = Coordinates(lat=payload["latitude"], lng=payload["longitude"])
    except (KeyError, ValidationError):
        raise HTTPException(status_code=400, detail="latitude and longitude are required")

    result = client.coordinates_to_region(point)
    if not result.ok:
        logger.warning("Reverse geocoding failed (%s), defaulting to %s", result.kind, FALLBACK_REGION)
        return {
            "error": REGION_ERRORS.get(result.kind, "Failed to fetch address"),
            "region": FALLBACK_REGION,
            "city": "",
            "fullAddress": FALLBACK_REGION,
        }

    r = result.value
    return {"region": r.region, "city": r.city, "fullAddress": r.full_address}


@router.get("/map/status")
def map_status(refresh: bool = False, provider: MapProvider = Depends(get_map_provider)):
    state = provider.load(force=refresh)
    return {
        "state": state.value,
        "ready": provider.is_ready(),
        "scriptUrl": provider.script_url() if provider.is_ready() else None,
        "error": provider.error,
    }
