from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import ValidationError
from smartroute.api.deps import get_kakao_client, get_selector, get_weather_provider
from smartroute.schemas.place import CandidateSet, Place
from smartroute.schemas.weather import WeatherSnapshot
from smartroute.services.kakao import KakaoClient
from smartroute.services.selection import CandidateSelector, lock_message, toggle_place_lock
from smartroute.services.weather import WeatherProvider
from smartroute.services.weather_score import SORT_MODES, recommendation_message, sort_places
from smartroute.utils.logger import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/api", tags=["places"])


def parse_places(raw: Any) -> List[Place]:
    """Validate a client-supplied place list, 400 on bad input."""
    if not isinstance(raw, list):
        raise HTTPException(status_code=400, detail="places must be a list")
    try:
        return [Place.model_validate(p) for p in raw]
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=f"Invalid place: {e.errors()[0]['msg']}")


def parse_weather(raw: Optional[Dict[str, Any]]) -> Optional[WeatherSnapshot]:
    """Accepts both ``iconCode`` and the OpenWeather-style ``icon`` key."""
    if not raw:
        return None
    data = dict(raw)
    if "iconCode" not in data and "icon" in data:
        data["iconCode"] = data.pop("icon")
    if "isEstimated" not in data and "isMock" in data:
        data["isEstimated"] = data.pop("isMock")
    try:
        return WeatherSnapshot.model_validate(data)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=f"Invalid weather: {e.errors()[0]['msg']}")


@router.get("/weather/{city}")
def get_weather(city: str, provider: WeatherProvider = Depends(get_weather_provider)):
    """Current conditions plus the matching recommendation message."""
    snapshot = provider.get_weather(city)
    return {
        **snapshot.model_dump(),
        "message": recommendation_message(snapshot.iconCode),
    }


@router.post("/select-places")
def select_places(
    payload: dict,
    selector: CandidateSelector = Depends(get_selector),
    weather_provider: WeatherProvider = Depends(get_weather_provider),
):
    """
    Initial selection or refresh of the 4-place working set.

    Body:
        location, travelStyle: required
        weather: optional snapshot, fetched when absent
        places, offset, lockedIds: the current set, turns the call into a refresh
        sort: "weather" (default) | "rating" | "reviews" ordering of the response

    Returns:
        {"status", "places", "offset", "notices", "isEstimated", "weather", "message"}
    """
    location = (payload.get("location") or "").strip()
    travel_style = (payload.get("travelStyle") or "").strip()
    if not location or not travel_style:
        raise HTTPException(status_code=400, detail="Location and travelStyle are required")

    sort = payload.get("sort") or "weather"
    if sort not in SORT_MODES:
        raise HTTPException(status_code=400, detail=f"sort must be one of {', '.join(SORT_MODES)}")

    try:
        offset = int(payload.get("offset") or 0)
    except (TypeError, ValueError):
        raise HTTPException(status_code=400, detail="offset must be an integer")

    weather = parse_weather(payload.get("weather")) or weather_provider.get_weather(location)

    try:
        current = payload.get("places")
        if current:
            candidates = CandidateSet(
                travelStyle=travel_style,
                location=location,
                weather=weather,
                offset=offset,
                places=parse_places(current),
            )
            # Client-sent isIndoor/weatherScore are not trusted
            candidates = selector.rescore(candidates, weather)
            result = selector.refresh(candidates, payload.get("lockedIds"))
        else:
            result = selector.select_initial(travel_style, location, weather)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Error selecting places")
        raise HTTPException(status_code=500, detail=str(e))

    places = sort_places(result.candidates.places, sort)

    return {
        "status": "success",
        "places": [p.model_dump() for p in places],
        "offset": result.candidates.offset,
        "notices": [n.model_dump() for n in result.notices],
        "isEstimated": result.isEstimated,
        "weather": weather.model_dump(),
        "message": recommendation_message(weather.iconCode),
    }


@router.post("/toggle-lock")
def toggle_lock(payload: dict):
    """Flip the lock on one place of the client's current set."""
    place_id = payload.get("placeId")
    if not place_id:
        raise HTTPException(status_code=400, detail="placeId is required")

    places = toggle_place_lock(parse_places(payload.get("places")), place_id)
    return {
        "status": "success",
        "places": [p.model_dump() for p in places],
        "message": lock_message(places, place_id),
    }


@router.post("/search-places")
def search_places(payload: dict, client: KakaoClient = Depends(get_kakao_client)):
    """
    Free keyword search around a location.

    Any upstream failure comes back as an empty list with ``isMock: true``
    so the caller can fall back to its own suggestions.
    """
    query = (payload.get("query") or "").strip()
    if not query:
        raise HTTPException(status_code=400, detail="query is required")
    location = (payload.get("location") or "").strip()

    result = client.search(query, location)
    if not result.ok:
        logger.warning("Place search for '%s %s' failed: %s", location, query, result.kind)
        return {"places": [], "isMock": True}

    return {"places": [p.model_dump() for p in result.value], "isMock": False}
