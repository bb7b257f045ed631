from typing import Optional

from fastapi import Header, HTTPException
from smartroute.core.config import settings
from smartroute.db.auth import AuthUser, bearer_token, verify_token
from smartroute.services.kakao import KakaoClient
from smartroute.services.map_provider import MapProvider
from smartroute.services.route import RouteAggregator
from smartroute.services.selection import CandidateSelector
from smartroute.services.weather import WeatherProvider
from smartroute.utils.logger import get_logger

logger = get_logger(__name__)

# Process-wide providers
kakao_client = KakaoClient()
weather_provider = WeatherProvider()
map_provider = MapProvider(settings.KAKAO_JS_API_KEY, settings.KAKAO_MAP_SDK_URL)


def get_kakao_client() -> KakaoClient:
    return kakao_client


def get_weather_provider() -> WeatherProvider:
    return weather_provider


def get_map_provider() -> MapProvider:
    return map_provider


def get_selector() -> CandidateSelector:
    return CandidateSelector(kakao_client)


def get_aggregator() -> RouteAggregator:
    return RouteAggregator(kakao_client)


def optional_user(authorization: Optional[str] = Header(None)) -> Optional[AuthUser]:
    """Signed-in user if the bearer token checks out; anonymous otherwise."""
    token = bearer_token(authorization)
    if token is None:
        return None
    try:
        return verify_token(token)
    except RuntimeError:
        logger.warning("Supabase not connected, treating request as anonymous")
        return None


def current_user(authorization: Optional[str] = Header(None)) -> AuthUser:
    token = bearer_token(authorization)
    if token is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    try:
        user = verify_token(token)
    except RuntimeError:
        raise HTTPException(status_code=503, detail="User storage unavailable")
    if user is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user
