from enum import Enum
from typing import Iterable, List, Optional

from smartroute.schemas.place import Place
from smartroute.services.classifier import classify


class WeatherFamily(str, Enum):
    RAINY = "rainy"
    SUNNY = "sunny"
    CLOUDY = "cloudy"


RAINY_CODES = {"09", "10", "11", "13"}
SUNNY_CODES = {"01", "02"}

# (indoor score, outdoor score)
SCORE_TABLE = {
    WeatherFamily.RAINY: (10, 1),
    WeatherFamily.SUNNY: (1, 10),
    WeatherFamily.CLOUDY: (6, 5),
}

MESSAGES = {
    WeatherFamily.RAINY: "비나 눈이 오는 날씨예요. 실내 명소 위주로 추천해 드릴게요.",
    WeatherFamily.SUNNY: "맑은 날씨예요. 야외 명소를 둘러보기 좋아요.",
    WeatherFamily.CLOUDY: "흐린 날씨지만 관광하기에는 여전히 좋아요.",
}

SORT_MODES = ("weather", "rating", "reviews")


def weather_family(icon_code: Optional[str]) -> WeatherFamily:
    prefix = (icon_code or "")[:2]
    if prefix in RAINY_CODES:
        return WeatherFamily.RAINY
    if prefix in SUNNY_CODES:
        return WeatherFamily.SUNNY
    return WeatherFamily.CLOUDY


def score(is_indoor: bool, icon_code: Optional[str]) -> int:
    indoor_score, outdoor_score = SCORE_TABLE[weather_family(icon_code)]
    return indoor_score if is_indoor else outdoor_score


def recommendation_message(icon_code: Optional[str]) -> str:
    return MESSAGES[weather_family(icon_code)]


def annotate(place: Place, icon_code: Optional[str]) -> Place:
    """Copy of ``place`` with classification and weather score filled in."""
    is_indoor = classify(place.name, place.address)
    return place.model_copy(
        update={"isIndoor": is_indoor, "weatherScore": score(is_indoor, icon_code)}
    )


def sort_by_weather(places: Iterable[Place]) -> List[Place]:
    # sorted() is stable, ties keep category order
    return sorted(places, key=lambda p: p.weatherScore, reverse=True)


def sort_places(places: Iterable[Place], mode: str = "weather") -> List[Place]:
    if mode == "rating":
        return sorted(places, key=lambda p: (p.rating, p.reviewCount), reverse=True)
    if mode == "reviews":
        return sorted(places, key=lambda p: p.reviewCount, reverse=True)
    return sort_by_weather(places)
