import requests
from typing import Optional

from smartroute.core.config import Settings, settings as default_settings
from smartroute.schemas.weather import WeatherSnapshot, mock_weather
from smartroute.utils.logger import get_logger

logger = get_logger(__name__)

# Provinces map to a representative city
CITY_NAME_MAP = {
    "서울": "Seoul",
    "부산": "Busan",
    "대구": "Daegu",
    "인천": "Incheon",
    "광주": "Gwangju",
    "대전": "Daejeon",
    "울산": "Ulsan",
    "세종": "Sejong",
    "경기": "Suwon",
    "강원": "Chuncheon",
    "충북": "Cheongju",
    "충남": "Daejeon",
    "전북": "Jeonju",
    "전남": "Gwangju",
    "경북": "Daegu",
    "경남": "Changwon",
    "제주": "Jeju",
    "강릉": "Gangneung",
    "전주": "Jeonju",
    "경주": "Gyeongju",
    "여수": "Yeosu",
    "포항": "Pohang",
    "창원": "Changwon",
    "천안": "Cheonan",
    "청주": "Cheongju",
    "수원": "Suwon",
    "김해": "Gimhae",
    "진주": "Jinju",
    "통영": "Tongyeong",
    "속초": "Sokcho",
    "춘천": "Chuncheon",
    "원주": "Wonju",
}

LONG_FORM_MAP = {
    "서울특별시": "Seoul",
    "부산광역시": "Busan",
    "대구광역시": "Daegu",
    "인천광역시": "Incheon",
    "광주광역시": "Gwangju",
    "대전광역시": "Daejeon",
    "울산광역시": "Ulsan",
    "세종특별자치시": "Sejong",
    "제주특별자치도": "Jeju",
    "제주도": "Jeju",
    "경기도": "Suwon",
    "강원도": "Chuncheon",
    "충청북도": "Cheongju",
    "충청남도": "Daejeon",
    "전라북도": "Jeonju",
    "전라남도": "Gwangju",
    "경상북도": "Daegu",
    "경상남도": "Changwon",
}


def to_english_city(city: str) -> str:
    """Korean city/province name → OpenWeather query name."""
    city = (city or "").strip()
    if city in LONG_FORM_MAP:
        return LONG_FORM_MAP[city]
    if city in CITY_NAME_MAP:
        return CITY_NAME_MAP[city]

    # "제주시 애월읍", "부산 해운대구" ...
    for korean, english in CITY_NAME_MAP.items():
        if city.startswith(korean):
            return english
    return city


class WeatherProvider:
    """
    Current conditions from OpenWeather.

    ``get_weather`` never raises. Missing key, upstream errors and malformed
    payloads all produce the clear-sky mock with ``isEstimated=True``.
    """

    def __init__(self, api_key: Optional[str] = None, config: Optional[Settings] = None):
        cfg = config or default_settings
        self.api_key = cfg.OPENWEATHER_API_KEY if api_key is None else api_key
        self.base_url = cfg.OPENWEATHER_URL
        self.timeout = cfg.WEATHER_TIMEOUT

    def get_weather(self, location: str) -> WeatherSnapshot:
        if not self.api_key:
            logger.warning("OPENWEATHER_API_KEY is not set, returning mock weather")
            return mock_weather("not_configured")

        city = to_english_city(location)
        logger.info("Weather lookup: %s → %s", location, city)

        try:
            resp = requests.get(
                self.base_url,
                params={
                    "q": f"{city},KR",
                    "appid": self.api_key,
                    "units": "metric",
                    "lang": "kr",
                },
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.warning("OpenWeather request failed: %s, returning mock weather", e)
            return mock_weather("api_error")

        if not resp.ok:
            if resp.status_code == 401:
                logger.error("OpenWeather rejected the API key (401)")
                return mock_weather("invalid_api_key")
            logger.warning("OpenWeather error %s for %s, returning mock weather", resp.status_code, city)
            return mock_weather("api_error")

        try:
            data = resp.json()
            snapshot = WeatherSnapshot(
                temperature=round(data["main"]["temp"]),
                description=data["weather"][0]["description"],
                iconCode=data["weather"][0]["icon"],
                humidity=data["main"].get("humidity", 0),
                windSpeed=(data.get("wind") or {}).get("speed", 0.0),
                isEstimated=False,
            )
        except (KeyError, IndexError, TypeError, ValueError) as e:
            logger.warning("Invalid OpenWeather payload for %s: %s", city, e)
            return mock_weather("api_error")

        logger.info(
            "Weather for %s: %s°C %s (%s)",
            city, snapshot.temperature, snapshot.description, snapshot.iconCode,
        )
        return snapshot
