from pydantic import BaseModel
from typing import Optional


class WeatherSnapshot(BaseModel):
    temperature: int
    description: str
    iconCode: str
    humidity: int = 0
    windSpeed: float = 0.0
    isEstimated: bool = False
    error: Optional[str] = None  # "invalid_api_key" | "api_error" | "not_configured"


def mock_weather(error: Optional[str] = None) -> WeatherSnapshot:
    """Clear-sky stand-in used whenever live weather is unavailable."""
    return WeatherSnapshot(
        temperature=20,
        description="맑음",
        iconCode="01d",
        humidity=60,
        windSpeed=2.5,
        isEstimated=True,
        error=error,
    )
