from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    # Empty credentials put the matching provider into fallback mode
    SUPABASE_URL: str = ""
    SUPABASE_KEY: str = ""
    KAKAO_REST_API_KEY: str = ""
    KAKAO_JS_API_KEY: str = ""
    OPENWEATHER_API_KEY: str = ""

    KAKAO_LOCAL_URL: str = "https://dapi.kakao.com/v2/local"
    KAKAO_MOBILITY_URL: str = "https://apis-navi.kakaomobility.com/v1"
    KAKAO_MAP_SDK_URL: str = "https://dapi.kakao.com/v2/maps/sdk.js"
    OPENWEATHER_URL: str = "https://api.openweathermap.org/data/2.5/weather"

    KAKAO_TIMEOUT: int = 5
    WEATHER_TIMEOUT: int = 5
    PLACE_SEARCH_TIMEOUT: int = 10
    PLACE_SEARCH_SIZE: int = 5

    ROUTE_HALF_DAY_HOURS: float = 6.0
    ROUTE_FULL_DAY_HOURS: float = 10.0

    KV_TABLE: str = "kv_store"

    LOG_LEVEL: str = "INFO"

    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]


settings = Settings()
