import requests
from enum import Enum
from typing import Optional

from smartroute.utils.logger import get_logger

logger = get_logger(__name__)


class MapState(str, Enum):
    UNLOADED = "unloaded"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


class MapProvider:
    """
    Readiness of the Kakao Maps JavaScript SDK handed out to clients.

    Built once per process and passed to whoever needs it. ``load`` checks
    the SDK once and caches the outcome; ``load(force=True)`` checks again.
    """

    def __init__(self, app_key: str, sdk_url: str, timeout: float = 2):
        self.app_key = app_key
        self.sdk_url = sdk_url
        self.timeout = timeout
        self.state = MapState.UNLOADED
        self.error: Optional[str] = None

    def is_ready(self) -> bool:
        return self.state == MapState.READY

    def script_url(self) -> Optional[str]:
        if not self.app_key:
            return None
        return f"{self.sdk_url}?appkey={self.app_key}&autoload=false&libraries=services"

    def load(self, force: bool = False) -> MapState:
        if self.state in (MapState.READY, MapState.FAILED) and not force:
            return self.state
        if self.state == MapState.LOADING:
            return self.state

        self.state = MapState.LOADING
        if not self.app_key:
            logger.warning("KAKAO_JS_API_KEY is not set, map disabled")
            return self._fail("not_configured")

        try:
            resp = requests.get(self.script_url(), timeout=self.timeout)
            resp.raise_for_status()
        except requests.exceptions.RequestException as e:
            logger.warning("Kakao Maps SDK check failed: %s", e)
            return self._fail(str(e))

        self.state = MapState.READY
        self.error = None
        logger.info("Kakao Maps SDK reachable")
        return self.state

    def _fail(self, reason: str) -> MapState:
        self.state = MapState.FAILED
        self.error = reason
        return self.state
