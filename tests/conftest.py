import pytest

from smartroute.schemas.place import Place
from smartroute.schemas.weather import WeatherSnapshot
from smartroute.services.kakao import Directions
from smartroute.services.results import ProviderResult


class FakeSearch:
    """
    Place search stand-in.

    pages: {category: [[Place, ...] for offset 0, [...] for offset 1, ...]}
    failures: {category: ErrorKind}
    """

    def __init__(self, pages=None, failures=None):
        self.pages = pages or {}
        self.failures = failures or {}
        self.calls = []
        self.timeouts = []

    def search_places(self, location, category, offset, timeout=None):
        self.calls.append((location, category, offset))
        self.timeouts.append(timeout)
        if category in self.failures:
            return ProviderResult.failure(self.failures[category], "fake failure")
        pages = self.pages.get(category, [])
        return ProviderResult.success(list(pages[offset]) if offset < len(pages) else [])


class FakeDirections:
    """Fixed-answer directions; call indexes in ``fail_calls`` fail."""

    def __init__(self, distance=1200.0, duration=600.0, fail_calls=(), failure=None, is_fallback=False):
        self.distance = distance
        self.duration = duration
        self.fail_calls = set(fail_calls)
        self.failure = failure
        self.is_fallback = is_fallback
        self.calls = []

    def get_directions(self, origin, destination, priority="RECOMMEND"):
        index = len(self.calls)
        self.calls.append((origin, destination, priority))
        if index in self.fail_calls:
            return ProviderResult.failure(self.failure, "fake failure")
        return ProviderResult.success(
            Directions(
                distance_m=self.distance,
                duration_s=self.duration,
                fare=3800,
                is_fallback=self.is_fallback,
            )
        )


class FakeResponse:
    def __init__(self, status_code=200, payload=None, json_error=False):
        self.status_code = status_code
        self._payload = payload
        self._json_error = json_error

    @property
    def ok(self):
        return 200 <= self.status_code < 300

    def json(self):
        if self._json_error:
            raise ValueError("not json")
        return self._payload

    def raise_for_status(self):
        import requests

        if not self.ok:
            raise requests.exceptions.HTTPError(f"{self.status_code} error")


def make_place(place_id, name, category="카페", lat=33.5, lng=126.5, address="제주", **extra):
    return Place(
        id=place_id,
        name=name,
        category=category,
        address=address,
        lat=lat,
        lng=lng,
        rating=extra.pop("rating", 4.2),
        reviewCount=extra.pop("reviewCount", 120),
        **extra,
    )


@pytest.fixture
def rainy():
    return WeatherSnapshot(temperature=14, description="비", iconCode="10d", humidity=90, windSpeed=3.1)


@pytest.fixture
def sunny():
    return WeatherSnapshot(temperature=24, description="맑음", iconCode="01d", humidity=40, windSpeed=1.2)


@pytest.fixture
def place_factory():
    return make_place
