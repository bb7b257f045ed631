"""
Endpoint functions called directly with fake providers injected in place of
the ``Depends`` defaults, and the KV store swapped for a dict.
"""

import pytest
from conftest import FakeDirections, FakeSearch, make_place
from fastapi import HTTPException

from smartroute.api import user_data
from smartroute.api.directions import address_to_coord, calculate_route, coords_to_address, get_directions, map_status
from smartroute.api.places import get_weather, parse_weather, search_places, select_places, toggle_lock
from smartroute.db import kv_store
from smartroute.db.auth import AuthUser, bearer_token, verify_token
from smartroute.schemas.weather import mock_weather
from smartroute.services.kakao import GeocodeResult, RegionInfo
from smartroute.services.map_provider import MapProvider, MapState
from smartroute.services.results import ErrorKind, ProviderResult
from smartroute.services.route import RouteAggregator
from smartroute.services.selection import CandidateSelector


class StubWeather:
    def __init__(self, snapshot=None):
        self.snapshot = snapshot or mock_weather()
        self.calls = []

    def get_weather(self, location):
        self.calls.append(location)
        return self.snapshot


class StubGeocoder:
    def __init__(self, result):
        self.result = result

    def address_to_coordinates(self, address):
        return self.result

    def coordinates_to_region(self, point):
        self.point = point
        return self.result


class StubKeywordSearch:
    def __init__(self, result):
        self.result = result
        self.calls = []

    def search(self, query, location=""):
        self.calls.append((query, location))
        return self.result


def place_dicts():
    return [
        make_place("p1", "경복궁", lat=37.5796, lng=126.9770).model_dump(),
        make_place("p2", "명동 호텔", lat=37.5636, lng=126.9826).model_dump(),
        make_place("p3", "서울숲", lat=37.5444, lng=127.0374).model_dump(),
    ]


# places


def test_select_places_requires_location_and_style():
    with pytest.raises(HTTPException) as exc:
        select_places({"location": "서울"}, CandidateSelector(FakeSearch()), StubWeather())
    assert exc.value.status_code == 400


def test_select_places_rejects_unknown_sort():
    with pytest.raises(HTTPException) as exc:
        select_places(
            {"location": "서울", "travelStyle": "관광", "sort": "distance"},
            CandidateSelector(FakeSearch()),
            StubWeather(),
        )
    assert exc.value.status_code == 400


def test_select_places_initial_uses_provider_weather():
    weather = StubWeather()
    body = select_places(
        {"location": "제주", "travelStyle": "힐링"},
        CandidateSelector(FakeSearch(), seed=1),
        weather,
    )

    assert weather.calls == ["제주"]
    assert body["status"] == "success"
    assert len(body["places"]) == 4
    assert body["offset"] == 0
    assert body["isEstimated"] is True
    assert [n["kind"] for n in body["notices"]] == ["fallback"]
    # sunny mock weather, outdoor park first
    assert body["places"][0]["name"] == "제주 공원 추천"


def test_select_places_refresh_with_client_weather():
    weather = StubWeather()
    search = FakeSearch({"박물관": [[], [make_place("m1", "서울역사박물관")]]})
    body = select_places(
        {
            "location": "서울",
            "travelStyle": "관광",
            "weather": {"temperature": 12, "description": "비", "icon": "10d"},
            "places": place_dicts() + [make_place("p4", "광장시장").model_dump()],
            "offset": 0,
            "lockedIds": ["p1"],
            "sort": "rating",
        },
        CandidateSelector(search, seed=1),
        weather,
    )

    assert weather.calls == []
    assert body["offset"] == 1
    ids = [p["id"] for p in body["places"]]
    assert "p1" in ids and "m1" in ids
    assert body["weather"]["iconCode"] == "10d"


def test_select_places_refresh_rescores_client_places():
    """A locked hotel sent as outdoor with score 1 is scored again for the rain."""
    hotel = make_place("h1", "명동 호텔", address="서울 중구", isIndoor=False, weatherScore=1, locked=True)
    others = [make_place(f"o{i}", name, address="서울") for i, name in enumerate(["경복궁", "서울숲", "광장시장"])]
    body = select_places(
        {
            "location": "서울",
            "travelStyle": "관광",
            "weather": {"temperature": 12, "description": "비", "iconCode": "10d"},
            "places": [p.model_dump() for p in [hotel] + others],
            "offset": 0,
        },
        CandidateSelector(FakeSearch(), seed=1),
        StubWeather(),
    )

    first = body["places"][0]
    assert first["id"] == "h1"
    assert (first["isIndoor"], first["weatherScore"]) == (True, 10)
    assert first["locked"] is True


@pytest.mark.parametrize("offset", ["abc", [1], {"page": 2}])
def test_select_places_rejects_non_numeric_offset(offset):
    with pytest.raises(HTTPException) as exc:
        select_places(
            {"location": "서울", "travelStyle": "관광", "places": place_dicts(), "offset": offset},
            CandidateSelector(FakeSearch()),
            StubWeather(),
        )
    assert exc.value.status_code == 400


def test_search_places_endpoint():
    search = StubKeywordSearch(ProviderResult.success([make_place("k1", "제주 돌담 카페")]))
    body = search_places({"query": "카페", "location": "제주"}, search)

    assert search.calls == [("카페", "제주")]
    assert body["isMock"] is False
    assert [p["name"] for p in body["places"]] == ["제주 돌담 카페"]


def test_search_places_failure_is_empty_mock():
    body = search_places({"query": "카페"}, StubKeywordSearch(ProviderResult.failure(ErrorKind.NOT_CONFIGURED)))
    assert body == {"places": [], "isMock": True}

    with pytest.raises(HTTPException) as exc:
        search_places({"location": "제주"}, StubKeywordSearch(ProviderResult.success([])))
    assert exc.value.status_code == 400


def test_parse_weather_accepts_legacy_keys():
    snapshot = parse_weather({"temperature": 3, "description": "눈", "icon": "13n", "isMock": True})
    assert snapshot.iconCode == "13n"
    assert snapshot.isEstimated is True
    assert parse_weather(None) is None

    with pytest.raises(HTTPException):
        parse_weather({"description": "missing fields"})


def test_toggle_lock_endpoint():
    body = toggle_lock({"placeId": "p2", "places": place_dicts()})
    locked = {p["id"]: p["locked"] for p in body["places"]}
    assert locked == {"p1": False, "p2": True, "p3": False}
    assert body["message"]

    with pytest.raises(HTTPException) as exc:
        toggle_lock({"places": place_dicts()})
    assert exc.value.status_code == 400


def test_weather_endpoint_includes_message():
    body = get_weather("서울", StubWeather())
    assert body["iconCode"] == "01d"
    assert body["message"]


# directions


def test_calculate_route():
    body = calculate_route(
        {"places": place_dicts(), "transportMode": "walk"},
        RouteAggregator(FakeDirections(distance=1000, duration=900)),
    )
    assert body["status"] == "success"
    assert len(body["segments"]) == 2
    assert body["totalDistanceMeters"] == 2000
    assert body["transportMode"] == "WALK"


def test_calculate_route_needs_two_places():
    with pytest.raises(HTTPException) as exc:
        calculate_route({"places": place_dicts()[:1]}, RouteAggregator(FakeDirections()))
    assert exc.value.status_code == 400


def test_directions_falls_back_on_failure():
    payload = {
        "origin": {"lat": 37.5665, "lng": 126.9780},
        "destination": {"lat": 37.5512, "lng": 126.9882},
    }
    body = get_directions(payload, FakeDirections(fail_calls={0}, failure=ErrorKind.TIMEOUT))

    assert body["success"] is True
    assert body["data"]["isFallback"] is True
    assert body["data"]["error"] == "timeout"
    assert 1900 < body["data"]["distance"] < 1950

    ok = get_directions(payload, FakeDirections())
    assert ok["data"] == {"distance": 1200, "duration": 600, "fare": 3800, "isFallback": False}


def test_directions_validates_points():
    with pytest.raises(HTTPException) as exc:
        get_directions({"origin": {"lat": 1}, "destination": None}, FakeDirections())
    assert exc.value.status_code == 400


@pytest.mark.parametrize(
    "kind, status",
    [(ErrorKind.NOT_CONFIGURED, 400), (ErrorKind.NOT_FOUND, 404), (ErrorKind.TIMEOUT, 502)],
)
def test_address_to_coord_errors(kind, status):
    with pytest.raises(HTTPException) as exc:
        address_to_coord({"address": "서울"}, StubGeocoder(ProviderResult.failure(kind)))
    assert exc.value.status_code == status


def test_address_to_coord():
    geocode = GeocodeResult(lat=37.5665, lng=126.978, address="서울 중구 태평로1가 31", road_address="서울 중구 세종대로 110")
    body = address_to_coord({"address": "서울시청"}, StubGeocoder(ProviderResult.success(geocode)))
    assert body["data"]["roadAddress"] == "서울 중구 세종대로 110"


def test_coords_to_address():
    region = RegionInfo(region="부산", city="해운대구", full_address="부산 해운대구 우동 1411")
    geocoder = StubGeocoder(ProviderResult.success(region))
    body = coords_to_address({"latitude": 35.1587, "longitude": 129.1604}, geocoder)

    assert body == {"region": "부산", "city": "해운대구", "fullAddress": "부산 해운대구 우동 1411"}
    assert geocoder.point.lat == 35.1587
    assert geocoder.point.lng == 129.1604


@pytest.mark.parametrize(
    "kind, error",
    [
        (ErrorKind.NOT_CONFIGURED, "API key not configured"),
        (ErrorKind.NOT_FOUND, "Address not found"),
        (ErrorKind.UNAVAILABLE, "Failed to fetch address"),
    ],
)
def test_coords_to_address_falls_back_to_seoul(kind, error):
    body = coords_to_address({"latitude": 35.1, "longitude": 129.1}, StubGeocoder(ProviderResult.failure(kind)))
    assert body == {"error": error, "region": "서울", "city": "", "fullAddress": "서울"}


def test_coords_to_address_requires_coordinates():
    with pytest.raises(HTTPException) as exc:
        coords_to_address({"latitude": 35.1}, StubGeocoder(ProviderResult.failure(ErrorKind.NOT_FOUND)))
    assert exc.value.status_code == 400


def test_map_status_without_key():
    body = map_status(False, MapProvider("", "https://dapi.kakao.com/v2/maps/sdk.js"))
    assert body["state"] == MapState.FAILED.value
    assert body["ready"] is False
    assert body["scriptUrl"] is None


# user data


@pytest.fixture
def store(monkeypatch):
    data = {}

    def list_by_prefix(prefix):
        return [{"key": k, "value": v} for k, v in sorted(data.items()) if k.startswith(prefix)]

    monkeypatch.setattr(kv_store, "set_value", lambda key, value: data.__setitem__(key, value))
    monkeypatch.setattr(kv_store, "get_value", lambda key: data.get(key))
    monkeypatch.setattr(kv_store, "delete_value", lambda key: data.pop(key, None))
    monkeypatch.setattr(kv_store, "list_by_prefix", list_by_prefix)
    return data


def test_bookmark_lifecycle(store):
    user = AuthUser(user_id="u1", email="u1@example.com")
    created = user_data.add_bookmark({"name": "경복궁", "location": "서울", "category": "관광명소"}, user)
    assert created["id"].startswith("bookmark:u1:")

    listed = user_data.list_bookmarks(user)["bookmarks"]
    assert [b["name"] for b in listed] == ["경복궁"]

    # another user cannot delete it
    with pytest.raises(HTTPException) as exc:
        user_data.delete_bookmark(created["id"], AuthUser(user_id="u2"))
    assert exc.value.status_code == 404

    assert user_data.delete_bookmark(created["id"], user) == {"success": True}
    assert user_data.list_bookmarks(user)["bookmarks"] == []


def test_itinerary_lifecycle(store):
    user = AuthUser(user_id="u1")
    with pytest.raises(HTTPException):
        user_data.save_itinerary({"itinerary": "nope"}, user)

    saved = user_data.save_itinerary(
        {"itinerary": {"places": ["p1", "p2"], "transportMode": "TRANSIT"}}, user
    )
    listed = user_data.list_itineraries(user)["itineraries"]
    assert listed[0]["id"] == saved["id"]
    assert listed[0]["transportMode"] == "TRANSIT"
    assert "timestamp" in listed[0]

    with pytest.raises(HTTPException) as exc:
        user_data.delete_itinerary("itinerary:u1:0", user)
    assert exc.value.status_code == 404


def test_preferences(store):
    user_data.save_preference({"userId": "device-1", "travelStyle": "힐링"}, None)
    assert user_data.get_preference("device-1")["travelStyle"] == "힐링"

    user_data.save_preference({"travelStyle": "관광"}, AuthUser(user_id="u9"))
    assert "preference:u9" in store

    with pytest.raises(HTTPException) as exc:
        user_data.get_preference("nobody")
    assert exc.value.status_code == 404

    with pytest.raises(HTTPException) as exc:
        user_data.save_preference({"travelStyle": "관광"}, None)
    assert exc.value.status_code == 400


def test_storage_errors_map_to_503(monkeypatch):
    def unavailable(*args, **kwargs):
        raise RuntimeError("Supabase not connected")

    monkeypatch.setattr(kv_store, "list_by_prefix", unavailable)
    with pytest.raises(HTTPException) as exc:
        user_data.list_bookmarks(AuthUser(user_id="u1"))
    assert exc.value.status_code == 503


# auth


class FakeAuth:
    def __init__(self, user=None, error=None):
        self.user = user
        self.error = error

    def get_user(self, token):
        if self.error:
            raise self.error
        return type("Resp", (), {"user": self.user})()


class FakeClient:
    def __init__(self, auth):
        self.auth = auth


def test_bearer_token():
    assert bearer_token("Bearer abc") == "abc"
    assert bearer_token("bearer  abc ") == "abc"
    assert bearer_token("Basic abc") is None
    assert bearer_token(None) is None


def test_verify_token():
    user = type("User", (), {"id": "u1", "email": "u1@example.com"})()
    assert verify_token("t", FakeClient(FakeAuth(user=user))) == AuthUser("u1", "u1@example.com")
    assert verify_token("t", FakeClient(FakeAuth(error=ValueError("expired")))) is None
    assert verify_token("", FakeClient(FakeAuth(user=user))) is None
