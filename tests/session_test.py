import pytest
from conftest import FakeDirections, FakeSearch, make_place

from smartroute.services.route import RouteAggregator
from smartroute.services.selection import CandidateSelector
from smartroute.services.session import SmartRouteSession


def seoul_pages():
    return {
        "관광명소": [[make_place("s1", "경복궁", category="관광명소", lat=37.5796, lng=126.9770)]],
        "박물관": [[make_place("s2", "국립중앙박물관", category="박물관", lat=37.5240, lng=126.9803)]],
        "레스토랑": [[make_place("s3", "을지로 식당", category="레스토랑", lat=37.5660, lng=126.9910)]],
        "숙박": [[make_place("s4", "명동 호텔", category="숙박", lat=37.5636, lng=126.9826)]],
    }


def make_session(search=None, directions=None):
    selector = CandidateSelector(search or FakeSearch(seoul_pages()), seed=0)
    aggregator = RouteAggregator(directions or FakeDirections())
    return SmartRouteSession(selector, aggregator)


def test_load_then_route(sunny):
    session = make_session()
    session.load("관광", "서울", sunny)

    route = session.route()
    assert [p.id for p in route.places] == ["s1", "s2", "s3", "s4"]
    assert len(route.segments) == 3


def test_stale_result_is_discarded(sunny):
    session = make_session()
    first = session.begin_request()
    newer = session.begin_request()

    stale = session.selector.select_initial("관광", "부산", sunny)
    fresh = session.selector.select_initial("관광", "서울", sunny)

    assert session.apply(newer, fresh) is True
    assert session.apply(first, stale) is False
    assert session.candidates.location == "서울"


def test_route_is_cached_until_the_key_changes(sunny):
    directions = FakeDirections()
    session = make_session(directions=directions)
    session.load("관광", "서울", sunny)

    route = session.route()
    assert session.route() is route
    assert len(directions.calls) == 3

    session.set_transport_mode("walk")
    walked = session.route()
    assert walked is not route
    assert walked.transportMode == "WALK"
    assert len(directions.calls) == 6

    # locking keeps the id sequence, so no rebuild
    session.toggle_lock("s2")
    assert session.route() is walked


def test_refresh_rebuilds_route(sunny):
    pages = seoul_pages()
    pages["박물관"].append([make_place("s5", "서울역사박물관", category="박물관", lat=37.5703, lng=126.9703)])
    pages["관광명소"].append([])
    pages["레스토랑"].append([])
    directions = FakeDirections()
    session = make_session(search=FakeSearch(pages), directions=directions)

    session.load("관광", "서울", sunny)
    before = session.route()
    session.toggle_lock("s1")
    session.refresh()
    after = session.route()

    assert after is not before
    assert after.places[0].id == "s1"
    assert "s5" in [p.id for p in after.places]


def test_refresh_all_locked_keeps_state(sunny):
    session = make_session()
    session.load("관광", "서울", sunny)
    for place_id in ["s1", "s2", "s3", "s4"]:
        session.toggle_lock(place_id)
    candidates = session.candidates

    result = session.refresh()

    assert result.has_notice("all_locked")
    assert session.candidates is candidates
    assert session.notices[0].kind == "all_locked"


def test_refresh_before_load_raises():
    with pytest.raises(RuntimeError):
        make_session().refresh()


def test_weather_update_rescores(sunny, rainy):
    session = make_session()
    session.load("관광", "서울", sunny)
    session.update_weather(rainy)

    hotel = next(p for p in session.candidates.places if p.id == "s4")
    assert hotel.weatherScore == 10
    assert session.candidates.weather.iconCode == "10d"


def test_toggle_lock_without_candidates():
    assert make_session().toggle_lock("s1") is None
    assert make_session().route() is None


def test_loading_another_location_rebuilds_route(sunny):
    """Placeholder ids repeat across locations; the route must still follow the new set."""
    directions = FakeDirections()
    session = make_session(search=FakeSearch(), directions=directions)

    session.load("힐링", "제주", sunny)
    jeju = session.route()
    session.load("힐링", "부산", sunny)
    busan = session.route()

    assert [p.id for p in busan.places] == [p.id for p in jeju.places], "placeholder ids collide"
    assert busan is not jeju
    assert [p.name for p in busan.places] == [p.name for p in session.candidates.places]
    assert all(p.name.startswith("부산") for p in busan.places)
    assert len(directions.calls) == 6


def test_refresh_result_is_dropped_when_a_newer_request_starts(sunny):
    session = make_session()
    session.load("관광", "서울", sunny)
    session.toggle_lock("s1")
    candidates = session.candidates
    real_refresh = session.selector.refresh

    def refresh_interrupted(current, *args):
        # A load arrives while this refresh is still searching
        session.begin_request()
        return real_refresh(current, *args)

    session.selector.refresh = refresh_interrupted
    session.refresh()

    assert session.candidates is candidates
