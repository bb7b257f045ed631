from __future__ import annotations

from typing import List, Optional, Tuple

from smartroute.schemas.place import CandidateSet, Notice, SelectionResult
from smartroute.schemas.route import Route
from smartroute.schemas.weather import WeatherSnapshot
from smartroute.services.route import DEFAULT_TRANSPORT_MODE, RouteAggregator
from smartroute.services.selection import CandidateSelector, lock_message, toggle_lock
from smartroute.utils.logger import get_logger

logger = get_logger(__name__)


class SmartRouteSession:
    """
    One user's working set and the route derived from it.

    Selection requests are tagged with a generation token; a result whose
    token is no longer current is dropped instead of overwriting newer
    state. The route is cached against (location, style, place id sequence,
    transport mode); the cache is dropped on every load and the route is
    rebuilt from scratch whenever the key changes.
    """

    def __init__(self, selector: CandidateSelector, aggregator: RouteAggregator):
        self.selector = selector
        self.aggregator = aggregator
        self.candidates: Optional[CandidateSet] = None
        self.transport_mode = DEFAULT_TRANSPORT_MODE
        self.notices: List[Notice] = []
        self._generation = 0
        self._route: Optional[Route] = None
        self._route_key: Optional[Tuple[str, str, Tuple[str, ...], str]] = None

    # request lifecycle

    def begin_request(self) -> int:
        """Start a selection request; any earlier in-flight request becomes stale."""
        self._generation += 1
        return self._generation

    def is_current(self, token: int) -> bool:
        return token == self._generation

    def apply(self, token: int, result: SelectionResult) -> bool:
        """Adopt ``result`` if it belongs to the newest request."""
        if not self.is_current(token):
            logger.info("Discarding stale selection result (token %d, current %d)", token, self._generation)
            return False
        self.candidates = result.candidates
        self.notices = list(result.notices)
        return True

    # operations

    def load(self, travel_style: str, location: str, weather: WeatherSnapshot) -> SelectionResult:
        """New style or location: the working set and its route are replaced wholesale."""
        token = self.begin_request()
        result = self.selector.select_initial(travel_style, location, weather)
        if self.apply(token, result):
            self._route = None
            self._route_key = None
        return result

    def refresh(self) -> SelectionResult:
        if self.candidates is None:
            raise RuntimeError("refresh() called before load()")

        token = self.begin_request()
        result = self.selector.refresh(self.candidates)
        if result.has_notice("all_locked"):
            # Nothing changed, only the notice is surfaced
            if self.is_current(token):
                self.notices = list(result.notices)
            return result

        self.apply(token, result)
        return result

    def toggle_lock(self, place_id: str) -> Optional[str]:
        if self.candidates is None:
            return None
        self.candidates = toggle_lock(self.candidates, place_id)
        return lock_message(self.candidates.places, place_id)

    def update_weather(self, weather: WeatherSnapshot) -> None:
        if self.candidates is not None:
            self.candidates = self.selector.rescore(self.candidates, weather)

    def set_transport_mode(self, transport_mode: str) -> None:
        self.transport_mode = (transport_mode or DEFAULT_TRANSPORT_MODE).upper()

    def route(self) -> Optional[Route]:
        if self.candidates is None:
            return None

        # Placeholder ids repeat across locations, so the set's identity is part of the key
        c = self.candidates
        key = (c.location, c.travelStyle, tuple(p.id for p in c.places), self.transport_mode)
        if key != self._route_key:
            self._route = self.aggregator.build_route(c.places, self.transport_mode, c.travelStyle)
            self._route_key = key
        return self._route
