from __future__ import annotations

import time

import numpy as np
from typing import Callable, Iterable, List, Optional, Protocol, Set, Tuple

from smartroute.core.config import settings
from smartroute.schemas.place import CandidateSet, Notice, Place, SelectionResult
from smartroute.schemas.weather import WeatherSnapshot
from smartroute.services.images import fallback_image
from smartroute.services.results import ErrorKind, ProviderResult
from smartroute.services.weather_score import annotate
from smartroute.utils.logger import get_logger

logger = get_logger(__name__)

SET_SIZE = 4

STYLE_CATEGORIES = {
    "힐링": ["카페", "공원", "숙박", "레스토랑"],
    "관광": ["관광명소", "박물관", "레스토랑", "숙박"],
    "액티비티": ["액티비티", "레스토랑", "공원", "숙박"],
}
DEFAULT_STYLE = "액티비티"

REGION_CENTERS = {
    "서울": (37.5665, 126.9780),
    "부산": (35.1796, 129.0756),
    "제주": (33.4996, 126.5312),
    "강릉": (37.7519, 128.8761),
    "경주": (35.8562, 129.2247),
    "전주": (35.8242, 127.1480),
    "여수": (34.7604, 127.6622),
    "대구": (35.8714, 128.6014),
    "인천": (37.4563, 126.7052),
    "광주": (35.1595, 126.8526),
    "대전": (36.3504, 127.3845),
    "울산": (35.5384, 129.3114),
    "속초": (38.2070, 128.5918),
}
DEFAULT_CENTER = REGION_CENTERS["서울"]
PLACEHOLDER_SPREAD_DEG = 0.05

MSG_TIMEOUT = "요청 시간이 초과되었습니다. 다시 시도해주세요."
MSG_ALL_LOCKED = "모든 장소가 고정되어 있습니다"
MSG_FALLBACK = "일부 장소는 추천 데이터로 대체되었습니다"
MSG_LOCKED = "장소가 고정되었습니다"
MSG_UNLOCKED = "장소 고정이 해제되었습니다"


class PlaceSearchProvider(Protocol):
    """Anything with Kakao-style keyword search."""

    def search_places(
        self, location: str, category: str, offset: int, timeout: Optional[float] = None
    ) -> ProviderResult[List[Place]]: ...


def categories_for_style(travel_style: str) -> List[str]:
    return list(STYLE_CATEGORIES.get(travel_style, STYLE_CATEGORIES[DEFAULT_STYLE]))


def region_center(location: str) -> Tuple[float, float]:
    location = (location or "").strip()
    for region, center in REGION_CENTERS.items():
        if location.startswith(region) or region in location:
            return center
    return DEFAULT_CENTER


def toggle_place_lock(places: Iterable[Place], place_id: str) -> List[Place]:
    return [
        p.model_copy(update={"locked": not p.locked}) if p.id == place_id else p
        for p in places
    ]


def toggle_lock(candidates: CandidateSet, place_id: str) -> CandidateSet:
    """Flip ``locked`` on one place. Unknown ids leave the set unchanged."""
    return candidates.model_copy(
        update={"places": toggle_place_lock(candidates.places, place_id)}
    )


def lock_message(places: Iterable[Place], place_id: str) -> Optional[str]:
    """Notice text after a toggle, read from the already-toggled places."""
    for p in places:
        if p.id == place_id:
            return MSG_LOCKED if p.locked else MSG_UNLOCKED
    return None


class CandidateSelector:
    """
    Builds and refreshes the 4-place working set for a (style, location).

    Search failures never escape: empty or failed categories are padded with
    synthesized placeholders, and the notices on the SelectionResult tell
    the client what happened.

    All searches of one request share a single ``budget`` (seconds); each
    call gets whatever is left of it as its timeout.
    """

    def __init__(
        self,
        search_provider: PlaceSearchProvider,
        seed: Optional[int] = None,
        budget: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.search_provider = search_provider
        self.rng = np.random.default_rng(seed)
        self.budget = float(settings.PLACE_SEARCH_TIMEOUT if budget is None else budget)
        self.clock = clock

    # public

    def select_initial(
        self, travel_style: str, location: str, weather: WeatherSnapshot
    ) -> SelectionResult:
        categories = categories_for_style(travel_style)
        logger.info("Selecting places for %s, style=%s, categories=%s", location, travel_style, categories)

        picked, notices = self._search(location, categories, offset=0, slots=SET_SIZE, exclude=set())
        places = self._pad(picked, [], location, categories, offset=0)
        places = [annotate(p, weather.iconCode) for p in places]

        candidates = CandidateSet(
            travelStyle=travel_style,
            location=location,
            weather=weather,
            offset=0,
            places=places,
        )
        return self._result(candidates, notices, synthesized=len(places) > len(picked))

    def refresh(
        self, candidates: CandidateSet, locked_ids: Optional[Iterable[str]] = None
    ) -> SelectionResult:
        """
        Replace unlocked places, keeping locked ones verbatim in front.

        ``locked_ids`` defaults to the places currently flagged ``locked``.
        """
        lock_set = set(candidates.locked_ids if locked_ids is None else locked_ids)
        locked = [p for p in candidates.places if p.id in lock_set]

        if candidates.places and len(locked) >= len(candidates.places):
            logger.info("Refresh rejected: all %d places locked", len(locked))
            return SelectionResult(
                candidates=candidates,
                notices=[Notice(kind="all_locked", message=MSG_ALL_LOCKED)],
                isEstimated=any(p.isPlaceholder for p in candidates.places),
            )

        offset = candidates.offset + 1
        categories = categories_for_style(candidates.travelStyle)
        slots = SET_SIZE - len(locked)
        logger.info(
            "Refreshing %s (offset=%d): %d locked, %d to replace",
            candidates.location, offset, len(locked), slots,
        )

        picked, notices = self._search(
            candidates.location, categories, offset, slots, exclude={p.id for p in locked}
        )
        fresh = self._pad(picked, locked, candidates.location, categories, offset)
        icon = candidates.weather.iconCode
        fresh = [annotate(p, icon) for p in fresh]

        refreshed = candidates.model_copy(update={"offset": offset, "places": locked + fresh})
        return self._result(refreshed, notices, synthesized=len(fresh) > len(picked))

    def rescore(self, candidates: CandidateSet, weather: WeatherSnapshot) -> CandidateSet:
        """Re-annotate every place after a weather change."""
        places = [annotate(p, weather.iconCode) for p in candidates.places]
        return candidates.model_copy(update={"weather": weather, "places": places})

    # internal

    def _search(
        self,
        location: str,
        categories: List[str],
        offset: int,
        slots: int,
        exclude: Set[str],
    ) -> Tuple[List[Place], List[Notice]]:
        """One search per category, first unseen result each, up to ``slots``."""
        picked: List[Place] = []
        notices: List[Notice] = []
        seen = set(exclude)
        deadline = self.clock() + self.budget

        for category in categories:
            if len(picked) >= slots:
                break

            remaining = deadline - self.clock()
            if remaining <= 0:
                logger.warning("Search budget of %.1fs spent before %s, synthesizing the rest", self.budget, category)
                notices.append(Notice(kind="timeout", message=MSG_TIMEOUT))
                break

            result = self.search_provider.search_places(location, category, offset, timeout=remaining)
            if not result.ok:
                if result.kind == ErrorKind.TIMEOUT:
                    logger.warning("Place search timed out at %s, synthesizing the rest", category)
                    notices.append(Notice(kind="timeout", message=MSG_TIMEOUT))
                    break
                logger.warning("Place search failed for %s %s: %s (%s)", location, category, result.kind, result.detail)
                continue

            for place in result.value or []:
                if place.id not in seen:
                    seen.add(place.id)
                    picked.append(place)
                    break
            else:
                logger.info("No new candidates for %s %s at offset %d", location, category, offset)

        return picked[:slots], notices

    def _pad(
        self,
        picked: List[Place],
        locked: List[Place],
        location: str,
        categories: List[str],
        offset: int,
    ) -> List[Place]:
        """Top ``picked`` up to fill the set, preferring unrepresented categories."""
        slots = SET_SIZE - len(locked)
        places = list(picked)
        if len(places) >= slots:
            return places

        represented = {p.category for p in locked + places}
        order = [c for c in categories if c not in represented] + categories

        i = 0
        while len(places) < slots:
            category = order[i % len(order)]
            slot = len(locked) + len(places)
            places.append(self._placeholder(location, category, offset, slot))
            i += 1

        logger.info("Padded %d placeholder place(s) for %s", slots - len(picked), location)
        return places

    def _placeholder(self, location: str, category: str, offset: int, slot: int) -> Place:
        lat, lng = region_center(location)
        place_id = f"mock_{offset}_{slot}"
        return Place(
            id=place_id,
            name=f"{location} {category} 추천",
            category=category,
            address=location,
            description="추천 장소",
            keywords=["추천"],
            rating=4.5,
            reviewCount=int(self.rng.integers(100, 1100)),
            lat=lat + float(self.rng.uniform(-PLACEHOLDER_SPREAD_DEG, PLACEHOLDER_SPREAD_DEG)),
            lng=lng + float(self.rng.uniform(-PLACEHOLDER_SPREAD_DEG, PLACEHOLDER_SPREAD_DEG)),
            isPlaceholder=True,
            imageUrl=fallback_image(category, place_id),
        )

    @staticmethod
    def _result(candidates: CandidateSet, notices: List[Notice], synthesized: bool) -> SelectionResult:
        if synthesized and not any(n.kind == "timeout" for n in notices):
            notices = notices + [Notice(kind="fallback", message=MSG_FALLBACK)]
        return SelectionResult(
            candidates=candidates,
            notices=notices,
            isEstimated=any(p.isPlaceholder for p in candidates.places),
        )
