"""
Indoor/outdoor classification of places from their name and address.

This is a fixed keyword lookup, not a model. A place is indoor only when its
text hits the indoor list and misses the outdoor list; every other case,
including no hit at all, is outdoor.
"""

INDOOR_KEYWORDS = (
    # culture
    "박물관", "미술관", "갤러리", "전시관", "기념관", "과학관", "도서관",
    "아쿠아리움", "수족관", "극장", "공연장", "영화관", "시네마",
    # shopping
    "쇼핑", "백화점", "아울렛", "면세점",
    # wellness
    "스파", "사우나", "찜질방", "온천",
    # food & drink
    "카페", "커피", "베이커리", "레스토랑", "식당", "맛집",
    # buildings
    "빌딩", "타워", "홀", "센터",
    # lodging
    "숙박", "호텔", "리조트", "펜션", "게스트하우스", "한옥스테이",
    # english
    "museum", "gallery", "aquarium", "theater", "theatre", "cinema",
    "mall", "department store", "spa", "sauna", "cafe", "café", "coffee",
    "restaurant", "building", "tower", "hall", "hotel", "resort",
)

OUTDOOR_KEYWORDS = (
    # nature
    "공원", "해변", "해수욕장", "해안", "바다", "등산", "산책로", "둘레길",
    "올레", "오름", "폭포", "계곡", "섬", "호수", "저수지", "한강", "강변",
    "숲", "휴양림", "수목원", "식물원", "동물원", "정원",
    # viewpoints and streets
    "전망대", "광장", "거리", "골목", "다리", "대교",
    # heritage
    "고궁", "궁궐", "사찰", "향교", "성곽", "민속촌", "한옥마을",
    # leisure
    "테마파크", "놀이공원", "캠핑", "글램핑", "레일바이크",
    # english
    "park", "beach", "mountain", "hiking", "trail", "waterfall", "valley",
    "island", "zoo", "botanical", "garden", "lake", "river", "sea", "forest",
    "observatory", "plaza", "square", "street", "bridge", "palace", "temple",
    "folk village", "theme park",
)


def _matches(text: str, keywords) -> bool:
    return any(k in text for k in keywords)


def classify(name: str, address: str = "") -> bool:
    """Return True when the place reads as indoor."""
    text = f"{name or ''} {address or ''}".lower()
    indoor = _matches(text, INDOOR_KEYWORDS)
    outdoor = _matches(text, OUTDOOR_KEYWORDS)

    # Both or neither falls through to outdoor
    return indoor and not outdoor
