from typing import Dict, List

UNSPLASH = "https://images.unsplash.com/"

CATEGORY_IMAGES: Dict[str, List[str]] = {
    "카페": [
        UNSPLASH + "photo-1495474472287-4d71bcdd2085",
        UNSPLASH + "photo-1501339847302-ac426a4a7cbb",
        UNSPLASH + "photo-1554118811-1e0d58224f24",
    ],
    "레스토랑": [
        UNSPLASH + "photo-1555939594-58d7cb561ad1",
        UNSPLASH + "photo-1414235077428-338989a2e8c0",
        UNSPLASH + "photo-1517248135467-4c7edcad34c4",
    ],
    "관광명소": [
        UNSPLASH + "photo-1513407030348-c983a97b98d8",
        UNSPLASH + "photo-1538485399081-7191377e8241",
        UNSPLASH + "photo-1517154421773-0529f29ea451",
    ],
    "박물관": [
        UNSPLASH + "photo-1565173877742-a47d02b5f9b2",
        UNSPLASH + "photo-1518998053901-5348d3961a04",
    ],
    "공원": [
        UNSPLASH + "photo-1519331379826-f10be5486c6f",
        UNSPLASH + "photo-1441974231531-c6227db76b6e",
    ],
    "쇼핑": [
        UNSPLASH + "photo-1441986300917-64674bd600d8",
        UNSPLASH + "photo-1483985988355-763728e1935b",
    ],
    "숙박": [
        UNSPLASH + "photo-1566073771259-6a8506099945",
        UNSPLASH + "photo-1542314831-068cd1dbfeeb",
    ],
    "액티비티": [
        UNSPLASH + "photo-1527004013197-933c4bb611b3",
        UNSPLASH + "photo-1551632811-561732d1e306",
    ],
}

DEFAULT_CATEGORY = "관광명소"


def string_hash(seed: str) -> int:
    """Java-style ``acc * 31 + code`` fold, kept within 32 bits."""
    acc = 0
    for ch in seed:
        acc = (acc * 31 + ord(ch)) % (2**32)
    return acc


def fallback_image(category: str, seed: str) -> str:
    """Deterministic stock image for a place without a photo."""
    images = CATEGORY_IMAGES.get(category) or CATEGORY_IMAGES[DEFAULT_CATEGORY]
    return images[string_hash(seed) % len(images)]
