import time
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from smartroute.api.deps import current_user, optional_user
from smartroute.db import kv_store
from smartroute.db.auth import AuthUser, sign_up
from smartroute.utils.logger import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/api", tags=["user-data"])


# Key Helpers


def now_ms() -> int:
    return int(time.time() * 1000)


def timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def owned_key(kind: str, user_id: str, key: str) -> str:
    """Reject keys outside the caller's namespace as not found."""
    if not key.startswith(f"{kind}:{user_id}:"):
        raise HTTPException(status_code=404, detail=f"{kind.capitalize()} not found")
    return key


def storage_unavailable() -> HTTPException:
    return HTTPException(status_code=503, detail="User storage unavailable")


# Auth


@router.post("/signup")
def signup(payload: dict):
    email = payload.get("email")
    password = payload.get("password")
    name = payload.get("name")
    if not email or not password or not name:
        raise HTTPException(status_code=400, detail="Email, password, and name are required")

    try:
        user = sign_up(email, password, name)
    except RuntimeError:
        raise storage_unavailable()
    except Exception as e:
        logger.warning(f"Sign up failed for {email}: {e}")
        raise HTTPException(status_code=400, detail=str(e))

    return {"success": True, "user": user}


# Bookmarks


@router.post("/bookmarks")
def add_bookmark(payload: dict, user: AuthUser = Depends(current_user)):
    name = payload.get("name")
    if not name:
        raise HTTPException(status_code=400, detail="name is required")

    key = f"bookmark:{user.user_id}:{now_ms()}"
    value = {
        "location": payload.get("location"),
        "name": name,
        "category": payload.get("category"),
        "placeId": payload.get("placeId"),
        "timestamp": timestamp(),
    }
    try:
        kv_store.set_value(key, value)
    except RuntimeError:
        raise storage_unavailable()
    except Exception as e:
        logger.exception("Error adding bookmark")
        raise HTTPException(status_code=500, detail=str(e))

    return {"success": True, "id": key}


@router.get("/bookmarks")
def list_bookmarks(user: AuthUser = Depends(current_user)):
    try:
        rows = kv_store.list_by_prefix(f"bookmark:{user.user_id}:")
    except RuntimeError:
        raise storage_unavailable()
    except Exception as e:
        logger.exception("Error listing bookmarks")
        raise HTTPException(status_code=500, detail=str(e))

    return {"bookmarks": [{"id": r["key"], **(r.get("value") or {})} for r in rows]}


@router.delete("/bookmarks/{bookmark_id}")
def delete_bookmark(bookmark_id: str, user: AuthUser = Depends(current_user)):
    key = owned_key("bookmark", user.user_id, bookmark_id)
    try:
        if kv_store.get_value(key) is None:
            raise HTTPException(status_code=404, detail="Bookmark not found")
        kv_store.delete_value(key)
    except HTTPException:
        raise
    except RuntimeError:
        raise storage_unavailable()
    except Exception as e:
        logger.exception(f"Error deleting bookmark {key}")
        raise HTTPException(status_code=500, detail=str(e))

    logger.info(f"Deleted bookmark {key}")
    return {"success": True}


# Itineraries


@router.post("/itineraries")
def save_itinerary(payload: dict, user: AuthUser = Depends(current_user)):
    """
    Save a confirmed route.

    Body:
        {"itinerary": {...}}: typically the places, route summary, transport
        mode and travel style the client just confirmed
    """
    itinerary = payload.get("itinerary")
    if not isinstance(itinerary, dict):
        raise HTTPException(status_code=400, detail="itinerary object is required")

    key = f"itinerary:{user.user_id}:{now_ms()}"
    try:
        kv_store.set_value(key, {**itinerary, "timestamp": timestamp()})
    except RuntimeError:
        raise storage_unavailable()
    except Exception as e:
        logger.exception("Error saving itinerary")
        raise HTTPException(status_code=500, detail=str(e))

    logger.info(f"Itinerary saved: {key}")
    return {"success": True, "id": key}


@router.get("/itineraries")
def list_itineraries(user: AuthUser = Depends(current_user)):
    try:
        rows = kv_store.list_by_prefix(f"itinerary:{user.user_id}:")
    except RuntimeError:
        raise storage_unavailable()
    except Exception as e:
        logger.exception("Error listing itineraries")
        raise HTTPException(status_code=500, detail=str(e))

    return {"itineraries": [{"id": r["key"], **(r.get("value") or {})} for r in rows]}


@router.delete("/itineraries/{itinerary_id}")
def delete_itinerary(itinerary_id: str, user: AuthUser = Depends(current_user)):
    key = owned_key("itinerary", user.user_id, itinerary_id)
    try:
        if kv_store.get_value(key) is None:
            raise HTTPException(status_code=404, detail="Itinerary not found")
        kv_store.delete_value(key)
    except HTTPException:
        raise
    except RuntimeError:
        raise storage_unavailable()
    except Exception as e:
        logger.exception(f"Error deleting itinerary {key}")
        raise HTTPException(status_code=500, detail=str(e))

    logger.info(f"Deleted itinerary {key}")
    return {"success": True}


# Survey preferences


@router.post("/preferences")
def save_preference(payload: dict, user: Optional[AuthUser] = Depends(optional_user)):
    """
    Store the survey outcome.

    Signed-in users are keyed by their account; anonymous clients pass an
    opaque ``userId`` (e.g. a device id).
    """
    owner = user.user_id if user else payload.get("userId")
    travel_style = payload.get("travelStyle")
    if not owner or not travel_style:
        raise HTTPException(status_code=400, detail="userId and travelStyle are required")

    try:
        kv_store.set_value(
            f"preference:{owner}",
            {
                "travelStyle": travel_style,
                "answers": payload.get("answers") or [],
                "timestamp": timestamp(),
            },
        )
    except RuntimeError:
        raise storage_unavailable()
    except Exception as e:
        logger.exception("Error saving preference")
        raise HTTPException(status_code=500, detail=str(e))

    return {"success": True}


@router.get("/preferences/{user_id}")
def get_preference(user_id: str):
    try:
        preference = kv_store.get_value(f"preference:{user_id}")
    except RuntimeError:
        raise storage_unavailable()
    except Exception as e:
        logger.exception("Error getting preference")
        raise HTTPException(status_code=500, detail=str(e))

    if preference is None:
        raise HTTPException(status_code=404, detail="Preference not found")
    return preference
