from typing import Optional

from supabase import create_client, Client
from smartroute.core.config import settings
from smartroute.utils.logger import get_logger

logger = get_logger(__name__)

_client: Optional[Client] = None


def init_supabase(url: Optional[str] = None, key: Optional[str] = None) -> Optional[Client]:
    """Connect to the configured project; None when unconfigured or unreachable."""
    global _client
    url = url or settings.SUPABASE_URL
    key = key or settings.SUPABASE_KEY

    if not url or not key:
        logger.warning("SUPABASE_URL or SUPABASE_KEY not set, user data endpoints disabled")
        return None

    try:
        _client = create_client(url, key)
    except Exception as e:
        logger.error(f"Failed to initialize Supabase: {e}")
        return None

    logger.info("Supabase client initialized successfully")
    return _client


def is_connected() -> bool:
    return _client is not None


def get_supabase() -> Client:
    """Shared client, connected on first use."""
    if _client is None and init_supabase() is None:
        raise RuntimeError("Supabase not connected")
    return _client
