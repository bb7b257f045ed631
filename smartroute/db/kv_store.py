"""
Key-value persistence on a single Supabase table.

The table holds two columns, ``key`` (text, primary key) and ``value``
(jsonb). Keys are namespaced by owner, e.g. ``bookmark:{user_id}:{ms}``.
"""

from typing import Any, Dict, List, Optional

from supabase import Client
from smartroute.core.config import settings
from smartroute.db.supabase_client import get_supabase


def _table(client: Optional[Client] = None):
    return (client or get_supabase()).table(settings.KV_TABLE)


def set_value(key: str, value: Dict[str, Any], client: Optional[Client] = None) -> None:
    _table(client).upsert({"key": key, "value": value}).execute()


def get_value(key: str, client: Optional[Client] = None) -> Optional[Dict[str, Any]]:
    resp = _table(client).select("value").eq("key", key).maybe_single().execute()
    # maybe_single() yields no response at all for a missing row on some versions
    if resp is None or not resp.data:
        return None
    return resp.data["value"]


def delete_value(key: str, client: Optional[Client] = None) -> None:
    _table(client).delete().eq("key", key).execute()


def list_by_prefix(prefix: str, client: Optional[Client] = None) -> List[Dict[str, Any]]:
    """All entries whose key starts with ``prefix``, as ``{"key", "value"}`` rows."""
    resp = _table(client).select("key, value").like("key", f"{prefix}%").execute()
    return resp.data or []
