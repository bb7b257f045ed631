from dataclasses import dataclass
from typing import Any, Dict, Optional

from supabase import Client
from smartroute.db.supabase_client import get_supabase
from smartroute.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class AuthUser:
    user_id: str
    email: Optional[str] = None


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    """'Bearer abc' → 'abc'; anything else → None."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def verify_token(access_token: Optional[str], client: Optional[Client] = None) -> Optional[AuthUser]:
    """Resolve a Supabase access token to its user, or None when invalid."""
    if not access_token:
        return None

    client = client or get_supabase()
    try:
        resp = client.auth.get_user(access_token)
    except Exception as e:
        logger.info(f"Token verification failed: {e}")
        return None

    user = getattr(resp, "user", None)
    if user is None:
        return None
    return AuthUser(user_id=user.id, email=getattr(user, "email", None))


def sign_up(email: str, password: str, name: str, client: Optional[Client] = None) -> Dict[str, Any]:
    """
    Create a confirmed user through the admin API.

    Email confirmation is skipped because no mail server is configured.
    """
    resp = (client or get_supabase()).auth.admin.create_user(
        {
            "email": email,
            "password": password,
            "user_metadata": {"name": name},
            "email_confirm": True,
        }
    )
    user = resp.user
    logger.info(f"Signed up user {user.id}")
    return {"id": user.id, "email": user.email, "name": name}
