# comics_api/lib/auth.py
from typing import Optional

from fastapi import Header

from comics_api.errors import Unauthenticated


def current_user_id(x_user_id: Optional[str] = Header(None, alias="X-User-Id")) -> str:
    """
    The auth layer in front of this API resolves the session and forwards the
    user id. No header, no user.
    """
    user_id = (x_user_id or "").strip()
    if not user_id:
        raise Unauthenticated()
    return user_id


def byok_api_key(x_api_key: Optional[str] = Header(None, alias="X-API-Key")) -> Optional[str]:
    """Caller's own image-service key, if any. Bypasses the free tier quota."""
    key = (x_api_key or "").strip()
    return key or None
