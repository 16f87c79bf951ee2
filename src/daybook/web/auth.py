"""
Authentication utilities for FastAPI routes.

Shared auth dependencies used by all route modules.
"""

import logging

from fastapi import Depends, Header, HTTPException
from pydantic import BaseModel

from daybook.db.adapter import RowStore, SupabaseRowStore
from daybook.db.client import get_authenticated_client, get_service_client

logger = logging.getLogger(__name__)


class AuthenticatedUser(BaseModel):
    """Authenticated user info from Supabase JWT."""
    id: str
    email: str | None
    access_token: str


async def get_current_user(authorization: str = Header(None)) -> AuthenticatedUser:
    """
    Validate Supabase JWT and extract user info.

    Expects Authorization header: "Bearer <access_token>"
    """
    if not authorization:
        raise HTTPException(status_code=401, detail="Missing authorization header")

    if not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Invalid authorization format")

    access_token = authorization[7:]  # Remove "Bearer " prefix

    try:
        client = get_service_client()
        user_response = client.auth.get_user(access_token)
    except Exception as e:
        logger.warning(f"Auth validation failed: {e}")
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    if not user_response or not user_response.user:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    user = user_response.user
    return AuthenticatedUser(
        id=user.id,
        email=user.email,
        access_token=access_token,
    )


def get_user_store(user: AuthenticatedUser = Depends(get_current_user)) -> RowStore:
    """Row store acting as the signed-in user (RLS applies)."""
    return SupabaseRowStore(get_authenticated_client(user.access_token))
