"""
Daybook - Supabase Client.

Low-level database access. Every row store is built on one of these clients.
"""

from supabase import Client, create_client

from daybook.config import settings

# Singleton client instance
_service_client: Client | None = None


def get_service_client() -> Client:
    """
    Get the service-role Supabase client.

    Bypasses RLS - used for token validation and the dev CLI only.
    Falls back to the anon key when no service key is configured.
    """
    global _service_client

    if _service_client is None:
        _service_client = create_client(
            settings.supabase_url,
            settings.supabase_service_role_key or settings.supabase_anon_key,
        )

    return _service_client


def get_authenticated_client(access_token: str) -> Client:
    """
    Get a client that acts as the signed-in user.

    A fresh client per request: the user's JWT is attached to PostgREST
    so row-level security scopes every query to that user.
    """
    client = create_client(settings.supabase_url, settings.supabase_anon_key)
    client.postgrest.auth(access_token)
    return client
