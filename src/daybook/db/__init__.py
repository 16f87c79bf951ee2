"""
Daybook - Database access.

Supabase clients plus the RowStore interface the domain modules use.
"""

from daybook.db.adapter import Filter, RowStore, SupabaseRowStore
from daybook.db.client import get_authenticated_client, get_service_client

__all__ = [
    "Filter",
    "RowStore",
    "SupabaseRowStore",
    "get_authenticated_client",
    "get_service_client",
]
