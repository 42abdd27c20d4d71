# app/core/supabase_client.py
from functools import lru_cache

from supabase import create_client, Client


@lru_cache
def supabase_admin(url: str, service_role_key: str | None) -> Client:
    """
    Create a Supabase client with the service role key.

    Use cases:
      - uploading to / deleting from the product image bucket
      - listing folders when a product is removed

    The client is cached per (url, key) pair so every request in the
    process shares one HTTP connection pool.

    WARNING:
      - Never expose service role key to frontend.
      - Only backend should call this.

    Raises:
        RuntimeError: if the service role key is not set.
    """
    if not service_role_key:
        raise RuntimeError("Missing SUPABASE_SERVICE_ROLE_KEY in .env")
    return create_client(url, service_role_key)
