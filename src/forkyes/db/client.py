"""
ForkYes - Supabase Client.

Three flavours of client:
- get_client(): anon key, shared
- get_service_client(): service role key, shared; used to validate JWTs
- get_authenticated_client(token): anon key + the user's JWT, so row level
  security applies. Created per request.
"""

from supabase import Client, create_client

from forkyes.config import settings

# Singleton client instances
_client: Client | None = None
_service_client: Client | None = None


def get_client() -> Client:
    """Get the shared anon-key Supabase client."""
    global _client

    if _client is None:
        _client = create_client(
            settings.supabase_url,
            settings.supabase_anon_key,
        )

    return _client


def get_service_client() -> Client:
    """Get the shared service-role Supabase client. Bypasses RLS."""
    global _service_client

    if _service_client is None:
        _service_client = create_client(
            settings.supabase_url,
            settings.supabase_service_role_key,
        )

    return _service_client


def get_authenticated_client(access_token: str) -> Client:
    """Create a client that acts as the user owning `access_token`."""
    client = create_client(
        settings.supabase_url,
        settings.supabase_anon_key,
    )
    client.postgrest.auth(access_token)
    return client
