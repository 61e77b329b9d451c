from supabase import create_client, Client
from app.core.config import get_settings
from typing import Optional

# Global client instance (lazy initialization)
_supabase_admin_client: Optional[Client] = None


def get_supabase_admin_client() -> Client:
    """Create a Supabase client with the service role key.

    The portal has no per-user row level security; access control happens in
    the API layer, so every request shares the service role client.
    """
    settings = get_settings()
    return create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_KEY)


def get_db() -> Client:
    """FastAPI dependency returning the shared storage client (created lazily)."""
    global _supabase_admin_client
    if _supabase_admin_client is None:
        _supabase_admin_client = get_supabase_admin_client()
    return _supabase_admin_client
