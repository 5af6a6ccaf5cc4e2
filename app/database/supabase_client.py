from supabase import create_client, Client
from app.config.settings import settings


class SupabaseClient:
    _client: Client = None

    @classmethod
    def get_client(cls) -> Client:
        """Client with service_role key when configured; users and profiles are only touched server-side."""
        if cls._client is None:
            key = settings.supabase_service_role_key or settings.supabase_key
            if not settings.supabase_url or not key:
                raise RuntimeError("Missing Supabase configuration: SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY")
            cls._client = create_client(settings.supabase_url, key)
        return cls._client


def get_supabase() -> Client:
    return SupabaseClient.get_client()
