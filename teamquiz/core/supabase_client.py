# teamquiz/core/supabase_client.py
from supabase import create_client, Client
from .config import settings
from .errors import UnavailableError

_supabase: Client | None = None


def get_supabase() -> Client:
    global _supabase
    if _supabase is None:
        if not settings.supabase_configured:
            raise UnavailableError("Quiz library is not configured (SUPABASE_URL / SUPABASE_SERVICE_ROLE_KEY)")
        # settings hold AnyUrl, the client wants str
        _supabase = create_client(str(settings.SUPABASE_URL), str(settings.SUPABASE_SERVICE_ROLE_KEY))
    return _supabase
