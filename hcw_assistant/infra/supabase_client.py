import logging
import threading

from supabase import create_client, Client

from hcw_assistant.core.config import settings
from hcw_assistant.core.errors import ConfigError

logger = logging.getLogger("hcw.infra.supabase")

_client: Client | None = None
_client_lock = threading.Lock()


def get_supabase() -> Client:
    """
    Service-role client shared by every repository.

    Repositories run in worker threads (asyncio.to_thread), so creation is
    guarded; missing credentials raise ConfigError at startup.
    """
    global _client
    if _client is not None:
        return _client

    with _client_lock:
        if _client is None:
            if not settings.SUPABASE_URL or not settings.SUPABASE_SERVICE_ROLE_KEY:
                raise ConfigError("Missing SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY")
            _client = create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY)
            logger.info("supabase client created url=%s", settings.SUPABASE_URL)
    return _client
