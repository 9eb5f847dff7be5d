"""
Supabase client for the applications table.

One client per process, created on first use. The health check counts
application rows so /health and startup logs show whether the table is
reachable, not just the host.
"""

from supabase import create_client, Client
from functools import lru_cache
import structlog

from config.settings import settings

logger = structlog.get_logger(__name__)


class DatabaseConnectionError(Exception):
    """Supabase client could not be created."""


@lru_cache()
def get_supabase_client() -> Client:
    """
    Shared Supabase client, preferring the service role key.

    Raises:
        DatabaseConnectionError: Bad URL or key
    """
    key_kind = "service" if settings.supabase_service_key else "anon"
    logger.info("supabase_client_creating", key=key_kind)

    try:
        client = create_client(
            settings.supabase_url,
            settings.supabase_service_key or settings.supabase_key
        )
    except Exception as e:
        logger.error(
            "supabase_client_failed",
            error=str(e),
            error_type=type(e).__name__
        )
        raise DatabaseConnectionError(f"Cannot create Supabase client: {e}") from e

    return client


def check_connection() -> dict:
    """
    Probe the applications table.

    Returns:
        {"status": "healthy", "applications_count": n} or
        {"status": "unhealthy", "error": message}
    """
    try:
        result = (
            get_supabase_client()
            .table(settings.applications_table)
            .select("id", count="exact")
            .limit(1)
            .execute()
        )
    except Exception as e:
        logger.warning("database_check_failed", error=str(e))
        return {"status": "unhealthy", "error": str(e)}

    return {"status": "healthy", "applications_count": result.count}


def reset_connection():
    """Drop the cached client; the next call reconnects."""
    get_supabase_client.cache_clear()
    logger.info("supabase_client_reset")
