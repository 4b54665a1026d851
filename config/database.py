"""
Database connection management.

Provides the Supabase client singleton backing the sheet store.
"""

from supabase import create_client, Client
from functools import lru_cache
import structlog

from config.settings import settings

logger = structlog.get_logger(__name__)


class StoreConnectionError(Exception):
    """Failed to connect to the sheet store."""
    pass


@lru_cache()
def get_supabase_client() -> Client:
    """
    Get cached Supabase client instance.

    Uses lru_cache to ensure only one client is created.
    Call get_supabase_client.cache_clear() to reconnect.

    Returns:
        Client: Supabase client

    Raises:
        StoreConnectionError: If credentials are missing or connection fails
    """
    if not settings.supabase_configured:
        logger.warning("supabase_not_configured")
        raise StoreConnectionError("SUPABASE_URL and SUPABASE_KEY are not configured")

    try:
        logger.info(
            "connecting_to_supabase",
            url=settings.supabase_url[:30] + "..."  # Log partial URL only
        )

        client = create_client(
            settings.supabase_url,
            settings.supabase_key
        )

        logger.info("supabase_connected", table=settings.sheets_table)

        return client

    except Exception as e:
        logger.error(
            "supabase_connection_failed",
            error=str(e),
            error_type=type(e).__name__
        )
        raise StoreConnectionError(f"Failed to connect to Supabase: {e}") from e


# Convenience alias
db = get_supabase_client


# ===================
# HELPER FUNCTIONS
# ===================

def check_connection() -> dict:
    """
    Check sheet store health.

    Returns:
        dict: Connection status with details
    """
    try:
        client = get_supabase_client()

        sheets = (
            client.table(settings.sheets_table)
            .select("id", count="exact")
            .execute()
        )

        return {
            "status": "healthy",
            "sheets_count": sheets.count
        }

    except Exception as e:
        return {
            "status": "unhealthy",
            "error": str(e)
        }


def reset_connection():
    """
    Reset the cached database connection.

    Call this if connection becomes stale or after config changes.
    """
    get_supabase_client.cache_clear()
    logger.info("database_connection_reset")
