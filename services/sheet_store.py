"""
Sheet store: one persisted product sheet per identifier.

Backed by the Supabase table `product_sheets` (id text primary key,
data jsonb). Writes are upserts; the latest write for an identifier wins
and no history is kept.
"""

from typing import Optional
import structlog

from config import get_supabase_client, settings
from exceptions import DatabaseError, SheetPersistenceError

logger = structlog.get_logger(__name__)

# Supabase caps a select at 1000 rows
PAGE_SIZE = 1000


class SheetStore:
    """
    Persistence for product sheets.

    Usage:
        store = get_sheet_store()
        store.put("JK100", {"id": "JK100", "name": "Shirt", ...})
        sheets = store.get_all()
    """

    def __init__(self):
        self.table = settings.sheets_table

    @property
    def db(self):
        # Resolved per call so a misconfigured store fails the write, not startup
        return get_supabase_client()

    # ===================
    # WRITE OPERATIONS
    # ===================

    def put(self, product_id: str, sheet: dict[str, str]) -> None:
        """
        Insert or overwrite the sheet for an identifier.

        Raises:
            SheetPersistenceError: If the write fails
        """
        logger.debug("persisting_sheet", product_id=product_id)

        try:
            (
                self.db.table(self.table)
                .upsert({"id": product_id, "data": sheet}, on_conflict="id")
                .execute()
            )
        except Exception as e:
            logger.error(
                "sheet_persist_failed",
                product_id=product_id,
                error=str(e),
                error_type=type(e).__name__
            )
            raise SheetPersistenceError(product_id, str(e))

        logger.info("sheet_persisted", product_id=product_id)

    # ===================
    # READ OPERATIONS
    # ===================

    def get_all(self) -> dict[str, dict[str, str]]:
        """
        Every persisted sheet keyed by identifier.

        Read page by page until a short page comes back.

        Raises:
            DatabaseError: If the read fails
        """
        sheets: dict[str, dict[str, str]] = {}
        offset = 0

        while True:
            try:
                result = (
                    self.db.table(self.table)
                    .select("id, data")
                    .order("id")
                    .range(offset, offset + PAGE_SIZE - 1)
                    .execute()
                )
            except Exception as e:
                logger.error("get_sheets_failed", offset=offset, error=str(e))
                raise DatabaseError("select", str(e))

            for row in result.data:
                sheets[row["id"]] = dict(row.get("data") or {})

            if len(result.data) < PAGE_SIZE:
                break
            offset += PAGE_SIZE

        logger.info("sheets_loaded", count=len(sheets))
        return sheets

    def get(self, product_id: str) -> Optional[dict[str, str]]:
        """Persisted sheet for an identifier, or None."""
        try:
            result = (
                self.db.table(self.table)
                .select("id, data")
                .eq("id", product_id)
                .execute()
            )
        except Exception as e:
            logger.error("get_sheet_failed", product_id=product_id, error=str(e))
            raise DatabaseError("select", str(e))

        if not result.data:
            return None
        return dict(result.data[0].get("data") or {})

    def count(self) -> int:
        """Count persisted sheets."""
        try:
            result = self.db.table(self.table).select("id", count="exact").execute()
            return result.count or 0
        except Exception as e:
            logger.error("count_sheets_failed", error=str(e))
            raise DatabaseError("count", str(e))


# Singleton instance for convenience
_sheet_store: Optional[SheetStore] = None


def get_sheet_store() -> SheetStore:
    """Get or create SheetStore instance."""
    global _sheet_store
    if _sheet_store is None:
        _sheet_store = SheetStore()
    return _sheet_store
