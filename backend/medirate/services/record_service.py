"""
MediRate Admin Backend — Rate Development Record Service
==========================================================

What:  Deletes bills, provider alerts and state plan amendments by key.
How:   One `DELETE ... WHERE key = :value` statement per call, committed
       inside the service so a commit failure is reported like any other
       database failure.
Who:   Called by the DELETE /api/admin/* route handlers.

Deletes are idempotent: a key that matches no row still succeeds. The
caller gets the same confirmation whether the row existed or not.
"""

import logging
from typing import Any

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from medirate.exceptions import DatabaseError, ValidationError
from medirate.models.rate_development import Bill, ProviderAlert, StatePlanAmendment

logger = logging.getLogger(__name__)


class RecordService:
    """
    Delete-by-equality for the rate development tables.

    Each public method validates its key first; a missing key raises
    ValidationError before any statement is issued.
    """

    async def delete_bill(self, db: AsyncSession, url: str | None) -> str:
        if not url:
            raise ValidationError("Bill URL is required", field="url")
        await self._delete(db, Bill.url, url, entity="bill")
        return "Bill deleted successfully"

    async def delete_provider_alert(self, db: AsyncSession, alert_id: int | None) -> str:
        if alert_id is None:
            raise ValidationError("Provider alert ID is required", field="id")
        await self._delete(db, ProviderAlert.id, alert_id, entity="provider alert")
        return "Provider alert deleted successfully"

    async def delete_state_plan_amendment(
        self, db: AsyncSession, amendment_id: int | None
    ) -> str:
        if amendment_id is None:
            raise ValidationError("State plan amendment ID is required", field="id")
        await self._delete(db, StatePlanAmendment.id, amendment_id, entity="state plan amendment")
        return "State plan amendment deleted successfully"

    async def _delete(self, db: AsyncSession, column, value: Any, entity: str) -> int:
        """Runs the delete and returns the affected row count (0 is fine)."""
        try:
            result = await db.execute(delete(column.class_).where(column == value))
            await db.commit()
        except Exception as e:
            logger.error("Error deleting %s %r: %s", entity, value, str(e))
            raise DatabaseError(
                message=f"Failed to delete {entity}",
                context={"entity": entity, "error_type": type(e).__name__},
            ) from e

        rowcount = result.rowcount or 0
        logger.info("Deleted %s %r (%s row(s))", entity, value, rowcount)
        return rowcount


# ── Singleton Instance ────────────────────────────────────────────────────
record_service = RecordService()
