"""SQLAlchemy-backed claim store."""

from __future__ import annotations

import copy
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.claim import ClaimRecord
from app.storage.base import ClaimDocument

logger = logging.getLogger(__name__)


class SqlClaimStore:
    """Claim store over the ``claim_record`` table.

    Each ``put`` commits on its own, so two puts are two independent
    transactions, matching the no-multi-item-atomicity model the chain
    logic is written against.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, company_id: str, timesheet_id: str) -> ClaimDocument | None:
        row = await self.session.get(ClaimRecord, (company_id, timesheet_id))
        if row is None:
            return None
        # Callers build new records from what they read; never hand out the
        # ORM-tracked dict itself.
        return copy.deepcopy(row.document)

    async def put(self, record: ClaimDocument) -> None:
        row = ClaimRecord(
            company_id=record["companyId"],
            timesheet_id=record["timesheetId"],
            document=copy.deepcopy(record),
        )
        try:
            await self.session.merge(row)
            await self.session.commit()
        except Exception:
            # The session must stay usable for the next put.
            await self.session.rollback()
            raise
        logger.debug(f"Stored claim {record['companyId']}/{record['timesheetId']}")
