"""ClaimRecord model: one row per timesheet claim version.

The table is used as a plain key-value store: the composite key
``(company_id, timesheet_id)`` addresses a row, and the whole claim record
(domain fields, version links and audit trails) lives in ``document``.
Chain links are stored inside the document as identifier pairs, never as
foreign keys, so every hop of a chain walk is an independent lookup.
"""

from typing import Any

from sqlalchemy import JSON, Index, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, TimestampMixin


class ClaimRecord(Base, TimestampMixin):
    """Stored claim document keyed by company and timesheet."""

    __tablename__ = "claim_record"

    company_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    timesheet_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    document: Mapped[dict[str, Any]] = mapped_column(
        JSON().with_variant(JSONB(), "postgresql"),
        nullable=False,
    )

    __table_args__ = (Index("idx_claim_record_company", "company_id"),)

    def __repr__(self) -> str:
        return f"<ClaimRecord(company={self.company_id}, timesheet={self.timesheet_id})>"
