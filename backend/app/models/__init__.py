"""SQLAlchemy models for the claim chain service."""

from app.models.base import (
    Base,
    TimestampMixin,
    get_engine,
    get_session_maker,
)
from app.models.claim import ClaimRecord
from app.models.enums import (
    AuditIssueType,
    BillingStatus,
    LinkType,
    ResubmissionStatus,
)

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    "get_engine",
    "get_session_maker",
    # Enums
    "AuditIssueType",
    "BillingStatus",
    "LinkType",
    "ResubmissionStatus",
    # Claims
    "ClaimRecord",
]
