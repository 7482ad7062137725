"""Pydantic schemas module.

This module contains Pydantic models used for:
- API request/response validation
- Link and history entries written into claim records

Naming convention:
- Schema suffix for API views
- Plain names (ClaimLink, FieldChange, ...) for record sub-documents
"""

from app.schemas.claim import (
    AuditIssueSchema,
    ChainAuditResponse,
    ChainVersionSchema,
    ClaimChainResponse,
    ClaimChainSummarySchema,
    ClaimLink,
    FieldChange,
    ResubmissionHistoryEntry,
    ResubmitRequest,
    ResubmitResponse,
    VersionHistoryEntry,
)

__all__ = [
    # Record sub-documents
    "ClaimLink",
    "FieldChange",
    "ResubmissionHistoryEntry",
    "VersionHistoryEntry",
    # Chain views
    "ChainVersionSchema",
    "ClaimChainResponse",
    "ClaimChainSummarySchema",
    # Resubmission
    "ResubmitRequest",
    "ResubmitResponse",
    # Audit
    "AuditIssueSchema",
    "ChainAuditResponse",
]
