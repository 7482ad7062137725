"""Pydantic schemas for claim resubmission and chain endpoints.

Claim records themselves stay plain dicts: their domain fields are
arbitrary, and only the link/history entries below have a fixed shape.
All schemas serialise with camelCase keys to match the stored records.
"""

from typing import Any

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from app.models.enums import AuditIssueType, LinkType

_CAMEL = {"alias_generator": to_camel, "populate_by_name": True}


class FieldChange(BaseModel):
    """One field-level change recorded on a resubmission.

    ``old_value`` is left unset (and omitted on dump) when the field did not
    exist on the source claim, so a field addition is distinguishable from
    a field that previously held ``null``.
    """

    field: str
    old_value: Any = None
    new_value: Any = None
    timestamp: str

    model_config = _CAMEL

    def to_record(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_unset=True)


class ClaimLink(BaseModel):
    """Pointer from one claim to its neighbour in the chain."""

    company_id: str
    timesheet_id: str
    version: int
    timestamp: str
    reason: str
    changes: list[dict[str, Any]] = []

    model_config = _CAMEL


class ResubmissionHistoryEntry(ClaimLink):
    """Append-only resubmissionHistory entry."""

    type: LinkType
    status: str | None = None


class VersionHistoryEntry(BaseModel):
    """Append-only versionHistory snapshot."""

    version: int
    timesheet_id: str
    timestamp: str | None = None
    status: str | None = None
    changes: list[dict[str, Any]] = []

    model_config = _CAMEL


# =============================================================================
# Chain views
# =============================================================================


class ChainVersionSchema(BaseModel):
    """One claim version as listed in a forward-resolved chain."""

    version: int
    timesheet_id: str
    status: str | None = None
    timestamp: str | None = None
    changes: list[dict[str, Any]] = []
    reason: str | None = None

    model_config = _CAMEL


class ClaimChainSummarySchema(BaseModel):
    """Forward-resolved chain rooted at the original claim."""

    original_claim: dict[str, Any]
    versions: list[ChainVersionSchema]

    model_config = _CAMEL


class ClaimChainResponse(BaseModel):
    """Bidirectionally resolved chain around a requested claim."""

    claims: list[dict[str, Any]]
    total_versions: int

    model_config = _CAMEL


# =============================================================================
# Resubmission
# =============================================================================


class ResubmitRequest(BaseModel):
    """Resubmission request body.

    Every field is optional at parse time; presence is checked by the
    resubmission engine so missing fields produce the specific 400 messages.
    """

    company_id: str | None = None
    timesheet_id: str | None = None
    updated_fields: dict[str, Any] | None = None
    reason: str | None = None

    model_config = _CAMEL


class ResubmitResponse(BaseModel):
    message: str
    original_claim: dict[str, Any]
    new_claim: dict[str, Any]
    claim_chain: ClaimChainSummarySchema | None = None

    model_config = _CAMEL


# =============================================================================
# Audit
# =============================================================================


class AuditIssueSchema(BaseModel):
    issue_type: AuditIssueType
    timesheet_id: str
    detail: str

    model_config = _CAMEL


class ChainAuditResponse(BaseModel):
    is_consistent: bool
    total_versions: int
    issues: list[AuditIssueSchema]

    model_config = _CAMEL
