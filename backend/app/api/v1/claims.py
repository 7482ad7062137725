"""Claim endpoints: resubmission and chain inspection."""

import json
from typing import Any

from fastapi import APIRouter, Depends, Query, Request
from pydantic import ValidationError

from app.core.errors import InvalidClaimInputError
from app.schemas.claim import (
    AuditIssueSchema,
    ChainAuditResponse,
    ClaimChainResponse,
    ResubmitRequest,
    ResubmitResponse,
)
from app.services.chain_audit import audit_chain
from app.services.chain_resolver import ChainResolver
from app.services.resubmission import ResubmissionEngine
from app.storage import ClaimStore, get_claim_store

router = APIRouter()

_MISSING_KEY_MESSAGE = "Both companyId and timesheetId are required"


async def _parse_resubmit_body(request: Request) -> ResubmitRequest:
    """Accept a JSON object body, or a JSON string that encodes one."""
    try:
        body: Any = await request.json()
        if isinstance(body, str):
            body = json.loads(body)
    except ValueError as e:
        raise InvalidClaimInputError("Invalid event body format") from e

    if not isinstance(body, dict):
        raise InvalidClaimInputError("Invalid event body format")

    try:
        return ResubmitRequest.model_validate(body)
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first["loc"])
        raise InvalidClaimInputError(f"Invalid {location}: {first['msg']}") from e


def _require_key(company_id: str | None, timesheet_id: str | None) -> None:
    if not company_id or not timesheet_id:
        raise InvalidClaimInputError(_MISSING_KEY_MESSAGE)


@router.post("/resubmit")
async def resubmit_claim(
    request: Request,
    store: ClaimStore = Depends(get_claim_store),
) -> ResubmitResponse:
    """Create a new version of a claim and link it to its source."""
    payload = await _parse_resubmit_body(request)

    result = await ResubmissionEngine(store).resubmit(
        payload.company_id,
        payload.timesheet_id,
        payload.updated_fields,
        payload.reason,
    )
    result.raise_for_status()

    return ResubmitResponse(
        message="Claim regenerated successfully",
        original_claim=result.original_claim,
        new_claim=result.new_claim,
        claim_chain=result.claim_chain,
    )


@router.get("/chain")
async def get_claim_chain(
    company_id: str | None = Query(None, alias="companyId"),
    timesheet_id: str | None = Query(None, alias="timesheetId"),
    store: ClaimStore = Depends(get_claim_store),
) -> ClaimChainResponse:
    """Return every version of the chain the given claim belongs to."""
    _require_key(company_id, timesheet_id)

    claims = await ChainResolver(store).resolve_chain(company_id, timesheet_id)
    return ClaimChainResponse(claims=claims, total_versions=len(claims))


@router.get("/chain/audit")
async def audit_claim_chain(
    company_id: str | None = Query(None, alias="companyId"),
    timesheet_id: str | None = Query(None, alias="timesheetId"),
    store: ClaimStore = Depends(get_claim_store),
) -> ChainAuditResponse:
    """Check the chain around a claim for broken links and version gaps."""
    _require_key(company_id, timesheet_id)

    walk = await ChainResolver(store).inspect(company_id, timesheet_id)
    audit = audit_chain(walk)
    return ChainAuditResponse(
        is_consistent=audit.is_consistent,
        total_versions=audit.total_versions,
        issues=[
            AuditIssueSchema(
                issue_type=i.issue_type, timesheet_id=i.timesheet_id, detail=i.detail
            )
            for i in audit.issues
        ],
    )
