"""Claim resubmission: create a new claim version and cross-link it.

A claim is never edited in place. Resubmitting it writes a new record
(next version, ``billingStatus=Submitted``, back-link to its source) and
then rewrites the source (``billingStatus=Resubmitted``, forward-link to the
new record). Both records get one new entry in ``resubmissionHistory`` and
``versionHistory``.

The two writes are independent. If the second fails the chain is left with
a back-link but no forward-link; the result reports this as
``PARTIALLY_APPLIED`` and ``ResubmissionEngine.complete`` can finish it.
Concurrent resubmissions of the same source are not serialised: both read
the same state and the last write of the source record wins.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from app.core.errors import (
    ClaimNotFoundError,
    ClaimStorageError,
    InvalidClaimInputError,
    ResubmissionWriteError,
)
from app.models.enums import BillingStatus, LinkType, ResubmissionStatus
from app.schemas.claim import (
    ClaimChainSummarySchema,
    ClaimLink,
    FieldChange,
    ResubmissionHistoryEntry,
    VersionHistoryEntry,
)
from app.services.chain_resolver import ChainResolver, claim_version
from app.storage.base import ClaimDocument, ClaimStore

logger = logging.getLogger(__name__)

REGENERATE_ERROR_MESSAGE = "Error regenerating claim"


def utc_timestamp() -> str:
    """Current UTC time as ISO-8601 with millisecond precision and a Z suffix."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def new_timesheet_id() -> str:
    return str(uuid.uuid4())


# =============================================================================
# Pure record construction
# =============================================================================


@dataclass
class ResubmissionPlan:
    """The two records a resubmission writes."""

    new_claim: ClaimDocument
    updated_original: ClaimDocument
    original_claim_id: str
    changes: list[dict[str, Any]]


def compute_changes(
    current: ClaimDocument, updated_fields: Mapping[str, Any], timestamp: str
) -> list[dict[str, Any]]:
    """One change entry per updated field.

    Fields missing from ``current`` are additions: their entry has no
    ``oldValue`` key at all.
    """
    changes = []
    for name, new_value in updated_fields.items():
        values: dict[str, Any] = {"new_value": new_value}
        if name in current:
            values["old_value"] = current[name]
        changes.append(
            FieldChange(field=name, timestamp=timestamp, **values).to_record()
        )
    return changes


def _dump(model: Any) -> dict[str, Any]:
    return model.model_dump(by_alias=True, mode="json")


def plan_resubmission(
    current: ClaimDocument,
    company_id: str,
    updated_fields: Mapping[str, Any],
    reason: str,
    new_id: str,
    timestamp: str,
) -> ResubmissionPlan:
    """Build the new claim and the updated source claim.

    ``current`` is not modified.
    """
    prior_version = claim_version(current)
    new_version = prior_version + 1
    source_id = current["timesheetId"]
    original_claim_id = current.get("originalClaimId") or source_id
    changes = compute_changes(current, updated_fields, timestamp)

    back_link = ClaimLink(
        company_id=company_id,
        timesheet_id=source_id,
        version=prior_version,
        timestamp=timestamp,
        reason=reason,
        changes=changes,
    )
    forward_link = ClaimLink(
        company_id=company_id,
        timesheet_id=new_id,
        version=new_version,
        timestamp=timestamp,
        reason=reason,
        changes=changes,
    )

    prior_history = list(current.get("resubmissionHistory") or [])
    prior_versions = list(current.get("versionHistory") or [])
    source_back_link = current.get("resubmittedFrom") or {}

    new_claim = {**current, **updated_fields}
    # A brand-new version has no successor yet, even if its source had one.
    new_claim.pop(LinkType.RESUBMITTED_TO.value, None)
    new_claim.update(
        {
            "timesheetId": new_id,
            "billingStatus": BillingStatus.SUBMITTED.value,
            "version": new_version,
            "originalClaimId": original_claim_id,
            "resubmittedFrom": _dump(back_link),
            "resubmissionHistory": prior_history
            + [
                _dump(
                    ResubmissionHistoryEntry(
                        type=LinkType.RESUBMITTED_FROM,
                        status=current.get("billingStatus"),
                        **back_link.model_dump(),
                    )
                )
            ],
            "versionHistory": prior_versions
            + [
                _dump(
                    VersionHistoryEntry(
                        version=prior_version,
                        timesheet_id=source_id,
                        timestamp=current.get("updatedAt"),
                        status=current.get("billingStatus"),
                        changes=source_back_link.get("changes") or [],
                    )
                )
            ],
            "updatedAt": timestamp,
            "createdAt": current.get("createdAt") or timestamp,
        }
    )

    updated_original = {
        **current,
        "billingStatus": BillingStatus.RESUBMITTED.value,
        "version": prior_version,
        "resubmittedTo": _dump(forward_link),
        "resubmissionHistory": prior_history
        + [
            _dump(
                ResubmissionHistoryEntry(
                    type=LinkType.RESUBMITTED_TO,
                    status=BillingStatus.SUBMITTED.value,
                    **forward_link.model_dump(),
                )
            )
        ],
        "versionHistory": prior_versions
        + [
            _dump(
                VersionHistoryEntry(
                    version=new_version,
                    timesheet_id=new_id,
                    timestamp=timestamp,
                    status=BillingStatus.SUBMITTED.value,
                    changes=changes,
                )
            )
        ],
        "updatedAt": timestamp,
    }

    return ResubmissionPlan(
        new_claim=new_claim,
        updated_original=updated_original,
        original_claim_id=original_claim_id,
        changes=changes,
    )


# =============================================================================
# Engine
# =============================================================================


@dataclass
class ResubmissionResult:
    """Outcome of one resubmission.

    ``original_claim`` is the updated source record, whether or not it was
    written. ``claim_chain`` is None when the writes did not both succeed or
    when the chain could not be materialised afterwards.
    """

    status: ResubmissionStatus
    company_id: str
    original_claim_id: str
    original_claim: ClaimDocument
    new_claim: ClaimDocument
    claim_chain: ClaimChainSummarySchema | None = None
    error: str | None = None

    @property
    def new_claim_written(self) -> bool:
        return self.status != ResubmissionStatus.FAILED

    @property
    def succeeded(self) -> bool:
        return self.status == ResubmissionStatus.FULLY_SUCCEEDED

    def raise_for_status(self) -> None:
        """Raise ResubmissionWriteError unless both writes succeeded."""
        if self.succeeded:
            return
        raise ResubmissionWriteError(
            REGENERATE_ERROR_MESSAGE,
            self.error,
            outcome=self.status.value,
            new_claim=self.new_claim if self.new_claim_written else None,
        )


class ResubmissionEngine:
    """Creates new claim versions against a claim store."""

    def __init__(
        self,
        store: ClaimStore,
        resolver: ChainResolver | None = None,
        id_factory: Callable[[], str] = new_timesheet_id,
        clock: Callable[[], str] = utc_timestamp,
    ) -> None:
        self.store = store
        self.resolver = resolver or ChainResolver(store)
        self.id_factory = id_factory
        self.clock = clock

    async def resubmit(
        self,
        company_id: str | None,
        timesheet_id: str | None,
        updated_fields: Mapping[str, Any] | None,
        reason: str | None,
    ) -> ResubmissionResult:
        """Resubmit a claim with field changes.

        Args:
            company_id: Company owning the claim.
            timesheet_id: The claim to resubmit.
            updated_fields: Field replacements for the new version (None = {}).
            reason: Why the claim is being resubmitted.

        Returns:
            ResubmissionResult; its status tells whether both, one, or
            neither record was written.

        Raises:
            InvalidClaimInputError: A required argument is missing.
            ClaimNotFoundError: The claim does not exist.
            ClaimStorageError: Reading the claim failed.
        """
        if not company_id or not timesheet_id:
            raise InvalidClaimInputError("Both companyId and timesheetId are required")
        if not reason:
            raise InvalidClaimInputError("Reason for resubmission is required")

        logger.info(f"Getting original claim {company_id}/{timesheet_id}")
        try:
            current = await self.store.get(company_id, timesheet_id)
        except Exception as e:
            logger.error(f"Error reading claim {company_id}/{timesheet_id}: {e}")
            raise ClaimStorageError(REGENERATE_ERROR_MESSAGE, str(e)) from e
        if current is None:
            raise ClaimNotFoundError(company_id, timesheet_id)

        if current.get(LinkType.RESUBMITTED_TO.value):
            logger.warning(
                f"Claim {company_id}/{timesheet_id} was already resubmitted; "
                "its forward link will be replaced"
            )

        plan = plan_resubmission(
            current,
            company_id,
            updated_fields or {},
            reason,
            new_id=self.id_factory(),
            timestamp=self.clock(),
        )
        result = ResubmissionResult(
            status=ResubmissionStatus.FAILED,
            company_id=company_id,
            original_claim_id=plan.original_claim_id,
            original_claim=plan.updated_original,
            new_claim=plan.new_claim,
        )

        new_id = plan.new_claim["timesheetId"]
        logger.info(
            f"Creating claim {company_id}/{new_id} "
            f"(version {plan.new_claim['version']}, {len(plan.changes)} changes)"
        )
        try:
            await self.store.put(plan.new_claim)
        except Exception as e:
            logger.error(f"Writing new claim {company_id}/{new_id} failed: {e}")
            result.error = str(e)
            return result

        result.status = ResubmissionStatus.PARTIALLY_APPLIED
        return await self._write_original(result)

    async def complete(self, result: ResubmissionResult) -> ResubmissionResult:
        """Finish a partially applied resubmission.

        Re-issues the pending write of the updated source claim, then
        resolves the chain. Only valid for ``PARTIALLY_APPLIED`` results.
        """
        if result.status != ResubmissionStatus.PARTIALLY_APPLIED:
            raise ValueError(
                f"Only partially applied resubmissions can be completed, got {result.status.value}"
            )
        result.error = None
        return await self._write_original(result)

    async def _write_original(self, result: ResubmissionResult) -> ResubmissionResult:
        source_id = result.original_claim["timesheetId"]
        logger.info(f"Updating original claim {result.company_id}/{source_id}")
        try:
            await self.store.put(result.original_claim)
        except Exception as e:
            logger.error(
                f"Updating claim {result.company_id}/{source_id} failed after "
                f"{result.new_claim['timesheetId']} was written: {e}"
            )
            result.error = str(e)
            return result

        result.status = ResubmissionStatus.FULLY_SUCCEEDED
        result.claim_chain = await self.resolver.resolve_forward(
            result.company_id, result.original_claim_id
        )
        if result.claim_chain is None:
            logger.warning(
                f"Resubmission of {result.company_id}/{source_id} succeeded "
                "but its chain could not be resolved"
            )
        return result
