"""Chain consistency audit.

Pure functions with no store access. Takes a ChainWalk and reports every
place the resolved records break the chain invariants: consecutive
versions from 1, one shared originalClaimId, and matching forward/back
links between neighbours.

A half-applied resubmission (new claim written, source not yet updated)
shows up as a MISSING_FORWARD_LINK on the source only when the audit
starts from the new claim, whose back-link reaches the source. Started
from the source, the walk never reaches the orphaned new claim and the
chain reports consistent.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from app.models.enums import AuditIssueType, BillingStatus, LinkType
from app.services.chain_resolver import ChainWalk, claim_version, link_target
from app.storage.base import ClaimDocument, ClaimKey


@dataclass
class AuditIssue:
    """A single invariant violation."""

    issue_type: AuditIssueType
    timesheet_id: str
    detail: str


@dataclass
class ChainAuditResult:
    """Result of auditing one resolved chain."""

    total_versions: int
    issues: list[AuditIssue] = field(default_factory=list)

    @property
    def is_consistent(self) -> bool:
        return not self.issues


def _chain_id(claim: ClaimDocument) -> str:
    return claim.get("originalClaimId") or claim["timesheetId"]


def audit_chain(walk: ChainWalk) -> ChainAuditResult:
    """Check a walked chain against the chain invariants.

    Args:
        walk: Result of ChainResolver.walk over both directions.

    Returns:
        ChainAuditResult listing every issue found, in chain order.
    """
    claims = walk.claims
    result = ChainAuditResult(total_versions=len(claims))
    issues = result.issues

    if walk.cycle_detected:
        issues.append(
            AuditIssue(
                AuditIssueType.CYCLE,
                walk.start["timesheetId"],
                "chain links revisit a claim already in the chain",
            )
        )

    for dangling in walk.dangling_links:
        issues.append(
            AuditIssue(
                AuditIssueType.DANGLING_LINK,
                dangling.source.timesheet_id,
                f"{dangling.link_type.value} points at missing claim {dangling.target}",
            )
        )

    first = claims[0]
    if claim_version(first) != 1:
        issues.append(
            AuditIssue(
                AuditIssueType.VERSION_GAP,
                first["timesheetId"],
                f"chain starts at version {claim_version(first)}, not 1",
            )
        )
        if link_target(first, LinkType.RESUBMITTED_FROM) is None:
            issues.append(
                AuditIssue(
                    AuditIssueType.MISSING_BACK_LINK,
                    first["timesheetId"],
                    f"version {claim_version(first)} has no resubmittedFrom link",
                )
            )

    chain_id = _chain_id(first)
    for claim in claims:
        if _chain_id(claim) != chain_id:
            issues.append(
                AuditIssue(
                    AuditIssueType.ORIGINAL_ID_MISMATCH,
                    claim["timesheetId"],
                    f"originalClaimId {_chain_id(claim)!r} differs from {chain_id!r}",
                )
            )
        if (
            claim.get("billingStatus") == BillingStatus.RESUBMITTED.value
            and link_target(claim, LinkType.RESUBMITTED_TO) is None
        ):
            issues.append(
                AuditIssue(
                    AuditIssueType.RESUBMITTED_WITHOUT_LINK,
                    claim["timesheetId"],
                    "status is Resubmitted but resubmittedTo is absent",
                )
            )

    for prev, nxt in zip(claims, claims[1:]):
        prev_version, next_version = claim_version(prev), claim_version(nxt)
        if next_version == prev_version:
            issues.append(
                AuditIssue(
                    AuditIssueType.DUPLICATE_VERSION,
                    nxt["timesheetId"],
                    f"version {next_version} also held by {prev['timesheetId']}",
                )
            )
        elif next_version != prev_version + 1:
            issues.append(
                AuditIssue(
                    AuditIssueType.VERSION_GAP,
                    nxt["timesheetId"],
                    f"version jumps from {prev_version} to {next_version}",
                )
            )

        if link_target(prev, LinkType.RESUBMITTED_TO) != ClaimKey.of(nxt):
            issues.append(
                AuditIssue(
                    AuditIssueType.MISSING_FORWARD_LINK,
                    prev["timesheetId"],
                    f"resubmittedTo does not point at {nxt['timesheetId']}",
                )
            )
        if link_target(nxt, LinkType.RESUBMITTED_FROM) != ClaimKey.of(prev):
            issues.append(
                AuditIssue(
                    AuditIssueType.MISSING_BACK_LINK,
                    nxt["timesheetId"],
                    f"resubmittedFrom does not point at {prev['timesheetId']}",
                )
            )

    return result
