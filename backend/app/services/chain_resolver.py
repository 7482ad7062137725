"""Claim chain resolution.

A chain is a doubly-linked list stored as independent records: each claim
holds ``resubmittedFrom`` / ``resubmittedTo`` links naming its neighbours by
``(companyId, timesheetId)``. Resolving a chain means repeated lookups,
one hop at a time.

Two entry points with different seeds:

- ``resolve_forward`` always starts at the chain's original claim and only
  follows ``resubmittedTo``. Failures degrade to ``None``.
- ``resolve_chain`` starts at whichever claim was requested and walks both
  directions. Failures raise.

On a well-formed chain they agree. When a link is missing (e.g. after a
half-applied resubmission) they can return different sets; that difference
is kept as-is.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from app.core.errors import ClaimChainError, ClaimNotFoundError, ClaimStorageError
from app.models.enums import LinkType
from app.schemas.claim import ChainVersionSchema, ClaimChainSummarySchema
from app.storage.base import ClaimDocument, ClaimKey, ClaimStore

logger = logging.getLogger(__name__)

CHAIN_ERROR_MESSAGE = "Error getting claim chain"


def claim_version(claim: ClaimDocument) -> int:
    """A claim's chain position; legacy records without one are version 1."""
    return claim.get("version") or 1


def sort_by_version(claims: list[ClaimDocument]) -> list[ClaimDocument]:
    """Order claims ascending by version (stable for equal versions)."""
    return sorted(claims, key=claim_version)


def link_target(claim: ClaimDocument, link_type: LinkType) -> ClaimKey | None:
    """Key the claim's link of ``link_type`` points at, if it has a usable one."""
    link = claim.get(link_type.value)
    if not isinstance(link, dict):
        return None
    company_id = link.get("companyId")
    timesheet_id = link.get("timesheetId")
    if not company_id or not timesheet_id:
        return None
    return ClaimKey(company_id, timesheet_id)


@dataclass
class DanglingLink:
    """A link whose target record could not be found."""

    source: ClaimKey
    link_type: LinkType
    target: ClaimKey


@dataclass
class ChainWalk:
    """Raw result of walking a chain outward from one claim."""

    start: ClaimDocument
    backward: list[ClaimDocument] = field(default_factory=list)  # nearest first
    forward: list[ClaimDocument] = field(default_factory=list)  # nearest first
    dangling_links: list[DanglingLink] = field(default_factory=list)
    cycle_detected: bool = False

    @property
    def claims(self) -> list[ClaimDocument]:
        """All visited claims, sorted ascending by version."""
        ordered = list(reversed(self.backward)) + [self.start] + self.forward
        return sort_by_version(ordered)


def _version_entry(claim: ClaimDocument) -> ChainVersionSchema:
    back_link: dict[str, Any] = claim.get("resubmittedFrom") or {}
    return ChainVersionSchema(
        version=claim_version(claim),
        timesheet_id=claim["timesheetId"],
        status=claim.get("billingStatus"),
        timestamp=claim.get("updatedAt"),
        changes=back_link.get("changes") or [],
        reason=back_link.get("reason"),
    )


class ChainResolver:
    """Reconstructs claim chains from a claim store."""

    def __init__(self, store: ClaimStore) -> None:
        self.store = store

    async def walk(
        self,
        company_id: str,
        timesheet_id: str,
        *,
        forward: bool = True,
        backward: bool = True,
    ) -> ChainWalk:
        """Fetch a claim and follow its links outward.

        Each direction stops at the first absent link or missing record.
        Revisiting a key already seen in this walk stops that direction and
        marks the walk as cyclic.

        Raises:
            ClaimNotFoundError: The starting claim does not exist.
        """
        start = await self.store.get(company_id, timesheet_id)
        if start is None:
            raise ClaimNotFoundError(company_id, timesheet_id)

        result = ChainWalk(start=start)
        visited = {ClaimKey.of(start)}
        if forward:
            result.forward = await self._follow(
                start, LinkType.RESUBMITTED_TO, visited, result
            )
        if backward:
            result.backward = await self._follow(
                start, LinkType.RESUBMITTED_FROM, visited, result
            )
        return result

    async def _follow(
        self,
        start: ClaimDocument,
        link_type: LinkType,
        visited: set[ClaimKey],
        walk: ChainWalk,
    ) -> list[ClaimDocument]:
        found: list[ClaimDocument] = []
        current = start

        while (target := link_target(current, link_type)) is not None:
            if target in visited:
                logger.warning(
                    f"Cycle in claim chain: {ClaimKey.of(current)} "
                    f"{link_type.value} {target} was already visited"
                )
                walk.cycle_detected = True
                break

            nxt = await self.store.get(target.company_id, target.timesheet_id)
            if nxt is None:
                logger.debug(f"Chain link {link_type.value} -> {target} not found")
                walk.dangling_links.append(
                    DanglingLink(ClaimKey.of(current), link_type, target)
                )
                break

            visited.add(target)
            found.append(nxt)
            current = nxt

        return found

    async def resolve_forward(
        self, company_id: str, original_claim_id: str
    ) -> ClaimChainSummarySchema | None:
        """Resolve the chain forward from its original claim.

        Returns None when the original claim is absent, the walk fails, or a
        record cannot be summarised; the failure is logged, never raised.
        """
        try:
            walk = await self.walk(company_id, original_claim_id, backward=False)
            claims = walk.claims
            return ClaimChainSummarySchema(
                original_claim=claims[0],
                versions=[_version_entry(c) for c in claims],
            )
        except ClaimNotFoundError:
            logger.info(
                f"Original claim {company_id}/{original_claim_id} not found; "
                "chain unresolved"
            )
            return None
        except Exception:
            logger.exception(
                f"Error resolving claim chain from {company_id}/{original_claim_id}"
            )
            return None

    async def inspect(self, company_id: str, timesheet_id: str) -> ChainWalk:
        """Walk both directions from a claim, wrapping store failures.

        Raises:
            ClaimNotFoundError: The requested claim does not exist.
            ClaimStorageError: The store failed during the walk.
        """
        try:
            return await self.walk(company_id, timesheet_id)
        except ClaimChainError:
            raise
        except Exception as e:
            logger.error(f"Error getting claim chain for {company_id}/{timesheet_id}: {e}")
            raise ClaimStorageError(CHAIN_ERROR_MESSAGE, str(e)) from e

    async def resolve_chain(
        self, company_id: str, timesheet_id: str
    ) -> list[ClaimDocument]:
        """Resolve every claim reachable from the given one, version-sorted.

        Raises:
            ClaimNotFoundError: The requested claim does not exist.
            ClaimStorageError: The store failed during the walk.
        """
        walk = await self.inspect(company_id, timesheet_id)
        return walk.claims
