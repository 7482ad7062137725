"""CLI for inspecting and resubmitting claim chains.

Usage:
    python -m app.cli show-chain COMPANY TIMESHEET
    python -m app.cli audit-chain COMPANY TIMESHEET
    python -m app.cli resubmit COMPANY TIMESHEET --set hours=10 --reason "correction"
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Any

from app.core.errors import ClaimChainError
from app.models.enums import ResubmissionStatus
from app.services.chain_audit import audit_chain
from app.services.chain_resolver import ChainResolver
from app.services.resubmission import ResubmissionEngine
from app.storage import open_claim_store

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)-5.5s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


def _print_json(payload: Any) -> None:
    print(json.dumps(payload, indent=2, default=str))


def parse_assignment(text: str) -> tuple[str, Any]:
    """Parse ``field=value``; the value is read as JSON when it parses, else text."""
    name, sep, raw = text.partition("=")
    if not sep or not name:
        raise argparse.ArgumentTypeError(f"expected field=value, got {text!r}")
    try:
        value = json.loads(raw)
    except ValueError:
        value = raw
    return name, value


async def show_chain_command(company_id: str, timesheet_id: str) -> int:
    """Print every version in the chain around a claim.

    Returns:
        0 on success, 1 if the claim is missing or the store failed.
    """
    async with open_claim_store() as store:
        try:
            claims = await ChainResolver(store).resolve_chain(company_id, timesheet_id)
        except ClaimChainError as e:
            logger.error(f"{e.message} ({company_id}/{timesheet_id})")
            return 1

    print(f"\nChain for {company_id}/{timesheet_id}: {len(claims)} version(s)")
    for claim in claims:
        print(
            f"  v{claim.get('version') or 1:<3} {claim['timesheetId']:<38} "
            f"{claim.get('billingStatus')}"
        )
    print()
    _print_json({"claims": claims, "totalVersions": len(claims)})
    return 0


async def audit_chain_command(company_id: str, timesheet_id: str) -> int:
    """Audit the chain around a claim.

    Returns:
        0 if consistent, 1 if issues were found or the lookup failed.
    """
    async with open_claim_store() as store:
        try:
            walk = await ChainResolver(store).inspect(company_id, timesheet_id)
        except ClaimChainError as e:
            logger.error(f"{e.message} ({company_id}/{timesheet_id})")
            return 1

    result = audit_chain(walk)
    if result.is_consistent:
        print(f"Chain is consistent ({result.total_versions} versions)")
        return 0

    print(f"Found {len(result.issues)} issue(s) in {result.total_versions} versions:")
    for issue in result.issues:
        print(f"  [{issue.issue_type.value:<24}] {issue.timesheet_id}: {issue.detail}")
    return 1


async def resubmit_command(
    company_id: str,
    timesheet_id: str,
    updated_fields: dict[str, Any],
    reason: str,
    complete: bool = False,
) -> int:
    """Resubmit a claim and print the resulting records.

    With ``complete``, a partially applied resubmission gets one more
    attempt at the source-claim write.

    Returns:
        0 on full success, 1 otherwise.
    """
    async with open_claim_store() as store:
        engine = ResubmissionEngine(store)
        try:
            result = await engine.resubmit(company_id, timesheet_id, updated_fields, reason)
        except ClaimChainError as e:
            logger.error(f"{e.message} ({company_id}/{timesheet_id})")
            return 1

        if complete and result.status == ResubmissionStatus.PARTIALLY_APPLIED:
            logger.warning(f"Partial resubmission ({result.error}); retrying source update")
            result = await engine.complete(result)

    if not result.succeeded:
        logger.error(f"Resubmission {result.status.value}: {result.error}")
        if result.new_claim_written:
            logger.error(
                f"New claim {result.new_claim['timesheetId']} exists without a "
                f"forward link from {timesheet_id}"
            )
        return 1

    _print_json(
        {
            "originalClaim": result.original_claim,
            "newClaim": result.new_claim,
            "claimChain": (
                result.claim_chain.model_dump(by_alias=True)
                if result.claim_chain is not None
                else None
            ),
        }
    )
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for CLI."""
    parser = argparse.ArgumentParser(description="Timesheet claim chain CLI")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    for name, help_text in (
        ("show-chain", "Show all versions of a claim's chain"),
        ("audit-chain", "Check a claim's chain for broken links"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("company_id", help="Company ID")
        sub.add_argument("timesheet_id", help="Timesheet ID of any claim in the chain")

    resubmit_parser = subparsers.add_parser("resubmit", help="Resubmit a claim")
    resubmit_parser.add_argument("company_id", help="Company ID")
    resubmit_parser.add_argument("timesheet_id", help="Timesheet ID to resubmit")
    resubmit_parser.add_argument(
        "--set",
        dest="assignments",
        type=parse_assignment,
        action="append",
        default=[],
        metavar="FIELD=VALUE",
        help="Field to change on the new version (repeatable; JSON values allowed)",
    )
    resubmit_parser.add_argument(
        "--reason",
        required=True,
        help="Reason for resubmission",
    )
    resubmit_parser.add_argument(
        "--complete",
        action="store_true",
        help="Retry the source-claim update once if only the new claim was written",
    )

    args = parser.parse_args(argv)

    if args.command == "show-chain":
        return asyncio.run(show_chain_command(args.company_id, args.timesheet_id))

    elif args.command == "audit-chain":
        return asyncio.run(audit_chain_command(args.company_id, args.timesheet_id))

    elif args.command == "resubmit":
        return asyncio.run(
            resubmit_command(
                company_id=args.company_id,
                timesheet_id=args.timesheet_id,
                updated_fields=dict(args.assignments),
                reason=args.reason,
                complete=args.complete,
            )
        )

    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
