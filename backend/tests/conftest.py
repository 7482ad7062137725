"""Shared fixtures: an in-memory claim store and an API test client."""

import copy
from collections.abc import Iterator
from typing import Any

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.storage import get_claim_store


class InMemoryClaimStore:
    """Dict-backed ClaimStore that records every call.

    ``fail_on_put`` makes the Nth put (1-based) raise, for exercising the
    partial-write paths. ``fail_on_get`` makes every get raise.
    """

    def __init__(self, records: list[dict[str, Any]] | None = None) -> None:
        self.records: dict[tuple[str, str], dict[str, Any]] = {}
        self.gets: list[tuple[str, str]] = []
        self.puts: list[dict[str, Any]] = []
        self.fail_on_put: int | None = None
        self.fail_on_get: Exception | None = None
        for record in records or []:
            self.seed(record)

    def seed(self, record: dict[str, Any]) -> None:
        key = (record["companyId"], record["timesheetId"])
        self.records[key] = copy.deepcopy(record)

    def record(self, company_id: str, timesheet_id: str) -> dict[str, Any]:
        return self.records[(company_id, timesheet_id)]

    async def get(self, company_id: str, timesheet_id: str) -> dict[str, Any] | None:
        self.gets.append((company_id, timesheet_id))
        if self.fail_on_get is not None:
            raise self.fail_on_get
        record = self.records.get((company_id, timesheet_id))
        return copy.deepcopy(record) if record is not None else None

    async def put(self, record: dict[str, Any]) -> None:
        if self.fail_on_put is not None and len(self.puts) + 1 == self.fail_on_put:
            self.fail_on_put = None
            raise ConnectionError("ProvisionedThroughputExceededException")
        self.puts.append(copy.deepcopy(record))
        self.seed(record)


def make_claim(
    timesheet_id: str = "T1",
    company_id: str = "C1",
    **fields: Any,
) -> dict[str, Any]:
    """Create a minimal stored claim record."""
    claim: dict[str, Any] = {
        "companyId": company_id,
        "timesheetId": timesheet_id,
        "billingStatus": "Submitted",
        "createdAt": "2026-01-05T09:00:00.000Z",
        "updatedAt": "2026-01-05T09:00:00.000Z",
    }
    claim.update(fields)
    return claim


def make_chain(length: int, company_id: str = "C1") -> list[dict[str, Any]]:
    """Create a well-formed, fully linked chain T1..T<length>."""
    ids = [f"T{i}" for i in range(1, length + 1)]
    claims = []
    for index, timesheet_id in enumerate(ids):
        version = index + 1
        claim = make_claim(
            timesheet_id,
            company_id,
            version=version,
            originalClaimId="T1",
        )
        if index > 0:
            claim["resubmittedFrom"] = {
                "companyId": company_id,
                "timesheetId": ids[index - 1],
                "version": version - 1,
                "timestamp": "2026-01-06T09:00:00.000Z",
                "reason": f"fix {version}",
                "changes": [{"field": "hours", "oldValue": version - 1, "newValue": version}],
            }
        if index < length - 1:
            claim["billingStatus"] = "Resubmitted"
            claim["resubmittedTo"] = {
                "companyId": company_id,
                "timesheetId": ids[index + 1],
                "version": version + 1,
                "timestamp": "2026-01-06T09:00:00.000Z",
                "reason": f"fix {version + 1}",
                "changes": [],
            }
        claims.append(claim)
    return claims


@pytest.fixture
def store() -> InMemoryClaimStore:
    return InMemoryClaimStore()


@pytest.fixture
def client(store: InMemoryClaimStore) -> Iterator[TestClient]:
    """Test client whose claim store is the in-memory fake."""

    async def _override() -> Any:
        yield store

    app.dependency_overrides[get_claim_store] = _override
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
