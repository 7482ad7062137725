"""Key-value storage contract for claim records."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

ClaimDocument = dict[str, Any]


@dataclass(frozen=True)
class ClaimKey:
    """Composite key addressing one claim record."""

    company_id: str
    timesheet_id: str

    @classmethod
    def of(cls, record: ClaimDocument) -> ClaimKey:
        return cls(record["companyId"], record["timesheetId"])

    def __str__(self) -> str:
        return f"{self.company_id}/{self.timesheet_id}"


class ClaimStore(Protocol):
    """The two primitives the chain logic consumes.

    Guarantees assumed: read-your-writes on a single item. Not assumed:
    multi-item atomicity or conditional writes. ``put`` overwrites the whole
    record at its composite key.
    """

    async def get(self, company_id: str, timesheet_id: str) -> ClaimDocument | None:
        ...

    async def put(self, record: ClaimDocument) -> None:
        ...
