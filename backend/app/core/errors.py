"""Domain exceptions for claim resubmission and chain resolution.

Each exception carries the HTTP status it maps to at the API boundary;
``app.main`` renders ``to_body()`` as the response envelope.
"""

from typing import Any


class ClaimChainError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_body(self) -> dict[str, Any]:
        return {"message": self.message}


class InvalidClaimInputError(ClaimChainError):
    """A required request field is missing or malformed."""

    status_code = 400


class ClaimNotFoundError(ClaimChainError):
    """The referenced claim does not exist."""

    status_code = 404

    def __init__(self, company_id: str, timesheet_id: str) -> None:
        super().__init__("Claim not found")
        self.company_id = company_id
        self.timesheet_id = timesheet_id


class ClaimStorageError(ClaimChainError):
    """The storage collaborator failed.

    ``message`` is the operation-level message shown to callers; ``detail``
    keeps the underlying error text so it is passed through, not swallowed.
    """

    status_code = 500

    def __init__(self, message: str, detail: str | None = None) -> None:
        super().__init__(message)
        self.detail = detail

    def to_body(self) -> dict[str, Any]:
        return {"message": self.message, "error": self.detail}


class ResubmissionWriteError(ClaimStorageError):
    """One of the two resubmission writes failed.

    ``outcome`` is the ResubmissionStatus value. When the new claim was
    already written it is included so callers can reconcile.
    """

    def __init__(
        self,
        message: str,
        detail: str | None,
        outcome: str,
        new_claim: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, detail)
        self.outcome = outcome
        self.new_claim = new_claim

    def to_body(self) -> dict[str, Any]:
        body = super().to_body()
        body["outcome"] = self.outcome
        if self.new_claim is not None:
            body["newClaim"] = self.new_claim
        return body
