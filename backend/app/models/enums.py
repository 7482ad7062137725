"""Enum types shared by the claim models and services."""

import enum


class BillingStatus(str, enum.Enum):
    """Billing status values this service assigns.

    Claims may carry other domain statuses; those pass through untouched.
    """

    SUBMITTED = "Submitted"
    RESUBMITTED = "Resubmitted"


class LinkType(str, enum.Enum):
    """Direction of an entry in a claim's resubmissionHistory."""

    RESUBMITTED_FROM = "resubmittedFrom"  # back-link to the predecessor
    RESUBMITTED_TO = "resubmittedTo"  # forward-link to the successor


class ResubmissionStatus(str, enum.Enum):
    """Outcome of the two-write resubmission sequence."""

    FULLY_SUCCEEDED = "fully_succeeded"
    PARTIALLY_APPLIED = "partially_applied"  # new claim written, original not updated
    FAILED = "failed"  # nothing written


class AuditIssueType(str, enum.Enum):
    """Kinds of inconsistency reported by the chain audit."""

    VERSION_GAP = "version_gap"
    DUPLICATE_VERSION = "duplicate_version"
    ORIGINAL_ID_MISMATCH = "original_id_mismatch"
    RESUBMITTED_WITHOUT_LINK = "resubmitted_without_link"
    MISSING_BACK_LINK = "missing_back_link"
    MISSING_FORWARD_LINK = "missing_forward_link"
    DANGLING_LINK = "dangling_link"
    CYCLE = "cycle"
