"""Claim storage backends and the store dependency."""

import contextlib
from collections.abc import AsyncGenerator, AsyncIterator

from app.config import settings
from app.models.base import get_session_maker
from app.storage.base import ClaimDocument, ClaimKey, ClaimStore
from app.storage.dynamo import DynamoClaimStore, get_dynamodb_client
from app.storage.sql import SqlClaimStore


@contextlib.asynccontextmanager
async def open_claim_store() -> AsyncIterator[ClaimStore]:
    """Open a store for the configured backend.

    The backing client (DynamoDB client or SQL engine) is process-wide and
    created lazily; SQL sessions are per-use.
    """
    if settings.storage_backend == "dynamodb":
        yield DynamoClaimStore(get_dynamodb_client(), settings.claims_table)
        return

    async with get_session_maker()() as session:
        yield SqlClaimStore(session)


async def get_claim_store() -> AsyncGenerator[ClaimStore, None]:
    """FastAPI dependency yielding the configured claim store."""
    async with open_claim_store() as store:
        yield store


__all__ = [
    "ClaimDocument",
    "ClaimKey",
    "ClaimStore",
    "DynamoClaimStore",
    "SqlClaimStore",
    "get_claim_store",
    "get_dynamodb_client",
    "open_claim_store",
]
