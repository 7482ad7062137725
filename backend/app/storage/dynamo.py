"""DynamoDB-backed claim store.

Uses the low-level boto3 client with explicit typed-attribute
serialisation, so numbers come back as ``int``/``float`` rather than
``Decimal`` and records stay JSON-serialisable.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import boto3
from botocore.config import Config

from app.config import settings
from app.storage.base import ClaimDocument

logger = logging.getLogger(__name__)

# Single attempt: storage failures surface to the caller immediately.
_CLIENT_CONFIG = Config(retries={"max_attempts": 1, "mode": "standard"})

_ddb: Any = None


def get_dynamodb_client() -> Any:
    """Return the process-wide DynamoDB client, creating it on first call."""
    global _ddb
    if _ddb is None:
        _ddb = boto3.client(
            "dynamodb",
            region_name=settings.dynamodb_region,
            endpoint_url=settings.dynamodb_endpoint_url,
            config=_CLIENT_CONFIG,
        )
        logger.info(f"DynamoDB client initialised (region={settings.dynamodb_region})")
    return _ddb


# =============================================================================
# Serialization helpers
# =============================================================================


def serialize_value(val: Any) -> dict[str, Any]:
    """Serialize a Python value to DynamoDB typed format."""
    if isinstance(val, dict):
        return {"M": {str(k): serialize_value(v) for k, v in val.items()}}
    if isinstance(val, (list, tuple)):
        return {"L": [serialize_value(v) for v in val]}
    if isinstance(val, bool):
        return {"BOOL": val}
    if isinstance(val, (int, float)):
        return {"N": str(val)}
    if val is None:
        return {"NULL": True}
    return {"S": str(val)}


def deserialize_value(v: dict[str, Any]) -> Any:
    """Deserialize a single DynamoDB attribute value."""
    if "S" in v:
        return v["S"]
    if "N" in v:
        n = v["N"]
        return float(n) if any(c in n for c in ".eE") else int(n)
    if "BOOL" in v:
        return v["BOOL"]
    if "NULL" in v:
        return None
    if "L" in v:
        return [deserialize_value(i) for i in v["L"]]
    if "M" in v:
        return {k: deserialize_value(val) for k, val in v["M"].items()}
    if "SS" in v:
        return list(v["SS"])
    if "NS" in v:
        return [deserialize_value({"N": n}) for n in v["NS"]]
    raise ValueError(f"Unsupported DynamoDB attribute type: {sorted(v)}")


def serialize_item(record: ClaimDocument) -> dict[str, Any]:
    return {k: serialize_value(v) for k, v in record.items()}


def deserialize_item(item: dict[str, Any]) -> ClaimDocument:
    return {k: deserialize_value(v) for k, v in item.items()}


class DynamoClaimStore:
    """Claim store over a DynamoDB table keyed by (companyId, timesheetId).

    boto3 calls are blocking; each one runs in a worker thread and is
    awaited before the next starts.
    """

    def __init__(self, client: Any, table_name: str) -> None:
        self.client = client
        self.table_name = table_name

    async def get(self, company_id: str, timesheet_id: str) -> ClaimDocument | None:
        resp = await asyncio.to_thread(
            self.client.get_item,
            TableName=self.table_name,
            Key={
                "companyId": {"S": company_id},
                "timesheetId": {"S": timesheet_id},
            },
            ConsistentRead=True,
        )
        item = resp.get("Item")
        if item is None:
            return None
        return deserialize_item(item)

    async def put(self, record: ClaimDocument) -> None:
        await asyncio.to_thread(
            self.client.put_item,
            TableName=self.table_name,
            Item=serialize_item(record),
        )
        logger.debug(f"Stored claim {record['companyId']}/{record['timesheetId']}")
