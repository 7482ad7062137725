"""Tests for the DynamoDB-backed claim store and its serialisation."""

from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError

from app.storage import dynamo
from app.storage.dynamo import (
    DynamoClaimStore,
    deserialize_item,
    deserialize_value,
    serialize_item,
    serialize_value,
)


class TestSerialization:
    def test_scalars(self) -> None:
        assert serialize_value("x") == {"S": "x"}
        assert serialize_value(3) == {"N": "3"}
        assert serialize_value(2.5) == {"N": "2.5"}
        assert serialize_value(True) == {"BOOL": True}
        assert serialize_value(None) == {"NULL": True}

    def test_nested(self) -> None:
        value = {"changes": [{"field": "hours", "newValue": 10}]}
        assert serialize_value(value) == {
            "M": {
                "changes": {
                    "L": [{"M": {"field": {"S": "hours"}, "newValue": {"N": "10"}}}]
                }
            }
        }

    def test_numbers_deserialize_as_int_or_float(self) -> None:
        assert deserialize_value({"N": "2"}) == 2
        assert isinstance(deserialize_value({"N": "2"}), int)
        assert deserialize_value({"N": "2.5"}) == 2.5
        assert deserialize_value({"N": "1E+2"}) == 100.0

    def test_sets(self) -> None:
        assert deserialize_value({"SS": ["a", "b"]}) == ["a", "b"]
        assert deserialize_value({"NS": ["1", "2"]}) == [1, 2]

    def test_unknown_type_rejected(self) -> None:
        with pytest.raises(ValueError, match="Unsupported"):
            deserialize_value({"B": b"\x00"})

    def test_item_survives_serialisation(self) -> None:
        record = {
            "companyId": "C1",
            "timesheetId": "T1",
            "version": 2,
            "approved": False,
            "resubmittedFrom": {"timesheetId": "T0", "changes": []},
            "notes": None,
        }
        assert deserialize_item(serialize_item(record)) == record


class TestDynamoClaimStore:
    @pytest.mark.asyncio
    async def test_get_uses_consistent_read(self) -> None:
        client = MagicMock()
        client.get_item.return_value = {
            "Item": {"companyId": {"S": "C1"}, "timesheetId": {"S": "T1"}, "version": {"N": "1"}}
        }
        store = DynamoClaimStore(client, "timesheetstrings")

        record = await store.get("C1", "T1")

        assert record == {"companyId": "C1", "timesheetId": "T1", "version": 1}
        client.get_item.assert_called_once_with(
            TableName="timesheetstrings",
            Key={"companyId": {"S": "C1"}, "timesheetId": {"S": "T1"}},
            ConsistentRead=True,
        )

    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self) -> None:
        client = MagicMock()
        client.get_item.return_value = {}
        assert await DynamoClaimStore(client, "t").get("C1", "T1") is None

    @pytest.mark.asyncio
    async def test_put_serialises_whole_record(self) -> None:
        client = MagicMock()
        store = DynamoClaimStore(client, "timesheetstrings")

        await store.put({"companyId": "C1", "timesheetId": "T2", "version": 2})

        client.put_item.assert_called_once_with(
            TableName="timesheetstrings",
            Item={
                "companyId": {"S": "C1"},
                "timesheetId": {"S": "T2"},
                "version": {"N": "2"},
            },
        )

    @pytest.mark.asyncio
    async def test_client_error_propagates(self) -> None:
        client = MagicMock()
        client.put_item.side_effect = ClientError(
            {"Error": {"Code": "ValidationException", "Message": "Item too large"}},
            "PutItem",
        )
        store = DynamoClaimStore(client, "t")
        with pytest.raises(ClientError, match="Item too large"):
            await store.put({"companyId": "C1", "timesheetId": "T1"})


class TestClientInitialisation:
    def test_client_created_once(self) -> None:
        with patch.object(dynamo, "_ddb", None), patch.object(
            dynamo.boto3, "client"
        ) as mock_client:
            first = dynamo.get_dynamodb_client()
            second = dynamo.get_dynamodb_client()

        assert first is second
        mock_client.assert_called_once()
        kwargs = mock_client.call_args.kwargs
        assert mock_client.call_args.args == ("dynamodb",)
        assert kwargs["config"].retries == {"max_attempts": 1, "mode": "standard"}
