"""Tests for the SQLAlchemy-backed claim store."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from app.models.claim import ClaimRecord
from app.storage.sql import SqlClaimStore


def _session(row: object | None = None) -> AsyncMock:
    session = AsyncMock()
    session.get.return_value = row
    return session


class TestClaimRecordModel:
    def test_tablename(self) -> None:
        assert ClaimRecord.__tablename__ == "claim_record"

    def test_composite_primary_key(self) -> None:
        pk = [col.name for col in ClaimRecord.__table__.primary_key.columns]
        assert pk == ["company_id", "timesheet_id"]

    def test_company_index(self) -> None:
        names = {arg.name for arg in ClaimRecord.__table_args__ if hasattr(arg, "name")}
        assert "idx_claim_record_company" in names


class TestSqlClaimStore:
    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self) -> None:
        session = _session(None)
        store = SqlClaimStore(session)

        assert await store.get("C1", "T1") is None
        session.get.assert_awaited_once_with(ClaimRecord, ("C1", "T1"))

    @pytest.mark.asyncio
    async def test_get_returns_detached_copy(self) -> None:
        row = MagicMock()
        row.document = {"companyId": "C1", "timesheetId": "T1", "versionHistory": []}
        store = SqlClaimStore(_session(row))

        record = await store.get("C1", "T1")
        record["versionHistory"].append({"version": 1})

        assert record["timesheetId"] == "T1"
        assert row.document["versionHistory"] == []

    @pytest.mark.asyncio
    async def test_put_merges_and_commits(self) -> None:
        session = _session()
        store = SqlClaimStore(session)
        record = {"companyId": "C1", "timesheetId": "T2", "version": 2}

        await store.put(record)

        session.merge.assert_awaited_once()
        merged = session.merge.await_args.args[0]
        assert isinstance(merged, ClaimRecord)
        assert merged.company_id == "C1"
        assert merged.timesheet_id == "T2"
        assert merged.document == record
        session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_put_failure_propagates(self) -> None:
        session = _session()
        session.commit.side_effect = RuntimeError("deadlock detected")
        store = SqlClaimStore(session)

        with pytest.raises(RuntimeError, match="deadlock"):
            await store.put({"companyId": "C1", "timesheetId": "T1"})
        session.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_put_after_failed_put_succeeds(self) -> None:
        """A failed write rolls back so the same session can store the next one."""
        session = _session()
        session.commit.side_effect = [RuntimeError("connection reset"), None]
        store = SqlClaimStore(session)

        with pytest.raises(RuntimeError):
            await store.put({"companyId": "C1", "timesheetId": "T1", "version": 1})
        await store.put({"companyId": "C1", "timesheetId": "T1", "version": 1})

        assert session.merge.await_count == 2
        assert session.commit.await_count == 2
        session.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_successful_put_does_not_roll_back(self) -> None:
        session = _session()
        await SqlClaimStore(session).put({"companyId": "C1", "timesheetId": "T1"})
        session.rollback.assert_not_awaited()
