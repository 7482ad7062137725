"""Tests for the claim chain CLI."""

import argparse
import contextlib
import json
from collections.abc import AsyncIterator, Iterator
from unittest.mock import patch

import pytest

from app import cli
from conftest import InMemoryClaimStore, make_chain, make_claim


@pytest.fixture
def cli_store() -> Iterator[InMemoryClaimStore]:
    """Point the CLI's store factory at an in-memory store."""
    store = InMemoryClaimStore()

    @contextlib.asynccontextmanager
    async def _open() -> AsyncIterator[InMemoryClaimStore]:
        yield store

    with patch.object(cli, "open_claim_store", _open):
        yield store


class TestParseAssignment:
    def test_json_values(self) -> None:
        assert cli.parse_assignment("hours=10") == ("hours", 10)
        assert cli.parse_assignment("approved=true") == ("approved", True)
        assert cli.parse_assignment('tags=["a","b"]') == ("tags", ["a", "b"])

    def test_plain_text_value(self) -> None:
        assert cli.parse_assignment("note=left early") == ("note", "left early")

    def test_value_may_contain_equals(self) -> None:
        assert cli.parse_assignment("expr=a=b") == ("expr", "a=b")

    @pytest.mark.parametrize("text", ["hours", "=10"])
    def test_rejects_malformed(self, text: str) -> None:
        with pytest.raises(argparse.ArgumentTypeError):
            cli.parse_assignment(text)


class TestShowChain:
    def test_prints_chain(self, cli_store: InMemoryClaimStore, capsys) -> None:
        for claim in make_chain(2):
            cli_store.seed(claim)

        assert cli.main(["show-chain", "C1", "T2"]) == 0

        out = capsys.readouterr().out
        assert "Chain for C1/T2: 2 version(s)" in out
        payload = json.loads(out[out.index("{") :])
        assert payload["totalVersions"] == 2

    def test_missing_claim(self, cli_store: InMemoryClaimStore) -> None:
        assert cli.main(["show-chain", "C1", "nope"]) == 1


class TestAuditChain:
    def test_consistent(self, cli_store: InMemoryClaimStore, capsys) -> None:
        for claim in make_chain(3):
            cli_store.seed(claim)

        assert cli.main(["audit-chain", "C1", "T1"]) == 0
        assert "Chain is consistent (3 versions)" in capsys.readouterr().out

    def test_reports_issues(self, cli_store: InMemoryClaimStore, capsys) -> None:
        cli_store.seed(make_claim("T1", version=1, billingStatus="Resubmitted"))

        assert cli.main(["audit-chain", "C1", "T1"]) == 1
        assert "resubmitted_without_link" in capsys.readouterr().out


class TestResubmit:
    def test_resubmit(self, cli_store: InMemoryClaimStore, capsys) -> None:
        cli_store.seed(make_claim("T1", version=1, hours=8))

        code = cli.main(
            ["resubmit", "C1", "T1", "--set", "hours=10", "--reason", "correction"]
        )

        assert code == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["newClaim"]["hours"] == 10
        assert payload["originalClaim"]["billingStatus"] == "Resubmitted"
        assert [v["version"] for v in payload["claimChain"]["versions"]] == [1, 2]
        assert len(cli_store.puts) == 2

    def test_reason_required(self, cli_store: InMemoryClaimStore) -> None:
        with pytest.raises(SystemExit):
            cli.main(["resubmit", "C1", "T1", "--set", "hours=10"])
        assert cli_store.gets == []

    def test_partial_write_fails(self, cli_store: InMemoryClaimStore) -> None:
        cli_store.seed(make_claim("T1", version=1))
        cli_store.fail_on_put = 2

        assert cli.main(["resubmit", "C1", "T1", "--reason", "r"]) == 1
        assert cli_store.record("C1", "T1").get("resubmittedTo") is None

    def test_complete_retries_source_update(self, cli_store: InMemoryClaimStore) -> None:
        cli_store.seed(make_claim("T1", version=1))
        cli_store.fail_on_put = 2

        assert cli.main(["resubmit", "C1", "T1", "--reason", "r", "--complete"]) == 0
        source = cli_store.record("C1", "T1")
        assert source["billingStatus"] == "Resubmitted"
        assert source["resubmittedTo"]["version"] == 2


def test_no_command_prints_help(capsys) -> None:
    assert cli.main([]) == 1
    assert "usage" in capsys.readouterr().out
