"""
Unit tests for the solaudit command line.
"""

from __future__ import annotations

import base64
import json
import logging
from pathlib import Path
from typing import Any

import httpx
import pytest
import structlog

from solaudit import cli
from solaudit.analysis.types import SimulationOutcome
from solaudit.clients.rpc import SolanaRpcClient
from solaudit.errors import TransportError
from solaudit.primitives.account import AccountSnapshot

ACCOUNT = "So11111111111111111111111111111111111111112"
PROGRAM = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
TX = base64.b64encode(b"\x02" * 80).decode()


class FakeRpc:
    instances: list[FakeRpc] = []

    def __init__(self, config: Any, *, fail: bool = False) -> None:
        self.config = config
        self.fail = fail
        self.closed = False
        FakeRpc.instances.append(self)

    async def __aenter__(self) -> FakeRpc:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.closed = True

    async def fetch_snapshot(self, address: str, *, with_data: bool = True) -> AccountSnapshot:
        return await self.fetch_snapshot_or_default(address)

    async def fetch_snapshot_or_default(self, address: str) -> AccountSnapshot:
        if self.fail:
            raise TransportError("connection refused", method="getAccountInfo")
        return AccountSnapshot.with_payload(address, lamports=10, owner=PROGRAM, data=b"\x00")

    async def simulate_transaction(self, tx_base64: str, watch_address: str) -> SimulationOutcome:
        post = AccountSnapshot.with_payload(watch_address, lamports=5, owner=PROGRAM, data=b"\x00")
        return SimulationOutcome(logs=("Program log: ok",), post_snapshot=post)


@pytest.fixture(autouse=True)
def _isolate(monkeypatch: pytest.MonkeyPatch):
    FakeRpc.instances.clear()
    monkeypatch.setattr(cli, "load_dotenv", lambda: False)
    monkeypatch.setattr(cli, "SolanaRpcClient", FakeRpc)
    for var in ("SOLAUDIT_RPC__CLUSTER", "SOLAUDIT_RPC__URL", "SOLAUDIT_LOGGING__LEVEL"):
        monkeypatch.delenv(var, raising=False)

    # main() configures logging for real; put the process back afterwards.
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()


class TestExitCodes:
    def test_safe_text_report(self, capsys: pytest.CaptureFixture[str]):
        assert cli.main(["--program", ACCOUNT]) == cli.EXIT_OK
        out = capsys.readouterr().out
        assert "Safety: SAFE" in out
        assert FakeRpc.instances[0].closed

    def test_json_report_with_transaction(self, capsys: pytest.CaptureFixture[str]):
        code = cli.main(["--program", ACCOUNT, "--tx", TX, "--output", "json", "--cluster", "mainnet"])
        assert code == cli.EXIT_OK
        payload = json.loads(capsys.readouterr().out)
        assert payload["classification"]["safety"] == "unsafe"
        assert payload["classification"]["reasons"] == ["Balance changed"]
        assert payload["simulation_logs"] == ["Program log: ok"]
        assert payload["cluster"] == "mainnet"

    def test_logs_stay_off_stdout(
        self, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
    ):
        monkeypatch.setenv("SOLAUDIT_LOGGING__LEVEL", "INFO")
        assert cli.main(["--program", ACCOUNT, "--tx", TX, "--output", "json"]) == cli.EXIT_OK
        captured = capsys.readouterr()
        assert json.loads(captured.out)["classification"]["safety"] == "unsafe"
        assert "analysis_complete" in captured.err

    def test_invalid_address(self, capsys: pytest.CaptureFixture[str]):
        assert cli.main(["--program", "not-a-key"]) == cli.EXIT_INVALID_INPUT
        assert "Safety:" not in capsys.readouterr().out

    def test_invalid_cluster(self):
        assert cli.main(["--program", ACCOUNT, "--cluster", "moonnet"]) == cli.EXIT_INVALID_INPUT
        assert FakeRpc.instances == []

    def test_invalid_transaction(self):
        assert cli.main(["--program", ACCOUNT, "--tx", "!!"]) == cli.EXIT_INVALID_INPUT

    def test_transport_failure(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setattr(cli, "SolanaRpcClient", lambda config: FakeRpc(config, fail=True))
        assert cli.main(["--program", ACCOUNT]) == cli.EXIT_FAILURE

    def test_malformed_account_info_is_failure(self, monkeypatch: pytest.MonkeyPatch):
        def handler(request: httpx.Request) -> httpx.Response:
            value = {
                "lamports": 2**64,
                "owner": PROGRAM,
                "executable": False,
                "rentEpoch": 0,
                "data": [base64.b64encode(b"\x00").decode(), "base64"],
            }
            result = {"context": {"slot": 1}, "value": value}
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": result})

        http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        monkeypatch.setattr(cli, "SolanaRpcClient", lambda config: SolanaRpcClient(config, client=http))
        assert cli.main(["--program", ACCOUNT]) == cli.EXIT_FAILURE

    @pytest.mark.parametrize("body", ["rpc: [unclosed\n", "- devnet\n"])
    def test_unusable_config_file(self, tmp_path: Path, body: str):
        path = tmp_path / "solaudit.yaml"
        path.write_text(body, encoding="utf-8")
        assert cli.main(["--program", ACCOUNT, "--config", str(path)]) == cli.EXIT_INVALID_INPUT
        assert FakeRpc.instances == []

    def test_program_required(self):
        with pytest.raises(SystemExit) as excinfo:
            cli.main([])
        assert excinfo.value.code == 2
