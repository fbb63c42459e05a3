# =============================================================================
# tests/test_execution.py - Execution Gate and Agent Tests
# =============================================================================
# This module contains tests for:
# - ExecutionGate routing (store, sandbox, remote delegate)
# - Guardrails run before anything executes
# - ExecutionAgent turns every failure into ExecutionResult(success=False)
# =============================================================================

import json

import pytest

from agents.execution import ExecutionAgent, ExecutionGate, parse_remote_reply
from lib.errors import ForbiddenCapabilityError, StoreNotConfiguredError, UnsafeStatementError
from tests.conftest import FakeStore


class RecordingRemote:
    """RemoteExecutor double."""

    def __init__(self, reply):
        self.reply = reply
        self.calls = []

    def call_tool(self, name, arguments):
        self.calls.append((name, arguments))
        return self.reply


# =============================================================================
# Remote Reply Parsing
# =============================================================================

class TestParseRemoteReply:
    """Test parse_remote_reply()."""

    def test_array_of_objects(self):
        assert parse_remote_reply('[{"n": 1}, {"n": 2}]') == [{"n": 1}, {"n": 2}]

    def test_single_object(self):
        assert parse_remote_reply('{"n": 1}') == [{"n": 1}]

    def test_array_of_scalars(self):
        assert parse_remote_reply("[1, 2]") == [{"result": 1}, {"result": 2}]

    def test_plain_text(self):
        assert parse_remote_reply("42 rows updated") == [{"result": "42 rows updated"}]

    def test_json_scalar(self):
        assert parse_remote_reply("7") == [{"result": 7}]


# =============================================================================
# Execution Gate
# =============================================================================

class TestExecutionGate:
    """Test ExecutionGate.run()."""

    def test_sql_goes_to_store(self, sample_catalog):
        store = FakeStore(sample_catalog, results=[[{"n": 7}]])
        gate = ExecutionGate(store=store)

        assert gate.run("SELECT COUNT(*) AS n FROM orders", "sql") == [{"n": 7}]
        assert store.statements == ["SELECT COUNT(*) AS n FROM orders"]

    def test_rejected_sql_never_reaches_store(self, fake_store):
        gate = ExecutionGate(store=fake_store)

        with pytest.raises(UnsafeStatementError):
            gate.run("DELETE FROM orders", "sql")
        assert fake_store.statements == []

    def test_sql_without_store(self):
        with pytest.raises(StoreNotConfiguredError):
            ExecutionGate().run("SELECT 1", "sql")

    def test_script_runs_in_sandbox(self, sample_catalog):
        store = FakeStore(sample_catalog, results=[[{"amount": 2}, {"amount": 3}]])
        gate = ExecutionGate(store=store)

        code = "rows = fetch_data('SELECT amount FROM orders')\nreturn sum(r['amount'] for r in rows)"
        assert gate.run(code, "python") == [{"result": 5}]

    def test_script_fetch_data_is_checked(self, fake_store):
        gate = ExecutionGate(store=fake_store)

        with pytest.raises(UnsafeStatementError):
            gate.run("return fetch_data('DROP TABLE orders')", "python")
        assert fake_store.statements == []

    def test_forbidden_script_never_runs(self, fake_store):
        gate = ExecutionGate(store=fake_store)

        with pytest.raises(ForbiddenCapabilityError):
            gate.run("import os\nreturn fetch_data('SELECT 1')", "python")
        assert fake_store.statements == []

    @pytest.mark.parametrize("code", [
        'return pd.io.common.os.system("touch {marker}")',
        'run = pd.io.common.os.system\nreturn run("touch {marker}")',
    ])
    def test_library_module_chain_cannot_run_commands(self, tmp_path, code):
        marker = tmp_path / "marker"

        with pytest.raises(ForbiddenCapabilityError):
            ExecutionGate().run(code.format(marker=marker), "python")
        assert not marker.exists()

    def test_aliased_reader_cannot_read_files(self, tmp_path):
        secret = tmp_path / "secret.csv"
        secret.write_text("k,v\npassword,hunter2\n")

        with pytest.raises(ForbiddenCapabilityError):
            ExecutionGate().run(f"reader = pd.read_csv\nreturn reader('{secret}')", "python")

    def test_remote_delegation(self, fake_store):
        remote = RecordingRemote(json.dumps([{"n": 3}]))
        gate = ExecutionGate(store=fake_store, remote=remote)

        assert gate.run("SELECT 3 AS n", "sql") == [{"n": 3}]
        assert gate.run("return 3", "python") == [{"n": 3}]
        assert remote.calls == [
            ("execute_query", {"sql": "SELECT 3 AS n"}),
            ("execute_code", {"code": "return 3"}),
        ]
        assert fake_store.statements == []

    def test_remote_still_checked(self):
        remote = RecordingRemote("[]")
        gate = ExecutionGate(remote=remote)

        with pytest.raises(UnsafeStatementError):
            gate.run("DROP TABLE orders", "sql")
        assert remote.calls == []


# =============================================================================
# Execution Agent
# =============================================================================

class TestExecutionAgent:
    """Test the execute tool."""

    def test_success(self, make_context, sample_catalog):
        store = FakeStore(sample_catalog, results=[[{"n": 7}]])
        agent = ExecutionAgent(make_context(store=store))

        run = agent.invoke("execute", {"code": "SELECT COUNT(*) AS n FROM orders", "kind": "sql"})

        assert run.success is True
        assert run.output.success is True
        assert run.output.data == [{"n": 7}]
        assert run.output.row_count == 1

    def test_gate_rejection_is_a_failed_result(self, make_context, fake_store):
        agent = ExecutionAgent(make_context(store=fake_store))

        run = agent.invoke("execute", {"code": "DROP TABLE orders", "kind": "sql"})

        assert run.success is True
        assert run.output.success is False
        assert run.output.error_code == "UNSAFE_STATEMENT"
        assert "DROP TABLE" in run.output.error

    def test_database_error_is_a_failed_result(self, make_context, sample_catalog):
        store = FakeStore(sample_catalog, results=[RuntimeError('column "nme" does not exist\nLINE 1')])
        agent = ExecutionAgent(make_context(store=store))

        run = agent.invoke("execute", {"code": "SELECT nme FROM customers", "kind": "sql"})

        assert run.output.success is False
        assert run.output.error_code == "EXECUTION_FAULT"
        assert run.output.error == 'column "nme" does not exist'

    def test_empty_code_fails_validation(self, make_context, fake_store):
        agent = ExecutionAgent(make_context(store=fake_store))

        run = agent.invoke("execute", {"code": "", "kind": "sql"})
        assert run.success is False
        assert run.error_code == "VALIDATION_FAILED"
