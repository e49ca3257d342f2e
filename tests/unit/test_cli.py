"""
Test suite for the auditchain command line interface
"""

import gzip
import json

import pytest
from click.testing import CliRunner

from auditchain.cli import cli

from conftest import make_event


@pytest.fixture
def workspace(tmp_path):
    events = tmp_path / "events.jsonl"
    events.write_text(
        "".join(json.dumps(make_event(i).to_attributes()) + "\n" for i in range(1, 4)),
        encoding="utf-8"
    )
    return {
        "events": str(events),
        "state": str(tmp_path / "state.json"),
        "blocks": str(tmp_path / "blocks")
    }


def _invoke(workspace, *args):
    base = ["--log-level", "critical", "--state-backend", "file", "--state-file", workspace["state"]]
    return CliRunner().invoke(cli, base + list(args))


def _run_once(workspace):
    return _invoke(workspace, "run", "--events", workspace["events"], "--output-dir", workspace["blocks"],
                   "--blocksize", "2", "--once")


def test_run_once_seals_block(workspace, tmp_path):
    result = _run_once(workspace)

    assert result.exit_code == 0, result.output
    assert json.loads(result.output)["sealed"] == 1
    assert (tmp_path / "blocks" / "block_1").exists()


def test_state_shows_persisted_chain_state(workspace):
    _run_once(workspace)

    result = _invoke(workspace, "state")

    assert result.exit_code == 0, result.output
    state = json.loads(result.output)
    assert state["blockNumber"] == "1"
    assert len(state["lastHash"]) == 128


def test_state_defaults_without_stored_state(workspace):
    result = _invoke(workspace, "state")

    assert json.loads(result.output) == {"lastExecution": "0", "blockNumber": "0", "lastHash": "root"}


def test_verify_valid_chain_against_state(workspace):
    _run_once(workspace)

    result = _invoke(workspace, "verify", workspace["blocks"], "--check-state")

    assert result.exit_code == 0, result.output
    report = json.loads(result.output)
    assert report["valid"] is True
    assert report["blocks_checked"] == 1


def test_verify_detects_tampered_block(workspace, tmp_path):
    _run_once(workspace)
    block_path = tmp_path / "blocks" / "block_1"
    original = gzip.decompress(block_path.read_bytes())
    block_path.write_bytes(gzip.compress(original.replace(b"doc-2", b"doc-X")))

    result = _invoke(workspace, "verify", workspace["blocks"])

    assert result.exit_code == 1
    report = json.loads(result.output)
    assert report["valid"] is False
    assert report["first_broken_at"] == 1


def test_verify_detects_state_mismatch(workspace, tmp_path):
    _run_once(workspace)
    (tmp_path / "state.json").write_text(json.dumps({"blockNumber": "5"}), encoding="utf-8")

    result = _invoke(workspace, "verify", workspace["blocks"], "--check-state")

    assert result.exit_code == 1
    assert json.loads(result.output)["valid"] is False


def test_run_requires_an_event_source(workspace):
    result = _invoke(workspace, "run", "--once", "--output-dir", workspace["blocks"])

    assert result.exit_code != 0
    assert "event source is required" in result.output


def test_run_rejects_invalid_blocksize(workspace):
    result = _invoke(workspace, "run", "--events", workspace["events"], "--blocksize", "0", "--once")

    assert result.exit_code != 0


def test_run_exits_nonzero_when_cycles_fail(workspace, tmp_path):
    (tmp_path / "state.json").write_text("{not json", encoding="utf-8")

    result = _run_once(workspace)

    assert result.exit_code == 1
    assert '"failures": 1' in result.output


def test_run_halt_on_error_reports_failure(workspace, tmp_path):
    (tmp_path / "state.json").write_text("{not json", encoding="utf-8")

    result = _invoke(workspace, "run", "--events", workspace["events"], "--output-dir", workspace["blocks"],
                     "--once", "--halt-on-error")

    assert result.exit_code == 1
    assert "Cannot read chain state" in result.output


def test_verify_reports_corrupt_compressed_block(workspace, tmp_path):
    blocks = tmp_path / "blocks"
    blocks.mkdir()
    valid = gzip.compress(b"x" * 1000)
    # intact gzip header and trailer around an invalid deflate stream
    (blocks / "block_1").write_bytes(valid[:10] + b"\xff" * 16 + valid[-8:])

    result = _invoke(workspace, "verify", workspace["blocks"])

    assert result.exit_code == 1
    assert "Cannot read blocks" in result.output
