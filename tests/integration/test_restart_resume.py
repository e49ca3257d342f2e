"""
Integration tests: controller restarts against durable adapters

A new controller built over the same state file and block directory must pick up
the chain where the previous one stopped, and the resulting directory must
verify end to end.
"""

import gzip
from unittest.mock import patch

import pytest

from auditchain.adapters.sinks.directory_sink import DirectoryBlockSink
from auditchain.adapters.sources.queue_source import QueueEventSource
from auditchain.adapters.storage.file_storage import FileStateStore
from auditchain.core.controller import BlockController, InvocationOutcome
from auditchain.core.exceptions import StateSaveError
from auditchain.core.linker import parse_block, verify_chain
from auditchain.core.state import ChainState

from conftest import BASE_MILLIS, make_event


def _controller(tmp_path):
    store = FileStateStore(str(tmp_path / "state.json"))
    sink = DirectoryBlockSink(str(tmp_path / "blocks"))
    return BlockController(store, sink), store, sink


def _batch(first, count=3):
    source = QueueEventSource()
    for i in range(first, first + count):
        source.offer(make_event(i))
    return source


def test_chain_resumes_after_restart(tmp_path, utc_config):
    controller, _, _ = _controller(tmp_path)
    first = controller.run_once(_batch(1), utc_config, now=BASE_MILLIS)

    controller, store, sink = _controller(tmp_path)
    second = controller.run_once(_batch(4), utc_config, now=BASE_MILLIS + 60_000)

    assert first.outcome == second.outcome == InvocationOutcome.SEALED
    assert second.block.block_number == 2

    blocks = sink.read_blocks()
    assert parse_block(blocks[1]).previous_hash == parse_block(blocks[0]).content_hash
    report = verify_chain(blocks)
    assert report.valid and report.blocks_checked == 2

    state = ChainState.from_map(store.get())
    assert state.block_number == 2
    assert state.last_hash == parse_block(blocks[-1]).content_hash


def test_retracted_block_does_not_break_chain(tmp_path, utc_config):
    controller, store, sink = _controller(tmp_path)
    controller.run_once(_batch(1), utc_config, now=BASE_MILLIS)

    with patch.object(store, "set", side_effect=StateSaveError("simulated crash")):
        with pytest.raises(StateSaveError):
            controller.run_once(_batch(4), utc_config, now=BASE_MILLIS + 1000)

    assert sink.block_numbers() == [1]

    resumed = controller.run_once(_batch(7), utc_config, now=BASE_MILLIS + 2000)
    assert resumed.block.block_number == 2
    assert verify_chain(sink.read_blocks()).valid

    events = [line for block in sink.read_blocks() for line in parse_block(block).event_lines]
    assert [line.rsplit("|", 1)[1] for line in events] == ["1", "2", "3", "7", "8", "9"]


def test_block_files_are_gzip(tmp_path, utc_config):
    controller, _, _ = _controller(tmp_path)
    controller.run_once(_batch(1), utc_config, now=BASE_MILLIS)

    raw = (tmp_path / "blocks" / "block_1").read_bytes()
    assert gzip.decompress(raw).startswith(b"Hash of previous block : root\n")


def test_chain_recovers_from_block_left_by_crash(tmp_path, utc_config):
    blocks_dir = tmp_path / "blocks"
    blocks_dir.mkdir()
    # emitted before the process died, state was never saved
    (blocks_dir / "block_1").write_bytes(gzip.compress(b"Hash of previous block : root\n"))

    controller, store, sink = _controller(tmp_path)
    first = controller.run_once(_batch(1), utc_config, now=BASE_MILLIS)
    second = controller.run_once(_batch(4), utc_config, now=BASE_MILLIS + 1000)

    assert first.sealed and second.sealed
    assert sink.block_numbers() == [1, 2]
    assert verify_chain(sink.read_blocks()).valid
    assert ChainState.from_map(store.get()).block_number == 2
