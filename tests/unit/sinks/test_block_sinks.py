"""
Test suite for block sinks
"""

import pytest

from auditchain.adapters.sinks import DirectoryBlockSink, MemoryBlockSink
from auditchain.core.block import BlockArtifact, compress
from auditchain.core.exceptions import OutputEmitError


def _artifact(number, payload=b"payload\n"):
    return BlockArtifact(filename=f"block_{number}", data=compress(payload))


def test_memory_sink_emit_and_retract():
    sink = MemoryBlockSink()
    artifact = _artifact(1)

    sink.emit(artifact)
    assert len(sink) == 1
    sink.retract(artifact)
    assert len(sink) == 0


def test_directory_sink_writes_block_file(tmp_path):
    sink = DirectoryBlockSink(str(tmp_path / "blocks"))
    artifact = _artifact(1)

    sink.emit(artifact)

    assert (tmp_path / "blocks" / "block_1").read_bytes() == artifact.data
    assert [p.name for p in (tmp_path / "blocks").iterdir()] == ["block_1"]


def test_directory_sink_replaces_stale_block(tmp_path):
    sink = DirectoryBlockSink(str(tmp_path))
    sink.emit(_artifact(1, b"interrupted\n"))

    sink.emit(_artifact(1, b"sealed\n"))

    assert sink.read_blocks() == [b"sealed\n"]
    assert sorted(p.name for p in tmp_path.iterdir()) == ["block_1"]


def test_directory_sink_retract_removes_file(tmp_path):
    sink = DirectoryBlockSink(str(tmp_path))
    artifact = _artifact(1)
    sink.emit(artifact)

    sink.retract(artifact)

    assert not (tmp_path / "block_1").exists()


def test_directory_sink_rejects_foreign_filenames(tmp_path):
    sink = DirectoryBlockSink(str(tmp_path))

    with pytest.raises(OutputEmitError):
        sink.emit(BlockArtifact(filename="../escape", data=b""))


def test_directory_sink_rejects_path_traversal():
    with pytest.raises(ValueError):
        DirectoryBlockSink("../blocks")


def test_read_blocks_in_numeric_order(tmp_path):
    sink = DirectoryBlockSink(str(tmp_path))
    for number in (10, 2, 1):
        sink.emit(_artifact(number, f"block {number}\n".encode()))
    (tmp_path / "notes.txt").write_text("ignored")

    assert sink.block_numbers() == [1, 2, 10]
    assert sink.read_blocks() == [b"block 1\n", b"block 2\n", b"block 10\n"]
