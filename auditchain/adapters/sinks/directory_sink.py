"""
Directory block sink.

Each artifact is written as `<directory>/block_<n>`. The bytes go to a hidden
temporary file first, are synced to disk and then renamed into place, so
readers never see a partially written block. A file already holding the
target name is replaced: the block controller numbers blocks from the
persisted chain state, so such a file is output of an invocation that was
interrupted before saving its state.
"""

import logging
import os
import re
from pathlib import Path

from auditchain.adapters.sinks.base import BlockSink
from auditchain.core.block import BLOCK_FILENAME_PREFIX, BlockArtifact, decompress
from auditchain.core.exceptions import OutputEmitError

logger = logging.getLogger(__name__)

_BLOCK_FILE_PATTERN = re.compile(rf"^{BLOCK_FILENAME_PREFIX}(\d+)$")


class DirectoryBlockSink(BlockSink):
    """Writes block artifacts to a directory"""

    def __init__(self, directory: str = "data/blocks"):
        """
        Args:
            directory: Target directory, created if missing
        """
        self.directory = Path(directory)
        if ".." in self.directory.parts:
            raise ValueError(f"Security: Invalid output directory '{directory}'. Path traversal detected.")
        self.directory.mkdir(parents=True, exist_ok=True)
        logger.info(f"Directory block sink initialized at: {self.directory}")

    @staticmethod
    def _validate_filename(name: str) -> None:
        """Only `block_<n>` names are written."""
        if not _BLOCK_FILE_PATTERN.match(name):
            raise OutputEmitError(f"Security: Invalid block filename '{name}'")

    def _path_for(self, artifact: BlockArtifact) -> Path:
        self._validate_filename(artifact.filename)
        return self.directory / artifact.filename

    def emit(self, artifact: BlockArtifact) -> None:
        target = self._path_for(artifact)
        if target.exists():
            logger.warning(f"Replacing stale {artifact.filename} left by an interrupted invocation")

        tmp_path = self.directory / f".{artifact.filename}.tmp"
        try:
            with open(tmp_path, "wb") as f:
                f.write(artifact.data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, target)
        except OSError as e:
            tmp_path.unlink(missing_ok=True)
            logger.error(f"Failed to write block {target}: {e}")
            raise OutputEmitError(f"Cannot write block to {target}: {e}") from e

        logger.info(f"Wrote {artifact.filename} ({len(artifact.data)} bytes) to {self.directory}")

    def retract(self, artifact: BlockArtifact) -> None:
        target = self._path_for(artifact)
        try:
            target.unlink(missing_ok=True)
        except OSError as e:
            raise OutputEmitError(f"Cannot remove block {target}: {e}") from e
        logger.warning(f"Retracted {artifact.filename} from {self.directory}")

    def block_numbers(self) -> list[int]:
        """Numbers of the blocks present in the directory, ascending."""
        numbers = []
        for path in self.directory.iterdir():
            match = _BLOCK_FILE_PATTERN.match(path.name)
            if match and path.is_file():
                numbers.append(int(match.group(1)))
        return sorted(numbers)

    def read_blocks(self) -> list[bytes]:
        """Uncompressed bytes of every block in the directory, in chain order."""
        blocks = []
        for number in self.block_numbers():
            with open(self.directory / f"{BLOCK_FILENAME_PREFIX}{number}", "rb") as f:
                blocks.append(decompress(f.read()))
        return blocks
