"""
Sealed block and its output artifact.

A sealed block is immutable. The artifact is the form handed to the output
sink: the gzip-compressed block bytes plus the filename and content type
attributes.
"""

import gzip
import io
from dataclasses import dataclass, field
from typing import Any

from auditchain.core.exceptions import OutputEmitError

BLOCK_FILENAME_PREFIX = "block_"
BLOCK_CONTENT_TYPE = "application/gzip"


def block_filename(block_number: int) -> str:
    return f"{BLOCK_FILENAME_PREFIX}{block_number}"


@dataclass(frozen=True)
class SealedBlock:
    """
    Immutable block produced by one invocation.

    Attributes:
        block_number: Position in the chain, starting at 1
        previous_hash: Content hash of the previous block, or "root"
        created_at: Creation time in epoch millis
        event_count: Number of event lines
        content_hash: SHA-512 hex digest of header and event lines
        data: Uncompressed block bytes including the digest line
    """
    block_number: int
    previous_hash: str
    created_at: int
    event_count: int
    content_hash: str
    data: bytes = field(repr=False)

    @property
    def filename(self) -> str:
        return block_filename(self.block_number)

    def to_dict(self) -> dict[str, Any]:
        """Convert block header to dictionary representation."""
        return {
            "block_number": self.block_number,
            "previous_hash": self.previous_hash,
            "created_at": self.created_at,
            "event_count": self.event_count,
            "content_hash": self.content_hash,
            "filename": self.filename
        }

    def __str__(self) -> str:
        return f"SealedBlock(number={self.block_number}, events={self.event_count}, hash={self.content_hash[:10]}...)"


@dataclass(frozen=True)
class BlockArtifact:
    """Compressed block ready for the output sink."""
    filename: str
    data: bytes = field(repr=False)
    content_type: str = BLOCK_CONTENT_TYPE

    @property
    def attributes(self) -> dict[str, str]:
        return {"filename": self.filename, "content-type": self.content_type}

    @classmethod
    def from_block(cls, block: SealedBlock) -> "BlockArtifact":
        """
        Compress a sealed block.

        The compressed bytes only exist once the gzip stream has been closed,
        so a failure half-way never yields a truncated artifact.

        Raises:
            OutputEmitError: If compression fails
        """
        return cls(filename=block.filename, data=compress(block.data))


def compress(data: bytes) -> bytes:
    """Gzip data with a fixed header timestamp so equal input gives equal output."""
    try:
        with io.BytesIO() as buffer:
            with gzip.GzipFile(fileobj=buffer, mode="wb", mtime=0) as gz:
                gz.write(data)
            return buffer.getvalue()
    except (OSError, ValueError) as e:
        raise OutputEmitError(f"Failed to compress block: {e}") from e


def decompress(data: bytes) -> bytes:
    """Inverse of `compress`."""
    return gzip.decompress(data)
