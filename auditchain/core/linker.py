"""
Hash chain linking and verification.

Sealing computes the SHA-512 digest of the rendered block content and appends it
as the final line. The digest covers the previous block's hash (first header
line), which is what chains the blocks together. The verification helpers
re-derive digests from sealed block bytes and check the previous-hash links
starting at the genesis value.
"""

import hashlib
import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from auditchain.core.exceptions import ChainIntegrityError
from auditchain.core.serializer import (
    CREATED_AT_PREFIX,
    ENCODING,
    LINE_TERMINATOR,
    PREVIOUS_HASH_PREFIX
)

logger = logging.getLogger(__name__)

GENESIS_HASH = "root"
DIGEST_HEX_LENGTH = 128


def compute_digest(content: bytes) -> str:
    """Return the lowercase hex SHA-512 digest of the content."""
    return hashlib.sha512(content).hexdigest()


@dataclass(frozen=True)
class SealResult:
    """Digest of a block and the final bytes including the digest line."""
    digest: str
    final_bytes: bytes


def seal(content: bytes) -> SealResult:
    """
    Seal rendered block content.

    Args:
        content: Header and event bytes produced by the serializer

    Returns:
        SealResult with the digest and `content + digest + "\\n"`
    """
    digest = compute_digest(content)
    return SealResult(
        digest=digest,
        final_bytes=content + (digest + LINE_TERMINATOR).encode(ENCODING)
    )


@dataclass(frozen=True)
class ParsedBlock:
    """Sealed block split back into its parts."""
    previous_hash: str
    created_at: str
    event_lines: list[str]
    content: bytes
    content_hash: str


def parse_block(final_bytes: bytes) -> ParsedBlock:
    """
    Split sealed block bytes into header, event lines and digest.

    Raises:
        ChainIntegrityError: If the bytes are not a well-formed sealed block
    """
    try:
        text = final_bytes.decode(ENCODING)
    except UnicodeDecodeError as e:
        raise ChainIntegrityError(f"Block is not valid {ENCODING}: {e}") from e

    if not text.endswith(LINE_TERMINATOR):
        raise ChainIntegrityError("Block does not end with a line terminator")

    lines = text[:-1].split(LINE_TERMINATOR)
    if len(lines) < 3:
        raise ChainIntegrityError(f"Block has {len(lines)} lines, expected at least 3")

    header, created, digest = lines[0], lines[1], lines[-1]
    if not header.startswith(PREVIOUS_HASH_PREFIX):
        raise ChainIntegrityError("Block is missing the previous-hash header")
    if not created.startswith(CREATED_AT_PREFIX):
        raise ChainIntegrityError("Block is missing the creation-time header")

    content = final_bytes[:len(final_bytes) - len((digest + LINE_TERMINATOR).encode(ENCODING))]
    return ParsedBlock(
        previous_hash=header[len(PREVIOUS_HASH_PREFIX):],
        created_at=created[len(CREATED_AT_PREFIX):],
        event_lines=lines[2:-1],
        content=content,
        content_hash=digest
    )


def verify_block(final_bytes: bytes) -> ParsedBlock:
    """
    Recompute the digest of a sealed block and compare it with the stored one.

    Returns:
        The parsed block

    Raises:
        ChainIntegrityError: If the block is malformed or the digest differs
    """
    parsed = parse_block(final_bytes)
    expected = compute_digest(parsed.content)
    if parsed.content_hash != expected:
        raise ChainIntegrityError(
            f"Digest mismatch: stored {parsed.content_hash[:16]}..., computed {expected[:16]}..."
        )
    return parsed


@dataclass(frozen=True)
class ChainReport:
    """Outcome of a chain verification."""
    valid: bool
    blocks_checked: int
    first_broken_at: Optional[int] = None
    error: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "blocks_checked": self.blocks_checked,
            "first_broken_at": self.first_broken_at,
            "error": self.error
        }


def verify_chain(blocks: Iterable[bytes], genesis_hash: str = GENESIS_HASH) -> ChainReport:
    """
    Verify digests and previous-hash links of consecutive sealed blocks.

    Args:
        blocks: Uncompressed sealed block bytes, block 1 first
        genesis_hash: Expected previous hash of the first block

    Returns:
        ChainReport; `first_broken_at` is the 1-based position of the first bad block
    """
    expected_previous = genesis_hash
    checked = 0
    for position, final_bytes in enumerate(blocks, start=1):
        try:
            parsed = verify_block(final_bytes)
            if parsed.previous_hash != expected_previous:
                raise ChainIntegrityError(
                    f"Previous hash {parsed.previous_hash[:16]} does not match "
                    f"{expected_previous[:16]}",
                    block_number=position
                )
        except ChainIntegrityError as e:
            logger.error(f"Chain verification failed at block {position}: {e}")
            return ChainReport(valid=False, blocks_checked=checked,
                               first_broken_at=position, error=str(e))
        expected_previous = parsed.content_hash
        checked += 1

    return ChainReport(valid=True, blocks_checked=checked)
