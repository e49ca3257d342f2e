"""
Pytest configuration for AuditChain project.

Ensures project root is on sys.path so `import auditchain` resolves during test
collection, and provides shared event/config fixtures.
"""

import os
import sys
from datetime import timezone

import pytest

# Compute project root (parent of this tests directory)
_PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if _PROJECT_ROOT not in sys.path:
    sys.path.insert(0, _PROJECT_ROOT)

from auditchain.adapters.sinks.memory_sink import MemoryBlockSink  # noqa: E402
from auditchain.adapters.sources.queue_source import QueueEventSource  # noqa: E402
from auditchain.adapters.storage.memory_storage import MemoryStateStore  # noqa: E402
from auditchain.config.settings import BlockConfig  # noqa: E402
from auditchain.core.event import AuditEvent  # noqa: E402

# 2024-01-01 12:00:00 UTC
BASE_MILLIS = 1_704_110_400_000


def make_event(ordinal: int, suffix: str = "x", arrival: int | None = None) -> AuditEvent:
    """Build a fully populated event with sequence token "<ordinal>-<suffix>"."""
    return AuditEvent(
        arrival_timestamp=BASE_MILLIS + ordinal * 1000 if arrival is None else arrival,
        source_id="orders",
        document_id=f"doc-{ordinal}",
        document_revision=f"{ordinal}-rev",
        sequence_token=f"{ordinal}-{suffix}"
    )


@pytest.fixture
def utc_config():
    """Block size 2, interval 15 minutes, timestamps rendered in UTC."""
    return BlockConfig(interval_minutes=15, block_size=2, timezone=timezone.utc)


@pytest.fixture
def store():
    return MemoryStateStore()


@pytest.fixture
def sink():
    return MemoryBlockSink()


@pytest.fixture
def source():
    return QueueEventSource()


@pytest.fixture
def three_events():
    return [make_event(1, "a"), make_event(2, "b"), make_event(3, "c")]
