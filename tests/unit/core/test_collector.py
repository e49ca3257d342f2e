"""
Test suite for batch collection
"""

import logging
from unittest.mock import Mock

import pytest

from auditchain.core.collector import drain
from auditchain.core.event import AuditEvent
from auditchain.core.exceptions import EventSourceError

from conftest import make_event


def test_drain_returns_events_in_arrival_order(source):
    events = [make_event(2), make_event(1), make_event(2)]
    for event in events:
        source.offer(event)

    assert drain(source) == events
    assert source.pending_count() == 0


def test_drain_empty_source(source):
    assert drain(source) == []


def test_drain_warns_about_tokens_without_separator(source, caplog):
    source.offer(AuditEvent(sequence_token="42"))

    with caplog.at_level(logging.WARNING, logger="auditchain.core.collector"):
        events = drain(source)

    assert events[0].ordinal == "42"
    assert "42" in caplog.text


def test_drain_propagates_source_errors():
    failing = Mock()
    failing.poll.side_effect = [make_event(1), EventSourceError("connection reset")]

    with pytest.raises(EventSourceError):
        drain(failing)
