"""
Test suite for the audit event model
"""

import pytest

from auditchain.core.event import AuditEvent, leading_ordinal


def test_leading_ordinal_takes_text_before_first_separator():
    assert leading_ordinal("42-g1AAAAB-extra") == "42"


def test_leading_ordinal_without_separator_returns_whole_token():
    assert leading_ordinal("42") == "42"


def test_leading_ordinal_of_absent_token_is_none():
    assert leading_ordinal(None) is None


def test_leading_ordinal_with_leading_separator_is_empty():
    assert leading_ordinal("-abc") == ""


def test_from_attributes_maps_transport_names():
    event = AuditEvent.from_attributes({
        "arrival.timestamp": "1704110400000",
        "event.source": "orders",
        "doc.id": "doc-1",
        "doc.rev": "3-ff",
        "event.sequence": "7-abc"
    })

    assert event.arrival_timestamp == 1704110400000
    assert event.source_id == "orders"
    assert event.document_id == "doc-1"
    assert event.document_revision == "3-ff"
    assert event.sequence_token == "7-abc"
    assert event.ordinal == "7"


def test_from_attributes_leaves_missing_values_absent():
    event = AuditEvent.from_attributes({"doc.id": "doc-1"})

    assert event.arrival_timestamp is None
    assert event.source_id is None
    assert event.ordinal is None


def test_from_attributes_rejects_non_integer_timestamp():
    with pytest.raises(ValueError):
        AuditEvent.from_attributes({"arrival.timestamp": "yesterday"})
    with pytest.raises(ValueError):
        AuditEvent.from_attributes({"arrival.timestamp": 1.5})


def test_to_attributes_omits_absent_values():
    event = AuditEvent(arrival_timestamp=5, document_id="doc-1")
    assert event.to_attributes() == {"arrival.timestamp": 5, "doc.id": "doc-1"}


def test_malformed_token_detection():
    assert AuditEvent(sequence_token="12").has_malformed_token is True
    assert AuditEvent(sequence_token="12-a").has_malformed_token is False
    assert AuditEvent().has_malformed_token is False
