"""
Audit event model for AuditChain.

An audit event is one record pulled from the upstream queue. Upstream transports
carry events as flat attribute maps; `AuditEvent.from_attributes` and
`AuditEvent.to_attributes` convert between that representation and the typed
event used by the block serializer.
"""

from dataclasses import dataclass
from typing import Any, Mapping, Optional

# Transport attribute names
ATTR_ARRIVAL_TIMESTAMP = "arrival.timestamp"
ATTR_SOURCE_ID = "event.source"
ATTR_DOCUMENT_ID = "doc.id"
ATTR_DOCUMENT_REVISION = "doc.rev"
ATTR_SEQUENCE_TOKEN = "event.sequence"

SEQUENCE_SEPARATOR = "-"


def leading_ordinal(sequence_token: Optional[str]) -> Optional[str]:
    """
    Return the significant part of a sequence token.

    Tokens look like "<ordinal>-<opaque-suffix>". Only the ordinal is stable
    across restarts of the source, so the suffix is dropped. A token without a
    separator is returned whole.

    Args:
        sequence_token: Raw sequence token, or None

    Returns:
        Text before the first "-", or None if the token is absent
    """
    if sequence_token is None:
        return None
    return sequence_token.split(SEQUENCE_SEPARATOR, 1)[0]


@dataclass(frozen=True)
class AuditEvent:
    """One audit record as drained from the event source."""
    arrival_timestamp: Optional[int] = None  # epoch millis
    source_id: Optional[str] = None
    document_id: Optional[str] = None
    document_revision: Optional[str] = None
    sequence_token: Optional[str] = None

    @property
    def ordinal(self) -> Optional[str]:
        return leading_ordinal(self.sequence_token)

    @property
    def has_malformed_token(self) -> bool:
        """True when a sequence token is present but carries no separator."""
        return self.sequence_token is not None and SEQUENCE_SEPARATOR not in self.sequence_token

    @classmethod
    def from_attributes(cls, attributes: Mapping[str, Any]) -> "AuditEvent":
        """
        Create an event from a transport attribute map.

        Args:
            attributes: Mapping using the `event.*`/`doc.*` attribute names

        Returns:
            AuditEvent instance

        Raises:
            ValueError: If the arrival timestamp is not an integer
        """
        arrival = attributes.get(ATTR_ARRIVAL_TIMESTAMP)
        if arrival is not None:
            if isinstance(arrival, bool) or isinstance(arrival, float):
                raise ValueError(f"arrival timestamp must be an integer, got {arrival!r}")
            arrival = int(arrival)

        return cls(
            arrival_timestamp=arrival,
            source_id=_optional_str(attributes.get(ATTR_SOURCE_ID)),
            document_id=_optional_str(attributes.get(ATTR_DOCUMENT_ID)),
            document_revision=_optional_str(attributes.get(ATTR_DOCUMENT_REVISION)),
            sequence_token=_optional_str(attributes.get(ATTR_SEQUENCE_TOKEN))
        )

    def to_attributes(self) -> dict[str, Any]:
        """Convert the event to a transport attribute map, omitting absent values."""
        attributes = {
            ATTR_ARRIVAL_TIMESTAMP: self.arrival_timestamp,
            ATTR_SOURCE_ID: self.source_id,
            ATTR_DOCUMENT_ID: self.document_id,
            ATTR_DOCUMENT_REVISION: self.document_revision,
            ATTR_SEQUENCE_TOKEN: self.sequence_token
        }
        return {k: v for k, v in attributes.items() if v is not None}


def _optional_str(value: Any) -> Optional[str]:
    return None if value is None else str(value)
