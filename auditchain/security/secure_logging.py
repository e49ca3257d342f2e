"""
Secure Logging Utilities for AuditChain

Event attributes arrive from upstream producers and end up in log messages
(malformed sequence tokens, undecodable transport items). This module escapes
such values before they are logged so a crafted attribute cannot forge log lines
or inject terminal escape sequences.
"""

import json
from typing import Any, Mapping

# Control characters escaped in logged values
_ESCAPES = str.maketrans({
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\x00": "\\x00",
    "\x1b": "\\x1b",  # ANSI escape
})

MAX_LOGGED_LENGTH = 500
TRUNCATION_MARKER = "...[truncated]"


def sanitize_for_log(value: Any, max_length: int = MAX_LOGGED_LENGTH) -> str:
    """
    Render a value as a single, bounded log-safe line.

    Bytes (raw transport payloads) are decoded leniently, mappings such as
    event attribute maps are rendered as JSON with every value escaped.

    Args:
        value: Value to sanitize
        max_length: Longest string kept before truncation

    Returns:
        Safe string representation
    """
    if value is None:
        return "null"
    if isinstance(value, (bool, int, float)):
        return str(value)

    if isinstance(value, bytes):
        value = value.decode("utf-8", errors="replace")

    if isinstance(value, Mapping):
        return json.dumps(
            {str(key): sanitize_for_log(item, max_length) for key, item in value.items()},
            ensure_ascii=True
        )
    if isinstance(value, (list, tuple)):
        return json.dumps([sanitize_for_log(item, max_length) for item in value], ensure_ascii=True)

    text = str(value).translate(_ESCAPES)
    if len(text) > max_length:
        text = text[:max_length] + TRUNCATION_MARKER
    return text
