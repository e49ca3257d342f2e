"""
AuditChain
==========

Tamper-evident audit ledger: groups a stream of audit events into sealed,
SHA-512 chained blocks and keeps the chain position in a durable state store.
"""

from auditchain.units.version import get_version

VERSION = (0, 1, 0, "dev", 1)

__version__ = get_version(VERSION)

__author__ = "AuditChain contributors"

__all__ = ["VERSION", "__version__"]
