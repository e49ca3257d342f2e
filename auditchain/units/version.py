"""
Version utility functions for AuditChain.

This module provides functions for managing and retrieving version information.
"""

from typing import Tuple, Optional

VersionTuple = Tuple[int, int, int, str, int]


def get_version(version: Optional[VersionTuple] = None) -> str:
    """
    Return a PEP 440-compliant version number from VERSION.

    Args:
        version: Version tuple (major, minor, micro, releaselevel, serial)
                If not provided, uses the package VERSION tuple

    Returns:
        PEP 440-compliant version string
    """
    major, minor, micro, releaselevel, serial = version or _package_version()

    version_str = f"{major}.{minor}"
    if micro is not None:
        version_str += f".{micro}"

    if releaselevel != "final":
        if releaselevel == "dev":
            version_str += ".dev"
        else:
            # PEP 440 pre-release segments: a, b, rc
            version_str += {"alpha": "a", "beta": "b"}.get(releaselevel, releaselevel)
        if serial > 0:
            version_str += str(serial)

    return version_str


def get_major_version(version: Optional[VersionTuple] = None) -> str:
    """
    Return the major version number from VERSION.

    Args:
        version: Version tuple (major, minor, micro, releaselevel, serial)
                If not provided, uses the package VERSION tuple

    Returns:
        Major version string (e.g., "0.1")
    """
    major, minor, _, _, _ = version or _package_version()
    return f"{major}.{minor}"


def _package_version() -> VersionTuple:
    from auditchain import VERSION
    return VERSION
