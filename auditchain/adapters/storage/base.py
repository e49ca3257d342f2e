"""
Chain state store interfaces.

A chain state store is a small durable key-value map holding the string-encoded
chain state. Stores that can also replace the map conditionally implement
`ConditionalStateStore`, which lets the block controller detect a second writer
instead of silently overwriting its progress.
"""

from abc import ABC, abstractmethod
from typing import Mapping, Optional


class ChainStateStore(ABC):
    """Durable key-value map for the chain state"""

    @abstractmethod
    def get(self) -> Optional[dict[str, str]]:
        """
        Read the stored map.

        Returns:
            The stored map, or None if nothing has been stored yet

        Raises:
            StateLoadError: If the store cannot be read
        """

    @abstractmethod
    def set(self, mapping: Mapping[str, str]) -> None:
        """
        Replace the stored map atomically.

        Raises:
            StateSaveError: If the store cannot be written
        """

    def close(self) -> None:
        """Release backend resources."""


class ConditionalStateStore(ChainStateStore):
    """Chain state store with compare-and-set support"""

    @abstractmethod
    def compare_and_set(self, expected: Optional[Mapping[str, str]], mapping: Mapping[str, str]) -> bool:
        """
        Replace the stored map only if it still equals `expected`.

        Args:
            expected: Map read earlier, or None if the store was empty
            mapping: New map to store

        Returns:
            True if the map was replaced, False if the stored map had changed

        Raises:
            StateSaveError: If the store cannot be written
        """
