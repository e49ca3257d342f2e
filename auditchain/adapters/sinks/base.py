"""
Output sink interface.

A sink receives one artifact per sealed block. `retract` undoes an `emit` when
the invocation fails afterwards (the chain state could not be saved), so that
output of a failed invocation never stays visible.
"""

from abc import ABC, abstractmethod

from auditchain.core.block import BlockArtifact


class BlockSink(ABC):
    """Destination for sealed block artifacts"""

    @abstractmethod
    def emit(self, artifact: BlockArtifact) -> None:
        """
        Deliver an artifact completely or not at all.

        Raises:
            OutputEmitError: If the artifact cannot be delivered
        """

    @abstractmethod
    def retract(self, artifact: BlockArtifact) -> None:
        """
        Remove a previously emitted artifact.

        Raises:
            OutputEmitError: If the artifact cannot be removed
        """
