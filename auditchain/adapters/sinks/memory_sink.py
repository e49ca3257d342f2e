"""In-memory block sink, mainly for tests and embedding."""

from auditchain.adapters.sinks.base import BlockSink
from auditchain.core.block import BlockArtifact


class MemoryBlockSink(BlockSink):
    """Collects emitted artifacts in a list"""

    def __init__(self):
        self.artifacts: list[BlockArtifact] = []

    def emit(self, artifact: BlockArtifact) -> None:
        self.artifacts.append(artifact)

    def retract(self, artifact: BlockArtifact) -> None:
        if artifact in self.artifacts:
            self.artifacts.remove(artifact)

    def __len__(self) -> int:
        return len(self.artifacts)
