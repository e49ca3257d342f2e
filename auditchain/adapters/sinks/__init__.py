from .base import BlockSink
from .memory_sink import MemoryBlockSink
from .directory_sink import DirectoryBlockSink

__all__ = ['BlockSink', 'MemoryBlockSink', 'DirectoryBlockSink']
