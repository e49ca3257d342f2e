"""AuditChain exception hierarchy."""


class AuditChainError(Exception):
    """Base exception for all AuditChain errors."""


class ConfigurationError(AuditChainError):
    """Raised when configuration is invalid"""


class StateLoadError(AuditChainError):
    """Raised when the chain state store cannot be read or holds corrupt values."""


class StateSaveError(AuditChainError):
    """Raised when the chain state store cannot be written."""


class StateConflictError(StateSaveError):
    """Raised when a compare-and-set save finds the stored state changed underneath it."""


class OutputEmitError(AuditChainError):
    """Raised when a sealed block cannot be compressed or delivered to the sink."""


class EventSourceError(AuditChainError):
    """Raised when the event source fails or yields an item that cannot be decoded."""


class ChainIntegrityError(AuditChainError):
    """Raised when a sealed block's digest or previous-hash link does not verify."""

    def __init__(self, message: str, block_number: int | None = None):
        super().__init__(message)
        self.message = message
        self.block_number = block_number
