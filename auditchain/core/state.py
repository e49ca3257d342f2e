"""
Chain state: the durable cursor needed to resume chaining.

The state is an immutable value. An invocation stages the next state in memory
by deriving a new value and only hands it to the store once the block has been
delivered, so a failed invocation never leaves a half-advanced cursor behind.
"""

from dataclasses import dataclass, replace
from typing import Mapping, Optional

from auditchain.core.exceptions import StateLoadError
from auditchain.core.linker import GENESIS_HASH

# Store keys
LAST_EXECUTION = "lastExecution"
BLOCK_NUMBER = "blockNumber"
LAST_HASH = "lastHash"

STATE_KEYS = (LAST_EXECUTION, BLOCK_NUMBER, LAST_HASH)


@dataclass(frozen=True)
class ChainState:
    """Position of the chain: last trigger time, sealed block count, last block hash."""
    last_execution_time: int = 0
    block_number: int = 0
    last_hash: str = GENESIS_HASH

    def with_execution_time(self, now: int) -> "ChainState":
        """State after a trigger that sealed nothing."""
        return replace(self, last_execution_time=now)

    def advance(self, digest: str, now: int) -> "ChainState":
        """State after sealing one block with the given digest."""
        return ChainState(
            last_execution_time=now,
            block_number=self.block_number + 1,
            last_hash=digest
        )

    def to_map(self) -> dict[str, str]:
        """Encode the state as the string map kept by the store."""
        return {
            LAST_EXECUTION: str(self.last_execution_time),
            BLOCK_NUMBER: str(self.block_number),
            LAST_HASH: self.last_hash
        }

    @classmethod
    def from_map(cls, state_map: Optional[Mapping[str, str]]) -> "ChainState":
        """
        Decode a stored state map; missing keys take their defaults.

        Raises:
            StateLoadError: If a stored value cannot be decoded
        """
        state = cls()
        if not state_map:
            return state

        try:
            if LAST_EXECUTION in state_map:
                state = replace(state, last_execution_time=int(state_map[LAST_EXECUTION]))
            if BLOCK_NUMBER in state_map:
                state = replace(state, block_number=int(state_map[BLOCK_NUMBER]))
        except (TypeError, ValueError) as e:
            raise StateLoadError(f"Corrupt chain state {dict(state_map)!r}: {e}") from e

        if state.block_number < 0:
            raise StateLoadError(f"Corrupt chain state: negative block number {state.block_number}")

        if LAST_HASH in state_map:
            last_hash = state_map[LAST_HASH]
            if not isinstance(last_hash, str) or not last_hash:
                raise StateLoadError(f"Corrupt chain state: invalid last hash {last_hash!r}")
            state = replace(state, last_hash=last_hash)

        return state

    def merged_into(self, state_map: Optional[Mapping[str, str]]) -> dict[str, str]:
        """Return the stored map with this state's keys overwritten, keeping any other keys."""
        merged = dict(state_map or {})
        merged.update(self.to_map())
        return merged
