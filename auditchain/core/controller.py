"""
Block controller for AuditChain.

The controller runs once per scheduling invocation:

    IDLE -> EVALUATING -> SKIPPED
                       -> DRAINING -> EMPTY_UPDATE -> PERSISTED
                                   -> SEALING      -> PERSISTED

Chain state is loaded at the start, staged in memory and saved only at the very
end. The block artifact is emitted before the state is saved; if saving fails
the artifact is retracted again. Either way a failed invocation leaves neither
an advanced chain state nor a block behind. Events drained by a failed
invocation are lost to this controller; redelivery is up to the transport.
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from auditchain.adapters.sinks.base import BlockSink
from auditchain.adapters.sources.base import EventSource
from auditchain.adapters.storage.base import ChainStateStore, ConditionalStateStore
from auditchain.config.settings import BlockConfig
from auditchain.core.block import BlockArtifact, SealedBlock
from auditchain.core.collector import drain
from auditchain.core.event import AuditEvent
from auditchain.core.exceptions import (
    ConfigurationError,
    EventSourceError,
    OutputEmitError,
    StateConflictError,
    StateLoadError,
    StateSaveError
)
from auditchain.core.linker import seal
from auditchain.core.serializer import BlockSerializer
from auditchain.core.state import ChainState
from auditchain.core.trigger import should_seal

logger = logging.getLogger(__name__)


def current_time_millis() -> int:
    return int(time.time() * 1000)


class ControllerPhase(Enum):
    """Phases of one controller invocation"""
    IDLE = "idle"
    EVALUATING = "evaluating"
    SKIPPED = "skipped"
    DRAINING = "draining"
    EMPTY_UPDATE = "empty_update"
    SEALING = "sealing"
    PERSISTED = "persisted"


class InvocationOutcome(Enum):
    """What a successful invocation did"""
    SKIPPED = "skipped"
    EMPTY_UPDATE = "empty_update"
    SEALED = "sealed"


@dataclass(frozen=True)
class InvocationResult:
    """Result of `BlockController.run_once`."""
    outcome: InvocationOutcome
    state: ChainState
    events_drained: int = 0
    block: Optional[SealedBlock] = None
    artifact: Optional[BlockArtifact] = None

    @property
    def sealed(self) -> bool:
        return self.outcome == InvocationOutcome.SEALED


class BlockController:
    """
    Seals batches of audit events into hash-chained blocks.

    The controller keeps no configuration of its own; the block size, interval
    and time zone arrive with every `run_once` call.
    """

    def __init__(
        self,
        store: ChainStateStore,
        sink: BlockSink,
        clock: Optional[Callable[[], int]] = None,
        use_compare_and_set: bool = False
    ):
        """
        Initialize the block controller.

        Args:
            store: Chain state store
            sink: Destination of sealed block artifacts
            clock: Returns the current time in epoch millis
            use_compare_and_set: Save state only if nobody changed it since it was
                loaded (requires a ConditionalStateStore)
        """
        if use_compare_and_set and not isinstance(store, ConditionalStateStore):
            raise ConfigurationError(
                f"{type(store).__name__} does not support compare-and-set saves"
            )

        self.store = store
        self.sink = sink
        self.clock = clock or current_time_millis
        self.use_compare_and_set = use_compare_and_set
        self.phase = ControllerPhase.IDLE

        self.statistics = {
            "invocations": 0,
            "skipped": 0,
            "empty_updates": 0,
            "blocks_sealed": 0,
            "events_sealed": 0,
            "failures": 0,
            "events_lost": 0
        }

    def load_state(self) -> tuple[ChainState, Optional[dict[str, str]]]:
        """
        Load the chain state, applying defaults when nothing is stored.

        Returns:
            Decoded state and the raw stored map (None if absent)

        Raises:
            StateLoadError: If the store is unreadable or holds corrupt values
        """
        stored = self.store.get()
        return ChainState.from_map(stored), stored

    def run_once(self, source: EventSource, config: BlockConfig, now: Optional[int] = None) -> InvocationResult:
        """
        Run one invocation: evaluate the trigger and seal a block if it fires.

        Args:
            source: Event source to drain
            config: Block creation options for this invocation
            now: Current epoch millis (defaults to the controller clock)

        Returns:
            InvocationResult describing what happened

        Raises:
            StateLoadError: Chain state could not be loaded; nothing was drained
            EventSourceError: The source failed while being read
            OutputEmitError: The block could not be rendered, compressed or emitted
            StateSaveError: The new chain state could not be saved
        """
        now = self.clock() if now is None else now
        self.statistics["invocations"] += 1
        self._enter(ControllerPhase.EVALUATING)

        try:
            state, stored = self.load_state()
        except StateLoadError as e:
            self._fail(f"Could not load chain state: {e}")
            raise

        try:
            pending = source.pending_count()
        except EventSourceError as e:
            self._fail(f"Could not read pending event count: {e}")
            raise

        if not should_seal(pending, config.block_size, state.last_execution_time,
                           config.interval_minutes, now):
            self._enter(ControllerPhase.SKIPPED)
            self.statistics["skipped"] += 1
            logger.debug(f"Trigger not met ({pending} pending), skipping cycle")
            return InvocationResult(outcome=InvocationOutcome.SKIPPED, state=state)

        self._enter(ControllerPhase.DRAINING)
        try:
            events = drain(source)
        except EventSourceError as e:
            self._fail(f"Event source failed while draining: {e}")
            raise

        if not events:
            return self._empty_update(state, stored, now)
        return self._seal_block(state, stored, events, config, now)

    def _empty_update(self, state: ChainState, stored: Optional[dict[str, str]], now: int) -> InvocationResult:
        """Trigger fired but nothing was drained: only the execution time advances."""
        self._enter(ControllerPhase.EMPTY_UPDATE)
        new_state = state.with_execution_time(now)
        try:
            self._persist(stored, new_state)
        except StateSaveError as e:
            self._fail(f"Could not save chain state after empty trigger: {e}")
            raise

        self._enter(ControllerPhase.PERSISTED)
        self.statistics["empty_updates"] += 1
        logger.info("No events to seal, updated last execution time")
        return InvocationResult(outcome=InvocationOutcome.EMPTY_UPDATE, state=new_state)

    def _seal_block(
        self,
        state: ChainState,
        stored: Optional[dict[str, str]],
        events: list[AuditEvent],
        config: BlockConfig,
        now: int
    ) -> InvocationResult:
        self._enter(ControllerPhase.SEALING)
        try:
            content = BlockSerializer(config.timezone).render(state.last_hash, now, events)
        except (ValueError, OverflowError, OSError) as e:
            self._fail(f"Could not render block: {e}", events_lost=len(events))
            raise OutputEmitError(f"Failed to render block: {e}") from e

        sealed = seal(content)
        new_state = state.advance(sealed.digest, now)
        block = SealedBlock(
            block_number=new_state.block_number,
            previous_hash=state.last_hash,
            created_at=now,
            event_count=len(events),
            content_hash=sealed.digest,
            data=sealed.final_bytes
        )

        try:
            artifact = BlockArtifact.from_block(block)
            self.sink.emit(artifact)
        except OutputEmitError as e:
            self._fail(f"Could not emit {block.filename}: {e}", events_lost=len(events))
            raise

        try:
            self._persist(stored, new_state)
        except StateSaveError as e:
            self._retract(artifact)
            self._fail(f"Could not save chain state for {block.filename}: {e}", events_lost=len(events))
            raise

        self._enter(ControllerPhase.PERSISTED)
        self.statistics["blocks_sealed"] += 1
        self.statistics["events_sealed"] += len(events)
        logger.info(f"Sealed {block.filename} with {len(events)} events, hash {sealed.digest[:16]}...")
        return InvocationResult(
            outcome=InvocationOutcome.SEALED,
            state=new_state,
            events_drained=len(events),
            block=block,
            artifact=artifact
        )

    def _persist(self, stored: Optional[dict[str, str]], new_state: ChainState) -> None:
        mapping = new_state.merged_into(stored)
        if self.use_compare_and_set:
            if not self.store.compare_and_set(stored, mapping):
                raise StateConflictError("Chain state was changed by another writer")
        else:
            self.store.set(mapping)

    def _retract(self, artifact: BlockArtifact) -> None:
        try:
            self.sink.retract(artifact)
        except OutputEmitError as e:
            logger.critical(f"Emitted {artifact.filename} could not be retracted after failed save: {e}")

    def _enter(self, phase: ControllerPhase) -> None:
        logger.debug(f"Controller phase {self.phase.value} -> {phase.value}")
        self.phase = phase

    def _fail(self, message: str, events_lost: int = 0) -> None:
        self.statistics["failures"] += 1
        self.statistics["events_lost"] += events_lost
        if events_lost:
            message += f" ({events_lost} drained events lost)"
        logger.error(message)
        self.phase = ControllerPhase.IDLE
