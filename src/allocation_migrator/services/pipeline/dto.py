"""Pipeline state and run report."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any


class PipelineState(str, Enum):
    FETCHING = "fetching"
    ENCODING = "encoding"
    SEQUENCING = "sequencing"
    SUBMITTING = "submitting"
    ADVANCING = "advancing"
    DONE = "done"
    ABORTED = "aborted"

    @property
    def is_terminal(self) -> bool:
        return self in (PipelineState.DONE, PipelineState.ABORTED)


@dataclass(frozen=True, slots=True)
class ProposedChunk:
    """Audit record of one accepted chunk."""

    offset_start: int
    offset_end: int
    nonce: int
    safe_tx_hash: str
    call_count: int
    already_known: bool = False


@dataclass(frozen=True, slots=True)
class ChunkFailure:
    """The chunk that stopped the run, and why."""

    offset_start: int
    offset_end: int
    reason: str
    error_type: str
    nonce: int | None = None
    status_code: int | None = None


@dataclass
class PipelineReport:
    """Outcome of one pipeline run."""

    state: PipelineState = PipelineState.FETCHING
    proposed: list[ProposedChunk] = field(default_factory=list)
    failure: ChunkFailure | None = None
    stopped: bool = False
    """True when the run ended early on a stop request or the chunk cap."""

    @property
    def succeeded(self) -> bool:
        return self.state is PipelineState.DONE

    @property
    def proposed_count(self) -> int:
        return len(self.proposed)

    @property
    def next_offset(self) -> int | None:
        """Source offset after the last accepted chunk."""
        if not self.proposed:
            return None
        return self.proposed[-1].offset_end

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
