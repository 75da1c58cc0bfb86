"""
Per-run state for a playlist transfer.

A RunContext is created for every transfer and passed through the
pipeline stages. It owns everything that belongs to one run (the access
token, the references being transferred, the current stage), so several
runs can live in the same process without sharing state.

Stage order:
    IDLE -> EXTRACTING -> AUTHENTICATING -> COLLECTING -> BUILDING
         -> RESOLVING -> APPLYING -> DONE

Any non-terminal stage may move to FAILED. BUILDING may jump straight to
DONE when there is nothing to transfer. DONE and FAILED are terminal.
"""

import uuid
from dataclasses import dataclass, field
from enum import Enum

from spot_transfer.core.exceptions import RunStateError
from spot_transfer.spotify.models import CollectionReference


class RunStage(Enum):
    IDLE = "idle"
    EXTRACTING = "extracting"
    AUTHENTICATING = "authenticating"
    COLLECTING = "collecting"
    BUILDING = "building"
    RESOLVING = "resolving"
    APPLYING = "applying"
    DONE = "done"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (RunStage.DONE, RunStage.FAILED)


_NEXT_STAGES: dict[RunStage, tuple[RunStage, ...]] = {
    RunStage.IDLE: (RunStage.EXTRACTING,),
    RunStage.EXTRACTING: (RunStage.AUTHENTICATING,),
    RunStage.AUTHENTICATING: (RunStage.COLLECTING,),
    RunStage.COLLECTING: (RunStage.BUILDING,),
    RunStage.BUILDING: (RunStage.RESOLVING, RunStage.DONE),
    RunStage.RESOLVING: (RunStage.APPLYING,),
    RunStage.APPLYING: (RunStage.DONE,),
    RunStage.DONE: (),
    RunStage.FAILED: (),
}


class TransferMode(Enum):
    """
    Transfer policy. The value is the tag used in created playlist names.
    """
    COPY = "copy"
    REVERSED = "reversed"

    @property
    def reverse(self) -> bool:
        return self is TransferMode.REVERSED


@dataclass
class RunContext:
    """
    Mutable state of one transfer run.

    Attributes:
        mode: COPY or REVERSED.
        run_id: Short random id used in log lines.
        source: Source playlist reference, set during EXTRACTING.
        target: Explicit target reference, or None to create a playlist.
        access_token: Bearer token obtained during AUTHENTICATING.
        stage: Current stage.
        failure_kind: TransferError.kind of the failure when stage is FAILED.
    """
    mode: TransferMode
    run_id: str = field(default_factory=lambda: uuid.uuid4().hex[:8])
    source: CollectionReference | None = None
    target: CollectionReference | None = None
    access_token: str | None = field(default=None, repr=False)
    stage: RunStage = RunStage.IDLE
    failure_kind: str | None = None

    def advance(self, stage: RunStage) -> None:
        """
        Move to the next stage.

        Raises:
            RunStateError: If `stage` is not a legal successor of the
                           current stage (including any move out of a
                           terminal stage, or to FAILED; use fail()).
        """
        if stage not in _NEXT_STAGES[self.stage]:
            raise RunStateError(
                f"Illegal run transition: {self.stage.value} -> {stage.value}",
                details={"run_id": self.run_id, "from": self.stage.value, "to": stage.value}
            )
        self.stage = stage

    def fail(self, kind: str) -> None:
        """
        Move to FAILED, recording the failure kind.

        Raises:
            RunStateError: If the run already finished.
        """
        if self.stage.is_terminal:
            raise RunStateError(
                f"Run already finished ({self.stage.value}), cannot fail with {kind}",
                details={"run_id": self.run_id, "from": self.stage.value, "kind": kind}
            )
        self.stage = RunStage.FAILED
        self.failure_kind = kind
