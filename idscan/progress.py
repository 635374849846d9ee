"""Monotonic progress channel and per-request stage tracking.

Providers differ in what they can report: remote services give no
incremental signal, so the router writes fixed milestones for them,
while the local engine reports its own steps. Whatever is written, the
sink sees a non-decreasing sequence of integers ending in exactly one
100 on success, and nothing after a failure.
"""

from enum import StrEnum

from idscan.models import ProgressSink
from idscan.utils.logger import get_logger

logger = get_logger(__name__)

SUBMITTED = 10
PREPROCESS_STARTED = 20
PREPROCESSED = 40
COMPLETE = 100


class PipelineStage(StrEnum):
    """Stages a single scan request moves through."""

    PENDING = "pending"
    PREPROCESSING = "preprocessing"
    RECOGNIZING = "recognizing"
    CLASSIFYING = "classifying"
    EXTRACTING = "extracting"
    DONE = "done"
    FAILED = "failed"


_TRANSITIONS: dict[PipelineStage, frozenset[PipelineStage]] = {
    PipelineStage.PENDING: frozenset(
        {PipelineStage.PREPROCESSING, PipelineStage.RECOGNIZING}
    ),
    PipelineStage.PREPROCESSING: frozenset({PipelineStage.RECOGNIZING}),
    # Falling back to the local engine re-enters preprocessing.
    PipelineStage.RECOGNIZING: frozenset(
        {
            PipelineStage.PREPROCESSING,
            PipelineStage.CLASSIFYING,
            PipelineStage.FAILED,
        }
    ),
    PipelineStage.CLASSIFYING: frozenset({PipelineStage.EXTRACTING}),
    PipelineStage.EXTRACTING: frozenset({PipelineStage.DONE}),
    PipelineStage.DONE: frozenset(),
    PipelineStage.FAILED: frozenset(),
}


class ProgressReporter:
    """Wraps a progress sink and enforces its contract.

    Args:
        sink: Callable receiving integer percentages, or ``None`` to
            track stages without reporting.
    """

    def __init__(self, sink: ProgressSink | None = None) -> None:
        self._sink = sink
        self._last = 0
        self._closed = False
        self._stage = PipelineStage.PENDING

    @property
    def value(self) -> int:
        """Last percentage forwarded to the sink."""
        return self._last

    @property
    def stage(self) -> PipelineStage:
        """Current pipeline stage."""
        return self._stage

    @property
    def closed(self) -> bool:
        """Whether a terminal value or failure has been recorded."""
        return self._closed

    def update(self, percent: int | float) -> None:
        """Report intermediate progress.

        Values are capped at 99 so that only :meth:`complete` can emit the
        terminal 100. Values not above the last reported one are dropped.

        Args:
            percent: Progress percentage.
        """
        if self._closed:
            return
        value = min(int(percent), COMPLETE - 1)
        if value <= self._last:
            return
        self._emit(value)

    def complete(self) -> None:
        """Emit the single terminal 100 and close the channel."""
        if self._closed:
            return
        self._emit(COMPLETE)
        self._closed = True

    def fail(self) -> None:
        """Close the channel without emitting anything further."""
        self._closed = True

    def enter(self, stage: PipelineStage) -> None:
        """Move the request to ``stage``.

        Args:
            stage: Target stage. Re-entering the current stage is a no-op.

        Raises:
            ValueError: If the transition is not allowed.
        """
        if stage == self._stage:
            return
        if stage not in _TRANSITIONS[self._stage]:
            raise ValueError(f"Illegal stage transition {self._stage} -> {stage}")
        logger.debug("Stage %s -> %s", self._stage, stage)
        self._stage = stage

    def _emit(self, value: int) -> None:
        self._last = value
        if self._sink is not None:
            self._sink(value)


def as_reporter(progress: ProgressReporter | ProgressSink | None) -> ProgressReporter:
    """Wrap a bare callback in a reporter; pass reporters through."""
    if isinstance(progress, ProgressReporter):
        return progress
    return ProgressReporter(progress)
