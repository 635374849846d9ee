"""Tests for the progress reporter and stage machine."""

import pytest

from idscan.progress import (
    COMPLETE,
    PREPROCESS_STARTED,
    PREPROCESSED,
    SUBMITTED,
    PipelineStage,
    ProgressReporter,
    as_reporter,
)


class TestProgressReporter:
    """Tests for monotonic progress reporting."""

    def test_forwards_increasing_values(self) -> None:
        seen: list[int] = []
        reporter = ProgressReporter(seen.append)
        reporter.update(SUBMITTED)
        reporter.update(PREPROCESS_STARTED)
        reporter.update(PREPROCESSED)
        assert seen == [10, 20, 40]
        assert reporter.value == 40

    def test_drops_non_increasing_values(self) -> None:
        seen: list[int] = []
        reporter = ProgressReporter(seen.append)
        reporter.update(40)
        reporter.update(20)
        reporter.update(40)
        reporter.update(60)
        assert seen == [40, 60]

    def test_caps_intermediate_values_below_complete(self) -> None:
        seen: list[int] = []
        reporter = ProgressReporter(seen.append)
        reporter.update(150)
        assert seen == [99]

    def test_complete_emits_single_terminal_value(self) -> None:
        seen: list[int] = []
        reporter = ProgressReporter(seen.append)
        reporter.update(60)
        reporter.complete()
        reporter.complete()
        reporter.update(95)
        assert seen == [60, COMPLETE]
        assert seen.count(100) == 1
        assert reporter.closed is True

    def test_fail_closes_channel_silently(self) -> None:
        seen: list[int] = []
        reporter = ProgressReporter(seen.append)
        reporter.update(10)
        reporter.fail()
        reporter.update(50)
        reporter.complete()
        assert seen == [10]
        assert reporter.closed is True

    def test_without_sink(self) -> None:
        reporter = ProgressReporter()
        reporter.update(30)
        reporter.complete()
        assert reporter.value == COMPLETE

    def test_float_values_are_truncated(self) -> None:
        seen: list[int] = []
        reporter = ProgressReporter(seen.append)
        reporter.update(42.7)
        assert seen == [42]


class TestPipelineStage:
    """Tests for stage transitions."""

    def test_full_local_path(self) -> None:
        reporter = ProgressReporter()
        for stage in (
            PipelineStage.PREPROCESSING,
            PipelineStage.RECOGNIZING,
            PipelineStage.CLASSIFYING,
            PipelineStage.EXTRACTING,
            PipelineStage.DONE,
        ):
            reporter.enter(stage)
        assert reporter.stage == PipelineStage.DONE

    def test_fallback_reenters_preprocessing(self) -> None:
        reporter = ProgressReporter()
        reporter.enter(PipelineStage.RECOGNIZING)
        reporter.enter(PipelineStage.PREPROCESSING)
        reporter.enter(PipelineStage.RECOGNIZING)
        assert reporter.stage == PipelineStage.RECOGNIZING

    def test_reentering_current_stage_is_noop(self) -> None:
        reporter = ProgressReporter()
        reporter.enter(PipelineStage.RECOGNIZING)
        reporter.enter(PipelineStage.RECOGNIZING)
        assert reporter.stage == PipelineStage.RECOGNIZING

    def test_illegal_transition_raises(self) -> None:
        reporter = ProgressReporter()
        with pytest.raises(ValueError, match="Illegal stage transition"):
            reporter.enter(PipelineStage.EXTRACTING)

    def test_failed_is_terminal(self) -> None:
        reporter = ProgressReporter()
        reporter.enter(PipelineStage.RECOGNIZING)
        reporter.enter(PipelineStage.FAILED)
        with pytest.raises(ValueError):
            reporter.enter(PipelineStage.CLASSIFYING)


class TestAsReporter:
    """Tests for wrapping bare callbacks."""

    def test_passes_reporter_through(self) -> None:
        reporter = ProgressReporter()
        assert as_reporter(reporter) is reporter

    def test_wraps_callable(self) -> None:
        seen: list[int] = []
        reporter = as_reporter(seen.append)
        reporter.update(10)
        assert seen == [10]

    def test_wraps_none(self) -> None:
        assert isinstance(as_reporter(None), ProgressReporter)
