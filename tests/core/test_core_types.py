import pytest
from pathlib import Path

from subroll.core.common.enums import PipelineStep
from subroll.core.errors import (
    CollaboratorError,
    FatalStageError,
    PipelineCancelledError,
    StageError,
    ValidationError,
)
from subroll.core.shared_types import MediaFile, TimeRange


def test_time_range_validation():
    """
    Verifies the half-open range rejects reversed and negative spans
    but accepts zero-length ones.
    """
    # 1. Valid
    r = TimeRange(1.5, 4.0)
    assert r.duration == 2.5

    # 2. Zero length is allowed
    assert TimeRange(2.0, 2.0).duration == 0.0

    # 3. Invalid
    with pytest.raises(ValidationError):
        TimeRange(5.0, 4.0)
    with pytest.raises(ValidationError):
        TimeRange(-1.0, 4.0)


def test_time_range_is_half_open():
    r = TimeRange(2.0, 5.0)
    assert r.contains(2.0)
    assert r.contains(4.999)
    assert not r.contains(5.0)
    assert not r.contains(1.999)


def test_media_file_checks_existence(tmp_path):
    existing = tmp_path / "clip.mp4"
    existing.write_bytes(b"data")

    media = MediaFile(existing)
    assert media.name == "clip.mp4"
    assert media.exists()

    with pytest.raises(ValidationError):
        MediaFile(tmp_path / "missing.mp4")
    with pytest.raises(ValidationError):
        MediaFile(tmp_path)
    with pytest.raises(ValidationError):
        MediaFile(Path(""))

    # Opt-out for snapshots whose upload may be gone
    ghost = MediaFile(tmp_path / "missing.mp4", validate_exists=False)
    assert not ghost.exists()


def test_error_hierarchy():
    # ValidationError doubles as a ValueError for callers that only know builtins
    assert issubclass(ValidationError, ValueError)
    assert issubclass(CollaboratorError, RuntimeError)
    assert issubclass(PipelineCancelledError, FatalStageError)

    err = StageError("transcribing", "boom")
    assert err.stage == "transcribing"
    assert err.message == "boom"
    assert str(err) == "transcribing: boom"

    assert CollaboratorError("nope", status_code=502).status_code == 502


def test_pipeline_step_terminal_states():
    assert PipelineStep.COMPLETE.is_terminal
    assert PipelineStep.ERROR.is_terminal
    assert not PipelineStep.IDLE.is_terminal
    assert not PipelineStep.FETCHING_BROLL.is_terminal
