# File: subroll/core/errors.py


class SubrollError(Exception):
    """Root of every error raised deliberately by subroll."""


class ValidationError(SubrollError, ValueError):
    """
    The caller handed us something unusable: no input file, an export
    request without cached metadata, a non-positive word count, a malformed
    time string.
    """


class CollaboratorError(SubrollError, RuntimeError):
    """
    An external service (transcription, keywords, images, rendering) failed.
    Raised by the data adapters; the orchestrator decides whether it is fatal.
    """

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.status_code = status_code


class StageError(SubrollError):
    """A pipeline stage failed. Carries the stage name for logs and UI."""

    def __init__(self, stage: str, message: str):
        super().__init__(f"{stage}: {message}")
        self.stage = stage
        self.message = message


class FatalStageError(StageError):
    """Aborts the pipeline. Surfaces as step == error."""


class RecoverableStageError(StageError):
    """Triggers the stage's documented fallback. Never surfaces as a pipeline failure."""


class PipelineCancelledError(FatalStageError):
    """The caller cancelled the run while a stage was pending or in flight."""
