# File: subroll/core/common/enums.py

from enum import Enum, unique


@unique
class SegmentKind(str, Enum):
    SUBTITLE = "subtitle"
    BROLL = "broll"


@unique
class PipelineStep(str, Enum):
    IDLE = "idle"
    TRANSCRIBING = "transcribing"
    EXTRACTING_KEYWORDS = "extracting-keywords"
    FETCHING_BROLL = "fetching-broll"
    GENERATING_VIDEO = "generating-video"
    COMPLETE = "complete"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (PipelineStep.COMPLETE, PipelineStep.ERROR)


@unique
class JobStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


@unique
class TextAlign(str, Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"
