from dataclasses import dataclass
from pathlib import Path

from subroll.core.errors import ValidationError


@dataclass(frozen=True)
class TimeRange:
    """
    Value Object representing a half-open span of time [start, end).
    Zero-length spans are allowed (a segment the recognizer stamped with a
    single instant); reversed spans are not.
    """
    start_seconds: float
    end_seconds: float

    def __post_init__(self):
        if self.start_seconds < 0 or self.end_seconds < 0:
            raise ValidationError("Timestamps cannot be negative.")
        if self.start_seconds > self.end_seconds:
            raise ValidationError(f"Start time ({self.start_seconds}) must not be after end time ({self.end_seconds}).")

    @property
    def duration(self) -> float:
        return self.end_seconds - self.start_seconds

    def contains(self, t: float) -> bool:
        return self.start_seconds <= t < self.end_seconds


@dataclass(frozen=True)
class MediaFile:
    """
    Entity representing an uploaded media file on the filesystem.
    """
    path: Path
    validate_exists: bool = True

    def __post_init__(self):
        if str(self.path).strip() in (".", ""):
            raise ValidationError("File path cannot be empty.")
        if self.validate_exists:
            if not self.path.exists():
                raise ValidationError(f"Media file not found: {self.path}")
            if not self.path.is_file():
                raise ValidationError(f"Path is not a file: {self.path}")

    @property
    def name(self) -> str:
        return self.path.name

    def exists(self) -> bool:
        return self.path.exists()
