# File: subroll/features/pipeline/domain/models.py
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

from subroll.core.common.enums import PipelineStep
from subroll.core.config.settings import settings
from subroll.core.shared_types import MediaFile
from subroll.features.timeline.domain.models import RawSegment, Word

# keyword -> image URL, or None when the lookup found nothing
BrollMap = Dict[str, Optional[str]]


@dataclass(frozen=True)
class TranscriptionResult:
    """
    Output of the transcription collaborator.
    """
    text: str
    language: str = "unknown"
    words: Tuple[Word, ...] = ()
    segments: Tuple[RawSegment, ...] = ()
    file_info: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TranscriptionResult":
        return cls(
            text=str(data.get("text") or "").strip(),
            language=data.get("language") or "unknown",
            words=tuple(Word.from_dict(w) for w in data.get("words") or []),
            segments=tuple(RawSegment.from_dict(s) for s in data.get("segments") or []),
            file_info=dict(data.get("file_info") or {}),
        )


@dataclass(frozen=True)
class KeywordsResult:
    keywords: Tuple[str, ...]
    total_count: int = 0


@dataclass(frozen=True)
class BrollResult:
    """
    Output of the image lookup collaborator.
    `errors` lists keywords that failed to resolve.
    """
    images: BrollMap
    errors: Tuple[str, ...] = ()
    access_token_invalid: bool = False


@dataclass(frozen=True)
class VideoGenerationRequest:
    """
    Everything the rendering collaborator needs to burn subtitles and b-roll
    into the original upload.
    """
    media: MediaFile
    transcript: str
    words: Tuple[Word, ...]
    keywords: Tuple[str, ...]
    broll_images: BrollMap
    words_per_subtitle: int
    segments: Tuple[RawSegment, ...] = ()
    # Flat style fields (font_family, font_size, color, ...) sent as form fields
    style_fields: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class VideoGenerationResult:
    video_filename: str


@dataclass(frozen=True)
class ProcessingOptions:
    subtitles_enabled: bool = True
    brolls_enabled: bool = True
    words_per_subtitle: int = settings.DEFAULT_WORDS_PER_SUBTITLE
    language: Optional[str] = None


@dataclass(frozen=True)
class ProcessingState:
    """
    Immutable snapshot of a pipeline run, handed to observers after every change.
    `warnings` collects the messages of recoverable stage failures.
    """
    step: PipelineStep = PipelineStep.IDLE
    progress: int = 0
    error: Optional[str] = None
    transcription: Optional[TranscriptionResult] = None
    keywords: Optional[Tuple[str, ...]] = None
    broll_images: Optional[BrollMap] = None
    video_filename: Optional[str] = None
    warnings: Tuple[str, ...] = ()

    @property
    def is_processing(self) -> bool:
        return self.step != PipelineStep.IDLE and not self.step.is_terminal

    @property
    def is_degraded(self) -> bool:
        return self.step == PipelineStep.COMPLETE and bool(self.warnings)


@dataclass(frozen=True)
class ProjectMetadata:
    """
    Write-once snapshot of one pipeline run. Enough to re-render the video
    without transcribing, extracting or searching again.
    """
    media: MediaFile
    transcript: str = ""
    language: str = "unknown"
    words: Tuple[Word, ...] = ()
    segments: Tuple[RawSegment, ...] = ()
    keywords: Tuple[str, ...] = ()
    broll_images: Mapping[str, Optional[str]] = field(default_factory=dict)
    subtitles_enabled: bool = True
    brolls_enabled: bool = True
    words_per_subtitle: int = settings.DEFAULT_WORDS_PER_SUBTITLE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "original_file": str(self.media.path),
            "transcript": self.transcript,
            "language": self.language,
            "words": [w.to_dict() for w in self.words],
            "segments": [s.to_dict() for s in self.segments],
            "keywords": list(self.keywords),
            "broll_images": dict(self.broll_images),
            "subtitles_enabled": self.subtitles_enabled,
            "brolls_enabled": self.brolls_enabled,
            "words_per_subtitle": self.words_per_subtitle,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ProjectMetadata":
        return cls(
            # The upload may have been cleaned up since; exports re-check it
            media=MediaFile(Path(data["original_file"]), validate_exists=False),
            transcript=data.get("transcript", ""),
            language=data.get("language", "unknown"),
            words=tuple(Word.from_dict(w) for w in data.get("words", [])),
            segments=tuple(RawSegment.from_dict(s) for s in data.get("segments", [])),
            keywords=tuple(data.get("keywords", [])),
            broll_images=dict(data.get("broll_images", {})),
            subtitles_enabled=bool(data.get("subtitles_enabled", True)),
            brolls_enabled=bool(data.get("brolls_enabled", True)),
            words_per_subtitle=int(data.get("words_per_subtitle", settings.DEFAULT_WORDS_PER_SUBTITLE)),
        )


@dataclass(frozen=True)
class PipelineResult:
    transcription: Optional[TranscriptionResult]
    keywords: Tuple[str, ...]
    broll_images: BrollMap
    video_filename: str
    metadata: ProjectMetadata
