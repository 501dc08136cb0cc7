# File: subroll/features/timeline/domain/models.py
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, Optional

from subroll.core.common.enums import SegmentKind
from subroll.core.shared_types import TimeRange
from ..service.time_codec import format_time


@dataclass(frozen=True)
class Word:
    """
    One recognized token with timing, as returned by the transcriber.
    """
    text: str
    start: float
    end: float

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Word":
        # Some recognizers emit "word" instead of "text"
        return cls(
            text=str(data.get("text", data.get("word", ""))).strip(),
            start=float(data["start"]),
            end=float(data["end"]),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"text": self.text, "start": self.start, "end": self.end}


@dataclass(frozen=True)
class RawSegment:
    """
    A sentence/phrase grouping of words with its own span.
    """
    text: str
    start: float
    end: float

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RawSegment":
        return cls(
            text=str(data.get("text", "")).strip(),
            start=float(data["start"]),
            end=float(data["end"]),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"text": self.text, "start": self.start, "end": self.end}


class ChunkTiming(str, Enum):
    """How a subtitle span is divided among its chunks."""
    UNIFORM = "uniform"
    WORD_ALIGNED = "word_aligned"


@dataclass(frozen=True)
class ChunkKey:
    """
    Stable identity of a rendered segment: the segment it was derived from
    plus its position. Survives re-chunking, unlike the derived id string.
    """
    source_id: str
    chunk_index: int = 0


@dataclass(frozen=True)
class SegmentEntity:
    """
    The unit the timeline engine and the project store operate on.

    Seconds are the source of truth. `start_time` / `end_time` are MM:SS
    presentation strings and must never be fed back into timing math.
    """
    id: str
    kind: SegmentKind
    start_seconds: float
    end_seconds: float
    content: str
    highlighted_keyword: Optional[str] = None
    image_url: Optional[str] = None
    # When the keyword is actually spoken (b-roll only); overrides estimation
    keyword_timestamp: Optional[float] = None
    is_selected: bool = False

    # Lineage of derived chunks. None on segments that were not chunked.
    source_id: Optional[str] = None
    chunk_index: int = 0

    custom_style: Dict[str, Any] = field(default_factory=dict)

    @property
    def key(self) -> ChunkKey:
        return ChunkKey(self.source_id or self.id, self.chunk_index)

    @property
    def span(self) -> TimeRange:
        return TimeRange(self.start_seconds, self.end_seconds)

    @property
    def duration(self) -> float:
        return self.end_seconds - self.start_seconds

    @property
    def start_time(self) -> str:
        return format_time(self.start_seconds)

    @property
    def end_time(self) -> str:
        return format_time(self.end_seconds)

    @property
    def is_subtitle(self) -> bool:
        return self.kind == SegmentKind.SUBTITLE

    @property
    def is_broll(self) -> bool:
        return self.kind == SegmentKind.BROLL

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["kind"] = self.kind.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SegmentEntity":
        payload = dict(data)
        payload["kind"] = SegmentKind(payload["kind"])
        payload["custom_style"] = dict(payload.get("custom_style") or {})
        return cls(**payload)


@dataclass(frozen=True)
class ActiveSegments:
    """What to draw at a given playback instant."""
    subtitle: Optional[SegmentEntity] = None
    broll: Optional[SegmentEntity] = None


NOTHING_ACTIVE = ActiveSegments()
