# File: subroll/features/timeline/service/api.py
from typing import Iterable, List, Optional, Sequence

from ..domain.models import ActiveSegments, ChunkTiming, SegmentEntity, Word
from .chunker import chunk_segment
from .query_engine import active_at


def render_timeline(segments: Iterable[SegmentEntity],
                    words_per_subtitle: int,
                    words: Optional[Sequence[Word]] = None,
                    timing: ChunkTiming = ChunkTiming.UNIFORM) -> List[SegmentEntity]:
    """
    Public API: expands subtitle segments into chunks, keeping b-roll entries
    in place. Pure; safe to call on every settings change.
    """
    rendered: List[SegmentEntity] = []
    for seg in segments:
        rendered.extend(chunk_segment(seg, words_per_subtitle, words=words, timing=timing))
    return rendered


def what_plays_at(rendered: Sequence[SegmentEntity], t: float) -> ActiveSegments:
    """Public API: active subtitle chunk and b-roll at playback time t."""
    return active_at(rendered, t)
