# File: subroll/features/timeline/service/chunker.py
import logging
from dataclasses import replace
from typing import List, Optional, Sequence

from subroll.core.common.enums import SegmentKind
from subroll.core.errors import ValidationError
from ..domain.models import ChunkTiming, SegmentEntity, Word

logger = logging.getLogger(__name__)


def chunk_id(base_id: str, index: int) -> str:
    """First chunk keeps the base id; the rest derive one from their position."""
    return base_id if index == 0 else f"{base_id}-chunk-{index}"


def split_words(text: str, words_per_chunk: int) -> List[str]:
    """Groups whitespace-separated words into strings of `words_per_chunk` words."""
    if words_per_chunk <= 0:
        raise ValidationError(f"words_per_chunk must be positive, got {words_per_chunk}")
    tokens = text.split()
    return [
        " ".join(tokens[i:i + words_per_chunk])
        for i in range(0, len(tokens), words_per_chunk)
    ]


def _uniform_bounds(start: float, end: float, count: int) -> List[float]:
    """count + 1 boundaries dividing [start, end) evenly. The last one is pinned to `end`."""
    step = (end - start) / count
    bounds = [start + i * step for i in range(count)]
    bounds.append(end)
    return bounds


def _word_aligned_bounds(start: float,
                         end: float,
                         count: int,
                         words_per_chunk: int,
                         token_count: int,
                         words: Sequence[Word]) -> Optional[List[float]]:
    """
    Boundaries placed on the start time of the first word of each chunk.
    Returns None when the timings can't be trusted to line up with the text.
    """
    inside = [w for w in words if w.start >= start and w.end <= end]
    if len(inside) != token_count:
        return None

    bounds = [start]
    for i in range(1, count):
        boundary = inside[i * words_per_chunk].start
        # Word timings occasionally go backwards at segment edges
        if boundary < bounds[-1] or boundary > end:
            return None
        bounds.append(boundary)
    bounds.append(end)
    return bounds


def chunk(text: str,
          words_per_chunk: int,
          start_seconds: float,
          end_seconds: float,
          keyword: Optional[str] = None,
          *,
          base_id: str = "chunk",
          words: Optional[Sequence[Word]] = None,
          timing: ChunkTiming = ChunkTiming.UNIFORM) -> List[SegmentEntity]:
    """
    Splits a subtitle span into consecutive chunks of at most `words_per_chunk` words.

    Timing is uniform by default: every chunk gets duration / chunk_count seconds,
    regardless of how long its words actually take to say. With
    ChunkTiming.WORD_ALIGNED and per-word timings covering the span, boundaries
    land on real word onsets instead; if the timings don't match the text the
    uniform split is used.

    The keyword is kept only on the first chunk whose text contains it
    (case-insensitive). A keyword straddling two chunks is lost.

    Empty text yields the original span as a single unchunked segment.
    """
    template = SegmentEntity(
        id=base_id,
        kind=SegmentKind.SUBTITLE,
        start_seconds=start_seconds,
        end_seconds=end_seconds,
        content=text,
        highlighted_keyword=keyword,
    )
    return chunk_segment(template, words_per_chunk, words=words, timing=timing)


def chunk_segment(segment: SegmentEntity,
                  words_per_chunk: int,
                  *,
                  words: Optional[Sequence[Word]] = None,
                  timing: ChunkTiming = ChunkTiming.UNIFORM) -> List[SegmentEntity]:
    """
    Entity-level form of `chunk`: every other field of `segment` (image, style,
    selection) is carried onto each chunk. B-roll entities pass through untouched.
    """
    if segment.kind != SegmentKind.SUBTITLE:
        return [segment]

    groups = split_words(segment.content, words_per_chunk)
    if not groups:
        return [segment]

    start, end = segment.start_seconds, segment.end_seconds
    count = len(groups)

    bounds = None
    if timing == ChunkTiming.WORD_ALIGNED and words:
        token_count = len(segment.content.split())
        bounds = _word_aligned_bounds(start, end, count, words_per_chunk, token_count, words)
        if bounds is None:
            logger.debug(f"Word timings don't cover segment {segment.id}; using uniform split")
    if bounds is None:
        bounds = _uniform_bounds(start, end, count)

    keyword = segment.highlighted_keyword
    needle = keyword.lower() if keyword else None
    keyword_placed = False

    base_id = segment.id
    source_id = segment.source_id or segment.id

    chunks = []
    for index, group in enumerate(groups):
        carries_keyword = False
        if needle and not keyword_placed and needle in group.lower():
            carries_keyword = True
            keyword_placed = True

        chunks.append(replace(
            segment,
            id=chunk_id(base_id, index),
            content=group,
            start_seconds=bounds[index],
            end_seconds=bounds[index + 1],
            highlighted_keyword=keyword if carries_keyword else None,
            source_id=source_id,
            chunk_index=index,
        ))

    return chunks
