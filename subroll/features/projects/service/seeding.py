# File: subroll/features/projects/service/seeding.py
import logging
import re
from typing import List, Optional, Sequence

from subroll.core.common.enums import SegmentKind
from subroll.features.pipeline.domain.models import ProjectMetadata
from subroll.features.timeline.domain.models import RawSegment, SegmentEntity, Word

logger = logging.getLogger(__name__)

_NON_WORD = re.compile(r"[^\w]")


def _first_keyword_in(text: str, keywords: Sequence[str]) -> Optional[str]:
    lowered = text.lower()
    for keyword in keywords:
        if keyword.lower() in lowered:
            return keyword
    return None


def _spoken_at(keyword: str, segment: RawSegment, words: Sequence[Word]) -> Optional[float]:
    """Start of the first recognized word inside `segment` that is the keyword, ignoring punctuation."""
    wanted = keyword.lower()
    for word in words:
        if word.start < segment.start or word.start >= segment.end:
            continue
        if _NON_WORD.sub("", word.text.lower()) == wanted:
            return word.start
    return None


def seed_segments(metadata: ProjectMetadata, use_word_timestamps: bool = True) -> List[SegmentEntity]:
    """
    Converts one pipeline run into the project's base segments.

    - One subtitle per raw segment, highlighting the first keyword (in keyword
      order) that its text contains.
    - One b-roll per keyword that has an image, spanning the first raw segment
      that mentions it. Keywords nobody says, or without an image, get nothing.

    With `use_word_timestamps`, a b-roll whose keyword is a recognized word
    gets that word's start as `keyword_timestamp`; otherwise the display time
    is estimated from the text during playback.
    """
    segments: List[SegmentEntity] = []

    if metadata.subtitles_enabled:
        for index, raw in enumerate(metadata.segments):
            segments.append(SegmentEntity(
                id=f"subtitle-{index}",
                kind=SegmentKind.SUBTITLE,
                start_seconds=raw.start,
                end_seconds=raw.end,
                content=raw.text,
                highlighted_keyword=_first_keyword_in(raw.text, metadata.keywords),
            ))

    if metadata.brolls_enabled:
        for index, keyword in enumerate(metadata.keywords):
            image_url = metadata.broll_images.get(keyword)
            if not image_url:
                continue
            host = next((s for s in metadata.segments if keyword.lower() in s.text.lower()), None)
            if host is None:
                logger.debug(f"Keyword '{keyword}' is never spoken; no b-roll placed")
                continue

            timestamp = _spoken_at(keyword, host, metadata.words) if use_word_timestamps else None
            segments.append(SegmentEntity(
                id=f"broll-{index}",
                kind=SegmentKind.BROLL,
                start_seconds=host.start,
                end_seconds=host.end,
                content=keyword,
                image_url=image_url,
                keyword_timestamp=timestamp,
            ))

    logger.info(
        f"Seeded {sum(1 for s in segments if s.is_subtitle)} subtitles and "
        f"{sum(1 for s in segments if s.is_broll)} b-rolls"
    )
    return segments
