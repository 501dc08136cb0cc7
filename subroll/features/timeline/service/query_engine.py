# File: subroll/features/timeline/service/query_engine.py
from typing import Iterable, Optional

from subroll.core.config.settings import settings
from ..domain.models import ActiveSegments, NOTHING_ACTIVE, SegmentEntity
from .keyword_timing import resolve_keyword_time


def active_subtitle_at(segments: Iterable[SegmentEntity], t: float) -> Optional[SegmentEntity]:
    """First subtitle, in insertion order, whose [start, end) contains t."""
    for seg in segments:
        if seg.is_subtitle and seg.start_seconds <= t < seg.end_seconds:
            return seg
    return None


def active_broll_for(segments: Iterable[SegmentEntity],
                     subtitle: Optional[SegmentEntity],
                     t: float) -> Optional[SegmentEntity]:
    """
    The b-roll matching the subtitle's highlighted keyword whose display
    window contains t. No subtitle or no keyword means no b-roll.
    """
    if subtitle is None or not subtitle.highlighted_keyword:
        return None

    wanted = subtitle.highlighted_keyword.lower()
    display = settings.BROLL_DISPLAY_SECONDS
    for seg in segments:
        if not seg.is_broll or seg.content.lower() != wanted:
            continue
        at = resolve_keyword_time(subtitle, seg)
        if at is not None and at <= t < at + display:
            return seg
    return None


def active_at(segments, t: float) -> ActiveSegments:
    """
    Resolves what to draw at playback time t.

    Called on every player time update, so it is a plain scan without
    suspension or intermediate lists. `segments` must be re-iterable.
    """
    subtitle = active_subtitle_at(segments, t)
    if subtitle is None:
        return NOTHING_ACTIVE
    broll = active_broll_for(segments, subtitle, t)
    return ActiveSegments(subtitle=subtitle, broll=broll)
