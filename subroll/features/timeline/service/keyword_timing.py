# File: subroll/features/timeline/service/keyword_timing.py
from typing import Optional

from subroll.core.config.settings import settings
from subroll.core.shared_types import TimeRange
from ..domain.models import SegmentEntity


def estimate_keyword_time(text: str, keyword: str, start: float, end: float) -> Optional[float]:
    """
    Guesses when `keyword` is spoken inside [start, end) from where it sits in the text.

    The search is a plain substring match over the raw text, so a keyword that
    is part of a longer word ("art" in "start") matches there. Words are
    counted by single spaces.
    """
    if not keyword:
        return None
    position = text.lower().find(keyword.lower())
    if position == -1:
        return None

    words_before = len(text[:position].split(" ")) - 1
    total_words = len(text.split(" "))
    return start + (words_before / total_words) * (end - start)


def resolve_keyword_time(subtitle: SegmentEntity, broll: Optional[SegmentEntity] = None) -> Optional[float]:
    """
    When the subtitle's highlighted keyword is spoken, in seconds.

    An explicit timestamp on the b-roll entity wins; otherwise it is estimated
    from the keyword's word position inside the chunk.
    """
    if broll is not None and broll.keyword_timestamp is not None:
        return broll.keyword_timestamp
    return estimate_keyword_time(
        subtitle.content,
        subtitle.highlighted_keyword,
        subtitle.start_seconds,
        subtitle.end_seconds,
    )


def broll_window(subtitle: SegmentEntity, broll: Optional[SegmentEntity] = None) -> Optional[TimeRange]:
    """The fixed-length span during which the b-roll image is shown, or None."""
    at = resolve_keyword_time(subtitle, broll)
    if at is None:
        return None
    return TimeRange(at, at + settings.BROLL_DISPLAY_SECONDS)
