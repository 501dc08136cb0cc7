# File: subroll/features/pipeline/service/fallback_keywords.py
import re
from typing import Iterable, List, Sequence, Tuple

MAX_KEYWORDS = 10
MIN_WORD_LENGTH = 5

# Pads the heuristic list when the transcript is short
PADDING_KEYWORDS: Tuple[str, ...] = ("business", "technology", "innovation", "digital", "solution")

# Used when b-roll is wanted but there is no transcript to mine
DEFAULT_KEYWORDS: Tuple[str, ...] = ("technology", "innovation", "business", "development", "digital")

_PUNCTUATION = re.compile(r"[^\w\s]")


def unique_keywords(candidates: Iterable[str]) -> List[str]:
    """Strips, drops empties, dedupes in first-seen order."""
    seen = set()
    result = []
    for raw in candidates:
        word = raw.strip()
        if word and word not in seen:
            seen.add(word)
            result.append(word)
    return result


def extract_fallback_keywords(transcript: str,
                              limit: int = MAX_KEYWORDS,
                              padding: Sequence[str] = PADDING_KEYWORDS) -> List[str]:
    """
    Local stand-in for the keyword service.

    Lower-cases, strips punctuation, keeps words longer than 4 characters,
    dedupes in first-seen order and takes the first `limit`. Short lists are
    padded from `padding`, skipping words already present.
    """
    text = _PUNCTUATION.sub("", transcript.lower())
    words = [w for w in text.split() if len(w) >= MIN_WORD_LENGTH]

    keywords = unique_keywords(words)[:limit]
    for extra in padding:
        if len(keywords) >= limit:
            break
        if extra not in keywords:
            keywords.append(extra)
    return keywords
