# File: subroll/features/pipeline/service/generation.py
from typing import Dict, Optional

from subroll.core.errors import ValidationError
from ..domain.models import ProjectMetadata, VideoGenerationRequest


def build_generation_request(metadata: ProjectMetadata,
                             words_per_subtitle: Optional[int] = None,
                             style_fields: Optional[Dict[str, str]] = None) -> VideoGenerationRequest:
    """
    Maps a cached pipeline snapshot onto a render request. Used both by the
    pipeline's last stage and by later exports, so a re-render never needs
    the earlier stages.
    """
    count = words_per_subtitle if words_per_subtitle is not None else metadata.words_per_subtitle
    if count <= 0:
        raise ValidationError(f"words_per_subtitle must be positive, got {count}")

    return VideoGenerationRequest(
        media=metadata.media,
        transcript=metadata.transcript,
        words=metadata.words,
        keywords=metadata.keywords,
        broll_images=dict(metadata.broll_images),
        words_per_subtitle=count,
        segments=metadata.segments,
        style_fields=dict(style_fields or {}),
    )
