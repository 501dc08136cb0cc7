# File: subroll/features/projects/domain/models.py
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple
from uuid import UUID, uuid4

from subroll.core.common.enums import TextAlign
from subroll.core.config.settings import settings
from subroll.core.errors import ValidationError
from subroll.features.pipeline.domain.models import ProjectMetadata
from subroll.features.timeline.domain.models import SegmentEntity


def utc_now():
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class RGBAColor:
    r: int
    g: int
    b: int
    a: float = 1.0

    def __post_init__(self):
        for channel in (self.r, self.g, self.b):
            if not 0 <= channel <= 255:
                raise ValidationError(f"Color channel out of range: {channel}")
        if not 0.0 <= self.a <= 1.0:
            raise ValidationError(f"Alpha out of range: {self.a}")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RGBAColor":
        return cls(int(data["r"]), int(data["g"]), int(data["b"]), float(data.get("a", 1.0)))


@dataclass(frozen=True)
class StyleSettings:
    """
    Subtitle appearance. Applied globally, or per segment through
    `SegmentEntity.custom_style`.
    """
    font_family: str = "Inter"
    font_size: int = 16
    font_weight: int = 500
    color: str = "#FFFFFF"
    text_align: TextAlign = TextAlign.CENTER
    background_color: RGBAColor = RGBAColor(0, 0, 0, 0.8)
    border_radius: int = 8
    padding: int = 12
    margin: int = 4

    def to_dict(self) -> Dict[str, Any]:
        return {
            "font_family": self.font_family,
            "font_size": self.font_size,
            "font_weight": self.font_weight,
            "color": self.color,
            "text_align": self.text_align.value,
            "background_color": self.background_color.to_dict(),
            "border_radius": self.border_radius,
            "padding": self.padding,
            "margin": self.margin,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StyleSettings":
        defaults = cls()
        background = data.get("background_color")
        return cls(
            font_family=data.get("font_family", defaults.font_family),
            font_size=int(data.get("font_size", defaults.font_size)),
            font_weight=int(data.get("font_weight", defaults.font_weight)),
            color=data.get("color", defaults.color),
            text_align=TextAlign(data.get("text_align", defaults.text_align.value)),
            background_color=RGBAColor.from_dict(background) if background else defaults.background_color,
            border_radius=int(data.get("border_radius", defaults.border_radius)),
            padding=int(data.get("padding", defaults.padding)),
            margin=int(data.get("margin", defaults.margin)),
        )

    def to_form_fields(self) -> Dict[str, str]:
        """Flat string fields, the way the renderer's form endpoint expects them."""
        bg = self.background_color
        return {
            "font_family": self.font_family,
            "font_size": str(self.font_size),
            "font_weight": str(self.font_weight),
            "color": self.color,
            "text_align": self.text_align.value,
            "background_color": f"rgba({bg.r},{bg.g},{bg.b},{bg.a})",
            "border_radius": str(self.border_radius),
            "padding": str(self.padding),
            "margin": str(self.margin),
        }


@dataclass(frozen=True)
class EditorSettings:
    word_count: int = settings.DEFAULT_WORDS_PER_SUBTITLE
    auto_save: bool = True
    preview_mode: bool = False
    show_timestamps: bool = True
    snap_to_grid: bool = False

    def __post_init__(self):
        if self.word_count not in settings.ALLOWED_WORD_COUNTS:
            raise ValidationError(
                f"word_count must be one of {settings.ALLOWED_WORD_COUNTS}, got {self.word_count}"
            )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EditorSettings":
        return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})


@dataclass
class Project:
    """
    An editing session over one processed upload.

    `segments` holds the base (unchunked) segments; the chunked view is
    always derived from them. `metadata` is the snapshot of the pipeline run
    and is replaced, never edited.
    """
    name: str
    id: UUID = field(default_factory=uuid4)
    video_url: Optional[str] = None
    duration: float = 0.0
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)
    segments: Tuple[SegmentEntity, ...] = ()
    style: StyleSettings = field(default_factory=StyleSettings)
    settings: EditorSettings = field(default_factory=EditorSettings)
    metadata: Optional[ProjectMetadata] = None

    def touch(self) -> None:
        self.updated_at = utc_now()


@dataclass(frozen=True)
class RecentProject:
    id: UUID
    name: str
    updated_at: datetime
