# File: subroll/features/projects/service/store.py
import logging
from dataclasses import replace
from typing import Any, Dict, List, Optional, Set, Tuple
from uuid import UUID, uuid4

from subroll.core.config.settings import settings as app_settings
from subroll.core.errors import ValidationError
from subroll.core.shared_types import TimeRange
from subroll.features.pipeline.domain.models import ProjectMetadata
from subroll.features.timeline.domain.models import ActiveSegments, ChunkKey, ChunkTiming, SegmentEntity
from subroll.features.timeline.service.api import render_timeline, what_plays_at
from ..domain.interfaces import IProjectRepository
from ..domain.models import EditorSettings, Project, RecentProject, StyleSettings
from .seeding import seed_segments

logger = logging.getLogger(__name__)

# Fields a caller may change on a segment. Identity and lineage are managed here.
EDITABLE_FIELDS = frozenset({
    "content",
    "start_seconds",
    "end_seconds",
    "highlighted_keyword",
    "image_url",
    "keyword_timestamp",
    "custom_style",
})


def _new_id(kind_prefix: str) -> str:
    return f"{kind_prefix}-{uuid4().hex[:12]}"


class ProjectStore:
    """
    Editing context for one open project.

    Holds the base segments plus edits keyed by ChunkKey: per-chunk overrides,
    hidden chunks and the selection. The chunked view is never stored; every
    call to `rendered_segments()` derives it from those inputs, so changing the
    word count re-chunks without touching the pipeline.

    Segment ids passed in are ids of the rendered view. An id naming a whole
    base segment (b-roll, or a subtitle that renders as a single chunk) edits
    the base; an id naming one chunk of a longer subtitle edits that chunk only.
    """

    def __init__(self,
                 repository: Optional[IProjectRepository] = None,
                 timing: ChunkTiming = ChunkTiming.UNIFORM):
        self.repository = repository
        self.timing = timing
        self.project: Optional[Project] = None
        self._overrides: Dict[ChunkKey, Dict[str, Any]] = {}
        self._hidden: Set[ChunkKey] = set()
        self._selected: Optional[ChunkKey] = None
        self._recent: List[RecentProject] = []

    # --- Project lifecycle ---

    def new_project(self, name: str) -> Project:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Project name cannot be empty.")
        self._clear_edits()
        self.project = Project(name=name)
        # A new project replaces any recent entry of the same name
        self._recent = [r for r in self._recent if r.name != name]
        self._remember()
        logger.info(f"Created project '{name}' ({self.project.id})")
        return self.project

    def load_project(self, project: Project) -> Project:
        self._clear_edits()
        self.project = project
        self._remember()
        logger.info(f"Loaded project '{project.name}' ({project.id})")
        return project

    def reset(self) -> None:
        """Closes the current project. Recent projects are kept."""
        self._clear_edits()
        self.project = None

    def save(self) -> UUID:
        project = self._require_project()
        if self.repository is None:
            raise ValidationError("No project repository configured.")
        self._bake_edits()
        project.touch()
        project_id = self.repository.save(project)
        self._remember()
        logger.info(f"Saved project '{project.name}'")
        return project_id

    def open(self, project_id: UUID) -> Project:
        if self.repository is None:
            raise ValidationError("No project repository configured.")
        project = self.repository.get(project_id)
        if project is None:
            raise ValidationError(f"Project not found: {project_id}")
        return self.load_project(project)

    @property
    def recent_projects(self) -> List[RecentProject]:
        return list(self._recent)

    def _remember(self) -> None:
        project = self.project
        entry = RecentProject(id=project.id, name=project.name, updated_at=project.updated_at)
        self._recent = [entry] + [r for r in self._recent if r.id != project.id]
        del self._recent[app_settings.MAX_RECENT_PROJECTS:]

    def _require_project(self) -> Project:
        if self.project is None:
            raise ValidationError("No project is open.")
        return self.project

    def _clear_edits(self) -> None:
        self._overrides.clear()
        self._hidden.clear()
        self._selected = None

    # --- Seeding ---

    def seed_from_metadata(self, metadata: ProjectMetadata) -> List[SegmentEntity]:
        """
        Replaces the project's segments with those derived from a pipeline run
        and stores the run's snapshot for later exports.
        """
        project = self._require_project()
        self._clear_edits()
        base = seed_segments(metadata)
        project.metadata = metadata
        project.segments = tuple(base)
        project.duration = max((s.end_seconds for s in base), default=0.0)
        if metadata.words_per_subtitle in app_settings.ALLOWED_WORD_COUNTS:
            project.settings = replace(project.settings, word_count=metadata.words_per_subtitle)
        project.touch()
        return self.rendered_segments()

    # --- Derived view ---

    def _chunked(self) -> List[SegmentEntity]:
        project = self._require_project()
        words = project.metadata.words if project.metadata else None
        return render_timeline(project.segments, project.settings.word_count, words=words, timing=self.timing)

    def rendered_segments(self) -> List[SegmentEntity]:
        """
        The chunked timeline with chunk edits and selection applied.
        Pure: repeated calls with no edits in between return equal lists.
        """
        rendered = []
        for seg in self._chunked():
            key = seg.key
            if key in self._hidden:
                continue
            override = self._overrides.get(key)
            if override:
                seg = replace(seg, **override)
            rendered.append(replace(seg, is_selected=(key == self._selected)))
        return rendered

    def active_at(self, t: float) -> ActiveSegments:
        """
        One-off lookup; re-renders the whole timeline on every call. For
        playback ticks, render once with `rendered_segments()` after each edit
        and query that list with `what_plays_at(rendered, t)`.
        """
        return what_plays_at(self.rendered_segments(), t)

    def selected_segment(self) -> Optional[SegmentEntity]:
        return next((s for s in self.rendered_segments() if s.is_selected), None)

    def _locate(self, segment_id: str) -> Tuple[SegmentEntity, int, bool]:
        """
        Resolves a rendered id to (rendered segment, base index, is_whole_base).
        """
        project = self._require_project()
        target = next((s for s in self.rendered_segments() if s.id == segment_id), None)
        if target is None:
            raise ValidationError(f"Segment not found: {segment_id}")

        source = target.key.source_id
        base_index = next(i for i, s in enumerate(project.segments) if s.id == source)
        siblings = sum(1 for s in self._chunked() if s.key.source_id == source)
        return target, base_index, siblings == 1

    # --- Segment edits ---

    def add_segment(self, segment: SegmentEntity) -> SegmentEntity:
        """Appends a copy of `segment` under a fresh id and selects it."""
        project = self._require_project()
        TimeRange(segment.start_seconds, segment.end_seconds)
        added = replace(
            segment,
            id=_new_id(segment.kind.value),
            is_selected=False,
            source_id=None,
            chunk_index=0,
        )
        project.segments = project.segments + (added,)
        project.touch()
        self._selected = added.key
        return added

    def update_segment(self, segment_id: str, **changes) -> SegmentEntity:
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update segment fields: {sorted(unknown)}")

        project = self._require_project()
        target, base_index, whole = self._locate(segment_id)
        updated = replace(target, **changes)
        TimeRange(updated.start_seconds, updated.end_seconds)

        if whole:
            segments = list(project.segments)
            segments[base_index] = replace(segments[base_index], **changes)
            project.segments = tuple(segments)
            self._overrides.pop(target.key, None)
        else:
            self._overrides.setdefault(target.key, {}).update(changes)

        project.touch()
        return updated

    def delete_segment(self, segment_id: str) -> None:
        project = self._require_project()
        target, base_index, whole = self._locate(segment_id)
        key = target.key

        if whole:
            segments = list(project.segments)
            removed = segments.pop(base_index)
            project.segments = tuple(segments)
            self._drop_edits_for(removed.id)
        else:
            self._hidden.add(key)
            self._overrides.pop(key, None)

        if self._selected == key:
            self._selected = None
        project.touch()

    def select_segment(self, segment_id: Optional[str]) -> Optional[SegmentEntity]:
        """Selects one segment, clearing any previous selection. None clears only."""
        self._require_project()
        self._selected = None
        if segment_id is None:
            return None
        target, _, _ = self._locate(segment_id)
        self._selected = target.key
        return replace(target, is_selected=True)

    def duplicate_segment(self, segment_id: str) -> SegmentEntity:
        """
        Copies a rendered segment (chunk edits included) into a new base
        segment placed right after the one it came from. The copy is not selected.
        """
        project = self._require_project()
        target, base_index, whole = self._locate(segment_id)
        if not whole:
            # Split the source so the copy can sit right after this chunk
            new_ids = self._split_base(target.key.source_id)
            chunk_base_id = new_ids[target.key]
            base_index = next(i for i, s in enumerate(project.segments) if s.id == chunk_base_id)
        copy = replace(
            target,
            id=_new_id(target.kind.value),
            is_selected=False,
            source_id=None,
            chunk_index=0,
        )
        segments = list(project.segments)
        segments.insert(base_index + 1, copy)
        project.segments = tuple(segments)
        project.touch()
        return copy

    def reorder_segments(self, from_index: int, to_index: int) -> None:
        """Moves a base segment. Playback order is by time, so this only affects listing and overlap resolution."""
        project = self._require_project()
        segments = list(project.segments)
        if not (0 <= from_index < len(segments) and 0 <= to_index < len(segments)):
            raise ValidationError(f"Segment index out of range: {from_index} -> {to_index}")
        segments.insert(to_index, segments.pop(from_index))
        project.segments = tuple(segments)
        project.touch()

    def _drop_edits_for(self, source_id: str) -> None:
        for key in [k for k in self._overrides if k.source_id == source_id]:
            del self._overrides[key]
        self._hidden = {k for k in self._hidden if k.source_id != source_id}

    def _split_base(self, source_id: str) -> Dict[ChunkKey, str]:
        """
        Replaces one base segment with its rendered chunks, each a standalone
        base under a fresh id. Returns the new id of every visible chunk.
        """
        project = self.project
        chunks = [s for s in self.rendered_segments() if s.key.source_id == source_id]
        new_ids: Dict[ChunkKey, str] = {}
        standalone: List[SegmentEntity] = []
        for chunk in chunks:
            new_id = _new_id(chunk.kind.value)
            new_ids[chunk.key] = new_id
            standalone.append(replace(chunk, id=new_id, is_selected=False, source_id=None, chunk_index=0))

        segments: List[SegmentEntity] = []
        for base in project.segments:
            if base.id == source_id:
                segments.extend(standalone)
            else:
                segments.append(base)
        project.segments = tuple(segments)

        selected = self._selected
        self._drop_edits_for(source_id)
        if selected is not None and selected.source_id == source_id:
            new_id = new_ids.get(selected)
            self._selected = ChunkKey(new_id, 0) if new_id else None
        return new_ids

    def _bake_edits(self) -> None:
        """
        Persisted projects hold base segments only, so chunk-level edits are
        written back as standalone segments before saving.
        """
        edited_sources = {k.source_id for k in self._overrides} | {k.source_id for k in self._hidden}
        for source_id in edited_sources:
            self._split_base(source_id)

    # --- Settings & style ---

    def update_settings(self, **changes) -> EditorSettings:
        """Changing `word_count` re-chunks on the next read; nothing is recomputed here."""
        project = self._require_project()
        unknown = set(changes) - set(EditorSettings.__dataclass_fields__)
        if unknown:
            raise ValidationError(f"Unknown editor settings: {sorted(unknown)}")
        project.settings = replace(project.settings, **changes)
        project.touch()
        return project.settings

    def update_style(self, **changes) -> StyleSettings:
        project = self._require_project()
        unknown = set(changes) - set(StyleSettings.__dataclass_fields__)
        if unknown:
            raise ValidationError(f"Unknown style fields: {sorted(unknown)}")
        project.style = replace(project.style, **changes)
        project.touch()
        return project.style

    def reset_style(self) -> StyleSettings:
        project = self._require_project()
        project.style = StyleSettings()
        project.touch()
        return project.style

    def apply_style_to_segment(self, segment_id: str, style: Optional[StyleSettings] = None) -> SegmentEntity:
        """Pins a style on one segment; defaults to the current global style."""
        project = self._require_project()
        chosen = style or project.style
        return self.update_segment(segment_id, custom_style=chosen.to_dict())
