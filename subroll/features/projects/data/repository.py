# File: subroll/features/projects/data/repository.py
import logging
from typing import List, Optional
from uuid import UUID

from subroll.core.common.enums import JobStatus
from subroll.core.database.connection import SessionLocal
from subroll.features.pipeline.domain.models import ProjectMetadata
from subroll.features.timeline.domain.models import SegmentEntity
from .sql_models import ExportJobModel, ProjectModel, utc_now
from ..domain.interfaces import IExportJobRepository, IProjectRepository
from ..domain.models import EditorSettings, Project, StyleSettings

logger = logging.getLogger(__name__)


def _to_domain(row: ProjectModel) -> Project:
    return Project(
        id=row.id,
        name=row.name,
        video_url=row.video_url,
        duration=row.duration or 0.0,
        created_at=row.created_at,
        updated_at=row.updated_at,
        segments=tuple(SegmentEntity.from_dict(s) for s in row.segments or []),
        style=StyleSettings.from_dict(row.style or {}),
        settings=EditorSettings.from_dict(row.settings or {}),
        metadata=ProjectMetadata.from_dict(row.project_metadata) if row.project_metadata else None,
    )


def _apply(row: ProjectModel, project: Project) -> None:
    row.name = project.name
    row.video_url = project.video_url
    row.duration = project.duration
    row.segments = [s.to_dict() for s in project.segments]
    row.style = project.style.to_dict()
    row.settings = project.settings.to_dict()
    row.project_metadata = project.metadata.to_dict() if project.metadata else None
    row.updated_at = project.updated_at


class SqlProjectRepo(IProjectRepository):

    def __init__(self, session_factory=SessionLocal):
        self.session_factory = session_factory

    def save(self, project: Project) -> UUID:
        with self.session_factory() as db:
            try:
                row = db.get(ProjectModel, project.id)
                if row is None:
                    row = ProjectModel(id=project.id, created_at=project.created_at)
                    db.add(row)
                _apply(row, project)
                db.commit()
                logger.debug(f"Saved project {project.id} ({len(project.segments)} segments)")
                return project.id
            except Exception:
                db.rollback()
                raise

    def get(self, project_id: UUID) -> Optional[Project]:
        with self.session_factory() as db:
            row = db.get(ProjectModel, project_id)
            return _to_domain(row) if row else None

    def list_recent(self, limit: int) -> List[Project]:
        with self.session_factory() as db:
            rows = (
                db.query(ProjectModel)
                .order_by(ProjectModel.updated_at.desc())
                .limit(limit)
                .all()
            )
            return [_to_domain(r) for r in rows]

    def delete(self, project_id: UUID) -> bool:
        with self.session_factory() as db:
            try:
                row = db.get(ProjectModel, project_id)
                if row is None:
                    return False
                db.delete(row)
                db.commit()
                return True
            except Exception:
                db.rollback()
                raise


class SqlExportJobRepo(IExportJobRepository):

    def __init__(self, session_factory=SessionLocal):
        self.session_factory = session_factory

    def create_job(self, project_id: Optional[UUID], payload: dict) -> UUID:
        with self.session_factory() as db:
            job = ExportJobModel(
                project_id=project_id,
                payload=payload,
                status=JobStatus.PENDING,
            )
            db.add(job)
            db.commit()
            db.refresh(job)
            return job.id

    def update_status(self,
                      job_id: UUID,
                      status: JobStatus,
                      progress: Optional[int] = None,
                      video_filename: Optional[str] = None,
                      error_message: Optional[str] = None) -> None:
        with self.session_factory() as db:
            try:
                job = db.get(ExportJobModel, job_id)
                if job is None:
                    logger.warning(f"Export job {job_id} not found; status {status.value} not recorded")
                    return

                job.status = status
                if progress is not None:
                    job.progress = progress
                if video_filename is not None:
                    job.video_filename = video_filename
                if error_message is not None:
                    job.error_message = error_message

                if status == JobStatus.PROCESSING and job.started_at is None:
                    job.started_at = utc_now()
                elif status in (JobStatus.COMPLETED, JobStatus.FAILED, JobStatus.CANCELLED):
                    job.finished_at = utc_now()

                db.commit()
            except Exception:
                db.rollback()
                raise

    def get_status(self, job_id: UUID) -> Optional[JobStatus]:
        with self.session_factory() as db:
            job = db.get(ExportJobModel, job_id)
            return job.status if job else None
