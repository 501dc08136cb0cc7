# File: subroll/features/projects/service/export.py
import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional
from uuid import UUID

from subroll.core.common.enums import JobStatus
from subroll.core.errors import RecoverableStageError, ValidationError
from subroll.features.pipeline.domain.interfaces import IArtifactStore, IVideoGenerator
from subroll.features.pipeline.domain.models import ProjectMetadata
from subroll.features.pipeline.service.generation import build_generation_request
from ..domain.interfaces import IExportJobRepository
from ..domain.models import StyleSettings

logger = logging.getLogger(__name__)

EXPORT_STAGE = "export"


@dataclass(frozen=True)
class ExportState:
    status: JobStatus = JobStatus.PENDING
    progress: int = 0
    error: Optional[str] = None
    video_filename: Optional[str] = None

    @property
    def is_exporting(self) -> bool:
        return self.status == JobStatus.PROCESSING


class ExportService:
    """
    Re-renders a project from its cached pipeline snapshot.

    Only the video generator is called: the transcript, keywords and images
    come from the metadata, so an export can be retried after a failed
    generation stage without running the pipeline again.
    """

    def __init__(self,
                 generator: IVideoGenerator,
                 artifact_store: Optional[IArtifactStore] = None,
                 job_repo: Optional[IExportJobRepository] = None):
        self.generator = generator
        self.artifact_store = artifact_store
        self.job_repo = job_repo
        self.state = ExportState()

    def _set(self, job_id: Optional[UUID], **changes) -> None:
        self.state = replace(self.state, **changes)
        if self.job_repo and job_id:
            self.job_repo.update_status(
                job_id,
                self.state.status,
                progress=self.state.progress,
                video_filename=changes.get("video_filename"),
                error_message=changes.get("error"),
            )

    async def export(self,
                     metadata: Optional[ProjectMetadata],
                     style: Optional[StyleSettings] = None,
                     words_per_subtitle: Optional[int] = None,
                     project_id: Optional[UUID] = None) -> str:
        """
        Returns the rendered video's filename.

        Raises:
            ValidationError: No metadata, the original upload is gone, or an
                export is already running.
            RecoverableStageError: The generator failed; state is FAILED and
                the export can simply be retried.
        """
        if metadata is None:
            raise ValidationError("No video data available for export. Process a video first.")
        if self.state.is_exporting:
            raise ValidationError("An export is already running.")
        if not metadata.media.exists():
            raise ValidationError(f"Original video is no longer available: {metadata.media.path}")

        request = build_generation_request(
            metadata,
            words_per_subtitle=words_per_subtitle,
            style_fields=(style or StyleSettings()).to_form_fields(),
        )

        job_id = None
        if self.job_repo:
            job_id = self.job_repo.create_job(project_id, {
                "original_file": str(metadata.media.path),
                "words_per_subtitle": request.words_per_subtitle,
                "style": dict(request.style_fields),
            })

        self.state = ExportState()
        self._set(job_id, status=JobStatus.PROCESSING, progress=10)
        logger.info(f"Exporting {metadata.media.name}...")

        try:
            result = await self.generator.generate_video(request)
        except Exception as e:
            message = str(e) or e.__class__.__name__
            logger.error(f"Export of {metadata.media.name} failed: {message}")
            self._set(job_id, status=JobStatus.FAILED, error=message)
            raise RecoverableStageError(EXPORT_STAGE, message) from e

        self._set(job_id, status=JobStatus.COMPLETED, progress=100, video_filename=result.video_filename)
        logger.info(f"Export complete: {result.video_filename}")
        return result.video_filename

    async def download(self, filename: str, destination: Path) -> Path:
        """Streams a rendered video to `destination`. A directory gets the original filename."""
        if not filename:
            raise ValidationError("No rendered video to download.")
        if self.artifact_store is None:
            raise ValidationError("No artifact store configured for downloads.")

        destination = Path(destination)
        if destination.is_dir():
            destination = destination / filename
        return await self.artifact_store.download_video(filename, destination)
