# File: subroll/features/projects/domain/interfaces.py
from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from subroll.core.common.enums import JobStatus
from .models import Project


class IProjectRepository(ABC):
    """
    Contract for Project persistence.
    """

    @abstractmethod
    def save(self, project: Project) -> UUID:
        """
        Inserts or updates the project row keyed by `project.id`.
        """
        pass

    @abstractmethod
    def get(self, project_id: UUID) -> Optional[Project]:
        pass

    @abstractmethod
    def list_recent(self, limit: int) -> List[Project]:
        """
        Most recently updated first.
        """
        pass

    @abstractmethod
    def delete(self, project_id: UUID) -> bool:
        pass


class IExportJobRepository(ABC):
    """
    Contract for recording export attempts.
    """

    @abstractmethod
    def create_job(self, project_id: Optional[UUID], payload: dict) -> UUID:
        """
        Creates a job in PENDING state.
        """
        pass

    @abstractmethod
    def update_status(self,
                      job_id: UUID,
                      status: JobStatus,
                      progress: Optional[int] = None,
                      video_filename: Optional[str] = None,
                      error_message: Optional[str] = None) -> None:
        pass

    @abstractmethod
    def get_status(self, job_id: UUID) -> Optional[JobStatus]:
        pass
