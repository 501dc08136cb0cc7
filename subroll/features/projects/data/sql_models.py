# File: subroll/features/projects/data/sql_models.py
import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, Enum as SQLEnum, JSON, Float, Text, Uuid
from sqlalchemy.orm import relationship

from subroll.core.database.base import Base
from subroll.core.common.enums import JobStatus


def utc_now():
    return datetime.now(timezone.utc)


class ProjectModel(Base):
    __tablename__ = "projects"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False)
    video_url = Column(Text, nullable=True)
    duration = Column(Float, default=0.0)

    # Snapshot of the pipeline run; null until the first successful run
    project_metadata = Column("metadata", JSON, nullable=True)
    # Base segments only; chunks are derived on read
    segments = Column(JSON, default=list)
    style = Column(JSON, default=dict)
    settings = Column(JSON, default=dict)

    created_at = Column(DateTime(timezone=True), default=utc_now)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now, index=True)

    export_jobs = relationship("ExportJobModel", back_populates="project", cascade="all, delete-orphan")


class ExportJobModel(Base):
    __tablename__ = "export_jobs"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    project_id = Column(Uuid(as_uuid=True), ForeignKey("projects.id"), nullable=True)
    status = Column(SQLEnum(JobStatus), default=JobStatus.PENDING, nullable=False, index=True)
    progress = Column(Integer, default=0)
    video_filename = Column(String, nullable=True)
    error_message = Column(String, nullable=True)
    payload = Column(JSON, default=dict)

    created_at = Column(DateTime(timezone=True), default=utc_now)
    started_at = Column(DateTime(timezone=True), nullable=True)
    finished_at = Column(DateTime(timezone=True), nullable=True)

    project = relationship("ProjectModel", back_populates="export_jobs")
