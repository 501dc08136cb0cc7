import pytest

from subroll.core.common.enums import JobStatus
from subroll.core.errors import RecoverableStageError, ValidationError
from subroll.features.projects.data.repository import SqlExportJobRepo
from subroll.features.projects.data.sql_models import ExportJobModel
from subroll.features.projects.domain.models import StyleSettings
from subroll.features.projects.service.export import ExportService


@pytest.mark.asyncio
async def test_export_reuses_cached_metadata(backend, make_metadata):
    """
    Verifies an export calls only the renderer, with the snapshot's data
    and the chosen style.
    """
    # 1. Arrange
    service = ExportService(backend)
    style = StyleSettings(font_family="Roboto", font_size=20)

    # 2. Act
    filename = await service.export(make_metadata(), style=style, words_per_subtitle=5)

    # 3. Verify
    assert filename == "enhanced_video.mp4"
    assert backend.calls == ["generate_video"]
    request = backend.requests[0]
    assert request.words_per_subtitle == 5
    assert request.keywords == ("technology", "innovation", "blockchain")
    assert request.style_fields["font_family"] == "Roboto"
    assert request.style_fields["font_size"] == "20"

    assert service.state.status == JobStatus.COMPLETED
    assert service.state.progress == 100
    assert service.state.video_filename == "enhanced_video.mp4"


@pytest.mark.asyncio
async def test_export_without_metadata(backend):
    service = ExportService(backend)

    with pytest.raises(ValidationError):
        await service.export(None)
    assert backend.calls == []


@pytest.mark.asyncio
async def test_export_when_upload_is_gone(backend, make_metadata, video_file):
    metadata = make_metadata()
    video_file.unlink()

    with pytest.raises(ValidationError):
        await ExportService(backend).export(metadata)


@pytest.mark.asyncio
async def test_failed_export_can_be_retried(backend, make_metadata, collaborator_error):
    backend.failures["generate_video"] = collaborator_error
    service = ExportService(backend)
    metadata = make_metadata()

    with pytest.raises(RecoverableStageError):
        await service.export(metadata)
    assert service.state.status == JobStatus.FAILED
    assert service.state.error == "Service unavailable"

    # Backend recovers
    del backend.failures["generate_video"]
    assert await service.export(metadata) == "enhanced_video.mp4"
    assert service.state.status == JobStatus.COMPLETED
    assert service.state.error is None


@pytest.mark.asyncio
async def test_export_records_job_rows(backend, make_metadata, session_factory, collaborator_error):
    jobs = SqlExportJobRepo(session_factory)
    service = ExportService(backend, job_repo=jobs)

    await service.export(make_metadata())

    backend.failures["generate_video"] = collaborator_error
    with pytest.raises(RecoverableStageError):
        await service.export(make_metadata())

    with session_factory() as db:
        rows = db.query(ExportJobModel).order_by(ExportJobModel.created_at).all()
        assert [r.status for r in rows] == [JobStatus.COMPLETED, JobStatus.FAILED]
        assert rows[0].video_filename == "enhanced_video.mp4"
        assert rows[0].finished_at is not None
        assert rows[1].error_message == "Service unavailable"
        assert rows[0].payload["words_per_subtitle"] == 3


@pytest.mark.asyncio
async def test_download(backend, tmp_path):
    service = ExportService(backend, artifact_store=backend)

    target = await service.download("enhanced_video.mp4", tmp_path)

    assert target == tmp_path / "enhanced_video.mp4"
    assert target.read_bytes() == b"video-bytes"

    with pytest.raises(ValidationError):
        await service.download("", tmp_path)
    with pytest.raises(ValidationError):
        await ExportService(backend).download("x.mp4", tmp_path)
