import uuid

from subroll.core.common.enums import JobStatus, SegmentKind
from subroll.features.projects.data.repository import SqlExportJobRepo, SqlProjectRepo
from subroll.features.projects.data.sql_models import ExportJobModel, ProjectModel
from subroll.features.projects.domain.models import EditorSettings, Project, RGBAColor, StyleSettings
from subroll.features.timeline.domain.models import SegmentEntity


def make_project(name="Repo Test"):
    return Project(
        name=name,
        duration=12.5,
        segments=(
            SegmentEntity(id="s1", kind=SegmentKind.SUBTITLE, start_seconds=0.0, end_seconds=4.0,
                          content="hello brave new world", highlighted_keyword="world"),
            SegmentEntity(id="b1", kind=SegmentKind.BROLL, start_seconds=0.0, end_seconds=4.0,
                          content="world", image_url="https://img.example/world.jpg", keyword_timestamp=3.0),
        ),
        style=StyleSettings(font_size=22, background_color=RGBAColor(10, 20, 30, 0.5)),
        settings=EditorSettings(word_count=7, snap_to_grid=True),
    )


def test_save_and_get_project(session_factory):
    repo = SqlProjectRepo(session_factory)
    project = make_project()

    project_id = repo.save(project)
    loaded = repo.get(project_id)

    assert loaded.name == "Repo Test"
    assert loaded.duration == 12.5
    assert loaded.segments == project.segments
    assert loaded.style == project.style
    assert loaded.settings == project.settings
    assert loaded.metadata is None


def test_save_updates_existing_row(session_factory):
    repo = SqlProjectRepo(session_factory)
    project = make_project()
    repo.save(project)

    project.name = "Renamed"
    project.segments = project.segments[:1]
    repo.save(project)

    with session_factory() as db:
        assert db.query(ProjectModel).count() == 1
    assert repo.get(project.id).name == "Renamed"
    assert len(repo.get(project.id).segments) == 1


def test_list_recent_and_delete(session_factory):
    repo = SqlProjectRepo(session_factory)
    older, newer = make_project("older"), make_project("newer")
    newer.updated_at = older.updated_at.replace(year=older.updated_at.year + 1)
    repo.save(older)
    repo.save(newer)

    assert [p.name for p in repo.list_recent(10)] == ["newer", "older"]
    assert [p.name for p in repo.list_recent(1)] == ["newer"]

    assert repo.delete(older.id) is True
    assert repo.delete(older.id) is False
    assert repo.get(older.id) is None
    assert repo.get(uuid.uuid4()) is None


def test_export_job_lifecycle(session_factory):
    repo = SqlExportJobRepo(session_factory)

    job_id = repo.create_job(None, {"words_per_subtitle": 3})
    assert repo.get_status(job_id) == JobStatus.PENDING

    repo.update_status(job_id, JobStatus.PROCESSING, progress=10)
    repo.update_status(job_id, JobStatus.COMPLETED, progress=100, video_filename="out.mp4")

    with session_factory() as db:
        job = db.get(ExportJobModel, job_id)
        assert job.status == JobStatus.COMPLETED
        assert job.progress == 100
        assert job.video_filename == "out.mp4"
        assert job.started_at is not None
        assert job.finished_at is not None

    # Unknown ids are ignored
    repo.update_status(uuid.uuid4(), JobStatus.FAILED)
    assert repo.get_status(uuid.uuid4()) is None
