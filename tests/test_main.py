import pytest

import subroll.main as cli
from subroll.features.projects.data.repository import SqlProjectRepo


def test_parser_defaults():
    args = cli.build_parser().parse_args(["process", "talk.mp4"])

    assert args.command == "process"
    assert args.video == "talk.mp4"
    assert args.words == 3
    assert not args.no_subtitles
    assert not args.no_broll


def test_parser_rejects_unsupported_word_count():
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args(["process", "talk.mp4", "--words", "4"])


def test_main_runs_pipeline_and_saves_project(monkeypatch, backend, video_file, session_factory, tmp_path):
    repo = SqlProjectRepo(session_factory)
    monkeypatch.setattr(cli, "VideoApiClient", lambda base_url=None: backend)
    monkeypatch.setattr(cli, "SqlProjectRepo", lambda: repo)
    monkeypatch.setattr(cli, "init_db", lambda: None)

    code = cli.main(["process", str(video_file), "--words", "5", "--download", str(tmp_path / "out")])

    assert code == 0
    assert backend.calls == ["transcribe", "extract_keywords", "fetch_broll_images",
                             "generate_video", "download_video"]
    saved = repo.list_recent(1)[0]
    assert saved.name == "talk"
    assert saved.settings.word_count == 5
    assert (tmp_path / "out" / "enhanced_video.mp4").read_bytes() == b"video-bytes"


def test_main_reports_fatal_failure(monkeypatch, backend, video_file, collaborator_error):
    backend.failures["transcribe"] = collaborator_error
    monkeypatch.setattr(cli, "VideoApiClient", lambda base_url=None: backend)

    assert cli.main(["process", str(video_file)]) == 1


def test_main_reports_missing_file(tmp_path):
    assert cli.main(["process", str(tmp_path / "missing.mp4")]) == 1
