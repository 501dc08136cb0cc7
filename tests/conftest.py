# File: tests/conftest.py

import asyncio

import pytest
from sqlalchemy.orm import sessionmaker

from subroll.core.database.base import Base
from subroll.core.database.connection import build_engine
from subroll.core.errors import CollaboratorError
from subroll.core.shared_types import MediaFile
from subroll.features.pipeline.domain.interfaces import (
    IArtifactStore,
    IImageLookup,
    IKeywordExtractor,
    ITranscriber,
    IVideoGenerator,
)
from subroll.features.pipeline.domain.models import (
    BrollResult,
    KeywordsResult,
    ProjectMetadata,
    TranscriptionResult,
    VideoGenerationResult,
)
from subroll.features.timeline.domain.models import RawSegment, Word


SEGMENT_TEXTS = [
    (0.0, 3.0, "Welcome to our innovation lab today"),
    (3.0, 6.0, "We build technology for everyone here"),
]


def _sample_words():
    words = []
    for start, end, text in SEGMENT_TEXTS:
        tokens = text.split()
        step = (end - start) / len(tokens)
        for i, token in enumerate(tokens):
            words.append(Word(token, start + i * step, start + (i + 1) * step))
    return tuple(words)


def sample_transcription() -> TranscriptionResult:
    return TranscriptionResult(
        text=" ".join(text for _, _, text in SEGMENT_TEXTS),
        language="en",
        words=_sample_words(),
        segments=tuple(RawSegment(text, start, end) for start, end, text in SEGMENT_TEXTS),
    )


class FakeBackend(ITranscriber, IKeywordExtractor, IImageLookup, IVideoGenerator, IArtifactStore):
    """
    In-memory stand-in for every collaborator.
    `failures` maps a call name to the exception it raises; names in `hang`
    block until the surrounding task is cancelled.
    """

    def __init__(self):
        self.transcription = sample_transcription()
        self.keywords = KeywordsResult(keywords=("innovation", "technology"), total_count=2)
        self.broll = BrollResult(images={
            "innovation": "https://img.example/innovation.jpg",
            "technology": "https://img.example/technology.jpg",
        })
        self.video = VideoGenerationResult(video_filename="enhanced_video.mp4")
        self.failures = {}
        self.hang = set()
        self.calls = []
        self.requests = []
        self.started = asyncio.Event()

    async def _enter(self, name):
        self.calls.append(name)
        if name in self.hang:
            self.started.set()
            await asyncio.Event().wait()
        if name in self.failures:
            raise self.failures[name]

    async def transcribe(self, media, language=None):
        await self._enter("transcribe")
        return self.transcription

    async def extract_keywords(self, transcript):
        await self._enter("extract_keywords")
        return self.keywords

    async def fetch_broll_images(self, keywords):
        await self._enter("fetch_broll_images")
        return self.broll

    async def generate_video(self, request):
        self.requests.append(request)
        await self._enter("generate_video")
        return self.video

    async def download_video(self, filename, destination):
        await self._enter("download_video")
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_bytes(b"video-bytes")
        return destination


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def collaborator_error():
    return CollaboratorError("Service unavailable", status_code=503)


@pytest.fixture
def video_file(tmp_path):
    """
    A dummy upload. Collaborators are faked, so the bytes are never decoded.
    """
    p = tmp_path / "talk.mp4"
    p.write_bytes(b"\x00\x00\x00\x18ftypmp42")
    return p


@pytest.fixture
def session_factory(tmp_path):
    """
    A fresh SQLite database per test, with every table created.
    """
    import subroll.features.projects.data.sql_models  # noqa: F401

    engine = build_engine(f"sqlite:///{tmp_path / 'test.db'}")
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    yield factory

    engine.dispose()


@pytest.fixture
def make_metadata(video_file):
    """
    Builds a pipeline snapshot over the sample transcript; keyword arguments
    override individual fields.
    """

    def _make(**overrides):
        t = sample_transcription()
        fields = dict(
            media=MediaFile(video_file),
            transcript=t.text,
            language=t.language,
            words=t.words,
            segments=t.segments,
            keywords=("technology", "innovation", "blockchain"),
            broll_images={
                "technology": "https://img.example/technology.jpg",
                "innovation": "https://img.example/innovation.jpg",
                "blockchain": "https://img.example/blockchain.jpg",
            },
        )
        fields.update(overrides)
        return ProjectMetadata(**fields)

    return _make
