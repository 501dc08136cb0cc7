# File: subroll/features/pipeline/domain/interfaces.py
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Sequence

from subroll.core.shared_types import MediaFile
from .models import (
    BrollResult,
    KeywordsResult,
    TranscriptionResult,
    VideoGenerationRequest,
    VideoGenerationResult,
)


class ITranscriber(ABC):
    """
    Contract for the speech-to-text collaborator.
    """
    @abstractmethod
    async def transcribe(self, media: MediaFile, language: Optional[str] = None) -> TranscriptionResult:
        """
        Transcribes the uploaded media file.

        Args:
            media: The uploaded video.
            language: Optional language hint ('en', 'de', ...).

        Raises:
            CollaboratorError: If the service fails or is unreachable.
        """
        pass


class IKeywordExtractor(ABC):
    @abstractmethod
    async def extract_keywords(self, transcript: str) -> KeywordsResult:
        """Returns the keywords worth illustrating in the transcript."""
        pass


class IImageLookup(ABC):
    @abstractmethod
    async def fetch_broll_images(self, keywords: Sequence[str]) -> BrollResult:
        """Finds one stock image per keyword. Missing images map to None."""
        pass


class IVideoGenerator(ABC):
    """
    Contract for the rendering collaborator that burns subtitles and b-roll
    into the upload.
    """
    @abstractmethod
    async def generate_video(self, request: VideoGenerationRequest) -> VideoGenerationResult:
        """
        Renders the final video.

        Returns:
            A handle (filename) the artifact store can resolve.
        """
        pass


class IArtifactStore(ABC):
    @abstractmethod
    async def download_video(self, filename: str, destination: Path) -> Path:
        """Streams a rendered video to `destination`. Returns the written path."""
        pass
