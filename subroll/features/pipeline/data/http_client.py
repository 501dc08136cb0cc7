# File: subroll/features/pipeline/data/http_client.py
import json
import logging
import mimetypes
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

import httpx

from subroll.core.config.settings import settings
from subroll.core.errors import CollaboratorError
from subroll.core.shared_types import MediaFile
from ..domain.interfaces import (
    IArtifactStore,
    IImageLookup,
    IKeywordExtractor,
    ITranscriber,
    IVideoGenerator,
)
from ..domain.models import (
    BrollResult,
    KeywordsResult,
    TranscriptionResult,
    VideoGenerationRequest,
    VideoGenerationResult,
)

logger = logging.getLogger(__name__)


class VideoApiClient(ITranscriber, IKeywordExtractor, IImageLookup, IVideoGenerator, IArtifactStore):
    """
    Concrete implementation of every collaborator contract against the
    video backend's HTTP API.

    Pass `client` to share a connection pool (or a mock transport in tests);
    otherwise a short-lived client is opened per call.
    """

    def __init__(self,
                 base_url: Optional[str] = None,
                 timeout: Optional[float] = None,
                 client: Optional[httpx.AsyncClient] = None):
        self.base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.REQUEST_TIMEOUT
        self._shared_client = client

    @asynccontextmanager
    async def _client(self):
        if self._shared_client is not None:
            yield self._shared_client
            return
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            yield client

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    @staticmethod
    def _raise_for_error(response: httpx.Response) -> None:
        """
        Turns a non-2xx response into CollaboratorError, preferring the
        service's own `details` / `error` message over the status line.
        """
        if response.is_success:
            return
        message = f"HTTP {response.status_code}: {response.reason_phrase}"
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            message = body.get("details") or body.get("error") or message
        raise CollaboratorError(message, status_code=response.status_code)

    async def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        url = self._url(path)
        logger.debug(f"{method} {url}")
        try:
            async with self._client() as client:
                response = await client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise CollaboratorError(f"Request to {url} failed: {e}") from e

        self._raise_for_error(response)
        try:
            return response.json()
        except ValueError as e:
            raise CollaboratorError(f"Invalid JSON from {url}") from e

    # --- Health ---

    async def health_check(self) -> Dict[str, Any]:
        return await self._request("GET", "/health")

    # --- ITranscriber ---

    async def transcribe(self, media: MediaFile, language: Optional[str] = None) -> TranscriptionResult:
        logger.info(f"Uploading {media.name} for transcription...")
        data = {"language": language} if language else {}
        with open(media.path, "rb") as fh:
            payload = await self._request(
                "POST", "/transcribe",
                files={"file": (media.name, fh, _guess_mime(media.path))},
                data=data,
            )
        result = TranscriptionResult.from_dict(payload)
        logger.info(f"Transcribed {len(result.words)} words, {len(result.segments)} segments ({result.language})")
        return result

    # --- IKeywordExtractor ---

    async def extract_keywords(self, transcript: str) -> KeywordsResult:
        payload = await self._request("POST", "/extract-keywords", json={"transcript": transcript})
        keywords = tuple(str(k) for k in payload.get("keywords") or [])
        return KeywordsResult(
            keywords=keywords,
            total_count=int(payload.get("total_count", len(keywords))),
        )

    # --- IImageLookup ---

    async def fetch_broll_images(self, keywords: Sequence[str]) -> BrollResult:
        payload = await self._request("POST", "/broll-images", json={"keywords": list(keywords)})
        return BrollResult(
            images=dict(payload.get("images") or {}),
            errors=tuple(payload.get("errors") or []),
            access_token_invalid=bool(payload.get("access_token_invalid", False)),
        )

    # --- IVideoGenerator ---

    async def generate_video(self, request: VideoGenerationRequest) -> VideoGenerationResult:
        form = {
            "transcript": request.transcript,
            "words": json.dumps([w.to_dict() for w in request.words]),
            "keywords": json.dumps(list(request.keywords)),
            "broll_images": json.dumps(dict(request.broll_images)),
            "words_per_subtitle": str(request.words_per_subtitle),
        }
        if request.segments:
            form["transcribed_segments"] = json.dumps([s.to_dict() for s in request.segments])
        form.update(request.style_fields)

        logger.info(f"Requesting render of {request.media.name} ({request.words_per_subtitle} words/subtitle)")
        with open(request.media.path, "rb") as fh:
            payload = await self._request(
                "POST", "/generate-video",
                files={"file": (request.media.name, fh, _guess_mime(request.media.path))},
                data=form,
            )

        filename = payload.get("video_filename")
        if not filename:
            raise CollaboratorError("Video generation returned no filename")
        return VideoGenerationResult(video_filename=filename)

    # --- IArtifactStore ---

    def download_url(self, filename: str) -> str:
        return self._url(f"/download-video/{filename}")

    async def download_video(self, filename: str, destination: Path) -> Path:
        url = self.download_url(filename)
        destination.parent.mkdir(parents=True, exist_ok=True)
        logger.info(f"Downloading {filename} -> {destination}")
        try:
            async with self._client() as client:
                async with client.stream("GET", url) as response:
                    if not response.is_success:
                        await response.aread()
                        self._raise_for_error(response)
                    with open(destination, "wb") as out:
                        async for chunk in response.aiter_bytes():
                            out.write(chunk)
        except httpx.HTTPError as e:
            # Don't leave a truncated file behind
            destination.unlink(missing_ok=True)
            raise CollaboratorError(f"Failed to download video: {e}") from e
        return destination


def _guess_mime(path: Path) -> str:
    return mimetypes.guess_type(path.name)[0] or "application/octet-stream"
