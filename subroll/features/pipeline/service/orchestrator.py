# File: subroll/features/pipeline/service/orchestrator.py
import logging
from dataclasses import replace
from pathlib import Path
from typing import Awaitable, Callable, Dict, List, Optional, Tuple, TypeVar, Union

from subroll.core.common.enums import PipelineStep
from subroll.core.errors import (
    FatalStageError,
    PipelineCancelledError,
    RecoverableStageError,
    StageError,
    ValidationError,
)
from subroll.core.shared_types import MediaFile

from ..domain.interfaces import IImageLookup, IKeywordExtractor, ITranscriber, IVideoGenerator
from ..domain.models import (
    BrollMap,
    PipelineResult,
    ProcessingOptions,
    ProcessingState,
    ProjectMetadata,
    TranscriptionResult,
)
from .cancellation import CancellationToken
from .fallback_keywords import DEFAULT_KEYWORDS, extract_fallback_keywords, unique_keywords
from .generation import build_generation_request

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Progress checkpoints (0-100). Skipped stages still advance to their floor.
PROGRESS_TRANSCRIBING = 10
PROGRESS_TRANSCRIBED = 30
PROGRESS_EXTRACTING = 40
PROGRESS_KEYWORDS = 60
PROGRESS_FETCHING = 70
PROGRESS_BROLL = 80
PROGRESS_BROLL_NO_TRANSCRIPT = 90
PROGRESS_GENERATING = 85
PROGRESS_DONE = 100

STATUS_MESSAGES = {
    PipelineStep.IDLE: "Ready to process",
    PipelineStep.TRANSCRIBING: "Transcribing audio...",
    PipelineStep.EXTRACTING_KEYWORDS: "Extracting keywords for B-roll...",
    PipelineStep.FETCHING_BROLL: "Fetching B-roll images...",
    PipelineStep.GENERATING_VIDEO: "Generating enhanced video...",
    PipelineStep.COMPLETE: "Processing complete!",
}

StateListener = Callable[[ProcessingState], None]


class PipelineOrchestrator:
    """
    Drives one upload through transcribe -> keywords -> b-roll -> render.

    Stages run strictly one after another so progress is a plain function of
    which stage finished. Only transcription is fatal; every later stage has a
    fallback and the run still ends in COMPLETE.
    """

    def __init__(self,
                 transcriber: ITranscriber,
                 keyword_extractor: IKeywordExtractor,
                 image_lookup: IImageLookup,
                 video_generator: IVideoGenerator,
                 on_state_update: Optional[StateListener] = None):
        self.transcriber = transcriber
        self.keyword_extractor = keyword_extractor
        self.image_lookup = image_lookup
        self.video_generator = video_generator
        self.on_state_update = on_state_update
        self._state = ProcessingState()

    # --- State ---

    @property
    def state(self) -> ProcessingState:
        return self._state

    @property
    def is_processing(self) -> bool:
        return self._state.is_processing

    @property
    def status_message(self) -> str:
        if self._state.step == PipelineStep.ERROR:
            return f"Error: {self._state.error}"
        return STATUS_MESSAGES[self._state.step]

    def reset(self) -> None:
        logger.debug("Resetting processing state")
        self._publish(ProcessingState())

    def _publish(self, state: ProcessingState) -> None:
        self._state = state
        if self.on_state_update:
            self.on_state_update(state)

    def _update(self, **changes) -> None:
        # The progress bar must never move backwards
        if "progress" in changes:
            changes["progress"] = max(self._state.progress, changes["progress"])
        self._publish(replace(self._state, **changes))

    def _warn(self, error: StageError) -> None:
        logger.warning(f"Recoverable failure in {error.stage}: {error.message}")
        self._update(warnings=self._state.warnings + (str(error),))

    # --- Entry point ---

    async def process(self,
                      file_path: Union[str, Path, MediaFile, None],
                      options: Optional[ProcessingOptions] = None,
                      cancel_token: Optional[CancellationToken] = None) -> PipelineResult:
        """
        Runs the full pipeline for one upload.

        Raises:
            ValidationError: No file, or the file doesn't exist.
            FatalStageError: Transcription failed; state is ERROR.
            PipelineCancelledError: The token fired; state is ERROR.
        """
        media = self._resolve_media(file_path)
        options = options or ProcessingOptions()
        if options.words_per_subtitle <= 0:
            raise ValidationError(f"words_per_subtitle must be positive, got {options.words_per_subtitle}")
        token = cancel_token or CancellationToken()

        logger.info(
            f"Pipeline: processing {media.name} "
            f"(subtitles={options.subtitles_enabled}, broll={options.brolls_enabled})"
        )
        self._publish(ProcessingState())

        try:
            transcription = await self._transcribe(media, options, token)
            keywords, broll_images = await self._collect_broll(transcription, options, token)

            metadata = ProjectMetadata(
                media=media,
                transcript=transcription.text if transcription else "",
                language=transcription.language if transcription else "unknown",
                words=transcription.words if transcription else (),
                segments=transcription.segments if transcription else (),
                keywords=tuple(keywords),
                broll_images=dict(broll_images),
                subtitles_enabled=options.subtitles_enabled,
                brolls_enabled=options.brolls_enabled,
                words_per_subtitle=options.words_per_subtitle,
            )

            video_filename = await self._generate(metadata, options, token)
        except FatalStageError as e:
            logger.error(f"Pipeline aborted during {e.stage}: {e.message}")
            self._update(step=PipelineStep.ERROR, error=e.message)
            raise

        self._update(step=PipelineStep.COMPLETE, progress=PROGRESS_DONE,
                     video_filename=video_filename, error=None)
        logger.info(f"Pipeline complete for {media.name} (video: {video_filename or 'none'})")

        return PipelineResult(
            transcription=transcription,
            keywords=tuple(keywords),
            broll_images=dict(broll_images),
            video_filename=video_filename,
            metadata=metadata,
        )

    @staticmethod
    def _resolve_media(file_path) -> MediaFile:
        if file_path is None:
            raise ValidationError("No file provided.")
        if isinstance(file_path, MediaFile):
            return file_path
        return MediaFile(Path(file_path))

    async def _call(self,
                    step: PipelineStep,
                    call: Awaitable[T],
                    token: CancellationToken,
                    fatal: bool) -> T:
        """
        Awaits one collaborator call and classifies its failure.
        Cancellation always propagates as-is.
        """
        try:
            return await token.run(step.value, call)
        except PipelineCancelledError:
            raise
        except Exception as e:
            error_cls = FatalStageError if fatal else RecoverableStageError
            raise error_cls(step.value, str(e) or e.__class__.__name__) from e

    # --- Stages ---

    async def _transcribe(self,
                          media: MediaFile,
                          options: ProcessingOptions,
                          token: CancellationToken) -> Optional[TranscriptionResult]:
        if not options.subtitles_enabled:
            logger.info("Subtitles disabled; skipping transcription")
            self._update(progress=PROGRESS_TRANSCRIBED)
            return None

        token.raise_if_cancelled(PipelineStep.TRANSCRIBING.value)
        self._update(step=PipelineStep.TRANSCRIBING, progress=PROGRESS_TRANSCRIBING)

        transcription = await self._call(
            PipelineStep.TRANSCRIBING,
            self.transcriber.transcribe(media, options.language),
            token,
            fatal=True,
        )
        self._update(transcription=transcription, progress=PROGRESS_TRANSCRIBED)
        return transcription

    async def _collect_broll(self,
                             transcription: Optional[TranscriptionResult],
                             options: ProcessingOptions,
                             token: CancellationToken) -> Tuple[List[str], BrollMap]:
        if not options.brolls_enabled:
            logger.info("B-roll disabled; skipping keyword extraction and image lookup")
            self._update(progress=PROGRESS_BROLL)
            return [], {}

        keywords = await self._extract_keywords(transcription, token)

        done_progress = PROGRESS_BROLL if transcription is not None else PROGRESS_BROLL_NO_TRANSCRIPT
        if not keywords:
            logger.info("No keywords; nothing to illustrate")
            self._update(broll_images={}, progress=done_progress)
            return keywords, {}

        token.raise_if_cancelled(PipelineStep.FETCHING_BROLL.value)
        self._update(step=PipelineStep.FETCHING_BROLL, progress=PROGRESS_FETCHING)

        try:
            result = await self._call(
                PipelineStep.FETCHING_BROLL,
                self.image_lookup.fetch_broll_images(keywords),
                token,
                fatal=False,
            )
        except RecoverableStageError as e:
            self._warn(e)
            images: Dict[str, Optional[str]] = {}
        else:
            # Keys are exactly the keyword set; unknown keys from the service are dropped
            images = {kw: result.images.get(kw) or None for kw in keywords}
            if result.access_token_invalid:
                self._warn(RecoverableStageError(
                    PipelineStep.FETCHING_BROLL.value,
                    "The image service rejected its access credential",
                ))
            elif result.errors:
                self._warn(RecoverableStageError(
                    PipelineStep.FETCHING_BROLL.value,
                    f"Could not fetch images for: {', '.join(result.errors)}",
                ))
            found = sum(1 for url in images.values() if url)
            logger.info(f"B-roll images resolved for {found}/{len(keywords)} keywords")

        self._update(broll_images=images, progress=done_progress)
        return keywords, images

    async def _extract_keywords(self,
                                transcription: Optional[TranscriptionResult],
                                token: CancellationToken) -> List[str]:
        if transcription is None or not transcription.text:
            keywords = list(DEFAULT_KEYWORDS)
            logger.info(f"No transcript available; using default keywords: {keywords}")
            self._update(keywords=tuple(keywords), progress=PROGRESS_KEYWORDS)
            return keywords

        token.raise_if_cancelled(PipelineStep.EXTRACTING_KEYWORDS.value)
        self._update(step=PipelineStep.EXTRACTING_KEYWORDS, progress=PROGRESS_EXTRACTING)

        try:
            result = await self._call(
                PipelineStep.EXTRACTING_KEYWORDS,
                self.keyword_extractor.extract_keywords(transcription.text),
                token,
                fatal=False,
            )
            keywords = unique_keywords(result.keywords)
        except RecoverableStageError as e:
            self._warn(e)
            keywords = extract_fallback_keywords(transcription.text)
            logger.info(f"Using fallback keywords: {keywords}")

        self._update(keywords=tuple(keywords), progress=PROGRESS_KEYWORDS)
        return keywords

    async def _generate(self,
                        metadata: ProjectMetadata,
                        options: ProcessingOptions,
                        token: CancellationToken) -> str:
        if not (options.subtitles_enabled or options.brolls_enabled):
            logger.info("Subtitles and b-roll disabled; nothing to render")
            return ""

        token.raise_if_cancelled(PipelineStep.GENERATING_VIDEO.value)
        self._update(step=PipelineStep.GENERATING_VIDEO, progress=PROGRESS_GENERATING)

        request = build_generation_request(metadata)
        try:
            result = await self._call(
                PipelineStep.GENERATING_VIDEO,
                self.video_generator.generate_video(request),
                token,
                fatal=False,
            )
        except RecoverableStageError as e:
            # The cached metadata still allows a later export
            self._warn(e)
            return ""
        return result.video_filename
