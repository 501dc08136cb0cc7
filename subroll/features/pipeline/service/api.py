# File: subroll/features/pipeline/service/api.py
from pathlib import Path
from typing import Optional, Union

from ..data.http_client import VideoApiClient
from ..domain.models import PipelineResult, ProcessingOptions
from .cancellation import CancellationToken
from .orchestrator import PipelineOrchestrator, StateListener


def build_orchestrator(client: VideoApiClient,
                       on_state_update: Optional[StateListener] = None) -> PipelineOrchestrator:
    """Wires every stage to the same HTTP backend."""
    return PipelineOrchestrator(
        transcriber=client,
        keyword_extractor=client,
        image_lookup=client,
        video_generator=client,
        on_state_update=on_state_update,
    )


async def process_video(file_path: Union[str, Path],
                        options: Optional[ProcessingOptions] = None,
                        api_url: Optional[str] = None,
                        on_state_update: Optional[StateListener] = None,
                        cancel_token: Optional[CancellationToken] = None) -> PipelineResult:
    """
    Public API: runs the full pipeline for one file against the HTTP backend.
    Useful for scripts and the CLI, without managing an orchestrator.
    """
    orchestrator = build_orchestrator(VideoApiClient(base_url=api_url), on_state_update)
    return await orchestrator.process(file_path, options, cancel_token)
