# File: subroll/main.py
"""
Command-line entry point.

    python -m subroll.main process VIDEO [--no-subtitles] [--no-broll]
        [--words N] [--language L] [--api-url URL] [--download DIR]

Runs the pipeline against the HTTP backend, turns the result into a saved
project and optionally downloads the rendered video.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from subroll.core.config.settings import settings
from subroll.core.database.connection import init_db
from subroll.core.errors import StageError, SubrollError
from subroll.core.logging_setup import setup_logging
from subroll.core.common.enums import PipelineStep
from subroll.features.pipeline.data.http_client import VideoApiClient
from subroll.features.pipeline.domain.models import ProcessingOptions, ProcessingState
from subroll.features.pipeline.service.api import build_orchestrator
from subroll.features.projects.data.repository import SqlProjectRepo
from subroll.features.projects.service.store import ProjectStore
from subroll.features.timeline.service.time_codec import format_timestamp

logger = logging.getLogger("subroll.main")


def _print_progress(state: ProcessingState) -> None:
    if state.step in (PipelineStep.IDLE, PipelineStep.ERROR):
        return
    logger.info(f"[{state.progress:3d}%] {state.step.value}")


async def run_process(args: argparse.Namespace) -> int:
    options = ProcessingOptions(
        subtitles_enabled=not args.no_subtitles,
        brolls_enabled=not args.no_broll,
        words_per_subtitle=args.words,
        language=args.language,
    )
    client = VideoApiClient(base_url=args.api_url)
    orchestrator = build_orchestrator(client, on_state_update=_print_progress)

    result = await orchestrator.process(Path(args.video), options)

    for warning in orchestrator.state.warnings:
        logger.warning(f"Degraded: {warning}")

    init_db()
    store = ProjectStore(repository=SqlProjectRepo())
    store.new_project(Path(args.video).stem)
    rendered = store.seed_from_metadata(result.metadata)
    project_id = store.save()

    duration = store.project.duration
    logger.info("--- SUMMARY ---")
    logger.info(f"Project:   {store.project.name} ({project_id})")
    logger.info(f"Duration:  {format_timestamp(duration)}")
    logger.info(f"Keywords:  {', '.join(result.keywords) or '-'}")
    logger.info(f"Segments:  {len(rendered)} rendered")
    logger.info(f"Video:     {result.video_filename or 'not generated'}")

    if args.download and result.video_filename:
        target = Path(args.download) / result.video_filename
        await client.download_video(result.video_filename, target)
        logger.info(f"Downloaded to {target}")

    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Subtitle and b-roll video pipeline.")
    parser.add_argument("--log-level", default=settings.LOG_LEVEL, help="Console log level.")
    parser.add_argument("--log-file", type=Path, default=None, help="Optional detailed log file.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    process = subparsers.add_parser("process", help="Run the full pipeline on a video file.")
    process.add_argument("video", help="Path to the video file.")
    process.add_argument("--no-subtitles", action="store_true", help="Skip transcription and subtitles.")
    process.add_argument("--no-broll", action="store_true", help="Skip keyword extraction and b-roll.")
    process.add_argument(
        "--words",
        type=int,
        choices=settings.ALLOWED_WORD_COUNTS,
        default=settings.DEFAULT_WORDS_PER_SUBTITLE,
        help="Words per subtitle chunk.",
    )
    process.add_argument("--language", default=None, help="Spoken language hint, e.g. 'en'.")
    process.add_argument("--api-url", default=None, help=f"Backend URL (default: {settings.API_BASE_URL}).")
    process.add_argument("--download", default=None, help="Directory to download the rendered video into.")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level, args.log_file)

    try:
        return asyncio.run(run_process(args))
    except StageError as e:
        logger.critical(f"Pipeline failed during {e.stage}: {e.message}")
        return 1
    except SubrollError as e:
        logger.critical(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
