#!/usr/bin/env python3
"""
Audio Transcriber - Main Orchestrator

Entry point that routes every input to the right pipeline:
YouTube URL → Audio → Transcript → Summary, or local .mp3 → Transcript → Summary
"""

import argparse
import asyncio
import logging
import shutil
import sys
import uuid
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import List, Optional, Sequence

import structlog
from dotenv import load_dotenv
from openai import AsyncOpenAI
from pydantic import BaseModel, Field

# Load environment variables from .env file
load_dotenv()

from config import AppConfig, ConfigurationError, RunOptions, config
from transcriber.aggregate import TranscriptAggregator, TranscriptionResult
from transcriber.download import DownloadError, MediaDownloader
from transcriber.models import (
    SUPPORTED_MODEL_ALIASES,
    UnsupportedModelError,
    get_chat_model_from_string
)
from transcriber.summarize import Summarizer
from transcriber.transcribe import TranscriptionClient

logger = structlog.get_logger(__name__)

EXIT_OK = 0
EXIT_FAILED_INPUTS = 1
EXIT_USAGE = 2


def configure_logging(debug: bool = False):
    """Configure structured logging to stderr"""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(message)s",
        stream=sys.stderr,
        force=True
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


class InputKind(str, Enum):
    REMOTE_LINK = "remote_link"
    LOCAL_AUDIO = "local_audio"
    INVALID = "invalid"


class InputJob(BaseModel):
    """Tracking record for one command-line input"""

    job_id: str = Field(description="Unique job identifier")
    input: str = Field(description="Raw command-line input")
    kind: InputKind = Field(description="How the input was classified")
    start_time: datetime = Field(default_factory=datetime.now)
    end_time: Optional[datetime] = None
    status: str = Field(default="running", description="Job status")
    error_message: Optional[str] = None

    video_title: Optional[str] = None
    audio_path: Optional[str] = None
    result: Optional[TranscriptionResult] = None

    def duration_seconds(self) -> float:
        end = self.end_time or datetime.now()
        return (end - self.start_time).total_seconds()

    def mark_completed(self):
        self.end_time = datetime.now()
        self.status = "completed"

    def mark_failed(self, error: str):
        self.end_time = datetime.now()
        self.status = "failed"
        self.error_message = error


def generate_job_id() -> str:
    """Generate a unique job ID with UUID suffix for uniqueness"""
    timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
    unique_suffix = str(uuid.uuid4())[:8]
    return f"{timestamp}_{unique_suffix}"


def classify_input(item: str, url_prefixes: Sequence[str]) -> InputKind:
    if any(item.startswith(prefix) for prefix in url_prefixes):
        return InputKind.REMOTE_LINK
    if item.endswith('.mp3'):
        return InputKind.LOCAL_AUDIO
    return InputKind.INVALID


def str_to_bool(value: str) -> bool:
    return value.lower() == 'true'


def build_parser(default_model: str = "gpt3_5") -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="audio-transcribe",
        description="Transcribe some audio files or YouTube URLs"
    )
    parser.add_argument(
        'file_names_or_urls',
        nargs='+',
        help="Audio file names or YouTube video URLs"
    )
    parser.add_argument(
        '--summarize',
        type=str_to_bool,
        nargs='?',
        const=True,
        default=True,
        help="Whether to summarize the audio transcript or not (default: true)"
    )
    parser.add_argument(
        '--gpt-model',
        default=default_model,
        type=str.lower,
        choices=SUPPORTED_MODEL_ALIASES,
        help=f"Which OpenAI model to use to summarize the transcript (default: {default_model})"
    )
    parser.add_argument(
        '--debug',
        action='store_true',
        help="Enable debug logging"
    )
    return parser


def verify_ffmpeg(ffmpeg_path: str) -> bool:
    """Check that the ffmpeg executable can be found"""
    return shutil.which(ffmpeg_path) is not None


async def process_input(item: str, aggregator: TranscriptAggregator,
                        downloader: MediaDownloader, settings: AppConfig) -> InputJob:
    """Run the full pipeline for one input and record its outcome"""

    kind = classify_input(item, settings.download.url_prefixes)
    job = InputJob(job_id=generate_job_id(), input=item, kind=kind)
    log = logger.bind(job_id=job.job_id, input=item)

    if kind is InputKind.INVALID:
        log.error("Invalid input. Please provide a YouTube link or an mp3 file.")
        job.mark_failed("Invalid input")
        return job

    try:
        if kind is InputKind.REMOTE_LINK:
            audio_file = await downloader.download(item)
            job.video_title = audio_file.video_info.title
            audio_path = Path(audio_file.filepath)
        else:
            audio_path = Path(item)
            if not audio_path.is_file():
                log.error("Audio file not found", filepath=item)
                job.mark_failed(f"Audio file not found: {item}")
                return job

        job.audio_path = str(audio_path)
        log.info("Starting transcription", filepath=str(audio_path))
        job.result = await aggregator.process(audio_path)

    except DownloadError as e:
        log.error("Download failed", error=str(e))
        job.mark_failed(f"Download error: {e}")
        return job

    except Exception as e:
        log.exception("Unexpected error occurred", error=str(e))
        job.mark_failed(f"Unexpected error: {e}")
        return job

    if job.result.status == "completed":
        job.mark_completed()
    else:
        job.mark_failed(job.result.error_message or "Transcription failed")
    return job


async def run(inputs: Sequence[str], options: RunOptions, settings: AppConfig) -> List[InputJob]:
    """Process every input concurrently and return one job record per input"""

    client = AsyncOpenAI(
        api_key=settings.require_api_key(),
        timeout=settings.summary.api_timeout
    )
    aggregator = TranscriptAggregator(
        settings,
        options,
        transcriber=TranscriptionClient(client, model=settings.transcription.model),
        summarizer=Summarizer(client)
    )
    downloader = MediaDownloader(
        output_root=settings.download.output_root,
        file_name=settings.download.audio_file_name
    )

    try:
        jobs = await asyncio.gather(
            *(process_input(item, aggregator, downloader, settings) for item in inputs)
        )
    finally:
        await client.close()
    return list(jobs)


def show_final_summary(jobs: Sequence[InputJob]):
    """Show one line per input plus the totals"""
    completed = sum(1 for job in jobs if job.status == "completed")

    print(f"\n{'='*60}")
    print(f"🎉 Processed {completed}/{len(jobs)} input(s)")
    print(f"{'='*60}")
    for job in jobs:
        icon = "✅" if job.status == "completed" else "❌"
        print(f"{icon} {job.input} ({job.duration_seconds():.1f}s)")
        if job.result and job.result.transcript_path:
            print(f"   📄 {job.result.transcript_path}")
            if job.result.failed_segments:
                print(f"   ⚠️  Skipped segments: {', '.join(f'{i:03d}' for i in job.result.failed_segments)}")
        if job.result and job.result.summary_path:
            print(f"   🤖 {job.result.summary_path}")
        if job.error_message:
            print(f"   💥 {job.error_message}")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point with argument parsing"""

    parser = build_parser(default_model=config.summary.default_model)
    args = parser.parse_args(argv)

    configure_logging(debug=args.debug or config.debug)

    try:
        options = RunOptions(
            summarize=args.summarize,
            chat_model=get_chat_model_from_string(args.gpt_model)
        )
        config.require_api_key()
    except (UnsupportedModelError, ConfigurationError) as e:
        logger.error("Invalid invocation", error=str(e))
        return EXIT_USAGE

    if not verify_ffmpeg(config.transcription.ffmpeg_path):
        logger.error("ffmpeg not found. Install ffmpeg and make sure it is on PATH",
                     ffmpeg_path=config.transcription.ffmpeg_path)
        return EXIT_USAGE

    if config.debug or args.debug:
        print(f"🔧 Debug mode enabled")
        print(f"🤖 Chat Model: {options.chat_model.value}")
        print(f"🎵 Transcription Model: {config.transcription.model}")
        print()

    jobs = asyncio.run(run(args.file_names_or_urls, options, config))
    show_final_summary(jobs)

    if all(job.status == "completed" for job in jobs):
        return EXIT_OK
    return EXIT_FAILED_INPUTS


if __name__ == "__main__":
    sys.exit(main())
