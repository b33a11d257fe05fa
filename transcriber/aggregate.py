"""
Transcript Aggregation Module

Single responsibility: audio file → transcript file (and optional summary file)
Splits the audio, transcribes the segments one after another, writes the
joined transcript and hands it to the summarizer when requested.
"""

import asyncio
import shutil
import tempfile
import uuid
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional, Union

import structlog
from pydantic import BaseModel, Field

from config import AppConfig, RunOptions
from transcriber.chunk import AudioChunker
from transcriber.summarize import Summarizer
from transcriber.text import split_into_lines
from transcriber.transcribe import TranscriptionClient

logger = structlog.get_logger(__name__)

FAILED_SEGMENT_MARKER = "[segment {index:03d} could not be transcribed]"


class TranscriptionResult(BaseModel):
    """Outcome of transcribing one audio file"""

    source: str = Field(description="Audio file that was processed")
    status: str = Field(default="running", description="running, completed or failed")
    segment_count: int = Field(default=0, description="Segments found after splitting", ge=0)
    failed_segments: List[int] = Field(default_factory=list, description="Indices that produced no text")
    transcript_path: Optional[str] = None
    summary_path: Optional[str] = None
    error_message: Optional[str] = None

    def mark_failed(self, error: str):
        self.status = "failed"
        self.error_message = error


def output_path_for(audio_path: Path, suffix: str) -> Path:
    """``talk.mp3`` → ``talk<suffix>`` in the same directory"""
    name = audio_path.name
    if name.endswith('.mp3'):
        name = name[:-len('.mp3')]
    return audio_path.with_name(f"{name}{suffix}")


def write_wrapped(path: Path, text: str, line_width: int) -> Path:
    path.write_text(split_into_lines(text, line_width), encoding='utf-8')
    return path


class TranscriptAggregator:
    """Run the split → transcribe → persist → summarize pipeline for one file"""

    def __init__(self, settings: AppConfig, options: RunOptions,
                 transcriber: TranscriptionClient,
                 summarizer: Optional[Summarizer] = None,
                 chunker_factory: Callable[..., AudioChunker] = AudioChunker):
        self.settings = settings
        self.options = options
        self.transcriber = transcriber
        self.summarizer = summarizer
        self.chunker_factory = chunker_factory

    def _new_chunker(self) -> AudioChunker:
        job_dir = tempfile.mkdtemp(
            prefix=f"segments_{datetime.now().strftime('%Y%m%d_%H%M%S')}_{uuid.uuid4().hex[:8]}_",
            dir=self.settings.temp_dir
        )
        return self.chunker_factory(
            job_dir,
            segment_duration=self.settings.transcription.segment_duration,
            ffmpeg_path=self.settings.transcription.ffmpeg_path
        )

    async def _transcribe_segments(self, chunker: AudioChunker,
                                   result: TranscriptionResult) -> str:
        aggregated = ""
        for index, segment in chunker.iter_segments():
            result.segment_count += 1
            logger.info("Processing segment", segment=segment.name, index=index)

            text = await self.transcriber.transcribe(segment)
            if not text or not text.strip():
                logger.error("Failed to transcribe segment", segment=segment.name, index=index)
                result.failed_segments.append(index)
                if self.settings.transcription.mark_failed_segments:
                    aggregated += FAILED_SEGMENT_MARKER.format(index=index) + "\n\n"
                continue

            aggregated += text + "\n\n"
            logger.debug("Segment transcription added", segment=segment.name, char_count=len(text))

        return aggregated

    async def process(self, audio_path: Union[str, Path]) -> TranscriptionResult:
        audio_path = Path(audio_path)
        result = TranscriptionResult(source=str(audio_path))
        line_width = self.settings.output.line_width

        chunker = self._new_chunker()
        try:
            await asyncio.to_thread(chunker.split, audio_path)
            aggregated = await self._transcribe_segments(chunker, result)
        finally:
            chunker.cleanup()
            # The job directory belongs to this run, out-of-sequence leftovers included
            shutil.rmtree(chunker.work_dir, ignore_errors=True)

        if len(result.failed_segments) == result.segment_count:
            # Placeholders alone do not make a transcript
            aggregated = ""

        if not aggregated:
            logger.error("No transcriptions were processed",
                         filepath=str(audio_path), segment_count=result.segment_count)
            result.mark_failed("No transcriptions were processed")
            return result

        transcript_path = write_wrapped(
            output_path_for(audio_path, "_transcript.txt"), aggregated, line_width
        )
        result.transcript_path = str(transcript_path)
        logger.info("Transcript saved",
                    filepath=str(transcript_path),
                    segment_count=result.segment_count,
                    failed_segments=len(result.failed_segments))
        print(f"📄 All transcriptions aggregated and saved to \"{transcript_path}\"")

        if self.options.summarize:
            if self.summarizer is None:
                raise ValueError("Summarization requested but no summarizer was configured")

            summary = await self.summarizer.summarize(aggregated, self.options.chat_model)
            summary_path = write_wrapped(
                output_path_for(audio_path, "_summary.txt"), summary, line_width
            )
            result.summary_path = str(summary_path)
            logger.info("Summary saved", filepath=str(summary_path))
            print(f"🤖 Summary saved to \"{summary_path}\"")

        result.status = "completed"
        return result
