"""
Audio Chunking Module

Single responsibility: audio file → numbered segment files
Segments are written by ffmpeg as out000.mp3, out001.mp3, ... inside a
working directory owned by one job.
"""

import subprocess
from pathlib import Path
from typing import Iterator, List, Tuple, Union

import structlog

logger = structlog.get_logger(__name__)

SEGMENT_TEMPLATE = "out%03d.mp3"


class AudioChunker:
    """Split an audio file into fixed-duration segments and remove them afterwards"""

    def __init__(self, work_dir: Union[str, Path], segment_duration: int = 200,
                 ffmpeg_path: str = "ffmpeg"):
        self.work_dir = Path(work_dir)
        self.segment_duration = segment_duration
        self.ffmpeg_path = ffmpeg_path

    def segment_path(self, index: int) -> Path:
        return self.work_dir / (SEGMENT_TEMPLATE % index)

    def build_command(self, audio_path: Union[str, Path]) -> List[str]:
        return [
            self.ffmpeg_path, '-i', str(audio_path),
            '-f', 'segment',
            '-segment_time', str(self.segment_duration),
            '-c:a', 'libmp3lame',
            str(self.work_dir / SEGMENT_TEMPLATE)
        ]

    def split(self, audio_path: Union[str, Path]) -> None:
        """Run ffmpeg on ``audio_path``.

        Failures are logged and swallowed: whatever segments ffmpeg managed
        to write before failing are still picked up by the caller.
        """
        self.work_dir.mkdir(parents=True, exist_ok=True)
        cmd = self.build_command(audio_path)

        logger.info("Splitting audio into segments",
                    filepath=str(audio_path),
                    segment_duration_seconds=self.segment_duration,
                    work_dir=str(self.work_dir))

        try:
            result = subprocess.run(cmd, capture_output=True, text=True)
        except OSError as e:
            logger.error("Error splitting audio", filepath=str(audio_path), error=str(e))
            return

        if result.returncode != 0:
            logger.error("Error splitting audio",
                         filepath=str(audio_path),
                         returncode=result.returncode,
                         stderr=(result.stderr or "").strip()[-2000:])
            return

        logger.debug("Audio split completed", filepath=str(audio_path))

    def iter_segments(self) -> Iterator[Tuple[int, Path]]:
        """Yield contiguous segments starting at index 0, stopping at the first gap"""
        index = 0
        path = self.segment_path(index)
        while path.exists():
            yield index, path
            index += 1
            path = self.segment_path(index)

    def cleanup(self) -> int:
        """Delete segments 0..N-1 and return N"""
        removed = 0
        for _, path in list(self.iter_segments()):
            path.unlink()
            removed += 1

        # Drop the job directory once nothing is left in it
        try:
            self.work_dir.rmdir()
        except FileNotFoundError:
            pass
        except OSError:
            logger.warning("Segment directory not empty after cleanup", work_dir=str(self.work_dir))

        logger.debug("Audio segments cleaned up", removed=removed, work_dir=str(self.work_dir))
        return removed
