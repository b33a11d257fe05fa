"""
YouTube Download Module

Single responsibility: YouTube URL → audio file
Metadata and streams come from yt-dlp; only audio-only formats are accepted.
"""

import asyncio
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Union

import structlog
import yt_dlp
from yt_dlp.utils import DownloadError as YtDlpDownloadError
from pydantic import BaseModel, Field, validator

from transcriber.text import sanitize_directory_name

logger = structlog.get_logger(__name__)


class VideoInfo(BaseModel):
    """Video metadata needed to pick and store an audio stream"""

    video_id: str = Field(description="YouTube video ID")
    title: str = Field(description="Video title")
    uploader: str = Field(default="Unknown", description="Channel/uploader name")
    url: str = Field(description="Original YouTube URL")
    duration: Optional[int] = Field(None, description="Duration in seconds")
    formats: List[Dict[str, Any]] = Field(default_factory=list, description="Available stream formats")


class AudioFile(BaseModel):
    """Downloaded audio file"""

    filepath: str = Field(description="Path to audio file")
    size_bytes: int = Field(description="File size in bytes", ge=0)
    format_id: str = Field(description="yt-dlp format that was downloaded")
    video_info: VideoInfo = Field(description="Associated video information")

    @validator('filepath')
    def validate_filepath(cls, v):
        if not os.path.exists(v):
            raise ValueError(f"Audio file does not exist: {v}")
        return v


class DownloadError(Exception):
    """Custom exception for download failures"""
    pass


class NoAudioFormatError(DownloadError):
    """The video offers no audio-only stream"""
    pass


def _is_audio_only(fmt: Dict[str, Any]) -> bool:
    return fmt.get('vcodec') == 'none' and fmt.get('acodec') not in (None, 'none')


def select_audio_format(formats: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Return the best audio-only format, or None if there is none"""
    candidates = [fmt for fmt in formats if _is_audio_only(fmt)]
    if not candidates:
        return None

    return max(
        candidates,
        key=lambda fmt: (
            fmt.get('abr') or 0,
            fmt.get('tbr') or 0,
            fmt.get('filesize') or fmt.get('filesize_approx') or 0,
        )
    )


class MediaDownloader:
    """Fetch the audio track of a YouTube video into its own directory"""

    def __init__(self, output_root: Union[str, Path] = "processed",
                 file_name: str = "audio.mp3"):
        self.output_root = Path(output_root)
        self.file_name = file_name
        # Directories handed out during this run; same-titled videos must not share one
        self._claimed_dirs: Set[Path] = set()
        self.ydl_opts = {
            'quiet': True,
            'no_warnings': True,
        }

    def _extract_info(self, url: str) -> Dict[str, Any]:
        with yt_dlp.YoutubeDL(self.ydl_opts) as ydl:
            return ydl.extract_info(url, download=False)

    def _download_format(self, url: str, format_id: str, output_path: Path) -> None:
        opts = dict(self.ydl_opts)
        opts.update({
            'format': format_id,
            'outtmpl': str(output_path),
            'overwrites': True,
        })
        with yt_dlp.YoutubeDL(opts) as ydl:
            ydl.download([url])

    async def fetch_info(self, url: str) -> VideoInfo:
        logger.info("Fetching video metadata", url=url)
        try:
            info = await asyncio.to_thread(self._extract_info, url)
        except YtDlpDownloadError as e:
            logger.error("Failed to fetch video metadata", url=url, error=str(e))
            raise DownloadError(f"Could not fetch video metadata: {e}") from e

        video_info = VideoInfo(
            video_id=info.get('id') or 'unknown',
            title=info.get('title') or 'Unknown',
            uploader=info.get('uploader') or 'Unknown',
            url=url,
            duration=info.get('duration'),
            formats=info.get('formats') or []
        )
        logger.info("Video metadata retrieved",
                    video_id=video_info.video_id,
                    title=video_info.title[:50],
                    format_count=len(video_info.formats))
        return video_info

    def output_directory_for(self, video_info: VideoInfo) -> Path:
        name = sanitize_directory_name(video_info.title).strip()
        return self.output_root / (name or video_info.video_id)

    def claim_output_directory(self, video_info: VideoInfo) -> Path:
        """Reserve a directory for this video, adding " (2)", " (3)", ... when
        another download in the same run already took the plain name.
        """
        base = self.output_directory_for(video_info)
        candidate = base
        counter = 2
        while candidate in self._claimed_dirs:
            candidate = base.with_name(f"{base.name} ({counter})")
            counter += 1
        self._claimed_dirs.add(candidate)
        return candidate

    async def download(self, url: str) -> AudioFile:
        video_info = await self.fetch_info(url)

        output_dir = self.claim_output_directory(video_info)
        output_dir.mkdir(parents=True, exist_ok=True)

        audio_format = select_audio_format(video_info.formats)
        if audio_format is None:
            logger.error("Couldn't find an audio-only format", title=video_info.title)
            raise NoAudioFormatError(f"Couldn't find an audio-only format for \"{video_info.title}\"")

        output_path = output_dir / self.file_name
        logger.info("Starting audio download",
                    video_id=video_info.video_id,
                    format_id=audio_format.get('format_id'),
                    filepath=str(output_path))

        await asyncio.to_thread(self._download_format, url, audio_format['format_id'], output_path)

        audio_file = AudioFile(
            filepath=str(output_path),
            size_bytes=output_path.stat().st_size,
            format_id=audio_format['format_id'],
            video_info=video_info
        )
        logger.info("Audio download completed",
                    filepath=audio_file.filepath,
                    size_mb=audio_file.size_bytes / 1024 / 1024)
        print(f"🎵 Audio downloaded and saved as \"{output_path}\"")
        return audio_file
