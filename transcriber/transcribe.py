"""
Audio Transcription Module

Single responsibility: audio segment → transcript text
Each segment is sent as-is to the OpenAI speech-to-text endpoint.
"""

from pathlib import Path
from typing import Optional, Union

import structlog
from openai import AsyncOpenAI, OpenAIError

logger = structlog.get_logger(__name__)


class TranscriptionError(Exception):
    """Custom exception for transcription failures"""
    pass


class TranscriptionClient:
    """Thin wrapper around the speech-to-text API for one segment at a time"""

    def __init__(self, client: AsyncOpenAI, model: str = "whisper-1"):
        self.client = client
        self.model = model

    async def _request(self, segment_path: Path) -> str:
        with open(segment_path, 'rb') as audio:
            response = await self.client.audio.transcriptions.create(
                model=self.model,
                file=audio
            )

        text = getattr(response, 'text', None)
        if text is None:
            raise TranscriptionError("Transcription response contained no text")
        return text

    async def transcribe(self, segment_path: Union[str, Path]) -> Optional[str]:
        """Transcribe one segment, returning None when it could not be transcribed"""
        segment_path = Path(segment_path)
        try:
            text = await self._request(segment_path)
        except (OpenAIError, OSError, TranscriptionError) as e:
            logger.error("Error transcribing segment",
                         filepath=str(segment_path), error=str(e))
            return None

        logger.debug("Segment transcribed",
                     filepath=str(segment_path), char_count=len(text))
        return text
