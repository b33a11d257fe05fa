"""
Configuration management for the audio transcriber

Using pydantic-settings for type-safe configuration with environment variable support.
All settings can be overridden via environment variables with the TRANSCRIBER_ prefix.
The OpenAI credential is also read from the conventional OPENAI_API_KEY variable.
"""

import os
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from transcriber.models import ChatModel, SUPPORTED_MODEL_ALIASES


class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid"""
    pass


class TranscriptionConfig(BaseSettings):
    """Configuration for audio splitting and speech recognition"""

    model_config = SettingsConfigDict(
        env_prefix='TRANSCRIBER_TRANSCRIPTION_',
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore'
    )

    segment_duration: int = Field(
        default=200,
        description="Maximum duration of each audio segment in seconds",
        ge=30,
        le=1200
    )

    model: str = Field(
        default="whisper-1",
        description="Speech recognition model sent with every segment"
    )

    ffmpeg_path: str = Field(
        default="ffmpeg",
        description="Executable used to split audio into segments"
    )

    mark_failed_segments: bool = Field(
        default=False,
        description="Insert a placeholder line for segments that could not be transcribed"
    )


class SummaryConfig(BaseSettings):
    """Configuration for transcript summarization"""

    model_config = SettingsConfigDict(
        env_prefix='TRANSCRIBER_SUMMARY_',
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore'
    )

    openai_api_key: Optional[str] = Field(
        default=None,
        description="OpenAI API key used for transcription and summarization"
    )

    default_model: str = Field(
        default="gpt3_5",
        description="Chat model alias used when --gpt-model is not given"
    )

    api_timeout: int = Field(
        default=120,
        description="OpenAI API timeout in seconds",
        ge=10,
        le=1800
    )

    @validator('openai_api_key', pre=True, always=True)
    def validate_openai_api_key(cls, v):
        """Fall back to the standard OPENAI_API_KEY variable"""
        if v:
            return v
        return os.getenv('OPENAI_API_KEY') or None

    @validator('default_model')
    def validate_default_model(cls, v):
        if v.lower() not in SUPPORTED_MODEL_ALIASES:
            raise ValueError(f"Default model must be one of {list(SUPPORTED_MODEL_ALIASES)}")
        return v.lower()


class DownloadConfig(BaseSettings):
    """Configuration for YouTube audio downloads"""

    model_config = SettingsConfigDict(
        env_prefix='TRANSCRIBER_DOWNLOAD_',
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore'
    )

    output_root: str = Field(
        default="processed",
        description="Directory under which one folder per video is created"
    )

    audio_file_name: str = Field(
        default="audio.mp3",
        description="File name of the downloaded audio inside the video folder"
    )

    url_prefixes: List[str] = Field(
        default_factory=lambda: ["https://www.youtube.com/"],
        description="Inputs starting with one of these prefixes are treated as video links"
    )


class OutputConfig(BaseSettings):
    """Configuration for transcript and summary files"""

    model_config = SettingsConfigDict(
        env_prefix='TRANSCRIBER_OUTPUT_',
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore'
    )

    line_width: int = Field(
        default=80,
        description="Hard wrap width for transcript and summary files",
        ge=1
    )


class AppConfig(BaseSettings):
    """Main application configuration"""

    model_config = SettingsConfigDict(
        env_prefix='TRANSCRIBER_',
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore'  # Ignore unknown environment variables
    )

    # Sub-configurations
    transcription: TranscriptionConfig = Field(default_factory=TranscriptionConfig)
    summary: SummaryConfig = Field(default_factory=SummaryConfig)
    download: DownloadConfig = Field(default_factory=DownloadConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

    # Global settings
    debug: bool = Field(
        default=False,
        description="Enable debug logging"
    )

    temp_dir: Optional[str] = Field(
        default=None,
        description="Directory holding per-job audio segments (system temp dir if unset)"
    )

    def require_api_key(self) -> str:
        """Return the OpenAI API key or raise if it is not configured"""
        if not self.summary.openai_api_key:
            raise ConfigurationError(
                "OpenAI API key not configured. Set OPENAI_API_KEY in the environment or .env file"
            )
        return self.summary.openai_api_key


class RunOptions(BaseModel):
    """Per-invocation options parsed from the command line"""

    model_config = ConfigDict(frozen=True)

    summarize: bool = Field(default=True, description="Whether to summarize transcripts")
    chat_model: ChatModel = Field(default=ChatModel.GPT3_5, description="Chat model for summaries")


# Global configuration instance
config = AppConfig()
