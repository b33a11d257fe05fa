"""
Core modules for the audio transcriber

This package contains the pipeline building blocks:
- text.py: line wrapping and path-safe names
- models.py: chat model aliases
- chunk.py: audio file → numbered segments (ffmpeg)
- transcribe.py: audio segment → text (OpenAI speech-to-text)
- summarize.py: transcript → summary (OpenAI chat)
- aggregate.py: audio file → transcript and summary files
- download.py: YouTube URL → audio file
"""
