"""
Summarization Module

Single responsibility: transcript text → summary text
The whole transcript goes out in one chat request; very long transcripts may
be rejected by the backend and that error is left to the caller.
"""

from typing import Union

import structlog
from openai import AsyncOpenAI

from transcriber.models import ChatModel, get_chat_model_from_string

logger = structlog.get_logger(__name__)

SUMMARY_PROMPT = (
    "Please give me a summary of the following transcript. Be sure to outline any big ideas\n"
    "```{transcript}```"
)


class SummarizationError(Exception):
    """Custom exception for summarization failures"""
    pass


def build_summary_prompt(transcript: str) -> str:
    return SUMMARY_PROMPT.format(transcript=transcript)


class Summarizer:
    """Summarize transcripts with an OpenAI chat model"""

    def __init__(self, client: AsyncOpenAI):
        self.client = client

    async def summarize(self, transcript: str, model: Union[str, ChatModel]) -> str:
        if not isinstance(model, ChatModel):
            model = get_chat_model_from_string(model)

        logger.info("Requesting summary", model=model.value, char_count=len(transcript))

        response = await self.client.chat.completions.create(
            model=model.value,
            messages=[
                {"role": "user", "content": build_summary_prompt(transcript)}
            ]
        )

        summary = response.choices[0].message.content if response.choices else None
        if not summary:
            raise SummarizationError("Chat model returned an empty summary")

        logger.info("Summary received", model=model.value, char_count=len(summary))
        return summary
