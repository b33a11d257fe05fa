"""Chat model aliases accepted on the command line."""

from enum import Enum


class UnsupportedModelError(ValueError):
    """Raised for a chat model alias outside the supported set"""
    pass


class ChatModel(str, Enum):
    GPT3_5 = "gpt-3.5-turbo"
    GPT4 = "gpt-4"


_ALIASES = {
    "gpt3_5": ChatModel.GPT3_5,
    "gpt4": ChatModel.GPT4,
}

SUPPORTED_MODEL_ALIASES = tuple(_ALIASES)


def get_chat_model_from_string(alias: str) -> ChatModel:
    """Resolve a user-facing alias such as ``gpt4`` to its backend model"""
    try:
        return _ALIASES[alias.lower()]
    except KeyError:
        raise UnsupportedModelError(f'Unsupported GPT model "{alias}"') from None
