"""Tests for chat model alias resolution."""

import pytest

from transcriber.models import (
    SUPPORTED_MODEL_ALIASES,
    ChatModel,
    UnsupportedModelError,
    get_chat_model_from_string,
)


class TestGetChatModelFromString:
    def test_gpt3_5(self) -> None:
        assert get_chat_model_from_string("gpt3_5") is ChatModel.GPT3_5
        assert ChatModel.GPT3_5.value == "gpt-3.5-turbo"

    def test_gpt4(self) -> None:
        assert get_chat_model_from_string("gpt4") is ChatModel.GPT4
        assert ChatModel.GPT4.value == "gpt-4"

    def test_case_insensitive(self) -> None:
        assert get_chat_model_from_string("GPT4") is ChatModel.GPT4

    @pytest.mark.parametrize("alias", ["gpt5", "", "gpt-4", "claude"])
    def test_unknown_alias_raises(self, alias: str) -> None:
        with pytest.raises(UnsupportedModelError, match="Unsupported GPT model"):
            get_chat_model_from_string(alias)

    def test_error_is_value_error(self) -> None:
        assert issubclass(UnsupportedModelError, ValueError)

    def test_supported_aliases(self) -> None:
        assert set(SUPPORTED_MODEL_ALIASES) == {"gpt3_5", "gpt4"}
