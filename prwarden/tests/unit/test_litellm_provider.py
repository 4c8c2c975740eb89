import pytest
from unittest.mock import MagicMock, patch

from prwarden.llms.litellm_provider import LiteLLMProvider
from prwarden.review.errors import AIServiceError


@patch("prwarden.llms.litellm_provider.litellm")
def test_generate_returns_message_content(mock_litellm):
    choice = MagicMock()
    choice.message.content = "[]"
    mock_litellm.completion.return_value = MagicMock(choices=[choice])

    provider = LiteLLMProvider("deepseek/deepseek-chat")

    assert provider.generate("prompt") == "[]"
    mock_litellm.completion.assert_called_once_with(
        model="deepseek/deepseek-chat",
        messages=[{"role": "user", "content": "prompt"}],
    )


@patch("prwarden.llms.litellm_provider.litellm")
def test_service_unavailable_is_retryable(mock_litellm):
    error = Exception("ServiceUnavailableError")
    error.status_code = 503
    mock_litellm.completion.side_effect = error

    with pytest.raises(AIServiceError) as excinfo:
        LiteLLMProvider("openai/gpt-4o").generate("prompt")

    assert excinfo.value.retryable


@patch("prwarden.llms.litellm_provider.litellm")
def test_auth_error_is_fatal(mock_litellm):
    error = Exception("AuthenticationError")
    error.status_code = 401
    mock_litellm.completion.side_effect = error

    with pytest.raises(AIServiceError) as excinfo:
        LiteLLMProvider("openai/gpt-4o").generate("prompt")

    assert not excinfo.value.retryable
    assert excinfo.value.status_code == 401
