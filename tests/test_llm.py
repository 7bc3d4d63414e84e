"""LLM client tests."""

import json
from unittest.mock import AsyncMock, patch

import pytest
from litellm.exceptions import (
    AuthenticationError,
    BadRequestError,
    ContextWindowExceededError,
    NotFoundError,
    RateLimitError,
    ServiceUnavailableError,
    Timeout,
)

from autodocs.llm import (
    LLMAuthenticationError,
    LLMClient,
    LLMConnectionError,
    LLMError,
    LLMRateLimitError,
)


@pytest.fixture
def mock_completion():
    """Mock litellm completion response."""
    with patch("autodocs.llm.client.acompletion") as mock:
        mock.return_value = AsyncMock(choices=[AsyncMock(message=AsyncMock(content="Test response"))])
        yield mock


async def test_llm_client_generates_response(mock_completion):
    """LLM client generates response from prompt."""
    client = LLMClient(provider="openai", model="gpt-4o")

    response = await client.generate("Test prompt")

    assert response == "Test response"
    mock_completion.assert_called_once()


async def test_llm_client_uses_configured_model(mock_completion):
    """Non-OpenAI providers are addressed as provider/model."""
    client = LLMClient(provider="anthropic", model="claude-3-sonnet")

    await client.generate("Test")

    assert mock_completion.call_args.kwargs["model"] == "anthropic/claude-3-sonnet"


async def test_llm_client_openai_model_has_no_prefix(mock_completion):
    """OpenAI is litellm's default provider and needs no prefix."""
    client = LLMClient(provider="openai", model="gpt-4o")

    await client.generate("Test")

    assert mock_completion.call_args.kwargs["model"] == "gpt-4o"


async def test_llm_client_passes_system_prompt(mock_completion):
    """LLM client includes system prompt in messages."""
    client = LLMClient(provider="openai", model="gpt-4o")

    await client.generate("User message", system_prompt="You write docs")

    messages = mock_completion.call_args.kwargs["messages"]
    assert messages[0] == {"role": "system", "content": "You write docs"}
    assert messages[1] == {"role": "user", "content": "User message"}


async def test_llm_client_uses_default_sampling(mock_completion):
    """Temperature and max tokens default to the documentation settings."""
    client = LLMClient(provider="openai", model="gpt-4o")

    await client.generate("Test")

    kwargs = mock_completion.call_args.kwargs
    assert kwargs["temperature"] == 0.3
    assert kwargs["max_tokens"] == 4000


async def test_llm_client_openrouter_sends_attribution_headers(mock_completion):
    """OpenRouter requests go to its API base with referer and title headers."""
    client = LLMClient(provider="openrouter", model="z-ai/glm-4.5-air:free", api_key="sk-or")

    await client.generate("Test")

    kwargs = mock_completion.call_args.kwargs
    assert kwargs["model"] == "openrouter/z-ai/glm-4.5-air:free"
    assert kwargs["api_key"] == "sk-or"
    assert kwargs["api_base"] == "https://openrouter.ai/api/v1"
    assert kwargs["extra_headers"]["X-Title"] == "Auto-Docs Framework"
    assert "HTTP-Referer" in kwargs["extra_headers"]


async def test_llm_client_ollama_uses_endpoint(mock_completion):
    """Ollama requests are sent to the configured endpoint."""
    client = LLMClient(provider="ollama", model="llama3", endpoint="http://gpu:11434")

    await client.generate("Test")

    kwargs = mock_completion.call_args.kwargs
    assert kwargs["model"] == "ollama/llama3"
    assert kwargs["api_base"] == "http://gpu:11434"


async def test_llm_client_logs_queries_as_jsonl(mock_completion, tmp_path):
    """Each call is appended to the query log with request and response."""
    log_path = tmp_path / "logs" / "llm-queries.jsonl"
    client = LLMClient(provider="openai", model="gpt-4o", log_path=log_path)

    await client.generate("First", system_prompt="sys")
    await client.generate("Second")

    entries = [json.loads(line) for line in log_path.read_text().splitlines()]
    assert [e["request"]["prompt"] for e in entries] == ["First", "Second"]
    assert entries[0]["response"] == "Test response"
    assert entries[0]["error"] is None


async def test_llm_client_raises_authentication_error(tmp_path):
    """LLM client raises LLMAuthenticationError on auth failure and logs it."""
    log_path = tmp_path / "llm-queries.jsonl"
    with patch("autodocs.llm.client.acompletion") as mock:
        mock.side_effect = AuthenticationError(
            message="Invalid API key",
            llm_provider="openai",
            model="gpt-4o",
        )
        client = LLMClient(provider="openai", model="gpt-4o", log_path=log_path)

        with pytest.raises(LLMAuthenticationError) as exc_info:
            await client.generate("Test")

    assert "Authentication failed" in str(exc_info.value)
    entry = json.loads(log_path.read_text().splitlines()[0])
    assert entry["response"] is None
    assert "Invalid API key" in entry["error"]


async def test_llm_client_raises_rate_limit_error():
    """LLM client raises LLMRateLimitError on rate limit."""
    with patch("autodocs.llm.client.acompletion") as mock:
        mock.side_effect = RateLimitError(
            message="Rate limit exceeded",
            llm_provider="openai",
            model="gpt-4o",
        )
        client = LLMClient(provider="openai", model="gpt-4o")

        with pytest.raises(LLMRateLimitError) as exc_info:
            await client.generate("Test")

        assert "Rate limit exceeded" in str(exc_info.value)


@pytest.mark.parametrize(
    "error_class, message",
    [
        (BadRequestError, "Invalid request"),
        (ContextWindowExceededError, "context window exceeded"),
        (NotFoundError, "Model not found"),
        (ServiceUnavailableError, "Service unavailable"),
    ],
)
async def test_llm_client_wraps_provider_errors(error_class, message):
    """Request and provider failures surface as LLMError."""
    with patch("autodocs.llm.client.acompletion") as mock:
        mock.side_effect = error_class(message=message, model="gpt-4o", llm_provider="openai")
        client = LLMClient(provider="openai", model="gpt-4o")

        with pytest.raises(LLMError) as exc_info:
            await client.generate("Test")

    assert message in str(exc_info.value)


async def test_llm_client_maps_timeout_to_connection_error():
    """A timed-out request is a connection failure."""
    with patch("autodocs.llm.client.acompletion") as mock:
        mock.side_effect = Timeout(message="Request timed out", model="gpt-4o", llm_provider="openai")
        client = LLMClient(provider="openai", model="gpt-4o")

        with pytest.raises(LLMConnectionError):
            await client.generate("Test")
