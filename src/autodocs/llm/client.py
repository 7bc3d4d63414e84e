# src/autodocs/llm/client.py
"""LiteLLM-based LLM client."""

import json
import logging
import os
import time
from datetime import datetime, timezone
from pathlib import Path

from litellm import acompletion
from litellm.exceptions import (
    APIConnectionError,
    APIError,
    APIResponseValidationError,
    AuthenticationError,
    BadRequestError,
    InternalServerError,
    NotFoundError,
    PermissionDeniedError,
    RateLimitError,
    ServiceUnavailableError,
    Timeout,
    UnprocessableEntityError,
)

from autodocs.constants.llm import (
    DEFAULT_REFERER,
    DEFAULT_TEMPERATURE,
    MAX_TOKENS,
    OPENROUTER_API_BASE,
    OPENROUTER_TITLE,
)

logger = logging.getLogger(__name__)


class LLMError(Exception):
    """Base exception for LLM client errors."""

    pass


class LLMConnectionError(LLMError):
    """Raised when unable to connect to the LLM provider."""

    pass


class LLMAuthenticationError(LLMError):
    """Raised when authentication with the LLM provider fails."""

    pass


class LLMRateLimitError(LLMError):
    """Raised when rate limited by the LLM provider."""

    pass


class LLMClient:
    """Unified LLM client supporting multiple providers via LiteLLM.

    The client is a black box to the rest of the pipeline: prompt text in,
    completion text out. Failures surface as LLMError subclasses and are
    never retried here.
    """

    def __init__(
        self,
        provider: str,
        model: str,
        api_key: str | None = None,
        endpoint: str | None = None,
        log_path: Path | None = None,
    ):
        """Initialize LLM client.

        Args:
            provider: LLM provider (openrouter, openai, anthropic, ollama).
            model: Model name.
            api_key: Optional API key (uses env var if not provided).
            endpoint: Optional custom endpoint (for Ollama).
            log_path: Optional path to JSONL log file for query logging.
        """
        self.provider = provider
        self.model = model
        self.api_key = api_key
        self.endpoint = endpoint
        self.log_path = log_path

    def _log_query(
        self,
        system_prompt: str | None,
        prompt: str,
        temperature: float,
        max_tokens: int,
        response: str | None,
        duration_ms: int,
        error: str | None,
        error_details: dict | None = None,
    ) -> None:
        """Append a query record to the JSONL log file.

        Args:
            system_prompt: System prompt used.
            prompt: User prompt.
            temperature: Temperature setting.
            max_tokens: Max tokens setting.
            response: Response text (None if error).
            duration_ms: Request duration in milliseconds.
            error: Error message (None if success).
            error_details: Optional dict with status_code, provider, etc.
        """
        if not self.log_path:
            return

        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "provider": self.provider,
            "model": self.model,
            "request": {
                "system_prompt": system_prompt,
                "prompt": prompt,
                "temperature": temperature,
                "max_tokens": max_tokens,
            },
            "response": response,
            "duration_ms": duration_ms,
            "error": error,
        }

        if error_details:
            entry["error_details"] = error_details

        try:
            self.log_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.log_path, "a", encoding="utf-8") as f:
                f.write(json.dumps(entry) + "\n")
        except OSError as e:
            # The query log is diagnostic only
            logger.debug(f"Could not write LLM query log {self.log_path}: {e}")

    def _extract_error_details(self, e: Exception) -> dict | None:
        """Extract HTTP details from LiteLLM exceptions.

        Args:
            e: The exception to extract details from.

        Returns:
            Dict with status_code, provider and message if available.
        """
        details: dict = {}

        if hasattr(e, "status_code"):
            details["status_code"] = e.status_code

        response = getattr(e, "response", None)
        if response is not None and hasattr(response, "status_code"):
            details["status_code"] = response.status_code

        if hasattr(e, "llm_provider"):
            details["llm_provider"] = e.llm_provider

        if hasattr(e, "message"):
            details["message"] = str(e.message)

        return details if details else None

    def _get_model_string(self) -> str:
        """Get LiteLLM model string.

        Returns:
            Model string in provider/model format.
        """
        if self.provider == "openai":
            return self.model  # OpenAI is default
        return f"{self.provider}/{self.model}"

    def _request_kwargs(
        self, messages: list[dict], temperature: float, max_tokens: int
    ) -> dict:
        kwargs = {
            "model": self._get_model_string(),
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }

        if self.api_key:
            kwargs["api_key"] = self.api_key

        if self.provider == "ollama" and self.endpoint:
            kwargs["api_base"] = self.endpoint
        elif self.provider == "openrouter":
            kwargs["api_base"] = self.endpoint or OPENROUTER_API_BASE
            kwargs["extra_headers"] = {
                "HTTP-Referer": os.getenv("GITHUB_REPOSITORY") or DEFAULT_REFERER,
                "X-Title": OPENROUTER_TITLE,
            }

        return kwargs

    async def generate(
        self,
        prompt: str,
        system_prompt: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        """Generate completion from prompt.

        Args:
            prompt: User prompt.
            system_prompt: Optional system prompt.
            temperature: Sampling temperature.
            max_tokens: Maximum response tokens.

        Returns:
            Generated text response.

        Raises:
            LLMError: If the provider call fails for any reason.
        """
        if temperature is None:
            temperature = DEFAULT_TEMPERATURE
        if max_tokens is None:
            max_tokens = MAX_TOKENS

        messages = []

        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})

        messages.append({"role": "user", "content": prompt})

        kwargs = self._request_kwargs(messages, temperature, max_tokens)

        start_time = time.perf_counter()
        try:
            response = await acompletion(**kwargs)
        except AuthenticationError as e:
            self._log_failure(system_prompt, prompt, temperature, max_tokens, start_time, e)
            raise LLMAuthenticationError(f"Authentication failed: {e}") from e
        except RateLimitError as e:
            self._log_failure(system_prompt, prompt, temperature, max_tokens, start_time, e)
            raise LLMRateLimitError(f"Rate limit exceeded: {e}") from e
        except (APIConnectionError, Timeout) as e:
            self._log_failure(system_prompt, prompt, temperature, max_tokens, start_time, e)
            raise LLMConnectionError(f"Connection failed: {e}") from e
        except (
            APIError,
            APIResponseValidationError,
            BadRequestError,
            InternalServerError,
            NotFoundError,
            PermissionDeniedError,
            ServiceUnavailableError,
            UnprocessableEntityError,
        ) as e:
            # Bad requests include context-window overflows.
            self._log_failure(system_prompt, prompt, temperature, max_tokens, start_time, e)
            raise LLMError(f"LLM API error: {e}") from e

        result: str = str(response.choices[0].message.content or "")
        duration_ms = int((time.perf_counter() - start_time) * 1000)
        self._log_query(
            system_prompt,
            prompt,
            temperature,
            max_tokens,
            response=result,
            duration_ms=duration_ms,
            error=None,
        )
        logger.debug(f"LLM call to {kwargs['model']} took {duration_ms} ms")
        return result

    def _log_failure(
        self,
        system_prompt: str | None,
        prompt: str,
        temperature: float,
        max_tokens: int,
        start_time: float,
        error: Exception,
    ) -> None:
        duration_ms = int((time.perf_counter() - start_time) * 1000)
        self._log_query(
            system_prompt,
            prompt,
            temperature,
            max_tokens,
            response=None,
            duration_ms=duration_ms,
            error=str(error),
            error_details=self._extract_error_details(error),
        )
