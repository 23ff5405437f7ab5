# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""LLM client using LiteLLM for multi-provider support.

This module provides the completion interface behind the narrative
generator. LiteLLM routes by model prefix, so OpenAI, Anthropic, Gemini
or a local Ollama server can all be used by changing LLM_MODEL.

API keys and endpoints are passed directly to LiteLLM's acompletion()
rather than through provider environment variables.

Example:
    >>> from src.core.intelligence.llm import LLMClient
    >>> client = LLMClient(settings.llm)
    >>> response = await client.complete("Summarise this week's check-ins")
    >>> print(response.content)
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

import litellm
from litellm import acompletion

from src.core.config.settings import LLMSettings

logger = logging.getLogger(__name__)


@dataclass
class LLMResponse:
    """Response from an LLM completion.

    Attributes:
        content: The generated text content.
        model: The model that generated the response.
        tokens_input: Number of input tokens used.
        tokens_output: Number of output tokens generated.
        finish_reason: Why generation stopped (stop, length, etc.).
        raw_response: Original response object from LiteLLM.
    """

    content: str
    model: str
    tokens_input: int = 0
    tokens_output: int = 0
    finish_reason: str = "stop"
    raw_response: Optional[object] = field(default=None, repr=False)

    @property
    def total_tokens(self) -> int:
        """Get total tokens used (input + output)."""
        return self.tokens_input + self.tokens_output


class LLMError(Exception):
    """Exception raised when LLM operation fails.

    Attributes:
        message: Error description.
        model: Model that caused the error.
        original_error: Original exception if any.
    """

    def __init__(
        self,
        message: str,
        model: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        """Initialize LLMError.

        Args:
            message: Error description.
            model: Model that caused the error.
            original_error: Original exception if any.
        """
        self.message = message
        self.model = model
        self.original_error = original_error
        super().__init__(self.message)


class LLMClient:
    """Client for LLM completions via LiteLLM.

    Attributes:
        model: Default model to use for completions.
        timeout: Request timeout in seconds.
        max_retries: Maximum retry attempts.

    Example:
        >>> client = LLMClient(settings.llm)
        >>> response = await client.complete(
        ...     prompt="Describe the mood of the class",
        ...     system_prompt="You are a school counsellor.",
        ... )
    """

    def __init__(self, llm_settings: LLMSettings) -> None:
        """Initialize the LLM client.

        Args:
            llm_settings: LLM configuration.
        """
        self._settings = llm_settings
        self._model = llm_settings.model
        self._timeout = llm_settings.request_timeout
        self._max_retries = llm_settings.max_retries

        # Unsupported params are dropped instead of failing the call
        litellm.drop_params = True

        logger.info(
            "LLMClient initialized with model=%s, timeout=%.1fs, max_retries=%d",
            self._model,
            self._timeout,
            self._max_retries,
        )

    @property
    def model(self) -> str:
        """Default model for completions."""
        return self._model

    def _get_provider_params(self) -> dict[str, Any]:
        """Get api_key and api_base to pass to acompletion()."""
        params: dict[str, Any] = {}
        if self._settings.api_key is not None:
            params["api_key"] = self._settings.api_key.get_secret_value()
        if self._settings.api_base:
            params["api_base"] = self._settings.api_base
        return params

    async def complete(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        **kwargs: Any,
    ) -> LLMResponse:
        """Generate a completion for the given prompt.

        Args:
            prompt: User prompt text.
            system_prompt: Optional system prompt to set context.
            temperature: Sampling temperature, defaults to settings.
            max_tokens: Maximum tokens to generate, defaults to settings.
            **kwargs: Additional LiteLLM parameters.

        Returns:
            LLMResponse with generated content and metadata.

        Raises:
            LLMError: If generation fails after retries.
            ValueError: If prompt is empty.
        """
        if not prompt or not prompt.strip():
            raise ValueError("Prompt cannot be empty")

        chat_messages: list[dict[str, str]] = []

        if system_prompt:
            chat_messages.append({"role": "system", "content": system_prompt})

        chat_messages.append({"role": "user", "content": prompt})

        try:
            response = await acompletion(
                model=self._model,
                messages=chat_messages,
                temperature=self._settings.temperature if temperature is None else temperature,
                max_tokens=max_tokens or self._settings.max_tokens,
                timeout=self._timeout,
                num_retries=self._max_retries,
                **self._get_provider_params(),
                **kwargs,
            )

            content = response.choices[0].message.content or ""
            finish_reason = response.choices[0].finish_reason or "stop"

            usage = getattr(response, "usage", None)
            tokens_input = getattr(usage, "prompt_tokens", 0) or 0
            tokens_output = getattr(usage, "completion_tokens", 0) or 0

            logger.debug(
                "Completion generated: model=%s, tokens_in=%d, tokens_out=%d",
                self._model,
                tokens_input,
                tokens_output,
            )

            return LLMResponse(
                content=content,
                model=self._model,
                tokens_input=tokens_input,
                tokens_output=tokens_output,
                finish_reason=finish_reason,
                raw_response=response,
            )

        except Exception as e:
            logger.error(
                "Completion failed: model=%s, prompt_length=%d, error=%s",
                self._model,
                len(prompt),
                str(e),
            )
            raise LLMError(
                message=f"Completion failed: {str(e)}",
                model=self._model,
                original_error=e,
            ) from e
