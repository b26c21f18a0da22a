"""Anthropic LLM provider adapter.

Wraps the ``anthropic`` async client to implement :class:`ILLMProvider`.

Differences from the OpenAI adapter:
    - The system prompt is a top-level parameter, not a message
    - Responses are a list of content blocks; text blocks are joined
    - There is no JSON response mode, so ``json_mode`` is a no-op and the
      prompts themselves demand JSON
"""

from __future__ import annotations

import anthropic
import structlog

from collabgraph.config.settings import Settings
from collabgraph.interfaces.llm_provider import ILLMProvider
from collabgraph.utils.errors import LLMError

logger = structlog.get_logger(logger_name=__name__)


class AnthropicLLMProvider(ILLMProvider):
    """LLM provider backed by the Anthropic Messages API."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._api_key = settings.anthropic_api_key
        self._client = anthropic.AsyncAnthropic(
            api_key=self._api_key or "unset",
            timeout=settings.llm_timeout_seconds,
        )
        self._model = settings.anthropic_model or "claude-sonnet-4-20250514"

    # ------------------------------------------------------------------
    # ILLMProvider implementation
    # ------------------------------------------------------------------

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.1,
        max_tokens: int = 2000,
        json_mode: bool = False,
    ) -> str:
        """Generate a text completion via the Anthropic Messages API."""
        try:
            response = await self._client.messages.create(
                model=self._model,
                max_tokens=max_tokens,
                system=system_prompt,
                messages=[{"role": "user", "content": user_prompt}],
                temperature=temperature,
            )
            text_blocks = [block.text for block in response.content if block.type == "text"]
            if not text_blocks:
                raise LLMError(
                    message="Anthropic returned no text content",
                    provider_name=self.get_provider_name(),
                )
            result = "\n".join(text_blocks)
            logger.info(
                "anthropic_completion",
                model=self._model,
                input_tokens=response.usage.input_tokens,
                output_tokens=response.usage.output_tokens,
            )
            return result
        except anthropic.APIError as exc:
            raise LLMError(
                message=f"Anthropic API error: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

    def get_provider_name(self) -> str:
        return "anthropic"

    def is_available(self) -> bool:
        return bool(self._api_key)
