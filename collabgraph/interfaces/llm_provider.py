"""Abstract base class for LLM service providers.

Defines the contract for any large-language-model backend used for
collaborator generation, role classification and collaboration summaries.
Implementations wrap the Anthropic API or any OpenAI-compatible API; the
adapter pattern keeps every call-site provider-agnostic.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


# Concrete implementations: AnthropicLLMProvider, OpenAILLMProvider
# Located in: collabgraph/providers/llm/
class ILLMProvider(ABC):
    """Contract for text-completion LLM services."""

    @abstractmethod
    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.1,
        max_tokens: int = 2000,
        json_mode: bool = False,
    ) -> str:
        """Generate a text completion from the model.

        Parameters
        ----------
        system_prompt:
            The system/instruction message that sets the model's behaviour.
        user_prompt:
            The user-facing prompt containing the actual request.
        temperature:
            Sampling temperature (0.0 = deterministic, 1.0 = creative).
        max_tokens:
            Upper bound on the number of tokens in the response.
        json_mode:
            Ask the backend to constrain output to a JSON object where it
            supports that.  Callers must still parse defensively.

        Returns
        -------
        str
            The model's text response.

        Raises
        ------
        collabgraph.utils.errors.LLMError
            If the API call fails or returns an empty response.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this LLM provider."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the provider is configured.

        Implementations verify that credentials are present without making
        an inference call.
        """
