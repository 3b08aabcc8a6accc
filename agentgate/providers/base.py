"""
Model Providers
---------------
The capability interface every model backend implements, and the lookup
table the orchestrator selects providers from.

The orchestrator never branches on vendor. Anything vendor-specific
(HTTP clients, prompt formats, tool-call parsing) lives behind
generate_structured_output().
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence
import logging

from agentgate.core.errors import DuplicateDefinitionError, UnknownModelError
from agentgate.core.models import StructuredResult
from agentgate.tools.registry import ToolDefinition


# Display metadata for the model ids the built-in agents use
KNOWN_MODELS: Dict[str, Dict[str, str]] = {
    "gpt-5.2": {"display_name": "OpenAI GPT-5.2", "vendor": "openai"},
    "claude-opus-4.6": {"display_name": "Claude Opus 4.6", "vendor": "anthropic"},
    "gemini-3": {"display_name": "Gemini 3", "vendor": "google"},
}


class ModelProvider(ABC):
    """
    One model backend.

    Implementations may fail (network, vendor error); they should raise
    rather than return partial results. A result with success=False is
    treated the same as a raised failure.
    """

    def __init__(
        self,
        model_id: str,
        display_name: Optional[str] = None,
        vendor: Optional[str] = None,
    ):
        known = KNOWN_MODELS.get(model_id, {})
        self.model_id = model_id
        self.display_name = display_name or known.get("display_name", model_id)
        self.vendor = vendor or known.get("vendor", "unknown")

    @abstractmethod
    async def generate_structured_output(
        self,
        system_prompt: str,
        user_prompt: str,
        tools: Sequence[ToolDefinition],
        output_schema: Mapping[str, Any],
    ) -> StructuredResult:
        """Propose data and tool calls for the prompt."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.model_id}, vendor={self.vendor})"


class ProviderRegistry:
    """Lookup table of providers keyed by model id."""

    def __init__(self, providers: Iterable[ModelProvider] = ()):
        self._providers: Dict[str, ModelProvider] = {}
        self._logger = logging.getLogger("agentgate.providers")
        for provider in providers:
            self.register(provider)

    def register(self, provider: ModelProvider) -> None:
        """
        Register a provider under its model id.

        Raises:
            DuplicateDefinitionError: if the model id is already taken
        """
        if provider.model_id in self._providers:
            raise DuplicateDefinitionError("provider", provider.model_id)
        self._providers[provider.model_id] = provider
        self._logger.debug(f"Registered provider: {provider.model_id} ({provider.vendor})")

    def get(self, model_id: str) -> ModelProvider:
        """
        Resolve the provider for a model id.

        Raises:
            UnknownModelError: if no provider is registered for it
        """
        provider = self._providers.get(model_id)
        if provider is None:
            raise UnknownModelError(model_id, supported=self._providers.keys())
        return provider

    def model_ids(self) -> List[str]:
        return list(self._providers)

    def __contains__(self, model_id: object) -> bool:
        return model_id in self._providers

    def __len__(self) -> int:
        return len(self._providers)
