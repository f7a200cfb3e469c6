"""Base agent abstraction."""

import logging
from abc import ABC, abstractmethod
from typing import Generic, Optional, Protocol, TypeVar

from ..config import config

logger = logging.getLogger(__name__)

InputT = TypeVar("InputT")
OutputT = TypeVar("OutputT")


class TextModelClient(Protocol):
    """What an agent needs from a text model backend."""

    @property
    def model(self) -> str: ...

    def create_message(
        self,
        prompt: str,
        max_tokens: int = 4096,
        system: Optional[str] = None,
        temperature: float = 0.7,
        json_output: bool = False,
    ) -> str: ...


def create_text_client(provider: Optional[str] = None) -> TextModelClient:
    """Build the text model client for the configured provider.

    Raises:
        ValueError: If the provider is unknown or its API key is missing.
    """
    provider = (provider or config.script_provider).lower()
    if provider == "gemini":
        from ..services.gemini import GeminiClient
        return GeminiClient()
    if provider == "anthropic":
        from ..services.anthropic import AnthropicClient
        return AnthropicClient()
    raise ValueError(f"Unknown script provider: {provider}")


class BaseAgent(ABC, Generic[InputT, OutputT]):
    """Abstract base class for AI agents.

    Provides shared functionality for agents backed by a text model.
    Subclasses must implement the `run` method and define their prompts.
    """

    def __init__(self, client: Optional[TextModelClient] = None) -> None:
        """Initialize the agent.

        Args:
            client: Text model client. Built from config if not provided.
        """
        self._client = client or create_text_client()
        self._logger = logging.getLogger(f"{__name__}.{self.name}")

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the agent's name."""
        ...

    @property
    @abstractmethod
    def system_prompt(self) -> str:
        """Return the system prompt for this agent."""
        ...

    @property
    def model(self) -> str:
        """Return the model being used."""
        return self._client.model

    @abstractmethod
    def run(self, input_data: InputT) -> OutputT:
        """Execute the agent's main task."""
        ...

    def _create_message(
        self,
        prompt: str,
        max_tokens: int = 4096,
        temperature: float = 0.7,
        json_output: bool = False,
    ) -> str:
        """Create a message using the agent's client and system prompt."""
        self._logger.debug(f"Creating message with prompt length: {len(prompt)}")

        try:
            response = self._client.create_message(
                prompt=prompt,
                max_tokens=max_tokens,
                system=self.system_prompt,
                temperature=temperature,
                json_output=json_output,
            )
            self._logger.debug(f"Received response of length: {len(response)}")
            return response

        except Exception as e:
            self._logger.error(f"Error creating message: {e}")
            raise
