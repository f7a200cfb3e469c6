"""Anthropic Claude text model client, the alternate script backend."""

import logging
import time
from typing import Optional

from anthropic import Anthropic, APIError, APIConnectionError, RateLimitError

from ..config import config

logger = logging.getLogger(__name__)

# Assistant prefill that forces the reply to continue a JSON object
_JSON_PREFILL = "{"


class AnthropicClient:
    """Client wrapper for Anthropic Claude API with retry logic.

    Exposes the same ``create_message`` signature as ``GeminiClient`` so the
    script agent can run on either backend.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        client: Optional[Anthropic] = None,
    ) -> None:
        """Initialize the Anthropic client.

        Args:
            api_key: Anthropic API key. Defaults to ANTHROPIC_API_KEY env var.
            model: Model to use. Defaults to config.default_model.
            max_retries: Maximum number of attempts for rate limits and
                connection errors.
            retry_delay: Base delay between retries in seconds (exponential backoff).
            client: Pre-built SDK client (mainly for tests).
        """
        self._api_key = api_key or config.anthropic_api_key
        if client is None and not self._api_key:
            raise ValueError(
                "Anthropic API key not provided. Set ANTHROPIC_API_KEY env var."
            )

        self._client = client or Anthropic(api_key=self._api_key)
        self._model = model or config.default_model
        self._max_retries = max_retries
        self._retry_delay = retry_delay

    @property
    def model(self) -> str:
        """Return the model being used."""
        return self._model

    def create_message(
        self,
        prompt: str,
        max_tokens: int = 4096,
        system: Optional[str] = None,
        temperature: float = 0.7,
        json_output: bool = False,
    ) -> str:
        """Create a message using Claude.

        When ``json_output`` is set the assistant turn is prefilled with ``{``
        and the prefill is put back in front of the returned text.

        Raises:
            APIError: If the API request fails after all retries.
        """
        messages = [{"role": "user", "content": prompt}]
        if json_output:
            messages.append({"role": "assistant", "content": _JSON_PREFILL})

        kwargs = {
            "model": self._model,
            "max_tokens": max_tokens,
            "messages": messages,
            "temperature": temperature,
        }
        if system:
            kwargs["system"] = system

        for attempt in range(self._max_retries):
            try:
                logger.debug(
                    f"Sending request to Claude (attempt {attempt + 1}/{self._max_retries})"
                )
                response = self._client.messages.create(**kwargs)

                text = "".join(
                    block.text for block in response.content if hasattr(block, "text")
                )
                return _JSON_PREFILL + text if json_output else text

            except (RateLimitError, APIConnectionError) as e:
                if attempt == self._max_retries - 1:
                    raise
                delay = self._retry_delay * (2**attempt)
                logger.warning(f"Claude request failed: {e}. Retrying in {delay:.1f}s...")
                time.sleep(delay)

            except APIError as e:
                logger.error(f"API error: {e}")
                raise

        raise RuntimeError("Max retries exceeded")
