"""Google Gemini text model client via the google-genai SDK."""

import logging
import time
from typing import Optional

from google import genai
from google.genai import types, errors as genai_errors

from ..config import config

logger = logging.getLogger(__name__)


class GeminiClient:
    """Client wrapper for Gemini text generation with retry on server errors."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        client: Optional[genai.Client] = None,
    ) -> None:
        """Initialize the Gemini client.

        Args:
            api_key: Gemini API key. Defaults to GEMINI_API_KEY env var.
            model: Model to use. Defaults to config.script_model.
            max_retries: Maximum number of attempts for server errors.
            retry_delay: Base delay between retries in seconds (exponential backoff).
            client: Pre-built genai client (mainly for tests).
        """
        self._api_key = api_key or config.gemini_api_key
        if client is None and not self._api_key:
            raise ValueError(
                "Gemini API key not provided. Set GEMINI_API_KEY env var."
            )

        self._client = client or genai.Client(api_key=self._api_key)
        self._model = model or config.script_model
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
        """Generate text with Gemini.

        Args:
            prompt: The user prompt to send.
            max_tokens: Maximum tokens in the response.
            system: Optional system instruction.
            temperature: Sampling temperature.
            json_output: Ask the model for an application/json response.

        Returns:
            The text of the response ('' if the model returned no text).

        Raises:
            genai_errors.APIError: If the request fails after all retries.
        """
        generation_config = types.GenerateContentConfig(
            system_instruction=system,
            temperature=temperature,
            max_output_tokens=max_tokens,
            response_mime_type="application/json" if json_output else None,
        )

        for attempt in range(self._max_retries):
            try:
                logger.debug(
                    f"Sending request to Gemini (attempt {attempt + 1}/{self._max_retries})"
                )
                response = self._client.models.generate_content(
                    model=self._model,
                    contents=prompt,
                    config=generation_config,
                )
                return response.text or ""

            except genai_errors.ServerError as e:
                if attempt == self._max_retries - 1:
                    raise
                delay = self._retry_delay * (2**attempt)
                logger.warning(f"Gemini server error: {e}. Retrying in {delay:.1f}s...")
                time.sleep(delay)

            except genai_errors.APIError as e:
                logger.error(f"Gemini API error: {e}")
                raise

        raise RuntimeError("Max retries exceeded")
