"""Exceptions raised by the generation pipeline."""

from typing import Optional


class PromoVideoError(Exception):
    """Base class for promovid errors."""


class ScriptGenerationError(PromoVideoError):
    """The text model reply could not be turned into a VideoScript."""


class OperationPollError(PromoVideoError):
    """A single status check of a long-running operation failed."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class AssetMaterializationError(PromoVideoError):
    """The generated video could not be fetched into a playable local file."""
