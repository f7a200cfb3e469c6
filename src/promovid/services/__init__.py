"""External service integrations."""

from .anthropic import AnthropicClient
from .assets import AssetStore
from .content import ContentProvider
from .gemini import GeminiClient
from .veo import VeoClient, Submission, SubmissionKind, OperationSnapshot

__all__ = [
    "AnthropicClient",
    "AssetStore",
    "ContentProvider",
    "GeminiClient",
    "VeoClient",
    "Submission",
    "SubmissionKind",
    "OperationSnapshot",
]
