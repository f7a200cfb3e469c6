"""Data models for the promotional video generator."""

from .theme import ThemeDescriptor, ContentSnippet, THEME_CATEGORIES, DEFAULT_THEME_ID, get_theme
from .script import Scene, VideoScript
from .generation import (
    GenerationRequest,
    GenerationResult,
    ModelVariant,
    OperationHandle,
    PersonGeneration,
    PlayableAsset,
    ResultStatus,
    SUPPORTED_DURATIONS,
)

__all__ = [
    "ThemeDescriptor",
    "ContentSnippet",
    "THEME_CATEGORIES",
    "DEFAULT_THEME_ID",
    "get_theme",
    "Scene",
    "VideoScript",
    "GenerationRequest",
    "GenerationResult",
    "ModelVariant",
    "OperationHandle",
    "PersonGeneration",
    "PlayableAsset",
    "ResultStatus",
    "SUPPORTED_DURATIONS",
]
