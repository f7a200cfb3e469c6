"""Video generation request and result models."""

from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

# Clip lengths the Veo models accept, in seconds
SUPPORTED_DURATIONS = (4, 6, 8)


class PersonGeneration(str, Enum):
    """Person-depiction policy passed to the video model."""

    ALLOW_ALL = "allow_all"
    ALLOW_ADULT = "allow_adult"
    DONT_ALLOW = "dont_allow"


class GenerationRequest(BaseModel):
    """A prompt submitted to the video model."""

    prompt: str = Field(..., description="Video generation prompt")
    duration_seconds: int = Field(8, description="Requested duration in seconds (4, 6 or 8)")
    aspect_ratio: str = Field("16:9", description="Video aspect ratio ('16:9' or '9:16')")
    person_generation: PersonGeneration = Field(
        PersonGeneration.ALLOW_ALL, description="Person-depiction policy"
    )

    class Config:
        """Pydantic config."""
        frozen = True

    @field_validator("prompt")
    @classmethod
    def _prompt_not_empty(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("Prompt cannot be empty")
        return value

    @field_validator("duration_seconds")
    @classmethod
    def _supported_duration(cls, value: int) -> int:
        if value not in SUPPORTED_DURATIONS:
            raise ValueError(f"Invalid duration_seconds: {value}. Must be 4, 6 or 8")
        return value

    @field_validator("aspect_ratio")
    @classmethod
    def _known_aspect_ratio(cls, value: str) -> str:
        if value not in ("16:9", "9:16"):
            raise ValueError(f"Invalid aspect_ratio: {value}. Must be '16:9' or '9:16'")
        return value


class ModelVariant(BaseModel):
    """A video model the pipeline may submit to."""

    model: str = Field(..., description="Model name")
    person_generation: Optional[PersonGeneration] = Field(
        None, description="Policy override for models that reject the requested one"
    )

    class Config:
        """Pydantic config."""
        frozen = True

    def policy_for(self, request: GenerationRequest) -> PersonGeneration:
        return self.person_generation or request.person_generation


class OperationHandle(BaseModel):
    """Reference to a long-running video generation job."""

    name: str = Field(..., min_length=1, description="Operation resource name")

    class Config:
        """Pydantic config."""
        frozen = True


class PlayableAsset(BaseModel):
    """A generated video downloaded into a session-scoped local file."""

    source_uri: str = Field(..., description="URI reported by the video model")
    local_path: Path = Field(..., description="Local file holding the video bytes")
    content_type: str = Field("video/mp4", description="MIME type of the download")
    size_bytes: int = Field(0, ge=0, description="Size of the downloaded file")

    class Config:
        """Pydantic config."""
        frozen = True

    @property
    def url(self) -> str:
        """Locally addressable URL a player can open."""
        return self.local_path.resolve().as_uri()


class ResultStatus(str, Enum):
    """Outcome of a video generation attempt."""

    COMPLETED = "completed"
    PENDING = "pending"
    FAILED = "failed"


class GenerationResult(BaseModel):
    """Terminal artifact of the video pipeline.

    Completed results carry an asset. Pending and failed results carry an
    error message explaining why no video is available.
    """

    status: ResultStatus
    asset: Optional[PlayableAsset] = None
    operation_name: Optional[str] = None
    error: Optional[str] = None

    class Config:
        """Pydantic config."""
        frozen = True

    @model_validator(mode="after")
    def _check_payload(self) -> "GenerationResult":
        if self.status == ResultStatus.COMPLETED and self.asset is None:
            raise ValueError("completed result requires an asset")
        if self.status != ResultStatus.COMPLETED and not self.error:
            raise ValueError(f"{self.status.value} result requires an error message")
        return self

    @classmethod
    def completed(
        cls, asset: PlayableAsset, operation_name: Optional[str] = None
    ) -> "GenerationResult":
        return cls(status=ResultStatus.COMPLETED, asset=asset, operation_name=operation_name)

    @classmethod
    def pending(cls, error: str, operation_name: Optional[str] = None) -> "GenerationResult":
        return cls(status=ResultStatus.PENDING, error=error, operation_name=operation_name)

    @classmethod
    def failed(cls, error: str, operation_name: Optional[str] = None) -> "GenerationResult":
        return cls(status=ResultStatus.FAILED, error=error, operation_name=operation_name)

    @property
    def video_url(self) -> str:
        return self.asset.url if self.asset else ""
