"""Video script data model."""

from pathlib import Path
from typing import List

import yaml
from pydantic import BaseModel, Field, model_validator

# Float tolerance when checking the scene timeline
_TIME_TOLERANCE = 1e-6


class Scene(BaseModel):
    """A timed segment of the script."""

    time_start: float = Field(..., alias="timeStart", ge=0, description="Start time in seconds")
    time_end: float = Field(..., alias="timeEnd", description="End time in seconds")
    visual: str = Field(..., description="Visual description")
    text: str = Field("", description="On-screen text, if any")

    class Config:
        """Pydantic config."""
        frozen = True
        populate_by_name = True

    @property
    def duration(self) -> float:
        return self.time_end - self.time_start


class VideoScript(BaseModel):
    """A complete promotional video script.

    The scenes cover ``[0, duration]`` without gaps or overlaps.
    """

    title: str = Field(..., description="Script title")
    duration: float = Field(..., gt=0, description="Target duration in seconds")
    scenes: List[Scene] = Field(..., description="Ordered, contiguous scenes")
    voiceover: str = Field(..., description="Voiceover line")
    prompt: str = Field(..., min_length=1, description="Video-model ready prompt")

    class Config:
        """Pydantic config."""
        frozen = True
        populate_by_name = True

    @model_validator(mode="after")
    def _check_timeline(self) -> "VideoScript":
        if not self.scenes:
            raise ValueError("script has no scenes")

        cursor = 0.0
        for i, scene in enumerate(self.scenes):
            if abs(scene.time_start - cursor) > _TIME_TOLERANCE:
                raise ValueError(
                    f"scene {i} starts at {scene.time_start}s, expected {cursor}s"
                )
            if scene.time_end <= scene.time_start:
                raise ValueError(f"scene {i} ends before it starts")
            cursor = scene.time_end

        if abs(cursor - self.duration) > _TIME_TOLERANCE:
            raise ValueError(
                f"scenes end at {cursor}s but duration is {self.duration}s"
            )
        return self

    def to_json_dict(self) -> dict:
        """Return the script in its wire (camelCase) shape."""
        return self.model_dump(by_alias=True)

    @classmethod
    def from_yaml(cls, path: Path) -> "VideoScript":
        """Load a script from a YAML file."""
        with open(path, "r") as f:
            data = yaml.safe_load(f)
        return cls(**data)

    def to_yaml(self, path: Path) -> None:
        """Save the script to a YAML file."""
        with open(path, "w") as f:
            yaml.safe_dump(self.to_json_dict(), f, default_flow_style=False, sort_keys=False)
