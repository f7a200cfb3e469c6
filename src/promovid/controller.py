"""Generation status controller.

Sequences content fetch, script generation and video generation, and
exposes one current status, error message, script and result to the
presentation layer.
"""

import logging
from enum import Enum
from typing import Callable, Optional, Protocol, Sequence

from .fixed_ad import fixed_ad_script
from .models import (
    ContentSnippet,
    GenerationRequest,
    GenerationResult,
    PersonGeneration,
    ResultStatus,
    ThemeDescriptor,
    VideoScript,
)
from .pipeline import VideoPipeline
from .services.assets import AssetStore
from .services.content import ContentProvider

logger = logging.getLogger(__name__)


class GenerationStatus(str, Enum):
    """Current step of the generation sequence."""

    IDLE = "idle"
    FETCHING_CONTENT = "fetching-content"
    GENERATING_SCRIPT = "generating-script"
    GENERATING_VIDEO = "generating-video"
    COMPLETED = "completed"
    ERROR = "error"


class GenerationMode(str, Enum):
    """Where the video prompt comes from."""

    FIXED = "fixed"
    AUTO = "auto"


BUSY_STATUSES = frozenset(
    {
        GenerationStatus.FETCHING_CONTENT,
        GenerationStatus.GENERATING_SCRIPT,
        GenerationStatus.GENERATING_VIDEO,
    }
)


class ScriptGenerator(Protocol):
    async def generate_script(
        self,
        theme_name: str,
        theme_description: str,
        snippets: Sequence[ContentSnippet],
        duration_seconds: int = 8,
    ) -> VideoScript: ...


class GenerationController:
    """State machine over GenerationStatus for one user session.

    Only one sequence is meant to run at a time. The controller does not
    enforce it: callers check ``is_busy`` before firing a trigger.
    """

    def __init__(
        self,
        content: ContentProvider,
        scripts: Optional[ScriptGenerator],
        pipeline: VideoPipeline,
        assets: Optional[AssetStore] = None,
        mode: GenerationMode = GenerationMode.FIXED,
        duration_seconds: int = 8,
        aspect_ratio: str = "16:9",
        person_generation: PersonGeneration = PersonGeneration.ALLOW_ALL,
        on_status: Optional[Callable[[GenerationStatus], None]] = None,
    ) -> None:
        """Initialize the controller.

        Args:
            content: Provider of theme snippets.
            scripts: Script generator used in auto mode. May be None when only
                fixed mode or explicit scripts are used.
            pipeline: Video generation pipeline.
            assets: Store owning the result videos, released between sequences.
            mode: Initial generation mode.
            duration_seconds: Duration asked of the script generator. The video
                request always uses the duration of the script it renders.
            aspect_ratio: Aspect ratio of the generated video.
            person_generation: Person-depiction policy of the video request.
            on_status: Called with the new status on every transition.
        """
        self._content = content
        self._scripts = scripts
        self._pipeline = pipeline
        self._assets = assets
        self._duration = duration_seconds
        self._aspect_ratio = aspect_ratio
        self._person_generation = person_generation
        self._on_status = on_status

        self.mode = mode
        self._status = GenerationStatus.IDLE
        self._error_message = ""
        self._theme: Optional[ThemeDescriptor] = None
        self._snippets: list[ContentSnippet] = []
        self._script: Optional[VideoScript] = None
        self._request: Optional[GenerationRequest] = None
        self._result: Optional[GenerationResult] = None

    @property
    def status(self) -> GenerationStatus:
        return self._status

    @property
    def error_message(self) -> str:
        return self._error_message

    @property
    def theme(self) -> Optional[ThemeDescriptor]:
        return self._theme

    @property
    def snippets(self) -> list[ContentSnippet]:
        return list(self._snippets)

    @property
    def script(self) -> Optional[VideoScript]:
        return self._script

    @property
    def request(self) -> Optional[GenerationRequest]:
        """The last request submitted to the pipeline."""
        return self._request

    @property
    def result(self) -> Optional[GenerationResult]:
        return self._result

    @property
    def is_busy(self) -> bool:
        return self._status in BUSY_STATUSES

    def _set_status(self, status: GenerationStatus) -> None:
        if status != self._status:
            logger.debug(f"Status {self._status.value} -> {status.value}")
        self._status = status
        if self._on_status:
            self._on_status(status)

    def _fail(self, message: str) -> None:
        self._error_message = message
        self._set_status(GenerationStatus.ERROR)

    def release(self) -> None:
        """Drop the current result and delete its downloaded video."""
        if self._result is not None and self._assets is not None:
            self._assets.release(self._result.asset)
        self._result = None

    def close(self) -> None:
        """End the session: drop the result and every downloaded video."""
        self.release()
        if self._assets is not None:
            self._assets.release_all()

    async def select_theme(self, theme: ThemeDescriptor) -> list[ContentSnippet]:
        """Select a theme and fetch its content snippets."""
        self._theme = theme
        self._script = None
        self._request = None
        self.release()
        self._error_message = ""
        self._set_status(GenerationStatus.FETCHING_CONTENT)

        try:
            self._snippets = await self._content.fetch_snippets(theme.id)
            self._set_status(GenerationStatus.IDLE)
        except Exception as e:
            logger.error(f"Error fetching theme components: {e}")
            self._snippets = []
            self._fail("Failed to fetch theme components")

        return self.snippets

    async def generate(self, script: Optional[VideoScript] = None) -> Optional[GenerationResult]:
        """Run one generation sequence.

        Args:
            script: Literal script to submit. When omitted, fixed mode uses the
                predefined ad and auto mode generates a script for the theme.

        Returns:
            The pipeline result, or None if the sequence did not reach the
            video step.
        """
        self._error_message = ""
        self.release()
        self._request = None

        try:
            if script is not None or self.mode == GenerationMode.FIXED:
                self._script = script if script is not None else fixed_ad_script()
            else:
                if self._theme is None:
                    logger.warning("Auto mode needs a selected theme, nothing to generate")
                    return None
                if self._scripts is None:
                    raise RuntimeError("No script generator configured for auto mode")

                self._set_status(GenerationStatus.GENERATING_SCRIPT)
                self._script = await self._scripts.generate_script(
                    self._theme.name,
                    self._theme.description,
                    self._snippets,
                    self._duration,
                )

            # The clip length follows the script being rendered
            self._request = GenerationRequest(
                prompt=self._script.prompt,
                duration_seconds=round(self._script.duration),
                aspect_ratio=self._aspect_ratio,
                person_generation=self._person_generation,
            )
            self._set_status(GenerationStatus.GENERATING_VIDEO)
            result = await self._pipeline.generate_video(self._request)
            self._result = result

            if result.status == ResultStatus.COMPLETED and result.video_url:
                self._set_status(GenerationStatus.COMPLETED)
            elif result.status == ResultStatus.FAILED:
                self._fail(result.error or "Video generation failed")
            else:
                # A pending result cannot be resumed from here; it counts as an error.
                self._fail(result.error or "Video generation is still pending")

        except Exception as e:
            logger.exception(f"Error generating video: {e}")
            self._fail(str(e) or "An error occurred")

        return self._result

    def status_message(self) -> str:
        """One-line description of the current status for display."""
        if self._status == GenerationStatus.FETCHING_CONTENT:
            return "Fetching theme data from database..."
        if self._status == GenerationStatus.GENERATING_SCRIPT:
            return "Generating video script with AI..."
        if self._status == GenerationStatus.GENERATING_VIDEO:
            seconds = self._request.duration_seconds if self._request else self._duration
            return f"Generating {seconds}-second video with Veo..."
        if self._status == GenerationStatus.COMPLETED:
            return "Video generated successfully!"
        if self._status == GenerationStatus.ERROR:
            return self._error_message
        return ""
