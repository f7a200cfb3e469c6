"""Video generation pipeline: submit, poll, download.

``VideoPipeline.generate_video`` never raises. Every failure, including
transport errors, ends up as a failed ``GenerationResult``.
"""

import asyncio
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Awaitable, Callable, Optional, Sequence, TypeVar

import requests

from .config import config
from .errors import AssetMaterializationError, OperationPollError
from .models import (
    GenerationRequest,
    GenerationResult,
    ModelVariant,
    OperationHandle,
    PersonGeneration,
    VideoScript,
)
from .services.assets import AssetStore
from .services.veo import Submission, SubmissionKind, VeoClient

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_VARIANTS = (
    ModelVariant(model="veo-3.1-fast-generate-preview"),
    ModelVariant(model="veo-3.0-generate", person_generation=PersonGeneration.ALLOW_ADULT),
)


async def attempt_in_order(candidates: Sequence[Callable[[], Awaitable[T]]]) -> T:
    """Run candidate operations in order and return the first success.

    If every candidate fails, the error of the first one is re-raised so a
    later attempt never hides the original cause.
    """
    if not candidates:
        raise ValueError("No candidates to attempt")

    first_error: Optional[BaseException] = None
    for index, candidate in enumerate(candidates):
        try:
            return await candidate()
        except Exception as e:
            logger.warning(f"Attempt {index + 1}/{len(candidates)} failed: {e}")
            if first_error is None:
                first_error = e

    raise first_error


def describe_submission_error(error: BaseException) -> str:
    """User-facing message for a submission that failed on every variant."""
    message = str(error) or error.__class__.__name__
    if "predictLongRunning" in message or "404" in message:
        return (
            "Veo API not available for this API key. The model may require "
            f"Vertex AI authentication or Google AI Studio access. Error: {message}"
        )
    return message


class VideoPipeline:
    """Submits a prompt to Veo and turns the outcome into a GenerationResult.

    The pipeline handles:
    - Submitting to the primary model, then at most one fallback model
    - Polling a long-running operation at a fixed interval, bounded in attempts
    - Downloading the finished video into a playable local file
    """

    DEFAULT_POLL_INTERVAL = 5.0  # seconds
    DEFAULT_MAX_POLL_ATTEMPTS = 120  # 10 minutes at the default interval

    def __init__(
        self,
        client: VeoClient,
        assets: AssetStore,
        variants: Sequence[ModelVariant] = DEFAULT_VARIANTS,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        max_poll_attempts: int = DEFAULT_MAX_POLL_ATTEMPTS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize the pipeline.

        Args:
            client: Veo client used for submission and status checks.
            assets: Store that downloads and owns the finished videos.
            variants: Primary model variant, optionally followed by one
                fallback tried when the primary submission fails.
            poll_interval: Seconds between status checks.
            max_poll_attempts: Maximum number of status checks.
            sleep: Awaitable used to wait between checks.
        """
        if not 1 <= len(variants) <= 2:
            raise ValueError("Expected a primary model variant and at most one fallback")
        if max_poll_attempts < 1:
            raise ValueError("max_poll_attempts must be at least 1")

        self._client = client
        self._assets = assets
        self._variants = tuple(variants)
        self._poll_interval = poll_interval
        self._max_poll_attempts = max_poll_attempts
        self._sleep = sleep

    @classmethod
    def from_config(cls, client: VeoClient, assets: AssetStore) -> "VideoPipeline":
        """Build a pipeline with the model variants and polling from config."""
        variants = [ModelVariant(model=config.veo_model)]
        if config.veo_fallback_model:
            variants.append(
                ModelVariant(
                    model=config.veo_fallback_model,
                    person_generation=PersonGeneration.ALLOW_ADULT,
                )
            )
        return cls(
            client=client,
            assets=assets,
            variants=variants,
            poll_interval=config.veo_poll_interval,
            max_poll_attempts=config.veo_max_poll_attempts,
        )

    @property
    def variants(self) -> list[ModelVariant]:
        return list(self._variants)

    @property
    def timeout_seconds(self) -> float:
        return self._poll_interval * self._max_poll_attempts

    async def generate_video(self, request: GenerationRequest) -> GenerationResult:
        """Generate a video for the request.

        Returns:
            completed with a playable asset, pending if polling ran out of
            attempts, failed with a message otherwise.
        """
        logger.info("Starting Veo video generation")
        logger.debug(f"Prompt length: {len(request.prompt)}")

        try:
            try:
                submission = await self._submit(request)
            except Exception as e:
                logger.error(f"Video submission failed: {e}")
                return GenerationResult.failed(describe_submission_error(e))

            if submission.kind == SubmissionKind.IMMEDIATE:
                logger.info(f"Immediate result from {submission.model}")
                return await self._complete(submission.video_uri)

            if submission.kind == SubmissionKind.OPERATION:
                logger.info(f"Long-running operation started: {submission.handle.name}")
                return await self._poll(submission.handle)

            logger.error(f"Unexpected response from {submission.model}")
            return GenerationResult.failed(
                f"Unexpected video response: {submission.diagnostic}"
            )

        except Exception as e:
            logger.exception(f"Video generation error: {e}")
            return GenerationResult.failed(str(e) or "Video generation failed")

    async def resume(self, handle: OperationHandle) -> GenerationResult:
        """Poll an operation submitted earlier, e.g. after a pending result."""
        try:
            return await self._poll(handle)
        except Exception as e:
            logger.exception(f"Video generation error: {e}")
            return GenerationResult.failed(str(e) or "Video generation failed", handle.name)

    async def _submit(self, request: GenerationRequest) -> Submission:
        def attempt(variant: ModelVariant) -> Callable[[], Awaitable[Submission]]:
            return lambda: asyncio.to_thread(self._client.submit, request, variant)

        return await attempt_in_order([attempt(v) for v in self.variants])

    async def _poll(self, handle: OperationHandle) -> GenerationResult:
        """Poll until the operation is done or the attempt budget runs out."""
        for attempt in range(1, self._max_poll_attempts + 1):
            try:
                snapshot = await asyncio.to_thread(self._client.get_operation, handle)
            except (OperationPollError, requests.RequestException) as e:
                logger.warning(f"Poll attempt {attempt} failed: {e}")
                snapshot = None

            if snapshot is not None and snapshot.done:
                logger.info(f"Operation {handle.name} done after {attempt} poll(s)")

                if snapshot.error_message:
                    return GenerationResult.failed(snapshot.error_message, handle.name)

                if snapshot.video_uri:
                    return await self._complete(snapshot.video_uri, handle.name)

                return GenerationResult.failed(
                    f"No video found in completed operation: {snapshot.diagnostic}",
                    handle.name,
                )

            if snapshot is not None:
                logger.debug(f"Poll {attempt}: pending...")

            if attempt < self._max_poll_attempts:
                await self._sleep(self._poll_interval)

        minutes = self.timeout_seconds / 60
        logger.warning(f"Operation {handle.name} timed out after {self._max_poll_attempts} polls")
        return GenerationResult.pending(
            f"Video generation timed out after {minutes:g} minutes",
            handle.name,
        )

    async def _complete(
        self, video_uri: str, operation_name: Optional[str] = None
    ) -> GenerationResult:
        """Download the finished video and wrap it in a completed result."""
        try:
            asset = await asyncio.to_thread(self._assets.materialize, video_uri)
        except AssetMaterializationError as e:
            logger.error(f"Could not download generated video: {e}")
            return GenerationResult.failed(str(e), operation_name)

        return GenerationResult.completed(asset, operation_name)


def save_generation_record(
    result: GenerationResult,
    output_path: Path,
    request: Optional[GenerationRequest] = None,
    script: Optional[VideoScript] = None,
    video_path: Optional[Path] = None,
) -> None:
    """Save a JSON record of one generation next to the saved video.

    Args:
        result: Outcome of the pipeline.
        output_path: Path of the JSON file to write.
        request: Request that was submitted, if any.
        script: Script the prompt came from, if any.
        video_path: Where the video was copied to, if it was saved.
    """
    record = {
        "generated_at": datetime.now().isoformat(),
        "status": result.status.value,
        "operation_name": result.operation_name,
        "error": result.error,
        "source_uri": result.asset.source_uri if result.asset else None,
        "video_path": str(video_path) if video_path else None,
        "request": request.model_dump(mode="json") if request else None,
        "script": script.to_json_dict() if script else None,
    }

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        json.dump(record, f, indent=2)

    logger.info(f"Saved generation record to {output_path}")
