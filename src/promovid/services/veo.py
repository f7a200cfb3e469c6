"""Google Veo video model client via the Gemini API."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

import requests
from google import genai
from google.genai import types

from ..config import config
from ..errors import OperationPollError
from ..models import GenerationRequest, ModelVariant, OperationHandle

logger = logging.getLogger(__name__)

# Raw responses quoted in error messages are cut to this length
DIAGNOSTIC_LIMIT = 400


def truncate_diagnostic(payload: Any, limit: int = DIAGNOSTIC_LIMIT) -> str:
    """Render a raw provider payload for an error message, bounded in length."""
    text = payload if isinstance(payload, str) else repr(payload)
    return text[:limit]


class SubmissionKind(str, Enum):
    """Shape of the provider's reply to a submission."""

    IMMEDIATE = "immediate"
    OPERATION = "operation"
    UNRECOGNIZED = "unrecognized"


@dataclass(frozen=True)
class Submission:
    """Classified reply to a video submission."""

    kind: SubmissionKind
    model: str
    video_uri: Optional[str] = None
    handle: Optional[OperationHandle] = None
    diagnostic: Optional[str] = None


@dataclass(frozen=True)
class OperationSnapshot:
    """State of a long-running operation at one status check."""

    done: bool
    video_uri: Optional[str] = None
    error_message: Optional[str] = None
    diagnostic: str = ""


def _first_video_uri(videos: Any) -> Optional[str]:
    """Return ``videos[0].video.uri`` for SDK objects or plain dicts."""
    if not videos:
        return None
    first = videos[0]
    video = first.get("video") if isinstance(first, dict) else getattr(first, "video", None)
    if video is None:
        return None
    uri = video.get("uri") if isinstance(video, dict) else getattr(video, "uri", None)
    return uri or None


def extract_video_uri(response: Any) -> Optional[str]:
    """Find the generated video URI in an operation response.

    Handles both the SDK shape (``generated_videos``) and the REST shapes
    (``generatedVideos`` and ``generateVideoResponse.generatedSamples``).
    """
    if response is None:
        return None

    if isinstance(response, dict):
        uri = _first_video_uri(response.get("generatedVideos"))
        if uri:
            return uri
        samples = (response.get("generateVideoResponse") or {}).get("generatedSamples")
        return _first_video_uri(samples)

    return _first_video_uri(getattr(response, "generated_videos", None))


def classify_submission(raw: Any, model: str) -> Submission:
    """Classify the reply of ``generate_videos`` into one of three shapes.

    A named operation is polled; inline generated videos are an immediate
    result; anything else is unrecognized and keeps a bounded diagnostic.
    """
    name = getattr(raw, "name", None)
    if isinstance(name, str) and name:
        return Submission(
            kind=SubmissionKind.OPERATION,
            model=model,
            handle=OperationHandle(name=name),
        )

    uri = extract_video_uri(raw) or extract_video_uri(getattr(raw, "response", None))
    if uri:
        return Submission(kind=SubmissionKind.IMMEDIATE, model=model, video_uri=uri)

    return Submission(
        kind=SubmissionKind.UNRECOGNIZED,
        model=model,
        diagnostic=truncate_diagnostic(raw),
    )


def parse_operation(data: dict) -> OperationSnapshot:
    """Turn a REST operation payload ``{done, response?, error?}`` into a snapshot."""
    diagnostic = truncate_diagnostic(data.get("response"))
    if not data.get("done"):
        return OperationSnapshot(done=False, diagnostic=diagnostic)

    error = data.get("error")
    if error:
        message = error.get("message") if isinstance(error, dict) else str(error)
        return OperationSnapshot(
            done=True,
            error_message=message or "Operation failed",
            diagnostic=diagnostic,
        )

    return OperationSnapshot(
        done=True,
        video_uri=extract_video_uri(data.get("response")),
        diagnostic=diagnostic,
    )


class VeoClient:
    """Client wrapper for Google Veo video generation via the Gemini API.

    This client handles:
    - Submitting video generation requests to a given Veo model
    - Classifying the submission reply (immediate / operation / unrecognized)
    - Fetching the state of a long-running operation by name

    Polling cadence, model fallback and downloads live in the pipeline.
    """

    DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
    DEFAULT_TIMEOUT = 30.0

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        client: Optional[genai.Client] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        """Initialize the Veo client.

        Args:
            api_key: Gemini API key. Defaults to GEMINI_API_KEY env var.
            base_url: Base URL of the REST API used for operation polling.
            timeout: Timeout in seconds for each status request.
            client: Pre-built genai client (mainly for tests).
            session: Optional requests session (mainly for tests).
        """
        self._api_key = api_key or config.gemini_api_key
        if client is None and not self._api_key:
            raise ValueError("GEMINI_API_KEY not set")

        self._client = client or genai.Client(api_key=self._api_key)
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._session = session or requests.Session()

    @property
    def api_key(self) -> str:
        return self._api_key

    def submit(self, request: GenerationRequest, variant: ModelVariant) -> Submission:
        """Submit a generation request to one model variant.

        Returns:
            The classified submission reply.

        Raises:
            Exception: Whatever the SDK raises when the submission is rejected.
        """
        policy = variant.policy_for(request)
        logger.info(f"Submitting Veo generation to {variant.model}")
        logger.debug(f"Prompt length: {len(request.prompt)}, person_generation={policy.value}")

        raw = self._client.models.generate_videos(
            model=variant.model,
            prompt=request.prompt,
            config=types.GenerateVideosConfig(
                number_of_videos=1,
                aspect_ratio=request.aspect_ratio,
                duration_seconds=request.duration_seconds,
                person_generation=policy.value,
            ),
        )

        submission = classify_submission(raw, variant.model)
        logger.info(f"Veo submission to {variant.model}: {submission.kind.value}")
        return submission

    def get_operation(self, handle: OperationHandle) -> OperationSnapshot:
        """Fetch the current state of an operation.

        Raises:
            OperationPollError: If the request fails, returns a non-2xx code
                or a body that is not a JSON object. The API key never
                appears in the message.
        """
        url = f"{self._base_url}/{handle.name}"
        try:
            response = self._session.get(
                url, params={"key": self._api_key}, timeout=self._timeout
            )
        except requests.RequestException as e:
            raise OperationPollError(f"Status check failed: {self._redact(str(e))}") from e

        if not response.ok:
            raise OperationPollError(
                f"Status check failed: {response.status_code} {response.reason}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise OperationPollError("Status check returned invalid JSON") from e

        if not isinstance(data, dict):
            raise OperationPollError(
                f"Unexpected status response: {truncate_diagnostic(data)}",
                status_code=response.status_code,
            )

        return parse_operation(data)

    def _redact(self, text: str) -> str:
        return text.replace(self._api_key, "API_KEY") if self._api_key else text
