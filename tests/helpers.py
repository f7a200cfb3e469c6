"""Test doubles shared by the test modules."""

import json
from typing import Optional
from unittest.mock import MagicMock

from promovid.models import OperationHandle
from promovid.services.veo import OperationSnapshot, Submission, SubmissionKind

VIDEO_URI = "https://generativelanguage.googleapis.com/v1beta/files/abc:download?alt=media"
OPERATION_NAME = "models/veo-3.1-fast-generate-preview/operations/op-123"


def make_response(
    status_code: int = 200,
    json_data=None,
    content: bytes = b"",
    reason: str = "OK",
    headers: Optional[dict] = None,
):
    """Build a stand-in for requests.Response."""
    response = MagicMock()
    response.status_code = status_code
    response.ok = status_code < 400
    response.reason = reason
    response.content = content
    response.headers = headers or {}
    response.text = json.dumps(json_data) if json_data is not None else content.decode(errors="ignore")
    response.json.return_value = json_data
    return response


class SleepRecorder:
    """Async sleep replacement that records the requested delays."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


def operation_submission(name: str = OPERATION_NAME) -> Submission:
    return Submission(
        kind=SubmissionKind.OPERATION,
        model="veo-3.1-fast-generate-preview",
        handle=OperationHandle(name=name),
    )


def done_snapshot(uri: str = VIDEO_URI) -> OperationSnapshot:
    return OperationSnapshot(done=True, video_uri=uri)
