"""
Tests for promovid.pipeline

Submission fallback, the polling protocol and asset download.
"""

import json
import logging
from unittest.mock import MagicMock

import pytest
import requests

from promovid.errors import OperationPollError
from promovid.models import GenerationRequest, ModelVariant, OperationHandle, ResultStatus
from promovid.pipeline import (
    DEFAULT_VARIANTS,
    VideoPipeline,
    attempt_in_order,
    describe_submission_error,
    save_generation_record,
)
from promovid.services.veo import OperationSnapshot, Submission, SubmissionKind, VeoClient
from helpers import OPERATION_NAME, VIDEO_URI, make_response

REQUEST = GenerationRequest(prompt="A calm clinic, one continuous shot")


@pytest.fixture
def pipeline(veo_client, asset_store, sleep):
    return VideoPipeline(veo_client, asset_store, sleep=sleep)


class TestAttemptInOrder:
    @pytest.mark.asyncio
    async def test_first_success_wins(self):
        calls = []

        async def ok(value):
            calls.append(value)
            return value

        assert await attempt_in_order([lambda: ok("a"), lambda: ok("b")]) == "a"
        assert calls == ["a"]

    @pytest.mark.asyncio
    async def test_later_candidate_after_failure(self):
        async def boom():
            raise RuntimeError("first")

        async def ok():
            return "second"

        assert await attempt_in_order([boom, ok]) == "second"

    @pytest.mark.asyncio
    async def test_first_error_is_kept(self):
        async def first():
            raise RuntimeError("first")

        async def second():
            raise ValueError("second")

        with pytest.raises(RuntimeError, match="first"):
            await attempt_in_order([first, second])

    @pytest.mark.asyncio
    async def test_no_candidates(self):
        with pytest.raises(ValueError):
            await attempt_in_order([])


class TestConstruction:
    def test_defaults(self, veo_client, asset_store):
        pipeline = VideoPipeline(veo_client, asset_store)
        assert pipeline.variants == list(DEFAULT_VARIANTS)
        assert pipeline.timeout_seconds == 600

    def test_rejects_more_than_one_fallback(self, veo_client, asset_store):
        variants = [ModelVariant(model=m) for m in ("a", "b", "c")]
        with pytest.raises(ValueError):
            VideoPipeline(veo_client, asset_store, variants=variants)

    def test_rejects_zero_attempts(self, veo_client, asset_store):
        with pytest.raises(ValueError):
            VideoPipeline(veo_client, asset_store, max_poll_attempts=0)


class TestSubmission:
    @pytest.mark.asyncio
    async def test_immediate_result_is_downloaded(self, pipeline, veo_client, asset_store):
        veo_client.submit.return_value = Submission(
            kind=SubmissionKind.IMMEDIATE, model="veo-x", video_uri=VIDEO_URI
        )

        result = await pipeline.generate_video(REQUEST)

        assert result.status == ResultStatus.COMPLETED
        assert result.asset.source_uri == VIDEO_URI
        assert result.video_url
        veo_client.get_operation.assert_not_called()
        assert asset_store.active == [result.asset]

    @pytest.mark.asyncio
    async def test_unrecognized_response_fails_with_diagnostic(self, pipeline, veo_client):
        veo_client.submit.return_value = Submission(
            kind=SubmissionKind.UNRECOGNIZED, model="veo-x", diagnostic="namespace(foo=1)"
        )

        result = await pipeline.generate_video(REQUEST)

        assert result.status == ResultStatus.FAILED
        assert result.error == "Unexpected video response: namespace(foo=1)"

    @pytest.mark.asyncio
    async def test_primary_variant_first(self, pipeline, veo_client):
        await pipeline.generate_video(REQUEST)

        assert veo_client.submit.call_count == 1
        request, variant = veo_client.submit.call_args.args
        assert request == REQUEST
        assert variant.model == "veo-3.1-fast-generate-preview"

    @pytest.mark.asyncio
    async def test_fallback_variant_after_primary_error(self, pipeline, veo_client):
        veo_client.submit.side_effect = [
            RuntimeError("primary rejected"),
            Submission(kind=SubmissionKind.IMMEDIATE, model="veo-3.0-generate", video_uri=VIDEO_URI),
        ]

        result = await pipeline.generate_video(REQUEST)

        assert result.status == ResultStatus.COMPLETED
        models = [call.args[1].model for call in veo_client.submit.call_args_list]
        assert models == ["veo-3.1-fast-generate-preview", "veo-3.0-generate"]
        assert veo_client.submit.call_args_list[1].args[1].person_generation.value == "allow_adult"

    @pytest.mark.asyncio
    async def test_double_failure_surfaces_primary_error(self, pipeline, veo_client):
        veo_client.submit.side_effect = [
            RuntimeError("primary rejected"),
            RuntimeError("fallback rejected"),
        ]

        result = await pipeline.generate_video(REQUEST)

        assert result.status == ResultStatus.FAILED
        assert result.error == "primary rejected"
        assert veo_client.submit.call_count == 2

    @pytest.mark.asyncio
    async def test_no_fallback_configured(self, veo_client, asset_store, sleep):
        pipeline = VideoPipeline(
            veo_client, asset_store, variants=[ModelVariant(model="veo-x")], sleep=sleep
        )
        veo_client.submit.side_effect = RuntimeError("rejected")

        result = await pipeline.generate_video(REQUEST)

        assert result.error == "rejected"
        assert veo_client.submit.call_count == 1

    @pytest.mark.asyncio
    async def test_model_not_available_message(self, pipeline, veo_client):
        veo_client.submit.side_effect = RuntimeError("404 models/veo is not found for predictLongRunning")

        result = await pipeline.generate_video(REQUEST)

        assert result.error.startswith("Veo API not available")
        assert "predictLongRunning" in result.error

    def test_describe_plain_error(self):
        assert describe_submission_error(RuntimeError("quota")) == "quota"
        assert describe_submission_error(RuntimeError()) == "RuntimeError"


class TestPolling:
    @pytest.mark.asyncio
    async def test_done_on_first_poll(self, pipeline, veo_client, sleep):
        result = await pipeline.generate_video(REQUEST)

        assert result.status == ResultStatus.COMPLETED
        assert result.operation_name == OPERATION_NAME
        veo_client.get_operation.assert_called_once_with(OperationHandle(name=OPERATION_NAME))
        assert sleep.calls == []

    @pytest.mark.asyncio
    async def test_polls_at_fixed_interval_until_done(self, pipeline, veo_client, sleep):
        veo_client.get_operation.side_effect = [
            OperationSnapshot(done=False),
            OperationSnapshot(done=False),
            OperationSnapshot(done=True, video_uri=VIDEO_URI),
        ]

        result = await pipeline.generate_video(REQUEST)

        assert result.status == ResultStatus.COMPLETED
        assert sleep.calls == [5.0, 5.0]

    @pytest.mark.asyncio
    async def test_transport_failures_do_not_abort(self, pipeline, veo_client, sleep):
        veo_client.get_operation.side_effect = [
            OperationPollError("Status check failed: 500", status_code=500),
            requests.ConnectionError("reset"),
            OperationSnapshot(done=True, video_uri=VIDEO_URI),
        ]

        result = await pipeline.generate_video(REQUEST)

        assert result.status == ResultStatus.COMPLETED
        assert veo_client.get_operation.call_count == 3
        assert len(sleep.calls) == 2

    @pytest.mark.asyncio
    async def test_operation_error(self, pipeline, veo_client):
        veo_client.get_operation.return_value = OperationSnapshot(
            done=True, error_message="Prompt blocked by safety filter"
        )

        result = await pipeline.generate_video(REQUEST)

        assert result.status == ResultStatus.FAILED
        assert result.error == "Prompt blocked by safety filter"
        assert result.operation_name == OPERATION_NAME

    @pytest.mark.asyncio
    async def test_done_without_video(self, pipeline, veo_client):
        veo_client.get_operation.return_value = OperationSnapshot(
            done=True, diagnostic="{'raiMediaFilteredCount': 1}"
        )

        result = await pipeline.generate_video(REQUEST)

        assert result.status == ResultStatus.FAILED
        assert result.error.startswith("No video found in completed operation")

    @pytest.mark.asyncio
    async def test_exhaustion_returns_pending(self, pipeline, veo_client, sleep):
        veo_client.get_operation.return_value = OperationSnapshot(done=False)

        result = await pipeline.generate_video(REQUEST)

        assert result.status == ResultStatus.PENDING
        assert result.error == "Video generation timed out after 10 minutes"
        assert result.operation_name == OPERATION_NAME
        assert veo_client.get_operation.call_count == 120
        assert len(sleep.calls) == 119

    @pytest.mark.asyncio
    async def test_exhaustion_with_only_failing_checks(self, veo_client, asset_store, sleep):
        pipeline = VideoPipeline(veo_client, asset_store, max_poll_attempts=3, sleep=sleep)
        veo_client.get_operation.side_effect = OperationPollError("down")

        result = await pipeline.generate_video(REQUEST)

        assert result.status == ResultStatus.PENDING
        assert veo_client.get_operation.call_count == 3

    @pytest.mark.asyncio
    async def test_unexpected_poll_error_becomes_failed_result(self, pipeline, veo_client):
        veo_client.get_operation.side_effect = KeyError("boom")

        result = await pipeline.generate_video(REQUEST)

        assert result.status == ResultStatus.FAILED
        assert "boom" in result.error

    @pytest.mark.asyncio
    async def test_resume_existing_operation(self, pipeline, veo_client):
        result = await pipeline.resume(OperationHandle(name="operations/older"))

        assert result.status == ResultStatus.COMPLETED
        veo_client.submit.assert_not_called()
        assert result.operation_name == "operations/older"


class TestPollingWithRestClient:
    """Status checks through a real VeoClient over a mocked HTTP session."""

    @pytest.fixture
    def status_session(self):
        return MagicMock()

    @pytest.fixture
    def rest_pipeline(self, status_session, asset_store, sleep):
        client = VeoClient(api_key="SECRET-KEY-123", client=MagicMock(), session=status_session)
        return VideoPipeline(client, asset_store, max_poll_attempts=3, sleep=sleep)

    @pytest.mark.asyncio
    async def test_api_key_not_logged_on_transport_error(
        self, rest_pipeline, status_session, caplog
    ):
        status_session.get.side_effect = requests.ConnectionError(
            "Max retries exceeded with url: /v1beta/models/veo/operations/op1?key=SECRET-KEY-123"
        )

        with caplog.at_level(logging.DEBUG):
            result = await rest_pipeline.resume(OperationHandle(name="models/veo/operations/op1"))

        assert result.status == ResultStatus.PENDING
        assert status_session.get.call_count == 3
        assert "SECRET-KEY-123" not in caplog.text
        assert "Poll attempt 1 failed" in caplog.text

    @pytest.mark.asyncio
    async def test_non_object_body_counts_as_failed_check(self, rest_pipeline, status_session):
        status_session.get.side_effect = [
            make_response(json_data=[]),
            make_response(json_data=None),
            make_response(
                json_data={"done": True, "response": {"generatedVideos": [{"video": {"uri": VIDEO_URI}}]}}
            ),
        ]

        result = await rest_pipeline.resume(OperationHandle(name=OPERATION_NAME))

        assert result.status == ResultStatus.COMPLETED
        assert status_session.get.call_count == 3


class TestMaterialize:
    @pytest.mark.asyncio
    async def test_download_failure_is_its_own_failure(self, pipeline, download_session):
        download_session.get.return_value = make_response(status_code=403, reason="Forbidden")

        result = await pipeline.generate_video(REQUEST)

        assert result.status == ResultStatus.FAILED
        assert result.error == "Failed to fetch video: 403 Forbidden"
        assert result.operation_name == OPERATION_NAME

    @pytest.mark.asyncio
    async def test_completed_reference_is_non_empty(self, pipeline):
        result = await pipeline.generate_video(REQUEST)

        assert result.status == ResultStatus.COMPLETED
        assert result.video_url
        assert result.asset.local_path.stat().st_size > 0


class TestGenerationRecord:
    @pytest.mark.asyncio
    async def test_writes_json_record(self, pipeline, tmp_path):
        result = await pipeline.generate_video(REQUEST)
        path = tmp_path / "out" / "video.json"

        save_generation_record(result, path, request=REQUEST, video_path=tmp_path / "video.mp4")

        record = json.loads(path.read_text())
        assert record["status"] == "completed"
        assert record["operation_name"] == OPERATION_NAME
        assert record["source_uri"] == VIDEO_URI
        assert record["request"]["prompt"] == REQUEST.prompt
        assert record["request"]["person_generation"] == "allow_all"
        assert record["script"] is None
