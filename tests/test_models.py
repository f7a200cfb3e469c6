"""
Tests for promovid.models and the fixed ad script.
"""

import pytest
from pydantic import ValidationError

from promovid.fixed_ad import FIXED_AD_PROMPT, fixed_ad_script
from promovid.models import (
    THEME_CATEGORIES,
    GenerationRequest,
    GenerationResult,
    PersonGeneration,
    PlayableAsset,
    ResultStatus,
    VideoScript,
    get_theme,
)


def _script_data(**overrides):
    data = {
        "title": "Test",
        "duration": 8,
        "scenes": [
            {"timeStart": 0, "timeEnd": 3, "visual": "open", "text": ""},
            {"timeStart": 3, "timeEnd": 8, "visual": "close", "text": "Brand"},
        ],
        "voiceover": "Hello",
        "prompt": "A cinematic shot",
    }
    data.update(overrides)
    return data


class TestThemes:
    def test_catalog_ids(self):
        assert [t.id for t in THEME_CATEGORIES] == [
            "safety", "efficacy", "brand", "mechanism", "patient",
        ]

    def test_get_theme(self):
        assert get_theme("mechanism").name == "Mechanism of Action"

    def test_get_unknown_theme_raises(self):
        with pytest.raises(KeyError):
            get_theme("nope")


class TestVideoScript:
    def test_parses_camel_case_keys(self):
        script = VideoScript.model_validate(_script_data())
        assert script.scenes[1].time_start == 3
        assert script.scenes[1].text == "Brand"

    def test_text_is_optional(self):
        data = _script_data()
        del data["scenes"][0]["text"]
        assert VideoScript.model_validate(data).scenes[0].text == ""

    def test_rejects_gap(self):
        data = _script_data(scenes=[
            {"timeStart": 0, "timeEnd": 3, "visual": "a"},
            {"timeStart": 4, "timeEnd": 8, "visual": "b"},
        ])
        with pytest.raises(ValidationError, match="starts at 4"):
            VideoScript.model_validate(data)

    def test_rejects_overlap(self):
        data = _script_data(scenes=[
            {"timeStart": 0, "timeEnd": 5, "visual": "a"},
            {"timeStart": 4, "timeEnd": 8, "visual": "b"},
        ])
        with pytest.raises(ValidationError):
            VideoScript.model_validate(data)

    def test_rejects_short_timeline(self):
        data = _script_data(scenes=[{"timeStart": 0, "timeEnd": 6, "visual": "a"}])
        with pytest.raises(ValidationError, match="duration is 8"):
            VideoScript.model_validate(data)

    def test_rejects_no_scenes(self):
        with pytest.raises(ValidationError):
            VideoScript.model_validate(_script_data(scenes=[]))

    def test_rejects_missing_prompt(self):
        data = _script_data()
        del data["prompt"]
        with pytest.raises(ValidationError):
            VideoScript.model_validate(data)

    def test_yaml_file_keeps_wire_keys(self, tmp_path):
        script = VideoScript.model_validate(_script_data())
        path = tmp_path / "script.yaml"
        script.to_yaml(path)

        assert "timeStart" in path.read_text()
        assert VideoScript.from_yaml(path) == script


class TestFixedAd:
    def test_four_scenes_cover_eight_seconds(self):
        script = fixed_ad_script()
        assert script.duration == 8
        assert [(s.time_start, s.time_end) for s in script.scenes] == [
            (0, 2), (2, 5), (5, 7), (7, 8),
        ]

    def test_only_last_scene_has_text(self):
        script = fixed_ad_script()
        assert [bool(s.text) for s in script.scenes] == [False, False, False, True]
        assert script.prompt == FIXED_AD_PROMPT
        assert "Nebzmart-G" in script.voiceover


class TestGenerationRequest:
    def test_defaults(self):
        request = GenerationRequest(prompt="x")
        assert request.duration_seconds == 8
        assert request.aspect_ratio == "16:9"
        assert request.person_generation == PersonGeneration.ALLOW_ALL

    def test_empty_prompt_rejected(self):
        with pytest.raises(ValidationError):
            GenerationRequest(prompt="   ")

    def test_unknown_aspect_ratio_rejected(self):
        with pytest.raises(ValidationError):
            GenerationRequest(prompt="x", aspect_ratio="4:3")

    @pytest.mark.parametrize("seconds", [4, 6, 8])
    def test_supported_durations(self, seconds):
        assert GenerationRequest(prompt="x", duration_seconds=seconds).duration_seconds == seconds

    @pytest.mark.parametrize("seconds", [0, 5, 7, 10])
    def test_unsupported_duration_rejected(self, seconds):
        with pytest.raises(ValidationError, match="Must be 4, 6 or 8"):
            GenerationRequest(prompt="x", duration_seconds=seconds)

    def test_is_immutable(self):
        request = GenerationRequest(prompt="x")
        with pytest.raises(ValidationError):
            request.prompt = "y"


class TestGenerationResult:
    def test_completed_exposes_file_url(self, tmp_path):
        asset = PlayableAsset(source_uri="https://x/v.mp4", local_path=tmp_path / "v.mp4")
        result = GenerationResult.completed(asset, "op-1")
        assert result.status == ResultStatus.COMPLETED
        assert result.video_url.startswith("file://")
        assert result.operation_name == "op-1"

    def test_completed_requires_asset(self):
        with pytest.raises(ValidationError):
            GenerationResult(status=ResultStatus.COMPLETED)

    def test_failed_requires_message(self):
        with pytest.raises(ValidationError):
            GenerationResult(status=ResultStatus.FAILED)

    def test_pending_has_no_video(self):
        result = GenerationResult.pending("timed out")
        assert result.video_url == ""
        assert result.error == "timed out"
