"""Shared fixtures: Veo client double, asset store, recorded sleeps."""

from unittest.mock import MagicMock

import pytest

from promovid.services.assets import AssetStore
from promovid.services.veo import VeoClient

from helpers import SleepRecorder, done_snapshot, make_response, operation_submission


@pytest.fixture
def sleep():
    return SleepRecorder()


@pytest.fixture
def download_session():
    """requests session whose GET returns a small fake video."""
    session = MagicMock()
    session.get.return_value = make_response(
        content=b"\x00\x00\x00\x18ftypmp42", headers={"Content-Type": "video/mp4"}
    )
    return session


@pytest.fixture
def asset_store(tmp_path, download_session):
    return AssetStore(api_key="test-key", directory=tmp_path / "assets", session=download_session)


@pytest.fixture
def veo_client():
    """Veo client double; tests set submit / get_operation behaviour."""
    client = MagicMock(spec=VeoClient)
    client.submit.return_value = operation_submission()
    client.get_operation.return_value = done_snapshot()
    return client
