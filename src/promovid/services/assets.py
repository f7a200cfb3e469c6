"""Download generated videos into session-scoped playable files."""

import logging
import shutil
import tempfile
import uuid
from pathlib import Path
from typing import Optional

import requests

from ..config import config
from ..errors import AssetMaterializationError
from ..models import PlayableAsset

logger = logging.getLogger(__name__)


def authorize_uri(uri: str, api_key: str) -> str:
    """Append the API key to a video URI unless it already carries one."""
    if not api_key or "key=" in uri:
        return uri
    separator = "&" if "?" in uri else "?"
    return f"{uri}{separator}key={api_key}"


class AssetStore:
    """Owns the transient video files of a session.

    Video URIs returned by Veo need the API key to download. ``materialize``
    performs that authenticated fetch and keeps the bytes in a local file;
    ``release`` deletes it again once the result is discarded.
    """

    DEFAULT_TIMEOUT = 120.0

    def __init__(
        self,
        api_key: Optional[str] = None,
        directory: Optional[Path] = None,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ) -> None:
        """Initialize the asset store.

        Args:
            api_key: Key appended to video URIs. Defaults to GEMINI_API_KEY env var.
            directory: Where downloads go. Defaults to PROMOVID_ASSET_DIR, or a
                temporary directory created on first use.
            timeout: Download timeout in seconds.
            session: Optional requests session (mainly for tests).
        """
        self._api_key = api_key if api_key is not None else config.gemini_api_key
        self._directory = directory or config.asset_dir
        self._owns_directory = False
        self._timeout = timeout
        self._session = session or requests.Session()
        self._assets: dict[Path, PlayableAsset] = {}

    @property
    def directory(self) -> Path:
        if self._directory is None:
            self._directory = Path(tempfile.mkdtemp(prefix="promovid-"))
            self._owns_directory = True
        return self._directory

    @property
    def active(self) -> list[PlayableAsset]:
        """Assets that have been materialized and not yet released."""
        return list(self._assets.values())

    def _redact(self, text: str) -> str:
        return text.replace(self._api_key, "API_KEY") if self._api_key else text

    def materialize(self, uri: str) -> PlayableAsset:
        """Fetch a video URI and store it as a local playable file.

        Raises:
            AssetMaterializationError: If the download fails.
        """
        if not uri:
            raise AssetMaterializationError("No video URI to fetch")

        url = authorize_uri(uri, self._api_key)
        logger.info(f"Fetching video from: {self._redact(url)}")

        try:
            response = self._session.get(url, timeout=self._timeout)
        except requests.RequestException as e:
            raise AssetMaterializationError(
                f"Failed to fetch video: {self._redact(str(e))}"
            ) from e

        if not response.ok:
            raise AssetMaterializationError(
                f"Failed to fetch video: {response.status_code} {response.reason}"
            )

        content = response.content
        if not content:
            raise AssetMaterializationError("Failed to fetch video: empty response body")

        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.directory / f"video_{uuid.uuid4().hex}.mp4"
        path.write_bytes(content)

        asset = PlayableAsset(
            source_uri=uri,
            local_path=path,
            content_type=response.headers.get("Content-Type", "video/mp4"),
            size_bytes=len(content),
        )
        self._assets[path] = asset
        logger.info(f"Video saved to {path} ({len(content)} bytes)")
        return asset

    def release(self, asset: Optional[PlayableAsset]) -> None:
        """Delete a materialized asset. Unknown or missing files are ignored."""
        if asset is None:
            return
        self._assets.pop(asset.local_path, None)
        asset.local_path.unlink(missing_ok=True)
        logger.debug(f"Released video {asset.local_path}")

    def release_all(self) -> None:
        """Delete every asset, and the temporary directory if this store made it."""
        for asset in self.active:
            self.release(asset)

        if self._owns_directory and self._directory is not None:
            shutil.rmtree(self._directory, ignore_errors=True)
            logger.debug(f"Removed asset directory {self._directory}")
            self._directory = None
            self._owns_directory = False
