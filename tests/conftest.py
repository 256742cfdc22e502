"""Shared pytest fixtures for Thumbcraft tests."""

from __future__ import annotations

import shutil
import tempfile
from collections.abc import Callable, Generator
from io import BytesIO
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from thumbcraft.api.main import create_app
from thumbcraft.core.aspect_ratios import render_reference_images
from thumbcraft.core.config import ThumbcraftConfig
from thumbcraft.core.provider import ImageProvider, ProviderReply, RequestPart


def _encode_image(width: int, height: int, image_format: str = "PNG") -> bytes:
    buffer = BytesIO()
    Image.new("RGB", (width, height), color=(200, 30, 30)).save(buffer, format=image_format)
    return buffer.getvalue()


class FakeProvider(ImageProvider):
    """In-memory provider that records calls and returns a canned reply.

    Set ``reply`` to change what ``generate`` returns, or ``error`` to make it
    raise instead.
    """

    name = "fake"
    model = "fake-image-model"

    def __init__(self, reply: ProviderReply | None = None) -> None:
        self.reply = reply or ProviderReply(
            image_data=_encode_image(1024, 1024),
            mime_type="image/png",
            finish_reason="STOP",
        )
        self.error: Exception | None = None
        self.calls: list[dict] = []
        self.closed = False

    async def generate(
        self,
        parts: list[RequestPart],
        *,
        seed: int | None = None,
        aspect_ratio: str | None = None,
    ) -> ProviderReply:
        self.calls.append({"parts": parts, "seed": seed, "aspect_ratio": aspect_ratio})
        if self.error is not None:
            raise self.error
        return self.reply

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    Yields:
        Path to temporary directory

    Cleanup:
        Directory is removed after test completes
    """
    temp_path = Path(tempfile.mkdtemp())
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def test_config(temp_dir: Path) -> ThumbcraftConfig:
    """Create a test configuration with temporary directories and a dummy key."""
    return ThumbcraftConfig(
        _env_file=None,
        gemini_api_key="test-key",
        reference_dir=temp_dir / "references",
        data_dir=temp_dir / "data",
        request_timeout_seconds=5,
    )


@pytest.fixture
def unconfigured_config(temp_dir: Path) -> ThumbcraftConfig:
    """Configuration without an API key."""
    return ThumbcraftConfig(
        _env_file=None,
        gemini_api_key=None,
        reference_dir=temp_dir / "references",
        data_dir=temp_dir / "data",
    )


@pytest.fixture
def reference_dir(test_config: ThumbcraftConfig) -> Path:
    """Reference directory populated with all blank reference PNGs."""
    render_reference_images(test_config.reference_dir)
    return test_config.reference_dir


@pytest.fixture
def make_image() -> Callable[..., bytes]:
    """Factory producing encoded images of a given size and format."""
    return _encode_image


@pytest.fixture
def png_bytes() -> bytes:
    """A small valid PNG."""
    return _encode_image(64, 48)


@pytest.fixture
def fake_provider() -> FakeProvider:
    """Provider returning a 1024x1024 PNG."""
    return FakeProvider()


@pytest.fixture
def test_client(
    test_config: ThumbcraftConfig, fake_provider: FakeProvider
) -> Generator[TestClient, None, None]:
    """TestClient wired to the fake provider.  Reference images are rendered on startup."""
    with TestClient(create_app(test_config, fake_provider)) as client:
        yield client


@pytest.fixture
def unconfigured_client(
    unconfigured_config: ThumbcraftConfig,
) -> Generator[TestClient, None, None]:
    """TestClient with no API key and no injected provider."""
    with TestClient(create_app(unconfigured_config)) as client:
        yield client
