"""Tests for thumbcraft.core.aspect_ratios — profiles and reference images."""

from __future__ import annotations

import pytest
from PIL import Image

from thumbcraft.core.aspect_ratios import (
    PROFILES,
    SUPPORTED_RATIOS,
    get_profile,
    load_reference_image,
    render_reference_images,
)
from thumbcraft.core.errors import ConfigurationError, ValidationError


class TestProfiles:
    def test_supported_ratios(self):
        assert set(SUPPORTED_RATIOS) == {"1:1", "16:9", "9:16", "4:3", "3:4"}

    @pytest.mark.parametrize(
        ("ratio", "width", "height", "filename"),
        [
            ("16:9", 1024, 576, "16-9.png"),
            ("9:16", 576, 1024, "9-16.png"),
            ("4:3", 1024, 768, "4-3.png"),
            ("3:4", 768, 1024, "3-4.png"),
            ("1:1", 1024, 1024, "1-1.png"),
        ],
    )
    def test_profile_dimensions(self, ratio, width, height, filename):
        profile = get_profile(ratio)
        assert (profile.width, profile.height, profile.filename) == (width, height, filename)

    def test_profiles_match_their_ratio(self):
        for ratio, profile in PROFILES.items():
            w, h = (int(x) for x in ratio.split(":"))
            assert profile.width * h == profile.height * w

    def test_profiles_are_immutable(self):
        with pytest.raises(AttributeError):
            PROFILES["1:1"].width = 10  # type: ignore[misc]

    def test_unknown_ratio_raises_validation_error(self):
        with pytest.raises(ValidationError, match="3:2"):
            get_profile("3:2")

    def test_to_dict(self):
        assert get_profile("16:9").to_dict() == {
            "ratio": "16:9",
            "width": 1024,
            "height": 576,
            "platform": "YouTube",
        }


class TestRenderReferenceImages:
    def test_renders_every_profile(self, temp_dir):
        written = render_reference_images(temp_dir / "refs")
        assert len(written) == len(PROFILES)
        for profile in PROFILES.values():
            with Image.open(temp_dir / "refs" / profile.filename) as image:
                assert image.size == (profile.width, profile.height)
                assert image.format == "PNG"

    def test_existing_files_are_kept(self, temp_dir):
        refs = temp_dir / "refs"
        render_reference_images(refs)
        assert render_reference_images(refs) == []

    def test_overwrite_rerenders(self, temp_dir):
        refs = temp_dir / "refs"
        render_reference_images(refs)
        assert len(render_reference_images(refs, overwrite=True)) == len(PROFILES)


class TestLoadReferenceImage:
    def test_loads_png_bytes(self, reference_dir):
        data = load_reference_image(get_profile("1:1"), reference_dir)
        assert data.startswith(b"\x89PNG")

    def test_missing_file_is_configuration_error(self, temp_dir):
        with pytest.raises(ConfigurationError, match="16:9"):
            load_reference_image(get_profile("16:9"), temp_dir)

    def test_directory_in_place_of_file_is_configuration_error(self, temp_dir):
        (temp_dir / "1-1.png").mkdir()
        with pytest.raises(ConfigurationError):
            load_reference_image(get_profile("1:1"), temp_dir)
