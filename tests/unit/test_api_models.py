"""Tests for thumbcraft.api.models — request and response schemas."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from thumbcraft.api.models import (
    SEED_MAX,
    GatewayMetadata,
    GenerationMetadata,
    ImageGenerationRequest,
    ImageGenerationResponse,
    Template,
    TemplateCreateRequest,
    TemplateOptions,
)


class TestImageGenerationRequest:
    def test_camel_case_input(self):
        req = ImageGenerationRequest.model_validate(
            {"prompt": "x", "aspectRatio": "16:9", "userImage": "abc", "templateId": "t1"}
        )
        assert req.aspect_ratio == "16:9"
        assert req.user_image == "abc"
        assert req.template_id == "t1"

    def test_snake_case_input(self):
        req = ImageGenerationRequest(prompt="x", aspect_ratio="1:1")
        assert req.aspect_ratio == "1:1"

    def test_defaults(self):
        req = ImageGenerationRequest(prompt="x", aspect_ratio="1:1")
        assert req.seed is None
        assert req.output_format == "jpeg"
        assert req.output_quality == 80
        assert req.cache_enabled is True
        assert req.effects == []

    @pytest.mark.parametrize("prompt", ["", "   ", "x" * 1001])
    def test_invalid_prompts(self, prompt):
        with pytest.raises(ValidationError):
            ImageGenerationRequest(prompt=prompt, aspect_ratio="1:1")

    def test_max_length_prompt_accepted(self):
        assert len(ImageGenerationRequest(prompt="x" * 1000, aspect_ratio="1:1").prompt) == 1000

    def test_unsupported_ratio(self):
        with pytest.raises(ValidationError):
            ImageGenerationRequest(prompt="x", aspect_ratio="21:9")

    @pytest.mark.parametrize("seed", [-1, SEED_MAX + 1])
    def test_seed_out_of_range(self, seed):
        with pytest.raises(ValidationError):
            ImageGenerationRequest(prompt="x", aspect_ratio="1:1", seed=seed)

    @pytest.mark.parametrize("seed", [0, SEED_MAX])
    def test_seed_bounds_accepted(self, seed):
        assert ImageGenerationRequest(prompt="x", aspect_ratio="1:1", seed=seed).seed == seed

    @pytest.mark.parametrize("quality", [9, 101])
    def test_output_quality_range(self, quality):
        with pytest.raises(ValidationError):
            ImageGenerationRequest(prompt="x", aspect_ratio="1:1", output_quality=quality)

    def test_output_format(self):
        with pytest.raises(ValidationError):
            ImageGenerationRequest(prompt="x", aspect_ratio="1:1", output_format="gif")


class TestResponseModels:
    def test_dump_uses_camel_case_and_omits_none(self):
        response = ImageGenerationResponse(
            image_url="data:image/png;base64,AAAA",
            metadata=GenerationMetadata(
                prompt="x",
                width=1024,
                height=576,
                aspect_ratio="16:9",
                platform="YouTube",
                generated_at="2026-01-01T00:00:00+00:00",
                gateway_metadata=GatewayMetadata(request_id="r", latency=12),
            ),
        )
        body = response.model_dump(by_alias=True, exclude_none=True)
        assert body["success"] is True
        assert body["imageUrl"].startswith("data:image/png")
        assert body["metadata"]["aspectRatio"] == "16:9"
        assert body["metadata"]["gatewayMetadata"] == {"requestId": "r", "latency": 12}
        assert "seed" not in body["metadata"]


class TestTemplates:
    def test_option_defaults(self):
        options = TemplateOptions()
        assert options.style == "realistic"
        assert options.aspect_ratio == "16:9"
        assert options.quality == "high"

    @pytest.mark.parametrize("tier", ["standard", "high", "ultra"])
    def test_quality_tiers_accepted(self, tier):
        assert TemplateOptions(quality=tier).quality == tier

    def test_unknown_quality_tier_rejected(self):
        with pytest.raises(ValidationError):
            TemplateOptions(quality="maximum")

    def test_name_stripped(self):
        assert TemplateCreateRequest(name="  Gaming  ").name == "Gaming"

    @pytest.mark.parametrize("name", ["", "   ", "n" * 101])
    def test_invalid_names(self, name):
        with pytest.raises(ValidationError):
            TemplateCreateRequest(name=name)

    def test_template_round_trip_from_store_entry(self):
        entry = {
            "id": "abc",
            "name": "Gaming",
            "options": {"style": "cartoon", "colorScheme": "neon", "customPrompt": "bold"},
            "createdAt": "2026-01-01T00:00:00+00:00",
        }
        template = Template.model_validate(entry)
        assert template.options.color_scheme == "neon"
        assert template.model_dump(by_alias=True)["createdAt"] == entry["createdAt"]
