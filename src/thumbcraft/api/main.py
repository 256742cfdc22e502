"""Thumbcraft — FastAPI Application.

This module defines the application factory, all REST API routes, and the
``main()`` CLI function that launches the uvicorn server.

Architecture
------------
- **Configuration** comes from :class:`~thumbcraft.core.config.ThumbcraftConfig`
  (environment variables and ``.env``).
- **Image generation** is performed by
  :class:`~thumbcraft.core.generator.ThumbnailGenerator`, which talks to the
  hosted model through an :class:`~thumbcraft.core.provider.ImageProvider`.
  The provider is built once in the lifespan (or injected by the caller of
  :func:`create_app`) and stored on ``app.state``.
- **Template persistence** uses a single ``templates.json`` file, no database
  required.

Endpoints
---------
========  ============================  ====================================
Method    Path                          Purpose
========  ============================  ====================================
POST      ``/api/image``                Generate one thumbnail
GET       ``/api/image``                Health and capability probe
GET       ``/api/templates``            List saved templates
POST      ``/api/templates``            Save a template
GET       ``/api/templates/{id}``       Single template
DELETE    ``/api/templates/{id}``       Delete a template
========  ============================  ====================================

``POST /api/image`` never answers with FastAPI's default error shape.  Every
failure, including schema validation, is returned as
``{"success": false, "error": ..., "metadata": {...}}`` with the status code
of the classified error.

Usage
-----
CLI (installed entry point)::

    thumbcraft

Direct invocation::

    python -m thumbcraft.api.main
"""

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path

from fastapi import APIRouter, FastAPI, HTTPException, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from thumbcraft import __version__
from thumbcraft.api import template_store
from thumbcraft.api.models import (
    GatewayMetadata,
    GenerationMetadata,
    ImageGenerationRequest,
    ImageGenerationResponse,
    Template,
    TemplateCreateRequest,
)
from thumbcraft.core.aspect_ratios import PROFILES, render_reference_images
from thumbcraft.core.config import ThumbcraftConfig, config
from thumbcraft.core.errors import (
    ConfigurationError,
    GenerationFailure,
    ThumbcraftError,
    ValidationError,
)
from thumbcraft.core.generator import ThumbnailGenerator
from thumbcraft.core.prompt_builder import ArtDirection
from thumbcraft.core.provider import GeminiImageProvider, ImageProvider

logger = logging.getLogger(__name__)

SERVICE_NAME = "thumbcraft-image-generator"
SUPPORTED_FORMATS = ["jpeg", "png"]
CAPABILITIES = [
    "text-to-image",
    "image-to-image",
    "seed-control",
    "dimension-control",
    "templates",
]

router = APIRouter()


# ---------------------------------------------------------------------------
# Metadata helpers.
# ---------------------------------------------------------------------------


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _elapsed_ms(started: float) -> int:
    return int(round((time.perf_counter() - started) * 1000))


def _partial_metadata(
    *,
    prompt: str,
    aspect_ratio: str | None,
    seed: int | None,
    request_id: str,
    latency: int,
) -> dict:
    """Build the metadata attached to a failure envelope.

    Dimensions are included whenever the aspect ratio resolves to a profile.
    """
    profile = PROFILES.get(aspect_ratio) if aspect_ratio else None
    metadata = GenerationMetadata(
        prompt=prompt,
        width=profile.width if profile else None,
        height=profile.height if profile else None,
        aspect_ratio=profile.ratio if profile else None,
        platform=profile.platform if profile else None,
        seed=seed,
        generated_at=_now_iso(),
        gateway_metadata=GatewayMetadata(request_id=request_id, latency=latency),
    )
    return metadata.model_dump(by_alias=True, exclude_none=True)


def _failure_response(exc: Exception, metadata: dict) -> JSONResponse:
    failure = GenerationFailure.from_exception(exc, metadata)
    return JSONResponse(status_code=failure.status_code, content=failure.to_response())


def _stored_template(entry: dict) -> Template:
    """Validate a template entry read from ``templates.json``.

    Raises:
        ConfigurationError: If the stored entry does not match the template schema.
    """
    try:
        return Template.model_validate(entry)
    except PydanticValidationError as e:
        logger.warning(f"Stored template {entry.get('id')} is invalid: {e}")
        raise ConfigurationError(f"Template {entry.get('id')} is invalid") from e


def _resolve_art_direction(
    payload: ImageGenerationRequest, templates_path: Path
) -> ArtDirection | None:
    """Merge the request's own hints over those of the referenced template.

    Raises:
        ValidationError: If ``template_id`` does not name a saved template.
        ConfigurationError: If the saved template no longer validates.
    """
    own = ArtDirection(
        style=payload.style,
        color_scheme=payload.color_scheme,
        lighting=payload.lighting,
        composition=payload.composition,
        effects=tuple(payload.effects),
    )
    if payload.template_id is None:
        return None if own.is_empty() else own

    entry = template_store.find_template(templates_path, payload.template_id)
    if entry is None:
        raise ValidationError(f"Unknown template: {payload.template_id}")

    options = _stored_template(entry).options
    base = ArtDirection(
        style=options.style,
        color_scheme=options.color_scheme,
        lighting=options.lighting,
        composition=options.composition,
        effects=tuple(options.effects),
        custom_prompt=options.custom_prompt,
    )
    return base.overridden_by(own)


async def _validation_error_handler(request: Request, exc: RequestValidationError):
    """Return schema failures on ``/api/image`` as a 400 failure envelope.

    Other routes keep FastAPI's default 422 response.
    """
    if request.url.path != "/api/image":
        return await request_validation_exception_handler(request, exc)

    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ())[1:])
        messages.append(f"{location}: {error['msg']}" if location else error["msg"])

    body = exc.body if isinstance(exc.body, dict) else {}
    prompt = body.get("prompt")
    aspect_ratio = body.get("aspectRatio")
    metadata = _partial_metadata(
        prompt=prompt if isinstance(prompt, str) else "",
        aspect_ratio=aspect_ratio if isinstance(aspect_ratio, str) else None,
        seed=None,
        request_id=str(uuid.uuid4()),
        latency=0,
    )
    logger.info(f"Rejected generation request: {'; '.join(messages)}")
    return _failure_response(ValidationError(", ".join(messages)), metadata)


# ---------------------------------------------------------------------------
# Generation routes.
# ---------------------------------------------------------------------------


@router.post("/api/image")
async def generate_image(payload: ImageGenerationRequest, request: Request) -> JSONResponse:
    """Generate a thumbnail for the requested prompt and aspect ratio.

    This endpoint:

    1. Resolves art direction from the request and an optional template.
    2. Delegates to :class:`ThumbnailGenerator`, which anchors the output
       size with the blank reference image, attaches the user image, and
       calls the provider.
    3. Wraps the result, or the classified failure, in the response envelope.

    ``cacheEnabled``, ``outputFormat`` and ``outputQuality`` are accepted for
    client compatibility; they do not change the request sent to the model.

    Args:
        payload: Validated :class:`ImageGenerationRequest`.
        request: The incoming request (used to reach ``app.state``).

    Returns:
        200 with ``success``, ``imageUrl`` and ``metadata``, or a failure
        envelope with status 400, 429, 500, 503 or 504.
    """
    started = time.perf_counter()
    request_id = str(uuid.uuid4())
    settings: ThumbcraftConfig = request.app.state.settings
    generator: ThumbnailGenerator = request.app.state.generator

    try:
        art_direction = _resolve_art_direction(payload, settings.templates_path)
        result = await generator.generate(
            prompt=payload.prompt,
            aspect_ratio=payload.aspect_ratio,
            seed=payload.seed,
            user_image=payload.user_image,
            art_direction=art_direction,
            request_id=request_id,
        )
    except Exception as e:
        if isinstance(e, ThumbcraftError):
            logger.warning(f"[{request_id}] Generation failed ({e.error_type}): {e.message}")
        else:
            logger.exception(f"[{request_id}] Unexpected generation error")
        return _failure_response(
            e,
            _partial_metadata(
                prompt=payload.prompt,
                aspect_ratio=payload.aspect_ratio,
                seed=payload.seed,
                request_id=request_id,
                latency=_elapsed_ms(started),
            ),
        )

    response = ImageGenerationResponse(
        image_url=result.image_url,
        metadata=GenerationMetadata(
            prompt=result.prompt,
            width=result.width,
            height=result.height,
            aspect_ratio=result.aspect_ratio,
            platform=result.platform,
            seed=result.seed,
            generated_at=result.generated_at.isoformat(),
            gateway_metadata=GatewayMetadata(
                request_id=result.request_id,
                latency=result.latency_ms,
            ),
        ),
    )
    return JSONResponse(content=response.model_dump(by_alias=True, exclude_none=True))


@router.get("/api/image")
async def image_service_status(request: Request) -> dict:
    """Report service health and generation capabilities.

    Returns:
        Dictionary with ``status``, ``service``, ``model``,
        ``providerConfigured``, ``timestamp``, ``supportedFormats``,
        ``aspectRatios`` (ratio, width, height, platform) and
        ``capabilities``.
    """
    settings: ThumbcraftConfig = request.app.state.settings
    provider: ImageProvider | None = request.app.state.provider
    return {
        "status": "healthy" if provider is not None else "degraded",
        "service": SERVICE_NAME,
        "version": __version__,
        "model": provider.model if provider is not None else settings.image_model,
        "providerConfigured": provider is not None,
        "timestamp": _now_iso(),
        "supportedFormats": SUPPORTED_FORMATS,
        "aspectRatios": [profile.to_dict() for profile in PROFILES.values()],
        "capabilities": CAPABILITIES,
    }


# ---------------------------------------------------------------------------
# Template routes.
# ---------------------------------------------------------------------------


@router.get("/api/templates")
async def list_templates(request: Request) -> dict:
    """Return all saved templates, newest first."""
    settings: ThumbcraftConfig = request.app.state.settings
    return {"templates": template_store.load_templates(settings.templates_path)}


@router.post("/api/templates", status_code=201)
async def create_template(req: TemplateCreateRequest, request: Request) -> dict:
    """Save a new template.

    Args:
        req: Validated :class:`TemplateCreateRequest` payload.

    Returns:
        The stored template.
    """
    settings: ThumbcraftConfig = request.app.state.settings
    entry = template_store.add_template(
        settings.templates_path,
        req.name,
        req.options.model_dump(by_alias=True),
    )
    return Template.model_validate(entry).model_dump(by_alias=True)


@router.get("/api/templates/{template_id}")
async def get_template(template_id: str, request: Request) -> dict:
    """Return a single template.

    Raises:
        HTTPException: 404 if the template is not found, 500 if the stored
            entry is invalid.
    """
    settings: ThumbcraftConfig = request.app.state.settings
    entry = template_store.find_template(settings.templates_path, template_id)
    if entry is None:
        raise HTTPException(status_code=404, detail="Template not found")
    try:
        template = _stored_template(entry)
    except ConfigurationError as e:
        raise HTTPException(status_code=500, detail=e.message) from e
    return template.model_dump(by_alias=True)


@router.delete("/api/templates/{template_id}")
async def delete_template(template_id: str, request: Request) -> dict:
    """Delete a template.

    Raises:
        HTTPException: 404 if the template is not found.
    """
    settings: ThumbcraftConfig = request.app.state.settings
    if not template_store.delete_template(settings.templates_path, template_id):
        raise HTTPException(status_code=404, detail="Template not found")
    return {"success": True, "deleted": template_id}


# ---------------------------------------------------------------------------
# Application factory.
# ---------------------------------------------------------------------------


def create_app(
    settings: ThumbcraftConfig | None = None,
    provider: ImageProvider | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        settings: Configuration to use.  Defaults to the global ``config``.
        provider: Provider to inject.  When omitted, the lifespan builds a
            :class:`GeminiImageProvider` if an API key is configured, and
            closes it on shutdown.  An injected provider is left open.

    Returns:
        The configured application.
    """
    settings = settings or config

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # --- Startup -------------------------------------------------------
        if settings.render_missing_references:
            render_reference_images(settings.reference_dir)

        active = provider
        owned = False
        if active is None and settings.gemini_api_key:
            active = GeminiImageProvider(settings)
            owned = True
        elif active is None:
            logger.warning("No Gemini API key configured; generation requests will fail.")

        app.state.settings = settings
        app.state.provider = active
        app.state.generator = ThumbnailGenerator(
            active,
            settings.reference_dir,
            max_user_image_bytes=settings.max_user_image_bytes,
        )
        logger.info("ThumbnailGenerator initialised.")

        yield

        # --- Shutdown ------------------------------------------------------
        if owned:
            await active.aclose()
            logger.info("Provider client closed on shutdown.")

    app = FastAPI(
        title="Thumbcraft",
        description="AI-assisted thumbnail generation API.",
        version=__version__,
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.include_router(router)
    return app


app = create_app()


# ---------------------------------------------------------------------------
# CLI entry point.
# ---------------------------------------------------------------------------


def main() -> None:
    """Launch the uvicorn ASGI server.

    Reads host, port and log level from :data:`~thumbcraft.core.config.config`
    (``THUMBCRAFT_SERVER_HOST``, ``THUMBCRAFT_SERVER_PORT``,
    ``THUMBCRAFT_LOG_LEVEL``).  Registered as the ``thumbcraft`` console
    script in ``pyproject.toml``.
    """
    import uvicorn

    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    uvicorn.run(
        "thumbcraft.api.main:app",
        host=config.server_host,
        port=config.server_port,
        log_level=config.log_level,
        reload=False,
    )


if __name__ == "__main__":
    main()
