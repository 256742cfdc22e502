"""Error taxonomy for thumbnail generation.

Every failure that can occur while building, submitting, or interpreting a
generation request is raised as a :class:`ThumbcraftError` subclass.  Each
class carries the HTTP status it maps to, so the route handler never has to
guess a status from message text.

========================  ======  =========================================
Exception                 Status  Raised when
========================  ======  =========================================
ValidationError           400     Malformed or out-of-range request input
ProviderRejected          400     The provider refused the request arguments
ProviderBlocked           400     The provider blocked the content
ProviderQuotaExceeded     429     Rate limit or quota exhausted
ConfigurationError        500     Missing API key or reference asset
ProviderEmptyResponse     500     The provider returned no image
UnknownError              500     Anything unclassified
ProviderUnavailable       503     Model missing or provider-side failure
ProviderTimeout           504     The provider call exceeded its timeout
========================  ======  =========================================

:class:`GenerationFailure` is the envelope the API layer builds from any of
these (or from an unexpected exception) before responding.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


class ThumbcraftError(Exception):
    """Base class for all classified generation errors."""

    status_code: int = 500
    error_type: str = "unknown_error"
    message_prefix: str = "Failed to generate image: "

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    @property
    def user_message(self) -> str:
        """Message shown to the client in the failure envelope."""
        return f"{self.message_prefix}{self.message}"


class ValidationError(ThumbcraftError):
    """Request input failed validation.  Raised before any provider call."""

    status_code = 400
    error_type = "validation_error"
    message_prefix = "Validation error: "


class ProviderRejected(ValidationError):
    """The provider answered ``400 INVALID_ARGUMENT`` for the submitted request."""

    error_type = "provider_rejected"
    message_prefix = "Failed to generate image: "


class ConfigurationError(ThumbcraftError):
    """Server-side setup is incomplete (API key, reference assets)."""

    status_code = 500
    error_type = "configuration_error"


class ProviderBlocked(ThumbcraftError):
    """The provider blocked the prompt or the output on policy grounds."""

    status_code = 400
    error_type = "provider_blocked"

    def __init__(self, message: str, reason: str | None = None) -> None:
        super().__init__(message)
        self.reason = reason


class ProviderEmptyResponse(ThumbcraftError):
    """The provider answered without an image payload."""

    status_code = 500
    error_type = "provider_empty_response"


class ProviderQuotaExceeded(ThumbcraftError):
    status_code = 429
    error_type = "provider_quota_exceeded"


class ProviderUnavailable(ThumbcraftError):
    status_code = 503
    error_type = "provider_unavailable"


class ProviderTimeout(ThumbcraftError):
    status_code = 504
    error_type = "provider_timeout"


class UnknownError(ThumbcraftError):
    status_code = 500
    error_type = "unknown_error"


@dataclass
class GenerationFailure:
    """Uniform failure envelope returned by ``POST /api/image``.

    Attributes:
        message: Human-readable error message.
        status_code: HTTP status inferred from the error class.
        error_type: Stable machine-readable identifier of the error class.
        metadata: Whatever request metadata was resolvable before the
            failure (prompt, dimensions, request id, latency).
    """

    message: str
    status_code: int
    error_type: str
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_exception(
        cls, exc: Exception, metadata: dict[str, Any] | None = None
    ) -> GenerationFailure:
        """Build a failure envelope from any exception.

        Classified errors keep their own status.  Anything else is reported
        as an :class:`UnknownError` with status 500.

        Args:
            exc: The exception raised while handling the request.
            metadata: Partial metadata to attach.

        Returns:
            The populated :class:`GenerationFailure`.
        """
        if not isinstance(exc, ThumbcraftError):
            exc = UnknownError(str(exc) or exc.__class__.__name__)
        return cls(
            message=exc.user_message,
            status_code=exc.status_code,
            error_type=exc.error_type,
            metadata=dict(metadata or {}),
        )

    def to_response(self) -> dict[str, Any]:
        """Serialise to the JSON body sent to the client."""
        return {
            "success": False,
            "error": self.message,
            "errorType": self.error_type,
            "metadata": self.metadata,
        }
