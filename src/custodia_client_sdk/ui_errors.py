from __future__ import annotations

from dataclasses import dataclass

from .exceptions import ApiError, BusinessRejection, NetworkError, ParseError

_FALLBACK_MESSAGE = "Request failed"


@dataclass(frozen=True)
class UserFacingError:
    message: str
    technical_details: str | None = None
    trace_id: str | None = None


def _origin(exc: ApiError) -> str:
    if isinstance(exc, NetworkError):
        return f"{exc.code} (network)"
    if isinstance(exc, (ParseError, BusinessRejection)):
        return exc.code
    return f"{exc.code} (HTTP {exc.status_code})"


def to_user_facing_error(exc: ApiError) -> UserFacingError:
    """Split an SDK error into the line shown to the user and a technical footnote."""
    origin = _origin(exc)
    return UserFacingError(
        message=(exc.message or "").strip() or _FALLBACK_MESSAGE,
        technical_details=f"{origin}: {exc.details}" if exc.details else origin,
        trace_id=exc.trace_id,
    )
