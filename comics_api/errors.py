# comics_api/errors.py
"""
Error taxonomy for the page generation flow.

Every error carries the HTTP status it maps to and renders its own JSON body,
so routers raise and the exception handler in ``comics_api.main`` responds.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional


class ComicsError(Exception):
    status_code: int = 500

    def __init__(self, message: str, *, status_code: Optional[int] = None, detail: Optional[str] = None):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        # detail goes to the logs only
        self.detail = detail or message
        super().__init__(message)

    def payload(self) -> Dict[str, Any]:
        return {"error": self.message}


# -------- request / authorization --------

class Unauthenticated(ComicsError):
    status_code = 401

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class Forbidden(ComicsError):
    status_code = 403

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class NotFound(ComicsError):
    status_code = 404

    def __init__(self, resource: str, identifier: str = ""):
        super().__init__(f"{resource} not found", detail=f"{resource} not found: {identifier}")
        self.resource = resource


class ValidationError(ComicsError):
    status_code = 400


class Conflict(ComicsError):
    """Another writer claimed the same row first. Safe to retry."""
    status_code = 409

    def payload(self) -> Dict[str, Any]:
        return {"error": self.message, "retryable": True}


class RateLimited(ComicsError):
    status_code = 429

    def __init__(self, reset_at: datetime, *, limit: int = 1, window_days: int = 7, now: Optional[datetime] = None):
        now = now or datetime.now(timezone.utc)
        days_left = max(1, -(-int((reset_at - now).total_seconds()) // 86400))
        noun = "comic" if limit == 1 else "comics"
        period = "week" if window_days == 7 else f"{window_days} days"
        super().__init__(
            f"Free tier limit reached. You can generate {limit} {noun} per {period}. "
            f"Try again in {days_left} day(s), or provide your own API key."
        )
        self.reset_at = reset_at

    def payload(self) -> Dict[str, Any]:
        reset = self.reset_at.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")
        return {"error": self.message, "resetDate": reset, "isRateLimited": True}


# -------- generation path --------

class CreditExhausted(ComicsError):
    status_code = 402

    def __init__(self, message: str = "Insufficient API credits."):
        super().__init__(message)

    def payload(self) -> Dict[str, Any]:
        return {"error": self.message, "errorType": "credit_limit"}


class UpstreamError(ComicsError):
    """The image service answered with an error status; the status is passed through."""

    def __init__(self, status: Optional[int], message: str):
        super().__init__(message or f"Failed to generate image: {status}", status_code=status or 500)
        self.upstream_status = status

    def payload(self) -> Dict[str, Any]:
        return {"error": self.message, "errorType": "api_error"}


class EmptyResult(ComicsError):
    status_code = 502

    def __init__(self, message: str = "No image URL in response"):
        super().__init__(message)


class StorageError(ComicsError):
    status_code = 502

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(message, detail=detail)


class InternalError(ComicsError):
    status_code = 500

    def __init__(self, message: str = "Unknown error"):
        super().__init__(f"Internal server error: {message}")
