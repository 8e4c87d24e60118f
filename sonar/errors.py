"""
Error taxonomy for the Sonar search pipeline.

Every error carries the HTTP status it maps to when it escapes a request.
Upstream errors are normally recovered inside the pipeline and never reach
the caller.
"""
from typing import Optional


class SonarError(Exception):
    """Base class for all Sonar errors."""

    status_code: int = 500
    default_message: str = "Internal error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class AuthError(SonarError):
    """Caller is not authenticated."""
    status_code = 401
    default_message = "Authentication required"


class BadRequestError(SonarError):
    """Request payload is missing a required field."""
    status_code = 400
    default_message = "Bad request"


class NotFoundError(SonarError):
    """Brief or result is missing or not owned by the caller."""
    status_code = 404
    default_message = "Not found"


class RateLimitError(SonarError):
    """Caller exceeded its request quota."""
    status_code = 429
    default_message = "Rate limit exceeded. Please try again later."

    def __init__(self, retry_after: int, message: Optional[str] = None):
        super().__init__(message)
        self.retry_after = max(0, int(retry_after))


class UpstreamSearchError(SonarError):
    """A single search query failed."""
    status_code = 502
    default_message = "Search provider error"


class UpstreamProfileError(SonarError):
    """A profile-data fetch failed for one candidate."""
    status_code = 502
    default_message = "Profile source error"


class PersistenceError(SonarError):
    """A write or read against the store failed."""
    default_message = "Internal server error"
