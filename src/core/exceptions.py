"""
Render Errors
=============

Error taxonomy for the render service. Every error carries the HTTP status it
maps to and the message placed in the response body.
"""

from typing import Optional


class RenderServiceError(Exception):
    """Base class for errors mapped onto a response envelope."""

    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    @property
    def public_message(self) -> str:
        """Message returned to the caller."""
        return self.message


class DescriptorValidationError(RenderServiceError):
    """Malformed or incomplete render descriptor."""

    status_code = 400


class MethodError(RenderServiceError):
    """Unsupported HTTP method."""

    status_code = 405


class NavigationError(RenderServiceError):
    """Target unreachable or did not finish loading in time."""

    status_code = 502

    @property
    def public_message(self) -> str:
        return "Failed to load page"


class ScriptError(RenderServiceError):
    """Descriptor script raised inside the page."""


class SelectorError(RenderServiceError):
    """Selector did not resolve to a visible element."""


class EngineFatalError(RenderServiceError):
    """Automation engine could not be started."""


class BatchRenderError(RenderServiceError):
    """A page in a zip batch failed; the whole batch is aborted."""

    def __init__(self, index: int, cause: Exception):
        detail = cause.public_message if isinstance(cause, RenderServiceError) else str(cause)
        super().__init__(f"Batch entry {index} failed: {detail}")
        self.index = index
        self.cause = cause


class CaptureError(RenderServiceError):
    """Screenshot or PDF generation failed after the page loaded."""
