"""
Purpose:
- One exception family for the studio so routers can raise and a single
  handler can render {"ok": False, "error": ...} with the right status.
"""

from __future__ import annotations

class StudioError(Exception):
    status_code = 500
    default_message = "Studio error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

class InvalidImageError(StudioError):
    status_code = 400
    default_message = "Uploaded file is not a supported image"

class EmptyInstructionError(StudioError):
    status_code = 422
    default_message = "Instruction must not be empty"

class InvalidTransitionError(StudioError):
    status_code = 409
    default_message = "Action not allowed in the current state"

class RequestInFlightError(StudioError):
    status_code = 409
    default_message = "A request for this feature is already running"

class MissingCredentialsError(StudioError):
    status_code = 503
    default_message = "GEMINI_API_KEY is not configured"

class GenerationError(StudioError):
    """Transport or endpoint failure talking to the model (network, auth, quota)."""
    status_code = 502
    default_message = "Failed to edit image"

class NoImageReturnedError(GenerationError):
    default_message = "No image data returned from AI"
