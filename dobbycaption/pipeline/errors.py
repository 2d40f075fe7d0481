"""
Purpose:
- Error kinds for the caption pipeline.
- Hard errors (configuration, encoding, remote) stop a run; MalformedResponse is soft
  and only raised when settings.strict_responses is on.
"""

from __future__ import annotations
from typing import Optional

class CaptionPipelineError(Exception):
    """Base class; str(err) is what the user sees after 'Error: '."""

class ConfigurationError(CaptionPipelineError):
    """A required credential is missing. Raised before any network call."""

class EncodingFailure(CaptionPipelineError):
    """The image could not be read or is not an image."""

class RemoteServiceError(CaptionPipelineError):
    def __init__(self, message: str, *, service: str, status_code: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.service = service
        self.status_code = status_code
        self.body = body

class MalformedResponse(CaptionPipelineError):
    def __init__(self, message: str, *, service: str, payload: object = None):
        super().__init__(message)
        self.service = service
        self.payload = payload
