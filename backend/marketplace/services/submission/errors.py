"""Submission failure taxonomy.

Every error is terminal for the attempt that raised it: nothing here is
retried. ``reason`` is a stable machine code, ``message`` is shown to the user.
"""
from typing import Optional


class SubmissionError(Exception):
    """Base class for failures that end a submission in the error state."""

    default_reason = "submission_failed"

    def __init__(self, message: str = "", reason: Optional[str] = None):
        self.reason = reason or self.default_reason
        self.message = message
        super().__init__(message or self.reason)


class ValidationError(SubmissionError):
    """Input rejected locally - never reaches a remote service.

    Reasons: too_large, wrong_type, missing_field, invalid_number, invalid_choice.
    """

    default_reason = "invalid"

    def __init__(self, reason: str, message: str = "", field: Optional[str] = None):
        self.field = field
        super().__init__(message, reason)


class AuthenticationError(SubmissionError):
    """No active session. The user is sent to sign in, not retried."""

    default_reason = "not_authenticated"


class UploadError(SubmissionError):
    """Blob storage write failed. Earlier uploads in the same attempt stay orphaned."""

    default_reason = "upload_failed"

    def __init__(self, message: str = "", bucket: str = ""):
        self.bucket = bucket
        super().__init__(message)


class PersistenceError(SubmissionError):
    """Record insert/update failed, including the zero-rows-affected case."""

    default_reason = "persist_failed"
