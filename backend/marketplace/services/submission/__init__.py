"""Book, journal and dataset submission pipeline."""
from marketplace.services.submission.controller import (
    SubmissionController,
    SubmissionOutcome,
    SubmissionState,
)
from marketplace.services.submission.errors import (
    AuthenticationError,
    PersistenceError,
    SubmissionError,
    UploadError,
    ValidationError,
)
from marketplace.services.submission.kinds import BOOK, DATASET, JOURNAL, KINDS, RecordKind
from marketplace.services.submission.uploader import AssetUploader
from marketplace.services.submission.validator import AssetRule, AssetVerdict, Attachment

__all__ = [
    "SubmissionController",
    "SubmissionOutcome",
    "SubmissionState",
    "SubmissionError",
    "ValidationError",
    "AuthenticationError",
    "UploadError",
    "PersistenceError",
    "RecordKind",
    "BOOK",
    "JOURNAL",
    "DATASET",
    "KINDS",
    "AssetUploader",
    "AssetRule",
    "AssetVerdict",
    "Attachment",
]
