"""Submission result schemas."""
from typing import Optional, Union
from marketplace.schemas.base import CamelModel
from marketplace.schemas.book import BookResponse
from marketplace.schemas.dataset import DatasetResponse
from marketplace.schemas.journal import JournalResponse


class NotificationResponse(CamelModel):
    level: str
    message: str


class SubmissionResponse(CamelModel):
    state: str
    message: str
    redirect_to: str
    record: Union[BookResponse, JournalResponse, DatasetResponse]
    notifications: list[NotificationResponse] = []


class SubmissionErrorDetail(CamelModel):
    reason: str
    message: str
    field: Optional[str] = None
    redirect_to: Optional[str] = None
