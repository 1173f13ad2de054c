"""Submission API routes - multipart forms for books, journals and datasets."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic.alias_generators import to_snake
from starlette.datastructures import UploadFile

from marketplace.dependencies import get_notifier, get_record_store, get_session, get_uploader
from marketplace.schemas.book import BookResponse
from marketplace.schemas.dataset import DatasetResponse
from marketplace.schemas.journal import JournalResponse
from marketplace.schemas.submission import SubmissionErrorDetail, SubmissionResponse
from marketplace.services.identity import SessionContext
from marketplace.services.notifications import CollectingNotifier, Notifier
from marketplace.services.record_store import RecordStore
from marketplace.services.submission import (
    BOOK,
    DATASET,
    JOURNAL,
    AssetRule,
    AssetUploader,
    Attachment,
    AuthenticationError,
    PersistenceError,
    RecordKind,
    SubmissionController,
    SubmissionError,
    UploadError,
    ValidationError,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["submissions"])

_RESPONSE_MODELS = {
    BOOK.name: BookResponse,
    JOURNAL.name: JournalResponse,
    DATASET.name: DatasetResponse,
}


@router.post("/books", response_model=SubmissionResponse, status_code=201)
async def submit_book(
    request: Request,
    session: SessionContext = Depends(get_session),
    store: RecordStore = Depends(get_record_store),
    uploader: AssetUploader = Depends(get_uploader),
    notifier: Notifier = Depends(get_notifier),
):
    """Create a book, uploading its cover and thumbnail first."""
    return await _submit(BOOK, request, session, store, uploader, notifier)


@router.put("/books/{book_id}", response_model=SubmissionResponse)
async def edit_book(
    book_id: str,
    request: Request,
    session: SessionContext = Depends(get_session),
    store: RecordStore = Depends(get_record_store),
    uploader: AssetUploader = Depends(get_uploader),
    notifier: Notifier = Depends(get_notifier),
):
    """Edit a book. Omitted fields and files keep their stored values."""
    return await _submit(BOOK, request, session, store, uploader, notifier, existing_id=book_id)


@router.post("/journals", response_model=SubmissionResponse, status_code=201)
async def submit_journal(
    request: Request,
    session: SessionContext = Depends(get_session),
    store: RecordStore = Depends(get_record_store),
    uploader: AssetUploader = Depends(get_uploader),
    notifier: Notifier = Depends(get_notifier),
):
    """Submit a journal article with an optional thumbnail."""
    return await _submit(JOURNAL, request, session, store, uploader, notifier)


@router.post("/datasets", response_model=SubmissionResponse, status_code=201)
async def submit_dataset(
    request: Request,
    session: SessionContext = Depends(get_session),
    store: RecordStore = Depends(get_record_store),
    uploader: AssetUploader = Depends(get_uploader),
    notifier: Notifier = Depends(get_notifier),
):
    """Submit a dataset with an optional thumbnail and raw data file."""
    return await _submit(DATASET, request, session, store, uploader, notifier)


async def _submit(
    kind: RecordKind,
    request: Request,
    session: SessionContext,
    store: RecordStore,
    uploader: AssetUploader,
    notifier: Notifier,
    existing_id: Optional[str] = None,
) -> dict:
    fields, attachments = await _read_form(request, kind)
    origin_publisher = fields.pop("origin_publisher", None)

    controller = SubmissionController(
        kind, session, store, uploader, notifier,
        existing_id=existing_id,
        origin_publisher=origin_publisher,
    )
    outcome = await controller.submit(fields, attachments)

    if not outcome.ok:
        error = outcome.error
        detail = SubmissionErrorDetail(
            reason=error.reason,
            message=outcome.message,
            field=getattr(error, "field", None),
            redirect_to=outcome.redirect_to,
        )
        raise HTTPException(status_code=_status_for(error), detail=detail.model_dump(by_alias=True))

    notifications = notifier.notifications if isinstance(notifier, CollectingNotifier) else []
    return {
        "state": outcome.state.value,
        "message": outcome.message,
        "redirect_to": outcome.redirect_to,
        "record": _RESPONSE_MODELS[kind.name].model_validate(outcome.record),
        "notifications": [{"level": n.level, "message": n.message} for n in notifications],
    }


async def read_attachment(upload: UploadFile, rule: AssetRule) -> Attachment:
    """Read an uploaded file, never buffering more than the rule allows.

    A file whose declared size is already over the limit is not read at all;
    the validator rejects it on size alone.
    """
    size = upload.size
    if size is not None and size > rule.max_size_bytes:
        data = b""
    else:
        data = await upload.read(rule.max_size_bytes + 1)
    return Attachment(
        name=upload.filename,
        size=size if size is not None else len(data),
        mime_type=upload.content_type or "",
        data=data,
    )


async def _read_form(request: Request, kind: RecordKind) -> tuple[dict[str, str], dict[str, Attachment]]:
    """Split a multipart form into text fields and file attachments.

    Keys may be camelCase or snake_case. Empty file inputs and files for
    slots the kind does not have are ignored.
    """
    form = await request.form()
    fields: dict[str, str] = {}
    attachments: dict[str, Attachment] = {}
    for key, value in form.multi_items():
        name = to_snake(key)
        if isinstance(value, UploadFile):
            slot = kind.slot(name)
            if not value.filename or slot is None:
                continue
            attachments[name] = await read_attachment(value, slot.rule())
        else:
            fields[name] = value
    return fields, attachments


def _status_for(error: SubmissionError) -> int:
    if isinstance(error, ValidationError):
        return 422
    if isinstance(error, AuthenticationError):
        return 401
    if isinstance(error, UploadError):
        return 502
    if isinstance(error, PersistenceError):
        if error.reason == "not_found":
            return 404
        if error.reason == "no_rows_affected":
            return 403
        return 502
    return 400
