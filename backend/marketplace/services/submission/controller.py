"""Submission controller: validate -> upload assets -> compose -> persist.

One controller handles both create and edit. Passing ``existing_id`` switches
the final write from insert to an owner-scoped update and pre-fills any field
the form left out from the stored record.

States::

    idle -> validating -> uploading -> composing -> persisting -> done
                 \\             \\                       \\
                  +-------------+-----------------------+--> error

Uploads run one at a time in slot order and the first failure ends the
attempt. Objects uploaded before a later failure are left in storage.
"""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Optional

from marketplace.services.identity import Identity, SessionContext
from marketplace.services.notifications import Notifier
from marketplace.services.publishers import get_publisher
from marketplace.services.record_store import RecordStore, RecordStoreError
from marketplace.services.submission.composer import check_fields, compose, to_form_value
from marketplace.services.submission.errors import (
    AuthenticationError,
    PersistenceError,
    SubmissionError,
    ValidationError,
)
from marketplace.services.submission.kinds import RecordKind
from marketplace.services.submission.uploader import AssetUploader
from marketplace.services.submission.validator import (
    AssetVerdict,
    Attachment,
    rejection_message,
    validate_attachment,
)

logger = logging.getLogger(__name__)

DASHBOARD_PATH = "/dashboard"
SIGN_IN_PATH = "/auth"


class SubmissionState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    UPLOADING = "uploading"
    COMPOSING = "composing"
    PERSISTING = "persisting"
    DONE = "done"
    ERROR = "error"


@dataclass
class SubmissionOutcome:
    state: SubmissionState
    message: str
    record: Optional[dict] = None
    redirect_to: Optional[str] = None
    error: Optional[SubmissionError] = None
    uploaded_urls: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.state is SubmissionState.DONE


class SubmissionController:
    def __init__(
        self,
        kind: RecordKind,
        session: SessionContext,
        record_store: RecordStore,
        uploader: AssetUploader,
        notifier: Notifier,
        existing_id: Optional[str] = None,
        origin_publisher: Optional[str] = None,
    ):
        if existing_id is not None and not kind.editable:
            raise ValueError(f"{kind.label} records cannot be edited")
        self.kind = kind
        self.session = session
        self.record_store = record_store
        self.uploader = uploader
        self.notifier = notifier
        self.existing_id = existing_id
        self.origin_publisher = origin_publisher

        self.state = SubmissionState.IDLE
        self.history: list[SubmissionState] = [SubmissionState.IDLE]
        self.loading = False

    @property
    def is_edit(self) -> bool:
        return self.existing_id is not None

    def _transition(self, state: SubmissionState) -> None:
        logger.debug(f"{self.kind.name} submission: {self.state.value} -> {state.value}")
        self.state = state
        self.history.append(state)

    async def submit(
        self, fields: Mapping[str, str], attachments: Mapping[str, Attachment] | None = None,
    ) -> SubmissionOutcome:
        """Run one submission attempt to completion. Never leaves ``loading`` set."""
        attachments = {k: v for k, v in (attachments or {}).items() if v is not None}
        uploaded: list[str] = []
        self.loading = True
        try:
            self._transition(SubmissionState.VALIDATING)
            self._validate_attachments(attachments)
            owner = self._require_owner()
            existing = await self._load_existing(owner) if self.is_edit else None
            form = self._prefill(fields, existing)
            check_fields(self.kind, form)

            self._transition(SubmissionState.UPLOADING)
            asset_urls = await self._upload_all(attachments, owner, uploaded)

            self._transition(SubmissionState.COMPOSING)
            if existing is not None:
                for slot in self.kind.assets:
                    asset_urls.setdefault(slot.url_field, existing.get(slot.url_field))
            payload = compose(self.kind, form, asset_urls, owner.user_id)

            self._transition(SubmissionState.PERSISTING)
            record = await self._persist(payload, owner)
        except SubmissionError as e:
            self._transition(SubmissionState.ERROR)
            message = e.message or self._fallback_message()
            logger.info(f"{self.kind.name} submission failed ({e.reason}): {message}")
            self.notifier.error(message)
            return SubmissionOutcome(
                state=self.state,
                message=message,
                redirect_to=SIGN_IN_PATH if isinstance(e, AuthenticationError) else None,
                error=e,
                uploaded_urls=uploaded,
            )
        finally:
            self.loading = False

        self._transition(SubmissionState.DONE)
        verb = "updated" if self.is_edit else "uploaded"
        message = f"{self.kind.label} {verb} successfully!"
        self.notifier.success(message)
        return SubmissionOutcome(
            state=self.state,
            message=message,
            record=record,
            redirect_to=self._redirect_path(),
            uploaded_urls=uploaded,
        )

    def _validate_attachments(self, attachments: Mapping[str, Attachment]) -> None:
        for slot in self.kind.assets:
            attachment = attachments.get(slot.name)
            if attachment is None:
                continue
            rule = slot.rule()
            verdict = validate_attachment(attachment, rule)
            if verdict is not AssetVerdict.ACCEPTED:
                raise ValidationError(verdict.value, rejection_message(verdict, rule), slot.name)

    def _require_owner(self) -> Identity:
        # Read once per submission; later session changes do not affect this attempt
        identity = self.session.identity
        if identity is None:
            raise AuthenticationError("Not authenticated")
        return identity

    async def _load_existing(self, owner: Identity) -> dict:
        try:
            rows = await self.record_store.select(self.kind.table, {"id": self.existing_id})
        except RecordStoreError as e:
            raise PersistenceError(e.message) from e
        if not rows:
            raise PersistenceError(f"{self.kind.label} not found", "not_found")
        return rows[0]

    def _prefill(self, fields: Mapping[str, str], existing: Optional[dict]) -> dict[str, str]:
        form = {k: v for k, v in fields.items() if isinstance(v, str)}
        if existing is not None:
            for spec in self.kind.fields:
                if spec.name not in form:
                    form[spec.name] = to_form_value(existing.get(spec.name))
        return form

    async def _upload_all(
        self, attachments: Mapping[str, Attachment], owner: Identity, uploaded: list[str],
    ) -> dict[str, Optional[str]]:
        urls: dict[str, Optional[str]] = {}
        for slot in self.kind.assets:
            attachment = attachments.get(slot.name)
            if attachment is None:
                continue
            url = await self.uploader.upload(attachment, slot.bucket, owner.user_id, slot.key_tag)
            uploaded.append(url)
            urls[slot.url_field] = url
        return urls

    async def _persist(self, payload: dict, owner: Identity) -> dict:
        try:
            if self.is_edit:
                rows = await self.record_store.update(
                    self.kind.table, payload, {"id": self.existing_id, "user_id": owner.user_id},
                )
            else:
                rows = await self.record_store.insert(self.kind.table, payload)
        except RecordStoreError as e:
            raise PersistenceError(e.message) from e
        if not rows:
            raise PersistenceError(
                f"{self.kind.label} was not saved. You may not have permission to change it.",
                "no_rows_affected",
            )
        return rows[0]

    def _redirect_path(self) -> str:
        publisher = get_publisher(self.origin_publisher)
        if publisher is not None:
            return f"/books/{publisher.slug}"
        return DASHBOARD_PATH

    def _fallback_message(self) -> str:
        verb = "update" if self.is_edit else "upload"
        return f"Failed to {verb} {self.kind.name}"
