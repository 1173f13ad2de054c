"""Tests for the submission controller state machine."""
import pytest

from fakes import InMemoryBlobStore, InMemoryRecordStore
from marketplace.services.catalog import CatalogView
from marketplace.services.identity import Identity, SessionContext
from marketplace.services.notifications import Notification
from marketplace.services.submission import (
    BOOK,
    DATASET,
    JOURNAL,
    AssetUploader,
    Attachment,
    AuthenticationError,
    PersistenceError,
    SubmissionController,
    SubmissionState,
    UploadError,
    ValidationError,
)
from marketplace.services.submission.validator import MB

S = SubmissionState

BOOK_FIELDS = {
    "title": "Intro to Systems",
    "author": "A. Engineer",
    "publisher": "Dhara Publications",
}


def _image(name="cover.png", size=1024) -> Attachment:
    return Attachment(name=name, size=size, mime_type="image/png", data=b"x" * min(size, 16))


def _controller(kind, session, record_store, uploader, notifier, **kwargs) -> SubmissionController:
    return SubmissionController(kind, session, record_store, uploader, notifier, **kwargs)


@pytest.mark.asyncio
async def test_book_without_attachments_inserts_once(session, record_store, uploader, notifier, blob_store):
    controller = _controller(BOOK, session, record_store, uploader, notifier)

    outcome = await controller.submit(BOOK_FIELDS)

    assert outcome.ok
    assert outcome.message == "Book uploaded successfully!"
    assert outcome.redirect_to == "/dashboard"
    assert blob_store.uploads == []
    assert record_store.calls == [("insert", "books")]
    row = record_store.tables["books"][0]
    assert row["cover_image_url"] is None
    assert row["thumbnail_url"] is None
    assert row["user_id"] == "alice"
    assert notifier.notifications == [Notification("success", "Book uploaded successfully!")]
    assert controller.history == [S.IDLE, S.VALIDATING, S.UPLOADING, S.COMPOSING, S.PERSISTING, S.DONE]


@pytest.mark.asyncio
async def test_oversized_cover_is_rejected_before_any_remote_call(
    session, record_store, uploader, notifier, blob_store,
):
    controller = _controller(BOOK, session, record_store, uploader, notifier)

    outcome = await controller.submit(BOOK_FIELDS, {"cover_image": _image(size=6 * MB)})

    assert outcome.state is S.ERROR
    assert isinstance(outcome.error, ValidationError)
    assert outcome.error.reason == "too_large"
    assert outcome.message == "File size must be less than 5MB"
    assert blob_store.uploads == []
    assert record_store.calls == []
    assert notifier.notifications == [Notification("error", "File size must be less than 5MB")]


@pytest.mark.asyncio
async def test_non_image_thumbnail_is_wrong_type(session, record_store, uploader, notifier):
    pdf = Attachment(name="paper.pdf", size=1000, mime_type="application/pdf")
    controller = _controller(BOOK, session, record_store, uploader, notifier)

    outcome = await controller.submit(BOOK_FIELDS, {"thumbnail": pdf})

    assert outcome.error.reason == "wrong_type"
    assert outcome.message == "Please select a valid image file"
    assert record_store.calls == []


@pytest.mark.asyncio
async def test_unauthenticated_submission_redirects_to_sign_in(
    anonymous_session, record_store, uploader, notifier, blob_store,
):
    controller = _controller(BOOK, anonymous_session, record_store, uploader, notifier)

    outcome = await controller.submit(BOOK_FIELDS, {"cover_image": _image()})

    assert isinstance(outcome.error, AuthenticationError)
    assert outcome.message == "Not authenticated"
    assert outcome.redirect_to == "/auth"
    assert blob_store.uploads == []
    assert record_store.calls == []


@pytest.mark.asyncio
async def test_missing_required_field_fails_validation(session, record_store, uploader, notifier):
    controller = _controller(BOOK, session, record_store, uploader, notifier)

    outcome = await controller.submit({"title": "No author", "publisher": "Dhara Publications"})

    assert outcome.error.reason == "missing_field"
    assert outcome.error.field == "author"
    assert controller.history == [S.IDLE, S.VALIDATING, S.ERROR]


@pytest.mark.asyncio
async def test_uploads_run_in_slot_order_then_insert(session, record_store, uploader, notifier, blob_store):
    controller = _controller(BOOK, session, record_store, uploader, notifier)

    outcome = await controller.submit(
        BOOK_FIELDS, {"thumbnail": _image("t.jpg"), "cover_image": _image("c.png")},
    )

    assert outcome.ok
    assert blob_store.uploads == [
        ("book-covers", "alice-1700000000000-cover.png"),
        ("thumbnails", "alice-1700000000001-thumb.jpg"),
    ]
    row = record_store.tables["books"][0]
    assert row["cover_image_url"] == "https://cdn.test/book-covers/alice-1700000000000-cover.png"
    assert row["thumbnail_url"] == "https://cdn.test/thumbnails/alice-1700000000001-thumb.jpg"
    assert outcome.uploaded_urls == [row["cover_image_url"], row["thumbnail_url"]]


@pytest.mark.asyncio
async def test_second_upload_failure_aborts_and_orphans_first(session, record_store, notifier):
    blob_store = InMemoryBlobStore(fail_buckets=("thumbnails",))
    uploader = AssetUploader(blob_store, clock=lambda: 1700000000.0)
    controller = _controller(BOOK, session, record_store, uploader, notifier)

    outcome = await controller.submit(
        BOOK_FIELDS, {"cover_image": _image("c.png"), "thumbnail": _image("t.png")},
    )

    assert isinstance(outcome.error, UploadError)
    assert outcome.message == "Storage service unavailable"
    assert list(blob_store.objects) == [("book-covers", "alice-1700000000000-cover.png")]
    assert outcome.uploaded_urls == ["https://cdn.test/book-covers/alice-1700000000000-cover.png"]
    assert record_store.calls == []
    assert controller.history[-2:] == [S.UPLOADING, S.ERROR]


@pytest.mark.asyncio
async def test_insert_failure_is_reported_as_persistence_error(session, uploader, notifier):
    record_store = InMemoryRecordStore(fail_insert="duplicate key value")
    controller = _controller(BOOK, session, record_store, uploader, notifier)

    outcome = await controller.submit(BOOK_FIELDS)

    assert isinstance(outcome.error, PersistenceError)
    assert outcome.error.reason == "persist_failed"
    assert outcome.message == "duplicate key value"
    assert notifier.notifications[-1] == Notification("error", "duplicate key value")


@pytest.mark.asyncio
async def test_rejected_insert_after_cover_upload_leaves_orphan_and_no_record(
    session, uploader, notifier, blob_store,
):
    record_store = InMemoryRecordStore(fail_insert="new row violates row-level security policy")
    controller = _controller(BOOK, session, record_store, uploader, notifier)

    outcome = await controller.submit(BOOK_FIELDS, {"cover_image": _image("c.png")})

    assert outcome.state is S.ERROR
    assert controller.history[-2:] == [S.PERSISTING, S.ERROR]
    assert list(blob_store.objects) == [("book-covers", "alice-1700000000000-cover.png")]
    async with CatalogView(session, record_store) as view:
        await view.load("dhara-publications")
    assert view.records == ()
    assert notifier.notifications[-1].level == "error"


@pytest.mark.asyncio
async def test_loading_is_set_during_submission_and_cleared_after(session, record_store, uploader, notifier):
    controller = _controller(BOOK, session, record_store, uploader, notifier)
    seen = []
    record_store.observer = lambda: seen.append(controller.loading)

    await controller.submit(BOOK_FIELDS)

    assert seen == [True]
    assert controller.loading is False


@pytest.mark.asyncio
async def test_loading_is_cleared_after_failure(session, uploader, notifier):
    controller = _controller(BOOK, session, InMemoryRecordStore(fail_insert="boom"), uploader, notifier)

    outcome = await controller.submit(BOOK_FIELDS)

    assert not outcome.ok
    assert controller.loading is False


@pytest.mark.asyncio
async def test_origin_publisher_redirects_back_to_catalog(session, record_store, uploader, notifier):
    controller = _controller(BOOK, session, record_store, uploader, notifier, origin_publisher="yar-tech")

    outcome = await controller.submit(BOOK_FIELDS)

    assert outcome.redirect_to == "/books/yar-tech"


@pytest.mark.asyncio
async def test_unknown_origin_publisher_falls_back_to_dashboard(session, record_store, uploader, notifier):
    controller = _controller(BOOK, session, record_store, uploader, notifier, origin_publisher="nope")

    outcome = await controller.submit(BOOK_FIELDS)

    assert outcome.redirect_to == "/dashboard"


@pytest.mark.asyncio
async def test_journal_with_thumbnail_applies_defaults(session, record_store, uploader, notifier, blob_store):
    fields = {"title": "On Graphs", "authors": "A. One, B. Two", "journal_name": "J. Graphs", "keywords_list": ""}
    controller = _controller(JOURNAL, session, record_store, uploader, notifier)

    outcome = await controller.submit(fields, {"thumbnail": _image("j.png")})

    assert outcome.message == "Journal uploaded successfully!"
    assert blob_store.uploads == [("thumbnails", "alice-1700000000000-journal.png")]
    row = record_store.tables["journals"][0]
    assert row["authors"] == ["A. One", "B. Two"]
    assert row["keywords_list"] is None
    assert row["citations_count"] == 0
    assert row["open_access"] is False
    assert row["peer_reviewed"] is True


@pytest.mark.asyncio
async def test_dataset_file_is_stored_without_tag(session, record_store, uploader, notifier, blob_store):
    data = Attachment.from_bytes("rain.csv", b"day,mm\n1,3\n", "text/csv")
    controller = _controller(DATASET, session, record_store, uploader, notifier)

    outcome = await controller.submit({"title": "Rainfall", "description": "Daily"}, {"dataset_file": data})

    assert outcome.ok
    assert blob_store.uploads == [("dataset-files", "alice-1700000000000.csv")]
    row = record_store.tables["datasets"][0]
    assert row["dataset_url"] == "https://cdn.test/dataset-files/alice-1700000000000.csv"
    assert row["access_level"] == "Public"


@pytest.mark.asyncio
async def test_dataset_file_with_unlisted_extension_is_rejected(session, record_store, uploader, notifier):
    data = Attachment.from_bytes("notes.docx", b"...", "application/msword")
    controller = _controller(DATASET, session, record_store, uploader, notifier)

    outcome = await controller.submit({"title": "Rainfall", "description": "Daily"}, {"dataset_file": data})

    assert outcome.error.reason == "wrong_type"
    assert outcome.message == "Accepted formats: CSV, JSON, XLSX, HDF5, ZIP"


def test_only_books_can_be_edited(session, record_store, uploader, notifier):
    with pytest.raises(ValueError):
        _controller(JOURNAL, session, record_store, uploader, notifier, existing_id="123")


class TestEditBook:
    @pytest.fixture
    def existing(self, record_store: InMemoryRecordStore) -> dict:
        return record_store.seed(
            "books",
            **BOOK_FIELDS,
            isbn="978-0",
            publication_year=2024,
            language="English",
            cover_image_url="https://cdn.test/book-covers/old.png",
            thumbnail_url=None,
            user_id="alice",
        )

    @pytest.mark.asyncio
    async def test_edit_updates_only_owned_row(self, existing, session, record_store, uploader, notifier):
        controller = _controller(BOOK, session, record_store, uploader, notifier, existing_id=existing["id"])

        outcome = await controller.submit({"title": "Intro to Systems, 2nd ed."})

        assert outcome.ok
        assert outcome.message == "Book updated successfully!"
        assert record_store.calls == [("select", "books"), ("update", "books")]
        row = record_store.tables["books"][0]
        assert row["title"] == "Intro to Systems, 2nd ed."
        assert row["isbn"] == "978-0"
        assert row["publication_year"] == 2024
        assert row["cover_image_url"] == "https://cdn.test/book-covers/old.png"

    @pytest.mark.asyncio
    async def test_replacing_cover_keeps_other_asset_urls(
        self, existing, session, record_store, uploader, notifier,
    ):
        controller = _controller(BOOK, session, record_store, uploader, notifier, existing_id=existing["id"])

        await controller.submit({}, {"cover_image": _image("new.png")})

        row = record_store.tables["books"][0]
        assert row["cover_image_url"] == "https://cdn.test/book-covers/alice-1700000000000-cover.png"
        assert row["thumbnail_url"] is None

    @pytest.mark.asyncio
    async def test_resubmitting_same_values_is_idempotent(self, existing, session, record_store, uploader, notifier):
        first = await _controller(
            BOOK, session, record_store, uploader, notifier, existing_id=existing["id"],
        ).submit({"description": "Systems for beginners"})
        second = await _controller(
            BOOK, session, record_store, uploader, notifier, existing_id=existing["id"],
        ).submit({"description": "Systems for beginners"})

        assert first.record == second.record
        assert len(record_store.tables["books"]) == 1

    @pytest.mark.asyncio
    async def test_edit_by_another_user_affects_no_rows(self, existing, record_store, uploader, notifier):
        bob = SessionContext(Identity(user_id="bob"))
        controller = _controller(BOOK, bob, record_store, uploader, notifier, existing_id=existing["id"])

        outcome = await controller.submit({"title": "Hijacked"})

        assert isinstance(outcome.error, PersistenceError)
        assert outcome.error.reason == "no_rows_affected"
        assert record_store.tables["books"][0]["title"] == "Intro to Systems"

    @pytest.mark.asyncio
    async def test_denied_update_is_an_error_not_a_success(self, existing, session, uploader, notifier):
        record_store = InMemoryRecordStore(deny_updates=True)
        record_store.tables["books"].append(dict(existing))
        controller = _controller(BOOK, session, record_store, uploader, notifier, existing_id=existing["id"])

        outcome = await controller.submit({"title": "New title"})

        assert not outcome.ok
        assert outcome.error.reason == "no_rows_affected"
        assert all(n.level == "error" for n in notifier.notifications)

    @pytest.mark.asyncio
    async def test_editing_missing_book_is_not_found(self, session, record_store, uploader, notifier):
        controller = _controller(BOOK, session, record_store, uploader, notifier, existing_id="missing")

        outcome = await controller.submit({"title": "Ghost"})

        assert outcome.error.reason == "not_found"
        assert outcome.message == "Book not found"
        assert record_store.calls == [("select", "books")]
