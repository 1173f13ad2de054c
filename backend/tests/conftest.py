"""Global test fixtures."""

import os

# Settings are read when marketplace.config is first imported, so point them
# at throwaway backends before any test module imports the app.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("DATA_BACKEND", "local")
os.environ.setdefault("LOCAL_AUTH_TOKENS", "token-alice:alice,token-bob:bob")

import pytest

from fakes import InMemoryBlobStore, InMemoryRecordStore
from marketplace.services.identity import Identity, SessionContext
from marketplace.services.notifications import CollectingNotifier
from marketplace.services.submission import AssetUploader


@pytest.fixture
def record_store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture
def blob_store() -> InMemoryBlobStore:
    return InMemoryBlobStore()


@pytest.fixture
def uploader(blob_store: InMemoryBlobStore) -> AssetUploader:
    """Uploader with a clock that ticks one millisecond per call."""
    ticks = iter(range(1_700_000_000_000, 1_800_000_000_000))
    return AssetUploader(blob_store, clock=lambda: next(ticks) / 1000)


@pytest.fixture
def notifier() -> CollectingNotifier:
    return CollectingNotifier()


@pytest.fixture
def alice() -> Identity:
    return Identity(user_id="alice", email="alice@example.org", access_token="token-alice")


@pytest.fixture
def session(alice: Identity) -> SessionContext:
    return SessionContext(alice)


@pytest.fixture
def anonymous_session() -> SessionContext:
    return SessionContext()
