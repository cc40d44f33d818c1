"""Pytest configuration - loads .env and provides offline fixtures."""

from collections.abc import Callable
from pathlib import Path

import httpx
import pytest
from dotenv import load_dotenv

from trip_journal.core.credentials import KeyringCredentialStore
from trip_journal.core.session import TokenSession
from trip_journal.sdk import JournalClient

from .helpers import BASE_URL, InMemoryKeyring, Recorder

# Load .env from project root
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(env_path)


@pytest.fixture
def keyring_backend() -> InMemoryKeyring:
    return InMemoryKeyring()


@pytest.fixture
def store(keyring_backend: InMemoryKeyring) -> KeyringCredentialStore:
    return KeyringCredentialStore(service="trip_journal_test", backend=keyring_backend)


@pytest.fixture
def session(store: KeyringCredentialStore) -> TokenSession:
    return TokenSession(store)


@pytest.fixture
def make_client(session: TokenSession) -> Callable[..., tuple[JournalClient, Recorder]]:
    """Build a JournalClient whose HTTP traffic goes to ``handler``."""

    def factory(handler: Callable[[httpx.Request], httpx.Response]) -> tuple[JournalClient, Recorder]:
        recorder = Recorder(handler)
        client = JournalClient(
            session=session,
            base_url=BASE_URL,
            transport=httpx.MockTransport(recorder),
        )
        return client, recorder

    return factory
