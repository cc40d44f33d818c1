"""
Core layer - Raw types, HTTP client and credential handling.

This layer provides:
- Typed dataclasses matching the backend's JSON payloads
- Low-level async HTTP client with auth and error classification
- Credential stores and token sessions
"""

from trip_journal.core.client import (
    APIClient,
    APIError,
    DecodingError,
    EncodingError,
    HTTPError,
    InvalidResponseError,
    InvalidURLError,
    StorageError,
    TripJournalError,
    ValidationError,
)
from trip_journal.core.credentials import CredentialStore, KeyringCredentialStore, PreferenceStore
from trip_journal.core.session import PreferenceTokenHolder, TokenSession
from trip_journal.core.types import (
    AuthToken,
    Event,
    EventCreate,
    EventUpdate,
    Location,
    Media,
    MediaCreate,
    Trip,
    TripCreate,
    TripUpdate,
)

__all__ = [
    "APIClient",
    "APIError",
    "AuthToken",
    "CredentialStore",
    "DecodingError",
    "EncodingError",
    "Event",
    "EventCreate",
    "EventUpdate",
    "HTTPError",
    "InvalidResponseError",
    "InvalidURLError",
    "KeyringCredentialStore",
    "Location",
    "Media",
    "MediaCreate",
    "PreferenceStore",
    "PreferenceTokenHolder",
    "StorageError",
    "TokenSession",
    "Trip",
    "TripCreate",
    "TripJournalError",
    "TripUpdate",
    "ValidationError",
]
