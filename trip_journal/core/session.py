"""
Token sessions: the in-memory mirror of the persisted auth token.

A session is created from its store at startup and pushes an
"is authenticated" flag to subscribers whenever the token is set or cleared.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable

from trip_journal.core.credentials import CredentialStore, PreferenceStore
from trip_journal.core.types import AuthToken

logger = logging.getLogger(__name__)

Subscriber = Callable[[bool], None]

PREFERENCE_TOKEN_KEY = "token"


class _Observable(ABC):
    """Subscriber list shared by both session holders."""

    def __init__(self) -> None:
        self._subscribers: list[Subscriber] = []

    @property
    @abstractmethod
    def is_authenticated(self) -> bool:
        """Whether a token is currently held."""

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """
        Register a callback for authentication changes.

        The callback is called immediately with the current state and again
        after every set/clear. Returns a function that cancels the subscription.
        """
        self._subscribers.append(callback)
        callback(self.is_authenticated)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self) -> None:
        state = self.is_authenticated
        for callback in list(self._subscribers):
            callback(state)


class TokenSession(_Observable):
    """
    Holds the current AuthToken and keeps the credential store in sync.

    Example:
        session = TokenSession(KeyringCredentialStore())
        session.subscribe(lambda authed: print("signed in" if authed else "signed out"))

    """

    def __init__(self, store: CredentialStore):
        super().__init__()
        self.store = store
        self._token = store.load()

    @property
    def token(self) -> AuthToken | None:
        return self._token

    @property
    def access_token(self) -> str | None:
        return self._token.access_token if self._token else None

    @property
    def is_authenticated(self) -> bool:
        return self._token is not None

    def set_token(self, token: AuthToken) -> None:
        """
        Persist a freshly issued token, then adopt it.

        If the store rejects the token the session is left unchanged and the
        store's error propagates.
        """
        self.store.save(token)
        self._token = token
        logger.info("Session authenticated")
        self._notify()

    def clear(self) -> None:
        """Forget the token in the store, then in memory."""
        self.store.delete()
        self._token = None
        logger.info("Session cleared")
        self._notify()


class PreferenceTokenHolder(_Observable):
    """
    Secondary session holder keeping a plain-text access token in preferences.

    Only the access token string is kept; the token type is assumed to be bearer.
    """

    def __init__(self, preferences: PreferenceStore):
        super().__init__()
        self.preferences = preferences
        self._access_token = preferences.get(PREFERENCE_TOKEN_KEY)

    @property
    def access_token(self) -> str | None:
        return self._access_token

    @access_token.setter
    def access_token(self, value: str | None) -> None:
        if value is None:
            self.preferences.remove(PREFERENCE_TOKEN_KEY)
        else:
            self.preferences.set(PREFERENCE_TOKEN_KEY, value)
        self._access_token = value
        self._notify()

    @property
    def is_authenticated(self) -> bool:
        return self._access_token is not None

    def set_token(self, token: AuthToken) -> None:
        self.access_token = token.access_token

    def clear(self) -> None:
        self.access_token = None

    def logout(self) -> None:
        self.clear()
