"""
Trip Journal SDK - High-level client with nice ergonomics.

This layer provides a clean, typed interface for the journal backend.
Built on top of the core APIClient.
"""

import builtins
from collections.abc import Callable
from typing import Any, Generic, Protocol, TypeVar

import httpx

from trip_journal.core.client import APIClient, EncodingError
from trip_journal.core.credentials import KeyringCredentialStore
from trip_journal.core.session import TokenSession
from trip_journal.core.types import (
    AuthToken,
    Event,
    EventCreate,
    EventUpdate,
    Media,
    MediaCreate,
    Trip,
    TripCreate,
    TripUpdate,
)


class Payload(Protocol):
    """A request DTO that serializes itself to wire JSON."""

    def to_dict(self) -> dict[str, Any]: ...


EntityT = TypeVar("EntityT")
CreateT = TypeVar("CreateT", bound=Payload)
UpdateT = TypeVar("UpdateT", bound=Payload)


class Session(Protocol):
    """What the SDK needs from a token holder."""

    @property
    def access_token(self) -> str | None: ...

    @property
    def is_authenticated(self) -> bool: ...

    def set_token(self, token: AuthToken) -> None: ...

    def clear(self) -> None: ...

    def subscribe(self, callback: Callable[[bool], None]) -> Callable[[], None]: ...


class JournalClient:
    """
    High-level Trip Journal client with typed methods.

    Example:
        client = JournalClient()

        await client.auth.login("alice", "secret")
        trip = await client.trips.create(TripCreate("Paris", start, end))
        trips = await client.trips.list()
        client.auth.logout()

    """

    def __init__(
        self,
        session: Session | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        event_hooks: dict[str, builtins.list[Callable[..., Any]]] | None = None,
    ):
        """
        Initialize the journal client.

        Args:
            session: Token holder (defaults to a keyring-backed TokenSession)
            base_url: API base URL (or TRIP_JOURNAL_BASE_URL env var)
            timeout: Request timeout in seconds (or TRIP_JOURNAL_TIMEOUT env var)
            transport: Custom httpx transport
            event_hooks: httpx event hooks, e.g. for request logging

        """
        self.session = session if session is not None else TokenSession(KeyringCredentialStore())
        self._client = APIClient(
            session=self.session,
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            event_hooks=event_hooks,
        )

        # Sub-clients for each backend resource
        self.auth = AuthOperations(self._client, self.session)
        self.trips = UpdatableResourceOperations[Trip, TripCreate, TripUpdate](
            self._client, "/trips", Trip.from_dict
        )
        self.events = UpdatableResourceOperations[Event, EventCreate, EventUpdate](
            self._client, "/events", Event.from_dict
        )
        self.media = ResourceOperations[Media, MediaCreate](self._client, "/media", Media.from_dict)

    @property
    def base_url(self) -> str:
        return self._client.base_url

    @property
    def is_authenticated(self) -> bool:
        """Check whether a token is currently held."""
        return self.session.is_authenticated

    def subscribe(self, callback: Callable[[bool], None]) -> Callable[[], None]:
        """Observe authentication changes (see TokenSession.subscribe)."""
        return self.session.subscribe(callback)


# =============================================================================
# Auth Operations
# =============================================================================


class AuthOperations:
    """Registration, login and logout."""

    def __init__(self, client: APIClient, session: Session):
        self._client = client
        self._session = session

    async def register(self, username: str, password: str) -> AuthToken:
        """
        Create an account and sign in.

        Args:
            username: New account name
            password: New account password

        Returns:
            The issued AuthToken (also stored in the session)

        """
        token = await self._client.post(
            "/register",
            {"username": username, "password": password},
            parser=AuthToken.from_dict,
        )
        self._session.set_token(token)
        return token

    async def login(self, username: str, password: str) -> AuthToken:
        """
        Sign in with an OAuth2 password form.

        Args:
            username: Account name
            password: Account password

        Returns:
            The issued AuthToken (also stored in the session)

        """
        token = await self._client.post_form(
            "/token",
            {"username": username, "password": password},
            parser=AuthToken.from_dict,
        )
        self._session.set_token(token)
        return token

    def logout(self) -> None:
        """Forget the token locally; the backend is not contacted."""
        self._session.clear()


# =============================================================================
# Resource Operations
# =============================================================================


def _encode(request: Payload) -> dict[str, Any]:
    """Serialize a request DTO, raising EncodingError if its fields are malformed."""
    try:
        return request.to_dict()
    except (TypeError, ValueError, AttributeError) as e:
        raise EncodingError(f"Encoding error: {e}") from e


class ResourceOperations(Generic[EntityT, CreateT]):
    """Create, list, get and delete for one backend collection."""

    def __init__(self, client: APIClient, path: str, parser: Callable[[Any], EntityT]):
        self._client = client
        self._path = path.rstrip("/")
        self._parser = parser

    def _item_path(self, item_id: int | str) -> str:
        return f"{self._path}/{item_id}"

    async def create(self, request: CreateT) -> EntityT:
        """
        Create an item.

        Args:
            request: Create DTO (TripCreate, EventCreate, MediaCreate)

        Returns:
            The created item with its server-assigned id

        """
        return await self._client.post(self._path, _encode(request), parser=self._parser)

    async def list(self) -> builtins.list[EntityT]:
        """List all items in the collection."""
        return await self._client.get(self._path, parser=self._parse_list)

    async def get(self, item_id: int | str) -> EntityT:
        """Get an item by ID."""
        return await self._client.get(self._item_path(item_id), parser=self._parser)

    async def delete(self, item_id: int | str) -> None:
        """Delete an item by ID; the response body is ignored."""
        await self._client.delete(self._item_path(item_id))

    def _parse_list(self, data: Any) -> builtins.list[EntityT]:
        if not isinstance(data, builtins.list):
            raise TypeError(f"Expected a JSON array, got {type(data).__name__}")
        return [self._parser(item) for item in data]


class UpdatableResourceOperations(ResourceOperations[EntityT, CreateT], Generic[EntityT, CreateT, UpdateT]):
    """Resource operations plus full-replacement update."""

    async def update(self, item_id: int | str, request: UpdateT) -> EntityT:
        """
        Replace an item's mutable fields.

        Args:
            item_id: ID of the item to update
            request: Update DTO (TripUpdate, EventUpdate)

        Returns:
            The updated item

        """
        return await self._client.put(self._item_path(item_id), _encode(request), parser=self._parser)
