"""
Core types for the Trip Journal backend.

These dataclasses mirror the backend's JSON payloads. Attribute names match the
wire's snake_case keys; ``from_dict`` also accepts the camelCase spelling of a
key so payloads produced by camelCase clients decode the same way.
"""

import base64
import binascii
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

# =============================================================================
# Wire helpers
# =============================================================================


def camel_case(name: str) -> str:
    """Convert a snake_case key to camelCase (``start_date`` -> ``startDate``)."""
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def _get(data: dict[str, Any], key: str, default: Any = None) -> Any:
    """Read a wire key, falling back to its camelCase spelling."""
    if not isinstance(data, dict):
        raise TypeError(f"Expected a JSON object, got {type(data).__name__}")
    if key in data:
        return data[key]
    return data.get(camel_case(key), default)


def _require(data: dict[str, Any], key: str) -> Any:
    """Read a required wire key (snake_case or camelCase)."""
    if not isinstance(data, dict):
        raise TypeError(f"Expected a JSON object, got {type(data).__name__}")
    if key in data:
        return data[key]
    alias = camel_case(key)
    if alias in data:
        return data[alias]
    raise KeyError(key)


def format_datetime(value: datetime) -> str:
    """Format a datetime as ISO-8601 UTC text with whole seconds."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    text = value.astimezone(timezone.utc).isoformat(timespec="seconds")
    return text.replace("+00:00", "Z")


# Time part of an ISO-8601 string: clock, optional fraction, optional offset
_TIME_TAIL = re.compile(r"^(\d{2}:\d{2}(?::\d{2})?)(?:[.,](\d+))?(?:([+-])(\d{2}):?(\d{2}))?$")


def _normalize_iso(text: str) -> str:
    # datetime.fromisoformat on 3.10 only takes 3 or 6 fraction digits and HH:MM offsets
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    date_part, sep, time_part = text.partition("T")
    if not sep:
        date_part, sep, time_part = text.partition(" ")
    match = _TIME_TAIL.match(time_part) if sep else None
    if match is None:
        return text
    clock, fraction, sign, hours, minutes = match.groups()
    result = f"{date_part}{sep}{clock}"
    if fraction:
        result += "." + fraction[:6].ljust(6, "0")
    if sign:
        result += f"{sign}{hours}:{minutes}"
    return result


def parse_datetime(value: Any) -> datetime:
    """Parse ISO-8601 text; naive values are taken as UTC."""
    if not isinstance(value, str):
        raise TypeError(f"Expected an ISO-8601 string, got {type(value).__name__}")
    parsed = datetime.fromisoformat(_normalize_iso(value.strip()))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def encode_bytes(value: bytes) -> str:
    """Encode binary data as standard base64 text."""
    return base64.b64encode(value).decode("ascii")


def decode_bytes(value: Any) -> bytes:
    """Decode standard base64 text (raises ValueError on bad input)."""
    if not isinstance(value, str):
        raise TypeError(f"Expected base64 text, got {type(value).__name__}")
    try:
        return base64.b64decode(value, validate=True)
    except binascii.Error as e:
        raise ValueError(f"Invalid base64 data: {e}") from e


# =============================================================================
# Auth Types
# =============================================================================


@dataclass(frozen=True)
class AuthToken:
    """A bearer token issued by /register or /token."""

    access_token: str
    token_type: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AuthToken":
        """Create from API response dict."""
        access_token = _require(data, "access_token")
        token_type = _require(data, "token_type")
        if not isinstance(access_token, str) or not isinstance(token_type, str):
            raise TypeError("access_token and token_type must be strings")
        return cls(access_token=access_token, token_type=token_type)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for storage."""
        return {
            "access_token": self.access_token,
            "token_type": self.token_type,
        }


# =============================================================================
# Journal Types
# =============================================================================


@dataclass
class Location:
    """A point on the map, optionally with a human-readable address."""

    latitude: float
    longitude: float
    address: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Location":
        """Create from API response dict."""
        return cls(
            latitude=float(_require(data, "latitude")),
            longitude=float(_require(data, "longitude")),
            address=_get(data, "address"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for API request."""
        return {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "address": self.address,
        }


def _location_or_none(value: Any) -> Location | None:
    return Location.from_dict(value) if value is not None else None


@dataclass
class Media:
    """A media attachment on an event."""

    id: int
    event_id: int
    base64_data: bytes = b""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Media":
        """Create from API response dict."""
        return cls(
            id=_require(data, "id"),
            event_id=_require(data, "event_id"),
            base64_data=decode_bytes(_require(data, "base64_data")),
        )


@dataclass
class Event:
    """An event within a trip."""

    id: int
    trip_id: int
    name: str
    date: datetime
    note: str | None = None
    location: Location | None = None
    transition_from_previous: str | None = None
    media: list[Media] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Event":
        """Create from API response dict."""
        return cls(
            id=_require(data, "id"),
            trip_id=_require(data, "trip_id"),
            name=_require(data, "name"),
            date=parse_datetime(_require(data, "date")),
            note=_get(data, "note"),
            location=_location_or_none(_get(data, "location")),
            transition_from_previous=_get(data, "transition_from_previous"),
            media=[Media.from_dict(m) for m in _get(data, "media") or _get(data, "medias") or []],
        )


@dataclass
class Trip:
    """A trip with its ordered events."""

    id: int
    name: str
    start_date: datetime
    end_date: datetime
    events: list[Event] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Trip":
        """Create from API response dict."""
        return cls(
            id=_require(data, "id"),
            name=_require(data, "name"),
            start_date=parse_datetime(_require(data, "start_date")),
            end_date=parse_datetime(_require(data, "end_date")),
            events=[Event.from_dict(e) for e in _get(data, "events") or []],
        )


# =============================================================================
# Request Types
# =============================================================================


@dataclass
class TripCreate:
    """Payload for creating a trip."""

    name: str
    start_date: datetime
    end_date: datetime

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TripCreate":
        """Create from a request dict."""
        return cls(
            name=_require(data, "name"),
            start_date=parse_datetime(_require(data, "start_date")),
            end_date=parse_datetime(_require(data, "end_date")),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for API request."""
        return {
            "name": self.name,
            "start_date": format_datetime(self.start_date),
            "end_date": format_datetime(self.end_date),
        }


@dataclass
class TripUpdate(TripCreate):
    """Full replacement of a trip's mutable fields."""


@dataclass
class EventUpdate:
    """Full replacement of an event's mutable fields."""

    name: str
    date: datetime
    note: str | None = None
    location: Location | None = None
    transition_from_previous: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EventUpdate":
        """Create from a request dict."""
        return cls(
            name=_require(data, "name"),
            date=parse_datetime(_require(data, "date")),
            note=_get(data, "note"),
            location=_location_or_none(_get(data, "location")),
            transition_from_previous=_get(data, "transition_from_previous"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for API request."""
        return {
            "name": self.name,
            "note": self.note,
            "date": format_datetime(self.date),
            "location": self.location.to_dict() if self.location else None,
            "transition_from_previous": self.transition_from_previous,
        }


@dataclass
class EventCreate:
    """Payload for creating an event on a trip."""

    trip_id: int
    name: str
    date: datetime
    note: str | None = None
    location: Location | None = None
    transition_from_previous: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EventCreate":
        """Create from a request dict."""
        update = EventUpdate.from_dict(data)
        return cls(
            trip_id=_require(data, "trip_id"),
            name=update.name,
            date=update.date,
            note=update.note,
            location=update.location,
            transition_from_previous=update.transition_from_previous,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for API request."""
        body = EventUpdate(
            name=self.name,
            date=self.date,
            note=self.note,
            location=self.location,
            transition_from_previous=self.transition_from_previous,
        ).to_dict()
        return {"trip_id": self.trip_id, **body}


@dataclass
class MediaCreate:
    """Payload for attaching media to an event."""

    event_id: int
    base64_data: bytes

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MediaCreate":
        """Create from a request dict."""
        return cls(
            event_id=_require(data, "event_id"),
            base64_data=decode_bytes(_require(data, "base64_data")),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for API request."""
        return {
            "event_id": self.event_id,
            "base64_data": encode_bytes(self.base64_data),
        }
