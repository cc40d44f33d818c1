"""Tests for payload types and wire helpers."""

from datetime import datetime, timedelta, timezone

import pytest

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
    camel_case,
    format_datetime,
    parse_datetime,
)

JAN_1 = datetime(2024, 1, 1, tzinfo=timezone.utc)
JAN_5 = datetime(2024, 1, 5, tzinfo=timezone.utc)


class TestDatetimes:
    def test_utc_formats_with_z(self):
        assert format_datetime(JAN_1) == "2024-01-01T00:00:00Z"

    def test_offset_is_converted_to_utc(self):
        paris = timezone(timedelta(hours=1))
        assert format_datetime(datetime(2024, 1, 1, 1, 0, tzinfo=paris)) == "2024-01-01T00:00:00Z"

    def test_naive_is_treated_as_utc(self):
        assert format_datetime(datetime(2024, 1, 1)) == "2024-01-01T00:00:00Z"

    def test_microseconds_are_dropped(self):
        assert format_datetime(JAN_1.replace(microsecond=123456)) == "2024-01-01T00:00:00Z"

    @pytest.mark.parametrize(
        "text",
        ["2024-01-01T00:00:00Z", "2024-01-01T00:00:00+00:00", "2024-01-01T00:00:00", "2024-01-01T01:00:00+01:00"],
    )
    def test_parse_variants(self, text):
        assert parse_datetime(text) == JAN_1

    def test_parse_fractional_seconds(self):
        assert parse_datetime("2024-01-01T00:00:00.250Z") == JAN_1.replace(microsecond=250000)

    @pytest.mark.parametrize(
        "text, microsecond",
        [
            ("2024-01-01T00:00:00.5Z", 500000),
            ("2024-01-01T00:00:00.12Z", 120000),
            ("2024-01-01T00:00:00.1234Z", 123400),
            ("2024-01-01T00:00:00.123456789Z", 123456),
        ],
    )
    def test_parse_any_fraction_length(self, text, microsecond):
        assert parse_datetime(text) == JAN_1.replace(microsecond=microsecond)

    @pytest.mark.parametrize("text", ["2024-01-01T00:00:00+0000", "2024-01-01T01:00:00+0100", "2024-01-01 00:00:00Z"])
    def test_parse_compact_offsets_and_space_separator(self, text):
        assert parse_datetime(text) == JAN_1

    def test_parse_rejects_garbage(self):
        with pytest.raises(ValueError):
            parse_datetime("next tuesday")

    def test_parse_rejects_non_string(self):
        with pytest.raises(TypeError):
            parse_datetime(1704067200)


class TestKeyNames:
    @pytest.mark.parametrize(
        ("snake", "camel"),
        [
            ("start_date", "startDate"),
            ("transition_from_previous", "transitionFromPrevious"),
            ("base64_data", "base64Data"),
            ("name", "name"),
        ],
    )
    def test_camel_case(self, snake, camel):
        assert camel_case(snake) == camel


class TestRequestPayloads:
    def test_trip_create_wire_keys(self):
        body = TripCreate(name="Paris", start_date=JAN_1, end_date=JAN_5).to_dict()
        assert body == {
            "name": "Paris",
            "start_date": "2024-01-01T00:00:00Z",
            "end_date": "2024-01-05T00:00:00Z",
        }

    def test_trip_update_is_full_replacement(self):
        body = TripUpdate(name="Rome", start_date=JAN_1, end_date=JAN_5).to_dict()
        assert set(body) == {"name", "start_date", "end_date"}

    def test_event_update_sends_nulls(self):
        body = EventUpdate(name="Louvre", date=JAN_1).to_dict()
        assert body == {
            "name": "Louvre",
            "note": None,
            "date": "2024-01-01T00:00:00Z",
            "location": None,
            "transition_from_previous": None,
        }

    def test_event_create_has_trip_id_and_no_id(self):
        body = EventCreate(
            trip_id=7,
            name="Louvre",
            date=JAN_1,
            location=Location(48.86, 2.33, "Rue de Rivoli"),
            transition_from_previous="Walk",
        ).to_dict()
        assert "id" not in body
        assert body["trip_id"] == 7
        assert body["location"] == {"latitude": 48.86, "longitude": 2.33, "address": "Rue de Rivoli"}
        assert body["transition_from_previous"] == "Walk"

    def test_media_create_base64(self):
        body = MediaCreate(event_id=3, base64_data=b"\x89PNG").to_dict()
        assert body == {"event_id": 3, "base64_data": "iVBORw=="}

    @pytest.mark.parametrize(
        "dto",
        [
            TripCreate(name="Paris", start_date=JAN_1, end_date=JAN_5),
            EventCreate(trip_id=1, name="Louvre", date=JAN_1, note="busy", location=Location(1.5, 2.5)),
            MediaCreate(event_id=2, base64_data=b"hello"),
        ],
    )
    def test_wire_form_is_stable(self, dto):
        wire = dto.to_dict()
        assert type(dto).from_dict(wire).to_dict() == wire

    def test_camel_case_input_decodes(self):
        dto = TripCreate.from_dict({"name": "Paris", "startDate": "2024-01-01T00:00:00Z", "endDate": "2024-01-05T00:00:00Z"})
        assert dto.start_date == JAN_1
        assert dto.to_dict()["start_date"] == "2024-01-01T00:00:00Z"


class TestResponsePayloads:
    def test_auth_token(self):
        token = AuthToken.from_dict({"access_token": "abc123", "token_type": "bearer"})
        assert token == AuthToken(access_token="abc123", token_type="bearer")

    def test_auth_token_missing_field(self):
        with pytest.raises(KeyError):
            AuthToken.from_dict({"access_token": "abc123"})

    def test_trip_with_nested_events_and_media(self):
        trip = Trip.from_dict(
            {
                "id": 1,
                "name": "Paris",
                "start_date": "2024-01-01T00:00:00Z",
                "end_date": "2024-01-05T00:00:00Z",
                "events": [
                    {
                        "id": 10,
                        "trip_id": 1,
                        "name": "Louvre",
                        "date": "2024-01-02T10:00:00Z",
                        "location": {"latitude": 48.86, "longitude": 2.33},
                        "media": [{"id": 100, "event_id": 10, "base64_data": "aGVsbG8="}],
                    },
                    {"id": 11, "trip_id": 1, "name": "Eiffel", "date": "2024-01-03T10:00:00Z"},
                ],
            }
        )
        assert trip.start_date == JAN_1
        assert [e.name for e in trip.events] == ["Louvre", "Eiffel"]
        assert trip.events[0].location == Location(48.86, 2.33)
        assert trip.events[0].media == [Media(id=100, event_id=10, base64_data=b"hello")]
        assert trip.events[1].media == []
        assert trip.events[1].note is None

    def test_event_accepts_camel_case_keys(self):
        event = Event.from_dict(
            {"id": 1, "tripId": 2, "name": "x", "date": "2024-01-01T00:00:00Z", "transitionFromPrevious": "Train"}
        )
        assert event.trip_id == 2
        assert event.transition_from_previous == "Train"

    def test_media_bad_base64(self):
        with pytest.raises(ValueError):
            Media.from_dict({"id": 1, "event_id": 1, "base64_data": "not base64!"})

    def test_trip_rejects_non_object(self):
        with pytest.raises(TypeError):
            Trip.from_dict(["not", "a", "trip"])
