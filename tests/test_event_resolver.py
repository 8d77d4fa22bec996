"""Tests for finding the event a client means without an event id."""

from datetime import timedelta

import pytest

from barberbook.core.errors import EventNotFoundError, ValidationError
from barberbook.services.appointment.event_resolver import EventResolver, normalize_terms, resolve_event
from tests.helpers import FakeCalendarGateway, days_from_now, make_event, utc

NOW = utc(2025, 3, 10, 12)


@pytest.fixture
def jane_events():
    return [
        make_event("past", "Haircut: Jane", utc(2025, 3, 1, 17)),
        make_event("soon", "Haircut: Jane", utc(2025, 3, 12, 17)),
        make_event("later", "Beard trim: Jane", utc(2025, 3, 20, 17)),
        make_event("other", "Haircut: Bob", utc(2025, 3, 11, 17)),
    ]


class TestResolveEvent:

    def test_single_match_wins_regardless_of_target(self):
        events = [make_event("bob", "Haircut: Bob", utc(2025, 3, 11, 17))]
        found = resolve_event(events, ["bob"], target_date=utc(2025, 6, 1), now=NOW)
        assert found.id == "bob"

    def test_match_is_case_insensitive(self):
        events = [make_event("bob", "Haircut: BOB", utc(2025, 3, 11, 17))]
        assert resolve_event(events, ["  bob "], now=NOW).id == "bob"

    def test_matches_description(self):
        events = [
            make_event("a", "Haircut", utc(2025, 3, 11, 17), description="Client phone: +15551234567"),
            make_event("b", "Haircut", utc(2025, 3, 12, 17), description="Client phone: +15559999999"),
        ]
        assert resolve_event(events, [None, "+15551234567"], now=NOW).id == "a"

    def test_target_date_picks_nearest(self, jane_events):
        found = resolve_event(jane_events, ["Jane"], target_date=utc(2025, 3, 19, 9), now=NOW)
        assert found.id == "later"

    def test_target_date_in_the_past_can_pick_past_event(self, jane_events):
        found = resolve_event(jane_events, ["Jane"], target_date=utc(2025, 3, 2), now=NOW)
        assert found.id == "past"

    def test_no_target_picks_soonest_upcoming(self, jane_events):
        assert resolve_event(jane_events, ["Jane"], now=NOW).id == "soon"

    def test_all_past_picks_most_recent(self, jane_events):
        found = resolve_event(jane_events, ["Jane"], now=utc(2025, 4, 1))
        assert found.id == "later"

    def test_substring_heuristic_is_loose(self):
        events = [make_event("jane", "Haircut: Jane", utc(2025, 3, 11, 17))]
        assert resolve_event(events, ["Jan"], now=NOW).id == "jane"

    def test_no_match(self, jane_events):
        with pytest.raises(EventNotFoundError):
            resolve_event(jane_events, ["Carlos"], now=NOW)

    def test_no_usable_terms(self, jane_events):
        with pytest.raises(ValidationError):
            resolve_event(jane_events, [None, "   "], now=NOW)

    def test_normalize_terms(self):
        assert normalize_terms([" Jane ", None, "", "+1555"]) == ["jane", "+1555"]


class TestEventResolver:

    def test_searches_calendar_window(self):
        gateway = FakeCalendarGateway()
        gateway.add("Haircut: Jane", days_from_now(-45), days_from_now(-45) + timedelta(minutes=30))
        inside = gateway.add("Haircut: Jane", days_from_now(5), days_from_now(5) + timedelta(minutes=30))

        found = EventResolver(gateway, "primary").find("Jane", None)

        assert found.id == inside.id
        assert gateway.calls_named("list") == [("list", "primary")]

    def test_nothing_in_window(self):
        gateway = FakeCalendarGateway()
        gateway.add("Haircut: Jane", days_from_now(90), days_from_now(90) + timedelta(minutes=30))

        with pytest.raises(EventNotFoundError):
            EventResolver(gateway, "primary").find("Jane", None)
