"""Shared fixtures for SRS cleanup tests."""

from datetime import datetime, timedelta

import pytest
import pytz

from srs_cleanup import CalendarEvent, SrsCleanupConfig

TZ_NAME = 'Asia/Tokyo'
TZ = pytz.timezone(TZ_NAME)


def overlaps(event, window):
    # Google's timeMin bounds the event end, timeMax bounds the start
    if event.end_time is None:
        return window.start <= event.start_time < window.end
    return event.start_time < window.end and event.end_time > window.start


class FakeCalendarProvider:
    """In-memory calendar; search matches title or description like Google's q."""

    def __init__(self, events=None, failing_ids=()):
        self.events = list(events or [])
        self.failing_ids = set(failing_ids)
        self.fetch_calls = []
        self.delete_calls = []

    def fetch_events_by_title_substring(self, window, substring):
        self.fetch_calls.append((window, substring))
        found = [
            e for e in self.events
            if overlaps(e, window)
            and (substring in e.title or substring in e.description)
        ]
        return sorted(found, key=lambda e: e.start_time)

    def delete_event(self, event):
        self.delete_calls.append(event.event_id)
        if event.event_id in self.failing_ids:
            raise RuntimeError('backend unavailable')
        self.events = [e for e in self.events if e.event_id != event.event_id]

    def titles(self):
        return [e.title for e in self.events]


def make_event(event_id, title, start_time, description='', end_time=None):
    return CalendarEvent(event_id=event_id, title=title, description=description,
                         start_time=start_time, end_time=end_time)


@pytest.fixture
def now():
    """Fixed 'now': 2025-06-10 15:30 Tokyo."""
    return TZ.localize(datetime(2025, 6, 10, 15, 30))


@pytest.fixture
def config():
    return SrsCleanupConfig(calendar_id='primary', timezone=TZ_NAME, token_file='token.json')


@pytest.fixture
def tomorrow(now):
    return TZ.localize(datetime(2025, 6, 11, 9, 0))


@pytest.fixture
def scenario_provider(tomorrow):
    """Book A (prefix), Lunch (plain), Other (SRS_DATE marker)."""
    return FakeCalendarProvider([
        make_event('a', 'Kindle SRS Review — Book A', tomorrow),
        make_event('lunch', 'Lunch', tomorrow + timedelta(hours=3)),
        make_event('other', 'Other', tomorrow + timedelta(days=9), 'SRS_DATE=2025-01-01'),
    ])
