"""
SRS Calendar Cleanup
Find calendar events created by the Kindle SRS review workflow and
preview or delete them, from tomorrow onward or within an explicit range.
"""

import os
import re
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, time
from typing import List, Optional

import pytz
from dateutil.relativedelta import relativedelta
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

SRS_TITLE_PREFIX = 'Kindle SRS Review — '
SRS_DATE_PATTERN = re.compile(r'SRS_DATE=[0-9]{4}-[0-9]{2}-[0-9]{2}')

ISO_DATE_FORMAT = '%Y-%m-%d'
ISO_DATE_PATTERN = re.compile(r'[0-9]{4}-[0-9]{2}-[0-9]{2}')
LOOKAHEAD_YEARS = 5


# ---------- Errors ----------


class SrsCleanupError(Exception):
    """Base exception for SRS cleanup errors."""


class InvalidDateFormat(SrsCleanupError, ValueError):
    """Raised when a range boundary is not a YYYY-MM-DD date."""

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"Invalid ISO date: {value!r} (expected YYYY-MM-DD)")


class CalendarNotFound(SrsCleanupError):
    """Raised when the configured calendar id does not resolve."""

    def __init__(self, calendar_id: str):
        self.calendar_id = calendar_id
        super().__init__(f"Calendar not found or not accessible: {calendar_id}")


class CredentialsError(SrsCleanupError):
    """Raised when the Google token file is missing or unusable."""


class DeletionFailed(SrsCleanupError):
    """A single event could not be deleted."""

    def __init__(self, event: 'CalendarEvent', cause: Exception):
        self.event = event
        self.cause = cause
        super().__init__(f"Failed to delete {event.title!r} @ {event.start_time}: {cause}")


# ---------- Config & models ----------


@dataclass
class SrsCleanupConfig:
    """
    Runtime options for one cleanup invocation.

    Attributes:
        calendar_id: Calendar to clean, or "primary" for the account default
        timezone: IANA timezone used for local midnights
        token_file: Authorized-user token JSON for the Google Calendar API
    """

    calendar_id: str = 'primary'
    timezone: str = 'UTC'
    token_file: str = 'token.json'

    def __post_init__(self) -> None:
        if not self.calendar_id:
            raise ValueError("calendar_id must not be empty")
        try:
            pytz.timezone(self.timezone)
        except pytz.UnknownTimeZoneError:
            raise ValueError(f"Unknown timezone: {self.timezone}")

    @property
    def tz(self):
        return pytz.timezone(self.timezone)

    @staticmethod
    def env_values() -> dict:
        """Raw, unvalidated options from the environment (and .env, if present)."""
        load_dotenv()
        return {
            'calendar_id': os.getenv('CALENDAR_ID', 'primary'),
            'timezone': os.getenv('TIMEZONE', 'UTC'),
            'token_file': os.getenv('GOOGLE_TOKEN_FILE', 'token.json'),
        }

    @classmethod
    def from_env(cls, **overrides) -> 'SrsCleanupConfig':
        """Build config from the environment; non-None overrides win before validation."""
        values = cls.env_values()
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


@dataclass
class CalendarEvent:
    event_id: str
    title: str
    description: str
    start_time: datetime
    end_time: Optional[datetime] = None


@dataclass
class DateWindow:
    """Half-open [start, end) range of aware datetimes."""

    start: datetime
    end: datetime


@dataclass
class RunSummary:
    scanned: int = 0
    matched: int = 0
    deleted: int = 0
    failures: List[DeletionFailed] = field(default_factory=list)


# ---------- Window ----------


def resolve_tomorrow_window(tz_name: str, now: Optional[datetime] = None) -> DateWindow:
    """Local midnight tomorrow through now + 5 years."""
    tz = pytz.timezone(tz_name)
    now = now.astimezone(tz) if now else datetime.now(tz)

    tomorrow = now.date() + timedelta(days=1)
    start = tz.localize(datetime.combine(tomorrow, time(0, 0)))
    end = tz.normalize(now + relativedelta(years=LOOKAHEAD_YEARS))
    return DateWindow(start=start, end=end)


def parse_local_date(value: str, tz_name: str) -> datetime:
    """Parse YYYY-MM-DD as local midnight in tz_name."""
    if not isinstance(value, str) or not ISO_DATE_PATTERN.fullmatch(value):
        raise InvalidDateFormat(value)
    try:
        day = datetime.strptime(value, ISO_DATE_FORMAT).date()
    except (TypeError, ValueError) as e:
        raise InvalidDateFormat(value) from e
    return pytz.timezone(tz_name).localize(datetime.combine(day, time(0, 0)))


def resolve_range_window(start_iso: str, end_iso: str, tz_name: str) -> DateWindow:
    return DateWindow(
        start=parse_local_date(start_iso, tz_name),
        end=parse_local_date(end_iso, tz_name),
    )


# ---------- Fetch & classify ----------


def fetch_candidate_events(provider, window: DateWindow) -> List[CalendarEvent]:
    """Coarse provider-side pre-filter on the SRS title prefix."""
    events = provider.fetch_events_by_title_substring(window, SRS_TITLE_PREFIX)
    logger.debug(f"Fetched {len(events)} candidate events between {window.start} and {window.end}")
    return events


def is_srs_event(title: Optional[str], description: Optional[str]) -> bool:
    """True if the title starts with the SRS prefix or the description has an SRS_DATE marker."""
    title = title or ''
    description = description or ''
    return title.startswith(SRS_TITLE_PREFIX) or bool(SRS_DATE_PATTERN.search(description))


# ---------- Batch runner ----------


def run_batch(provider, window: DateWindow, delete: bool) -> RunSummary:
    """One pass over the window: classify each event, then log or delete the matches."""
    summary = RunSummary()

    for event in fetch_candidate_events(provider, window):
        summary.scanned += 1
        if not is_srs_event(event.title, event.description):
            continue
        summary.matched += 1

        if not delete:
            logger.info(f"Would delete: {event.title} @ {event.start_time}")
            continue

        try:
            provider.delete_event(event)
        except Exception as e:
            summary.failures.append(DeletionFailed(event, e))
            continue
        summary.deleted += 1

    return summary


def _default_provider(config: SrsCleanupConfig):
    from google_calendar import GoogleCalendarProvider
    return GoogleCalendarProvider.from_config(config)


# ---------- Entry points ----------


def preview_srs_to_delete(config: SrsCleanupConfig, provider=None,
                          now: Optional[datetime] = None) -> RunSummary:
    """Dry run: list SRS events that would be deleted from tomorrow onward."""
    provider = provider or _default_provider(config)
    window = resolve_tomorrow_window(config.timezone, now)

    summary = run_batch(provider, window, delete=False)
    logger.info(f"Preview: {summary.matched} SRS events match for deletion (from tomorrow).")
    return summary


def cleanup_srs_from_tomorrow(config: SrsCleanupConfig, provider=None,
                              now: Optional[datetime] = None) -> RunSummary:
    """Delete SRS events from tomorrow onward; today is left alone."""
    provider = provider or _default_provider(config)
    window = resolve_tomorrow_window(config.timezone, now)

    summary = run_batch(provider, window, delete=True)
    logger.info(f"Cleanup done: scanned {summary.scanned}, deleted {summary.deleted} SRS events (from tomorrow).")
    return summary


def cleanup_srs_in_range(start_iso: str, end_iso: str, config: SrsCleanupConfig,
                         provider=None) -> RunSummary:
    """Delete SRS events in [start_iso, end_iso) local time, keeping other items."""
    window = resolve_range_window(start_iso, end_iso, config.timezone)
    provider = provider or _default_provider(config)

    summary = run_batch(provider, window, delete=True)
    logger.info(f"Range cleanup: deleted {summary.deleted} SRS events between {start_iso} and {end_iso}.")
    return summary
