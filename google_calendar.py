"""Google Calendar backend for the SRS cleanup."""

import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from google.auth.exceptions import RefreshError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from srs_cleanup import (
    CalendarEvent,
    CalendarNotFound,
    CredentialsError,
    DateWindow,
    SrsCleanupConfig,
)

logger = logging.getLogger(__name__)

# Google Calendar OAuth scope
SCOPES = ['https://www.googleapis.com/auth/calendar']

NOT_FOUND_STATUSES = (403, 404)
RATE_LIMIT_REASONS = {'rateLimitExceeded', 'userRateLimitExceeded', 'quotaExceeded', 'dailyLimitExceeded'}


def is_rate_limited(error: HttpError) -> bool:
    """Google reports quota errors as 403 with a usageLimits reason."""
    details = error.error_details if isinstance(error.error_details, list) else []
    return any(
        isinstance(d, dict) and (d.get('reason') in RATE_LIMIT_REASONS or d.get('domain') == 'usageLimits')
        for d in details
    )


def get_google_service(token_file: str = 'token.json'):
    """Build a Calendar v3 service from a cached authorized-user token."""
    token_path = Path(token_file)
    if not token_path.exists():
        raise CredentialsError(f"Token file not found: {token_file}")

    try:
        creds = Credentials.from_authorized_user_file(str(token_path), SCOPES)
    except ValueError as e:
        raise CredentialsError(f"Could not load credentials from {token_file}: {e}") from e

    if not creds.valid:
        if not (creds.expired and creds.refresh_token):
            raise CredentialsError(f"Credentials in {token_file} are invalid and cannot be refreshed")
        try:
            creds.refresh(Request())
        except RefreshError as e:
            raise CredentialsError(f"Could not refresh credentials: {e}") from e
        with open(token_path, 'w') as f:
            f.write(creds.to_json())
        logger.info(f"  → Refreshed credentials saved to {token_file}")

    return build('calendar', 'v3', credentials=creds)


def parse_event_time(event_time: dict, tz) -> Optional[datetime]:
    """Parse a Google Calendar start/end block into an aware datetime."""
    if 'dateTime' in event_time:
        dt_str = event_time['dateTime']
        return datetime.fromisoformat(dt_str.replace('Z', '+00:00'))
    elif 'date' in event_time:
        # All-day event: local midnight
        return tz.localize(datetime.fromisoformat(event_time['date']))
    return None


class GoogleCalendarProvider:
    """Reads and deletes events on one Google calendar."""

    def __init__(self, service, calendar_id: str, tz):
        self.service = service
        self.calendar_id = calendar_id
        self.tz = tz

    @classmethod
    def from_config(cls, config: SrsCleanupConfig) -> 'GoogleCalendarProvider':
        service = get_google_service(config.token_file)
        provider = cls(service, config.calendar_id, config.tz)
        provider.resolve_calendar()
        return provider

    def resolve_calendar(self) -> dict:
        """Check the calendar id is accessible; "primary" is the account default."""
        try:
            calendar = self.service.calendars().get(calendarId=self.calendar_id).execute()
        except HttpError as e:
            if e.resp.status in NOT_FOUND_STATUSES and not is_rate_limited(e):
                raise CalendarNotFound(self.calendar_id) from e
            raise
        logger.info(f"Using calendar: {calendar.get('summary', self.calendar_id)} ({calendar.get('id', self.calendar_id)})")
        return calendar

    def fetch_events_by_title_substring(self, window: DateWindow, substring: str) -> List[CalendarEvent]:
        events = []
        page_token = None
        while True:
            events_result = (
                self.service.events()
                .list(
                    calendarId=self.calendar_id,
                    timeMin=window.start.isoformat(),
                    timeMax=window.end.isoformat(),
                    q=substring,
                    singleEvents=True,
                    orderBy='startTime',
                    pageToken=page_token,
                )
                .execute()
            )
            for item in events_result.get('items', []):
                events.append(self._to_event(item))
            page_token = events_result.get('nextPageToken')
            if not page_token:
                break

        logger.info(f"  Found {len(events)} events matching {substring!r}")
        return events

    def delete_event(self, event: CalendarEvent) -> None:
        self.service.events().delete(calendarId=self.calendar_id, eventId=event.event_id).execute()

    def _to_event(self, item: dict) -> CalendarEvent:
        return CalendarEvent(
            event_id=item['id'],
            title=item.get('summary', '') or '',
            description=item.get('description', '') or '',
            start_time=parse_event_time(item.get('start', {}), self.tz),
            end_time=parse_event_time(item.get('end', {}), self.tz),
        )
