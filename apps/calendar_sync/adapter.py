"""Google Calendar adapter.

All other modules work with inclusive calendar dates in the property's time
zone. Google stores all-day events with an exclusive end date, so this
module adds one day on every write and subtracts one day on every read.

When no calendar is configured the adapter behaves as a stub: listings are
empty, creates return ``None`` and updates/deletes return ``False``. Callers
treat that as "calendar unavailable", never as an error.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Any

from django.conf import settings  # type: ignore
from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from shared.domain.value_objects import DateInterval, get_property_timezone, to_local_date

from .colors import info_color

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/calendar"]
GONE_STATUSES = (404, 410)
BOOKING_PROPERTY = "booking_id"


class CalendarError(Exception):
    """The calendar service rejected an operation."""


class CalendarEventNotFound(CalendarError):
    """The requested event does not exist (or no longer exists) upstream."""


@dataclass(frozen=True)
class CalendarCredentials:
    calendar_id: str
    service_account_info: dict


@dataclass
class ExternalEvent:
    """Calendar entry with inclusive local dates."""

    id: str
    summary: str
    start: date
    end: date
    description: str = ""
    color_tag: str | None = None
    cancelled: bool = False
    booking_reference: str | None = None

    @property
    def interval(self) -> DateInterval:
        return DateInterval(self.start, self.end)

    @property
    def is_informational(self) -> bool:
        return self.color_tag == info_color()


class CalendarAdapter:
    """Calendar contract. The base implementation is the unconfigured stub."""

    is_configured = False

    def list_events(self, range_start: date, range_end: date) -> list[ExternalEvent]:
        return []

    def get_event(self, event_id: str) -> ExternalEvent | None:
        """Return the event, ``None`` if the calendar is unavailable.

        Raises CalendarEventNotFound for unknown or deleted events and
        CalendarError for any other rejection.
        """
        return None

    def create_event(
        self,
        summary: str,
        description: str,
        start: date,
        end: date,
        color_tag: str | None = None,
        booking_reference: Any = None,
    ) -> str | None:
        return None

    def update_event(self, event_id: str, **fields: Any) -> bool:
        """Patch ``summary``, ``description``, ``start``, ``end`` or ``color_tag``.

        ``color_tag=""`` resets the colour to the calendar default.
        """
        return False

    def delete_event(self, event_id: str) -> bool:
        return False


def load_credentials() -> CalendarCredentials | None:
    """Resolve credentials from the stored connection, then from settings."""
    from .models import CalendarConnection

    connection = CalendarConnection.objects.filter(pk=1, is_active=True).first()
    calendar_id = (connection.calendar_id if connection else "") or getattr(settings, "GOOGLE_CALENDAR_ID", "")
    info = connection.service_account_info() if connection else None

    if not info:
        email = getattr(settings, "GOOGLE_SERVICE_ACCOUNT_EMAIL", "")
        private_key = getattr(settings, "GOOGLE_PRIVATE_KEY", "")
        if email and private_key:
            info = {
                "type": "service_account",
                "client_email": email,
                "private_key": private_key.replace("\\n", "\n"),
                "token_uri": "https://oauth2.googleapis.com/token",
            }

    if not calendar_id or not info:
        return None
    return CalendarCredentials(calendar_id=calendar_id, service_account_info=info)


def _status_of(exc: HttpError) -> int:
    return int(getattr(exc.resp, "status", 0) or 0)


def _local_datetime(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        return parsed
    return parsed.astimezone(get_property_timezone())


def parse_event(item: dict) -> ExternalEvent:
    """Convert a Google event resource to an ExternalEvent with inclusive dates."""
    start_raw = item.get("start") or {}
    end_raw = item.get("end") or {}

    if "date" in start_raw:
        start = date.fromisoformat(start_raw["date"])
    else:
        start = to_local_date(start_raw["dateTime"])

    if "date" in end_raw:
        end = date.fromisoformat(end_raw["date"]) - timedelta(days=1)
    elif "dateTime" in end_raw:
        end_moment = _local_datetime(end_raw["dateTime"])
        end = end_moment.date()
        # a timed event ending exactly at midnight does not occupy that day
        if end_moment.time() == time.min and end > start:
            end -= timedelta(days=1)
    else:
        end = start
    end = max(end, start)

    private = (item.get("extendedProperties") or {}).get("private") or {}
    return ExternalEvent(
        id=item["id"],
        summary=item.get("summary", ""),
        description=item.get("description", ""),
        start=start,
        end=end,
        color_tag=item.get("colorId") or None,
        cancelled=item.get("status") == "cancelled",
        booking_reference=private.get(BOOKING_PROPERTY),
    )


def _date_field(day: date) -> dict:
    return {"date": day.isoformat(), "timeZone": str(getattr(settings, "PROPERTY_TIME_ZONE", "Europe/Amsterdam"))}


def build_event_body(
    summary: str,
    description: str,
    start: date,
    end: date,
    color_tag: str | None = None,
    booking_reference: Any = None,
) -> dict:
    """All-day event resource covering ``start``..``end`` inclusive."""
    if end < start:
        raise ValueError(f"End date {end} is before start date {start}")
    body: dict[str, Any] = {
        "summary": summary,
        "description": description,
        "start": _date_field(start),
        "end": _date_field(end + timedelta(days=1)),
        "reminders": {
            "useDefault": False,
            "overrides": [
                {"method": "popup", "minutes": int(getattr(settings, "CALENDAR_EVENT_REMINDER_MINUTES", 1440))},
            ],
        },
    }
    if color_tag:
        body["colorId"] = color_tag
    if booking_reference is not None:
        body["extendedProperties"] = {"private": {BOOKING_PROPERTY: str(booking_reference)}}
    return body


def build_event_patch(**fields: Any) -> dict:
    """Partial event resource for ``events().patch``."""
    patch: dict[str, Any] = {}
    if "summary" in fields:
        patch["summary"] = fields["summary"]
    if "description" in fields:
        patch["description"] = fields["description"]
    if fields.get("start") is not None:
        patch["start"] = _date_field(fields["start"])
    if fields.get("end") is not None:
        patch["end"] = _date_field(fields["end"] + timedelta(days=1))
    if "color_tag" in fields:
        patch["colorId"] = fields["color_tag"] or None
    unknown = set(fields) - {"summary", "description", "start", "end", "color_tag"}
    if unknown:
        raise ValueError(f"Unsupported event fields: {', '.join(sorted(unknown))}")
    return patch


class GoogleCalendarAdapter(CalendarAdapter):
    """CalendarAdapter backed by the Google Calendar v3 API (service account)."""

    def __init__(self, credentials: CalendarCredentials | None = None, service: Any = None):
        self.credentials = credentials if credentials is not None else load_credentials()
        self._service = service
        if self.credentials is None:
            logger.warning("Google Calendar is not configured; calendar operations are disabled")

    @property
    def is_configured(self) -> bool:  # type: ignore
        return self.credentials is not None

    @property
    def calendar_id(self) -> str:
        return self.credentials.calendar_id if self.credentials else ""

    def _get_service(self) -> Any:
        if self._service is None:
            creds = service_account.Credentials.from_service_account_info(
                self.credentials.service_account_info,
                scopes=SCOPES,
            )
            self._service = build("calendar", "v3", credentials=creds, cache_discovery=False)
        return self._service

    def list_events(self, range_start: date, range_end: date) -> list[ExternalEvent]:
        if not self.is_configured:
            return []

        tz = get_property_timezone()
        page_size = int(getattr(settings, "GOOGLE_CALENDAR_PAGE_SIZE", 250))
        max_events = int(getattr(settings, "GOOGLE_CALENDAR_MAX_EVENTS", 2500))
        params: dict[str, Any] = {
            "calendarId": self.calendar_id,
            "timeMin": datetime.combine(range_start, time.min, tzinfo=tz).isoformat(),
            "timeMax": datetime.combine(range_end + timedelta(days=1), time.min, tzinfo=tz).isoformat(),
            "singleEvents": True,
            "orderBy": "startTime",
            "maxResults": page_size,
        }

        events: list[ExternalEvent] = []
        try:
            service = self._get_service()
            while True:
                response = service.events().list(**params).execute()
                for item in response.get("items", []):
                    if item.get("status") == "cancelled":
                        continue
                    events.append(parse_event(item))
                if len(events) >= max_events:
                    logger.warning(f"Calendar listing truncated at {max_events} events")
                    return events[:max_events]
                page_token = response.get("nextPageToken")
                if not page_token:
                    break
                params["pageToken"] = page_token
        except HttpError as exc:
            logger.error(f"Failed to list calendar events: HTTP {_status_of(exc)}", exc_info=True)
            return []
        except Exception as e:
            logger.error(f"Failed to list calendar events: {e}", exc_info=True)
            return []
        return events

    def get_event(self, event_id: str) -> ExternalEvent | None:
        if not self.is_configured:
            return None
        try:
            item = self._get_service().events().get(calendarId=self.calendar_id, eventId=event_id).execute()
        except HttpError as exc:
            status = _status_of(exc)
            if status in GONE_STATUSES:
                raise CalendarEventNotFound(f"Calendar event {event_id} not found") from exc
            raise CalendarError(f"Calendar rejected reading event {event_id}: HTTP {status}") from exc
        except Exception as e:
            logger.error(f"Failed to fetch calendar event {event_id}: {e}", exc_info=True)
            return None
        return parse_event(item)

    def create_event(
        self,
        summary: str,
        description: str,
        start: date,
        end: date,
        color_tag: str | None = None,
        booking_reference: Any = None,
    ) -> str | None:
        if not self.is_configured:
            return None
        body = build_event_body(summary, description, start, end, color_tag, booking_reference)
        try:
            created = self._get_service().events().insert(calendarId=self.calendar_id, body=body).execute()
        except Exception as e:
            logger.error(f"Failed to create calendar event '{summary}': {e}", exc_info=True)
            return None
        logger.info(f"Created calendar event {created.get('id')} for {start} - {end}")
        return created.get("id")

    def update_event(self, event_id: str, **fields: Any) -> bool:
        if not self.is_configured:
            return False
        patch = build_event_patch(**fields)
        if not patch:
            return True
        try:
            self._get_service().events().patch(calendarId=self.calendar_id, eventId=event_id, body=patch).execute()
        except Exception as e:
            logger.error(f"Failed to update calendar event {event_id}: {e}", exc_info=True)
            return False
        return True

    def delete_event(self, event_id: str) -> bool:
        if not self.is_configured:
            return False
        try:
            self._get_service().events().delete(calendarId=self.calendar_id, eventId=event_id).execute()
        except HttpError as exc:
            if _status_of(exc) in GONE_STATUSES:
                logger.info(f"Calendar event {event_id} was already deleted")
                return True
            logger.error(f"Failed to delete calendar event {event_id}: HTTP {_status_of(exc)}", exc_info=True)
            return False
        except Exception as e:
            logger.error(f"Failed to delete calendar event {event_id}: {e}", exc_info=True)
            return False
        return True

    def test_connection(self) -> dict:
        """Read the calendar metadata to verify credentials and sharing."""
        if not self.is_configured:
            return {"ok": False, "error": "Google Calendar is not configured"}
        try:
            calendar = self._get_service().calendars().get(calendarId=self.calendar_id).execute()
        except HttpError as exc:
            return {"ok": False, "error": f"HTTP {_status_of(exc)}"}
        except Exception as e:
            logger.error(f"Calendar connection test failed: {e}", exc_info=True)
            return {"ok": False, "error": str(e)}
        return {"ok": True, "summary": calendar.get("summary", ""), "time_zone": calendar.get("timeZone", "")}


def get_calendar_adapter() -> CalendarAdapter:
    return GoogleCalendarAdapter()
