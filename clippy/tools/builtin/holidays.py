"""Holidays tool — local bank and public holidays from an ICS feed."""
import logging
from dataclasses import dataclass
from datetime import datetime, time, timezone
from typing import List, Optional

import httpx

from ...errors import InvalidArguments, ToolExecutionError
from ...ics_feed import CalendarEvent, load_calendar
from ..registry import Tool, ToolParam

logger = logging.getLogger(__name__)

DEFAULT_CALENDAR_LINK = "https://www.officeholidays.com/ics/spain/catalonia"


@dataclass
class HolidaysConfig:
    calendar_link: str = DEFAULT_CALENDAR_LINK
    timeout: float = 8.0


class HolidaysTool(Tool):
    name = "get_holidays"
    description = (
        "Gets local bank and public holidays. "
        "Each line is a single holiday in the format 'YYYY-MM-DD: Holiday Name'."
    )
    params = [
        ToolParam("before_date", description="Optional RFC3339 date, return holidays before this date.",
                  required=False),
        ToolParam("after_date", description="Optional RFC3339 date, return holidays after this date.",
                  required=False),
        ToolParam("max_count", type="integer", description="Optional limit of holidays to return.",
                  required=False, default=0),
    ]

    def __init__(self, config: Optional[HolidaysConfig] = None, http: Optional[httpx.AsyncClient] = None):
        self.config = config or HolidaysConfig()
        self.http = http

    async def run(self, before_date: Optional[str] = None, after_date: Optional[str] = None,
                  max_count: int = 0, **kwargs) -> str:
        before = _parse_rfc3339("before_date", before_date)
        after = _parse_rfc3339("after_date", after_date)

        try:
            events = await load_calendar(self.config.calendar_link, self.http, self.config.timeout)
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Failed to load holiday events from {self.config.calendar_link}: {e}")
            raise ToolExecutionError(f"failed to load holiday events: {e}") from e

        holidays = filter_holidays(events, before=before, after=after, max_count=max_count or 0)
        if not holidays:
            return "No holidays found."
        return "\n".join(f"{h.date.isoformat()}: {h.summary}" for h in holidays)


def filter_holidays(
    events: List[CalendarEvent],
    before: Optional[datetime] = None,
    after: Optional[datetime] = None,
    max_count: int = 0,
) -> List[CalendarEvent]:
    """Events strictly between ``after`` and ``before``, in feed order.

    Each event counts as midnight UTC of its date. ``max_count`` <= 0 means no limit.
    """
    kept = []
    for event in events:
        if max_count > 0 and len(kept) >= max_count:
            break
        start = datetime.combine(event.date, time.min, tzinfo=timezone.utc)
        if before is not None and start >= before:
            continue
        if after is not None and start <= after:
            continue
        kept.append(event)
    return kept


def _parse_rfc3339(field: str, value: Optional[str]) -> Optional[datetime]:
    if value is None or not value.strip():
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as e:
        raise InvalidArguments(f"invalid arguments: '{field}' is not an RFC3339 date: {value!r}") from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
