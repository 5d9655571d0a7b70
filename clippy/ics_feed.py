"""ICS calendar feed loader for the holidays tool."""
import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import List, Optional

import httpx
from icalendar import Calendar

logger = logging.getLogger(__name__)


@dataclass
class CalendarEvent:
    date: date
    summary: str


def parse_all_day_events(ics_text) -> List[CalendarEvent]:
    """All-day VEVENTs of an ICS document, in feed order.

    Events whose DTSTART carries a time of day (or is missing) are skipped.
    """
    cal = Calendar.from_ical(ics_text)
    events = []
    for component in cal.walk("VEVENT"):
        dtstart = component.get("DTSTART")
        if dtstart is None:
            continue
        start = dtstart.dt
        if isinstance(start, datetime) or not isinstance(start, date):
            continue
        events.append(CalendarEvent(date=start, summary=str(component.get("SUMMARY", ""))))
    return events


async def load_calendar(url: str, http: Optional[httpx.AsyncClient] = None, timeout: float = 8.0) -> List[CalendarEvent]:
    """Download an ICS feed and return its all-day events."""
    logger.info(f"Loading calendar: {url}")
    if http is not None:
        resp = await http.get(url, timeout=timeout)
    else:
        async with httpx.AsyncClient(timeout=timeout) as client:
            resp = await client.get(url)
    resp.raise_for_status()

    events = parse_all_day_events(resp.content)
    logger.info(f"Calendar loaded: {len(events)} all-day events")
    return events
