"""Time-in tool — current time in an IANA time zone."""
from datetime import datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ...errors import InvalidArguments
from ..registry import Tool, ToolParam


class TimeInTool(Tool):
    name = "time_in"
    description = "Get the current date/time for a given IANA time zone (e.g. Europe/Madrid)."
    params = [
        ToolParam("zone", description="IANA time zone, e.g. Europe/Madrid, America/New_York"),
    ]

    async def run(self, zone: str = "", **kwargs) -> str:
        zone = zone.strip()
        if not zone:
            raise InvalidArguments("zone is required")
        try:
            tz = ZoneInfo(zone)
        except (ZoneInfoNotFoundError, ValueError, OSError) as e:
            raise InvalidArguments(f"invalid time zone {zone!r}: {e}") from e

        # e.g. "2025-10-28T09:57:22+01:00 (Europe/Madrid)"
        now = datetime.now(tz)
        return f"{now.isoformat(timespec='seconds')} ({tz.key})"
