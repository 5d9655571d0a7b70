"""Today tool — the server's current date and time."""
from datetime import datetime

from ..registry import Tool


class TodayTool(Tool):
    name = "get_today_date"
    description = "Get today's date and time in RFC3339 format"
    params = []

    async def run(self, **kwargs) -> str:
        return datetime.now().astimezone().isoformat(timespec="seconds")
