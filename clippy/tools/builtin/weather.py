"""Weather tool — current conditions and forecast via WeatherAPI.com."""
import logging

import httpx

from ...errors import InvalidArguments, ToolExecutionError
from ...weather import WeatherAPIError, WeatherClient, WeatherReport
from ..registry import Tool, ToolParam

logger = logging.getLogger(__name__)


class WeatherTool(Tool):
    name = "get_weather"
    description = "Get weather at the given location (and optional forecast)"
    params = [
        ToolParam("location", description="City or place name, e.g. 'Barcelona'"),
        ToolParam("days", type="integer", description="Optional: number of forecast days (1-10)",
                  required=False, default=0),
    ]

    def __init__(self, client: WeatherClient):
        self.client = client

    async def run(self, location: str = "", days: int = 0, **kwargs) -> str:
        location = location.strip()
        if not location:
            raise InvalidArguments('invalid arguments: provide {"location":"<city>", "days":<optional int>}')

        try:
            report = await self.client.fetch(location, days)
        except (WeatherAPIError, httpx.HTTPError) as e:
            logger.error(f"Weather API error: {e}")
            raise ToolExecutionError(f"failed to fetch weather: {e}") from e
        return format_report(report)


def format_report(report: WeatherReport) -> str:
    cur = report.current
    lines = [
        f"Location: {report.place.name}, {report.place.country}",
        f"Current: {cur.temperature_c:.1f}°C, {cur.condition}, "
        f"wind {cur.wind_speed_kmh:.0f} km/h (dir {cur.wind_dir_deg:.0f}°)",
    ]
    if report.forecast:
        lines.append(f"Forecast ({len(report.forecast)} days):")
        for d in report.forecast:
            lines.append(
                f"- {d.date.isoformat()}: {d.condition}, min {d.min_temp_c:.1f}°C / "
                f"max {d.max_temp_c:.1f}°C, wind max {d.wind_max_kmh:.0f} km/h"
            )
    return "\n".join(lines) + "\n"
