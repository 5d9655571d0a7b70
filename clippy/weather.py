"""WeatherAPI.com client — current conditions and daily forecast via httpx."""
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

import httpx

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.weatherapi.com/v1"
MAX_FORECAST_DAYS = 10


class WeatherAPIError(Exception):
    """WeatherAPI answered with an error payload or a non-200 status."""


@dataclass
class WeatherConfig:
    api_key: str
    base_url: str = DEFAULT_BASE_URL
    timeout: float = 8.0


@dataclass
class Place:
    name: str
    country: str
    lat: float = 0.0
    lon: float = 0.0


@dataclass
class CurrentConditions:
    temperature_c: float
    wind_speed_kmh: float
    wind_dir_deg: float
    condition: str


@dataclass
class DailyForecast:
    date: date
    min_temp_c: float
    max_temp_c: float
    wind_max_kmh: float
    condition: str


@dataclass
class WeatherReport:
    place: Place
    current: CurrentConditions
    forecast: List[DailyForecast] = field(default_factory=list)


class WeatherClient:
    """Fetches weather for a place name.

    ``http`` is an optional shared ``httpx.AsyncClient``; when omitted a
    short-lived client is opened per request.
    """

    def __init__(self, config: WeatherConfig, http: Optional[httpx.AsyncClient] = None):
        if not config.api_key:
            raise ConfigurationError("WEATHER_API_KEY is not set")
        self.config = config
        self.http = http

    async def fetch(self, location: str, days: int = 0) -> WeatherReport:
        """Current conditions for ``location``; with ``days`` > 0 also a forecast
        (capped at MAX_FORECAST_DAYS)."""
        days = min(max(days or 0, 0), MAX_FORECAST_DAYS)
        params = {"key": self.config.api_key, "q": location}
        if days > 0:
            endpoint = "forecast.json"
            params.update(days=days, aqi="no", alerts="no")
        else:
            endpoint = "current.json"
            params["aqi"] = "no"
        url = f"{self.config.base_url.rstrip('/')}/{endpoint}"

        logger.info(f"Fetching weather: location={location!r} days={days} endpoint={endpoint}")
        if self.http is not None:
            resp = await self.http.get(url, params=params, timeout=self.config.timeout)
        else:
            async with httpx.AsyncClient(timeout=self.config.timeout) as client:
                resp = await client.get(url, params=params)

        data = _decode(resp)
        report = _parse_report(data, with_forecast=days > 0)
        logger.info(
            f"Weather parsed: {report.place.name}, {report.place.country} "
            f"{report.current.temperature_c}°C {report.current.condition} "
            f"({len(report.forecast)} forecast days)"
        )
        return report


def _decode(resp: httpx.Response) -> dict:
    try:
        data = resp.json()
    except ValueError:
        data = None

    error = data.get("error") if isinstance(data, dict) else None
    if error:
        logger.error(f"WeatherAPI returned an error: code={error.get('code')} msg={error.get('message')}")
        raise WeatherAPIError(f"weatherapi: {error.get('message', 'unknown error')} (code {error.get('code', 0)})")
    if resp.status_code != 200:
        logger.warning(f"WeatherAPI non-200 status: {resp.status_code}")
        raise WeatherAPIError(f"weatherapi error: {resp.status_code} {resp.reason_phrase}")
    if not isinstance(data, dict):
        raise WeatherAPIError("weatherapi error: response is not a JSON object")
    return data


def _parse_report(data: dict, with_forecast: bool) -> WeatherReport:
    loc = data.get("location", {})
    cur = data.get("current", {})
    report = WeatherReport(
        place=Place(
            name=loc.get("name", ""),
            country=loc.get("country", ""),
            lat=loc.get("lat", 0.0),
            lon=loc.get("lon", 0.0),
        ),
        current=CurrentConditions(
            temperature_c=cur.get("temp_c", 0.0),
            wind_speed_kmh=cur.get("wind_kph", 0.0),
            wind_dir_deg=cur.get("wind_degree", 0.0),
            condition=cur.get("condition", {}).get("text", ""),
        ),
    )
    if with_forecast:
        for d in data.get("forecast", {}).get("forecastday", []):
            day = d.get("day", {})
            report.forecast.append(DailyForecast(
                date=date.fromisoformat(d["date"]),
                min_temp_c=day.get("mintemp_c", 0.0),
                max_temp_c=day.get("maxtemp_c", 0.0),
                wind_max_kmh=day.get("maxwind_kph", 0.0),
                condition=day.get("condition", {}).get("text", ""),
            ))
    return report
