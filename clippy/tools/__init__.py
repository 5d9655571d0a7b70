"""Tool system — contract, registry and the builtin tools."""
import logging
from typing import Optional

import httpx

from ..config import Settings
from ..errors import ConfigurationError
from ..weather import WeatherClient, WeatherConfig
from .registry import Tool, ToolDescriptor, ToolParam, ToolRegistry, to_openai_tool
from .builtin import HolidaysConfig, HolidaysTool, TimeInTool, TodayTool, WeatherTool

logger = logging.getLogger(__name__)


def build_registry(cfg: Settings, http: Optional[httpx.AsyncClient] = None) -> ToolRegistry:
    """Registry with every builtin tool the configuration allows.

    The weather tool is left out when no WeatherAPI key is configured.
    """
    registry = ToolRegistry([
        TodayTool(),
        TimeInTool(),
        HolidaysTool(HolidaysConfig(calendar_link=cfg.holiday_calendar_link, timeout=cfg.http_timeout), http),
    ])
    try:
        client = WeatherClient(
            WeatherConfig(api_key=cfg.weather_api_key, base_url=cfg.weather_base_url, timeout=cfg.http_timeout),
            http,
        )
    except ConfigurationError as e:
        logger.warning(f"Weather tool disabled: {e}")
    else:
        registry.register(WeatherTool(client))
    logger.info(f"Tools available: {', '.join(registry.names())}")
    return registry
