"""Builtin tools offered to the model."""
from .holidays import HolidaysConfig, HolidaysTool
from .time_in import TimeInTool
from .today import TodayTool
from .weather import WeatherTool
