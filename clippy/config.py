from pydantic import BaseModel
import os
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent.parent


def load_env_file(path: Path) -> int:
    """Copy KEY=VALUE lines from ``path`` into os.environ.

    Variables already set in the environment win. Surrounding quotes are
    dropped. Returns how many variables were set.
    """
    if not path.is_file():
        return 0
    loaded = 0
    for raw in path.read_text(encoding="utf-8").splitlines():
        raw = raw.strip()
        if raw.startswith("export "):
            raw = raw[len("export "):]
        if not raw or raw.startswith("#") or "=" not in raw:
            continue
        name, _, val = raw.partition("=")
        name, val = name.strip(), val.strip().strip("\"'")
        if name and name not in os.environ:
            os.environ[name] = val
            loaded += 1
    return loaded


# Must run before Settings reads os.getenv
load_env_file(PROJECT_ROOT / ".env")


def _ascii(value: str) -> str:
    """Config values go into HTTP headers; drop anything that is not ASCII."""
    return value.encode("ascii", errors="ignore").decode("ascii").strip()


def _default_database_url() -> str:
    return f"sqlite+aiosqlite:///{PROJECT_ROOT / 'data' / 'clippy.db'}"


class Settings(BaseModel):
    # Network
    host: str = os.getenv("CLIPPY_HOST", "0.0.0.0")
    port: int = int(os.getenv("CLIPPY_PORT", "8080"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # OpenAI chat completions
    openai_api_key: str = _ascii(os.getenv("OPENAI_API_KEY", ""))
    openai_base_url: str = _ascii(os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1"))
    openai_chat_model: str = _ascii(os.getenv("OPENAI_CHAT_MODEL", "gpt-4.1"))
    # Empty = same model as chat
    openai_title_model: str = _ascii(os.getenv("OPENAI_TITLE_MODEL", ""))

    # Persistence
    database_url: str = os.getenv("DATABASE_URL", _default_database_url())

    # Tools
    weather_api_key: str = _ascii(os.getenv("WEATHER_API_KEY", ""))
    weather_base_url: str = _ascii(os.getenv("WEATHER_BASE_URL", "https://api.weatherapi.com/v1"))
    holiday_calendar_link: str = _ascii(
        os.getenv("HOLIDAY_CALENDAR_LINK", "") or "https://www.officeholidays.com/ics/spain/catalonia"
    )
    http_timeout: float = float(os.getenv("HTTP_TIMEOUT", "8"))

    # Reply loop
    max_tool_rounds: int = int(os.getenv("MAX_TOOL_ROUNDS", "15"))
    reply_timeout: float = float(os.getenv("REPLY_TIMEOUT", "0"))  # 0 = no deadline

    @property
    def title_model(self) -> str:
        return self.openai_title_model or self.openai_chat_model


settings = Settings()


def log_config(cfg: Settings = settings):
    """Log the effective configuration with secrets masked."""
    oai_key = '***' + cfg.openai_api_key[-4:] if len(cfg.openai_api_key) > 4 else 'EMPTY'
    logger.info(f"Config: Chat → {cfg.openai_base_url} (key={oai_key}), model={cfg.openai_chat_model}")
    logger.info(f"Config: Title model={cfg.title_model}, max_tool_rounds={cfg.max_tool_rounds}")
    logger.info(f"Config: Weather API {'configured' if cfg.weather_api_key else 'NOT configured'}")
    logger.info(f"Config: Holiday calendar → {cfg.holiday_calendar_link}")
