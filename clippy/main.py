import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from .api import router
from .assistant import Assistant
from .config import Settings, settings, log_config
from .database import init_db
from .llm import create_chat_model, get_client
from .tools import build_registry

logger = logging.getLogger(__name__)


def build_assistant(cfg: Settings, http: httpx.AsyncClient) -> Assistant:
    client = get_client(cfg)
    return Assistant(
        model=create_chat_model(cfg, client=client),
        title_model=create_chat_model(cfg, model=cfg.title_model, client=client),
        registry=build_registry(cfg, http),
        max_tool_rounds=cfg.max_tool_rounds,
        reply_timeout=cfg.reply_timeout,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    log_config(settings)
    await init_db()
    async with httpx.AsyncClient(timeout=settings.http_timeout) as http:
        app.state.assistant = build_assistant(settings, http)
        logger.info("Clippy ready")
        yield
    logger.info("Clippy stopped")


app = FastAPI(title="Clippy", lifespan=lifespan)
app.include_router(router)


@app.get("/")
async def index():
    return {"message": "Hi, my name is Clippy!"}


@app.get("/health")
async def health():
    return {"ok": True}
