"""Shared fixtures: scripted chat models, throwaway tools, a temp database."""
import copy
from typing import Any, Dict, List

import httpx
import pytest
import pytest_asyncio

from clippy.database import Base, make_engine, make_session_factory
from clippy.llm import ChatModel, Choice, ToolCallRequest
from clippy.models import Conversation, Message
from clippy.tools.registry import Tool, ToolParam


SAMPLE_ICS = """BEGIN:VCALENDAR
VERSION:2.0
PRODID:-//Test//EN
BEGIN:VEVENT
UID:1
DTSTART;VALUE=DATE:20250101
SUMMARY:New Year's Day
END:VEVENT
BEGIN:VEVENT
UID:2
DTSTART;VALUE=DATE:20250106
SUMMARY:Epiphany
END:VEVENT
END:VCALENDAR
"""


def make_conversation(*turns, conversation_id: str = "conv-1") -> Conversation:
    """Transient conversation from (role, content) pairs."""
    return Conversation(
        id=conversation_id,
        title="",
        messages=[Message(role=role, content=content) for role, content in turns],
    )


def tool_call(name: str, arguments: str = "{}", call_id: str = "") -> ToolCallRequest:
    return ToolCallRequest(id=call_id or f"call_{name}", name=name, arguments=arguments)


class ScriptedModel(ChatModel):
    """Returns scripted responses in order and records what it was sent.

    Each script entry is a list of Choices, or an exception to raise. Once the
    script runs out the last entry repeats.
    """

    def __init__(self, *script):
        self.script = list(script)
        self.requests: List[List[Dict[str, Any]]] = []
        self.tools_seen: List[list] = []

    @property
    def calls(self) -> int:
        return len(self.requests)

    async def submit(self, messages, tools=()):
        self.requests.append(copy.deepcopy(messages))
        self.tools_seen.append(list(tools))
        step = self.script[min(len(self.requests) - 1, len(self.script) - 1)]
        if isinstance(step, BaseException):
            raise step
        return step


class EchoTool(Tool):
    name = "echo"
    description = "Echo the text back"
    params = [ToolParam("text", description="text to echo")]

    async def run(self, text: str = "", **kwargs) -> str:
        return f"echo: {text}"


class BrokenTool(Tool):
    name = "broken"
    description = "Always fails"
    params = []

    async def run(self, **kwargs) -> str:
        raise RuntimeError("boom")


@pytest.fixture
def echo_tool():
    return EchoTool()


@pytest.fixture
def broken_tool():
    return BrokenTool()


@pytest.fixture
def conversation():
    return make_conversation(("user", "What is the weather like in Barcelona?"))


def mock_http(handler) -> httpx.AsyncClient:
    """AsyncClient whose requests are answered by ``handler(request)``."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.fixture
def ics_http():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, text=SAMPLE_ICS, headers={"Content-Type": "text/calendar"})

    client = mock_http(handler)
    client.requests = requests
    return client


@pytest_asyncio.fixture
async def db_engine(tmp_path):
    engine = make_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session_factory(db_engine):
    return make_session_factory(db_engine)


@pytest_asyncio.fixture
async def db(db_session_factory):
    async with db_session_factory() as session:
        yield session


def final(content: str) -> List[Choice]:
    return [Choice(content=content)]


def calls(*requests: ToolCallRequest, content: str = "") -> List[Choice]:
    return [Choice(content=content, tool_calls=list(requests))]
