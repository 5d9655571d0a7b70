"""Tests for clippy/llm.py — OpenAI chat model adapter and message helpers."""
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import openai
import pytest

from clippy.config import Settings
from clippy.errors import ModelCapabilityError
from clippy.llm import (
    OpenAIChatModel,
    ToolCallRequest,
    assistant_message,
    create_chat_model,
    system_message,
    tool_message,
    user_message,
)
from clippy.tools.registry import ToolRegistry

from conftest import EchoTool


def _completion(*choices):
    return SimpleNamespace(choices=list(choices))


def _choice(content=None, tool_calls=None):
    return SimpleNamespace(message=SimpleNamespace(content=content, tool_calls=tool_calls))


def _function_call(call_id, name, arguments):
    return SimpleNamespace(id=call_id, type="function", function=SimpleNamespace(name=name, arguments=arguments))


def _mock_client(response=None, side_effect=None):
    client = MagicMock()
    client.chat.completions.create = AsyncMock(return_value=response, side_effect=side_effect)
    return client


class TestMessageHelpers:
    def test_plain_messages(self):
        assert system_message("be nice") == {"role": "system", "content": "be nice"}
        assert user_message("hi") == {"role": "user", "content": "hi"}
        assert assistant_message("hello") == {"role": "assistant", "content": "hello"}

    def test_assistant_with_tool_calls(self):
        msg = assistant_message("", [ToolCallRequest("c1", "time_in", '{"zone": "UTC"}')])
        assert msg["tool_calls"] == [
            {"id": "c1", "type": "function", "function": {"name": "time_in", "arguments": '{"zone": "UTC"}'}},
        ]

    def test_tool_message(self):
        assert tool_message("12:00", "c1") == {"role": "tool", "tool_call_id": "c1", "content": "12:00"}


class TestOpenAIChatModel:
    @pytest.mark.asyncio
    async def test_text_reply(self):
        client = _mock_client(_completion(_choice("Hola!")))
        choices = await OpenAIChatModel(client, "gpt-test").submit([user_message("hi")])
        assert len(choices) == 1
        assert choices[0].content == "Hola!"
        assert choices[0].tool_calls == []

    @pytest.mark.asyncio
    async def test_no_tools_kwarg_without_tools(self):
        client = _mock_client(_completion(_choice("ok")))
        await OpenAIChatModel(client, "gpt-test").submit([user_message("hi")])
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-test"
        assert kwargs["messages"] == [{"role": "user", "content": "hi"}]
        assert "tools" not in kwargs

    @pytest.mark.asyncio
    async def test_tools_sent_in_openai_format(self):
        client = _mock_client(_completion(_choice("ok")))
        descriptors = ToolRegistry([EchoTool()]).descriptors()
        await OpenAIChatModel(client, "gpt-test").submit([user_message("hi")], descriptors)
        tools = client.chat.completions.create.call_args.kwargs["tools"]
        assert tools[0]["type"] == "function"
        assert tools[0]["function"]["name"] == "echo"

    @pytest.mark.asyncio
    async def test_tool_calls_converted(self):
        calls = [
            _function_call("c1", "get_weather", '{"location": "Barcelona"}'),
            _function_call("c2", "get_today_date", None),
            SimpleNamespace(id="c3", type="custom"),
        ]
        client = _mock_client(_completion(_choice(None, calls)))
        choices = await OpenAIChatModel(client, "gpt-test").submit([user_message("hi")])
        assert choices[0].content == ""
        assert choices[0].tool_calls == [
            ToolCallRequest("c1", "get_weather", '{"location": "Barcelona"}'),
            ToolCallRequest("c2", "get_today_date", ""),
        ]

    @pytest.mark.asyncio
    async def test_no_choices(self):
        client = _mock_client(_completion())
        assert await OpenAIChatModel(client, "gpt-test").submit([user_message("hi")]) == []

    @pytest.mark.asyncio
    async def test_provider_error_wrapped(self):
        error = openai.APIConnectionError(request=httpx.Request("POST", "https://api.test/v1/chat/completions"))
        client = _mock_client(side_effect=error)
        with pytest.raises(ModelCapabilityError) as exc:
            await OpenAIChatModel(client, "gpt-test").submit([user_message("hi")])
        assert exc.value.__cause__ is error


class TestCreateChatModel:
    def test_defaults_to_chat_model(self):
        cfg = Settings(openai_api_key="sk-test", openai_chat_model="gpt-chat")
        model = create_chat_model(cfg, client=MagicMock())
        assert model.model == "gpt-chat"

    def test_title_model_override(self):
        cfg = Settings(openai_api_key="sk-test", openai_chat_model="gpt-chat", openai_title_model="gpt-mini")
        model = create_chat_model(cfg, model=cfg.title_model, client=MagicMock())
        assert model.model == "gpt-mini"

    def test_title_model_falls_back_to_chat_model(self):
        cfg = Settings(openai_chat_model="gpt-chat", openai_title_model="")
        assert cfg.title_model == "gpt-chat"
