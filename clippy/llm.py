"""Chat model capability — submit messages + tool descriptors, get choices back."""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import openai
from openai import AsyncOpenAI

from .config import Settings, settings
from .errors import ModelCapabilityError
from .tools.registry import ToolDescriptor, to_openai_tool

logger = logging.getLogger(__name__)

USER_ROLE = "user"
ASSISTANT_ROLE = "assistant"
SYSTEM_ROLE = "system"
TOOL_ROLE = "tool"


@dataclass
class ToolCallRequest:
    id: str
    name: str
    arguments: str = ""


@dataclass
class Choice:
    content: str = ""
    tool_calls: List[ToolCallRequest] = field(default_factory=list)


def system_message(content: str) -> Dict[str, Any]:
    return {"role": SYSTEM_ROLE, "content": content}


def user_message(content: str) -> Dict[str, Any]:
    return {"role": USER_ROLE, "content": content}


def assistant_message(content: str, tool_calls: Sequence[ToolCallRequest] = ()) -> Dict[str, Any]:
    msg: Dict[str, Any] = {"role": ASSISTANT_ROLE, "content": content}
    if tool_calls:
        msg["tool_calls"] = [
            {
                "id": call.id,
                "type": "function",
                "function": {"name": call.name, "arguments": call.arguments},
            }
            for call in tool_calls
        ]
    return msg


def tool_message(content: str, tool_call_id: str) -> Dict[str, Any]:
    return {"role": TOOL_ROLE, "tool_call_id": tool_call_id, "content": content}


class ChatModel(ABC):
    """A large-language-model chat endpoint."""

    @abstractmethod
    async def submit(
        self, messages: List[Dict[str, Any]], tools: Sequence[ToolDescriptor] = ()
    ) -> List[Choice]:
        """Send the message list and the tools the model may call.

        Returns the provider's choices, each with text content and zero or more
        tool-call requests. Provider failures raise ``ModelCapabilityError``.
        """


class OpenAIChatModel(ChatModel):
    def __init__(self, client: AsyncOpenAI, model: str):
        self.client = client
        self.model = model

    async def submit(
        self, messages: List[Dict[str, Any]], tools: Sequence[ToolDescriptor] = ()
    ) -> List[Choice]:
        kwargs: Dict[str, Any] = {"model": self.model, "messages": messages}
        if tools:
            kwargs["tools"] = [to_openai_tool(t) for t in tools]

        try:
            response = await self.client.chat.completions.create(**kwargs)
        except openai.OpenAIError as e:
            logger.error(f"OpenAI chat completion failed: {type(e).__name__}: {e}")
            raise ModelCapabilityError(f"chat completion failed: {e}") from e

        choices = [_to_choice(c) for c in (response.choices or [])]
        if choices:
            top = choices[0]
            logger.info(
                f"Model {self.model}: {len(choices)} choice(s), "
                f"{len(top.tool_calls)} tool call(s), {len(top.content)} chars"
            )
        return choices


def _to_choice(choice) -> Choice:
    message = choice.message
    calls = []
    for tc in message.tool_calls or []:
        # Only function tool calls carry name/arguments
        function = getattr(tc, "function", None)
        if function is None:
            continue
        calls.append(ToolCallRequest(id=tc.id, name=function.name, arguments=function.arguments or ""))
    return Choice(content=message.content or "", tool_calls=calls)


def get_client(cfg: Settings = settings) -> AsyncOpenAI:
    return AsyncOpenAI(
        api_key=cfg.openai_api_key or None,
        base_url=cfg.openai_base_url,
    )


def create_chat_model(cfg: Settings = settings, model: Optional[str] = None,
                      client: Optional[AsyncOpenAI] = None) -> OpenAIChatModel:
    return OpenAIChatModel(client or get_client(cfg), model or cfg.openai_chat_model)
