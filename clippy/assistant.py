"""Assistant — tool-augmented reply loop and conversation titling.

``Assistant.reply`` drives round-trips between the chat model and the tool
registry until the model answers without requesting tools:

    build messages -> submit(messages, descriptors) -> tool calls? -> dispatch
          ^                                                               |
          +---------------------- append tool outputs <-------------------+

Tool failures are fed back to the model as tool outputs. Model failures, empty
responses and running out of rounds end the reply with an exception.
"""
import asyncio
import logging
import re
from typing import Any, Dict, List, Optional

from .errors import (
    DeadlineExceeded,
    EmptyConversation,
    NoModelChoices,
    ToolError,
    TooManyToolCalls,
    UnknownTool,
)
from .llm import (
    ASSISTANT_ROLE,
    USER_ROLE,
    ChatModel,
    ToolCallRequest,
    assistant_message,
    system_message,
    tool_message,
    user_message,
)
from .tools.registry import ToolRegistry

logger = logging.getLogger(__name__)

MAX_TOOL_ROUNDS = 15
MAX_TITLE_LENGTH = 80
UNTITLED = "Untitled conversation"

REPLY_PROMPT = "You are a helpful, concise AI assistant. Provide accurate, safe, and clear responses."

TITLE_PROMPT = (
    "You are a titling assistant. Generate a concise, neutral conversation TITLE "
    f"(max {MAX_TITLE_LENGTH} characters) summarizing the user's question. "
    "Do NOT answer the question. No quotes, no emojis, no trailing punctuation. "
    "Return ONLY the title."
)

# Anything but letters, digits, whitespace and hyphens (\w minus underscore)
_TITLE_STRIP_RE = re.compile(r"[^\w\s-]|_")


class Assistant:
    def __init__(
        self,
        model: ChatModel,
        registry: Optional[ToolRegistry] = None,
        title_model: Optional[ChatModel] = None,
        max_tool_rounds: int = MAX_TOOL_ROUNDS,
        reply_timeout: Optional[float] = None,
    ):
        self.model = model
        self.title_model = title_model or model
        self.registry = registry if registry is not None else ToolRegistry()
        self.max_tool_rounds = max_tool_rounds
        self.reply_timeout = reply_timeout or None

    async def reply(self, conversation) -> str:
        """Generate the assistant's next message for ``conversation``.

        ``conversation`` is anything with ``id`` and ordered ``messages``
        carrying ``role`` and ``content``.
        """
        if self.reply_timeout is None:
            return await self._reply(conversation)
        try:
            return await asyncio.wait_for(self._reply(conversation), timeout=self.reply_timeout)
        except asyncio.TimeoutError as e:
            logger.warning(f"[{_conv_id(conversation)}] Reply timed out after {self.reply_timeout}s")
            raise DeadlineExceeded(f"reply did not complete within {self.reply_timeout}s") from e

    async def _reply(self, conversation) -> str:
        if not conversation.messages:
            raise EmptyConversation("conversation has no messages")

        cid = _conv_id(conversation)
        logger.info(f"[{cid}] Generating reply ({len(conversation.messages)} messages)")
        messages = build_messages(conversation.messages)

        for round_no in range(1, self.max_tool_rounds + 1):
            choices = await self.model.submit(messages, self.registry.descriptors())
            if not choices:
                raise NoModelChoices("no choices returned by the model")

            top = choices[0]
            if not top.tool_calls:
                logger.info(f"[{cid}] Reply ready after {round_no} round(s)")
                return top.content

            messages.append(assistant_message(top.content, top.tool_calls))
            for call in top.tool_calls:
                messages.append(tool_message(await self._dispatch(cid, call), call.id))

        logger.error(f"[{cid}] Gave up after {self.max_tool_rounds} tool rounds")
        raise TooManyToolCalls(f"too many tool calls, unable to generate reply after {self.max_tool_rounds} rounds")

    async def _dispatch(self, cid: str, call: ToolCallRequest) -> str:
        logger.info(f"[{cid}] Tool call received: {call.name}({call.arguments})")
        try:
            return await self.registry.dispatch(call.name, call.arguments)
        except UnknownTool:
            return f"unknown tool: {call.name}"
        except ToolError as e:
            return f"error: {e}"

    async def title(self, conversation) -> str:
        """Summarize the conversation's opening question into a short title."""
        messages = conversation.messages
        if not messages:
            return UNTITLED

        logger.info(f"[{_conv_id(conversation)}] Generating title")
        source = next(
            (m.content for m in messages if m.role == USER_ROLE and (m.content or "").strip()),
            messages[0].content or "",
        )

        choices = await self.title_model.submit([system_message(TITLE_PROMPT), user_message(source)])
        if not choices or not choices[0].content.strip():
            raise NoModelChoices("empty response from the model for title generation")

        return normalize_title(choices[0].content) or normalize_title(source) or UNTITLED


def build_messages(history) -> List[Dict[str, Any]]:
    """System prompt followed by the user/assistant turns of ``history``."""
    messages = [system_message(REPLY_PROMPT)]
    for m in history:
        if m.role == USER_ROLE:
            messages.append(user_message(m.content))
        elif m.role == ASSISTANT_ROLE:
            messages.append(assistant_message(m.content))
    return messages


def normalize_title(text: str) -> str:
    text = text.strip().replace("\n", " ")
    text = text.strip("\"'")
    text = _TITLE_STRIP_RE.sub("", text)
    text = text.rstrip(".!?… ")
    return text[:MAX_TITLE_LENGTH].strip()


def _conv_id(conversation) -> str:
    return str(getattr(conversation, "id", None) or "-")
