"""Exception hierarchy for the reply loop, the tool registry and the tools.

Tool errors (``ToolError`` and subclasses) are recoverable: the reply loop turns
them into tool-output messages so the model can react. Everything else is
terminal and reaches the caller of ``Assistant.reply`` / ``Assistant.title``.
Task cancellation is plain ``asyncio.CancelledError``.
"""


class ChatError(Exception):
    """Base class for every error raised by the chat core."""


class ConfigurationError(ChatError):
    """Required configuration (e.g. an API key) is missing or invalid."""


class EmptyConversation(ChatError):
    """The conversation has no messages to reply to."""


class NoModelChoices(ChatError):
    """The model returned no usable choice."""


class TooManyToolCalls(ChatError):
    """The model kept requesting tools past the round limit."""


class ModelCapabilityError(ChatError):
    """The chat-completion provider call failed."""


class DeadlineExceeded(ChatError):
    """The reply did not complete before its deadline."""


class ToolError(ChatError):
    """Base class for failures reported by a tool call."""


class UnknownTool(ToolError):
    def __init__(self, name: str):
        super().__init__(f"unknown tool: {name}")
        self.name = name


class InvalidArguments(ToolError):
    """Tool arguments are missing, malformed or of the wrong type."""


class ToolExecutionError(ToolError):
    """Arguments were valid but the tool's action failed."""
