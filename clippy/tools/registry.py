"""Tool registry — tool contract, descriptors and dispatch by name."""
import json
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from ..errors import InvalidArguments, ToolError, ToolExecutionError, UnknownTool

logger = logging.getLogger(__name__)

# JSON schema primitive type -> accepted Python types
_PY_TYPES = {
    "string": (str,),
    "integer": (int,),
    "number": (int, float),
    "boolean": (bool,),
}


@dataclass
class ToolParam:
    name: str
    type: str = "string"
    description: str = ""
    required: bool = True
    default: Any = None


@dataclass
class ToolDescriptor:
    name: str
    description: str
    parameters: Dict[str, Any] = field(default_factory=dict)


class Tool(ABC):
    """A named capability the model may invoke mid-conversation.

    Subclasses declare ``name``, ``description`` and ``params`` and implement
    ``run``. ``call`` owns argument parsing and turns unexpected failures into
    ``ToolExecutionError`` so dispatch only ever raises ``ToolError``.
    """

    name: str = ""
    description: str = ""
    params: List[ToolParam] = []

    def schema(self) -> Dict[str, Any]:
        properties = {}
        for p in self.params:
            prop = {"type": p.type}
            if p.description:
                prop["description"] = p.description
            properties[p.name] = prop
        schema = {"type": "object", "properties": properties}
        required = [p.name for p in self.params if p.required]
        if required:
            schema["required"] = required
        return schema

    def descriptor(self) -> ToolDescriptor:
        return ToolDescriptor(name=self.name, description=self.description, parameters=self.schema())

    def parse_args(self, raw_args: Optional[str]) -> Dict[str, Any]:
        """Decode a raw JSON argument payload and check it against ``params``.

        Empty payloads are treated as ``{}``. Keys not declared in ``params``
        are ignored. Optional params that are absent (or null) get their default.
        """
        if raw_args is None or not raw_args.strip():
            payload: Any = {}
        else:
            try:
                payload = json.loads(raw_args)
            except json.JSONDecodeError as e:
                raise InvalidArguments(f"invalid arguments: {e}") from e
        if not isinstance(payload, dict):
            raise InvalidArguments("invalid arguments: expected a JSON object")

        args = {}
        for p in self.params:
            value = payload.get(p.name)
            if value is None:
                if p.required:
                    raise InvalidArguments(f"invalid arguments: '{p.name}' is required")
                args[p.name] = p.default
                continue
            accepted = _PY_TYPES.get(p.type)
            # bool is an int subclass; never accept it for numeric params
            if accepted and (not isinstance(value, accepted)
                             or (p.type != "boolean" and isinstance(value, bool))):
                raise InvalidArguments(
                    f"invalid arguments: '{p.name}' must be of type {p.type}, got {type(value).__name__}"
                )
            args[p.name] = value
        return args

    async def call(self, raw_args: Optional[str]) -> str:
        args = self.parse_args(raw_args)
        try:
            return await self.run(**args)
        except ToolError:
            raise
        except Exception as e:
            logger.error(f"Tool {self.name} failed: {e}", exc_info=True)
            raise ToolExecutionError(f"{self.name} failed: {e}") from e

    @abstractmethod
    async def run(self, **kwargs) -> str:
        """Perform the tool's action with already-validated arguments."""


class ToolRegistry:
    """Name → Tool lookup. Read-only use is safe to share between conversations."""

    def __init__(self, tools: Iterable[Tool] = ()):
        self._tools: Dict[str, Tool] = {}
        for tool in tools:
            self.register(tool)

    def register(self, tool: Tool):
        """Insert or replace a tool by name (last write wins)."""
        if tool.name in self._tools:
            logger.info(f"Replacing tool: {tool.name}")
        self._tools[tool.name] = tool
        logger.debug(f"Registered tool: {tool.name}")

    def get(self, name: str) -> Optional[Tool]:
        return self._tools.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def names(self) -> List[str]:
        return sorted(self._tools)

    def tools(self) -> List[Tool]:
        return [self._tools[name] for name in self.names()]

    def descriptors(self) -> List[ToolDescriptor]:
        """Descriptors sorted by name, so the schema sent to the model is deterministic."""
        return [tool.descriptor() for tool in self.tools()]

    async def dispatch(self, name: str, raw_args: Optional[str]) -> str:
        tool = self.get(name)
        if not tool:
            logger.warning(f"Unknown tool: {name}")
            raise UnknownTool(name)

        logger.info(f"Executing tool: {name}({raw_args or ''})")
        t0 = time.monotonic()
        try:
            result = await tool.call(raw_args)
        except ToolError as e:
            logger.warning(f"Tool {name}: {time.monotonic() - t0:.1f}s -> error: {e}")
            raise
        logger.info(f"Tool {name}: {time.monotonic() - t0:.1f}s -> ok ({len(result)} chars)")
        return result


def to_openai_tool(descriptor: ToolDescriptor) -> Dict[str, Any]:
    """Render a descriptor as an OpenAI function-tool definition."""
    return {
        "type": "function",
        "function": {
            "name": descriptor.name,
            "description": descriptor.description,
            "parameters": descriptor.parameters,
        },
    }
