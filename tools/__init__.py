"""
Trello MCP Tools - Tool registry and dispatcher.
"""

import functools
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from jsonschema import Draft7Validator, SchemaError
from mcp.types import Tool

from errors import ConfigurationError, UnknownToolError, ValidationError
from tools import trello
from tools.trello.client import TrelloClient

logger = logging.getLogger(__name__)

ToolHandler = Callable[[dict], Awaitable[Any]]


@dataclass(frozen=True)
class ToolDescriptor:
    """A tool declaration bound to the coroutine that serves it."""

    tool: Tool
    handler: ToolHandler

    @property
    def name(self) -> str:
        return self.tool.name


class ToolRegistry:
    """Insertion-ordered registry of tools, keyed by name."""

    def __init__(self):
        self._tools: dict[str, ToolDescriptor] = {}
        self._validators: dict[str, Draft7Validator] = {}

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def register(self, descriptor: ToolDescriptor) -> None:
        """Register a tool. Names must be unique."""
        name = descriptor.name
        if name in self._tools:
            raise ConfigurationError(f"Tool {name} is already registered")

        try:
            Draft7Validator.check_schema(descriptor.tool.inputSchema)
        except SchemaError as e:
            raise ConfigurationError(f"Tool {name} has an invalid input schema: {e.message}") from e

        self._tools[name] = descriptor
        self._validators[name] = Draft7Validator(descriptor.tool.inputSchema)
        logger.debug("Registered tool: %s", name)

    def get(self, name: str) -> ToolDescriptor:
        """Get a tool descriptor by name."""
        descriptor = self._tools.get(name)
        if descriptor is None:
            raise UnknownToolError(name)
        return descriptor

    def list_tools(self) -> list[Tool]:
        """All tool declarations, in registration order."""
        return [d.tool for d in self._tools.values()]

    def validate(self, name: str, arguments: dict | None) -> dict:
        """
        Check arguments against the tool's input schema.

        Returns:
            The arguments, with None replaced by an empty dict.

        Raises:
            UnknownToolError: No tool has this name.
            ValidationError: Naming every offending field.
        """
        self.get(name)
        arguments = {} if arguments is None else arguments

        # field -> first problem reported for it; jsonschema repeats "required" once per missing field
        problems: dict[str, str] = {}
        for error in sorted(self._validators[name].iter_errors(arguments), key=lambda e: e.path):
            if error.validator == "required" and isinstance(error.instance, dict):
                for field in error.validator_value:
                    if field not in error.instance:
                        problems.setdefault(field, "required")
            else:
                field = ".".join(str(p) for p in error.absolute_path) or "<arguments>"
                problems.setdefault(field, error.message)

        if problems:
            message = "; ".join(f"{field}: {problem}" for field, problem in problems.items())
            raise ValidationError(f"Invalid arguments for {name}: {message}", list(problems))
        return arguments

    async def invoke(self, name: str, arguments: dict | None) -> Any:
        """Validate arguments, then run the tool's handler. Handler errors propagate."""
        arguments = self.validate(name, arguments)
        return await self._tools[name].handler(arguments)


def build_registry(client: TrelloClient) -> ToolRegistry:
    """Register every Trello tool against one API client."""
    registry = ToolRegistry()
    for tool in trello.TOOLS:
        handler = functools.partial(trello.HANDLERS[tool.name], client)
        registry.register(ToolDescriptor(tool=tool, handler=handler))
    return registry
