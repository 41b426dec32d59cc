from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Type

from pydantic import BaseModel

from .protocol import ToolDefinition, ToolResult

logger = logging.getLogger(__name__)


class ToolRegistrationError(ValueError):
    """Raised when a tool cannot be registered (empty or duplicate name)."""


class ToolNotFoundError(LookupError):
    """Raised when the requested tool is not registered."""


class ToolRegistry:
    """Registry mapping tool names to their definitions.

    Registration order is preserved; it is the order tools are advertised in.
    Argument validation is delegated to each tool's pydantic input model.
    """

    def __init__(self) -> None:
        self._tools: Dict[str, ToolDefinition] = {}

    def register(self, definition: ToolDefinition) -> None:
        name = definition.name
        if not isinstance(name, str) or not name:
            raise ToolRegistrationError("Tool name must be a non-empty string")
        if name in self._tools:
            raise ToolRegistrationError(f"Tool '{name}' is already registered")
        self._tools[name] = definition
        logger.debug("Registered tool %s", name)

    def register_tool(
        self,
        name: str,
        input_model: Type[BaseModel],
        handler: Callable[[Any], ToolResult],
        *,
        description: str = "",
    ) -> ToolDefinition:
        definition = ToolDefinition(
            name=name,
            input_model=input_model,
            handler=handler,
            description=description,
        )
        self.register(definition)
        return definition

    def get(self, name: str) -> Optional[ToolDefinition]:
        return self._tools.get(name)

    def names(self) -> List[str]:
        return list(self._tools)

    def list_tools(self) -> List[Dict[str, Any]]:
        return [definition.descriptor() for definition in self._tools.values()]

    def invoke(self, name: str, arguments: Optional[Mapping[str, Any]]) -> ToolResult:
        """Validate ``arguments`` and run the named tool.

        Raises ToolNotFoundError for unknown names and pydantic's
        ValidationError when the arguments do not match the tool schema.
        """
        definition = self.get(name)
        if definition is None:
            raise ToolNotFoundError(f"Unknown tool: {name}")
        validated = definition.input_model.model_validate(dict(arguments or {}))
        logger.info("tool_invoke tool=%s", name)
        return definition.handler(validated)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)
