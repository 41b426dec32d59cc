"""Shared pydantic contracts and JSON-RPC helpers for the MCP calculator."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Literal, Optional, Type

from pydantic import BaseModel, ConfigDict, Field

JSONRPC_VERSION = "2.0"

# JSON-RPC 2.0 error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603
SERVER_ERROR = -32000


class TextContent(BaseModel):
    """A single text content block inside a tool result."""

    type: Literal["text"] = "text"
    text: str


class ToolResult(BaseModel):
    """Payload returned by a tool handler."""

    model_config = ConfigDict(frozen=True)

    content: List[TextContent] = Field(default_factory=list)

    @classmethod
    def text(cls, text: str) -> "ToolResult":
        return cls(content=[TextContent(text=text)])

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump()


@dataclass(frozen=True)
class ToolDefinition:
    """A named tool: argument model plus the handler it validates for."""

    name: str
    input_model: Type[BaseModel]
    handler: Callable[[BaseModel], ToolResult]
    description: str = ""

    def input_schema(self) -> Dict[str, Any]:
        return self.input_model.model_json_schema()

    def descriptor(self) -> Dict[str, Any]:
        """Discovery entry as advertised through ``tools/list``."""
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema(),
        }


def jsonrpc_result(request_id: Any, result: Dict[str, Any]) -> Dict[str, Any]:
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "result": result}


def jsonrpc_error(
    code: int,
    message: str,
    request_id: Any = None,
    data: Optional[Any] = None,
) -> Dict[str, Any]:
    """Build a JSON-RPC error envelope; ``data`` is omitted when not given."""
    error: Dict[str, Any] = {"code": code, "message": message}
    if data is not None:
        error["data"] = data
    return {"jsonrpc": JSONRPC_VERSION, "error": error, "id": request_id}
