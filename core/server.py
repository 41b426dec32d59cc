from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

from pydantic import ValidationError

from .protocol import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    JSONRPC_VERSION,
    METHOD_NOT_FOUND,
    jsonrpc_error,
    jsonrpc_result,
)
from .registry import ToolNotFoundError, ToolRegistry

logger = logging.getLogger(__name__)

SERVER_NAME = os.getenv("MCP_SERVER_NAME", "Authless Calculator")
SERVER_VERSION = os.getenv("MCP_SERVER_VERSION", "1.0.0")
DEFAULT_PROTOCOL_VERSION = os.getenv("PROTOCOL_VERSION", "2025-03-26")
SUPPORTED_PROTOCOL_VERSIONS = ("2024-11-05", "2025-03-26", "2025-06-18")


class CalculatorMCPServer:
    """JSON-RPC session logic for the calculator tools.

    Transport-agnostic: adapters hand in decoded messages and get back the
    response object (or None for notifications) to frame however they frame.
    """

    def __init__(
        self,
        registry: Optional[ToolRegistry] = None,
        *,
        name: str = SERVER_NAME,
        version: str = SERVER_VERSION,
    ) -> None:
        self.registry = registry or ToolRegistry()
        self.name = name
        self.version = version

    # --- Public API ---
    async def handle_message(self, message: Any) -> Optional[Dict[str, Any]]:
        """Dispatch one JSON-RPC message.

        Returns None for notifications (messages without an ``id``).
        """
        if not isinstance(message, dict) or message.get("jsonrpc") != JSONRPC_VERSION:
            return jsonrpc_error(INVALID_REQUEST, "Invalid Request")
        method = message.get("method")
        request_id = message.get("id")
        if not isinstance(method, str):
            return jsonrpc_error(INVALID_REQUEST, "Invalid Request", request_id)
        is_notification = "id" not in message

        if method.startswith("notifications/"):
            logger.debug("Notification received: %s", method)
            return None

        try:
            if method == "initialize":
                params = message.get("params") or {}
                if not isinstance(params, dict):
                    response = jsonrpc_error(INVALID_PARAMS, "Initialize params must be an object", request_id)
                else:
                    response = jsonrpc_result(request_id, self._initialize(params))
            elif method == "ping":
                response = jsonrpc_result(request_id, {})
            elif method == "tools/list":
                response = jsonrpc_result(request_id, {"tools": self.registry.list_tools()})
            elif method == "tools/call":
                response = self.handle_tool_call(message)
            else:
                response = jsonrpc_error(METHOD_NOT_FOUND, f"Method not found: {method}", request_id)
        except Exception as e:
            logger.exception("Error handling %s", method)
            response = jsonrpc_error(INTERNAL_ERROR, "Internal error", request_id, str(e))

        # Notifications run for their effects only; JSON-RPC forbids a reply.
        return None if is_notification else response

    def handle_tool_call(self, message: Dict[str, Any]) -> Dict[str, Any]:
        """Execute a ``tools/call`` request and wrap the outcome as JSON-RPC."""
        request_id = message.get("id")
        params = message.get("params") or {}
        tool_name = params.get("name") if isinstance(params, dict) else None
        if not tool_name:
            return jsonrpc_error(INVALID_PARAMS, "Missing tool name", request_id)
        arguments = params.get("arguments") or {}
        if not isinstance(arguments, dict):
            return jsonrpc_error(INVALID_PARAMS, "Tool arguments must be an object", request_id)

        try:
            result = self.registry.invoke(tool_name, arguments)
        except ToolNotFoundError as e:
            return jsonrpc_error(METHOD_NOT_FOUND, str(e), request_id)
        except ValidationError as e:
            return jsonrpc_error(
                INVALID_PARAMS,
                f"Invalid params: {e.error_count()} validation error(s) for {tool_name}",
                request_id,
                e.errors(include_url=False, include_context=False),
            )
        except Exception as e:
            logger.exception("Tool %s failed", tool_name)
            return jsonrpc_error(INTERNAL_ERROR, "Internal error", request_id, str(e))
        return jsonrpc_result(request_id, result.to_payload())

    def info(self) -> Dict[str, str]:
        return {"name": self.name, "version": self.version}

    # --- Utilities ---
    def _initialize(self, params: Dict[str, Any]) -> Dict[str, Any]:
        requested = params.get("protocolVersion")
        version = requested if requested in SUPPORTED_PROTOCOL_VERSIONS else DEFAULT_PROTOCOL_VERSION
        client = params.get("clientInfo")
        client_name = client.get("name", "unknown") if isinstance(client, dict) else "unknown"
        logger.info("Session initialize client=%s protocol=%s", client_name, version)
        return {
            "protocolVersion": version,
            "capabilities": {"tools": {"listChanged": False}},
            "serverInfo": self.info(),
        }
