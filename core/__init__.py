"""Core package for the calculator MCP server.

This package houses the primary orchestration components:
- protocol: pydantic contracts and JSON-RPC envelope helpers
- registry: Tool registration and argument validation
- server: JSON-RPC session logic (initialize, tools/list, tools/call)
- transport: request/response and server-sent event adapters
- router: path/method classification for the HTTP front door
"""
