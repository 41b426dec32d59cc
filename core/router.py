from __future__ import annotations

from enum import Enum

SSE_BASE = "/sse"
MCP_BASE = "/mcp"
HEALTH_PATH = "/health"

SSE_PATHS = frozenset({SSE_BASE, f"{SSE_BASE}/message"})
HEALTH_PATHS = frozenset({HEALTH_PATH, "/"})
AVAILABLE_ENDPOINTS = [MCP_BASE, SSE_BASE, HEALTH_PATH]


class Route(str, Enum):
    PREFLIGHT = "preflight"
    SSE = "sse"
    MCP = "mcp"
    HEALTH = "health"
    NOT_FOUND = "not_found"


def is_mcp_path(path: str) -> bool:
    return path == MCP_BASE or path.startswith(f"{MCP_BASE}/")


def classify(method: str, path: str) -> Route:
    """Pick the handling branch for a request; first match wins."""
    if method.upper() == "OPTIONS":
        return Route.PREFLIGHT
    if path in SSE_PATHS:
        return Route.SSE
    if is_mcp_path(path):
        return Route.MCP
    if path in HEALTH_PATHS:
        return Route.HEALTH
    return Route.NOT_FOUND
