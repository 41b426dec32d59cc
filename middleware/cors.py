from __future__ import annotations

from typing import Dict

from starlette.responses import Response

CORS_HEADERS: Dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
    "Access-Control-Expose-Headers": "Mcp-Session-Id",
}

PREFLIGHT_MAX_AGE = "86400"


def cors_headers(preflight: bool = False) -> Dict[str, str]:
    headers = dict(CORS_HEADERS)
    if preflight:
        headers["Access-Control-Max-Age"] = PREFLIGHT_MAX_AGE
    return headers


def apply_cors(response: Response, preflight: bool = False) -> Response:
    """Overwrite the cross-origin header set on ``response`` and return it."""
    for key, value in cors_headers(preflight).items():
        response.headers[key] = value
    return response
