import os
import logging
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.responses import Response

import server as mcp_server
from core.protocol import INTERNAL_ERROR, jsonrpc_error
from core.router import AVAILABLE_ENDPOINTS, HEALTH_PATH, MCP_BASE, SSE_BASE, Route, classify
from core.transport import SSEAdapter, StreamableHTTPAdapter
from middleware.cors import apply_cors

# Config (read once at import)
MCP_BIND = os.getenv("MCP_BIND", "0.0.0.0:8787")

logger = logging.getLogger(__name__)

mcp = mcp_server.get_server_singleton()
mcp_adapter = StreamableHTTPAdapter(mcp, base_path=MCP_BASE)
sse_adapter = SSEAdapter(mcp, base_path=SSE_BASE)

# The dispatcher owns every path, so the generated docs routes stay off.
app = FastAPI(
    title=f"{mcp.name} MCP Server",
    version=mcp.version,
    docs_url=None,
    redoc_url=None,
    openapi_url=None,
)

ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def _internal_error(detail: str) -> JSONResponse:
    return JSONResponse(jsonrpc_error(INTERNAL_ERROR, "Internal error", None, detail), status_code=500)


def health_document() -> Dict[str, Any]:
    return {
        "status": "healthy",
        "server": f"{mcp.name} MCP Server",
        "version": mcp.version,
        "tools": mcp.registry.names(),
        "endpoints": {"mcp": MCP_BASE, "sse": SSE_BASE, "health": HEALTH_PATH},
        "timestamp": datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
    }


def not_found_document(path: str) -> Dict[str, Any]:
    return {"error": "Not found", "path": path, "available_endpoints": list(AVAILABLE_ENDPOINTS)}


async def _buffer_response(response: Response) -> Response:
    """Read an adapter response fully so headers can be merged before sending."""
    body = getattr(response, "body", None)
    if body is None:
        chunks = []
        async for chunk in response.body_iterator:
            chunks.append(chunk if isinstance(chunk, bytes) else chunk.encode("utf-8"))
        body = b"".join(chunks)
    headers = {k: v for k, v in response.headers.items() if k.lower() != "content-length"}
    return Response(content=body, status_code=response.status_code, headers=headers)


async def _serve_mcp(request: Request) -> Response:
    # The adapter gets its own copy of the body; the request stream is single-use.
    body = await request.body() if request.method == "POST" else b""
    try:
        response = await mcp_adapter.serve_request(request.method, dict(request.headers), body)
        buffered = await _buffer_response(response)
    except Exception as e:
        logger.exception("MCP handler error")
        return _internal_error(str(e))
    logger.info("MCP handler response status=%s", buffered.status_code)
    return buffered


@app.api_route("/{full_path:path}", methods=ALL_METHODS)
async def dispatch(request: Request, full_path: str) -> Response:
    method = request.method
    path = request.url.path
    preflight = False
    try:
        route = classify(method, path)
        logger.info("route=%s method=%s path=%s", route.value, method, path)
        if route is Route.PREFLIGHT:
            preflight = True
            response = Response(status_code=200)
        elif route is Route.SSE:
            response = await sse_adapter.serve_stream(request)
        elif route is Route.MCP:
            response = await _serve_mcp(request)
        elif route is Route.HEALTH:
            response = JSONResponse(health_document())
        else:
            response = JSONResponse(not_found_document(path), status_code=404)
    except Exception as e:
        logger.exception("Request handling error for %s %s", method, path)
        response = _internal_error(str(e))
    return apply_cors(response, preflight=preflight)


# logging accepts these aliases; uvicorn only knows the canonical names
_UVICORN_LEVEL_ALIASES = {"warn": "warning", "fatal": "critical", "notset": "trace"}
_UVICORN_LEVELS = {"critical", "error", "warning", "info", "debug", "trace"}


def uvicorn_log_level(level: str) -> str:
    name = level.strip().lower()
    name = _UVICORN_LEVEL_ALIASES.get(name, name)
    return name if name in _UVICORN_LEVELS else "info"


# Entrypoint helper
async def serve():
    host, port = MCP_BIND.split(":", 1)
    import uvicorn

    config = uvicorn.Config(app, host=host, port=int(port), log_level=uvicorn_log_level(mcp_server.LOG_LEVEL))
    server = uvicorn.Server(config)
    logger.info("Serving %s on http://%s:%s", mcp.name, host, port)
    await server.serve()
