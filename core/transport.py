"""Transport adapters that frame MCP messages over HTTP.

Two entry points share one ``CalculatorMCPServer``:

- ``StreamableHTTPAdapter.serve_request``: one POST carries a JSON-RPC
  message (or batch) and the response comes back in the same HTTP exchange.
- ``SSEAdapter.serve_stream``: a GET opens a server-sent event stream that
  announces a per-session message endpoint; messages POSTed there are
  answered on the stream.
"""

from __future__ import annotations

import asyncio
import json
import logging
import uuid
from typing import Any, Dict, List, Mapping, Optional, Union

from sse_starlette.sse import EventSourceResponse
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from .protocol import INVALID_REQUEST, PARSE_ERROR, SERVER_ERROR, jsonrpc_error
from .server import CalculatorMCPServer

logger = logging.getLogger(__name__)

SESSION_HEADER = "Mcp-Session-Id"

JSONPayload = Union[Dict[str, Any], List[Dict[str, Any]]]


async def dispatch_payload(server: CalculatorMCPServer, payload: Any) -> Optional[JSONPayload]:
    """Run a decoded message or batch through the server.

    Returns None when nothing needs to be sent back (notifications only).
    """
    if isinstance(payload, list):
        if not payload:
            return jsonrpc_error(INVALID_REQUEST, "Invalid Request")
        responses = []
        for message in payload:
            response = await server.handle_message(message)
            if response is not None:
                responses.append(response)
        return responses or None
    return await server.handle_message(payload)


def _is_initialize(payload: Any) -> bool:
    messages = payload if isinstance(payload, list) else [payload]
    return any(isinstance(m, dict) and m.get("method") == "initialize" for m in messages)


class StreamableHTTPAdapter:
    """Request/response framing: one HTTP exchange per JSON-RPC payload."""

    def __init__(self, server: CalculatorMCPServer, base_path: str = "/mcp") -> None:
        self.server = server
        self.base_path = base_path

    async def serve_request(self, method: str, headers: Mapping[str, str], body: bytes) -> Response:
        if method.upper() != "POST":
            return JSONResponse(
                jsonrpc_error(SERVER_ERROR, "Method not allowed"),
                status_code=405,
                headers={"Allow": "POST"},
            )

        try:
            payload = json.loads(body.decode("utf-8")) if body else None
        except (UnicodeDecodeError, ValueError) as e:
            logger.warning("Unparseable MCP payload: %s", e)
            return JSONResponse(jsonrpc_error(PARSE_ERROR, "Parse error", data=str(e)), status_code=400)
        if payload is None:
            return JSONResponse(jsonrpc_error(INVALID_REQUEST, "Invalid Request"), status_code=400)

        response = await dispatch_payload(self.server, payload)
        if response is None:
            return Response(status_code=202)

        extra_headers: Dict[str, str] = {}
        if _is_initialize(payload):
            extra_headers[SESSION_HEADER] = uuid.uuid4().hex
        elif headers.get(SESSION_HEADER.lower()):
            extra_headers[SESSION_HEADER] = headers[SESSION_HEADER.lower()]
        return JSONResponse(response, status_code=200, headers=extra_headers)


class SSEAdapter:
    """Server-sent events framing with one message queue per open stream."""

    def __init__(self, server: CalculatorMCPServer, base_path: str = "/sse") -> None:
        self.server = server
        self.base_path = base_path
        self._sessions: Dict[str, asyncio.Queue] = {}

    @property
    def message_path(self) -> str:
        return f"{self.base_path}/message"

    def open_session(self) -> str:
        session_id = uuid.uuid4().hex
        self._sessions[session_id] = asyncio.Queue()
        logger.info("SSE session opened id=%s", session_id)
        return session_id

    def close_session(self, session_id: str) -> None:
        if self._sessions.pop(session_id, None) is not None:
            logger.info("SSE session closed id=%s", session_id)

    def has_session(self, session_id: str) -> bool:
        return session_id in self._sessions

    def pending(self, session_id: str) -> asyncio.Queue:
        return self._sessions[session_id]

    async def post_message(self, session_id: str, body: bytes) -> Response:
        """Deliver one POSTed message; the answer is queued for the stream."""
        queue = self._sessions.get(session_id)
        if queue is None:
            return Response("Could not find session", status_code=404, media_type="text/plain")
        try:
            payload = json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as e:
            logger.warning("Unparseable SSE message for session %s: %s", session_id, e)
            return Response("Could not parse message", status_code=400, media_type="text/plain")

        response = await dispatch_payload(self.server, payload)
        if response is not None:
            queue.put_nowait(response)
        return Response("Accepted", status_code=202, media_type="text/plain")

    async def _events(self, session_id: str):
        queue = self._sessions[session_id]
        try:
            yield {"event": "endpoint", "data": f"{self.message_path}?sessionId={session_id}"}
            while True:
                message = await queue.get()
                yield {"event": "message", "data": json.dumps(message)}
        finally:
            self.close_session(session_id)

    async def serve_stream(self, request: Request) -> Response:
        path = request.url.path
        method = request.method.upper()

        if path == self.base_path and method == "GET":
            session_id = self.open_session()
            return EventSourceResponse(self._events(session_id))

        if path == self.message_path and method == "POST":
            session_id = request.query_params.get("sessionId")
            if not session_id:
                return Response("Missing sessionId", status_code=400, media_type="text/plain")
            body = await request.body()
            return await self.post_message(session_id, body)

        allowed = "GET" if path == self.base_path else "POST"
        return Response("Method not allowed", status_code=405, headers={"Allow": allowed}, media_type="text/plain")
