import asyncio

from core.protocol import INTERNAL_ERROR, INVALID_PARAMS, INVALID_REQUEST, METHOD_NOT_FOUND


def _call(mcp, message):
    return asyncio.run(mcp.handle_message(message))


def test_initialize_reports_server_info(mcp):
    res = _call(mcp, {"jsonrpc": "2.0", "id": 1, "method": "initialize",
                      "params": {"protocolVersion": "2024-11-05", "clientInfo": {"name": "t"}}})
    result = res["result"]
    assert result["protocolVersion"] == "2024-11-05"
    assert result["capabilities"]["tools"] == {"listChanged": False}
    assert result["serverInfo"] == {"name": mcp.name, "version": mcp.version}


def test_initialize_unknown_version_falls_back(mcp):
    res = _call(mcp, {"jsonrpc": "2.0", "id": 1, "method": "initialize", "params": {"protocolVersion": "1999-01-01"}})
    assert res["result"]["protocolVersion"] != "1999-01-01"


def test_notifications_have_no_response(mcp):
    assert _call(mcp, {"jsonrpc": "2.0", "method": "notifications/initialized"}) is None


def test_ping_and_tools_list(mcp):
    assert _call(mcp, {"jsonrpc": "2.0", "id": "p", "method": "ping"}) == {"jsonrpc": "2.0", "id": "p", "result": {}}
    res = _call(mcp, {"jsonrpc": "2.0", "id": 2, "method": "tools/list"})
    assert [t["name"] for t in res["result"]["tools"]] == ["add", "calculate"]


def test_tools_call_add(mcp):
    res = _call(mcp, {"jsonrpc": "2.0", "id": 3, "method": "tools/call",
                      "params": {"name": "add", "arguments": {"a": 2, "b": 3}}})
    assert res == {"jsonrpc": "2.0", "id": 3, "result": {"content": [{"type": "text", "text": "2 + 3 = 5"}]}}


def test_tools_call_divide_by_zero_is_not_a_fault(mcp):
    res = _call(mcp, {"jsonrpc": "2.0", "id": 4, "method": "tools/call",
                      "params": {"name": "calculate", "arguments": {"operation": "divide", "a": 1, "b": 0}}})
    assert "error" not in res
    assert res["result"]["content"][0]["text"] == "Error: Cannot divide by zero"


def test_tools_call_errors(mcp):
    unknown = _call(mcp, {"jsonrpc": "2.0", "id": 5, "method": "tools/call", "params": {"name": "sqrt", "arguments": {}}})
    assert unknown["error"]["code"] == METHOD_NOT_FOUND
    bad = _call(mcp, {"jsonrpc": "2.0", "id": 6, "method": "tools/call",
                      "params": {"name": "add", "arguments": {"a": "2", "b": 3}}})
    assert bad["error"]["code"] == INVALID_PARAMS
    assert bad["id"] == 6
    missing = _call(mcp, {"jsonrpc": "2.0", "id": 7, "method": "tools/call", "params": {}})
    assert missing["error"]["code"] == INVALID_PARAMS


def test_unknown_method_and_invalid_request(mcp):
    res = _call(mcp, {"jsonrpc": "2.0", "id": 8, "method": "resources/list"})
    assert res["error"]["code"] == METHOD_NOT_FOUND
    assert _call(mcp, {"id": 9, "method": "ping"})["error"]["code"] == INVALID_REQUEST
    assert _call(mcp, ["not", "an", "object"])["error"]["code"] == INVALID_REQUEST


def test_handler_crash_becomes_internal_error(mcp, monkeypatch):
    def boom(name, arguments):
        raise RuntimeError("kaboom")

    monkeypatch.setattr(mcp.registry, "invoke", boom)
    res = _call(mcp, {"jsonrpc": "2.0", "id": 10, "method": "tools/call", "params": {"name": "add", "arguments": {}}})
    assert res["error"] == {"code": INTERNAL_ERROR, "message": "Internal error", "data": "kaboom"}


def test_tools_call_without_id_is_a_notification(mcp):
    res = _call(mcp, {"jsonrpc": "2.0", "method": "tools/call", "params": {"name": "add", "arguments": {"a": 1, "b": 2}}})
    assert res is None


def test_unknown_method_notification_gets_no_reply(mcp):
    assert _call(mcp, {"jsonrpc": "2.0", "method": "resources/list"}) is None
    assert _call(mcp, {"jsonrpc": "2.0", "method": "ping"}) is None


def test_initialize_with_non_object_params(mcp):
    res = _call(mcp, {"jsonrpc": "2.0", "id": 11, "method": "initialize", "params": ["x"]})
    assert res["error"]["code"] == INVALID_PARAMS
    assert res["id"] == 11
    ok = _call(mcp, {"jsonrpc": "2.0", "id": 12, "method": "initialize", "params": {"clientInfo": "not-a-dict"}})
    assert "result" in ok
