import json, os, sys, requests

BASE_URL = os.getenv("MCP_BASE_URL", "http://localhost:8787").rstrip("/")


def rpc(method: str, params: dict | None = None, req_id: int = 1, session_id: str | None = None):
    headers = {"Content-Type": "application/json", "Accept": "application/json, text/event-stream"}
    if session_id:
        headers["Mcp-Session-Id"] = session_id
    payload = {"jsonrpc": "2.0", "id": req_id, "method": method, "params": params or {}}
    r = requests.post(f"{BASE_URL}/mcp", json=payload, headers=headers, timeout=10)
    r.raise_for_status()
    return r


def probe_health():
    r = requests.get(f"{BASE_URL}/health", timeout=10)
    r.raise_for_status()
    data = r.json()
    print(f"HEALTH OK status={data.get('status')} tools={data.get('tools')}")
    cors = r.headers.get("Access-Control-Allow-Origin")
    if cors != "*":
        print(f"WARN missing CORS header (got {cors!r})")


def probe_tools():
    init = rpc("initialize", {"protocolVersion": "2025-03-26", "clientInfo": {"name": "manual-probe", "version": "0"}})
    session_id = init.headers.get("Mcp-Session-Id")
    print("INITIALIZE:\n" + json.dumps(init.json(), indent=2))
    listed = rpc("tools/list", req_id=2, session_id=session_id).json()
    names = [t.get("name") for t in listed.get("result", {}).get("tools", [])]
    print(f"TOOLS: {names}")
    cases = [
        ("add", {"a": 2, "b": 3}),
        ("calculate", {"operation": "multiply", "a": 6, "b": 7}),
        ("calculate", {"operation": "divide", "a": 1, "b": 0}),
    ]
    for i, (name, args) in enumerate(cases, start=3):
        res = rpc("tools/call", {"name": name, "arguments": args}, req_id=i, session_id=session_id).json()
        content = res.get("result", {}).get("content") or [{}]
        print(f"{name}({args}) -> {content[0].get('text', res.get('error'))}")


if __name__ == "__main__":
    try:
        probe_health()
        probe_tools()
    except requests.exceptions.ConnectionError:
        print(f"Cannot connect to {BASE_URL}; start the server with `calculator-mcp` first")
        sys.exit(1)
