import os
import sys
import pathlib

import pytest

# Ensure project root is importable in tests
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture
def mcp():
    """A fresh server with the built-in tools, isolated from the process singleton."""
    import server
    return server.build_server()
