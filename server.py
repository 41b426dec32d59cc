import asyncio
import logging
import os
import sys
from typing import Optional

from core.registry import ToolRegistry
from core.server import CalculatorMCPServer
from handlers.calculator import register_calculator_tools

# Configure logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").strip().upper()
logging.basicConfig(level=LOG_LEVEL, stream=sys.stderr)
logger = logging.getLogger(__name__)

# Singleton server instance
_server_singleton: Optional[CalculatorMCPServer] = None


def _register_all_handlers(registry: ToolRegistry) -> ToolRegistry:
    """Register every built-in tool with the registry"""
    register_calculator_tools(registry)
    return registry


def build_server() -> CalculatorMCPServer:
    """Create a fresh server with all built-in tools registered."""
    return CalculatorMCPServer(_register_all_handlers(ToolRegistry()))


def get_server_singleton() -> CalculatorMCPServer:
    global _server_singleton
    if _server_singleton is None:
        _server_singleton = build_server()
        logger.info(
            "%s v%s ready with tools: %s",
            _server_singleton.name,
            _server_singleton.version,
            ", ".join(_server_singleton.registry.names()),
        )
    return _server_singleton


def main():
    """Main entry point: serve the HTTP front door with uvicorn"""
    try:
        from remote_server import serve

        asyncio.run(serve())
    except KeyboardInterrupt:
        logger.info("Shutting down")
    except Exception as e:
        logger.error(f"Server startup error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
