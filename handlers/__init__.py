"""Tool handlers exposed by the server."""
