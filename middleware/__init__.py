"""HTTP response decorators."""
