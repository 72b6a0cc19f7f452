"""Shared helpers: escaping, workspace context and debug logging."""
