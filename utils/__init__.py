"""Shared helpers: HTTP session and console logging."""
