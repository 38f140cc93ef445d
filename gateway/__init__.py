"""Adapter gateway: named upstream backends behind caching and retries."""

__version__ = "1.0.0"
