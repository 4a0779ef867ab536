"""Middleware components for DockGate API."""

from dockgate.middleware.access_log import access_log_middleware

__all__ = ["access_log_middleware"]
