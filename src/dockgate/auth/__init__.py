"""DockGate authentication module."""

from dockgate.auth.token import extract_token, verify_token

__all__ = ["extract_token", "verify_token"]
