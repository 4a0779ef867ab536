"""External service integrations."""

from dockgate.integrations.docker_engine import EngineClient, is_not_found

__all__ = ["EngineClient", "is_not_found"]
