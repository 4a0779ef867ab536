"""DockGate background tasks."""

from dockgate.tasks.sweep import TaskSweeper

__all__ = ["TaskSweeper"]
