"""DockGate - queued, concurrency-bounded control plane for a Docker engine."""

__version__ = "0.1.0"
