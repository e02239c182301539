from __future__ import annotations


class HermesError(Exception):
    """Raised when a chart cannot be constructed from its inputs."""
