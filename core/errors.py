from __future__ import annotations


class InvalidParameter(ValueError):
    """Raised when simulation parameters break the caller contract."""


class SimulationTimeout(TimeoutError):
    """Raised when a simulation run exceeds its time budget."""
