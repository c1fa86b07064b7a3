"""Construction schedule sequencing, critical path and warning engine."""

__version__ = "0.1.0"
