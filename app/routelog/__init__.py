"""routelog: per-module, per-level routing for Python logging."""

__version__ = "0.1.0"
