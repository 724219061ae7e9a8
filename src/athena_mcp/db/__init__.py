"""Database operations routed through the Athena gateway."""

from .client import AthenaDatabase

__all__ = ["AthenaDatabase"]
