"""
Capability configuration, selection and health checks.

Import the selector and health modules directly; this package only exposes
the configuration snapshot so adapters can depend on it without cycles.
"""

from .config import CapabilityConfig

__all__ = ["CapabilityConfig"]
