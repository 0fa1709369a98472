"""
CLI commands module for WeaveSync
"""

from . import rows

__all__ = ["rows"]
