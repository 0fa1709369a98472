"""
Run context and internal storage used by tasks
"""

from .context import RunContext
from .storage import STORAGE_SCHEME, LocalStorage

__all__ = ["RunContext", "LocalStorage", "STORAGE_SCHEME"]
