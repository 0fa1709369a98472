"""
Task plugin base components
"""

from .base import Task, TaskFactory, TaskOutput

__all__ = ["Task", "TaskFactory", "TaskOutput"]
