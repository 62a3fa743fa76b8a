"""
Todo document to calendar synchronisation
"""

from .parser import parse_tasks_from_text
from .reconciler import reconcile
from .runner import SyncRunner

__all__ = [
    "parse_tasks_from_text",
    "reconcile",
    "SyncRunner",
]
