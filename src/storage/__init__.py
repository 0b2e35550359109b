"""
SmartRoom Monitor - Storage Module

Persists room events, stats and settings; handles JSON export/import.
"""

from .database import Database, StorageListener
from .export import ExportBundle, build_export, dumps, loads

__all__ = ["Database", "StorageListener", "ExportBundle", "build_export", "dumps", "loads"]
