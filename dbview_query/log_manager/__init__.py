"""
Logging package for the dbview query layer.

Provides centralized file-only logging so the host editor's console is never
written to. Logs go to ~/.dbview/logs/query/ unless DBVIEW_LOG_DIR is set.
"""

from .manager import LoggingManager, get_logger, get_logging_manager

__all__ = ['LoggingManager', 'get_logger', 'get_logging_manager']
