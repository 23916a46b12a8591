#!/usr/bin/env python3
"""
Centralized Logging Manager for the dbview query layer

The query layer runs inside an editor process, so diagnostics go to rotating
files only. Compiler backends log under compilers/, the SQL analyzer under
analyzer/, and every ERROR record is also copied to error.log.

Environment:
    DBVIEW_LOG_DIR: Log directory (default ~/.dbview/logs/query)
    DBVIEW_QUERY_DEBUG: 1/true/yes for DEBUG level and file:line in records
"""

import os
import logging
import logging.handlers
from pathlib import Path
from typing import Dict, Optional

LOGGER_PREFIX = 'dbview-query'

ROTATE_BYTES = 5 * 1024 * 1024
ROTATE_BACKUPS = 3

_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'
_RECORD_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
_DEBUG_RECORD_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(module)s:%(lineno)d - %(message)s'
_ERROR_RECORD_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(pathname)s:%(lineno)d\n%(message)s\n'


def _debug_enabled() -> bool:
    return os.environ.get('DBVIEW_QUERY_DEBUG', '').strip().lower() in ('1', 'true', 'yes')


def _rotating_handler(path: Path, record_format: str, level: int = logging.NOTSET) -> logging.Handler:
    # delay=True: no file is created until something is logged
    handler = logging.handlers.RotatingFileHandler(
        path,
        maxBytes=ROTATE_BYTES,
        backupCount=ROTATE_BACKUPS,
        encoding='utf-8',
        delay=True
    )
    handler.setFormatter(logging.Formatter(record_format, datefmt=_DATE_FORMAT))
    handler.setLevel(level)
    return handler


class LoggingManager:
    """
    Hands out file-backed loggers for query layer components.

    One instance per process. Loggers are cached by (component, name) and
    never propagate to the root logger.
    """

    _instance = None
    _initialized = False

    COMPONENT_DIRS = ('compilers', 'analyzer')

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self.log_dir = Path(os.environ.get('DBVIEW_LOG_DIR', Path.home() / '.dbview' / 'logs' / 'query'))
        self.debug_mode = _debug_enabled()
        self.loggers: Dict[str, logging.Logger] = {}

        for directory in (self.log_dir, *(self.log_dir / c for c in self.COMPONENT_DIRS)):
            directory.mkdir(parents=True, exist_ok=True)

        self._initialized = True

    def log_file_for(self, name: str, component: Optional[str] = None) -> Path:
        """Path of the log file a logger writes to; unknown components log at the top level."""
        filename = f"{name.lower()}.log"
        if component in self.COMPONENT_DIRS:
            return self.log_dir / component / filename
        return self.log_dir / filename

    def get_logger(self, name: str, component: Optional[str] = None) -> logging.Logger:
        """
        Get or create a logger.

        Args:
            name: Logger name, usually the class name (e.g. 'CassandraFilterBackend')
            component: 'compilers', 'analyzer', or None for the top-level directory

        Returns:
            Logger named dbview-query.<component>.<name>
        """
        key = f"{component}.{name}" if component else name
        cached = self.loggers.get(key)
        if cached is not None:
            return cached

        logger = logging.getLogger(f"{LOGGER_PREFIX}.{key}")
        logger.setLevel(logging.DEBUG if self.debug_mode else logging.INFO)
        logger.propagate = False
        for handler in list(logger.handlers):
            logger.removeHandler(handler)

        record_format = _DEBUG_RECORD_FORMAT if self.debug_mode else _RECORD_FORMAT
        logger.addHandler(_rotating_handler(self.log_file_for(name, component), record_format))
        logger.addHandler(_rotating_handler(self.log_dir / 'error.log', _ERROR_RECORD_FORMAT, logging.ERROR))

        self.loggers[key] = logger
        return logger


_logging_manager: Optional[LoggingManager] = None


def get_logging_manager() -> LoggingManager:
    """Process-wide LoggingManager."""
    global _logging_manager
    if _logging_manager is None:
        _logging_manager = LoggingManager()
    return _logging_manager


def get_logger(name: str, component: Optional[str] = None) -> logging.Logger:
    """Shortcut for get_logging_manager().get_logger(name, component)."""
    return get_logging_manager().get_logger(name, component)
