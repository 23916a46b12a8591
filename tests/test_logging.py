#!/usr/bin/env python3
"""
Test file-only logging
"""

import logging
import logging.handlers

from dbview_query.log_manager import LoggingManager, get_logger, get_logging_manager


class TestLoggingManager:
    """Test the logging manager singleton"""

    def test_singleton(self):
        """Test every access returns the same manager"""
        assert LoggingManager() is LoggingManager()
        assert get_logging_manager() is get_logging_manager()

    def test_log_dir_from_environment(self, log_dir):
        """Test logs go to DBVIEW_LOG_DIR with component subdirectories"""
        manager = get_logging_manager()
        assert manager.log_dir == log_dir
        assert (log_dir / 'compilers').is_dir()
        assert (log_dir / 'analyzer').is_dir()


class TestGetLogger:
    """Test logger creation"""

    def test_no_console_output(self):
        """Test loggers only have file handlers and do not propagate"""
        logger = get_logger('ConsoleCheck', component='compilers')
        assert logger.propagate is False
        assert logger.handlers
        assert all(isinstance(h, logging.handlers.RotatingFileHandler) for h in logger.handlers)

    def test_cached(self):
        """Test repeated lookups return the same logger"""
        assert get_logger('Cached', component='analyzer') is get_logger('Cached', component='analyzer')
        assert logging.getLogger('dbview-query.analyzer.Cached') is get_logger('Cached', component='analyzer')

    def test_component_file(self, log_dir):
        """Test component loggers write to their own file"""
        logger = get_logger('ComponentFile', component='analyzer')
        logger.info('analyzer message')
        content = (log_dir / 'analyzer' / 'componentfile.log').read_text(encoding='utf-8')
        assert 'analyzer message' in content
        assert 'dbview-query.analyzer.ComponentFile - INFO' in content

    def test_main_file(self, log_dir):
        """Test loggers without a component write at the top level"""
        get_logger('TopLevel').warning('top level message')
        assert 'top level message' in (log_dir / 'toplevel.log').read_text(encoding='utf-8')

    def test_errors_also_in_error_log(self, log_dir):
        """Test errors are copied to error.log"""
        get_logger('ErrorSource', component='compilers').error('something broke')
        assert 'something broke' in (log_dir / 'error.log').read_text(encoding='utf-8')
