"""
Shared pytest fixtures for dbview query layer tests.
Provides common test infrastructure for all test suites.
"""

import os
import sys
import tempfile
from pathlib import Path

import pytest

# Log files go to a throwaway directory; must be set before the package
# creates its logging manager
_LOG_DIR = tempfile.mkdtemp(prefix='dbview_query_logs_')
os.environ.setdefault('DBVIEW_LOG_DIR', _LOG_DIR)

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

# Mock logger for tests to avoid file system issues
import logging
logging.basicConfig(level=logging.CRITICAL)

from dbview_query.filters import FilterCondition


@pytest.fixture
def log_dir():
    """Directory the logging manager writes to during tests."""
    return Path(os.environ['DBVIEW_LOG_DIR'])


@pytest.fixture
def make_filter():
    """Factory for FilterCondition rows with sequential ids."""
    counter = {'next': 1}

    def _make(column_name, operator, value=None, value2=None):
        condition = FilterCondition(
            id=str(counter['next']),
            column_name=column_name,
            operator=operator,
            value=value,
            value2=value2,
        )
        counter['next'] += 1
        return condition

    return _make


@pytest.fixture
def sample_filters(make_filter):
    """Two typical filter rows: a numeric comparison and a text match."""
    return [
        make_filter('age', 'greater_than', 18),
        make_filter('name', 'contains', 'john'),
    ]
