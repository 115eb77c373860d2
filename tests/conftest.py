"""
Shared pytest configuration and fixtures for the harness tests.

Live suites are opt-in:
    pytest --run-terraform      # terraform validate against the module
    pytest --run-integration    # provision real warehouses in Snowflake
"""

import sys
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from config_handler_scripts.config_loader import load_environment, load_snowflake_settings


SHOW_WAREHOUSES_COLUMNS = [
    'name', 'state', 'type', 'size', 'min_cluster_count', 'max_cluster_count',
    'started_clusters', 'running', 'queued', 'is_default', 'is_current',
    'auto_suspend', 'auto_resume', 'available', 'provisioning', 'quiescing',
    'other', 'created_on', 'resumed_on', 'updated_on', 'owner', 'comment',
    'enable_query_acceleration', 'query_acceleration_max_scale_factor',
    'resource_monitor', 'scaling_policy', 'owner_role_type',
]


def pytest_addoption(parser):
    parser.addoption(
        '--run-integration',
        action='store_true',
        default=False,
        help='run scenarios that provision real Snowflake warehouses'
    )
    parser.addoption(
        '--run-terraform',
        action='store_true',
        default=False,
        help='run terraform validate suites against the module'
    )


def pytest_collection_modifyitems(config, items):
    gates = {
        'integration': '--run-integration',
        'terraform': '--run-terraform',
    }
    for marker, option in gates.items():
        if config.getoption(option):
            continue
        skip = pytest.mark.skip(reason=f"needs {option}")
        for item in items:
            if marker in item.keywords:
                item.add_marker(skip)


class FakeCursor:
    """DB-API cursor double that replays queued (columns, rows) results or raises queued errors."""

    def __init__(self, results):
        self.results = results
        self.executed = []
        self.description = None
        self.sfqid = None
        self.closed = False
        self._rows = []

    def execute(self, sql, params=None):
        self.executed.append(sql)
        result = self.results.pop(0) if self.results else (['1'], [(1,)])
        if isinstance(result, Exception):
            raise result
        columns, rows = result
        self.description = [(column, 2, None, None, None, None, True) for column in columns]
        self._rows = list(rows)
        self.sfqid = f"01b2c3d4-0000-{len(self.executed):04d}"
        return self

    def fetchone(self):
        return self._rows.pop(0) if self._rows else None

    def close(self):
        self.closed = True


class FakeConnection:
    """Connection double whose cursors share one result queue."""

    def __init__(self, *results):
        self.results = list(results)
        self.cursors = []
        self.closed = False

    def cursor(self):
        cursor = FakeCursor(self.results)
        self.cursors.append(cursor)
        return cursor

    def close(self):
        self.closed = True

    @property
    def executed(self):
        return [sql for cursor in self.cursors for sql in cursor.executed]


def show_warehouses_row(columns=SHOW_WAREHOUSES_COLUMNS, **values):
    """Build one SHOW WAREHOUSES row in the given column order."""
    defaults = {
        'state': 'SUSPENDED',
        'type': 'STANDARD',
        'size': 'X-Small',
        'min_cluster_count': 1,
        'max_cluster_count': 1,
        'auto_suspend': 60,
        'auto_resume': 'true',
        'comment': None,
        'scaling_policy': 'STANDARD',
        'owner': 'SYSADMIN',
    }
    defaults.update(values)
    return tuple(defaults.get(column) for column in columns)


@pytest.fixture
def fake_connection():
    """Factory: fake_connection((columns, rows), ...) -> FakeConnection."""
    return FakeConnection


@pytest.fixture
def warehouse_row():
    return show_warehouses_row


@pytest.fixture
def show_columns():
    return list(SHOW_WAREHOUSES_COLUMNS)


@pytest.fixture(scope='session')
def repo_root():
    return project_root


@pytest.fixture(scope='session')
def module_dir(repo_root):
    return repo_root / 'modules' / 'snowflake-warehouse'


@pytest.fixture(scope='session')
def snowflake_settings():
    """Credentials for live scenarios; missing variables fail the test."""
    load_environment()
    return load_snowflake_settings()
