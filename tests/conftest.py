"""
Shared pytest configuration and fixtures for all tests.
"""

import sys
from pathlib import Path

import pytest

# Add project root to sys.path to enable importing project modules
# This allows tests to import from 'core', 'sql' and 'utils' without installation
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))


def pytest_configure(config):
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: Unit tests - isolated function-level tests")
    config.addinivalue_line("markers", "integration: Integration tests - component interactions")
    config.addinivalue_line("markers", "smoke: Smoke tests - basic functionality checks")
    config.addinivalue_line("markers", "edge_case: Edge case tests - boundary conditions")


# Column-major batch: one list per column
USERS_COLUMNS = ['name', 'gender', 'age']
USERS_DATA = [
    ['john', 'marie', 'isac', 'lisa', 'peter', 'sophie', 'michael', 'emily', 'alex', 'olivia',
     'david', 'emma', 'kevin', 'claire', 'jason', 'amy', 'brian', 'jessica', 'eric', 'sara'],
    [False, True, False, True, False, True, False, True, False, True,
     False, True, False, True, False, True, False, True, False, True],
    [31, 27, 45, 22, 35, 28, 40, 24, 33, 30, 28, 26, 39, 29, 36, 25, 32, 34, 27, 38],
]
USERS_STRUCTURE = [
    'id BIGINT UNSIGNED NOT NULL AUTO_INCREMENT PRIMARY KEY',
    'name VARCHAR(255)',
    'gender TINYINT(1)',
    'age TINYINT(255)',
]


@pytest.fixture
def users_data():
    """Provide the sample users batch (fresh copy per test)."""
    return [list(column) for column in USERS_DATA]


@pytest.fixture
def users_columns():
    """Provide the columns matching users_data."""
    return list(USERS_COLUMNS)


@pytest.fixture
def users_structure():
    """Provide the users table definition fragments."""
    return list(USERS_STRUCTURE)
